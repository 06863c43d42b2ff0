"""
Process-wide defaults for nplusone-control.
Loads NPLUSONE_* environment variables (and an optional .env file).
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IGNORE = r"^(BEGIN|COMMIT|SAVEPOINT|RELEASE)"
DEFAULT_EVENT = "before_cursor_execute"


class NPlusOneSettings(BaseSettings):
    """Defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NPLUSONE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Smallest possible but representative scale factors
    scale_factors: List[int] = [2, 3]

    # Reporting
    verbose: bool = False  # Dump every captured query on failure (NPLUSONE_VERBOSE=1)
    show_table_stats: bool = True  # Print per-table count differences
    loose_table_matching: bool = False  # Also classify unquoted table names

    # Capture
    ignore: str = DEFAULT_IGNORE  # Transaction-control statements are not counted
    event: str = DEFAULT_EVENT  # SQLAlchemy engine event or bus channel name
    warmup: bool = False  # Run the operation once unrecorded before measuring

    # Comparison
    tolerance: int = 0  # Extra queries allowed between runs


def load_settings() -> NPlusOneSettings:
    """Read a fresh settings instance from the current environment."""
    return NPlusOneSettings()
