"""Error taxonomy for stable module boundaries."""


class NPlusOneControlError(Exception):
    """Base exception for nplusone-control."""


class ConfigError(NPlusOneControlError):
    """Raised when configuration or scale factors are invalid."""


class EventSourceError(NPlusOneControlError):
    """Raised when a query event source cannot be built or subscribed."""
