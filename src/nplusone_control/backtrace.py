"""Call-site capture for verbose reports.

A backtrace cleaner receives the ``traceback.FrameSummary`` list captured
when a query was emitted (outermost first) and returns the frames worth
printing. ``drop_library_frames`` is a ready-made cleaner that hides this
package and SQLAlchemy so the caller's own code is what remains.
"""

from __future__ import annotations

import traceback
from collections.abc import Iterable
from pathlib import Path

import sqlalchemy

LIBRARY_ROOTS = (
    str(Path(__file__).resolve().parent),
    str(Path(sqlalchemy.__file__).resolve().parent),
)


def format_frame(frame: traceback.FrameSummary) -> str:
    return f"{frame.filename}:{frame.lineno}:in `{frame.name}`"


def drop_library_frames(frames: Iterable[traceback.FrameSummary]) -> list[traceback.FrameSummary]:
    return [
        frame
        for frame in frames
        if not str(Path(frame.filename).resolve()).startswith(LIBRARY_ROOTS)
    ]
