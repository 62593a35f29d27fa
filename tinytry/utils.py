"""
Utility functions for the tinytry library.
"""

from __future__ import annotations

import linecache
import os
import sys
from dataclasses import dataclass


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


# Environment variable to control debug tracing
DEBUG_TRY = _env_flag("TINYTRY_DEBUG")


def safe_repr(value: object) -> str:
    """``repr`` that never raises; failure values come from user code."""
    try:
        return repr(value)
    except Exception as repr_error:  # pragma: no cover - broken __repr__
        return f"<repr failed: {repr_error!r}>"


class LazyRepr:
    """Log argument that calls ``safe_repr`` only if the record is formatted."""

    __slots__ = ("value",)

    def __init__(self, value: object) -> None:
        self.value = value

    def __str__(self) -> str:
        return safe_repr(self.value)


@dataclass(frozen=True)
class CallSite:
    """Where a call was made from."""

    filename: str
    line: int
    function: str
    code: str | None = None

    def __str__(self) -> str:
        location = f"{self.filename}:{self.line} in {self.function}"
        if self.code:
            return f"{location} ({self.code})"
        return location


def capture_call_site(skip_frames: int = 2) -> CallSite | None:
    """
    Capture the frame that called into tinytry.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        CallSite for the requested frame, or ``None`` when frames are unavailable
    """
    try:
        frame = sys._getframe(skip_frames)
    except (AttributeError, ValueError):
        # No frame support, or the stack is shallower than requested
        return None

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None
    return CallSite(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
    )


__all__ = [
    "DEBUG_TRY",
    "CallSite",
    "LazyRepr",
    "capture_call_site",
    "safe_repr",
]
