"""Exception taxonomy for logone.

Nothing raised here is fatal during steady-state processing: the router
catches ``MalformedEventError`` and ``UnknownStreamError``, logs them at
DEBUG and moves on to the next line.  Only ``ConfigurationError`` stops
the process, and only at startup.
"""

from __future__ import annotations


class LogoneError(Exception):
    """Base class for every logone-specific error."""


class MalformedEventError(LogoneError, ValueError):
    """Raised when a prefixed line is not a usable event object.

    Covers invalid JSON, a top-level value that is not an object, and a
    missing or non-string ``action`` discriminant.
    """


class UnknownStreamError(LogoneError, KeyError):
    """Raised when a stats update arrives for an id that was never registered."""

    def __init__(self, stream_id: int) -> None:
        super().__init__(stream_id)
        self.stream_id = stream_id

    def __str__(self) -> str:
        return f"Unknown stats stream id: {self.stream_id}"


class ConfigurationError(LogoneError):
    """Raised for startup configuration problems (e.g. JSON mode not enabled)."""
