"""Presentation sink protocol for logone.

All sinks implement the ``PresentationSink`` protocol: a ``sink_name``
property and the three push calls the router makes.  Sinks are never
queried for state; the dispatcher calls every registered sink for every
request.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from logone.models.units import LogLine


@runtime_checkable
class PresentationSink(Protocol):
    """Protocol that every logone presentation sink must implement.

    Attributes
    ----------
    sink_name : str
        A unique human-readable identifier for this sink instance
        (e.g. ``"terminal"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the unique name of this sink."""
        ...

    def show_progress(
        self,
        done: int,
        expected: int,
        running: int,
        active_targets: Sequence[str],
        failed: int = 0,
    ) -> None:
        """Render the aggregate progress line."""
        ...

    def show_transcript(self, unit_name: str, lines: Sequence[LogLine]) -> None:
        """Render a flushed unit transcript."""
        ...

    def show_message(self, level: int, text: str, file: str | None = None) -> None:
        """Render a single diagnostic message."""
        ...

    def close(self) -> None:
        """Release terminal resources at end of session."""
        ...
