"""PresentationDispatcher — fans presentation requests out to every sink.

Presentation is fire-and-forget from the router's point of view: a
failing sink is logged and skipped, and nothing a sink does flows back
into routing state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from logone.models.units import LogLine

if TYPE_CHECKING:
    from logone.routing.sinks import PresentationSink

logger = logging.getLogger(__name__)


class SinkDispatchError(RuntimeError):
    """Raised when every registered sink fails for one request."""


class PresentationDispatcher:
    """Routes presentation requests to ALL registered sinks.

    A failure in one sink does not block the others.

    Usage
    -----
    >>> dispatcher = PresentationDispatcher()
    >>> dispatcher.register_sink(terminal_sink)
    >>> dispatcher.show_message(1, "warning: something odd")
    """

    def __init__(self, sinks: Sequence[PresentationSink] = ()) -> None:
        self._sinks: list[PresentationSink] = []
        for sink in sinks:
            self.register_sink(sink)

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def register_sink(self, sink: PresentationSink) -> None:
        """Register a sink.  Duplicate registration is silently ignored."""
        if sink not in self._sinks:
            self._sinks.append(sink)
            logger.debug("Registered sink: %s", sink.sink_name)

    def unregister_sink(self, sink: PresentationSink) -> None:
        try:
            self._sinks.remove(sink)
            logger.debug("Unregistered sink: %s", sink.sink_name)
        except ValueError:
            pass

    @property
    def registered_sinks(self) -> list[PresentationSink]:
        """Return a copy of the registered sink list."""
        return list(self._sinks)

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def _fan_out(self, method: str, *args: Any) -> list[str]:
        """Call *method* on every sink; return the names that succeeded.

        Raises
        ------
        SinkDispatchError
            If *all* sinks fail.  Individual failures are tolerated.
        """
        if not self._sinks:
            return []

        succeeded: list[str] = []
        errors: list[tuple[str, Exception]] = []

        for sink in self._sinks:
            try:
                getattr(sink, method)(*args)
                succeeded.append(sink.sink_name)
            except Exception as exc:  # noqa: BLE001
                logger.error("Sink %s failed in %s: %s", sink.sink_name, method, exc)
                errors.append((sink.sink_name, exc))

        if errors and not succeeded:
            raise SinkDispatchError(
                f"All {len(errors)} sinks failed in {method}: "
                + "; ".join(f"{name}: {exc}" for name, exc in errors)
            )

        return succeeded

    def show_progress(
        self,
        done: int,
        expected: int,
        running: int,
        active_targets: Sequence[str],
        failed: int = 0,
    ) -> list[str]:
        return self._fan_out(
            "show_progress", done, expected, running, list(active_targets), failed
        )

    def show_transcript(self, unit_name: str, lines: Sequence[LogLine]) -> list[str]:
        return self._fan_out("show_transcript", unit_name, list(lines))

    def show_message(self, level: int, text: str, file: str | None = None) -> list[str]:
        return self._fan_out("show_message", level, text, file)

    def close(self) -> list[str]:
        return self._fan_out("close")
