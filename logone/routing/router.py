"""Router — dispatches decoded events to the registries, aggregator and presentation.

Each event is handled to completion before the next line is read.  The
dispatch key is ``(family, action, sub_type)``; a ``stop`` is resolved
against the stats aggregator's active set first and the builder registry
second.  Anything unrecognized lands in a no-op catch-all.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from logone.config import LogoneConfig
from logone.core import policy
from logone.core.attributor import FailureAttributor
from logone.core.decoder import decode_line
from logone.core.stats_aggregator import StatsAggregator
from logone.core.targets import ActiveTargets
from logone.core.unit_registry import UnitRegistry
from logone.errors import MalformedEventError, UnknownStreamError
from logone.models.config import VerbosityMode
from logone.models.events import (
    ACT_BUILD,
    ACT_BUILDS,
    CARGO_EXIT,
    CARGO_START,
    RES_BUILD_LOG_LINE,
    RES_PROGRESS,
    RES_SET_PHASE,
    Event,
    EventKind,
    Family,
)
from logone.models.units import LogLine, LogLineKind, UnitState
from logone.routing.dispatcher import PresentationDispatcher, SinkDispatchError

logger = logging.getLogger(__name__)

Handler = Callable[[Event], None]

# Compiler diagnostic level -> producer-style message level.
_DIAGNOSTIC_LEVELS: dict[str, int] = {
    "error": 0,
    "error: internal compiler error": 0,
    "warning": 1,
    "failure-note": 2,
    "note": 2,
    "help": 2,
}


class RouterContext:
    """All per-run state, owned by exactly one router."""

    def __init__(self, mode: VerbosityMode, attributor: FailureAttributor) -> None:
        self.mode = mode
        self.attributor = attributor
        self.builder_units = UnitRegistry(Family.BUILDER)
        self.compiler_units = UnitRegistry(Family.COMPILER)
        self.stats = StatsAggregator()
        self.targets = ActiveTargets()


class Router:
    """Routes events from both producer families.

    Parameters
    ----------
    presenter:
        Dispatcher that receives ``show_progress``, ``show_transcript``
        and ``show_message`` requests.
    config:
        Session configuration.  Defaults to ``LogoneConfig()``.
    mode:
        Overrides ``config.level`` when given.
    """

    def __init__(
        self,
        presenter: PresentationDispatcher,
        config: LogoneConfig | None = None,
        *,
        mode: VerbosityMode | None = None,
    ) -> None:
        self.config = config or LogoneConfig()
        self.presenter = presenter
        attributor = FailureAttributor(
            self.config.unit_name_pattern,
            error_level=self.config.error_level,
            failure_keywords=self.config.failure_keywords,
        )
        self.context = RouterContext(mode or self.config.level, attributor)
        self._closed = False

        self._handlers: dict[tuple[Family, str, int | None], Handler] = {
            (Family.BUILDER, "start", ACT_BUILDS): self._on_stats_start,
            (Family.BUILDER, "result", RES_PROGRESS): self._on_stats_update,
            (Family.BUILDER, "start", ACT_BUILD): self._on_unit_log_start,
            (Family.BUILDER, "result", RES_BUILD_LOG_LINE): self._on_unit_log_line,
            (Family.BUILDER, "result", RES_SET_PHASE): self._on_unit_log_phase,
            (Family.BUILDER, "stop", None): self._on_stop,
            (Family.BUILDER, "msg", None): self._on_message,
            (Family.COMPILER, "start", CARGO_START): self._on_compile_start,
            (Family.COMPILER, "start", None): self._on_compile_start,
            (Family.COMPILER, "exit", CARGO_EXIT): self._on_compile_exit,
            (Family.COMPILER, "exit", None): self._on_compile_exit,
        }

    @property
    def mode(self) -> VerbosityMode:
        return self.context.mode

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def route_line(self, line: str) -> Event | None:
        """Decode and route one input line.

        Malformed events are logged at DEBUG and dropped.
        """
        try:
            event = decode_line(line)
        except MalformedEventError as exc:
            logger.debug("Dropping malformed event: %s", exc)
            return None
        if event is not None:
            self.route(event)
        return event

    def route(self, event: Event) -> None:
        key = (event.family, event.action, event.sub_type)
        handler = self._handlers.get(key) or self._handlers.get(
            (event.family, event.action, None), self._on_unrecognized
        )
        handler(event)

    def shutdown(self) -> None:
        """End the session.

        Verbose mode flushes every still-open unit; the other modes drop
        whatever is left unread.  Safe to call more than once.
        """
        if self._closed:
            return
        self._closed = True
        units = self.context.builder_units
        flush = policy.flush_on_shutdown(self.mode)
        for unit_id in units.outstanding_ids():
            if flush:
                self._flush_and_show(units, unit_id)
            else:
                units.discard(unit_id)
        self._present("close")

    # ------------------------------------------------------------------
    # Stats stream
    # ------------------------------------------------------------------

    def _on_stats_start(self, event: Event) -> None:
        if event.id is None:
            logger.debug("Stats start without id dropped")
            return
        self.context.stats.register(event.id)

    def _on_stats_update(self, event: Event) -> None:
        if event.id is None:
            logger.debug("Stats update without id dropped")
            return
        counters = event.fields
        if len(counters) != 4 or not all(
            isinstance(v, int) and not isinstance(v, bool) for v in counters
        ):
            logger.debug("Stats update for %d has malformed fields: %r", event.id, counters)
            return
        try:
            self.context.stats.update(event.id, *counters)
        except UnknownStreamError as exc:
            logger.debug("Rejected stats update: %s", exc)
            return
        self._render_progress()

    def _on_stats_stop(self, event: Event) -> None:
        self.context.stats.unregister(event.id)
        self._render_progress()

    def _on_stop(self, event: Event) -> None:
        if event.id is None:
            logger.debug("Stop without id dropped")
            return
        if self.context.stats.is_registered(event.id):
            self._on_stats_stop(event.model_copy(update={"kind": EventKind.STATS_STOP}))
        elif self.context.builder_units.has_buffer(event.id):
            self._on_unit_log_stop(event.model_copy(update={"kind": EventKind.UNIT_LOG_STOP}))
        else:
            logger.debug("Stop for unknown id %d dropped", event.id)

    # ------------------------------------------------------------------
    # Builder unit logs
    # ------------------------------------------------------------------

    def _on_unit_log_start(self, event: Event) -> None:
        if not policy.buffers_builder_units(self.mode):
            return
        if event.id is None:
            logger.debug("Unit log start without id dropped")
            return
        self.context.builder_units.start(event.id, event.text)

    def _on_unit_log_line(self, event: Event) -> None:
        if event.id is None:
            return
        first = event.first_field
        text = first if isinstance(first, str) else ""
        self.context.builder_units.append(event.id, LogLine(kind=LogLineKind.OUTPUT, text=text))

    def _on_unit_log_phase(self, event: Event) -> None:
        if event.id is None:
            return
        first = event.first_field
        phase = first if isinstance(first, str) else "unknown"
        self.context.builder_units.append(
            event.id, LogLine(kind=LogLineKind.PHASE, text=f"Phase: {phase}")
        )

    def _on_unit_log_stop(self, event: Event) -> None:
        units = self.context.builder_units
        unit_id = event.id
        units.stop(unit_id)
        if self.context.attributor.stop_indicates_failure(event):
            units.mark_failed(unit_id)

        if policy.flush_on_stop(self.mode, units.is_failed(unit_id)):
            self._flush_and_show(units, unit_id)
        elif not policy.retains_stopped_units(self.mode):
            units.discard(unit_id)

    def _on_message(self, event: Event) -> None:
        text = event.msg
        level = event.level
        attributor = self.context.attributor
        is_failure = attributor.is_failure_message(text, level)

        names_unit = attributor.extract_token(text) is not None
        if (is_failure or names_unit) and policy.attributes_failures(self.mode):
            units = self.context.builder_units
            unit_id = attributor.attribute(text, units)
            # A unit that already stopped has no later flush point.
            if unit_id is not None and units.state(unit_id) == UnitState.STOPPED:
                self._flush_and_show(units, unit_id)

        if policy.show_message(self.mode, level, is_failure):
            self._present("show_message", level, text, event.file)

    # ------------------------------------------------------------------
    # Compiler family
    # ------------------------------------------------------------------

    def _on_compile_start(self, event: Event) -> None:
        crate = event.crate_name
        if event.id is not None:
            self.context.compiler_units.start(event.id, crate)
        if crate:
            self.context.targets.add(crate)
        self._render_progress()

    def _on_compile_exit(self, event: Event) -> None:
        units = self.context.compiler_units
        crate = event.crate_name
        if not crate and event.id is not None:
            crate = units.lookup_name_by_id(event.id) or ""
        if crate:
            self.context.targets.remove(crate)

        exit_code = event.exit_code
        if event.id is not None:
            units.finish(event.id, exit_code)

        for rendered, diagnostic_level in event.rendered_messages:
            text = rendered.rstrip("\n")
            if event.id is not None:
                units.append(event.id, LogLine(kind=LogLineKind.OTHER, text=text))
            if policy.shows_compiler_diagnostics(self.mode):
                self._present(
                    "show_message", _message_level(diagnostic_level, exit_code), text, None
                )

        if event.id is not None:
            # Diagnostics were shown as they arrived; the buffer is released.
            units.flush(event.id)
        self._render_progress()

    # ------------------------------------------------------------------
    # Catch-all
    # ------------------------------------------------------------------

    def _on_unrecognized(self, event: Event) -> None:
        logger.debug(
            "Unhandled event: family=%s action=%s type=%s",
            event.family.value,
            event.action,
            event.sub_type,
        )

    # ------------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------------

    def _render_progress(self) -> None:
        targets = self.context.targets
        pairs = targets.snapshot()
        stats = self.context.stats
        if not stats.needs_render(pairs):
            return
        snapshot = stats.snapshot
        stats.mark_rendered(pairs)
        self._present(
            "show_progress",
            snapshot.done,
            snapshot.expected,
            snapshot.running,
            targets.display_names(),
            snapshot.failed,
        )

    def _flush_and_show(self, units: UnitRegistry, unit_id: int) -> None:
        transcript = units.flush(unit_id)
        if transcript is None:
            return
        self._present("show_transcript", transcript.unit_name, transcript.lines)

    def _present(self, method: str, *args: Any) -> None:
        try:
            getattr(self.presenter, method)(*args)
        except SinkDispatchError as exc:
            logger.error("Presentation failed: %s", exc)


def _message_level(diagnostic_level: str | None, exit_code: int | None) -> int:
    if diagnostic_level is not None:
        return _DIAGNOSTIC_LEVELS.get(diagnostic_level, 3)
    return 0 if exit_code == 1 else 1
