"""Terminal sink — the progress line, transcripts and messages on a Rich console.

On an interactive terminal the progress line lives in a ``Rich.Live``
region; transcripts and messages printed through the same console appear
above it, so the two never interleave mid-line.  On a non-interactive
console every progress change is printed as its own line.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rich.console import Console
from rich.live import Live

from logone.models.units import LogLine
from logone.monitor.renderer import MonitorRenderer

logger = logging.getLogger(__name__)


class TerminalSink:
    """Writes presentation requests to a Rich ``Console``.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    renderer:
        Renderer used to build the Rich renderables.
    live:
        Use a live-updating progress region.  Defaults to whether the
        console is attached to a terminal.
    refresh_per_second:
        Refresh rate of the live region.
    """

    def __init__(
        self,
        console: Console | None = None,
        renderer: MonitorRenderer | None = None,
        *,
        live: bool | None = None,
        refresh_per_second: float = 8.0,
    ) -> None:
        self.console = console or Console()
        self.renderer = renderer or MonitorRenderer()
        self._use_live = self.console.is_terminal if live is None else live
        self._refresh_per_second = refresh_per_second
        self._live: Live | None = None

    @property
    def sink_name(self) -> str:
        return "terminal"

    def _ensure_live(self) -> Live:
        if self._live is None:
            self._live = Live(
                console=self.console,
                refresh_per_second=self._refresh_per_second,
                transient=False,
                auto_refresh=False,
            )
            self._live.start()
        return self._live

    # ------------------------------------------------------------------
    # PresentationSink
    # ------------------------------------------------------------------

    def show_progress(
        self,
        done: int,
        expected: int,
        running: int,
        active_targets: Sequence[str],
        failed: int = 0,
    ) -> None:
        line = self.renderer.render_progress(
            done, expected, running, failed, active_targets, width=self.console.width
        )
        if self._use_live:
            self._ensure_live().update(line, refresh=True)
        else:
            self.console.print(line)

    def show_transcript(self, unit_name: str, lines: Sequence[LogLine]) -> None:
        self.console.print(self.renderer.render_transcript(unit_name, lines))

    def show_message(self, level: int, text: str, file: str | None = None) -> None:
        self.console.print(self.renderer.render_message(level, text, file))

    def close(self) -> None:
        """Stop the live region, leaving the last progress line on screen."""
        if self._live is not None:
            self._live.stop()
            self._live = None
            logger.debug("Terminal live region stopped")
