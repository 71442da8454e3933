"""Rich renderables for the progress line, transcripts and messages.

All styling lives in one table keyed by ``(EventKind, sub_type)``; call
sites never pick colors themselves.

Color scheme
------------
- dim     : build log output lines
- cyan    : phase markers
- red     : error messages (level 0)
- yellow  : warnings (level 1)
- blue    : notices (level 2)
- green   : info (level 3)
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Group
from rich.text import Text

from logone.models.events import (
    RES_BUILD_LOG_LINE,
    RES_PROGRESS,
    RES_SET_PHASE,
    EventKind,
)
from logone.models.units import LogLine, LogLineKind
from logone.routing.sinks._formatting import (
    format_message,
    format_progress_base,
    format_transcript_header,
    targets_for_width,
)

# ---------------------------------------------------------------------------
# (kind, sub_type) -> Rich style
# ---------------------------------------------------------------------------

_STYLES: dict[tuple[EventKind, int | None], str] = {
    (EventKind.UNIT_LOG_LINE, RES_BUILD_LOG_LINE): "dim",
    (EventKind.UNIT_LOG_PHASE, RES_SET_PHASE): "cyan",
    (EventKind.COMPILE_EXIT, None): "",
    (EventKind.MESSAGE, 0): "red",
    (EventKind.MESSAGE, 1): "yellow",
    (EventKind.MESSAGE, 2): "blue",
    (EventKind.MESSAGE, 3): "green",
    (EventKind.MESSAGE, None): "dim",
    (EventKind.STATS_UPDATE, RES_PROGRESS): "bold",
}

# Which table entry a buffered line is styled with.
_LINE_KEYS: dict[LogLineKind, tuple[EventKind, int | None]] = {
    LogLineKind.OUTPUT: (EventKind.UNIT_LOG_LINE, RES_BUILD_LOG_LINE),
    LogLineKind.PHASE: (EventKind.UNIT_LOG_PHASE, RES_SET_PHASE),
    LogLineKind.OTHER: (EventKind.COMPILE_EXIT, None),
}

# Counter styles on the progress line: done, expected, running, failed.
_PROGRESS_COUNTER_STYLES: tuple[str, str, str, str] = ("green", "green", "yellow", "red")


def style_for(kind: EventKind, sub_type: int | None = None) -> str:
    """Return the style for ``(kind, sub_type)``, falling back to ``(kind, None)``."""
    style = _STYLES.get((kind, sub_type))
    if style is None:
        style = _STYLES.get((kind, None), "")
    return style


class MonitorRenderer:
    """Turns presentation requests into Rich ``Text`` renderables.

    Parameters
    ----------
    colored:
        When False every renderable is produced without styles.
    """

    def __init__(self, colored: bool = True) -> None:
        self.colored = colored

    def _style(self, kind: EventKind, sub_type: int | None = None) -> str:
        return style_for(kind, sub_type) if self.colored else ""

    # ------------------------------------------------------------------
    # Progress line
    # ------------------------------------------------------------------

    def render_progress(
        self,
        done: int,
        expected: int,
        running: int,
        failed: int,
        targets: Sequence[str],
        width: int = 80,
    ) -> Text:
        """Render ``[ D Done | E Expected | R Running | F Failed ] targets``.

        Targets are cropped so the whole line fits in *width* columns.
        """
        base = format_progress_base(done, expected, running, failed)
        counters = (done, expected, running, failed)
        labels = ("Done", "Expected", "Running", "Failed")

        text = Text("[ ", no_wrap=True, overflow="crop")
        for index, (value, label) in enumerate(zip(counters, labels)):
            if index:
                text.append(" | ")
            style = _PROGRESS_COUNTER_STYLES[index] if self.colored else ""
            text.append(str(value), style=style)
            text.append(f" {label}")
        text.append(" ]")

        shown = targets_for_width(base, targets, width)
        if shown:
            text.append(" ")
            text.append(shown, style=self._style(EventKind.STATS_UPDATE, RES_PROGRESS))
        return text

    # ------------------------------------------------------------------
    # Transcripts and messages
    # ------------------------------------------------------------------

    def render_line(self, line: LogLine) -> Text:
        kind, sub_type = _LINE_KEYS.get(line.kind, (EventKind.COMPILE_EXIT, None))
        return Text(f"  {line.text}", style=self._style(kind, sub_type))

    def render_transcript(self, unit_name: str, lines: Sequence[LogLine]) -> Group:
        """Header, indented lines, and a trailing blank line."""
        parts: list[Text] = [Text(format_transcript_header(unit_name))]
        parts.extend(self.render_line(line) for line in lines)
        parts.append(Text(""))
        return Group(*parts)

    def render_message(self, level: int, text: str, file: str | None = None) -> Text:
        return Text(format_message(text, file), style=self._style(EventKind.MESSAGE, level))
