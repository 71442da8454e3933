"""Typed events decoded from the builder (``@nix``) and compiler (``@cargo``) streams.

Each input line yields at most one ``Event``.  The wire format reuses
action names across families, so an event is classified by the
``(family, action, sub_type)`` triple rather than by ``action`` alone.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

# Builder activity types (carried on "start" events).
ACT_BUILDS = 104  # aggregate stats stream
ACT_BUILD = 105  # one derivation build, i.e. one unit log

# Builder result types (carried on "result" events).
RES_BUILD_LOG_LINE = 101
RES_SET_PHASE = 104
RES_PROGRESS = 105

# Compiler event types.
CARGO_START = 0
CARGO_EXIT = 2


class Family(str, Enum):
    """The producer an event came from, identified by its line prefix."""

    BUILDER = "nix"
    COMPILER = "cargo"

    @property
    def prefix(self) -> str:
        return f"@{self.value} "


class EventKind(str, Enum):
    """Semantic classification of a decoded event."""

    UNIT_LOG_START = "unit_log_start"
    UNIT_LOG_LINE = "unit_log_line"
    UNIT_LOG_PHASE = "unit_log_phase"
    UNIT_LOG_STOP = "unit_log_stop"
    MESSAGE = "message"
    STATS_START = "stats_start"
    STATS_UPDATE = "stats_update"
    STATS_STOP = "stats_stop"
    COMPILE_START = "compile_start"
    COMPILE_EXIT = "compile_exit"
    # A builder "stop" before the router has decided whether it ends a
    # stats stream or a unit log.
    STOP = "stop"
    UNRECOGNIZED = "unrecognized"


class Event(BaseModel):
    """One decoded input line.

    ``payload`` keeps the whole decoded object so producer-specific keys
    stay reachable; the properties below are typed views onto it.
    """

    model_config = ConfigDict(frozen=True)

    family: Family
    kind: EventKind
    action: str
    sub_type: int | None = None
    id: int | None = None
    fields: list[Any] = []
    payload: dict[str, Any] = {}

    @property
    def first_field(self) -> Any:
        return self.fields[0] if self.fields else None

    @property
    def text(self) -> str:
        value = self.payload.get("text")
        return value if isinstance(value, str) else ""

    @property
    def msg(self) -> str:
        value = self.payload.get("msg")
        return value if isinstance(value, str) else ""

    @property
    def level(self) -> int:
        """Producer severity; 0 is an error.  Missing levels read as 0."""
        value = self.payload.get("level")
        return value if _is_uint(value) else 0

    @property
    def file(self) -> str | None:
        value = self.payload.get("file")
        return value if isinstance(value, str) and value else None

    @property
    def crate_name(self) -> str:
        value = self.payload.get("crate_name")
        return value if isinstance(value, str) else ""

    @property
    def exit_code(self) -> int | None:
        for key in ("exit_code", "rustc_exit_code"):
            value = self.payload.get(key)
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        return None

    @property
    def rendered_messages(self) -> list[tuple[str, str | None]]:
        """Rendered compiler diagnostics as ``(text, level)`` pairs.

        Accepts both a flat ``rendered_messages`` list of strings and the
        compiler's own ``rustc_messages`` list of diagnostic objects.
        """
        result: list[tuple[str, str | None]] = []
        flat = self.payload.get("rendered_messages")
        if isinstance(flat, list):
            result.extend((item, None) for item in flat if isinstance(item, str))
        nested = self.payload.get("rustc_messages")
        if isinstance(nested, list):
            for item in nested:
                if not isinstance(item, dict):
                    continue
                rendered = item.get("rendered")
                if isinstance(rendered, str):
                    level = item.get("level")
                    result.append((rendered, level if isinstance(level, str) else None))
        return result


def _is_uint(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0
