"""Event decoder — turns one raw input line into a typed ``Event``.

Lines without a recognized producer prefix are inert and decode to
``None``.  Prefixed lines must carry a JSON object with a string
``action``; anything else raises ``MalformedEventError``.  Decoding never
touches shared state.
"""

from __future__ import annotations

import json
import re
from typing import Any

from logone.errors import MalformedEventError
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

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

# (family, action, sub_type) -> kind.  A None sub_type matches any type.
CLASSIFICATION: dict[tuple[Family, str, int | None], EventKind] = {
    (Family.BUILDER, "start", ACT_BUILDS): EventKind.STATS_START,
    (Family.BUILDER, "result", RES_PROGRESS): EventKind.STATS_UPDATE,
    (Family.BUILDER, "start", ACT_BUILD): EventKind.UNIT_LOG_START,
    (Family.BUILDER, "result", RES_BUILD_LOG_LINE): EventKind.UNIT_LOG_LINE,
    (Family.BUILDER, "result", RES_SET_PHASE): EventKind.UNIT_LOG_PHASE,
    (Family.BUILDER, "stop", None): EventKind.STOP,
    (Family.BUILDER, "msg", None): EventKind.MESSAGE,
    (Family.COMPILER, "start", CARGO_START): EventKind.COMPILE_START,
    (Family.COMPILER, "start", None): EventKind.COMPILE_START,
    (Family.COMPILER, "exit", CARGO_EXIT): EventKind.COMPILE_EXIT,
    (Family.COMPILER, "exit", None): EventKind.COMPILE_EXIT,
}


def strip_ansi(text: str) -> str:
    """Remove terminal color (SGR) escape sequences from *text*."""
    return ANSI_ESCAPE_RE.sub("", text)


def split_prefix(line: str) -> tuple[Family, str] | None:
    """Return ``(family, remainder)`` for a prefixed line, else ``None``."""
    for family in Family:
        if line.startswith(family.prefix):
            return family, line[len(family.prefix):]
    return None


def classify(family: Family, action: str, sub_type: int | None) -> EventKind:
    """Look up the event kind for a ``(family, action, sub_type)`` triple."""
    kind = CLASSIFICATION.get((family, action, sub_type))
    if kind is None:
        kind = CLASSIFICATION.get((family, action, None), EventKind.UNRECOGNIZED)
    return kind


def decode_line(line: str) -> Event | None:
    """Decode one input line.

    Returns ``None`` for lines without a producer prefix.

    Raises
    ------
    MalformedEventError
        If a prefixed line is not a JSON object with a string ``action``.
    """
    line = line.rstrip("\r\n")
    split = split_prefix(line)
    if split is None:
        return None
    family, remainder = split
    event = _decode_object(family, strip_ansi(remainder))

    if event.kind == EventKind.UNIT_LOG_LINE:
        nested = _unwrap_nested(event)
        if nested is not None:
            return nested
    return event


def _decode_object(family: Family, raw: str) -> Event:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedEventError(f"Invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedEventError(
            f"Event must be a JSON object, got {type(data).__name__}"
        )

    action = data.get("action")
    if not isinstance(action, str) or not action:
        raise MalformedEventError("Missing or invalid 'action' field")

    sub_type = _uint_or_none(data.get("type"))
    fields = data.get("fields")

    return Event(
        family=family,
        kind=classify(family, action, sub_type),
        action=action,
        sub_type=sub_type,
        id=_uint_or_none(data.get("id")),
        fields=fields if isinstance(fields, list) else [],
        payload=data,
    )


def _unwrap_nested(outer: Event) -> Event | None:
    """Re-decode a builder log line that carries a captured compiler line.

    The nested event always carries the outer id: the compiler process is
    identified by the builder activity capturing its output.  A nested
    line that fails to decode leaves the outer event untouched.
    """
    first = outer.first_field
    if not isinstance(first, str) or not first.startswith(Family.COMPILER.prefix):
        return None
    try:
        nested = decode_line(first)
    except MalformedEventError:
        return None
    if nested is None:
        return None
    return nested.model_copy(update={"id": outer.id})


def _uint_or_none(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None
