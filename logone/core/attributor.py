"""Failure attribution — tie free-text failure messages to a single unit.

Attribution is conservative: a message marks a unit failed only when it
resolves to exactly one registered unit.  Ambiguous or unmatched messages
are simply not attributed.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from logone.config import DEFAULT_FAILURE_KEYWORDS, DEFAULT_UNIT_NAME_PATTERN
from logone.core.unit_registry import UnitRegistry
from logone.models.events import Event

logger = logging.getLogger(__name__)

# Payload keys inspected on a unit's own stop event.
_STOP_CODE_KEYS = ("exit_code", "exitCode", "status", "result")
_STOP_TEXT_KEYS = ("result", "status", "msg", "text")


class FailureAttributor:
    """Classifies failure messages and resolves them to a unit.

    Parameters
    ----------
    unit_name_pattern:
        Regex with one capture group that extracts the unit-identifying
        token from text (by default the derivation name in a store path).
    error_level:
        Producer levels at or below this value count as errors.
    failure_keywords:
        Substrings that mark a message as a failure regardless of level.
    """

    def __init__(
        self,
        unit_name_pattern: str = DEFAULT_UNIT_NAME_PATTERN,
        *,
        error_level: int = 0,
        failure_keywords: Iterable[str] = DEFAULT_FAILURE_KEYWORDS,
    ) -> None:
        self._pattern = re.compile(unit_name_pattern)
        self._error_level = error_level
        self._keywords = tuple(failure_keywords)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def has_failure_keyword(self, text: str) -> bool:
        return any(keyword in text for keyword in self._keywords)

    def is_failure_message(self, text: str, level: int) -> bool:
        """Severity or keyword heuristic for error messages."""
        return level <= self._error_level or self.has_failure_keyword(text)

    def extract_token(self, text: str) -> str | None:
        """Return the first unit-identifying token in *text*, if any."""
        match = self._pattern.search(text)
        if match is None or not match.groups():
            return None
        return match.group(1)

    def stop_indicates_failure(self, event: Event) -> bool:
        """Inspect a unit's own stop payload for a failure signal."""
        payload = event.payload
        for key in _STOP_CODE_KEYS:
            value = payload.get(key)
            if isinstance(value, int) and not isinstance(value, bool) and value != 0:
                return True
        for key in _STOP_TEXT_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and self.has_failure_keyword(value):
                return True
        return False

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, text: str, registry: UnitRegistry) -> int | None:
        """Resolve *text* to exactly one registered unit id.

        With a token in the text, candidates are units whose name equals
        the token or whose name carries the same token.  Without one,
        candidates are units whose name (or token) appears verbatim in the
        text.  Zero or several candidates resolve to None.
        """
        token = self.extract_token(text)
        candidates: set[int] = set()
        if token is not None:
            exact = registry.lookup_id_by_name(token)
            if exact is not None:
                candidates.add(exact)

        for name, unit_id in registry.names().items():
            name_token = self.extract_token(name)
            if token is not None:
                if name == token or name_token == token:
                    candidates.add(unit_id)
            elif name and (name in text or (name_token is not None and name_token in text)):
                candidates.add(unit_id)

        if len(candidates) == 1:
            return candidates.pop()
        if candidates:
            logger.debug(
                "Ambiguous attribution for %r: %d candidate units", text, len(candidates)
            )
        else:
            logger.debug("Unresolved attribution for %r", text)
        return None

    def attribute(self, text: str, registry: UnitRegistry) -> int | None:
        """Mark the unit *text* resolves to as failed and return its id."""
        unit_id = self.resolve(text, registry)
        if unit_id is not None:
            registry.mark_failed(unit_id)
            logger.debug(
                "Attributed failure to unit %d (%s)",
                unit_id,
                registry.lookup_name_by_id(unit_id),
            )
        return unit_id
