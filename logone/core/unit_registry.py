"""Unit registry — per-family lifecycle of build units and their buffers.

Enforces:
- A unit's buffer is moved out at most once per lifecycle (``flush``)
- Appends to unknown or already-flushed ids are silent no-ops
- ``stop`` never flushes; flushing is a separate, policy-gated step
- Recycled ids replace the stale unit and its name mappings
"""

from __future__ import annotations

import logging

from logone.models.events import Family
from logone.models.units import (
    EXIT_CODE_STATES,
    BuildUnit,
    LogLine,
    Transcript,
    UnitState,
)

logger = logging.getLogger(__name__)


class UnitRegistry:
    """Owns the build units of one producer family.

    Parameters
    ----------
    family:
        The producer whose ids this registry tracks.  Ids are only unique
        within one producer's namespace, so each family gets its own
        registry.
    """

    def __init__(self, family: Family = Family.BUILDER) -> None:
        self.family = family
        # Insertion order doubles as start order for shutdown flushing.
        self._units: dict[int, BuildUnit] = {}
        self._name_to_id: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, unit_id: int, name: str) -> BuildUnit:
        """Begin a unit with an empty buffer, replacing any stale one."""
        if unit_id in self._units:
            logger.debug("%s unit id %d reused; dropping stale unit", self.family.value, unit_id)
            self._forget(unit_id)

        unit = BuildUnit(id=unit_id, name=name, family=self.family)
        self._units[unit_id] = unit
        self._name_to_id[name] = unit_id
        return unit

    def append(self, unit_id: int, line: LogLine) -> bool:
        """Append *line* to the unit's buffer.

        Returns False (and does nothing) when no buffer exists for the id.
        """
        unit = self._units.get(unit_id)
        if unit is None:
            return False
        unit.buffer.append(line)
        return True

    def stop(self, unit_id: int) -> bool:
        """Mark the unit stopped.  The buffer is left in place."""
        unit = self._units.get(unit_id)
        if unit is None:
            return False
        unit.state = UnitState.STOPPED
        return True

    def finish(self, unit_id: int, exit_code: int | None) -> UnitState | None:
        """Record a compiler exit code.

        0 finishes with success, 1 with error (and marks the unit failed);
        any other code, including a missing one, only stops the unit.
        """
        unit = self._units.get(unit_id)
        if unit is None:
            return None
        state = EXIT_CODE_STATES.get(exit_code, UnitState.STOPPED)
        unit.state = state
        if state == UnitState.FINISHED_WITH_ERROR:
            unit.failed = True
        return state

    def mark_failed(self, unit_id: int) -> bool:
        unit = self._units.get(unit_id)
        if unit is None:
            return False
        unit.failed = True
        return True

    def flush(self, unit_id: int) -> Transcript | None:
        """Move the unit's buffer out of the registry.

        The unit and its name mappings are forgotten, so a second call for
        the same id returns None.
        """
        unit = self._units.get(unit_id)
        if unit is None:
            return None
        self._forget(unit_id)
        return Transcript(
            unit_id=unit_id,
            unit_name=unit.name,
            lines=unit.buffer,
            failed=unit.failed,
        )

    def discard(self, unit_id: int) -> bool:
        """Drop the unit's buffer unread."""
        if unit_id not in self._units:
            return False
        self._forget(unit_id)
        return True

    def _forget(self, unit_id: int) -> None:
        self._units.pop(unit_id, None)
        stale = [name for name, uid in self._name_to_id.items() if uid == unit_id]
        for name in stale:
            del self._name_to_id[name]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, unit_id: int) -> BuildUnit | None:
        return self._units.get(unit_id)

    def has_buffer(self, unit_id: int) -> bool:
        return unit_id in self._units

    def state(self, unit_id: int) -> UnitState | None:
        unit = self._units.get(unit_id)
        return unit.state if unit else None

    def is_failed(self, unit_id: int) -> bool:
        unit = self._units.get(unit_id)
        return bool(unit and unit.failed)

    def lookup_id_by_name(self, name: str) -> int | None:
        return self._name_to_id.get(name)

    def lookup_name_by_id(self, unit_id: int) -> str | None:
        # Linear scan; unit counts are small and short-lived.
        for name, uid in self._name_to_id.items():
            if uid == unit_id:
                return name
        return None

    def names(self) -> dict[str, int]:
        """Return a copy of the name -> id index."""
        return dict(self._name_to_id)

    def outstanding_ids(self) -> list[int]:
        """Ids still holding a buffer, in start order."""
        return list(self._units)
