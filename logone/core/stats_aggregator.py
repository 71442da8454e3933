"""Stats aggregator — the single absolute progress snapshot.

Only ids registered by a stats-stream start may update the snapshot.
Unregistering keeps the last values so the final counts stay on screen
after the reporting stream ends.
"""

from __future__ import annotations

from collections.abc import Iterable

from logone.errors import UnknownStreamError
from logone.models.stats import StatsSnapshot


class StatsAggregator:
    """Owns the (done, expected, running, failed) snapshot and active stream ids."""

    def __init__(self) -> None:
        self._active: set[int] = set()
        self._snapshot = StatsSnapshot()
        self._last_rendered: tuple[StatsSnapshot, tuple[tuple[str, int], ...]] | None = None

    @property
    def snapshot(self) -> StatsSnapshot:
        return self._snapshot

    @property
    def active_stream_ids(self) -> frozenset[int]:
        return frozenset(self._active)

    def register(self, stream_id: int) -> None:
        self._active.add(stream_id)

    def unregister(self, stream_id: int) -> None:
        self._active.discard(stream_id)

    def is_registered(self, stream_id: int) -> bool:
        return stream_id in self._active

    def update(
        self,
        stream_id: int,
        done: int,
        expected: int,
        running: int,
        failed: int,
    ) -> StatsSnapshot:
        """Overwrite the snapshot with values reported by *stream_id*.

        Raises
        ------
        UnknownStreamError
            If *stream_id* was never registered (or has been unregistered).
        """
        if stream_id not in self._active:
            raise UnknownStreamError(stream_id)
        self._snapshot = StatsSnapshot(
            done=done, expected=expected, running=running, failed=failed
        )
        return self._snapshot

    # ------------------------------------------------------------------
    # Redraw suppression
    # ------------------------------------------------------------------

    @staticmethod
    def _render_key(
        snapshot: StatsSnapshot, targets: Iterable[tuple[str, int]]
    ) -> tuple[StatsSnapshot, tuple[tuple[str, int], ...]]:
        return snapshot, tuple(sorted(set(targets)))

    def needs_render(self, targets: Iterable[tuple[str, int]] = ()) -> bool:
        """Whether the snapshot or the ``(name, count)`` targets differ from the last render."""
        return self._render_key(self._snapshot, targets) != self._last_rendered

    def mark_rendered(self, targets: Iterable[tuple[str, int]] = ()) -> None:
        self._last_rendered = self._render_key(self._snapshot, targets)
