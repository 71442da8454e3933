"""Aggregate build statistics."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StatsSnapshot(BaseModel):
    """Absolute counters reported by the builder's stats stream.

    Each update replaces the previous snapshot; the producer reports
    cumulative totals itself.
    """

    model_config = ConfigDict(frozen=True)

    done: int = 0
    expected: int = 0
    running: int = 0
    failed: int = 0

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.done, self.expected, self.running, self.failed)
