"""Ref-counted set of in-flight compiler targets, used only for display."""

from __future__ import annotations


class ActiveTargets:
    """Multiset of crate names currently being compiled."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def add(self, name: str) -> None:
        self._counts[name] = self._counts.get(name, 0) + 1

    def remove(self, name: str) -> None:
        """Decrement *name*; unknown names are ignored."""
        count = self._counts.get(name)
        if count is None:
            return
        if count <= 1:
            del self._counts[name]
        else:
            self._counts[name] = count - 1

    def count(self, name: str) -> int:
        return self._counts.get(name, 0)

    def names(self) -> list[str]:
        """Sorted, deduplicated target names."""
        return sorted(self._counts)

    def snapshot(self) -> list[tuple[str, int]]:
        """Sorted ``(name, count)`` pairs."""
        return sorted(self._counts.items())

    def display_names(self) -> list[str]:
        """Sorted names, with a ``(×N)`` suffix on targets compiling more than once.

        >>> targets = ActiveTargets()
        >>> for name in ("serde", "serde", "anyhow"):
        ...     targets.add(name)
        >>> targets.display_names()
        ['anyhow', 'serde (×2)']
        """
        return [name if count == 1 else f"{name} (×{count})" for name, count in self.snapshot()]

    def __len__(self) -> int:
        return len(self._counts)
