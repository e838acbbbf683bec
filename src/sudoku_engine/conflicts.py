"""Symmetric conflict bookkeeping between peers holding the same digit."""

from __future__ import annotations

from typing import FrozenSet, List, Sequence, Set

from .cell_state import CellState
from .topology import CELL_COUNT, peers_of


class ConflictTracker:
    """Per-cell conflict sets kept symmetric across every update.

    Conflicts are derived from committed digits only.  ``on_place`` links a
    cell with every peer showing the same digit, ``on_remove`` unlinks it from
    everything.  Both are safe to call repeatedly.
    """

    def __init__(self) -> None:
        self._sets: List[Set[int]] = [set() for _ in range(CELL_COUNT)]

    def on_place(self, cells: Sequence[CellState], position: int, digit: int) -> FrozenSet[int]:
        """Record conflicts for ``digit`` newly committed at ``position``.

        Returns the peers now in conflict with ``position``.
        """

        found = set()
        for peer in peers_of(position):
            other = cells[peer]
            if other.is_digit and other.digit == digit:
                found.add(peer)
                self._sets[peer].add(position)
        self._sets[position].update(found)
        return frozenset(found)

    def on_remove(self, position: int) -> FrozenSet[int]:
        """Drop every conflict involving ``position``; returns the released peers."""

        released = frozenset(self._sets[position])
        for peer in released:
            self._sets[peer].discard(position)
        self._sets[position].clear()
        return released

    def conflicts(self, position: int) -> FrozenSet[int]:
        return frozenset(self._sets[position])

    def has_conflict(self, position: int) -> bool:
        return bool(self._sets[position])

    def conflicting_cells(self) -> List[int]:
        return [i for i, peers in enumerate(self._sets) if peers]

    def is_symmetric(self) -> bool:
        return all(i in self._sets[j] for i in range(CELL_COUNT) for j in self._sets[i])

    def clear(self) -> None:
        for peers in self._sets:
            peers.clear()


__all__ = ["ConflictTracker"]
