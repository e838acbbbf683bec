"""Forward elimination of a committed digit from peer candidate tracks."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .cell_state import CellState
from .delta import Delta, elim
from .topology import peers_of


def propagate(
    cells: Sequence[CellState],
    position: int,
    digit: int,
    *,
    auto_mode: bool,
) -> Tuple[Delta, ...]:
    """Remove ``digit`` from the candidate track of every peer of ``position``.

    The track is chosen by ``auto_mode`` (the global flag at commit time),
    not by each peer's own mode.  Cells showing a digit are skipped.  Only
    candidates that were actually present produce an ``ELIM`` delta, so a
    repeated commit yields an empty tuple.
    """

    deltas: List[Delta] = []
    for peer in sorted(peers_of(position)):
        if cells[peer].eliminate(digit, auto_mode):
            deltas.append(elim(peer, digit))
    return tuple(deltas)


__all__ = ["propagate"]
