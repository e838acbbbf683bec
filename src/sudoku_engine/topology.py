"""Grid topology for the classic 9×9 board.

Cells are addressed by a linear index in ``[0, 81)`` laid out row-major.  Row
and column are derived arithmetically, the block comes from a fixed lookup
table.  Peer sets are precomputed once at import time so that propagation and
conflict detection are plain indexed lookups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

SIZE = 9
CELL_COUNT = SIZE * SIZE
DIGITS: FrozenSet[int] = frozenset(range(1, SIZE + 1))

# fmt: off
BLOCK: Tuple[int, ...] = (
    0, 0, 0, 1, 1, 1, 2, 2, 2,
    0, 0, 0, 1, 1, 1, 2, 2, 2,
    0, 0, 0, 1, 1, 1, 2, 2, 2,
    3, 3, 3, 4, 4, 4, 5, 5, 5,
    3, 3, 3, 4, 4, 4, 5, 5, 5,
    3, 3, 3, 4, 4, 4, 5, 5, 5,
    6, 6, 6, 7, 7, 7, 8, 8, 8,
    6, 6, 6, 7, 7, 7, 8, 8, 8,
    6, 6, 6, 7, 7, 7, 8, 8, 8,
)
# fmt: on


class PositionError(ValueError):
    """Raised when a cell index falls outside ``[0, 81)``."""


def row_of(index: int) -> int:
    return index // SIZE


def col_of(index: int) -> int:
    return index % SIZE


def block_of(index: int) -> int:
    return BLOCK[index]


def is_valid_index(index: int) -> bool:
    return isinstance(index, int) and 0 <= index < CELL_COUNT


def _build_peers() -> Tuple[FrozenSet[int], ...]:
    peers = []
    for i in range(CELL_COUNT):
        peers.append(
            frozenset(
                j
                for j in range(CELL_COUNT)
                if j != i
                and (row_of(i) == row_of(j) or col_of(i) == col_of(j) or BLOCK[i] == BLOCK[j])
            )
        )
    return tuple(peers)


PEERS: Tuple[FrozenSet[int], ...] = _build_peers()


def peers_of(index: int) -> FrozenSet[int]:
    """Return the 20 cells sharing a row, column or block with ``index``."""

    return PEERS[index]


def are_peers(a: int, b: int) -> bool:
    return b in PEERS[a]


@dataclass(frozen=True, order=True)
class CellPosition:
    """Immutable cell address with derived row/column/block."""

    index: int

    def __post_init__(self) -> None:
        if not is_valid_index(self.index):
            raise PositionError(f"cell must be in [0, {CELL_COUNT - 1}], got {self.index!r}")

    @classmethod
    def from_row_col(cls, row: int, col: int) -> "CellPosition":
        if not (0 <= row < SIZE and 0 <= col < SIZE):
            raise PositionError(f"row/col out of range: ({row}, {col})")
        return cls(row * SIZE + col)

    @classmethod
    def from_block(cls, block: int, inner: int) -> "CellPosition":
        """Build a position from a block index and the offset inside it.

        Both values are in ``[0, 9)`` and count left-to-right, top-to-bottom.
        """

        if not (0 <= block < SIZE and 0 <= inner < SIZE):
            raise PositionError(f"block/inner out of range: ({block}, {inner})")
        row = (block // 3) * 3 + inner // 3
        col = (block % 3) * 3 + inner % 3
        return cls.from_row_col(row, col)

    @property
    def row(self) -> int:
        return row_of(self.index)

    @property
    def col(self) -> int:
        return col_of(self.index)

    @property
    def block(self) -> int:
        return BLOCK[self.index]

    def peers(self) -> FrozenSet[int]:
        return PEERS[self.index]

    def __int__(self) -> int:
        return self.index

    def __str__(self) -> str:
        return f"({self.row}, {self.col})[{self.index}]"


__all__ = [
    "BLOCK",
    "CELL_COUNT",
    "CellPosition",
    "DIGITS",
    "PEERS",
    "PositionError",
    "SIZE",
    "are_peers",
    "block_of",
    "col_of",
    "is_valid_index",
    "peers_of",
    "row_of",
]
