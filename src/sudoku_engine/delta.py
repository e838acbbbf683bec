"""Delta records describing what a pipeline run changed on the board.

Every mutation of the grid is reported as a small ``(op, cell, digit)``
record.  ``PLACE`` and ``REMOVE`` are the digit-commit and digit-removal
notifications consumed by propagation and conflict detection; ``ELIM`` is a
single candidate removed from a peer by propagation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Tuple

from .topology import CELL_COUNT


class DeltaValidationError(ValueError):
    """Raised when a delta payload does not describe a valid board change."""


class DeltaOp(str, Enum):
    """Supported delta kinds."""

    REMOVE = "REMOVE"
    PLACE = "PLACE"
    ELIM = "ELIM"

    @classmethod
    def from_value(cls, value: str) -> "DeltaOp":
        try:
            return cls(value)
        except ValueError as exc:
            raise DeltaValidationError(f"Unsupported delta op: {value!r}") from exc


_OP_ORDER = {DeltaOp.REMOVE: 0, DeltaOp.PLACE: 1, DeltaOp.ELIM: 2}


@dataclass(frozen=True, slots=True)
class Delta:
    """Canonical representation of a single board notification."""

    op: DeltaOp
    cell: int
    digit: int

    def __post_init__(self) -> None:
        if not isinstance(self.op, DeltaOp):
            object.__setattr__(self, "op", DeltaOp.from_value(str(self.op)))
        if not 0 <= int(self.cell) < CELL_COUNT:
            raise DeltaValidationError(f"cell must be in [0, 80], got {self.cell!r}")
        if not 1 <= int(self.digit) <= 9:
            raise DeltaValidationError(f"digit must be in [1, 9], got {self.digit!r}")

    def sort_key(self) -> Tuple[int, int, int]:
        """Return canonical sorting key (op → cell → digit)."""

        return (_OP_ORDER[self.op], int(self.cell), int(self.digit))

    def to_payload(self) -> dict:
        return {"op": self.op.value, "cell": int(self.cell), "digit": int(self.digit)}


def place(cell: int, digit: int) -> Delta:
    return Delta(DeltaOp.PLACE, cell, digit)


def remove(cell: int, digit: int) -> Delta:
    return Delta(DeltaOp.REMOVE, cell, digit)


def elim(cell: int, digit: int) -> Delta:
    return Delta(DeltaOp.ELIM, cell, digit)


def from_payload(payload: Mapping[str, object]) -> Delta:
    try:
        return Delta(DeltaOp.from_value(str(payload["op"])), int(payload["cell"]), int(payload["digit"]))  # type: ignore[arg-type]
    except KeyError as exc:
        raise DeltaValidationError("delta mapping is missing required keys") from exc


def canonicalise_deltas(deltas: Iterable[Delta]) -> Tuple[Delta, ...]:
    """Return deltas sorted according to the canonical order."""

    return tuple(sorted(deltas, key=Delta.sort_key))


__all__ = [
    "Delta",
    "DeltaOp",
    "DeltaValidationError",
    "canonicalise_deltas",
    "elim",
    "from_payload",
    "place",
    "remove",
]
