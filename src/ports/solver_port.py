"""Facade for solver implementations."""

from __future__ import annotations

from typing import FrozenSet, List, Protocol, Sequence, Tuple, Union

CellValue = Union[int, FrozenSet[int]]

ALL_CANDIDATES: FrozenSet[int] = frozenset(range(1, 10))


class Solver(Protocol):
    def is_solved(self) -> bool:
        """``True`` when every cell holds a digit and no unit repeats one."""

    def grid_state(self) -> Tuple[CellValue, ...]:
        """Per-cell digit or set of digits still logically possible."""


class SolverFactory(Protocol):
    def solver_from_grid(self, cells: Sequence[CellValue]) -> Solver: ...


def puzzle_grid(clues: Sequence[int]) -> List[CellValue]:
    """Translate clue digits into solver input (``0`` → every candidate)."""

    if len(clues) != 81:
        raise ValueError(f"expected 81 clues, got {len(clues)}")
    return [int(d) if d else ALL_CANDIDATES for d in clues]


def seed_grid_state(factory: SolverFactory, clues: Sequence[int]) -> Tuple[CellValue, ...]:
    """Grid state used to seed a fresh board from its clues."""

    state = tuple(factory.solver_from_grid(puzzle_grid(clues)).grid_state())
    if len(state) != 81:
        raise ValueError(f"solver returned {len(state)} cells, expected 81")
    return state


__all__ = [
    "ALL_CANDIDATES",
    "CellValue",
    "Solver",
    "SolverFactory",
    "puzzle_grid",
    "seed_grid_state",
]
