from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import pytest

from puzzles.sudoku_9x9.backtracking import StrategySolverFactory
from sudoku_engine.controller import PuzzleController
from sudoku_engine.session import SessionContext
from sudoku_engine.settings import Settings

SOLUTION_TEXT = (
    "123456789"
    "456789123"
    "789123456"
    "214365897"
    "365897214"
    "897214365"
    "531642978"
    "642978531"
    "978531642"
)
SOLUTION: Tuple[int, ...] = tuple(int(ch) for ch in SOLUTION_TEXT)

# 30 clues; cell 4 holds a 5 and cell 0 is open.
CLUE_POSITIONS = frozenset(
    {1, 2, 4, 7, 9, 13, 17, 20, 22, 24, 27, 31, 35, 36, 38, 40, 42, 45, 49, 53, 56, 58, 60, 63, 67, 71, 73, 76, 78, 79}
)
CLUES: Tuple[int, ...] = tuple(d if i in CLUE_POSITIONS else 0 for i, d in enumerate(SOLUTION))


@dataclass(frozen=True)
class StubPuzzle:
    clues: Tuple[int, ...]
    known_solution: Optional[Tuple[int, ...]]

    def solution(self) -> Optional[Tuple[int, ...]]:
        return self.known_solution


class StubGenerator:
    """Returns the fixed puzzle; the first ``failures`` attempts have no solution."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls = 0

    def generate(self) -> StubPuzzle:
        self.calls += 1
        if self.calls <= self.failures:
            return StubPuzzle(CLUES, None)
        return StubPuzzle(CLUES, SOLUTION)


@pytest.fixture
def solution() -> Tuple[int, ...]:
    return SOLUTION


@pytest.fixture
def clues() -> Tuple[int, ...]:
    return CLUES


@pytest.fixture
def make_controller() -> Callable[..., PuzzleController]:
    def factory(**settings: bool) -> PuzzleController:
        resolved = Settings(**settings)
        controller = PuzzleController(
            StubGenerator(),
            StrategySolverFactory(),
            SessionContext(settings=resolved),
            trace_level="full",
        )
        controller.new_game()
        return controller

    return factory


@pytest.fixture
def controller(make_controller) -> PuzzleController:
    return make_controller()
