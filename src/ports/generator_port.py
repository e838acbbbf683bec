"""Facade for puzzle generator implementations."""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence, Tuple

_LOGGER = logging.getLogger(__name__)


class Puzzle(Protocol):
    """Generated puzzle: 81 clue digits, ``0`` for an empty cell."""

    @property
    def clues(self) -> Sequence[int]: ...

    def solution(self) -> Optional[Sequence[int]]:
        """The complete 81-digit answer, or ``None`` when it is not known."""


class PuzzleGenerator(Protocol):
    def generate(self) -> Puzzle:
        """Produce a random puzzle; a solution is not guaranteed."""


def generate_puzzle(generator: PuzzleGenerator) -> Tuple[Puzzle, Tuple[int, ...]]:
    """Ask ``generator`` for puzzles until one arrives with a solution.

    This is the only looping operation in the engine.  It blocks until the
    collaborator succeeds; in practice that takes a handful of attempts.
    """

    attempt = 0
    while True:
        attempt += 1
        puzzle = generator.generate()
        solution = puzzle.solution()
        if solution is not None:
            if len(solution) != 81 or len(puzzle.clues) != 81:
                raise ValueError("generator must produce 81 clues and an 81-digit solution")
            _LOGGER.debug("puzzle generated after %d attempt(s)", attempt)
            return puzzle, tuple(int(d) for d in solution)
        _LOGGER.info("generated puzzle has no solution; retrying (attempt %d)", attempt)


__all__ = ["Puzzle", "PuzzleGenerator", "generate_puzzle"]
