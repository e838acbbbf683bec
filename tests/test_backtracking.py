from __future__ import annotations

import random

import pytest

from puzzles.sudoku_9x9 import backtracking
from puzzles.sudoku_9x9.backtracking import (
    BacktrackingGenerator,
    StrategySolver,
    count_solutions,
    from_string,
    generate_full_solution,
    port_create_generator,
    reduce_to_target,
    symmetric_pairs,
    to_string,
)

from conftest import CLUES, SOLUTION, SOLUTION_TEXT


def _is_valid_solution(cells) -> bool:
    return len(cells) == 81 and StrategySolver(list(cells)).is_solved()


def test_full_solution_is_valid_and_seeded() -> None:
    first = generate_full_solution(random.Random(7))
    second = generate_full_solution(random.Random(7))
    assert _is_valid_solution(first)
    assert first == second


def test_pattern_fallback_is_valid() -> None:
    grid = generate_full_solution(random.Random(3), time_limit=-1.0)
    assert _is_valid_solution(grid)


def test_count_solutions_distinguishes_unique_and_ambiguous() -> None:
    assert count_solutions(SOLUTION) == 1
    assert count_solutions([0] * 81, limit=2) == 2
    broken = list(SOLUTION)
    broken[1] = broken[0]
    assert count_solutions(broken) == 0


def test_symmetric_pairs_cover_every_cell_once() -> None:
    pairs = symmetric_pairs("central")
    covered = [i for pair in pairs for i in pair]
    assert sorted(covered) == list(range(81))
    assert (40,) in pairs
    assert all(len(p) == 1 or p[0] + p[1] == 80 for p in pairs)


def test_reduce_keeps_unique_solution() -> None:
    puzzle = reduce_to_target(SOLUTION, random.Random(1), target_clues=36, time_budget=5.0)
    clue_count = sum(1 for d in puzzle if d)
    assert clue_count >= 36
    assert count_solutions(puzzle) == 1
    assert all(d == 0 or d == s for d, s in zip(puzzle, SOLUTION))
    assert all(bool(puzzle[i]) == bool(puzzle[80 - i]) for i in range(81))


def test_generator_produces_puzzle_with_solution() -> None:
    generator = BacktrackingGenerator(seed=11, target_clues=40)
    puzzle = generator.generate()
    solution = puzzle.solution()
    assert solution is not None
    assert _is_valid_solution(solution)
    assert all(d == 0 or d == s for d, s in zip(puzzle.clues, solution))


def test_generator_validates_options() -> None:
    with pytest.raises(ValueError):
        BacktrackingGenerator(symmetry="diagonal")
    with pytest.raises(ValueError):
        BacktrackingGenerator(target_clues=10)


def test_port_generator_reads_config_and_options() -> None:
    generator = port_create_generator(seed=1, options={"target_clues": 45})
    assert generator.target_clues == 45
    assert generator.symmetry == "central"
    assert generator.time_limit == 1.5


def test_strategy_solver_grid_state_eliminates_peer_digits() -> None:
    state = backtracking.port_solver_factory().solver_from_grid(
        [d if d else frozenset(range(1, 10)) for d in CLUES]
    ).grid_state()
    assert state[4] == 5
    assert state[0] == frozenset({1, 7})


def test_strategy_solver_is_solved() -> None:
    assert StrategySolver(list(SOLUTION)).is_solved()
    partial = list(SOLUTION)
    partial[0] = frozenset({1})
    assert not StrategySolver(partial).is_solved()
    swapped = list(SOLUTION)
    swapped[0], swapped[1] = swapped[1], swapped[0]
    assert not StrategySolver(swapped).is_solved()


def test_string_helpers() -> None:
    assert to_string(from_string(SOLUTION_TEXT)) == SOLUTION_TEXT
    assert from_string("." * 81) == [0] * 81
