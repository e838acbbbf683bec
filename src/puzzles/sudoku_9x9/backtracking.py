"""Backtracking puzzle generator and peer-elimination solver.

Full solutions come from a randomized MRV search over bitmask candidates with
a time limit; if the search runs out of time a shuffled base pattern is used
instead.  Puzzles are carved out of the solution by removing centrally
symmetric cell pairs while the clue set still has exactly one solution.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence, Tuple, Union

from project_config import get_section
from sudoku_engine.topology import BLOCK, CELL_COUNT, DIGITS, PEERS, SIZE

_LOGGER = logging.getLogger(__name__)

CellValue = Union[int, FrozenSet[int]]

FULL = (1 << SIZE) - 1  # bits 0..8 stand for digits 1..9

DEFAULT_FULL_SOLUTION_TIME_LIMIT = 1.5
DEFAULT_REDUCE_TIME_BUDGET = 5.0
DEFAULT_TARGET_CLUES = 30
SYMMETRIES = ("central", "none")

_UNITS: Tuple[Tuple[int, ...], ...] = tuple(
    [tuple(r * SIZE + c for c in range(SIZE)) for r in range(SIZE)]
    + [tuple(r * SIZE + c for r in range(SIZE)) for c in range(SIZE)]
    + [tuple(i for i in range(CELL_COUNT) if BLOCK[i] == b) for b in range(SIZE)]
)


def _bits_to_list(bits: int) -> List[int]:
    return [d for d in range(1, SIZE + 1) if bits & (1 << (d - 1))]


def to_string(cells: Sequence[int]) -> str:
    return "".join(str(d or 0) for d in cells)


def from_string(text: str) -> List[int]:
    s = text.strip().replace("\n", "").replace(" ", "")
    if len(s) != CELL_COUNT:
        raise ValueError(f"expected {CELL_COUNT} characters, got {len(s)}")
    return [int(ch) if ch.isdigit() else 0 for ch in s]


# ---------- Full solution generator ----------


def _pattern_solution(rng: random.Random) -> List[int]:
    """Shuffle a valid base pattern: bands, stacks, rows, columns and digits."""

    def shuffled_groups() -> List[int]:
        groups = [0, 1, 2]
        rng.shuffle(groups)
        order: List[int] = []
        for g in groups:
            inner = [0, 1, 2]
            rng.shuffle(inner)
            order.extend(g * 3 + i for i in inner)
        return order

    rows = shuffled_groups()
    cols = shuffled_groups()
    digits = list(range(1, SIZE + 1))
    rng.shuffle(digits)

    def base(r: int, c: int) -> int:
        return (r * 3 + r // 3 + c) % SIZE

    return [digits[base(r, c)] for r in rows for c in cols]


def generate_full_solution(
    rng: random.Random,
    time_limit: float = DEFAULT_FULL_SOLUTION_TIME_LIMIT,
) -> List[int]:
    start = time.monotonic()
    grid = [0] * CELL_COUNT
    row_mask = [0] * SIZE
    col_mask = [0] * SIZE
    box_mask = [0] * SIZE

    def cand_mask(i: int) -> int:
        return FULL & ~(row_mask[i // SIZE] | col_mask[i % SIZE] | box_mask[BLOCK[i]])

    # MRV over a shuffled cell order so grids differ between seeds
    def select_cell() -> Optional[Tuple[int, int]]:
        best: Optional[Tuple[int, int]] = None
        best_count = SIZE + 1
        order = list(range(CELL_COUNT))
        rng.shuffle(order)
        for i in order:
            if grid[i]:
                continue
            m = cand_mask(i)
            k = bin(m).count("1")
            if k == 0:
                return (i, 0)
            if k < best_count:
                best, best_count = (i, m), k
                if k == 1:
                    return best
        return best

    def assign(i: int, d: int, on: bool) -> None:
        bit = 1 << (d - 1)
        if on:
            grid[i] = d
            row_mask[i // SIZE] |= bit
            col_mask[i % SIZE] |= bit
            box_mask[BLOCK[i]] |= bit
        else:
            grid[i] = 0
            row_mask[i // SIZE] &= ~bit
            col_mask[i % SIZE] &= ~bit
            box_mask[BLOCK[i]] &= ~bit

    def solve() -> bool:
        if time.monotonic() - start > time_limit:
            return False
        cell = select_cell()
        if cell is None:
            return True
        i, m = cell
        if m == 0:
            return False
        cand = _bits_to_list(m)
        rng.shuffle(cand)
        for d in cand:
            assign(i, d, True)
            if solve():
                return True
            assign(i, d, False)
        return False

    if solve():
        return grid

    _LOGGER.info("full solution search exceeded %.2fs; using shuffled pattern", time_limit)
    return _pattern_solution(rng)


# ---------- Uniqueness checker (count up to limit) ----------


def count_solutions(cells: Sequence[int], limit: int = 2) -> int:
    """Count solutions of ``cells`` (``0`` = empty), stopping at ``limit``."""

    rows = [0] * SIZE
    cols = [0] * SIZE
    boxes = [0] * SIZE
    empties: List[int] = []
    for i, d in enumerate(cells):
        if not d:
            empties.append(i)
            continue
        bit = 1 << (d - 1)
        r, c, b = i // SIZE, i % SIZE, BLOCK[i]
        if rows[r] & bit or cols[c] & bit or boxes[b] & bit:
            return 0
        rows[r] |= bit
        cols[c] |= bit
        boxes[b] |= bit

    solutions = 0

    def backtrack(remaining: List[int]) -> None:
        nonlocal solutions
        if solutions >= limit:
            return
        if not remaining:
            solutions += 1
            return
        # most constrained empty cell first
        best_pos, best_mask, best_count = 0, 0, SIZE + 1
        for pos, i in enumerate(remaining):
            m = FULL & ~(rows[i // SIZE] | cols[i % SIZE] | boxes[BLOCK[i]])
            k = bin(m).count("1")
            if k < best_count:
                best_pos, best_mask, best_count = pos, m, k
                if k <= 1:
                    break
        if best_count == 0:
            return
        i = remaining[best_pos]
        rest = remaining[:best_pos] + remaining[best_pos + 1 :]
        r, c, b = i // SIZE, i % SIZE, BLOCK[i]
        for d in _bits_to_list(best_mask):
            bit = 1 << (d - 1)
            rows[r] |= bit
            cols[c] |= bit
            boxes[b] |= bit
            backtrack(rest)
            rows[r] &= ~bit
            cols[c] &= ~bit
            boxes[b] &= ~bit
            if solutions >= limit:
                return

    backtrack(empties)
    return solutions


def has_unique_solution(cells: Sequence[int]) -> bool:
    return count_solutions(cells, limit=2) == 1


# ---------- Reduction ----------


def symmetric_pairs(symmetry: str = "central") -> List[Tuple[int, ...]]:
    if symmetry == "none":
        return [(i,) for i in range(CELL_COUNT)]
    pairs: List[Tuple[int, ...]] = []
    for i in range(CELL_COUNT):
        j = CELL_COUNT - 1 - i
        if i < j:
            pairs.append((i, j))
        elif i == j:
            pairs.append((i,))
    return pairs


def reduce_to_target(
    solution: Sequence[int],
    rng: random.Random,
    *,
    target_clues: int = DEFAULT_TARGET_CLUES,
    symmetry: str = "central",
    time_budget: float = DEFAULT_REDUCE_TIME_BUDGET,
) -> List[int]:
    """Remove clue groups while the puzzle stays uniquely solvable."""

    puzzle = list(solution)
    groups = symmetric_pairs(symmetry)
    rng.shuffle(groups)
    t0 = time.monotonic()

    for group in groups:
        clues = sum(1 for d in puzzle if d)
        if clues - len(group) < target_clues:
            continue
        if time.monotonic() - t0 > time_budget:
            _LOGGER.debug("reduction budget spent at %d clues", clues)
            break
        saved = [puzzle[i] for i in group]
        for i in group:
            puzzle[i] = 0
        if not has_unique_solution(puzzle):
            for i, d in zip(group, saved):
                puzzle[i] = d
    return puzzle


# ---------- Port surface ----------


@dataclass(frozen=True)
class BacktrackingPuzzle:
    clues: Tuple[int, ...]
    known_solution: Optional[Tuple[int, ...]] = None

    def solution(self) -> Optional[Tuple[int, ...]]:
        return self.known_solution

    def __str__(self) -> str:
        return to_string(self.clues)


class BacktrackingGenerator:
    """Generator honouring the ``[generator]`` configuration section."""

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        target_clues: int = DEFAULT_TARGET_CLUES,
        symmetry: str = "central",
        time_limit: float = DEFAULT_FULL_SOLUTION_TIME_LIMIT,
        reduce_budget: float = DEFAULT_REDUCE_TIME_BUDGET,
    ) -> None:
        if symmetry not in SYMMETRIES:
            raise ValueError(f"symmetry must be one of {SYMMETRIES}, got {symmetry!r}")
        if not 17 <= target_clues <= CELL_COUNT:
            raise ValueError(f"target_clues must be in [17, 81], got {target_clues}")
        self.rng = random.Random(seed)
        self.target_clues = target_clues
        self.symmetry = symmetry
        self.time_limit = time_limit
        self.reduce_budget = reduce_budget

    def generate(self) -> BacktrackingPuzzle:
        full = generate_full_solution(self.rng, self.time_limit)
        clues = reduce_to_target(
            full,
            self.rng,
            target_clues=self.target_clues,
            symmetry=self.symmetry,
            time_budget=self.reduce_budget,
        )
        unique = has_unique_solution(clues)
        _LOGGER.debug("generated puzzle with %d clues (unique=%s)", sum(1 for d in clues if d), unique)
        return BacktrackingPuzzle(tuple(clues), tuple(full) if unique else None)


class StrategySolver:
    """Candidate view of a grid after eliminating every placed digit from its peers."""

    def __init__(self, cells: Sequence[CellValue]) -> None:
        if len(cells) != CELL_COUNT:
            raise ValueError(f"expected {CELL_COUNT} cells, got {len(cells)}")
        self.cells: Tuple[CellValue, ...] = tuple(
            c if isinstance(c, int) else frozenset(c) for c in cells
        )

    def grid_state(self) -> Tuple[CellValue, ...]:
        state: List[CellValue] = []
        for i, value in enumerate(self.cells):
            if isinstance(value, int):
                state.append(value)
                continue
            placed = {self.cells[j] for j in PEERS[i] if isinstance(self.cells[j], int)}
            state.append(frozenset(value - placed))
        return tuple(state)

    def is_solved(self) -> bool:
        if not all(isinstance(value, int) for value in self.cells):
            return False
        return all({self.cells[i] for i in unit} == DIGITS for unit in _UNITS)


class StrategySolverFactory:
    def solver_from_grid(self, cells: Sequence[CellValue]) -> StrategySolver:
        return StrategySolver(cells)


def port_create_generator(
    *,
    seed: Optional[int] = None,
    options: Optional[Mapping[str, Any]] = None,
) -> BacktrackingGenerator:
    """Build a generator from ``[generator]`` with ``options`` taking precedence."""

    section = get_section("generator", {})
    if not isinstance(section, dict):
        section = {}
    opts = dict(options or {})
    full_solution = section.get("full_solution", {})
    reduce = section.get("reduce", {})
    return BacktrackingGenerator(
        seed,
        target_clues=int(opts.get("target_clues", section.get("target_clues", DEFAULT_TARGET_CLUES))),
        symmetry=str(opts.get("symmetry", section.get("symmetry", "central"))),
        time_limit=float(opts.get("time_limit", full_solution.get("time_limit", DEFAULT_FULL_SOLUTION_TIME_LIMIT))),
        reduce_budget=float(opts.get("reduce_budget", reduce.get("time_budget", DEFAULT_REDUCE_TIME_BUDGET))),
    )


def port_solver_factory() -> StrategySolverFactory:
    return StrategySolverFactory()


__all__ = [
    "BacktrackingGenerator",
    "BacktrackingPuzzle",
    "StrategySolver",
    "StrategySolverFactory",
    "count_solutions",
    "from_string",
    "generate_full_solution",
    "has_unique_solution",
    "port_create_generator",
    "port_solver_factory",
    "reduce_to_target",
    "symmetric_pairs",
    "to_string",
]
