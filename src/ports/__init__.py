"""Collaborator port facades."""

from __future__ import annotations

from ._loader import Backend, resolve_backend
from .generator_port import Puzzle, PuzzleGenerator, generate_puzzle
from .solver_port import CellValue, Solver, SolverFactory, puzzle_grid, seed_grid_state

__all__ = [
    "Backend",
    "CellValue",
    "Puzzle",
    "PuzzleGenerator",
    "Solver",
    "SolverFactory",
    "generate_puzzle",
    "puzzle_grid",
    "resolve_backend",
    "seed_grid_state",
]
