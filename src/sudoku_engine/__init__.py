"""Interactive Sudoku rule engine."""

from __future__ import annotations

from .cell_state import CellMode, CellState, Transition
from .conflicts import ConflictTracker
from .controller import PuzzleController
from .delta import Delta, DeltaOp
from .errors import BackendError, SettingsError, ValidationIssue
from .events import Direction, Signal, SignalKind
from .session import SessionContext
from .settings import Settings, resolve_settings
from .topology import CellPosition

__all__ = [
    "BackendError",
    "CellMode",
    "CellPosition",
    "CellState",
    "ConflictTracker",
    "Delta",
    "DeltaOp",
    "Direction",
    "PuzzleController",
    "SessionContext",
    "Settings",
    "SettingsError",
    "Signal",
    "SignalKind",
    "Transition",
    "ValidationIssue",
    "resolve_settings",
]
