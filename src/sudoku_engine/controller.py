"""Puzzle lifecycle controller.

The controller owns the 81 cell states, the conflict tracker, the selection
and the solved/paused flags.  Every user input is handled as one ordered
pipeline run: mutate the target cell, propagate a placed digit into its peers,
update conflicts, then ask whether the grid is solved.  Nothing runs in the
background and nothing is deferred.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ports.generator_port import Puzzle, PuzzleGenerator, generate_puzzle
from ports.solver_port import SolverFactory, seed_grid_state
from project_config import get_section

from .cell_state import CellMode, CellState, CellValue, Transition
from .conflicts import ConflictTracker
from .delta import Delta
from .events import (
    CheckCell,
    CheckPuzzle,
    CleanCell,
    Direction,
    Event,
    FindHint,
    MoveSelection,
    NewCandidate,
    NewDigit,
    NewGame,
    PauseGame,
    ResetPuzzle,
    RevealCell,
    RevealPuzzle,
    SelectCell,
    Signal,
    SignalKind,
    ToggleCandidateMode,
    ToggleSetting,
    event_name,
    event_to_payload,
)
from .journal import EventJournal
from .pipeline import STAGE_SOLVED, PipelineTrace, apply_transition
from .session import SessionContext
from .settings import Settings, resolve_settings
from .topology import CELL_COUNT, SIZE, col_of, is_valid_index, row_of

_LOGGER = logging.getLogger(__name__)

Listener = Callable[[Signal], None]

_MOVES: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


def puzzle_digest(clues: Sequence[int]) -> str:
    material = "".join(str(int(d)) for d in clues)
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


class PuzzleController:
    """Owns one game: its board, its selection and its lifecycle."""

    def __init__(
        self,
        generator: PuzzleGenerator,
        solver_factory: SolverFactory,
        context: Optional[SessionContext] = None,
        *,
        journal: Optional[EventJournal] = None,
        trace_level: Optional[str] = None,
    ) -> None:
        self.generator = generator
        self.solver_factory = solver_factory
        self.context = context if context is not None else SessionContext()
        self.journal = journal
        if trace_level is None:
            trace_level = str(get_section("pipeline", {}).get("trace_level", "none"))
        self.trace = PipelineTrace(trace_level)

        self._cells: List[CellState] = []
        self._initial: List[CellState] = []
        self._clues: Tuple[int, ...] = ()
        self._solution: Tuple[int, ...] = ()
        self._digest: Optional[str] = None
        self._conflicts = ConflictTracker()
        self._selected: Optional[int] = None
        self._solved = False
        self._paused = False
        self._deltas: List[Delta] = []
        self._outbox: List[Signal] = []
        self._listeners: List[Listener] = []

    @classmethod
    def from_config(
        cls,
        *,
        impl: Optional[str] = None,
        seed: Optional[int] = None,
        settings_overrides: Optional[Mapping[str, Any]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "PuzzleController":
        """Wire a controller from ``config.toml``, the environment and overrides."""

        from ports._loader import resolve_backend

        settings = resolve_settings(settings_overrides, env=env)
        backend = resolve_backend(impl, seed=seed, env=env)
        return cls(
            backend.generator,
            backend.solver,
            SessionContext(settings=settings, auto_candidates=settings.start_in_automatic_mode),
            journal=EventJournal.from_config(),
        )

    # Signals ------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every emitted signal; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: SignalKind, **payload: Any) -> None:
        signal = Signal(kind, payload)
        self._outbox.append(signal)
        for listener in list(self._listeners):
            listener(signal)

    # Guards -------------------------------------------------------------

    @property
    def ready(self) -> bool:
        return len(self._cells) == CELL_COUNT

    def _check_ready(self) -> bool:
        assert self.ready, "puzzle is not initialised"
        return self.ready

    def _target(self, position: Optional[int]) -> Optional[int]:
        if not self._check_ready():
            return None
        if position is None:
            return self._selected
        assert is_valid_index(position), f"position out of range: {position!r}"
        return position if is_valid_index(position) else None

    def _run(self, position: int, transition: Transition) -> None:
        if not transition.changed:
            return
        self._deltas.extend(
            apply_transition(
                self._cells,
                self._conflicts,
                position,
                transition,
                auto_mode=self.context.auto_candidates,
                trace=self.trace,
            )
        )

    # Lifecycle ----------------------------------------------------------

    def generate_puzzle(self) -> Tuple[Puzzle, Tuple[int, ...]]:
        return generate_puzzle(self.generator)

    def init(self, puzzle: Puzzle, solution: Sequence[int], settings: Optional[Settings] = None) -> None:
        """Seed all 81 cells from the collaborator's grid state and select cell 0."""

        if settings is not None:
            self.context.settings = settings
        clues = tuple(int(d) for d in puzzle.clues)
        if len(solution) != CELL_COUNT:
            raise ValueError(f"solution must have {CELL_COUNT} digits, got {len(solution)}")

        auto = self.context.settings.start_in_automatic_mode
        seeds = seed_grid_state(self.solver_factory, clues)
        self._cells = [CellState.from_seed(seed, auto_mode=auto) for seed in seeds]
        self._initial = [cell.copy() for cell in self._cells]
        self._clues = clues
        self._solution = tuple(int(d) for d in solution)
        self._digest = puzzle_digest(clues)
        self.context.auto_candidates = auto
        self._restore_flags()
        _LOGGER.debug(
            "initialised puzzle %s with %d clues",
            self._digest[:12],
            sum(1 for cell in self._cells if cell.fixed),
        )

    def _restore_flags(self) -> None:
        self._conflicts.clear()
        for i, cell in enumerate(self._cells):
            if cell.is_digit:
                assert cell.digit is not None
                self._conflicts.on_place(self._cells, i, cell.digit)
        self._selected = 0
        self._solved = False
        self._paused = False
        self._deltas = []
        self.trace.reset()

    def new_game(self) -> None:
        puzzle, solution = self.generate_puzzle()
        self.init(puzzle, solution)
        self._emit(SignalKind.CLOCK_RESET)

    def reset_puzzle(self) -> None:
        """Return the board to exactly the state ``init`` produced."""

        if not self._check_ready():
            return
        self._cells = [cell.copy() for cell in self._initial]
        self.context.auto_candidates = self.context.settings.start_in_automatic_mode
        self._restore_flags()
        self._emit(SignalKind.CLOCK_RESET)

    # Selection ----------------------------------------------------------

    def select(self, position: int) -> None:
        target = self._target(position)
        if target is None or target == self._selected:
            return
        self._selected = target
        self._emit(SignalKind.SELECTION_CHANGED, position=target)

    def move_selection(self, direction: Direction) -> None:
        """Move the selection one cell; stops at the grid edge."""

        current = self._target(None)
        if current is None:
            return
        dr, dc = _MOVES[Direction(direction)]
        row = min(max(row_of(current) + dr, 0), SIZE - 1)
        col = min(max(col_of(current) + dc, 0), SIZE - 1)
        self.select(row * SIZE + col)

    # Cell edits ---------------------------------------------------------

    def _editable(self, position: Optional[int]) -> Optional[int]:
        target = self._target(position)
        if target is None:
            return None
        if self._cells[target].locked:
            _LOGGER.debug("ignoring edit of locked cell %d", target)
            return None
        return target

    def commit_digit(self, digit: int, position: Optional[int] = None) -> None:
        self._deltas = []
        target = self._editable(position)
        if target is None:
            return
        self._run(target, self._cells[target].commit_digit(digit))
        if self.context.settings.check_guesses_when_entered:
            self.check_cell(target)
        self.check_solved()

    def toggle_candidate(self, digit: int, position: Optional[int] = None) -> None:
        self._deltas = []
        target = self._editable(position)
        if target is None:
            return
        self._run(target, self._cells[target].toggle_candidate(digit, self.context.auto_candidates))
        self.check_solved()

    def clear(self, position: Optional[int] = None) -> None:
        self._deltas = []
        target = self._editable(position)
        if target is None:
            return
        self._run(target, self._cells[target].clear(self.context.auto_candidates))
        self.check_solved()

    # Reveal / check -----------------------------------------------------

    def _reveal(self, position: int) -> None:
        cell = self._cells[position]
        if cell.fixed:
            _LOGGER.debug("ignoring reveal of fixed cell %d", position)
            return
        self._run(position, cell.reveal(self._solution[position]))

    def reveal_cell(self, position: Optional[int] = None) -> None:
        self._deltas = []
        target = self._target(position)
        if target is None:
            return
        self._reveal(target)
        self.check_solved()

    def reveal_puzzle(self) -> None:
        self._deltas = []
        if not self._check_ready():
            return
        for i in range(CELL_COUNT):
            self._reveal(i)
        self.check_solved()

    def check_cell(self, position: Optional[int] = None) -> None:
        """Flag a wrong digit with ``correction``; a right one may be locked in."""

        target = self._target(position)
        if target is None:
            return
        cell = self._cells[target]
        if cell.fixed or not cell.is_digit:
            return
        if cell.digit == self._solution[target]:
            cell.correction = False
            if self.context.settings.check_guesses_when_entered:
                cell.revealed = True
        else:
            cell.correction = True

    def check_puzzle(self) -> None:
        if not self._check_ready():
            return
        for i, cell in enumerate(self._cells):
            if cell.fixed or not cell.is_digit:
                continue
            cell.correction = cell.digit != self._solution[i]

    # Hints / solved -----------------------------------------------------

    def find_hint(self) -> Optional[int]:
        """Select the non-fixed cell with the fewest auto candidates.

        Cells holding a digit take part with the auto track shadowed under
        the digit.  Ties go to the lowest index.
        """

        if not self._check_ready():
            return None
        open_cells = [i for i, c in enumerate(self._cells) if not c.fixed]
        if not open_cells:
            return None
        best = min(open_cells, key=lambda i: (len(self._cells[i].auto_candidates), i))
        self.select(best)
        return best

    def check_solved(self) -> bool:
        if not self._check_ready():
            return False
        if self._solved:
            return True
        matches = sum(1 for cell, d in zip(self._cells, self._solution) if cell.is_digit and cell.digit == d)
        solver_solved = self.solver_factory.solver_from_grid(self.grid_state()).is_solved()
        self.trace.record(STAGE_SOLVED, self._selected or 0, note=f"matches={matches}")
        if matches < CELL_COUNT and not solver_solved:
            return False
        if matches < CELL_COUNT:
            _LOGGER.info("grid solved with an alternative assignment (%d matches)", matches)
        self._solved = True
        self._paused = True
        _LOGGER.info("puzzle %s solved", (self._digest or "")[:12])
        self._emit(SignalKind.SOLVED, play_sound=self.context.settings.play_sound_on_solve)
        self._emit(SignalKind.CLOCK_PAUSED)
        return True

    # Flow ---------------------------------------------------------------

    def toggle_candidate_mode(self) -> bool:
        return self.context.toggle_candidate_mode()

    def toggle_setting(self, name: str) -> Settings:
        return self.context.toggle_setting(name)

    def pause(self, paused: bool) -> None:
        if self._solved:
            _LOGGER.debug("ignoring pause request on a solved puzzle")
            return
        if paused == self._paused:
            return
        self._paused = paused
        self._emit(SignalKind.CLOCK_PAUSED if paused else SignalKind.CLOCK_RESUMED)

    # Dispatch -----------------------------------------------------------

    def dispatch(self, event: Event) -> List[Signal]:
        """Handle one input event and return the signals it produced."""

        self._outbox = []
        self._deltas = []
        if isinstance(event, NewDigit):
            self.commit_digit(event.digit)
        elif isinstance(event, NewCandidate):
            self.toggle_candidate(event.digit)
        elif isinstance(event, CleanCell):
            self.clear()
        elif isinstance(event, RevealCell):
            self.reveal_cell()
        elif isinstance(event, RevealPuzzle):
            self.reveal_puzzle()
        elif isinstance(event, CheckCell):
            self.check_cell()
        elif isinstance(event, CheckPuzzle):
            self.check_puzzle()
        elif isinstance(event, ResetPuzzle):
            self.reset_puzzle()
        elif isinstance(event, FindHint):
            self.find_hint()
        elif isinstance(event, MoveSelection):
            self.move_selection(event.direction)
        elif isinstance(event, SelectCell):
            self.select(event.position)
        elif isinstance(event, ToggleCandidateMode):
            self.toggle_candidate_mode()
        elif isinstance(event, ToggleSetting):
            self.toggle_setting(event.name)
        elif isinstance(event, NewGame):
            self.new_game()
        elif isinstance(event, PauseGame):
            self.pause(event.paused)
        else:
            raise TypeError(f"Unsupported event: {event!r}")

        signals = list(self._outbox)
        _LOGGER.debug("%s -> %d delta(s), %d signal(s)", event_name(event), len(self._deltas), len(signals))
        if self.journal is not None:
            self.journal.append(
                {
                    "event": event_to_payload(event),
                    "puzzle": self._digest,
                    "deltas": [delta.to_payload() for delta in self._deltas],
                    "signals": [signal.to_payload() for signal in signals],
                }
            )
        return signals

    # Read accessors -----------------------------------------------------

    def cell(self, position: int) -> CellState:
        """Copy of the state at ``position``."""

        return self._cells[position].copy()

    def mode(self, position: int) -> CellMode:
        return self._cells[position].mode

    def value(self, position: int) -> CellValue:
        return self._cells[position].current_value()

    def display_value(self, position: int) -> CellValue:
        return self._cells[position].display_value(self.context.auto_candidates)

    def is_fixed(self, position: int) -> bool:
        return self._cells[position].fixed

    def is_revealed(self, position: int) -> bool:
        return self._cells[position].revealed

    def has_correction(self, position: int) -> bool:
        return self._cells[position].correction

    def has_conflict(self, position: int) -> bool:
        return self._conflicts.has_conflict(position)

    def shows_conflict(self, position: int) -> bool:
        return self.context.settings.highlight_conflicts and self._conflicts.has_conflict(position)

    def conflicts(self, position: int) -> frozenset:
        return self._conflicts.conflicts(position)

    @property
    def conflict_tracker(self) -> ConflictTracker:
        return self._conflicts

    @property
    def selected(self) -> Optional[int]:
        return self._selected

    @property
    def solved(self) -> bool:
        return self._solved

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def clues(self) -> Tuple[int, ...]:
        return self._clues

    @property
    def solution(self) -> Tuple[int, ...]:
        return self._solution

    @property
    def digest(self) -> Optional[str]:
        return self._digest

    @property
    def last_deltas(self) -> Tuple[Delta, ...]:
        return tuple(self._deltas)

    def grid_state(self) -> Tuple[CellValue, ...]:
        """Per-cell digit or active candidate set, as handed to the solver."""

        return tuple(cell.current_value() for cell in self._cells)

    def snapshot(self) -> List[Dict[str, Any]]:
        return [cell.to_payload() for cell in self._cells]

    def summary(self) -> Dict[str, Any]:
        return {
            "puzzle": self._digest,
            "selected": self._selected,
            "solved": self._solved,
            "paused": self._paused,
            "auto_candidates": self.context.auto_candidates,
            "digits": "".join(str(c.digit) if c.is_digit else "." for c in self._cells),
            "conflicts": self._conflicts.conflicting_cells(),
            "corrections": [i for i, c in enumerate(self._cells) if c.correction],
            "revealed": [i for i, c in enumerate(self._cells) if c.revealed],
        }


__all__ = ["PuzzleController", "puzzle_digest"]
