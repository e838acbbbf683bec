"""Per-cell state machine.

A cell is in exactly one of three modes: it shows a committed digit, its auto
candidate track, or its manual candidate track.  Both candidate tracks live
on the cell permanently; committing a digit only shadows them, so clearing
the digit makes the previous candidates visible again.

Mutating methods return a :class:`Transition` describing which digit was
removed and which was placed.  The controller turns that into ``REMOVE`` and
``PLACE`` notifications for the rest of the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Any, Dict, FrozenSet, Optional, Set, Union

from .topology import DIGITS

CellValue = Union[int, FrozenSet[int]]


class CellMode(str, Enum):
    DIGIT = "digit"
    AUTO = "auto"
    MANUAL = "manual"

    @classmethod
    def candidates(cls, auto_mode: bool) -> "CellMode":
        """Candidate mode selected by the global auto/manual flag."""

        return cls.AUTO if auto_mode else cls.MANUAL


@dataclass(frozen=True)
class Transition:
    """Digit-level outcome of a cell mutation."""

    removed: Optional[int] = None
    placed: Optional[int] = None

    @property
    def changed(self) -> bool:
        return self.removed is not None or self.placed is not None


NO_CHANGE = Transition()


def _check_digit(digit: int) -> None:
    if digit not in DIGITS:
        raise ValueError(f"digit must be in [1, 9], got {digit!r}")


@dataclass
class CellState:
    """Mode tag plus the three value slots of one cell."""

    mode: CellMode
    digit: Optional[int] = None
    auto_candidates: Set[int] = field(default_factory=set)
    manual_candidates: Set[int] = field(default_factory=set)
    fixed: bool = False
    revealed: bool = False
    correction: bool = False

    def __post_init__(self) -> None:
        if self.mode is CellMode.DIGIT and self.digit is None:
            raise ValueError("a cell in digit mode must carry a digit")
        if self.digit is not None:
            _check_digit(self.digit)

    @classmethod
    def clue(cls, digit: int) -> "CellState":
        return cls(mode=CellMode.DIGIT, digit=digit, fixed=True)

    @classmethod
    def from_seed(cls, seed: Union[int, AbstractSet[int]], *, auto_mode: bool) -> "CellState":
        """Build the initial state from a solver grid-state entry.

        A digit seed is an initial clue.  A candidate seed fills the auto
        track; the manual track always starts empty.
        """

        if isinstance(seed, int):
            return cls.clue(seed)
        return cls(mode=CellMode.candidates(auto_mode), auto_candidates=set(seed))

    # Read accessors ---------------------------------------------------

    @property
    def is_digit(self) -> bool:
        return self.mode is CellMode.DIGIT

    @property
    def is_candidates(self) -> bool:
        return self.mode is not CellMode.DIGIT

    @property
    def locked(self) -> bool:
        """Fixed clues and revealed cells reject user edits.

        A revealed digit came from the solution, either through a reveal or a
        guess confirmed by check-on-entry, so it is locked like a clue.  Every
        other non-fixed cell accepts commits, toggles and clears.  Only
        :meth:`reveal` and a puzzle reset ignore the ``revealed`` flag.
        """

        return self.fixed or self.revealed

    def track(self, auto_mode: bool) -> Set[int]:
        return self.auto_candidates if auto_mode else self.manual_candidates

    def current_value(self) -> CellValue:
        if self.mode is CellMode.DIGIT:
            assert self.digit is not None
            return self.digit
        return frozenset(self.track(self.mode is CellMode.AUTO))

    def display_value(self, auto_mode: bool) -> CellValue:
        """Value as shown under the global candidate flag."""

        if self.mode is CellMode.DIGIT:
            assert self.digit is not None
            return self.digit
        return frozenset(self.track(auto_mode))

    # Mutations --------------------------------------------------------

    def commit_digit(self, digit: int) -> Transition:
        _check_digit(digit)
        if self.locked:
            return NO_CHANGE
        removed = self.digit if self.is_digit and self.digit != digit else None
        self.mode = CellMode.DIGIT
        self.digit = digit
        self.correction = False
        return Transition(removed=removed, placed=digit)

    def toggle_candidate(self, digit: int, auto_mode: bool) -> Transition:
        _check_digit(digit)
        if self.locked:
            return NO_CHANGE
        removed = None
        if self.is_digit:
            removed = self._drop_digit(auto_mode)
        track = self.track(auto_mode)
        if digit in track:
            track.discard(digit)
        else:
            track.add(digit)
        return Transition(removed=removed)

    def clear(self, auto_mode: bool) -> Transition:
        if self.locked:
            return NO_CHANGE
        if self.is_digit:
            return Transition(removed=self._drop_digit(auto_mode))
        if self.mode is CellMode.MANUAL:
            self.manual_candidates.clear()
        return NO_CHANGE

    def reveal(self, digit: int) -> Transition:
        _check_digit(digit)
        if self.fixed:
            return NO_CHANGE
        removed = self.digit if self.is_digit and self.digit != digit else None
        self.mode = CellMode.DIGIT
        self.digit = digit
        self.revealed = True
        self.correction = False
        return Transition(removed=removed, placed=digit)

    def eliminate(self, digit: int, auto_mode: bool) -> bool:
        """Drop ``digit`` from the flag's track; report whether it was there."""

        if not self.is_candidates:
            return False
        track = self.track(auto_mode)
        if digit not in track:
            return False
        track.discard(digit)
        return True

    def _drop_digit(self, auto_mode: bool) -> int:
        assert self.digit is not None
        old = self.digit
        self.digit = None
        self.mode = CellMode.candidates(auto_mode)
        self.correction = False
        return old

    # Snapshots --------------------------------------------------------

    def copy(self) -> "CellState":
        return CellState(
            mode=self.mode,
            digit=self.digit,
            auto_candidates=set(self.auto_candidates),
            manual_candidates=set(self.manual_candidates),
            fixed=self.fixed,
            revealed=self.revealed,
            correction=self.correction,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "digit": self.digit,
            "auto": sorted(self.auto_candidates),
            "manual": sorted(self.manual_candidates),
            "fixed": self.fixed,
            "revealed": self.revealed,
            "correction": self.correction,
        }


__all__ = ["CellMode", "CellState", "CellValue", "NO_CHANGE", "Transition"]
