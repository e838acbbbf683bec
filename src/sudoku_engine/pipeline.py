"""Ordered per-input pipeline: mutate, propagate, detect conflicts.

The solved check is the last stage; it needs the solution and the solver
collaborator, so the controller runs it after :func:`apply_transition`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .cell_state import CellState, Transition
from .conflicts import ConflictTracker
from .delta import Delta, canonicalise_deltas, place, remove
from .propagator import propagate

_LOGGER = logging.getLogger(__name__)

STAGE_MUTATE = "mutate"
STAGE_PROPAGATE = "propagate"
STAGE_CONFLICTS = "conflicts"
STAGE_SOLVED = "solved"
STAGES = (STAGE_MUTATE, STAGE_PROPAGATE, STAGE_CONFLICTS, STAGE_SOLVED)

TRACE_LEVELS = ("none", "summary", "full")


class TraceValidationError(ValueError):
    """Raised when a trace entry is malformed."""


@dataclass(frozen=True, slots=True)
class PipelineTraceEntry:
    step: int
    stage: str
    cell: int
    deltas: Tuple[Delta, ...] = ()
    note: Optional[str] = None

    def __post_init__(self) -> None:
        if self.step < 1:
            raise TraceValidationError("step must be >= 1")
        if self.stage not in STAGES:
            raise TraceValidationError(f"unknown stage {self.stage!r}")

    def to_payload(self) -> dict:
        payload = {
            "step": int(self.step),
            "stage": self.stage,
            "cell": int(self.cell),
            "deltas": [delta.to_payload() for delta in canonicalise_deltas(self.deltas)],
        }
        if self.note is not None:
            payload["note"] = self.note
        return payload


@dataclass
class PipelineTrace:
    """In-memory stage recorder.

    ``none`` records nothing, ``summary`` keeps stage entries without deltas,
    ``full`` keeps everything.
    """

    trace_level: str = "none"
    entries: List[PipelineTraceEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.trace_level not in TRACE_LEVELS:
            raise TraceValidationError(f"trace_level must be one of {TRACE_LEVELS}, got {self.trace_level!r}")

    def record(self, stage: str, cell: int, deltas: Sequence[Delta] = (), note: Optional[str] = None) -> None:
        if self.trace_level == "none":
            return
        kept = tuple(deltas) if self.trace_level == "full" else ()
        self.entries.append(PipelineTraceEntry(len(self.entries) + 1, stage, cell, kept, note))

    def snapshot(self) -> Tuple[PipelineTraceEntry, ...]:
        return tuple(self.entries)

    def reset(self) -> None:
        self.entries.clear()


def apply_transition(
    cells: Sequence[CellState],
    conflicts: ConflictTracker,
    position: int,
    transition: Transition,
    *,
    auto_mode: bool,
    trace: Optional[PipelineTrace] = None,
) -> Tuple[Delta, ...]:
    """Run the propagate and conflict stages for one cell mutation.

    A replaced digit yields ``REMOVE`` before ``PLACE``.  Propagation only
    follows a placement.  The returned deltas are in production order.
    """

    trace = trace if trace is not None else PipelineTrace()
    deltas: List[Delta] = []

    if transition.removed is not None:
        deltas.append(remove(position, transition.removed))
    if transition.placed is not None:
        deltas.append(place(position, transition.placed))
    trace.record(STAGE_MUTATE, position, tuple(deltas))

    if transition.placed is not None:
        eliminated = propagate(cells, position, transition.placed, auto_mode=auto_mode)
        deltas.extend(eliminated)
        trace.record(STAGE_PROPAGATE, position, eliminated)

    released: frozenset = frozenset()
    found: frozenset = frozenset()
    if transition.removed is not None:
        released = conflicts.on_remove(position)
    if transition.placed is not None:
        found = conflicts.on_place(cells, position, transition.placed)
    if released or found:
        _LOGGER.debug("cell %d conflicts released=%s found=%s", position, sorted(released), sorted(found))
    trace.record(STAGE_CONFLICTS, position, note=f"released={len(released)} found={len(found)}")

    return tuple(deltas)


__all__ = [
    "PipelineTrace",
    "PipelineTraceEntry",
    "STAGES",
    "TRACE_LEVELS",
    "TraceValidationError",
    "apply_transition",
]
