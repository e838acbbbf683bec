"""Input events accepted by the controller and signals it emits."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Union


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class NewDigit:
    digit: int


@dataclass(frozen=True)
class NewCandidate:
    digit: int


@dataclass(frozen=True)
class CleanCell:
    pass


@dataclass(frozen=True)
class RevealCell:
    pass


@dataclass(frozen=True)
class RevealPuzzle:
    pass


@dataclass(frozen=True)
class CheckCell:
    pass


@dataclass(frozen=True)
class CheckPuzzle:
    pass


@dataclass(frozen=True)
class ResetPuzzle:
    pass


@dataclass(frozen=True)
class FindHint:
    pass


@dataclass(frozen=True)
class MoveSelection:
    direction: Direction


@dataclass(frozen=True)
class SelectCell:
    position: int


@dataclass(frozen=True)
class ToggleCandidateMode:
    pass


@dataclass(frozen=True)
class ToggleSetting:
    name: str


@dataclass(frozen=True)
class NewGame:
    pass


@dataclass(frozen=True)
class PauseGame:
    paused: bool


Event = Union[
    NewDigit,
    NewCandidate,
    CleanCell,
    RevealCell,
    RevealPuzzle,
    CheckCell,
    CheckPuzzle,
    ResetPuzzle,
    FindHint,
    MoveSelection,
    SelectCell,
    ToggleCandidateMode,
    ToggleSetting,
    NewGame,
    PauseGame,
]

_EVENT_TYPES = {
    "new_digit": NewDigit,
    "new_candidate": NewCandidate,
    "clean_cell": CleanCell,
    "reveal_cell": RevealCell,
    "reveal_puzzle": RevealPuzzle,
    "check_cell": CheckCell,
    "check_puzzle": CheckPuzzle,
    "reset_puzzle": ResetPuzzle,
    "find_hint": FindHint,
    "move_selection": MoveSelection,
    "select_cell": SelectCell,
    "toggle_candidate_mode": ToggleCandidateMode,
    "toggle_setting": ToggleSetting,
    "new_game": NewGame,
    "pause_game": PauseGame,
}
_EVENT_NAMES = {cls: name for name, cls in _EVENT_TYPES.items()}


def event_name(event: Event) -> str:
    return _EVENT_NAMES[type(event)]


def event_from_payload(payload: Mapping[str, Any]) -> Event:
    """Build an event from ``{"event": name, **fields}``.

    Used by the replay CLI; unknown names raise :class:`ValueError`.
    """

    data = dict(payload)
    name = data.pop("event", None)
    cls = _EVENT_TYPES.get(str(name))
    if cls is None:
        raise ValueError(f"Unknown event {name!r}")
    if cls is MoveSelection:
        data["direction"] = Direction(data["direction"])
    return cls(**data)


def event_to_payload(event: Event) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"event": event_name(event)}
    for key, value in vars(event).items():
        payload[key] = value.value if isinstance(value, Enum) else value
    return payload


class SignalKind(str, Enum):
    SOLVED = "solved"
    CLOCK_RESET = "clock_reset"
    CLOCK_PAUSED = "clock_paused"
    CLOCK_RESUMED = "clock_resumed"
    SELECTION_CHANGED = "selection_changed"


@dataclass(frozen=True)
class Signal:
    """Outbound notification for the presentation layer."""

    kind: SignalKind
    payload: Mapping[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, **dict(self.payload)}


__all__ = [
    "CheckCell",
    "CheckPuzzle",
    "CleanCell",
    "Direction",
    "Event",
    "FindHint",
    "MoveSelection",
    "NewCandidate",
    "NewDigit",
    "NewGame",
    "PauseGame",
    "ResetPuzzle",
    "RevealCell",
    "RevealPuzzle",
    "SelectCell",
    "Signal",
    "SignalKind",
    "ToggleCandidateMode",
    "ToggleSetting",
    "event_from_payload",
    "event_name",
    "event_to_payload",
]
