from __future__ import annotations

import pytest

from sudoku_engine.delta import DeltaOp, DeltaValidationError, canonicalise_deltas, elim, from_payload, place, remove
from sudoku_engine.events import (
    CleanCell,
    Direction,
    MoveSelection,
    NewDigit,
    Signal,
    SignalKind,
    ToggleSetting,
    event_from_payload,
    event_name,
    event_to_payload,
)


def test_event_payload_conversion() -> None:
    assert event_to_payload(NewDigit(4)) == {"event": "new_digit", "digit": 4}
    assert event_to_payload(MoveSelection(Direction.LEFT)) == {"event": "move_selection", "direction": "left"}
    assert event_from_payload({"event": "move_selection", "direction": "down"}) == MoveSelection(Direction.DOWN)
    assert event_from_payload({"event": "clean_cell"}) == CleanCell()
    assert event_from_payload({"event": "toggle_setting", "name": "show_clock"}) == ToggleSetting("show_clock")
    assert event_name(CleanCell()) == "clean_cell"


def test_unknown_event_name_rejected() -> None:
    with pytest.raises(ValueError):
        event_from_payload({"event": "explode"})


def test_signal_payload() -> None:
    signal = Signal(SignalKind.SOLVED, {"play_sound": True})
    assert signal.to_payload() == {"kind": "solved", "play_sound": True}


def test_delta_validation() -> None:
    with pytest.raises(DeltaValidationError):
        place(81, 1)
    with pytest.raises(DeltaValidationError):
        elim(0, 10)
    with pytest.raises(DeltaValidationError):
        from_payload({"op": "SWAP", "cell": 0, "digit": 1})
    with pytest.raises(DeltaValidationError):
        from_payload({"op": "PLACE"})
    assert from_payload({"op": "ELIM", "cell": 3, "digit": 2}) == elim(3, 2)


def test_canonical_order() -> None:
    ordered = canonicalise_deltas([elim(5, 1), place(2, 3), remove(9, 4), elim(1, 1)])
    assert [d.op for d in ordered] == [DeltaOp.REMOVE, DeltaOp.PLACE, DeltaOp.ELIM, DeltaOp.ELIM]
    assert ordered[2].cell == 1
