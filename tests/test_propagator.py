from __future__ import annotations

from sudoku_engine.cell_state import CellMode, CellState
from sudoku_engine.delta import DeltaOp
from sudoku_engine.propagator import propagate
from sudoku_engine.topology import CELL_COUNT, peers_of


def _board(mode: CellMode = CellMode.AUTO):
    return [
        CellState(mode=mode, auto_candidates=set(range(1, 10)), manual_candidates={1, 5})
        for _ in range(CELL_COUNT)
    ]


def test_propagate_removes_digit_from_every_peer() -> None:
    cells = _board()
    cells[0].commit_digit(5)
    deltas = propagate(cells, 0, 5, auto_mode=True)

    assert {d.cell for d in deltas} == set(peers_of(0))
    assert all(d.op is DeltaOp.ELIM and d.digit == 5 for d in deltas)
    for peer in peers_of(0):
        assert 5 not in cells[peer].auto_candidates
        assert 5 in cells[peer].manual_candidates
    assert 5 in cells[80].auto_candidates


def test_propagate_uses_flag_track_not_peer_mode() -> None:
    cells = _board(mode=CellMode.AUTO)
    propagate(cells, 0, 5, auto_mode=False)
    assert 5 not in cells[1].manual_candidates
    assert 5 in cells[1].auto_candidates


def test_propagate_skips_digit_peers() -> None:
    cells = _board()
    cells[1].commit_digit(5)
    deltas = propagate(cells, 0, 5, auto_mode=True)
    assert 1 not in {d.cell for d in deltas}
    assert cells[1].digit == 5


def test_repeat_propagation_is_idempotent() -> None:
    cells = _board()
    first = propagate(cells, 40, 3, auto_mode=True)
    second = propagate(cells, 40, 3, auto_mode=True)
    assert len(first) == 20
    assert second == ()
