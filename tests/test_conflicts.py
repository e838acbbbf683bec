from __future__ import annotations

from sudoku_engine.cell_state import CellMode, CellState
from sudoku_engine.conflicts import ConflictTracker
from sudoku_engine.topology import CELL_COUNT


def _board():
    return [CellState(mode=CellMode.MANUAL) for _ in range(CELL_COUNT)]


def test_place_links_matching_peers_both_ways() -> None:
    cells = _board()
    tracker = ConflictTracker()
    cells[0].commit_digit(7)
    tracker.on_place(cells, 0, 7)
    cells[8].commit_digit(7)
    found = tracker.on_place(cells, 8, 7)

    assert found == {0}
    assert tracker.conflicts(0) == {8}
    assert tracker.conflicts(8) == {0}
    assert tracker.is_symmetric()


def test_non_peer_same_digit_is_not_a_conflict() -> None:
    cells = _board()
    tracker = ConflictTracker()
    cells[0].commit_digit(7)
    cells[40].commit_digit(7)
    assert tracker.on_place(cells, 40, 7) == frozenset()
    assert not tracker.has_conflict(0)


def test_remove_releases_every_peer() -> None:
    cells = _board()
    tracker = ConflictTracker()
    for index in (0, 8, 72):
        cells[index].commit_digit(4)
        tracker.on_place(cells, index, 4)
    assert tracker.conflicts(0) == {8, 72}

    released = tracker.on_remove(0)
    assert released == {8, 72}
    assert not tracker.has_conflict(0)
    assert not tracker.has_conflict(8)
    assert not tracker.has_conflict(72)
    assert tracker.is_symmetric()


def test_remove_without_conflicts_is_noop() -> None:
    tracker = ConflictTracker()
    assert tracker.on_remove(10) == frozenset()
    assert tracker.conflicting_cells() == []
