from __future__ import annotations

import pytest

from sudoku_engine.topology import (
    BLOCK,
    CELL_COUNT,
    PEERS,
    CellPosition,
    PositionError,
    are_peers,
    block_of,
    col_of,
    peers_of,
    row_of,
)


def test_every_cell_has_twenty_peers() -> None:
    assert len(PEERS) == CELL_COUNT
    for index in range(CELL_COUNT):
        peers = peers_of(index)
        assert len(peers) == 20
        assert index not in peers


def test_peer_relation_is_symmetric() -> None:
    for a in range(CELL_COUNT):
        for b in peers_of(a):
            assert are_peers(b, a)


def test_row_col_block_derivation() -> None:
    assert (row_of(0), col_of(0), block_of(0)) == (0, 0, 0)
    assert (row_of(40), col_of(40), block_of(40)) == (4, 4, 4)
    assert (row_of(80), col_of(80), block_of(80)) == (8, 8, 8)
    assert block_of(33) == 5  # row 3, col 6
    assert all(BLOCK.count(b) == 9 for b in range(9))


def test_peers_of_origin() -> None:
    expected = {1, 2, 3, 4, 5, 6, 7, 8, 9, 18, 27, 36, 45, 54, 63, 72, 10, 11, 19, 20}
    assert set(peers_of(0)) == expected


def test_cell_position_constructors_agree() -> None:
    pos = CellPosition.from_row_col(4, 7)
    assert pos.index == 43
    assert pos.block == 5
    assert CellPosition.from_block(5, 4) == pos
    assert int(pos) == 43
    assert str(pos) == "(4, 7)[43]"


def test_cell_position_rejects_out_of_range() -> None:
    with pytest.raises(PositionError):
        CellPosition(81)
    with pytest.raises(PositionError):
        CellPosition(-1)
    with pytest.raises(PositionError):
        CellPosition.from_row_col(9, 0)
    with pytest.raises(PositionError):
        CellPosition.from_block(0, 9)
