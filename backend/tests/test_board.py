import itertools

import pytest

from tictactoe.board import (
    DRAW, SYMBOL_O, SYMBOL_X, apply_move, detect_outcome, new_board,
)
from tictactoe.errors import InvalidMove


def _board(rows):
    mapping = {'X': SYMBOL_X, 'O': SYMBOL_O, '.': None}
    return [[mapping[c] for c in row] for row in rows]


def test_new_board_is_empty_3x3():
    board = new_board()
    assert len(board) == 3
    assert all(len(row) == 3 for row in board)
    assert all(cell is None for row in board for cell in row)


def test_apply_move_returns_new_board():
    board = new_board()
    updated = apply_move(board, 1, 2, SYMBOL_X)
    assert updated[1][2] == SYMBOL_X
    # input board untouched
    assert board[1][2] is None


@pytest.mark.parametrize('row,col', [(-1, 0), (0, 3), (3, 3), (0, -1)])
def test_apply_move_rejects_out_of_range(row, col):
    with pytest.raises(InvalidMove):
        apply_move(new_board(), row, col, SYMBOL_X)


def test_apply_move_rejects_non_int_coordinates():
    with pytest.raises(InvalidMove):
        apply_move(new_board(), '1', 1, SYMBOL_X)
    with pytest.raises(InvalidMove):
        apply_move(new_board(), True, 1, SYMBOL_X)


def test_apply_move_rejects_occupied_cell_for_every_prior_state():
    board = new_board()
    cells = list(itertools.product(range(3), range(3)))
    for i, (r, c) in enumerate(cells):
        board = apply_move(board, r, c, SYMBOL_X if i % 2 == 0 else SYMBOL_O)
        for (pr, pc) in cells[:i + 1]:
            with pytest.raises(InvalidMove):
                apply_move(board, pr, pc, SYMBOL_O)


@pytest.mark.parametrize('rows,expected', [
    (['XXX', 'OO.', '...'], SYMBOL_X),
    (['XX.', 'OOO', 'X..'], SYMBOL_O),
    (['X..', 'X.O', 'X.O'], SYMBOL_X),
    (['.O.', 'XOX', '.O.'], SYMBOL_O),
    (['X.O', '.XO', '..X'], SYMBOL_X),
    (['X.O', 'XO.', 'O..'], SYMBOL_O),
    (['XOX', 'XOO', 'OXX'], DRAW),
    (['XO.', '...', '...'], None),
    (['...', '...', '...'], None),
])
def test_detect_outcome(rows, expected):
    assert detect_outcome(_board(rows)) == expected


def test_detect_outcome_ignores_empty_lines():
    # a line of three empties must never count as a win
    board = _board(['XO.', 'OX.', '...'])
    assert detect_outcome(board) is None


def test_win_on_full_board_beats_draw():
    board = _board(['XOX', 'OXO', 'OXX'])
    assert detect_outcome(board) == SYMBOL_X
