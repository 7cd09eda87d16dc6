"""Board engine: pure functions over a 3x3 grid.

A board is a list of three rows, each a list of three cells. A cell is
``None`` when empty or one of the two symbols.
"""
from typing import List, Optional

from .errors import InvalidMove

SIZE = 3
SYMBOL_X = 'X'
SYMBOL_O = 'O'
SYMBOLS = (SYMBOL_X, SYMBOL_O)
DRAW = 'draw'

Board = List[List[Optional[str]]]


def new_board() -> Board:
    return [[None] * SIZE for _ in range(SIZE)]


def other_symbol(symbol: str) -> str:
    return SYMBOL_O if symbol == SYMBOL_X else SYMBOL_X


def apply_move(board: Board, row: int, col: int, symbol: str) -> Board:
    """Return a copy of ``board`` with ``symbol`` placed at (row, col).

    Raises InvalidMove when the cell is out of range or already taken.
    """
    if symbol not in SYMBOLS:
        raise InvalidMove()
    # bool is an int subclass; True/False are not coordinates
    if any(isinstance(v, bool) or not isinstance(v, int) for v in (row, col)):
        raise InvalidMove()
    if not (0 <= row < SIZE and 0 <= col < SIZE):
        raise InvalidMove()
    if board[row][col] is not None:
        raise InvalidMove()
    updated = [list(r) for r in board]
    updated[row][col] = symbol
    return updated


def _lines(board: Board):
    for i in range(SIZE):
        yield [board[i][c] for c in range(SIZE)]
    for i in range(SIZE):
        yield [board[r][i] for r in range(SIZE)]
    yield [board[i][i] for i in range(SIZE)]
    yield [board[i][SIZE - 1 - i] for i in range(SIZE)]


def detect_outcome(board: Board) -> Optional[str]:
    """Return the winning symbol, ``DRAW`` for a full board, or None."""
    for line in _lines(board):
        first = line[0]
        if first is not None and all(cell == first for cell in line):
            return first
    if all(cell is not None for row in board for cell in row):
        return DRAW
    return None
