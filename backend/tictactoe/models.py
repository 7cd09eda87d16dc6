import copy
import random
import string
import time

from .board import SYMBOL_X, SYMBOL_O, new_board, apply_move, detect_outcome, other_symbol
from .errors import GameFull, AlreadyJoined, PlayerNotFound, NotYourTurn, GameOver

STATUS_WAITING = 'waiting'
STATUS_IN_PROGRESS = 'in_progress'
STATUS_FINISHED = 'finished'

MAX_PLAYERS = 2


def generate_game_id(length=6):
    """Generate a short, case-insensitive game id. Uniqueness is checked by the caller."""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class Player:
    def __init__(self, connection_id, name, symbol):
        self.connection_id = connection_id
        self.name = name
        self.symbol = symbol

    def to_dict(self):
        return {
            'name': self.name,
            'symbol': self.symbol,
        }


class Session:
    """State of one two-player game.

    Not thread-safe on its own; every mutation goes through the
    SessionRegistry, which holds the per-session lock.
    """

    def __init__(self, game_id, created_at=None):
        self.id = game_id
        self.board = new_board()
        self.players = []
        self.current_turn = None
        self.status = STATUS_WAITING
        self.winner = None
        self.created_at = time.time() if created_at is None else created_at

    @property
    def is_game_over(self):
        return self.status == STATUS_FINISHED

    def find_player(self, connection_id):
        for p in self.players:
            if p.connection_id == connection_id:
                return p
        return None

    def add_player(self, connection_id, name):
        if len(self.players) >= MAX_PLAYERS:
            raise GameFull()
        if self.find_player(connection_id):
            raise AlreadyJoined()
        # Take whichever symbol the remaining player does not hold
        held = {p.symbol for p in self.players}
        symbol = SYMBOL_X if SYMBOL_X not in held else SYMBOL_O
        self.players.append(Player(connection_id, name, symbol))
        # A rejoin into a running or finished game keeps its turn and status
        if len(self.players) == MAX_PLAYERS and self.status == STATUS_WAITING:
            self.current_turn = SYMBOL_X
            self.status = STATUS_IN_PROGRESS
        return symbol

    def remove_player(self, connection_id):
        player = self.find_player(connection_id)
        if player:
            self.players.remove(player)
        return player

    def move(self, connection_id, row, col):
        player = self.find_player(connection_id)
        if not player:
            raise PlayerNotFound()
        if player.symbol != self.current_turn:
            raise NotYourTurn()
        if self.status == STATUS_FINISHED:
            raise GameOver()
        self.board = apply_move(self.board, row, col, player.symbol)
        outcome = detect_outcome(self.board)
        if outcome is not None:
            self.status = STATUS_FINISHED
            self.winner = outcome
        # The turn flips on the final move too; clients see it in gameUpdate.
        self.current_turn = other_symbol(self.current_turn)
        return outcome

    def snapshot(self):
        return copy.deepcopy(self)

    def to_update(self):
        return {
            'board': self.board,
            'currentPlayer': self.current_turn,
            'isGameOver': self.is_game_over,
            'winner': self.winner,
        }

    def to_start(self):
        return {
            'board': self.board,
            'currentPlayer': self.current_turn,
            'players': [p.to_dict() for p in self.players],
        }

    def to_dict(self):
        return {
            'id': self.id,
            'board': self.board,
            'players': [p.to_dict() for p in self.players],
            'currentPlayer': self.current_turn,
            'status': self.status,
            'isGameOver': self.is_game_over,
            'winner': self.winner,
            'createdAt': self.created_at,
        }
