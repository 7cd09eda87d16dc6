class GameError(Exception):
    """Base class for request-scoped game errors.

    The message is what gets reported back to the requesting connection.
    """
    message = 'Game error'

    def __init__(self, message=None):
        super().__init__(message or self.message)

    def __str__(self):
        return self.args[0]


class GameNotFound(GameError):
    message = 'Game not found'


class GameFull(GameError):
    message = 'Game is full'


class AlreadyJoined(GameError):
    message = 'You are already in this game'


class PlayerNotFound(GameError):
    message = 'You are not a player in this game'


class NotYourTurn(GameError):
    message = 'Not your turn'


class GameOver(GameError):
    message = 'Game is over'


class InvalidMove(GameError):
    message = 'Invalid move'


class NotInGame(GameError):
    message = 'You are not in this game'
