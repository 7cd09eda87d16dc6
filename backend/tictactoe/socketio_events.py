import functools
import threading
from typing import Dict, Set

from flask import current_app, request
from flask_socketio import join_room, leave_room, emit

from tictactoe import socketio
from tictactoe.errors import GameError, InvalidMove, NotInGame
from tictactoe.services.games.registry import SessionRegistry, normalize_game_id

PLAYER_LEFT_MESSAGE = 'Opponent has left the game'


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _coord(value):
    if isinstance(value, bool):
        raise InvalidMove()
    if isinstance(value, int):
        return value
    # JSON clients may send 1.0 for 1
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise InvalidMove()


def _event_boundary(failure_message: str):
    """Report game errors to the sender; log anything else and send a generic failure."""
    def decorator(handler):
        @functools.wraps(handler)
        def wrapper(*args, **kwargs):
            try:
                return handler(*args, **kwargs)
            except GameError as exc:
                current_app.logger.info(f"[{handler.__name__}] sid={_get_sid()} rejected: {exc}")
                emit('error', str(exc))
            except Exception:
                current_app.logger.exception(f"[{handler.__name__}] sid={_get_sid()} failed")
                emit('error', failure_message)
        return wrapper
    return decorator


class RealtimeGateway:
    """Maps Socket.IO events onto SessionRegistry operations and room broadcasts.

    The only state kept here is which game ids each connection has joined,
    so a disconnect can clean up after it.
    """

    def __init__(self, registry: SessionRegistry):
        self.registry = registry
        self._sid_games: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def games_for(self, sid: str) -> Set[str]:
        with self._lock:
            return set(self._sid_games.get(sid, ()))

    def _associate(self, sid: str, game_id: str) -> None:
        with self._lock:
            self._sid_games.setdefault(sid, set()).add(game_id)

    def _dissociate(self, sid: str, game_id: str) -> None:
        with self._lock:
            games = self._sid_games.get(sid)
            if games is not None:
                games.discard(game_id)
                if not games:
                    del self._sid_games[sid]

    def handle_connect(self, auth=None):
        current_app.logger.info(f"[connect] sid={_get_sid()}")

    @_event_boundary('Failed to join game')
    def handle_join_game(self, data):
        data = data or {}
        sid = _get_sid()
        game_id = normalize_game_id(data.get('gameId'))
        player_name = data.get('playerName') or ''
        current_app.logger.info(f"[join] sid={sid} player={player_name!r} game={game_id}")

        symbol, session = self.registry.join_session(game_id, sid, player_name)
        join_room(game_id)
        self._associate(sid, game_id)
        current_app.logger.info(f"[join] game={game_id} sid={sid} symbol={symbol} players={len(session.players)}")

        emit('playerAssigned', {'symbol': symbol})
        if len(session.players) == 2:
            emit('gameStart', session.to_start(), to=game_id)
        emit('playerJoined', {'gameId': game_id, 'playerName': player_name}, to=game_id, include_self=False)

    @_event_boundary('Failed to make move')
    def handle_make_move(self, data):
        data = data or {}
        sid = _get_sid()
        game_id = normalize_game_id(data.get('gameId'))
        row, col = _coord(data.get('row')), _coord(data.get('col'))

        session = self.registry.make_move(game_id, sid, row, col)
        current_app.logger.info(
            f"[move] game={game_id} sid={sid} cell=({row},{col}) next={session.current_turn} winner={session.winner}"
        )
        emit('gameUpdate', session.to_update(), to=game_id)

    @_event_boundary('Failed to leave game')
    def handle_leave_game(self, data):
        data = data or {}
        sid = _get_sid()
        game_id = normalize_game_id(data.get('gameId'))
        if game_id not in self.games_for(sid):
            raise NotInGame()
        self._leave(sid, game_id)
        leave_room(game_id)
        emit('left', {'gameId': game_id})

    def handle_disconnect(self, reason=None):
        sid = _get_sid()
        current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
        with self._lock:
            games = self._sid_games.pop(sid, set())
        for game_id in games:
            try:
                self._leave(sid, game_id)
            except Exception:
                current_app.logger.exception(f"[disconnect] cleanup failed sid={sid} game={game_id}")

    def _leave(self, sid: str, game_id: str) -> None:
        self._dissociate(sid, game_id)
        try:
            remaining = self.registry.remove_player(game_id, sid)
        except GameError:
            # Already swept or deleted
            return
        emit('playerLeft', {'message': PLAYER_LEFT_MESSAGE}, to=game_id, include_self=False)
        if remaining == 0:
            self.registry.delete_if_empty(game_id)
        current_app.logger.info(f"[leave] game={game_id} sid={sid} remaining={remaining}")


def register_socketio_handlers(gateway: RealtimeGateway, namespace: str = '/') -> None:
    """Register the gateway's Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', gateway.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', gateway.handle_disconnect, namespace=namespace)
    socketio.on_event('joinGame', gateway.handle_join_game, namespace=namespace)
    socketio.on_event('makeMove', gateway.handle_make_move, namespace=namespace)
    socketio.on_event('leaveGame', gateway.handle_leave_game, namespace=namespace)
