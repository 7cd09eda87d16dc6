from flask import Blueprint, jsonify, current_app

from tictactoe.errors import GameError, GameNotFound, GameFull
from tictactoe.services.games.registry import SessionRegistry


games = Blueprint('games', __name__)


def _registry() -> SessionRegistry:
    return current_app.extensions['session_registry']


@games.route('/create', methods=['POST'])
def create_game():
    try:
        game_id = _registry().create_session()
    except Exception:
        current_app.logger.exception("[create] failed")
        return jsonify({'success': False, 'error': 'Failed to create game'}), 500
    return jsonify({'success': True, 'gameId': game_id})


@games.route('/join/<string:game_id>', methods=['POST'])
def join_game(game_id):
    """
    Pre-checks that a game exists and has a free seat. The actual join
    happens over the socket connection.
    """
    try:
        session = _registry().get(game_id)
        if len(session.players) >= 2:
            raise GameFull()
    except GameNotFound as exc:
        return jsonify({'success': False, 'error': str(exc)}), 404
    except GameError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 400
    except Exception:
        current_app.logger.exception(f"[join-check] game={game_id} failed")
        return jsonify({'success': False, 'error': 'Failed to join game'}), 500
    return jsonify({'success': True, 'gameId': session.id})


@games.route('/<string:game_id>/state', methods=['GET'])
def get_game_state(game_id):
    """
    Returns a snapshot of the game's board, players and status.
    """
    try:
        session = _registry().get(game_id)
    except GameNotFound as exc:
        return jsonify({'success': False, 'error': str(exc)}), 404
    return jsonify({'success': True, 'game': session.to_dict()})
