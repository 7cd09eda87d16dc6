from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def _parse_origins(value):
    if isinstance(value, (list, tuple)):
        return list(value)
    origins = [o.strip() for o in (value or '*').split(',') if o.strip()]
    return '*' if origins == ['*'] or not origins else origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel('INFO')

    allowed_origins = _parse_origins(flask_app.config.get('CORS_ORIGINS'))
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        ping_timeout=flask_app.config.get('SOCKETIO_PING_TIMEOUT', 60),
        ping_interval=flask_app.config.get('SOCKETIO_PING_INTERVAL', 25),
    )

    # One registry per app so independent apps never share sessions
    from tictactoe.services.games import SessionRegistry, start_expiry_sweeper
    registry = SessionRegistry(
        id_length=flask_app.config.get('GAME_ID_LENGTH', 6),
        logger=flask_app.logger,
    )
    flask_app.extensions['session_registry'] = registry

    from tictactoe.main import main
    flask_app.register_blueprint(main)

    from tictactoe.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from tictactoe.socketio_events import RealtimeGateway, register_socketio_handlers
    gateway = RealtimeGateway(registry)
    flask_app.extensions['realtime_gateway'] = gateway
    register_socketio_handlers(gateway, namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    start_expiry_sweeper(flask_app, registry)

    @click.command('serve')
    @click.option('--host', default=None, help='Interface to bind (defaults to HOST).')
    @click.option('--port', default=None, type=int, help='Port to listen on (defaults to PORT).')
    def serve_command(host, port):
        """Runs the game server with websocket support."""
        host = host or flask_app.config['HOST']
        port = port or flask_app.config['PORT']
        click.echo(f'Server running on port {port}')
        socketio.run(flask_app, host=host, port=port, allow_unsafe_werkzeug=True)

    flask_app.cli.add_command(serve_command)

    return flask_app
