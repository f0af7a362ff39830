import argparse
import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config, config
from tijara_server.repository.mongo_helper import MongoDatabase
from tijara_server.routes import ALL_BLUEPRINTS
from tijara_server.security.authentication import AuthSecurity
from tijara_server.services.container import ServiceContainer
from tijara_server.websocket.hub import WebSocketHub

logger = logging.getLogger(__name__)


def configure_auth(settings: Config):
    """Configure AuthSecurity from settings; JWT_SECRET is required."""
    settings.validate_required()
    AuthSecurity.configure(
        secret_key=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def create_app(settings: Optional[Config] = None, database: Optional[MongoDatabase] = None) -> Flask:
    """Application factory used by server.py and tests.

    Builds the persistence handle (unless one is passed in), the Socket.IO
    server with its hub, and the service container, then registers all
    blueprints. The container is reachable as `app.extensions['tijara']`.
    """
    settings = settings or config
    configure_auth(settings)

    app = Flask(__name__)
    app.config['DEBUG'] = settings.DEBUG
    CORS(app, origins=settings.CORS_ORIGINS_LIST)

    if database is None:
        database = MongoDatabase.from_config(settings)
    database.init()

    socketio = SocketIO(
        app,
        async_mode='threading',
        cors_allowed_origins=settings.CORS_ORIGINS_LIST if settings.CORS_ORIGINS != '*' else '*',
        ping_timeout=settings.SOCKETIO_PING_TIMEOUT,
        ping_interval=settings.SOCKETIO_PING_INTERVAL,
    )
    hub = WebSocketHub()
    hub.init_app(app, socketio)

    app.extensions['tijara'] = ServiceContainer(database, settings, hub=hub)

    for bp in ALL_BLUEPRINTS:
        app.register_blueprint(bp)

    return app


def parse_args():
    """Parse simple CLI arguments for running the server."""
    parser = argparse.ArgumentParser(description='Run the Tijara marketplace backend server')
    parser.add_argument('--port', type=int, default=config.PORT, help='TCP port to bind (default: 5000 or PORT env)')
    parser.add_argument('--host', default='0.0.0.0', help='Interface to bind (default: 0.0.0.0)')
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    app = create_app(config)
    services = app.extensions['tijara']
    try:
        logger.info('Starting %s (%s) with Socket.IO on port %s', config.APP_NAME, config.ENV, args.port)
        services.hub.socketio.run(app, host=args.host, port=args.port, debug=config.DEBUG, allow_unsafe_werkzeug=True)
    finally:
        services.database.close()


if __name__ == "__main__":
    main()
