import os

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config

socketio = SocketIO(async_mode=None)

BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def create_app(config_class=Config):
    static_folder = config_class.STATIC_FOLDER
    if not os.path.isabs(static_folder):
        static_folder = os.path.join(BACKEND_ROOT, static_folder)
    flask_app = Flask(__name__, static_folder=static_folder, static_url_path='')
    flask_app.config.from_object(config_class)

    origins = flask_app.config['CORS_ALLOWED_ORIGINS']
    CORS(flask_app, origins=origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One registry per app; handlers and routes reach it through extensions
    from numberparty.services.rooms.registry import RoomRegistry
    registry = RoomRegistry(min_players=flask_app.config['MIN_PLAYERS'])
    flask_app.extensions['room_registry'] = registry

    from numberparty.main import main
    flask_app.register_blueprint(main)

    from numberparty.socketio_events import RoomEvents, register_socketio_handlers
    events = RoomEvents(registry, namespace=flask_app.config['SOCKETIO_NAMESPACE'])
    register_socketio_handlers(events)
    flask_app.extensions['room_events'] = events

    flask_app.logger.info(
        f"[init] namespace={events.namespace} min_players={registry.min_players} static={static_folder}"
    )
    return flask_app
