from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

# Inbound events are dispatched one at a time so room handlers never interleave
socketio = SocketIO(async_mode=None, async_handlers=False)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Live rooms belong to this app instance, not to a module global
    from quizhub.services.rooms import RoomRegistry
    flask_app.extensions['room_registry'] = RoomRegistry(
        default_capacity=flask_app.config.get('DEFAULT_ROOM_CAPACITY', 2),
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 6),
    )

    from quizhub.routes import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from quizhub.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
