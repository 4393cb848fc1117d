from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from buzzer.config import Config

cors = CORS()
socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    if not value or value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    cors.init_app(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Room state lives with the app instance so each app (and each test)
    # gets an isolated registry
    from buzzer.services.rooms import RoomRegistry, SessionBinding
    flask_app.extensions['room_registry'] = RoomRegistry(
        code_length=flask_app.config.get('ROOM_CODE_LENGTH', 5),
        code_alphabet=flask_app.config.get('ROOM_CODE_ALPHABET', 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'),
    )
    flask_app.extensions['room_sessions'] = SessionBinding()

    from buzzer.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from buzzer.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    flask_app.logger.info(f"[startup] namespace={flask_app.config.get('SOCKETIO_NAMESPACE', '/')} origins={allowed_origins}")
    return flask_app
