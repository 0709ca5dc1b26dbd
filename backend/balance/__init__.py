from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from balance.lobby import Lobby

socketio = SocketIO(async_mode=None)
lobby = Lobby()


def _allowed_origins(value):
    origins = [o.strip() for o in (value or '*').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    def broadcast(event, payload):
        # socketio.emit without a room reaches every connected client
        socketio.emit(event, payload, namespace=namespace)

    # A new app starts a new session; anything still pending belongs to the old one
    from balance.services.games.scheduler import cancel_all
    cancel_all()
    lobby.init_app(flask_app, emit=broadcast)

    from balance.routes import main
    flask_app.register_blueprint(main)

    from balance.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    return flask_app
