from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

default_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
socketio = SocketIO(async_mode=None)


def allowed_origins(config) -> list:
    origins = list(default_origins)
    production_url = config.get('PRODUCTION_URL')
    if production_url:
        origins.append(production_url)
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = allowed_origins(flask_app.config)
    CORS(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    from tiltboard.services.session import EXTENSION_KEY, SessionEngine
    from tiltboard.services.session.timers import ManualScheduler, SocketIOScheduler

    # Timers only fire on demand under test unless explicitly enabled
    if flask_app.config.get('TESTING') and not flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        scheduler = ManualScheduler()
    else:
        scheduler = SocketIOScheduler(socketio, logger=flask_app.logger)
    engine = SessionEngine(socketio, scheduler, config=flask_app.config, logger=flask_app.logger)
    flask_app.extensions[EXTENSION_KEY] = engine
    engine.reaper.start()

    from tiltboard.main import main
    flask_app.register_blueprint(main)

    from tiltboard.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    # Importing here ensures the handlers bind to the initialized socketio instance
    from tiltboard.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
