from __future__ import annotations

import logging
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.directory import RoomDirectory
from .game.models import RoomSettings
from .game.registry import PlayerRegistry
from .game.service import SessionGateway
from .game.timers import Scheduler, SocketIOScheduler
from .game.words import DEFAULT_WORDS, FixedWordList, WordSupply, load_word_file
from .realtime.handlers import register_socketio_handlers
from .realtime.transport import SocketIOTransport
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp


logger = logging.getLogger(__name__)


def _async_mode(configured: str) -> str:
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def _word_supply(app: Flask) -> WordSupply:
    path = app.config.get("WORDS_FILE", "")
    if path:
        logger.info("Loading words from %s", path)
        return load_word_file(path)
    return FixedWordList(DEFAULT_WORDS)


def create_app(
    config_class: type = Config,
    *,
    scheduler: Scheduler | None = None,
    words: WordSupply | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = _async_mode(app.config.get("SOCKETIO_ASYNC_MODE", ""))
    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )
    logger.info("Socket.IO async_mode=%s", async_mode)

    players = PlayerRegistry(max_name_length=app.config.get("MAX_NAME_LENGTH", 20))
    rooms = RoomDirectory(
        players,
        words=words or _word_supply(app),
        scheduler=scheduler or SocketIOScheduler(socketio),
        settings=RoomSettings.from_config(app.config),
    )
    gateway = SessionGateway(
        players,
        rooms,
        SocketIOTransport(socketio),
        max_message_length=app.config.get("MAX_MESSAGE_LENGTH", 200),
    )
    app.extensions["doodle"] = gateway

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, gateway)

    return app, socketio
