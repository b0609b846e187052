import logging
import os

try:
    from backend.doodle.server import create_app
except ImportError:  # pragma: no cover
    from doodle.server import create_app

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())

app, socketio = create_app()
