import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO ("" picks eventlet or threading depending on platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    ROOM_CAPACITY = int(os.environ.get("ROOM_CAPACITY", "8"))
    MAX_ROUNDS = int(os.environ.get("MAX_ROUNDS", "3"))
    MIN_PLAYERS = int(os.environ.get("MIN_PLAYERS", "2"))

    # Turns
    TURN_DURATION_SEC = int(os.environ.get("TURN_DURATION_SEC", "60"))
    GRACE_DELAY_SEC = float(os.environ.get("GRACE_DELAY_SEC", "2"))

    # Scoring
    GUESS_POINTS = int(os.environ.get("GUESS_POINTS", "100"))
    DRAW_POINTS = int(os.environ.get("DRAW_POINTS", "50"))

    # Input limits
    MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", "20"))
    MAX_MESSAGE_LENGTH = int(os.environ.get("MAX_MESSAGE_LENGTH", "200"))

    # Optional dictionary file, one word per line ("word" or "word,weight")
    WORDS_FILE = os.environ.get("WORDS_FILE", "")
