import os
import random
import sys

import pytest

# Ensure the backend root (containing the `doodle` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from doodle.game.directory import RoomDirectory
from doodle.game.models import RoomSettings
from doodle.game.registry import PlayerRegistry
from doodle.game.service import SessionGateway
from doodle.game.timers import TimerHandle
from doodle.game.words import FixedWordList
from doodle.server import create_app


class ManualScheduler:
    """Deterministic stand-in for the Socket.IO scheduler; time only moves on advance()."""

    def __init__(self):
        self.now = 0.0
        self._seq = 0
        self._pending = []

    def call_later(self, delay, callback, *args):
        handle = TimerHandle(callback, args)
        self._seq += 1
        self._pending.append((self.now + delay, self._seq, handle))
        return handle

    @property
    def pending(self):
        return [h for _, _, h in self._pending if h.pending]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [item for item in self._pending if item[0] <= target and item[2].pending]
            if not due:
                break
            item = min(due, key=lambda i: (i[0], i[1]))
            self._pending.remove(item)
            self.now = item[0]
            item[2].run()
        self._pending = [item for item in self._pending if item[2].pending]
        self.now = target


class RecordingTransport:
    def __init__(self):
        self.sent = []
        self.groups = {}

    def send(self, connection_id, event, payload):
        self.sent.append(('send', connection_id, event, payload))

    def broadcast(self, group, event, payload, skip=()):
        self.sent.append(('broadcast', group, event, payload, tuple(skip)))

    def join(self, connection_id, group):
        self.groups.setdefault(group, set()).add(connection_id)

    def leave(self, connection_id, group):
        self.groups.get(group, set()).discard(connection_id)

    def clear(self):
        self.sent.clear()


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    ROOM_CAPACITY = 3
    MAX_ROUNDS = 3
    MIN_PLAYERS = 2
    TURN_DURATION_SEC = 60
    GRACE_DELAY_SEC = 2
    GUESS_POINTS = 100
    DRAW_POINTS = 50
    MAX_NAME_LENGTH = 20
    MAX_MESSAGE_LENGTH = 200
    WORDS_FILE = ''


class LiveTimerConfig(TestConfig):
    TURN_DURATION_SEC = 1
    GRACE_DELAY_SEC = 0.1


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def words():
    return FixedWordList(['cat'])


@pytest.fixture()
def registry():
    return PlayerRegistry(rng=random.Random(7))


@pytest.fixture()
def directory(registry, words, scheduler):
    rooms = RoomDirectory(registry, words=words, scheduler=scheduler, settings=RoomSettings())
    yield rooms
    rooms.close()


@pytest.fixture()
def published(directory):
    """Every (room id, event) the directory relays."""
    seen = []
    directory.subscribe(lambda room, event: seen.append((room.id, event)))
    return seen


@pytest.fixture()
def make_room(directory, registry):
    def _make(*names, name='Test room'):
        room = directory.create(name)
        for n in names:
            room.add_member(registry.register(n.lower(), n))
        return room
    return _make


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def gateway(registry, directory, transport):
    gw = SessionGateway(registry, directory, transport)
    yield gw
    gw.shutdown()


@pytest.fixture()
def flask_app(scheduler, words):
    app, _ = create_app(TestConfig, scheduler=scheduler, words=words)
    yield app
    app.extensions['doodle'].shutdown()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    socketio = flask_app.extensions['socketio']
    clients = []

    def _connect():
        c = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(c)
        return c

    yield _connect
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass


@pytest.fixture()
def live_app(words):
    """App wired to the real Socket.IO background-task scheduler."""
    app, _ = create_app(LiveTimerConfig, words=words)
    yield app
    app.extensions['doodle'].shutdown()
