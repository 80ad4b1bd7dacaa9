import os
import sys
import threading
from types import SimpleNamespace

import pytest

# Ensure the backend root (containing the `tiltboard` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tiltboard import create_app, socketio
from tiltboard.services.session import EXTENSION_KEY
from tiltboard.services.session.elements import ElementStore
from tiltboard.services.session.physics import PhysicsEngine
from tiltboard.services.session.presence import PresenceTracker
from tiltboard.services.session.reaper import SessionReaper
from tiltboard.services.session.registry import SessionRegistry
from tiltboard.services.session.timers import ManualScheduler


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    PRODUCTION_URL = None
    MAX_PARTICIPANTS = 10
    TICK_INTERVAL_MS = 16
    RESPAWN_DELAY_SEC = 2.0
    SESSION_TTL_SEC = 24 * 60 * 60
    REAPER_INTERVAL_SEC = 60 * 60
    MOVE_THRESHOLD = 1.0
    SOCKETIO_NAMESPACE = '/'


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingRouter:
    """Stands in for BroadcastRouter when components run without a server."""

    def __init__(self):
        self.sent = []
        self.dropped = []

    def to_room(self, room_id, event, payload, skip_sid=None):
        self.sent.append((room_id, event, payload, skip_sid))

    def to_sender(self, event, payload, sid=None):
        self.sent.append((sid, event, payload, None))

    def drop_room(self, room_id):
        self.dropped.append(room_id)

    def events(self, name, room_id=None):
        return [
            payload for rid, event, payload, _ in self.sent
            if event == name and (room_id is None or rid == room_id)
        ]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def engine(flask_app):
    return flask_app.extensions[EXTENSION_KEY]


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def board():
    clock = FakeClock()
    scheduler = ManualScheduler()
    router = RecordingRouter()
    lock = threading.RLock()
    physics = PhysicsEngine(router, scheduler, lock=lock, tick_interval=0.016, respawn_delay=2.0, clock=clock)
    registry = SessionRegistry(physics, max_participants=10, clock=clock)
    return SimpleNamespace(
        clock=clock,
        scheduler=scheduler,
        router=router,
        lock=lock,
        physics=physics,
        registry=registry,
        presence=PresenceTracker(registry, move_threshold=1.0),
        elements=ElementStore(registry, router),
        reaper=SessionReaper(registry, router, scheduler, ttl=24 * 60 * 60, interval=60 * 60, lock=lock),
    )
