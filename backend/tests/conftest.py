import logging
import os
import random
import sys
import pytest

# Ensure the backend root (containing the `arena` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arena import create_app, db, socketio
from arena.services.room import ArenaCoordinator, ArenaSettings, MemoryStateStore
from arena.services.room.clock import FixedClock

NOW = 1_700_000_000_000


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4


class SpawnEnabledConfig(TestConfig):
    ARENA_ALLOW_CLIENT_SPAWN = 1


def _make_app(config_class):
    application = create_app(config_class)
    with application.app_context():
        import arena.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def flask_app():
    yield from _make_app(TestConfig)


@pytest.fixture()
def spawn_app():
    yield from _make_app(SpawnEnabledConfig)


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio(flask_app):
    """Factory for extra Socket.IO test clients on /ws, all disconnected at teardown."""
    created = []

    def _factory(flask_test_client=None):
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_test_client or flask_app.test_client(),
            namespace='/ws'
        )
        created.append(test_client)
        return test_client

    yield _factory
    for test_client in created:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio):
    return make_sio()


# ---- service-level fixtures ----

@pytest.fixture()
def clock():
    return FixedClock(NOW)


@pytest.fixture()
def broadcasts():
    return []


@pytest.fixture()
def store(broadcasts):
    return MemoryStateStore(
        broadcaster=lambda room_id, event, payload: broadcasts.append((room_id, event, payload)),
        logger=logging.getLogger('arena.tests'),
    )


@pytest.fixture()
def coordinator(store, clock):
    return ArenaCoordinator(
        settings=ArenaSettings(),
        store=store,
        clock=clock,
        rng=random.Random(1234),
        logger=logging.getLogger('arena.tests'),
    )
