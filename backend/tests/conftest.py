import os
import sys
import pytest

# Ensure the backend root (containing the `balance` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from balance import create_app, lobby, socketio
from balance.services.games.scheduler import cancel_all


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    MIN_PLAYERS = 2
    STARTING_HEALTH = 10
    RESOLVE_DELAY_MS = 0
    ENABLE_SCHEDULER_IN_TESTS = False


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application
    cancel_all()
    lobby.reset()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Build connected Socket.IO test clients; all are disconnected on teardown."""
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass
