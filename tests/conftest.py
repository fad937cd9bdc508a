import os
import sys
import pytest

# Ensure the project root (containing `config` and the `quizhub` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from quizhub import create_app, socketio
from quizhub.services.rooms import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    PORT = 4000
    CORS_ORIGINS = ['http://localhost:5173']
    SOCKETIO_NAMESPACE = '/'
    DEFAULT_ROOM_CAPACITY = 2
    ROOM_CODE_LENGTH = 6


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['room_registry']


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for Socket.IO test clients; each one is a separate session."""
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


@pytest.fixture()
def rooms():
    """A bare registry for service-level tests, no transport involved."""
    return RoomRegistry(default_capacity=2, code_length=6)


@pytest.fixture()
def received():
    """Return the payloads of every event called ``name`` a client has received."""

    def _received(test_client, name):
        return [
            pkt['args'][0] if pkt['args'] else None
            for pkt in test_client.get_received()
            if pkt['name'] == name
        ]

    return _received
