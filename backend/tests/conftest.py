import os
import sys
import pytest

# Ensure the backend root (containing the `numberparty` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from numberparty import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    HOST = '127.0.0.1'
    PORT = 3000
    MIN_PLAYERS = 2
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    STATIC_FOLDER = 'public'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['room_registry']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Create connected Socket.IO test clients; all are disconnected on teardown."""
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


def join(sio_client, room_name, user_name):
    """Join a room and return the packets received in response."""
    sio_client.emit('joinRoom', {'roomName': room_name, 'userName': user_name})
    return sio_client.get_received()


def events_named(received, name):
    return [pkt for pkt in received if pkt['name'] == name]


def last_state(received):
    updates = events_named(received, 'roomUpdate')
    assert updates, f"no roomUpdate in {[pkt['name'] for pkt in received]}"
    return updates[-1]['args'][0]
