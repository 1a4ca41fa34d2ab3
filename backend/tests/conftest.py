import os
import sys
import random
import pytest

# Ensure the backend root (containing the `cardbattle` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from cardbattle import create_app, db, socketio, seed_database
from cardbattle.services.battle.damage import Element
from cardbattle.services.battle.engine import GameEngine
from cardbattle.services.battle.state import CatalogCard, PlayerEntry

NAMESPACE = '/ws'
PASSWORD = 'password123'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    SOCKETIO_NAMESPACE = NAMESPACE


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        seed_database(users=('red', 'blue'), password=PASSWORD)
    # No context is held during the test: each request and socket event
    # gets its own, so the logged-in user is not shared between clients
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def app_ctx(flask_app):
    with flask_app.app_context():
        yield flask_app


@pytest.fixture()
def store(flask_app):
    return flask_app.extensions['battle_store']


@pytest.fixture()
def deck_id_for(flask_app):
    """Id of the seeded starter deck of ``username``."""
    from cardbattle.models import Deck, User

    def _deck_id(username):
        with flask_app.app_context():
            user = User.query.filter_by(username=username).first()
            return Deck.query.filter_by(user_id=user.id).first().id
    return _deck_id


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def logged_in_client(flask_app):
    def _login(username):
        http = flask_app.test_client()
        res = http.post('/login', json={'username': username, 'password': PASSWORD})
        assert res.status_code == 200
        return http
    return _login


@pytest.fixture()
def connect_player(flask_app, logged_in_client):
    """Socket.IO test client authenticated as a seeded user."""
    opened = []

    def _connect(username):
        sio = socketio.test_client(
            flask_app,
            flask_test_client=logged_in_client(username),
            namespace=NAMESPACE,
        )
        assert sio.is_connected(NAMESPACE)
        opened.append(sio)
        return sio

    yield _connect
    for sio in opened:
        try:
            if sio.is_connected(NAMESPACE):
                sio.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


def make_cards(first_id=1, hp=50, attack=10, element=Element.NORMAL, count=10):
    return [
        CatalogCard(
            id=first_id + i,
            name=f'Card{first_id + i}',
            max_hp=hp,
            attack_power=attack,
            element=element,
            catalog_index=first_id + i,
        )
        for i in range(count)
    ]


@pytest.fixture()
def engine():
    return GameEngine(rng=random.Random(1234))


@pytest.fixture()
def started(engine):
    """An engine with room 1 started between connections 'host' and 'guest'."""
    engine.start_game(
        1, 'room-1',
        PlayerEntry('host', 1, 'alice', make_cards(1)),
        PlayerEntry('guest', 2, 'bob', make_cards(101)),
    )
    return engine
