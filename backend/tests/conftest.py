import os
import sys
import random
import pytest

# Ensure the backend root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bingo import create_app, db
from bingo.services.game import Session

HOST_KEY = 'test-host-key'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    HOST_KEY = HOST_KEY
    BCRYPT_LOG_ROUNDS = 4
    PHRASES_FILE = None
    SCORECARD_POOL_TARGET = 20
    MAX_FULL_CARD_WINNERS = 3
    PREVIEW_DEFAULT_COUNT = 6
    MAX_PREVIEW_COUNT = 20
    MAX_DISPLAY_NAME_LENGTH = 40
    HOST_DEBOUNCE_MS = 0
    CORS_ORIGINS = ['http://localhost:3000']
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def phrases():
    return [f'Phrase {i}' for i in range(30)]


@pytest.fixture()
def session(phrases):
    s = Session(phrases, rng=random.Random(1234))
    s.reset(drop_players=True)
    return s


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        import bingo.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def host_headers():
    return {'X-Host-Key': HOST_KEY}
