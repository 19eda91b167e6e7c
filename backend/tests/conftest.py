import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Ensure the backend root (containing the `cheetahtype` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from cheetahtype import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['http://localhost:3000']
    LEADERBOARD_DEFAULT_LIMIT = 50
    LEADERBOARD_MAX_LIMIT = 100
    LEADERBOARD_DEFAULT_PERIOD = '30d'
    HISTORY_DEFAULT_LIMIT = 20
    HISTORY_MAX_LIMIT = 100
    HISTORY_COUNT_APPLIES_FILTERS = True
    CHARACTER_ANALYTICS_DEFAULT_LIMIT = 100
    SESSION_ANALYTICS_TTL_SEC = 60


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import cheetahtype.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_user(flask_app):
    from cheetahtype.models import User

    def _make(uid='uid-alice', email='alice@example.com', display_name='alice'):
        user = User(firebase_uid=uid, email=email, display_name=display_name)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def make_test(flask_app):
    """Insert a TypingTest row directly, bypassing request validation."""
    from cheetahtype.models import TypingTest

    def _make(user, wpm=60.0, accuracy=95.0, test_mode='time', time_limit=30,
              total_characters=300, incorrect_characters=15, actual_duration=30,
              created_at=None, ago=None, **extra):
        if created_at is None:
            created_at = datetime.now(timezone.utc) - (ago or timedelta(0))
        test = TypingTest(
            user_id=user.id,
            wpm=wpm,
            accuracy=accuracy,
            test_mode=test_mode,
            time_limit=time_limit,
            total_characters=total_characters,
            correct_characters=total_characters - incorrect_characters,
            incorrect_characters=incorrect_characters,
            actual_duration=actual_duration,
            created_at=created_at,
            **extra,
        )
        db.session.add(test)
        db.session.commit()
        return test

    return _make
