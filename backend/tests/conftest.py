import os
import sys
import pytest

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from trivia import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = ['http://localhost:5173']
    DEFAULT_QUESTION_COUNT = 10
    MAX_QUESTION_COUNT = 50
    DEFAULT_DIFFICULTY = 2
    RECENT_WINDOW_SIZE = 20
    LEADERBOARD_LIMIT = 50
    WEEKLY_WINDOW_DAYS = 7


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    # Requests push their own app context so Flask-Login's per-context user
    # cache doesn't leak between test clients; only setup runs in one here.
    with application.app_context():
        # Ensure models are imported so tables are created
        import trivia.models  # noqa: F401
        db.create_all()
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_user(flask_app):
    """Create a user row directly; returns its id."""
    from trivia.models import User

    def _make(username, points=0, is_admin=False, **fields):
        with flask_app.app_context():
            user = User(username=username, email=f'{username}@example.com', points=points, is_admin=is_admin, **fields)
            user.set_password('password')
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture()
def login_client(flask_app, make_user):
    """Create a user and return (test client holding its session, user id)."""
    def _login(username, **fields):
        user_id = make_user(username, **fields)
        c = flask_app.test_client()
        res = c.post('/api/auth/login', json={'username': username, 'password': 'password'})
        assert res.status_code == 200
        return c, user_id
    return _login


@pytest.fixture()
def add_questions(flask_app):
    """Insert questions and return their ids; answer 0 is right by default."""
    from trivia.models import Question

    def _add(n, category='Shonen', difficulty=1, correct_index=0):
        with flask_app.app_context():
            rows = []
            for i in range(n):
                q = Question(
                    prompt=f'{category} question {difficulty}-{i}',
                    choices=['a', 'b', 'c', 'd'],
                    correct_index=correct_index,
                    category=category,
                    difficulty=difficulty,
                )
                db.session.add(q)
                rows.append(q)
            db.session.commit()
            return [q.id for q in rows]
    return _add


@pytest.fixture()
def get_user(flask_app):
    """Fetch a fresh snapshot of a user's counters as a dict."""
    from trivia.models import User

    def _get(user_id):
        with flask_app.app_context():
            u = db.session.get(User, user_id)
            return {
                'points': u.points,
                'total_answered': u.total_answered,
                'correct_answered': u.correct_answered,
                'wins': u.wins,
                'losses': u.losses,
                'recent_answers': list(u.recent_answers or []),
                'preferred_difficulty': u.preferred_difficulty,
            }
    return _get
