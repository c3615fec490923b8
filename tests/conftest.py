"""
Pytest configuration and fixtures for testing the couple games API.
"""

import os
import sys
from urllib.parse import urlsplit

import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ['JWT_SECRET_KEY'] = 'test-secret-key-for-testing'

from couplegames import create_app, db
from couplegames.constants.roles import Role
from couplegames.constants.statuses import GameInstanceStatus
from couplegames.models import Center, Game, GameInstance, User
from couplegames.utils.auth import issue_session_token

fake = Faker()


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


def _create_user(password='testpassword123', roles=(Role.USER,), **overrides):
    """Helper to create a user with sensible defaults.

    Pass ``password=None`` for a Google-only account.
    """
    data = {
        'email': fake.unique.email().lower(),
        'name': fake.name(),
        'phone': '050-1234567',
        'is_active': True,
    }
    data.update(overrides)
    user = User(**data)
    user.role_set = roles
    if password:
        user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return {
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'google_id': user.google_id,
        'password': password,
    }


def _token_for(user_id):
    return issue_session_token(db.session.get(User, user_id))


def _headers_for(user_id):
    return {'Authorization': f'Bearer {_token_for(user_id)}'}


@pytest.fixture
def make_user(db_session):
    """Factory fixture: ``make_user(roles=[Role.ADMIN], ...)``."""
    return _create_user


@pytest.fixture
def headers_for(db_session):
    """Factory fixture turning a user id into bearer auth headers."""
    return _headers_for


@pytest.fixture
def test_user(db_session):
    return _create_user()


@pytest.fixture
def auth_headers(test_user):
    return _headers_for(test_user['id'])


@pytest.fixture
def google_user(db_session):
    """A complete, active Google-only account."""
    return _create_user(password=None, google_id=fake.uuid4())


@pytest.fixture
def admin_user(db_session):
    return _create_user(roles=(Role.ADMIN, Role.USER))


@pytest.fixture
def admin_headers(admin_user):
    return _headers_for(admin_user['id'])


@pytest.fixture
def concurrent_signup(db_session, monkeypatch):
    """Commit a competing user right before the next User is added to the session.

    This lets a request pass its uniqueness pre-check and then hit the
    database constraint on commit, as when another request wins the race.
    """
    def install(**columns):
        original_add = db.session.add

        def add_after_competitor(instance, *args, **kwargs):
            if isinstance(instance, User):
                monkeypatch.setattr(db.session, 'add', original_add)
                db.session.execute(
                    User.__table__.insert().values(name='מתחרה', roles=['USER'], **columns)
                )
                db.session.commit()
            return original_add(instance, *args, **kwargs)

        monkeypatch.setattr(db.session, 'add', add_after_competitor)
    return install


@pytest.fixture
def catalog(db_session):
    """A center with a coordinator, a super-coordinator and two games.

    The first copy is available, the second is borrowed.
    """
    coordinator = _create_user(roles=(Role.CENTER_COORDINATOR,))
    super_coordinator = _create_user(roles=(Role.SUPER_COORDINATOR,))
    center = Center(
        name='מוקד ירושלים',
        city='ירושלים',
        area='JERUSALEM',
        coordinator_id=coordinator['id'],
        super_coordinator_id=super_coordinator['id'],
    )
    other_center = Center(name='מוקד חיפה', city='חיפה', area='NORTH')
    first_game = Game(name='כרטישיח', category='COMMUNICATION', target_audience='MARRIED')
    second_game = Game(name='תכירותי', category='FUN', target_audience='SINGLES')
    db.session.add_all([center, other_center, first_game, second_game])
    db.session.flush()

    available = GameInstance(game_id=first_game.id, center_id=center.id)
    borrowed = GameInstance(
        game_id=second_game.id, center_id=center.id, status=GameInstanceStatus.BORROWED.value,
    )
    elsewhere = GameInstance(game_id=first_game.id, center_id=other_center.id)
    db.session.add_all([available, borrowed, elsewhere])
    db.session.commit()

    return {
        'coordinator': coordinator,
        'super_coordinator': super_coordinator,
        'center_id': center.id,
        'other_center_id': other_center.id,
        'games': [first_game.id, second_game.id],
        'available_id': available.id,
        'borrowed_id': borrowed.id,
        'elsewhere_id': elsewhere.id,
    }


class _TestClientResponse:
    """Just enough of ``requests.Response`` for ApiClient."""

    def __init__(self, response):
        self.status_code = response.status_code
        self._json = response.get_json(silent=True)

    def json(self):
        if self._json is None:
            raise ValueError('No JSON body')
        return self._json


class FlaskTransport:
    """Stands in for ``requests.Session``, routing calls to the Flask test client."""

    def __init__(self, flask_client):
        self.flask_client = flask_client
        self.calls = []

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method, path))
        response = self.flask_client.open(
            path, method=method, json=json, query_string=params, headers=headers,
        )
        return _TestClientResponse(response)


@pytest.fixture
def transport(client):
    return FlaskTransport(client)
