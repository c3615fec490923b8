"""
Tests for Google login, registration, OAuth sign-in and profile completion.
"""

import jwt
import pytest
from faker import Faker

from couplegames import db
from couplegames.constants.roles import Role
from couplegames.errors import InvalidCredentialsError
from couplegames.models import User
from couplegames.services import google_oauth
from couplegames.services.google_oauth import GoogleProfile

fake = Faker()


def _claims(token):
    return jwt.decode(token, 'test-secret-key-for-testing', algorithms=['HS256'])


@pytest.fixture
def google_credential(monkeypatch):
    """Make ``/google/session`` accept any credential as the given profile."""
    def install(profile):
        def fake_verify(credential):
            if credential != 'valid-credential':
                raise InvalidCredentialsError('שגיאה בהתחברות עם Google')
            return profile
        monkeypatch.setattr('couplegames.routes.auth.google.verify_google_credential', fake_verify)
    return install


class TestLoginGoogle:
    """Tests for POST /api/auth/login/google"""

    def test_login_success(self, client, google_user):
        response = client.post('/api/auth/login/google', json={'google_id': google_user['google_id']})

        assert response.status_code == 200
        assert response.json['data']['user']['id'] == google_user['id']
        assert response.json['data']['token']

    def test_login_accepts_camel_case_key(self, client, google_user):
        response = client.post('/api/auth/login/google', json={'googleId': google_user['google_id']})

        assert response.status_code == 200

    def test_login_unregistered(self, client, db_session):
        response = client.post('/api/auth/login/google', json={'google_id': 'unknown'})

        assert response.status_code == 404
        assert response.json['error']['message'] == 'חשבון Google זה לא רשום במערכת'

    def test_login_inactive(self, client, make_user):
        user = make_user(password=None, google_id='g-inactive', is_active=False)

        response = client.post('/api/auth/login/google', json={'google_id': user['google_id']})

        assert response.status_code == 403


class TestRegisterGoogle:
    """Tests for POST /api/auth/register/google"""

    def _payload(self, **overrides):
        payload = {
            'google_id': fake.uuid4(),
            'name': 'נועה לוי',
            'email': fake.unique.email().lower(),
            'phone': '052-7654321',
        }
        payload.update(overrides)
        return payload

    def test_register_success(self, client, db_session):
        response = client.post('/api/auth/register/google', json=self._payload())

        assert response.status_code == 200
        assert response.json['data']['roles'] == ['USER']
        assert response.json['data']['has_password'] is False
        assert response.json['data']['is_active'] is True

    def test_register_email_taken(self, client, test_user):
        response = client.post('/api/auth/register/google', json=self._payload(email=test_user['email']))

        assert response.status_code == 400
        assert response.json['error']['message'] == 'משתמש עם כתובת מייל זו כבר קיים במערכת'

    def test_register_google_id_taken(self, client, google_user):
        response = client.post(
            '/api/auth/register/google', json=self._payload(google_id=google_user['google_id']),
        )

        assert response.status_code == 400
        assert response.json['error']['message'] == 'חשבון Google זה כבר רשום במערכת'

    def test_google_id_conflict_on_commit(self, client, concurrent_signup):
        concurrent_signup(email='first@x.com', google_id='g-race')

        response = client.post(
            '/api/auth/register/google', json=self._payload(google_id='g-race', email='second@x.com'),
        )

        assert response.status_code == 400
        assert response.json['error']['message'] == 'חשבון Google זה כבר רשום במערכת'
        assert User.query.filter_by(email='second@x.com').first() is None

    def test_email_conflict_on_commit(self, client, concurrent_signup):
        concurrent_signup(email='race@x.com')

        response = client.post('/api/auth/register/google', json=self._payload(email='race@x.com'))

        assert response.status_code == 400
        assert response.json['error']['message'] == 'משתמש עם כתובת מייל זו כבר קיים במערכת'
        assert User.query.filter_by(email='race@x.com').count() == 1

    def test_register_requires_phone(self, client, db_session):
        payload = self._payload()
        del payload['phone']

        response = client.post('/api/auth/register/google', json=payload)

        assert response.status_code == 400


class TestGoogleSession:
    """Tests for POST /api/auth/google/session"""

    def test_new_account_needs_completion(self, client, db_session, google_credential):
        profile = GoogleProfile('g-new', 'new.person@gmail.com', name='אורי', email_verified=True)
        google_credential(profile)

        response = client.post('/api/auth/google/session', json={'credential': 'valid-credential'})

        assert response.status_code == 200
        data = response.json['data']
        assert data['needs_profile_completion'] is True
        claims = _claims(data['token'])
        assert claims['needs_profile_completion'] is True
        assert claims['is_active'] is False
        assert claims['roles'] == []

        user = User.query.filter_by(email='new.person@gmail.com').first()
        assert user.google_id == 'g-new'
        assert user.is_active is False
        assert user.email_verified is not None

    def test_existing_email_account_is_linked(self, client, test_user, google_credential):
        google_credential(
            GoogleProfile('g-link', test_user['email'], name=test_user['name'], email_verified=True)
        )

        response = client.post('/api/auth/google/session', json={'credential': 'valid-credential'})

        assert response.status_code == 200
        assert response.json['data']['needs_profile_completion'] is False
        assert User.query.filter_by(email=test_user['email']).first().google_id == 'g-link'

    def test_unverified_email_is_not_linked(self, client, test_user, google_credential):
        google_credential(GoogleProfile('g-link', test_user['email'], email_verified=False))

        response = client.post('/api/auth/google/session', json={'credential': 'valid-credential'})

        assert response.status_code == 400
        assert User.query.filter_by(email=test_user['email']).first().google_id is None
        assert User.query.filter_by(google_id='g-link').first() is None

    def test_account_with_other_google_id_is_not_taken_over(self, client, google_user, google_credential):
        google_credential(GoogleProfile('g-other', google_user['email'], email_verified=True))

        response = client.post('/api/auth/google/session', json={'credential': 'valid-credential'})

        assert response.status_code == 400
        assert 'token' not in (response.json.get('data') or {})
        assert User.query.filter_by(email=google_user['email']).first().google_id == google_user['google_id']

    def test_returning_google_user(self, client, google_user, google_credential):
        google_credential(GoogleProfile(google_user['google_id'], google_user['email']))

        response = client.post('/api/auth/google/session', json={'credential': 'valid-credential'})

        assert response.status_code == 200
        assert response.json['data']['user']['id'] == google_user['id']
        assert User.query.count() == 1

    def test_deactivated_account_is_refused(self, client, make_user, google_credential):
        user = make_user(password=None, google_id='g-off', is_active=False)
        google_credential(GoogleProfile('g-off', user['email']))

        response = client.post('/api/auth/google/session', json={'credential': 'valid-credential'})

        assert response.status_code == 403

    def test_invalid_credential(self, client, db_session, google_credential):
        google_credential(GoogleProfile('g', 'x@gmail.com'))

        response = client.post('/api/auth/google/session', json={'credential': 'forged'})

        assert response.status_code == 401


class TestVerifyGoogleCredential:

    CLIENT_ID = 'couplegames-test.apps.googleusercontent.com'

    @pytest.fixture(autouse=True)
    def client_id(self, app, monkeypatch):
        monkeypatch.setitem(app.config, 'GOOGLE_CLIENT_ID', self.CLIENT_ID)

    def test_valid_token(self, app, monkeypatch):
        audiences = []

        def fake_verify(credential, request, audience):
            audiences.append(audience)
            return {'sub': '1234', 'email': 'Someone@Gmail.com', 'name': 'Someone', 'email_verified': True}
        monkeypatch.setattr(google_oauth.id_token, 'verify_oauth2_token', fake_verify)

        with app.app_context():
            profile = google_oauth.verify_google_credential('token')

        assert profile.google_id == '1234'
        assert profile.email == 'someone@gmail.com'
        assert profile.email_verified is True
        assert audiences == [self.CLIENT_ID]

    def test_missing_client_id(self, app, monkeypatch):
        calls = []
        monkeypatch.setitem(app.config, 'GOOGLE_CLIENT_ID', '')
        monkeypatch.setattr(
            google_oauth.id_token, 'verify_oauth2_token', lambda *args: calls.append(args) or {'sub': '1'},
        )

        with app.app_context():
            with pytest.raises(InvalidCredentialsError):
                google_oauth.verify_google_credential('token')

        assert calls == []

    def test_invalid_token(self, app, monkeypatch):
        def fake_verify(credential, request, audience):
            raise ValueError('Token expired')
        monkeypatch.setattr(google_oauth.id_token, 'verify_oauth2_token', fake_verify)

        with app.app_context():
            with pytest.raises(InvalidCredentialsError):
                google_oauth.verify_google_credential('token')

    def test_token_without_email(self, app, monkeypatch):
        monkeypatch.setattr(
            google_oauth.id_token, 'verify_oauth2_token', lambda credential, request, audience: {'sub': '1'},
        )

        with app.app_context():
            with pytest.raises(InvalidCredentialsError):
                google_oauth.verify_google_credential('token')


class TestCompleteGoogleProfile:
    """Tests for PUT /api/auth/complete-google-profile"""

    @pytest.fixture
    def incomplete_user(self, make_user):
        return make_user(password=None, google_id='g-incomplete', phone=None, roles=(), is_active=False)

    def test_complete_profile(self, client, incomplete_user, headers_for):
        response = client.put(
            '/api/auth/complete-google-profile',
            headers=headers_for(incomplete_user['id']),
            json={'name': 'אורי כהן', 'phone': '054-1112233'},
        )

        assert response.status_code == 201
        data = response.json['data']
        assert data['user'] == {
            'id': incomplete_user['id'],
            'name': 'אורי כהן',
            'email': incomplete_user['email'],
            'phone': '054-1112233',
        }
        claims = _claims(data['token'])
        assert claims['needs_profile_completion'] is False
        assert claims['is_active'] is True
        assert claims['roles'] == ['USER']

        user = db.session.get(User, incomplete_user['id'])
        assert user.is_active is True
        assert user.role_set == frozenset({Role.USER})

    def test_complete_profile_is_idempotent(self, client, incomplete_user, headers_for):
        headers = headers_for(incomplete_user['id'])
        payload = {'name': 'אורי כהן', 'phone': '054-1112233'}

        first = client.put('/api/auth/complete-google-profile', headers=headers, json=payload)
        second = client.put('/api/auth/complete-google-profile', headers=headers, json=payload)

        assert first.status_code == second.status_code == 201
        assert first.json['data']['user'] == second.json['data']['user']

    def test_keeps_existing_roles(self, client, make_user, headers_for):
        user = make_user(password=None, google_id='g-admin', phone=None, roles=(Role.ADMIN,))

        client.put(
            '/api/auth/complete-google-profile',
            headers=headers_for(user['id']),
            json={'name': 'מנהלת', 'phone': '054-1112233'},
        )

        assert db.session.get(User, user['id']).role_set == frozenset({Role.ADMIN})

    def test_missing_phone(self, client, incomplete_user, headers_for):
        response = client.put(
            '/api/auth/complete-google-profile',
            headers=headers_for(incomplete_user['id']),
            json={'name': 'אורי כהן'},
        )

        assert response.status_code == 400

    def test_requires_session(self, client, db_session):
        response = client.put(
            '/api/auth/complete-google-profile', json={'name': 'אורי', 'phone': '054-1112233'},
        )

        assert response.status_code == 401

    def test_user_removed(self, client, incomplete_user, headers_for):
        headers = headers_for(incomplete_user['id'])
        User.query.filter_by(id=incomplete_user['id']).delete()
        db.session.commit()

        response = client.put(
            '/api/auth/complete-google-profile',
            headers=headers,
            json={'name': 'אורי כהן', 'phone': '054-1112233'},
        )

        assert response.status_code == 404

    def test_invalid_phone(self, client, incomplete_user, headers_for):
        response = client.put(
            '/api/auth/complete-google-profile',
            headers=headers_for(incomplete_user['id']),
            json={'name': 'אורי כהן', 'phone': 'abc'},
        )

        assert response.status_code == 400
        assert db.session.get(User, incomplete_user['id']).is_active is False

    def test_email_account_cannot_use_completion(self, client, test_user, auth_headers):
        response = client.put(
            '/api/auth/complete-google-profile',
            headers=auth_headers,
            json={'name': 'אורי כהן', 'phone': '054-1112233'},
        )

        assert response.status_code == 403
        assert db.session.get(User, test_user['id']).name == test_user['name']

    def test_deactivated_email_account_stays_inactive(self, client, test_user, auth_headers):
        user = db.session.get(User, test_user['id'])
        user.is_active = False
        db.session.commit()

        response = client.put(
            '/api/auth/complete-google-profile',
            headers=auth_headers,
            json={'name': 'אורי כהן', 'phone': '054-1112233'},
        )

        assert response.status_code == 403
        assert db.session.get(User, test_user['id']).is_active is False

    def test_deactivated_google_account_stays_inactive(self, client, google_user, headers_for):
        headers = headers_for(google_user['id'])
        user = db.session.get(User, google_user['id'])
        user.is_active = False
        db.session.commit()

        response = client.put(
            '/api/auth/complete-google-profile',
            headers=headers,
            json={'name': 'אורי כהן', 'phone': '054-1112233'},
        )

        assert response.status_code == 403
        assert db.session.get(User, google_user['id']).is_active is False
