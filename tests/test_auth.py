"""
Tests for email/password registration and login.
"""

from couplegames import db
from couplegames.models import User, VerificationToken
from faker import Faker

fake = Faker()

EMAIL_TAKEN = 'משתמש עם כתובת מייל זו כבר קיים במערכת'
WRONG_CREDENTIALS = 'כתובת מייל או סיסמה שגויים'
USE_GOOGLE = 'חשבון זה לא נוצר עם סיסמה. נסה להתחבר עם Google'
INACTIVE = 'חשבון המשתמש אינו פעיל'


class TestRegisterEmail:
    """Tests for POST /api/auth/register/email"""

    def test_register_success(self, client, db_session):
        response = client.post('/api/auth/register/email', json={
            'name': 'דנה',
            'email': 'dana@x.com',
            'password': 'abcdef',
        })

        assert response.status_code == 200
        body = response.json
        assert body['success'] is True
        assert body['data']['email'] == 'dana@x.com'
        assert body['data']['roles'] == ['USER']
        assert body['data']['is_active'] is True
        assert body['data']['email_verified'] is None
        assert 'password' not in body['data']
        assert 'password_hash' not in body['data']

    def test_register_twice_conflicts(self, client, db_session):
        payload = {'name': 'דנה', 'email': 'dana@x.com', 'password': 'abcdef'}
        client.post('/api/auth/register/email', json=payload)

        response = client.post('/api/auth/register/email', json=payload)

        assert response.status_code == 400
        assert response.json['success'] is False
        assert response.json['error']['message'] == EMAIL_TAKEN

    def test_register_conflict_on_commit(self, client, concurrent_signup):
        concurrent_signup(email='dana@x.com')

        response = client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': 'dana@x.com', 'password': 'abcdef',
        })

        assert response.status_code == 400
        assert response.json['error']['message'] == EMAIL_TAKEN
        users = User.query.filter_by(email='dana@x.com').all()
        assert [user.name for user in users] == ['מתחרה']
        assert VerificationToken.query.count() == 0

    def test_register_email_is_case_insensitive(self, client, db_session):
        client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': 'dana@x.com', 'password': 'abcdef',
        })

        response = client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': 'DANA@X.com', 'password': 'abcdef',
        })

        assert response.status_code == 400
        assert response.json['error']['message'] == EMAIL_TAKEN

    def test_register_stores_bcrypt_hash(self, client, db_session):
        client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': 'dana@x.com', 'password': 'abcdef',
        })

        user = User.query.filter_by(email='dana@x.com').first()
        assert user.password_hash.startswith('$2')
        assert user.check_password('abcdef')
        assert not user.check_password('abcdeg')

    def test_register_creates_verification_token(self, client, db_session):
        client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': 'dana@x.com', 'password': 'abcdef',
        })

        assert VerificationToken.query.filter_by(identifier='dana@x.com').count() == 1

    def test_register_invalid_email(self, client, db_session):
        response = client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': 'not-an-email', 'password': 'abcdef',
        })

        assert response.status_code == 400
        assert response.json['error']['message'] == 'נתונים לא תקינים'
        assert response.json['error']['details']

    def test_register_short_password(self, client, db_session):
        response = client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': fake.email(), 'password': '123',
        })

        assert response.status_code == 400

    def test_register_short_name(self, client, db_session):
        response = client.post('/api/auth/register/email', json={
            'name': 'ד', 'email': fake.email(), 'password': 'abcdef',
        })

        assert response.status_code == 400

    def test_register_invalid_phone(self, client, db_session):
        response = client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': fake.email(), 'password': 'abcdef', 'phone': 'call me',
        })

        assert response.status_code == 400

    def test_register_missing_body(self, client, db_session):
        response = client.post('/api/auth/register/email')

        assert response.status_code == 400
        assert response.json['success'] is False


class TestLoginEmail:
    """Tests for POST /api/auth/login/email"""

    def test_login_success(self, client, test_user):
        response = client.post('/api/auth/login/email', json={
            'email': test_user['email'],
            'password': test_user['password'],
        })

        assert response.status_code == 200
        data = response.json['data']
        assert data['token']
        assert data['user']['id'] == test_user['id']
        assert data['user']['rentals'] == []
        assert 'password_hash' not in data['user']

    def test_login_wrong_password(self, client, test_user):
        response = client.post('/api/auth/login/email', json={
            'email': test_user['email'],
            'password': 'wrongpassword',
        })

        assert response.status_code == 401
        assert response.json['error']['message'] == WRONG_CREDENTIALS

    def test_login_unknown_email(self, client, db_session):
        response = client.post('/api/auth/login/email', json={
            'email': 'nonexistent@example.com',
            'password': 'anypassword',
        })

        assert response.status_code == 401
        assert response.json['error']['message'] == WRONG_CREDENTIALS

    def test_login_google_only_account(self, client, google_user):
        response = client.post('/api/auth/login/email', json={
            'email': google_user['email'],
            'password': 'anything',
        })

        assert response.status_code == 400
        assert response.json['error']['message'] == USE_GOOGLE

    def test_login_inactive_checked_before_password(self, client, make_user):
        user = make_user(is_active=False)

        response = client.post('/api/auth/login/email', json={
            'email': user['email'],
            'password': 'wrongpassword',
        })

        assert response.status_code == 403
        assert response.json['error']['message'] == INACTIVE

    def test_login_includes_open_rentals(self, client, test_user, catalog, auth_headers):
        client.post('/api/user/rentals', headers=auth_headers, json={
            'center_id': catalog['center_id'],
            'game_instance_ids': [catalog['available_id']],
        })

        response = client.post('/api/auth/login/email', json={
            'email': test_user['email'],
            'password': test_user['password'],
        })

        rentals = response.json['data']['user']['rentals']
        assert len(rentals) == 1
        assert rentals[0]['status'] == 'PENDING'

    def test_login_missing_password(self, client, db_session):
        response = client.post('/api/auth/login/email', json={'email': fake.email()})

        assert response.status_code == 400


class TestVerifyEmail:
    """Tests for POST /api/auth/verify-email"""

    def _register(self, client):
        client.post('/api/auth/register/email', json={
            'name': 'דנה', 'email': 'dana@x.com', 'password': 'abcdef',
        })
        return VerificationToken.query.filter_by(identifier='dana@x.com').first().token

    def test_verify_success(self, client, db_session):
        token = self._register(client)

        response = client.post('/api/auth/verify-email', json={'token': token})

        assert response.status_code == 200
        assert response.json['data']['message'] == 'אימייל אומת בהצלחה!'
        assert User.query.filter_by(email='dana@x.com').first().email_verified is not None

    def test_token_is_single_use(self, client, db_session):
        token = self._register(client)
        client.post('/api/auth/verify-email', json={'token': token})

        response = client.post('/api/auth/verify-email', json={'token': token})

        assert response.status_code == 400
        assert response.json['error']['message'] == 'טוקן לא תקין או פג תוקף'

    def test_expired_token_is_removed(self, client, db_session):
        from datetime import datetime, timedelta

        token = self._register(client)
        verification = VerificationToken.query.filter_by(token=token).first()
        verification.expires = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()

        first = client.post('/api/auth/verify-email', json={'token': token})
        second = client.post('/api/auth/verify-email', json={'token': token})

        assert first.status_code == 400
        assert first.json['error']['message'] == 'טוקן פג תוקף'
        assert second.json['error']['message'] == 'טוקן לא תקין או פג תוקף'
        assert User.query.filter_by(email='dana@x.com').first().email_verified is None

    def test_user_removed_after_token_issued(self, client, db_session):
        token = self._register(client)
        User.query.filter_by(email='dana@x.com').delete()
        db.session.commit()

        response = client.post('/api/auth/verify-email', json={'token': token})

        assert response.status_code == 404
        assert response.json['error']['message'] == 'משתמש לא נמצא'

    def test_unknown_token(self, client, db_session):
        response = client.post('/api/auth/verify-email', json={'token': 'nope'})

        assert response.status_code == 400
