"""Authentication flows.

Each function takes already-validated input (see ``couplegames.schemas``),
talks to the store and either returns response data or raises one of the
``couplegames.errors`` types. Routes stay thin wrappers around these.
"""

import logging
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from couplegames import db
from couplegames.constants.roles import DEFAULT_ROLES
from couplegames.errors import (
    AccountInactiveError,
    EmailTakenError,
    ExpiredTokenError,
    ForbiddenError,
    GoogleIdTakenError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    NotRegisteredError,
    PasswordNotSetError,
    UnauthorizedError,
    ValidationError,
)
from couplegames.models import Rental, User, VerificationToken
from couplegames.services.email import email_service
from couplegames.utils.auth import build_session_claims, issue_session_token

logger = logging.getLogger(__name__)

EMAIL_VERIFIED_MESSAGE = 'אימייל אומת בהצלחה!'
PROFILE_FIELDS_REQUIRED_MESSAGE = 'יש למלא שם ומספר טלפון'
GOOGLE_ONLY_COMPLETION_MESSAGE = 'השלמת פרופיל זמינה רק לחשבונות Google'


def _user_with_active_rentals(user):
    data = user.to_dict()
    data['rentals'] = [rental.to_dict() for rental in Rental.open_for_user(user.id)]
    return data


def _signed_in(user):
    return {'user': _user_with_active_rentals(user), 'token': issue_session_token(user)}


# ===== EMAIL / PASSWORD =====

def authenticate_email(email, password):
    """Check email/password credentials and open a session.

    Failure order: unknown email, inactive account, account without a
    password, wrong password.
    """
    user = User.query.filter_by(email=email).first()
    if not user:
        logger.warning("Email login failed for %s: unknown email", email)
        raise InvalidCredentialsError()
    if not user.is_active:
        logger.warning("Email login failed for user %s: inactive", user.id)
        raise AccountInactiveError()
    if not user.password_hash:
        logger.warning("Email login failed for user %s: no password set", user.id)
        raise PasswordNotSetError()
    if not user.check_password(password):
        logger.warning("Email login failed for user %s: wrong password", user.id)
        raise InvalidCredentialsError()

    logger.info("User %s logged in with email", user.id)
    return _signed_in(user)


def register_email(name, email, password, phone=None):
    """Create a password account and send its verification email."""
    if User.query.filter_by(email=email).first():
        logger.warning("Email registration rejected for %s: email taken", email)
        raise EmailTakenError()

    user = User(name=name, email=email, phone=phone, is_active=True)
    user.role_set = DEFAULT_ROLES
    user.set_password(password)
    db.session.add(user)
    verification = VerificationToken.generate_token(
        email, current_app.config.get('VERIFICATION_TOKEN_HOURS', 24),
    )
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same address
        db.session.rollback()
        logger.warning("Email registration rejected for %s: email taken (constraint)", email)
        raise EmailTakenError()

    email_service.send_verification_email(user.email, user.name, verification.token)
    logger.info("Registered user %s with email", user.id)
    return user.to_dict()


def verify_email(token):
    """Consume a verification token and mark its address verified."""
    verification = VerificationToken.query.filter_by(token=token).first()
    if not verification:
        raise InvalidTokenError()

    if verification.is_expired:
        db.session.delete(verification)
        db.session.commit()
        logger.info("Removed expired verification token for %s", verification.identifier)
        raise ExpiredTokenError()

    user = User.query.filter_by(email=verification.identifier).first()
    if not user:
        raise NotFoundError()

    user.email_verified = datetime.utcnow()
    db.session.delete(verification)
    db.session.commit()
    logger.info("Verified email for user %s", user.id)
    return {'message': EMAIL_VERIFIED_MESSAGE}


# ===== GOOGLE =====

def login_google(google_id):
    """Open a session for an already registered Google account."""
    user = User.query.filter_by(google_id=google_id).first()
    if not user:
        logger.warning("Google login failed: google id not registered")
        raise NotRegisteredError()
    if not user.is_active:
        logger.warning("Google login failed for user %s: inactive", user.id)
        raise AccountInactiveError()

    logger.info("User %s logged in with Google", user.id)
    return _signed_in(user)


def register_google(google_id, name, email, phone):
    """Create an active account from a Google identity plus contact details."""
    if User.query.filter_by(email=email).first():
        raise EmailTakenError()
    if User.query.filter_by(google_id=google_id).first():
        raise GoogleIdTakenError()

    user = User(google_id=google_id, name=name, email=email, phone=phone, is_active=True)
    user.role_set = DEFAULT_ROLES
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if User.query.filter_by(email=email).first():
            raise EmailTakenError()
        raise GoogleIdTakenError()

    logger.info("Registered user %s with Google", user.id)
    return user.to_dict()


def sign_in_with_google(profile):
    """Find, link or create the account behind a verified Google profile.

    A brand-new account is created inactive and without roles; it becomes
    usable once the profile-completion step supplies a name and phone.
    An existing email account is linked only when Google reports the
    address verified and the account has no other Google id.
    """
    user = User.query.filter_by(google_id=profile.google_id).first()
    created = False

    if not user:
        user = User.query.filter_by(email=profile.email).first()
        if user:
            if user.google_id or not profile.email_verified:
                logger.warning("Google sign-in refused for user %s: cannot link", user.id)
                raise EmailTakenError()
            user.google_id = profile.google_id
            logger.info("Linked Google account to existing user %s", user.id)

    if not user:
        user = User(
            email=profile.email,
            google_id=profile.google_id,
            name=profile.name,
            roles=[],
            is_active=False,
        )
        if profile.email_verified:
            user.email_verified = datetime.utcnow()
        db.session.add(user)
        created = True

    if not user.is_active and not user.needs_profile_completion:
        db.session.rollback()
        logger.warning("Google sign-in refused for user %s: inactive", user.id)
        raise AccountInactiveError()

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise GoogleIdTakenError()

    if created:
        logger.info("Created user %s from Google sign-in, profile incomplete", user.id)
    else:
        logger.info("User %s signed in with Google", user.id)

    data = _signed_in(user)
    data['needs_profile_completion'] = user.needs_profile_completion
    return data


def complete_google_profile(user_id, name=None, phone=None):
    """Fill in the contact details a Google account was created without.

    Activates the account, grants the default role when it has none and
    returns a refreshed session token. Running it twice is harmless.
    Accounts without a Google identity, and accounts an admin deactivated
    after they were complete, are refused.
    """
    name = (name or '').strip()
    phone = (phone or '').strip()
    if not name or not phone:
        raise ValidationError(PROFILE_FIELDS_REQUIRED_MESSAGE)

    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError()
    if not user.google_id:
        logger.warning("Profile completion refused for user %s: not a Google account", user.id)
        raise ForbiddenError(GOOGLE_ONLY_COMPLETION_MESSAGE)
    # Only a never-activated account may activate itself here
    if not user.is_active and user.role_set and not user.needs_profile_completion:
        logger.warning("Profile completion refused for user %s: deactivated", user.id)
        raise AccountInactiveError()

    user.name = name
    user.phone = phone
    user.is_active = True
    if not user.role_set:
        user.role_set = DEFAULT_ROLES
    db.session.commit()

    logger.info("User %s completed Google profile", user.id)
    return {'user': user.to_contact_dict(), 'token': issue_session_token(user)}


# ===== SESSION =====

def refresh_session(user_id):
    """Re-read the user and return fresh session claims with a new token."""
    user = db.session.get(User, user_id)
    if not user:
        raise UnauthorizedError()
    return {'session': build_session_claims(user), 'token': issue_session_token(user)}


def issue_dev_token(email):
    """Mint a session token for any existing user. Development only."""
    if current_app.config.get('ENV_NAME') != 'development':
        raise ForbiddenError()

    user = User.query.filter_by(email=email).first()
    if not user:
        raise UnauthorizedError('משתמש לא נמצא')

    logger.warning("Issued development token for user %s", user.id)
    return {'user': user.to_dict(), 'token': issue_session_token(user)}
