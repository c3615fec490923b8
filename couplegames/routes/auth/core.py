"""Core authentication routes: email registration, login and verification."""

from couplegames import db, limiter
from couplegames.routes.auth import auth_bp
from couplegames.schemas import LoginWithEmail, RegisterWithEmail, VerifyEmail
from couplegames.services import auth_service
from couplegames.utils.responses import api_response
from couplegames.utils.validation import parse_json


@auth_bp.route('/register/email', methods=['POST'])
@limiter.limit("5 per minute")
def register_email():
    """Register a new account with email and password."""
    try:
        payload = parse_json(RegisterWithEmail)
        user = auth_service.register_email(
            name=payload.name,
            email=payload.email,
            password=payload.password,
            phone=payload.phone,
        )
        return api_response(True, user)
    except Exception:
        db.session.rollback()
        raise


@auth_bp.route('/login/email', methods=['POST'])
@limiter.limit("10 per minute")
def login_email():
    """Authenticate with email and password; returns the user and a session token."""
    payload = parse_json(LoginWithEmail)
    return api_response(True, auth_service.authenticate_email(payload.email, payload.password))


@auth_bp.route('/verify-email', methods=['POST'])
@limiter.limit("10 per minute")
def verify_email():
    """Consume an email verification token."""
    try:
        payload = parse_json(VerifyEmail)
        return api_response(True, auth_service.verify_email(payload.token))
    except Exception:
        db.session.rollback()
        raise
