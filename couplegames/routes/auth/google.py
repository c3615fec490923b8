"""Google authentication routes."""

from couplegames import db, limiter
from couplegames.routes.auth import auth_bp
from couplegames.schemas import (
    CompleteGoogleProfile,
    GoogleCredential,
    LoginWithGoogle,
    RegisterWithGoogle,
)
from couplegames.services import auth_service
from couplegames.services.google_oauth import verify_google_credential
from couplegames.utils.auth import token_required
from couplegames.utils.responses import api_response
from couplegames.utils.validation import parse_json


@auth_bp.route('/login/google', methods=['POST'])
@limiter.limit("10 per minute")
def login_google():
    payload = parse_json(LoginWithGoogle)
    return api_response(True, auth_service.login_google(payload.google_id))


@auth_bp.route('/register/google', methods=['POST'])
@limiter.limit("5 per minute")
def register_google():
    try:
        payload = parse_json(RegisterWithGoogle)
        user = auth_service.register_google(
            google_id=payload.google_id,
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
        )
        return api_response(True, user)
    except Exception:
        db.session.rollback()
        raise


@auth_bp.route('/google/session', methods=['POST'])
@limiter.limit("10 per minute")
def google_session():
    """Sign in with a Google ID token, creating an incomplete account if needed."""
    try:
        payload = parse_json(GoogleCredential)
        profile = verify_google_credential(payload.credential)
        return api_response(True, auth_service.sign_in_with_google(profile))
    except Exception:
        db.session.rollback()
        raise


@auth_bp.route('/complete-google-profile', methods=['PUT'])
@token_required
def complete_google_profile(current_user_id):
    """Supply the name and phone missing from a Google-created account."""
    try:
        payload = parse_json(CompleteGoogleProfile)
        data = auth_service.complete_google_profile(
            current_user_id, name=payload.name, phone=payload.phone,
        )
        return api_response(True, data, status=201)
    except Exception:
        db.session.rollback()
        raise
