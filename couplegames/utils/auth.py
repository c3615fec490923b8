"""Session tokens and the authentication decorators built on them.

Session tokens are HS256 JWTs signed with ``JWT_SECRET_KEY``. The claim set
mirrors what the client needs to render a session without another round
trip: id, name, email, roles and the profile-completion flag.

The decorators pass the caller's user id as the first positional argument
of the wrapped view and leave the session claims on ``g.session_claims``.
Role-gated views get claims rebuilt from the database user.

Usage:
    @bp.route('/protected')
    @token_required
    def protected_route(current_user_id):
        ...

    @bp.route('/admin-only')
    @admin_required
    def admin_route(current_user_id):
        ...
"""

import logging
from datetime import datetime, timedelta
from functools import wraps

import jwt
from flask import current_app, g, request

from couplegames.constants.roles import (
    ADMIN_ONLY,
    COORDINATOR_ROLES,
    SUPER_COORDINATOR_ROLES,
    check_access,
    serialize_roles,
)
from couplegames.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'

INACTIVE_ACCOUNT_MESSAGE = 'החשבון לא פעיל'
TOKEN_EXPIRED_MESSAGE = 'פג תוקף ההתחברות. יש להתחבר מחדש'


def _get_secret_key():
    """Get JWT secret from Flask app config (single source of truth)."""
    return current_app.config['JWT_SECRET_KEY']


def build_session_claims(user):
    """Claim set describing ``user`` as the client sees its session."""
    return {
        'sub': str(user.id),
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'roles': serialize_roles(user.role_set),
        'google_id': user.google_id,
        'is_active': user.is_active,
        'needs_profile_completion': user.needs_profile_completion,
    }


def issue_session_token(user):
    """Encode a signed session token for ``user``."""
    now = datetime.utcnow()
    payload = build_session_claims(user)
    payload['iat'] = now
    payload['exp'] = now + timedelta(seconds=current_app.config['JWT_ACCESS_TOKEN_EXPIRES'])
    return jwt.encode(payload, _get_secret_key(), algorithm=ALGORITHM)


def decode_session_token(token):
    """Decode and verify a session token. Raises UnauthorizedError."""
    try:
        return jwt.decode(token, _get_secret_key(), algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError(TOKEN_EXPIRED_MESSAGE)
    except jwt.InvalidTokenError:
        raise UnauthorizedError()


def _bearer_token():
    auth_header = request.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None
    return auth_header.split(' ', 1)[1].strip() or None


def current_session_claims():
    """Claims of the request's session token, or None when no token was sent."""
    token = _bearer_token()
    if not token:
        return None
    return decode_session_token(token)


def current_user_claims():
    """Fresh claims for the token's user, re-read from the database.

    Roles and activity come from the store, not the token, so a demoted or
    deactivated user loses access immediately. Returns None without a token.
    """
    token_claims = current_session_claims()
    if not token_claims:
        return None

    # Import here to avoid circular imports
    from couplegames import db
    from couplegames.models import User

    user = db.session.get(User, token_claims.get('id'))
    if not user:
        logger.warning("Token for missing user %s rejected", token_claims.get('id'))
        raise UnauthorizedError()
    return build_session_claims(user)


def authorize(required=None):
    """Run the role gate for the current request and return the claims."""
    claims = current_user_claims()
    decision = check_access(claims, required)
    if not decision:
        if decision.status_code == 401:
            raise UnauthorizedError()
        logger.warning(
            "Access denied to %s for user %s (%s)",
            request.path, claims.get('id'), decision.reason,
        )
        if decision.reason == 'inactive':
            raise ForbiddenError(INACTIVE_ACCOUNT_MESSAGE)
        raise ForbiddenError()
    g.session_claims = claims
    return claims


def token_required(f):
    """Decorator to require a valid session token (any role, any activity state)."""
    @wraps(f)
    def decorated(*args, **kwargs):
        claims = current_session_claims()
        if not claims:
            raise UnauthorizedError()
        g.session_claims = claims
        return f(claims['id'], *args, **kwargs)
    return decorated


def token_optional(f):
    """Decorator passing the user id when a valid token is present, else None."""
    @wraps(f)
    def decorated(*args, **kwargs):
        g.session_claims = None
        try:
            g.session_claims = current_session_claims()
        except UnauthorizedError:
            g.session_claims = None
        current_user_id = g.session_claims['id'] if g.session_claims else None
        return f(current_user_id, *args, **kwargs)
    return decorated


def roles_required(*roles):
    """Decorator factory: signed-in, active, and holding any of ``roles``."""
    required = frozenset(roles)

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            claims = authorize(required)
            return f(claims['id'], *args, **kwargs)
        return decorated
    return decorator


admin_required = roles_required(*ADMIN_ONLY)
coordinator_required = roles_required(*COORDINATOR_ROLES)
super_coordinator_required = roles_required(*SUPER_COORDINATOR_ROLES)
