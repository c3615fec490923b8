"""Google ID token verification for OAuth sign-in.

The frontend completes Google's OAuth flow and posts the resulting ID token
(``credential``). We verify its signature, issuer and audience against
``GOOGLE_CLIENT_ID`` and return the profile fields we need.
"""

import logging

from flask import current_app
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from couplegames.errors import InvalidCredentialsError

logger = logging.getLogger(__name__)

INVALID_GOOGLE_TOKEN_MESSAGE = 'שגיאה בהתחברות עם Google'


class GoogleProfile:
    """The subset of verified Google claims used to find or create a user."""

    def __init__(self, google_id, email, name=None, email_verified=False):
        self.google_id = google_id
        self.email = email.strip().lower() if email else email
        self.name = name
        self.email_verified = email_verified

    def __repr__(self):
        return f'<GoogleProfile {self.email}>'


def verify_google_credential(credential: str) -> GoogleProfile:
    """Verify a Google ID token and return the signed-in profile.

    Raises:
        InvalidCredentialsError: ``GOOGLE_CLIENT_ID`` is unset, or the token
            is malformed, expired, issued for another client or has no email.
    """
    client_id = current_app.config.get('GOOGLE_CLIENT_ID')
    if not client_id:
        # Without an audience google-auth accepts tokens minted for any client
        logger.error("GOOGLE_CLIENT_ID is not set, refusing Google sign-in")
        raise InvalidCredentialsError(INVALID_GOOGLE_TOKEN_MESSAGE)

    try:
        claims = id_token.verify_oauth2_token(credential, google_requests.Request(), client_id)
    except ValueError as e:
        logger.warning("Rejected Google credential: %s", e)
        raise InvalidCredentialsError(INVALID_GOOGLE_TOKEN_MESSAGE)

    if not claims.get('email'):
        logger.warning("Google credential for sub=%s has no email claim", claims.get('sub'))
        raise InvalidCredentialsError(INVALID_GOOGLE_TOKEN_MESSAGE)

    return GoogleProfile(
        google_id=claims['sub'],
        email=claims['email'],
        name=claims.get('name'),
        email_verified=bool(claims.get('email_verified')),
    )
