"""Session refresh and development token routes."""

from couplegames import limiter
from couplegames.routes.auth import auth_bp
from couplegames.schemas import DevTokenRequest
from couplegames.services import auth_service
from couplegames.utils.auth import token_required
from couplegames.utils.responses import api_response
from couplegames.utils.validation import parse_json


@auth_bp.route('/session', methods=['GET'])
@token_required
def get_session(current_user_id):
    """Return fresh session claims and a re-issued token for the caller."""
    return api_response(True, auth_service.refresh_session(current_user_id))


@auth_bp.route('/test-token', methods=['POST'])
@limiter.limit("5 per minute")
def test_token():
    """Issue a token for an existing account. Only in development."""
    payload = parse_json(DevTokenRequest)
    return api_response(True, auth_service.issue_dev_token(payload.email))
