"""Auth routes package.

This package organizes authentication-related routes into logical submodules:
- core: Email/password registration, login and email verification
- google: Google login, registration, OAuth sign-in and profile completion
- session: Session refresh and the development token endpoint
"""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

# Import all route modules (registers routes on auth_bp)
from couplegames.routes.auth import core  # noqa: E402,F401
from couplegames.routes.auth import google  # noqa: E402,F401
from couplegames.routes.auth import session  # noqa: E402,F401
