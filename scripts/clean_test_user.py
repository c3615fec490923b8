#!/usr/bin/env python3
"""Delete a test account by email, e.g. to re-run the Google sign-in flow."""

import os
import sys

# Add parent directory to path to import couplegames
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.exc import SQLAlchemyError

from couplegames import create_app, db
from couplegames.models import User


def clean_test_user(email: str) -> bool:
    """Delete the user with ``email`` and, through the cascade, their rentals.

    Returns:
        True if a user was deleted, False if none matched or the delete failed
    """
    email = email.strip().lower()
    print(f"Cleaning test user: {email}")

    user = User.query.filter_by(email=email).first()
    if not user:
        print(f"User not found: {email}")
        return False

    details = {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'google_id': user.google_id,
        'rentals': len(user.rentals),
    }
    try:
        db.session.delete(user)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        print(f"Error deleting user: {e}")
        return False

    print(f"Deleted user: {details}")
    return True


if __name__ == '__main__':
    if len(sys.argv) != 2:
        print("Usage: python scripts/clean_test_user.py <email>")
        print("Example: python scripts/clean_test_user.py test@gmail.com")
        sys.exit(1)

    app = create_app()
    with app.app_context():
        sys.exit(0 if clean_test_user(sys.argv[1]) else 1)
