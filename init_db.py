#!/usr/bin/env python
"""Database initialization script for the couple games backend.

Creates every table defined by the SQLAlchemy models. Run once before
starting the application for the first time (or use ``flask db upgrade``).

Usage:
    python init_db.py
"""

import sys

from sqlalchemy.exc import SQLAlchemyError

from couplegames import config_name_from_env, create_app, db

TABLES = [
    ("users", "User accounts, credentials and roles"),
    ("verification_tokens", "Single-use email verification tokens"),
    ("centers", "Coordination centers"),
    ("games", "Game catalog"),
    ("game_instances", "Physical game copies per center"),
    ("rentals", "Rental requests and their lifecycle"),
]


def init_database():
    """Initialize the database by creating all tables."""
    config_name = config_name_from_env()
    app = create_app(config_name)

    print(f"\n{'='*60}")
    print(f"Database Initialization for {config_name.upper()} Environment")
    print(f"{'='*60}\n")

    with app.app_context():
        try:
            print(f"Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}\n")
            db.create_all()
        except SQLAlchemyError as e:
            print(f"Error creating database: {type(e).__name__}: {e}\n")
            return False

    print("Created tables:")
    for table_name, description in TABLES:
        print(f"  - {table_name:<22} {description}")
    print("\nNext steps:")
    print("  1. Seed sample data: python scripts/seed.py")
    print("  2. Start the server: python wsgi.py\n")
    return True


if __name__ == '__main__':
    success = init_database()
    sys.exit(0 if success else 1)
