"""Database reset script for development.

Drops all tables and recreates them with the current schema.
USE ONLY IN DEVELOPMENT - this will delete all data!

Usage:
    FLASK_ENV=development python reset_db.py
"""

import sys

from couplegames import create_app, db


def main():
    print("=" * 60)
    print("WARNING: This will DELETE ALL DATA in the database!")
    print("This should only be used in development.")
    print("=" * 60)

    confirm = input("Type 'yes' to confirm: ")
    if confirm.lower() != 'yes':
        print("Aborted.")
        return 0

    app = create_app()
    if app.config['ENV_NAME'] == 'production':
        print("Refusing to reset a production database.")
        return 1

    with app.app_context():
        print("\nDropping all tables...")
        db.drop_all()
        print("Creating all tables with current schema...")
        db.create_all()

    print("\nDatabase reset complete!")
    print("You can now start the server with: python wsgi.py")
    return 0


if __name__ == '__main__':
    sys.exit(main())
