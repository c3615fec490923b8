"""Email verification tokens."""

import secrets
from datetime import datetime, timedelta

from couplegames import db


class VerificationToken(db.Model):
    """Single-use token proving ownership of an email address."""

    __tablename__ = 'verification_tokens'

    id = db.Column(db.Integer, primary_key=True)
    identifier = db.Column(db.String(254), nullable=False, index=True)  # the email
    token = db.Column(db.String(100), unique=True, nullable=False, index=True)
    expires = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @classmethod
    def generate_token(cls, identifier, expires_in_hours=24):
        """
        Create a new verification token for an email address.
        Replaces any outstanding tokens for the same address.
        The caller commits.
        """
        cls.query.filter_by(identifier=identifier).delete()

        verification = cls(
            identifier=identifier,
            token=secrets.token_urlsafe(48),
            expires=datetime.utcnow() + timedelta(hours=expires_in_hours),
        )
        db.session.add(verification)
        return verification

    @property
    def is_expired(self):
        return self.expires < datetime.utcnow()

    @classmethod
    def cleanup_expired(cls):
        """Remove expired tokens from the database."""
        removed = cls.query.filter(cls.expires < datetime.utcnow()).delete()
        db.session.commit()
        return removed

    def __repr__(self):
        return f'<VerificationToken identifier={self.identifier} expires={self.expires}>'
