"""User model for authentication and role management."""

from datetime import datetime

import bcrypt
from flask import current_app

from couplegames import db
from couplegames.constants.roles import DEFAULT_ROLES, parse_roles, serialize_roles


class User(db.Model):
    """A registered user; authenticates by password, Google, or both."""

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=True)  # None for Google-only accounts
    google_id = db.Column(db.String(255), unique=True, nullable=True, index=True)
    name = db.Column(db.String(100), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    roles = db.Column(db.JSON, nullable=False, default=lambda: serialize_roles(DEFAULT_ROLES))
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    email_verified = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    rentals = db.relationship(
        'Rental', backref='user', lazy=True,
        cascade='all, delete-orphan',
    )
    managed_center = db.relationship(
        'Center', uselist=False, lazy=True,
        foreign_keys='Center.coordinator_id', back_populates='coordinator',
    )
    supervised_centers = db.relationship(
        'Center', lazy=True,
        foreign_keys='Center.super_coordinator_id', back_populates='super_coordinator',
    )

    @property
    def role_set(self):
        return parse_roles(self.roles)

    @role_set.setter
    def role_set(self, roles):
        self.roles = serialize_roles(roles)

    @property
    def managed_center_id(self):
        return self.managed_center.id if self.managed_center else None

    @property
    def needs_profile_completion(self):
        """Google accounts created at sign-in lack contact details until completed."""
        return bool(self.google_id) and not (self.name and self.phone)

    @staticmethod
    def _password_bytes(password):
        # bcrypt only looks at the first 72 bytes and newer releases reject longer input
        return password.encode('utf-8')[:72]

    def set_password(self, password):
        """Hash and set the user password (bcrypt)."""
        rounds = current_app.config.get('BCRYPT_ROUNDS', 12)
        hashed = bcrypt.hashpw(self._password_bytes(password), bcrypt.gensalt(rounds=rounds))
        self.password_hash = hashed.decode('utf-8')

    def check_password(self, password):
        """Check if the provided password matches the hash."""
        if not self.password_hash:
            return False
        return bcrypt.checkpw(self._password_bytes(password), self.password_hash.encode('utf-8'))

    def to_contact_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
        }

    def to_dict(self):
        """Convert user to dictionary (never includes the password hash)."""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'roles': serialize_roles(self.role_set),
            'is_active': self.is_active,
            'google_id': self.google_id,
            'has_password': self.password_hash is not None,
            'managed_center_id': self.managed_center_id,
            'email_verified': self.email_verified.isoformat() if self.email_verified else None,
            'needs_profile_completion': self.needs_profile_completion,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    def __repr__(self):
        return f'<User {self.email}>'
