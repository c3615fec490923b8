"""Rental request/fulfillment records."""

from datetime import datetime

from couplegames import db
from couplegames.constants.labels import RENTAL_STATUS_LABELS, label_for
from couplegames.constants.statuses import OPEN_RENTAL_STATUSES, RentalStatus


class Rental(db.Model):
    """A user's request to borrow one game copy, through to its return."""

    __tablename__ = 'rentals'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    center_id = db.Column(db.Integer, db.ForeignKey('centers.id'), nullable=False, index=True)
    game_instance_id = db.Column(db.Integer, db.ForeignKey('game_instances.id'), nullable=False, index=True)
    status = db.Column(db.String(20), default=RentalStatus.PENDING.value, nullable=False, index=True)
    request_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    borrow_date = db.Column(db.DateTime, nullable=True)
    return_date = db.Column(db.DateTime, nullable=True)
    expected_return_date = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    center = db.relationship('Center', lazy=True)

    @property
    def is_open(self):
        return self.status in OPEN_RENTAL_STATUSES

    @classmethod
    def open_for_user(cls, user_id):
        return cls.query.filter(
            cls.user_id == user_id,
            cls.status.in_(OPEN_RENTAL_STATUSES),
        ).order_by(cls.created_at.desc()).all()

    def to_dict(self, include_user=False):
        """Convert rental to dictionary."""
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'center_id': self.center_id,
            'game_instance_id': self.game_instance_id,
            'status': self.status,
            'status_label': label_for(RENTAL_STATUS_LABELS, self.status),
            'request_date': self.request_date.isoformat(),
            'borrow_date': self.borrow_date.isoformat() if self.borrow_date else None,
            'return_date': self.return_date.isoformat() if self.return_date else None,
            'expected_return_date': self.expected_return_date.isoformat() if self.expected_return_date else None,
            'notes': self.notes,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
        if self.game_instance:
            data['game_instance'] = self.game_instance.to_dict(include_game=True)
        if self.center:
            data['center'] = {'id': self.center.id, 'name': self.center.name, 'city': self.center.city}
        if include_user and self.user:
            data['user'] = self.user.to_contact_dict()
        return data

    def __repr__(self):
        return f'<Rental {self.id} user={self.user_id} status={self.status}>'
