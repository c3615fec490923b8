"""Coordination center model."""

from datetime import datetime

from couplegames import db
from couplegames.constants.labels import AREA_LABELS, label_for


class Center(db.Model):
    """A local center holding game copies, run by a coordinator."""

    __tablename__ = 'centers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    city = db.Column(db.String(50), nullable=False)
    area = db.Column(db.String(20), nullable=False, index=True)  # constants.statuses.Area
    coordinator_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    super_coordinator_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True, index=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    coordinator = db.relationship(
        'User', foreign_keys=[coordinator_id], back_populates='managed_center',
    )
    super_coordinator = db.relationship(
        'User', foreign_keys=[super_coordinator_id], back_populates='supervised_centers',
    )
    game_instances = db.relationship(
        'GameInstance', backref='center', lazy=True, cascade='all, delete-orphan',
    )

    def to_dict(self, include_contacts=False):
        """Convert center to dictionary."""
        data = {
            'id': self.id,
            'name': self.name,
            'city': self.city,
            'area': self.area,
            'area_label': label_for(AREA_LABELS, self.area),
            'coordinator_id': self.coordinator_id,
            'super_coordinator_id': self.super_coordinator_id,
            'location': (
                {'lat': self.latitude, 'lng': self.longitude}
                if self.latitude is not None and self.longitude is not None else None
            ),
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
        if include_contacts:
            data['coordinator'] = self.coordinator.to_contact_dict() if self.coordinator else None
            data['super_coordinator'] = (
                self.super_coordinator.to_contact_dict() if self.super_coordinator else None
            )
        return data

    def __repr__(self):
        return f'<Center {self.id}: {self.name}>'
