"""Game catalog and physical game copies."""

from datetime import datetime

from couplegames import db
from couplegames.constants.labels import (
    AUDIENCE_LABELS,
    CATEGORY_LABELS,
    INSTANCE_STATUS_LABELS,
    label_for,
)
from couplegames.constants.statuses import GameInstanceStatus


class Game(db.Model):
    """A board game title in the catalog."""

    __tablename__ = 'games'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(30), nullable=False, index=True)  # constants.statuses.GameCategory
    target_audience = db.Column(db.String(20), nullable=False)  # constants.statuses.TargetAudience
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    instances = db.relationship('GameInstance', backref='game', lazy=True, cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'category_label': label_for(CATEGORY_LABELS, self.category),
            'target_audience': self.target_audience,
            'target_audience_label': label_for(AUDIENCE_LABELS, self.target_audience),
            'image_url': self.image_url,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    def __repr__(self):
        return f'<Game {self.id}: {self.name}>'


class GameInstance(db.Model):
    """One physical copy of a game kept at a center."""

    __tablename__ = 'game_instances'

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('games.id'), nullable=False, index=True)
    center_id = db.Column(db.Integer, db.ForeignKey('centers.id'), nullable=False, index=True)
    status = db.Column(db.String(20), default=GameInstanceStatus.AVAILABLE.value, nullable=False, index=True)
    expected_return_date = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    rentals = db.relationship('Rental', backref='game_instance', lazy=True)

    def to_dict(self, include_game=True, include_center=False):
        data = {
            'id': self.id,
            'game_id': self.game_id,
            'center_id': self.center_id,
            'status': self.status,
            'status_label': label_for(INSTANCE_STATUS_LABELS, self.status),
            'expected_return_date': self.expected_return_date.isoformat() if self.expected_return_date else None,
            'notes': self.notes,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }
        if include_game and self.game:
            data['game'] = self.game.to_dict()
        if include_center and self.center:
            data['center'] = {
                'id': self.center.id,
                'name': self.center.name,
                'city': self.center.city,
                'area': self.center.area,
            }
        return data

    def __repr__(self):
        return f'<GameInstance {self.id} game={self.game_id} center={self.center_id}>'
