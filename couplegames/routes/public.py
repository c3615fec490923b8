"""Public catalog routes - no authentication required."""

from flask import Blueprint

from couplegames.models import Center, Game
from couplegames.utils.responses import api_response

public_bp = Blueprint('public', __name__)


@public_bp.route('/centers', methods=['GET'])
def list_centers():
    """Active centers by name, with contacts and a summary of their copies."""
    centers = Center.query.filter_by(is_active=True).order_by(Center.name.asc()).all()
    data = []
    for center in centers:
        item = center.to_dict(include_contacts=True)
        item['game_instances'] = [
            {
                'id': instance.id,
                'status': instance.status,
                'game': {
                    'id': instance.game.id,
                    'name': instance.game.name,
                    'category': instance.game.category,
                },
            }
            for instance in center.game_instances
        ]
        data.append(item)
    return api_response(True, data)


@public_bp.route('/games', methods=['GET'])
def list_games():
    """All games, newest first, with where their copies are."""
    games = Game.query.order_by(Game.created_at.desc()).all()
    data = []
    for game in games:
        item = game.to_dict()
        item['game_instances'] = [
            instance.to_dict(include_game=False, include_center=True)
            for instance in game.instances
        ]
        data.append(item)
    return api_response(True, data)
