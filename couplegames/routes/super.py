"""Super-coordinator routes: oversight of supervised centers."""

from flask import Blueprint, current_app, request

from couplegames import db
from couplegames.constants.roles import Role
from couplegames.constants.statuses import GameInstanceStatus, OPEN_RENTAL_STATUSES, RentalStatus
from couplegames.errors import NotFoundError, ValidationError
from couplegames.models import Center, Rental, User
from couplegames.routes.coordinator import accessible_center_ids
from couplegames.schemas import SuperUpdateCenter
from couplegames.utils.auth import super_coordinator_required
from couplegames.utils.responses import api_response
from couplegames.utils.validation import parse_json, partial_update

super_bp = Blueprint('super', __name__)

CENTER_NOT_FOUND_MESSAGE = 'המוקד לא נמצא או שאין לך גישה אליו'
INVALID_COORDINATOR_MESSAGE = 'רכז לא תקין'


def _supervised_query(user_id):
    query = Center.query
    if accessible_center_ids(user_id) is not None:
        query = query.filter(Center.super_coordinator_id == user_id)
    return query


def _supervised_centers(user_id):
    return _supervised_query(user_id).order_by(Center.name.asc()).all()


def _supervised_center_or_404(user_id, center_id):
    center = _supervised_query(user_id).filter(
        Center.id == center_id, Center.is_active.is_(True),
    ).first()
    if not center:
        raise NotFoundError(CENTER_NOT_FOUND_MESSAGE)
    return center


def _count_status(items, status):
    return sum(1 for item in items if item.status == status.value)


@super_bp.route('/centers', methods=['GET'])
@super_coordinator_required
def list_centers(current_user_id):
    """Supervised centers with coordinator contacts and inventory counts."""
    data = []
    for center in _supervised_centers(current_user_id):
        item = center.to_dict(include_contacts=True)
        instances = center.game_instances
        open_rentals = Rental.query.filter(
            Rental.center_id == center.id, Rental.status.in_(OPEN_RENTAL_STATUSES),
        ).count()
        item['statistics'] = {
            'total_games': len(instances),
            'available_games': _count_status(instances, GameInstanceStatus.AVAILABLE),
            'open_rentals': open_rentals,
        }
        data.append(item)
    return api_response(True, data)


@super_bp.route('/centers/<int:center_id>', methods=['GET'])
@super_coordinator_required
def get_center(current_user_id, center_id):
    """One supervised center with its copies, open rentals and counts."""
    center = _supervised_center_or_404(current_user_id, center_id)
    instances = center.game_instances
    rentals = Rental.query.filter(
        Rental.center_id == center.id, Rental.status.in_(OPEN_RENTAL_STATUSES),
    ).order_by(Rental.created_at.desc()).all()

    open_per_copy = {}
    for rental in rentals:
        open_per_copy[rental.game_instance_id] = open_per_copy.get(rental.game_instance_id, 0) + 1

    data = center.to_dict(include_contacts=True)
    data['game_instances'] = []
    for instance in instances:
        item = instance.to_dict()
        item['active_rentals_count'] = open_per_copy.get(instance.id, 0)
        data['game_instances'].append(item)
    data['rentals'] = [rental.to_dict(include_user=True) for rental in rentals]
    data['statistics'] = {
        'total_games': len(instances),
        'available_games': _count_status(instances, GameInstanceStatus.AVAILABLE),
        'borrowed_games': _count_status(instances, GameInstanceStatus.BORROWED),
        'unavailable_games': _count_status(instances, GameInstanceStatus.UNAVAILABLE),
        'pending_rentals': _count_status(rentals, RentalStatus.PENDING),
        'active_rentals': _count_status(rentals, RentalStatus.ACTIVE),
    }
    return api_response(True, data)


@super_bp.route('/centers/<int:center_id>', methods=['PUT'])
@super_coordinator_required
def update_center(current_user_id, center_id):
    """Edit a supervised center's details or reassign its coordinator."""
    try:
        payload = parse_json(SuperUpdateCenter)
        center = _supervised_center_or_404(current_user_id, center_id)
        if not payload.model_fields_set:
            raise ValidationError('לא נשלחו שדות לעדכון')

        if payload.coordinator_id is not None:
            coordinator = db.session.get(User, payload.coordinator_id)
            if (
                not coordinator
                or not coordinator.is_active
                or Role.CENTER_COORDINATOR not in coordinator.role_set
            ):
                raise ValidationError(INVALID_COORDINATOR_MESSAGE)
            other = Center.query.filter(
                Center.coordinator_id == coordinator.id, Center.id != center.id,
            ).first()
            if other:
                raise ValidationError('הרכז כבר משויך למוקד אחר')

        changed = partial_update(center, payload)
        db.session.commit()
        current_app.logger.info(
            "User %s updated center %s (%s)", current_user_id, center.id, ', '.join(changed),
        )
        return api_response(True, center.to_dict(include_contacts=True))
    except Exception:
        db.session.rollback()
        raise


@super_bp.route('/rentals', methods=['GET'])
@super_coordinator_required
def list_rentals(current_user_id):
    center_ids = [center.id for center in _supervised_centers(current_user_id)]
    query = Rental.query.filter(Rental.center_id.in_(center_ids))
    status = request.args.get('status')
    if status:
        query = query.filter(Rental.status == status.upper())
    rentals = query.order_by(Rental.created_at.desc()).all()
    return api_response(True, [rental.to_dict(include_user=True) for rental in rentals])
