"""Coordinator routes: a center's inventory and rental requests.

Coordinators act on the center they manage, super-coordinators on the
centers they supervise, and admins on every center.
"""

from flask import Blueprint, current_app, g, request
from sqlalchemy import or_

from couplegames import db
from couplegames.constants.roles import is_admin
from couplegames.constants.statuses import GameInstanceStatus, RentalStatus
from couplegames.errors import ForbiddenError, NotFoundError, ValidationError
from couplegames.models import Center, Game, GameInstance, Rental
from couplegames.schemas import AddGameInstance, UpdateGameInstance, UpdateRentalByCoordinator
from couplegames.utils.auth import coordinator_required
from couplegames.utils.rentals import apply_rental_status, can_transition, copy_is_held
from couplegames.utils.responses import api_response
from couplegames.utils.validation import parse_json

coordinator_bp = Blueprint('coordinator', __name__)

NO_CENTER_MESSAGE = 'לא נמצא מוקד בניהולך'
CENTER_ACCESS_MESSAGE = 'אין לך הרשאה לנהל מוקד זה'
COPY_HELD_MESSAGE = 'העותק מושאל כרגע. יש לסמן החזרה לפני אישור בקשה נוספת'


def accessible_center_ids(user_id):
    """Ids of the centers the caller may manage, or None for all of them."""
    if is_admin(g.session_claims.get('roles')):
        return None
    rows = db.session.query(Center.id).filter(
        or_(Center.coordinator_id == user_id, Center.super_coordinator_id == user_id)
    ).all()
    return [row.id for row in rows]


def ensure_center_access(user_id, center_id):
    allowed = accessible_center_ids(user_id)
    if allowed is not None and center_id not in allowed:
        raise ForbiddenError(CENTER_ACCESS_MESSAGE)


def _scoped(query, column, user_id):
    allowed = accessible_center_ids(user_id)
    if allowed is None:
        return query
    return query.filter(column.in_(allowed))


@coordinator_bp.route('', methods=['GET'])
@coordinator_required
def dashboard(current_user_id):
    """The caller's own center with its copies, open requests and counts."""
    center = Center.query.filter_by(coordinator_id=current_user_id, is_active=True).first()
    if not center:
        raise NotFoundError(NO_CENTER_MESSAGE)

    instances = GameInstance.query.filter_by(center_id=center.id).order_by(GameInstance.created_at.desc()).all()
    rentals = Rental.query.filter_by(center_id=center.id).order_by(Rental.created_at.desc()).all()
    pending = [rental for rental in rentals if rental.status == RentalStatus.PENDING.value]
    active = [rental for rental in rentals if rental.status == RentalStatus.ACTIVE.value]

    statistics = {
        'total_games': len(instances),
        'available_games': sum(1 for i in instances if i.status == GameInstanceStatus.AVAILABLE.value),
        'borrowed_games': sum(1 for i in instances if i.status == GameInstanceStatus.BORROWED.value),
        'pending_rentals': len(pending),
        'active_rentals': len(active),
        'total_rentals': len(rentals),
    }

    return api_response(True, {
        'center': center.to_dict(include_contacts=True),
        'game_instances': [instance.to_dict() for instance in instances],
        'pending_rentals': [rental.to_dict(include_user=True) for rental in pending],
        'active_rentals': [rental.to_dict(include_user=True) for rental in active],
        'statistics': statistics,
    })


@coordinator_bp.route('/games', methods=['GET'])
@coordinator_required
def list_game_instances(current_user_id):
    query = _scoped(GameInstance.query, GameInstance.center_id, current_user_id)
    center_id = request.args.get('center_id', type=int)
    if center_id:
        query = query.filter(GameInstance.center_id == center_id)
    instances = query.order_by(GameInstance.created_at.desc()).all()
    return api_response(True, [instance.to_dict(include_center=True) for instance in instances])


@coordinator_bp.route('/games', methods=['POST'])
@coordinator_required
def add_game_instance(current_user_id):
    """Add a physical copy of a catalog game to a center."""
    try:
        payload = parse_json(AddGameInstance)
        ensure_center_access(current_user_id, payload.center_id)
        if not db.session.get(Center, payload.center_id):
            raise NotFoundError('המוקד לא נמצא')
        if not db.session.get(Game, payload.game_id):
            raise NotFoundError('המשחק לא נמצא')

        instance = GameInstance(
            game_id=payload.game_id,
            center_id=payload.center_id,
            notes=payload.notes,
            status=GameInstanceStatus.AVAILABLE.value,
        )
        db.session.add(instance)
        db.session.commit()
        current_app.logger.info(
            "User %s added game %s to center %s", current_user_id, payload.game_id, payload.center_id,
        )
        return api_response(True, instance.to_dict(include_center=True), status=201)
    except Exception:
        db.session.rollback()
        raise


@coordinator_bp.route('/games/<int:instance_id>', methods=['PUT'])
@coordinator_required
def update_game_instance(current_user_id, instance_id):
    try:
        payload = parse_json(UpdateGameInstance)
        instance = db.session.get(GameInstance, instance_id)
        if not instance:
            raise NotFoundError('עותק המשחק לא נמצא')
        ensure_center_access(current_user_id, instance.center_id)

        if payload.status is not None:
            instance.status = payload.status.value
        if payload.notes is not None:
            instance.notes = payload.notes
        db.session.commit()
        return api_response(True, instance.to_dict(include_center=True))
    except Exception:
        db.session.rollback()
        raise


@coordinator_bp.route('/rentals', methods=['GET'])
@coordinator_required
def list_rentals(current_user_id):
    query = _scoped(Rental.query, Rental.center_id, current_user_id)
    status = request.args.get('status')
    if status:
        query = query.filter(Rental.status == status.upper())
    rentals = query.order_by(Rental.created_at.desc()).all()
    return api_response(True, [rental.to_dict(include_user=True) for rental in rentals])


@coordinator_bp.route('/rentals/<int:rental_id>', methods=['PUT'])
@coordinator_required
def update_rental(current_user_id, rental_id):
    """Approve, return or cancel a rental at one of the caller's centers."""
    try:
        payload = parse_json(UpdateRentalByCoordinator)
        rental = db.session.get(Rental, rental_id)
        if not rental:
            raise NotFoundError('השאלה לא נמצאה')
        ensure_center_access(current_user_id, rental.center_id)

        if payload.status is not None and payload.status.value != rental.status:
            if not can_transition(rental.status, payload.status):
                raise ValidationError(
                    f'לא ניתן לשנות סטטוס מ-{rental.status} ל-{payload.status.value}'
                )
            if payload.status == RentalStatus.ACTIVE and copy_is_held(rental):
                raise ValidationError(COPY_HELD_MESSAGE)
            apply_rental_status(rental, payload.status)
            current_app.logger.info(
                "User %s moved rental %s to %s", current_user_id, rental.id, rental.status,
            )
        if payload.notes is not None:
            rental.notes = payload.notes
        db.session.commit()
        return api_response(True, rental.to_dict(include_user=True))
    except Exception:
        db.session.rollback()
        raise
