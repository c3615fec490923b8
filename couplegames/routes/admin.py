"""Admin routes for platform management."""

from collections import Counter
from datetime import datetime, timedelta

from flask import Blueprint, current_app, request
from sqlalchemy import String, cast, func, or_

from couplegames import db
from couplegames.constants.roles import Role
from couplegames.constants.statuses import GameInstanceStatus, OPEN_RENTAL_STATUSES, RentalStatus
from couplegames.errors import ForbiddenError, NotFoundError, ValidationError
from couplegames.models import Center, Game, GameInstance, Rental, User
from couplegames.schemas import (
    AdminUpdateUser,
    AssignRoles,
    CreateCenter,
    CreateGame,
    UpdateCenter,
    UpdateGame,
)
from couplegames.utils.auth import admin_required
from couplegames.utils.responses import api_response
from couplegames.utils.validation import parse_json, partial_update

admin_bp = Blueprint('admin', __name__)

CENTER_NOT_FOUND_MESSAGE = 'המוקד לא נמצא'
GAME_NOT_FOUND_MESSAGE = 'המשחק לא נמצא'


def _get_or_404(model, object_id, message=None):
    obj = db.session.get(model, object_id)
    if not obj:
        raise NotFoundError(message)
    return obj


def _check_staff(user_id, field):
    """Coordinator ids on a center must point at existing users."""
    if user_id is not None and not db.session.get(User, user_id):
        raise NotFoundError(f'המשתמש שהוגדר כ-{field} לא נמצא')


def _open_rentals_at(center_id):
    return Rental.query.filter(
        Rental.center_id == center_id, Rental.status.in_(OPEN_RENTAL_STATUSES),
    ).count()


# ============================================================================
# SYSTEM STATS
# ============================================================================

def _grouped_counts(column, *criteria):
    rows = db.session.query(column, func.count()).filter(*criteria).group_by(column).all()
    return {value: count for value, count in rows}


@admin_bp.route('/system', methods=['GET'])
@admin_required
def system_stats(current_user_id):
    """Platform-wide counts, distributions and 30-day activity."""
    month_ago = datetime.utcnow() - timedelta(days=30)

    overview = {
        'total_users': User.query.count(),
        'active_users': User.query.filter_by(is_active=True).count(),
        'total_centers': Center.query.count(),
        'active_centers': Center.query.filter_by(is_active=True).count(),
        'total_games': Game.query.count(),
        'total_game_instances': GameInstance.query.count(),
        'borrowed_game_instances': GameInstance.query.filter_by(
            status=GameInstanceStatus.BORROWED.value,
        ).count(),
        'total_rentals': Rental.query.count(),
        'active_rentals': Rental.query.filter_by(status=RentalStatus.ACTIVE.value).count(),
        'pending_rentals': Rental.query.filter_by(status=RentalStatus.PENDING.value).count(),
    }

    # JSON role lists are counted in Python
    users_by_role = Counter()
    for user in User.query.filter_by(is_active=True).all():
        users_by_role.update(role.value for role in user.role_set)

    distributions = {
        'users_by_role': dict(users_by_role),
        'rentals_by_status': _grouped_counts(Rental.status),
        'centers_by_area': _grouped_counts(Center.area, Center.is_active.is_(True)),
        'games_by_category': _grouped_counts(Game.category),
    }

    recent_activity = {
        'new_users': User.query.filter(User.created_at >= month_ago).count(),
        'new_rentals': Rental.query.filter(Rental.created_at >= month_ago).count(),
        'new_centers': Center.query.filter(Center.created_at >= month_ago).count(),
    }

    return api_response(True, {
        'overview': overview,
        'distributions': distributions,
        'recent_activity': recent_activity,
        'generated_at': datetime.utcnow().isoformat(),
    })


# ============================================================================
# USER MANAGEMENT
# ============================================================================

@admin_bp.route('/users', methods=['GET'])
@admin_required
def list_users(current_user_id):
    """List users with search, role filter and pagination."""
    page = max(request.args.get('page', 1, type=int), 1)
    per_page = min(max(request.args.get('per_page', 20, type=int), 1), 100)
    search = request.args.get('search', '').strip()
    role = request.args.get('role', '').strip().upper()

    query = User.query
    if search:
        search_term = f'%{search}%'
        query = query.filter(
            or_(
                User.name.ilike(search_term),
                User.email.ilike(search_term),
                User.phone.ilike(search_term),
            )
        )
    if role:
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError('תפקיד לא מוכר')
        # Role names are stored as a JSON list of quoted strings
        query = query.filter(cast(User.roles, String).like(f'%"{role.value}"%'))

    query = query.order_by(User.created_at.desc())
    total = query.count()
    users = query.offset((page - 1) * per_page).limit(per_page).all()

    return api_response(True, {
        'users': [user.to_dict() for user in users],
        'total': total,
        'page': page,
        'per_page': per_page,
        'total_pages': (total + per_page - 1) // per_page,
    })


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@admin_required
def update_user(current_user_id, user_id):
    try:
        payload = parse_json(AdminUpdateUser)
        user = _get_or_404(User, user_id)
        if user.id == current_user_id and payload.is_active is False:
            raise ForbiddenError('לא ניתן להשבית את החשבון שלך')
        partial_update(user, payload)
        db.session.commit()
        return api_response(True, user.to_dict())
    except Exception:
        db.session.rollback()
        raise


@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@admin_required
def delete_user(current_user_id, user_id):
    """Delete a user together with their rentals."""
    try:
        if user_id == current_user_id:
            raise ForbiddenError('לא ניתן למחוק את החשבון שלך')
        user = _get_or_404(User, user_id)
        email = user.email
        db.session.delete(user)
        db.session.commit()
        current_app.logger.info("Admin %s deleted user %s (%s)", current_user_id, user_id, email)
        return api_response(True, {'message': 'המשתמש נמחק בהצלחה', 'user_id': user_id})
    except Exception:
        db.session.rollback()
        raise


@admin_bp.route('/users/<int:user_id>/role', methods=['PUT'])
@admin_required
def assign_roles(current_user_id, user_id):
    """Replace a user's roles and (for coordinators) their managed center.

    Returns the updated user plus non-blocking ``warnings``.
    """
    try:
        payload = parse_json(AssignRoles)
        roles = frozenset(payload.roles)
        user = _get_or_404(User, user_id)

        if user_id == current_user_id and Role.ADMIN not in roles:
            raise ForbiddenError('לא ניתן להסיר הרשאת מנהל מעצמך')

        is_center_coordinator = Role.CENTER_COORDINATOR in roles
        if not roles - {Role.USER} and payload.managed_center_id:
            raise ValidationError('למשתמש רגיל לא ניתן לשייך מוקד')

        warnings = []
        if is_center_coordinator and not payload.managed_center_id:
            warnings.append('הוגדר רכז מוקד ללא מוקד משויך')

        current_center = user.managed_center
        new_center_id = payload.managed_center_id if is_center_coordinator else None
        if current_center and current_center.id != new_center_id:
            open_rentals = _open_rentals_at(current_center.id)
            if open_rentals:
                warnings.append(f'הרכז הוסר ממוקד עם {open_rentals} השאלות פעילות')
            current_center.coordinator_id = None

        if new_center_id:
            center = _get_or_404(Center, new_center_id, CENTER_NOT_FOUND_MESSAGE)
            center.coordinator_id = user.id

        user.role_set = roles
        db.session.commit()
        db.session.refresh(user)

        current_app.logger.info(
            "Admin %s set roles of user %s to %s", current_user_id, user_id, user.roles,
        )
        return api_response(True, {'user': user.to_dict(), 'warnings': warnings or None})
    except Exception:
        db.session.rollback()
        raise


# ============================================================================
# CENTERS
# ============================================================================

@admin_bp.route('/centers', methods=['GET'])
@admin_required
def list_centers(current_user_id):
    centers = Center.query.order_by(Center.name.asc()).all()
    data = []
    for center in centers:
        item = center.to_dict(include_contacts=True)
        item['game_count'] = len(center.game_instances)
        item['open_rentals'] = _open_rentals_at(center.id)
        data.append(item)
    return api_response(True, data)


@admin_bp.route('/centers', methods=['POST'])
@admin_required
def create_center(current_user_id):
    try:
        payload = parse_json(CreateCenter)
        _check_staff(payload.coordinator_id, 'רכז')
        _check_staff(payload.super_coordinator_id, 'רכז על')
        if payload.coordinator_id and Center.query.filter_by(coordinator_id=payload.coordinator_id).first():
            raise ValidationError('הרכז כבר משויך למוקד אחר')

        center = Center(**payload.model_dump(mode='json'))
        db.session.add(center)
        db.session.commit()
        return api_response(True, center.to_dict(include_contacts=True), status=201)
    except Exception:
        db.session.rollback()
        raise


@admin_bp.route('/centers/<int:center_id>', methods=['PUT'])
@admin_required
def update_center(current_user_id, center_id):
    try:
        payload = parse_json(UpdateCenter)
        center = _get_or_404(Center, center_id, CENTER_NOT_FOUND_MESSAGE)
        _check_staff(payload.coordinator_id, 'רכז')
        _check_staff(payload.super_coordinator_id, 'רכז על')
        if payload.coordinator_id:
            other = Center.query.filter(
                Center.coordinator_id == payload.coordinator_id, Center.id != center.id,
            ).first()
            if other:
                raise ValidationError('הרכז כבר משויך למוקד אחר')

        partial_update(center, payload)
        db.session.commit()
        return api_response(True, center.to_dict(include_contacts=True))
    except Exception:
        db.session.rollback()
        raise


@admin_bp.route('/centers/<int:center_id>', methods=['DELETE'])
@admin_required
def delete_center(current_user_id, center_id):
    """Deactivate a center. Refused while any of its copies is out."""
    try:
        center = _get_or_404(Center, center_id, CENTER_NOT_FOUND_MESSAGE)
        borrowed = GameInstance.query.filter_by(
            center_id=center.id, status=GameInstanceStatus.BORROWED.value,
        ).count()
        if borrowed:
            raise ValidationError('לא ניתן למחוק מוקד עם משחקים מושאלים')

        center.is_active = False
        db.session.commit()
        return api_response(True, {'message': 'המוקד הושבת בהצלחה'})
    except Exception:
        db.session.rollback()
        raise


# ============================================================================
# GAMES
# ============================================================================

@admin_bp.route('/games', methods=['GET'])
@admin_required
def list_games(current_user_id):
    games = Game.query.order_by(Game.created_at.desc()).all()
    data = []
    for game in games:
        item = game.to_dict()
        item['instance_count'] = len(game.instances)
        data.append(item)
    return api_response(True, data)


@admin_bp.route('/games', methods=['POST'])
@admin_required
def create_game(current_user_id):
    try:
        payload = parse_json(CreateGame)
        game = Game(**payload.model_dump(mode='json'))
        db.session.add(game)
        db.session.commit()
        return api_response(True, game.to_dict(), status=201)
    except Exception:
        db.session.rollback()
        raise


@admin_bp.route('/games/<int:game_id>', methods=['PUT'])
@admin_required
def update_game(current_user_id, game_id):
    try:
        payload = parse_json(UpdateGame)
        game = _get_or_404(Game, game_id, GAME_NOT_FOUND_MESSAGE)
        partial_update(game, payload)
        db.session.commit()
        return api_response(True, game.to_dict())
    except Exception:
        db.session.rollback()
        raise


@admin_bp.route('/games/<int:game_id>', methods=['DELETE'])
@admin_required
def delete_game(current_user_id, game_id):
    """Delete a game and its copies. Refused once any copy has been rented."""
    try:
        game = _get_or_404(Game, game_id, GAME_NOT_FOUND_MESSAGE)
        rented = Rental.query.join(GameInstance).filter(GameInstance.game_id == game.id).count()
        if rented:
            raise ValidationError('לא ניתן למחוק משחק עם השאלות קיימות')

        db.session.delete(game)
        db.session.commit()
        return api_response(True, {'message': 'המשחק נמחק בהצלחה'})
    except Exception:
        db.session.rollback()
        raise
