"""Routes for the signed-in user: profile and own rentals."""

from flask import Blueprint, current_app

from couplegames import db
from couplegames.constants.statuses import RentalStatus
from couplegames.errors import ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
from couplegames.models import GameInstance, Rental, User
from couplegames.schemas import CreateRental, UpdateProfile, UpdateRentalByUser
from couplegames.utils.auth import token_required
from couplegames.utils.rentals import build_rental_notes
from couplegames.utils.responses import api_response
from couplegames.utils.validation import parse_json, partial_update

user_bp = Blueprint('user', __name__)

NO_FIELDS_MESSAGE = 'לא נשלחו שדות לעדכון'
RENTAL_NOT_FOUND_MESSAGE = 'השאלה לא נמצאה'


def _current_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError()
    return user


@user_bp.route('', methods=['GET'])
@token_required
def get_profile(current_user_id):
    return api_response(True, _current_user(current_user_id).to_dict())


@user_bp.route('', methods=['PUT'])
@token_required
def update_profile(current_user_id):
    try:
        payload = parse_json(UpdateProfile)
        user = _current_user(current_user_id)
        if not partial_update(user, payload):
            raise ValidationError(NO_FIELDS_MESSAGE)
        db.session.commit()
        return api_response(True, user.to_dict())
    except Exception:
        db.session.rollback()
        raise


@user_bp.route('/rentals', methods=['GET'])
@token_required
def list_rentals(current_user_id):
    rentals = Rental.query.filter_by(user_id=current_user_id).order_by(Rental.created_at.desc()).all()
    return api_response(True, [rental.to_dict() for rental in rentals])


@user_bp.route('/rentals', methods=['POST'])
@token_required
def create_rental(current_user_id):
    """Request one or more copies from a single center.

    Creates one PENDING rental per copy. Copies that are borrowed or
    unavailable are still accepted; their rentals note the waitlist.
    """
    try:
        payload = parse_json(CreateRental)
        if not db.session.get(User, current_user_id):
            raise UnauthorizedError()

        instances = GameInstance.query.filter(GameInstance.id.in_(payload.game_instance_ids)).all()
        if len(instances) != len(payload.game_instance_ids):
            raise NotFoundError('אחד או יותר מהמשחקים לא נמצאו')

        if any(instance.center_id != payload.center_id for instance in instances):
            raise ValidationError('כל המשחקים חייבים להיות מאותו מוקד')

        game_ids = [instance.game_id for instance in instances]
        if len(set(game_ids)) != len(game_ids):
            raise ValidationError('לא ניתן לבקש את אותו משחק פעמיים')

        existing = Rental.query.filter(
            Rental.user_id == current_user_id,
            Rental.game_instance_id.in_(payload.game_instance_ids),
            Rental.status.in_([RentalStatus.PENDING.value, RentalStatus.ACTIVE.value]),
        ).first()
        if existing:
            raise ValidationError('כבר קיימת בקשה פתוחה לאחד או יותר מהמשחקים')

        games = [instance.game for instance in instances]
        rentals = []
        for instance in instances:
            rental = Rental(
                user_id=current_user_id,
                center_id=payload.center_id,
                game_instance_id=instance.id,
                status=RentalStatus.PENDING.value,
                notes=build_rental_notes(payload.notes, [instance], games) or None,
            )
            db.session.add(rental)
            rentals.append(rental)
        db.session.commit()

        current_app.logger.info(
            "User %s requested %d game(s) at center %s",
            current_user_id, len(rentals), payload.center_id,
        )
        return api_response(True, [rental.to_dict() for rental in rentals], status=201)
    except Exception:
        db.session.rollback()
        raise


@user_bp.route('/rentals/<int:rental_id>', methods=['PUT'])
@token_required
def update_rental(current_user_id, rental_id):
    """Cancel or edit the notes of one of the caller's pending rentals."""
    try:
        payload = parse_json(UpdateRentalByUser)
        rental = db.session.get(Rental, rental_id)
        if not rental:
            raise NotFoundError(RENTAL_NOT_FOUND_MESSAGE)
        if rental.user_id != current_user_id:
            raise ForbiddenError()
        if rental.status != RentalStatus.PENDING.value:
            raise ValidationError('ניתן לעדכן רק בקשות הממתינות לאישור')

        if payload.action == 'cancel':
            rental.status = RentalStatus.CANCELLED.value
        if payload.notes is not None:
            rental.notes = payload.notes
        db.session.commit()
        return api_response(True, rental.to_dict())
    except Exception:
        db.session.rollback()
        raise
