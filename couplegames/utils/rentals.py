"""Rental helpers shared by the user and coordinator routes."""

from datetime import datetime

from couplegames.constants.statuses import (
    RENTAL_TRANSITIONS,
    GameInstanceStatus,
    RentalStatus,
)
from couplegames.models import Rental

UNKNOWN_GAME_NAME = 'משחק'


def _waitlist_note(game_name, status):
    if status == GameInstanceStatus.BORROWED:
        return f'{game_name} כרגע מושאל - בקשה לרשימת המתנה'
    if status == GameInstanceStatus.UNAVAILABLE:
        return f'{game_name} כרגע לא זמין - בקשה לרשימת המתנה'
    return None


def build_rental_notes(user_notes, instances, games):
    """
    Combine the user's notes with a waitlist line for every requested copy
    that is not currently available.

    Args:
        user_notes: Free text typed by the user (may be empty)
        instances: Requested GameInstance objects
        games: Game objects used to look up names by ``instance.game_id``

    Returns:
        str: ``"<notes>\\n\\n<status lines>"``, or whichever part is non-empty

    Usage:
        notes = build_rental_notes('Please call before pickup', [copy], [game])
    """
    names = {game.id: game.name for game in games}
    status_notes = []
    for instance in instances:
        note = _waitlist_note(names.get(instance.game_id) or UNKNOWN_GAME_NAME, instance.status)
        if note:
            status_notes.append(note)

    trimmed = (user_notes or '').strip()
    if not status_notes:
        return trimmed

    status_text = '\n'.join(status_notes)
    return f'{trimmed}\n\n{status_text}' if trimmed else status_text


def can_transition(current, target):
    """True when a coordinator may move a rental from ``current`` to ``target``."""
    try:
        current, target = RentalStatus(current), RentalStatus(target)
    except ValueError:
        return False
    return target in RENTAL_TRANSITIONS[current]


def copy_is_held(rental):
    """True when ``rental``'s copy is out with someone else.

    Either another rental is ACTIVE on the copy or the copy is marked
    borrowed. A coordinator must not activate ``rental`` while this holds.
    """
    instance = rental.game_instance
    if instance and instance.status == GameInstanceStatus.BORROWED.value:
        return True
    return Rental.query.filter(
        Rental.game_instance_id == rental.game_instance_id,
        Rental.status == RentalStatus.ACTIVE.value,
        Rental.id != rental.id,
    ).first() is not None


def apply_rental_status(rental, target, now=None):
    """
    Move ``rental`` to ``target`` and keep its game copy's status in step.

    ACTIVE stamps the borrow date and marks the copy borrowed; RETURNED
    stamps the return date. Returning or cancelling an ACTIVE rental frees
    the copy; cancelling a PENDING one leaves the copy untouched.
    The caller checks ``can_transition`` and ``copy_is_held`` first and
    commits afterwards.
    """
    now = now or datetime.utcnow()
    target = RentalStatus(target)
    was_active = rental.status == RentalStatus.ACTIVE.value
    rental.status = target.value
    instance = rental.game_instance

    if target == RentalStatus.ACTIVE:
        rental.borrow_date = now
        if instance:
            instance.status = GameInstanceStatus.BORROWED.value
            instance.expected_return_date = rental.expected_return_date
    elif target in (RentalStatus.RETURNED, RentalStatus.CANCELLED):
        if target == RentalStatus.RETURNED:
            rental.return_date = now
        if instance and was_active:
            instance.status = GameInstanceStatus.AVAILABLE.value
            instance.expected_return_date = None
    return rental
