"""Shared constants for the application."""

from couplegames.constants.roles import (
    Role,
    ADMIN_ONLY,
    COORDINATOR_ROLES,
    SUPER_COORDINATOR_ROLES,
    DEFAULT_ROLES,
    parse_roles,
    serialize_roles,
    has_any_role,
    check_access,
)
from couplegames.constants.statuses import (
    Area,
    GameCategory,
    TargetAudience,
    GameInstanceStatus,
    RentalStatus,
    OPEN_RENTAL_STATUSES,
    RENTAL_TRANSITIONS,
)

__all__ = [
    'Role',
    'ADMIN_ONLY',
    'COORDINATOR_ROLES',
    'SUPER_COORDINATOR_ROLES',
    'DEFAULT_ROLES',
    'parse_roles',
    'serialize_roles',
    'has_any_role',
    'check_access',
    'Area',
    'GameCategory',
    'TargetAudience',
    'GameInstanceStatus',
    'RentalStatus',
    'OPEN_RENTAL_STATUSES',
    'RENTAL_TRANSITIONS',
]
