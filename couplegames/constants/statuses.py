"""Enumerations shared by the catalog and rental models."""

import enum


class Area(str, enum.Enum):
    NORTH = 'NORTH'
    CENTER = 'CENTER'
    SOUTH = 'SOUTH'
    JERUSALEM = 'JERUSALEM'
    JUDEA_SAMARIA = 'JUDEA_SAMARIA'


class GameCategory(str, enum.Enum):
    COMMUNICATION = 'COMMUNICATION'
    INTIMACY = 'INTIMACY'
    FUN = 'FUN'
    THERAPY = 'THERAPY'
    PERSONAL_DEVELOPMENT = 'PERSONAL_DEVELOPMENT'


class TargetAudience(str, enum.Enum):
    SINGLES = 'SINGLES'
    MARRIED = 'MARRIED'
    GENERAL = 'GENERAL'


class GameInstanceStatus(str, enum.Enum):
    AVAILABLE = 'AVAILABLE'
    BORROWED = 'BORROWED'
    UNAVAILABLE = 'UNAVAILABLE'


class RentalStatus(str, enum.Enum):
    PENDING = 'PENDING'
    ACTIVE = 'ACTIVE'
    RETURNED = 'RETURNED'
    CANCELLED = 'CANCELLED'


# Rentals that still hold (or wait for) a copy
OPEN_RENTAL_STATUSES = (RentalStatus.PENDING.value, RentalStatus.ACTIVE.value)

# Allowed coordinator transitions: current status -> reachable statuses
RENTAL_TRANSITIONS = {
    RentalStatus.PENDING: {RentalStatus.ACTIVE, RentalStatus.CANCELLED},
    RentalStatus.ACTIVE: {RentalStatus.RETURNED, RentalStatus.CANCELLED},
    RentalStatus.RETURNED: set(),
    RentalStatus.CANCELLED: set(),
}
