"""Hebrew display labels for enum values.

Must stay in sync with the frontend label tables.
"""

from couplegames.constants.roles import Role
from couplegames.constants.statuses import (
    Area,
    GameCategory,
    GameInstanceStatus,
    RentalStatus,
    TargetAudience,
)

CATEGORY_LABELS = {
    GameCategory.COMMUNICATION: 'תקשורת',
    GameCategory.INTIMACY: 'אינטימיות',
    GameCategory.FUN: 'כיף ובידור',
    GameCategory.THERAPY: 'טיפול',
    GameCategory.PERSONAL_DEVELOPMENT: 'פיתוח אישי',
}

AUDIENCE_LABELS = {
    TargetAudience.SINGLES: 'רווקים',
    TargetAudience.MARRIED: 'נשואים',
    TargetAudience.GENERAL: 'כללי',
}

AREA_LABELS = {
    Area.NORTH: 'צפון',
    Area.CENTER: 'מרכז',
    Area.SOUTH: 'דרום',
    Area.JERUSALEM: 'ירושלים והסביבה',
    Area.JUDEA_SAMARIA: 'יו״שׁ',
}

ROLE_LABELS = {
    Role.USER: 'משתמש',
    Role.ADMIN: 'אדמין',
    Role.SUPER_COORDINATOR: 'רכז על',
    Role.CENTER_COORDINATOR: 'רכז מוקד',
}

INSTANCE_STATUS_LABELS = {
    GameInstanceStatus.AVAILABLE: 'זמין',
    GameInstanceStatus.BORROWED: 'מושאל',
    GameInstanceStatus.UNAVAILABLE: 'לא זמין',
}

RENTAL_STATUS_LABELS = {
    RentalStatus.PENDING: 'ממתין לאישור',
    RentalStatus.ACTIVE: 'פעיל',
    RentalStatus.RETURNED: 'הוחזר',
    RentalStatus.CANCELLED: 'בוטל',
}


def label_for(table, value):
    """Look up a label by enum member or raw value; falls back to the value."""
    for key, label in table.items():
        if key == value or key.value == value:
            return label
    return value
