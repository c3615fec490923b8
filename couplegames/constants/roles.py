"""User roles and the pure access checks built on them.

Roles are independent flags, not a hierarchy: a user may hold any
combination, and a check passes when the held set intersects the
required one.
"""

import enum


class Role(str, enum.Enum):
    USER = 'USER'
    CENTER_COORDINATOR = 'CENTER_COORDINATOR'
    SUPER_COORDINATOR = 'SUPER_COORDINATOR'
    ADMIN = 'ADMIN'


ADMIN_ONLY = frozenset({Role.ADMIN})
COORDINATOR_ROLES = frozenset({Role.CENTER_COORDINATOR, Role.SUPER_COORDINATOR, Role.ADMIN})
SUPER_COORDINATOR_ROLES = frozenset({Role.SUPER_COORDINATOR, Role.ADMIN})

DEFAULT_ROLES = frozenset({Role.USER})


def parse_roles(values):
    """Turn stored/claimed role names into a role set, skipping unknown names."""
    roles = set()
    for value in values or ():
        try:
            roles.add(Role(value))
        except ValueError:
            continue
    return frozenset(roles)


def serialize_roles(roles):
    """Stable list form for JSON columns and token claims."""
    return sorted(Role(role).value for role in roles)


def has_any_role(held, required):
    return bool(parse_roles(held) & frozenset(required))


def is_admin(held):
    return has_any_role(held, ADMIN_ONLY)


def is_coordinator(held):
    return has_any_role(held, COORDINATOR_ROLES)


def is_super_coordinator(held):
    return has_any_role(held, SUPER_COORDINATOR_ROLES)


class AccessDecision:
    """Outcome of a role check: allowed, or denied with an HTTP status."""

    def __init__(self, allowed, status_code=200, reason=None):
        self.allowed = allowed
        self.status_code = status_code
        self.reason = reason

    def __bool__(self):
        return self.allowed

    def __repr__(self):
        if self.allowed:
            return '<AccessDecision allow>'
        return f'<AccessDecision deny {self.status_code} {self.reason}>'


def check_access(claims, required=None):
    """Decide whether session ``claims`` may call a route needing ``required``.

    ``claims`` is the decoded session token (or None when the request had
    none). ``required`` is a role set; empty or None means any signed-in
    user. Missing claims deny with 401, everything else denies with 403.
    """
    if not claims:
        return AccessDecision(False, 401, 'unauthenticated')
    if claims.get('is_active') is False:
        return AccessDecision(False, 403, 'inactive')
    if required and not has_any_role(claims.get('roles'), required):
        return AccessDecision(False, 403, 'insufficient_role')
    return AccessDecision(True)
