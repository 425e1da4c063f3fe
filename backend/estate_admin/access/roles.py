"""Account roles."""

import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    EMPLOYEE = "employee"
    USER = "user"


# Roles that may appear in a navigation item's allow-list and that resolve
# admin navigation at all. Plain `user` accounts never reach the admin area.
ADMIN_AREA_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.EMPLOYEE})


def parse_role(value: object) -> Role | None:
    """Return the Role for a stored token, or None when it is not one."""
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Role(value.strip().lower())
    except ValueError:
        return None
