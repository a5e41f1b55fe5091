"""Role hierarchy. Total order employee < manager < admin. No FastAPI."""

from enum import Enum
from typing import Union


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


_RANKS: dict[Role, int] = {
    Role.ADMIN: 3,
    Role.MANAGER: 2,
    Role.EMPLOYEE: 1,
}


def parse_role(value: Union[Role, str, None]) -> Role | None:
    """Return the Role for a value, or None when it names no known role."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def rank(role: Union[Role, str, None]) -> int:
    """Numeric rank of a role. Unknown roles rank 0 and never satisfy a minimum."""
    parsed = parse_role(role)
    if parsed is None:
        return 0
    return _RANKS[parsed]


def at_least(role: Union[Role, str, None], minimum: Union[Role, str]) -> bool:
    """True when role ranks at or above minimum."""
    required = rank(minimum)
    return required > 0 and rank(role) >= required
