"""Domain model for console users. Pure business semantics. No ORM or infrastructure."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

# Fields each role may change through a general profile update. Role changes go through the
# dedicated role-change path.
EMPLOYEE_EDITABLE_FIELDS = frozenset({"name", "avatar"})
ADMIN_EDITABLE_FIELDS = frozenset({"name", "department", "avatar", "is_active", "role"})


@dataclass
class User:
    id: str
    email: str
    name: str
    role: Role = Role.EMPLOYEE
    department: Optional[str] = None
    is_active: bool = True
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def principal(self) -> Principal:
        return Principal(
            id=self.id,
            role=self.role,
            department=self.department,
            is_active=self.is_active,
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "department": self.department,
            "is_active": self.is_active,
        }
