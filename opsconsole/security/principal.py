"""Authenticated principal as seen by the access layer."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from opsconsole.security.roles import Role


@dataclass(frozen=True)
class Principal:
    id: str
    role: Role
    department: Optional[str] = None
    is_active: bool = True

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "department": self.department,
            "is_active": self.is_active,
        }
