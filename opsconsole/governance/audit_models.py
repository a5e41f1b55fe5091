"""Audit trail records for privileged console changes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class AuditAction(str, Enum):
    CHANGE_ROLE = "change_role"
    DEACTIVATE_USER = "deactivate_user"
    ASSIGN_ASSET = "assign_asset"
    UNASSIGN_ASSET = "unassign_asset"
    RETIRE_ASSET = "retire_asset"
    CANCEL_ONBOARDING = "cancel_onboarding"


@dataclass(frozen=True)
class AuditRecord:
    """
    One privileged change: the acting principal and its role at the time,
    the record touched, and the before/after values that matter for review.
    """

    actor_id: str
    actor_role: str
    action: AuditAction
    resource_type: str
    resource_id: str
    occurred_at: datetime
    correlation_id: Optional[str] = None
    changes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_dict(self) -> dict[str, Any]:
        return {
            "actor_id": self.actor_id,
            "actor_role": self.actor_role,
            "action": self.action.value,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "occurred_at": self.occurred_at.isoformat(),
            "correlation_id": self.correlation_id,
            "changes": dict(self.changes),
        }
