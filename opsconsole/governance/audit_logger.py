"""Audit trail for role changes, deactivations, asset custody and onboarding cancellation. No FastAPI."""

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional

from opsconsole.core.context import correlation_id_ctx
from opsconsole.governance.audit_models import AuditAction, AuditRecord
from opsconsole.governance.audit_repository import AuditRepository
from opsconsole.security.permissions import ResourceType
from opsconsole.security.principal import Principal


class AuditLogger:
    """Builds records from the acting principal and the request context, then hands them to the repository."""

    def __init__(self, repository: AuditRepository) -> None:
        self._repository = repository

    async def log_action(
        self,
        actor: Principal,
        action: AuditAction,
        resource_type: ResourceType,
        resource_id: str,
        changes: Optional[Mapping[str, Any]] = None,
    ) -> AuditRecord:
        record = AuditRecord(
            actor_id=actor.id,
            actor_role=actor.role.value,
            action=action,
            resource_type=resource_type.value,
            resource_id=resource_id,
            occurred_at=datetime.now(timezone.utc),
            correlation_id=correlation_id_ctx.get(),
            changes=MappingProxyType(dict(changes or {})),
        )
        await self._repository.save(record)
        return record
