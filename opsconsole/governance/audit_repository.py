"""Where audit records go. Implemented in infrastructure/audit."""

from typing import Protocol

from opsconsole.governance.audit_models import AuditRecord


class AuditRepository(Protocol):
    async def save(self, record: AuditRecord) -> None:
        """Append one record. Stored records are never updated or removed."""
        ...
