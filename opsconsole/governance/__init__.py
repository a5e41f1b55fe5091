"""Governance: immutable audit trail. No FastAPI."""

from opsconsole.governance.audit_logger import AuditLogger
from opsconsole.governance.audit_models import AuditRecord

__all__ = [
    "AuditLogger",
    "AuditRecord",
]
