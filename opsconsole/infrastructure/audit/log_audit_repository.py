"""Audit sink that writes each record as one structured line on the opsconsole.audit logger."""

import logging
from typing import Optional

from opsconsole.governance.audit_models import AuditRecord

AUDIT_LOGGER_NAME = "opsconsole.audit"


class LoggingAuditRepository:
    """Implements AuditRepository protocol. Records are append-only log lines."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    async def save(self, record: AuditRecord) -> None:
        self._logger.info("audit_record", extra={"audit": record.to_dict()})
