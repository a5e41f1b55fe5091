"""Audit trail: record contents, immutability, request correlation, log sink."""

import json
import logging
from datetime import timezone
from unittest.mock import AsyncMock

import pytest

from opsconsole.core.context import correlation_id_ctx
from opsconsole.governance.audit_logger import AuditLogger
from opsconsole.governance.audit_models import AuditAction, AuditRecord
from opsconsole.infrastructure.audit.log_audit_repository import AUDIT_LOGGER_NAME, LoggingAuditRepository
from opsconsole.security.permissions import ResourceType
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

ADMIN = Principal(id="a-1", role=Role.ADMIN, department="IT")
MANAGER = Principal(id="m-eng", role=Role.MANAGER, department="Engineering")


@pytest.fixture
def audit_repository():
    repo = AsyncMock()
    repo.save = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def audit_logger(audit_repository):
    return AuditLogger(repository=audit_repository)


async def test_record_captures_actor_and_change(audit_logger, audit_repository):
    await audit_logger.log_action(
        ADMIN,
        AuditAction.CHANGE_ROLE,
        ResourceType.USERS,
        "u-7",
        changes={"from": "admin", "to": "manager"},
    )
    audit_repository.save.assert_awaited_once()
    record = audit_repository.save.await_args.args[0]
    assert isinstance(record, AuditRecord)
    assert record.actor_id == "a-1"
    assert record.actor_role == "admin"
    assert record.action is AuditAction.CHANGE_ROLE
    assert record.resource_type == "users"
    assert record.resource_id == "u-7"
    assert dict(record.changes) == {"from": "admin", "to": "manager"}
    assert record.occurred_at.tzinfo == timezone.utc


async def test_record_is_immutable(audit_logger):
    changes = {"from": None, "to": "e-2"}
    record = await audit_logger.log_action(
        MANAGER, AuditAction.ASSIGN_ASSET, ResourceType.ASSETS, "as-1", changes=changes
    )
    with pytest.raises(AttributeError):
        record.actor_id = "other"  # type: ignore[misc]
    with pytest.raises(TypeError):
        record.changes["to"] = "s-1"  # type: ignore[index]
    # Later edits to the caller's dict do not leak into the record.
    changes["to"] = "s-1"
    assert record.changes["to"] == "e-2"


async def test_correlation_id_comes_from_request_context(audit_logger):
    token = correlation_id_ctx.set("req-42")
    try:
        record = await audit_logger.log_action(
            ADMIN, AuditAction.RETIRE_ASSET, ResourceType.ASSETS, "as-1"
        )
    finally:
        correlation_id_ctx.reset(token)
    assert record.correlation_id == "req-42"
    assert dict(record.changes) == {}


async def test_correlation_id_absent_outside_requests(audit_logger):
    record = await audit_logger.log_action(
        ADMIN, AuditAction.DEACTIVATE_USER, ResourceType.USERS, "u-3"
    )
    assert record.correlation_id is None


async def test_logging_repository_emits_structured_record(caplog):
    audit_logger = AuditLogger(repository=LoggingAuditRepository())
    with caplog.at_level(logging.INFO, logger=AUDIT_LOGGER_NAME):
        await audit_logger.log_action(
            MANAGER,
            AuditAction.CANCEL_ONBOARDING,
            ResourceType.ONBOARDING_INSTANCES,
            "on-1",
            changes={"employee": "e-1"},
        )
    emitted = [r for r in caplog.records if r.name == AUDIT_LOGGER_NAME]
    assert len(emitted) == 1
    payload = emitted[0].audit
    assert payload["action"] == "cancel_onboarding"
    assert payload["actor_role"] == "manager"
    assert payload["resource_type"] == "onboarding_instances"
    assert payload["changes"] == {"employee": "e-1"}
    json.dumps(payload)
