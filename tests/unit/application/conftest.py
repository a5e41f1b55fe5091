"""Fixtures for application service tests: mocked repositories around a real access gate."""

import logging
from unittest.mock import AsyncMock

import pytest

from opsconsole.application.access import AccessControl
from opsconsole.domain.models.user import User
from opsconsole.governance.audit_logger import AuditLogger
from opsconsole.observability.metrics import MetricsCollector
from opsconsole.security.gate import AccessGate
from opsconsole.security.roles import Role

DIRECTORY = [
    User(id="a-1", email="ada@example.com", name="Ada", role=Role.ADMIN, department="IT"),
    User(id="a-2", email="alan@example.com", name="Alan", role=Role.ADMIN, department="IT"),
    User(id="m-eng", email="grace@example.com", name="Grace", role=Role.MANAGER, department="Engineering"),
    User(id="e-1", email="linus@example.com", name="Linus", role=Role.EMPLOYEE, department="Engineering"),
    User(id="e-2", email="ken@example.com", name="Ken", role=Role.EMPLOYEE, department="Engineering"),
    User(id="s-1", email="sam@example.com", name="Sam", role=Role.EMPLOYEE, department="Sales"),
]


def _by_id(user_id):
    for user in DIRECTORY:
        if user.id == user_id:
            return user
    return None


@pytest.fixture
def users_repo():
    """User repository mock answering lookups from DIRECTORY."""
    r = AsyncMock()
    r.get = AsyncMock(side_effect=_by_id)
    r.get_many = AsyncMock(side_effect=lambda ids: [u for u in DIRECTORY if u.id in set(ids)])
    r.list_department = AsyncMock(
        side_effect=lambda dept: [u for u in DIRECTORY if u.department == dept and u.is_active]
    )
    r.get_by_email = AsyncMock(return_value=None)
    r.count_active_admins = AsyncMock(return_value=2)
    r.change_role = AsyncMock(return_value=True)
    r.deactivate = AsyncMock(return_value=True)
    r.add = AsyncMock(side_effect=lambda u: u)
    r.save = AsyncMock(side_effect=lambda u: u)
    return r


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def access(users_repo, metrics):
    return AccessControl(
        gate=AccessGate(),
        users=users_repo,
        metrics=metrics,
        logger=logging.getLogger("tests.access"),
    )


@pytest.fixture
def audit_repo():
    r = AsyncMock()
    r.save = AsyncMock(return_value=None)
    return r


@pytest.fixture
def audit(audit_repo):
    return AuditLogger(repository=audit_repo)


@pytest.fixture
def logger():
    return logging.getLogger("tests.services")
