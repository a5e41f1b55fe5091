"""AccessControl: two-step team resolution, denial logging and decision metrics."""

import logging

import pytest

from opsconsole.application.access import ACCESS_DECISIONS_METRIC
from opsconsole.security.exceptions import ForbiddenError, NotAuthenticatedError, ScopeDeniedError
from opsconsole.security.permissions import Action, ResourceType
from opsconsole.security.predicates import FieldEquals, MatchAll
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

ADMIN = Principal(id="a-1", role=Role.ADMIN, department="IT")
ENG_MANAGER = Principal(id="m-eng", role=Role.MANAGER, department="Engineering")
EMPLOYEE = Principal(id="e-1", role=Role.EMPLOYEE, department="Engineering")


def _series(metrics):
    return metrics.export_metrics()["counters_by_labels"].get(ACCESS_DECISIONS_METRIC, {})


def _key(resource, action, outcome):
    return f"{ACCESS_DECISIONS_METRIC}:action={action},outcome={outcome},resource={resource}"


@pytest.mark.asyncio
async def test_team_authorize_loads_only_the_anchor(access, users_repo):
    record = {"id": "as-1", "created_by": "m-eng", "assigned_to": "e-2"}
    decision = await access.authorize(ENG_MANAGER, ResourceType.ASSETS, Action.UPDATE, record)
    assert decision.allowed
    users_repo.get_many.assert_awaited_once_with(["e-2"])
    users_repo.list_department.assert_not_awaited()


@pytest.mark.asyncio
async def test_team_authorize_outside_department_denied(access, metrics, caplog):
    record = {"id": "as-2", "created_by": "a-1", "assigned_to": "s-1"}
    with caplog.at_level(logging.WARNING, logger="tests.access"):
        with pytest.raises(ScopeDeniedError) as exc_info:
            await access.authorize(ENG_MANAGER, ResourceType.ASSETS, Action.UPDATE, record)
    assert exc_info.value.required == ["update:team"]
    assert _series(metrics)[_key("assets", "update", "out_of_scope")] == 1
    denial = next(r for r in caplog.records if r.getMessage() == "access_denied")
    assert denial.reason == "out_of_scope"
    assert denial.resource_type == "assets"


@pytest.mark.asyncio
async def test_full_grant_skips_directory_lookup(access, users_repo, metrics):
    await access.authorize(ADMIN, ResourceType.ASSETS, Action.DELETE, {"id": "as-1", "created_by": "s-1"})
    users_repo.get_many.assert_not_awaited()
    assert _series(metrics)[_key("assets", "delete", "allowed")] == 1


@pytest.mark.asyncio
async def test_team_list_filter_uses_department_members(access, users_repo):
    predicate = await access.list_filter(ENG_MANAGER, ResourceType.ASSETS)
    users_repo.list_department.assert_awaited_once_with("Engineering")
    assert predicate.matches({"created_by": "a-1", "assigned_to": "e-1"})
    assert predicate.matches({"created_by": "e-2", "assigned_to": None})
    assert not predicate.matches({"created_by": "m-eng", "assigned_to": "s-1"})
    assert not predicate.matches({"created_by": "s-1", "assigned_to": None})


@pytest.mark.asyncio
async def test_list_filter_narrowed_by_query_filter(access):
    predicate = await access.list_filter(
        EMPLOYEE, ResourceType.ASSETS, FieldEquals("status", "in-use")
    )
    assert predicate.matches({"assigned_to": "e-1", "status": "in-use"})
    assert not predicate.matches({"assigned_to": "e-1", "status": "available"})
    assert not predicate.matches({"assigned_to": "e-2", "status": "in-use"})


@pytest.mark.asyncio
async def test_admin_list_filter_is_unrestricted(access, users_repo):
    assert await access.list_filter(ADMIN, ResourceType.VENDORS) == MatchAll()
    users_repo.list_department.assert_not_awaited()


@pytest.mark.asyncio
async def test_manager_without_department_lists_nothing(access, users_repo):
    orphan = Principal(id="m-2", role=Role.MANAGER, department=None)
    predicate = await access.list_filter(orphan, ResourceType.ASSETS)
    users_repo.list_department.assert_not_awaited()
    assert not predicate.matches({"created_by": "m-2", "assigned_to": None})


def test_check_type_forbidden_counts_denial(access, metrics):
    with pytest.raises(ForbiddenError) as exc_info:
        access.check_type(EMPLOYEE, ResourceType.VENDORS, Action.READ)
    assert exc_info.value.required == ["admin", "manager"]
    assert _series(metrics)[_key("vendors", "read", "forbidden")] == 1


def test_check_type_unauthenticated(access, metrics):
    with pytest.raises(NotAuthenticatedError):
        access.check_type(None, ResourceType.USERS, Action.READ)
    assert _series(metrics)[_key("users", "read", "unauthenticated")] == 1


def test_full_grant_roles(access):
    assert access.full_grant_roles(ResourceType.USERS, Action.UPDATE) == ["admin"]
    assert access.full_grant_roles(ResourceType.ASSETS, Action.UPDATE) == ["admin", "manager"]
