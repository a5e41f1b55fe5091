"""AssetService: team-scoped manager access, assignment against the proposed record, stats."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from opsconsole.application.asset_service import AssetService
from opsconsole.application.exceptions import ResourceNotFoundError
from opsconsole.domain.exceptions import AssetRetiredError
from opsconsole.domain.models.asset import Asset, AssetCategory, AssetStatus
from opsconsole.domain.schemas.asset import AssetCreateRequest, AssetUpdateRequest, MaintenanceRequest
from opsconsole.security.exceptions import ForbiddenError, ScopeDeniedError
from opsconsole.security.predicates import FieldRange
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

ADMIN = Principal(id="a-1", role=Role.ADMIN, department="IT")
ENG_MANAGER = Principal(id="m-eng", role=Role.MANAGER, department="Engineering")
EMPLOYEE = Principal(id="e-1", role=Role.EMPLOYEE, department="Engineering")


def _asset(**overrides) -> Asset:
    values = dict(id="as-1", name="Laptop", category=AssetCategory.HARDWARE, created_by="m-eng")
    values.update(overrides)
    return Asset(**values)


@pytest.fixture
def assets_repo():
    r = AsyncMock()
    r.get = AsyncMock(return_value=_asset())
    r.add = AsyncMock(side_effect=lambda a: a)
    r.save = AsyncMock(side_effect=lambda a: a)
    r.count = AsyncMock(return_value=0)
    r.count_by = AsyncMock(return_value={})
    r.sum_current_value = AsyncMock(return_value=0.0)
    return r


@pytest.fixture
def service(assets_repo, users_repo, access, audit, logger):
    return AssetService(
        repository=assets_repo,
        users=users_repo,
        access=access,
        audit=audit,
        logger=logger,
    )


# ---------- assignment ----------


@pytest.mark.asyncio
async def test_manager_assigns_to_team_member(service, assets_repo, audit_repo):
    asset = await service.assign_asset(ENG_MANAGER, "as-1", "e-2")
    assert asset.assigned_to == "e-2"
    assert asset.status is AssetStatus.IN_USE
    assets_repo.save.assert_awaited_once()
    record = audit_repo.save.await_args.args[0]
    assert record.action == "assign_asset"
    assert dict(record.changes) == {"from": None, "to": "e-2"}


@pytest.mark.asyncio
async def test_manager_cannot_assign_outside_team(service, assets_repo):
    with pytest.raises(ScopeDeniedError) as exc_info:
        await service.assign_asset(ENG_MANAGER, "as-1", "s-1")
    assert exc_info.value.required == ["assign:team"]
    assets_repo.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_manager_cannot_take_asset_held_by_other_department(service, assets_repo, audit_repo):
    assets_repo.get = AsyncMock(return_value=_asset(created_by="a-1", assigned_to="s-1"))
    with pytest.raises(ScopeDeniedError) as exc_info:
        await service.assign_asset(ENG_MANAGER, "as-1", "e-1")
    assert exc_info.value.required == ["assign:team"]
    assets_repo.save.assert_not_awaited()
    audit_repo.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_admin_assigns_anywhere(service):
    asset = await service.assign_asset(ADMIN, "as-1", "s-1")
    assert asset.assigned_to == "s-1"


@pytest.mark.asyncio
async def test_assign_to_unknown_user_not_found(service):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await service.assign_asset(ADMIN, "as-1", "ghost")
    assert exc_info.value.message == "User not found"


@pytest.mark.asyncio
async def test_assign_retired_asset_rejected(service, assets_repo):
    assets_repo.get = AsyncMock(return_value=_asset(status=AssetStatus.RETIRED))
    with pytest.raises(AssetRetiredError):
        await service.assign_asset(ADMIN, "as-1", "e-1")


@pytest.mark.asyncio
async def test_employee_cannot_assign(service, assets_repo):
    with pytest.raises(ForbiddenError):
        await service.assign_asset(EMPLOYEE, "as-1", "e-1")
    assets_repo.get.assert_not_awaited()


# ---------- reads and updates ----------


@pytest.mark.asyncio
async def test_employee_reads_only_assigned_assets(service, assets_repo):
    assets_repo.get = AsyncMock(return_value=_asset(assigned_to="e-1"))
    assert (await service.get_asset(EMPLOYEE, "as-1")).assigned_to == "e-1"

    assets_repo.get = AsyncMock(return_value=_asset(assigned_to="e-2"))
    with pytest.raises(ScopeDeniedError):
        await service.get_asset(EMPLOYEE, "as-1")


@pytest.mark.asyncio
async def test_missing_asset_is_not_found(service, assets_repo):
    assets_repo.get = AsyncMock(return_value=None)
    with pytest.raises(ResourceNotFoundError):
        await service.get_asset(ENG_MANAGER, "nope")


@pytest.mark.asyncio
async def test_manager_cannot_update_other_department_asset(service, assets_repo):
    assets_repo.get = AsyncMock(return_value=_asset(created_by="a-1", assigned_to="s-1"))
    with pytest.raises(ScopeDeniedError):
        await service.update_asset(ENG_MANAGER, "as-1", AssetUpdateRequest(location="HQ"))
    assets_repo.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_recomputes_value(service, assets_repo):
    purchased = datetime.now(timezone.utc) - timedelta(days=365.25)
    assets_repo.get = AsyncMock(return_value=_asset(purchase_price=1000.0, purchase_date=purchased))
    asset = await service.update_asset(ENG_MANAGER, "as-1", AssetUpdateRequest(depreciation_rate=50.0))
    assert asset.current_value == pytest.approx(500.0, abs=0.5)


@pytest.mark.asyncio
async def test_create_asset_records_creator(service, assets_repo):
    asset = await service.create_asset(
        ENG_MANAGER,
        AssetCreateRequest(name="Monitor", category=AssetCategory.HARDWARE, purchase_price=300.0),
    )
    assert asset.created_by == "m-eng"
    assert asset.current_value == 300.0
    assets_repo.add.assert_awaited_once()


@pytest.mark.asyncio
async def test_employee_cannot_create_asset(service):
    with pytest.raises(ForbiddenError):
        await service.create_asset(EMPLOYEE, AssetCreateRequest(name="Chair", category=AssetCategory.FURNITURE))


@pytest.mark.asyncio
async def test_retire_asset_audited(service, audit_repo):
    asset = await service.retire_asset(ADMIN, "as-1")
    assert asset.status is AssetStatus.RETIRED
    assert audit_repo.save.await_args.args[0].action == "retire_asset"


@pytest.mark.asyncio
async def test_add_maintenance_appends_record(service):
    asset = await service.add_maintenance(
        ADMIN,
        "as-1",
        MaintenanceRequest(date=datetime(2025, 1, 5, tzinfo=timezone.utc), description="Fan replaced", cost=40),
    )
    assert [m.description for m in asset.maintenance_history] == ["Fan replaced"]


# ---------- stats ----------


@pytest.mark.asyncio
async def test_stats_are_team_scoped(service, assets_repo):
    assets_repo.count = AsyncMock(side_effect=[4, 1, 2])
    assets_repo.count_by = AsyncMock(side_effect=[{"in-use": 3, "maintenance": 1}, {"hardware": 4}])
    assets_repo.sum_current_value = AsyncMock(return_value=1234.5)

    stats = await service.stats(ENG_MANAGER)

    assert stats.total == 4
    assert stats.maintenance_due == 1
    assert stats.warranty_expiring_soon == 2
    assert stats.by_status == {"in-use": 3, "maintenance": 1}
    assert stats.total_value == 1234.5
    scope = assets_repo.count.await_args_list[0].args[0]
    assert scope.matches({"created_by": "e-1", "assigned_to": None})
    assert not scope.matches({"created_by": "s-1", "assigned_to": None})
    warranty = assets_repo.count.await_args_list[2].args[0]
    assert any(isinstance(p, FieldRange) for p in warranty.parts)
