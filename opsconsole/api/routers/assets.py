"""Assets API router: inventory, assignment, maintenance log, dashboard stats."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from opsconsole.api.dependencies import (
    CurrentPrincipal,
    Pagination,
    get_asset_service,
    require_min_role,
)
from opsconsole.application.asset_service import AssetService
from opsconsole.domain.models.asset import AssetCategory, AssetStatus
from opsconsole.domain.schemas.asset import (
    AssetCreateRequest,
    AssetResponse,
    AssetStats,
    AssetUpdateRequest,
    AssignRequest,
    MaintenanceRequest,
)
from opsconsole.domain.schemas.common import Page
from opsconsole.security.permissions import ResourceType
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

router = APIRouter()

Service = Annotated[AssetService, Depends(get_asset_service)]


@router.get("/", response_model=Page[AssetResponse])
async def list_assets(
    principal: CurrentPrincipal,
    service: Service,
    pagination: Annotated[Pagination, Depends()],
    category: Optional[AssetCategory] = None,
    status: Optional[AssetStatus] = None,
    assigned_to: Optional[str] = None,
    search: Annotated[Optional[str], Query(max_length=200)] = None,
):
    return await service.list_assets(
        principal,
        category=category,
        status=status,
        assigned_to=assigned_to,
        search=search,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/stats", response_model=AssetStats)
async def asset_stats(
    principal: Annotated[Principal, Depends(require_min_role(Role.MANAGER, ResourceType.ASSETS))],
    service: Service,
):
    return await service.stats(principal)


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(asset_id: str, principal: CurrentPrincipal, service: Service):
    return AssetResponse.model_validate(await service.get_asset(principal, asset_id))


@router.post("/", response_model=AssetResponse, status_code=201)
async def create_asset(body: AssetCreateRequest, principal: CurrentPrincipal, service: Service):
    return AssetResponse.model_validate(await service.create_asset(principal, body))


@router.patch("/{asset_id}", response_model=AssetResponse)
async def update_asset(
    asset_id: str,
    body: AssetUpdateRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    return AssetResponse.model_validate(await service.update_asset(principal, asset_id, body))


@router.delete("/{asset_id}", response_model=AssetResponse)
async def retire_asset(asset_id: str, principal: CurrentPrincipal, service: Service):
    """Retire: the asset stays on record with status retired and no assignee."""
    return AssetResponse.model_validate(await service.retire_asset(principal, asset_id))


@router.post("/{asset_id}/assign", response_model=AssetResponse)
async def assign_asset(
    asset_id: str,
    body: AssignRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    return AssetResponse.model_validate(await service.assign_asset(principal, asset_id, body.user_id))


@router.post("/{asset_id}/unassign", response_model=AssetResponse)
async def unassign_asset(asset_id: str, principal: CurrentPrincipal, service: Service):
    return AssetResponse.model_validate(await service.unassign_asset(principal, asset_id))


@router.post("/{asset_id}/maintenance", response_model=AssetResponse, status_code=201)
async def add_maintenance(
    asset_id: str,
    body: MaintenanceRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    return AssetResponse.model_validate(await service.add_maintenance(principal, asset_id, body))
