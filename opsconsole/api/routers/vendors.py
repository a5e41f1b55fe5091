"""Vendors API router: vendor records and their contracts."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from opsconsole.api.dependencies import (
    CurrentPrincipal,
    Pagination,
    get_vendor_service,
    require_min_role,
)
from opsconsole.application.vendor_service import VendorService
from opsconsole.domain.schemas.common import Page
from opsconsole.domain.schemas.vendor import (
    ContractRequest,
    ContractResponse,
    ContractUpdateRequest,
    VendorCreateRequest,
    VendorResponse,
    VendorStats,
    VendorUpdateRequest,
)
from opsconsole.security.permissions import ResourceType
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

router = APIRouter()

Service = Annotated[VendorService, Depends(get_vendor_service)]


@router.get("/", response_model=Page[VendorResponse])
async def list_vendors(
    principal: CurrentPrincipal,
    service: Service,
    pagination: Annotated[Pagination, Depends()],
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Annotated[Optional[str], Query(max_length=200)] = None,
):
    return await service.list_vendors(
        principal,
        category=category,
        is_active=is_active,
        search=search,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/stats", response_model=VendorStats)
async def vendor_stats(
    principal: Annotated[Principal, Depends(require_min_role(Role.ADMIN, ResourceType.VENDORS))],
    service: Service,
):
    return await service.stats(principal)


@router.get("/{vendor_id}", response_model=VendorResponse)
async def get_vendor(vendor_id: str, principal: CurrentPrincipal, service: Service):
    return VendorResponse.model_validate(await service.get_vendor(principal, vendor_id))


@router.post("/", response_model=VendorResponse, status_code=201)
async def create_vendor(body: VendorCreateRequest, principal: CurrentPrincipal, service: Service):
    return VendorResponse.model_validate(await service.create_vendor(principal, body))


@router.patch("/{vendor_id}", response_model=VendorResponse)
async def update_vendor(
    vendor_id: str,
    body: VendorUpdateRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    return VendorResponse.model_validate(await service.update_vendor(principal, vendor_id, body))


@router.delete("/{vendor_id}", response_model=VendorResponse)
async def deactivate_vendor(vendor_id: str, principal: CurrentPrincipal, service: Service):
    return VendorResponse.model_validate(await service.deactivate_vendor(principal, vendor_id))


@router.post("/{vendor_id}/contracts", response_model=ContractResponse, status_code=201)
async def add_contract(
    vendor_id: str,
    body: ContractRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    return ContractResponse.model_validate(await service.add_contract(principal, vendor_id, body))


@router.patch("/{vendor_id}/contracts/{contract_id}", response_model=ContractResponse)
async def update_contract(
    vendor_id: str,
    contract_id: str,
    body: ContractUpdateRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    contract = await service.update_contract(principal, vendor_id, contract_id, body)
    return ContractResponse.model_validate(contract)


@router.delete("/{vendor_id}/contracts/{contract_id}", response_model=VendorResponse)
async def delete_contract(
    vendor_id: str,
    contract_id: str,
    principal: CurrentPrincipal,
    service: Service,
):
    return VendorResponse.model_validate(await service.delete_contract(principal, vendor_id, contract_id))
