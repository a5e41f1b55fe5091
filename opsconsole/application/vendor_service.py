"""Vendor application service: vendor records and their contracts."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from opsconsole.application.access import AccessControl
from opsconsole.application.exceptions import ResourceNotFoundError
from opsconsole.application.repositories import VendorRepository
from opsconsole.application.user_service import page_count
from opsconsole.domain.models.vendor import Contract, Vendor, VendorContact
from opsconsole.domain.schemas.common import Page
from opsconsole.domain.schemas.vendor import (
    ContractRequest,
    ContractUpdateRequest,
    VendorCreateRequest,
    VendorResponse,
    VendorStats,
    VendorUpdateRequest,
)
from opsconsole.security.permissions import Action, ResourceType
from opsconsole.security.predicates import FieldEquals, Predicate, TextSearch, all_of
from opsconsole.security.principal import Principal

VENDORS = ResourceType.VENDORS
CONTRACT_EXPIRY_WINDOW = timedelta(days=30)


def _query_filter(category: Optional[str], is_active: Optional[bool], search: Optional[str]) -> Predicate:
    parts: list[Predicate] = []
    if category:
        parts.append(FieldEquals("category", category))
    if is_active is not None:
        parts.append(FieldEquals("is_active", is_active))
    if search:
        parts.append(TextSearch(("name", "category"), search))
    return all_of(*parts)


class VendorService:
    def __init__(
        self,
        repository: VendorRepository,
        access: AccessControl,
        logger: logging.Logger,
    ) -> None:
        self._repository = repository
        self._access = access
        self._logger = logger

    async def list_vendors(
        self,
        actor: Principal,
        *,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[VendorResponse]:
        predicate = await self._access.list_filter(actor, VENDORS, _query_filter(category, is_active, search))
        vendors, total = await self._repository.page(predicate, (page - 1) * limit, limit)
        return Page[VendorResponse](
            items=[VendorResponse.model_validate(v) for v in vendors],
            total=total,
            page=page,
            pages=page_count(total, limit),
        )

    async def get_vendor(self, actor: Principal, vendor_id: str) -> Vendor:
        return await self._load(actor, vendor_id, Action.READ)

    async def create_vendor(self, actor: Principal, request: VendorCreateRequest) -> Vendor:
        self._access.check_type(actor, VENDORS, Action.CREATE)
        data = request.model_dump(exclude={"contacts"})
        vendor = Vendor(
            id=str(uuid.uuid4()),
            created_by=actor.id,
            contacts=[VendorContact(**c.model_dump()) for c in request.contacts],
            created_at=datetime.now(timezone.utc),
            **data,
        )
        created = await self._repository.add(vendor)
        self._logger.info("vendor_created", extra={"vendor_id": created.id, "actor": actor.id})
        return created

    async def update_vendor(self, actor: Principal, vendor_id: str, request: VendorUpdateRequest) -> Vendor:
        vendor = await self._load(actor, vendor_id, Action.UPDATE)
        changes = request.model_dump(exclude_unset=True)
        if "contacts" in changes:
            contacts = request.contacts or []
            vendor.contacts = [VendorContact(**c.model_dump()) for c in contacts]
            del changes["contacts"]
        for name, value in changes.items():
            if value is None and name in ("name", "is_active"):
                continue
            setattr(vendor, name, value)
        return await self._save(vendor)

    async def deactivate_vendor(self, actor: Principal, vendor_id: str) -> Vendor:
        vendor = await self._load(actor, vendor_id, Action.DELETE)
        vendor.deactivate()
        return await self._save(vendor)

    async def add_contract(self, actor: Principal, vendor_id: str, request: ContractRequest) -> Contract:
        vendor = await self._load(actor, vendor_id, Action.UPDATE)
        contract = vendor.add_contract(**request.model_dump())
        await self._save(vendor)
        return contract

    async def update_contract(
        self,
        actor: Principal,
        vendor_id: str,
        contract_id: str,
        request: ContractUpdateRequest,
    ) -> Contract:
        vendor = await self._load(actor, vendor_id, Action.UPDATE)
        changes = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
        contract = vendor.update_contract(contract_id, **changes)
        await self._save(vendor)
        return contract

    async def delete_contract(self, actor: Principal, vendor_id: str, contract_id: str) -> Vendor:
        vendor = await self._load(actor, vendor_id, Action.UPDATE)
        vendor.remove_contract(contract_id)
        return await self._save(vendor)

    async def stats(self, actor: Principal) -> VendorStats:
        predicate = await self._access.list_filter(actor, VENDORS)
        vendors = await self._repository.find(predicate)
        now = datetime.now(timezone.utc)
        horizon = now + CONTRACT_EXPIRY_WINDOW

        by_category: dict[str, int] = {}
        for v in vendors:
            if v.is_active:
                key = v.category or "uncategorized"
                by_category[key] = by_category.get(key, 0) + 1
        ratings = [v.rating for v in vendors if v.rating is not None]
        contracts = [c for v in vendors for c in v.contracts]
        return VendorStats(
            total=len(vendors),
            active=sum(1 for v in vendors if v.is_active),
            by_category=by_category,
            avg_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
            contracts_expiring_soon=sum(1 for c in contracts if c.expires_between(now, horizon)),
            total_contract_value=sum(c.value for c in contracts if c.is_active_at(now)),
        )

    async def _load(self, actor: Principal, vendor_id: str, action: Action) -> Vendor:
        self._access.check_type(actor, VENDORS, action)
        vendor = await self._repository.get(vendor_id)
        if vendor is None:
            raise ResourceNotFoundError("Vendor not found")
        await self._access.authorize(actor, VENDORS, action, vendor.to_record())
        return vendor

    async def _save(self, vendor: Vendor) -> Vendor:
        vendor.updated_at = datetime.now(timezone.utc)
        return await self._repository.save(vendor)
