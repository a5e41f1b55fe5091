"""Asset application service: scoped listing, lifecycle changes, assignment, maintenance, stats."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from opsconsole.application.access import AccessControl
from opsconsole.application.exceptions import ResourceNotFoundError
from opsconsole.application.repositories import AssetRepository, UserRepository
from opsconsole.application.user_service import page_count
from opsconsole.domain.models.asset import Asset, AssetCategory, AssetStatus, MaintenanceRecord
from opsconsole.domain.schemas.asset import (
    AssetCreateRequest,
    AssetResponse,
    AssetStats,
    AssetUpdateRequest,
    MaintenanceRequest,
)
from opsconsole.domain.schemas.common import Page
from opsconsole.governance.audit_logger import AuditLogger
from opsconsole.governance.audit_models import AuditAction
from opsconsole.security.permissions import Action, ResourceType
from opsconsole.security.predicates import FieldEquals, FieldRange, Predicate, TextSearch, all_of
from opsconsole.security.principal import Principal

ASSETS = ResourceType.ASSETS
WARRANTY_WINDOW = timedelta(days=30)


def _query_filter(
    category: Optional[AssetCategory],
    status: Optional[AssetStatus],
    assigned_to: Optional[str],
    search: Optional[str],
) -> Predicate:
    parts: list[Predicate] = []
    if category is not None:
        parts.append(FieldEquals("category", category.value))
    if status is not None:
        parts.append(FieldEquals("status", status.value))
    if assigned_to:
        parts.append(FieldEquals("assigned_to", assigned_to))
    if search:
        parts.append(TextSearch(("name", "serial_number", "location"), search))
    return all_of(*parts)


class AssetService:
    """Application-layer orchestration only. Current value is recomputed on every write."""

    def __init__(
        self,
        repository: AssetRepository,
        users: UserRepository,
        access: AccessControl,
        audit: AuditLogger,
        logger: logging.Logger,
    ) -> None:
        self._repository = repository
        self._users = users
        self._access = access
        self._audit = audit
        self._logger = logger

    async def list_assets(
        self,
        actor: Principal,
        *,
        category: Optional[AssetCategory] = None,
        status: Optional[AssetStatus] = None,
        assigned_to: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[AssetResponse]:
        predicate = await self._access.list_filter(
            actor, ASSETS, _query_filter(category, status, assigned_to, search)
        )
        assets, total = await self._repository.page(predicate, (page - 1) * limit, limit)
        return Page[AssetResponse](
            items=[AssetResponse.model_validate(a) for a in assets],
            total=total,
            page=page,
            pages=page_count(total, limit),
        )

    async def get_asset(self, actor: Principal, asset_id: str) -> Asset:
        return await self._load(actor, asset_id, Action.READ)

    async def create_asset(self, actor: Principal, request: AssetCreateRequest) -> Asset:
        self._access.check_type(actor, ASSETS, Action.CREATE)
        now = datetime.now(timezone.utc)
        asset = Asset(
            id=str(uuid.uuid4()),
            created_by=actor.id,
            created_at=now,
            **request.model_dump(),
        )
        asset.refresh_value(now)
        created = await self._repository.add(asset)
        self._logger.info("asset_created", extra={"asset_id": created.id, "actor": actor.id})
        return created

    async def update_asset(self, actor: Principal, asset_id: str, request: AssetUpdateRequest) -> Asset:
        asset = await self._load(actor, asset_id, Action.UPDATE)
        for name, value in request.model_dump(exclude_unset=True).items():
            if value is None and name in ("name", "category", "status", "depreciation_rate"):
                continue
            setattr(asset, name, value)
        return await self._save(asset)

    async def retire_asset(self, actor: Principal, asset_id: str) -> Asset:
        """Soft delete: status retired, assignment cleared."""
        asset = await self._load(actor, asset_id, Action.DELETE)
        asset.retire()
        saved = await self._save(asset)
        await self._audit.log_action(actor, AuditAction.RETIRE_ASSET, ASSETS, asset.id)
        return saved

    async def assign_asset(self, actor: Principal, asset_id: str, user_id: str) -> Asset:
        """
        The assign grant is checked against the asset as it would look after assignment,
        so a team-scoped manager can only hand assets to active members of the department.
        An asset already in someone's custody must also be in scope as it stands.
        """
        self._access.check_type(actor, ASSETS, Action.ASSIGN)
        asset = await self._get_or_404(asset_id)
        if asset.assigned_to is not None:
            await self._access.authorize(actor, ASSETS, Action.ASSIGN, asset.to_record())
        assignee = await self._users.get(user_id)
        if assignee is None:
            raise ResourceNotFoundError("User not found")
        proposed = dict(asset.to_record(), assigned_to=assignee.id)
        await self._access.authorize(actor, ASSETS, Action.ASSIGN, proposed)

        previous = asset.assigned_to
        asset.assign(assignee.id)
        saved = await self._save(asset)
        await self._audit.log_action(
            actor,
            AuditAction.ASSIGN_ASSET,
            ASSETS,
            asset.id,
            changes={"from": previous, "to": assignee.id},
        )
        return saved

    async def unassign_asset(self, actor: Principal, asset_id: str) -> Asset:
        asset = await self._load(actor, asset_id, Action.UPDATE)
        previous = asset.assigned_to
        asset.unassign()
        saved = await self._save(asset)
        await self._audit.log_action(
            actor,
            AuditAction.UNASSIGN_ASSET,
            ASSETS,
            asset.id,
            changes={"from": previous},
        )
        return saved

    async def add_maintenance(self, actor: Principal, asset_id: str, request: MaintenanceRequest) -> Asset:
        asset = await self._load(actor, asset_id, Action.UPDATE)
        asset.add_maintenance(MaintenanceRecord(**request.model_dump()))
        return await self._save(asset)

    async def stats(self, actor: Principal) -> AssetStats:
        predicate = await self._access.list_filter(actor, ASSETS)
        now = datetime.now(timezone.utc)
        return AssetStats(
            total=await self._repository.count(predicate),
            by_status=await self._repository.count_by("status", predicate),
            by_category=await self._repository.count_by("category", predicate),
            total_value=await self._repository.sum_current_value(predicate),
            maintenance_due=await self._repository.count(
                all_of(predicate, FieldEquals("status", AssetStatus.MAINTENANCE.value))
            ),
            warranty_expiring_soon=await self._repository.count(
                all_of(predicate, FieldRange("warranty_expiry", now, now + WARRANTY_WINDOW))
            ),
        )

    async def _load(self, actor: Principal, asset_id: str, action: Action) -> Asset:
        self._access.check_type(actor, ASSETS, action)
        asset = await self._get_or_404(asset_id)
        await self._access.authorize(actor, ASSETS, action, asset.to_record())
        return asset

    async def _get_or_404(self, asset_id: str) -> Asset:
        asset = await self._repository.get(asset_id)
        if asset is None:
            raise ResourceNotFoundError("Asset not found")
        return asset

    async def _save(self, asset: Asset) -> Asset:
        now = datetime.now(timezone.utc)
        asset.updated_at = now
        asset.refresh_value(now)
        return await self._repository.save(asset)
