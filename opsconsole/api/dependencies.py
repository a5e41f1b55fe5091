"""FastAPI dependency injection: DB session, repositories, access control, services, current principal."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from opsconsole.application.access import AccessControl
from opsconsole.application.asset_service import AssetService
from opsconsole.application.onboarding_service import OnboardingService
from opsconsole.application.user_service import UserService
from opsconsole.application.vendor_service import VendorService
from opsconsole.config.settings import get_settings
from opsconsole.governance.audit_logger import AuditLogger
from opsconsole.infrastructure.audit.log_audit_repository import LoggingAuditRepository
from opsconsole.infrastructure.database.asset_repository_db import DbAssetRepository
from opsconsole.infrastructure.database.onboarding_repository_db import (
    DbInstanceRepository,
    DbTemplateRepository,
)
from opsconsole.infrastructure.database.session import get_db
from opsconsole.infrastructure.database.user_repository_db import DbUserRepository
from opsconsole.infrastructure.database.vendor_repository_db import DbVendorRepository
from opsconsole.observability.metrics import MetricsCollector
from opsconsole.security.exceptions import ForbiddenError, NotAuthenticatedError
from opsconsole.security.gate import AccessGate
from opsconsole.security.last_admin import LastAdminGuard
from opsconsole.security.permissions import DEFAULT_MATRIX, Action, PermissionMatrix, ResourceType
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role, at_least

_metrics: MetricsCollector | None = None

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_metrics() -> MetricsCollector:
    """Return singleton metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


@lru_cache
def get_gate() -> AccessGate:
    """Process-wide gate. The permission table is loaded once and never mutated."""
    settings = get_settings()
    matrix = (
        PermissionMatrix.from_json_file(settings.permissions_file)
        if settings.permissions_file
        else DEFAULT_MATRIX
    )
    return AccessGate(matrix=matrix)


def get_user_repository(db: DbSession) -> DbUserRepository:
    return DbUserRepository(db)


def get_audit_logger() -> AuditLogger:
    return AuditLogger(repository=LoggingAuditRepository())


async def get_access_control(
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
    gate: Annotated[AccessGate, Depends(get_gate)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> AccessControl:
    return AccessControl(
        gate=gate,
        users=users,
        metrics=metrics if get_settings().enable_metrics else None,
        logger=logging.getLogger("opsconsole.access"),
    )


async def get_user_service(
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
    access: Annotated[AccessControl, Depends(get_access_control)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
) -> UserService:
    return UserService(
        repository=users,
        access=access,
        guard=LastAdminGuard(),
        audit=audit,
        logger=logging.getLogger("opsconsole.users"),
    )


async def get_asset_service(
    db: DbSession,
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
    access: Annotated[AccessControl, Depends(get_access_control)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
) -> AssetService:
    return AssetService(
        repository=DbAssetRepository(db),
        users=users,
        access=access,
        audit=audit,
        logger=logging.getLogger("opsconsole.assets"),
    )


async def get_vendor_service(
    db: DbSession,
    access: Annotated[AccessControl, Depends(get_access_control)],
) -> VendorService:
    return VendorService(
        repository=DbVendorRepository(db),
        access=access,
        logger=logging.getLogger("opsconsole.vendors"),
    )


async def get_onboarding_service(
    db: DbSession,
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
    access: Annotated[AccessControl, Depends(get_access_control)],
    audit: Annotated[AuditLogger, Depends(get_audit_logger)],
) -> OnboardingService:
    return OnboardingService(
        templates=DbTemplateRepository(db),
        instances=DbInstanceRepository(db),
        users=users,
        access=access,
        audit=audit,
        logger=logging.getLogger("opsconsole.onboarding"),
    )


async def get_current_principal(
    request: Request,
    users: Annotated[DbUserRepository, Depends(get_user_repository)],
) -> Principal:
    """Resolve the principal id set by middleware. Unknown or deactivated ids are unauthenticated."""
    principal_id = getattr(request.state, "principal_id", None)
    if not principal_id:
        raise NotAuthenticatedError()
    user = await users.get(principal_id)
    if user is None or not user.is_active:
        raise NotAuthenticatedError()
    return user.principal


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def require_min_role(minimum: Role, resource_type: ResourceType):
    """Dependency factory for routes gated on role rank alone (dashboards, stats)."""

    async def dependency(principal: CurrentPrincipal) -> Principal:
        if not at_least(principal.role, minimum):
            raise ForbiddenError(
                "Access denied. Insufficient permissions.",
                resource_type=resource_type.value,
                action=Action.READ.value,
                current=principal.role.value,
                required=[r.value for r in Role if at_least(r, minimum)],
            )
        return principal

    return dependency


class Pagination:
    def __init__(
        self,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int | None, Query(ge=1)] = None,
    ) -> None:
        settings = get_settings()
        self.page = page
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)

