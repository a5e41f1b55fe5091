"""User application service: profile reads and updates, role changes, deactivation, stats."""

import logging
import math
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from opsconsole.application.access import AccessControl
from opsconsole.application.exceptions import ConflictError, ResourceNotFoundError
from opsconsole.application.repositories import UserRepository
from opsconsole.domain.models.user import ADMIN_EDITABLE_FIELDS, EMPLOYEE_EDITABLE_FIELDS, User
from opsconsole.domain.schemas.common import Page
from opsconsole.domain.schemas.user import (
    UserCreateRequest,
    UserResponse,
    UserStats,
    UserUpdateRequest,
)
from opsconsole.governance.audit_logger import AuditLogger
from opsconsole.governance.audit_models import AuditAction
from opsconsole.security.exceptions import ForbiddenError, LastAdminViolationError
from opsconsole.security.last_admin import LastAdminGuard
from opsconsole.security.permissions import Action, ResourceType
from opsconsole.security.predicates import FieldEquals, Predicate, TextSearch, all_of
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

USERS = ResourceType.USERS


def _query_filter(
    role: Optional[Role],
    department: Optional[str],
    is_active: Optional[bool],
    search: Optional[str],
) -> Predicate:
    parts: list[Predicate] = []
    if role is not None:
        parts.append(FieldEquals("role", role.value))
    if department:
        parts.append(FieldEquals("department", department))
    if is_active is not None:
        parts.append(FieldEquals("is_active", is_active))
    if search:
        parts.append(TextSearch(("name", "email"), search))
    return all_of(*parts)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class UserService:
    """
    Application-layer orchestration only. No HTTP, no FastAPI.
    Order on single-record operations: type-level grant, existence, record scope.
    """

    def __init__(
        self,
        repository: UserRepository,
        access: AccessControl,
        guard: LastAdminGuard,
        audit: AuditLogger,
        logger: logging.Logger,
    ) -> None:
        self._repository = repository
        self._access = access
        self._guard = guard
        self._audit = audit
        self._logger = logger

    async def list_users(
        self,
        actor: Principal,
        *,
        role: Optional[Role] = None,
        department: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[UserResponse]:
        predicate = await self._access.list_filter(
            actor, USERS, _query_filter(role, department, is_active, search)
        )
        users, total = await self._repository.page(predicate, (page - 1) * limit, limit)
        return Page[UserResponse](
            items=[UserResponse.model_validate(u) for u in users],
            total=total,
            page=page,
            pages=page_count(total, limit),
        )

    async def get_user(self, actor: Principal, user_id: str) -> User:
        self._access.check_type(actor, USERS, Action.READ)
        user = await self._get_or_404(user_id)
        await self._access.authorize(actor, USERS, Action.READ, user.to_record())
        return user

    async def create_user(self, actor: Principal, request: UserCreateRequest) -> User:
        self._access.check_type(actor, USERS, Action.CREATE)
        if await self._repository.get_by_email(request.email) is not None:
            raise ConflictError("User already exists")
        user = User(
            id=str(uuid.uuid4()),
            email=request.email,
            name=request.name,
            role=request.role,
            department=request.department,
            created_at=datetime.now(timezone.utc),
        )
        created = await self._repository.add(user)
        self._logger.info("user_created", extra={"user_id": created.id, "actor": actor.id})
        return created

    async def update_user(self, actor: Principal, user_id: str, request: UserUpdateRequest) -> User:
        """
        Employees may change their own name and avatar. Full update holders may also change
        department, active flag and role; role and deactivation go through the last-admin guard.

        Every check runs before the first write. Role, deactivation and field changes are then
        committed in that order; only a concurrent demotion losing the conditional write can
        stop the sequence part way, and it does so before any other change is written.
        """
        changes = request.model_dump(exclude_unset=True)
        new_role = changes.pop("role", None)
        is_active = changes.pop("is_active", None)

        if actor.id == user_id:
            if new_role is not None:
                self._guard.check_role_change(actor, actor, new_role, active_admin_count=0)
            if is_active is False:
                self._guard.check_deactivation(actor, actor, active_admin_count=0)

        self._access.check_type(actor, USERS, Action.UPDATE)
        user = await self._get_or_404(user_id)
        decision = await self._access.authorize(actor, USERS, Action.UPDATE, user.to_record())

        requested = set(changes)
        if new_role is not None:
            requested.add("role")
        if is_active is not None:
            requested.add("is_active")
        allowed = ADMIN_EDITABLE_FIELDS if decision.scope is None else EMPLOYEE_EDITABLE_FIELDS
        rejected = sorted(requested - allowed)
        if rejected:
            raise ForbiddenError(
                f"Access denied. Cannot update fields: {', '.join(rejected)}",
                resource_type=USERS.value,
                action=Action.UPDATE.value,
                current=actor.role.value,
                required=self._access.full_grant_roles(USERS, Action.UPDATE),
            )

        role_change = new_role is not None and new_role is not user.role
        deactivation = is_active is False and user.is_active
        if deactivation:
            self._access.check_type(actor, USERS, Action.DELETE)
            await self._access.authorize(actor, USERS, Action.DELETE, user.to_record())
        if role_change or deactivation:
            active_admins = await self._repository.count_active_admins()
            if role_change:
                self._guard.check_role_change(actor, user.principal, new_role, active_admins)
            if deactivation:
                self._guard.check_deactivation(actor, user.principal, active_admins)

        if role_change:
            user = await self._write_role(actor, user, new_role)
        if deactivation:
            user = await self._write_deactivation(actor, user)
        elif is_active is True:
            changes["is_active"] = True
        if "name" in changes and changes["name"] is None:
            del changes["name"]

        if not changes:
            return user
        updated = replace(user, **changes, updated_at=datetime.now(timezone.utc))
        return await self._repository.save(updated)

    async def change_role(self, actor: Principal, user_id: str, new_role: Role) -> User:
        """Self-change check first, then grant, existence, scope, last-admin count, conditional write."""
        if actor.id == user_id:
            self._guard.check_role_change(actor, actor, new_role, active_admin_count=0)
        self._access.check_type(actor, USERS, Action.UPDATE)
        user = await self._get_or_404(user_id)
        await self._access.authorize(actor, USERS, Action.UPDATE, user.to_record())

        active_admins = await self._repository.count_active_admins()
        self._guard.check_role_change(actor, user.principal, new_role, active_admins)
        return await self._write_role(actor, user, new_role)

    async def deactivate_user(self, actor: Principal, user_id: str) -> User:
        """Soft delete. A principal cannot deactivate itself or the last active admin."""
        if actor.id == user_id:
            self._guard.check_deactivation(actor, actor, active_admin_count=0)
        self._access.check_type(actor, USERS, Action.DELETE)
        user = await self._get_or_404(user_id)
        await self._access.authorize(actor, USERS, Action.DELETE, user.to_record())

        active_admins = await self._repository.count_active_admins()
        self._guard.check_deactivation(actor, user.principal, active_admins)
        return await self._write_deactivation(actor, user)

    async def _write_role(self, actor: Principal, user: User, new_role: Role) -> User:
        demotion = user.role is Role.ADMIN and new_role is not Role.ADMIN
        if not await self._repository.change_role(user.id, new_role, keep_one_admin=demotion):
            # Another demotion committed between the count and the write.
            raise LastAdminViolationError()

        await self._audit.log_action(
            actor,
            AuditAction.CHANGE_ROLE,
            USERS,
            user.id,
            changes={"from": user.role.value, "to": new_role.value},
        )
        self._logger.info(
            "user_role_changed",
            extra={"user_id": user.id, "from_role": user.role.value, "to_role": new_role.value},
        )
        return replace(user, role=new_role)

    async def _write_deactivation(self, actor: Principal, user: User) -> User:
        guarded = user.role is Role.ADMIN
        if not await self._repository.deactivate(user.id, keep_one_admin=guarded):
            raise LastAdminViolationError("Cannot deactivate the last active admin")

        await self._audit.log_action(actor, AuditAction.DEACTIVATE_USER, USERS, user.id)
        return replace(user, is_active=False)

    async def stats(self, actor: Principal) -> UserStats:
        predicate = await self._access.list_filter(actor, USERS)
        return UserStats(
            total=await self._repository.count(predicate),
            active=await self._repository.count(all_of(predicate, FieldEquals("is_active", True))),
            by_role=await self._repository.count_by("role", predicate),
            by_department=await self._repository.count_by("department", predicate),
        )

    async def _get_or_404(self, user_id: str) -> User:
        user = await self._repository.get(user_id)
        if user is None:
            raise ResourceNotFoundError("User not found")
        return user
