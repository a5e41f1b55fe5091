"""Users API router: directory listing, profile updates, role changes, soft deactivation."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from opsconsole.api.dependencies import (
    CurrentPrincipal,
    Pagination,
    get_user_service,
    require_min_role,
)
from opsconsole.application.user_service import UserService
from opsconsole.domain.schemas.common import Page
from opsconsole.domain.schemas.user import (
    RoleChangeRequest,
    UserCreateRequest,
    UserResponse,
    UserStats,
    UserUpdateRequest,
)
from opsconsole.security.permissions import ResourceType
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

router = APIRouter()

Service = Annotated[UserService, Depends(get_user_service)]


@router.get("/", response_model=Page[UserResponse])
async def list_users(
    principal: CurrentPrincipal,
    service: Service,
    pagination: Annotated[Pagination, Depends()],
    role: Optional[Role] = None,
    department: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Annotated[Optional[str], Query(max_length=200)] = None,
):
    """Users visible to the caller: everyone for admins, the department for managers, self for employees."""
    return await service.list_users(
        principal,
        role=role,
        department=department,
        is_active=is_active,
        search=search,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/stats", response_model=UserStats)
async def user_stats(
    principal: Annotated[Principal, Depends(require_min_role(Role.ADMIN, ResourceType.USERS))],
    service: Service,
):
    return await service.stats(principal)


@router.get("/me", response_model=UserResponse)
async def current_user(principal: CurrentPrincipal, service: Service):
    user = await service.get_user(principal, principal.id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, principal: CurrentPrincipal, service: Service):
    user = await service.get_user(principal, user_id)
    return UserResponse.model_validate(user)


@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(body: UserCreateRequest, principal: CurrentPrincipal, service: Service):
    user = await service.create_user(principal, body)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    user = await service.update_user(principal, user_id, body)
    return UserResponse.model_validate(user)


@router.put("/{user_id}/role", response_model=UserResponse)
async def change_role(
    user_id: str,
    body: RoleChangeRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    """Role change. Self-changes and demoting the last active admin are rejected with 400."""
    user = await service.change_role(principal, user_id, body.role)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=UserResponse)
async def deactivate_user(user_id: str, principal: CurrentPrincipal, service: Service):
    user = await service.deactivate_user(principal, user_id)
    return UserResponse.model_validate(user)
