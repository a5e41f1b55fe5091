"""Onboarding API router: templates and per-employee onboarding instances."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response

from opsconsole.api.dependencies import (
    CurrentPrincipal,
    Pagination,
    get_onboarding_service,
    require_min_role,
)
from opsconsole.application.onboarding_service import OnboardingService
from opsconsole.domain.models.onboarding import OnboardingStatus
from opsconsole.domain.schemas.common import Page
from opsconsole.domain.schemas.onboarding import (
    InstanceCreateRequest,
    InstanceResponse,
    OnboardingStats,
    TaskUpdateRequest,
    TemplateCreateRequest,
    TemplateResponse,
    TemplateUpdateRequest,
)
from opsconsole.security.permissions import ResourceType
from opsconsole.security.principal import Principal
from opsconsole.security.roles import Role

router = APIRouter()

Service = Annotated[OnboardingService, Depends(get_onboarding_service)]
ManagerPrincipal = Annotated[
    Principal, Depends(require_min_role(Role.MANAGER, ResourceType.ONBOARDING_INSTANCES))
]


# ---------- templates ----------

@router.get("/templates", response_model=Page[TemplateResponse])
async def list_templates(
    principal: CurrentPrincipal,
    service: Service,
    pagination: Annotated[Pagination, Depends()],
    department: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Annotated[Optional[str], Query(max_length=200)] = None,
):
    return await service.list_templates(
        principal,
        department=department,
        is_active=is_active,
        search=search,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/templates/{template_id}", response_model=TemplateResponse)
async def get_template(template_id: str, principal: CurrentPrincipal, service: Service):
    return TemplateResponse.model_validate(await service.get_template(principal, template_id))


@router.post("/templates", response_model=TemplateResponse, status_code=201)
async def create_template(body: TemplateCreateRequest, principal: CurrentPrincipal, service: Service):
    return TemplateResponse.model_validate(await service.create_template(principal, body))


@router.patch("/templates/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    body: TemplateUpdateRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    return TemplateResponse.model_validate(await service.update_template(principal, template_id, body))


@router.delete("/templates/{template_id}")
async def delete_template(template_id: str, principal: CurrentPrincipal, service: Service):
    """204 when the template was removed; the deactivated template when instances still use it."""
    template = await service.delete_template(principal, template_id)
    if template is None:
        return Response(status_code=204)
    return TemplateResponse.model_validate(template)


# ---------- instances ----------

@router.get("/stats", response_model=OnboardingStats)
async def onboarding_stats(principal: ManagerPrincipal, service: Service):
    return await service.stats(principal)


@router.get("/", response_model=Page[InstanceResponse])
async def list_instances(
    principal: CurrentPrincipal,
    service: Service,
    pagination: Annotated[Pagination, Depends()],
    status: Optional[OnboardingStatus] = None,
    employee: Optional[str] = None,
):
    return await service.list_instances(
        principal,
        status=status,
        employee=employee,
        page=pagination.page,
        limit=pagination.limit,
    )


@router.get("/{instance_id}", response_model=InstanceResponse)
async def get_instance(instance_id: str, principal: CurrentPrincipal, service: Service):
    return InstanceResponse.model_validate(await service.get_instance(principal, instance_id))


@router.post("/", response_model=InstanceResponse, status_code=201)
async def create_instance(body: InstanceCreateRequest, principal: CurrentPrincipal, service: Service):
    return InstanceResponse.model_validate(await service.create_instance(principal, body))


@router.patch("/{instance_id}/tasks/{task_id}", response_model=InstanceResponse)
async def update_task(
    instance_id: str,
    task_id: str,
    body: TaskUpdateRequest,
    principal: CurrentPrincipal,
    service: Service,
):
    return InstanceResponse.model_validate(await service.update_task(principal, instance_id, task_id, body))


@router.post("/{instance_id}/cancel", response_model=InstanceResponse)
async def cancel_instance(instance_id: str, principal: ManagerPrincipal, service: Service):
    return InstanceResponse.model_validate(await service.cancel_instance(principal, instance_id))
