"""Onboarding application service: templates, per-employee instances, task progress, stats."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from opsconsole.application.access import AccessControl
from opsconsole.application.exceptions import ConflictError, ResourceNotFoundError
from opsconsole.application.repositories import (
    InstanceRepository,
    TemplateRepository,
    UserRepository,
)
from opsconsole.application.user_service import page_count
from opsconsole.domain.models.onboarding import (
    OnboardingInstance,
    OnboardingStatus,
    OnboardingTemplate,
    TaskStatus,
    TemplateTask,
    instantiate,
)
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
from opsconsole.governance.audit_logger import AuditLogger
from opsconsole.governance.audit_models import AuditAction
from opsconsole.security.permissions import Action, ResourceType
from opsconsole.security.predicates import FieldEquals, Predicate, TextSearch, all_of
from opsconsole.security.principal import Principal

TEMPLATES = ResourceType.ONBOARDING_TEMPLATES
INSTANCES = ResourceType.ONBOARDING_INSTANCES
TASK_DUE_SOON_WINDOW = timedelta(days=7)


def _template_filter(
    department: Optional[str],
    is_active: Optional[bool],
    search: Optional[str],
) -> Predicate:
    parts: list[Predicate] = []
    if department:
        parts.append(FieldEquals("department", department))
    if is_active is not None:
        parts.append(FieldEquals("is_active", is_active))
    if search:
        parts.append(TextSearch(("name",), search))
    return all_of(*parts)


def _instance_filter(status: Optional[OnboardingStatus], employee: Optional[str]) -> Predicate:
    parts: list[Predicate] = []
    if status is not None:
        parts.append(FieldEquals("status", status.value))
    if employee:
        parts.append(FieldEquals("employee", employee))
    return all_of(*parts)


class OnboardingService:
    """Templates are admin-managed; instances are scoped to the employee or the manager's team."""

    def __init__(
        self,
        templates: TemplateRepository,
        instances: InstanceRepository,
        users: UserRepository,
        access: AccessControl,
        audit: AuditLogger,
        logger: logging.Logger,
    ) -> None:
        self._templates = templates
        self._instances = instances
        self._users = users
        self._access = access
        self._audit = audit
        self._logger = logger

    # ---------- templates ----------

    async def list_templates(
        self,
        actor: Principal,
        *,
        department: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[TemplateResponse]:
        predicate = await self._access.list_filter(
            actor, TEMPLATES, _template_filter(department, is_active, search)
        )
        templates, total = await self._templates.page(predicate, (page - 1) * limit, limit)
        return Page[TemplateResponse](
            items=[TemplateResponse.model_validate(t) for t in templates],
            total=total,
            page=page,
            pages=page_count(total, limit),
        )

    async def get_template(self, actor: Principal, template_id: str) -> OnboardingTemplate:
        return await self._load_template(actor, template_id, Action.READ)

    async def create_template(self, actor: Principal, request: TemplateCreateRequest) -> OnboardingTemplate:
        self._access.check_type(actor, TEMPLATES, Action.CREATE)
        template = OnboardingTemplate(
            id=str(uuid.uuid4()),
            name=request.name,
            department=request.department,
            role=request.role,
            tasks=[TemplateTask(**t.model_dump()) for t in request.tasks],
            created_by=actor.id,
            created_at=datetime.now(timezone.utc),
        )
        return await self._templates.add(template)

    async def update_template(
        self,
        actor: Principal,
        template_id: str,
        request: TemplateUpdateRequest,
    ) -> OnboardingTemplate:
        template = await self._load_template(actor, template_id, Action.UPDATE)
        changes = request.model_dump(exclude_unset=True)
        if changes.pop("tasks", None) is not None:
            template.tasks = [TemplateTask(**t.model_dump()) for t in request.tasks]
        for name, value in changes.items():
            if value is None and name in ("name", "is_active"):
                continue
            setattr(template, name, value)
        template.updated_at = datetime.now(timezone.utc)
        return await self._templates.save(template)

    async def delete_template(self, actor: Principal, template_id: str) -> Optional[OnboardingTemplate]:
        """Deactivates a template still used by active instances, deletes it otherwise."""
        template = await self._load_template(actor, template_id, Action.DELETE)
        in_use = await self._instances.count(
            all_of(
                FieldEquals("template_id", template.id),
                FieldEquals("status", OnboardingStatus.ACTIVE.value),
            )
        )
        if in_use:
            template.is_active = False
            template.updated_at = datetime.now(timezone.utc)
            return await self._templates.save(template)
        await self._templates.delete(template.id)
        return None

    # ---------- instances ----------

    async def list_instances(
        self,
        actor: Principal,
        *,
        status: Optional[OnboardingStatus] = None,
        employee: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Page[InstanceResponse]:
        predicate = await self._access.list_filter(actor, INSTANCES, _instance_filter(status, employee))
        instances, total = await self._instances.page(predicate, (page - 1) * limit, limit)
        return Page[InstanceResponse](
            items=[InstanceResponse.model_validate(i) for i in instances],
            total=total,
            page=page,
            pages=page_count(total, limit),
        )

    async def get_instance(self, actor: Principal, instance_id: str) -> OnboardingInstance:
        return await self._load_instance(actor, instance_id, Action.READ)

    async def create_instance(self, actor: Principal, request: InstanceCreateRequest) -> OnboardingInstance:
        """Active template required; one active instance per employee."""
        self._access.check_type(actor, INSTANCES, Action.CREATE)
        template = await self._templates.get(request.template_id)
        if template is None or not template.is_active:
            raise ResourceNotFoundError("Template not found or inactive")
        employee = await self._users.get(request.employee_id)
        if employee is None:
            raise ResourceNotFoundError("Employee not found")

        instance = instantiate(
            template,
            employee.id,
            request.start_date or datetime.now(timezone.utc),
            created_by=actor.id,
        )
        await self._access.authorize(actor, INSTANCES, Action.CREATE, instance.to_record())

        existing = await self._instances.count(
            all_of(
                FieldEquals("employee", employee.id),
                FieldEquals("status", OnboardingStatus.ACTIVE.value),
            )
        )
        if existing:
            raise ConflictError("Employee already has an active onboarding")

        instance.created_at = datetime.now(timezone.utc)
        created = await self._instances.add(instance)
        self._logger.info(
            "onboarding_started",
            extra={"instance_id": created.id, "employee_id": employee.id, "template_id": template.id},
        )
        return created

    async def update_task(
        self,
        actor: Principal,
        instance_id: str,
        task_id: str,
        request: TaskUpdateRequest,
    ) -> OnboardingInstance:
        instance = await self._load_instance(actor, instance_id, Action.UPDATE)
        instance.update_task(task_id, status=request.status, notes=request.notes)
        instance.updated_at = datetime.now(timezone.utc)
        return await self._instances.save(instance)

    async def cancel_instance(self, actor: Principal, instance_id: str) -> OnboardingInstance:
        instance = await self._load_instance(actor, instance_id, Action.UPDATE)
        instance.cancel()
        instance.updated_at = datetime.now(timezone.utc)
        saved = await self._instances.save(instance)
        await self._audit.log_action(
            actor,
            AuditAction.CANCEL_ONBOARDING,
            INSTANCES,
            instance.id,
            changes={"employee": instance.employee},
        )
        return saved

    async def stats(self, actor: Principal) -> OnboardingStats:
        predicate = await self._access.list_filter(actor, INSTANCES)
        instances = await self._instances.find(predicate)
        now = datetime.now(timezone.utc)
        horizon = now + TASK_DUE_SOON_WINDOW

        active = [i for i in instances if i.status is OnboardingStatus.ACTIVE]
        open_tasks = [t for i in active for t in i.tasks if t.status is not TaskStatus.COMPLETED]
        return OnboardingStats(
            active=len(active),
            completed=sum(1 for i in instances if i.status is OnboardingStatus.COMPLETED),
            avg_progress=round(sum(i.progress for i in active) / len(active), 2) if active else 0.0,
            overdue_tasks=sum(1 for t in open_tasks if t.due_date < now),
            tasks_due_soon=sum(1 for t in open_tasks if now <= t.due_date <= horizon),
        )

    async def _load_template(self, actor: Principal, template_id: str, action: Action) -> OnboardingTemplate:
        self._access.check_type(actor, TEMPLATES, action)
        template = await self._templates.get(template_id)
        if template is None:
            raise ResourceNotFoundError("Template not found")
        await self._access.authorize(actor, TEMPLATES, action, template.to_record())
        return template

    async def _load_instance(self, actor: Principal, instance_id: str, action: Action) -> OnboardingInstance:
        self._access.check_type(actor, INSTANCES, action)
        instance = await self._instances.get(instance_id)
        if instance is None:
            raise ResourceNotFoundError("Onboarding not found")
        await self._access.authorize(actor, INSTANCES, action, instance.to_record())
        return instance
