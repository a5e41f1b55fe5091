"""DB-backed onboarding repositories for templates and instances."""

from typing import Any, Dict

from sqlalchemy import delete

from opsconsole.domain.models.onboarding import (
    OnboardingInstance,
    OnboardingStatus,
    OnboardingTask,
    OnboardingTemplate,
    TemplateTask,
)
from opsconsole.infrastructure.database.models import OnboardingInstanceRow, OnboardingTemplateRow
from opsconsole.infrastructure.database.repository import SqlRepository, utc


class DbTemplateRepository(SqlRepository[OnboardingTemplate]):
    model = OnboardingTemplateRow

    def _to_domain(self, row: OnboardingTemplateRow) -> OnboardingTemplate:
        return OnboardingTemplate(
            id=row.id,
            name=row.name,
            created_by=row.created_by,
            tasks=[TemplateTask.from_dict(t) for t in row.tasks or []],
            department=row.department,
            role=row.role,
            is_active=row.is_active,
            created_at=utc(row.created_at),
            updated_at=utc(row.updated_at),
        )

    def _to_values(self, template: OnboardingTemplate) -> Dict[str, Any]:
        return {
            "id": template.id,
            "name": template.name,
            "department": template.department,
            "role": template.role,
            "tasks": [t.to_dict() for t in template.tasks],
            "is_active": template.is_active,
            "created_by": template.created_by,
            "created_at": template.created_at,
            "updated_at": template.updated_at,
        }

    async def delete(self, template_id: str) -> None:
        await self._session.execute(
            delete(OnboardingTemplateRow).where(OnboardingTemplateRow.id == template_id)
        )
        await self._session.commit()


class DbInstanceRepository(SqlRepository[OnboardingInstance]):
    model = OnboardingInstanceRow

    def _to_domain(self, row: OnboardingInstanceRow) -> OnboardingInstance:
        return OnboardingInstance(
            id=row.id,
            employee=row.employee,
            template_id=row.template_id,
            start_date=utc(row.start_date),
            created_by=row.created_by,
            tasks=[OnboardingTask.from_dict(t) for t in row.tasks or []],
            progress=row.progress or 0,
            status=OnboardingStatus(row.status),
            created_at=utc(row.created_at),
            updated_at=utc(row.updated_at),
        )

    def _to_values(self, instance: OnboardingInstance) -> Dict[str, Any]:
        return {
            "id": instance.id,
            "employee": instance.employee,
            "template_id": instance.template_id,
            "start_date": instance.start_date,
            "tasks": [t.to_dict() for t in instance.tasks],
            "progress": instance.progress,
            "status": instance.status.value,
            "created_by": instance.created_by,
            "created_at": instance.created_at,
            "updated_at": instance.updated_at,
        }
