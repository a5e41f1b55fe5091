"""Domain model for onboarding templates and instances. Progress and status are derived from tasks."""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from opsconsole.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    OnboardingClosedError,
)
from opsconsole.domain.models.common import aware, parse_datetime


class TaskAssigneeRole(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class OnboardingStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class TemplateTask:
    title: str
    description: Optional[str] = None
    due_in_days: int = 7
    assignee_role: TaskAssigneeRole = TaskAssigneeRole.EMPLOYEE

    def __post_init__(self) -> None:
        if self.due_in_days < 1:
            raise DomainValidationError("due_in_days must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "due_in_days": self.due_in_days,
            "assignee_role": self.assignee_role.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplateTask":
        return cls(
            title=data["title"],
            description=data.get("description"),
            due_in_days=int(data.get("due_in_days") or 7),
            assignee_role=TaskAssigneeRole(data.get("assignee_role") or "employee"),
        )


@dataclass
class OnboardingTemplate:
    id: str
    name: str
    created_by: str
    tasks: List[TemplateTask] = field(default_factory=list)
    department: Optional[str] = None
    role: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.tasks:
            raise DomainValidationError("At least one task is required")

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "department": self.department,
            "is_active": self.is_active,
            "created_by": self.created_by,
        }


@dataclass
class OnboardingTask:
    id: str
    title: str
    due_date: datetime
    description: Optional[str] = None
    assignee: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "due_date": aware(self.due_date).isoformat(),
            "assignee": self.assignee,
            "status": self.status.value,
            "completed_at": aware(self.completed_at).isoformat() if self.completed_at else None,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OnboardingTask":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description"),
            due_date=parse_datetime(data["due_date"]),
            assignee=data.get("assignee"),
            status=TaskStatus(data.get("status") or "pending"),
            completed_at=parse_datetime(data.get("completed_at")),
            notes=data.get("notes"),
        )


@dataclass
class OnboardingInstance:
    """One employee's onboarding checklist. progress and status follow the tasks."""

    id: str
    employee: str
    template_id: str
    start_date: datetime
    created_by: str
    tasks: List[OnboardingTask] = field(default_factory=list)
    progress: int = 0
    status: OnboardingStatus = OnboardingStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def recalculate(self) -> None:
        """progress = completed / total * 100 rounded half up; an active instance at 100 becomes completed."""
        if not self.tasks:
            return
        completed = sum(1 for t in self.tasks if t.status is TaskStatus.COMPLETED)
        self.progress = math.floor(completed / len(self.tasks) * 100 + 0.5)
        if self.progress == 100 and self.status is OnboardingStatus.ACTIVE:
            self.status = OnboardingStatus.COMPLETED

    def update_task(
        self,
        task_id: str,
        status: Optional[TaskStatus] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> OnboardingTask:
        if self.status is OnboardingStatus.CANCELLED:
            raise OnboardingClosedError("Onboarding has been cancelled")
        task = self.find_task(task_id)
        if status is not None:
            task.status = status
            if status is TaskStatus.COMPLETED:
                task.completed_at = now or datetime.now(timezone.utc)
            else:
                task.completed_at = None
        if notes is not None:
            task.notes = notes
        self.recalculate()
        return task

    def find_task(self, task_id: str) -> OnboardingTask:
        for task in self.tasks:
            if task.id == task_id:
                return task
        raise EntityNotFoundError("Task not found")

    def cancel(self) -> None:
        self.status = OnboardingStatus.CANCELLED

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee": self.employee,
            "template_id": self.template_id,
            "status": self.status.value,
            "created_by": self.created_by,
        }


def instantiate(
    template: OnboardingTemplate,
    employee_id: str,
    start_date: datetime,
    created_by: str,
) -> OnboardingInstance:
    """Build an instance from a template. Due dates are start + due_in_days."""
    start = aware(start_date)
    tasks = [
        OnboardingTask(
            id=str(uuid.uuid4()),
            title=t.title,
            description=t.description,
            due_date=start + timedelta(days=t.due_in_days),
            assignee=employee_id if t.assignee_role is TaskAssigneeRole.EMPLOYEE else None,
        )
        for t in template.tasks
    ]
    return OnboardingInstance(
        id=str(uuid.uuid4()),
        employee=employee_id,
        template_id=template.id,
        start_date=start,
        created_by=created_by,
        tasks=tasks,
    )
