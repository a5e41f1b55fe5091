"""Pydantic schemas for the onboarding API."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from opsconsole.domain.models.onboarding import OnboardingStatus, TaskAssigneeRole, TaskStatus


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class TemplateTaskSchema(BaseModel):
    title: str = Field(..., min_length=1, description="Task title is required")
    description: Optional[str] = None
    due_in_days: int = Field(7, ge=1, description="Due in days must be positive")
    assignee_role: TaskAssigneeRole = TaskAssigneeRole.EMPLOYEE

    model_config = {"from_attributes": True}


class TemplateCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Template name is required")
    department: Optional[str] = None
    role: Optional[str] = None
    tasks: List[TemplateTaskSchema] = Field(..., min_length=1, description="At least one task is required")


class TemplateUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = None
    role: Optional[str] = None
    tasks: Optional[List[TemplateTaskSchema]] = Field(None, min_length=1)
    is_active: Optional[bool] = None


class InstanceCreateRequest(BaseModel):
    employee_id: str = Field(..., min_length=1, description="Valid employee ID is required")
    template_id: str = Field(..., min_length=1, description="Valid template ID is required")
    start_date: Optional[datetime] = None


class TaskUpdateRequest(BaseModel):
    status: Optional[TaskStatus] = None
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TemplateResponse(BaseModel):
    id: str
    name: str
    department: Optional[str] = None
    role: Optional[str] = None
    tasks: List[TemplateTaskSchema]
    is_active: bool
    created_by: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    due_date: datetime
    assignee: Optional[str] = None
    status: TaskStatus
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class InstanceResponse(BaseModel):
    id: str
    employee: str
    template_id: str
    start_date: datetime
    tasks: List[TaskResponse]
    progress: int
    status: OnboardingStatus
    created_by: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OnboardingStats(BaseModel):
    active: int
    completed: int
    avg_progress: float
    overdue_tasks: int
    tasks_due_soon: int
