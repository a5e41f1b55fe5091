"""Onboarding model: instantiation from templates, task updates, derived progress and status."""

from datetime import datetime, timedelta, timezone

import pytest

from opsconsole.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    OnboardingClosedError,
)
from opsconsole.domain.models.onboarding import (
    OnboardingStatus,
    OnboardingTemplate,
    TaskAssigneeRole,
    TaskStatus,
    TemplateTask,
    instantiate,
)

START = datetime(2025, 2, 3, 9, tzinfo=timezone.utc)


def _template(tasks=None) -> OnboardingTemplate:
    return OnboardingTemplate(
        id="t-1",
        name="Engineering onboarding",
        created_by="a-1",
        tasks=tasks
        or [
            TemplateTask(title="Sign contract", due_in_days=1),
            TemplateTask(title="Laptop setup", due_in_days=2, assignee_role=TaskAssigneeRole.MANAGER),
            TemplateTask(title="Security training", due_in_days=7),
        ],
    )


def test_template_requires_tasks():
    with pytest.raises(DomainValidationError):
        OnboardingTemplate(id="t-1", name="Empty", created_by="a-1", tasks=[])


def test_template_task_due_in_days_positive():
    with pytest.raises(DomainValidationError):
        TemplateTask(title="Too soon", due_in_days=0)


def test_instantiate_sets_due_dates_and_assignees():
    instance = instantiate(_template(), "e-1", START, created_by="m-1")
    assert instance.employee == "e-1"
    assert instance.status is OnboardingStatus.ACTIVE
    assert instance.progress == 0
    assert [t.due_date for t in instance.tasks] == [
        START + timedelta(days=1),
        START + timedelta(days=2),
        START + timedelta(days=7),
    ]
    assert [t.assignee for t in instance.tasks] == ["e-1", None, "e-1"]


def test_progress_rounds_half_up():
    instance = instantiate(_template(), "e-1", START, created_by="m-1")
    instance.update_task(instance.tasks[0].id, status=TaskStatus.COMPLETED)
    assert instance.progress == 33
    instance.update_task(instance.tasks[1].id, status=TaskStatus.COMPLETED)
    assert instance.progress == 67


def test_progress_half_exactly_rounds_up():
    tasks = [TemplateTask(title=f"Task {i}") for i in range(8)]
    instance = instantiate(_template(tasks), "e-1", START, created_by="m-1")
    # 1/8 = 12.5%
    instance.update_task(instance.tasks[0].id, status=TaskStatus.COMPLETED)
    assert instance.progress == 13


def test_completion_stamps_and_clears_completed_at():
    instance = instantiate(_template(), "e-1", START, created_by="m-1")
    done_at = START + timedelta(hours=3)
    task = instance.update_task(instance.tasks[0].id, status=TaskStatus.COMPLETED, now=done_at)
    assert task.completed_at == done_at
    task = instance.update_task(instance.tasks[0].id, status=TaskStatus.IN_PROGRESS)
    assert task.completed_at is None
    assert instance.progress == 0


def test_all_tasks_completed_completes_instance():
    instance = instantiate(_template(), "e-1", START, created_by="m-1")
    for task in instance.tasks:
        instance.update_task(task.id, status=TaskStatus.COMPLETED)
    assert instance.progress == 100
    assert instance.status is OnboardingStatus.COMPLETED


def test_notes_update_leaves_status():
    instance = instantiate(_template(), "e-1", START, created_by="m-1")
    task = instance.update_task(instance.tasks[2].id, notes="Booked for Friday")
    assert task.notes == "Booked for Friday"
    assert task.status is TaskStatus.PENDING


def test_unknown_task_not_found():
    instance = instantiate(_template(), "e-1", START, created_by="m-1")
    with pytest.raises(EntityNotFoundError):
        instance.update_task("missing", status=TaskStatus.COMPLETED)


def test_cancelled_instance_rejects_task_updates():
    instance = instantiate(_template(), "e-1", START, created_by="m-1")
    instance.cancel()
    with pytest.raises(OnboardingClosedError):
        instance.update_task(instance.tasks[0].id, status=TaskStatus.COMPLETED)
