"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime

import pytest

from helixintel.domain.task import Priority, Task, TaskStatus


def make_task(
    *,
    task_id: str = "t1",
    home_id: str = "h1",
    status: TaskStatus = TaskStatus.PENDING,
    due_date: datetime | None = None,
    priority: Priority = Priority.MEDIUM,
    **overrides,
) -> Task:
    """Build a Task without going through a store."""
    created = overrides.pop("created", datetime(2024, 1, 1, tzinfo=UTC))
    return Task(
        id=task_id,
        home_id=home_id,
        title=overrides.pop("title", "Change HVAC Filter"),
        due_date=due_date or datetime(2024, 1, 31, tzinfo=UTC),
        priority=priority,
        status=status,
        created=created,
        updated=overrides.pop("updated", created),
        **overrides,
    )


@pytest.fixture
def task_factory():
    """Factory for standalone Task objects."""
    return make_task
