"""Update models for database operations.

Only fields that were explicitly set are written; dump with
``model_dump(exclude_unset=True)``.
"""

from datetime import datetime

from pydantic import BaseModel

from helixintel.domain.frequency import Frequency
from helixintel.domain.task import Priority, TaskStatus


class SchedulePatch(BaseModel):
    """Partial update for a schedule."""

    frequency: Frequency | None = None
    custom_frequency_days: int | None = None
    next_due_date: datetime | None = None
    last_completed_date: datetime | None = None
    is_active: bool | None = None
    updated: datetime | None = None


class TaskPatch(BaseModel):
    """Partial update for a task."""

    status: TaskStatus | None = None
    title: str | None = None
    description: str | None = None
    notes: str | None = None
    due_date: datetime | None = None
    priority: Priority | None = None
    asset_id: str | None = None
    estimated_cost: float | None = None
    completed_at: datetime | None = None
    completion_notes: str | None = None
    completion_photos: list[str] | None = None
    actual_cost: float | None = None
    cost_notes: str | None = None
    updated: datetime | None = None
