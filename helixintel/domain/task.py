"""Task domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class TaskStatus(StrEnum):
    """Stored task lifecycle status."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class DisplayStatus(StrEnum):
    """Status shown to callers; OVERDUE is derived and never stored."""

    OVERDUE = "OVERDUE"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Priority(StrEnum):
    """Task priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID")
    home_id: str = Field(..., description="Owning home ID")
    asset_id: str | None = Field(default=None, description="Asset the task is for, if any")
    template_id: str | None = Field(default=None, description="Template the task was generated from")
    schedule_id: str | None = Field(default=None, description="Schedule that generated the task")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    notes: str | None = Field(default=None, description="Free-form notes")
    due_date: datetime = Field(..., description="When the task is due")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Stored lifecycle status")
    estimated_cost: float | None = Field(default=None, description="Estimated cost")
    completed_at: datetime | None = Field(default=None, description="Completion timestamp")
    completion_notes: str | None = Field(default=None, description="Notes recorded on completion")
    completion_photos: list[str] = Field(default_factory=list, description="Photo URLs recorded on completion")
    actual_cost: float | None = Field(default=None, description="Actual cost recorded on completion")
    cost_notes: str | None = Field(default=None, description="Notes about the cost")
    created: datetime = Field(..., description="Creation timestamp")
    updated: datetime = Field(..., description="Last update timestamp")
