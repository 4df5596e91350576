"""Pydantic models for creating records and validating incoming requests."""

from datetime import UTC, datetime
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

from helixintel.core.config import constants
from helixintel.domain.frequency import Frequency
from helixintel.domain.task import Priority
from helixintel.domain.template import AssetCategory, Difficulty


class HomeCreate(BaseModel):
    """Pydantic model for creating a home record."""

    name: str = Field(..., min_length=1, description="Home name")


class AssetCreate(BaseModel):
    """Pydantic model for creating an asset record."""

    home_id: str = Field(..., description="Owning home ID")
    name: str = Field(..., min_length=1, description="Asset name")
    category: AssetCategory = Field(default=AssetCategory.OTHER, description="Asset category")


class TemplateCreate(BaseModel):
    """Pydantic model for creating a system maintenance template."""

    name: str = Field(..., min_length=1, description="Template name")
    description: str = Field(default="", description="What the maintenance involves")
    category: AssetCategory = Field(..., description="Category of asset this applies to")
    default_frequency: Frequency = Field(..., description="Suggested recurrence")
    default_custom_frequency_days: int | None = Field(default=None, description="Suggested day count for CUSTOM")
    instructions: list[str] = Field(default_factory=list, description="Ordered steps")
    estimated_duration_minutes: int | None = Field(default=None, ge=1, description="Typical time to complete")
    difficulty: Difficulty = Field(default=Difficulty.EASY, description="Skill required")
    is_active: bool = Field(default=True, description="Whether the template can be applied")


class ScheduleCreate(BaseModel):
    """Pydantic model for inserting a schedule record."""

    home_id: str = Field(..., description="Owning home ID")
    asset_id: str | None = Field(default=None, description="Asset ID, or None for a whole-home schedule")
    template_id: str = Field(..., description="Template ID")
    frequency: Frequency = Field(..., description="Recurrence frequency")
    custom_frequency_days: int | None = Field(default=None, description="Day count, present only for CUSTOM")
    next_due_date: datetime = Field(..., description="First due date")
    created: datetime = Field(..., description="Creation timestamp")


class TaskCreate(BaseModel):
    """Pydantic model for inserting a task record."""

    home_id: str = Field(..., description="Owning home ID")
    asset_id: str | None = Field(default=None, description="Asset ID")
    template_id: str | None = Field(default=None, description="Template ID")
    schedule_id: str | None = Field(default=None, description="Schedule ID; filled in by the store on apply")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Task description")
    notes: str | None = Field(default=None, description="Free-form notes")
    due_date: datetime = Field(..., description="When the task is due")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    estimated_cost: float | None = Field(default=None, description="Estimated cost")
    created: datetime = Field(..., description="Creation timestamp")


class CompletionDetails(BaseModel):
    """Optional metadata recorded when a task is completed."""

    completion_notes: str | None = Field(
        default=None, max_length=constants.MAX_COMPLETION_NOTES_LENGTH, description="What was done"
    )
    completion_photos: list[str] = Field(default_factory=list, description="Photo URLs of the finished work")
    actual_cost: float | None = Field(default=None, ge=0, description="What the job cost")
    cost_notes: str | None = Field(default=None, max_length=constants.MAX_COST_NOTES_LENGTH, description="Cost notes")

    @field_validator("completion_photos")
    @classmethod
    def validate_photo_urls(cls, v: list[str]) -> list[str]:
        """Validate every photo reference is an http(s) URL."""
        for url in v:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                msg = f"Photo must be an http(s) URL: {url}"
                raise ValueError(msg)
        return v


class CompleteTaskRequest(CompletionDetails):
    """Request body for completing a task."""

    require_completion_photo: bool | None = Field(
        default=None, description="Photo policy for this completion; falls back to the configured default"
    )


class ApplyTemplateRequest(BaseModel):
    """Request body for applying a template to an asset or a whole home."""

    template_id: str = Field(..., description="Template to apply")
    asset_id: str | None = Field(default=None, description="Asset ID, or omitted for a whole-home schedule")
    frequency: Frequency | None = Field(default=None, description="Override for the template default frequency")
    custom_frequency_days: int | None = Field(default=None, description="Day count when frequency is CUSTOM")


class ScheduleUpdateRequest(BaseModel):
    """Request body for updating a schedule."""

    frequency: Frequency | None = Field(default=None, description="New frequency")
    custom_frequency_days: int | None = Field(default=None, description="Day count when frequency is CUSTOM")
    is_active: bool | None = Field(default=None, description="Pause or resume the schedule")

    @model_validator(mode="after")
    def check_custom_days(self) -> "ScheduleUpdateRequest":
        """Custom days only make sense alongside a CUSTOM frequency."""
        if self.custom_frequency_days is not None and self.frequency != Frequency.CUSTOM:
            msg = "custom_frequency_days requires frequency CUSTOM"
            raise ValueError(msg)
        return self


class StandaloneTaskCreate(BaseModel):
    """Request body for creating a task that is not generated by a schedule."""

    title: str = Field(..., min_length=1, max_length=constants.MAX_TITLE_LENGTH, description="Task title")
    description: str = Field(default="", max_length=constants.MAX_DESCRIPTION_LENGTH, description="Task description")
    asset_id: str | None = Field(default=None, description="Asset ID")
    due_date: datetime = Field(..., description="When the task is due")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    notes: str | None = Field(default=None, max_length=constants.MAX_DESCRIPTION_LENGTH, description="Notes")
    estimated_cost: float | None = Field(default=None, ge=0, description="Estimated cost")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject titles that are only whitespace."""
        stripped = v.strip()
        if not stripped:
            msg = "Title is required"
            raise ValueError(msg)
        return stripped

    @field_validator("due_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Treat a due date without an offset as UTC."""
        return v.replace(tzinfo=UTC) if v.tzinfo is None else v


class TaskUpdateRequest(BaseModel):
    """Request body for editing a task's details. Only the fields sent are changed.

    Status is not editable here; it moves only through start, complete,
    reopen and cancel.
    """

    title: str | None = Field(default=None, max_length=constants.MAX_TITLE_LENGTH, description="Task title")
    description: str | None = Field(
        default=None, max_length=constants.MAX_DESCRIPTION_LENGTH, description="Task description"
    )
    due_date: datetime | None = Field(default=None, description="When the task is due")
    priority: Priority | None = Field(default=None, description="Task priority")
    notes: str | None = Field(default=None, max_length=constants.MAX_DESCRIPTION_LENGTH, description="Notes")
    asset_id: str | None = Field(default=None, description="Asset ID; null detaches the task from its asset")
    estimated_cost: float | None = Field(default=None, ge=0, description="Estimated cost")
    actual_cost: float | None = Field(default=None, ge=0, description="What the job cost")
    cost_notes: str | None = Field(default=None, max_length=constants.MAX_COST_NOTES_LENGTH, description="Cost notes")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        """Reject titles that are only whitespace."""
        if v is None:
            return v
        stripped = v.strip()
        if not stripped:
            msg = "Title is required"
            raise ValueError(msg)
        return stripped

    @field_validator("due_date")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat a due date without an offset as UTC."""
        if v is None or v.tzinfo is not None:
            return v
        return v.replace(tzinfo=UTC)

    @model_validator(mode="after")
    def check_required_fields(self) -> "TaskUpdateRequest":
        """Title, description, due date and priority can be changed but not cleared."""
        for name in ("title", "description", "due_date", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                msg = f"{name} cannot be null"
                raise ValueError(msg)
        return self


class BatchApplyRequest(BaseModel):
    """Request body for applying several templates to one asset or the whole home."""

    template_ids: list[str] = Field(
        ..., min_length=1, max_length=constants.MAX_BATCH_TEMPLATES, description="Templates to apply, in order"
    )
    asset_id: str | None = Field(default=None, description="Asset ID, or omitted for whole-home schedules")

    @field_validator("template_ids")
    @classmethod
    def drop_repeats(cls, v: list[str]) -> list[str]:
        """Apply each template once, keeping the first occurrence."""
        return list(dict.fromkeys(v))
