"""Schedule domain model."""

from datetime import datetime

from pydantic import BaseModel, Field, computed_field, model_validator

from helixintel.domain.frequency import Frequency, format_frequency


class Schedule(BaseModel):
    """Recurring maintenance obligation for an asset or a whole home."""

    id: str = Field(..., description="Unique schedule ID")
    home_id: str = Field(..., description="Owning home ID")
    asset_id: str | None = Field(default=None, description="Asset ID, or None for a whole-home schedule")
    template_id: str = Field(..., description="Template the schedule was created from")
    frequency: Frequency = Field(..., description="Recurrence frequency")
    custom_frequency_days: int | None = Field(default=None, description="Day count, present only for CUSTOM")
    next_due_date: datetime = Field(..., description="When the next occurrence is due")
    last_completed_date: datetime | None = Field(default=None, description="Most recent completion")
    is_active: bool = Field(default=True, description="Whether completions generate new tasks")
    created: datetime = Field(..., description="Creation timestamp")
    updated: datetime = Field(..., description="Last update timestamp")
    version: int = Field(default=1, description="Optimistic lock counter")

    @model_validator(mode="after")
    def check_custom_days(self) -> "Schedule":
        """Custom days must be set exactly when the frequency is CUSTOM."""
        if (self.frequency == Frequency.CUSTOM) != (self.custom_frequency_days is not None):
            msg = "custom_frequency_days must be set if and only if frequency is CUSTOM"
            raise ValueError(msg)
        return self

    @computed_field
    @property
    def frequency_label(self) -> str:
        """Human-readable recurrence, e.g. "Every 10 days"."""
        return format_frequency(self.frequency, self.custom_frequency_days)
