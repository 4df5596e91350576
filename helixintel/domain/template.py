"""Reference data: maintenance templates, homes and assets."""

from enum import StrEnum

from pydantic import BaseModel, Field

from helixintel.domain.frequency import Frequency


class AssetCategory(StrEnum):
    """Category shared by assets and templates."""

    HVAC = "HVAC"
    PLUMBING = "PLUMBING"
    ELECTRICAL = "ELECTRICAL"
    APPLIANCE = "APPLIANCE"
    OUTDOOR = "OUTDOOR"
    STRUCTURAL = "STRUCTURAL"
    OTHER = "OTHER"


class Difficulty(StrEnum):
    """How hard a maintenance job is."""

    EASY = "EASY"
    MODERATE = "MODERATE"
    HARD = "HARD"
    PROFESSIONAL = "PROFESSIONAL"


class MaintenanceTemplate(BaseModel):
    """Reusable maintenance recipe applied to assets."""

    id: str = Field(..., description="Unique template ID")
    name: str = Field(..., description="Template name")
    description: str = Field(default="", description="What the maintenance involves")
    category: AssetCategory = Field(..., description="Category of asset this applies to")
    default_frequency: Frequency = Field(..., description="Suggested recurrence")
    default_custom_frequency_days: int | None = Field(default=None, description="Suggested day count for CUSTOM")
    instructions: list[str] = Field(default_factory=list, description="Ordered steps")
    estimated_duration_minutes: int | None = Field(default=None, description="Typical time to complete")
    difficulty: Difficulty = Field(default=Difficulty.EASY, description="Skill required")
    is_active: bool = Field(default=True, description="Whether the template can be applied")


class Home(BaseModel):
    """A home that owns assets, schedules and tasks."""

    id: str = Field(..., description="Unique home ID")
    name: str = Field(..., description="Home name")


class Asset(BaseModel):
    """A maintainable item in a home."""

    id: str = Field(..., description="Unique asset ID")
    home_id: str = Field(..., description="Owning home ID")
    name: str = Field(..., description="Asset name")
    category: AssetCategory = Field(default=AssetCategory.OTHER, description="Asset category")
