"""Domain models and DTOs."""

from helixintel.domain.create_models import (
    ApplyTemplateRequest,
    AssetCreate,
    CompleteTaskRequest,
    CompletionDetails,
    HomeCreate,
    ScheduleCreate,
    ScheduleUpdateRequest,
    StandaloneTaskCreate,
    TaskCreate,
    TemplateCreate,
)
from helixintel.domain.frequency import Frequency
from helixintel.domain.schedule import Schedule
from helixintel.domain.task import DisplayStatus, Priority, Task, TaskStatus
from helixintel.domain.template import Asset, AssetCategory, Difficulty, Home, MaintenanceTemplate
from helixintel.domain.update_models import SchedulePatch, TaskPatch


__all__ = [
    "ApplyTemplateRequest",
    "Asset",
    "AssetCategory",
    "AssetCreate",
    "CompleteTaskRequest",
    "CompletionDetails",
    "Difficulty",
    "DisplayStatus",
    "Frequency",
    "Home",
    "HomeCreate",
    "MaintenanceTemplate",
    "Priority",
    "Schedule",
    "ScheduleCreate",
    "SchedulePatch",
    "ScheduleUpdateRequest",
    "StandaloneTaskCreate",
    "Task",
    "TaskCreate",
    "TaskPatch",
    "TaskStatus",
    "TemplateCreate",
]
