"""Persistence port used by the schedule engine."""

from collections.abc import Callable
from typing import Protocol

from helixintel.domain.create_models import ScheduleCreate, TaskCreate
from helixintel.domain.schedule import Schedule
from helixintel.domain.task import Task, TaskStatus
from helixintel.domain.template import Asset, AssetCategory, Difficulty, Home, MaintenanceTemplate
from helixintel.domain.update_models import SchedulePatch, TaskPatch
from helixintel.models.service_models import CompletionResult


# Given the schedule as read inside the completion transaction, return the
# schedule update and the next task to create (or None).
AdvanceFn = Callable[[Schedule], tuple[SchedulePatch, TaskCreate | None]]


class MaintenanceStore(Protocol):
    """Async storage for schedules, tasks and their reference data.

    Lookups raise NotFoundError for missing records. Multi-record writes are
    atomic: either every record is written or none is.
    """

    async def get_home(self, home_id: str) -> Home: ...

    async def get_asset(self, asset_id: str) -> Asset: ...

    async def get_template(self, template_id: str) -> MaintenanceTemplate: ...

    async def list_templates(
        self,
        *,
        include_inactive: bool = False,
        category: AssetCategory | None = None,
        difficulty: Difficulty | None = None,
        search: str | None = None,
    ) -> list[MaintenanceTemplate]:
        """Return templates ordered by category and name.

        ``search`` matches name or description, case-insensitively.
        """
        ...

    async def get_schedule(self, schedule_id: str) -> Schedule: ...

    async def get_task(self, task_id: str) -> Task: ...

    async def find_active_schedule(self, *, home_id: str, asset_id: str | None, template_id: str) -> Schedule | None:
        """Return the active schedule for the home, asset (or whole home) and template, if any."""
        ...

    async def create_schedule_and_task(self, schedule: ScheduleCreate, task: TaskCreate) -> tuple[Schedule, Task]:
        """Insert a schedule and its first task in one transaction.

        The task is linked to the new schedule.

        Raises:
            DuplicateScheduleConflictError: If an active schedule already exists for the same target
        """
        ...

    async def update_schedule(
        self, schedule_id: str, patch: SchedulePatch, *, expected_version: int | None = None
    ) -> Schedule:
        """Apply a partial update and bump the version.

        Raises:
            StaleRecordError: If expected_version is given and no longer matches
            DuplicateScheduleConflictError: If reactivating would create a second active schedule
        """
        ...

    async def update_task(self, task_id: str, patch: TaskPatch, *, expected_status: frozenset[TaskStatus]) -> Task:
        """Apply a partial update only if the task's current status is in expected_status.

        Raises:
            InvalidStateTransitionError: If the stored status is not expected
        """
        ...

    async def update_task_and_maybe_create_next(
        self,
        task_id: str,
        patch: TaskPatch,
        *,
        expected_status: frozenset[TaskStatus],
        advance: AdvanceFn | None = None,
    ) -> CompletionResult:
        """Update a task and, if it is linked to a schedule, advance that schedule atomically.

        ``advance`` is called with the schedule row read inside the transaction.
        """
        ...

    async def create_task(self, task: TaskCreate) -> Task: ...

    async def list_schedules(
        self,
        *,
        home_id: str,
        asset_id: str | None = None,
        include_inactive: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Schedule], int]:
        """Return one page of schedules (next due first, then newest) and the total count."""
        ...

    async def list_tasks(
        self,
        *,
        home_id: str,
        schedule_id: str | None = None,
        statuses: frozenset[TaskStatus] | None = None,
    ) -> list[Task]:
        """Return tasks for a home ordered by due date."""
        ...
