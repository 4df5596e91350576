"""Pure Python in-memory maintenance store and clock for unit testing."""

import copy
from datetime import datetime, timedelta

from helixintel.core.errors import (
    DuplicateScheduleConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    StaleRecordError,
)
from helixintel.core.ports import AdvanceFn
from helixintel.domain.create_models import AssetCreate, HomeCreate, ScheduleCreate, TaskCreate, TemplateCreate
from helixintel.domain.schedule import Schedule
from helixintel.domain.task import Task, TaskStatus
from helixintel.domain.template import Asset, AssetCategory, Difficulty, Home, MaintenanceTemplate
from helixintel.domain.update_models import SchedulePatch, TaskPatch
from helixintel.models.service_models import CompletionResult


class FakeClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when

    def advance(self, **kwargs: float) -> datetime:
        """Move time forward by a timedelta built from kwargs (days=..., hours=...)."""
        self._now += timedelta(**kwargs)
        return self._now


class InMemoryMaintenanceStore:
    """Pure Python maintenance store for unit testing.

    Mirrors the SQLite store's contract without a database: one active
    schedule per target, optimistic versions on schedules and compare-and-set
    status updates on tasks. Multi-record writes are staged on copies and
    committed together, so a failure leaves nothing behind.
    """

    def __init__(self):
        """Initialize empty in-memory store."""
        self.homes: dict[str, Home] = {}
        self.assets: dict[str, Asset] = {}
        self.templates: dict[str, MaintenanceTemplate] = {}
        self.schedules: dict[str, Schedule] = {}
        self.tasks: dict[str, Task] = {}
        self._id_counter = 1000

        # Hooks for exercising races
        self.stale_writes_remaining = 0
        self.fail_next_task_insert = False

    def _next_id(self) -> str:
        record_id = str(self._id_counter)
        self._id_counter += 1
        return record_id

    # Seeding

    async def create_home(self, home: HomeCreate) -> Home:
        created = Home(id=self._next_id(), name=home.name)
        self.homes[created.id] = created
        return created

    async def create_asset(self, asset: AssetCreate) -> Asset:
        created = Asset(id=self._next_id(), **asset.model_dump())
        self.assets[created.id] = created
        return created

    async def create_template(self, template: TemplateCreate) -> MaintenanceTemplate:
        created = MaintenanceTemplate(id=self._next_id(), **template.model_dump())
        self.templates[created.id] = created
        return created

    # Lookups

    @staticmethod
    def _lookup(table: dict, entity: str, record_id: str):
        if record_id not in table:
            raise NotFoundError(entity, record_id)
        return copy.deepcopy(table[record_id])

    async def get_home(self, home_id: str) -> Home:
        return self._lookup(self.homes, "home", home_id)

    async def get_asset(self, asset_id: str) -> Asset:
        return self._lookup(self.assets, "asset", asset_id)

    async def get_template(self, template_id: str) -> MaintenanceTemplate:
        return self._lookup(self.templates, "template", template_id)

    async def list_templates(
        self,
        *,
        include_inactive: bool = False,
        category: AssetCategory | None = None,
        difficulty: Difficulty | None = None,
        search: str | None = None,
    ) -> list[MaintenanceTemplate]:
        term = (search or "").strip().lower()
        matching = [
            template
            for template in self.templates.values()
            if (include_inactive or template.is_active)
            and (category is None or template.category == category)
            and (difficulty is None or template.difficulty == difficulty)
            and (not term or term in template.name.lower() or term in template.description.lower())
        ]
        return [copy.deepcopy(t) for t in sorted(matching, key=lambda t: (t.category, t.name))]

    async def get_schedule(self, schedule_id: str) -> Schedule:
        return self._lookup(self.schedules, "schedule", schedule_id)

    async def get_task(self, task_id: str) -> Task:
        return self._lookup(self.tasks, "task", task_id)

    async def find_active_schedule(self, *, home_id: str, asset_id: str | None, template_id: str) -> Schedule | None:
        for schedule in self.schedules.values():
            if (
                schedule.is_active
                and schedule.home_id == home_id
                and schedule.asset_id == asset_id
                and schedule.template_id == template_id
            ):
                return copy.deepcopy(schedule)
        return None

    # Writes

    def _active_conflict(self, schedule: Schedule) -> Schedule | None:
        for other in self.schedules.values():
            if (
                other.id != schedule.id
                and other.is_active
                and other.home_id == schedule.home_id
                and other.asset_id == schedule.asset_id
                and other.template_id == schedule.template_id
            ):
                return other
        return None

    def _build_task(self, task: TaskCreate) -> Task:
        if self.fail_next_task_insert:
            self.fail_next_task_insert = False
            msg = "simulated task insert failure"
            raise RuntimeError(msg)
        return Task(id=self._next_id(), updated=task.created, **task.model_dump())

    def _patched_schedule(self, schedule: Schedule, patch: SchedulePatch) -> Schedule:
        data = patch.model_dump(exclude_unset=True)
        if not data:
            return schedule
        updated = schedule.model_copy(update={**data, "version": schedule.version + 1})
        if updated.is_active:
            conflict = self._active_conflict(updated)
            if conflict is not None:
                raise DuplicateScheduleConflictError(
                    template_id=updated.template_id, asset_id=updated.asset_id, existing_schedule_id=conflict.id
                )
        return Schedule.model_validate(updated.model_dump())

    def _patched_task(self, task_id: str, patch: TaskPatch, expected_status: frozenset[TaskStatus]) -> Task:
        current = self._lookup(self.tasks, "task", task_id)
        if current.status not in expected_status:
            raise InvalidStateTransitionError(
                current=current.status, attempted=patch.status or current.status, task_id=task_id
            )
        return current.model_copy(update=patch.model_dump(exclude_unset=True))

    async def create_schedule_and_task(self, schedule: ScheduleCreate, task: TaskCreate) -> tuple[Schedule, Task]:
        created_schedule = Schedule(id=self._next_id(), updated=schedule.created, **schedule.model_dump())
        conflict = self._active_conflict(created_schedule)
        if conflict is not None:
            raise DuplicateScheduleConflictError(
                template_id=schedule.template_id, asset_id=schedule.asset_id, existing_schedule_id=conflict.id
            )
        created_task = self._build_task(task.model_copy(update={"schedule_id": created_schedule.id}))

        self.schedules[created_schedule.id] = created_schedule
        self.tasks[created_task.id] = created_task
        return copy.deepcopy(created_schedule), copy.deepcopy(created_task)

    async def update_schedule(
        self, schedule_id: str, patch: SchedulePatch, *, expected_version: int | None = None
    ) -> Schedule:
        current = self._lookup(self.schedules, "schedule", schedule_id)
        if self.stale_writes_remaining > 0:
            self.stale_writes_remaining -= 1
            # Simulate a concurrent writer landing first
            self.schedules[schedule_id] = current.model_copy(update={"version": current.version + 1})
            msg = f"Schedule {schedule_id} changed during update"
            raise StaleRecordError(msg)
        if expected_version is not None and current.version != expected_version:
            msg = f"Schedule {schedule_id} is at version {current.version}, expected {expected_version}"
            raise StaleRecordError(msg)

        updated = self._patched_schedule(current, patch)
        self.schedules[schedule_id] = updated
        return copy.deepcopy(updated)

    async def update_task(self, task_id: str, patch: TaskPatch, *, expected_status: frozenset[TaskStatus]) -> Task:
        updated = self._patched_task(task_id, patch, expected_status)
        self.tasks[task_id] = updated
        return copy.deepcopy(updated)

    async def update_task_and_maybe_create_next(
        self,
        task_id: str,
        patch: TaskPatch,
        *,
        expected_status: frozenset[TaskStatus],
        advance: AdvanceFn | None = None,
    ) -> CompletionResult:
        task = self._patched_task(task_id, patch, expected_status)
        if task.schedule_id is None or advance is None:
            self.tasks[task_id] = task
            return CompletionResult(task=copy.deepcopy(task))

        schedule = self._lookup(self.schedules, "schedule", task.schedule_id)
        schedule_patch, next_task = advance(schedule)
        schedule = self._patched_schedule(schedule, schedule_patch)
        created_next = None
        if next_task is not None:
            created_next = self._build_task(next_task.model_copy(update={"schedule_id": schedule.id}))

        # Commit
        self.tasks[task_id] = task
        self.schedules[schedule.id] = schedule
        if created_next is not None:
            self.tasks[created_next.id] = created_next
        return CompletionResult(
            task=copy.deepcopy(task), schedule=copy.deepcopy(schedule), next_task=copy.deepcopy(created_next)
        )

    async def create_task(self, task: TaskCreate) -> Task:
        created = self._build_task(task)
        self.tasks[created.id] = created
        return copy.deepcopy(created)

    # Listings

    async def list_schedules(
        self,
        *,
        home_id: str,
        asset_id: str | None = None,
        include_inactive: bool = False,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[list[Schedule], int]:
        matching = [
            schedule
            for schedule in self.schedules.values()
            if schedule.home_id == home_id
            and (asset_id is None or schedule.asset_id == asset_id)
            and (include_inactive or schedule.is_active)
        ]
        matching.sort(key=lambda s: s.created, reverse=True)
        matching.sort(key=lambda s: s.next_due_date)
        start = (page - 1) * per_page
        return [copy.deepcopy(s) for s in matching[start : start + per_page]], len(matching)

    async def list_tasks(
        self,
        *,
        home_id: str,
        schedule_id: str | None = None,
        statuses: frozenset[TaskStatus] | None = None,
    ) -> list[Task]:
        matching = [
            task
            for task in self.tasks.values()
            if task.home_id == home_id
            and (schedule_id is None or task.schedule_id == schedule_id)
            and (not statuses or task.status in statuses)
        ]
        return [copy.deepcopy(t) for t in sorted(matching, key=lambda t: (t.due_date, t.created))]
