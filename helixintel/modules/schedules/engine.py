"""Schedule engine: applies templates, advances due dates and drives task transitions."""

import functools
import logging
from collections.abc import Callable
from datetime import datetime

from helixintel.core.clock import Clock, SystemClock
from helixintel.core.config import constants
from helixintel.core.errors import (
    DuplicateScheduleConflictError,
    HelixIntelError,
    NotFoundError,
    PhotoRequiredError,
    StaleRecordError,
    classify_error_with_response,
)
from helixintel.core.logging import log_with_home_context, span
from helixintel.core.ports import MaintenanceStore
from helixintel.domain.create_models import (
    CompletionDetails,
    ScheduleCreate,
    StandaloneTaskCreate,
    TaskCreate,
    TaskUpdateRequest,
)
from helixintel.domain.frequency import Frequency, compute_next_due_date, parse_frequency, validate_custom_days
from helixintel.domain.schedule import Schedule
from helixintel.domain.task import Priority, Task, TaskStatus
from helixintel.domain.template import AssetCategory, Difficulty
from helixintel.domain.update_models import SchedulePatch, TaskPatch
from helixintel.models.service_models import (
    AppliedTemplate,
    BatchApplyResult,
    CompletionResult,
    ScheduleList,
    TemplateApplyOutcome,
    TemplateList,
)
from helixintel.modules.tasks.state_machine import allowed_sources, ensure_transition


logger = logging.getLogger(__name__)


def advance_on_completion(
    schedule: Schedule, completed_task: Task, *, now: datetime
) -> tuple[SchedulePatch, TaskCreate | None]:
    """Advance a schedule for a completed task.

    The schedule always records the completion and moves its next due date to
    one interval after ``now``. A follow-up task is returned only when the
    schedule is active, so a paused schedule generates nothing.

    Args:
        schedule: Schedule as read inside the completion transaction
        completed_task: Task being completed
        now: Completion time

    Returns:
        Tuple of (schedule patch, next task or None)
    """
    next_due = compute_next_due_date(now, schedule.frequency, schedule.custom_frequency_days)
    patch = SchedulePatch(last_completed_date=now, next_due_date=next_due, updated=now)

    if not schedule.is_active:
        return patch, None

    next_task = TaskCreate(
        home_id=schedule.home_id,
        asset_id=schedule.asset_id,
        template_id=schedule.template_id,
        schedule_id=schedule.id,
        title=completed_task.title,
        description=completed_task.description,
        notes=completed_task.notes,
        due_date=next_due,
        priority=completed_task.priority,
        estimated_cost=completed_task.estimated_cost,
        created=now,
    )
    return patch, next_task


class ScheduleEngine:
    """Orchestrates schedule and task operations over a maintenance store.

    Operations that take ``home_id`` report records owned by another home as
    not found.
    """

    def __init__(self, store: MaintenanceStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    @property
    def store(self) -> MaintenanceStore:
        return self._store

    @property
    def clock(self) -> Clock:
        return self._clock

    # Schedules

    async def apply_template(
        self,
        *,
        home_id: str,
        template_id: str,
        asset_id: str | None = None,
        frequency: str | Frequency | None = None,
        custom_frequency_days: int | None = None,
    ) -> AppliedTemplate:
        """Apply a template to an asset (or the whole home) and create the first task.

        Args:
            home_id: Owning home
            template_id: Template to apply
            asset_id: Asset to schedule for; None for a whole-home schedule
            frequency: Override for the template default frequency
            custom_frequency_days: Day count when frequency is CUSTOM

        Returns:
            The new schedule and its first PENDING task

        Raises:
            NotFoundError: If the template, asset or home does not exist (or the asset is in another home)
            InvalidFrequencyError: If the frequency or custom day count is invalid
            DuplicateScheduleConflictError: If an active schedule already exists for this target
        """
        with span("schedule_engine.apply_template"):
            template = await self._store.get_template(template_id)
            if not template.is_active:
                raise NotFoundError("template", template_id)

            if asset_id is not None:
                asset = await self._store.get_asset(asset_id)
                if asset.home_id != home_id:
                    raise NotFoundError("asset", asset_id)
                if template.category not in (AssetCategory.OTHER, asset.category):
                    log_with_home_context(
                        logger,
                        "warning",
                        "Template category does not match asset category",
                        home_id=home_id,
                        template_id=template_id,
                        asset_id=asset_id,
                        template_category=template.category,
                        asset_category=asset.category,
                    )
            else:
                await self._store.get_home(home_id)

            if frequency is None:
                freq = template.default_frequency
                custom_days = validate_custom_days(freq, template.default_custom_frequency_days)
            else:
                freq = parse_frequency(frequency)
                custom_days = validate_custom_days(freq, custom_frequency_days)

            existing = await self._store.find_active_schedule(
                home_id=home_id, asset_id=asset_id, template_id=template_id
            )
            if existing is not None:
                raise DuplicateScheduleConflictError(
                    template_id=template_id, asset_id=asset_id, existing_schedule_id=existing.id
                )

            now = self._clock.now()
            next_due = compute_next_due_date(now, freq, custom_days)
            schedule, task = await self._store.create_schedule_and_task(
                ScheduleCreate(
                    home_id=home_id,
                    asset_id=asset_id,
                    template_id=template_id,
                    frequency=freq,
                    custom_frequency_days=custom_days,
                    next_due_date=next_due,
                    created=now,
                ),
                TaskCreate(
                    home_id=home_id,
                    asset_id=asset_id,
                    template_id=template_id,
                    title=template.name,
                    description=template.description,
                    notes=f"Scheduled maintenance: {template.name}",
                    due_date=next_due,
                    priority=Priority.MEDIUM,
                    created=now,
                ),
            )

            log_with_home_context(
                logger,
                "info",
                "Applied template",
                home_id=home_id,
                template_id=template_id,
                schedule_id=schedule.id,
                task_id=task.id,
                frequency=freq,
            )
            return AppliedTemplate(schedule=schedule, task=task)

    async def apply_templates(
        self,
        *,
        home_id: str,
        template_ids: list[str],
        asset_id: str | None = None,
    ) -> BatchApplyResult:
        """Apply several templates to one asset (or the whole home), each with its default frequency.

        Every template is applied in its own transaction. Domain failures such
        as a duplicate schedule or an unknown template are reported per
        template and do not stop the batch; storage failures propagate.

        Raises:
            NotFoundError: If the home or asset does not exist (or the asset is in another home)
        """
        with span("schedule_engine.apply_templates"):
            if asset_id is not None:
                asset = await self._store.get_asset(asset_id)
                if asset.home_id != home_id:
                    raise NotFoundError("asset", asset_id)
            else:
                await self._store.get_home(home_id)

            results: list[TemplateApplyOutcome] = []
            for template_id in template_ids:
                template_name = None
                try:
                    template_name = (await self._store.get_template(template_id)).name
                    applied = await self.apply_template(home_id=home_id, template_id=template_id, asset_id=asset_id)
                except HelixIntelError as e:
                    error = classify_error_with_response(e)
                    results.append(
                        TemplateApplyOutcome(
                            template_id=template_id,
                            template_name=template_name,
                            success=False,
                            error_code=error.code,
                            error=error.message,
                        )
                    )
                    continue
                results.append(
                    TemplateApplyOutcome(
                        template_id=template_id,
                        template_name=template_name,
                        success=True,
                        schedule_id=applied.schedule.id,
                        task_id=applied.task.id,
                    )
                )

            success_count = sum(1 for result in results if result.success)
            log_with_home_context(
                logger,
                "info",
                "Applied template batch",
                home_id=home_id,
                asset_id=asset_id,
                success_count=success_count,
                fail_count=len(results) - success_count,
            )
            return BatchApplyResult(
                results=results, success_count=success_count, fail_count=len(results) - success_count
            )

    async def list_templates(
        self,
        *,
        category: AssetCategory | None = None,
        difficulty: Difficulty | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = constants.DEFAULT_PER_PAGE_LIMIT,
    ) -> TemplateList:
        """List active templates by category and name, optionally filtered."""
        if page < 1:
            msg = "page must be at least 1"
            raise ValueError(msg)
        per_page = max(1, min(per_page, constants.MAX_PER_PAGE_LIMIT))

        templates = await self._store.list_templates(category=category, difficulty=difficulty, search=search)
        start = (page - 1) * per_page
        return TemplateList(
            items=templates[start : start + per_page], total=len(templates), page=page, per_page=per_page
        )

    async def get_schedule(self, *, schedule_id: str, home_id: str | None = None) -> Schedule:
        """Load a schedule, enforcing ownership when home_id is given."""
        schedule = await self._store.get_schedule(schedule_id)
        if home_id is not None and schedule.home_id != home_id:
            raise NotFoundError("schedule", schedule_id)
        return schedule

    async def _update_schedule(
        self,
        *,
        schedule_id: str,
        home_id: str | None,
        build_patch: Callable[[Schedule], SchedulePatch | None],
    ) -> Schedule:
        """Read-modify-write a schedule with optimistic locking.

        ``build_patch`` returns None when the schedule needs no change. Stale
        writes are retried against a fresh read; domain errors are not.
        """
        attempts = constants.SCHEDULE_UPDATE_MAX_ATTEMPTS
        for attempt in range(1, attempts + 1):
            schedule = await self.get_schedule(schedule_id=schedule_id, home_id=home_id)
            patch = build_patch(schedule)
            if patch is None:
                return schedule
            try:
                return await self._store.update_schedule(schedule_id, patch, expected_version=schedule.version)
            except StaleRecordError:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Schedule changed during update, retrying",
                    extra={"schedule_id": schedule_id, "attempt": attempt},
                )
        msg = "SCHEDULE_UPDATE_MAX_ATTEMPTS must be at least 1"
        raise RuntimeError(msg)

    async def update_schedule(
        self,
        *,
        schedule_id: str,
        frequency: str | Frequency | None = None,
        custom_frequency_days: int | None = None,
        is_active: bool | None = None,
        home_id: str | None = None,
    ) -> Schedule:
        """Change a schedule's frequency and/or active flag in a single write.

        A new frequency recomputes the next due date from the last completion,
        or from creation if the schedule was never completed. Both changes
        commit together or not at all. No write happens when nothing changes.

        Raises:
            InvalidFrequencyError: Before anything is read or written
            DuplicateScheduleConflictError: If resuming would give the target two active schedules
        """
        freq: Frequency | None = None
        custom_days: int | None = None
        if frequency is not None:
            freq = parse_frequency(frequency)
            custom_days = validate_custom_days(freq, custom_frequency_days)

        def build_patch(schedule: Schedule) -> SchedulePatch | None:
            changes: dict[str, object] = {}
            if freq is not None:
                anchor = schedule.last_completed_date or schedule.created
                changes["frequency"] = freq
                changes["custom_frequency_days"] = custom_days
                changes["next_due_date"] = compute_next_due_date(anchor, freq, custom_days)
            if is_active is not None and is_active != schedule.is_active:
                changes["is_active"] = is_active
            if not changes:
                return None
            return SchedulePatch(**changes, updated=self._clock.now())

        with span("schedule_engine.update_schedule"):
            schedule = await self._update_schedule(schedule_id=schedule_id, home_id=home_id, build_patch=build_patch)
            log_with_home_context(
                logger,
                "info",
                "Schedule updated",
                home_id=schedule.home_id,
                schedule_id=schedule_id,
                frequency=schedule.frequency,
                is_active=schedule.is_active,
                next_due_date=schedule.next_due_date.isoformat(),
            )
            return schedule

    async def edit_frequency(
        self,
        *,
        schedule_id: str,
        frequency: str | Frequency,
        custom_frequency_days: int | None = None,
        home_id: str | None = None,
    ) -> Schedule:
        """Change a schedule's frequency and recompute its next due date.

        Raises:
            InvalidFrequencyError: Before anything is read or written
        """
        return await self.update_schedule(
            schedule_id=schedule_id,
            frequency=frequency,
            custom_frequency_days=custom_frequency_days,
            home_id=home_id,
        )

    async def toggle_active(self, *, schedule_id: str, home_id: str | None = None) -> Schedule:
        """Pause an active schedule or resume a paused one.

        Resuming never creates tasks for time that passed while paused.

        Raises:
            DuplicateScheduleConflictError: If resuming would give the target two active schedules
        """
        with span("schedule_engine.toggle_active"):
            schedule = await self._update_schedule(
                schedule_id=schedule_id,
                home_id=home_id,
                build_patch=lambda s: SchedulePatch(is_active=not s.is_active, updated=self._clock.now()),
            )
            log_with_home_context(
                logger,
                "info",
                "Schedule resumed" if schedule.is_active else "Schedule paused",
                home_id=schedule.home_id,
                schedule_id=schedule_id,
            )
            return schedule

    async def set_active(self, *, schedule_id: str, is_active: bool, home_id: str | None = None) -> Schedule:
        """Set the active flag explicitly; no write happens if it already matches."""
        return await self.update_schedule(schedule_id=schedule_id, is_active=is_active, home_id=home_id)

    async def remove_schedule(self, *, schedule_id: str, home_id: str | None = None) -> Schedule:
        """Soft-delete a schedule by deactivating it. Existing tasks are left as they are."""
        schedule = await self.set_active(schedule_id=schedule_id, is_active=False, home_id=home_id)
        log_with_home_context(logger, "info", "Schedule removed", home_id=schedule.home_id, schedule_id=schedule_id)
        return schedule

    async def list_schedules(
        self,
        *,
        home_id: str,
        asset_id: str | None = None,
        include_inactive: bool = False,
        page: int = 1,
        per_page: int = constants.DEFAULT_PER_PAGE_LIMIT,
    ) -> ScheduleList:
        """List a home's schedules, next due first."""
        if page < 1:
            msg = "page must be at least 1"
            raise ValueError(msg)
        per_page = max(1, min(per_page, constants.MAX_PER_PAGE_LIMIT))

        await self._store.get_home(home_id)
        items, total = await self._store.list_schedules(
            home_id=home_id,
            asset_id=asset_id,
            include_inactive=include_inactive,
            page=page,
            per_page=per_page,
        )
        return ScheduleList(items=items, total=total, page=page, per_page=per_page)

    # Tasks

    async def get_task(self, *, task_id: str, home_id: str | None = None) -> Task:
        """Load a task, enforcing ownership when home_id is given."""
        task = await self._store.get_task(task_id)
        if home_id is not None and task.home_id != home_id:
            raise NotFoundError("task", task_id)
        return task

    async def list_tasks(self, *, home_id: str) -> list[Task]:
        """All tasks of a home, ordered by due date."""
        await self._store.get_home(home_id)
        return await self._store.list_tasks(home_id=home_id)

    async def asset_categories(self, tasks: list[Task]) -> dict[str, str]:
        """Map each asset referenced by tasks to its category; missing assets are skipped."""
        categories: dict[str, str] = {}
        for asset_id in {task.asset_id for task in tasks if task.asset_id}:
            try:
                asset = await self._store.get_asset(asset_id)
            except NotFoundError:
                logger.warning("Task references missing asset", extra={"asset_id": asset_id})
                continue
            categories[asset_id] = asset.category
        return categories

    async def create_task(self, *, home_id: str, request: StandaloneTaskCreate) -> Task:
        """Create a PENDING task that no schedule generated.

        Raises:
            NotFoundError: If the home does not exist or the asset belongs to another home
        """
        with span("schedule_engine.create_task"):
            await self._store.get_home(home_id)
            if request.asset_id is not None:
                asset = await self._store.get_asset(request.asset_id)
                if asset.home_id != home_id:
                    raise NotFoundError("asset", request.asset_id)

            task = await self._store.create_task(
                TaskCreate(home_id=home_id, created=self._clock.now(), **request.model_dump())
            )
            log_with_home_context(logger, "info", "Created task", home_id=home_id, task_id=task.id)
            return task

    async def update_task(self, *, task_id: str, request: TaskUpdateRequest, home_id: str | None = None) -> Task:
        """Edit a task's details without touching its status or schedule.

        Only the fields set on the request change; an empty request writes nothing.

        Raises:
            NotFoundError: If the task is not in the home, or the new asset belongs to another home
        """
        with span("schedule_engine.update_task"):
            task = await self.get_task(task_id=task_id, home_id=home_id)
            changes = request.model_dump(exclude_unset=True)
            if not changes:
                return task

            new_asset_id = changes.get("asset_id")
            if new_asset_id is not None:
                asset = await self._store.get_asset(new_asset_id)
                if asset.home_id != task.home_id:
                    raise NotFoundError("asset", new_asset_id)

            updated = await self._store.update_task(
                task_id,
                TaskPatch(**changes, updated=self._clock.now()),
                expected_status=frozenset(TaskStatus),
            )
            log_with_home_context(
                logger, "info", "Updated task", home_id=task.home_id, task_id=task_id, fields=sorted(changes)
            )
            return updated

    async def start_task(self, *, task_id: str, home_id: str | None = None) -> Task:
        """Move a PENDING task to IN_PROGRESS."""
        with span("schedule_engine.start_task"):
            task = await self.get_task(task_id=task_id, home_id=home_id)
            ensure_transition(task, TaskStatus.IN_PROGRESS)
            return await self._store.update_task(
                task_id,
                TaskPatch(status=TaskStatus.IN_PROGRESS, updated=self._clock.now()),
                expected_status=allowed_sources(TaskStatus.IN_PROGRESS),
            )

    async def complete_task(
        self,
        *,
        task_id: str,
        details: CompletionDetails | None = None,
        require_completion_photo: bool = False,
        home_id: str | None = None,
    ) -> CompletionResult:
        """Complete a task and, if it belongs to a schedule, advance the schedule.

        The status check runs before the photo policy. The schedule advance and
        the follow-up task are written in the same transaction as the completion.

        Raises:
            InvalidStateTransitionError: If the task is not PENDING or IN_PROGRESS
            PhotoRequiredError: If a photo is required and none was given
        """
        with span("schedule_engine.complete_task"):
            completion = details or CompletionDetails()
            task = await self.get_task(task_id=task_id, home_id=home_id)
            ensure_transition(task, TaskStatus.COMPLETED)
            if require_completion_photo and not completion.completion_photos:
                raise PhotoRequiredError(task_id)

            now = self._clock.now()
            patch = TaskPatch(
                status=TaskStatus.COMPLETED,
                completed_at=now,
                completion_notes=completion.completion_notes,
                completion_photos=completion.completion_photos,
                actual_cost=completion.actual_cost,
                cost_notes=completion.cost_notes,
                updated=now,
            )
            result = await self._store.update_task_and_maybe_create_next(
                task_id,
                patch,
                expected_status=allowed_sources(TaskStatus.COMPLETED),
                advance=functools.partial(advance_on_completion, completed_task=task, now=now),
            )

            log_with_home_context(
                logger,
                "info",
                "Completed task",
                home_id=task.home_id,
                task_id=task_id,
                schedule_id=task.schedule_id,
                next_task_id=result.next_task.id if result.next_task else None,
            )
            return result

    async def reopen_task(self, *, task_id: str, home_id: str | None = None) -> Task:
        """Move a COMPLETED task back to PENDING and clear its completion details.

        The schedule advance and any follow-up task created on completion stay as they are.
        """
        with span("schedule_engine.reopen_task"):
            task = await self.get_task(task_id=task_id, home_id=home_id)
            ensure_transition(task, TaskStatus.PENDING)
            reopened = await self._store.update_task(
                task_id,
                TaskPatch(
                    status=TaskStatus.PENDING,
                    completed_at=None,
                    completion_notes=None,
                    completion_photos=[],
                    actual_cost=None,
                    updated=self._clock.now(),
                ),
                expected_status=allowed_sources(TaskStatus.PENDING),
            )
            log_with_home_context(logger, "info", "Reopened task", home_id=task.home_id, task_id=task_id)
            return reopened

    async def cancel_task(self, *, task_id: str, home_id: str | None = None) -> Task:
        """Cancel a task. Its schedule is not touched."""
        with span("schedule_engine.cancel_task"):
            task = await self.get_task(task_id=task_id, home_id=home_id)
            ensure_transition(task, TaskStatus.CANCELLED)
            cancelled = await self._store.update_task(
                task_id,
                TaskPatch(status=TaskStatus.CANCELLED, updated=self._clock.now()),
                expected_status=allowed_sources(TaskStatus.CANCELLED),
            )
            log_with_home_context(logger, "info", "Cancelled task", home_id=task.home_id, task_id=task_id)
            return cancelled
