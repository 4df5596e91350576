"""JSON API for schedules and tasks, scoped to a home."""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from helixintel.core.cache_client import InMemoryCache
from helixintel.core.config import Settings, constants
from helixintel.core.errors import classify_error_with_response
from helixintel.domain.create_models import (
    ApplyTemplateRequest,
    BatchApplyRequest,
    CompleteTaskRequest,
    CompletionDetails,
    ScheduleUpdateRequest,
    StandaloneTaskCreate,
    TaskUpdateRequest,
)
from helixintel.domain.schedule import Schedule
from helixintel.domain.task import Task
from helixintel.domain.template import AssetCategory, Difficulty, MaintenanceTemplate
from helixintel.models.service_models import (
    AppliedTemplate,
    BatchApplyResult,
    CompletionResult,
    Dashboard,
    ScheduleList,
    TaskStats,
    TaskView,
    TemplateList,
)
from helixintel.modules.schedules.engine import ScheduleEngine
from helixintel.modules.tasks.analytics import build_dashboard, task_stats
from helixintel.modules.tasks.helpers import filter_tasks_by_search, group_tasks_by_due_date, sort_tasks_by_default
from helixintel.modules.tasks.state_machine import display_status


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/homes/{home_id}", tags=["maintenance"])
templates_router = APIRouter(prefix="/templates", tags=["templates"])


def get_engine(request: Request) -> ScheduleEngine:
    """Schedule engine created by the application lifespan."""
    return request.app.state.engine


def get_cache(request: Request) -> InMemoryCache:
    """Cache created by the application lifespan."""
    return request.app.state.cache


def get_app_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def schedule_list_cache_key(
    *, home_id: str, asset_id: str | None, include_inactive: bool, page: int, per_page: int
) -> str:
    """Cache key for one page of a home's schedule listing."""
    return (
        f"{constants.SCHEDULE_CACHE_PREFIX}:home={home_id}:asset={asset_id or 'all'}"
        f":inactive={int(include_inactive)}:page={page}:limit={per_page}"
    )


def invalidate_home_schedules(cache: InMemoryCache, home_id: str) -> None:
    """Drop every cached schedule listing of a home."""
    cache.invalidate_pattern(f"{constants.SCHEDULE_CACHE_PREFIX}:home={home_id}:*")


def _view(task: Task, engine: ScheduleEngine) -> TaskView:
    return TaskView(task=task, display_status=display_status(task, engine.clock.now()))


async def helixintel_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Render domain and persistence errors as structured JSON."""
    error = classify_error_with_response(exc)
    if error.status_code >= constants.HTTP_SERVER_ERROR:
        logger.error("request_failed", extra={"code": error.code, "error": str(exc)})
    else:
        logger.info("request_rejected", extra={"code": error.code, "error": str(exc)})
    return JSONResponse(
        status_code=error.status_code,
        content={"code": error.code, "message": error.message, "suggestion": error.suggestion},
    )


# Templates


@templates_router.get("")
async def list_templates(
    category: AssetCategory | None = None,
    difficulty: Difficulty | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=constants.DEFAULT_PER_PAGE_LIMIT, ge=1, le=constants.MAX_PER_PAGE_LIMIT),
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
    app_settings: Settings = Depends(get_app_settings),
) -> TemplateList:
    """List active templates by category and name (cached)."""
    key = (
        f"{constants.TEMPLATE_LIST_CACHE_PREFIX}:category={category or 'all'}:difficulty={difficulty or 'all'}"
        f":search={(search or '').strip().lower()}:page={page}:limit={limit}"
    )
    return await cache.get_or_fetch(
        key,
        lambda: engine.list_templates(
            category=category, difficulty=difficulty, search=search, page=page, per_page=limit
        ),
        app_settings.template_cache_ttl_seconds,
    )


@templates_router.get("/{template_id}")
async def get_template(
    template_id: str,
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
    app_settings: Settings = Depends(get_app_settings),
) -> MaintenanceTemplate:
    """Get a maintenance template (cached)."""
    return await cache.get_or_fetch(
        f"{constants.TEMPLATE_CACHE_PREFIX}:{template_id}",
        lambda: engine.store.get_template(template_id),
        app_settings.template_cache_ttl_seconds,
    )


@router.post("/templates/apply", status_code=status.HTTP_201_CREATED)
async def apply_template(
    home_id: str,
    body: ApplyTemplateRequest,
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
) -> AppliedTemplate:
    """Apply a template to an asset or the whole home, creating the schedule and first task."""
    applied = await engine.apply_template(
        home_id=home_id,
        template_id=body.template_id,
        asset_id=body.asset_id,
        frequency=body.frequency,
        custom_frequency_days=body.custom_frequency_days,
    )
    invalidate_home_schedules(cache, home_id)
    return applied


@router.post("/templates/apply-batch", status_code=status.HTTP_201_CREATED)
async def apply_templates(
    home_id: str,
    body: BatchApplyRequest,
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
) -> BatchApplyResult:
    """Apply several templates to one asset or the whole home, reporting each result."""
    result = await engine.apply_templates(home_id=home_id, template_ids=body.template_ids, asset_id=body.asset_id)
    if result.success_count:
        invalidate_home_schedules(cache, home_id)
    return result


# Schedules


@router.get("/schedules")
async def list_schedules(
    home_id: str,
    asset_id: str | None = None,
    include_inactive: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=constants.DEFAULT_PER_PAGE_LIMIT, ge=1, le=constants.MAX_PER_PAGE_LIMIT),
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
    app_settings: Settings = Depends(get_app_settings),
) -> ScheduleList:
    """List schedules of a home, next due first (cached)."""
    key = schedule_list_cache_key(
        home_id=home_id, asset_id=asset_id, include_inactive=include_inactive, page=page, per_page=limit
    )
    return await cache.get_or_fetch(
        key,
        lambda: engine.list_schedules(
            home_id=home_id, asset_id=asset_id, include_inactive=include_inactive, page=page, per_page=limit
        ),
        app_settings.schedule_cache_ttl_seconds,
    )


@router.get("/schedules/{schedule_id}")
async def get_schedule(
    home_id: str,
    schedule_id: str,
    engine: ScheduleEngine = Depends(get_engine),
) -> Schedule:
    """Get one schedule."""
    return await engine.get_schedule(schedule_id=schedule_id, home_id=home_id)


@router.patch("/schedules/{schedule_id}")
async def update_schedule(
    home_id: str,
    schedule_id: str,
    body: ScheduleUpdateRequest,
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
) -> Schedule:
    """Change a schedule's frequency and/or pause or resume it in one write."""
    schedule = await engine.update_schedule(
        schedule_id=schedule_id,
        frequency=body.frequency,
        custom_frequency_days=body.custom_frequency_days,
        is_active=body.is_active,
        home_id=home_id,
    )
    invalidate_home_schedules(cache, home_id)
    return schedule


@router.post("/schedules/{schedule_id}/toggle")
async def toggle_schedule(
    home_id: str,
    schedule_id: str,
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
) -> Schedule:
    """Pause an active schedule or resume a paused one."""
    schedule = await engine.toggle_active(schedule_id=schedule_id, home_id=home_id)
    invalidate_home_schedules(cache, home_id)
    return schedule


@router.delete("/schedules/{schedule_id}")
async def remove_schedule(
    home_id: str,
    schedule_id: str,
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
) -> Schedule:
    """Deactivate a schedule. Its tasks are kept."""
    schedule = await engine.remove_schedule(schedule_id=schedule_id, home_id=home_id)
    invalidate_home_schedules(cache, home_id)
    return schedule


# Tasks


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    home_id: str,
    body: StandaloneTaskCreate,
    engine: ScheduleEngine = Depends(get_engine),
) -> TaskView:
    """Create a standalone task."""
    task = await engine.create_task(home_id=home_id, request=body)
    return _view(task, engine)


@router.get("/tasks")
async def list_tasks(
    home_id: str,
    search: str = "",
    engine: ScheduleEngine = Depends(get_engine),
) -> list[TaskView]:
    """List tasks of a home: overdue first, then by status, priority and due date."""
    tasks = await engine.list_tasks(home_id=home_id)
    now = engine.clock.now()
    ordered = sort_tasks_by_default(filter_tasks_by_search(tasks, search), now)
    return [TaskView(task=task, display_status=display_status(task, now)) for task in ordered]


@router.get("/tasks/stats")
async def get_task_stats(
    home_id: str,
    engine: ScheduleEngine = Depends(get_engine),
) -> TaskStats:
    """Task counts by status and priority with the completion rate."""
    tasks = await engine.list_tasks(home_id=home_id)
    return task_stats(tasks, engine.clock.now())


@router.get("/tasks/agenda")
async def get_task_agenda(
    home_id: str,
    engine: ScheduleEngine = Depends(get_engine),
) -> dict[str, list[TaskView]]:
    """Tasks bucketed into overdue, today, tomorrow, this week, later, completed and cancelled."""
    tasks = await engine.list_tasks(home_id=home_id)
    now = engine.clock.now()
    groups = group_tasks_by_due_date(sort_tasks_by_default(tasks, now), now)
    return {
        name: [TaskView(task=task, display_status=display_status(task, now)) for task in items]
        for name, items in groups.items()
    }


@router.get("/dashboard")
async def get_dashboard(
    home_id: str,
    days: int = Query(default=30, ge=1, le=365),
    budget: float | None = Query(default=None, gt=0),
    engine: ScheduleEngine = Depends(get_engine),
) -> Dashboard:
    """Task statistics, completion trend, breakdowns and spend for a home."""
    tasks = await engine.list_tasks(home_id=home_id)
    return build_dashboard(
        tasks,
        engine.clock.now(),
        asset_categories=await engine.asset_categories(tasks),
        trend_days=days,
        budget=budget,
    )


@router.get("/tasks/{task_id}")
async def get_task(
    home_id: str,
    task_id: str,
    engine: ScheduleEngine = Depends(get_engine),
) -> TaskView:
    """Get one task with its display status."""
    task = await engine.get_task(task_id=task_id, home_id=home_id)
    return _view(task, engine)


@router.put("/tasks/{task_id}")
async def update_task(
    home_id: str,
    task_id: str,
    body: TaskUpdateRequest,
    engine: ScheduleEngine = Depends(get_engine),
) -> TaskView:
    """Edit a task's title, description, due date, priority, notes, asset or costs."""
    task = await engine.update_task(task_id=task_id, request=body, home_id=home_id)
    return _view(task, engine)


@router.post("/tasks/{task_id}/start")
async def start_task(
    home_id: str,
    task_id: str,
    engine: ScheduleEngine = Depends(get_engine),
) -> TaskView:
    """Start working on a pending task."""
    task = await engine.start_task(task_id=task_id, home_id=home_id)
    return _view(task, engine)


@router.post("/tasks/{task_id}/complete")
async def complete_task(
    home_id: str,
    task_id: str,
    body: CompleteTaskRequest | None = None,
    engine: ScheduleEngine = Depends(get_engine),
    cache: InMemoryCache = Depends(get_cache),
    app_settings: Settings = Depends(get_app_settings),
) -> CompletionResult:
    """Complete a task; scheduled tasks advance their schedule and create the next task."""
    request = body or CompleteTaskRequest()
    require_photo = (
        app_settings.require_completion_photo
        if request.require_completion_photo is None
        else request.require_completion_photo
    )
    result = await engine.complete_task(
        task_id=task_id,
        details=CompletionDetails.model_validate(request.model_dump(exclude={"require_completion_photo"})),
        require_completion_photo=require_photo,
        home_id=home_id,
    )
    invalidate_home_schedules(cache, home_id)
    return result


@router.post("/tasks/{task_id}/reopen")
async def reopen_task(
    home_id: str,
    task_id: str,
    engine: ScheduleEngine = Depends(get_engine),
) -> TaskView:
    """Reopen a completed task."""
    task = await engine.reopen_task(task_id=task_id, home_id=home_id)
    return _view(task, engine)


@router.delete("/tasks/{task_id}")
async def cancel_task(
    home_id: str,
    task_id: str,
    engine: ScheduleEngine = Depends(get_engine),
) -> TaskView:
    """Cancel a task."""
    task = await engine.cancel_task(task_id=task_id, home_id=home_id)
    return _view(task, engine)
