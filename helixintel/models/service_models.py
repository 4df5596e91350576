"""Pydantic models for service layer return types.

These models give the engine, analytics and API a typed boundary instead of
passing raw database rows around.
"""

from datetime import date

from pydantic import BaseModel

from helixintel.domain.schedule import Schedule
from helixintel.domain.task import DisplayStatus, Task
from helixintel.domain.template import MaintenanceTemplate


class AppliedTemplate(BaseModel):
    """Schedule and first task created by applying a template."""

    schedule: Schedule
    task: Task


class CompletionResult(BaseModel):
    """Outcome of completing a task."""

    task: Task
    schedule: Schedule | None = None
    next_task: Task | None = None


class ScheduleList(BaseModel):
    """One page of schedules."""

    items: list[Schedule]
    total: int
    page: int
    per_page: int


class TaskView(BaseModel):
    """Task together with its derived display status."""

    task: Task
    display_status: DisplayStatus


class TaskStats(BaseModel):
    """Task counts for a home dashboard."""

    total: int
    pending: int
    in_progress: int
    overdue: int
    completed: int
    cancelled: int
    by_priority: dict[str, int]
    completion_rate: int


class TrendPoint(BaseModel):
    """Number of completions on one day."""

    day: date
    completed: int


class CategoryCount(BaseModel):
    """Number of tasks for one asset category."""

    category: str
    count: int


class PriorityCount(BaseModel):
    """Number of tasks for one priority."""

    priority: str
    count: int


class BudgetStatus(BaseModel):
    """Spend against a maintenance budget."""

    budget: float
    spent: float
    remaining: float
    percentage_used: float
    is_over_budget: bool


class MonthlyCost(BaseModel):
    """Actual cost of completed tasks for one month."""

    month: str
    total: float
    task_count: int


class CacheStats(BaseModel):
    """In-memory cache statistics."""

    size: int
    keys: list[str]
    hits: int
    misses: int


class Dashboard(BaseModel):
    """Home maintenance dashboard."""

    stats: TaskStats
    trend: list[TrendPoint]
    categories: list[CategoryCount]
    priorities: list[PriorityCount]
    monthly_costs: list[MonthlyCost]
    budget: BudgetStatus | None = None


class TemplateList(BaseModel):
    """One page of maintenance templates."""

    items: list[MaintenanceTemplate]
    total: int
    page: int
    per_page: int


class TemplateApplyOutcome(BaseModel):
    """Result of applying one template in a batch."""

    template_id: str
    template_name: str | None = None
    success: bool
    schedule_id: str | None = None
    task_id: str | None = None
    error_code: str | None = None
    error: str | None = None


class BatchApplyResult(BaseModel):
    """Per-template results of a batch apply."""

    results: list[TemplateApplyOutcome]
    success_count: int
    fail_count: int
