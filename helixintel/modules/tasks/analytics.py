"""Dashboard analytics over maintenance tasks.

All functions are pure: callers load the tasks (usually via
``MaintenanceStore.list_tasks``) and pass "now" explicitly, so overdue counts
always go through ``display_status``.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta

from helixintel.domain.task import DisplayStatus, Priority, Task, TaskStatus
from helixintel.models.service_models import (
    BudgetStatus,
    CategoryCount,
    Dashboard,
    MonthlyCost,
    PriorityCount,
    TaskStats,
    TrendPoint,
)
from helixintel.modules.tasks.state_machine import display_status


def task_stats(tasks: Iterable[Task], now: datetime) -> TaskStats:
    """Count tasks by display status and priority.

    Completion rate excludes cancelled tasks and is 0 when nothing remains.
    """
    task_list = list(tasks)
    by_status = Counter(display_status(task, now) for task in task_list)
    by_priority = Counter(task.priority for task in task_list)

    total = len(task_list)
    completed = by_status[DisplayStatus.COMPLETED]
    cancelled = by_status[DisplayStatus.CANCELLED]
    total_excluding_cancelled = total - cancelled
    completion_rate = round(completed / total_excluding_cancelled * 100) if total_excluding_cancelled > 0 else 0

    return TaskStats(
        total=total,
        pending=by_status[DisplayStatus.PENDING],
        in_progress=by_status[DisplayStatus.IN_PROGRESS],
        overdue=by_status[DisplayStatus.OVERDUE],
        completed=completed,
        cancelled=cancelled,
        by_priority={priority.value: by_priority[priority] for priority in Priority},
        completion_rate=completion_rate,
    )


def completion_trend(tasks: Iterable[Task], start: date, end: date) -> list[TrendPoint]:
    """Completions per calendar day (UTC) from start to end inclusive, zero-filled."""
    if end < start:
        msg = f"end ({end}) must not be before start ({start})"
        raise ValueError(msg)

    per_day = Counter(
        task.completed_at.date()
        for task in tasks
        if task.status == TaskStatus.COMPLETED and task.completed_at is not None
    )

    points = []
    day = start
    while day <= end:
        points.append(TrendPoint(day=day, completed=per_day[day]))
        day += timedelta(days=1)
    return points


def category_breakdown(tasks: Iterable[Task], asset_categories: Mapping[str, str]) -> list[CategoryCount]:
    """Count tasks by the category of their asset, largest first.

    Tasks without an asset (or with an unknown one) count as OTHER.
    """
    counts = Counter(
        asset_categories.get(task.asset_id, "OTHER") if task.asset_id else "OTHER" for task in tasks
    )
    return [
        CategoryCount(category=category, count=count)
        for category, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def priority_distribution(tasks: Iterable[Task]) -> list[PriorityCount]:
    """Count tasks per priority, URGENT first; priorities with no tasks are omitted."""
    counts = Counter(task.priority for task in tasks)
    ordered = (Priority.URGENT, Priority.HIGH, Priority.MEDIUM, Priority.LOW)
    return [PriorityCount(priority=priority.value, count=counts[priority]) for priority in ordered if counts[priority]]


def _spent(tasks: Iterable[Task]) -> list[Task]:
    return [task for task in tasks if task.status == TaskStatus.COMPLETED and task.actual_cost is not None]


def budget_status(tasks: Iterable[Task], budget: float) -> BudgetStatus:
    """Compare actual spend on completed tasks against a budget.

    Raises:
        ValueError: If budget is not positive
    """
    if budget <= 0:
        msg = "Budget must be a positive number"
        raise ValueError(msg)

    spent = round(sum(task.actual_cost or 0.0 for task in _spent(tasks)), 2)
    return BudgetStatus(
        budget=budget,
        spent=spent,
        remaining=round(budget - spent, 2),
        percentage_used=round(spent / budget * 100, 1),
        is_over_budget=spent > budget,
    )


def monthly_costs(tasks: Iterable[Task]) -> list[MonthlyCost]:
    """Total actual cost of completed tasks per month of completion, oldest first."""
    totals: dict[str, float] = {}
    counts: Counter[str] = Counter()
    for task in _spent(tasks):
        if task.completed_at is None:
            continue
        month = task.completed_at.strftime("%Y-%m")
        totals[month] = totals.get(month, 0.0) + (task.actual_cost or 0.0)
        counts[month] += 1

    return [MonthlyCost(month=month, total=round(totals[month], 2), task_count=counts[month]) for month in sorted(totals)]


def build_dashboard(
    tasks: Iterable[Task],
    now: datetime,
    *,
    asset_categories: Mapping[str, str],
    trend_days: int = 30,
    budget: float | None = None,
) -> Dashboard:
    """Assemble every dashboard figure from one task list.

    The trend covers the ``trend_days`` calendar days ending today (UTC).
    """
    if trend_days < 1:
        msg = "trend_days must be at least 1"
        raise ValueError(msg)

    task_list = list(tasks)
    today = now.date()
    return Dashboard(
        stats=task_stats(task_list, now),
        trend=completion_trend(task_list, today - timedelta(days=trend_days - 1), today),
        categories=category_breakdown(task_list, asset_categories),
        priorities=priority_distribution(task_list),
        monthly_costs=monthly_costs(task_list),
        budget=budget_status(task_list, budget) if budget is not None else None,
    )
