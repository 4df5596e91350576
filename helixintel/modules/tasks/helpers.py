"""Sorting, filtering and grouping helpers for task lists."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from helixintel.domain.task import DisplayStatus, Priority, Task, TaskStatus
from helixintel.modules.tasks.state_machine import display_status


_STATUS_ORDER: dict[DisplayStatus, int] = {
    DisplayStatus.OVERDUE: 0,
    DisplayStatus.IN_PROGRESS: 1,
    DisplayStatus.PENDING: 2,
    DisplayStatus.COMPLETED: 3,
    DisplayStatus.CANCELLED: 4,
}

_PRIORITY_ORDER: dict[Priority, int] = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


def sort_tasks_by_default(tasks: Iterable[Task], now: datetime) -> list[Task]:
    """Overdue first, then in progress, pending, completed, cancelled.

    Ties break on priority (urgent first) and then on due date (earliest first).
    """
    return sorted(
        tasks,
        key=lambda task: (
            _STATUS_ORDER[display_status(task, now)],
            _PRIORITY_ORDER[task.priority],
            task.due_date,
        ),
    )


def filter_tasks_by_search(tasks: Iterable[Task], term: str) -> list[Task]:
    """Case-insensitive match on title or description; a blank term matches everything."""
    needle = term.strip().lower()
    if not needle:
        return list(tasks)
    return [task for task in tasks if needle in task.title.lower() or needle in task.description.lower()]


def group_tasks_by_due_date(tasks: Iterable[Task], now: datetime) -> dict[str, list[Task]]:
    """Bucket tasks for an agenda view by calendar day relative to now."""
    today = now.date()
    tomorrow = today + timedelta(days=1)
    next_week = today + timedelta(days=7)

    groups: dict[str, list[Task]] = {
        "overdue": [],
        "today": [],
        "tomorrow": [],
        "this_week": [],
        "later": [],
        "completed": [],
        "cancelled": [],
    }

    for task in tasks:
        if task.status == TaskStatus.COMPLETED:
            groups["completed"].append(task)
            continue
        if task.status == TaskStatus.CANCELLED:
            groups["cancelled"].append(task)
            continue

        due = task.due_date.date()
        if display_status(task, now) == DisplayStatus.OVERDUE:
            groups["overdue"].append(task)
        elif due <= today:
            groups["today"].append(task)
        elif due == tomorrow:
            groups["tomorrow"].append(task)
        elif due <= next_week:
            groups["this_week"].append(task)
        else:
            groups["later"].append(task)

    return groups
