"""Pure state transition rules for the task lifecycle and derived overdue status."""

from datetime import datetime

from helixintel.core.errors import InvalidStateTransitionError
from helixintel.domain.task import DisplayStatus, Task, TaskStatus


# Allowed source statuses for each target status
TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.PENDING}),
    TaskStatus.COMPLETED: frozenset({TaskStatus.PENDING, TaskStatus.IN_PROGRESS}),
    TaskStatus.PENDING: frozenset({TaskStatus.COMPLETED}),  # Reopen
    TaskStatus.CANCELLED: frozenset({TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED}),
}


def allowed_sources(target: TaskStatus) -> frozenset[TaskStatus]:
    """Statuses a task may move to target from."""
    return TASK_TRANSITIONS[target]


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """Whether a task in current may move to target."""
    return current in TASK_TRANSITIONS[target]


def ensure_transition(task: Task, target: TaskStatus) -> None:
    """Raise InvalidStateTransitionError unless task may move to target."""
    if not can_transition(task.status, target):
        raise InvalidStateTransitionError(current=task.status, attempted=target, task_id=task.id)


def is_overdue(task: Task, now: datetime) -> bool:
    """A task is overdue when it is still PENDING and its due date has passed.

    IN_PROGRESS tasks are never overdue.
    """
    return task.status == TaskStatus.PENDING and task.due_date < now


def display_status(task: Task, now: datetime) -> DisplayStatus:
    """Status to show for a task: OVERDUE, or the stored status."""
    if is_overdue(task, now):
        return DisplayStatus.OVERDUE
    return DisplayStatus(task.status.value)
