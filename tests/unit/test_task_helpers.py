"""Unit tests for task list helpers."""

from datetime import UTC, datetime, timedelta

import pytest

from helixintel.domain.task import Priority, TaskStatus
from helixintel.modules.tasks.helpers import filter_tasks_by_search, group_tasks_by_due_date, sort_tasks_by_default
from tests.conftest import make_task


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


@pytest.mark.unit
class TestSortTasksByDefault:
    """Tests for sort_tasks_by_default function."""

    def test_status_then_priority_then_due_date(self):
        tasks = [
            make_task(task_id="done", status=TaskStatus.COMPLETED, due_date=NOW - timedelta(days=9)),
            make_task(task_id="pending-low", priority=Priority.LOW, due_date=NOW + timedelta(days=1)),
            make_task(task_id="pending-high-late", priority=Priority.HIGH, due_date=NOW + timedelta(days=5)),
            make_task(task_id="pending-high-soon", priority=Priority.HIGH, due_date=NOW + timedelta(days=2)),
            make_task(task_id="working", status=TaskStatus.IN_PROGRESS, due_date=NOW - timedelta(days=3)),
            make_task(task_id="overdue", due_date=NOW - timedelta(days=1)),
            make_task(task_id="dropped", status=TaskStatus.CANCELLED),
        ]

        ordered = [task.id for task in sort_tasks_by_default(tasks, NOW)]

        assert ordered == [
            "overdue",
            "working",
            "pending-high-soon",
            "pending-high-late",
            "pending-low",
            "done",
            "dropped",
        ]


@pytest.mark.unit
class TestFilterTasksBySearch:
    """Tests for filter_tasks_by_search function."""

    def test_matches_title_or_description(self):
        tasks = [
            make_task(task_id="a", title="Change HVAC Filter"),
            make_task(task_id="b", title="Clean Gutters", description="Check the hvac condensate line too"),
            make_task(task_id="c", title="Test Sump Pump"),
        ]

        assert [t.id for t in filter_tasks_by_search(tasks, "  HVAC ")] == ["a", "b"]

    def test_blank_term_matches_all(self):
        tasks = [make_task(task_id="a"), make_task(task_id="b")]

        assert len(filter_tasks_by_search(tasks, "   ")) == 2


@pytest.mark.unit
class TestGroupTasksByDueDate:
    """Tests for group_tasks_by_due_date function."""

    def test_buckets(self):
        tasks = [
            make_task(task_id="overdue", due_date=NOW - timedelta(days=2)),
            make_task(task_id="today", due_date=NOW + timedelta(hours=3)),
            make_task(task_id="started-yesterday", status=TaskStatus.IN_PROGRESS, due_date=NOW - timedelta(days=1)),
            make_task(task_id="tomorrow", due_date=NOW + timedelta(days=1)),
            make_task(task_id="week", due_date=NOW + timedelta(days=5)),
            make_task(task_id="later", due_date=NOW + timedelta(days=30)),
            make_task(task_id="done", status=TaskStatus.COMPLETED),
            make_task(task_id="dropped", status=TaskStatus.CANCELLED),
        ]

        groups = group_tasks_by_due_date(tasks, NOW)

        assert {name: [t.id for t in items] for name, items in groups.items()} == {
            "overdue": ["overdue"],
            "today": ["today", "started-yesterday"],
            "tomorrow": ["tomorrow"],
            "this_week": ["week"],
            "later": ["later"],
            "completed": ["done"],
            "cancelled": ["dropped"],
        }
