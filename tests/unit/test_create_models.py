"""Unit tests for request and record models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from helixintel.domain.create_models import (
    BatchApplyRequest,
    CompleteTaskRequest,
    CompletionDetails,
    ScheduleUpdateRequest,
    StandaloneTaskCreate,
    TaskUpdateRequest,
)
from helixintel.domain.frequency import Frequency
from helixintel.domain.schedule import Schedule
from helixintel.domain.update_models import SchedulePatch


@pytest.mark.unit
class TestCompletionDetails:
    """Tests for completion request validation."""

    def test_accepts_http_photo_urls(self):
        details = CompletionDetails(completion_photos=["https://cdn.example.com/a.jpg", "http://x.example/b.png"])

        assert len(details.completion_photos) == 2

    @pytest.mark.parametrize("url", ["not a url", "ftp://example.com/a.jpg", "https://", "/local/path.jpg"])
    def test_rejects_bad_photo_urls(self, url):
        with pytest.raises(ValidationError):
            CompletionDetails(completion_photos=[url])

    def test_rejects_negative_cost(self):
        with pytest.raises(ValidationError):
            CompletionDetails(actual_cost=-1)

    def test_rejects_long_notes(self):
        with pytest.raises(ValidationError):
            CompletionDetails(completion_notes="x" * 2001)

    def test_photo_policy_defaults_to_unset(self):
        assert CompleteTaskRequest().require_completion_photo is None


@pytest.mark.unit
class TestScheduleUpdateRequest:
    """Tests for schedule update validation."""

    def test_custom_days_require_custom_frequency(self):
        with pytest.raises(ValidationError, match="requires frequency CUSTOM"):
            ScheduleUpdateRequest(frequency=Frequency.MONTHLY, custom_frequency_days=10)

    def test_pause_only(self):
        request = ScheduleUpdateRequest(is_active=False)

        assert request.frequency is None


@pytest.mark.unit
class TestStandaloneTaskCreate:
    """Tests for standalone task validation."""

    def test_strips_title(self):
        assert StandaloneTaskCreate(title=" Fix door ", due_date=datetime(2024, 1, 1, tzinfo=UTC)).title == "Fix door"

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            StandaloneTaskCreate(title="   ", due_date=datetime(2024, 1, 1, tzinfo=UTC))

    def test_naive_due_date_is_utc(self):
        task = StandaloneTaskCreate(title="Fix door", due_date=datetime(2024, 1, 1, 8))

        assert task.due_date.tzinfo == UTC


@pytest.mark.unit
class TestScheduleModel:
    """Tests for the Schedule model and patches."""

    def _schedule(self, **overrides):
        now = datetime(2024, 1, 1, tzinfo=UTC)
        data = {
            "id": "s1",
            "home_id": "h1",
            "template_id": "t1",
            "frequency": Frequency.MONTHLY,
            "next_due_date": now,
            "created": now,
            "updated": now,
        }
        return Schedule(**{**data, **overrides})

    def test_custom_requires_days(self):
        with pytest.raises(ValidationError):
            self._schedule(frequency=Frequency.CUSTOM)

    def test_fixed_rejects_days(self):
        with pytest.raises(ValidationError):
            self._schedule(custom_frequency_days=5)

    def test_custom_with_days(self):
        assert self._schedule(frequency=Frequency.CUSTOM, custom_frequency_days=5).version == 1

    def test_frequency_label(self):
        schedule = self._schedule(frequency=Frequency.CUSTOM, custom_frequency_days=14)

        assert schedule.frequency_label == "Every 2 weeks"
        assert schedule.model_dump()["frequency_label"] == "Every 2 weeks"

    def test_patch_dumps_only_set_fields(self):
        patch = SchedulePatch(is_active=False)

        assert patch.model_dump(exclude_unset=True) == {"is_active": False}


@pytest.mark.unit
class TestTaskUpdateRequest:
    """Tests for TaskUpdateRequest."""

    def test_only_sent_fields_are_set(self):
        request = TaskUpdateRequest(notes=None, title=" New title ")

        assert request.model_dump(exclude_unset=True) == {"title": "New title", "notes": None}

    @pytest.mark.parametrize("field", ["title", "description", "due_date", "priority"])
    def test_required_fields_cannot_be_cleared(self, field):
        with pytest.raises(ValidationError, match="cannot be null"):
            TaskUpdateRequest(**{field: None})

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskUpdateRequest(title="  ")

    def test_status_is_not_editable(self):
        request = TaskUpdateRequest.model_validate({"status": "COMPLETED"})

        assert request.model_dump(exclude_unset=True) == {}


@pytest.mark.unit
class TestBatchApplyRequest:
    """Tests for BatchApplyRequest."""

    def test_repeated_templates_applied_once(self):
        request = BatchApplyRequest(template_ids=["t2", "t1", "t2"])

        assert request.template_ids == ["t2", "t1"]

    def test_empty_batch_rejected(self):
        with pytest.raises(ValidationError):
            BatchApplyRequest(template_ids=[])
