"""Unit tests for error classification utilities."""

import pytest

from helixintel.core.errors import (
    DuplicateScheduleConflictError,
    ErrorCode,
    ErrorSeverity,
    HelixIntelError,
    InvalidFrequencyError,
    InvalidStateTransitionError,
    NotFoundError,
    PersistenceError,
    PhotoRequiredError,
    StaleRecordError,
    classify_error_with_response,
)
from helixintel.domain.task import TaskStatus


@pytest.mark.unit
class TestErrorTypes:
    """Tests for the domain error classes."""

    def test_domain_errors_share_base(self):
        for error in (
            InvalidFrequencyError("bad"),
            DuplicateScheduleConflictError(template_id="t1", asset_id="a1"),
            NotFoundError("task", "t1"),
            InvalidStateTransitionError(current=TaskStatus.CANCELLED, attempted=TaskStatus.COMPLETED),
            PhotoRequiredError("t1"),
        ):
            assert isinstance(error, HelixIntelError)

    def test_persistence_errors_are_not_domain_errors(self):
        assert not isinstance(StaleRecordError("stale"), HelixIntelError)
        assert isinstance(StaleRecordError("stale"), PersistenceError)

    def test_duplicate_message_names_target(self):
        assert "asset a1" in str(DuplicateScheduleConflictError(template_id="t1", asset_id="a1"))
        assert "whole home" in str(DuplicateScheduleConflictError(template_id="t1", asset_id=None))

    def test_not_found_message(self):
        error = NotFoundError("schedule", "s1")

        assert str(error) == "Schedule not found: s1"
        assert (error.entity, error.record_id) == ("schedule", "s1")

    def test_transition_message(self):
        error = InvalidStateTransitionError(current=TaskStatus.PENDING, attempted=TaskStatus.PENDING, task_id="t1")

        assert str(error) == "Cannot move task t1 from PENDING to PENDING"


@pytest.mark.unit
class TestClassifyErrorWithResponse:
    """Tests for classify_error_with_response function."""

    @pytest.mark.parametrize(
        ("exception", "code", "status_code"),
        [
            (InvalidFrequencyError("Unknown frequency: 'X'"), ErrorCode.ERR_INVALID_FREQUENCY, 422),
            (DuplicateScheduleConflictError(template_id="t1", asset_id="a1"), ErrorCode.ERR_DUPLICATE_SCHEDULE, 409),
            (NotFoundError("task", "t1"), ErrorCode.ERR_NOT_FOUND, 404),
            (
                InvalidStateTransitionError(current=TaskStatus.CANCELLED, attempted=TaskStatus.COMPLETED),
                ErrorCode.ERR_INVALID_STATE_TRANSITION,
                409,
            ),
            (PhotoRequiredError("t1"), ErrorCode.ERR_PHOTO_REQUIRED, 422),
            (StaleRecordError("stale"), ErrorCode.ERR_PERSISTENCE, 500),
            (RuntimeError("boom"), ErrorCode.ERR_UNKNOWN, 500),
        ],
    )
    def test_classification(self, exception, code, status_code):
        response = classify_error_with_response(exception)

        assert response.code == code
        assert response.status_code == status_code
        assert response.message
        assert response.suggestion

    def test_persistence_error_hides_details(self):
        response = classify_error_with_response(PersistenceError("disk I/O error at /var/db"))

        assert "/var/db" not in response.message
        assert response.severity == ErrorSeverity.HIGH

    def test_domain_error_message_passes_through(self):
        response = classify_error_with_response(NotFoundError("template", "t42"))

        assert "t42" in response.message
        assert response.severity == ErrorSeverity.LOW

    def test_duplicate_message_names_whole_home_target(self):
        whole_home = classify_error_with_response(DuplicateScheduleConflictError(template_id="t1", asset_id=None))
        for_asset = classify_error_with_response(DuplicateScheduleConflictError(template_id="t1", asset_id="a1"))

        assert "whole home" in whole_home.message
        assert "asset" not in whole_home.message
        assert "asset a1" in for_asset.message
