"""Domain error taxonomy and classification into caller-facing responses."""

from enum import Enum

from pydantic import BaseModel

from helixintel.core.config import constants


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Schedule errors
    ERR_INVALID_FREQUENCY = "ERR_INVALID_FREQUENCY"
    ERR_DUPLICATE_SCHEDULE = "ERR_DUPLICATE_SCHEDULE"

    # Task errors
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"
    ERR_PHOTO_REQUIRED = "ERR_PHOTO_REQUIRED"

    # Lookup errors
    ERR_NOT_FOUND = "ERR_NOT_FOUND"

    # Infrastructure errors
    ERR_PERSISTENCE = "ERR_PERSISTENCE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class HelixIntelError(Exception):
    """Base class for caller-facing domain errors."""


class InvalidFrequencyError(HelixIntelError, ValueError):
    """Unknown frequency value, or a CUSTOM frequency with a bad day count."""


class DuplicateScheduleConflictError(HelixIntelError):
    """An active schedule already exists for the same asset and template."""

    def __init__(self, *, template_id: str, asset_id: str | None, existing_schedule_id: str | None = None) -> None:
        self.template_id = template_id
        self.asset_id = asset_id
        self.existing_schedule_id = existing_schedule_id
        target = f"asset {asset_id}" if asset_id else "the whole home"
        super().__init__(f"Template {template_id} already has an active schedule for {target}")


class NotFoundError(HelixIntelError):
    """Referenced record does not exist or is not owned by the caller."""

    def __init__(self, entity: str, record_id: str) -> None:
        self.entity = entity
        self.record_id = record_id
        super().__init__(f"{entity.capitalize()} not found: {record_id}")


class InvalidStateTransitionError(HelixIntelError, ValueError):
    """Attempted task transition is not permitted from the current status."""

    def __init__(self, *, current: str, attempted: str, task_id: str | None = None) -> None:
        self.current = current
        self.attempted = attempted
        self.task_id = task_id
        subject = f"task {task_id}" if task_id else "task"
        super().__init__(f"Cannot move {subject} from {current} to {attempted}")


class PhotoRequiredError(HelixIntelError):
    """Completion attempted under a photo-required policy without a photo."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"A completion photo is required to complete task {task_id}")


class PersistenceError(RuntimeError):
    """Storage failure that is not a domain condition."""


class StaleRecordError(PersistenceError):
    """Optimistic lock check failed: the record changed since it was read."""


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    status_code: int


def classify_error_with_response(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised by the engine or the store

    Returns:
        ErrorResponse with code, message, suggestion, severity and HTTP status
    """
    if isinstance(exception, InvalidFrequencyError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_FREQUENCY,
            message=str(exception),
            suggestion="Use WEEKLY, BIWEEKLY, MONTHLY, QUARTERLY, SEMIANNUAL, ANNUAL, or CUSTOM with 1-365 days.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_UNPROCESSABLE_ENTITY,
        )

    if isinstance(exception, DuplicateScheduleConflictError):
        return ErrorResponse(
            code=ErrorCode.ERR_DUPLICATE_SCHEDULE,
            message=str(exception),
            suggestion="Edit or resume the existing schedule instead of applying the template again.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_CONFLICT,
        )

    if isinstance(exception, NotFoundError):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message=str(exception),
            suggestion="Check the identifier and that it belongs to this home.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_NOT_FOUND,
        )

    if isinstance(exception, InvalidStateTransitionError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_STATE_TRANSITION,
            message=str(exception),
            suggestion="Refresh the task to see its current status and try again.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_CONFLICT,
        )

    if isinstance(exception, PhotoRequiredError):
        return ErrorResponse(
            code=ErrorCode.ERR_PHOTO_REQUIRED,
            message="A completion photo is required.",
            suggestion="Attach at least one photo of the finished work.",
            severity=ErrorSeverity.LOW,
            status_code=constants.HTTP_UNPROCESSABLE_ENTITY,
        )

    if isinstance(exception, PersistenceError):
        return ErrorResponse(
            code=ErrorCode.ERR_PERSISTENCE,
            message="The data store could not complete the request.",
            suggestion="Please try again. If the problem persists, contact support.",
            severity=ErrorSeverity.HIGH,
            status_code=constants.HTTP_SERVER_ERROR,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
        status_code=constants.HTTP_SERVER_ERROR,
    )
