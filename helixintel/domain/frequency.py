"""Maintenance frequency enum and due-date arithmetic."""

from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import TypeVar

from helixintel.core.config import constants
from helixintel.core.errors import InvalidFrequencyError


DateT = TypeVar("DateT", date, datetime)


class Frequency(StrEnum):
    """How often a maintenance schedule recurs."""

    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMIANNUAL = "SEMIANNUAL"
    ANNUAL = "ANNUAL"
    CUSTOM = "CUSTOM"


# Fixed offsets in days; CUSTOM takes its day count from the schedule
FREQUENCY_OFFSET_DAYS: dict[Frequency, int] = {
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 14,
    Frequency.MONTHLY: 30,
    Frequency.QUARTERLY: 91,
    Frequency.SEMIANNUAL: 182,
    Frequency.ANNUAL: 365,
}

_FREQUENCY_LABELS: dict[Frequency, str] = {
    Frequency.WEEKLY: "Weekly",
    Frequency.BIWEEKLY: "Every 2 weeks",
    Frequency.MONTHLY: "Monthly",
    Frequency.QUARTERLY: "Every 3 months",
    Frequency.SEMIANNUAL: "Every 6 months",
    Frequency.ANNUAL: "Yearly",
}


def parse_frequency(value: str | Frequency) -> Frequency:
    """Parse a raw frequency value into the closed enum.

    Raises:
        InvalidFrequencyError: If the value is not a known frequency
    """
    if isinstance(value, Frequency):
        return value
    if not isinstance(value, str):
        msg = f"Unknown frequency: {value!r}"
        raise InvalidFrequencyError(msg)
    try:
        return Frequency(value.strip().upper())
    except ValueError as e:
        msg = f"Unknown frequency: {value!r}"
        raise InvalidFrequencyError(msg) from e


def validate_custom_days(frequency: str | Frequency, custom_days: object = None) -> int | None:
    """Validate the custom day count against the frequency.

    Returns the day count for CUSTOM and None for every other frequency, so a
    stale day count is never carried along with a fixed frequency.

    Raises:
        InvalidFrequencyError: If CUSTOM has a missing, non-integer or out-of-range day count
    """
    freq = parse_frequency(frequency)
    if freq != Frequency.CUSTOM:
        return None

    # bool is an int subclass; True must not pass as one day
    if custom_days is None or isinstance(custom_days, bool) or not isinstance(custom_days, int):
        msg = f"Custom frequency requires a whole number of days, got {custom_days!r}"
        raise InvalidFrequencyError(msg)

    if not constants.MIN_CUSTOM_FREQUENCY_DAYS <= custom_days <= constants.MAX_CUSTOM_FREQUENCY_DAYS:
        msg = (
            f"Custom frequency must be between {constants.MIN_CUSTOM_FREQUENCY_DAYS} and "
            f"{constants.MAX_CUSTOM_FREQUENCY_DAYS} days, got {custom_days}"
        )
        raise InvalidFrequencyError(msg)

    return custom_days


def get_frequency_days(frequency: str | Frequency, custom_days: object = None) -> int:
    """Return the interval in days for a frequency."""
    freq = parse_frequency(frequency)
    days = validate_custom_days(freq, custom_days)
    if days is not None:
        return days
    return FREQUENCY_OFFSET_DAYS[freq]


def compute_next_due_date(base: DateT, frequency: str | Frequency, custom_days: object = None) -> DateT:
    """Compute the next due date by adding the frequency offset to base.

    Time of day and timezone are preserved. The result is always strictly
    after base since every offset is at least one day.

    Raises:
        InvalidFrequencyError: For an unknown frequency or a bad custom day count
    """
    return base + timedelta(days=get_frequency_days(frequency, custom_days))


def format_frequency(frequency: str | Frequency, custom_days: int | None = None) -> str:
    """Human-readable label for a frequency, e.g. "Every 2 weeks"."""
    freq = parse_frequency(frequency)
    if freq != Frequency.CUSTOM:
        return _FREQUENCY_LABELS[freq]

    if not custom_days:
        return "Custom"
    if custom_days == 1:
        return "Daily"
    if custom_days % 7 == 0:
        weeks = custom_days // 7
        return "Weekly" if weeks == 1 else f"Every {weeks} weeks"
    return f"Every {custom_days} days"
