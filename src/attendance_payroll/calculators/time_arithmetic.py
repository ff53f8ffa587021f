"""Clock-time parsing and overnight-aware duration arithmetic."""

from __future__ import annotations

import re
from datetime import time
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from attendance_payroll.calculators.types import ShiftConfig

MINUTES_PER_DAY = 1440

_AMPM_SUFFIX = re.compile(r"\s*(am|pm)$", re.IGNORECASE)
_COLON_FORM = re.compile(r"^(\d{1,2}):(\d{1,2})$")
_COMPACT_FORM = re.compile(r"^\d{3,4}$")


class InvalidTimeError(ValueError):
    """Raised when a clock time cannot be parsed."""

    def __init__(self, value: object, reason: str | None = None):
        self.value = value
        self.reason = reason
        msg = f"Invalid time '{value}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


def parse_time(value: str | time) -> time:
    """Parse a loosely formatted clock time.

    Accepted forms: "H:mm", "HH:mm", "H:m", "Hmm", "HHmm", each with an
    optional "am"/"pm" suffix.

    Raises:
        InvalidTimeError: If the value is empty, malformed or out of range
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if value is None:
        raise InvalidTimeError(value, "empty")

    text = str(value).strip()
    if not text:
        raise InvalidTimeError(value, "empty")

    meridiem = None
    suffix = _AMPM_SUFFIX.search(text)
    if suffix:
        meridiem = suffix.group(1).lower()
        text = text[: suffix.start()].strip()

    match = _COLON_FORM.match(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
    elif _COMPACT_FORM.match(text):
        # "900" -> 9:00, "0930" -> 9:30
        hour, minute = int(text[:-2]), int(text[-2:])
    else:
        raise InvalidTimeError(value, "unrecognised format")

    if meridiem is not None:
        if hour < 1 or hour > 12:
            raise InvalidTimeError(value, "hour must be 1-12 with am/pm")
        if meridiem == "pm" and hour != 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0

    if hour > 23:
        raise InvalidTimeError(value, "hour out of range")
    if minute > 59:
        raise InvalidTimeError(value, "minute out of range")

    return time(hour, minute)


def normalize_time(value: str | time | None) -> str | None:
    """Return the canonical "HH:mm" form, or None if the value is not a time."""
    if value is None:
        return None
    try:
        return format_time(parse_time(value))
    except InvalidTimeError:
        return None


def format_time(value: time | None) -> str | None:
    """Format a time as zero-padded 24h "HH:mm"."""
    if value is None:
        return None
    return f"{value.hour:02d}:{value.minute:02d}"


def to_minutes(value: time) -> int:
    """Minutes since midnight."""
    return value.hour * 60 + value.minute


def duration_minutes(start: time, end: time, overnight: bool = False) -> int:
    """Whole minutes from start to end, wrapping past midnight when needed."""
    diff = to_minutes(end) - to_minutes(start)
    if diff < 0 or overnight:
        diff %= MINUTES_PER_DAY
    return max(0, diff)


def duration_hours(start: time, end: time, overnight: bool = False) -> Decimal:
    """Hours between two clock times.

    When ``end`` is earlier than ``start`` or ``overnight`` is set the
    difference is taken modulo 24h. The result is never negative.
    """
    return Decimal(duration_minutes(start, end, overnight)) / Decimal(60)


def is_late(in_time: time | None, shift_start: time | None) -> bool:
    """True if the check-in is strictly after the shift start."""
    if in_time is None or shift_start is None:
        return False
    return to_minutes(in_time) > to_minutes(shift_start)


def delay_minutes(in_time: time | None, shift_start: time | None) -> int:
    """Minutes an employee checked in after shift start (0 if on time)."""
    if in_time is None or shift_start is None:
        return 0
    return max(0, to_minutes(in_time) - to_minutes(shift_start))


def shift_timeline_minutes(
    value: time, shift: ShiftConfig, window_hours: int = 14
) -> int:
    """Position of a clock time on the shift's own timeline.

    For overnight shifts a punch that, moved to the next day, still lies
    within ``window_hours`` of shift start belongs to the shift that started
    the day before and is placed after midnight (value + 1440). Day shifts
    use plain minutes since midnight.
    """
    minutes = to_minutes(value)
    if not shift.is_overnight:
        return minutes
    start = to_minutes(shift.start)
    if minutes < start and minutes + MINUTES_PER_DAY <= start + window_hours * 60:
        return minutes + MINUTES_PER_DAY
    return minutes


def shift_delay_minutes(
    in_time: time | None, shift: ShiftConfig, window_hours: int = 14
) -> int:
    """Minutes after shift start, measured on the shift timeline.

    An after-midnight check-in on an overnight shift counts from the
    previous evening's start.
    """
    if in_time is None:
        return 0
    if not shift.is_overnight:
        return delay_minutes(in_time, shift.start)
    position = shift_timeline_minutes(in_time, shift, window_hours)
    return max(0, position - to_minutes(shift.start))
