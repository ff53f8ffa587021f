"""Type definitions for the attendance-to-payroll pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterator, Union

from attendance_payroll.calculators.money import ZERO, to_decimal
from attendance_payroll.calculators.time_arithmetic import (
    InvalidTimeError,
    duration_hours,
    duration_minutes,
    format_time,
    parse_time,
)

OT_MULTIPLIERS = (Decimal("1"), Decimal("1.5"), Decimal("2"))

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _short_date(day: date) -> str:
    return f"{day.day} {MONTH_ABBREVIATIONS[day.month - 1]} {day.year}"


class ConfigurationError(ValueError):
    """Raised when employee shift or salary configuration is unusable."""

    def __init__(self, message: str, employee_id: str | None = None):
        self.employee_id = employee_id
        if employee_id:
            message = f"Employee {employee_id}: {message}"
        super().__init__(message)


class InvalidRecordError(ValueError):
    """Raised when a daily attendance record breaks its own field rules."""


class InvariantViolation(AssertionError):
    """Raised when a computed result breaks a payroll invariant.

    These are programming errors, never recoverable by clamping.
    """


class AttendanceStatus(str, Enum):
    """Classification of one employee-day."""

    PRESENT = "Present"
    LATE = "Late"
    LEAVE = "Leave"
    ABSENT = "Absent"

    @property
    def has_clock_times(self) -> bool:
        return self in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class PunchKind(str, Enum):
    """Direction of a raw punch."""

    CHECK_IN = "in"
    CHECK_OUT = "out"

    @classmethod
    def from_flag(cls, flag: str) -> PunchKind:
        """Map the import status column (0=in, 1=out) to a punch kind."""
        value = str(flag).strip()
        if value == "0":
            return cls.CHECK_IN
        if value == "1":
            return cls.CHECK_OUT
        raise ValueError(f"Invalid status flag '{flag}' (must be 0 or 1)")


class RecordSource(str, Enum):
    """Where a daily record came from."""

    CSV = "csv"
    MANUAL = "manual"
    SYNTHESIZED = "synthesized"


class PerformanceRating(str, Enum):
    """Qualitative rating bands."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    AVERAGE = "Average"
    POOR = "Poor"


# ============================================================================
# Employee configuration
# ============================================================================


@dataclass(frozen=True)
class ShiftConfig:
    """Scheduled shift. ``end`` earlier than ``start`` means overnight."""

    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start == self.end:
            raise ConfigurationError("Shift start and end times cannot be identical")

    @property
    def is_overnight(self) -> bool:
        return self.end < self.start

    @property
    def minutes(self) -> int:
        return duration_minutes(self.start, self.end, self.is_overnight)

    @property
    def hours(self) -> Decimal:
        return duration_hours(self.start, self.end, self.is_overnight)

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"


def validate_shift(start: str | time, end: str | time) -> ShiftConfig:
    """Build a shift from loosely formatted times.

    Raises:
        ConfigurationError: If a time is unparseable or start equals end
    """
    try:
        parsed_start, parsed_end = parse_time(start), parse_time(end)
    except InvalidTimeError as e:
        raise ConfigurationError(f"Invalid shift time: {e}") from e
    return ShiftConfig(start=parsed_start, end=parsed_end)


@dataclass(frozen=True)
class HourlySalary:
    """Hourly pay at ``rate`` per clocked hour."""

    rate: Decimal

    def __post_init__(self) -> None:
        if self.rate is None:
            raise ConfigurationError("Hourly salary requires a rate")
        object.__setattr__(self, "rate", to_decimal(self.rate))
        if self.rate <= 0:
            raise ConfigurationError(f"Hourly rate must be positive, got {self.rate}")

    def effective_hourly_rate(
        self, shift: ShiftConfig, standard_working_days: int
    ) -> Decimal:
        return self.rate


@dataclass(frozen=True)
class MonthlySalary:
    """Fixed amount per pay period, pro-rated through an effective hourly rate."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount is None:
            raise ConfigurationError("Monthly salary requires an amount")
        object.__setattr__(self, "amount", to_decimal(self.amount))
        if self.amount <= 0:
            raise ConfigurationError(
                f"Monthly amount must be positive, got {self.amount}"
            )

    def effective_hourly_rate(
        self, shift: ShiftConfig, standard_working_days: int
    ) -> Decimal:
        """amount / (shift hours x standard working days). Never persisted."""
        return self.amount / (shift.hours * Decimal(standard_working_days))


SalaryConfig = Union[HourlySalary, MonthlySalary]


@dataclass(frozen=True)
class EmployeeConfig:
    """Configuration snapshot of one employee."""

    employee_id: str
    shift: ShiftConfig
    salary: SalaryConfig
    joining_date: date | None = None
    first_name: str = ""
    last_name: str = ""

    def __post_init__(self) -> None:
        if not self.employee_id:
            raise ConfigurationError("employee_id is required")
        if not isinstance(self.salary, (HourlySalary, MonthlySalary)):
            raise ConfigurationError(
                f"Unsupported salary configuration {self.salary!r}", self.employee_id
            )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ============================================================================
# Attendance
# ============================================================================


@dataclass(frozen=True)
class AttendanceEvent:
    """One raw punch from an import batch."""

    employee_id: str
    date: date
    time: time
    kind: PunchKind
    row_number: int | None = None


@dataclass(frozen=True)
class RejectedRow:
    """Diagnostic for an import row that could not be used."""

    row_number: int | None
    reason: str
    raw: str | None = None
    employee_id: str | None = None

    def __str__(self) -> str:
        where = f"Row {self.row_number}" if self.row_number is not None else "Row ?"
        return f"{where}: {self.reason}"


@dataclass(frozen=True)
class DailyAttendanceRecord:
    """Canonical attendance for one (employee, date).

    ``shift_snapshot``/``salary_snapshot`` freeze the configuration in effect
    when the record was first produced; when set they take precedence over
    the employee's current configuration.
    """

    employee_id: str
    date: date
    status: AttendanceStatus
    in_time: time | None = None
    out_time: time | None = None
    ot_hours: Decimal = ZERO
    ot_multiplier: Decimal = Decimal("1")
    deduction: Decimal = ZERO
    out_next_day: bool = False
    manual_override: bool = False
    source: RecordSource = RecordSource.CSV
    shift_snapshot: ShiftConfig | None = None
    salary_snapshot: SalaryConfig | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", AttendanceStatus(self.status))
        object.__setattr__(self, "ot_hours", to_decimal(self.ot_hours))
        object.__setattr__(self, "ot_multiplier", to_decimal(self.ot_multiplier))
        object.__setattr__(self, "deduction", to_decimal(self.deduction))

        if not self.status.has_clock_times and (
            self.in_time is not None or self.out_time is not None
        ):
            raise InvalidRecordError(
                f"{self.status.value} record for {self.employee_id} on {self.date} "
                "cannot carry clock times"
            )
        if self.ot_hours < 0:
            raise InvalidRecordError(f"ot_hours must be >= 0, got {self.ot_hours}")
        if self.deduction < 0:
            raise InvalidRecordError(f"deduction must be >= 0, got {self.deduction}")
        if self.ot_multiplier not in OT_MULTIPLIERS:
            raise InvalidRecordError(
                f"ot_multiplier must be one of 1, 1.5, 2, got {self.ot_multiplier}"
            )

    @property
    def is_complete(self) -> bool:
        """Both clock times present."""
        return self.in_time is not None and self.out_time is not None

    @property
    def key(self) -> tuple[str, date]:
        return (self.employee_id, self.date)

    @classmethod
    def absent(cls, employee_id: str, day: date) -> DailyAttendanceRecord:
        """Synthesized record for a day with no attendance data."""
        return cls(
            employee_id=employee_id,
            date=day,
            status=AttendanceStatus.ABSENT,
            source=RecordSource.SYNTHESIZED,
        )


# ============================================================================
# Results
# ============================================================================


@dataclass(frozen=True)
class DailyEarningBreakdown:
    """Earnings for one day. Derived, never stored independently."""

    date: date
    status: AttendanceStatus
    hours_worked: Decimal
    base_pay: Decimal
    ot_amount: Decimal
    deduction: Decimal
    final_day_earning: Decimal
    ot_hours: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in ("hours_worked", "ot_hours", "base_pay", "ot_amount", "deduction"):
            if getattr(self, name) < 0:
                raise InvariantViolation(
                    f"{name} is negative ({getattr(self, name)}) on {self.date}"
                )
        expected = max(ZERO, self.base_pay + self.ot_amount - self.deduction)
        if self.final_day_earning != expected:
            raise InvariantViolation(
                f"final_day_earning {self.final_day_earning} on {self.date} "
                f"does not equal max(0, base + ot - deduction) = {expected}"
            )

    @classmethod
    def zero(cls, day: date, status: AttendanceStatus) -> DailyEarningBreakdown:
        return cls(
            date=day,
            status=status,
            hours_worked=ZERO,
            base_pay=ZERO,
            ot_amount=ZERO,
            deduction=ZERO,
            final_day_earning=ZERO,
        )


@dataclass(frozen=True)
class PayPeriod:
    """Inclusive date window of a company pay period."""

    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"Pay period end {self.end_date} is before start {self.start_date}"
            )

    @property
    def day_count(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def days(self) -> Iterator[date]:
        """Every calendar day in the window, in order."""
        for offset in range(self.day_count):
            yield self.start_date + timedelta(days=offset)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start_date <= day <= self.end_date

    @property
    def label(self) -> str:
        """Display label such as ``18 Jan 2026 - 17 Feb 2026`` (locale independent)."""
        return f"{_short_date(self.start_date)} - {_short_date(self.end_date)}"


@dataclass(frozen=True)
class PayrollSummary:
    """Period totals and day counts for one employee."""

    base_salary: Decimal
    total_ot_amount: Decimal
    total_deduction: Decimal
    net_salary: Decimal
    total_working_days: int
    present_days: int
    late_days: int
    absent_days: int
    leave_days: int
    total_hours_worked: Decimal = ZERO
    total_ot_hours: Decimal = ZERO

    def __post_init__(self) -> None:
        classified = self.present_days + self.late_days + self.absent_days + self.leave_days
        if classified != self.total_working_days:
            raise InvariantViolation(
                f"{classified} classified days for {self.total_working_days} working days"
            )
        if self.net_salary != self.base_salary + self.total_ot_amount - self.total_deduction:
            raise InvariantViolation(
                f"net_salary {self.net_salary} != base + ot - deduction"
            )


@dataclass(frozen=True)
class PerformanceScore:
    """Attendance-derived performance rating."""

    performance_score: Decimal
    rating: PerformanceRating
    attendance_rate: Decimal
    punctuality_rate: Decimal


@dataclass(frozen=True)
class LeaveEligibility:
    """Whether an employee has served long enough to request leave."""

    eligible: bool
    days_of_service: int
    days_until_eligible: int
