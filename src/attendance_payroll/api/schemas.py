"""Pydantic schemas for loading loose payloads and rendering results.

Input schemas accept snake_case or camelCase keys and convert to the frozen
dataclass model once, at the boundary. Output schemas render the model with
one canonical camelCase naming for every reporting consumer.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Annotated, Any, Iterable, Literal, Union
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
)
from pydantic.alias_generators import to_camel

from attendance_payroll.calculators.time_arithmetic import InvalidTimeError, format_time, parse_time
from attendance_payroll.calculators.types import (
    AttendanceStatus,
    ConfigurationError,
    DailyAttendanceRecord,
    EmployeeConfig,
    HourlySalary,
    InvalidRecordError,
    MonthlySalary,
    PerformanceRating,
    RecordSource,
    SalaryConfig,
    ShiftConfig,
    validate_shift,
)


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# Employee configuration
# ============================================================================


class ShiftIn(CamelModel):
    """Shift times in any format accepted by ``parse_time``."""

    start: str
    end: str

    def to_domain(self) -> ShiftConfig:
        return validate_shift(self.start, self.end)


class HourlySalaryIn(CamelModel):
    """Schema for an hourly salary."""

    type: Literal["hourly"]
    rate: Decimal = Field(gt=0)

    def to_domain(self) -> HourlySalary:
        return HourlySalary(rate=self.rate)


class MonthlySalaryIn(CamelModel):
    """Schema for a monthly salary."""

    type: Literal["monthly"]
    amount: Decimal = Field(gt=0)

    def to_domain(self) -> MonthlySalary:
        return MonthlySalary(amount=self.amount)


SalaryIn = Annotated[Union[HourlySalaryIn, MonthlySalaryIn], Field(discriminator="type")]


class EmployeeIn(CamelModel):
    """Schema for an employee configuration snapshot."""

    employee_id: str = Field(min_length=1)
    first_name: str = ""
    last_name: str = ""
    shift: ShiftIn
    salary: SalaryIn
    joining_date: date | None = None

    def to_domain(self) -> EmployeeConfig:
        try:
            shift = self.shift.to_domain()
        except ConfigurationError as e:
            raise ConfigurationError(str(e), self.employee_id) from e
        return EmployeeConfig(
            employee_id=self.employee_id,
            shift=shift,
            salary=self.salary.to_domain(),
            joining_date=self.joining_date,
            first_name=self.first_name,
            last_name=self.last_name,
        )


# ============================================================================
# Attendance records
# ============================================================================


class DailyAttendanceRecordIn(CamelModel):
    """Schema for a stored daily attendance record."""

    employee_id: str = Field(min_length=1)
    date: date
    status: AttendanceStatus
    in_time: str | None = None
    out_time: str | None = None
    ot_hours: Decimal = Field(default=Decimal("0"), ge=0)
    ot_multiplier: Decimal = Decimal("1")
    deduction: Decimal = Field(default=Decimal("0"), ge=0)
    out_next_day: bool = False
    manual_override: bool = False
    source: RecordSource = RecordSource.CSV
    shift_snapshot: ShiftIn | None = None
    salary_snapshot: SalaryIn | None = None

    def to_domain(self) -> DailyAttendanceRecord:
        try:
            in_time = parse_time(self.in_time) if self.in_time else None
            out_time = parse_time(self.out_time) if self.out_time else None
        except InvalidTimeError as e:
            raise InvalidRecordError(
                f"Record for {self.employee_id} on {self.date}: {e}"
            ) from e
        return DailyAttendanceRecord(
            employee_id=self.employee_id,
            date=self.date,
            status=self.status,
            in_time=in_time,
            out_time=out_time,
            ot_hours=self.ot_hours,
            ot_multiplier=self.ot_multiplier,
            deduction=self.deduction,
            out_next_day=self.out_next_day,
            manual_override=self.manual_override,
            source=self.source,
            shift_snapshot=self.shift_snapshot.to_domain() if self.shift_snapshot else None,
            salary_snapshot=self.salary_snapshot.to_domain() if self.salary_snapshot else None,
        )


_EMPLOYEES = TypeAdapter(list[EmployeeIn])
_RECORDS = TypeAdapter(list[DailyAttendanceRecordIn])


def load_employees(payload: Any) -> dict[str, EmployeeConfig]:
    """Validate a list of employee payloads.

    Returns:
        Employees keyed by employee id

    Raises:
        ConfigurationError: If any payload is invalid
    """
    try:
        items = _EMPLOYEES.validate_python(payload)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid employee configuration: {e}") from e
    employees = [item.to_domain() for item in items]
    return {employee.employee_id: employee for employee in employees}


def load_records(payload: Any) -> list[DailyAttendanceRecord]:
    """Validate a list of stored record payloads.

    Raises:
        InvalidRecordError: If any payload is invalid
    """
    try:
        items = _RECORDS.validate_python(payload)
    except ValidationError as e:
        raise InvalidRecordError(f"Invalid attendance record: {e}") from e
    return [item.to_domain() for item in items]


# ============================================================================
# Results
# ============================================================================


class DailyAttendanceRecordOut(CamelModel):
    """Schema for a canonical daily record."""

    employee_id: str
    date: date
    status: AttendanceStatus
    in_time: time | None = None
    out_time: time | None = None
    ot_hours: Decimal
    ot_multiplier: Decimal
    deduction: Decimal
    out_next_day: bool
    manual_override: bool
    source: RecordSource
    shift_snapshot: Any = None
    salary_snapshot: Any = None

    @field_serializer("in_time", "out_time")
    def _clock(self, value: time | None) -> str | None:
        return format_time(value)

    @field_serializer("shift_snapshot")
    def _shift(self, value: ShiftConfig | None) -> dict[str, Any] | None:
        if value is None:
            return None
        return {"start": format_time(value.start), "end": format_time(value.end)}

    @field_serializer("salary_snapshot")
    def _salary(self, value: SalaryConfig | None) -> dict[str, Any] | None:
        # same shape as the discriminated salary input
        if isinstance(value, HourlySalary):
            return {"type": "hourly", "rate": str(value.rate)}
        if isinstance(value, MonthlySalary):
            return {"type": "monthly", "amount": str(value.amount)}
        return None


class DailyEarningBreakdownOut(CamelModel):
    """Schema for one day's earnings."""

    date: date
    status: AttendanceStatus
    hours_worked: Decimal
    ot_hours: Decimal
    base_pay: Decimal
    ot_amount: Decimal
    deduction: Decimal
    final_day_earning: Decimal


class PayrollSummaryOut(CamelModel):
    """Schema for period totals."""

    base_salary: Decimal
    total_ot_amount: Decimal
    total_deduction: Decimal
    net_salary: Decimal
    total_working_days: int
    present_days: int
    late_days: int
    absent_days: int
    leave_days: int
    total_hours_worked: Decimal = Decimal("0")
    total_ot_hours: Decimal = Decimal("0")


class PerformanceScoreOut(CamelModel):
    """Schema for an attendance performance rating."""

    performance_score: Decimal
    rating: PerformanceRating
    attendance_rate: Decimal
    punctuality_rate: Decimal


class PayPeriodOut(CamelModel):
    """Schema for a pay period."""

    start_date: date
    end_date: date
    label: str


class LeaveEligibilityOut(CamelModel):
    """Schema for a leave eligibility check."""

    eligible: bool
    days_of_service: int
    days_until_eligible: int


class PayrollStatementOut(CamelModel):
    """Schema for one employee's statement."""

    calculation_id: UUID
    employee_id: str
    employee_name: str
    period: PayPeriodOut
    summary: PayrollSummaryOut
    performance: PerformanceScoreOut
    breakdowns: list[DailyEarningBreakdownOut]

    @classmethod
    def from_statement(cls, statement: Any) -> PayrollStatementOut:
        return cls(
            calculation_id=statement.calculation_id,
            employee_id=statement.employee.employee_id,
            employee_name=statement.employee.full_name,
            period=PayPeriodOut.model_validate(statement.period),
            summary=PayrollSummaryOut.model_validate(statement.summary),
            performance=PerformanceScoreOut.model_validate(statement.performance),
            breakdowns=[
                DailyEarningBreakdownOut.model_validate(b) for b in statement.breakdowns
            ],
        )


class SalarySummaryOut(CamelModel):
    """Schema for a multi-employee salary summary."""

    statements: list[PayrollStatementOut]
    total_base_salary: Decimal
    total_ot_amount: Decimal
    total_deduction: Decimal
    total_net_salary: Decimal

    @classmethod
    def from_summary(cls, summary: Any) -> SalarySummaryOut:
        return cls(
            statements=[PayrollStatementOut.from_statement(s) for s in summary.statements],
            total_base_salary=summary.total_base_salary,
            total_ot_amount=summary.total_ot_amount,
            total_deduction=summary.total_deduction,
            total_net_salary=summary.total_net_salary,
        )


class ImportLogEntryOut(CamelModel):
    """Schema for a processing log line."""

    level: str
    message: str


class ImportCountsOut(CamelModel):
    """Schema for import counters."""

    total: int
    success: int
    failed: int
    skipped: int
    records_created: int
    records_updated: int


class RejectedRowOut(CamelModel):
    """Schema for a rejected import row."""

    row_number: int | None = None
    reason: str
    employee_id: str | None = None


class ImportResultOut(CamelModel):
    """Schema for an import result."""

    success: bool
    counts: ImportCountsOut
    log: list[ImportLogEntryOut]
    rejected: list[RejectedRowOut]
    records: list[DailyAttendanceRecordOut]

    @classmethod
    def from_result(cls, result: Any) -> ImportResultOut:
        return cls(
            success=result.success,
            counts=ImportCountsOut.model_validate(result.counts),
            log=[
                ImportLogEntryOut(level=entry.level.value, message=entry.message)
                for entry in result.log
            ],
            rejected=[RejectedRowOut.model_validate(r) for r in result.rejected],
            records=[DailyAttendanceRecordOut.model_validate(r) for r in result.records],
        )


def dump_records(records: Iterable[DailyAttendanceRecord]) -> list[dict[str, Any]]:
    """Render records in the stored-record wire form (re-loadable)."""
    rows = []
    for record in records:
        data = DailyAttendanceRecordOut.model_validate(record).model_dump(
            mode="json", by_alias=True
        )
        rows.append(data)
    return rows


