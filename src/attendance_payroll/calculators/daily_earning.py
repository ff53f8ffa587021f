"""Per-day earning calculation."""

from __future__ import annotations

from decimal import Decimal

from attendance_payroll.calculators.money import ZERO, round_hours, round_to_cents
from attendance_payroll.calculators.time_arithmetic import duration_hours
from attendance_payroll.calculators.types import (
    AttendanceStatus,
    DailyAttendanceRecord,
    DailyEarningBreakdown,
    EmployeeConfig,
    SalaryConfig,
    ShiftConfig,
)
from attendance_payroll.config import BasePayBasis, PayrollPolicy


class DailyEarningCalculator:
    """Turns one canonical daily record into a day-earning breakdown.

    Rules by status:
    - Absent: everything zero
    - Leave: a full scheduled shift at the effective rate, no OT,
      the record's deduction still applies
    - Present/Late, both clock times: worked hours at the effective rate
      (or scheduled hours under ``BasePayBasis.SCHEDULED``) plus
      OT = ot_hours x rate x multiplier, minus deduction, floored at 0
    - Present/Late, one clock time missing: everything zero until corrected

    The calculation is a pure function of the record and the configuration
    snapshot; the effective rate is recomputed on every call.
    """

    def __init__(self, policy: PayrollPolicy | None = None):
        self.policy = policy or PayrollPolicy()

    def effective_hourly_rate(self, shift: ShiftConfig, salary: SalaryConfig) -> Decimal:
        """Hourly rate for hourly staff, pro-rated rate for monthly staff."""
        return salary.effective_hourly_rate(shift, self.policy.standard_working_days)

    def compute(
        self, record: DailyAttendanceRecord, employee: EmployeeConfig
    ) -> DailyEarningBreakdown:
        """Compute the breakdown for one record.

        Raises:
            ValueError: If the record belongs to a different employee
        """
        if record.employee_id != employee.employee_id:
            raise ValueError(
                f"Record for {record.employee_id} passed with config of "
                f"{employee.employee_id}"
            )

        shift = record.shift_snapshot or employee.shift
        salary = record.salary_snapshot or employee.salary
        rate = self.effective_hourly_rate(shift, salary)

        if record.status == AttendanceStatus.ABSENT:
            return DailyEarningBreakdown.zero(record.date, record.status)

        if record.status == AttendanceStatus.LEAVE:
            hours = shift.hours
            return self._build(
                record, hours_worked=hours, base_pay=hours * rate, ot_amount=ZERO
            )

        if not record.is_complete:
            return DailyEarningBreakdown.zero(record.date, record.status)

        worked = duration_hours(
            record.in_time,  # type: ignore[arg-type]
            record.out_time,  # type: ignore[arg-type]
            overnight=shift.is_overnight or record.out_next_day,
        )
        if self.policy.base_pay_basis == BasePayBasis.SCHEDULED:
            paid_hours = shift.hours
        else:
            paid_hours = worked

        return self._build(
            record,
            hours_worked=worked,
            base_pay=paid_hours * rate,
            ot_amount=record.ot_hours * rate * record.ot_multiplier,
            ot_hours=record.ot_hours,
        )

    @staticmethod
    def _build(
        record: DailyAttendanceRecord,
        hours_worked: Decimal,
        base_pay: Decimal,
        ot_amount: Decimal,
        ot_hours: Decimal = ZERO,
    ) -> DailyEarningBreakdown:
        base_pay = round_to_cents(base_pay)
        ot_amount = round_to_cents(ot_amount)
        deduction = round_to_cents(record.deduction)
        return DailyEarningBreakdown(
            date=record.date,
            status=record.status,
            hours_worked=round_hours(hours_worked),
            ot_hours=round_hours(ot_hours),
            base_pay=base_pay,
            ot_amount=ot_amount,
            deduction=deduction,
            final_day_earning=max(ZERO, base_pay + ot_amount - deduction),
        )


def compute_daily_earning(
    record: DailyAttendanceRecord,
    employee: EmployeeConfig,
    policy: PayrollPolicy | None = None,
) -> DailyEarningBreakdown:
    """Functional entry point for :class:`DailyEarningCalculator`."""
    return DailyEarningCalculator(policy).compute(record, employee)
