"""Fold daily breakdowns into a pay-period summary."""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Iterable

from attendance_payroll.calculators.money import ZERO
from attendance_payroll.calculators.types import (
    AttendanceStatus,
    DailyEarningBreakdown,
    InvariantViolation,
    PayPeriod,
    PayrollSummary,
)


class PayrollAggregator:
    """Reduces many day breakdowns into one :class:`PayrollSummary`.

    Every calendar day of the period is a working day (weekends included)
    and is classified exactly once. Days with no breakdown are treated as
    Absent with zero earning.
    """

    @staticmethod
    def fill_missing_days(
        breakdowns: Iterable[DailyEarningBreakdown], period: PayPeriod
    ) -> list[DailyEarningBreakdown]:
        """Return one breakdown per period day, in date order.

        Raises:
            InvariantViolation: If a day appears twice or falls outside the period
        """
        by_date: dict[date, DailyEarningBreakdown] = {}
        for breakdown in breakdowns:
            if breakdown.date not in period:
                raise InvariantViolation(
                    f"Breakdown for {breakdown.date} is outside "
                    f"{period.start_date}..{period.end_date}"
                )
            if breakdown.date in by_date:
                raise InvariantViolation(f"Day {breakdown.date} classified twice")
            by_date[breakdown.date] = breakdown

        return [
            by_date.get(day) or DailyEarningBreakdown.zero(day, AttendanceStatus.ABSENT)
            for day in period.days()
        ]

    def aggregate(
        self, breakdowns: Iterable[DailyEarningBreakdown], period: PayPeriod
    ) -> PayrollSummary:
        """Sum money and hours and count statuses over the period."""
        days = self.fill_missing_days(breakdowns, period)

        base_salary = sum((d.base_pay for d in days), ZERO)
        total_ot = sum((d.ot_amount for d in days), ZERO)
        total_deduction = sum((d.deduction for d in days), ZERO)
        counts = Counter(d.status for d in days)

        return PayrollSummary(
            base_salary=base_salary,
            total_ot_amount=total_ot,
            total_deduction=total_deduction,
            net_salary=base_salary + total_ot - total_deduction,
            total_working_days=period.day_count,
            present_days=counts[AttendanceStatus.PRESENT],
            late_days=counts[AttendanceStatus.LATE],
            absent_days=counts[AttendanceStatus.ABSENT],
            leave_days=counts[AttendanceStatus.LEAVE],
            total_hours_worked=sum((d.hours_worked for d in days), ZERO),
            total_ot_hours=sum((d.ot_hours for d in days), ZERO),
        )


def aggregate(
    breakdowns: Iterable[DailyEarningBreakdown], period: PayPeriod
) -> PayrollSummary:
    """Functional entry point for :class:`PayrollAggregator`."""
    return PayrollAggregator().aggregate(breakdowns, period)
