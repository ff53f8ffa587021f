"""Tests for pay period aggregation."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from attendance_payroll.calculators.aggregator import PayrollAggregator, aggregate
from attendance_payroll.calculators.types import (
    AttendanceStatus,
    DailyEarningBreakdown,
    InvariantViolation,
    PayPeriod,
    PayrollSummary,
)

PERIOD = PayPeriod(date(2026, 2, 1), date(2026, 2, 5))


def make_day(
    day: int,
    status: AttendanceStatus,
    base: str = "0",
    ot: str = "0",
    deduction: str = "0",
) -> DailyEarningBreakdown:
    base_pay, ot_amount, ded = Decimal(base), Decimal(ot), Decimal(deduction)
    return DailyEarningBreakdown(
        date=date(2026, 2, day),
        status=status,
        hours_worked=Decimal("0"),
        base_pay=base_pay,
        ot_amount=ot_amount,
        deduction=ded,
        final_day_earning=max(Decimal("0"), base_pay + ot_amount - ded),
    )


class TestAggregate:
    """Test summing and counting."""

    def test_sums_and_counts(self):
        """Money is summed, statuses counted, gaps become Absent."""
        days = [
            make_day(1, AttendanceStatus.PRESENT, "1000.00", "150.00", "50.00"),
            make_day(2, AttendanceStatus.LATE, "800.00"),
            make_day(3, AttendanceStatus.LEAVE, "900.00"),
        ]
        summary = aggregate(days, PERIOD)

        assert summary.base_salary == Decimal("2700.00")
        assert summary.total_ot_amount == Decimal("150.00")
        assert summary.total_deduction == Decimal("50.00")
        assert summary.net_salary == Decimal("2800.00")
        assert summary.total_working_days == 5
        assert summary.present_days == 1
        assert summary.late_days == 1
        assert summary.leave_days == 1
        assert summary.absent_days == 2

    def test_hour_totals(self):
        """Worked and OT hours are folded like money."""
        days = [
            replace(
                make_day(1, AttendanceStatus.PRESENT, "1100.00", "150.00"),
                hours_worked=Decimal("11"),
                ot_hours=Decimal("1"),
            ),
            replace(
                make_day(2, AttendanceStatus.LATE, "800.00", "300.00"),
                hours_worked=Decimal("8.5"),
                ot_hours=Decimal("2"),
            ),
        ]
        summary = aggregate(days, PERIOD)

        assert summary.total_hours_worked == Decimal("19.5")
        assert summary.total_ot_hours == Decimal("3")

    def test_input_order_does_not_matter(self):
        """Aggregation is order independent."""
        days = [
            make_day(3, AttendanceStatus.LEAVE, "900.00"),
            make_day(1, AttendanceStatus.PRESENT, "1000.00"),
        ]
        assert aggregate(days, PERIOD) == aggregate(list(reversed(days)), PERIOD)

    def test_empty_period_is_all_absent(self):
        """No data means every day is Absent with zero pay."""
        summary = aggregate([], PERIOD)

        assert summary.absent_days == 5
        assert summary.net_salary == Decimal("0")

    def test_duplicate_day_is_violation(self):
        """A day cannot be classified twice."""
        days = [
            make_day(1, AttendanceStatus.PRESENT, "100"),
            make_day(1, AttendanceStatus.LATE, "100"),
        ]
        with pytest.raises(InvariantViolation):
            aggregate(days, PERIOD)

    def test_day_outside_period_is_violation(self):
        """Breakdowns must fall inside the window."""
        with pytest.raises(AssertionError):
            aggregate([make_day(9, AttendanceStatus.PRESENT, "100")], PERIOD)

    def test_fill_missing_days(self):
        """One breakdown per day, in date order."""
        days = PayrollAggregator.fill_missing_days(
            [make_day(4, AttendanceStatus.PRESENT, "100")], PERIOD
        )

        assert [d.date.day for d in days] == [1, 2, 3, 4, 5]
        assert [d.status for d in days].count(AttendanceStatus.ABSENT) == 4


class TestSummaryInvariants:
    """Test PayrollSummary's own checks."""

    def test_incomplete_day_counts(self):
        """Classified days must add up to working days."""
        with pytest.raises(InvariantViolation):
            PayrollSummary(
                base_salary=Decimal("0"),
                total_ot_amount=Decimal("0"),
                total_deduction=Decimal("0"),
                net_salary=Decimal("0"),
                total_working_days=5,
                present_days=1,
                late_days=0,
                absent_days=0,
                leave_days=0,
            )

    def test_non_additive_net(self):
        """net_salary must equal base + ot - deduction."""
        with pytest.raises(InvariantViolation):
            PayrollSummary(
                base_salary=Decimal("100"),
                total_ot_amount=Decimal("0"),
                total_deduction=Decimal("0"),
                net_salary=Decimal("90"),
                total_working_days=1,
                present_days=1,
                late_days=0,
                absent_days=0,
                leave_days=0,
            )
