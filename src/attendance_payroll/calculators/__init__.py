"""Attendance-to-payroll calculation core."""

from attendance_payroll.calculators.aggregator import PayrollAggregator, aggregate
from attendance_payroll.calculators.daily_earning import (
    DailyEarningCalculator,
    compute_daily_earning,
)
from attendance_payroll.calculators.event_merger import AttendanceEventMerger, MergeResult
from attendance_payroll.calculators.pay_period import PayPeriodResolver
from attendance_payroll.calculators.performance import PerformanceScorer

__all__ = [
    "AttendanceEventMerger",
    "DailyEarningCalculator",
    "MergeResult",
    "PayPeriodResolver",
    "PayrollAggregator",
    "PerformanceScorer",
    "aggregate",
    "compute_daily_earning",
]
