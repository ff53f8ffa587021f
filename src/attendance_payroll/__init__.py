"""Attendance-to-payroll calculation engine."""

from attendance_payroll.calculators import (
    AttendanceEventMerger,
    DailyEarningCalculator,
    PayPeriodResolver,
    PayrollAggregator,
    PerformanceScorer,
    aggregate,
    compute_daily_earning,
)
from attendance_payroll.config import BasePayBasis, ImportConfig, PayrollPolicy, ScoringWeights
from attendance_payroll.services import AttendanceImportService, PayrollService

__version__ = "1.0.0"

__all__ = [
    "AttendanceEventMerger",
    "AttendanceImportService",
    "BasePayBasis",
    "DailyEarningCalculator",
    "ImportConfig",
    "PayPeriodResolver",
    "PayrollAggregator",
    "PayrollPolicy",
    "PayrollService",
    "PerformanceScorer",
    "ScoringWeights",
    "aggregate",
    "compute_daily_earning",
]
