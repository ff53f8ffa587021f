"""Attendance payroll services."""

from attendance_payroll.services.attendance_import import (
    AttendanceImportService,
    ImportResult,
    ImportRowError,
    LogLevel,
)
from attendance_payroll.services.payroll_service import (
    PayrollService,
    PayrollStatement,
    SalarySummary,
    WorksheetRow,
)

__all__ = [
    "AttendanceImportService",
    "ImportResult",
    "ImportRowError",
    "LogLevel",
    "PayrollService",
    "PayrollStatement",
    "SalarySummary",
    "WorksheetRow",
]
