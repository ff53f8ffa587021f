"""Pytest fixtures for attendance payroll tests."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest

from attendance_payroll.calculators.types import (
    AttendanceStatus,
    DailyAttendanceRecord,
    EmployeeConfig,
    HourlySalary,
    MonthlySalary,
    ShiftConfig,
)
from attendance_payroll.config import PayrollPolicy, Settings


@pytest.fixture
def day_shift() -> ShiftConfig:
    """09:00-18:00, nine hours."""
    return ShiftConfig(start=time(9, 0), end=time(18, 0))


@pytest.fixture
def night_shift() -> ShiftConfig:
    """22:00-06:00, eight hours across midnight."""
    return ShiftConfig(start=time(22, 0), end=time(6, 0))


@pytest.fixture
def hourly_employee(day_shift) -> EmployeeConfig:
    """Hourly employee at 100 per hour."""
    return EmployeeConfig(
        employee_id="EMP001",
        shift=day_shift,
        salary=HourlySalary(rate=Decimal("100")),
        joining_date=date(2025, 6, 1),
        first_name="John",
        last_name="Doe",
    )


@pytest.fixture
def monthly_employee() -> EmployeeConfig:
    """Monthly employee at 50000 on an eight hour shift."""
    return EmployeeConfig(
        employee_id="EMP002",
        shift=ShiftConfig(start=time(9, 0), end=time(17, 0)),
        salary=MonthlySalary(amount=Decimal("50000")),
        joining_date=date(2025, 12, 1),
        first_name="Jane",
        last_name="Smith",
    )


@pytest.fixture
def night_employee(night_shift) -> EmployeeConfig:
    """Hourly night-shift employee at 50 per hour."""
    return EmployeeConfig(
        employee_id="EMP003",
        shift=night_shift,
        salary=HourlySalary(rate=Decimal("50")),
        first_name="Sam",
        last_name="Night",
    )


@pytest.fixture
def employees(hourly_employee, monthly_employee, night_employee) -> dict[str, EmployeeConfig]:
    """Known employees keyed by id."""
    return {
        e.employee_id: e for e in (hourly_employee, monthly_employee, night_employee)
    }


@pytest.fixture
def policy() -> PayrollPolicy:
    """Default payroll policy."""
    return PayrollPolicy()


@pytest.fixture
def settings() -> Settings:
    """Settings with default values, independent of the environment."""
    return Settings(
        standard_working_days=22,
        pay_period_start_day=18,
        leave_eligibility_days=90,
        base_pay_basis="clocked",
        pairing_window_hours=14,
        engine_version="1.0.0",
        log_level="INFO",
    )


@pytest.fixture
def worked_day() -> DailyAttendanceRecord:
    """09:00-19:00 with one OT hour at 1.5x and a deduction of 50."""
    return DailyAttendanceRecord(
        employee_id="EMP001",
        date=date(2026, 2, 10),
        status=AttendanceStatus.PRESENT,
        in_time=time(9, 0),
        out_time=time(19, 0),
        ot_hours=Decimal("1"),
        ot_multiplier=Decimal("1.5"),
        deduction=Decimal("50"),
    )
