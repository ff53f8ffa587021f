"""Tests for boundary schemas."""

from dataclasses import replace
from datetime import date, time
from decimal import Decimal

import pytest

from attendance_payroll.api.schemas import (
    DailyEarningBreakdownOut,
    ImportResultOut,
    PayrollStatementOut,
    PayrollSummaryOut,
    dump_records,
    load_employees,
    load_records,
)
from attendance_payroll.calculators.daily_earning import compute_daily_earning
from attendance_payroll.calculators.types import (
    AttendanceStatus,
    ConfigurationError,
    HourlySalary,
    InvalidRecordError,
    MonthlySalary,
    PayPeriod,
)
from attendance_payroll.services.attendance_import import AttendanceImportService
from attendance_payroll.services.payroll_service import PayrollService


def employee_payload(**overrides):
    payload = {
        "employeeId": "EMP001",
        "firstName": "John",
        "lastName": "Doe",
        "joiningDate": "2025-06-01",
        "shift": {"start": "9:00", "end": "18:00"},
        "salary": {"type": "hourly", "rate": 100},
    }
    payload.update(overrides)
    return payload


class TestLoadEmployees:
    """Test employee payload validation."""

    def test_camel_case_payload(self):
        """camelCase keys map to the typed model."""
        employees = load_employees([employee_payload()])
        employee = employees["EMP001"]

        assert employee.full_name == "John Doe"
        assert employee.joining_date == date(2025, 6, 1)
        assert employee.shift.start == time(9, 0)
        assert employee.salary == HourlySalary(rate=Decimal("100"))

    def test_snake_case_payload(self):
        """snake_case keys are accepted too."""
        payload = {
            "employee_id": "EMP002",
            "shift": {"start": "0900", "end": "1700"},
            "salary": {"type": "monthly", "amount": "50000"},
        }
        employee = load_employees([payload])["EMP002"]

        assert employee.salary == MonthlySalary(amount=Decimal("50000"))
        assert employee.shift.hours == Decimal("8")

    def test_monthly_without_amount(self):
        """The monthly variant requires an amount."""
        with pytest.raises(ConfigurationError):
            load_employees([employee_payload(salary={"type": "monthly"})])

    def test_unknown_salary_type(self):
        """The salary union is discriminated on type."""
        with pytest.raises(ConfigurationError):
            load_employees([employee_payload(salary={"type": "weekly", "rate": 10})])

    def test_non_positive_rate(self):
        """Rates must be positive."""
        with pytest.raises(ConfigurationError):
            load_employees([employee_payload(salary={"type": "hourly", "rate": 0})])

    def test_identical_shift_times(self):
        """The error names the employee."""
        with pytest.raises(ConfigurationError, match="Employee EMP001"):
            load_employees([employee_payload(shift={"start": "9:00", "end": "09:00"})])


class TestLoadRecords:
    """Test stored record validation."""

    def test_record_payload(self):
        """Times are parsed leniently; numbers become Decimals."""
        records = load_records([
            {
                "employeeId": "EMP001",
                "date": "2026-02-10",
                "status": "Present",
                "inTime": "9:00",
                "outTime": "1900",
                "otHours": 1,
                "otMultiplier": 1.5,
                "deduction": "50",
            }
        ])
        record = records[0]

        assert record.status == AttendanceStatus.PRESENT
        assert record.in_time == time(9, 0)
        assert record.out_time == time(19, 0)
        assert record.ot_multiplier == Decimal("1.5")
        assert record.deduction == Decimal("50")

    def test_leave_with_times(self):
        """Field rules of the record still apply."""
        with pytest.raises(InvalidRecordError):
            load_records([
                {"employeeId": "EMP001", "date": "2026-02-10", "status": "Leave", "inTime": "9:00"}
            ])

    def test_bad_time(self):
        """Unparseable times are record errors."""
        with pytest.raises(InvalidRecordError):
            load_records([
                {"employeeId": "EMP001", "date": "2026-02-10", "status": "Present", "inTime": "99:00"}
            ])

    def test_negative_deduction(self):
        """Schema bounds are enforced."""
        with pytest.raises(InvalidRecordError):
            load_records([
                {"employeeId": "EMP001", "date": "2026-02-10", "status": "Absent", "deduction": -5}
            ])

    def test_dumped_records_load_back(self, worked_day):
        """Stored-record wire form is re-loadable."""
        assert load_records(dump_records([worked_day])) == [worked_day]

    def test_snapshots_load_back(self, worked_day, night_shift):
        """Frozen shift and salary snapshots survive the wire form."""
        hourly = replace(
            worked_day,
            shift_snapshot=night_shift,
            salary_snapshot=HourlySalary(rate=Decimal("100")),
        )
        monthly = replace(
            worked_day,
            employee_id="EMP002",
            salary_snapshot=MonthlySalary(amount=Decimal("50000")),
        )
        data = dump_records([hourly, monthly])

        assert data[0]["shiftSnapshot"] == {"start": "22:00", "end": "06:00"}
        assert data[0]["salarySnapshot"] == {"type": "hourly", "rate": "100"}
        assert data[1]["shiftSnapshot"] is None
        assert data[1]["salarySnapshot"] == {"type": "monthly", "amount": "50000"}
        assert load_records(data) == [hourly, monthly]

    def test_reloaded_records_keep_their_price(self, employees, hourly_employee):
        """A raise after import does not reprice stored days."""
        result = AttendanceImportService().run(
            "EMP001|John|Doe|10/02/2026|09:00|0\nEMP001|John|Doe|10/02/2026|18:00|1\n",
            employees,
        )
        stored = load_records(dump_records(result.records))[0]
        raised = replace(hourly_employee, salary=HourlySalary(rate=Decimal("200")))

        assert stored.salary_snapshot == HourlySalary(rate=Decimal("100"))
        assert compute_daily_earning(stored, raised).base_pay == Decimal("900.00")


class TestOutputNaming:
    """Test the canonical camelCase wire form."""

    def test_breakdown_keys(self, worked_day, hourly_employee):
        """Breakdown fields use one naming."""
        breakdown = compute_daily_earning(worked_day, hourly_employee)
        data = DailyEarningBreakdownOut.model_validate(breakdown).model_dump(
            mode="json", by_alias=True
        )

        assert set(data) == {
            "date",
            "status",
            "hoursWorked",
            "otHours",
            "basePay",
            "otAmount",
            "deduction",
            "finalDayEarning",
        }
        assert data["status"] == "Present"
        assert Decimal(data["finalDayEarning"]) == Decimal("1100.00")

    def test_statement_keys(self, worked_day, hourly_employee):
        """Statements nest summary, performance and days."""
        period = PayPeriod(date(2026, 2, 10), date(2026, 2, 11))
        statement = PayrollService().build_statement(hourly_employee, [worked_day], period)
        data = PayrollStatementOut.from_statement(statement).model_dump(
            mode="json", by_alias=True
        )

        assert data["calculationId"] == str(statement.calculation_id)
        assert data["employeeName"] == "John Doe"
        assert data["period"]["label"] == "10 Feb 2026 - 11 Feb 2026"
        assert "netSalary" in data["summary"]
        assert "totalOtAmount" in data["summary"]
        assert Decimal(data["summary"]["totalHoursWorked"]) == Decimal("10")
        assert Decimal(data["summary"]["totalOtHours"]) == Decimal("1")
        assert data["performance"]["rating"] == "Poor"
        assert len(data["breakdowns"]) == 2

    def test_summary_accepts_snake_case(self):
        """Output schemas can also be built by field name."""
        out = PayrollSummaryOut(
            base_salary=Decimal("1"),
            total_ot_amount=Decimal("0"),
            total_deduction=Decimal("0"),
            net_salary=Decimal("1"),
            total_working_days=1,
            present_days=1,
            late_days=0,
            absent_days=0,
            leave_days=0,
        )
        assert out.model_dump(by_alias=True)["baseSalary"] == Decimal("1")

    def test_import_result(self, employees):
        """Import results render log, counts and records."""
        result = AttendanceImportService().run(
            "EMP001|John|Doe|10/02/2026|09:00|0\n", employees
        )
        data = ImportResultOut.from_result(result).model_dump(mode="json", by_alias=True)

        assert data["success"] is True
        assert data["counts"]["recordsCreated"] == 1
        assert data["records"][0]["inTime"] == "09:00"
        assert data["records"][0]["outTime"] is None
        assert data["log"][-1]["level"] == "SUMMARY"
