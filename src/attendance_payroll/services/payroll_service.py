"""Payroll statements per employee and multi-employee reports."""

from __future__ import annotations

import csv
import hashlib
import io
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence
from uuid import UUID

from attendance_payroll.calculators.aggregator import PayrollAggregator
from attendance_payroll.calculators.daily_earning import DailyEarningCalculator
from attendance_payroll.calculators.money import ZERO
from attendance_payroll.calculators.pay_period import PayPeriodResolver
from attendance_payroll.calculators.performance import PerformanceScorer
from attendance_payroll.calculators.time_arithmetic import shift_delay_minutes
from attendance_payroll.calculators.types import (
    AttendanceStatus,
    DailyAttendanceRecord,
    DailyEarningBreakdown,
    EmployeeConfig,
    InvariantViolation,
    PayPeriod,
    PayrollSummary,
    PerformanceScore,
)
from attendance_payroll.config import PayrollPolicy

logger = logging.getLogger(__name__)

EXPORT_HEADER = ["Employee Number", "Name", "Base Salary", "OT Total", "Deductions", "Net Salary"]


@dataclass(frozen=True)
class PayrollStatement:
    """One employee's pay period: days, totals and rating."""

    employee: EmployeeConfig
    period: PayPeriod
    breakdowns: tuple[DailyEarningBreakdown, ...]
    summary: PayrollSummary
    performance: PerformanceScore
    inputs_fingerprint: str
    calculation_id: UUID


@dataclass(frozen=True)
class SalarySummary:
    """Statements for many employees with grand totals."""

    statements: tuple[PayrollStatement, ...]
    total_base_salary: Decimal
    total_ot_amount: Decimal
    total_deduction: Decimal
    total_net_salary: Decimal


@dataclass(frozen=True)
class WorksheetRow:
    """One employee-day of the attendance worksheet."""

    employee_id: str
    employee_name: str
    date: date
    record: DailyAttendanceRecord
    breakdown: DailyEarningBreakdown
    is_virtual: bool
    delay_minutes: int = 0


class PayrollService:
    """Builds payroll statements from stored attendance records.

    Pipeline per employee (stable order):
    1) Keep the employee's records inside the period
    2) Compute a breakdown per record
    3) Fill missing days as Absent
    4) Aggregate totals and day counts
    5) Score attendance performance
    6) Fingerprint inputs and derive a deterministic calculation id

    Statements for different employees share nothing, so
    :meth:`build_statements` computes them in parallel.
    """

    def __init__(
        self,
        policy: PayrollPolicy | None = None,
        engine_version: str = "1.0.0",
        pairing_window_hours: int = 14,
    ):
        self.policy = policy or PayrollPolicy()
        self.engine_version = engine_version
        self.pairing_window_hours = pairing_window_hours
        self.calculator = DailyEarningCalculator(self.policy)
        self.aggregator = PayrollAggregator()
        self.scorer = PerformanceScorer(self.policy.scoring)
        self.resolver = PayPeriodResolver(self.policy)

    def build_statement(
        self,
        employee: EmployeeConfig,
        records: Iterable[DailyAttendanceRecord],
        period: PayPeriod,
    ) -> PayrollStatement:
        """Build the statement of one employee for one period.

        Records outside the period are ignored.

        Raises:
            ValueError: If a record belongs to another employee
            InvariantViolation: If two records exist for the same day
        """
        in_period = sorted(
            (r for r in records if r.date in period), key=lambda r: r.date
        )
        breakdowns = [self.calculator.compute(r, employee) for r in in_period]
        days = self.aggregator.fill_missing_days(breakdowns, period)
        summary = self.aggregator.aggregate(days, period)
        performance = self.scorer.score(summary)

        inputs_fingerprint = self._compute_inputs_fingerprint(days)
        calculation_id = self._generate_calculation_id(
            employee.employee_id, period, inputs_fingerprint
        )
        logger.debug(
            "Statement %s for %s (%s): net %s",
            calculation_id,
            employee.employee_id,
            period.label,
            summary.net_salary,
        )

        return PayrollStatement(
            employee=employee,
            period=period,
            breakdowns=tuple(days),
            summary=summary,
            performance=performance,
            inputs_fingerprint=inputs_fingerprint,
            calculation_id=calculation_id,
        )

    def statement_to_date(
        self,
        employee: EmployeeConfig,
        records: Iterable[DailyAttendanceRecord],
        today: date,
    ) -> PayrollStatement:
        """Statement for the current period, clamped to ``today``."""
        period = self.resolver.current_period(today, to_date=True)
        return self.build_statement(employee, records, period)

    def build_statements(
        self,
        employees: Sequence[EmployeeConfig],
        records: Iterable[DailyAttendanceRecord],
        period: PayPeriod,
        max_workers: int | None = None,
    ) -> list[PayrollStatement]:
        """Statements for many employees, in the order of ``employees``.

        Records of employees not listed are ignored.
        """
        by_employee: dict[str, list[DailyAttendanceRecord]] = {
            e.employee_id: [] for e in employees
        }
        ignored = 0
        for record in records:
            bucket = by_employee.get(record.employee_id)
            if bucket is None:
                ignored += 1
                continue
            bucket.append(record)
        if ignored:
            logger.info("Ignored %d record(s) of unlisted employees", ignored)

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(
                pool.map(
                    lambda e: self.build_statement(e, by_employee[e.employee_id], period),
                    employees,
                )
            )

    @staticmethod
    def salary_summary(statements: Iterable[PayrollStatement]) -> SalarySummary:
        """Grand totals over statements, sorted by employee name."""
        ordered = tuple(
            sorted(statements, key=lambda s: (s.employee.full_name, s.employee.employee_id))
        )
        return SalarySummary(
            statements=ordered,
            total_base_salary=sum((s.summary.base_salary for s in ordered), ZERO),
            total_ot_amount=sum((s.summary.total_ot_amount for s in ordered), ZERO),
            total_deduction=sum((s.summary.total_deduction for s in ordered), ZERO),
            total_net_salary=sum((s.summary.net_salary for s in ordered), ZERO),
        )

    def worksheet(
        self,
        employees: Sequence[EmployeeConfig],
        records: Iterable[DailyAttendanceRecord],
        period: PayPeriod,
        status: AttendanceStatus | None = None,
    ) -> list[WorksheetRow]:
        """Every employee x every day of the period.

        Days without a stored record appear as virtual Absent rows. Late
        rows carry the check-in delay against the shift in effect that day.
        With ``status`` only rows of that status are returned.

        Raises:
            InvariantViolation: If two stored records share a day
        """
        stored: dict[tuple[str, date], DailyAttendanceRecord] = {}
        for record in records:
            if record.date not in period:
                continue
            if record.key in stored:
                raise InvariantViolation(
                    f"Day {record.date} classified twice for {record.employee_id}"
                )
            stored[record.key] = record

        rows: list[WorksheetRow] = []
        for day in period.days():
            for employee in sorted(employees, key=lambda e: e.employee_id):
                record = stored.get((employee.employee_id, day))
                is_virtual = record is None
                if record is None:
                    record = DailyAttendanceRecord.absent(employee.employee_id, day)
                if status is not None and record.status != status:
                    continue
                rows.append(
                    WorksheetRow(
                        employee_id=employee.employee_id,
                        employee_name=employee.full_name,
                        date=day,
                        record=record,
                        breakdown=self.calculator.compute(record, employee),
                        is_virtual=is_virtual,
                        delay_minutes=self._delay(record, employee),
                    )
                )
        return rows

    def _delay(self, record: DailyAttendanceRecord, employee: EmployeeConfig) -> int:
        if record.status != AttendanceStatus.LATE:
            return 0
        shift = record.shift_snapshot or employee.shift
        return shift_delay_minutes(record.in_time, shift, self.pairing_window_hours)

    @staticmethod
    def export_csv(summary: SalarySummary) -> str:
        """Export a salary summary as CSV text."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(EXPORT_HEADER)
        for statement in summary.statements:
            writer.writerow([
                statement.employee.employee_id,
                statement.employee.full_name,
                str(statement.summary.base_salary),
                str(statement.summary.total_ot_amount),
                str(statement.summary.total_deduction),
                str(statement.summary.net_salary),
            ])
        return output.getvalue()

    # === Fingerprinting ===

    @staticmethod
    def _compute_inputs_fingerprint(days: Sequence[DailyEarningBreakdown]) -> str:
        """Compute fingerprint of the day breakdowns a statement was built from."""
        data = [
            {
                "date": d.date.isoformat(),
                "status": d.status.value,
                "hours_worked": str(d.hours_worked),
                "ot_hours": str(d.ot_hours),
                "base_pay": str(d.base_pay),
                "ot_amount": str(d.ot_amount),
                "deduction": str(d.deduction),
            }
            for d in days
        ]
        json_str = json.dumps(data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]

    def _generate_calculation_id(
        self, employee_id: str, period: PayPeriod, inputs_fingerprint: str
    ) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "employee_id": employee_id,
            "period_start": period.start_date.isoformat(),
            "period_end": period.end_date.isoformat(),
            "engine_version": self.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])
