"""Attendance payroll command line interface.

Provides tools for:
- Bulk attendance import
- Payroll statements per employee
- Salary summary CSV export
- Attendance worksheets
- Pay period and leave eligibility lookups

Usage:
    attendance-payroll import punches.csv --employees employees.json --output records.json
    attendance-payroll payroll --employees employees.json --records records.json --date 2026-02-20
    attendance-payroll export --employees employees.json --records records.json --output salaries.csv
    attendance-payroll period --date 2026-02-10 --recent 3
    attendance-payroll leave --joining 2025-11-12 --date 2026-02-20
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable

from attendance_payroll.api.schemas import (
    ImportResultOut,
    LeaveEligibilityOut,
    PayPeriodOut,
    PayrollStatementOut,
    dump_records,
    load_employees,
    load_records,
)
from attendance_payroll.calculators.event_merger import describe
from attendance_payroll.calculators.pay_period import PayPeriodResolver
from attendance_payroll.calculators.types import AttendanceStatus, EmployeeConfig, PayPeriod
from attendance_payroll.config import Settings, get_settings
from attendance_payroll.services.attendance_import import AttendanceImportService
from attendance_payroll.services.payroll_service import PayrollService

logger = logging.getLogger(__name__)


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def _write(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)


class PayrollCli:
    """Attendance payroll command line interface."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.policy = self.settings.policy()
        self.resolver = PayPeriodResolver(self.policy)
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="attendance-payroll",
            description="Attendance to payroll calculation tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # import command
        imp = subparsers.add_parser(
            "import",
            help="Import check-in/check-out rows",
        )
        imp.add_argument("file", type=str, help="Pipe or comma delimited punch file")
        imp.add_argument(
            "--employees",
            type=str,
            required=True,
            help="Employee configuration JSON file",
        )
        imp.add_argument(
            "--existing",
            type=str,
            help="Stored records JSON file to complete",
        )
        imp.add_argument(
            "--output",
            type=str,
            help="Write merged records JSON here (default: stdout)",
        )
        imp.add_argument(
            "--json",
            action="store_true",
            help="Print the full import result as JSON instead of the log",
        )

        # payroll command
        payroll = subparsers.add_parser(
            "payroll",
            help="Build payroll statements",
        )
        self._add_period_arguments(payroll)
        payroll.add_argument(
            "--employee",
            type=str,
            help="Only this employee id",
        )
        payroll.add_argument(
            "--json",
            action="store_true",
            help="Print statements as JSON",
        )

        # export command
        export = subparsers.add_parser(
            "export",
            help="Export the salary summary as CSV",
        )
        self._add_period_arguments(export)
        export.add_argument(
            "--output",
            type=str,
            help="Output CSV path (default: stdout)",
        )

        # worksheet command
        worksheet = subparsers.add_parser(
            "worksheet",
            help="Show every employee-day of a period",
        )
        self._add_period_arguments(worksheet)
        worksheet.add_argument(
            "--status",
            type=AttendanceStatus,
            choices=list(AttendanceStatus),
            metavar="{" + ",".join(s.value for s in AttendanceStatus) + "}",
            help="Only rows with this status",
        )

        # period command
        period = subparsers.add_parser(
            "period",
            help="Show the pay period containing a date",
        )
        period.add_argument(
            "--date",
            type=parse_date,
            help="Reference date (default: today)",
        )
        period.add_argument(
            "--to-date",
            action="store_true",
            help="Clamp the period end to the reference date",
        )
        period.add_argument(
            "--recent",
            type=int,
            default=0,
            help="Also list this many previous periods",
        )

        # leave command
        leave = subparsers.add_parser(
            "leave",
            help="Check leave eligibility",
        )
        leave.add_argument(
            "--joining",
            type=parse_date,
            required=True,
            help="Joining date (ISO format)",
        )
        leave.add_argument(
            "--date",
            type=parse_date,
            help="Reference date (default: today)",
        )

        return parser

    @staticmethod
    def _add_period_arguments(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--employees",
            type=str,
            required=True,
            help="Employee configuration JSON file",
        )
        sub.add_argument(
            "--records",
            type=str,
            required=True,
            help="Stored records JSON file",
        )
        sub.add_argument(
            "--date",
            type=parse_date,
            help="Any date inside the pay period (default: today)",
        )
        sub.add_argument(
            "--start",
            type=parse_date,
            help="Explicit range start (requires --end)",
        )
        sub.add_argument(
            "--end",
            type=parse_date,
            help="Explicit range end (requires --start)",
        )
        sub.add_argument(
            "--to-date",
            action="store_true",
            help="Clamp the period end to --date",
        )

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "import": self._cmd_import,
            "payroll": self._cmd_payroll,
            "export": self._cmd_export,
            "worksheet": self._cmd_worksheet,
            "period": self._cmd_period,
            "leave": self._cmd_leave,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except (OSError, ValueError) as e:
            logger.debug("Command %s failed", parsed.command, exc_info=True)
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    # === Helpers ===

    def _period(self, args: argparse.Namespace) -> PayPeriod:
        if args.start or args.end:
            if not (args.start and args.end):
                raise ValueError("--start and --end must be given together")
            return PayPeriod(start_date=args.start, end_date=args.end)
        reference = args.date or date.today()
        return self.resolver.current_period(reference, to_date=args.to_date)

    def _load(
        self, args: argparse.Namespace
    ) -> tuple[dict[str, EmployeeConfig], list, PayPeriod]:
        employees = load_employees(_read_json(args.employees))
        records = load_records(_read_json(args.records))
        return employees, records, self._period(args)

    def _service(self) -> PayrollService:
        return PayrollService(
            self.policy,
            engine_version=self.settings.engine_version,
            pairing_window_hours=self.settings.pairing_window_hours,
        )

    # === Commands ===

    def _cmd_import(self, args: argparse.Namespace) -> int:
        """Import punch rows and emit merged records."""
        employees = load_employees(_read_json(args.employees))
        existing = {}
        if args.existing:
            existing = {r.key: r for r in load_records(_read_json(args.existing))}

        path = Path(args.file)
        content = path.read_text(encoding="utf-8")
        service = AttendanceImportService(self.settings.import_config(), self.policy)
        result = service.run(content, employees, existing, source_name=path.name)

        if args.json:
            out = ImportResultOut.from_result(result)
            print(out.model_dump_json(by_alias=True, indent=2))
        else:
            for entry in result.log:
                print(f"[{entry.level.value}] {entry.message}", file=sys.stderr)
            # stored days outside this batch are kept
            merged = {**existing, **{r.key: r for r in result.records}}
            ordered = sorted(merged.values(), key=lambda r: (r.date, r.employee_id))
            _write(json.dumps(dump_records(ordered), indent=2) + "\n", args.output)

        return 0 if result.success else 1

    def _cmd_payroll(self, args: argparse.Namespace) -> int:
        """Print payroll statements."""
        employees, records, period = self._load(args)
        selected = list(employees.values())
        if args.employee:
            if args.employee not in employees:
                print(f"Employee not found: {args.employee}", file=sys.stderr)
                return 1
            selected = [employees[args.employee]]

        statements = self._service().build_statements(selected, records, period)

        if args.json:
            payload = [
                PayrollStatementOut.from_statement(s).model_dump(mode="json", by_alias=True)
                for s in statements
            ]
            print(json.dumps(payload, indent=2))
            return 0

        print(f"Pay period: {period.label}")
        for statement in statements:
            summary = statement.summary
            performance = statement.performance
            print(f"\n{statement.employee.employee_id} {statement.employee.full_name}")
            print(f"  Base salary:  {summary.base_salary}")
            print(f"  OT total:     {summary.total_ot_amount}")
            print(f"  Deductions:   {summary.total_deduction}")
            print(f"  Net salary:   {summary.net_salary}")
            print(
                f"  Hours:        {summary.total_hours_worked:.2f} worked, "
                f"{summary.total_ot_hours:.2f} OT"
            )
            print(
                f"  Days: {summary.present_days} present, {summary.late_days} late, "
                f"{summary.leave_days} leave, {summary.absent_days} absent "
                f"of {summary.total_working_days}"
            )
            print(f"  Performance:  {performance.performance_score} ({performance.rating.value})")
        return 0

    def _cmd_export(self, args: argparse.Namespace) -> int:
        """Export the salary summary CSV."""
        employees, records, period = self._load(args)
        service = self._service()
        statements = service.build_statements(list(employees.values()), records, period)
        _write(service.export_csv(service.salary_summary(statements)), args.output)
        if args.output:
            print(f"Exported {len(statements)} employee(s) to {args.output}")
        return 0

    def _cmd_worksheet(self, args: argparse.Namespace) -> int:
        """Print every employee-day of the period."""
        employees, records, period = self._load(args)
        rows = self._service().worksheet(
            list(employees.values()), records, period, status=args.status
        )
        for row in rows:
            marker = "*" if row.is_virtual else " "
            delay = f" | Delay: {row.delay_minutes} min" if row.delay_minutes else ""
            print(
                f"{row.date:%d/%m/%Y} {marker} {row.employee_id:<10} "
                f"{row.record.status.value:<8} {describe(row.record)} "
                f"| Final: {row.breakdown.final_day_earning}{delay}"
            )
        return 0

    def _cmd_period(self, args: argparse.Namespace) -> int:
        """Print the current pay period (and recent ones)."""
        reference = args.date or date.today()
        periods = [self.resolver.current_period(reference, to_date=args.to_date)]
        if args.recent:
            periods.extend(self.resolver.recent_periods(reference, args.recent))
        for period in periods:
            print(PayPeriodOut.model_validate(period).model_dump_json(by_alias=True))
        return 0

    def _cmd_leave(self, args: argparse.Namespace) -> int:
        """Print leave eligibility."""
        reference = args.date or date.today()
        eligibility = self.resolver.leave_eligibility(args.joining, reference)
        print(LeaveEligibilityOut.model_validate(eligibility).model_dump_json(by_alias=True))
        return 0


def main() -> int:
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cli = PayrollCli(settings)
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
