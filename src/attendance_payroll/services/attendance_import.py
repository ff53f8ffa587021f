"""Bulk attendance import: parse punch rows, merge, report.

Row format (pipe or comma delimited, header optional):

    empid|firstname|lastname|date(dd/mm/yyyy)|time(HH:mm)|status(0=in,1=out)
    EMP001|John|Doe|23/02/2026|09:00|0
    EMP001|John|Doe|23/02/2026|18:00|1

Malformed rows never abort the batch: they are reported in the processing
log and the valid subset is merged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Mapping

from attendance_payroll.calculators.daily_earning import DailyEarningCalculator
from attendance_payroll.calculators.event_merger import AttendanceEventMerger, describe
from attendance_payroll.calculators.time_arithmetic import normalize_time, parse_time
from attendance_payroll.calculators.types import (
    AttendanceEvent,
    DailyAttendanceRecord,
    EmployeeConfig,
    PunchKind,
    RejectedRow,
)
from attendance_payroll.config import ImportConfig, PayrollPolicy

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = 6
_DATE_FORM = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")


class LogLevel(str, Enum):
    """Processing log entry types."""

    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"
    SUMMARY = "SUMMARY"


_PYTHON_LEVELS = {
    LogLevel.INFO: logging.DEBUG,
    LogLevel.SUCCESS: logging.DEBUG,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.WARNING,
    LogLevel.SUMMARY: logging.INFO,
}


class ImportRowError(ValueError):
    """Raised when a single import row is malformed."""

    def __init__(self, row_number: int, reason: str, raw: str | None = None):
        self.row_number = row_number
        self.reason = reason
        self.raw = raw
        super().__init__(f"Row {row_number}: {reason}")

    def to_rejected(self) -> RejectedRow:
        return RejectedRow(row_number=self.row_number, reason=self.reason, raw=self.raw)


@dataclass(frozen=True)
class ImportLogEntry:
    """One line of the processing log."""

    level: LogLevel
    message: str


@dataclass
class ImportCounts:
    """Row and record counters for one import."""

    total: int = 0
    success: int = 0
    failed: int = 0
    skipped: int = 0
    records_created: int = 0
    records_updated: int = 0


@dataclass
class ImportResult:
    """Everything an import hands back to its caller."""

    records: list[DailyAttendanceRecord] = field(default_factory=list)
    log: list[ImportLogEntry] = field(default_factory=list)
    counts: ImportCounts = field(default_factory=ImportCounts)
    rejected: list[RejectedRow] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when at least one row was parsed."""
        return self.counts.total > 0


@dataclass(frozen=True)
class ParsedRow:
    """A valid import row."""

    event: AttendanceEvent
    first_name: str
    last_name: str
    time_text: str = ""


class AttendanceImportService:
    """Runs a bulk punch import against a set of known employees.

    Steps:
    1) Parse every row; malformed rows become ERROR entries
    2) Merge punches per (employee, date); unknown employees become WARN entries
    3) Combine with stored records (earlier in, later out); manually
       overridden records are skipped
    4) Emit a SUMMARY entry with the counts
    """

    def __init__(
        self,
        config: ImportConfig | None = None,
        policy: PayrollPolicy | None = None,
    ):
        self.config = config or ImportConfig()
        self.merger = AttendanceEventMerger(self.config)
        self.calculator = DailyEarningCalculator(policy)

    # === Parsing ===

    def parse_date(self, value: str, row_number: int) -> date:
        """Parse a strict dd/mm/yyyy date."""
        text = value.strip()
        if not _DATE_FORM.match(text):
            raise ImportRowError(
                row_number, f'Invalid date format "{text}" (expected dd/mm/yyyy)'
            )
        try:
            parsed = datetime.strptime(text, "%d/%m/%Y").date()
        except ValueError:
            raise ImportRowError(row_number, f'Invalid calendar date "{text}"') from None
        if not self.config.year_min <= parsed.year <= self.config.year_max:
            raise ImportRowError(row_number, f'Year out of range in "{text}"')
        return parsed

    def parse_line(self, line: str, row_number: int) -> ParsedRow:
        """Parse one data line.

        Raises:
            ImportRowError: If the line is malformed
        """
        delimiter = "|" if "|" in line else ","
        parts = [part.strip() for part in line.split(delimiter)]
        if len(parts) < EXPECTED_COLUMNS:
            raise ImportRowError(
                row_number,
                f'Expected {EXPECTED_COLUMNS} columns (delimiter "{delimiter}"), '
                f"got {len(parts)}",
                raw=line,
            )

        employee_id, first_name, last_name, date_text, time_text, flag = parts[:6]
        if not employee_id:
            raise ImportRowError(row_number, "Missing employee id", raw=line)

        try:
            day = self.parse_date(date_text, row_number)
            clock = parse_time(time_text)
            kind = PunchKind.from_flag(flag)
        except ImportRowError as e:
            raise ImportRowError(row_number, e.reason, raw=line) from None
        except ValueError as e:
            # InvalidTimeError and bad status flags
            raise ImportRowError(row_number, str(e), raw=line) from None

        return ParsedRow(
            event=AttendanceEvent(
                employee_id=employee_id.upper(),
                date=day,
                time=clock,
                kind=kind,
                row_number=row_number,
            ),
            first_name=first_name,
            last_name=last_name,
            time_text=time_text,
        )

    def parse(self, content: str) -> tuple[list[ParsedRow], list[RejectedRow]]:
        """Parse file content into valid rows and rejected rows."""
        rows: list[ParsedRow] = []
        rejected: list[RejectedRow] = []
        header_checked = False

        for row_number, raw_line in enumerate(content.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            if not header_checked:
                header_checked = True
                if "empid" in line.lower():
                    continue
            try:
                rows.append(self.parse_line(line, row_number))
            except ImportRowError as e:
                rejected.append(e.to_rejected())

        return rows, rejected

    # === Import ===

    def run(
        self,
        content: str,
        employees: Mapping[str, EmployeeConfig],
        existing: Mapping[tuple[str, date], DailyAttendanceRecord] | None = None,
        source_name: str | None = None,
    ) -> ImportResult:
        """Import punch rows.

        Args:
            content: Raw file text
            employees: Known employees keyed by (upper-case) employee id
            existing: Stored records keyed by (employee_id, date)
            source_name: File name for the log

        Returns:
            Merged records ready to store, the processing log and counts
        """
        existing = existing or {}
        lookup = {emp_id.upper(): emp for emp_id, emp in employees.items()}
        by_record_id = {emp.employee_id: emp for emp in lookup.values()}
        result = ImportResult()
        log = result.log
        counts = result.counts

        def emit(level: LogLevel, message: str) -> None:
            log.append(ImportLogEntry(level, message))
            logger.log(_PYTHON_LEVELS[level], "%s %s", level.value, message)

        if source_name:
            emit(LogLevel.INFO, f"File: {source_name} ({len(content)} bytes)")

        rows, rejected = self.parse(content)
        for row in rejected:
            emit(LogLevel.ERROR, str(row))
        result.rejected.extend(rejected)
        counts.total = len(rows)
        counts.failed = len(rejected)

        if not rows:
            emit(LogLevel.ERROR, "No valid rows found in file")
            return result

        emit(LogLevel.INFO, f"Parsed {len(rows)} valid row(s)")
        for row in rows:
            canonical = normalize_time(row.time_text)
            if canonical and canonical != row.time_text:
                emit(
                    LogLevel.INFO,
                    f'Row {row.event.row_number}: time "{row.time_text}" read as {canonical}',
                )
        merged = self.merger.merge((row.event for row in rows), lookup)
        for row in merged.rejected:
            emit(LogLevel.WARN, f"{row}. Skipped.")
            counts.skipped += 1
        result.rejected.extend(merged.rejected)

        emit(LogLevel.INFO, f"{len(merged.records)} employee-date group(s)")

        for record in merged.records:
            row_count = len(merged.rows_by_key.get(record.key, ()))
            employee = by_record_id[record.employee_id]
            label = f"{record.employee_id} ({employee.full_name}) - {record.date:%d/%m/%Y}"

            stored = existing.get(record.key)
            if stored is not None and stored.manual_override:
                emit(LogLevel.WARN, f"{label}: record has manual override. Skipped.")
                counts.skipped += row_count
                continue

            if stored is not None:
                record = self.merger.complete_with_existing(record, stored)

            breakdown = self.calculator.compute(record, employee)
            emit(
                LogLevel.INFO,
                f"{label}: {describe(record)} | Hours: {breakdown.hours_worked:.2f} "
                f"| Base: {breakdown.base_pay} | Final: {breakdown.final_day_earning}",
            )

            if stored is not None:
                counts.records_updated += 1
                emit(LogLevel.SUCCESS, f"{label}: Updated ({record.status.value})")
            else:
                counts.records_created += 1
                emit(LogLevel.SUCCESS, f"{label}: Created ({record.status.value})")

            counts.success += row_count
            result.records.append(record)

        emit(
            LogLevel.SUMMARY,
            f"DONE - Rows: {counts.total} | OK: {counts.success} | "
            f"Skipped: {counts.skipped} | Errors: {counts.failed} | "
            f"Created: {counts.records_created} | Updated: {counts.records_updated}",
        )
        return result
