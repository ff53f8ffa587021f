"""Merge raw punches into canonical daily attendance records."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, time, timedelta
from typing import Iterable, Mapping

from attendance_payroll.calculators.time_arithmetic import (
    MINUTES_PER_DAY,
    format_time,
    is_late,
    shift_timeline_minutes,
    to_minutes,
)
from attendance_payroll.calculators.types import (
    AttendanceEvent,
    AttendanceStatus,
    DailyAttendanceRecord,
    EmployeeConfig,
    PunchKind,
    RecordSource,
    RejectedRow,
    ShiftConfig,
)
from attendance_payroll.config import ImportConfig


@dataclass
class _PunchGroup:
    """All punches attributed to one (employee, shift date)."""

    employee: EmployeeConfig
    shift_date: date
    check_ins: list[tuple[int, time]] = field(default_factory=list)
    check_outs: list[tuple[int, time]] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)


@dataclass
class MergeResult:
    """Output of one merge batch."""

    records: list[DailyAttendanceRecord]
    rejected: list[RejectedRow]
    rows_by_key: dict[tuple[str, date], list[int]] = field(default_factory=dict)


class AttendanceEventMerger:
    """Reduces punches to one record per (employee, date).

    Within a group the earliest check-in becomes ``in_time`` and the latest
    check-out becomes ``out_time``; duplicates collapse. A group with only
    one side keeps the other side empty. The status is Late when the
    check-in is after shift start, otherwise Present.

    Overnight shifts are keyed by the date the shift started: a punch whose
    next-day position still lies within ``pairing_window_hours`` of shift
    start belongs to the previous calendar day, and extrema are compared on
    that shift timeline.

    The merge buffers the whole batch before emitting anything, so the
    result never depends on input order.
    """

    def __init__(self, config: ImportConfig | None = None):
        self.config = config or ImportConfig()

    def attribute(self, event: AttendanceEvent, shift: ShiftConfig) -> tuple[date, int]:
        """Shift date and timeline position (minutes) of a punch."""
        position = shift_timeline_minutes(
            event.time, shift, self.config.pairing_window_hours
        )
        if position >= MINUTES_PER_DAY:
            return event.date - timedelta(days=1), position
        return event.date, position

    def merge(
        self,
        events: Iterable[AttendanceEvent],
        employees: Mapping[str, EmployeeConfig],
    ) -> MergeResult:
        """Merge a batch of events.

        Args:
            events: Punches in any order
            employees: Known employees by id

        Returns:
            Records sorted by (date, employee_id), plus rejected rows for
            events of unknown employees
        """
        groups: dict[tuple[str, date], _PunchGroup] = {}
        rejected: list[RejectedRow] = []

        for event in events:
            employee = employees.get(event.employee_id)
            if employee is None:
                rejected.append(
                    RejectedRow(
                        row_number=event.row_number,
                        reason=f"Employee #{event.employee_id} not found",
                        employee_id=event.employee_id,
                    )
                )
                continue

            shift_date, position = self.attribute(event, employee.shift)
            key = (employee.employee_id, shift_date)
            group = groups.get(key)
            if group is None:
                group = groups[key] = _PunchGroup(employee=employee, shift_date=shift_date)

            if event.kind == PunchKind.CHECK_IN:
                group.check_ins.append((position, event.time))
            else:
                group.check_outs.append((position, event.time))
            if event.row_number is not None:
                group.row_numbers.append(event.row_number)

        ordered = sorted(groups.items(), key=lambda item: (item[0][1], item[0][0]))
        return MergeResult(
            records=[self._merge_group(group) for _, group in ordered],
            rejected=rejected,
            rows_by_key={key: sorted(group.row_numbers) for key, group in ordered},
        )

    def _merge_group(self, group: _PunchGroup) -> DailyAttendanceRecord:
        shift = group.employee.shift
        first_in = min(group.check_ins) if group.check_ins else None
        last_out = max(group.check_outs) if group.check_outs else None

        return DailyAttendanceRecord(
            employee_id=group.employee.employee_id,
            date=group.shift_date,
            status=self._status(shift, first_in),
            in_time=first_in[1] if first_in else None,
            out_time=last_out[1] if last_out else None,
            out_next_day=bool(last_out and last_out[0] >= MINUTES_PER_DAY),
            source=RecordSource.CSV,
            shift_snapshot=shift,
            salary_snapshot=group.employee.salary,
        )

    @staticmethod
    def _status(
        shift: ShiftConfig, first_in: tuple[int, time] | None
    ) -> AttendanceStatus:
        if first_in is None:
            return AttendanceStatus.PRESENT
        position, in_time = first_in
        if shift.is_overnight:
            # after-midnight check-ins sit past 1440 on the shift timeline
            late = position > to_minutes(shift.start)
        else:
            late = is_late(in_time, shift.start)
        return AttendanceStatus.LATE if late else AttendanceStatus.PRESENT

    def complete_with_existing(
        self, fresh: DailyAttendanceRecord, existing: DailyAttendanceRecord
    ) -> DailyAttendanceRecord:
        """Combine a freshly merged record with the stored one for the same day.

        Keeps the earlier check-in and the later check-out of the two, plus
        the stored record's OT and deduction adjustments and its shift and
        salary snapshot. Records with a manual override are returned unchanged.
        """
        if existing.key != fresh.key:
            raise ValueError(
                f"Cannot combine records for {fresh.key} and {existing.key}"
            )
        if existing.manual_override:
            return existing
        # the configuration frozen on the stored day stays in effect
        fresh = replace(
            fresh,
            shift_snapshot=existing.shift_snapshot or fresh.shift_snapshot,
            salary_snapshot=existing.salary_snapshot or fresh.salary_snapshot,
        )
        if not existing.status.has_clock_times:
            return replace(
                fresh,
                ot_hours=existing.ot_hours,
                ot_multiplier=existing.ot_multiplier,
                deduction=existing.deduction,
            )

        shift = fresh.shift_snapshot
        window = self.config.pairing_window_hours

        def position(value: time) -> int:
            if shift is None:
                return to_minutes(value)
            return shift_timeline_minutes(value, shift, window)

        ins = [t for t in (fresh.in_time, existing.in_time) if t is not None]
        outs = [t for t in (fresh.out_time, existing.out_time) if t is not None]
        in_time = min(ins, key=position) if ins else None
        out_time = max(outs, key=position) if outs else None

        if shift is not None:
            first_in = (position(in_time), in_time) if in_time is not None else None
            status = self._status(shift, first_in)
        else:
            status = existing.status

        return replace(
            fresh,
            status=status,
            in_time=in_time,
            out_time=out_time,
            out_next_day=bool(
                out_time is not None and position(out_time) >= MINUTES_PER_DAY
            ),
            ot_hours=existing.ot_hours,
            ot_multiplier=existing.ot_multiplier,
            deduction=existing.deduction,
        )


def describe(record: DailyAttendanceRecord) -> str:
    """One-line "in/out" description used in processing logs."""
    in_text = format_time(record.in_time) or "--:--"
    out_text = format_time(record.out_time) or "--:--"
    suffix = " (next day)" if record.out_next_day else ""
    return f"In: {in_text} | Out: {out_text}{suffix}"
