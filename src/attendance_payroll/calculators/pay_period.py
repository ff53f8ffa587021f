"""Company pay-period boundaries and service-length eligibility."""

from __future__ import annotations

from datetime import date, timedelta

from attendance_payroll.calculators.types import LeaveEligibility, PayPeriod
from attendance_payroll.config import PayrollPolicy


def _add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


class PayPeriodResolver:
    """Resolves the company pay period containing a reference date.

    A period runs from the start day (18th by default) of one month to the
    day before it (17th) in the next month:

        2025-01-20  ->  2025-01-18 .. 2025-02-17
        2025-01-10  ->  2024-12-18 .. 2025-01-17

    "Today" is always an explicit argument.
    """

    def __init__(self, policy: PayrollPolicy | None = None):
        self.policy = policy or PayrollPolicy()

    def current_period(self, reference: date, to_date: bool = False) -> PayPeriod:
        """Pay period containing ``reference``.

        Args:
            reference: The date to resolve
            to_date: If True, clamp the end to ``reference`` so an open
                period never reports days that have not happened yet

        Returns:
            The pay period
        """
        start_day = self.policy.pay_period_start_day
        if reference.day >= start_day:
            start = date(reference.year, reference.month, start_day)
            end_year, end_month = _add_months(reference.year, reference.month, 1)
        else:
            start_year, start_month = _add_months(reference.year, reference.month, -1)
            start = date(start_year, start_month, start_day)
            end_year, end_month = reference.year, reference.month
        end = date(end_year, end_month, start_day - 1)

        if to_date:
            end = min(end, reference)
        return PayPeriod(start_date=start, end_date=end)

    def previous_period(self, reference: date) -> PayPeriod:
        """The complete period before the one containing ``reference``."""
        current = self.current_period(reference)
        return self.current_period(current.start_date - timedelta(days=1))

    def recent_periods(self, reference: date, count: int = 3) -> list[PayPeriod]:
        """The last ``count`` complete periods, most recent first."""
        periods: list[PayPeriod] = []
        anchor = reference
        for _ in range(count):
            period = self.previous_period(anchor)
            periods.append(period)
            anchor = period.start_date
        return periods

    def leave_eligibility(self, joining_date: date, reference: date) -> LeaveEligibility:
        """Whether ``reference - joining_date`` reaches the eligibility window."""
        required = self.policy.leave_eligibility_days
        days_of_service = (reference - joining_date).days
        return LeaveEligibility(
            eligible=days_of_service >= required,
            days_of_service=days_of_service,
            days_until_eligible=max(0, required - days_of_service),
        )

    def leave_eligible(self, joining_date: date, reference: date) -> bool:
        return self.leave_eligibility(joining_date, reference).eligible
