"""Attendance-based performance scoring."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from attendance_payroll.calculators.money import ZERO
from attendance_payroll.calculators.types import (
    PayrollSummary,
    PerformanceRating,
    PerformanceScore,
)
from attendance_payroll.config import ScoringWeights

HUNDRED = Decimal("100")
SCORE_PRECISION = Decimal("0.1")


def _percent(part: int, whole: int) -> Decimal:
    if whole <= 0:
        return ZERO
    return Decimal(part) * HUNDRED / Decimal(whole)


class PerformanceScorer:
    """Scores a pay-period summary.

    score = presence_weight * presence_ratio
            - late_penalty * late_ratio
            - absence_penalty * absence_ratio

    clamped to [0, 100] and banded into Excellent/Good/Average/Poor by the
    thresholds in :class:`ScoringWeights`.
    """

    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or ScoringWeights()

    def score(self, summary: PayrollSummary) -> PerformanceScore:
        total = summary.total_working_days
        worked = summary.present_days + summary.late_days

        if total <= 0:
            return PerformanceScore(
                performance_score=ZERO,
                rating=PerformanceRating.POOR,
                attendance_rate=ZERO,
                punctuality_rate=HUNDRED,
            )

        presence = worked
        if self.weights.leave_counts_as_present:
            presence += summary.leave_days

        days = Decimal(total)
        raw = (
            self.weights.presence_weight * Decimal(presence) / days
            - self.weights.late_penalty * Decimal(summary.late_days) / days
            - self.weights.absence_penalty * Decimal(summary.absent_days) / days
        )
        score = min(HUNDRED, max(ZERO, raw)).quantize(
            SCORE_PRECISION, rounding=ROUND_HALF_UP
        )

        attendance = min(HUNDRED, _percent(worked + summary.leave_days, total))
        punctuality = _percent(summary.present_days, worked) if worked else HUNDRED

        return PerformanceScore(
            performance_score=score,
            rating=self.rate(score),
            attendance_rate=attendance.quantize(SCORE_PRECISION, rounding=ROUND_HALF_UP),
            punctuality_rate=punctuality.quantize(SCORE_PRECISION, rounding=ROUND_HALF_UP),
        )

    def rate(self, score: Decimal) -> PerformanceRating:
        """Map a score onto the rating bands."""
        if score >= self.weights.excellent_threshold:
            return PerformanceRating.EXCELLENT
        if score >= self.weights.good_threshold:
            return PerformanceRating.GOOD
        if score >= self.weights.average_threshold:
            return PerformanceRating.AVERAGE
        return PerformanceRating.POOR
