"""Tests for attendance performance scoring."""

from decimal import Decimal

import pytest

from attendance_payroll.calculators.performance import PerformanceScorer
from attendance_payroll.calculators.types import PayrollSummary, PerformanceRating
from attendance_payroll.config import ScoringWeights


def summary(present=0, late=0, absent=0, leave=0) -> PayrollSummary:
    return PayrollSummary(
        base_salary=Decimal("0"),
        total_ot_amount=Decimal("0"),
        total_deduction=Decimal("0"),
        net_salary=Decimal("0"),
        total_working_days=present + late + absent + leave,
        present_days=present,
        late_days=late,
        absent_days=absent,
        leave_days=leave,
    )


class TestPerformanceScorer:
    """Test score, rates and bands."""

    def test_perfect_attendance(self):
        """Every day on time is a full score."""
        result = PerformanceScorer().score(summary(present=30))

        assert result.performance_score == Decimal("100")
        assert result.rating == PerformanceRating.EXCELLENT
        assert result.attendance_rate == Decimal("100")
        assert result.punctuality_rate == Decimal("100")

    def test_always_late(self):
        """Late every day loses the full late penalty."""
        result = PerformanceScorer().score(summary(late=10))

        assert result.performance_score == Decimal("75")
        assert result.rating == PerformanceRating.GOOD
        assert result.punctuality_rate == Decimal("0")

    def test_mixed_period(self):
        """80 presence - 5 lateness - 10 absence = 65."""
        result = PerformanceScorer().score(summary(present=6, late=2, absent=2))

        assert result.performance_score == Decimal("65.0")
        assert result.rating == PerformanceRating.AVERAGE
        assert result.attendance_rate == Decimal("80.0")
        assert result.punctuality_rate == Decimal("75.0")

    def test_score_is_clamped(self):
        """All absent would go negative; it stops at zero."""
        result = PerformanceScorer().score(summary(absent=10))

        assert result.performance_score == Decimal("0")
        assert result.rating == PerformanceRating.POOR

    def test_leave_presence_is_configurable(self):
        """Leave days count as presence unless configured otherwise."""
        mixed = summary(present=5, leave=5)

        assert PerformanceScorer().score(mixed).performance_score == Decimal("100")
        strict = PerformanceScorer(ScoringWeights(leave_counts_as_present=False))
        assert strict.score(mixed).performance_score == Decimal("50")

    def test_empty_period(self):
        """No working days is a zero score."""
        result = PerformanceScorer().score(summary())

        assert result.performance_score == Decimal("0")
        assert result.rating == PerformanceRating.POOR

    @pytest.mark.parametrize(
        "score,rating",
        [
            ("90", PerformanceRating.EXCELLENT),
            ("89.9", PerformanceRating.GOOD),
            ("75", PerformanceRating.GOOD),
            ("60", PerformanceRating.AVERAGE),
            ("59.9", PerformanceRating.POOR),
        ],
    )
    def test_bands(self, score, rating):
        """Thresholds are inclusive lower bounds."""
        assert PerformanceScorer().rate(Decimal(score)) == rating


class TestScoringWeights:
    """Test weight validation."""

    def test_negative_penalty(self):
        """Penalties cannot be negative."""
        with pytest.raises(ValueError):
            ScoringWeights(late_penalty=Decimal("-1"))

    def test_thresholds_out_of_order(self):
        """Bands must be descending."""
        with pytest.raises(ValueError):
            ScoringWeights(good_threshold=Decimal("95"))
