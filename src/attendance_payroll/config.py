"""Configuration for the attendance payroll engine.

Two layers:
    1. Explicit policy objects (frozen dataclasses) passed to every
       calculation. Calculators never read the environment.
    2. ``Settings`` loaded from the environment (and a .env file) by the
       CLI, which turns them into policy objects.

Pattern:
    policy = PayrollPolicy(
        standard_working_days=22,
        scoring=ScoringWeights(late_penalty=Decimal("30")),
    )
    breakdown = compute_daily_earning(record, employee, policy)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from functools import lru_cache

from dotenv import load_dotenv


class BasePayBasis(str, Enum):
    """Which duration base pay follows on a worked day."""

    CLOCKED = "clocked"  # actual in -> out duration
    SCHEDULED = "scheduled"  # scheduled shift duration


@dataclass(frozen=True)
class ScoringWeights:
    """
    Performance scoring weights and rating bands.

    score = presence_weight * presence_ratio
            - late_penalty * late_ratio
            - absence_penalty * absence_ratio

    Ratios are day counts over total working days. The score is clamped to
    [0, 100].

    Attributes:
        presence_weight: Points for full presence. Default 100.
        late_penalty: Points removed for a period where every day is late.
            Default 25.
        absence_penalty: Points removed for a period where every day is
            absent. Default 50.
        leave_counts_as_present: If True, leave days count toward presence.
            Default True.
        excellent_threshold: Minimum score rated Excellent. Default 90.
        good_threshold: Minimum score rated Good. Default 75.
        average_threshold: Minimum score rated Average. Default 60.
    """

    presence_weight: Decimal = Decimal("100")
    late_penalty: Decimal = Decimal("25")
    absence_penalty: Decimal = Decimal("50")
    leave_counts_as_present: bool = True
    excellent_threshold: Decimal = Decimal("90")
    good_threshold: Decimal = Decimal("75")
    average_threshold: Decimal = Decimal("60")

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("presence_weight", "late_penalty", "absence_penalty"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")
        if not (
            self.excellent_threshold >= self.good_threshold >= self.average_threshold >= 0
        ):
            raise ValueError(
                "rating thresholds must satisfy excellent >= good >= average >= 0"
            )


@dataclass(frozen=True)
class PayrollPolicy:
    """
    Company payroll policy.

    Attributes:
        standard_working_days: Working days per period used to pro-rate
            monthly salaries. Default 22.
        pay_period_start_day: Day of month a pay period starts on; it ends
            the day before in the following month. Default 18.
        leave_eligibility_days: Days of service before leave can be taken.
            Default 90.
        base_pay_basis: Whether worked-day base pay follows clocked or
            scheduled hours. Default clocked.
        scoring: Performance scoring weights.
    """

    standard_working_days: int = 22
    pay_period_start_day: int = 18
    leave_eligibility_days: int = 90
    base_pay_basis: BasePayBasis = BasePayBasis.CLOCKED
    scoring: ScoringWeights = field(default_factory=ScoringWeights)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.standard_working_days < 1:
            raise ValueError("standard_working_days must be at least 1")
        if not 2 <= self.pay_period_start_day <= 28:
            raise ValueError("pay_period_start_day must be between 2 and 28")
        if self.leave_eligibility_days < 0:
            raise ValueError("leave_eligibility_days cannot be negative")
        object.__setattr__(self, "base_pay_basis", BasePayBasis(self.base_pay_basis))


@dataclass(frozen=True)
class ImportConfig:
    """
    Bulk attendance import configuration.

    Attributes:
        pairing_window_hours: For overnight shifts, how far past shift start
            a punch on the next calendar day still belongs to the shift.
            Default 14.
        year_min: Earliest accepted year in row dates. Default 1900.
        year_max: Latest accepted year in row dates. Default 2100.
    """

    pairing_window_hours: int = 14
    year_min: int = 1900
    year_max: int = 2100

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.pairing_window_hours <= 24:
            raise ValueError("pairing_window_hours must be between 1 and 24")
        if self.year_min > self.year_max:
            raise ValueError("year_min cannot exceed year_max")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    standard_working_days: int
    pay_period_start_day: int
    leave_eligibility_days: int
    base_pay_basis: str
    pairing_window_hours: int
    engine_version: str
    log_level: str

    @classmethod
    def from_env(cls, env_file: str | None = None) -> Settings:
        """Load settings from environment variables (and an optional .env file)."""
        load_dotenv(env_file)

        return cls(
            standard_working_days=int(os.getenv("STANDARD_WORKING_DAYS", "22")),
            pay_period_start_day=int(os.getenv("PAY_PERIOD_START_DAY", "18")),
            leave_eligibility_days=int(os.getenv("LEAVE_ELIGIBILITY_DAYS", "90")),
            base_pay_basis=os.getenv("BASE_PAY_BASIS", BasePayBasis.CLOCKED.value),
            pairing_window_hours=int(os.getenv("PAIRING_WINDOW_HOURS", "14")),
            engine_version=os.getenv("ENGINE_VERSION", "1.0.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def policy(self) -> PayrollPolicy:
        """Build the payroll policy these settings describe."""
        return PayrollPolicy(
            standard_working_days=self.standard_working_days,
            pay_period_start_day=self.pay_period_start_day,
            leave_eligibility_days=self.leave_eligibility_days,
            base_pay_basis=BasePayBasis(self.base_pay_basis.lower()),
        )

    def import_config(self) -> ImportConfig:
        """Build the import configuration these settings describe."""
        return ImportConfig(pairing_window_hours=self.pairing_window_hours)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
