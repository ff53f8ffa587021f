"""Currency and hour rounding rules.

Rounding:
- Money to 2 decimals (ROUND_HALF_UP) on every breakdown field
- Internal compute at full Decimal precision
- Hours reported to 4 decimals
- Period totals are sums of already-rounded day amounts, so they never drift
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
HOURS_PRECISION = Decimal("0.0001")
OUTPUT_PRECISION = Decimal("0.01")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_UP)


def round_hours(hours: Decimal) -> Decimal:
    """Round hours to 4 decimal places."""
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


def to_decimal(value: object) -> Decimal:
    """Convert ints, strings and Decimals to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)  # type: ignore[arg-type]
