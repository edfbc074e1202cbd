from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Quantize to two decimal places, rounding half away from zero."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, rate: Decimal) -> Decimal:
    return to_money(Decimal(amount) * Decimal(rate) / Decimal(100))
