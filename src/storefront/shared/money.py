"""Monetary rounding used by pricing and totals."""

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def round_money(amount) -> float:
    """Round an amount to cents, half away from zero."""
    return float(Decimal(str(amount or 0)).quantize(_CENT, rounding=ROUND_HALF_UP))


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (e.g. 12.34 EUR) to minor units (1234)."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
