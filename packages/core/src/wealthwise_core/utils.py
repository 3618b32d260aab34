"""Decimal and calendar helpers shared by the calculators."""

import calendar
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CENT = Decimal("0.01")


def coerce_decimal(value: Any) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value (int, float, str or Decimal). None maps to 0.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning 0 when the result would be undefined.

    A zero or non-finite denominator, or a non-finite numerator, yields 0
    instead of NaN/Infinity.
    """
    numerator = coerce_decimal(numerator)
    denominator = coerce_decimal(denominator)
    if not numerator.is_finite() or not denominator.is_finite():
        return Decimal("0")
    if denominator == 0:
        return Decimal("0")
    return numerator / denominator


def add_months(start: date, months: int) -> date:
    """Shift a date by whole calendar months.

    The day is clamped to the last day of the target month, so Jan 31 plus
    one month is Feb 28 (or 29).
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def same_month(value: date, reference: date) -> bool:
    """True when both dates fall in the same calendar month and year."""
    return value.year == reference.year and value.month == reference.month


__all__ = [
    "CENT",
    "coerce_decimal",
    "round_money",
    "safe_ratio",
    "add_months",
    "same_month",
]
