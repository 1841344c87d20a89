"""Utility helpers for calculator modules."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
_WHOLE_POUND = Decimal("1")


def round_pounds(value: Decimal) -> Decimal:
    """Round ``value`` to whole pounds, halves away from zero."""

    return value.quantize(_WHOLE_POUND, rounding=ROUND_HALF_UP)


def safe_ratio(numerator: Decimal | int, denominator: Decimal | int) -> Decimal:
    """Return ``numerator / denominator`` or zero when the denominator is not positive."""

    if denominator <= 0:
        return ZERO
    return Decimal(numerator) / Decimal(denominator)


def apportion(value: Decimal, part: Decimal | int, whole: Decimal | int) -> Decimal:
    """Scale ``value`` by ``part / whole``, multiplying first to keep exact shares exact."""

    if whole <= 0:
        return ZERO
    return value * Decimal(part) / Decimal(whole)


def clamp_non_negative(value: Decimal) -> Decimal:
    return value if value > 0 else ZERO


def total(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def format_percentage(value: Decimal) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = value * 100
    if percentage == percentage.to_integral_value():
        return f"{int(percentage)}%"
    return f"{percentage.normalize():f}%"


__all__ = [
    "ZERO",
    "apportion",
    "clamp_non_negative",
    "format_percentage",
    "round_pounds",
    "safe_ratio",
    "total",
]
