"""
Money and Percentage Primitives

Amounts are plain floats in the portfolio's base currency. Percentages are
floats in percent units (8.57 means 8.57%), never fractions. Formatting is
left to the presentation layer.
"""

from typing import Iterable

MONTHS_PER_YEAR = 12


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def percent_of(part: float, whole: float) -> float:
    """
    Express ``part`` as a percentage of ``whole``.

    Returns:
        Percentage in percent units, 0.0 when ``whole`` is zero
    """
    return safe_divide(part, whole) * 100


def growth_percent(current: float, base: float) -> float:
    """Percentage change from ``base`` to ``current`` (0.0 for a zero base)."""
    return percent_of(current - base, base)


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean, 0.0 for an empty input."""
    values = list(values)
    return safe_divide(sum(values), len(values))


def annualize_monthly(amount: float) -> float:
    """Convert a monthly amount to an annual one."""
    return amount * MONTHS_PER_YEAR
