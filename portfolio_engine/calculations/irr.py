"""
Annualized Return Solver

XIRR over dated cash flows using Newton-Raphson, matching Excel's XIRR
(actual/365 day count). Rates are decimals here (0.15 = 15%); callers convert
to percent units.
"""

from typing import Callable, List
from datetime import date

MAX_ITERATIONS = 100
TOLERANCE = 1e-7
DEFAULT_GUESS = 0.1
DAYS_PER_YEAR = 365.0


def _year_fractions(dates: List[date]) -> List[float]:
    """Years elapsed from the first date to each date."""
    base_date = dates[0]
    return [(d - base_date).days / DAYS_PER_YEAR for d in dates]


def _validate(cash_flows: List[float], dates: List[date]) -> None:
    if len(cash_flows) != len(dates):
        raise ValueError("Cash flows and dates arrays must have same length")

    if len(cash_flows) < 2:
        raise ValueError("At least 2 cash flows required")

    if not any(cf > 0 for cf in cash_flows) or not any(cf < 0 for cf in cash_flows):
        raise ValueError("Cash flows must contain both positive and negative values")


def _newton(
    value: Callable[[float], float],
    derivative: Callable[[float], float],
    guess: float,
) -> float:
    rate = guess

    for _ in range(MAX_ITERATIONS):
        dvalue = derivative(rate)
        if abs(dvalue) < TOLERANCE:
            raise ValueError("XIRR calculation failed: derivative too small")

        new_rate = rate - value(rate) / dvalue
        if new_rate <= -1:
            # Overshoot past -100%: move halfway towards -1 instead
            new_rate = (rate - 1) / 2

        if abs(new_rate - rate) < TOLERANCE:
            return new_rate

        rate = new_rate

    raise ValueError("XIRR calculation did not converge")


def calculate_xnpv(
    cash_flows: List[float], dates: List[date], discount_rate: float
) -> float:
    """Calculate XNPV (NPV with specific dates)."""
    if len(cash_flows) != len(dates):
        raise ValueError("Cash flows and dates arrays must have same length")

    years = _year_fractions(dates)
    return sum(cf / ((1 + discount_rate) ** t) for cf, t in zip(cash_flows, years))


def calculate_xirr(
    cash_flows: List[float], dates: List[date], guess: float = DEFAULT_GUESS
) -> float:
    """
    Calculate XIRR (IRR with specific dates).

    Args:
        cash_flows: Cash flows (negative = outflow, positive = inflow)
        dates: Date of each cash flow, first one being the investment date
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        Annual IRR as decimal

    Raises:
        ValueError: If XIRR cannot be calculated
    """
    _validate(cash_flows, dates)
    years = _year_fractions(dates)

    def xnpv(rate: float) -> float:
        return sum(cf / ((1 + rate) ** t) for cf, t in zip(cash_flows, years))

    def dxnpv(rate: float) -> float:
        return sum(-t * cf / ((1 + rate) ** (t + 1)) for cf, t in zip(cash_flows, years))

    return _newton(xnpv, dxnpv, guess)


def equity_multiple(cash_flows: List[float]) -> float:
    """
    Money returned per unit of money invested (2.0 = 2.0x).

    Raises:
        ValueError: If there is no outflow to measure against
    """
    invested = -sum(cf for cf in cash_flows if cf < 0)
    if invested == 0:
        raise ValueError("No investment (outflows) found")

    returned = sum(cf for cf in cash_flows if cf > 0)
    return returned / invested
