"""
Monthly Time Series

Groups transactions into calendar-month buckets for trend reporting. Series
are dense: every month of the requested range is present, with 0 where no
transaction matched, so charts stay continuous.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from portfolio_engine.calculations.money import percent_of, safe_divide
from portfolio_engine.exceptions import InvalidInput
from portfolio_engine.models import (
    CashFlowBucket,
    CategoryAmount,
    MonthlyBucket,
    Transaction,
    TransactionKind,
    TransactionSummary,
)

MonthKey = Tuple[int, int]


def _month_key(day: date) -> MonthKey:
    return (day.year, day.month)


def month_range(start: date, end: date) -> List[date]:
    """
    Generate the months between two dates, inclusive.

    Days of month are ignored: both bounds are normalized to the first of
    their month.

    Args:
        start: Any day in the first month
        end: Any day in the last month

    Returns:
        First-of-month dates in chronological order

    Raises:
        InvalidInput: If ``end`` falls in a month before ``start``
    """
    first = start.replace(day=1)
    last = end.replace(day=1)
    if last < first:
        raise InvalidInput(f"Range end {end} precedes start {start}")

    delta = relativedelta(last, first)
    num_months = delta.years * 12 + delta.months
    return [first + relativedelta(months=i) for i in range(num_months + 1)]


def calendar_year(year: int) -> List[date]:
    """The twelve months of a calendar year."""
    return month_range(date(year, 1, 1), date(year, 12, 1))


def months_spanning(transactions: Iterable[Transaction]) -> List[date]:
    """Months from the earliest to the latest transaction (empty for no data)."""
    dates = [txn.date for txn in transactions]
    if not dates:
        return []
    return month_range(min(dates), max(dates))


def _monthly_totals(
    transactions: Iterable[Transaction], kind: Optional[TransactionKind] = None
) -> Dict[MonthKey, float]:
    totals: Dict[MonthKey, float] = defaultdict(float)
    for txn in transactions:
        if kind is not None and txn.kind != kind:
            continue
        totals[_month_key(txn.date)] += txn.amount
    return totals


def bucket_transactions(
    transactions: Iterable[Transaction],
    months: Iterable[date],
    kind: Optional[TransactionKind] = None,
) -> List[MonthlyBucket]:
    """
    Sum transaction amounts per calendar month.

    Args:
        transactions: Transactions, optionally pre-filtered by property
        months: Requested range, e.g. from ``calendar_year`` or ``month_range``
        kind: Only sum income or only expense entries (None sums both)

    Returns:
        One bucket per requested month, in the order given. Transactions
        outside the range are ignored.
    """
    totals = _monthly_totals(transactions, kind)
    return [
        MonthlyBucket(
            period=month.replace(day=1),
            value=totals.get(_month_key(month), 0.0),
        )
        for month in months
    ]


def monthly_cash_flow(
    transactions: Iterable[Transaction],
    months: Iterable[date],
    reference_basis: Optional[float] = None,
) -> List[CashFlowBucket]:
    """
    Income, expenses and net cash flow per calendar month.

    Monthly ROI is only reported when the caller supplies the basis it should
    be measured against (typically the property's purchase value).

    Args:
        transactions: Transactions, optionally pre-filtered by property
        months: Requested range
        reference_basis: Denominator for the monthly ROI figure

    Returns:
        One bucket per requested month

    Raises:
        InvalidInput: If the reference basis is negative
    """
    if reference_basis is not None and reference_basis < 0:
        raise InvalidInput(f"Reference basis must not be negative: {reference_basis}")

    transactions = list(transactions)
    income = _monthly_totals(transactions, TransactionKind.income)
    expenses = _monthly_totals(transactions, TransactionKind.expense)

    buckets = []
    for month in months:
        key = _month_key(month)
        month_income = income.get(key, 0.0)
        month_expenses = expenses.get(key, 0.0)
        net = month_income - month_expenses

        roi = None
        if reference_basis is not None:
            roi = percent_of(net, reference_basis)

        buckets.append(
            CashFlowBucket(
                period=month.replace(day=1),
                income=month_income,
                expenses=month_expenses,
                net=net,
                roi=roi,
            )
        )
    return buckets


def category_breakdown(
    transactions: Iterable[Transaction],
    kind: Optional[TransactionKind] = None,
    uncategorized_label: str = "Other",
) -> List[CategoryAmount]:
    """
    Total transaction amounts per category.

    Returns:
        Categories sorted by amount (largest first), then by name
    """
    totals: Dict[str, float] = defaultdict(float)
    for txn in transactions:
        if kind is not None and txn.kind != kind:
            continue
        totals[txn.category or uncategorized_label] += txn.amount

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [CategoryAmount(category=name, amount=amount) for name, amount in ordered]


def summarize_transactions(
    transactions: Iterable[Transaction],
    months: Iterable[date],
    kind: Optional[TransactionKind] = None,
) -> TransactionSummary:
    """Total and monthly average of the transactions inside a month range."""
    buckets = bucket_transactions(transactions, months, kind)
    total = sum(bucket.value for bucket in buckets)
    return TransactionSummary(
        kind=kind,
        total=total,
        monthly_average=safe_divide(total, len(buckets)),
        months=len(buckets),
    )
