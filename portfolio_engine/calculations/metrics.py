"""
Portfolio Metrics

Derives occupancy, income, return and valuation-growth figures from property
snapshots, at portfolio and single-property granularity.

Missing optional data (no current value, no ROI) is excluded from sums and
averages rather than counted as zero. Every ratio is guarded, so an empty
portfolio yields all-zero metrics.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from portfolio_engine.calculations.money import (
    annualize_monthly,
    growth_percent,
    mean,
    percent_of,
    safe_divide,
)
from portfolio_engine.calculations.timeseries import monthly_cash_flow
from portfolio_engine.exceptions import InvalidInput
from portfolio_engine.models import (
    CategoryAmount,
    PortfolioMetrics,
    Property,
    PropertyFigure,
    PropertyMetrics,
    ReturnMetrics,
    Transaction,
    TransactionKind,
)

ROI_BASES = ("current_value", "purchase_value")


def _valuation(prop: Property) -> float:
    # Latest appraisal when there is one, otherwise historical cost
    return prop.current_value if prop.has_valuation else prop.purchase_value


def total_value(properties: Sequence[Property]) -> float:
    """Portfolio size at historical cost (sum of purchase values)."""
    return sum(prop.purchase_value for prop in properties)


def occupancy_rate(properties: Sequence[Property]) -> float:
    """
    Percentage of properties currently generating rent.

    Returns:
        Occupancy in [0, 100]; 0.0 for an empty portfolio
    """
    occupied = sum(1 for prop in properties if prop.is_occupied)
    return percent_of(occupied, len(properties))


def monthly_income(properties: Sequence[Property]) -> float:
    """Run-rate income: sum of current rents (absent rent counts as vacant)."""
    return sum(prop.rent_amount or 0.0 for prop in properties)


def annual_return(properties: Sequence[Property]) -> float:
    """Mean ROI over properties that carry return data (non-zero ROI)."""
    return mean(prop.roi for prop in properties if prop.has_return_data)


def value_growth(properties: Sequence[Property]) -> float:
    """
    Portfolio valuation growth in percent.

    Only properties with a current value take part, on both sides of the
    ratio.
    """
    valued = [prop for prop in properties if prop.has_valuation]
    purchased = sum(prop.purchase_value for prop in valued)
    current = sum(prop.current_value for prop in valued)
    return growth_percent(current, purchased)


def property_value_growth(prop: Property) -> Optional[float]:
    """Valuation growth of one property, or None when it was never appraised."""
    if not prop.has_valuation:
        return None
    return growth_percent(prop.current_value, prop.purchase_value)


def calculate_portfolio_metrics(properties: Iterable[Property]) -> PortfolioMetrics:
    """
    Compute the portfolio metrics value object.

    Args:
        properties: Property snapshot, optionally pre-filtered to an owner or
            a single property

    Returns:
        PortfolioMetrics with all figures in raw numbers
    """
    properties = list(properties)
    return PortfolioMetrics(
        total_properties=len(properties),
        total_value=total_value(properties),
        occupancy_rate=occupancy_rate(properties),
        monthly_income=monthly_income(properties),
        annual_return=annual_return(properties),
        value_growth=value_growth(properties),
    )


def calculate_property_roi(
    prop: Property, basis: str = "current_value"
) -> Optional[float]:
    """
    Engine-computed annualized gross yield of a property.

    ROI = 12 x monthly rent / valuation, in percent units. With the
    ``current_value`` basis the latest appraisal is used when one exists,
    falling back to the purchase value.

    Args:
        prop: Property to evaluate
        basis: "current_value" or "purchase_value"

    Returns:
        Annual ROI in percent, or None for a vacant property

    Raises:
        InvalidInput: If the basis name is unknown
    """
    if basis not in ROI_BASES:
        raise InvalidInput(f"Unknown ROI basis: {basis}")

    if not prop.is_occupied:
        return None

    valuation = prop.purchase_value
    if basis == "current_value":
        valuation = _valuation(prop)

    return percent_of(annualize_monthly(prop.rent_amount), valuation)


def with_computed_roi(
    properties: Iterable[Property], basis: str = "current_value"
) -> List[Property]:
    """Return copies of the properties with missing ROI filled in by the engine."""
    result = []
    for prop in properties:
        if not prop.has_return_data:
            roi = calculate_property_roi(prop, basis)
            if roi is not None:
                prop = prop.model_copy(update={"roi": roi})
        result.append(prop)
    return result


def calculate_property_metrics(
    prop: Property,
    transactions: Iterable[Transaction] = (),
    basis: str = "current_value",
) -> PropertyMetrics:
    """
    Compute the metrics of a single property.

    Transactions belonging to other properties are ignored. A stored ROI takes
    precedence over the engine-computed one.
    """
    income = 0.0
    expenses = 0.0
    for txn in transactions:
        if txn.property_id != prop.id:
            continue
        if txn.kind == TransactionKind.income:
            income += txn.amount
        else:
            expenses += txn.amount

    roi = prop.roi if prop.has_return_data else calculate_property_roi(prop, basis)

    return PropertyMetrics(
        property_id=prop.id,
        is_occupied=prop.is_occupied,
        monthly_income=prop.rent_amount or 0.0,
        value_growth=property_value_growth(prop),
        roi=roi,
        total_income=income,
        total_expenses=expenses,
        net_cash_flow=income - expenses,
    )


def split_by_occupancy(
    properties: Iterable[Property],
) -> Tuple[List[Property], List[Property]]:
    """Partition properties into (rented, vacant), preserving order."""
    rented = []
    vacant = []
    for prop in properties:
        if prop.is_occupied:
            rented.append(prop)
        else:
            vacant.append(prop)
    return rented, vacant


def expense_ratio(transactions: Iterable[Transaction]) -> float:
    """Expenses as a percentage of income (0.0 when there is no income)."""
    income = 0.0
    expenses = 0.0
    for txn in transactions:
        if txn.kind == TransactionKind.income:
            income += txn.amount
        else:
            expenses += txn.amount
    return percent_of(expenses, income)


def value_by_property_type(
    properties: Iterable[Property], uncategorized_label: str = "Other"
) -> List[CategoryAmount]:
    """
    Split the portfolio's historical cost by property type.

    Properties without a type are grouped under ``uncategorized_label``. The
    amounts add up to ``total_value``.

    Returns:
        CategoryAmount per type, largest first (ties by type name)
    """
    totals: Dict[str, float] = defaultdict(float)
    for prop in properties:
        totals[prop.property_type or uncategorized_label] += prop.purchase_value

    return [
        CategoryAmount(category=name, amount=amount)
        for name, amount in sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    ]


def roi_comparison(properties: Iterable[Property]) -> List[PropertyFigure]:
    """Each property's ROI in input order; None where it carries no return data."""
    return [
        PropertyFigure(
            property_id=prop.id,
            name=prop.name,
            value=prop.roi if prop.has_return_data else None,
        )
        for prop in properties
    ]


def calculate_return_metrics(
    properties: Iterable[Property],
    transactions: Iterable[Transaction],
    months: List[date],
) -> ReturnMetrics:
    """
    Compute cap rate and cash-on-cash return from recorded transactions.

    The net operating income is the average monthly net cash flow over
    ``months``, annualized. Only transactions of the given properties that
    fall inside the range count.

    Args:
        properties: Properties being evaluated
        transactions: Their transactions (others are ignored)
        months: First-of-month dates of the observation window

    Returns:
        ReturnMetrics where cap rate is NOI over current valuation and
        cash-on-cash is NOI over cash invested (cost basis), both in percent.
        An empty range or portfolio yields zeros.
    """
    properties = list(properties)
    months = list(months)
    property_ids = {prop.id for prop in properties}
    own = [txn for txn in transactions if txn.property_id in property_ids]

    net = sum(bucket.net for bucket in monthly_cash_flow(own, months))
    noi = annualize_monthly(safe_divide(net, len(months)))

    valuation = sum(_valuation(prop) for prop in properties)
    invested = sum(prop.cost_basis for prop in properties)

    return ReturnMetrics(
        months=len(months),
        net_operating_income=noi,
        cap_rate=percent_of(noi, valuation),
        cash_on_cash=percent_of(noi, invested),
    )
