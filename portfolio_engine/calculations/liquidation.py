"""
Liquidation Calculations

Computes the financial outcome of selling a property. The calculator only
returns figures; removing the property from the active portfolio is left to
the caller once the sale is confirmed.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from portfolio_engine.calculations.irr import calculate_xirr, equity_multiple
from portfolio_engine.exceptions import InvalidInput
from portfolio_engine.models import LiquidationResult, Property, Transaction

logger = logging.getLogger(__name__)


def _annualized_return(
    cost_basis: float,
    sale_value: float,
    acquisition_date: date,
    sale_date: date,
    dated_cash_flows: Iterable[Tuple[date, float]],
) -> Optional[float]:
    """XIRR of the holding period in percent units, None if it cannot be solved."""
    operations = sorted(
        (day, amount)
        for day, amount in dated_cash_flows
        if acquisition_date <= day <= sale_date
    )
    flows = [(acquisition_date, -cost_basis)] + operations + [(sale_date, sale_value)]

    try:
        rate = calculate_xirr([amount for _, amount in flows], [day for day, _ in flows])
    except ValueError as e:
        logger.warning(f"Annualized return unavailable: {e}")
        return None

    return rate * 100


def calculate_liquidation(
    sale_value: float,
    cost_basis: Optional[float],
    operating_cash_flow: float = 0.0,
    include_operations: bool = False,
    property_id: Optional[str] = None,
    acquisition_date: Optional[date] = None,
    sale_date: Optional[date] = None,
    dated_cash_flows: Optional[List[Tuple[date, float]]] = None,
) -> LiquidationResult:
    """
    Calculate the profit realized by selling a property.

    Both the sale-only figure (``gross_profit``) and the sale-plus-operations
    figure are always reported; ``include_operations`` selects which one
    becomes ``net_profit``.

    Args:
        sale_value: Agreed sale price
        cost_basis: Purchase value plus acquisition costs
        operating_cash_flow: Net rental income minus expenses over the holding
            period
        include_operations: Report the sale-plus-operations figure as net profit
        property_id: Property being sold, echoed in the result
        acquisition_date: Start of the holding period
        sale_date: End of the holding period
        dated_cash_flows: (date, signed amount) operating flows, used for the
            annualized return when operations are included

    Returns:
        LiquidationResult

    Raises:
        InvalidInput: If the sale value is negative, the cost basis is missing
            or not positive, or the sale precedes the acquisition
    """
    if sale_value is None or sale_value < 0:
        raise InvalidInput(f"Sale value must be a non-negative amount: {sale_value}")

    if cost_basis is None:
        raise InvalidInput("Cost basis is required to liquidate a property")

    if cost_basis <= 0:
        raise InvalidInput(f"Cost basis must be positive: {cost_basis}")

    if acquisition_date and sale_date and sale_date < acquisition_date:
        raise InvalidInput(
            f"Sale date {sale_date} precedes acquisition date {acquisition_date}"
        )

    gross_profit = sale_value - cost_basis
    sale_plus_operations = gross_profit + operating_cash_flow
    net_profit = sale_plus_operations if include_operations else gross_profit

    operations = dated_cash_flows if include_operations and dated_cash_flows else []

    multiple_flows = [-cost_basis, sale_value]
    if include_operations:
        if operations:
            multiple_flows += [amount for _, amount in operations]
        else:
            multiple_flows.append(operating_cash_flow)

    annualized_return = None
    if acquisition_date and sale_date and sale_date > acquisition_date:
        annualized_return = _annualized_return(
            cost_basis, sale_value, acquisition_date, sale_date, operations
        )

    return LiquidationResult(
        property_id=property_id,
        cost_basis=cost_basis,
        sale_value=sale_value,
        gross_profit=gross_profit,
        operating_cash_flow=operating_cash_flow,
        sale_plus_operations=sale_plus_operations,
        net_profit=net_profit,
        includes_operations=include_operations,
        annualized_return=annualized_return,
        equity_multiple=equity_multiple(multiple_flows),
    )


def liquidate_property(
    prop: Property,
    sale_value: float,
    transactions: Iterable[Transaction] = (),
    include_operations: bool = False,
    sale_date: Optional[date] = None,
) -> LiquidationResult:
    """
    Calculate the liquidation figures of a property from its records.

    The cost basis comes from the property; the operating cash flow is the
    net of the property's own transactions inside the holding period (from
    the acquisition date, when known, up to the sale date).
    """
    acquired = prop.acquisition_date
    operations = [
        (txn.date, txn.signed_amount)
        for txn in transactions
        if txn.property_id == prop.id
        and (acquired is None or txn.date >= acquired)
        and (sale_date is None or txn.date <= sale_date)
    ]

    return calculate_liquidation(
        sale_value=sale_value,
        cost_basis=prop.cost_basis,
        operating_cash_flow=sum(amount for _, amount in operations),
        include_operations=include_operations,
        property_id=prop.id,
        acquisition_date=prop.acquisition_date,
        sale_date=sale_date,
        dated_cash_flows=operations,
    )
