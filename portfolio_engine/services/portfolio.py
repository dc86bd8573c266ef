"""
Session-scoped portfolio queries.

Reads consistent snapshots from a repository, narrows them to the properties
the session may see and hands them to the calculation functions. Admin
sessions see every property; other sessions only see the properties they own.
"""

import logging
from datetime import date
from typing import List, Optional, Tuple

from portfolio_engine.calculations import filters, liquidation, metrics, timeseries
from portfolio_engine.config import Settings, get_settings
from portfolio_engine.exceptions import PropertyNotFoundError
from portfolio_engine.models import (
    CashFlowBucket,
    CategoryAmount,
    LiquidationResult,
    MonthlyBucket,
    OwnerSession,
    PortfolioMetrics,
    Property,
    PropertyFigure,
    PropertyMetrics,
    ReturnMetrics,
    Transaction,
    TransactionKind,
)
from portfolio_engine.repository import PortfolioRepository

logger = logging.getLogger(__name__)


class PortfolioService:
    """Portfolio metrics, series and liquidation for a caller's session."""

    def __init__(
        self,
        repository: PortfolioRepository,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.settings = settings or get_settings()

    def _scoped_records(
        self, session: OwnerSession, property_id: Optional[str] = None
    ) -> Tuple[List[Property], List[Transaction]]:
        """Properties visible to the session and the transactions attached to them."""
        snapshot = self.repository.snapshot()
        owner_id = None if session.is_admin else session.user_id
        properties = filters.filter_properties(
            snapshot.properties, owner_id=owner_id, property_id=property_id
        )

        if property_id is not None and not properties:
            raise PropertyNotFoundError(f"Property {property_id} not found")

        # Orphans are only reachable for portfolio-wide admin queries
        include_orphans = (
            self.settings.include_orphan_transactions
            and session.is_admin
            and property_id is None
        )
        transactions = filters.attach_transactions(
            snapshot.properties, snapshot.transactions, include_orphans=include_orphans
        )
        if not include_orphans:
            transactions = filters.filter_transactions(
                transactions, property_ids=[prop.id for prop in properties]
            )
        return properties, transactions

    def visible_properties(self, session: OwnerSession) -> List[Property]:
        """List the properties the session may see."""
        properties, _ = self._scoped_records(session)
        return properties

    def get_property(self, session: OwnerSession, property_id: str) -> Property:
        properties, _ = self._scoped_records(session, property_id)
        return properties[0]

    def portfolio_metrics(
        self, session: OwnerSession, property_id: Optional[str] = None
    ) -> PortfolioMetrics:
        """
        Compute portfolio metrics for the session, or for one of its properties.

        Properties without a stored ROI get the engine-computed one before
        averaging.
        """
        properties, _ = self._scoped_records(session, property_id)
        properties = metrics.with_computed_roi(properties, self.settings.roi_basis)
        result = metrics.calculate_portfolio_metrics(properties)
        logger.info(
            f"Computed metrics over {result.total_properties} properties "
            f"for user {session.user_id}"
        )
        return result

    def property_metrics(self, session: OwnerSession, property_id: str) -> PropertyMetrics:
        properties, transactions = self._scoped_records(session, property_id)
        return metrics.calculate_property_metrics(
            properties[0], transactions, self.settings.roi_basis
        )

    def monthly_series(
        self,
        session: OwnerSession,
        months: List[date],
        kind: Optional[TransactionKind] = None,
        property_id: Optional[str] = None,
    ) -> List[MonthlyBucket]:
        """Dense monthly totals of the session's transactions."""
        _, transactions = self._scoped_records(session, property_id)
        return timeseries.bucket_transactions(transactions, months, kind)

    def cash_flow(
        self,
        session: OwnerSession,
        months: List[date],
        property_id: Optional[str] = None,
        reference_basis: Optional[float] = None,
    ) -> List[CashFlowBucket]:
        """
        Monthly income, expenses and net cash flow.

        The reference basis for monthly ROI must be supplied explicitly; it is
        never inferred from the property.
        """
        _, transactions = self._scoped_records(session, property_id)
        return timeseries.monthly_cash_flow(transactions, months, reference_basis)

    def category_breakdown(
        self,
        session: OwnerSession,
        kind: TransactionKind,
        property_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[CategoryAmount]:
        _, transactions = self._scoped_records(session, property_id)
        transactions = filters.filter_transactions(transactions, start=start, end=end)
        return timeseries.category_breakdown(
            transactions, kind, self.settings.uncategorized_label
        )

    def value_by_property_type(self, session: OwnerSession) -> List[CategoryAmount]:
        """Historical cost of the session's properties split by type."""
        properties, _ = self._scoped_records(session)
        return metrics.value_by_property_type(
            properties, self.settings.uncategorized_label
        )

    def roi_comparison(self, session: OwnerSession) -> List[PropertyFigure]:
        """
        ROI of each visible property, side by side.

        Properties without a stored ROI get the engine-computed one; vacant
        properties report None.
        """
        properties, _ = self._scoped_records(session)
        properties = metrics.with_computed_roi(properties, self.settings.roi_basis)
        return metrics.roi_comparison(properties)

    def return_metrics(
        self,
        session: OwnerSession,
        months: List[date],
        property_id: Optional[str] = None,
    ) -> ReturnMetrics:
        """Cap rate and cash-on-cash return over ``months``."""
        properties, transactions = self._scoped_records(session, property_id)
        return metrics.calculate_return_metrics(properties, transactions, months)

    def preview_liquidation(
        self,
        session: OwnerSession,
        property_id: str,
        sale_value: float,
        sale_date: Optional[date] = None,
        include_operations: Optional[bool] = None,
    ) -> LiquidationResult:
        """Calculate the outcome of selling a property without removing it."""
        properties, transactions = self._scoped_records(session, property_id)
        if include_operations is None:
            include_operations = self.settings.liquidation_include_operations

        return liquidation.liquidate_property(
            properties[0],
            sale_value,
            transactions,
            include_operations=include_operations,
            sale_date=sale_date,
        )

    def liquidate(
        self,
        session: OwnerSession,
        property_id: str,
        sale_value: float,
        sale_date: Optional[date] = None,
        include_operations: Optional[bool] = None,
    ) -> LiquidationResult:
        """
        Sell a property.

        The figures are computed first; the property is only removed from the
        active portfolio when the calculation succeeds. Its transactions stay
        in the repository for record-keeping.
        """
        result = self.preview_liquidation(
            session, property_id, sale_value, sale_date, include_operations
        )
        self.repository.delete_property(property_id)
        logger.info(
            f"Liquidated property {property_id}: sale={result.sale_value}, "
            f"net_profit={result.net_profit}, multiple={result.equity_multiple}"
        )
        return result
