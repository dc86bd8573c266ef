"""
Portfolio Metrics Engine

Derives occupancy, income, return, valuation-growth and cash-flow figures for
a real-estate investment portfolio, and computes realized profit on sale.
"""

from portfolio_engine.models import (
    OwnerSession,
    PortfolioMetrics,
    Property,
    Transaction,
    TransactionKind,
)
from portfolio_engine.repository import InMemoryPortfolioRepository, PortfolioRepository
from portfolio_engine.services import PortfolioService

__version__ = "0.1.0"

__all__ = [
    "OwnerSession",
    "PortfolioMetrics",
    "Property",
    "Transaction",
    "TransactionKind",
    "PortfolioRepository",
    "InMemoryPortfolioRepository",
    "PortfolioService",
]
