"""
Portfolio Calculation Engine

Pure functions deriving portfolio metrics, monthly series and liquidation
figures from in-memory property and transaction snapshots.
"""

from portfolio_engine.calculations import (
    filters,
    irr,
    liquidation,
    metrics,
    money,
    timeseries,
)

__all__ = ["filters", "irr", "liquidation", "metrics", "money", "timeseries"]
