"""
Services layer.
"""

from portfolio_engine.services.portfolio import PortfolioService

__all__ = ["PortfolioService"]
