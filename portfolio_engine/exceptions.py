"""
Exception hierarchy for the portfolio engine.
"""


class PortfolioError(Exception):
    """Base exception for all portfolio engine errors."""


class InvalidInput(PortfolioError, ValueError):
    """Raised when a caller supplies a value the engine refuses to coerce."""


class PropertyNotFoundError(PortfolioError, LookupError):
    """Raised when a property does not exist or is outside the session scope."""


class TransactionNotFoundError(PortfolioError, LookupError):
    """Raised when a transaction does not exist."""


class ReferentialIntegrityError(PortfolioError):
    """Raised when a transaction references a property that does not exist."""
