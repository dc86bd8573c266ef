"""
Record and value-object models for the portfolio engine.

Records (Property, Transaction) are immutable snapshots supplied by the data
store. Value objects are derived on every request and never stored.

Optional numeric fields follow one convention: ``None`` means "no data" and is
distinct from ``0``. Numeric strings are coerced to floats.
"""

from datetime import date
from typing import List, Optional
import enum

from pydantic import BaseModel, Field


class TransactionKind(str, enum.Enum):
    """Direction of a transaction."""
    income = "income"
    expense = "expense"


class Property(BaseModel):
    """A unit of portfolio inventory."""

    id: str
    name: Optional[str] = None
    property_type: Optional[str] = None
    address: Optional[str] = None
    owner_id: Optional[str] = None

    # Acquisition
    purchase_value: float = Field(gt=0)
    acquisition_costs: float = Field(default=0.0, ge=0)
    acquisition_date: Optional[date] = None

    # Valuation and rent
    current_value: Optional[float] = Field(default=None, ge=0)
    rent_amount: Optional[float] = Field(default=None, ge=0)
    roi: Optional[float] = None  # Annualized, percent units

    class Config:
        frozen = True

    @property
    def is_occupied(self) -> bool:
        """True when the unit currently generates rent."""
        return self.rent_amount is not None and self.rent_amount > 0

    @property
    def has_valuation(self) -> bool:
        """True when a meaningful current value exists (zero counts as absent)."""
        return bool(self.current_value)

    @property
    def has_return_data(self) -> bool:
        return bool(self.roi)

    @property
    def cost_basis(self) -> float:
        """Purchase value plus recorded acquisition costs."""
        return self.purchase_value + self.acquisition_costs


class Transaction(BaseModel):
    """A dated income or expense entry linked to a property."""

    id: str
    property_id: str
    date: date
    amount: float = Field(gt=0)
    kind: TransactionKind
    description: Optional[str] = None
    category: Optional[str] = None

    class Config:
        frozen = True

    @property
    def signed_amount(self) -> float:
        """Amount with expenses negated."""
        if self.kind == TransactionKind.expense:
            return -self.amount
        return self.amount


class OwnerSession(BaseModel):
    """Caller identity used to scope portfolio queries."""

    user_id: str
    is_admin: bool = False

    class Config:
        frozen = True


class PortfolioMetrics(BaseModel):
    """Aggregate statistics for a set of properties."""

    total_properties: int = 0
    total_value: float = 0.0
    occupancy_rate: float = 0.0
    monthly_income: float = 0.0
    annual_return: float = 0.0
    value_growth: float = 0.0


class PropertyMetrics(BaseModel):
    """Statistics for a single property."""

    property_id: str
    is_occupied: bool
    monthly_income: float
    value_growth: Optional[float] = None
    roi: Optional[float] = None

    # Recorded transactions
    total_income: float = 0.0
    total_expenses: float = 0.0
    net_cash_flow: float = 0.0


class PropertyFigure(BaseModel):
    """One property's value of a metric, for side-by-side comparison."""

    property_id: str
    name: Optional[str] = None
    value: Optional[float] = None


class ReturnMetrics(BaseModel):
    """Operating yield of a set of properties over a range of months."""

    months: int = 0
    net_operating_income: float = 0.0  # Annualized income minus expenses
    cap_rate: float = 0.0  # Percent of current valuation
    cash_on_cash: float = 0.0  # Percent of cash invested


class MonthlyBucket(BaseModel):
    """Sum of transaction amounts for one calendar month."""

    period: date  # First day of the month
    value: float = 0.0

    @property
    def label(self) -> str:
        return self.period.strftime("%Y-%m")


class CashFlowBucket(BaseModel):
    """Income, expenses and net cash flow for one calendar month."""

    period: date
    income: float = 0.0
    expenses: float = 0.0
    net: float = 0.0
    roi: Optional[float] = None  # Monthly, percent of the reference basis

    @property
    def label(self) -> str:
        return self.period.strftime("%Y-%m")


class CategoryAmount(BaseModel):
    """Transaction total for a category."""

    category: str
    amount: float


class TransactionSummary(BaseModel):
    """Totals of one transaction kind over a range of months."""

    kind: Optional[TransactionKind] = None
    total: float = 0.0
    monthly_average: float = 0.0
    months: int = 0


class LiquidationResult(BaseModel):
    """Financial outcome of selling a property."""

    property_id: Optional[str] = None
    cost_basis: float
    sale_value: float
    gross_profit: float
    operating_cash_flow: float = 0.0
    sale_plus_operations: float
    net_profit: float
    includes_operations: bool = False
    annualized_return: Optional[float] = None  # Percent units
    equity_multiple: Optional[float] = None  # Money returned per unit invested


class PortfolioSnapshot(BaseModel):
    """Consistent copy of the records held by a repository."""

    properties: List[Property] = []
    transactions: List[Transaction] = []

    class Config:
        frozen = True
