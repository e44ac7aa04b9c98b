"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple
import uuid

# Floor applied to volatility before dividing in the Sharpe ratio
VOLATILITY_EPSILON = 1e-9
DEFAULT_RISK_FREE_RATE = 2.0


class ExpenseCategory(str, Enum):
    """Closed set of expense categories"""

    FOOD = "food"
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    HEALTHCARE = "healthcare"
    SHOPPING = "shopping"
    EDUCATION = "education"
    TRAVEL = "travel"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> Optional["ExpenseCategory"]:
        """Lenient lookup by value or name; None for anything unknown"""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        for category in cls:
            if category.value == key:
                return category
        return None


class InvestmentType(str, Enum):
    ETF = "etf"
    STOCK = "stock"
    BOND = "bond"
    INDEX = "index"
    CRYPTO = "crypto"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskTolerance(str, Enum):
    """User-declared willingness to accept volatility"""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class ExpenseFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def occurrences_per_month(self) -> float:
        return {
            ExpenseFrequency.DAILY: 30.0,
            ExpenseFrequency.WEEKLY: 4.3,
            ExpenseFrequency.MONTHLY: 1.0,
            ExpenseFrequency.YEARLY: 1.0 / 12.0,
        }[self]


@dataclass
class Transaction:
    """A logged expense owned by a single user"""

    title: str
    amount: float
    date: date
    category: ExpenseCategory
    is_necessary: bool
    owner_id: str
    notes: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class YearlyReturn:
    year: int
    return_percent: float


@dataclass
class InvestmentVehicle:
    """
    Candidate investment vehicle.

    sharpe_ratio is derived from annualized_return and volatility on every
    access so it can never go stale after a market data refresh.
    """

    id: str
    name: str
    ticker: str
    type: InvestmentType
    risk_level: RiskLevel
    annualized_return: float  # percent
    volatility: float  # percent
    historical_returns: List[YearlyReturn] = field(default_factory=list)
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE

    @property
    def sharpe_ratio(self) -> float:
        return (self.annualized_return - self.risk_free_rate) / max(self.volatility, VOLATILITY_EPSILON)

    @property
    def average_annual_return(self) -> float:
        """Arithmetic mean of historical yearly returns (0 when no history)"""
        if not self.historical_returns:
            return 0.0
        return sum(r.return_percent for r in self.historical_returns) / len(self.historical_returns)


@dataclass
class ReductionOption:
    percentage: int
    savings: float
    description: str


@dataclass
class ReductionOpportunity:
    """A standard expense pattern the user could cut back on"""

    name: str
    category: ExpenseCategory
    icon: str
    current_monthly_cost: float
    reduction_options: List[ReductionOption]


@dataclass
class SavingsPotentialReport:
    """Savings scenarios derived from discretionary spending"""

    total_discretionary_spend: float
    savings_by_percent: Dict[int, float]
    per_category_totals: Dict[ExpenseCategory, float]
    specific_reduction_opportunities: List[ReductionOpportunity]

    def savings_at_percent(self, percent: int) -> float:
        if percent in self.savings_by_percent:
            return self.savings_by_percent[percent]
        return self.total_discretionary_spend * percent / 100

    @property
    def savings_at_20_percent(self) -> float:
        return self.savings_at_percent(20)

    @property
    def savings_at_50_percent(self) -> float:
        return self.savings_at_percent(50)

    @property
    def savings_at_70_percent(self) -> float:
        return self.savings_at_percent(70)


@dataclass
class InvestmentProjection:
    """Future value of a stream of monthly contributions"""

    monthly_contribution: float
    annual_return_percent: float
    horizon_years: int
    future_value: float
    total_contributions: float
    interest_earned: float


@dataclass
class YearlyProjection:
    """One row of a year-by-year growth schedule"""

    year: int
    total_contributions: float
    return_amount: float
    total_value: float

    @property
    def return_percent(self) -> float:
        if self.total_contributions <= 0:
            return 0.0
        return self.return_amount / self.total_contributions * 100


@dataclass
class RecommendedAllocation:
    vehicle: InvestmentVehicle
    allocation_percent: float
    monthly_amount: float
    projections: List[InvestmentProjection]  # 1, 5, 10, 20 years


@dataclass
class SavingsAndInvestmentPlan:
    monthly_target: float
    risk_tolerance: RiskTolerance
    savings_potential: SavingsPotentialReport
    allocations: List[RecommendedAllocation]
    portfolio_projections: List[InvestmentProjection]  # 1, 5, 10, 20 years

    @property
    def total_allocation_percent(self) -> float:
        return sum(a.allocation_percent for a in self.allocations)


@dataclass
class SpendingAggregate:
    """Windowed spending totals"""

    window_start: date
    window_end: date
    per_category_total: List[Tuple[ExpenseCategory, float]]  # sorted for display
    discretionary_transactions: List[Transaction]
    transaction_count: int

    @property
    def total_spend(self) -> float:
        return sum(total for _, total in self.per_category_total)

    @property
    def discretionary_spend(self) -> float:
        return sum(t.amount for t in self.discretionary_transactions)


@dataclass
class MonthlyNecessitySummary:
    month: str  # "YYYY-MM"
    total_amount: float
    necessary_amount: float
    discretionary_amount: float
    category_amounts: Dict[ExpenseCategory, float]


@dataclass
class RecurringExpense:
    title: str
    category: ExpenseCategory
    average_amount: float
    occurrences: int
    months: List[str]


@dataclass
class SpendingPatterns:
    """Lookback analysis of a user's spending behaviour"""

    category_monthly_averages: Dict[ExpenseCategory, float]
    category_trends: Dict[ExpenseCategory, bool]  # True = increasing
    recurring_expenses: List[RecurringExpense]


@dataclass
class OpportunityCost:
    """What a discretionary category's monthly spend would grow into"""

    category: ExpenseCategory
    vehicle_id: str
    monthly_amount: float
    yearly_savings: float
    years: int
    schedule: List[YearlyProjection]


@dataclass
class VehicleMetrics:
    """Market statistics derived from a monthly price series"""

    ticker: str
    yearly_returns: List[YearlyReturn]
    annualized_return: float
    volatility: float
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE

    @property
    def sharpe_ratio(self) -> float:
        return (self.annualized_return - self.risk_free_rate) / max(self.volatility, VOLATILITY_EPSILON)
