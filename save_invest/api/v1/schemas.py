"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from typing import Dict, List, Optional, Union

from save_invest.domain.models import ExpenseCategory, InvestmentType, RiskLevel, RiskTolerance


class DomainSchema(BaseModel):
    """Response schema populated straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


# Classification


class ClassifyRequest(BaseModel):
    """Request body for POST /v1/classify"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    title: str = Field(..., description="Expense title as entered or imported")
    amount: Optional[Union[float, str]] = Field(None, description="Amount; unparseable values are treated as 0")
    category: ExpenseCategory


class ClassifyResponse(BaseModel):
    """Response for POST /v1/classify"""

    is_necessary: bool
    source: str
    normalized_title: str
    keyword_matches: List[str] = []
    warnings: List[str] = []


class OverrideRequest(BaseModel):
    """Request body for PUT /v1/overrides"""

    user_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    is_necessary: bool


class OverrideResponse(BaseModel):
    normalized_title: str
    is_necessary: bool


class CategoryPreferenceRequest(BaseModel):
    """Request body for PUT /v1/category-preferences; null clears the preference"""

    user_id: str = Field(..., min_length=1)
    category: ExpenseCategory
    is_necessary: Optional[bool] = None


class CategoryPreferenceResponse(BaseModel):
    category: ExpenseCategory
    is_necessary: Optional[bool]
    saved: bool


class CategorySuggestionRequest(BaseModel):
    title: str
    amount: float = 0.0


class CategorySuggestionResponse(BaseModel):
    category: ExpenseCategory
    typically_necessary: bool
    icon: str


# Expenses


class ExpenseCreateRequest(BaseModel):
    """Request body for POST /v1/expenses; omit is_necessary to let the classifier decide"""

    user_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, description="Amount in currency units")
    date: date
    category: ExpenseCategory
    is_necessary: Optional[bool] = None
    notes: Optional[str] = None


class ExpenseUpdateRequest(BaseModel):
    """Request body for PUT /v1/expenses/{expense_id}; omitted fields keep their stored value"""

    user_id: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    expense_date: Optional[date] = Field(None, alias="date")
    category: Optional[ExpenseCategory] = None
    is_necessary: Optional[bool] = Field(None, description="Setting this is a manual reclassification")
    notes: Optional[str] = None


class ExpenseResponse(DomainSchema):
    id: str
    title: str
    amount: float
    date: date
    category: ExpenseCategory
    is_necessary: bool
    notes: Optional[str] = None
    classification_source: Optional[str] = None


# Spending and savings


class CategoryTotal(BaseModel):
    category: ExpenseCategory
    total: float


class MonthlySummarySchema(DomainSchema):
    month: str
    total_amount: float
    necessary_amount: float
    discretionary_amount: float
    category_amounts: Dict[ExpenseCategory, float]


class SpendingSummaryResponse(BaseModel):
    """Response for GET /v1/spending/summary"""

    user_id: str
    window_start: date
    window_end: date
    transaction_count: int
    total_spend: float
    discretionary_spend: float
    discretionary_count: int
    per_category_total: List[CategoryTotal]
    monthly: List[MonthlySummarySchema]


class ReductionOptionSchema(DomainSchema):
    percentage: int
    savings: float
    description: str


class ReductionOpportunitySchema(DomainSchema):
    name: str
    category: ExpenseCategory
    icon: str
    current_monthly_cost: float
    reduction_options: List[ReductionOptionSchema]


class SavingsPotentialSchema(DomainSchema):
    total_discretionary_spend: float
    savings_at_20_percent: float
    savings_at_50_percent: float
    savings_at_70_percent: float
    per_category_totals: Dict[ExpenseCategory, float]
    specific_reduction_opportunities: List[ReductionOpportunitySchema]


# Projections


class ProjectionRequest(BaseModel):
    """Request body for POST /v1/projection"""

    monthly_contribution: float
    annual_return_percent: float
    years: int = Field(..., ge=0, le=100)


class ProjectionSchema(DomainSchema):
    monthly_contribution: float
    annual_return_percent: float
    horizon_years: int
    future_value: float
    total_contributions: float
    interest_earned: float


class YearlyProjectionSchema(DomainSchema):
    year: int
    total_contributions: float
    return_amount: float
    total_value: float
    return_percent: float


# Vehicles and plans


class YearlyReturnSchema(DomainSchema):
    year: int
    return_percent: float


class VehicleSchema(DomainSchema):
    id: str
    name: str
    ticker: str
    type: InvestmentType
    risk_level: RiskLevel
    annualized_return: float
    volatility: float
    sharpe_ratio: float
    historical_returns: List[YearlyReturnSchema] = []


class VehicleRefreshRequest(BaseModel):
    tickers: Optional[List[str]] = None


class VehicleListResponse(BaseModel):
    vehicles: List[VehicleSchema]


class AllocationSchema(DomainSchema):
    vehicle: VehicleSchema
    allocation_percent: float
    monthly_amount: float
    projections: List[ProjectionSchema]


class PlanRequest(BaseModel):
    """Request body for POST /v1/plan"""

    user_id: str = Field(..., min_length=1)
    risk_tolerance: RiskTolerance = RiskTolerance.MODERATE
    savings_target: Optional[float] = Field(None, ge=0, description="Monthly amount to invest")
    window_start: Optional[date] = None
    window_end: Optional[date] = None


class PlanResponse(DomainSchema):
    monthly_target: float
    risk_tolerance: RiskTolerance
    savings_potential: SavingsPotentialSchema
    allocations: List[AllocationSchema]
    portfolio_projections: List[ProjectionSchema]
    total_allocation_percent: float


# Insights


class RecurringExpenseSchema(DomainSchema):
    title: str
    category: ExpenseCategory
    average_amount: float
    occurrences: int
    months: List[str]


class OpportunityCostSchema(DomainSchema):
    category: ExpenseCategory
    vehicle_id: str
    monthly_amount: float
    yearly_savings: float
    years: int
    schedule: List[YearlyProjectionSchema]


class InsightsResponse(BaseModel):
    """Response for GET /v1/insights"""

    user_id: str
    category_monthly_averages: Dict[ExpenseCategory, float]
    category_trends: Dict[ExpenseCategory, bool]
    recurring_expenses: List[RecurringExpenseSchema]
    opportunity_costs: List[OpportunityCostSchema]
