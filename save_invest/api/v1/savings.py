"""Spending, savings potential, projection and insight endpoints"""

import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from save_invest.api.v1.schemas import (
    CategoryTotal,
    InsightsResponse,
    MonthlySummarySchema,
    OpportunityCostSchema,
    ProjectionRequest,
    ProjectionSchema,
    RecurringExpenseSchema,
    SavingsPotentialSchema,
    SpendingSummaryResponse,
    YearlyProjectionSchema,
)
from save_invest.api.dependencies import get_request_id, get_store, resolve_window
from save_invest.config import settings
from save_invest.domain.aggregation import aggregate, summarize_by_month
from save_invest.domain.exceptions import InvalidInputError
from save_invest.domain.insights import analyze_spending_patterns, calculate_opportunity_costs
from save_invest.domain.models import SpendingAggregate
from save_invest.domain.projection import project, yearly_growth_schedule
from save_invest.domain.savings import calculate_savings_potential
from save_invest.infrastructure.database.store import FinanceStore
from save_invest.utils.date_utils import add_months

router = APIRouter()


def load_aggregate(store: FinanceStore, user_id: str, window_start: date, window_end: date) -> SpendingAggregate:
    """Aggregate one user's stored transactions for a window, honoring category preferences"""
    transactions = store.load_transactions(user_id, window_start, window_end)
    preferences = store.load_category_preferences(user_id)
    return aggregate(transactions, window_start, window_end, preferences)


@router.get("/spending/summary", response_model=SpendingSummaryResponse)
def get_spending_summary(
    user_id: str,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
    store: FinanceStore = Depends(get_store),
):
    """Category totals and monthly necessary/discretionary split for a window"""
    start, end = resolve_window(window_start, window_end)
    transactions = store.load_transactions(user_id, start, end)
    preferences = store.load_category_preferences(user_id)
    spending = aggregate(transactions, start, end, preferences)

    return SpendingSummaryResponse(
        user_id=user_id,
        window_start=start,
        window_end=end,
        transaction_count=spending.transaction_count,
        total_spend=spending.total_spend,
        discretionary_spend=spending.discretionary_spend,
        discretionary_count=len(spending.discretionary_transactions),
        per_category_total=[CategoryTotal(category=c, total=t) for c, t in spending.per_category_total],
        monthly=[MonthlySummarySchema.model_validate(m) for m in summarize_by_month(transactions, preferences)],
    )


@router.get("/savings/potential", response_model=SavingsPotentialSchema)
def get_savings_potential(
    user_id: str,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
    store: FinanceStore = Depends(get_store),
):
    """
    Savings scenarios and reduction opportunities from discretionary spending.

    A user with no discretionary spending gets an all-zero report, not an error.
    """
    start, end = resolve_window(window_start, window_end)
    spending = load_aggregate(store, user_id, start, end)
    report = calculate_savings_potential(
        spending.discretionary_transactions,
        guard_ratio=settings.savings_pattern_guard_ratio,
    )
    return SavingsPotentialSchema.model_validate(report)


@router.post("/projection", response_model=ProjectionSchema)
def create_projection(request_body: ProjectionRequest, request: Request):
    """Future value of a monthly contribution plan"""
    try:
        projection = project(
            request_body.monthly_contribution,
            request_body.annual_return_percent,
            request_body.years,
        )
    except InvalidInputError as e:
        logging.warning(f"Invalid projection input: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))
    return ProjectionSchema.model_validate(projection)


@router.get("/projection/schedule", response_model=List[YearlyProjectionSchema])
def get_projection_schedule(
    monthly_contribution: float,
    annual_return_percent: float,
    years: int = Query(settings.default_projection_years, ge=0, le=100),
):
    """Year-by-year contributions, returns and balance"""
    try:
        schedule = yearly_growth_schedule(monthly_contribution, annual_return_percent, years)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return [YearlyProjectionSchema.model_validate(y) for y in schedule]


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    user_id: str,
    today: Optional[date] = None,
    store: FinanceStore = Depends(get_store),
):
    """
    Spending patterns over the lookback period and what the current
    window's discretionary spending would grow to if invested instead.
    """
    end = today or date.today()
    lookback_start = add_months(end, -settings.insights_lookback_months)
    history = store.load_transactions(user_id, lookback_start, end)
    patterns = analyze_spending_patterns(history, lookback_start, end)

    window_start, window_end = resolve_window(None, end)
    spending = load_aggregate(store, user_id, window_start, window_end)
    costs = calculate_opportunity_costs(
        spending.discretionary_transactions,
        store.load_investment_vehicles(),
        years=settings.default_projection_years,
    )

    return InsightsResponse(
        user_id=user_id,
        category_monthly_averages=patterns.category_monthly_averages,
        category_trends=patterns.category_trends,
        recurring_expenses=[RecurringExpenseSchema.model_validate(r) for r in patterns.recurring_expenses],
        opportunity_costs=[OpportunityCostSchema.model_validate(c) for c in costs],
    )
