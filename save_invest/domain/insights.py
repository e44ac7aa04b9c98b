"""Spending pattern insights and opportunity costs"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from save_invest.domain.classifier import normalize_title
from save_invest.domain.models import (
    ExpenseCategory,
    InvestmentVehicle,
    OpportunityCost,
    RecurringExpense,
    SpendingPatterns,
    Transaction,
)
from save_invest.domain.projection import yearly_growth_schedule
from save_invest.utils.date_utils import month_key, months_between

RECURRING_MIN_MONTHS = 3
TREND_MONTHS = 3
REFERENCE_TICKER = "SPY"


def analyze_spending_patterns(
    transactions: List[Transaction],
    lookback_start: date,
    today: date,
    recurring_min_months: int = RECURRING_MIN_MONTHS,
) -> SpendingPatterns:
    """
    Summarize spending behaviour over [lookback_start, today].

    - category_monthly_averages: total spend / months in the lookback (at least 1)
    - recurring_expenses: titles seen in at least recurring_min_months distinct months
    - category_trends: True when the latest of the last three active months
      is above the earliest of them
    """
    in_window = [t for t in transactions if lookback_start <= t.date <= today]
    month_count = max(1, months_between(lookback_start, today))

    by_category: Dict[ExpenseCategory, List[Transaction]] = defaultdict(list)
    for txn in in_window:
        by_category[txn.category].append(txn)

    averages = {c: sum(t.amount for t in txns) / month_count for c, txns in by_category.items()}

    active_months = sorted({month_key(t.date) for t in in_window})
    trends: Dict[ExpenseCategory, bool] = {}
    if len(active_months) >= TREND_MONTHS:
        first, last = active_months[-TREND_MONTHS], active_months[-1]
        for category, txns in by_category.items():
            first_total = sum(t.amount for t in txns if month_key(t.date) == first)
            last_total = sum(t.amount for t in txns if month_key(t.date) == last)
            trends[category] = last_total > first_total

    by_title: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in in_window:
        by_title[normalize_title(txn.title)].append(txn)

    recurring = []
    for title, txns in by_title.items():
        months = sorted({month_key(t.date) for t in txns})
        if len(months) < recurring_min_months:
            continue
        recurring.append(
            RecurringExpense(
                title=title,
                category=txns[0].category,
                average_amount=sum(t.amount for t in txns) / len(txns),
                occurrences=len(txns),
                months=months,
            )
        )
    recurring.sort(key=lambda r: (-r.average_amount, r.title))

    return SpendingPatterns(
        category_monthly_averages=averages,
        category_trends=trends,
        recurring_expenses=recurring,
    )


def pick_reference_vehicle(vehicles: Sequence[InvestmentVehicle]) -> Optional[InvestmentVehicle]:
    for vehicle in vehicles:
        if vehicle.ticker == REFERENCE_TICKER:
            return vehicle
    return vehicles[0] if vehicles else None


def calculate_opportunity_costs(
    discretionary_transactions: List[Transaction],
    vehicles: Sequence[InvestmentVehicle],
    years: int = 10,
) -> List[OpportunityCost]:
    """
    What each discretionary category's monthly spend would become if invested
    in the reference vehicle instead, largest category first.
    """
    vehicle = pick_reference_vehicle(vehicles)
    if vehicle is None or not discretionary_transactions:
        return []

    totals: Dict[ExpenseCategory, float] = defaultdict(float)
    for txn in discretionary_transactions:
        totals[txn.category] += txn.amount

    rate = vehicle.average_annual_return if vehicle.historical_returns else vehicle.annualized_return
    costs = [
        OpportunityCost(
            category=category,
            vehicle_id=vehicle.id,
            monthly_amount=amount,
            yearly_savings=amount * 12,
            years=years,
            schedule=yearly_growth_schedule(amount, rate, years),
        )
        for category, amount in totals.items()
    ]
    return sorted(costs, key=lambda c: (-c.monthly_amount, c.category.value))
