"""Savings potential calculator - reduction scenarios from discretionary spending"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence

from save_invest.domain.models import (
    ExpenseCategory,
    ExpenseFrequency,
    ReductionOpportunity,
    ReductionOption,
    SavingsPotentialReport,
    Transaction,
)

SAVINGS_SCENARIO_PERCENTS = (20, 50, 70)
REDUCTION_PERCENTS = (25, 50, 75)

# A standard pattern costing more than this share of the category's
# discretionary total is treated as an implausible match
DEFAULT_PATTERN_GUARD_RATIO = 0.8


@dataclass(frozen=True)
class StandardExpensePattern:
    name: str
    category: ExpenseCategory
    typical_cost: float
    frequency: ExpenseFrequency
    icon: str

    @property
    def monthly_cost(self) -> float:
        return self.typical_cost * self.frequency.occurrences_per_month


STANDARD_EXPENSE_PATTERNS: Sequence[StandardExpensePattern] = (
    # Food & dining
    StandardExpensePattern("Coffee Shop", ExpenseCategory.FOOD, 5.0, ExpenseFrequency.DAILY, "cup.and.saucer.fill"),
    StandardExpensePattern("Lunch Out", ExpenseCategory.FOOD, 15.0, ExpenseFrequency.DAILY, "takeoutbag.and.cup.and.straw.fill"),
    StandardExpensePattern("Dinner Out", ExpenseCategory.FOOD, 35.0, ExpenseFrequency.WEEKLY, "fork.knife"),
    StandardExpensePattern("Food Delivery", ExpenseCategory.FOOD, 25.0, ExpenseFrequency.WEEKLY, "bicycle"),
    # Entertainment
    StandardExpensePattern("Movie Theater", ExpenseCategory.ENTERTAINMENT, 15.0, ExpenseFrequency.WEEKLY, "film.fill"),
    StandardExpensePattern("Streaming Services", ExpenseCategory.ENTERTAINMENT, 15.0, ExpenseFrequency.MONTHLY, "tv.fill"),
    StandardExpensePattern("Concerts", ExpenseCategory.ENTERTAINMENT, 80.0, ExpenseFrequency.MONTHLY, "music.note"),
    StandardExpensePattern("Gaming", ExpenseCategory.ENTERTAINMENT, 60.0, ExpenseFrequency.MONTHLY, "gamecontroller.fill"),
    # Shopping
    StandardExpensePattern("Clothing", ExpenseCategory.SHOPPING, 100.0, ExpenseFrequency.MONTHLY, "tshirt.fill"),
    StandardExpensePattern("Electronics", ExpenseCategory.SHOPPING, 100.0, ExpenseFrequency.MONTHLY, "headphones"),
    StandardExpensePattern("Impulse Purchases", ExpenseCategory.SHOPPING, 50.0, ExpenseFrequency.WEEKLY, "bag.fill"),
    # Transportation
    StandardExpensePattern("Rideshare", ExpenseCategory.TRANSPORTATION, 20.0, ExpenseFrequency.WEEKLY, "car.fill"),
    # Travel
    StandardExpensePattern("Weekend Trips", ExpenseCategory.TRAVEL, 200.0, ExpenseFrequency.MONTHLY, "airplane"),
    StandardExpensePattern("Vacation", ExpenseCategory.TRAVEL, 1500.0, ExpenseFrequency.YEARLY, "beach.umbrella.fill"),
)


def _category_totals(transactions: List[Transaction]) -> Dict[ExpenseCategory, float]:
    totals: Dict[ExpenseCategory, float] = defaultdict(float)
    for txn in transactions:
        totals[txn.category] += txn.amount
    return dict(totals)


def find_reduction_opportunities(
    category_totals: Dict[ExpenseCategory, float],
    patterns: Sequence[StandardExpensePattern] = STANDARD_EXPENSE_PATTERNS,
    guard_ratio: float = DEFAULT_PATTERN_GUARD_RATIO,
) -> List[ReductionOpportunity]:
    """
    Match standard expense patterns against discretionary category totals.

    A pattern is skipped when its category has no discretionary spend, or when
    its monthly-equivalent cost exceeds guard_ratio of that category's total.
    Survivors are sorted by monthly cost, most expensive first.
    """
    opportunities = []

    for pattern in patterns:
        category_total = category_totals.get(pattern.category, 0.0)
        if category_total <= 0:
            continue

        monthly_cost = pattern.monthly_cost
        if monthly_cost > category_total * guard_ratio:
            continue

        opportunities.append(
            ReductionOpportunity(
                name=pattern.name,
                category=pattern.category,
                icon=pattern.icon,
                current_monthly_cost=monthly_cost,
                reduction_options=[
                    ReductionOption(percentage=p, savings=monthly_cost * p / 100, description=f"Cut by {p}%")
                    for p in REDUCTION_PERCENTS
                ],
            )
        )

    return sorted(opportunities, key=lambda o: (-o.current_monthly_cost, o.name))


def calculate_savings_potential(
    discretionary_transactions: List[Transaction],
    patterns: Sequence[StandardExpensePattern] = STANDARD_EXPENSE_PATTERNS,
    guard_ratio: float = DEFAULT_PATTERN_GUARD_RATIO,
) -> SavingsPotentialReport:
    """
    Build a savings potential report from already-selected discretionary transactions.

    No discretionary spending is not an error: the report comes back all zero
    with no opportunities.
    """
    total = sum(t.amount for t in discretionary_transactions)
    per_category = _category_totals(discretionary_transactions)

    return SavingsPotentialReport(
        total_discretionary_spend=total,
        savings_by_percent={p: total * p / 100 for p in SAVINGS_SCENARIO_PERCENTS},
        per_category_totals=per_category,
        specific_reduction_opportunities=find_reduction_opportunities(per_category, patterns, guard_ratio),
    )
