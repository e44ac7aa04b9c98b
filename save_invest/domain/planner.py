"""Savings and investment plan builder"""

import math
from typing import List, Optional, Sequence

from save_invest.domain.allocation import allocate
from save_invest.domain.exceptions import InvalidInputError
from save_invest.domain.models import (
    InvestmentVehicle,
    RiskTolerance,
    SavingsAndInvestmentPlan,
    Transaction,
)
from save_invest.domain.projection import PROJECTION_HORIZONS, project_horizons
from save_invest.domain.savings import DEFAULT_PATTERN_GUARD_RATIO, calculate_savings_potential

# Long-run market average used for whole-portfolio projections
PORTFOLIO_REFERENCE_RETURN = 7.0
DEFAULT_SAVINGS_PERCENT = 50


def create_savings_and_investment_plan(
    discretionary_transactions: List[Transaction],
    vehicles: Sequence[InvestmentVehicle],
    risk_tolerance: RiskTolerance = RiskTolerance.MODERATE,
    savings_target: Optional[float] = None,
    reference_return: float = PORTFOLIO_REFERENCE_RETURN,
    default_savings_percent: int = DEFAULT_SAVINGS_PERCENT,
    guard_ratio: float = DEFAULT_PATTERN_GUARD_RATIO,
) -> SavingsAndInvestmentPlan:
    """
    Turn discretionary spending into a monthly investment plan.

    Flow:
    1. Savings potential report from the discretionary transactions
    2. Monthly target = savings_target, or default_savings_percent of discretionary spend
    3. Allocate the target across ranked vehicles for the risk tolerance
    4. Project the whole target at the reference return for 1/5/10/20 years

    Raises:
        InvalidInputError: negative or non-finite savings_target
    """
    if savings_target is not None and (not math.isfinite(savings_target) or savings_target < 0):
        raise InvalidInputError(f"savings_target must be a non-negative number, got {savings_target}")

    risk_tolerance = RiskTolerance(risk_tolerance)
    potential = calculate_savings_potential(discretionary_transactions, guard_ratio=guard_ratio)
    monthly_target = savings_target if savings_target is not None else potential.savings_at_percent(default_savings_percent)

    return SavingsAndInvestmentPlan(
        monthly_target=monthly_target,
        risk_tolerance=risk_tolerance,
        savings_potential=potential,
        allocations=allocate(monthly_target, vehicles, risk_tolerance),
        portfolio_projections=project_horizons(monthly_target, reference_return, PROJECTION_HORIZONS),
    )
