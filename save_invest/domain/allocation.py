"""Investment allocator - splits a monthly budget across ranked vehicles"""

import math
from typing import Dict, List, Mapping, Sequence

from save_invest.domain.exceptions import InvalidInputError
from save_invest.domain.models import (
    InvestmentVehicle,
    RecommendedAllocation,
    RiskLevel,
    RiskTolerance,
)
from save_invest.domain.projection import PROJECTION_HORIZONS, project_horizons

MAX_VEHICLES = 4
MIN_ALLOCATION_PERCENT = 5.0
MIN_MONTHLY_AMOUNT = 10.0

RECOMMENDED_ALLOCATION_PERCENT: Mapping[RiskTolerance, Mapping[RiskLevel, float]] = {
    RiskTolerance.CONSERVATIVE: {RiskLevel.LOW: 60.0, RiskLevel.MEDIUM: 30.0, RiskLevel.HIGH: 10.0},
    RiskTolerance.MODERATE: {RiskLevel.LOW: 30.0, RiskLevel.MEDIUM: 40.0, RiskLevel.HIGH: 20.0},
    RiskTolerance.AGGRESSIVE: {RiskLevel.LOW: 10.0, RiskLevel.MEDIUM: 30.0, RiskLevel.HIGH: 60.0},
}

ELIGIBLE_RISK_LEVELS: Mapping[RiskTolerance, frozenset] = {
    RiskTolerance.CONSERVATIVE: frozenset({RiskLevel.LOW, RiskLevel.MEDIUM}),
    RiskTolerance.MODERATE: frozenset({RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH}),
    RiskTolerance.AGGRESSIVE: frozenset({RiskLevel.MEDIUM, RiskLevel.HIGH}),
}

# Lower rank is evaluated first; moderate has no risk-tier preference
RISK_TIER_RANK: Mapping[RiskTolerance, Dict[RiskLevel, int]] = {
    RiskTolerance.CONSERVATIVE: {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2},
    RiskTolerance.MODERATE: {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 0, RiskLevel.HIGH: 0},
    RiskTolerance.AGGRESSIVE: {RiskLevel.HIGH: 0, RiskLevel.MEDIUM: 1, RiskLevel.LOW: 2},
}


def recommended_allocation_percent(risk_tolerance: RiskTolerance, risk_level: RiskLevel) -> float:
    return RECOMMENDED_ALLOCATION_PERCENT[risk_tolerance][risk_level]


def rank_vehicles(vehicles: Sequence[InvestmentVehicle], risk_tolerance: RiskTolerance) -> List[InvestmentVehicle]:
    """
    Filter vehicles to the tolerance's eligible risk levels and order them.

    Risk tier first (low-first for conservative, high-first for aggressive),
    then Sharpe ratio descending, then ticker for a stable order.
    """
    eligible = ELIGIBLE_RISK_LEVELS[risk_tolerance]
    tier = RISK_TIER_RANK[risk_tolerance]
    candidates = [v for v in vehicles if v.risk_level in eligible]
    return sorted(candidates, key=lambda v: (tier[v.risk_level], -v.sharpe_ratio, v.ticker))


def allocate(
    monthly_budget: float,
    vehicles: Sequence[InvestmentVehicle],
    risk_tolerance: RiskTolerance,
    horizons: Sequence[int] = PROJECTION_HORIZONS,
) -> List[RecommendedAllocation]:
    """
    Distribute a monthly budget over at most four vehicles.

    Each vehicle takes its recommended percentage for (tolerance, risk level),
    capped at what is still unallocated. Allocations under 5% or $10 are
    skipped without using a slot. An empty list means nothing was eligible.

    Raises:
        InvalidInputError: negative or non-finite budget
    """
    if monthly_budget is None or not math.isfinite(monthly_budget) or monthly_budget < 0:
        raise InvalidInputError(f"monthly_budget must be a non-negative number, got {monthly_budget}")
    risk_tolerance = RiskTolerance(risk_tolerance)

    allocations: List[RecommendedAllocation] = []
    remaining = 100.0

    for vehicle in rank_vehicles(vehicles, risk_tolerance):
        if len(allocations) >= MAX_VEHICLES or remaining <= 0:
            break

        percent = min(recommended_allocation_percent(risk_tolerance, vehicle.risk_level), remaining)
        monthly_amount = monthly_budget * percent / 100

        if percent < MIN_ALLOCATION_PERCENT or monthly_amount < MIN_MONTHLY_AMOUNT:
            continue

        allocations.append(
            RecommendedAllocation(
                vehicle=vehicle,
                allocation_percent=percent,
                monthly_amount=monthly_amount,
                projections=project_horizons(monthly_amount, vehicle.annualized_return, horizons),
            )
        )
        remaining -= percent

    return allocations
