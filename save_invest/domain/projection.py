"""Compound growth projector - future value of monthly contributions"""

import math
from typing import Iterable, List

from save_invest.domain.exceptions import InvalidInputError
from save_invest.domain.models import InvestmentProjection, YearlyProjection

PROJECTION_HORIZONS = (1, 5, 10, 20)

# Monthly rates smaller than this use the linear formula
RATE_EPSILON = 1e-12


def _validate(monthly_contribution: float, annual_return_percent: float, years: float) -> None:
    if years is None or annual_return_percent is None or monthly_contribution is None:
        raise InvalidInputError("monthly_contribution, annual_return_percent and years are required")
    for name, value in (
        ("monthly_contribution", monthly_contribution),
        ("annual_return_percent", annual_return_percent),
        ("years", years),
    ):
        if not math.isfinite(value):
            raise InvalidInputError(f"{name} must be a finite number, got {value}")
    if years < 0:
        raise InvalidInputError(f"years must not be negative, got {years}")


def project(monthly_contribution: float, annual_return_percent: float, years: int) -> InvestmentProjection:
    """
    Future value of an ordinary annuity (contributions at the end of each month).

    FV = c * ((1 + r)^n - 1) / r  with r = annual% / 100 / 12 and n = years * 12.
    A zero rate degenerates to c * n. Non-positive contributions project to 0.
    Negative rates are allowed and model a loss.

    Raises:
        InvalidInputError: negative years or non-finite inputs
    """
    _validate(monthly_contribution, annual_return_percent, years)

    if monthly_contribution <= 0:
        return InvestmentProjection(
            monthly_contribution=monthly_contribution,
            annual_return_percent=annual_return_percent,
            horizon_years=years,
            future_value=0.0,
            total_contributions=0.0,
            interest_earned=0.0,
        )

    monthly_rate = annual_return_percent / 100 / 12
    months = years * 12

    if abs(monthly_rate) < RATE_EPSILON:
        future_value = monthly_contribution * months
    else:
        future_value = monthly_contribution * ((1 + monthly_rate) ** months - 1) / monthly_rate

    total_contributions = monthly_contribution * months

    return InvestmentProjection(
        monthly_contribution=monthly_contribution,
        annual_return_percent=annual_return_percent,
        horizon_years=years,
        future_value=future_value,
        total_contributions=total_contributions,
        interest_earned=future_value - total_contributions,
    )


def project_horizons(
    monthly_contribution: float,
    annual_return_percent: float,
    horizons: Iterable[int] = PROJECTION_HORIZONS,
) -> List[InvestmentProjection]:
    """One projection per horizon, in the order given"""
    return [project(monthly_contribution, annual_return_percent, years) for years in horizons]


def yearly_growth_schedule(monthly_contribution: float, annual_return_percent: float, years: int) -> List[YearlyProjection]:
    """
    Year-by-year balance of a monthly contribution plan.

    Compounds month by month with the same end-of-month convention as
    project(), so the value for year N matches project(..., N) up to
    floating point error.
    """
    _validate(monthly_contribution, annual_return_percent, years)

    contribution = max(monthly_contribution, 0.0)
    monthly_rate = annual_return_percent / 12 / 100
    balance = 0.0
    schedule = []

    for year in range(1, int(years) + 1):
        for _ in range(12):
            balance = balance * (1 + monthly_rate) + contribution

        total_contributions = contribution * year * 12
        schedule.append(
            YearlyProjection(
                year=year,
                total_contributions=total_contributions,
                return_amount=balance - total_contributions,
                total_value=balance,
            )
        )

    return schedule
