"""Unit tests for spending patterns and opportunity costs"""

import pytest
from datetime import date

from conftest import make_transaction, make_vehicle
from save_invest.domain.insights import (
    analyze_spending_patterns,
    calculate_opportunity_costs,
    pick_reference_vehicle,
)
from save_invest.domain.models import ExpenseCategory, RiskLevel, YearlyReturn
from save_invest.domain.projection import yearly_growth_schedule


@pytest.fixture
def history():
    """Four months of rent plus streaming, and a rising dining habit"""
    transactions = []
    for month, dining in zip(range(1, 5), (40.0, 60.0, 80.0, 120.0)):
        transactions.append(make_transaction("Rent", 1200.0, ExpenseCategory.HOUSING, True, date(2025, month, 1)))
        transactions.append(make_transaction(" Netflix", 15.0, ExpenseCategory.ENTERTAINMENT, False, date(2025, month, 5)))
        transactions.append(make_transaction("Dinner out", dining, ExpenseCategory.FOOD, False, date(2025, month, 20)))
    transactions.append(make_transaction("Concert", 90.0, ExpenseCategory.ENTERTAINMENT, False, date(2025, 2, 14)))
    return transactions


def test_recurring_expenses(history):
    patterns = analyze_spending_patterns(history, date(2025, 1, 1), date(2025, 4, 30))

    recurring = {r.title: r for r in patterns.recurring_expenses}
    assert set(recurring) == {"rent", "netflix", "dinner out"}
    assert recurring["netflix"].months == ["2025-01", "2025-02", "2025-03", "2025-04"]
    assert recurring["dinner out"].average_amount == pytest.approx(75.0)
    assert [r.title for r in patterns.recurring_expenses][0] == "rent"


def test_category_monthly_averages(history):
    patterns = analyze_spending_patterns(history, date(2025, 1, 1), date(2025, 4, 30))

    # 3 whole calendar months between Jan 1 and Apr 30
    assert patterns.category_monthly_averages[ExpenseCategory.HOUSING] == pytest.approx(4800.0 / 3)
    assert patterns.category_monthly_averages[ExpenseCategory.ENTERTAINMENT] == pytest.approx(150.0 / 3)


def test_category_trends(history):
    """Test trend compares the latest of the last three active months with the earliest"""
    patterns = analyze_spending_patterns(history, date(2025, 1, 1), date(2025, 4, 30))

    assert patterns.category_trends[ExpenseCategory.FOOD] is True
    assert patterns.category_trends[ExpenseCategory.HOUSING] is False
    assert patterns.category_trends[ExpenseCategory.ENTERTAINMENT] is False


def test_short_history_has_no_trends_or_recurring():
    transactions = [make_transaction("Gym", 30.0, ExpenseCategory.OTHER, False, date(2025, 4, 2))]

    patterns = analyze_spending_patterns(transactions, date(2025, 4, 1), date(2025, 4, 30))

    assert patterns.category_trends == {}
    assert patterns.recurring_expenses == []
    assert patterns.category_monthly_averages == {ExpenseCategory.OTHER: 30.0}


def test_reference_vehicle_prefers_spy(sample_vehicles):
    assert pick_reference_vehicle(sample_vehicles).ticker == "SPY"
    assert pick_reference_vehicle(sample_vehicles[:2]).ticker == "BND"
    assert pick_reference_vehicle([]) is None


def test_opportunity_costs():
    """Test each discretionary category is projected against the reference vehicle"""
    spy = make_vehicle("SPY", RiskLevel.MEDIUM, 10.0, 17.5, [YearlyReturn(2023, 20.0), YearlyReturn(2022, -4.0)])
    discretionary = [
        make_transaction("Dinner out", 120.0, ExpenseCategory.FOOD, False),
        make_transaction("Netflix", 15.0, ExpenseCategory.ENTERTAINMENT, False),
        make_transaction("Concert", 60.0, ExpenseCategory.ENTERTAINMENT, False),
    ]

    costs = calculate_opportunity_costs(discretionary, [spy], years=5)

    assert [c.category for c in costs] == [ExpenseCategory.FOOD, ExpenseCategory.ENTERTAINMENT]
    food = costs[0]
    assert food.vehicle_id == "spy"
    assert food.yearly_savings == pytest.approx(1440.0)
    assert len(food.schedule) == 5
    # average of historical returns (8%) rather than the annualized figure
    assert food.schedule[-1].total_value == pytest.approx(yearly_growth_schedule(120.0, 8.0, 5)[-1].total_value)


def test_opportunity_costs_without_inputs(sample_vehicles):
    assert calculate_opportunity_costs([], sample_vehicles) == []
    assert calculate_opportunity_costs([make_transaction("Movie", 10, ExpenseCategory.ENTERTAINMENT, False)], []) == []
