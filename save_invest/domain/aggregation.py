"""Spending aggregation - windowed category totals and discretionary selection"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple

from save_invest.domain.exceptions import InvalidInputError
from save_invest.domain.models import (
    ExpenseCategory,
    MonthlyNecessitySummary,
    SpendingAggregate,
    Transaction,
)
from save_invest.utils.date_utils import month_key


def effective_necessity(
    transaction: Transaction,
    category_preferences: Optional[Mapping[ExpenseCategory, bool]] = None,
) -> bool:
    """A category-wide user preference wins over the transaction's own flag"""
    if category_preferences:
        preference = category_preferences.get(transaction.category)
        if preference is not None:
            return preference
    return transaction.is_necessary


def filter_window(transactions: List[Transaction], window_start: date, window_end: date) -> List[Transaction]:
    """Transactions dated within [window_start, window_end]"""
    return [t for t in transactions if window_start <= t.date <= window_end]


def sort_category_totals(totals: Mapping[ExpenseCategory, float]) -> List[Tuple[ExpenseCategory, float]]:
    """Largest total first; ties broken by category name so output is stable"""
    return sorted(totals.items(), key=lambda item: (-item[1], item[0].value))


def aggregate(
    transactions: List[Transaction],
    window_start: date,
    window_end: date,
    category_preferences: Optional[Mapping[ExpenseCategory, bool]] = None,
) -> SpendingAggregate:
    """
    Bucket a user's transactions for one window.

    Returns per-category totals (all spending, sorted for display) and the
    transactions whose effective necessity is False.
    """
    if window_start > window_end:
        raise InvalidInputError(f"window_start {window_start} is after window_end {window_end}")

    in_window = filter_window(transactions, window_start, window_end)

    totals: Dict[ExpenseCategory, float] = defaultdict(float)
    for txn in in_window:
        totals[txn.category] += txn.amount

    discretionary = [t for t in in_window if not effective_necessity(t, category_preferences)]

    return SpendingAggregate(
        window_start=window_start,
        window_end=window_end,
        per_category_total=sort_category_totals(totals),
        discretionary_transactions=discretionary,
        transaction_count=len(in_window),
    )


def summarize_by_month(
    transactions: List[Transaction],
    category_preferences: Optional[Mapping[ExpenseCategory, bool]] = None,
) -> List[MonthlyNecessitySummary]:
    """Per-month totals with a necessary vs discretionary split, oldest month first"""
    months: Dict[str, MonthlyNecessitySummary] = {}

    for txn in sorted(transactions, key=lambda t: t.date):
        key = month_key(txn.date)
        summary = months.get(key)
        if summary is None:
            summary = months[key] = MonthlyNecessitySummary(
                month=key,
                total_amount=0.0,
                necessary_amount=0.0,
                discretionary_amount=0.0,
                category_amounts={},
            )

        summary.total_amount += txn.amount
        summary.category_amounts[txn.category] = summary.category_amounts.get(txn.category, 0.0) + txn.amount
        if effective_necessity(txn, category_preferences):
            summary.necessary_amount += txn.amount
        else:
            summary.discretionary_amount += txn.amount

    return [months[k] for k in sorted(months)]
