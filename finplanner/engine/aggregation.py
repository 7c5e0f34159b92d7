"""
Budget Aggregator

Rolls categorized amounts up into totals and a ranked breakdown.

Percentages here are shares of the total spent, not of income - the
variance analyzer is the one that compares against income.
"""

from typing import Iterable

from finplanner.engine.ratios import percent_of
from finplanner.models.budget import (
    NO_DATA,
    UNCATEGORIZED,
    Budget,
    BudgetSummary,
    CategoryBreakdown,
    SpendingRecord,
)


def _rank(totals: dict[str, tuple[float, int]], total_spent: float) -> tuple[CategoryBreakdown, ...]:
    """
    Build breakdown rows, largest amount first.

    dicts keep insertion order and sorted() is stable, so ties keep the
    order in which the categories were first seen.
    """
    rows = [
        CategoryBreakdown(
            category=category,
            amount=amount,
            percentage=percent_of(amount, total_spent),
            count=count,
        )
        for category, (amount, count) in totals.items()
        if amount > 0
    ]
    return tuple(sorted(rows, key=lambda row: row.amount, reverse=True))


def aggregate_records(records: Iterable[SpendingRecord]) -> BudgetSummary:
    """Group transactions by category and rank them by total amount."""
    totals: dict[str, tuple[float, int]] = {}
    total_spent = 0.0
    transactions = 0

    for record in records:
        category = record.category or UNCATEGORIZED
        amount = abs(record.amount)
        total_spent += amount
        transactions += 1

        previous_amount, previous_count = totals.get(category, (0.0, 0))
        totals[category] = (previous_amount + amount, previous_count + 1)

    breakdown = _rank(totals, total_spent)
    return BudgetSummary(
        total_spent=total_spent,
        categories=breakdown,
        top_category=breakdown[0].category if breakdown else NO_DATA,
        total_transactions=transactions,
    )


def aggregate_budget(budget: Budget) -> BudgetSummary:
    """
    Aggregate a budget's category allocations.

    Each category counts as one entry. Categories with nothing allocated
    are left out of the breakdown.
    """
    totals = {
        category.name: (abs(category.amount), 1)
        for category in budget.categories
    }
    total_spent = sum(amount for amount, _ in totals.values())
    breakdown = _rank(totals, total_spent)

    return BudgetSummary(
        total_spent=total_spent,
        categories=breakdown,
        top_category=breakdown[0].category if breakdown else NO_DATA,
        total_transactions=len(breakdown),
        total_budgeted=budget.total_budgeted,
        remaining_income=budget.remaining_income,
    )
