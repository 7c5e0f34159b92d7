"""Tests for the budget aggregator."""

import pytest

from finplanner.engine.aggregation import aggregate_budget, aggregate_records
from finplanner.models.budget import NO_DATA, Budget, BudgetCategory, SpendingRecord


def make_budget(income: float, **amounts: float) -> Budget:
    return Budget(
        monthly_income=income,
        categories=tuple(BudgetCategory(name=name, amount=amount) for name, amount in amounts.items()),
    )


class TestAggregateBudget:
    """Tests for aggregating budget allocations."""

    def test_housing_and_food(self):
        """Test percentages are shares of the total, largest first."""
        summary = aggregate_budget(make_budget(3000, Food=500, Housing=1000))

        assert summary.total_spent == 1500
        assert [row.category for row in summary.categories] == ["Housing", "Food"]
        assert summary.categories[0].percentage == pytest.approx(66.67, abs=0.01)
        assert summary.categories[1].percentage == pytest.approx(33.33, abs=0.01)
        assert summary.top_category == "Housing"
        assert summary.total_budgeted == 1500
        assert summary.remaining_income == 1500

    def test_empty_budget(self):
        """Test nothing allocated gives the No data sentinel."""
        summary = aggregate_budget(Budget.default())

        assert summary.top_category == NO_DATA
        assert summary.categories == ()
        assert summary.total_spent == 0
        assert summary.total_transactions == 0

    def test_ties_keep_original_order(self):
        summary = aggregate_budget(make_budget(1000, Utilities=100, Insurance=100, Food=300))
        assert [row.category for row in summary.categories] == ["Food", "Utilities", "Insurance"]

    def test_zero_amounts_left_out(self):
        summary = aggregate_budget(make_budget(1000, Housing=400, Giving=0))

        assert [row.category for row in summary.categories] == ["Housing"]
        assert summary.categories[0].percentage == 100
        assert summary.total_transactions == 1

    def test_idempotent(self):
        budget = make_budget(2000, Housing=700, Food=300)
        assert aggregate_budget(budget).model_dump_json() == aggregate_budget(budget).model_dump_json()


class TestAggregateRecords:
    """Tests for aggregating categorized transactions."""

    def test_groups_by_category(self):
        """Test signs are normalized and uncategorized records go to Other."""
        summary = aggregate_records([
            SpendingRecord(category="Food", amount=-50),
            SpendingRecord(category="Food", amount=25),
            SpendingRecord(category=None, amount=10),
            SpendingRecord(category="Housing", amount=100),
        ])

        assert summary.total_spent == 185
        assert summary.total_transactions == 4
        assert [(row.category, row.amount, row.count) for row in summary.categories] == [
            ("Housing", 100, 1),
            ("Food", 75, 2),
            ("Other", 10, 1),
        ]

    def test_no_records(self):
        summary = aggregate_records([])

        assert summary.top_category == NO_DATA
        assert summary.categories == ()
        assert summary.total_spent == 0

    def test_all_zero_records(self):
        """Test zero-amount records count but don't rank."""
        summary = aggregate_records([SpendingRecord(category="Food", amount=0)])

        assert summary.total_transactions == 1
        assert summary.categories == ()
        assert summary.top_category == NO_DATA
