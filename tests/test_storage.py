"""Tests for budget storage backends."""

import asyncio
from datetime import datetime, timezone

import pytest

from finplanner.models.budget import Budget, BudgetCategory
from finplanner.services.storage import (
    BUDGET_COLUMNS,
    ConnectionError,
    GoogleSheetsBudgetStorage,
    InMemoryBudgetStorage,
    StorageError,
    budget_to_row,
    row_to_budget,
)

from tests.conftest import FakeSheetsClient, FakeWorksheet


UPDATED_AT = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)


class BrokenSheetsClient:
    def get_budgets_sheet(self):
        raise RuntimeError("quota exceeded")


class UnreachableSheetsClient:
    def __init__(self):
        self.calls = 0

    def get_budgets_sheet(self):
        self.calls += 1
        raise ConnectionError("Google credentials file not found: missing.json")


class TestInMemoryStorage:
    """Tests for the in-process backend."""

    def test_round_trip(self, surplus_budget):
        storage = InMemoryBudgetStorage()

        asyncio.run(storage.save_budget("alice", surplus_budget))

        assert asyncio.run(storage.load_budget("alice")) == surplus_budget
        assert asyncio.run(storage.load_budget("bob")) is None

    def test_delete(self, surplus_budget):
        storage = InMemoryBudgetStorage()
        asyncio.run(storage.save_budget("alice", surplus_budget))

        assert asyncio.run(storage.delete_budget("alice")) is True
        assert asyncio.run(storage.delete_budget("alice")) is False
        assert asyncio.run(storage.load_budget("alice")) is None


class TestRowMapping:
    """Tests for converting budgets to and from sheet rows."""

    def test_budget_to_row(self, surplus_budget):
        row = budget_to_row("alice", surplus_budget, UPDATED_AT)

        assert len(row) == len(BUDGET_COLUMNS)
        assert row[:3] == ["alice", "2024-01-31T12:00:00+00:00", 5000]
        assert row[BUDGET_COLUMNS.index("Housing")] == 1000
        assert row[BUDGET_COLUMNS.index("Food")] == 0

    def test_custom_category_rejected(self):
        budget = Budget(monthly_income=100, categories=(BudgetCategory(name="Yachts", amount=10),))

        with pytest.raises(StorageError):
            budget_to_row("alice", budget, UPDATED_AT)

    def test_row_read_by_header(self):
        """Test columns are matched by name, with blanks and thousands separators."""
        headers = ["user_id", "Food", "monthly_income", "Housing"]
        budget = row_to_budget(headers, ["alice", "250.5", "3,000", ""])

        assert budget.monthly_income == 3000
        assert budget.amount_of("Food") == 250.5
        assert budget.amount_of("Housing") == 0
        assert budget.amount_of("Savings") == 0
        assert len(budget.categories) == len(BUDGET_COLUMNS) - 3

    def test_short_row(self):
        budget = row_to_budget(BUDGET_COLUMNS, ["alice", "", "1200"])

        assert budget.monthly_income == 1200
        assert budget.total_budgeted == 0

    def test_garbage_cell(self):
        with pytest.raises(ValueError):
            row_to_budget(BUDGET_COLUMNS, ["alice", "", "lots"])


class TestGoogleSheetsStorage:
    """Tests for the Sheets backend against a fake worksheet."""

    def test_save_appends_then_updates(self, surplus_budget, balanced_budget):
        client = FakeSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)

        asyncio.run(storage.save_budget("alice", surplus_budget))
        asyncio.run(storage.save_budget("bob", balanced_budget))
        asyncio.run(storage.save_budget("alice", balanced_budget))

        rows = client.worksheet.rows
        assert len(rows) == 3
        assert [row[0] for row in rows[1:]] == ["alice", "bob"]
        assert asyncio.run(storage.load_budget("alice")) == balanced_budget

    def test_load(self, surplus_budget):
        storage = GoogleSheetsBudgetStorage(FakeSheetsClient())
        asyncio.run(storage.save_budget("alice", surplus_budget))

        loaded = asyncio.run(storage.load_budget("alice"))

        assert loaded == surplus_budget
        assert asyncio.run(storage.load_budget("bob")) is None

    def test_delete(self, surplus_budget):
        client = FakeSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)
        asyncio.run(storage.save_budget("alice", surplus_budget))

        assert asyncio.run(storage.delete_budget("alice")) is True
        assert asyncio.run(storage.delete_budget("alice")) is False
        assert client.worksheet.rows == [BUDGET_COLUMNS]

    def test_hand_edited_sheet(self):
        worksheet = FakeWorksheet(header=["user_id", "monthly_income", "Housing"])
        worksheet.rows.append(["carol", "2,500", "900"])
        storage = GoogleSheetsBudgetStorage(FakeSheetsClient(worksheet))

        budget = asyncio.run(storage.load_budget("carol"))

        assert budget.monthly_income == 2500
        assert budget.amount_of("Housing") == 900

    def test_malformed_row(self):
        worksheet = FakeWorksheet()
        worksheet.rows.append(["carol", "", "-100"])
        storage = GoogleSheetsBudgetStorage(FakeSheetsClient(worksheet))

        with pytest.raises(StorageError):
            asyncio.run(storage.load_budget("carol"))

    def test_custom_category_not_written(self):
        client = FakeSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)
        budget = Budget(monthly_income=100, categories=(BudgetCategory(name="Yachts", amount=10),))

        with pytest.raises(StorageError):
            asyncio.run(storage.save_budget("alice", budget))

        assert client.worksheet.rows == [BUDGET_COLUMNS]

    def test_backend_error_wrapped(self):
        storage = GoogleSheetsBudgetStorage(BrokenSheetsClient())

        with pytest.raises(StorageError, match="quota exceeded"):
            asyncio.run(storage.load_budget("alice"))

        with pytest.raises(StorageError):
            asyncio.run(storage.delete_budget("alice"))

    def test_numeric_user_id_kept_as_text(self, surplus_budget, balanced_budget):
        """Test an id like 007 still matches its row after being overwritten."""
        client = FakeSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)

        asyncio.run(storage.save_budget("007", surplus_budget))
        asyncio.run(storage.save_budget("007", balanced_budget))

        rows = client.worksheet.rows
        assert client.worksheet.input_options == ["RAW", "RAW"]
        assert len(rows) == 2
        assert rows[1][0] == "007"
        assert asyncio.run(storage.load_budget("007")) == balanced_budget

    def test_connection_error_not_retried(self, surplus_budget):
        client = UnreachableSheetsClient()
        storage = GoogleSheetsBudgetStorage(client)

        with pytest.raises(ConnectionError):
            asyncio.run(storage.save_budget("alice", surplus_budget))

        assert client.calls == 1
