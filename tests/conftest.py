"""
Shared test fixtures.

No real API calls in tests: the Gemini model handle, the Sheets client
and the audit log are replaced by in-process fakes.
"""

import asyncio
from typing import Optional

import pytest

from finplanner.audit import AuditLogger
from finplanner.config import AppSettings
from finplanner.models.audit import AuditEvent
from finplanner.models.budget import Budget
from finplanner.services.storage import BUDGET_COLUMNS, BudgetStorageInterface, StorageError


class FakeResponse:
    """Mimics a Gemini response: `.text` raises ValueError when blocked."""

    def __init__(self, text: Optional[str], blocked: bool = False):
        self._text = text
        self._blocked = blocked

    @property
    def text(self) -> Optional[str]:
        if self._blocked:
            raise ValueError("response was blocked")
        return self._text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(
        self,
        text: Optional[str] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
        blocked: bool = False,
    ):
        self.text = text
        self.error = error
        self.delay = delay
        self.blocked = blocked
        self.calls: list[tuple[str, dict]] = []

    async def generate_content_async(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return FakeResponse(self.text, blocked=self.blocked)


class RecordingAuditLogger(AuditLogger):
    """Keeps events in memory instead of writing log lines."""

    def __init__(self):
        super().__init__()
        self.events: list[AuditEvent] = []

    async def log(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def types(self) -> list[str]:
        return [event.event_type.value for event in self.events]


class FailingStorage(BudgetStorageInterface):
    async def save_budget(self, user_id: str, budget: Budget) -> bool:
        raise StorageError("backend down")

    async def load_budget(self, user_id: str) -> Optional[Budget]:
        raise StorageError("backend down")

    async def delete_budget(self, user_id: str) -> bool:
        raise StorageError("backend down")


class FakeWorksheet:
    """The subset of gspread.Worksheet the budget storage uses. Cells are strings."""

    def __init__(self, header: Optional[list[str]] = None):
        self.rows: list[list[str]] = [list(header or BUDGET_COLUMNS)]
        self.input_options: list[Optional[str]] = []

    def _cells(self, values, value_input_option) -> list[str]:
        """Like Sheets, anything but RAW input turns numeric text into numbers."""
        self.input_options.append(value_input_option)
        cells = [str(value) for value in values]
        if value_input_option != "RAW":
            cells = [str(float(cell)).removesuffix(".0") if cell.isdigit() else cell for cell in cells]
        return cells

    def get_all_values(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    def append_row(self, values, value_input_option=None):
        self.rows.append(self._cells(values, value_input_option))

    def update(self, range_name=None, values=None, value_input_option=None):
        """Row updates only: range_name is the first cell, e.g. "A3"."""
        index = int(range_name.lstrip("A"))
        self.rows[index - 1] = self._cells(values[0], value_input_option)

    def delete_rows(self, index: int):
        del self.rows[index - 1]


class FakeSheetsClient:
    def __init__(self, worksheet: Optional[FakeWorksheet] = None):
        self.worksheet = worksheet or FakeWorksheet()

    def get_budgets_sheet(self) -> FakeWorksheet:
        return self.worksheet


@pytest.fixture
def app_settings() -> AppSettings:
    """Default application settings, ignoring any local .env file."""
    return AppSettings(_env_file=None)


@pytest.fixture
def audit_logger() -> RecordingAuditLogger:
    return RecordingAuditLogger()


@pytest.fixture
def surplus_budget() -> Budget:
    """$5,000 income with only $1,000 allocated to housing."""
    return Budget.from_amounts(5000, {"Housing": 1000})


@pytest.fixture
def balanced_budget() -> Budget:
    """$1,000 income split exactly by the recommended percentages."""
    return Budget.from_amounts(1000, {}).apply_recommendations()
