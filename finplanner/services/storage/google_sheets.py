"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the storage backend because:
1. Users can view and edit their budget directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (one row per user is fine)
- No transactions (a save is a single row write)
- Limited query capabilities (we scan rows in Python)

Layout of the Budgets sheet, one row per user:

    user_id | updated_at | monthly_income | Housing | Savings | ... | Other

Category columns follow the budget catalogue. Rows are read by header
name, so rows edited by hand load even if category columns were moved
or removed. Writes always use the column order above.
"""

from datetime import datetime, timezone
from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from finplanner.config import GoogleSheetsSettings, get_settings
from finplanner.models.budget import CATEGORY_CATALOGUE, Budget
from finplanner.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)

CATEGORY_COLUMNS = [name for name, _, _, _ in CATEGORY_CATALOGUE]

BUDGET_COLUMNS = [
    "user_id",
    "updated_at",
    "monthly_income",
    *CATEGORY_COLUMNS,
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_budgets_sheet(self) -> gspread.Worksheet:
        """Get or create the Budgets worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.budgets_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.budgets_sheet_name,
                rows=1000,
                cols=len(BUDGET_COLUMNS),
            )
            sheet.append_row(BUDGET_COLUMNS)
        return sheet


def budget_to_row(user_id: str, budget: Budget, updated_at: datetime) -> list:
    """Convert a budget to a spreadsheet row in BUDGET_COLUMNS order."""
    unknown = [c.name for c in budget.categories if c.name not in CATEGORY_COLUMNS]
    if unknown:
        raise StorageError(f"Categories not stored in Sheets: {', '.join(unknown)}")

    return [
        user_id,
        updated_at.isoformat(),
        budget.monthly_income,
        *(budget.amount_of(name) for name in CATEGORY_COLUMNS),
    ]


def row_to_budget(headers: list[str], row: list) -> Budget:
    """
    Convert a spreadsheet row back to a budget.

    Empty cells read as 0. Columns that aren't catalogue categories are ignored.
    """
    values = dict(zip(headers, row))

    def number(column: str) -> float:
        raw = values.get(column, "")
        if raw in ("", None):
            return 0.0
        return float(str(raw).replace(",", ""))

    amounts = {
        name: number(name)
        for name in CATEGORY_COLUMNS
        if name in values
    }
    return Budget.from_amounts(number("monthly_income"), amounts)


class GoogleSheetsBudgetStorage(BudgetStorageInterface):
    """
    Google Sheets implementation of budget storage.

    Saving upserts the user's row; there is at most one row per user.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, all_rows: list[list], user_id: str) -> Optional[int]:
        """1-based sheet row index of the user's budget, skipping the header."""
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == user_id:
                return idx
        return None

    # connect() retries on its own; only transient API errors are retried here
    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _upsert_row(self, user_id: str, new_row: list) -> bool:
        """Write the row; returns True if an existing row was overwritten."""
        sheet = self._client.get_budgets_sheet()
        idx = self._find_row(sheet.get_all_values(), user_id)

        if idx is None:
            sheet.append_row(new_row, value_input_option="RAW")
            return False

        # One RAW write so Sheets never reinterprets the user id
        sheet.update(range_name=f"A{idx}", values=[new_row], value_input_option="RAW")
        return True

    async def save_budget(self, user_id: str, budget: Budget) -> bool:
        """Save a user's budget, overwriting the existing row if there is one."""
        new_row = budget_to_row(user_id, budget, datetime.now(timezone.utc))

        try:
            updated = self._upsert_row(user_id, new_row)
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save budget: {e}") from e

        logger.info("budget_row_written", user_id=user_id, updated=updated)
        return True

    async def load_budget(self, user_id: str) -> Optional[Budget]:
        """Retrieve a user's budget."""
        try:
            sheet = self._client.get_budgets_sheet()
            all_rows = sheet.get_all_values()
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load budget: {e}") from e

        idx = self._find_row(all_rows, user_id)
        if idx is None:
            return None

        try:
            return row_to_budget(all_rows[0], all_rows[idx - 1])
        except ValueError as e:
            raise StorageError(f"Stored budget for {user_id} is malformed: {e}") from e

    async def delete_budget(self, user_id: str) -> bool:
        """Delete a user's budget row."""
        try:
            sheet = self._client.get_budgets_sheet()
            idx = self._find_row(sheet.get_all_values(), user_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete budget: {e}") from e
