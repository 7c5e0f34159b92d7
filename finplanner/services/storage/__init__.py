"""
Storage Services Package

Provides the abstract budget storage interface and its implementations.
Google Sheets is the persistent backend; the in-memory store is used
when Sheets is not configured.
"""

from finplanner.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    NotFoundError,
    StorageError,
)
from finplanner.services.storage.memory import InMemoryBudgetStorage
from finplanner.services.storage.google_sheets import (
    BUDGET_COLUMNS,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    budget_to_row,
    row_to_budget,
)

__all__ = [
    # Interfaces
    "BudgetStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryBudgetStorage",
    "BUDGET_COLUMNS",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "budget_to_row",
    "row_to_budget",
]
