"""Services package."""

from finplanner.services.storage import (
    BudgetStorageInterface,
    ConnectionError,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    InMemoryBudgetStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Storage services
    "BudgetStorageInterface",
    "ConnectionError",
    "GoogleSheetsBudgetStorage",
    "GoogleSheetsClient",
    "InMemoryBudgetStorage",
    "NotFoundError",
    "StorageError",
]
