"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing and offline use
3. Keep the planner flows decoupled from storage implementation

Only the current budget of each user is kept. Saving overwrites it;
there is no history.
"""

from abc import ABC, abstractmethod
from typing import Optional

from finplanner.models.budget import Budget


class BudgetStorageInterface(ABC):
    """
    Abstract interface for per-user budget storage.

    Any storage implementation (Google Sheets, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def save_budget(self, user_id: str, budget: Budget) -> bool:
        """
        Save a user's budget, replacing any previous one.

        Args:
            user_id: Owner of the budget
            budget: The budget to save

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def load_budget(self, user_id: str) -> Optional[Budget]:
        """
        Retrieve a user's budget.

        Returns:
            The budget if one was saved, None otherwise
        """
        pass

    @abstractmethod
    async def delete_budget(self, user_id: str) -> bool:
        """
        Delete a user's budget.

        Returns:
            True if a budget was deleted, False if there was none
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
