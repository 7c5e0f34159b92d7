"""
In-Memory Storage Implementation

Used when Google Sheets is not configured, and in tests.
Budgets are immutable, so storing the instance itself is safe.
"""

from typing import Optional

from finplanner.models.budget import Budget
from finplanner.services.storage.interface import BudgetStorageInterface


class InMemoryBudgetStorage(BudgetStorageInterface):
    """Budgets keyed by user id, lost when the process exits."""

    def __init__(self):
        self._budgets: dict[str, Budget] = {}

    async def save_budget(self, user_id: str, budget: Budget) -> bool:
        self._budgets[user_id] = budget
        return True

    async def load_budget(self, user_id: str) -> Optional[Budget]:
        return self._budgets.get(user_id)

    async def delete_budget(self, user_id: str) -> bool:
        return self._budgets.pop(user_id, None) is not None
