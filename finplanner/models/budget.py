"""
Budget Models for Finance Planner

These models define the monthly budget a user edits and the derived
views the engines compute from it.

DESIGN DECISION: Budgets are immutable values. Editing an amount or the
income returns a new Budget (overwrite semantics - no history is kept).
Derived values (totals, percentages, variances) are never stored; they
are recomputed on every evaluation.
"""

from datetime import date
from enum import Enum
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


SAVINGS_CATEGORY = "Savings"
DEBT_CATEGORY = "Debt"
UNCATEGORIZED = "Other"
NO_DATA = "No data"


class BudgetCategory(BaseModel):
    """
    One line of the budget.

    recommended_percentage is a static reference value per category,
    it is not user-editable.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False, str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name (unique within a budget)"
    )
    amount: float = Field(
        default=0.0,
        ge=0,
        description="Monthly amount allocated"
    )
    recommended_percentage: float = Field(
        default=0.0,
        ge=0,
        le=100,
        description="Recommended share of income, in percent"
    )
    icon: str = Field(
        default="",
        max_length=10,
        description="Emoji shown next to the category"
    )
    description: str = Field(
        default="",
        max_length=200,
    )


# The fixed catalogue offered by the budget planner:
# (name, icon, description, recommended percentage of income)
CATEGORY_CATALOGUE: tuple[tuple[str, str, str, float], ...] = (
    ("Housing", "🏠", "Rent/mortgage and housing costs", 28),
    ("Savings", "💰", "Emergency fund and general savings", 20),
    ("Retirement", "🏖️", "401k, IRA contributions", 15),
    ("Food", "🍽️", "Groceries and dining out", 12),
    ("Transportation", "🚗", "Car payments, gas, public transit", 6),
    ("Utilities", "⚡", "Electric, phone, water, internet", 6),
    ("Insurance", "🛡️", "Health, auto, life insurance", 5),
    ("Personal and Entertainment", "🎮", "Hobbies, entertainment, personal care", 4),
    ("Debt", "💳", "Credit cards, loans (if any)", 0),
    ("Household Items", "🧽", "Cleaning supplies, maintenance", 2),
    ("Giving", "🤲", "Charitable donations and giving (5-10% if the household is financially stable)", 0),
    ("Other", "📦", "Miscellaneous expenses", 2),
)


def default_categories() -> tuple[BudgetCategory, ...]:
    """Catalogue categories with zero amounts, in display order."""
    return tuple(
        BudgetCategory(
            name=name,
            icon=icon,
            description=description,
            recommended_percentage=recommended,
        )
        for name, icon, description, recommended in CATEGORY_CATALOGUE
    )


class Budget(BaseModel):
    """
    A user's monthly budget.

    Category order is display-relevant only.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    monthly_income: float = Field(
        default=0.0,
        ge=0,
        description="Monthly take-home income"
    )
    categories: tuple[BudgetCategory, ...] = Field(
        default_factory=default_categories,
    )

    @model_validator(mode='after')
    def validate_unique_names(self) -> 'Budget':
        """Category names are the key within a budget."""
        seen = set()
        for category in self.categories:
            if category.name in seen:
                raise ValueError(f"Duplicate category name: {category.name}")
            seen.add(category.name)
        return self

    @property
    def total_budgeted(self) -> float:
        return sum(category.amount for category in self.categories)

    @property
    def remaining_income(self) -> float:
        return self.monthly_income - self.total_budgeted

    def get(self, name: str) -> Optional[BudgetCategory]:
        """Find a category by name."""
        for category in self.categories:
            if category.name == name:
                return category
        return None

    def amount_of(self, name: str) -> float:
        """Amount allocated to a category, 0 when the category is absent."""
        category = self.get(name)
        return category.amount if category else 0.0

    @classmethod
    def default(cls) -> 'Budget':
        """Empty budget: no income, all catalogue categories at zero."""
        return cls()

    @classmethod
    def from_amounts(
        cls,
        monthly_income: float,
        amounts: Mapping[str, float],
    ) -> 'Budget':
        """
        Build a catalogue budget from {category name: amount}.

        Unknown names are rejected so typos don't silently vanish.
        """
        known = {name for name, _, _, _ in CATEGORY_CATALOGUE}
        unknown = sorted(set(amounts) - known)
        if unknown:
            raise ValueError(f"Unknown budget categories: {', '.join(unknown)}")

        categories = tuple(
            BudgetCategory(**{**category.model_dump(), "amount": amounts.get(category.name, 0.0)})
            for category in default_categories()
        )
        return cls(monthly_income=monthly_income, categories=categories)

    def with_amount(self, name: str, amount: float) -> 'Budget':
        """Return a copy with one category amount replaced."""
        if self.get(name) is None:
            raise KeyError(name)
        categories = tuple(
            BudgetCategory(**{**category.model_dump(), "amount": amount})
            if category.name == name
            else category
            for category in self.categories
        )
        return Budget(monthly_income=self.monthly_income, categories=categories)

    def with_income(self, monthly_income: float) -> 'Budget':
        """Return a copy with the income replaced."""
        return Budget(monthly_income=monthly_income, categories=self.categories)

    def apply_recommendations(self) -> 'Budget':
        """Set every amount to its recommended share of income, rounded to whole units."""
        categories = tuple(
            BudgetCategory(**{
                **category.model_dump(),
                "amount": float(round(self.monthly_income * category.recommended_percentage / 100)),
            })
            for category in self.categories
        )
        return Budget(monthly_income=self.monthly_income, categories=categories)

    def as_amounts(self) -> dict[str, float]:
        """{category name: amount} in display order."""
        return {category.name: category.amount for category in self.categories}


# =============================================================================
# SPENDING RECORDS AND AGGREGATION VIEWS
# =============================================================================

class SpendingRecord(BaseModel):
    """
    A single categorized transaction.

    Amounts may be stored with either sign convention; aggregation
    always works with the magnitude.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False, str_strip_whitespace=True)

    category: Optional[str] = None
    amount: float
    description: str = ""
    spent_on: Optional[date] = None


class CategoryBreakdown(BaseModel):
    """One ranked row of the category breakdown."""
    model_config = ConfigDict(frozen=True)

    category: str
    amount: float = Field(..., ge=0)
    percentage: float = Field(
        ...,
        ge=0,
        description="Share of total spent (not of income), in percent"
    )
    count: int = Field(default=1, ge=0)


class BudgetSummary(BaseModel):
    """Output of the budget aggregator."""
    model_config = ConfigDict(frozen=True)

    total_spent: float = Field(..., ge=0)
    categories: tuple[CategoryBreakdown, ...] = ()
    top_category: str = NO_DATA
    total_transactions: int = Field(default=0, ge=0)

    # Only meaningful when aggregating a Budget (income is known)
    total_budgeted: float = 0.0
    remaining_income: float = 0.0


# =============================================================================
# VARIANCE ANALYSIS VIEWS
# =============================================================================

class VarianceDirection(str, Enum):
    OVER = "over"
    UNDER = "under"
    ON_TARGET = "on_target"


class EmergencyFundStatus(str, Enum):
    """How many months of non-savings spending the savings allocation covers."""
    NONE = "none"          # No savings allocated, or nothing to cover
    URGENT = "urgent"      # Under 3 months
    ADEQUATE = "adequate"  # 3 to 6 months
    EXCELLENT = "excellent"  # 6 months or more


class DebtStatus(str, Enum):
    """Debt payments as a share of income."""
    NONE = "none"
    HEALTHY = "healthy"    # 10% or less
    MODERATE = "moderate"
    HIGH = "high"          # Over 20%


class CategoryVariance(BaseModel):
    """Actual vs recommended allocation for one category."""
    model_config = ConfigDict(frozen=True)

    category: str
    amount: float
    actual_percentage: float = Field(
        ...,
        description="amount / income * 100, 0 when income is 0"
    )
    recommended_percentage: float
    variance: float = Field(
        ...,
        description="actual - recommended, in percentage points"
    )
    is_significant: bool = False
    direction: VarianceDirection = VarianceDirection.ON_TARGET


class VarianceReport(BaseModel):
    """Output of the variance analyzer: per-category variances plus health metrics."""
    model_config = ConfigDict(frozen=True)

    monthly_income: float
    variances: tuple[CategoryVariance, ...] = ()

    total_budgeted: float = 0.0
    remaining_income: float = 0.0
    budget_utilization: float = 0.0

    savings_amount: float = 0.0
    non_savings_spending: float = 0.0
    emergency_fund_months: float = 0.0
    emergency_fund_status: EmergencyFundStatus = EmergencyFundStatus.NONE

    debt_amount: float = 0.0
    debt_to_income_ratio: float = 0.0
    debt_status: DebtStatus = DebtStatus.NONE

    @property
    def significant_variances(self) -> list[CategoryVariance]:
        return [v for v in self.variances if v.is_significant]
