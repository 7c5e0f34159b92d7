"""
Variance Analyzer

Compares each category's share of income with its recommended share
and derives the budget health metrics the insights are built from.

Every division goes through safe_ratio: an income of 0 gives 0%
everywhere instead of an error.
"""

from typing import Sequence

from finplanner.engine.ratios import percent_of, safe_ratio
from finplanner.models.budget import (
    DEBT_CATEGORY,
    SAVINGS_CATEGORY,
    Budget,
    BudgetCategory,
    CategoryVariance,
    DebtStatus,
    EmergencyFundStatus,
    VarianceDirection,
    VarianceReport,
)


VARIANCE_THRESHOLD = 5.0  # percentage points
HIGH_DEBT_RATIO = 20.0
HEALTHY_DEBT_RATIO = 10.0
URGENT_EMERGENCY_MONTHS = 3.0
EXCELLENT_EMERGENCY_MONTHS = 6.0


def classify_variance(
    category: BudgetCategory,
    monthly_income: float,
    threshold: float = VARIANCE_THRESHOLD,
) -> CategoryVariance:
    actual = percent_of(category.amount, monthly_income)
    variance = actual - category.recommended_percentage

    # Without income there is nothing to compare against
    if monthly_income > 0 and variance > threshold:
        direction = VarianceDirection.OVER
    elif monthly_income > 0 and variance < -threshold:
        direction = VarianceDirection.UNDER
    else:
        direction = VarianceDirection.ON_TARGET

    return CategoryVariance(
        category=category.name,
        amount=category.amount,
        actual_percentage=actual,
        recommended_percentage=category.recommended_percentage,
        variance=variance,
        is_significant=direction != VarianceDirection.ON_TARGET,
        direction=direction,
    )


def emergency_fund_status(savings: float, non_savings_spending: float, months: float) -> EmergencyFundStatus:
    # Nothing saved, or nothing to cover: no verdict either way
    if savings <= 0 or non_savings_spending <= 0:
        return EmergencyFundStatus.NONE
    if months < URGENT_EMERGENCY_MONTHS:
        return EmergencyFundStatus.URGENT
    if months >= EXCELLENT_EMERGENCY_MONTHS:
        return EmergencyFundStatus.EXCELLENT
    return EmergencyFundStatus.ADEQUATE


def debt_status(debt: float, monthly_income: float, ratio: float) -> DebtStatus:
    if debt <= 0 or monthly_income <= 0:
        return DebtStatus.NONE
    if ratio > HIGH_DEBT_RATIO:
        return DebtStatus.HIGH
    if ratio <= HEALTHY_DEBT_RATIO:
        return DebtStatus.HEALTHY
    return DebtStatus.MODERATE


def analyze_variance(
    monthly_income: float,
    categories: Sequence[BudgetCategory],
    threshold: float = VARIANCE_THRESHOLD,
    savings_category: str = SAVINGS_CATEGORY,
    debt_category: str = DEBT_CATEGORY,
) -> VarianceReport:
    """
    Per-category variance plus budget health metrics.

    emergency_fund_months uses non-savings spending as the denominator:
    savings / (total budgeted - savings), 0 when nothing else is budgeted.
    """
    variances = tuple(
        classify_variance(category, monthly_income, threshold)
        for category in categories
    )

    total_budgeted = sum(category.amount for category in categories)
    savings = sum(c.amount for c in categories if c.name == savings_category)
    debt = sum(c.amount for c in categories if c.name == debt_category)

    non_savings_spending = total_budgeted - savings
    months = safe_ratio(savings, non_savings_spending) if non_savings_spending > 0 else 0.0
    debt_ratio = percent_of(debt, monthly_income)

    return VarianceReport(
        monthly_income=monthly_income,
        variances=variances,
        total_budgeted=total_budgeted,
        remaining_income=monthly_income - total_budgeted,
        budget_utilization=percent_of(total_budgeted, monthly_income),
        savings_amount=savings,
        non_savings_spending=non_savings_spending,
        emergency_fund_months=months,
        emergency_fund_status=emergency_fund_status(savings, non_savings_spending, months),
        debt_amount=debt,
        debt_to_income_ratio=debt_ratio,
        debt_status=debt_status(debt, monthly_income, debt_ratio),
    )


def analyze_budget(budget: Budget, threshold: float = VARIANCE_THRESHOLD) -> VarianceReport:
    """analyze_variance for a Budget."""
    return analyze_variance(budget.monthly_income, budget.categories, threshold)
