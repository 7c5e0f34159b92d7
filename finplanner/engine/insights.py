"""
Heuristic Insight Engine

Rule-based insights used whenever the AI advisor is unavailable,
too slow, or answers with something we can't use.

Deterministic: the same budget always produces the same insights,
in the same order:

1. Overall balance (always exactly one: surplus, deficit or balanced)
2. One per category significantly off its recommended share,
   in category order
3. Emergency fund (at most one)
4. Debt (at most one)
5. Large surplus opportunity (at most one)

The list is truncated to `max_insights`, earlier insights first.
"""

import math
from typing import Mapping, Optional

from finplanner.models.budget import (
    Budget,
    DebtStatus,
    EmergencyFundStatus,
    VarianceDirection,
    VarianceReport,
)
from finplanner.models.insight import Insight, InsightKind
from finplanner.models.investment import InvestmentParameters
from finplanner.engine.variance import VARIANCE_THRESHOLD, analyze_budget


MAX_BUDGET_INSIGHTS = 5
MAX_INVESTMENT_TIPS = 6

# Remaining income within half a cent counts as fully allocated
BALANCE_TOLERANCE = 0.005
# A surplus above this share of income is worth pointing out
SURPLUS_OPPORTUNITY_SHARE = 0.1
# Overspending beyond this many points is "significant" rather than "moderate"
SIGNIFICANT_OVERSPEND_POINTS = 10.0


def _balance_insight(remaining: float) -> Insight:
    if math.isclose(remaining, 0.0, abs_tol=BALANCE_TOLERANCE):
        return Insight(
            kind=InsightKind.SUCCESS,
            marker="✅",
            message=(
                "Perfect budget allocation! Your income and expenses are perfectly "
                "balanced, giving you a solid foundation for financial success."
            ),
        )
    if remaining > 0:
        return Insight(
            kind=InsightKind.TIP,
            marker="💡",
            message=(
                f"You have ${remaining:,.2f} remaining to allocate. Consider increasing "
                "your emergency fund or retirement contributions for better long-term "
                "financial security."
            ),
        )
    return Insight(
        kind=InsightKind.WARNING,
        marker="⚠️",
        message=(
            f"Your budget exceeds your income by ${abs(remaining):,.2f}. This creates "
            "a deficit that could lead to debt accumulation - review your categories "
            "to reduce expenses."
        ),
    )


def _variance_insights(report: VarianceReport, icons: Mapping[str, str]) -> list[Insight]:
    insights = []
    for item in report.variances:
        if item.amount <= 0 or not item.is_significant:
            continue

        icon = icons.get(item.category, "")
        label = f"{icon} {item.category}" if icon else item.category

        if item.direction == VarianceDirection.OVER:
            severity = "significant" if item.variance > SIGNIFICANT_OVERSPEND_POINTS else "moderate"
            insights.append(Insight(
                kind=InsightKind.WARNING,
                marker="📈",
                category=item.category,
                message=(
                    f"{label}: You're allocating {item.actual_percentage:.1f}% vs "
                    f"recommended {item.recommended_percentage:g}%. This {severity} "
                    "overspending could impact your savings goals."
                ),
            ))
        else:
            insights.append(Insight(
                kind=InsightKind.INFO,
                marker="📉",
                category=item.category,
                message=(
                    f"{label}: You're under the recommended "
                    f"{item.recommended_percentage:g}% allocation by "
                    f"{abs(item.variance):.1f}%. Consider if this aligns with your "
                    "financial priorities."
                ),
            ))
    return insights


def _emergency_fund_insight(report: VarianceReport) -> Optional[Insight]:
    months = report.emergency_fund_months
    expenses = report.non_savings_spending

    if report.emergency_fund_status == EmergencyFundStatus.URGENT:
        return Insight(
            kind=InsightKind.WARNING,
            marker="🚨",
            category="Savings",
            message=(
                f"Your emergency fund covers {months:.1f} months of expenses. "
                f"Aim for 3-6 months (${expenses * 3:,.2f} - ${expenses * 6:,.2f}) "
                "for financial security."
            ),
        )
    if report.emergency_fund_status == EmergencyFundStatus.EXCELLENT:
        return Insight(
            kind=InsightKind.SUCCESS,
            marker="🏆",
            category="Savings",
            message=(
                f"Excellent emergency fund! You have {months:.1f} months covered, "
                "which exceeds the recommended 3-6 months. Consider redirecting some "
                "savings to investments."
            ),
        )
    return None


def _debt_insight(report: VarianceReport) -> Optional[Insight]:
    ratio = report.debt_to_income_ratio

    if report.debt_status == DebtStatus.HIGH:
        return Insight(
            kind=InsightKind.WARNING,
            marker="💳",
            category="Debt",
            message=(
                f"Your debt payments are {ratio:.1f}% of income, above the recommended "
                "20% threshold. Consider debt consolidation or payment strategies to "
                "improve your financial health."
            ),
        )
    if report.debt_status == DebtStatus.HEALTHY:
        return Insight(
            kind=InsightKind.SUCCESS,
            marker="✅",
            category="Debt",
            message=(
                f"Great debt management! Your debt payments are only {ratio:.1f}% of "
                "income, well below the recommended 20% threshold."
            ),
        )
    return None


def _opportunity_insight(report: VarianceReport) -> Optional[Insight]:
    remaining = report.remaining_income
    if remaining > report.monthly_income * SURPLUS_OPPORTUNITY_SHARE:
        return Insight(
            kind=InsightKind.TIP,
            marker="💰",
            message=(
                f"With ${remaining:,.2f} remaining, you have an excellent opportunity "
                "to boost your retirement contributions or start investing for "
                "long-term wealth building."
            ),
        )
    return None


def budget_insights(
    report: VarianceReport,
    icons: Optional[Mapping[str, str]] = None,
    max_insights: int = MAX_BUDGET_INSIGHTS,
) -> list[Insight]:
    """
    Build the ordered insight list from a variance report.

    Args:
        report: Output of the variance analyzer
        icons: Optional {category name: emoji} used in category insights
        max_insights: Cap on the number of insights returned
    """
    insights = [_balance_insight(report.remaining_income)]
    insights.extend(_variance_insights(report, icons or {}))

    for optional in (
        _emergency_fund_insight(report),
        _debt_insight(report),
        _opportunity_insight(report),
    ):
        if optional is not None:
            insights.append(optional)

    return insights[:max_insights]


def insights_for_budget(
    budget: Budget,
    threshold: float = VARIANCE_THRESHOLD,
    max_insights: int = MAX_BUDGET_INSIGHTS,
) -> list[Insight]:
    """Analyze a budget and return its heuristic insights."""
    icons = {category.name: category.icon for category in budget.categories}
    return budget_insights(analyze_budget(budget, threshold), icons, max_insights)


# =============================================================================
# INVESTMENT SAVING TIPS
# =============================================================================

# (title, description, potential savings, category)
FALLBACK_SAVING_TIPS: tuple[tuple[str, str, str, str], ...] = (
    (
        "Automate Your Savings",
        "Set up automatic transfers from your checking to savings account on payday. "
        "This 'pay yourself first' approach ensures you never forget to save.",
        "$2,400+ annually",
        "Automation",
    ),
    (
        "Review Subscriptions",
        "Audit your monthly subscriptions and cancel unused services. Many people pay "
        "for services they forgot they had.",
        "$300-600 annually",
        "Subscriptions",
    ),
    (
        "Energy Efficiency",
        "Switch to LED bulbs, use smart thermostats, and unplug electronics when not in "
        "use. Small changes add up to significant savings.",
        "$200-400 annually",
        "Utilities",
    ),
    (
        "Meal Planning",
        "Plan your meals weekly and buy groceries in bulk. This reduces food waste and "
        "impulse purchases.",
        "$1,200+ annually",
        "Food",
    ),
    (
        "Transportation Optimization",
        "Consider carpooling, public transit, or biking for short trips. Even small "
        "changes can save on gas and maintenance.",
        "$800-1,500 annually",
        "Transportation",
    ),
    (
        "Negotiate Bills",
        "Call your service providers annually to negotiate better rates. Many companies "
        "offer discounts to retain customers.",
        "$200-500 annually",
        "Bills",
    ),
)


YOUNG_INVESTOR_AGE = 30
CATCH_UP_AGE = 50

YOUNG_INVESTOR_TIP = (
    "Start Early Advantage",
    "Your young age gives you the power of compound interest. Even small "
    "contributions now will grow significantly over time.",
    "$50,000+ by retirement",
    "Strategy",
)
CATCH_UP_TIP = (
    "Catch-Up Contributions",
    "Consider increasing your 401(k) contributions to catch-up limits. You can "
    "contribute an extra $7,500 annually if you're 50+.",
    "$7,500+ annually",
    "Retirement",
)


def investment_tips(
    params: Optional[InvestmentParameters] = None,
    max_tips: int = MAX_INVESTMENT_TIPS,
) -> list[Insight]:
    """
    Saving tips shown when the advisor can't answer.

    The six fixed tips suit any plan. When params are given, investors under
    30 or over 50 get one more tip for their age, listed last.
    """
    rows = list(FALLBACK_SAVING_TIPS)
    if params is not None:
        if params.current_age < YOUNG_INVESTOR_AGE:
            rows.append(YOUNG_INVESTOR_TIP)
        elif params.current_age > CATCH_UP_AGE:
            rows.append(CATCH_UP_TIP)

    return [
        Insight(
            kind=InsightKind.TIP,
            title=title,
            message=description,
            potential_savings=savings,
            category=category,
        )
        for title, description, savings, category in rows
    ][:max_tips]
