"""
Tests for Finance Planner models

Test strategy:
1. Unit tests for individual components (models, engines, validators)
2. Integration tests for flows (with fake external services)
3. No real API calls in tests (use fakes)
"""

import pytest
from uuid import uuid4

from finplanner.models.audit import (
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from finplanner.models.budget import (
    CATEGORY_CATALOGUE,
    Budget,
    BudgetCategory,
)
from finplanner.models.insight import AdviceResponse, Insight, InsightKind, InsightSource
from finplanner.models.investment import InvestmentParameters
from finplanner.models.validation import ValidationIssue


class TestBudgetModels:
    """Tests for budget-related Pydantic models."""

    def test_default_budget_uses_catalogue(self):
        """Test the default budget has every catalogue category at zero."""
        budget = Budget.default()

        assert budget.monthly_income == 0
        assert [c.name for c in budget.categories] == [row[0] for row in CATEGORY_CATALOGUE]
        assert len(budget.categories) == 12
        assert all(c.amount == 0 for c in budget.categories)

    def test_recommended_percentages_cover_income(self):
        """Test the catalogue recommendations add up to 100%."""
        budget = Budget.default()
        assert sum(c.recommended_percentage for c in budget.categories) == 100

    def test_category_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            BudgetCategory(name="Housing", amount=-1)

    def test_category_rejects_non_finite_amount(self):
        """Test that NaN and infinity are rejected."""
        with pytest.raises(ValueError):
            BudgetCategory(name="Housing", amount=float("nan"))
        with pytest.raises(ValueError):
            BudgetCategory(name="Housing", amount=float("inf"))

    def test_duplicate_category_names_rejected(self):
        """Test category names must be unique within a budget."""
        with pytest.raises(ValueError):
            Budget(
                monthly_income=1000,
                categories=(
                    BudgetCategory(name="Food", amount=100),
                    BudgetCategory(name="Food", amount=200),
                ),
            )

    def test_from_amounts(self):
        """Test building a budget from a name -> amount mapping."""
        budget = Budget.from_amounts(4000, {"Housing": 1200, "Food": 400})

        assert budget.amount_of("Housing") == 1200
        assert budget.amount_of("Food") == 400
        assert budget.amount_of("Savings") == 0
        assert budget.total_budgeted == 1600
        assert budget.remaining_income == 2400

    def test_from_amounts_rejects_unknown_category(self):
        """Test typos in category names are not silently dropped."""
        with pytest.raises(ValueError, match="Housng"):
            Budget.from_amounts(4000, {"Housng": 1200})

    def test_with_amount_returns_copy(self):
        """Test updating an amount leaves the original untouched."""
        budget = Budget.from_amounts(4000, {"Housing": 1200})
        updated = budget.with_amount("Housing", 1500)

        assert updated.amount_of("Housing") == 1500
        assert budget.amount_of("Housing") == 1200
        # Metadata is preserved
        assert updated.get("Housing").recommended_percentage == 28

    def test_with_amount_unknown_category(self):
        """Test updating a missing category raises KeyError."""
        with pytest.raises(KeyError):
            Budget.default().with_amount("Yachts", 10)

    def test_with_income(self):
        """Test replacing income keeps the allocations."""
        budget = Budget.from_amounts(4000, {"Housing": 1200}).with_income(5000)
        assert budget.monthly_income == 5000
        assert budget.amount_of("Housing") == 1200

    def test_apply_recommendations_rounds_to_whole_units(self):
        """Test recommended amounts are rounded."""
        budget = Budget.from_amounts(3333, {}).apply_recommendations()

        # 3333 * 28% = 933.24
        assert budget.amount_of("Housing") == 933
        # 3333 * 20% = 666.6
        assert budget.amount_of("Savings") == 667
        assert budget.amount_of("Debt") == 0

    def test_budget_is_immutable(self):
        """Test budgets cannot be modified in place."""
        budget = Budget.default()
        with pytest.raises(ValueError):
            budget.monthly_income = 100


class TestInvestmentModels:
    """Tests for investment models."""

    def test_parameters_properties(self):
        """Test derived horizon and monthly rate."""
        params = InvestmentParameters(
            current_age=30,
            retirement_age=65,
            current_investment=1000,
            monthly_contribution=200,
            annual_return_percent=6,
        )
        assert params.total_years == 35
        assert params.monthly_rate == pytest.approx(0.005)

    def test_parameters_reject_negative_values(self):
        """Test negative amounts are rejected by the model."""
        with pytest.raises(ValueError):
            InvestmentParameters(
                current_age=30,
                retirement_age=65,
                monthly_contribution=-10,
                annual_return_percent=6,
            )

    def test_parameters_reject_infinity(self):
        """Test non-finite numbers are rejected by the model."""
        with pytest.raises(ValueError):
            InvestmentParameters(
                current_age=30,
                retirement_age=65,
                current_investment=float("inf"),
                annual_return_percent=6,
            )


class TestInsightModels:
    """Tests for insight models."""

    def test_marker_defaults_to_kind(self):
        """Test a missing marker is filled from the kind."""
        insight = Insight(kind=InsightKind.WARNING, message="Watch out")
        assert insight.marker == "⚠️"
        assert insight.text == "⚠️ Watch out"

    def test_explicit_marker_kept(self):
        """Test an explicit marker wins over the default."""
        insight = Insight(kind=InsightKind.WARNING, marker="🚨", message="Watch out")
        assert insight.text == "🚨 Watch out"

    def test_empty_message_rejected(self):
        """Test insights need text."""
        with pytest.raises(ValueError):
            Insight(message="")

    def test_advice_response_fallback_flag(self):
        """Test used_fallback is only set for heuristic answers."""
        assert AdviceResponse(source=InsightSource.HEURISTIC).used_fallback is True
        assert AdviceResponse(source=InsightSource.AI).used_fallback is False
        assert AdviceResponse(source=InsightSource.AI_SUPPLEMENTED).used_fallback is False

    def test_html_escapes_advisor_text(self):
        """Test markup in advisor text is shown as text."""
        tip = Insight(
            kind=InsightKind.TIP,
            title="<script>alert(1)</script>",
            message="Save & invest <b>now</b>",
            potential_savings="<img src=x onerror=alert(1)>",
            category="Bills",
        )

        markup = tip.to_html("tip-box")

        assert markup.startswith('<div class="tip-box">')
        assert "<script>" not in markup
        assert "<img" not in markup
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in markup
        assert "Save &amp; invest &lt;b&gt;now&lt;/b&gt;" in markup

    def test_html_plain_insight(self):
        insight = Insight(kind=InsightKind.WARNING, message="Rent > 40% of income")
        assert insight.to_html("warning-box") == '<div class="warning-box">⚠️ Rent &gt; 40% of income</div>'


class TestAuditModels:
    """Tests for audit event models."""

    def test_budget_saved_event(self):
        """Test AuditEventBuilder.budget_saved."""
        correlation_id = uuid4()

        event = AuditEventBuilder.budget_saved(
            user_id="alice@example.com",
            monthly_income=5000,
            total_budgeted=4000,
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.BUDGET_SAVED
        assert event.user_id == "alice@example.com"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_fallback_event_is_warning(self):
        """Test fallback events carry the reason."""
        event = AuditEventBuilder.advice_fallback_used("budget", "Advisor timed out after 20s")

        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "Advisor timed out after 20s"
        assert event.details == {"mode": "budget"}

    def test_to_log_dict(self):
        """Test log dict conversion."""
        event = AuditEventBuilder.projection_calculated(
            total_years=35,
            final_amount=123456.78,
            annual_return_percent=7,
        )

        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "projection_calculated"
        assert log_dict["details"]["total_years"] == 35
        assert log_dict["correlation_id"] is None


class TestValidationIssue:
    """Tests for ValidationIssue model."""

    def test_default_severity(self):
        issue = ValidationIssue(field="current_age", issue_type="out_of_range", message="Too low")
        assert issue.severity == "error"

    def test_severity_pattern(self):
        """Test only known severities are accepted."""
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
