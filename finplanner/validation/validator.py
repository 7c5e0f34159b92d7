"""
Two-Stage Parameter Validation

Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking
- Required field presence
- Finite, non-negative numbers
- Done by the pydantic models themselves

STAGE 2 - SEMANTIC VALIDATION:
- Relationships between fields (retirement after today)
- Ranges the calculator supports (return rate cap)

Stage 2 only runs when stage 1 passes. Every issue found in a stage is
reported together, so the user can fix the form in one go.

IMPORTANT: Validation NEVER silently fixes issues.
"""

from typing import Any, Mapping, Optional

from pydantic import ValidationError

from finplanner.config import get_settings
from finplanner.models.budget import Budget
from finplanner.models.investment import InvestmentParameters
from finplanner.models.validation import ValidationIssue


class InvalidParametersError(ValueError):
    """Inputs are malformed or out of the supported range."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = list(issues)
        details = "; ".join(f"{issue.field}: {issue.message}" for issue in self.issues)
        super().__init__(f"Invalid parameters: {details}" if details else "Invalid parameters")


def issues_from_validation_error(error: ValidationError) -> list[ValidationIssue]:
    """Convert pydantic errors into our issue format."""
    issues = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ())) or "input"
        issues.append(ValidationIssue(
            field=location,
            issue_type=detail.get("type", "invalid"),
            message=detail.get("msg", "Invalid value"),
        ))
    return issues


def _merge(data: Optional[Mapping[str, Any]], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data or {})
    merged.update(overrides)
    return merged


def _semantic_investment_issues(
    params: InvestmentParameters,
    max_annual_return_percent: float,
) -> list[ValidationIssue]:
    issues = []

    if params.current_age <= 0:
        issues.append(ValidationIssue(
            field="current_age",
            issue_type="out_of_range",
            message="Current age must be greater than zero",
            suggested_fix="Enter your age in whole years",
        ))

    if params.retirement_age <= params.current_age:
        issues.append(ValidationIssue(
            field="retirement_age",
            issue_type="inconsistent",
            message="Retirement age must be greater than current age",
            suggested_fix="Pick a retirement age in the future",
        ))

    rate = params.annual_return_percent
    if rate <= 0:
        issues.append(ValidationIssue(
            field="annual_return_percent",
            issue_type="out_of_range",
            message="Annual return must be greater than 0%",
            suggested_fix="Long-term market averages are around 5-8%",
        ))
    elif rate > max_annual_return_percent:
        issues.append(ValidationIssue(
            field="annual_return_percent",
            issue_type="out_of_range",
            message=f"Annual return cannot exceed {max_annual_return_percent:g}%",
            suggested_fix="Use a more conservative return estimate",
        ))

    return issues


def validate_investment(
    data: Optional[Mapping[str, Any]] = None,
    max_annual_return_percent: Optional[float] = None,
    **fields: Any,
) -> InvestmentParameters:
    """
    Build InvestmentParameters from form data.

    Args:
        data: Mapping of field name to value
        max_annual_return_percent: Upper bound for the return rate.
            Defaults to the configured application limit.
        **fields: Individual fields, taking precedence over `data`

    Raises:
        InvalidParametersError: listing every issue found
    """
    if max_annual_return_percent is None:
        max_annual_return_percent = get_settings().app.max_annual_return_percent

    # Stage 1: schema
    try:
        params = InvestmentParameters(**_merge(data, fields))
    except ValidationError as e:
        raise InvalidParametersError(issues_from_validation_error(e)) from e

    # Stage 2: semantics
    issues = _semantic_investment_issues(params, max_annual_return_percent)
    if issues:
        raise InvalidParametersError(issues)

    return params


def validate_budget(
    monthly_income: float,
    amounts: Mapping[str, float],
) -> Budget:
    """
    Build a catalogue Budget from form data.

    Raises:
        InvalidParametersError: for negative or non-finite values
            and unknown category names
    """
    try:
        return Budget.from_amounts(monthly_income, amounts)
    except ValidationError as e:
        raise InvalidParametersError(issues_from_validation_error(e)) from e
    except ValueError as e:
        raise InvalidParametersError([ValidationIssue(
            field="categories",
            issue_type="unknown_category",
            message=str(e),
        )]) from e


def summarize_issues(error: InvalidParametersError) -> str:
    """
    Generate a user-friendly summary of validation issues.

    This is what we show to non-technical users.
    """
    if not error.issues:
        return "❌ Some inputs are invalid. Please check the form."

    lines = ["❌ Please fix the following before calculating:"]
    for issue in error.issues:
        if issue.severity == "error":
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")

    warnings = [issue for issue in error.issues if issue.severity == "warning"]
    if warnings:
        lines.append("")
        lines.append("⚠️ Please verify the following:")
        for issue in warnings:
            lines.append(f"   • {issue.message}")

    return "\n".join(lines)
