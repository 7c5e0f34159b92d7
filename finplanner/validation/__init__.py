"""
Validation Package

Turns raw form input into validated models or an InvalidParametersError.
"""

from finplanner.validation.validator import (
    InvalidParametersError,
    issues_from_validation_error,
    summarize_issues,
    validate_budget,
    validate_investment,
)

__all__ = [
    "InvalidParametersError",
    "issues_from_validation_error",
    "summarize_issues",
    "validate_budget",
    "validate_investment",
]
