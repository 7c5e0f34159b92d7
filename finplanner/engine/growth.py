"""
Growth Simulator

Deterministic monthly-compounding projection of an investment balance.

For every year between the current age and the retirement age the
balance goes through twelve steps:

    balance = balance * (1 + monthly_rate) + monthly_contribution

and a snapshot is recorded after the twelfth step. The projection is
computed iteratively rather than with the closed-form annuity formula
so that every year has an exact snapshot for charting.

No rounding happens here.
"""

import math

from finplanner.models.investment import GrowthResult, InvestmentParameters, YearSnapshot
from finplanner.models.validation import ValidationIssue
from finplanner.validation import InvalidParametersError


MONTHS_PER_YEAR = 12


def check_growth_parameters(params: InvestmentParameters) -> list[ValidationIssue]:
    """
    Structural checks the simulator itself insists on.

    These hold even for parameters built without validation
    (e.g. InvestmentParameters.model_construct).
    """
    issues = []

    for field in ("current_age", "retirement_age"):
        value = getattr(params, field)
        if not isinstance(value, int) or value < 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{field.replace('_', ' ').capitalize()} must be a whole number of years, 0 or more",
            ))

    for field in ("current_investment", "monthly_contribution", "annual_return_percent"):
        value = getattr(params, field)
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            issues.append(ValidationIssue(
                field=field,
                issue_type="not_finite",
                message=f"{field.replace('_', ' ').capitalize()} must be a finite number",
            ))
        elif value < 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="out_of_range",
                message=f"{field.replace('_', ' ').capitalize()} cannot be negative",
            ))

    if not issues and params.current_age >= params.retirement_age:
        issues.append(ValidationIssue(
            field="retirement_age",
            issue_type="inconsistent",
            message="Retirement age must be greater than current age",
        ))

    return issues


def simulate_growth(params: InvestmentParameters) -> GrowthResult:
    """
    Project the balance year by year until retirement.

    Raises:
        InvalidParametersError: before any computation, if the
            parameters are malformed or the horizon is not positive.
    """
    issues = check_growth_parameters(params)
    if issues:
        raise InvalidParametersError(issues)

    total_years = params.retirement_age - params.current_age
    monthly_rate = params.annual_return_percent / 100 / MONTHS_PER_YEAR
    contribution = float(params.monthly_contribution)
    yearly_contributions = contribution * MONTHS_PER_YEAR

    balance = float(params.current_investment)
    yearly = []

    for year in range(1, total_years + 1):
        start_balance = balance
        for _ in range(MONTHS_PER_YEAR):
            balance = balance * (1 + monthly_rate) + contribution

        yearly.append(YearSnapshot(
            age=params.current_age + year,
            balance=balance,
            contributions=yearly_contributions,
            growth=balance - start_balance - yearly_contributions,
        ))

    total_contributions = contribution * MONTHS_PER_YEAR * total_years
    initial_balance = float(params.current_investment)

    return GrowthResult(
        total_years=total_years,
        final_amount=balance,
        initial_balance=initial_balance,
        total_contributions=total_contributions,
        total_growth=balance - initial_balance - total_contributions,
        yearly=tuple(yearly),
    )
