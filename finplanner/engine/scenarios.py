"""
What-if Scenario Projector

Shows what an extra monthly contribution would do to the final balance.

Two methods are available:

LUMP_SUM (default) - the quick estimate the calculator has always shown:
    additional_growth = extra * 12 * years * (1 + annual_rate) ** years
    The whole extra contribution is treated as one lump sum compounded
    annually over the full horizon. It overstates the effect compared
    with the base projection, which compounds monthly. The UI shows
    LUMP_SUM_DISCLAIMER next to these figures.

MONTHLY - re-runs the growth simulator with the higher contribution,
    so base and scenario use the same compounding.
"""

from typing import Sequence

from finplanner.engine.growth import simulate_growth
from finplanner.models.investment import (
    GrowthResult,
    InvestmentParameters,
    ScenarioMethod,
    WhatIfScenario,
)


# (title, extra monthly contribution)
DEFAULT_PRESETS: tuple[tuple[str, float], ...] = (
    ("Saved an extra $100 per month", 100.0),
    ("Gave up daily coffee purchases", 128.0),
    ("Gave up weekly restaurant visits", 200.0),
)

LUMP_SUM_DISCLAIMER = (
    "Scenario figures are a simplified estimate: the extra yearly savings "
    "are compounded once over the whole period, so they run higher than "
    "the month-by-month projection above."
)


def lump_sum_growth(
    additional_contribution: float,
    total_years: int,
    annual_return_percent: float,
) -> float:
    """Extra value from the lump-sum estimate."""
    return (
        additional_contribution
        * 12
        * total_years
        * (1 + annual_return_percent / 100) ** total_years
    )


def project_scenario(
    params: InvestmentParameters,
    base: GrowthResult,
    additional_contribution: float,
    title: str = "",
    method: ScenarioMethod = ScenarioMethod.LUMP_SUM,
) -> WhatIfScenario:
    """Project a single scenario against a base result."""
    if additional_contribution <= 0:
        raise ValueError("Additional contribution must be greater than zero")

    if method == ScenarioMethod.MONTHLY:
        boosted = params.model_copy(update={
            "monthly_contribution": params.monthly_contribution + additional_contribution,
        })
        final_amount = simulate_growth(boosted).final_amount
        additional_growth = final_amount - base.final_amount
    else:
        additional_growth = lump_sum_growth(
            additional_contribution,
            base.total_years,
            params.annual_return_percent,
        )
        final_amount = base.final_amount + additional_growth

    return WhatIfScenario(
        title=title or f"Saved an extra ${additional_contribution:,.0f} per month",
        additional_contribution=additional_contribution,
        final_amount=final_amount,
        additional_growth=additional_growth,
        method=method,
    )


def project_scenarios(
    params: InvestmentParameters,
    base: GrowthResult,
    presets: Sequence[tuple[str, float]] = DEFAULT_PRESETS,
    method: ScenarioMethod = ScenarioMethod.LUMP_SUM,
) -> list[WhatIfScenario]:
    """Project every preset scenario, in preset order."""
    return [
        project_scenario(params, base, extra, title=title, method=method)
        for title, extra in presets
    ]
