"""
Planning Engine Package

Pure, deterministic calculations. No I/O, no settings lookups:
thresholds arrive as arguments with sensible defaults.
"""

from finplanner.engine.aggregation import aggregate_budget, aggregate_records
from finplanner.engine.growth import check_growth_parameters, simulate_growth
from finplanner.engine.insights import (
    FALLBACK_SAVING_TIPS,
    budget_insights,
    insights_for_budget,
    investment_tips,
)
from finplanner.engine.ratios import percent_of, safe_ratio
from finplanner.engine.scenarios import (
    DEFAULT_PRESETS,
    LUMP_SUM_DISCLAIMER,
    lump_sum_growth,
    project_scenario,
    project_scenarios,
)
from finplanner.engine.variance import analyze_budget, analyze_variance

__all__ = [
    # Aggregation
    "aggregate_budget",
    "aggregate_records",
    # Growth
    "check_growth_parameters",
    "simulate_growth",
    # Insights
    "FALLBACK_SAVING_TIPS",
    "budget_insights",
    "insights_for_budget",
    "investment_tips",
    # Ratios
    "percent_of",
    "safe_ratio",
    # Scenarios
    "DEFAULT_PRESETS",
    "LUMP_SUM_DISCLAIMER",
    "lump_sum_growth",
    "project_scenario",
    "project_scenarios",
    # Variance
    "analyze_budget",
    "analyze_variance",
]
