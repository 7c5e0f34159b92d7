"""
Investment Models for Finance Planner

Inputs and outputs of the retirement projection.

All monetary values are plain floats. Nothing is rounded here -
only the presentation layer rounds for display.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InvestmentParameters(BaseModel):
    """
    Immutable input to a single projection run.

    Field constraints catch obviously broken values (negative amounts,
    NaN, infinity). The relationship between the two ages and the
    allowed return range are checked by the validator and the simulator.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    current_age: int = Field(
        ...,
        ge=0,
        description="Age today"
    )
    retirement_age: int = Field(
        ...,
        ge=0,
        description="Age at which contributions stop"
    )
    current_investment: float = Field(
        default=0.0,
        ge=0,
        description="Balance invested today"
    )
    monthly_contribution: float = Field(
        default=0.0,
        ge=0,
        description="Amount added at the end of every month"
    )
    annual_return_percent: float = Field(
        ...,
        ge=0,
        description="Nominal annual return, e.g. 7.5 for 7.5%"
    )

    @property
    def total_years(self) -> int:
        return self.retirement_age - self.current_age

    @property
    def monthly_rate(self) -> float:
        """Nominal annual rate spread over twelve compounding steps."""
        return self.annual_return_percent / 100 / 12


class YearSnapshot(BaseModel):
    """Balance at the end of one simulated year."""
    model_config = ConfigDict(frozen=True)

    age: int = Field(
        ...,
        description="Absolute age at the end of the year"
    )
    balance: float = Field(
        ...,
        description="Ending balance"
    )
    contributions: float = Field(
        ...,
        description="Contributions made during the year"
    )
    growth: float = Field(
        ...,
        description="Ending - starting balance - contributions"
    )


class GrowthResult(BaseModel):
    """
    Result of a projection.

    INVARIANT: final_amount == initial_balance + total_contributions + total_growth
    """
    model_config = ConfigDict(frozen=True)

    total_years: int = Field(..., ge=1)
    final_amount: float
    initial_balance: float
    total_contributions: float
    total_growth: float
    yearly: tuple[YearSnapshot, ...] = Field(
        default_factory=tuple,
        description="One snapshot per year, in age order"
    )


class ScenarioMethod(str, Enum):
    """How a what-if scenario compounds the extra contribution."""
    # Extra yearly total compounded once over the full horizon (an estimate)
    LUMP_SUM = "lump_sum"
    # Re-run the monthly simulation with the higher contribution
    MONTHLY = "monthly"


class WhatIfScenario(BaseModel):
    """A counterfactual projection with an extra monthly contribution."""
    model_config = ConfigDict(frozen=True)

    title: str
    additional_contribution: float = Field(..., gt=0)
    final_amount: float
    additional_growth: float
    method: ScenarioMethod = ScenarioMethod.LUMP_SUM
