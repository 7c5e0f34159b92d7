"""AI Advisor Agents package."""

from finplanner.agents.ai_agents import (
    AdviceUnavailableError,
    BudgetAdvisorAgent,
    InvestmentAdvisorAgent,
    ParsedAdvice,
    build_advice_model,
    parse_budget_advice,
    parse_investment_advice,
    strip_code_fences,
)

__all__ = [
    "AdviceUnavailableError",
    "BudgetAdvisorAgent",
    "InvestmentAdvisorAgent",
    "ParsedAdvice",
    "build_advice_model",
    "parse_budget_advice",
    "parse_investment_advice",
    "strip_code_fences",
]
