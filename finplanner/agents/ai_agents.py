"""
AI Advisor Agents for Finance Planner

The advisor is an OPTIONAL collaborator. Every number the user sees
comes from the deterministic engines; the LLM only phrases advice
about those numbers.

CRITICAL BOUNDARIES:

1. BUDGET ADVISOR:
   - CAN: Comment on allocations, emergency fund and debt
   - CANNOT: Change the budget or any computed figure
   - Answer is free text, one insight per line, each with a marker

2. INVESTMENT ADVISOR:
   - CAN: Suggest saving tips for a projection
   - CANNOT: Change the projection
   - Answer is a JSON array validated against a strict schema

FAILURE CONTRACT:
Anything that goes wrong (error, timeout, empty or unusable answer)
surfaces as AdviceUnavailableError. The agents never fall back
themselves - the orchestrator decides what to show instead.

The Gemini model handle is created once by build_advice_model() and
injected. Agents hold no module-level client.
"""

import asyncio
import json
import re
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from finplanner.config import AdvisorSettings, AppSettings
from finplanner.models.budget import Budget, VarianceReport
from finplanner.models.insight import KNOWN_MARKERS, Insight, InsightKind
from finplanner.models.investment import GrowthResult, InvestmentParameters


logger = structlog.get_logger(__name__)

# Shorter lines are fragments, not insights
MIN_INSIGHT_LENGTH = 20

BUDGET_ADVISOR_ROLE = (
    "You are an expert financial advisor with deep knowledge of personal finance, "
    "budgeting strategies, and financial planning. Provide intelligent, actionable "
    "insights that help users optimize their financial health. Always be specific "
    "with numbers and percentages, and offer concrete next steps."
)

INVESTMENT_ADVISOR_ROLE = (
    "You are a financial advisor AI that creates personalized money-saving "
    "strategies. Always respond with valid JSON only."
)


class AdviceUnavailableError(Exception):
    """The advisor could not produce usable advice."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ParsedAdvice(BaseModel):
    """Outcome of parsing an advisor reply. Parsing never raises."""

    is_valid: bool
    insights: list[Insight] = Field(default_factory=list)
    reason: Optional[str] = Field(
        default=None,
        description="Why the reply was rejected"
    )


class SavingTipPayload(BaseModel):
    """
    One element of the investment advisor's JSON array.

    Missing or empty fields get placeholders; anything that isn't a
    string is rejected.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", strict=True)

    title: str = "Saving Tip"
    description: str = "Implement this strategy to save money."
    potential_savings: str = Field(default="$100+ annually", alias="potentialSavings")
    category: str = "General"

    @field_validator("title", "description", "potential_savings", "category", mode="before")
    @classmethod
    def empty_as_missing(cls, value: Any, info) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        if isinstance(value, str):
            return value.strip()
        return value


# =============================================================================
# PARSING
# =============================================================================

_LIST_PREFIX = re.compile(r"^(?:[-*•]\s+|\d+[.)]\s+)")
_CODE_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CODE_FENCE_END = re.compile(r"\s*```$")


def _find_marker(line: str) -> Optional[tuple[int, str]]:
    """Earliest known marker in the line; the longest one on a tie."""
    found = [
        (line.find(marker), -len(marker), marker)
        for marker in KNOWN_MARKERS
        if marker in line
    ]
    if not found:
        return None
    index, _, marker = min(found)
    return index, marker


def _clean_line(line: str) -> str:
    line = _LIST_PREFIX.sub("", line.strip())
    return line.strip().strip('"').strip()


def parse_budget_advice(text: Optional[str], max_insights: int = 6) -> ParsedAdvice:
    """
    Extract insights from a free-text budget reply.

    Keeps lines longer than MIN_INSIGHT_LENGTH characters that contain
    a known marker. The marker decides the insight kind.
    """
    if not text or not text.strip():
        return ParsedAdvice(is_valid=False, reason="Empty response from advisor")

    insights = []
    for raw_line in text.splitlines():
        line = _clean_line(raw_line)
        if len(line) <= MIN_INSIGHT_LENGTH:
            continue

        match = _find_marker(line)
        if match is None:
            continue

        index, marker = match
        message = " ".join((line[:index] + line[index + len(marker):]).split())
        if not message:
            continue

        insights.append(Insight(
            kind=KNOWN_MARKERS[marker],
            marker=marker,
            message=message,
        ))
        if len(insights) >= max_insights:
            break

    if not insights:
        return ParsedAdvice(is_valid=False, reason="No usable insights in advisor response")

    return ParsedAdvice(is_valid=True, insights=insights)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _CODE_FENCE_START.sub("", cleaned)
        cleaned = _CODE_FENCE_END.sub("", cleaned)
    return cleaned.strip()


def parse_investment_advice(text: Optional[str], max_tips: int = 6) -> ParsedAdvice:
    """
    Extract saving tips from a JSON-array reply.

    Elements that are not objects, or that fail the schema, are dropped.
    """
    if not text or not text.strip():
        return ParsedAdvice(is_valid=False, reason="Empty response from advisor")

    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        return ParsedAdvice(is_valid=False, reason=f"Malformed JSON from advisor: {e.msg}")

    if not isinstance(data, list):
        return ParsedAdvice(is_valid=False, reason="Advisor response is not a JSON array")

    insights = []
    for element in data:
        if not isinstance(element, dict):
            continue
        try:
            tip = SavingTipPayload.model_validate(element)
        except ValidationError:
            continue

        insights.append(Insight(
            kind=InsightKind.TIP,
            title=tip.title,
            message=tip.description,
            potential_savings=tip.potential_savings,
            category=tip.category,
        ))
        if len(insights) >= max_tips:
            break

    if not insights:
        return ParsedAdvice(is_valid=False, reason="No valid tips in advisor response")

    return ParsedAdvice(is_valid=True, insights=insights)


# =============================================================================
# MODEL HANDLE
# =============================================================================

def build_advice_model(settings: AdvisorSettings) -> genai.GenerativeModel:
    """Configure Gemini and create the shared model handle."""
    genai.configure(api_key=settings.api_key)
    return genai.GenerativeModel(
        model_name=settings.model_name,
        generation_config={
            "max_output_tokens": settings.max_tokens,
        },
    )


class _AdvisorAgent:
    """Shared request handling: one attempt, bounded by a timeout."""

    def __init__(
        self,
        model: Any,
        temperature: float,
        timeout_seconds: float = 20.0,
    ):
        """
        Args:
            model: Object with an async generate_content_async(prompt, ...)
                returning a response with `.text` (a Gemini GenerativeModel)
            temperature: Sampling temperature for this advisor
            timeout_seconds: How long to wait for the reply
        """
        self._model = model
        self._temperature = temperature
        self._timeout = timeout_seconds

    async def _ask(self, prompt: str) -> str:
        try:
            response = await asyncio.wait_for(
                self._model.generate_content_async(
                    prompt,
                    generation_config={"temperature": self._temperature},
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning("advisor_timeout", agent=type(self).__name__, timeout_seconds=self._timeout)
            raise AdviceUnavailableError(f"Advisor timed out after {self._timeout:g}s") from e
        except Exception as e:
            logger.warning("advisor_request_failed", agent=type(self).__name__, error=str(e))
            raise AdviceUnavailableError(f"Advisor request failed: {e}") from e

        # .text raises ValueError when the reply was blocked or has no parts
        try:
            text = response.text
        except (ValueError, AttributeError) as e:
            raise AdviceUnavailableError("Advisor returned no text") from e

        if not text or not text.strip():
            raise AdviceUnavailableError("Empty response from advisor")
        return text


class BudgetAdvisorAgent(_AdvisorAgent):
    """
    Asks the advisor for 4-6 one-line insights about a budget.

    The prompt carries the figures the engines already computed, so the
    advisor comments on our numbers instead of recalculating them.
    """

    def __init__(
        self,
        model: Any,
        temperature: float = 0.3,
        timeout_seconds: float = 20.0,
        max_insights: int = 6,
    ):
        super().__init__(model, temperature, timeout_seconds)
        self._max_insights = max_insights

    @classmethod
    def from_settings(
        cls,
        model: Any,
        advisor: AdvisorSettings,
        app: AppSettings,
    ) -> 'BudgetAdvisorAgent':
        return cls(
            model,
            temperature=advisor.budget_temperature,
            timeout_seconds=advisor.timeout_seconds,
            max_insights=app.max_ai_budget_insights,
        )

    def build_prompt(self, budget: Budget, report: VarianceReport) -> str:
        category_lines = "\n".join(
            f"- {item.category}: ${item.amount:,.2f} ({item.actual_percentage:.1f}% vs "
            f"recommended {item.recommended_percentage:g}%, variance: {item.variance:+.1f}%)"
            for item in report.variances
        )

        return f"""{BUDGET_ADVISOR_ROLE}

You are analyzing a user's monthly budget. Provide 4-6 intelligent, actionable insights about their budget allocation.

Budget Overview:
- Monthly Income: ${budget.monthly_income:,.2f}
- Total Budgeted: ${report.total_budgeted:,.2f}
- Remaining Income: ${report.remaining_income:,.2f}

Category Breakdown:
{category_lines}

Financial Health Analysis:
- Budget Utilization: {report.budget_utilization:.1f}%
- Emergency Fund Status: {report.emergency_fund_months:.1f} months covered
- Debt-to-Income Ratio: {report.debt_to_income_ratio:.1f}%

Please provide insights that:
1. Address budget balance and financial health
2. Highlight significant deviations from recommended percentages with specific context
3. Suggest concrete improvements with actionable steps
4. Consider emergency fund adequacy and debt management
5. Provide specific dollar amounts and percentages when relevant

Format each insight as a single, comprehensive sentence starting with one of these emojis:
💡 🎯 ✅ ⚠️ 📈 📉 🚨 💳 🏆 💰 🔍 📊 🎉
Be encouraging but honest about areas for improvement.

Provide exactly 4-6 insights, one per line, focusing on the most impactful recommendations:"""

    async def generate_insights(self, budget: Budget, report: VarianceReport) -> list[Insight]:
        """
        Get AI insights for a budget.

        Raises:
            AdviceUnavailableError: on failure, timeout or an unusable reply
        """
        text = await self._ask(self.build_prompt(budget, report))

        parsed = parse_budget_advice(text, max_insights=self._max_insights)
        if not parsed.is_valid:
            logger.warning("advisor_reply_rejected", agent="budget", reason=parsed.reason)
            raise AdviceUnavailableError(parsed.reason or "Unusable advisor response")
        return parsed.insights


class InvestmentAdvisorAgent(_AdvisorAgent):
    """Asks the advisor for saving tips that would raise monthly contributions."""

    def __init__(
        self,
        model: Any,
        temperature: float = 0.8,
        timeout_seconds: float = 20.0,
        max_tips: int = 6,
    ):
        super().__init__(model, temperature, timeout_seconds)
        self._max_tips = max_tips

    @classmethod
    def from_settings(
        cls,
        model: Any,
        advisor: AdvisorSettings,
        app: AppSettings,
    ) -> 'InvestmentAdvisorAgent':
        return cls(
            model,
            temperature=advisor.investment_temperature,
            timeout_seconds=advisor.timeout_seconds,
            max_tips=app.max_investment_tips,
        )

    def build_prompt(self, params: InvestmentParameters, result: Optional[GrowthResult] = None) -> str:
        projected = (
            f"\n- Projected Final Amount: ${result.final_amount:,.2f}" if result else ""
        )

        return f"""{INVESTMENT_ADVISOR_ROLE}

Based on the following investment data, generate {self._max_tips} creative and actionable money-saving tips that could help this person increase their monthly contributions and reach their retirement goals faster.

Investment Data:
- Current Age: {params.current_age}
- Retirement Age: {params.retirement_age}
- Current Investment: ${params.current_investment:,.2f}
- Monthly Contribution: ${params.monthly_contribution:,.2f}
- Annual Return: {params.annual_return_percent:g}%
- Years to Retirement: {params.total_years}{projected}

Generate diverse saving tips that:
1. Are realistic and actionable for this person's situation
2. Include specific dollar amounts they could save
3. Cover different categories (lifestyle, automation, expenses, etc.)
4. Show the potential impact on their retirement savings
5. Are personalized to their age and financial profile

Return a JSON array with this structure:
[
  {{
    "title": "Creative tip title",
    "description": "Detailed explanation of the tip and how to implement it",
    "potentialSavings": "Specific dollar amount (e.g., '$500 annually' or '$50 monthly')",
    "category": "Category name (e.g., 'Lifestyle', 'Automation', 'Expenses', 'Utilities')"
  }}
]"""

    async def generate_tips(
        self,
        params: InvestmentParameters,
        result: Optional[GrowthResult] = None,
    ) -> list[Insight]:
        """
        Get AI saving tips for a projection.

        Raises:
            AdviceUnavailableError: on failure, timeout or an unusable reply
        """
        text = await self._ask(self.build_prompt(params, result))

        parsed = parse_investment_advice(text, max_tips=self._max_tips)
        if not parsed.is_valid:
            logger.warning("advisor_reply_rejected", agent="investment", reason=parsed.reason)
            raise AdviceUnavailableError(parsed.reason or "Unusable advisor response")
        return parsed.insights
