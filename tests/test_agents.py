"""Tests for the AI advisor agents and their reply parsers."""

import asyncio
import json

import pytest

from finplanner.agents import (
    AdviceUnavailableError,
    BudgetAdvisorAgent,
    InvestmentAdvisorAgent,
    parse_budget_advice,
    parse_investment_advice,
    strip_code_fences,
)
from finplanner.config import AdvisorSettings
from finplanner.engine.variance import analyze_budget
from finplanner.models.insight import InsightKind
from finplanner.models.investment import InvestmentParameters

from tests.conftest import FakeModel


BUDGET_REPLY = """Here are your insights:
💡 You have $4,000.00 left over, consider automating transfers into savings.
- ⚠️ Housing at 20% is fine but watch for rent increases next year.
2. 📉 Your food allocation is zero, which is probably an oversight.
✅ ok
Just a plain sentence without any marker at all in it.
"""

TIPS = [
    {
        "title": "Cook at home",
        "description": "Plan meals for the week.",
        "potentialSavings": "$1,000 annually",
        "category": "Food",
    },
    {"title": "Cancel streaming", "description": "Keep one service."},
]


@pytest.fixture
def params() -> InvestmentParameters:
    return InvestmentParameters(
        current_age=30,
        retirement_age=65,
        current_investment=10000,
        monthly_contribution=500,
        annual_return_percent=7,
    )


class TestParseBudgetAdvice:
    """Tests for extracting insights from free text."""

    def test_keeps_marked_lines(self):
        parsed = parse_budget_advice(BUDGET_REPLY)

        assert parsed.is_valid
        assert [i.marker for i in parsed.insights] == ["💡", "⚠️", "📉"]
        assert [i.kind for i in parsed.insights] == [InsightKind.TIP, InsightKind.WARNING, InsightKind.INFO]
        assert parsed.insights[1].message.startswith("Housing at 20%")

    def test_list_prefix_and_quotes_removed(self):
        parsed = parse_budget_advice('* "🚨 Your emergency fund covers under one month."')
        assert parsed.insights[0].message == "Your emergency fund covers under one month."

    def test_marker_mid_line(self):
        parsed = parse_budget_advice("Great work overall 🎉 your savings rate is excellent")

        assert parsed.insights[0].kind == InsightKind.SUCCESS
        assert parsed.insights[0].message == "Great work overall your savings rate is excellent"

    def test_capped(self):
        text = "\n".join(f"💡 Insight number {n} with plenty of words" for n in range(10))
        assert len(parse_budget_advice(text, max_insights=4).insights) == 4

    @pytest.mark.parametrize("text, reason", [
        (None, "Empty response from advisor"),
        ("   \n", "Empty response from advisor"),
        ("Nothing useful here, sorry about that.", "No usable insights in advisor response"),
        ("💡 too short", "No usable insights in advisor response"),
    ])
    def test_unusable(self, text, reason):
        parsed = parse_budget_advice(text)

        assert not parsed.is_valid
        assert parsed.insights == []
        assert parsed.reason == reason


class TestParseInvestmentAdvice:
    """Tests for extracting saving tips from a JSON array."""

    def test_valid_array(self):
        parsed = parse_investment_advice(json.dumps(TIPS))

        assert parsed.is_valid
        first, second = parsed.insights
        assert first.title == "Cook at home"
        assert first.potential_savings == "$1,000 annually"
        assert first.category == "Food"
        assert second.potential_savings == "$100+ annually"
        assert second.category == "General"

    def test_code_fence(self):
        text = "```json\n" + json.dumps(TIPS) + "\n```"

        assert strip_code_fences(text) == json.dumps(TIPS)
        assert len(parse_investment_advice(text).insights) == 2

    def test_empty_strings_get_placeholders(self):
        parsed = parse_investment_advice('[{"title": "  ", "description": ""}]')

        tip = parsed.insights[0]
        assert tip.title == "Saving Tip"
        assert tip.message == "Implement this strategy to save money."

    def test_bad_elements_dropped(self):
        text = json.dumps(["not an object", 42, {"title": 5}, TIPS[0]])
        parsed = parse_investment_advice(text)

        assert [tip.title for tip in parsed.insights] == ["Cook at home"]

    def test_capped(self):
        parsed = parse_investment_advice(json.dumps(TIPS * 5), max_tips=6)
        assert len(parsed.insights) == 6

    def test_malformed_json(self):
        parsed = parse_investment_advice("[{not json")

        assert not parsed.is_valid
        assert parsed.reason.startswith("Malformed JSON from advisor")

    @pytest.mark.parametrize("text, reason", [
        ('{"title": "x"}', "Advisor response is not a JSON array"),
        ("[]", "No valid tips in advisor response"),
        ('["a", "b"]', "No valid tips in advisor response"),
        ("", "Empty response from advisor"),
    ])
    def test_unusable(self, text, reason):
        assert parse_investment_advice(text).reason == reason


class TestBudgetAdvisorAgent:
    """Tests for the budget advisor against a fake model."""

    def test_returns_insights(self, surplus_budget):
        model = FakeModel(text=BUDGET_REPLY)
        agent = BudgetAdvisorAgent(model, temperature=0.3)

        insights = asyncio.run(agent.generate_insights(surplus_budget, analyze_budget(surplus_budget)))

        assert len(insights) == 3
        prompt, kwargs = model.calls[0]
        assert "- Monthly Income: $5,000.00" in prompt
        assert "- Remaining Income: $4,000.00" in prompt
        assert kwargs["generation_config"] == {"temperature": 0.3}

    def test_request_error(self, surplus_budget):
        agent = BudgetAdvisorAgent(FakeModel(error=RuntimeError("quota exceeded")))

        with pytest.raises(AdviceUnavailableError) as exc_info:
            asyncio.run(agent.generate_insights(surplus_budget, analyze_budget(surplus_budget)))

        assert exc_info.value.reason == "Advisor request failed: quota exceeded"

    def test_timeout(self, surplus_budget):
        agent = BudgetAdvisorAgent(FakeModel(text=BUDGET_REPLY, delay=1.0), timeout_seconds=0.01)

        with pytest.raises(AdviceUnavailableError) as exc_info:
            asyncio.run(agent.generate_insights(surplus_budget, analyze_budget(surplus_budget)))

        assert exc_info.value.reason == "Advisor timed out after 0.01s"

    def test_blocked_reply(self, surplus_budget):
        agent = BudgetAdvisorAgent(FakeModel(text=BUDGET_REPLY, blocked=True))

        with pytest.raises(AdviceUnavailableError) as exc_info:
            asyncio.run(agent.generate_insights(surplus_budget, analyze_budget(surplus_budget)))

        assert exc_info.value.reason == "Advisor returned no text"

    def test_empty_reply(self, surplus_budget):
        agent = BudgetAdvisorAgent(FakeModel(text="  "))

        with pytest.raises(AdviceUnavailableError) as exc_info:
            asyncio.run(agent.generate_insights(surplus_budget, analyze_budget(surplus_budget)))

        assert exc_info.value.reason == "Empty response from advisor"

    def test_unusable_reply(self, surplus_budget):
        agent = BudgetAdvisorAgent(FakeModel(text="I can't help with budgets today, sorry."))

        with pytest.raises(AdviceUnavailableError) as exc_info:
            asyncio.run(agent.generate_insights(surplus_budget, analyze_budget(surplus_budget)))

        assert exc_info.value.reason == "No usable insights in advisor response"

    def test_from_settings(self, app_settings):
        advisor = AdvisorSettings(api_key="test", budget_temperature=0.1, _env_file=None)
        model = FakeModel(text=BUDGET_REPLY)

        agent = BudgetAdvisorAgent.from_settings(model, advisor, app_settings)

        assert agent._temperature == 0.1
        assert agent._max_insights == app_settings.max_ai_budget_insights


class TestInvestmentAdvisorAgent:
    """Tests for the investment advisor against a fake model."""

    def test_returns_tips(self, params):
        model = FakeModel(text=json.dumps(TIPS))
        agent = InvestmentAdvisorAgent(model)

        tips = asyncio.run(agent.generate_tips(params))

        assert [tip.title for tip in tips] == ["Cook at home", "Cancel streaming"]
        prompt, kwargs = model.calls[0]
        assert "- Years to Retirement: 35" in prompt
        assert "Projected Final Amount" not in prompt
        assert kwargs["generation_config"] == {"temperature": 0.8}

    def test_prompt_includes_projection(self, params):
        from finplanner.engine.growth import simulate_growth

        result = simulate_growth(params)
        prompt = InvestmentAdvisorAgent(FakeModel()).build_prompt(params, result)

        assert f"- Projected Final Amount: ${result.final_amount:,.2f}" in prompt

    def test_malformed_reply(self, params):
        agent = InvestmentAdvisorAgent(FakeModel(text="Here are some tips: save more!"))

        with pytest.raises(AdviceUnavailableError) as exc_info:
            asyncio.run(agent.generate_tips(params))

        assert exc_info.value.reason.startswith("Malformed JSON from advisor")

    def test_from_settings(self, app_settings):
        advisor = AdvisorSettings(api_key="test", investment_temperature=0.6, timeout_seconds=5, _env_file=None)

        agent = InvestmentAdvisorAgent.from_settings(FakeModel(), advisor, app_settings)

        assert agent._temperature == 0.6
        assert agent._timeout == 5
        assert agent._max_tips == app_settings.max_investment_tips
