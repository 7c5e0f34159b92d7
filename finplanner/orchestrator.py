"""
Main Orchestrator for Finance Planner

This module ties together all the components and defines the
end-to-end flows for:
1. Budget planning (allocate → evaluate → insights → save)
2. Investment projection (validate → simulate → what-if → saving tips)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every figure comes from the deterministic engines
- The AI advisor is optional; when it fails, is slow or answers with
  nothing usable, the user gets the local insights instead of an error
- Every step is audited

This is the only place that catches AdviceUnavailableError.
"""

from typing import Any, Mapping, Optional, Sequence
from uuid import UUID

import structlog

from finplanner.agents import (
    AdviceUnavailableError,
    BudgetAdvisorAgent,
    InvestmentAdvisorAgent,
    build_advice_model,
)
from finplanner.audit import AuditLogger, create_correlation_id
from finplanner.config import AppSettings, get_settings
from finplanner.engine.aggregation import aggregate_budget
from finplanner.engine.growth import simulate_growth
from finplanner.engine.insights import budget_insights, investment_tips
from finplanner.engine.scenarios import DEFAULT_PRESETS, project_scenarios
from finplanner.engine.variance import analyze_budget
from finplanner.models.budget import Budget, BudgetSummary, VarianceReport
from finplanner.models.insight import AdviceResponse, Insight, InsightSource
from finplanner.models.investment import (
    GrowthResult,
    InvestmentParameters,
    ScenarioMethod,
    WhatIfScenario,
)
from finplanner.services.storage import (
    BudgetStorageInterface,
    GoogleSheetsBudgetStorage,
    GoogleSheetsClient,
    InMemoryBudgetStorage,
    StorageError,
)
from finplanner.validation import InvalidParametersError, validate_investment


logger = structlog.get_logger(__name__)

ADVISOR_DISABLED = "AI insights turned off"
ADVISOR_NOT_CONFIGURED = "AI advisor not configured"


class BudgetPlannerFlow:
    """
    Orchestrates the budget planner.

    Flow:
    1. Evaluate → totals, breakdown and variance for the current budget
    2. Insights → AI advisor, falling back to local insights
    3. Save / Load → per-user persistence, overwrite semantics
    """

    def __init__(
        self,
        advisor: Optional[BudgetAdvisorAgent] = None,
        storage: Optional[BudgetStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._advisor = advisor
        self._storage = storage or InMemoryBudgetStorage()
        self._audit_logger = audit_logger
        self._settings = settings or AppSettings()

    @property
    def has_advisor(self) -> bool:
        return self._advisor is not None

    def _report(self, budget: Budget) -> VarianceReport:
        return analyze_budget(budget, self._settings.variance_threshold_points)

    def _local_insights(self, budget: Budget, report: VarianceReport, limit: int) -> list[Insight]:
        icons = {category.name: category.icon for category in budget.categories}
        return budget_insights(report, icons, max_insights=limit)

    async def evaluate(
        self,
        budget: Budget,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[BudgetSummary, VarianceReport]:
        """Aggregate and analyze a budget."""
        summary = aggregate_budget(budget)
        report = self._report(budget)

        if self._audit_logger:
            await self._audit_logger.log_budget_evaluated(
                monthly_income=budget.monthly_income,
                total_budgeted=report.total_budgeted,
                flagged_categories=len(report.significant_variances),
                correlation_id=correlation_id,
            )

        return summary, report

    def heuristic_insights(self, budget: Budget) -> list[Insight]:
        """Local insights only, capped at max_budget_insights."""
        return self._local_insights(
            budget,
            self._report(budget),
            self._settings.max_budget_insights,
        )

    async def refresh_insights(
        self,
        budget: Budget,
        use_ai: bool = True,
        correlation_id: Optional[UUID] = None,
    ) -> AdviceResponse:
        """
        Get insights for a budget.

        Tries the AI advisor first. If it fails, the local insights are
        returned with the reason. If it answers with fewer than
        min_ai_budget_insights insights, local ones are appended up to
        max_ai_budget_insights.
        """
        correlation_id = correlation_id or create_correlation_id()
        report = self._report(budget)

        if not use_ai or self._advisor is None:
            reason = ADVISOR_DISABLED if not use_ai else ADVISOR_NOT_CONFIGURED
            return await self._fallback(budget, report, reason, correlation_id)

        try:
            ai_insights = await self._advisor.generate_insights(budget, report)
        except AdviceUnavailableError as e:
            return await self._fallback(budget, report, e.reason, correlation_id)

        source = InsightSource.AI
        insights = list(ai_insights)
        limit = self._settings.max_ai_budget_insights

        if len(insights) < self._settings.min_ai_budget_insights:
            local = self._local_insights(budget, report, limit)
            insights.extend(local[:max(limit - len(insights), 0)])
            source = InsightSource.AI_SUPPLEMENTED

        if self._audit_logger:
            await self._audit_logger.log_advice_generated(
                mode="budget",
                source=source.value,
                insight_count=len(insights),
                correlation_id=correlation_id,
            )

        return AdviceResponse(source=source, insights=insights)

    async def _fallback(
        self,
        budget: Budget,
        report: VarianceReport,
        reason: str,
        correlation_id: UUID,
    ) -> AdviceResponse:
        insights = self._local_insights(budget, report, self._settings.max_budget_insights)

        if self._audit_logger:
            await self._audit_logger.log_advice_fallback(
                mode="budget",
                reason=reason,
                correlation_id=correlation_id,
            )
            await self._audit_logger.log_advice_generated(
                mode="budget",
                source=InsightSource.HEURISTIC.value,
                insight_count=len(insights),
                correlation_id=correlation_id,
            )

        return AdviceResponse(
            source=InsightSource.HEURISTIC,
            insights=insights,
            fallback_reason=reason,
        )

    async def save_budget(
        self,
        user_id: str,
        budget: Budget,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Save the user's budget, replacing the previous one.

        Raises:
            StorageError: If the storage backend fails
        """
        try:
            saved = await self._storage.save_budget(user_id, budget)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(
                    user_id=user_id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_budget_saved(
                user_id=user_id,
                monthly_income=budget.monthly_income,
                total_budgeted=budget.total_budgeted,
                correlation_id=correlation_id,
            )
        return saved

    async def load_budget(
        self,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Budget:
        """
        Load the user's budget, or the default budget if none was saved.

        Raises:
            StorageError: If the storage backend fails
        """
        try:
            budget = await self._storage.load_budget(user_id)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="budget_storage",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_budget_loaded(
                user_id=user_id,
                found=budget is not None,
                correlation_id=correlation_id,
            )

        return budget if budget is not None else Budget.default()


class InvestmentPlannerFlow:
    """
    Orchestrates the investment calculator.

    Flow:
    1. Calculate → validate inputs, then project growth
    2. What-if → effect of extra monthly contributions
    3. Saving tips → AI advisor, falling back to the fixed tips
    """

    def __init__(
        self,
        advisor: Optional[InvestmentAdvisorAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._advisor = advisor
        self._audit_logger = audit_logger
        self._settings = settings or AppSettings()

    @property
    def has_advisor(self) -> bool:
        return self._advisor is not None

    @property
    def scenario_method(self) -> ScenarioMethod:
        return ScenarioMethod(self._settings.scenario_method)

    async def calculate(
        self,
        data: Mapping[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> tuple[InvestmentParameters, GrowthResult]:
        """
        Validate form data and run the projection.

        Raises:
            InvalidParametersError: If the inputs are invalid.
                Nothing is computed in that case.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            params = validate_investment(
                data,
                max_annual_return_percent=self._settings.max_annual_return_percent,
            )
        except InvalidParametersError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    entity_type="projection",
                    issues=[issue.model_dump() for issue in e.issues],
                    correlation_id=correlation_id,
                )
            raise

        result = simulate_growth(params)

        if self._audit_logger:
            await self._audit_logger.log_projection_calculated(
                total_years=result.total_years,
                final_amount=result.final_amount,
                annual_return_percent=params.annual_return_percent,
                correlation_id=correlation_id,
            )

        return params, result

    async def what_if(
        self,
        params: InvestmentParameters,
        result: GrowthResult,
        presets: Sequence[tuple[str, float]] = DEFAULT_PRESETS,
        correlation_id: Optional[UUID] = None,
    ) -> list[WhatIfScenario]:
        """Project the preset scenarios with the configured method."""
        method = self.scenario_method
        scenarios = project_scenarios(params, result, presets=presets, method=method)

        if self._audit_logger:
            await self._audit_logger.log_scenarios_generated(
                method=method.value,
                scenario_count=len(scenarios),
                correlation_id=correlation_id,
            )

        return scenarios

    async def saving_tips(
        self,
        params: InvestmentParameters,
        result: Optional[GrowthResult] = None,
        use_ai: bool = True,
        correlation_id: Optional[UUID] = None,
    ) -> AdviceResponse:
        """Saving tips from the advisor, or the fixed tips if it can't answer."""
        correlation_id = correlation_id or create_correlation_id()

        tips: list[Insight] = []
        reason = None
        if not use_ai:
            reason = ADVISOR_DISABLED
        elif self._advisor is None:
            reason = ADVISOR_NOT_CONFIGURED
        else:
            try:
                tips = await self._advisor.generate_tips(params, result)
            except AdviceUnavailableError as e:
                reason = e.reason

        if reason is None:
            response = AdviceResponse(source=InsightSource.AI, insights=tips)
        else:
            response = AdviceResponse(
                source=InsightSource.HEURISTIC,
                insights=investment_tips(params, max_tips=self._settings.max_investment_tips),
                fallback_reason=reason,
            )
            if self._audit_logger:
                await self._audit_logger.log_advice_fallback(
                    mode="investment",
                    reason=reason,
                    correlation_id=correlation_id,
                )

        if self._audit_logger:
            await self._audit_logger.log_advice_generated(
                mode="investment",
                source=response.source.value,
                insight_count=len(response.insights),
                correlation_id=correlation_id,
            )

        return response


def create_app_components(
    use_storage: bool = True,
) -> tuple[BudgetPlannerFlow, InvestmentPlannerFlow, Optional[GoogleSheetsClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False to keep budgets in memory.

    Returns:
        (budget_flow, investment_flow, sheets_client)
    """
    settings = get_settings()
    app_settings = settings.app
    audit_logger = AuditLogger()

    budget_advisor = None
    investment_advisor = None
    try:
        advisor_settings = settings.advisor
        model = build_advice_model(advisor_settings)
        budget_advisor = BudgetAdvisorAgent.from_settings(model, advisor_settings, app_settings)
        investment_advisor = InvestmentAdvisorAgent.from_settings(model, advisor_settings, app_settings)
    except Exception as e:
        # Advisor not configured - local insights only
        logger.warning("advisor_not_configured", error=str(e))

    sheets_client = None
    storage: BudgetStorageInterface = InMemoryBudgetStorage()
    if use_storage:
        try:
            sheets_client = GoogleSheetsClient(settings.google_sheets)
            storage = GoogleSheetsBudgetStorage(sheets_client)
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None

    budget_flow = BudgetPlannerFlow(
        advisor=budget_advisor,
        storage=storage,
        audit_logger=audit_logger,
        settings=app_settings,
    )

    investment_flow = InvestmentPlannerFlow(
        advisor=investment_advisor,
        audit_logger=audit_logger,
        settings=app_settings,
    )

    return budget_flow, investment_flow, sheets_client
