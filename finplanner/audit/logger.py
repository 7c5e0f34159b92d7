"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of what the user was shown
2. Visibility into how often the AI advisor is bypassed
3. Debugging capability

The audit logger:
- Is async so flows can await it uniformly
- Gracefully handles failures (a logging problem never changes a result)
- Supports correlation IDs to trace related events

Events are written as structured JSON log lines only. Computation
history is not persisted.
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finplanner.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """Central audit logging service."""

    def __init__(self):
        self._logger = structlog.get_logger("finplanner.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event at the level matching its severity.

        Returns False if the log line could not be written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    async def log_budget_evaluated(
        self,
        monthly_income: float,
        total_budgeted: float,
        flagged_categories: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a budget evaluation."""
        await self.log(AuditEventBuilder.budget_evaluated(
            monthly_income=monthly_income,
            total_budgeted=total_budgeted,
            flagged_categories=flagged_categories,
            correlation_id=correlation_id,
        ))

    async def log_budget_saved(
        self,
        user_id: str,
        monthly_income: float,
        total_budgeted: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a budget save."""
        await self.log(AuditEventBuilder.budget_saved(
            user_id=user_id,
            monthly_income=monthly_income,
            total_budgeted=total_budgeted,
            correlation_id=correlation_id,
        ))

    async def log_budget_loaded(
        self,
        user_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a budget load."""
        await self.log(AuditEventBuilder.budget_loaded(
            user_id=user_id,
            found=found,
            correlation_id=correlation_id,
        ))

    async def log_save_failed(
        self,
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed budget save."""
        await self.log(AuditEventBuilder.save_failed(
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_projection_calculated(
        self,
        total_years: int,
        final_amount: float,
        annual_return_percent: float,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a growth projection."""
        await self.log(AuditEventBuilder.projection_calculated(
            total_years=total_years,
            final_amount=final_amount,
            annual_return_percent=annual_return_percent,
            correlation_id=correlation_id,
        ))

    async def log_scenarios_generated(
        self,
        method: str,
        scenario_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log what-if scenario generation."""
        await self.log(AuditEventBuilder.scenarios_generated(
            method=method,
            scenario_count=scenario_count,
            correlation_id=correlation_id,
        ))

    async def log_advice_generated(
        self,
        mode: str,
        source: str,
        insight_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log insights handed to the user."""
        await self.log(AuditEventBuilder.advice_generated(
            mode=mode,
            source=source,
            insight_count=insight_count,
            correlation_id=correlation_id,
        ))

    async def log_advice_fallback(
        self,
        mode: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that local insights replaced the advisor's."""
        await self.log(AuditEventBuilder.advice_fallback_used(
            mode=mode,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        entity_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log validation failure."""
        await self.log(AuditEventBuilder.validation_failed(
            entity_type=entity_type,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., refreshing insights).
    Pass it through all subsequent operations.
    """
    return uuid4()
