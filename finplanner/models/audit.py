"""
Audit Models for Finance Planner

Every significant action in the system is logged for audit purposes.
This provides:
1. Traceability of every calculation a user triggered
2. Debugging information when the advisor misbehaves
3. Visibility into how often the local fallback is used

DESIGN DECISION: Audit events describe WHAT happened and with which
inputs. They never carry results that could be recomputed.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Budget planner
    BUDGET_EVALUATED = "budget_evaluated"
    BUDGET_SAVED = "budget_saved"
    BUDGET_LOADED = "budget_loaded"
    SAVE_FAILED = "save_failed"

    # Investment calculator
    PROJECTION_CALCULATED = "projection_calculated"
    SCENARIOS_GENERATED = "scenarios_generated"

    # Advice
    ADVICE_GENERATED = "advice_generated"
    ADVICE_FALLBACK_USED = "advice_fallback_used"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - who/what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'budget', 'projection', 'advice')"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="User the action was performed for"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one insights refresh)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.budget_saved(user_id, income, total, correlation_id)
        event = AuditEventBuilder.advice_fallback_used("budget", reason, correlation_id)
    """

    @staticmethod
    def budget_evaluated(
        monthly_income: float,
        total_budgeted: float,
        flagged_categories: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_EVALUATED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Budget evaluated: {flagged_categories} categories off target",
            details={
                "monthly_income": monthly_income,
                "total_budgeted": total_budgeted,
                "flagged_categories": flagged_categories,
            },
        )

    @staticmethod
    def budget_saved(
        user_id: str,
        monthly_income: float,
        total_budgeted: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SAVED,
            entity_type="budget",
            user_id=user_id,
            correlation_id=correlation_id,
            description="Budget saved",
            details={
                "monthly_income": monthly_income,
                "total_budgeted": total_budgeted,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_loaded(
        user_id: str,
        found: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_LOADED,
            entity_type="budget",
            user_id=user_id,
            correlation_id=correlation_id,
            description="Budget loaded" if found else "No saved budget, using defaults",
            details={"found": found},
        )

    @staticmethod
    def save_failed(
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="budget",
            user_id=user_id,
            correlation_id=correlation_id,
            description="Budget could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def projection_calculated(
        total_years: int,
        final_amount: float,
        annual_return_percent: float,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECTION_CALCULATED,
            entity_type="projection",
            correlation_id=correlation_id,
            description=f"Projection calculated over {total_years} years",
            details={
                "total_years": total_years,
                "final_amount": final_amount,
                "annual_return_percent": annual_return_percent,
            },
            is_user_action=True,
        )

    @staticmethod
    def scenarios_generated(
        method: str,
        scenario_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SCENARIOS_GENERATED,
            entity_type="projection",
            correlation_id=correlation_id,
            description=f"{scenario_count} what-if scenarios generated ({method})",
            details={
                "method": method,
                "scenario_count": scenario_count,
            },
        )

    @staticmethod
    def advice_generated(
        mode: str,
        source: str,
        insight_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_GENERATED,
            entity_type="advice",
            correlation_id=correlation_id,
            description=f"{insight_count} {mode} insights from {source}",
            details={
                "mode": mode,
                "source": source,
                "insight_count": insight_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def advice_fallback_used(
        mode: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ADVICE_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            entity_type="advice",
            correlation_id=correlation_id,
            description=f"Advisor unavailable, using local {mode} insights",
            error_message=reason,
            details={"mode": mode},
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"Validation failed with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
