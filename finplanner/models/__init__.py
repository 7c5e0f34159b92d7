"""
Data Models Package

This package contains all Pydantic models used in the Finance Planner.
All data flowing through the system must conform to these schemas.
"""

from finplanner.models.budget import (
    CATEGORY_CATALOGUE,
    DEBT_CATEGORY,
    NO_DATA,
    SAVINGS_CATEGORY,
    UNCATEGORIZED,
    Budget,
    BudgetCategory,
    BudgetSummary,
    CategoryBreakdown,
    CategoryVariance,
    DebtStatus,
    EmergencyFundStatus,
    SpendingRecord,
    VarianceDirection,
    VarianceReport,
    default_categories,
)
from finplanner.models.investment import (
    GrowthResult,
    InvestmentParameters,
    ScenarioMethod,
    WhatIfScenario,
    YearSnapshot,
)
from finplanner.models.insight import (
    KNOWN_MARKERS,
    AdviceResponse,
    Insight,
    InsightKind,
    InsightSource,
)
from finplanner.models.validation import ValidationIssue
from finplanner.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Budget models
    "CATEGORY_CATALOGUE",
    "DEBT_CATEGORY",
    "NO_DATA",
    "SAVINGS_CATEGORY",
    "UNCATEGORIZED",
    "Budget",
    "BudgetCategory",
    "BudgetSummary",
    "CategoryBreakdown",
    "CategoryVariance",
    "DebtStatus",
    "EmergencyFundStatus",
    "SpendingRecord",
    "VarianceDirection",
    "VarianceReport",
    "default_categories",
    # Investment models
    "GrowthResult",
    "InvestmentParameters",
    "ScenarioMethod",
    "WhatIfScenario",
    "YearSnapshot",
    # Insight models
    "KNOWN_MARKERS",
    "AdviceResponse",
    "Insight",
    "InsightKind",
    "InsightSource",
    # Validation
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
