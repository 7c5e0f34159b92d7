"""
Insight Models for Finance Planner

An insight is a short natural-language observation about the user's
budget or investment plan. It can come from the AI advisor or from the
deterministic heuristic engine - both produce the same shape so the UI
never needs to know which one answered.
"""

from enum import Enum
from html import escape
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class InsightKind(str, Enum):
    """Classification used for downstream styling."""
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"
    TIP = "tip"

    @property
    def marker(self) -> str:
        """Default leading marker for this kind."""
        return _DEFAULT_MARKERS[self]


_DEFAULT_MARKERS = {
    InsightKind.WARNING: "⚠️",
    InsightKind.INFO: "📊",
    InsightKind.SUCCESS: "✅",
    InsightKind.TIP: "💡",
}

# Markers the advisor is asked to start each insight with, and how
# each one is styled. Longest first so "⚠️" wins over "⚠".
KNOWN_MARKERS: dict[str, InsightKind] = {
    "⚠️": InsightKind.WARNING,
    "⚠": InsightKind.WARNING,
    "🚨": InsightKind.WARNING,
    "📈": InsightKind.WARNING,
    "💳": InsightKind.WARNING,
    "📉": InsightKind.INFO,
    "🎯": InsightKind.INFO,
    "🔍": InsightKind.INFO,
    "📊": InsightKind.INFO,
    "✅": InsightKind.SUCCESS,
    "🏆": InsightKind.SUCCESS,
    "🎉": InsightKind.SUCCESS,
    "💡": InsightKind.TIP,
    "💰": InsightKind.TIP,
}


class Insight(BaseModel):
    """
    A single insight.

    Budget insights are one sentence (message) with a marker.
    Investment saving tips also carry a title, a category and an
    estimate of how much could be saved.
    """

    kind: InsightKind = Field(
        default=InsightKind.INFO,
        description="Styling classification"
    )
    message: str = Field(
        ...,
        min_length=1,
        description="The insight text, without the leading marker"
    )
    marker: str = Field(
        default="",
        max_length=10,
        description="Leading emoji; defaults to the kind's marker"
    )
    title: Optional[str] = None
    category: Optional[str] = Field(
        default=None,
        description="Budget category or tip category this insight is about"
    )
    potential_savings: Optional[str] = Field(
        default=None,
        description="Estimated savings, e.g. '$300-600 annually'"
    )

    @model_validator(mode='after')
    def fill_marker(self) -> 'Insight':
        if not self.marker:
            self.marker = self.kind.marker
        return self

    @property
    def text(self) -> str:
        """Marker + message, as shown in the insight list."""
        return f"{self.marker} {self.message}"

    def to_html(self, box_class: str) -> str:
        """Styled box for the UI. Advisor text is escaped before it reaches the page."""
        if not self.title:
            return f'<div class="{box_class}">{escape(self.text)}</div>'
        return (
            f'<div class="{box_class}">'
            f"<h4>{escape(self.marker)} {escape(self.title)}</h4>"
            f"<p>{escape(self.message)}</p>"
            f"<p><strong>{escape(self.potential_savings or '')}</strong> · {escape(self.category or '')}</p>"
            "</div>"
        )


class InsightSource(str, Enum):
    """Who produced the insights the user is looking at."""
    AI = "ai"
    AI_SUPPLEMENTED = "ai_supplemented"  # AI answered too briefly, topped up locally
    HEURISTIC = "heuristic"


class AdviceResponse(BaseModel):
    """Insights handed to the UI after a refresh."""

    source: InsightSource
    insights: list[Insight] = Field(default_factory=list)
    fallback_reason: Optional[str] = Field(
        default=None,
        description="Why the AI answer was not used, if it wasn't"
    )

    @property
    def used_fallback(self) -> bool:
        return self.source == InsightSource.HEURISTIC
