"""
Finance Planner - Source Package

A personal-finance assistant offering two calculators:
a monthly budget planner and a retirement investment projector,
each paired with natural-language advice.

DESIGN PRINCIPLES:
1. The numbers come from deterministic engines, never from the AI
2. AI advice is optional - the heuristic insights are always available
3. Reject bad input before computing anything
4. Every user action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Planner Team"
