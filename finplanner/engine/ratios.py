"""
Safe division helpers.

Every ratio the engines compute goes through here, so a zero income or
an empty budget resolves to a defined value instead of raising or
producing inf/nan.
"""

import math


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """numerator / denominator, or `default` when the denominator is 0 or the result is not finite."""
    if denominator == 0:
        return default
    result = numerator / denominator
    if not math.isfinite(result):
        return default
    return result


def percent_of(part: float, whole: float) -> float:
    """part as a percentage of whole; 0 when whole is 0."""
    return safe_ratio(part, whole) * 100
