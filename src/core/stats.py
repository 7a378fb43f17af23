"""
Shared statistics helpers.

The median here is the single implementation used by both the confidence
speed score and the cycle median response time.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

NEUTRAL_SCORE = 0.5


def is_number(value: object) -> bool:
    """True for real ints/floats that are not bool and not NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def clamp01(value: float) -> float:
    """
    Clamp a value into [0, 1].

    Non-numeric input (including NaN) maps to the neutral score 0.5.
    """
    if not is_number(value):
        return NEUTRAL_SCORE
    return max(0.0, min(1.0, float(value)))


def median(values: Iterable[float]) -> float:
    """
    Median of a collection of numbers.

    Sorts ascending; odd counts return the middle element, even counts the
    mean of the two central elements. An empty collection returns 0.0.

    Args:
        values: Numbers to aggregate

    Returns:
        Median value
    """
    ordered = sorted(values)
    if not ordered:
        return 0.0
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def round2(value: float) -> float:
    """Round to 2 decimals, halves rounded up."""
    return math.floor(value * 100 + 0.5) / 100


def percent(ratio: float) -> int:
    """Nearest-integer percentage of a 0-1 ratio."""
    return int(math.floor(ratio * 100 + 0.5))
