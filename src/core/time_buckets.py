"""
Time-of-day buckets used by peak-time detection and Pomodoro scheduling.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum


class TimeBucket(str, Enum):
    """Calendar time-of-day bucket."""

    MORNING = "Morning"  # [5, 11)
    AFTERNOON = "Afternoon"  # [11, 16)
    EVENING = "Evening"  # [16, 21)
    NIGHT = "Night"  # [21, 24) and [0, 2)
    LATE_NIGHT = "Late Night"  # [2, 5)

    @property
    def display_name(self) -> str:
        return self.value


# Fixed scan order for peak-bucket tie-breaks
CANONICAL_ORDER: tuple[TimeBucket, ...] = (
    TimeBucket.MORNING,
    TimeBucket.AFTERNOON,
    TimeBucket.EVENING,
    TimeBucket.NIGHT,
    TimeBucket.LATE_NIGHT,
)


def classify_hour(hour: int) -> TimeBucket:
    """
    Map an hour of day (0-23) to its time bucket.

    Raises:
        ValueError: If hour is outside 0-23
    """
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
        raise ValueError(f"Hour must be an integer in 0-23, got {hour!r}")

    if 5 <= hour < 11:
        return TimeBucket.MORNING
    elif 11 <= hour < 16:
        return TimeBucket.AFTERNOON
    elif 16 <= hour < 21:
        return TimeBucket.EVENING
    elif hour >= 21 or hour < 2:
        return TimeBucket.NIGHT
    else:
        return TimeBucket.LATE_NIGHT


def bucket_for(timestamp: datetime) -> TimeBucket:
    """Bucket for a timestamp, using its own wall-clock hour."""
    return classify_hour(timestamp.hour)
