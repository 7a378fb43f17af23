"""
Core Module - Shared domain models and helpers.

Components:
- attempt: Attempt records and difficulty timing
- mastery: MasteryProfile and the per-attempt update rule
- stats: clamp01 / median / round2 shared by every engine
- time_buckets: Hour-of-day classification

Design Principle:
The analytics engines (src/analytics/) and the study services (src/study/)
import these types rather than redefining them.
"""

from src.core.attempt import Attempt, Difficulty, expected_seconds_for
from src.core.mastery import MasteryLevel, MasteryProfile, subtopic_entry_level
from src.core.stats import clamp01, median, percent, round2
from src.core.time_buckets import CANONICAL_ORDER, TimeBucket, bucket_for, classify_hour

__all__ = [
    # Attempts
    "Attempt",
    "Difficulty",
    "expected_seconds_for",
    # Mastery
    "MasteryLevel",
    "MasteryProfile",
    "subtopic_entry_level",
    # Stats
    "clamp01",
    "median",
    "percent",
    "round2",
    # Time buckets
    "CANONICAL_ORDER",
    "TimeBucket",
    "bucket_for",
    "classify_hour",
]
