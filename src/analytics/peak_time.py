"""
Peak study time detection.

Groups a learner's full attempt history by time-of-day bucket and reports
the bucket with the highest accuracy. Needs at least 15 attempts.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from src.core.attempt import Attempt
from src.core.stats import is_number, percent
from src.core.time_buckets import CANONICAL_ORDER, TimeBucket, bucket_for

PEAK_MIN_ATTEMPTS = 15


@dataclass
class BucketStats:
    """Attempt and correct counts for one time bucket."""

    attempts: int = 0
    correct: float = 0.0

    @property
    def accuracy(self) -> float:
        return self.correct / self.attempts if self.attempts else 0.0


@dataclass
class PeakTimeResult:
    """Outcome of a peak-time query."""

    ready: bool
    bucket: TimeBucket | None = None
    accuracy_percent: int | None = None
    attempts_analyzed: int = 0
    bucket_stats: dict[TimeBucket, BucketStats] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "ready": self.ready,
            "peak_time": self.bucket.value if self.bucket else None,
            "accuracy": self.accuracy_percent,
            "attempts_analyzed": self.attempts_analyzed,
        }


def bucket_accuracy(attempts: Iterable[Attempt]) -> dict[TimeBucket, BucketStats]:
    """Per-bucket attempt counts; attempts without a timestamp or accuracy are skipped."""
    stats: dict[TimeBucket, BucketStats] = {}
    for attempt in attempts:
        if attempt.timestamp is None or not is_number(attempt.accuracy):
            continue
        bucket_stats = stats.setdefault(bucket_for(attempt.timestamp), BucketStats())
        bucket_stats.attempts += 1
        bucket_stats.correct += attempt.accuracy
    return stats


def detect_peak_bucket(
    attempts: Iterable[Attempt],
    min_attempts: int = PEAK_MIN_ATTEMPTS,
) -> PeakTimeResult:
    """
    Find the time bucket with the highest historical accuracy.

    Buckets are scanned in canonical order (Morning, Afternoon, Evening,
    Night, Late Night) and only a strictly better accuracy replaces the
    current best, so ties go to the earliest bucket in that order. When
    every bucket is at 0% there is no peak and bucket is None.

    Args:
        attempts: Full attempt history for the scope
        min_attempts: History size required before a peak is reported

    Returns:
        PeakTimeResult; ready is False with too little history
    """
    history = list(attempts)
    if len(history) < min_attempts:
        return PeakTimeResult(ready=False, attempts_analyzed=len(history))

    stats = bucket_accuracy(history)

    best_bucket: TimeBucket | None = None
    best_accuracy = 0.0
    for bucket in CANONICAL_ORDER:
        if bucket not in stats:
            continue
        accuracy = stats[bucket].accuracy
        if accuracy > best_accuracy:
            best_accuracy = accuracy
            best_bucket = bucket

    return PeakTimeResult(
        ready=True,
        bucket=best_bucket,
        accuracy_percent=percent(best_accuracy),
        attempts_analyzed=len(history),
        bucket_stats=stats,
    )
