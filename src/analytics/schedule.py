"""
Pomodoro schedule advisor.

Recommends focus/break durations from a learner's attempt history. Rules are
applied as a cascade where each later rule overwrites the earlier choice:

1. Default:            25 min focus, 5 min break
2. Peak time:          35 / 5  when the current hour falls in the learner's
                       best-accuracy bucket (needs 15+ attempts)
3. Fatigue detected:   20 / 10 when the last 10 attempts are below 50%
                       (needs 5+ recent attempts, overrides peak time)
4. Learning momentum:  30 / 5  otherwise, when the last 10 attempts are at
                       80% or better (needs 5+ recent attempts)

The advisor never raises: any failure while reading history yields the
default recommendation with an error note in its context.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from loguru import logger

from src.analytics.peak_time import PEAK_MIN_ATTEMPTS, detect_peak_bucket
from src.core.attempt import Attempt, IAttemptSource
from src.core.stats import percent
from src.core.time_buckets import classify_hour

RECENT_WINDOW = 10
MIN_RECENT_ATTEMPTS = 5
FATIGUE_ACCURACY = 0.50
MOMENTUM_ACCURACY = 0.80

FALLBACK_ERROR = "Could not calculate optimal settings"


class ReasonCode(str, Enum):
    """Which rule produced a recommendation."""

    DEFAULT = "default"
    PEAK_TIME = "peak_time"
    FATIGUE_DETECTED = "fatigue_detected"
    LEARNING_MOMENTUM = "learning_momentum"


@dataclass(frozen=True)
class PomodoroSettings:
    """Focus/break pair attached to a reason."""

    focus_minutes: int
    break_minutes: int


RULE_SETTINGS: dict[ReasonCode, PomodoroSettings] = {
    ReasonCode.DEFAULT: PomodoroSettings(25, 5),
    ReasonCode.PEAK_TIME: PomodoroSettings(35, 5),
    ReasonCode.FATIGUE_DETECTED: PomodoroSettings(20, 10),
    ReasonCode.LEARNING_MOMENTUM: PomodoroSettings(30, 5),
}


@dataclass
class ScheduleRecommendation:
    """Recommended Pomodoro settings and the rule that chose them."""

    focus_minutes: int
    break_minutes: int
    reason_code: ReasonCode
    context: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_reason(cls, reason: ReasonCode, context: dict[str, Any] | None = None) -> ScheduleRecommendation:
        settings = RULE_SETTINGS[reason]
        return cls(
            focus_minutes=settings.focus_minutes,
            break_minutes=settings.break_minutes,
            reason_code=reason,
            context=context or {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "focus_minutes": self.focus_minutes,
            "break_minutes": self.break_minutes,
            "reason": self.reason_code.value,
            "context": dict(self.context),
        }


def most_recent(history: Sequence[Attempt], limit: int) -> list[Attempt]:
    """
    The `limit` most recent attempts.

    Sorted newest first by timestamp when every attempt has one; otherwise
    the input is taken to be most-recent-first already.
    """
    attempts = list(history)
    if attempts and all(a.timestamp is not None for a in attempts):
        attempts.sort(key=lambda a: a.timestamp, reverse=True)
    return attempts[:limit]


def recommend_from_history(
    history: Sequence[Attempt],
    current_hour: int,
    recent: Sequence[Attempt] | None = None,
    *,
    peak_min_attempts: int = PEAK_MIN_ATTEMPTS,
    recent_window: int = RECENT_WINDOW,
    min_recent: int = MIN_RECENT_ATTEMPTS,
) -> ScheduleRecommendation:
    """
    Apply the rule cascade to an attempt history.

    Args:
        history: All attempts for (user, subject)
        current_hour: Wall-clock hour of the request (0-23)
        recent: Most recent attempts, newest first (derived from history if None)
        peak_min_attempts: History size needed for the peak-time rule
        recent_window: Attempts considered for fatigue / momentum
        min_recent: Recent attempts needed for fatigue / momentum

    Returns:
        ScheduleRecommendation chosen by the last matching rule
    """
    if recent is None:
        recent = most_recent(history, recent_window)
    else:
        recent = list(recent)[:recent_window]

    current_bucket = classify_hour(current_hour)
    recent_accuracy = (
        sum(1 for a in recent if a.is_correct) / len(recent) if recent else 1.0
    )

    reason = ReasonCode.DEFAULT

    if len(history) >= peak_min_attempts:
        peak = detect_peak_bucket(history, min_attempts=peak_min_attempts)
        if peak.bucket is not None and peak.bucket == current_bucket:
            reason = ReasonCode.PEAK_TIME

    if len(recent) >= min_recent and recent_accuracy < FATIGUE_ACCURACY:
        reason = ReasonCode.FATIGUE_DETECTED
    elif len(recent) >= min_recent and recent_accuracy >= MOMENTUM_ACCURACY:
        reason = ReasonCode.LEARNING_MOMENTUM

    return ScheduleRecommendation.for_reason(
        reason,
        context={
            "recent_accuracy": percent(recent_accuracy),
            "activities_analyzed": len(recent),
            "current_time_slot": current_bucket.value,
        },
    )


class ScheduleAdvisor:
    """
    Pomodoro recommendations for a (user, subject) backed by an attempt log.

    Example:
        advisor = ScheduleAdvisor(SqlAttemptLog(SessionLocal))
        rec = advisor.recommend("user-1", "DSA")
    """

    def __init__(
        self,
        source: IAttemptSource,
        clock: Callable[[], datetime] = datetime.now,
        peak_min_attempts: int = PEAK_MIN_ATTEMPTS,
        recent_window: int = RECENT_WINDOW,
        min_recent: int = MIN_RECENT_ATTEMPTS,
    ):
        """
        Initialize the advisor.

        Args:
            source: Attempt log to read history from
            clock: Returns the current local time
            peak_min_attempts: History size needed for the peak-time rule
            recent_window: Attempts considered for fatigue / momentum
            min_recent: Recent attempts needed for fatigue / momentum
        """
        self.source = source
        self.clock = clock
        self.peak_min_attempts = peak_min_attempts
        self.recent_window = recent_window
        self.min_recent = min_recent

    def recommend(self, user_id: str, subject: str) -> ScheduleRecommendation:
        """
        Recommend Pomodoro settings, degrading to the default on failure.

        Args:
            user_id: Learner identifier
            subject: Subject being studied

        Returns:
            ScheduleRecommendation (never raises)
        """
        try:
            recent = self.source.recent(user_id, subject, limit=self.recent_window)
            history = self.source.history(user_id, subject)
            recommendation = recommend_from_history(
                history,
                self.clock().hour,
                recent,
                peak_min_attempts=self.peak_min_attempts,
                recent_window=self.recent_window,
                min_recent=self.min_recent,
            )
        except Exception as e:  # Intentionally broad - a failed lookup must not block a study session
            logger.warning(f"Pomodoro recommendation fell back to default for {user_id}/{subject}: {e}")
            return ScheduleRecommendation.for_reason(
                ReasonCode.DEFAULT,
                context={"error": FALLBACK_ERROR},
            )

        logger.debug(
            f"Pomodoro for {user_id}/{subject}: {recommendation.reason_code.value} "
            f"({recommendation.focus_minutes}/{recommendation.break_minutes})"
        )
        return recommendation
