"""
Unit tests for the Pomodoro schedule advisor rule cascade.
"""

from datetime import datetime, timedelta

import pytest

from src.analytics.confidence import compute_confidence
from src.analytics.schedule import (
    FALLBACK_ERROR,
    ReasonCode,
    ScheduleAdvisor,
    most_recent,
    recommend_from_history,
)
from src.core.attempt import Attempt
from src.db.attempt_log import InMemoryAttemptLog

START = datetime(2025, 1, 6, 9, 0)


def _history(make_attempt, accuracies, start=START):
    """Attempts one minute apart, oldest first."""
    return [
        make_attempt(accuracy=a, timestamp=start + timedelta(minutes=i))
        for i, a in enumerate(accuracies)
    ]


def _morning_peak_history(make_attempt, recent_correct):
    """15 morning attempts whose newest 10 contain `recent_correct` correct answers."""
    older = [1] * 5
    newest = [1] * recent_correct + [0] * (10 - recent_correct)
    return _history(make_attempt, older + newest)


class TestRuleCascade:
    def test_default_without_history(self):
        rec = recommend_from_history([], current_hour=9)

        assert rec.reason_code is ReasonCode.DEFAULT
        assert (rec.focus_minutes, rec.break_minutes) == (25, 5)
        assert rec.context == {
            "recent_accuracy": 100,
            "activities_analyzed": 0,
            "current_time_slot": "Morning",
        }

    def test_peak_time_when_current_hour_in_best_bucket(self, make_attempt):
        rec = recommend_from_history(_morning_peak_history(make_attempt, 6), current_hour=10)

        assert rec.reason_code is ReasonCode.PEAK_TIME
        assert (rec.focus_minutes, rec.break_minutes) == (35, 5)
        assert rec.context["recent_accuracy"] == 60

    def test_no_peak_bonus_outside_best_bucket(self, make_attempt):
        rec = recommend_from_history(_morning_peak_history(make_attempt, 6), current_hour=20)

        assert rec.reason_code is ReasonCode.DEFAULT
        assert rec.context["current_time_slot"] == "Evening"

    def test_fatigue_overrides_peak_time(self, make_attempt):
        rec = recommend_from_history(_morning_peak_history(make_attempt, 4), current_hour=10)

        assert rec.reason_code is ReasonCode.FATIGUE_DETECTED
        assert (rec.focus_minutes, rec.break_minutes) == (20, 10)
        assert rec.context["recent_accuracy"] == 40
        assert rec.context["activities_analyzed"] == 10

    def test_momentum(self, make_attempt):
        rec = recommend_from_history(_history(make_attempt, [1] * 6), current_hour=20)

        assert rec.reason_code is ReasonCode.LEARNING_MOMENTUM
        assert (rec.focus_minutes, rec.break_minutes) == (30, 5)

    def test_momentum_at_exactly_eighty_percent(self, make_attempt):
        rec = recommend_from_history(_history(make_attempt, [0, 0] + [1] * 8), current_hour=20)
        assert rec.reason_code is ReasonCode.LEARNING_MOMENTUM

    def test_fifty_percent_is_neither_fatigue_nor_momentum(self, make_attempt):
        rec = recommend_from_history(_history(make_attempt, [1, 0] * 5), current_hour=20)

        assert rec.reason_code is ReasonCode.DEFAULT
        assert rec.context["recent_accuracy"] == 50

    def test_too_few_recent_attempts_for_fatigue(self, make_attempt):
        rec = recommend_from_history(_history(make_attempt, [0] * 4), current_hour=20)
        assert rec.reason_code is ReasonCode.DEFAULT

    def test_only_ten_most_recent_considered(self, make_attempt):
        # Ten old misses followed by ten recent hits
        rec = recommend_from_history(_history(make_attempt, [0] * 10 + [1] * 10), current_hour=20)

        assert rec.reason_code is ReasonCode.LEARNING_MOMENTUM
        assert rec.context["recent_accuracy"] == 100

    def test_explicit_recent_window(self, make_attempt):
        history = _history(make_attempt, [1] * 10)
        recent = [make_attempt(accuracy=0) for _ in range(6)]

        rec = recommend_from_history(history, current_hour=20, recent=recent)

        assert rec.reason_code is ReasonCode.FATIGUE_DETECTED

    def test_to_dict(self):
        data = recommend_from_history([], current_hour=3).to_dict()

        assert data["reason"] == "default"
        assert data["context"]["current_time_slot"] == "Late Night"


class TestMostRecent:
    def test_sorted_newest_first(self, make_attempt):
        history = _history(make_attempt, [0, 1, 1])
        shuffled = [history[1], history[2], history[0]]

        assert most_recent(shuffled, 2) == [history[2], history[1]]

    def test_input_order_kept_without_timestamps(self, make_attempt):
        attempts = [make_attempt(accuracy=a) for a in (1, 0, 1)]
        assert most_recent(attempts, 2) == attempts[:2]

    def test_mixed_utc_and_local_timestamps(self):
        records = [
            {"accuracy": 1, "responseTime": 30, "expectedSeconds": 40, "timestamp": "2025-01-06T09:15:00Z"},
            {"accuracy": 0, "responseTime": 50, "expectedSeconds": 40, "timestamp": "2025-01-06T09:16:00"},
        ]
        attempts = [Attempt.from_record(record) for record in records]

        recent = most_recent(attempts, 20)
        assert len(recent) == 2
        assert compute_confidence(recent).attempts_used == 2
        assert recommend_from_history(attempts, current_hour=9).reason_code == ReasonCode.DEFAULT


class _BrokenSource:
    def recent(self, user_id, subject, *, topic=None, limit=20):
        raise ConnectionError("attempt store unavailable")

    def history(self, user_id, subject=None):
        raise ConnectionError("attempt store unavailable")


class TestScheduleAdvisor:
    def test_reads_through_attempt_source(self, make_attempt):
        log = InMemoryAttemptLog.for_user("u1", _history(make_attempt, [1] * 6))
        advisor = ScheduleAdvisor(log, clock=lambda: datetime(2025, 1, 6, 21, 0))

        rec = advisor.recommend("u1", "DSA")

        assert rec.reason_code is ReasonCode.LEARNING_MOMENTUM
        assert rec.context["current_time_slot"] == "Night"

    def test_other_users_history_ignored(self, make_attempt):
        log = InMemoryAttemptLog.for_user("u2", _history(make_attempt, [0] * 10))
        advisor = ScheduleAdvisor(log, clock=lambda: START)

        assert advisor.recommend("u1", "DSA").reason_code is ReasonCode.DEFAULT

    def test_failing_source_falls_back_to_default(self):
        advisor = ScheduleAdvisor(_BrokenSource(), clock=lambda: START)

        rec = advisor.recommend("u1", "DSA")

        assert rec.reason_code is ReasonCode.DEFAULT
        assert (rec.focus_minutes, rec.break_minutes) == (25, 5)
        assert rec.context == {"error": FALLBACK_ERROR}

    @pytest.mark.parametrize("hour,expected", [(10, ReasonCode.PEAK_TIME), (15, ReasonCode.DEFAULT)])
    def test_clock_drives_peak_time(self, make_attempt, hour, expected):
        log = InMemoryAttemptLog.for_user("u1", _morning_peak_history(make_attempt, 6))
        advisor = ScheduleAdvisor(log, clock=lambda: START.replace(hour=hour))

        assert advisor.recommend("u1", "DSA").reason_code is expected
