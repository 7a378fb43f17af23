"""
Unit tests for Attempt records and difficulty timing.
"""

import math
from datetime import datetime, timezone

import pytest

from src.core.attempt import Attempt, Difficulty, expected_seconds_for


class TestDifficulty:
    @pytest.mark.parametrize(
        "difficulty,seconds",
        [("easy", 40), ("medium", 70), ("hard", 110), (Difficulty.HARD, 110)],
    )
    def test_expected_seconds(self, difficulty, seconds):
        assert expected_seconds_for(difficulty) == seconds

    @pytest.mark.parametrize("difficulty", ["expert", "", None])
    def test_unknown_difficulty_uses_medium(self, difficulty):
        assert expected_seconds_for(difficulty) == 70

    def test_parse_is_case_insensitive(self):
        assert Difficulty.parse(" Hard ") is Difficulty.HARD


class TestAttemptValidity:
    def test_valid_attempt(self, make_attempt):
        attempt = make_attempt()
        assert attempt.is_valid
        assert attempt.is_correct

    def test_zero_response_time_is_valid(self, make_attempt):
        assert make_attempt(response_time=0).is_valid

    @pytest.mark.parametrize("expected", [0, -10, None, math.nan])
    def test_non_positive_or_missing_expected_is_invalid(self, make_attempt, expected):
        assert not make_attempt(expected=expected).is_valid

    @pytest.mark.parametrize("field", ["accuracy", "response_time"])
    def test_missing_numeric_field_is_invalid(self, make_attempt, field):
        assert not make_attempt(**{field: None}).is_valid

    def test_incorrect_attempt(self, make_attempt):
        assert not make_attempt(accuracy=0).is_correct


class TestFromRecord:
    def test_camel_case_keys(self):
        attempt = Attempt.from_record(
            {
                "accuracy": 1,
                "responseTime": 42,
                "expectedSeconds": 70,
                "subject": "DSA",
                "topic": "Trees",
                "sessionId": 7,
            }
        )
        assert attempt.response_time_seconds == 42
        assert attempt.expected_seconds == 70
        assert attempt.topic == "Trees"
        assert attempt.session_id == "7"
        assert attempt.is_valid

    def test_snake_case_keys(self):
        attempt = Attempt.from_record(
            {"accuracy": 0, "response_time_seconds": 12.5, "expected_seconds": 40}
        )
        assert attempt.response_time_seconds == 12.5
        assert attempt.subject == ""

    def test_iso_timestamps_parsed(self):
        naive = Attempt.from_record({"timestamp": "2025-01-06T09:15:00"})
        assert naive.timestamp == datetime(2025, 1, 6, 9, 15)

        zulu = Attempt.from_record({"timestamp": "2025-01-06T09:15:00Z"})
        assert zulu.timestamp.tzinfo is None
        assert zulu.timestamp == datetime(2025, 1, 6, 9, 15, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

    def test_aware_timestamp_stored_as_local_wall_clock(self):
        utc_noon = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)
        attempt = Attempt(accuracy=1, response_time_seconds=30, expected_seconds=40, timestamp=utc_noon)

        assert attempt.timestamp.tzinfo is None
        assert attempt.timestamp == utc_noon.astimezone().replace(tzinfo=None)

    def test_unreadable_fields_become_none(self):
        attempt = Attempt.from_record(
            {"accuracy": "yes", "responseTime": "fast", "expectedSeconds": 70, "timestamp": "not a date"}
        )
        assert attempt.accuracy is None
        assert attempt.response_time_seconds is None
        assert attempt.timestamp is None
        assert not attempt.is_valid
