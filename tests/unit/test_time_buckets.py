"""
Unit tests for time-of-day bucket classification.
"""

from datetime import datetime

import pytest

from src.core.time_buckets import CANONICAL_ORDER, TimeBucket, bucket_for, classify_hour


class TestClassifyHour:
    @pytest.mark.parametrize(
        "hour,bucket",
        [
            (5, TimeBucket.MORNING),
            (10, TimeBucket.MORNING),
            (11, TimeBucket.AFTERNOON),
            (15, TimeBucket.AFTERNOON),
            (16, TimeBucket.EVENING),
            (20, TimeBucket.EVENING),
            (21, TimeBucket.NIGHT),
            (23, TimeBucket.NIGHT),
            (0, TimeBucket.NIGHT),
            (1, TimeBucket.NIGHT),
            (2, TimeBucket.LATE_NIGHT),
            (4, TimeBucket.LATE_NIGHT),
        ],
    )
    def test_boundaries(self, hour, bucket):
        assert classify_hour(hour) is bucket

    def test_every_hour_has_exactly_one_bucket(self):
        buckets = [classify_hour(h) for h in range(24)]
        assert len(buckets) == 24
        assert set(buckets) == set(TimeBucket)

    @pytest.mark.parametrize("hour", [-1, 24, 12.5, True])
    def test_invalid_hours_rejected(self, hour):
        with pytest.raises(ValueError):
            classify_hour(hour)


class TestBucketFor:
    def test_uses_timestamp_wall_clock_hour(self):
        assert bucket_for(datetime(2025, 3, 1, 22, 30)) is TimeBucket.NIGHT
        assert bucket_for(datetime(2025, 3, 1, 3, 0)) is TimeBucket.LATE_NIGHT

    def test_late_night_display_value(self):
        assert TimeBucket.LATE_NIGHT.display_name == "Late Night"

    def test_canonical_order(self):
        assert [b.value for b in CANONICAL_ORDER] == [
            "Morning",
            "Afternoon",
            "Evening",
            "Night",
            "Late Night",
        ]
