"""
Unit tests for the confidence engine.

Covers the reference scenarios, the cold-start prior, malformed-record
handling and the output bounds.
"""

import math

import pytest

from src.analytics.confidence import COLD_START, ConfidenceEngine, compute_confidence, speed_ratio


def _attempts(make_attempt, accuracies, times, expected):
    return [
        make_attempt(accuracy=a, response_time=t, expected=expected)
        for a, t in zip(accuracies, times)
    ]


class TestReferenceScenarios:
    def test_scenario_a_mixed_history(self, make_attempt):
        attempts = _attempts(
            make_attempt,
            [1, 1, 0, 1, 1, 0, 1, 1, 0, 1],
            [50, 65, 90, 100, 75, 120, 55, 70, 110, 60],
            70,
        )
        result = compute_confidence(attempts)

        assert result.accuracy_score == pytest.approx(0.70)
        assert result.speed_score == pytest.approx(0.97)
        assert result.confidence == pytest.approx(0.78)
        assert result.attempts_used == 10

    def test_scenario_b_all_fast_and_correct(self, make_attempt):
        attempts = _attempts(make_attempt, [1] * 5, [30, 35, 32, 28, 40], 70)
        result = compute_confidence(attempts)

        assert result.speed_score == pytest.approx(1.0)
        assert result.confidence == pytest.approx(1.0)

    def test_scenario_c_struggling(self, make_attempt):
        attempts = _attempts(make_attempt, [1, 0, 0, 0, 0], [150, 140, 120, 160, 130], 70)
        result = compute_confidence(attempts)

        assert result.accuracy_score == pytest.approx(0.20)
        assert result.speed_score == pytest.approx(0.50)
        assert result.confidence == pytest.approx(0.29)

    def test_scenario_d_two_attempts(self, make_attempt):
        attempts = _attempts(make_attempt, [1, 1], [50, 60], 70)
        result = compute_confidence(attempts)

        assert result.speed_score == pytest.approx(1.0)
        assert result.confidence == pytest.approx(1.0)
        assert result.attempts_used == 2


class TestColdStart:
    def test_empty_input(self):
        assert compute_confidence([]) == COLD_START

    def test_none_input(self):
        assert compute_confidence(None) == COLD_START

    def test_non_iterable_input(self):
        assert compute_confidence(42) == COLD_START

    def test_all_invalid_input(self, make_attempt):
        attempts = [make_attempt(expected=0), make_attempt(accuracy=None), "not an attempt"]
        result = compute_confidence(attempts)

        assert result.confidence == 0.5
        assert result.accuracy_score == 0.5
        assert result.speed_score == 0.5
        assert result.attempts_used == 0


class TestRobustness:
    def test_malformed_records_are_dropped(self, make_attempt):
        attempts = [
            make_attempt(accuracy=1, response_time=30, expected=40),
            make_attempt(accuracy=0, response_time=30, expected=-5),
            make_attempt(accuracy=0, response_time=math.nan, expected=40),
        ]
        result = compute_confidence(attempts)

        assert result.attempts_used == 1
        assert result.confidence == pytest.approx(1.0)

    def test_single_slow_outlier_does_not_move_speed_score(self, make_attempt):
        # Ratios [0.14, 1.0, 1.0, 1.0, 1.0]
        attempts = _attempts(make_attempt, [1] * 5, [500, 30, 30, 30, 30], 70)
        assert compute_confidence(attempts).speed_score == pytest.approx(1.0)

    def test_zero_response_time_counts_as_on_time(self, make_attempt):
        assert speed_ratio(make_attempt(response_time=0, expected=70)) == 1.0

    @pytest.mark.parametrize(
        "accuracies,times",
        [
            ([0, 0, 0], [1000, 2000, 3000]),
            ([1, 1, 1], [0.001, 0.5, 1]),
            ([1, 0, 1, 0], [70, 0, 140, 35]),
        ],
    )
    def test_outputs_bounded(self, make_attempt, accuracies, times):
        result = compute_confidence(_attempts(make_attempt, accuracies, times, 70))

        for value in (result.confidence, result.accuracy_score, result.speed_score):
            assert 0.0 <= value <= 1.0
        assert result.attempts_used == len(accuracies)


class TestConfidenceEngine:
    def test_custom_weights(self, make_attempt):
        engine = ConfidenceEngine(weight_accuracy=0.5, weight_speed=0.5)
        attempts = _attempts(make_attempt, [1, 1, 0, 0], [140, 140, 140, 140], 70)

        result = engine.compute(attempts)

        assert result.confidence == pytest.approx(0.5)

    def test_from_settings_defaults(self):
        engine = ConfidenceEngine.from_settings()

        assert engine.weight_accuracy == pytest.approx(0.7)
        assert engine.weight_speed == pytest.approx(0.3)
        assert engine.window == 20

    def test_to_dict(self, make_attempt):
        data = compute_confidence([make_attempt()]).to_dict()
        assert set(data) == {"confidence", "accuracy_score", "speed_score", "attempts_used"}
