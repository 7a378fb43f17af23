"""
Confidence Engine.

Reduces the most recent practice attempts to a single confidence score:

    confidence = 0.7 × mean accuracy + 0.3 × median speed ratio

The speed ratio of one attempt is expected / actual response time, clamped
to [0, 1]. The median keeps a single extreme outlier (one very slow answer
among otherwise on-time ones) from dragging the score down.

With no usable attempts the neutral prior 0.5 is returned for every score.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass

from loguru import logger

from src.core.attempt import Attempt
from src.core.stats import NEUTRAL_SCORE, clamp01, median, round2


@dataclass(frozen=True)
class ConfidenceResult:
    """Confidence score and its components, all in [0, 1]."""

    confidence: float
    accuracy_score: float
    speed_score: float
    attempts_used: int

    def to_dict(self) -> dict:
        return asdict(self)


COLD_START = ConfidenceResult(
    confidence=NEUTRAL_SCORE,
    accuracy_score=NEUTRAL_SCORE,
    speed_score=NEUTRAL_SCORE,
    attempts_used=0,
)


def speed_ratio(attempt: Attempt) -> float:
    """
    Speed ratio for one valid attempt.

    A recorded response time of zero is treated as exactly on time
    (ratio 1.0) rather than as missing data.
    """
    response_time = attempt.response_time_seconds
    effective = response_time if response_time > 0 else attempt.expected_seconds
    return clamp01(attempt.expected_seconds / effective)


class ConfidenceEngine:
    """
    Weighted accuracy/speed confidence scorer.

    The engine never selects its own window: callers pass the `window` most
    recent attempts for the scope (user, subject[, topic]).
    """

    WEIGHT_ACCURACY = 0.7
    WEIGHT_SPEED = 0.3
    WINDOW = 20

    def __init__(
        self,
        weight_accuracy: float = 0.7,
        weight_speed: float = 0.3,
        window: int = 20,
    ):
        """
        Initialize engine with weights.

        Args:
            weight_accuracy: Weight for mean accuracy (default 70%)
            weight_speed: Weight for median speed ratio (default 30%)
            window: Number of recent attempts callers should supply
        """
        self.weight_accuracy = weight_accuracy
        self.weight_speed = weight_speed
        self.window = window

    @classmethod
    def from_settings(cls) -> ConfidenceEngine:
        from config import get_settings

        settings = get_settings()
        return cls(
            weight_accuracy=settings.confidence_accuracy_weight,
            weight_speed=settings.confidence_speed_weight,
            window=settings.confidence_window,
        )

    def compute(self, attempts: Iterable[Attempt] | None) -> ConfidenceResult:
        """
        Compute confidence from recent attempts.

        Args:
            attempts: Recent attempts, most recent first. Malformed records
                are dropped rather than failing the call.

        Returns:
            ConfidenceResult rounded to 2 decimals
        """
        if attempts is None:
            return COLD_START

        try:
            valid = [a for a in attempts if isinstance(a, Attempt) and a.is_valid]
        except TypeError:
            logger.debug("Confidence input is not iterable; using cold-start prior")
            return COLD_START

        if not valid:
            return COLD_START

        accuracy_score = sum(a.accuracy for a in valid) / len(valid)
        speed_score = median(speed_ratio(a) for a in valid)
        confidence = self.weight_accuracy * accuracy_score + self.weight_speed * speed_score

        result = ConfidenceResult(
            confidence=round2(clamp01(confidence)),
            accuracy_score=round2(clamp01(accuracy_score)),
            speed_score=round2(clamp01(speed_score)),
            attempts_used=len(valid),
        )
        logger.debug(
            f"Confidence {result.confidence} from {result.attempts_used} attempts "
            f"(accuracy={result.accuracy_score}, speed={result.speed_score})"
        )
        return result


_default_engine = ConfidenceEngine()


def compute_confidence(attempts: Iterable[Attempt] | None) -> ConfidenceResult:
    """Compute confidence with the default 70/30 weights."""
    return _default_engine.compute(attempts)
