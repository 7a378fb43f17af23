"""
Cycle Analyzer for micro-cycle mastery checks.

A learning session advances one attempt at a time. Every fifth attempt closes
a cycle, and the five most recent attempts are summarised into a mastery /
weakness verdict:

- mastery: accuracy >= 85%, at most 2 wrong, median time <= expected time
- weakness: low_accuracy (<70%) > slow_response (median > 1.5× expected)
  > moderate_accuracy (<85%) > none
- next action: "remediate" only for an unmastered cycle with more than
  2 wrong answers, otherwise "continue"

The cycle summary is read-only. Per-attempt mastery updates live on
MasteryProfile and do not depend on cycle boundaries.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TypeVar

from loguru import logger

from src.core.attempt import Attempt
from src.core.stats import median, percent

CYCLE_SIZE = 5
MASTERY_ACCURACY = 0.85
MAX_WRONG_FOR_MASTERY = 2
LOW_ACCURACY = 0.70
SLOW_RESPONSE_FACTOR = 1.5

T = TypeVar("T")


class CycleState(str, Enum):
    """Position of a session's attempt counter relative to cycle boundaries."""

    BELOW_CYCLE = "below_cycle"
    CYCLE_COMPLETE = "cycle_complete"


class WeaknessTag(str, Enum):
    LOW_ACCURACY = "low_accuracy"
    SLOW_RESPONSE = "slow_response"
    MODERATE_ACCURACY = "moderate_accuracy"
    NONE = "none"


class NextAction(str, Enum):
    CONTINUE = "continue"
    REMEDIATE = "remediate"


class QuestionReason(str, Enum):
    """Why a question was served, by position in the session."""

    BASELINE_CHECK = "baseline_check"
    FLUENCY_DRILL = "fluency_drill"
    EDGE_CASE_CHECK = "edge_case_check"
    SLOW_RESPONSE = "slow_response"


@dataclass(frozen=True)
class CyclePosition:
    """Where the next question sits in the current cycle."""

    index: int  # Completed cycles so far
    position: int  # 1..total
    total: int = CYCLE_SIZE


@dataclass(frozen=True)
class CycleSummary:
    """Verdict for one completed cycle."""

    cycle_accuracy: float
    correct_count: int
    wrong_count: int
    median_time: float
    expected_seconds: float
    mastery_achieved: bool
    weakness_tag: WeaknessTag
    next_action: NextAction

    @property
    def accuracy_percent(self) -> int:
        return percent(self.cycle_accuracy)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["weakness_tag"] = self.weakness_tag.value
        data["next_action"] = self.next_action.value
        data["accuracy_percent"] = self.accuracy_percent
        return data


def cycle_state(attempt_count: int, cycle_size: int = CYCLE_SIZE) -> CycleState:
    """State of an attempt counter: complete on every positive multiple of the cycle size."""
    if attempt_count > 0 and attempt_count % cycle_size == 0:
        return CycleState.CYCLE_COMPLETE
    return CycleState.BELOW_CYCLE


def is_cycle_complete(attempt_count: int, cycle_size: int = CYCLE_SIZE) -> bool:
    return cycle_state(attempt_count, cycle_size) is CycleState.CYCLE_COMPLETE


def cycle_position(attempt_count: int, cycle_size: int = CYCLE_SIZE) -> CyclePosition:
    """Cycle index and 1-based position of the next question."""
    count = max(0, attempt_count)
    return CyclePosition(
        index=count // cycle_size,
        position=count % cycle_size + 1,
        total=cycle_size,
    )


def analyze_cycle(
    recent_attempts: Sequence[Attempt],
    expected_seconds: float,
    cycle_size: int = CYCLE_SIZE,
    mastery_accuracy: float = MASTERY_ACCURACY,
) -> CycleSummary:
    """
    Summarise a completed cycle.

    Args:
        recent_attempts: Attempts in the cycle's scope, most recent first.
            Only the first `cycle_size` are used.
        expected_seconds: Expected response time for the session difficulty
        cycle_size: Attempts per cycle (accuracy denominator)
        mastery_accuracy: Accuracy required for mastery

    Returns:
        CycleSummary with mastery decision, weakness tag and next action

    Raises:
        ValueError: If no attempts are supplied
    """
    window = list(recent_attempts)[:cycle_size]
    if not window:
        raise ValueError("Cannot analyze an empty cycle")

    correct_count = sum(1 for a in window if a.is_correct)
    cycle_accuracy = correct_count / cycle_size
    wrong_count = cycle_size - correct_count
    median_time = median(a.response_time_seconds or 0 for a in window)

    mastery_achieved = (
        cycle_accuracy >= mastery_accuracy
        and wrong_count <= MAX_WRONG_FOR_MASTERY
        and median_time <= expected_seconds
    )

    if cycle_accuracy < LOW_ACCURACY:
        weakness_tag = WeaknessTag.LOW_ACCURACY
    elif median_time > expected_seconds * SLOW_RESPONSE_FACTOR:
        weakness_tag = WeaknessTag.SLOW_RESPONSE
    elif cycle_accuracy < mastery_accuracy:
        weakness_tag = WeaknessTag.MODERATE_ACCURACY
    else:
        weakness_tag = WeaknessTag.NONE

    if mastery_achieved:
        next_action = NextAction.CONTINUE
    elif wrong_count > MAX_WRONG_FOR_MASTERY:
        next_action = NextAction.REMEDIATE
    else:
        next_action = NextAction.CONTINUE

    return CycleSummary(
        cycle_accuracy=cycle_accuracy,
        correct_count=correct_count,
        wrong_count=wrong_count,
        median_time=median_time,
        expected_seconds=expected_seconds,
        mastery_achieved=mastery_achieved,
        weakness_tag=weakness_tag,
        next_action=next_action,
    )


def question_reason_code(attempt_count: int) -> QuestionReason:
    """Static reason code from the raw attempt count (not from performance)."""
    if attempt_count < 2:
        return QuestionReason.BASELINE_CHECK
    elif attempt_count == 2:
        return QuestionReason.FLUENCY_DRILL
    elif attempt_count == 3:
        return QuestionReason.EDGE_CASE_CHECK
    else:
        return QuestionReason.SLOW_RESPONSE


def select_question(bank: Sequence[T], attempt_count: int) -> T:
    """
    Round-robin question selection.

    Raises:
        LookupError: If the bank is empty
    """
    if not bank:
        raise LookupError("Question bank is empty")
    return bank[max(0, attempt_count) % len(bank)]


class CycleAnalyzer:
    """
    Fires a cycle analysis exactly once per completed cycle.

    Stateless apart from its thresholds; the attempt counter belongs to the
    caller's learning session.
    """

    def __init__(self, cycle_size: int = CYCLE_SIZE, mastery_accuracy: float = MASTERY_ACCURACY):
        self.cycle_size = cycle_size
        self.mastery_accuracy = mastery_accuracy

    @classmethod
    def from_settings(cls) -> CycleAnalyzer:
        from config import get_settings

        settings = get_settings()
        return cls(
            cycle_size=settings.cycle_size,
            mastery_accuracy=settings.mastery_accuracy_threshold,
        )

    def on_attempt(
        self,
        attempt_count: int,
        recent_attempts: Sequence[Attempt],
        expected_seconds: float,
    ) -> CycleSummary | None:
        """
        Evaluate the cycle if this attempt closed one.

        Args:
            attempt_count: Session attempt counter after the new attempt
            recent_attempts: Most recent attempts in the cycle scope
            expected_seconds: Expected time for the session difficulty

        Returns:
            CycleSummary at a cycle boundary, otherwise None
        """
        if not is_cycle_complete(attempt_count, self.cycle_size):
            return None

        summary = analyze_cycle(
            recent_attempts,
            expected_seconds,
            cycle_size=self.cycle_size,
            mastery_accuracy=self.mastery_accuracy,
        )
        logger.debug(
            f"Cycle {attempt_count // self.cycle_size} closed: "
            f"accuracy={summary.accuracy_percent}% weakness={summary.weakness_tag.value} "
            f"next={summary.next_action.value}"
        )
        return summary

    def position(self, attempt_count: int) -> CyclePosition:
        return cycle_position(attempt_count, self.cycle_size)
