"""
Core Mastery Module.

Mastery profile state owned by the engine's callers, and the per-attempt
update rule applied to it.

Design:
- MasteryLevel: Enum for the diagnostic placement level
- MasteryProfile: Dataclass for one (user, subject) profile
- subtopic_entry_level: Entry level from a subtopic mini-diagnostic
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from src.core.stats import clamp01, percent, round2

if TYPE_CHECKING:
    from src.analytics.confidence import ConfidenceResult

MASTERY_MIN = 0
MASTERY_MAX = 100
CORRECT_DELTA = 2
INCORRECT_DELTA = -1


class MasteryLevel(str, Enum):
    """Overall level assigned by the subject diagnostic."""

    BEGINNER = "Beginner"  # 0-70%
    INTERMEDIATE = "Intermediate"  # 71-90%
    ADVANCED = "Advanced"  # 91-100%

    @classmethod
    def from_percentage(cls, percentage: float) -> MasteryLevel:
        """
        Convert a diagnostic percentage to a level.

        Args:
            percentage: Diagnostic score 0-100

        Returns:
            Corresponding MasteryLevel
        """
        if percentage > 90:
            return cls.ADVANCED
        elif percentage > 70:
            return cls.INTERMEDIATE
        else:
            return cls.BEGINNER

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.BEGINNER: "yellow",
            MasteryLevel.INTERMEDIATE: "cyan",
            MasteryLevel.ADVANCED: "green",
        }[self]


@dataclass
class MasteryProfile:
    """
    Mastery state for one (user, subject).

    Created once at diagnostic time; mastery_percentage and confidence_score
    change after every attempt.
    """

    user_id: str
    subject: str
    mastery_percentage: int = 0
    confidence_score: float = 0.5
    overall_level: str = MasteryLevel.BEGINNER.value
    weak_concepts: list[str] = field(default_factory=list)
    strong_concepts: list[str] = field(default_factory=list)
    learning_speed: str = "medium"

    def __post_init__(self):
        self.mastery_percentage = _clamp_percentage(self.mastery_percentage)
        self.confidence_score = round2(clamp01(self.confidence_score))

    def apply_attempt(self, is_correct: bool) -> int:
        """
        Apply the per-attempt mastery update.

        +2 on a correct answer, -1 on an incorrect one, clamped to [0, 100].

        Returns:
            The new mastery percentage
        """
        delta = CORRECT_DELTA if is_correct else INCORRECT_DELTA
        self.mastery_percentage = _clamp_percentage(self.mastery_percentage + delta)
        return self.mastery_percentage

    def apply_confidence(self, result: ConfidenceResult) -> float:
        """Store a freshly computed confidence score."""
        self.confidence_score = round2(clamp01(result.confidence))
        return self.confidence_score

    @property
    def level(self) -> MasteryLevel:
        try:
            return MasteryLevel(self.overall_level)
        except ValueError:
            return MasteryLevel.from_percentage(self.mastery_percentage)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "subject": self.subject,
            "mastery_percentage": self.mastery_percentage,
            "confidence_score": self.confidence_score,
            "overall_level": self.overall_level,
            "weak_concepts": list(self.weak_concepts),
            "strong_concepts": list(self.strong_concepts),
            "learning_speed": self.learning_speed,
        }

    @classmethod
    def from_diagnostic(
        cls,
        user_id: str,
        subject: str,
        answers: Sequence[Mapping[str, Any]],
    ) -> MasteryProfile:
        """
        Seed a profile from a subject-level diagnostic.

        Args:
            user_id: Learner identifier
            subject: Subject the diagnostic covered
            answers: Diagnostic answers, each with a truthy "correct" flag

        Returns:
            New MasteryProfile with level and starting confidence

        Raises:
            ValueError: If no answers were supplied
        """
        if not answers:
            raise ValueError("Diagnostic requires at least one answer")

        correct = sum(1 for answer in answers if answer.get("correct"))
        percentage = percent(correct / len(answers))

        return cls(
            user_id=user_id,
            subject=subject,
            mastery_percentage=percentage,
            confidence_score=clamp01(percentage / 100),
            overall_level=MasteryLevel.from_percentage(percentage).value,
        )


def subtopic_entry_level(answers: Sequence[Mapping[str, Any]]) -> str:
    """Entry level for a subtopic: "advanced" at half or more correct, else "basic"."""
    correct = sum(1 for answer in answers if answer.get("correct"))
    return "advanced" if correct >= math.ceil(len(answers) / 2) else "basic"


def _clamp_percentage(value: float) -> int:
    return int(max(MASTERY_MIN, min(MASTERY_MAX, value)))
