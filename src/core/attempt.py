"""
Attempt records and difficulty timing.

An Attempt is one answered question: correctness, time taken, and the time
expected for its difficulty. Attempts are immutable once created and are the
only input the analytics engines read.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from config import get_settings
from src.core.stats import is_number


class Difficulty(str, Enum):
    """Question difficulty of a learning session."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value: str | Difficulty | None) -> Difficulty:
        """Parse a difficulty, falling back to MEDIUM for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


def expected_seconds_for(difficulty: str | Difficulty | None) -> float:
    """
    Expected response time for a difficulty.

    easy -> 40s, medium -> 70s, hard -> 110s (configurable);
    unknown difficulties use the medium value.
    """
    return get_settings().get_difficulty_seconds()[Difficulty.parse(difficulty).value]


def to_local_naive(timestamp: datetime) -> datetime:
    """Aware timestamps converted to local wall-clock time; naive ones unchanged."""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone().replace(tzinfo=None)


@dataclass(frozen=True)
class Attempt:
    """A single answered question."""

    accuracy: int | None
    response_time_seconds: float | None
    expected_seconds: float | None
    timestamp: datetime | None = None
    subject: str = ""
    topic: str | None = None
    subtopic: str | None = None
    session_id: str | None = None

    def __post_init__(self):
        if self.timestamp is not None:
            object.__setattr__(self, "timestamp", to_local_naive(self.timestamp))

    @property
    def is_valid(self) -> bool:
        """All numeric fields present and expected time positive."""
        return (
            is_number(self.accuracy)
            and is_number(self.response_time_seconds)
            and is_number(self.expected_seconds)
            and self.expected_seconds > 0
        )

    @property
    def is_correct(self) -> bool:
        return self.accuracy == 1

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Attempt:
        """
        Build an Attempt from a storage row or JSON object.

        Accepts camelCase (responseTime, expectedSeconds) and snake_case keys.
        Fields that cannot be read become None so the record is dropped as
        malformed downstream instead of failing the whole computation.
        """
        return cls(
            accuracy=_read_number(record, "accuracy"),
            response_time_seconds=_read_number(
                record, "response_time_seconds", "responseTimeSeconds", "response_time", "responseTime"
            ),
            expected_seconds=_read_number(record, "expected_seconds", "expectedSeconds"),
            timestamp=_read_timestamp(record.get("timestamp")),
            subject=str(record.get("subject") or ""),
            topic=record.get("topic"),
            subtopic=record.get("subtopic"),
            session_id=_optional_str(record.get("session_id", record.get("sessionId"))),
        )


class IAttemptSource(Protocol):
    """Ordered attempt log the engines read from."""

    def recent(
        self,
        user_id: str,
        subject: str,
        *,
        topic: str | None = None,
        limit: int = 20,
    ) -> Sequence[Attempt]:
        """Most recent attempts for the scope, most recent first."""
        ...

    def history(self, user_id: str, subject: str | None = None) -> Sequence[Attempt]:
        """Every attempt for the user (optionally one subject)."""
        ...


def _read_number(record: Mapping[str, Any], *keys: str) -> float | int | None:
    for key in keys:
        if key in record:
            value = record[key]
            return value if is_number(value) else None
    return None


def _read_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)
