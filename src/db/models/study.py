"""
Study models for the attempt log and the records the engine's callers own.

Implements:
- StudyActivity: One answered question (the ordered attempt log)
- MasteryProfileRecord: Per (user, subject) mastery and confidence
- LearningSessionRecord: Active learning session with its attempt counter
- PomodoroSessionRecord: A started focus/break session
- DiagnosticRecord: Subject and subtopic diagnostic results
"""
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, CheckConstraint, DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.attempt import Attempt
from src.core.mastery import MasteryProfile

from .base import Base

POMODORO_REASONS = ("default", "fatigue_detected", "peak_time", "learning_momentum")


def _new_id() -> str:
    return str(uuid4())


class StudyActivity(Base):
    """One logged attempt. Immutable once written."""

    __tablename__ = "study_activities"

    # Insertion order breaks timestamp ties
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str | None] = mapped_column(Text)
    subtopic: Mapped[str | None] = mapped_column(Text)
    session_id: Mapped[str | None] = mapped_column(String(36))

    accuracy: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 or 1
    response_time: Mapped[float] = mapped_column(Float, nullable=False)  # seconds
    expected_seconds: Mapped[float | None] = mapped_column(Float)

    # Local wall-clock time; peak-time buckets read its hour directly
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        Index("idx_activity_user_subject_ts", "user_id", "subject", "timestamp"),
        Index("idx_activity_user_ts", "user_id", "timestamp"),
    )

    def to_attempt(self) -> Attempt:
        return Attempt(
            accuracy=self.accuracy,
            response_time_seconds=self.response_time,
            expected_seconds=self.expected_seconds,
            timestamp=self.timestamp,
            subject=self.subject,
            topic=self.topic,
            subtopic=self.subtopic,
            session_id=self.session_id,
        )

    def __repr__(self) -> str:
        return f"<StudyActivity user={self.user_id} subject={self.subject} accuracy={self.accuracy}>"


class MasteryProfileRecord(Base):
    """Stored MasteryProfile; never deleted."""

    __tablename__ = "mastery_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(Text, nullable=False)
    overall_level: Mapped[str] = mapped_column(Text, default="Beginner")
    mastery_percentage: Mapped[int] = mapped_column(Integer, default=0)
    confidence_score: Mapped[float] = mapped_column(Float, default=0.5)
    strong_concepts: Mapped[list] = mapped_column(JSON, default=list)
    weak_concepts: Mapped[list] = mapped_column(JSON, default=list)
    learning_speed: Mapped[str] = mapped_column(Text, default="medium")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (UniqueConstraint("user_id", "subject", name="uq_profile_user_subject"),)

    def to_profile(self) -> MasteryProfile:
        return MasteryProfile(
            user_id=self.user_id,
            subject=self.subject,
            mastery_percentage=self.mastery_percentage,
            confidence_score=self.confidence_score,
            overall_level=self.overall_level,
            weak_concepts=list(self.weak_concepts or []),
            strong_concepts=list(self.strong_concepts or []),
            learning_speed=self.learning_speed,
        )

    def update_from(self, profile: MasteryProfile) -> None:
        self.mastery_percentage = profile.mastery_percentage
        self.confidence_score = profile.confidence_score
        self.overall_level = profile.overall_level
        self.weak_concepts = list(profile.weak_concepts)
        self.strong_concepts = list(profile.strong_concepts)
        self.learning_speed = profile.learning_speed

    @classmethod
    def from_profile(cls, profile: MasteryProfile) -> MasteryProfileRecord:
        record = cls(user_id=profile.user_id, subject=profile.subject)
        record.update_from(profile)
        return record


class LearningSessionRecord(Base):
    """Learning session; attempt_count drives cycles and question rotation."""

    __tablename__ = "learning_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(Text, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)
    subtopic: Mapped[str | None] = mapped_column(Text)
    difficulty: Mapped[str] = mapped_column(Text, default="easy")
    status: Mapped[str] = mapped_column(Text, default="active")  # 'active', 'completed'
    attempt_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (Index("idx_learning_session_active", "user_id", "subject", "topic", "status"),)

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class PomodoroSessionRecord(Base):
    """A started Pomodoro session with the recommendation reason it used."""

    __tablename__ = "pomodoro_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(Text, nullable=False)
    focus_duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    break_duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    cycles_completed: Mapped[int] = mapped_column(Integer, default=0)
    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime)
    reason: Mapped[str] = mapped_column(String(32), default="default")

    __table_args__ = (
        CheckConstraint(
            "reason IN ('default', 'fatigue_detected', 'peak_time', 'learning_momentum')",
            name="ck_pomodoro_reason",
        ),
        Index("idx_pomodoro_user_started", "user_id", "started_at"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "focus_duration": self.focus_duration,
            "break_duration": self.break_duration,
            "cycles_completed": self.cycles_completed,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "reason": self.reason,
        }


class DiagnosticRecord(Base):
    """Raw diagnostic answers and their one-line analysis."""

    __tablename__ = "diagnostic_records"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)  # 'subject-level', 'subtopic-level'
    topic: Mapped[str | None] = mapped_column(Text)
    answers: Mapped[list] = mapped_column(JSON, default=list)
    analysis_summary: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
