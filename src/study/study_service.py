"""
Study Service for adaptive learning sessions.

Provides the caller-side operations around the analytics engines:
- Seed a mastery profile from a diagnostic
- Start / end a learning session
- Serve the next question in the session's micro-cycle
- Record an attempt and update mastery, confidence and the cycle verdict

Profile updates for one (user, subject) are serialised with a keyed lock and
run inside a single transaction, so concurrent submissions cannot lose an
update.
"""

from __future__ import annotations

import threading
import weakref
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from config import get_settings
from src.analytics.confidence import ConfidenceEngine, ConfidenceResult
from src.analytics.cycle import (
    CycleAnalyzer,
    CyclePosition,
    CycleSummary,
    QuestionReason,
    question_reason_code,
    select_question,
)
from src.core.attempt import Difficulty, expected_seconds_for
from src.core.mastery import MasteryProfile, subtopic_entry_level
from src.db.attempt_log import select_recent
from src.db.database import SessionFactory, session_scope
from src.db.models.study import (
    DiagnosticRecord,
    LearningSessionRecord,
    MasteryProfileRecord,
    StudyActivity,
)
from src.study.errors import (
    InactiveSessionError,
    ProfileNotFoundError,
    QuestionNotFoundError,
    SessionNotFoundError,
)
from src.study.question_bank import Question, lookup


@dataclass(frozen=True)
class LearningSession:
    """Snapshot of a learning session row."""

    id: str
    user_id: str
    subject: str
    topic: str
    subtopic: str | None
    difficulty: str
    status: str
    attempt_count: int

    @classmethod
    def from_record(cls, record: LearningSessionRecord) -> LearningSession:
        return cls(
            id=record.id,
            user_id=record.user_id,
            subject=record.subject,
            topic=record.topic,
            subtopic=record.subtopic,
            difficulty=record.difficulty,
            status=record.status,
            attempt_count=record.attempt_count or 0,
        )

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass(frozen=True)
class NextQuestion:
    """The question to ask next and where it sits in the cycle."""

    question: Question
    reason_code: QuestionReason
    cycle: CyclePosition
    bank_key: str

    def to_dict(self) -> dict:
        return {
            "question": self.question.to_dict(),
            "reason_code": self.reason_code.value,
            "cycle": {
                "index": self.cycle.index,
                "position": self.cycle.position,
                "total": self.cycle.total,
            },
        }


@dataclass
class AttemptOutcome:
    """Result of recording one attempt."""

    is_correct: bool
    attempt_count: int
    mastery_percentage: int
    confidence_score: float
    confidence: ConfidenceResult
    cycle_summary: CycleSummary | None = None
    progress_snapshot: dict[str, Any] | None = field(default=None)

    @property
    def feedback(self) -> str:
        if self.is_correct:
            return "Correct! Great work."
        return "Incorrect. Review the concept and try again."

    def to_dict(self) -> dict:
        data = {
            "feedback": self.feedback,
            "mastery_percentage": self.mastery_percentage,
            "confidence_score": self.confidence_score,
            "confidence_breakdown": self.confidence.to_dict(),
            "attempt_count": self.attempt_count,
        }
        if self.cycle_summary is not None:
            data["cycle_summary"] = self.cycle_summary.to_dict()
            data["progress_snapshot"] = dict(self.progress_snapshot or {})
        return data


class KeyedLock:
    """One threading.Lock per key, created on first use and dropped once no caller holds it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: weakref.WeakValueDictionary[tuple, threading.Lock] = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._locks)

    def get(self, key: tuple) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


# Shared by every StudyService so separate instances still serialise
_profile_locks = KeyedLock()


class StudyService:
    """
    High-level service for learning-session operations.

    Coordinates the attempt log, the mastery profile, the confidence engine
    and the cycle analyzer.
    """

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        confidence_engine: ConfidenceEngine | None = None,
        cycle_analyzer: CycleAnalyzer | None = None,
        cycle_scope: str | None = None,
        question_bank: dict[str, tuple[Question, ...]] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize study service.

        Args:
            session_factory: Session factory; defaults to SessionLocal
            confidence_engine: Engine for confidence scores (settings by default)
            cycle_analyzer: Analyzer for cycle verdicts (settings by default)
            cycle_scope: "subject" or "topic" scope for the cycle's last attempts
            question_bank: Bank to draw questions from (built-in by default)
            clock: Returns the current local time for new attempts
        """
        settings = get_settings()
        self.session_factory = session_factory
        self.confidence_engine = confidence_engine or ConfidenceEngine.from_settings()
        self.cycle_analyzer = cycle_analyzer or CycleAnalyzer.from_settings()
        self.cycle_scope = cycle_scope or settings.cycle_scope
        self.question_bank = question_bank
        self.clock = clock

    # ========================================
    # Diagnostics
    # ========================================

    def diagnose_subject(
        self,
        user_id: str,
        subject: str,
        answers: Sequence[Mapping[str, Any]],
    ) -> MasteryProfile:
        """
        Seed (or re-seed) the mastery profile from a subject diagnostic.

        Args:
            user_id: Learner identifier
            subject: Subject diagnosed
            answers: Answers, each with a "correct" flag

        Returns:
            The stored MasteryProfile

        Raises:
            ValueError: If subject or answers are missing
        """
        if not subject:
            raise ValueError("Subject is required")
        profile = MasteryProfile.from_diagnostic(user_id, subject, answers)

        with _profile_locks.get((user_id, subject)), session_scope(self.session_factory) as session:
            record = self._find_profile(session, user_id, subject)
            if record is None:
                session.add(MasteryProfileRecord.from_profile(profile))
            else:
                record.update_from(profile)

            session.add(
                DiagnosticRecord(
                    user_id=user_id,
                    subject=subject,
                    type="subject-level",
                    answers=[dict(answer) for answer in answers],
                    analysis_summary=f"Initial level: {profile.overall_level}",
                )
            )

        logger.info(
            f"Diagnostic for {user_id}/{subject}: {profile.overall_level} "
            f"({profile.mastery_percentage}%)"
        )
        return profile

    def diagnose_subtopic(
        self,
        user_id: str,
        subject: str,
        topic: str,
        answers: Sequence[Mapping[str, Any]],
    ) -> str:
        """
        Record a subtopic mini-diagnostic and return the entry level.

        Returns:
            "advanced" or "basic"
        """
        if not subject or not topic or not answers:
            raise ValueError("Subject, topic and answers are required")

        entry_level = subtopic_entry_level(answers)
        with session_scope(self.session_factory) as session:
            session.add(
                DiagnosticRecord(
                    user_id=user_id,
                    subject=subject,
                    type="subtopic-level",
                    topic=topic,
                    answers=[dict(answer) for answer in answers],
                    analysis_summary=f"Entry level: {entry_level}",
                )
            )

        logger.info(f"Subtopic diagnostic for {user_id}/{subject}/{topic}: {entry_level}")
        return entry_level

    def get_profile(self, user_id: str, subject: str) -> MasteryProfile:
        """Load the mastery profile for (user, subject)."""
        with session_scope(self.session_factory) as session:
            record = self._find_profile(session, user_id, subject)
            if record is None:
                raise ProfileNotFoundError(f"Mastery profile not found for {user_id}/{subject}")
            return record.to_profile()

    # ========================================
    # Learning sessions
    # ========================================

    def start_session(
        self,
        user_id: str,
        subject: str,
        topic: str,
        subtopic: str | None = None,
        difficulty: str = Difficulty.EASY.value,
    ) -> LearningSession:
        """
        Return the active session for (user, subject, topic), creating one if needed.

        Raises:
            ValueError: If subject or topic is missing
        """
        if not subject or not topic:
            raise ValueError("Subject and topic are required")

        with session_scope(self.session_factory) as session:
            record = session.scalars(
                select(LearningSessionRecord).where(
                    LearningSessionRecord.user_id == user_id,
                    LearningSessionRecord.subject == subject,
                    LearningSessionRecord.topic == topic,
                    LearningSessionRecord.status == "active",
                )
            ).first()

            if record is None:
                record = LearningSessionRecord(
                    user_id=user_id,
                    subject=subject,
                    topic=topic,
                    subtopic=subtopic,
                    difficulty=difficulty,
                    status="active",
                    attempt_count=0,
                )
                session.add(record)
                session.flush()
                logger.info(f"Started learning session {record.id} for {user_id}/{subject}/{topic}")

            return LearningSession.from_record(record)

    def end_session(self, session_id: str, user_id: str | None = None) -> LearningSession:
        """Mark a learning session completed."""
        with session_scope(self.session_factory) as session:
            record = self._load_session(session, session_id, user_id)
            record.status = "completed"
            session.flush()
            logger.info(f"Completed learning session {session_id} after {record.attempt_count} attempts")
            return LearningSession.from_record(record)

    def next_question(self, session_id: str, user_id: str | None = None) -> NextQuestion:
        """
        Pick the next question by round-robin over the session's bank.

        Raises:
            SessionNotFoundError: Unknown session
            InactiveSessionError: Session already completed
            QuestionNotFoundError: No bank entry for the session scope
        """
        with session_scope(self.session_factory) as session:
            snapshot = LearningSession.from_record(self._load_session(session, session_id, user_id))

        if not snapshot.is_active:
            raise InactiveSessionError(f"Session {session_id} is not active")

        key, questions = lookup(snapshot.subject, snapshot.topic, snapshot.subtopic, bank=self.question_bank)
        if not questions:
            raise QuestionNotFoundError(f"No questions found for {key}")

        count = snapshot.attempt_count
        return NextQuestion(
            question=select_question(questions, count),
            reason_code=question_reason_code(count),
            cycle=self.cycle_analyzer.position(count),
            bank_key=key,
        )

    def submit_attempt(
        self,
        session_id: str,
        is_correct: bool,
        response_time: float | None = None,
        user_id: str | None = None,
    ) -> AttemptOutcome:
        """
        Record an attempt and update the learner's profile.

        Args:
            session_id: Active learning session
            is_correct: Whether the answer was correct
            response_time: Seconds taken (missing counts as 0)
            user_id: Caller; must own the session when given

        Returns:
            AttemptOutcome, with a cycle summary when this attempt closed a cycle

        Raises:
            ValueError: If is_correct is not a bool
            SessionNotFoundError: Unknown session
            InactiveSessionError: Session already completed
            ProfileNotFoundError: No diagnostic has seeded the profile
        """
        if not isinstance(is_correct, bool):
            raise ValueError("is_correct must be a boolean")

        with session_scope(self.session_factory) as session:
            owner = LearningSession.from_record(self._load_session(session, session_id, user_id))

        with _profile_locks.get((owner.user_id, owner.subject)), session_scope(self.session_factory) as session:
            return self._record_attempt(session, session_id, is_correct, response_time or 0)

    def _record_attempt(
        self,
        session: Session,
        session_id: str,
        is_correct: bool,
        response_time: float,
    ) -> AttemptOutcome:
        record = self._load_session(session, session_id)
        if not record.is_active:
            raise InactiveSessionError(f"Session {session_id} is not active")

        profile_record = self._find_profile(session, record.user_id, record.subject)
        if profile_record is None:
            raise ProfileNotFoundError(f"Mastery profile not found for {record.user_id}/{record.subject}")

        expected_seconds = expected_seconds_for(record.difficulty)
        session.add(
            StudyActivity(
                user_id=record.user_id,
                subject=record.subject,
                topic=record.topic,
                subtopic=record.subtopic,
                session_id=record.id,
                accuracy=1 if is_correct else 0,
                response_time=response_time,
                expected_seconds=expected_seconds,
                timestamp=self.clock(),
            )
        )
        record.attempt_count = (record.attempt_count or 0) + 1
        session.flush()

        recent = [
            row.to_attempt()
            for row in session.scalars(
                select_recent(
                    record.user_id,
                    record.subject,
                    topic=record.topic,
                    limit=self.confidence_engine.window,
                )
            )
        ]
        confidence = self.confidence_engine.compute(recent)

        profile = profile_record.to_profile()
        profile.apply_attempt(is_correct)
        profile.apply_confidence(confidence)
        profile_record.update_from(profile)

        outcome = AttemptOutcome(
            is_correct=is_correct,
            attempt_count=record.attempt_count,
            mastery_percentage=profile.mastery_percentage,
            confidence_score=profile.confidence_score,
            confidence=confidence,
        )

        cycle_topic = record.topic if self.cycle_scope == "topic" else None
        cycle_attempts = [
            row.to_attempt()
            for row in session.scalars(
                select_recent(
                    record.user_id,
                    record.subject,
                    topic=cycle_topic,
                    limit=self.cycle_analyzer.cycle_size,
                )
            )
        ]
        summary = self.cycle_analyzer.on_attempt(record.attempt_count, cycle_attempts, expected_seconds)
        if summary is not None:
            outcome.cycle_summary = summary
            outcome.progress_snapshot = {
                "mastery_percentage": profile.mastery_percentage,
                "confidence_score": profile.confidence_score,
            }

        logger.info(
            f"Attempt {record.attempt_count} in session {session_id}: "
            f"{'correct' if is_correct else 'incorrect'}, mastery={profile.mastery_percentage}%, "
            f"confidence={profile.confidence_score}"
        )
        return outcome

    # ========================================
    # Helpers
    # ========================================

    def _load_session(
        self,
        session: Session,
        session_id: str,
        user_id: str | None = None,
    ) -> LearningSessionRecord:
        record = session.get(LearningSessionRecord, session_id)
        if record is None:
            raise SessionNotFoundError(f"Learning session not found: {session_id}")
        if user_id is not None and record.user_id != user_id:
            raise PermissionError(f"Learning session {session_id} belongs to another user")
        return record

    @staticmethod
    def _find_profile(session: Session, user_id: str, subject: str) -> MasteryProfileRecord | None:
        return session.scalars(
            select(MasteryProfileRecord).where(
                MasteryProfileRecord.user_id == user_id,
                MasteryProfileRecord.subject == subject,
            )
        ).first()
