"""
Pomodoro Session Service.

Adaptive Pomodoro sessions for a learner and subject:

Session Flow:
1. Ask for a recommendation (focus/break minutes plus the rule that chose them)
2. Start a session with the recommended (or user-chosen) durations
3. End the session; its duration is reported in minutes
4. Review history and the learner's peak study time
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from loguru import logger
from sqlalchemy import select

from config import get_settings
from src.analytics.peak_time import PeakTimeResult, detect_peak_bucket
from src.analytics.schedule import ReasonCode, ScheduleAdvisor, ScheduleRecommendation
from src.db.attempt_log import SqlAttemptLog
from src.db.database import SessionFactory, session_scope
from src.db.models.study import PomodoroSessionRecord
from src.study.errors import SessionNotFoundError

VALID_REASONS = frozenset(reason.value for reason in ReasonCode)


class PomodoroService:
    """
    Recommends, starts and ends Pomodoro sessions.

    Example:
        service = PomodoroService()
        rec = service.recommend("user-1", "DSA")
        started = service.start("user-1", "DSA", rec.focus_minutes, rec.break_minutes, rec.reason_code.value)
        service.end("user-1", started["id"])
    """

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        settings = get_settings()
        self.session_factory = session_factory
        self.clock = clock
        self.attempt_log = SqlAttemptLog(session_factory)
        self.peak_min_attempts = settings.peak_min_attempts
        self.advisor = ScheduleAdvisor(
            self.attempt_log,
            clock=clock,
            peak_min_attempts=settings.peak_min_attempts,
            recent_window=settings.schedule_recent_window,
            min_recent=settings.schedule_min_recent,
        )

    def recommend(self, user_id: str, subject: str) -> ScheduleRecommendation:
        """Recommended focus/break settings for right now."""
        if not subject:
            raise ValueError("Subject is required")
        return self.advisor.recommend(user_id, subject)

    def start(
        self,
        user_id: str,
        subject: str,
        focus_minutes: int,
        break_minutes: int,
        reason: str = ReasonCode.DEFAULT.value,
    ) -> dict:
        """
        Start a Pomodoro session.

        Args:
            user_id: Learner identifier
            subject: Subject being studied
            focus_minutes: Focus block length
            break_minutes: Break length
            reason: Recommendation reason the durations came from

        Returns:
            The stored session as a dict

        Raises:
            ValueError: Missing subject or durations, or unknown reason
        """
        if not subject or not focus_minutes or not break_minutes:
            raise ValueError("Subject, focus_minutes and break_minutes are required")
        if focus_minutes < 0 or break_minutes < 0:
            raise ValueError("Durations must be positive")

        reason = reason or ReasonCode.DEFAULT.value
        if isinstance(reason, ReasonCode):
            reason = reason.value
        if reason not in VALID_REASONS:
            raise ValueError(f"Unknown Pomodoro reason: {reason}")

        with session_scope(self.session_factory) as session:
            record = PomodoroSessionRecord(
                user_id=user_id,
                subject=subject,
                focus_duration=int(focus_minutes),
                break_duration=int(break_minutes),
                cycles_completed=0,
                reason=reason,
                started_at=self.clock(),
            )
            session.add(record)
            session.flush()
            logger.info(f"Started Pomodoro {record.id} for {user_id}/{subject}: {focus_minutes}/{break_minutes} ({reason})")
            return record.to_dict()

    def end(self, user_id: str, session_id: str, cycles_completed: int | None = None) -> dict:
        """
        End a Pomodoro session.

        Returns:
            The stored session as a dict with "duration_minutes" added

        Raises:
            SessionNotFoundError: Unknown session id
            PermissionError: Session belongs to another user
        """
        with session_scope(self.session_factory) as session:
            record = session.get(PomodoroSessionRecord, session_id)
            if record is None:
                raise SessionNotFoundError(f"Pomodoro session not found: {session_id}")
            if record.user_id != user_id:
                raise PermissionError(f"Pomodoro session {session_id} belongs to another user")

            record.ended_at = self.clock()
            if cycles_completed is not None:
                record.cycles_completed = cycles_completed
            session.flush()

            duration_minutes = (record.ended_at - record.started_at).total_seconds() / 60
            logger.info(f"Ended Pomodoro {session_id} after {duration_minutes:.1f} min")

            data = record.to_dict()
            data["duration_minutes"] = duration_minutes
            return data

    def history(self, user_id: str, subject: str | None = None, limit: int = 10) -> list[dict]:
        """Most recent sessions first."""
        stmt = select(PomodoroSessionRecord).where(PomodoroSessionRecord.user_id == user_id)
        if subject:
            stmt = stmt.where(PomodoroSessionRecord.subject == subject)
        stmt = stmt.order_by(PomodoroSessionRecord.started_at.desc()).limit(limit)

        with session_scope(self.session_factory) as session:
            return [record.to_dict() for record in session.scalars(stmt)]

    def peak_time(self, user_id: str, subject: str | None = None) -> PeakTimeResult:
        """Peak study time over the learner's full history."""
        history = self.attempt_log.history(user_id, subject)
        return detect_peak_bucket(history, min_attempts=self.peak_min_attempts)
