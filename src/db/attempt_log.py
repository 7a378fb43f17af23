"""
Attempt log implementations.

Both classes satisfy IAttemptSource: `recent` returns the newest attempts
first, `history` returns every attempt oldest first.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from loguru import logger
from sqlalchemy import Select, select

from src.core.attempt import Attempt
from src.db.database import SessionFactory, session_scope
from src.db.models.study import StudyActivity


class InMemoryAttemptLog:
    """List-backed attempt log for tests and JSON files."""

    def __init__(self, entries: Iterable[tuple[str, Attempt]] = ()):
        self._entries: list[tuple[str, Attempt]] = list(entries)

    @classmethod
    def for_user(cls, user_id: str, attempts: Iterable[Attempt]) -> InMemoryAttemptLog:
        return cls((user_id, attempt) for attempt in attempts)

    def append(self, user_id: str, attempt: Attempt) -> None:
        self._entries.append((user_id, attempt))

    def __len__(self) -> int:
        return len(self._entries)

    def _select(self, user_id: str, subject: str | None, topic: str | None = None) -> list[Attempt]:
        return [
            attempt
            for owner, attempt in self._entries
            if owner == user_id
            and (subject is None or attempt.subject == subject)
            and (topic is None or attempt.topic == topic)
        ]

    def recent(
        self,
        user_id: str,
        subject: str,
        *,
        topic: str | None = None,
        limit: int = 20,
    ) -> Sequence[Attempt]:
        attempts = self._select(user_id, subject, topic)
        attempts.reverse()
        if all(a.timestamp is not None for a in attempts):
            # Stable sort keeps later appends first among equal timestamps
            attempts.sort(key=lambda a: a.timestamp, reverse=True)
        return attempts[:limit]

    def history(self, user_id: str, subject: str | None = None) -> Sequence[Attempt]:
        attempts = self._select(user_id, subject)
        if all(a.timestamp is not None for a in attempts):
            attempts.sort(key=lambda a: a.timestamp)
        return attempts


def select_recent(
    user_id: str,
    subject: str,
    *,
    topic: str | None = None,
    limit: int = 20,
) -> Select:
    """Newest-first activities for (user, subject[, topic])."""
    stmt = select(StudyActivity).where(
        StudyActivity.user_id == user_id,
        StudyActivity.subject == subject,
    )
    if topic is not None:
        stmt = stmt.where(StudyActivity.topic == topic)
    return stmt.order_by(StudyActivity.timestamp.desc(), StudyActivity.id.desc()).limit(limit)


def select_history(user_id: str, subject: str | None = None) -> Select:
    """Oldest-first activities for a user, optionally one subject."""
    stmt = select(StudyActivity).where(StudyActivity.user_id == user_id)
    if subject is not None:
        stmt = stmt.where(StudyActivity.subject == subject)
    return stmt.order_by(StudyActivity.timestamp.asc(), StudyActivity.id.asc())


class SqlAttemptLog:
    """Attempt log over the study_activities table."""

    def __init__(self, session_factory: SessionFactory | None = None):
        """
        Initialize the log.

        Args:
            session_factory: Session factory; defaults to SessionLocal
        """
        self.session_factory = session_factory

    def recent(
        self,
        user_id: str,
        subject: str,
        *,
        topic: str | None = None,
        limit: int = 20,
    ) -> Sequence[Attempt]:
        stmt = select_recent(user_id, subject, topic=topic, limit=limit)
        with session_scope(self.session_factory) as session:
            attempts = [row.to_attempt() for row in session.scalars(stmt)]

        logger.debug(f"Loaded {len(attempts)} recent attempts for {user_id}/{subject}")
        return attempts

    def history(self, user_id: str, subject: str | None = None) -> Sequence[Attempt]:
        with session_scope(self.session_factory) as session:
            return [row.to_attempt() for row in session.scalars(select_history(user_id, subject))]
