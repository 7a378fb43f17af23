"""Errors raised by the study and Pomodoro services."""


class StudyServiceError(Exception):
    """Base class for study service misuse."""
    pass


class SessionNotFoundError(StudyServiceError, LookupError):
    """Raised when a learning or Pomodoro session id is unknown."""
    pass


class InactiveSessionError(StudyServiceError):
    """Raised when attempting against a completed learning session."""
    pass


class ProfileNotFoundError(StudyServiceError, LookupError):
    """Raised when no mastery profile exists for (user, subject)."""
    pass


class QuestionNotFoundError(StudyServiceError, LookupError):
    """Raised when the question bank has nothing for a session scope."""
    pass
