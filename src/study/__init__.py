"""
Study services for adaptive learning.

Provides the caller-side operations around the analytics engines:
- Diagnostics and mastery profiles
- Learning sessions with micro-cycle question rotation
- Adaptive Pomodoro sessions and peak study time
"""

from src.study.errors import (
    InactiveSessionError,
    ProfileNotFoundError,
    QuestionNotFoundError,
    SessionNotFoundError,
    StudyServiceError,
)
from src.study.pomodoro_service import PomodoroService
from src.study.question_bank import QUESTION_BANK, Question, lookup, slugify
from src.study.study_service import AttemptOutcome, LearningSession, NextQuestion, StudyService

__all__ = [
    "StudyService",
    "PomodoroService",
    "LearningSession",
    "NextQuestion",
    "AttemptOutcome",
    "Question",
    "QUESTION_BANK",
    "lookup",
    "slugify",
    "StudyServiceError",
    "SessionNotFoundError",
    "InactiveSessionError",
    "ProfileNotFoundError",
    "QuestionNotFoundError",
]
