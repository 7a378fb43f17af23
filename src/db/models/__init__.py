# SQLAlchemy models
from .base import Base
from .study import (
    POMODORO_REASONS,
    DiagnosticRecord,
    LearningSessionRecord,
    MasteryProfileRecord,
    PomodoroSessionRecord,
    StudyActivity,
)

__all__ = [
    "Base",
    "POMODORO_REASONS",
    "DiagnosticRecord",
    "LearningSessionRecord",
    "MasteryProfileRecord",
    "PomodoroSessionRecord",
    "StudyActivity",
]
