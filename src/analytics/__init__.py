"""
Adaptive mastery and scheduling analytics.

Pure, deterministic engines over attempt histories:
- confidence: accuracy/speed confidence score (ConfidenceEngine)
- cycle: five-attempt mastery/weakness verdicts (CycleAnalyzer)
- peak_time: best time-of-day bucket (detect_peak_bucket)
- schedule: Pomodoro rule cascade (ScheduleAdvisor)

None of these perform I/O; ScheduleAdvisor reads through an injected
attempt source and degrades to its default on failure.
"""

from src.analytics.confidence import ConfidenceEngine, ConfidenceResult, compute_confidence
from src.analytics.cycle import (
    CycleAnalyzer,
    CyclePosition,
    CycleState,
    CycleSummary,
    NextAction,
    QuestionReason,
    WeaknessTag,
    analyze_cycle,
    cycle_position,
    cycle_state,
    is_cycle_complete,
    question_reason_code,
    select_question,
)
from src.analytics.peak_time import PeakTimeResult, detect_peak_bucket
from src.analytics.schedule import (
    ReasonCode,
    ScheduleAdvisor,
    ScheduleRecommendation,
    recommend_from_history,
)

__all__ = [
    # Confidence
    "ConfidenceEngine",
    "ConfidenceResult",
    "compute_confidence",
    # Cycles
    "CycleAnalyzer",
    "CyclePosition",
    "CycleState",
    "CycleSummary",
    "NextAction",
    "QuestionReason",
    "WeaknessTag",
    "analyze_cycle",
    "cycle_position",
    "cycle_state",
    "is_cycle_complete",
    "question_reason_code",
    "select_question",
    # Peak time
    "PeakTimeResult",
    "detect_peak_bucket",
    # Scheduling
    "ReasonCode",
    "ScheduleAdvisor",
    "ScheduleRecommendation",
    "recommend_from_history",
]
