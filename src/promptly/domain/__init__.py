"""Domain models for promptly.

Watcher records, display metrics, mapped caret positions, analysis
results and the immutable session snapshot the overlay window renders.
"""

from promptly.domain.models import (
    AnalysisResult,
    AnalysisStatus,
    CaretObservation,
    DisplayMetrics,
    DisplayRect,
    LanguageChoice,
    LogicalPosition,
    ScoreGrade,
    SessionState,
)

__all__ = [
    "AnalysisResult",
    "AnalysisStatus",
    "CaretObservation",
    "DisplayMetrics",
    "DisplayRect",
    "LanguageChoice",
    "LogicalPosition",
    "ScoreGrade",
    "SessionState",
]
