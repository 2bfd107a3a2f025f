"""Core domain models for the promptly system.

These models represent the data flowing through the overlay pipeline:
raw caret observations from the external watcher, live display metrics,
mapped logical positions, analysis results from the AI service, and the
session state that the presentation layer renders.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class AnalysisStatus(str, enum.Enum):
    """Lifecycle of a prompt analysis."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ScoreGrade(str, enum.Enum):
    """Coarse quality band used to colour the score gauge."""

    GOOD = "good"  # 80 and above
    FAIR = "fair"  # 50 to 79
    POOR = "poor"  # below 50


class LanguageChoice(str, enum.Enum):
    """Which rendition of the optimized prompt is selected."""

    ORIGINAL = "original"
    TRANSLATED = "translated"


# ---------------------------------------------------------------------------
# Caret / Display Models
# ---------------------------------------------------------------------------


class CaretObservation(BaseModel):
    """A single caret sample emitted by the external watcher process.

    Coordinates are physical (unscaled) screen pixels. The watcher emits
    camelCase keys, so fields are aliased accordingly.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    physical_x: int = Field(alias="x", description="Caret x-coordinate in physical pixels")
    physical_y: int = Field(alias="y", description="Caret y-coordinate in physical pixels")
    physical_height: int = Field(
        alias="height", ge=0, description="Height of the caret line in physical pixels"
    )
    text: str | None = Field(
        default=None, description="Text of the focused field, when extractable"
    )
    owner_process_id: int | None = Field(
        default=None, alias="processId", description="PID owning the focused control"
    )
    owner_process_name: str | None = Field(
        default=None, alias="processName", description="Executable name of the owner"
    )


class DisplayRect(BaseModel):
    """A rectangle in logical pixel space."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px < self.x + self.width and self.y <= py < self.y + self.height

    def distance_to(self, px: float, py: float) -> float:
        """Euclidean distance from a point to the nearest edge (0 when inside)."""
        dx = max(self.x - px, 0.0, px - (self.x + self.width))
        dy = max(self.y - py, 0.0, py - (self.y + self.height))
        return (dx * dx + dy * dy) ** 0.5


class DisplayMetrics(BaseModel):
    """Scale factor and logical bounds of one display."""

    model_config = ConfigDict(frozen=True)

    scale_factor: float = Field(gt=0, description="Physical-to-logical pixel ratio")
    bounds: DisplayRect = Field(description="Logical-space rectangle of the display")


class LogicalPosition(BaseModel):
    """A caret position mapped and clamped into logical pixel space."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    height: float
    text: str | None = None

    def widget_anchor(self, offset_x: float = 20.0) -> tuple[float, float]:
        """Point where the widget is drawn: right of the caret, centred on its line."""
        return self.x + offset_x, self.y + self.height / 2


# ---------------------------------------------------------------------------
# Analysis Models
# ---------------------------------------------------------------------------


class AnalysisResult(BaseModel):
    """Structured critique of a prompt returned by the analysis service.

    All fields are required; a response missing any of them is rejected
    as a whole.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: float = Field(ge=0, le=100, description="Prompt quality score (0-100)")
    summary: str = Field(description="One-sentence summary of the analysis")
    strengths: list[str] = Field(description="What the prompt does well, in display order")
    weaknesses: list[str] = Field(description="What the prompt lacks, in display order")
    suggestions: list[str] = Field(description="Actionable improvements, in display order")
    optimized_prompt: str = Field(
        alias="optimizedPrompt", description="Fully rewritten version of the prompt"
    )

    @property
    def grade(self) -> ScoreGrade:
        if self.score >= 80:
            return ScoreGrade.GOOD
        if self.score >= 50:
            return ScoreGrade.FAIR
        return ScoreGrade.POOR


# ---------------------------------------------------------------------------
# Session Models
# ---------------------------------------------------------------------------


class SessionState(BaseModel):
    """Immutable snapshot of the overlay session.

    The primary status is one of idle/loading/success/error; ``result``
    is only present on success and ``error`` only on error. The remaining
    fields are orthogonal UI flags and last-known caret data.
    """

    model_config = ConfigDict(frozen=True)

    status: AnalysisStatus = Field(default=AnalysisStatus.IDLE)
    result: AnalysisResult | None = Field(default=None)
    error: str | None = Field(default=None)
    prompt_text: str = Field(default="", description="Text that will be analyzed")
    sidebar_open: bool = Field(default=False)
    manual_mode: bool = Field(default=False)
    active_process_id: int | None = Field(default=None)
    latest_position: LogicalPosition | None = Field(default=None)
    translation: str | None = Field(
        default=None, description="Cached translation of the current optimized prompt"
    )
    selected_language: LanguageChoice = Field(default=LanguageChoice.ORIGINAL)
    quitting: bool = Field(default=False)

    @model_validator(mode="after")
    def _check_status_payload(self) -> SessionState:
        if (self.result is not None) != (self.status == AnalysisStatus.SUCCESS):
            raise ValueError("result must be present exactly when status is success")
        if (self.error is not None) != (self.status == AnalysisStatus.ERROR):
            raise ValueError("error must be present exactly when status is error")
        return self

    @property
    def has_prompt(self) -> bool:
        return bool(self.prompt_text.strip())

    @property
    def displayed_prompt(self) -> str | None:
        """The optimized prompt in the currently selected language."""
        if self.result is None:
            return None
        if self.selected_language == LanguageChoice.TRANSLATED and self.translation:
            return self.translation
        return self.result.optimized_prompt
