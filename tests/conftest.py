"""Shared test fixtures for the promptly test suite.

Provides common fixtures used across unit tests: sample observations,
display metrics, analysis results, and mock collaborators.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from promptly.analysis.base import PromptAnalyzer, Translator
from promptly.domain.models import (
    AnalysisResult,
    CaretObservation,
    DisplayMetrics,
    DisplayRect,
)
from promptly.insertion.base import TextInserter
from promptly.session.machine import OverlaySession


# ---------------------------------------------------------------------------
# Caret / Display Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hidpi_display() -> DisplayMetrics:
    """A 2x display whose logical bounds are 960x1080 at the origin."""
    return DisplayMetrics(
        scale_factor=2.0,
        bounds=DisplayRect(x=0, y=0, width=960, height=1080),
    )


@pytest.fixture
def unit_display() -> DisplayMetrics:
    """A plain 1920x1080 display at scale 1."""
    return DisplayMetrics(
        scale_factor=1.0,
        bounds=DisplayRect(x=0, y=0, width=1920, height=1080),
    )


@pytest.fixture
def sample_observation() -> CaretObservation:
    return CaretObservation(x=1000, y=800, height=20, text="Write a poem", processId=4242)


# ---------------------------------------------------------------------------
# Analysis Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_result() -> AnalysisResult:
    return AnalysisResult(
        score=72,
        summary="Clear goal but missing constraints.",
        strengths=["States the task"],
        weaknesses=["No audience", "No length limit"],
        suggestions=["Name the audience", "Give a word limit"],
        optimizedPrompt="Write a 12-line poem about autumn for children.",
    )


@pytest.fixture
def sample_result_json() -> str:
    return (
        '{"score": 72, "summary": "Clear goal but missing constraints.",'
        ' "strengths": ["States the task"],'
        ' "weaknesses": ["No audience", "No length limit"],'
        ' "suggestions": ["Name the audience", "Give a word limit"],'
        ' "optimizedPrompt": "Write a 12-line poem about autumn for children."}'
    )


# ---------------------------------------------------------------------------
# Mock Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_analyzer(sample_result: AnalysisResult) -> AsyncMock:
    """A mock PromptAnalyzer returning the sample result."""
    analyzer = AsyncMock(spec=PromptAnalyzer)
    analyzer.analyze.return_value = sample_result
    return analyzer


@pytest.fixture
def mock_translator() -> AsyncMock:
    translator = AsyncMock(spec=Translator)
    translator.translate.return_value = "Translated prompt"
    return translator


@pytest.fixture
def mock_inserter() -> AsyncMock:
    return AsyncMock(spec=TextInserter)


@pytest.fixture
def mock_clipboard() -> MagicMock:
    return MagicMock()


@pytest.fixture
def session(
    mock_analyzer: AsyncMock,
    mock_translator: AsyncMock,
    mock_inserter: AsyncMock,
    mock_clipboard: MagicMock,
) -> OverlaySession:
    """An OverlaySession wired to mock collaborators."""
    return OverlaySession(
        analyzer=mock_analyzer,
        translator=mock_translator,
        inserter=mock_inserter,
        clipboard=mock_clipboard,
    )
