"""Abstract base classes for the prompt analysis and translation services.

All analysis providers must conform to these interfaces, enabling the
session to swap between providers (or test doubles) without changing
the rest of the pipeline.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

from pydantic import ValidationError

from promptly.domain.models import AnalysisResult

logger = logging.getLogger(__name__)


SYSTEM_PROMPT_TEMPLATE = """You are a world-class expert prompt engineer and AI interaction specialist.
Your goal is to help users write better prompts for large language models.

Analyze the user's prompt for clarity, specificity, context, constraints, and persona.

Write ALL output (analysis and rewritten prompt) in {language}.

Respond ONLY with valid JSON in the following format (no markdown, no explanation):
{{
    "score": 0 to 100,
    "summary": "one-sentence summary of the analysis",
    "strengths": ["1-3 things the prompt does well"],
    "weaknesses": ["1-3 things the prompt lacks"],
    "suggestions": ["specific, actionable advice to improve the prompt"],
    "optimizedPrompt": "a fully rewritten, optimized version of the prompt"
}}
"""

TRANSLATION_PROMPT_TEMPLATE = """You are a professional translator specializing in AI prompts.
Translate the given prompt into natural, professional {language}.
Maintain the intent, tone, and technical accuracy.
Output ONLY the translated text, nothing else.
"""


def build_system_prompt(language: str) -> str:
    return SYSTEM_PROMPT_TEMPLATE.format(language=language)


class PromptAnalyzer(ABC):
    """Abstract interface for prompt quality analysis providers."""

    def __init__(self, model: str, system_prompt: str | None = None, language: str = "Korean") -> None:
        self._model = model
        self._system_prompt = system_prompt or build_system_prompt(language)

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    async def analyze(self, prompt: str) -> AnalysisResult:
        """Score a prompt and propose an improved rewrite.

        Raises:
            AnalysisError: If the prompt is blank, the call fails, or the
                response does not match the result schema.
        """
        ...

    def _parse_response(self, raw_response: str | None) -> AnalysisResult:
        """Parse a raw model response into an AnalysisResult."""
        if not raw_response or not raw_response.strip():
            raise AnalysisError(
                "No response from AI",
                provider=type(self).__name__,
                raw_response=raw_response or "",
            )

        json_str = raw_response.strip()

        # Remove markdown code block if present
        match = re.search(r"```(?:json)?\s*(.*?)```", json_str, re.DOTALL)
        if match:
            json_str = match.group(1).strip()

        # Try to find JSON object in the text
        brace_match = re.search(r"\{.*\}", json_str, re.DOTALL)
        if brace_match:
            json_str = brace_match.group(0)

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise AnalysisError(
                f"Failed to parse analysis response as JSON: {e}",
                provider=type(self).__name__,
                raw_response=raw_response,
            ) from e

        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as e:
            raise AnalysisError(
                f"Analysis response did not match the expected schema: {e.error_count()} error(s)",
                provider=type(self).__name__,
                raw_response=raw_response,
            ) from e


class Translator(ABC):
    """Abstract interface for translating an optimized prompt."""

    def __init__(self, target_language: str = "English") -> None:
        self._target_language = target_language

    @property
    def target_language(self) -> str:
        return self._target_language

    @abstractmethod
    async def translate(self, text: str) -> str:
        """Translate text into the target language.

        Raises:
            TranslationError: If the call fails or returns nothing.
        """
        ...


class AnalysisError(Exception):
    """Raised when prompt analysis fails."""

    def __init__(self, message: str, provider: str = "", raw_response: str = "") -> None:
        super().__init__(message)
        self.provider = provider
        self.raw_response = raw_response


class TranslationError(Exception):
    """Raised when translation fails."""

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider
