"""OpenAI-compatible analysis and translation providers.

Works with OpenAI, OpenRouter, and any OpenAI-compatible API
by setting a custom base_url.
"""

from __future__ import annotations

import logging

from promptly.analysis.base import (
    TRANSLATION_PROMPT_TEMPLATE,
    AnalysisError,
    PromptAnalyzer,
    TranslationError,
    Translator,
)
from promptly.domain.models import AnalysisResult

logger = logging.getLogger(__name__)


def _make_client(api_key: str, base_url: str | None):
    from openai import AsyncOpenAI

    kwargs = {"api_key": api_key}
    if base_url:
        kwargs["base_url"] = base_url
    return AsyncOpenAI(**kwargs)


class OpenAIAnalyzer(PromptAnalyzer):
    """Prompt analyzer using OpenAI's chat completions API.

    Also works with OpenRouter and other OpenAI-compatible endpoints.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        system_prompt: str | None = None,
        language: str = "Korean",
        max_tokens: int = 2048,
        client: object | None = None,
    ) -> None:
        super().__init__(model=model, system_prompt=system_prompt, language=language)
        self._api_key = api_key
        self._base_url = base_url
        self._max_tokens = max_tokens
        self._client = client

    async def _ensure_client(self) -> None:
        """Lazily initialize the OpenAI async client."""
        if self._client is not None:
            return
        self._client = _make_client(self._api_key, self._base_url)
        logger.info("Initialized OpenAI analyzer (model=%s, base_url=%s)", self._model, self._base_url)

    async def analyze(self, prompt: str) -> AnalysisResult:
        """Analyze a prompt with a single chat completion call."""
        if not prompt.strip():
            raise AnalysisError("Prompt cannot be empty", provider="openai")

        await self._ensure_client()
        messages = [
            {"role": "system", "content": self._system_prompt},
            {"role": "user", "content": prompt},
        ]

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=messages,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            raise AnalysisError(f"OpenAI API call failed: {e}", provider="openai") from e

        raw_text = response.choices[0].message.content if response.choices else None
        logger.debug("Analysis raw response: %s", (raw_text or "")[:200])
        return self._parse_response(raw_text)


class OpenAITranslator(Translator):
    """Translates optimized prompts with an OpenAI-compatible model."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        target_language: str = "English",
        max_tokens: int = 2048,
        client: object | None = None,
    ) -> None:
        super().__init__(target_language=target_language)
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._max_tokens = max_tokens
        self._client = client

    async def _ensure_client(self) -> None:
        if self._client is not None:
            return
        self._client = _make_client(self._api_key, self._base_url)
        logger.info("Initialized OpenAI translator (model=%s)", self._model)

    async def translate(self, text: str) -> str:
        await self._ensure_client()
        messages = [
            {
                "role": "system",
                "content": TRANSLATION_PROMPT_TEMPLATE.format(language=self._target_language),
            },
            {"role": "user", "content": f"Translate this to {self._target_language}:\n\n{text}"},
        ]
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=messages,
            )
        except Exception as e:
            raise TranslationError(f"OpenAI API call failed: {e}", provider="openai") from e

        translated = response.choices[0].message.content if response.choices else None
        if not translated or not translated.strip():
            raise TranslationError("No response from translator", provider="openai")
        return translated.strip()
