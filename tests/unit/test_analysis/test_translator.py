"""Tests for the OpenAI-compatible translator."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from promptly.analysis.base import TranslationError, Translator
from promptly.analysis.openai import OpenAITranslator


def _client(content: str | None = None, error: Exception | None = None) -> MagicMock:
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=error)
    return client


class TestOpenAITranslator:
    def test_cannot_instantiate_abstract_translator(self) -> None:
        with pytest.raises(TypeError):
            Translator()  # type: ignore[abstract]

    def test_default_target_language(self) -> None:
        translator = OpenAITranslator(api_key="k", client=MagicMock())
        assert translator.target_language == "English"

    @pytest.mark.asyncio
    async def test_translate_strips_output(self) -> None:
        client = _client("  Write a short poem.\n")
        translator = OpenAITranslator(api_key="k", model="m", target_language="German", client=client)
        assert await translator.translate("짧은 시를 써줘") == "Write a short poem."

        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "m"
        system, user = kwargs["messages"]
        assert "German" in system["content"]
        assert user["content"].endswith("짧은 시를 써줘")

    @pytest.mark.asyncio
    async def test_empty_reply_raises(self) -> None:
        translator = OpenAITranslator(api_key="k", client=_client(""))
        with pytest.raises(TranslationError, match="No response"):
            await translator.translate("text")

    @pytest.mark.asyncio
    async def test_api_failure_wrapped(self) -> None:
        translator = OpenAITranslator(api_key="k", client=_client(error=TimeoutError("slow")))
        with pytest.raises(TranslationError, match="slow") as info:
            await translator.translate("text")
        assert info.value.provider == "openai"
