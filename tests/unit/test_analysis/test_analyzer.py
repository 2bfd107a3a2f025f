"""Tests for the prompt analyzer interface and the OpenAI implementation."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from promptly.analysis.base import (
    AnalysisError,
    PromptAnalyzer,
    build_system_prompt,
)
from promptly.analysis.openai import OpenAIAnalyzer
from promptly.domain.models import ScoreGrade


def _completion(content: str | None) -> SimpleNamespace:
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(response: object = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=error)
    return client


class TestPromptAnalyzerInterface:
    def test_cannot_instantiate_abstract_class(self) -> None:
        with pytest.raises(TypeError):
            PromptAnalyzer(model="test")  # type: ignore[abstract]

    def test_system_prompt_names_language(self) -> None:
        prompt = build_system_prompt("Japanese")
        assert "in Japanese" in prompt
        assert '"optimizedPrompt"' in prompt

    def test_analysis_error_carries_metadata(self) -> None:
        error = AnalysisError("bad", provider="openai", raw_response="{}")
        assert str(error) == "bad"
        assert error.provider == "openai"
        assert error.raw_response == "{}"


class TestParseResponse:
    @pytest.fixture
    def analyzer(self) -> OpenAIAnalyzer:
        return OpenAIAnalyzer(api_key="test", client=MagicMock())

    def test_plain_json(self, analyzer: OpenAIAnalyzer, sample_result_json: str) -> None:
        result = analyzer._parse_response(sample_result_json)
        assert result.score == 72
        assert result.weaknesses == ["No audience", "No length limit"]
        assert result.optimized_prompt.startswith("Write a 12-line poem")
        assert result.grade == ScoreGrade.FAIR

    def test_markdown_fenced_json(self, analyzer: OpenAIAnalyzer, sample_result_json: str) -> None:
        raw = f"Here you go:\n```json\n{sample_result_json}\n```"
        assert analyzer._parse_response(raw).summary == "Clear goal but missing constraints."

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_empty_response(self, analyzer: OpenAIAnalyzer, raw: str | None) -> None:
        with pytest.raises(AnalysisError, match="No response"):
            analyzer._parse_response(raw)

    def test_invalid_json(self, analyzer: OpenAIAnalyzer) -> None:
        with pytest.raises(AnalysisError, match="JSON"):
            analyzer._parse_response("{score: high}")

    def test_partial_result_rejected(self, analyzer: OpenAIAnalyzer) -> None:
        with pytest.raises(AnalysisError, match="schema"):
            analyzer._parse_response('{"score": 50, "summary": "ok"}')

    def test_out_of_range_score_rejected(
        self, analyzer: OpenAIAnalyzer, sample_result_json: str
    ) -> None:
        raw = sample_result_json.replace('"score": 72', '"score": 140')
        with pytest.raises(AnalysisError):
            analyzer._parse_response(raw)


class TestOpenAIAnalyzer:
    @pytest.mark.asyncio
    async def test_analyze_sends_system_and_user_messages(self, sample_result_json: str) -> None:
        client = _client(_completion(sample_result_json))
        analyzer = OpenAIAnalyzer(api_key="k", model="m", language="English", client=client)
        result = await analyzer.analyze("Write a poem")

        assert result.score == 72
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["response_format"] == {"type": "json_object"}
        messages = kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert "in English" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "Write a poem"}

    @pytest.mark.asyncio
    async def test_blank_prompt_rejected_without_call(self) -> None:
        client = _client()
        analyzer = OpenAIAnalyzer(api_key="k", client=client)
        with pytest.raises(AnalysisError, match="empty"):
            await analyzer.analyze("  ")
        client.chat.completions.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_failure_wrapped(self) -> None:
        client = _client(error=ConnectionError("reset by peer"))
        analyzer = OpenAIAnalyzer(api_key="k", client=client)
        with pytest.raises(AnalysisError, match="reset by peer") as info:
            await analyzer.analyze("Write a poem")
        assert info.value.provider == "openai"

    @pytest.mark.asyncio
    async def test_empty_completion(self) -> None:
        analyzer = OpenAIAnalyzer(api_key="k", client=_client(_completion(None)))
        with pytest.raises(AnalysisError, match="No response"):
            await analyzer.analyze("Write a poem")

    def test_system_prompt_override(self) -> None:
        analyzer = OpenAIAnalyzer(api_key="k", system_prompt="Be terse.", client=MagicMock())
        assert analyzer._system_prompt == "Be terse."
        assert analyzer.model == "gpt-4o-mini"
