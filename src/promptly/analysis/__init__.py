"""Analysis module for promptly.

Provides a provider-agnostic interface for scoring a prompt and
producing an improved rewrite, plus translation of the rewrite.

Public API:
    PromptAnalyzer -- Abstract base class for analysis providers
    Translator -- Abstract base class for translation providers
    OpenAIAnalyzer -- OpenAI / OpenRouter analysis implementation
    OpenAITranslator -- OpenAI / OpenRouter translation implementation
"""

from promptly.analysis.base import AnalysisError, PromptAnalyzer, TranslationError, Translator

__all__ = [
    "AnalysisError",
    "PromptAnalyzer",
    "TranslationError",
    "Translator",
    "OpenAIAnalyzer",
    "OpenAITranslator",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "OpenAIAnalyzer":
        from promptly.analysis.openai import OpenAIAnalyzer
        return OpenAIAnalyzer
    if name == "OpenAITranslator":
        from promptly.analysis.openai import OpenAITranslator
        return OpenAITranslator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
