"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from promptly.config.settings import (
    DEFAULT_INSERTER_COMMAND,
    AnalysisConfig,
    EndpointConfig,
    OverlayConfig,
    Settings,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run each test in an empty directory with no provider variables set."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "OPENROUTER_API_KEY",
        "OPENROUTER_BASE_URL",
        "PROMPTLY_MODEL",
        "PROMPTLY_OPENAI_API_KEY",
        "PROMPTLY_OPENROUTER_API_KEY",
        "PROMPTLY_ENDPOINT__PORT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettingsDefaults:
    def test_default_settings(self) -> None:
        settings = Settings()
        assert settings.overlay.edge_clearance == 50
        assert settings.overlay.widget_offset_x == 20
        assert len(settings.overlay.displays) == 1
        assert settings.analysis.model == "gpt-4o-mini"
        assert settings.analysis.output_language == "Korean"
        assert settings.translation.target_language == "English"
        assert settings.insertion.backend == "process"
        assert settings.endpoint.port == 8765
        assert settings.logging.level == "INFO"

    def test_inserter_command_has_placeholders(self) -> None:
        assert "{process_id}" in DEFAULT_INSERTER_COMMAND
        assert "{text}" in DEFAULT_INSERTER_COMMAND

    def test_endpoint_port_validated(self) -> None:
        with pytest.raises(ValidationError):
            EndpointConfig(port=0)

    def test_overlay_requires_a_display(self) -> None:
        with pytest.raises(ValidationError):
            OverlayConfig(displays=[])

    def test_analysis_max_tokens_positive(self) -> None:
        with pytest.raises(ValidationError):
            AnalysisConfig(max_tokens=0)


class TestLoadSettings:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.endpoint.host == "127.0.0.1"

    def test_yaml_file_populates_sections(self, tmp_path: Path) -> None:
        config = tmp_path / "promptly.yaml"
        config.write_text(
            "overlay:\n"
            "  edge_clearance: 80\n"
            "  displays:\n"
            "    - {x: 0, y: 0, width: 1280, height: 720, scale_factor: 1.5}\n"
            "    - {x: 1280, y: 0, width: 1920, height: 1080}\n"
            "analysis:\n"
            "  output_language: English\n"
            "insertion:\n"
            "  backend: http\n"
        )
        settings = load_settings(config)
        assert settings.overlay.edge_clearance == 80
        assert [d.scale_factor for d in settings.overlay.displays] == [1.5, 1.0]
        assert settings.analysis.output_language == "English"
        assert settings.insertion.backend == "http"

    def test_empty_yaml_file(self, tmp_path: Path) -> None:
        config = tmp_path / "empty.yaml"
        config.write_text("")
        assert load_settings(config).analysis.model == "gpt-4o-mini"

    def test_invalid_backend_rejected(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("insertion:\n  backend: carrier-pigeon\n")
        with pytest.raises(ValidationError):
            load_settings(config)

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
        monkeypatch.setenv("PROMPTLY_MODEL", "anthropic/claude-3.5-sonnet")
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.openrouter_api_key.get_secret_value() == "or-key"
        assert settings.analysis.model == "anthropic/claude-3.5-sonnet"

    def test_env_model_beats_yaml_model(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "promptly.yaml"
        config.write_text("analysis:\n  model: gpt-4o\n")
        monkeypatch.setenv("PROMPTLY_MODEL", "other-model")
        assert load_settings(config).analysis.model == "other-model"

    def test_env_beats_yaml_section(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "promptly.yaml"
        config.write_text("endpoint:\n  host: 0.0.0.0\n  port: 8765\n")
        monkeypatch.setenv("PROMPTLY_ENDPOINT__PORT", "9000")
        settings = load_settings(config)
        assert settings.endpoint.port == 9000
        assert settings.endpoint.host == "0.0.0.0"

    def test_dotenv_entry_beats_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENROUTER_API_KEY", "")
        config = tmp_path / "promptly.yaml"
        config.write_text("openrouter_api_key: from-yaml\n")
        (tmp_path / ".env").write_text("OPENROUTER_API_KEY=from-dotenv\n")
        settings = load_settings(config)
        assert settings.openrouter_api_key.get_secret_value() == "from-dotenv"

    def test_dotenv_file_loaded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        # Empty counts as unset; monkeypatch restores the variable afterwards.
        monkeypatch.setenv("OPENROUTER_API_KEY", "")
        (tmp_path / ".env").write_text("# keys\nOPENROUTER_API_KEY=from-dotenv\n")
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.openrouter_api_key.get_secret_value() == "from-dotenv"


class TestResolveApiCredentials:
    def test_openai_key_only(self) -> None:
        settings = Settings(openai_api_key="sk-test")
        assert settings.resolve_api_credentials() == ("sk-test", None)

    def test_openrouter_key_wins(self) -> None:
        settings = Settings(openai_api_key="sk-test", openrouter_api_key="or-key")
        assert settings.resolve_api_credentials() == ("or-key", "https://openrouter.ai/api/v1")

    def test_explicit_base_url_kept(self) -> None:
        settings = Settings(
            openrouter_api_key="or-key",
            analysis=AnalysisConfig(base_url="http://localhost:11434/v1"),
        )
        assert settings.resolve_api_credentials() == ("or-key", "http://localhost:11434/v1")
