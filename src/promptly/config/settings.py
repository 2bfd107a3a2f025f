"""Configuration management for promptly.

Settings cover the watcher command, display layout, analysis provider,
insertion backend and bridge endpoint. Values come from config/promptly.yaml,
a .env file and PROMPTLY_-prefixed environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/promptly.yaml")

DEFAULT_TRACKER_COMMAND = [
    "powershell.exe",
    "-NoProfile",
    "-ExecutionPolicy", "Bypass",
    "-File", "resources/tracker.ps1",
]

DEFAULT_INSERTER_COMMAND = [
    "powershell.exe",
    "-ExecutionPolicy", "Bypass",
    "-File", "resources/inserter.ps1",
    "-ProcessId", "{process_id}",
    "-Text", "{text}",
]


class TrackerConfig(BaseModel):
    command: list[str] = Field(default_factory=lambda: list(DEFAULT_TRACKER_COMMAND))
    queue_size: int = Field(default=0, ge=0, description="0 means unbounded")
    line_limit: int = Field(
        default=1024 * 1024, ge=1024, description="Longest watcher line kept, in bytes"
    )


class DisplayConfig(BaseModel):
    x: float = Field(default=0)
    y: float = Field(default=0)
    width: float = Field(default=1920, gt=0)
    height: float = Field(default=1080, gt=0)
    scale_factor: float = Field(default=1.0, gt=0)


class OverlayConfig(BaseModel):
    edge_clearance: float = Field(default=50, ge=0)
    widget_offset_x: float = Field(default=20)
    displays: list[DisplayConfig] = Field(
        default_factory=lambda: [DisplayConfig()], min_length=1
    )


class AnalysisConfig(BaseModel):
    model: str = Field(default="gpt-4o-mini")
    base_url: str | None = Field(default=None)
    max_tokens: int = Field(default=2048, gt=0)
    output_language: str = Field(default="Korean")
    system_prompt_override: str | None = Field(default=None)


class TranslationConfig(BaseModel):
    enabled: bool = Field(default=True)
    target_language: str = Field(default="English")
    model: str | None = Field(default=None, description="Defaults to analysis.model")


class InsertionConfig(BaseModel):
    backend: Literal["process", "http"] = Field(default="process")
    command: list[str] = Field(default_factory=lambda: list(DEFAULT_INSERTER_COMMAND))
    http_base_url: str = Field(default="http://localhost:8766")
    http_timeout: float = Field(default=10.0, gt=0)


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8765, ge=1, le=65535)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the promptly overlay.

    Provider keys are secrets and are never logged. Nested sections can be
    overridden from the environment, e.g. PROMPTLY_ENDPOINT__PORT=9000.
    """

    model_config = {
        "env_prefix": "PROMPTLY_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # API Keys
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    openrouter_api_key: SecretStr = Field(default=SecretStr(""))

    # Configuration sections
    tracker: TrackerConfig = Field(default_factory=TrackerConfig)
    overlay: OverlayConfig = Field(default_factory=OverlayConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    translation: TranslationConfig = Field(default_factory=TranslationConfig)
    insertion: InsertionConfig = Field(default_factory=InsertionConfig)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Keyword arguments carry the YAML file, so they rank below the environment.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def resolve_api_credentials(self) -> tuple[str, str | None]:
        """Return the (api_key, base_url) pair for the OpenAI-compatible client.

        An OpenRouter key wins over a plain OpenAI key and implies the
        OpenRouter base URL unless one is configured explicitly.
        """
        api_key = self.openai_api_key.get_secret_value()
        base_url = self.analysis.base_url
        or_key = self.openrouter_api_key.get_secret_value()
        if or_key:
            api_key = or_key
            if not base_url:
                base_url = "https://openrouter.ai/api/v1"
        return api_key, base_url


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Build the Settings for one run.

    Environment variables beat .env entries, which beat the YAML file,
    which beats the model defaults. The YAML mapping is passed as keyword
    arguments, which Settings ranks below the environment.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    # OPENROUTER_* keys carry no prefix, so pydantic-settings misses them
    _load_dotenv()

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _load_dotenv() -> None:
    """Copy KEY=VALUE lines from ./.env into os.environ without overriding set values."""
    env_path = Path(".env")
    if not env_path.exists():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                if not os.environ.get(key):
                    os.environ[key] = value


def _apply_env_overrides(yaml_data: dict) -> None:
    """Fold OpenRouter and model environment variables over the raw YAML mapping."""
    or_key = os.environ.get("OPENROUTER_API_KEY", "")
    or_base_url = os.environ.get("OPENROUTER_BASE_URL", "")
    model = os.environ.get("PROMPTLY_MODEL", "")

    if or_key:
        yaml_data["openrouter_api_key"] = or_key

    if "analysis" not in yaml_data:
        yaml_data["analysis"] = {}

    if or_base_url:
        yaml_data["analysis"]["base_url"] = or_base_url

    if model:
        yaml_data["analysis"]["model"] = model
