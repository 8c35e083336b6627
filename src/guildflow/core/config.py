# src/guildflow/core/config.py
"""Configuration schema and loading for guildflow.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen after construction.

The bot token is deliberately NOT part of the settings file. The CLI reads
it from the GUILDFLOW_BOT_TOKEN environment variable (or a .env file).
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

BOT_TOKEN_ENV_VAR = "GUILDFLOW_BOT_TOKEN"

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"


class ApiSettings(BaseModel):
    """Platform REST API connection settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    base_url: str = Field(default=DEFAULT_API_BASE_URL, description="REST API root, including the version segment")
    timeout_seconds: float = Field(default=30.0, gt=0, description="Per-request timeout")
    user_agent: str = Field(
        default="DiscordBot (https://github.com/guildflow/guildflow, 0.1.0)",
        description="User-Agent header sent with every request",
    )
    member_page_size: int = Field(default=1000, gt=0, le=1000, description="Page size when listing guild members")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")


class RetrySettings(BaseModel):
    """Retry behavior for rate-limited (429) and server-error (5xx) responses."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_attempts: int = Field(default=3, gt=0, description="Total attempts per request, including the first")
    initial_delay_seconds: float = Field(default=1.0, gt=0, description="Initial backoff delay")
    max_delay_seconds: float = Field(default=30.0, gt=0, description="Maximum backoff delay")
    exponential_base: float = Field(default=2.0, gt=1.0, description="Exponential backoff base")
    jitter_seconds: float = Field(default=1.0, ge=0, description="Maximum random jitter added to each delay")

    @model_validator(mode="after")
    def validate_delays(self) -> RetrySettings:
        if self.initial_delay_seconds > self.max_delay_seconds:
            raise ValueError("initial_delay_seconds must not exceed max_delay_seconds")
        return self


class StoreSettings(BaseModel):
    """Local resource store (recorded roles, categories, channels, flags)."""

    model_config = {"frozen": True, "extra": "forbid"}

    url: str = Field(default="sqlite:///./state/guildflow.db", description="SQLAlchemy database URL")
    echo: bool = Field(default=False, description="Echo SQL statements")


class AttachmentSettings(BaseModel):
    """Where message attachment files are read from."""

    model_config = {"frozen": True, "extra": "forbid"}

    base_path: Path = Field(default=Path("./attachments"), description="Root directory for attachment files")


class LoggingSettings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class GuildflowSettings(BaseModel):
    """Top-level guildflow configuration.

    Every section has defaults, so an empty settings file is valid.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    api: ApiSettings = Field(default_factory=ApiSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    attachments: AttachmentSettings = Field(default_factory=AttachmentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} in string values.

    A reference with no environment value and no default is left as-is,
    so validation reports the unexpanded text.
    """
    import os

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        return default if default is not None else match.group(0)

    def expand(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        if isinstance(value, dict):
            return {k: expand(v) for k, v in value.items()}
        if isinstance(value, list):
            return [expand(item) for item in value]
        return value

    return {k: expand(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path) -> GuildflowSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence, highest first:
    1. Environment variables (GUILDFLOW_*), nested with a double underscore,
       e.g. GUILDFLOW_RETRY__MAX_ATTEMPTS=5
    2. The YAML file
    3. Pydantic defaults

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValidationError: If the merged configuration is invalid
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="GUILDFLOW",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES", "BOT_TOKEN"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return GuildflowSettings(**raw_config)
