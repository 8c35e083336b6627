# tests/unit/core/test_config.py
"""Tests for settings validation and multi-source loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from guildflow.core.config import (
    DEFAULT_API_BASE_URL,
    ApiSettings,
    GuildflowSettings,
    LoggingSettings,
    RetrySettings,
    load_settings,
)


class TestSettingsModels:
    def test_defaults_need_no_file(self) -> None:
        settings = GuildflowSettings()

        assert settings.api.base_url == DEFAULT_API_BASE_URL
        assert settings.retry.max_attempts == 3
        assert settings.store.url.startswith("sqlite:///")

    def test_base_url_trailing_slash_is_dropped(self) -> None:
        assert ApiSettings(base_url="https://example.test/api/").base_url == "https://example.test/api"

    def test_base_url_must_be_http(self) -> None:
        with pytest.raises(ValidationError, match="http"):
            ApiSettings(base_url="ftp://example.test")

    def test_member_page_size_is_capped(self) -> None:
        with pytest.raises(ValidationError):
            ApiSettings(member_page_size=1001)

    def test_retry_delays_must_be_ordered(self) -> None:
        with pytest.raises(ValidationError, match="initial_delay_seconds"):
            RetrySettings(initial_delay_seconds=10, max_delay_seconds=1)

    def test_log_level_is_normalized(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]

    def test_unknown_section_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GuildflowSettings.model_validate({"webhooks": {}})

    def test_settings_are_frozen(self) -> None:
        settings = GuildflowSettings()

        with pytest.raises(ValidationError):
            settings.api = ApiSettings()  # type: ignore[misc]


class TestLoadSettings:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yaml")

    def test_yaml_values_are_loaded(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(
            "retry:\n  max_attempts: 5\nstore:\n  url: sqlite:///:memory:\nlogging:\n  level: warning\n",
            encoding="utf-8",
        )

        settings = load_settings(path)

        assert settings.retry.max_attempts == 5
        assert settings.store.url == "sqlite:///:memory:"
        assert settings.logging.level == "WARNING"

    def test_environment_sets_nested_value(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("api:\n  timeout_seconds: 5\n", encoding="utf-8")
        monkeypatch.setenv("GUILDFLOW_RETRY__MAX_ATTEMPTS", "7")

        settings = load_settings(path)

        assert settings.retry.max_attempts == 7
        assert settings.api.timeout_seconds == 5

    def test_env_var_references_are_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(
            "store:\n  url: ${TEST_GF_DB_URL}\nattachments:\n  base_path: ${TEST_GF_ASSETS:-./assets}\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("TEST_GF_DB_URL", "sqlite:///./test.db")
        monkeypatch.delenv("TEST_GF_ASSETS", raising=False)

        settings = load_settings(path)

        assert settings.store.url == "sqlite:///./test.db"
        assert settings.attachments.base_path == Path("./assets")

    def test_bot_token_never_lands_in_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("api:\n  timeout_seconds: 5\n", encoding="utf-8")
        monkeypatch.setenv("GUILDFLOW_BOT_TOKEN", "secret-token")

        settings = load_settings(path)

        assert settings.api.timeout_seconds == 5
        assert "secret-token" not in settings.model_dump_json()

    def test_invalid_value_raises_validation_error(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("retry:\n  max_attempts: 0\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_settings(path)
