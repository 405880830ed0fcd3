"""Unit tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from reeltrack.config import (
    HiggsfieldConfig,
    LlmConfig,
    LoggingConfig,
    ReeltrackConfig,
    StorageConfig,
    WebConfig,
    load_config,
)


class TestStorageConfig:
    """Test StorageConfig validation and defaults."""

    def test_default_values(self) -> None:
        """Test that default values are set correctly."""
        config = StorageConfig()
        assert config.backend == "memory"
        assert config.url.startswith("sqlite+aiosqlite://")
        assert config.echo is False

    def test_backend_is_normalised(self) -> None:
        """Test that backend names are case-insensitive."""
        assert StorageConfig(backend="SQL").backend == "sql"

    def test_backend_validation(self) -> None:
        """Test that unknown backends are rejected."""
        with pytest.raises(ValidationError, match="Invalid storage backend"):
            StorageConfig(backend="redis")


class TestLlmConfig:
    """Test LlmConfig defaults."""

    def test_default_values(self) -> None:
        """Test that the model is unconfigured by default."""
        config = LlmConfig()
        assert config.api_key is None
        assert config.base_url == "https://api.openai.com/v1"
        assert config.model == "gpt-4o"
        assert config.enhance_temperature == 0.7
        assert config.fallback_enabled is True

    def test_temperature_validation(self) -> None:
        with pytest.raises(ValidationError):
            LlmConfig(enhance_temperature=3.0)


class TestHiggsfieldConfig:
    """Test HiggsfieldConfig credentials and retry settings."""

    def test_default_values(self) -> None:
        """Test retry and polling defaults."""
        config = HiggsfieldConfig()
        assert config.max_submit_attempts == 3
        assert config.backoff_seconds == 2.0
        assert config.poll_interval_seconds == 2.0
        assert config.image_max_poll_attempts == 30
        assert config.video_max_poll_attempts == 60
        assert config.resolve_credentials() is None

    def test_combined_credentials(self) -> None:
        """Test that KEY_ID:KEY_SECRET is split into its halves."""
        config = HiggsfieldConfig(credentials="key-id:key-secret")
        assert config.resolve_credentials() == ("key-id", "key-secret")

    def test_separate_credentials_win(self) -> None:
        """Test that explicit key fields take precedence over the combined string."""
        config = HiggsfieldConfig(api_key="explicit", credentials="key-id:key-secret")
        assert config.resolve_credentials() == ("explicit", "key-secret")

    def test_half_credentials_are_unusable(self) -> None:
        config = HiggsfieldConfig(api_key="key-only")
        assert config.resolve_credentials() is None

    @pytest.mark.parametrize("value", ["no-colon", ":secret", "key:"])
    def test_credentials_format_validation(self, value: str) -> None:
        """Test that malformed combined credentials are rejected."""
        with pytest.raises(ValidationError, match="KEY_ID:KEY_SECRET"):
            HiggsfieldConfig(credentials=value)


class TestLoggingConfig:
    """Test LoggingConfig validation."""

    def test_default_values(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "json"
        assert config.file is None

    def test_level_validation(self) -> None:
        """Test that log levels are upper-cased and validated."""
        assert LoggingConfig(level="debug").level == "DEBUG"
        with pytest.raises(ValidationError, match="Invalid log level"):
            LoggingConfig(level="verbose")

    def test_format_validation(self) -> None:
        with pytest.raises(ValidationError, match="Invalid log format"):
            LoggingConfig(format="xml")


class TestWebConfig:
    """Test WebConfig defaults and validation."""

    def test_default_values(self) -> None:
        config = WebConfig()
        assert config.port == 5000
        assert config.cors_origins == ["http://localhost:5173"]
        assert config.uploads_dir == Path("uploads")
        assert config.max_upload_mb == 50

    def test_port_validation(self) -> None:
        with pytest.raises(ValidationError):
            WebConfig(port=70000)


class TestReeltrackConfig:
    """Test root configuration and environment overrides."""

    def test_default_sections(self) -> None:
        config = ReeltrackConfig()
        assert isinstance(config.storage, StorageConfig)
        assert isinstance(config.higgsfield, HiggsfieldConfig)

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test REELTRACK_<SECTION>__<KEY> environment variables."""
        monkeypatch.setenv("REELTRACK_LLM__API_KEY", "sk-test")
        monkeypatch.setenv("REELTRACK_HIGGSFIELD__POLL_INTERVAL_SECONDS", "1.5")
        config = ReeltrackConfig()
        assert config.llm.api_key == "sk-test"
        assert config.higgsfield.poll_interval_seconds == 1.5

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            ReeltrackConfig(unknown_section={})  # type: ignore[call-arg]


class TestLoadConfig:
    """Test TOML configuration loading."""

    def test_load_from_explicit_path(self, tmp_path: Path) -> None:
        """Test that values from an explicit TOML file are applied."""
        config_file = tmp_path / "reeltrack.toml"
        config_file.write_text(
            '[storage]\nbackend = "sql"\nurl = "sqlite+aiosqlite:///./test.db"\n\n'
            '[web]\nport = 8080\n'
        )
        config = load_config(config_file)
        assert config.storage.backend == "sql"
        assert config.storage.url == "sqlite+aiosqlite:///./test.db"
        assert config.web.port == 8080

    def test_missing_explicit_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_values_raise_value_error(self, tmp_path: Path) -> None:
        """Test that invalid TOML values name the file in the error."""
        config_file = tmp_path / "bad.toml"
        config_file.write_text('[logging]\nlevel = "LOUD"\n')
        with pytest.raises(ValueError, match="bad.toml"):
            load_config(config_file)

    def test_search_current_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that ./reeltrack.toml is found without an explicit path."""
        (tmp_path / "reeltrack.toml").write_text('[llm]\nmodel = "gpt-4o-mini"\n')
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_config().llm.model == "gpt-4o-mini"

    def test_env_overrides_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that environment variables win over TOML values."""
        config_file = tmp_path / "reeltrack.toml"
        config_file.write_text("[web]\nport = 8080\n")
        monkeypatch.setenv("REELTRACK_WEB__PORT", "9090")
        assert load_config(config_file).web.port == 9090
