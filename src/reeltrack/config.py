"""Configuration management for Reeltrack.

This module defines the configuration schema using Pydantic settings,
supporting TOML files, environment variables, and programmatic overrides.

Configuration loading priority (highest to lowest):
1. Programmatic overrides (passed to ReeltrackConfig constructor)
2. Environment variables (REELTRACK_* prefix)
3. TOML configuration file
4. Default values defined in this module

Example TOML configuration:
    [storage]
    backend = "sql"
    url = "sqlite+aiosqlite:///reeltrack.db"

    [higgsfield]
    credentials = "KEY_ID:KEY_SECRET"

Example environment variable override:
    REELTRACK_LLM__API_KEY="sk-..."
    REELTRACK_HIGGSFIELD__POLL_INTERVAL_SECONDS=1.5
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomli
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageConfig(BaseSettings):
    """Project store configuration.

    Attributes:
        backend: Store implementation ("memory" or "sql")
        url: SQLAlchemy async database URL, used by the sql backend
        echo: Enable SQL query logging
    """

    model_config = SettingsConfigDict(
        env_prefix="REELTRACK_STORAGE__",
        extra="forbid",
    )

    backend: str = Field(default="memory")
    url: str = Field(
        default="sqlite+aiosqlite:///reeltrack.db",
        description="SQLAlchemy async connection URL",
    )
    echo: bool = Field(default=False)

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Validate store backend is recognized."""
        valid_backends = {"memory", "sql"}
        v_lower = v.lower()
        if v_lower not in valid_backends:
            raise ValueError(f"Invalid storage backend: {v}. Must be one of {valid_backends}")
        return v_lower


class LlmConfig(BaseSettings):
    """Chat-completion service configuration.

    Attributes:
        api_key: API key for the OpenAI-compatible endpoint (None disables it)
        base_url: Base URL of the chat-completion API
        model: Model name used for script and prompt generation
        timeout_seconds: Request timeout in seconds
        enhance_temperature: Sampling temperature for prompt enhancement
        fallback_enabled: Serve canned content when no API key is configured
    """

    model_config = SettingsConfigDict(
        env_prefix="REELTRACK_LLM__",
        extra="forbid",
    )

    api_key: str | None = Field(default=None)
    base_url: str = Field(default="https://api.openai.com/v1")
    model: str = Field(default="gpt-4o")
    timeout_seconds: int = Field(default=60, ge=1, le=600)
    enhance_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    fallback_enabled: bool = Field(default=True)


class HiggsfieldConfig(BaseSettings):
    """Higgsfield media-generation API configuration.

    Credentials may be given as api_key/api_secret or as a combined
    "KEY_ID:KEY_SECRET" string; explicit fields win over the combined one.

    Attributes:
        api_key: Higgsfield key id
        api_secret: Higgsfield key secret
        credentials: Combined "KEY_ID:KEY_SECRET" credentials
        base_url: Base URL of the Higgsfield platform API
        image_endpoint: Path of the text-to-image model endpoint
        video_endpoint: Path of the image-to-video endpoint
        request_timeout_seconds: Timeout for each submission attempt
        max_submit_attempts: Submission attempts before giving up
        backoff_seconds: Backoff step between submission attempts
        poll_interval_seconds: Wait between job status checks
        image_max_poll_attempts: Status checks before an image job times out
        video_max_poll_attempts: Status checks before a video job times out
    """

    model_config = SettingsConfigDict(
        env_prefix="REELTRACK_HIGGSFIELD__",
        extra="forbid",
    )

    api_key: str | None = Field(default=None)
    api_secret: str | None = Field(default=None)
    credentials: str | None = Field(default=None)
    base_url: str = Field(default="https://platform.higgsfield.ai")
    image_endpoint: str = Field(default="/higgsfield-ai/soul/standard")
    video_endpoint: str = Field(default="/v1/image2video/dop")
    request_timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    max_submit_attempts: int = Field(default=3, ge=1, le=10)
    backoff_seconds: float = Field(default=2.0, ge=0, le=60)
    poll_interval_seconds: float = Field(default=2.0, ge=0, le=60)
    image_max_poll_attempts: int = Field(default=30, ge=1, le=600)
    video_max_poll_attempts: int = Field(default=60, ge=1, le=600)

    @field_validator("credentials")
    @classmethod
    def validate_credentials(cls, v: str | None) -> str | None:
        """Validate combined credentials have the KEY_ID:KEY_SECRET form."""
        if v is None:
            return v
        key, _, secret = v.partition(":")
        if not key or not secret:
            raise ValueError("Credentials must be in format 'KEY_ID:KEY_SECRET'")
        return v

    def resolve_credentials(self) -> tuple[str, str] | None:
        """Return (key, secret) if both halves are available, else None."""
        key = self.api_key
        secret = self.api_secret
        if self.credentials is not None:
            combined_key, _, combined_secret = self.credentials.partition(":")
            key = key or combined_key
            secret = secret or combined_secret
        if not key or not secret:
            return None
        return key, secret


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json or console)
        file: Optional log file path (None for stdout only)
        rotation_size_mb: Log file rotation size in megabytes
        retention_count: Number of rotated log files to keep
    """

    model_config = SettingsConfigDict(
        env_prefix="REELTRACK_LOGGING__",
        extra="forbid",
    )

    level: str = Field(default="INFO")
    format: str = Field(default="json")
    file: Path | None = Field(default=None)
    rotation_size_mb: int = Field(default=50, ge=1, le=1000)
    retention_count: int = Field(default=10, ge=1, le=100)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format is recognized."""
        valid_formats = {"json", "console"}
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v_lower


class WebConfig(BaseSettings):
    """Web API configuration.

    Attributes:
        host: Bind host address
        port: Bind port number
        cors_origins: Allowed CORS origins
        uploads_dir: Directory hook uploads are written to and served from
        max_upload_mb: Largest accepted hook upload
    """

    model_config = SettingsConfigDict(
        env_prefix="REELTRACK_WEB__",
        extra="forbid",
    )

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    uploads_dir: Path = Field(default=Path("uploads"))
    max_upload_mb: int = Field(default=50, ge=1, le=1024)


class ReeltrackConfig(BaseSettings):
    """Root configuration for Reeltrack.

    Aggregates all subsystem configurations. Configuration can be loaded from:
    1. TOML files (using load_config function)
    2. Environment variables (REELTRACK_* prefix)
    3. Direct instantiation with keyword arguments

    Environment variable format for nested config:
        REELTRACK_<SECTION>__<KEY>=value

    Example:
        REELTRACK_STORAGE__BACKEND="sql"
        REELTRACK_HIGGSFIELD__API_KEY="hf-key"
    """

    model_config = SettingsConfigDict(
        env_prefix="REELTRACK_",
        env_nested_delimiter="__",
        extra="forbid",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    llm: LlmConfig = Field(default_factory=LlmConfig)
    higgsfield: HiggsfieldConfig = Field(default_factory=HiggsfieldConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    web: WebConfig = Field(default_factory=WebConfig)


def load_config(config_path: Path | None = None) -> ReeltrackConfig:
    """Load configuration from TOML file with environment variable overrides.

    Configuration search order (first found is used):
    1. config_path if explicitly provided
    2. ./reeltrack.toml (current directory)
    3. ~/.config/reeltrack/config.toml (user config directory)

    Args:
        config_path: Explicit path to TOML config file. If None, searches
                    default locations.

    Returns:
        ReeltrackConfig: Fully resolved configuration instance.

    Raises:
        FileNotFoundError: If config_path is explicitly provided but doesn't exist.
        ValueError: If TOML file contains invalid configuration.
    """
    toml_data: dict[str, Any] = {}

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        selected_path = config_path
    else:
        search_paths = [
            Path.cwd() / "reeltrack.toml",
            Path.home() / ".config" / "reeltrack" / "config.toml",
        ]
        selected_path = None
        for path in search_paths:
            if path.exists():
                selected_path = path
                break

    if selected_path is not None:
        with open(selected_path, "rb") as f:
            toml_data = tomli.load(f)

    # Pydantic overlays environment variables on top of the TOML data
    try:
        return ReeltrackConfig(**toml_data)
    except Exception as e:
        if selected_path:
            raise ValueError(
                f"Invalid configuration in {selected_path}: {e}"
            ) from e
        else:
            raise ValueError(f"Invalid configuration: {e}") from e
