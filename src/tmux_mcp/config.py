"""Configuration management for tmux MCP."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .shell import DEFAULT_SHELL_TYPE, normalize_shell_type


class TmuxSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    tmux_path: str | None = Field(default=None, validation_alias="TMUX_PATH")
    shell_type: str = Field(default=DEFAULT_SHELL_TYPE, validation_alias="TMUX_MCP_SHELL_TYPE")
    log_level: str = Field(default="INFO", validation_alias="TMUX_MCP_LOG_LEVEL")
    min_command_interval_ms: int = Field(
        default=10, validation_alias="TMUX_MCP_MIN_COMMAND_INTERVAL_MS"
    )
    baseline_lines: int = Field(default=50, validation_alias="TMUX_MCP_BASELINE_LINES")
    poll_lines: int = Field(default=1000, validation_alias="TMUX_MCP_POLL_LINES")
    capture_lines: int = Field(default=200, validation_alias="TMUX_MCP_CAPTURE_LINES")
    completion_dwell_ms: int = Field(default=500, validation_alias="TMUX_MCP_COMPLETION_DWELL_MS")
    command_max_age_minutes: float = Field(
        default=60, validation_alias="TMUX_MCP_COMMAND_MAX_AGE_MINUTES"
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "TMUX_MCP_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("shell_type")
    @classmethod
    def _normalize_shell_type(cls, value: str) -> str:
        return normalize_shell_type(value)

    @field_validator("min_command_interval_ms", "completion_dwell_ms")
    @classmethod
    def _validate_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Intervals must be >= 0 milliseconds")
        return value

    @field_validator("baseline_lines", "poll_lines", "capture_lines")
    @classmethod
    def _validate_line_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Capture line counts must be >= 1")
        return value


@lru_cache(maxsize=1)
def get_settings() -> TmuxSettings:
    """Return cached settings instance."""

    return TmuxSettings()


__all__ = ["TmuxSettings", "get_settings"]
