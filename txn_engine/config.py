"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    """Transaction engine configuration"""

    model_config = SettingsConfigDict(
        env_prefix="TXN_ENGINE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging configuration
    log_level: str = "WARNING"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    # Input/output configuration
    trim_fields: bool = True
    csv_delimiter: str = ","

    # Emit an INFO progress line every N records (0 disables)
    progress_interval: int = 0

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        log_format = value.lower()
        if log_format not in ("json", "text"):
            raise ValueError(f"Unknown log format: {value}")
        return log_format

    @field_validator("csv_delimiter")
    @classmethod
    def _validate_delimiter(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("CSV delimiter must be a single character")
        return value

    @field_validator("progress_interval")
    @classmethod
    def _validate_progress_interval(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Progress interval cannot be negative")
        return value


# Global configuration instance
config = EngineConfig()


def get_config() -> EngineConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> EngineConfig:
    """Reload configuration from environment"""
    global config
    config = EngineConfig()
    return config
