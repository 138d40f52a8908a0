"""
aiRchive Signup Configuration Management Module

Provides type-safe configuration management using pydantic-settings.
Supports loading configuration from environment variables and .env files.

Usage:
    from config.settings import settings
    print(settings.api.base_url)
    print(settings.validation.debounce_ms)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class ApiSettings(BaseSettings):
    """aiRchive REST backend configuration"""

    model_config = SettingsConfigDict(
        env_prefix="AIRCHIVE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(default="http://localhost:8080/api", description="Backend API base URL")
    timeout: float = Field(default=10.0, description="HTTP request timeout (seconds)")
    connect_timeout: float = Field(default=3.0, description="HTTP connect timeout (seconds)")
    # The backend ships two validation routes: a unified /users/validate and
    # per-field /users/validation/<field> endpoints.
    validation_mode: Literal["unified", "per_field"] = Field(
        default="unified",
        description="Validation endpoint variant",
    )
    trust_env: bool = Field(default=False, description="Honour HTTP(S)_PROXY environment variables")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")


class ValidationSettings(BaseSettings):
    """Field validation configuration"""

    model_config = SettingsConfigDict(
        env_prefix="AIRCHIVE_VALIDATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debounce_ms: int = Field(default=400, description="Quiet period before a keystroke triggers a backend check")
    # Compatible with the shorter AIRCHIVE_VALIDATION_TIMEOUT_SEC spelling.
    timeout: float = Field(
        default=8.0,
        description="Client-side timeout for a single validation call (seconds)",
        validation_alias=AliasChoices(
            "AIRCHIVE_VALIDATION_TIMEOUT",
            "AIRCHIVE_VALIDATION_TIMEOUT_SEC",
        ),
    )

    @property
    def debounce_seconds(self) -> float:
        """Debounce delay in seconds"""
        return max(0, self.debounce_ms) / 1000.0


class WizardSettings(BaseSettings):
    """Signup wizard configuration"""

    model_config = SettingsConfigDict(
        env_prefix="AIRCHIVE_WIZARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    completion_delay: float = Field(default=1.5, description="Confirmation delay before on_complete fires (seconds)")


class Settings(BaseSettings):
    """Main configuration class"""

    model_config = SettingsConfigDict(
        env_prefix="AIRCHIVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Log configuration
    log_level: str = "WARNING"
    log_format: Literal["text", "json"] = "text"
    log_file: Path | None = None  # Optional extra log sink

    # Nested groups read their own prefixed variables on every instantiation,
    # so reload_settings() picks up environment changes.
    api: ApiSettings = Field(default_factory=ApiSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    wizard: WizardSettings = Field(default_factory=WizardSettings)

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return (v or "WARNING").strip().upper()

    @field_validator("log_file", mode="before")
    @classmethod
    def resolve_path(cls, v):
        """Resolve path"""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            path = Path(v)
            return path if path.is_absolute() else PROJECT_ROOT / path
        return v


@lru_cache
def get_settings() -> Settings:
    """Get settings singleton (with cache)"""
    return Settings()


# Global settings instance - explicit type annotation ensures IDE correctly infers type
settings: Settings = get_settings()


def reload_settings() -> Settings:
    """Reload settings (clear cache)"""
    get_settings.cache_clear()
    # Note: this does not update module-level settings variable, caller should use return value
    # To update global settings, use config package's reload_settings
    return get_settings()
