"""Application settings management leveraging pydantic v2."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if os.getenv("ENV", "development") in {"development", "dev", "local"}:
    from dotenv import load_dotenv

    load_dotenv(override=False)


_TRUTHY = {"1", "true", "yes", "on"}


class AppSettings(BaseSettings):
    """Typed configuration sourced from environment variables."""

    app_name: str = Field(
        default="Sahay",
        validation_alias=AliasChoices("APP_NAME", "SAHAY_APP_NAME"),
    )
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "SAHAY_ENVIRONMENT"),
    )
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "SAHAY_GEMINI_API_KEY"),
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        validation_alias=AliasChoices("GEMINI_BASE_URL", "SAHAY_GEMINI_BASE_URL"),
    )
    model_chat: str = Field(
        default="gemini-2.5-flash",
        validation_alias=AliasChoices("GEMINI_MODEL", "SAHAY_MODEL_CHAT"),
    )
    model_analysis: str = Field(
        default="gemini-2.5-flash",
        validation_alias=AliasChoices("GEMINI_ANALYSIS_MODEL", "SAHAY_MODEL_ANALYSIS"),
    )
    llm_timeout: float = Field(
        default=30.0,
        validation_alias=AliasChoices("LLM_TIMEOUT", "SAHAY_LLM_TIMEOUT"),
    )
    store_backend: str = Field(
        default="firestore",
        validation_alias=AliasChoices("STORE_BACKEND", "SAHAY_STORE_BACKEND"),
    )
    firebase_project_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("FIREBASE_PROJECT_ID", "SAHAY_FIREBASE_PROJECT_ID"),
    )
    firebase_credentials: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "GOOGLE_APPLICATION_CREDENTIALS_FIREBASE", "SAHAY_FIREBASE_CREDENTIALS"
        ),
    )
    dev_bypass_auth: bool = Field(
        default=False,
        validation_alias=AliasChoices("DEV_BYPASS_AUTH", "SAHAY_DEV_BYPASS_AUTH"),
    )
    # When false, conversation turns are neither read from nor written to the memory store.
    enable_memory: bool = Field(
        default=True,
        validation_alias=AliasChoices("ENABLE_MEMORY", "SAHAY_ENABLE_MEMORY"),
    )
    sound_strategy: str = Field(
        default="personalized",
        validation_alias=AliasChoices("SOUND_STRATEGY", "SAHAY_SOUND_STRATEGY"),
    )
    log_level: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LOG_LEVEL", "SAHAY_LOG_LEVEL"),
    )
    log_format: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LOG_FORMAT", "SAHAY_LOG_FORMAT"),
    )
    log_color: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("LOG_COLOR", "SAHAY_LOG_COLOR"),
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        validation_alias=AliasChoices("CORS_ORIGINS", "SAHAY_CORS_ORIGINS"),
    )

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("dev_bypass_auth", "enable_memory", "log_color", mode="before")
    @classmethod
    def _coerce_flag(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return value

    @field_validator("store_backend", "sound_strategy", mode="before")
    @classmethod
    def _lower(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in {"development", "dev", "local", "test"}


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Load environment variables and return a cached settings instance."""

    return AppSettings()


__all__ = ["AppSettings", "get_settings"]
