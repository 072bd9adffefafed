"""Typed settings loader for the market admin console."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_API_BASE_URL = "https://only-backend-je4j.onrender.com/api"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    market_api_base_url: AnyUrl = Field(
        default=DEFAULT_API_BASE_URL,
        alias="MARKET_API_BASE_URL",
        validate_default=True,
    )
    # None disables the timeout; a hung request blocks the console.
    market_api_timeout_seconds: float | None = Field(
        default=None,
        alias="MARKET_API_TIMEOUT_SECONDS",
    )
    market_auth_token: str | None = Field(
        default=None, alias="MARKET_AUTH_TOKEN", repr=False
    )
    market_token_store_path: Path = Field(
        default=Path("./data/session.json"),
        alias="MARKET_TOKEN_STORE_PATH",
    )
    market_token_key: str = Field(default="token", alias="MARKET_TOKEN_KEY")

    journal_enabled: bool = Field(default=True, alias="JOURNAL_ENABLED")
    journal_dir: Path = Field(default=Path("./data/journal"), alias="JOURNAL_DIR")
    notice_max_events: int = Field(default=50, alias="NOTICE_MAX_EVENTS")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    @field_validator("market_api_timeout_seconds", "market_auth_token", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as unset."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value

    @model_validator(mode="after")
    def validate_values(self) -> Settings:
        if self.market_api_base_url.scheme not in {"http", "https"}:
            raise ValueError("MARKET_API_BASE_URL must use http or https.")
        if (
            self.market_api_timeout_seconds is not None
            and self.market_api_timeout_seconds <= 0
        ):
            raise ValueError("MARKET_API_TIMEOUT_SECONDS must be > 0 when set.")
        if not self.market_token_key.strip():
            raise ValueError("MARKET_TOKEN_KEY must not be empty.")
        if self.notice_max_events <= 0:
            raise ValueError("NOTICE_MAX_EVENTS must be > 0.")
        return self

    @property
    def api_base_url(self) -> str:
        """Base URL with a trailing slash so relative endpoints join under it."""
        return str(self.market_api_base_url).rstrip("/") + "/"

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling (no credentials)."""
        return {
            "app_env": self.app_env,
            "base_url": str(self.market_api_base_url),
            "timeout_seconds": self.market_api_timeout_seconds,
            "credential_source": "env" if self.market_auth_token else "store",
            "credential_store_path": str(self.market_token_store_path),
            "journal_enabled": self.journal_enabled,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    if settings.journal_enabled:
        settings.journal_dir.mkdir(parents=True, exist_ok=True)
    return settings
