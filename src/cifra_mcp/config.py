"""Configuration management."""

import logging
from datetime import timedelta
from functools import cache
from typing import Literal

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from .consts import (
    DEFAULT_BASE_URL,
    DEFAULT_SECRET_KEY,
    DEFAULT_TOKEN_EXPIRY_MINUTES,
    TOKEN_REFRESH_MARGIN_MINUTES,
)
from .models import Credentials

LoginStrategyName = Literal["password", "api_key", "password_then_api_key"]


class Config(BaseSettings):
    """Connection, login and logging settings, read from CIFRAMCP_* variables."""

    model_config = ConfigDict(
        env_prefix="CIFRAMCP_", case_sensitive=False, extra="ignore"
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the Cifra public API server",
    )
    api_key: str = Field(default="", description="Public API key of the client")
    secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        description="Private key used to sign requests (HMAC-SHA256)",
    )
    user: str = Field(default="", description="Login user")
    password: str = Field(default="", description="Login password")
    login_strategy: LoginStrategyName = Field(
        default="password", description="How tokens are obtained from the server"
    )
    token_expiry_minutes: int = Field(
        default=DEFAULT_TOKEN_EXPIRY_MINUTES,
        gt=0,
        description="Server-side token lifetime in minutes",
    )
    token_refresh_margin_minutes: int = Field(
        default=TOKEN_REFRESH_MARGIN_MINUTES,
        ge=0,
        description="Refresh the token this many minutes before it expires",
    )
    retry_on_auth_failure: bool = Field(
        default=True,
        description="Evict the token and retry once when a request gets HTTP 401",
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )
    timeout_seconds: int = Field(
        default=30, gt=0, le=300, description="HTTP request timeout in seconds"
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("secret_key")
    @classmethod
    def _default_blank_secret(cls, value: str) -> str:
        return value or DEFAULT_SECRET_KEY

    @model_validator(mode="after")
    def _check_refresh_window(self) -> "Config":
        if self.token_refresh_margin_minutes >= self.token_expiry_minutes:
            raise ValueError(
                "token_refresh_margin_minutes must be smaller than token_expiry_minutes"
            )
        return self

    @property
    def refresh_window(self) -> timedelta:
        """How long a cached token is reused before logging in again."""
        return timedelta(
            minutes=self.token_expiry_minutes - self.token_refresh_margin_minutes
        )

    @property
    def credentials(self) -> Credentials:
        """Snapshot of the credentials currently configured."""
        return Credentials(
            base_url=self.base_url,
            api_key=self.api_key,
            secret_key=self.secret_key,
            user=self.user,
            password=self.password,
        )

    def __repr__(self) -> str:
        return f"Config(base_url='{self.base_url}', log_level='{self.log_level}')"


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure logging for the entire application"""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # Override any existing configuration
    )
    return logging.getLogger("cifra-mcp")
