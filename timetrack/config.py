"""Configuration management for the application."""

import re
from datetime import timedelta
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Parse a lifetime such as ``15m``, ``7d`` or ``3600`` into a timedelta."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"invalid duration {value!r}, expected e.g. '15m' or '7d'")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str | None = Field(default=None)
    postgres_host: str | None = Field(default=None)
    postgres_port: int = Field(default=5432)
    postgres_db: str | None = Field(default=None)
    postgres_user: str | None = Field(default=None)
    postgres_password: str | None = Field(default=None)

    # JWT
    jwt_access_secret: str = Field(min_length=32)
    jwt_refresh_secret: str = Field(min_length=32)
    jwt_algorithm: str = Field(default="HS256")
    access_token_expiry: timedelta = Field(default=timedelta(minutes=15))
    refresh_token_expiry: timedelta = Field(default=timedelta(days=7))

    # Passwords
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # Rate limiting
    rate_limit_window_ms: int = Field(default=900_000, gt=0)
    rate_limit_max_requests: int = Field(default=100, gt=0)

    # Entries without an explicit date are logged against "today" in this zone
    reference_timezone: str = Field(default="Europe/London")

    # API
    environment: Literal["development", "production", "test"] = Field(default="development")
    log_level: str = Field(default="INFO")
    slow_query_ms: int = Field(default=100)

    @field_validator("access_token_expiry", "refresh_token_expiry", mode="before")
    @classmethod
    def parse_expiry(cls, value):
        return parse_duration(value)

    @field_validator("reference_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @model_validator(mode="after")
    def resolve_database_url(self) -> "Settings":
        """Build the database URL from the individual POSTGRES_* variables if needed."""
        if self.database_url:
            return self
        required = [
            self.postgres_host,
            self.postgres_db,
            self.postgres_user,
            self.postgres_password,
        ]
        if not all(required):
            raise ValueError(
                "Database configuration incomplete. Either provide DATABASE_URL "
                "or all of POSTGRES_HOST, POSTGRES_DB, POSTGRES_USER and POSTGRES_PASSWORD."
            )
        self.database_url = (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )
        return self

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has secure settings."""
        if self.environment == "production":
            if self.jwt_access_secret == self.jwt_refresh_secret:
                raise ValueError(
                    "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ in production"
                )
            if "localhost" in (self.database_url or ""):
                raise ValueError("DATABASE_URL should not use localhost in production")
        return self

    @property
    def rate_limit_window(self) -> timedelta:
        return timedelta(milliseconds=self.rate_limit_window_ms)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
