"""
Core configuration using Pydantic Settings.
Loads from environment variables.
"""

from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(default="nextintern", alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", alias="APP_ENV"
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    # API
    api_v1_prefix: str = "/api/v1"
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        alias="ALLOWED_ORIGINS",
    )

    # Database (async driver URL, e.g. postgresql+asyncpg://... or sqlite+aiosqlite:///...)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./nextintern.db", alias="DATABASE_URL"
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Auth
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )

    # Logging
    log_request_body: bool = Field(default=False, alias="LOG_REQUEST_BODY")
    log_max_body_size: int = Field(default=1024, alias="LOG_MAX_BODY_SIZE")
    json_logs: bool = Field(default=True, alias="JSON_LOGS")

    # Disclosure control
    candidate_label_suffix_length: int = Field(
        default=8, alias="CANDIDATE_LABEL_SUFFIX_LENGTH"
    )
    company_label_suffix_length: int = Field(
        default=3, alias="COMPANY_LABEL_SUFFIX_LENGTH"
    )
    anonymous_id_bytes: int = Field(default=12, alias="ANONYMOUS_ID_BYTES")

    # Subscription-gated features
    free_monthly_posting_limit: int = Field(
        default=3, alias="FREE_MONTHLY_POSTING_LIMIT"
    )


# Global settings instance
settings = Settings()
