from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # GitHub
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TOKEN: str = Field(default="", description="Optional; raises the rate limit from 60 to 5000/h")
    GITHUB_API_VERSION: str = "2022-11-28"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Fetch window and list caps
    COMMIT_WINDOW: int = Field(default=100, ge=1)
    MAX_COMMIT_WINDOW: int = Field(default=1000, ge=1)
    BRANCHES_LIMIT: int = Field(default=100, ge=1)
    CONTRIBUTORS_LIMIT: int = Field(default=20, ge=1)

    # Outbound request shaping
    MAX_FETCH_CONCURRENT: int = 5
    RATE_LIMIT_REQUESTS_PER_SEC: float = 10.0
    RETRY_MAX_ATTEMPTS: int = 3

    # Redis response cache (empty URL disables caching)
    REDIS_URL: str = ""
    CACHE_TTL_SECONDS: int = 300

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
