"""
Configuration for the session-auth client.

All settings are loaded from environment variables prefixed with
SESSION_AUTH_ (e.g. SESSION_AUTH_API_URL), or from a local .env file.
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SESSION_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote authority
    api_url: str = "http://localhost:3000/api"
    request_timeout: float = 10.0

    # Durable storage
    storage_backend: Literal["memory", "file", "redis"] = "file"
    storage_path: str = "~/.session_auth/credentials.json"
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "session_auth:"

    # Persisted key names
    token_key: str = "auth_token"
    refresh_token_key: str = "refresh_token"
    user_key: str = "auth_user"

    # Session behaviour
    login_path: str = "/"
    refresh_on_unauthorized: bool = False
    verify_on_start: bool = True

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
