"""
Application configuration using Pydantic Settings.
Following Factor 1: Own Your Configuration.

Supports hierarchical environment configuration:
- .env.base: Common non-secret defaults (committed to git)
- .env.{ENVIRONMENT}: Environment-specific overrides (gitignored)
- Environment variables: Highest priority
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get environment from env var, default to development
ENV = os.getenv("ENVIRONMENT", "development")


class Settings(BaseSettings):
    """Application settings with hierarchical env file support."""

    model_config = SettingsConfigDict(
        # Load base first, then environment-specific override
        env_file=[
            ".env.base",  # Common defaults (committed)
            f".env.{ENV}",  # Environment overrides (gitignored)
        ],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "test", "production"] = "development"

    # HTTP
    allowed_hosts: list[str] = [
        "*"
    ]  # Allow all hosts (override via ALLOWED_HOSTS env var)
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # External APIs - LLM
    dashscope_api_key: str = ""  # Alibaba Cloud DashScope API key

    # LLM Configuration
    default_llm_model: str = "qwen-plus"
    default_llm_temperature: float = 0.2  # Low temperature for JSON-shaped replies
    llm_max_tokens: int = 1500
    llm_timeout_seconds: float = 30.0  # Timeout counts as a model-call failure

    # Session persistence
    session_backend: Literal["file", "redis", "memory"] = "file"
    sessions_file: str = "sessions.json"
    redis_url: str = "redis://localhost:6379"
    session_key_prefix: str = "finviz:session:"
    session_ttl_seconds: int | None = None  # Redis key expiry; None keeps sessions

    # Rate limiting
    rate_limit_requests: int = 100  # per minute
    rate_limit_storage_uri: str = "memory://"

    # Intent classification
    # "none" from the model means "absent"; "None"/"NONE" only count when False
    classifier_none_case_sensitive: bool = True

    # Fallback data generation bounds
    fallback_min_price: float = 50.0
    fallback_max_price: float = 1000.0
    fallback_min_volume: int = 50_000
    fallback_max_volume: int = 5_000_000

    @property
    def llm_configured(self) -> bool:
        """Whether a model API key is available."""
        return bool(self.dashscope_api_key)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
