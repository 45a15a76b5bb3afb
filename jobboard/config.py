"""
Configuration management for the Job Board API.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    environment: str = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Database
    database_url: str = "sqlite:///./jobboard.db"

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24 * 7

    # LLM evaluator (empty key = heuristic scoring only)
    deepseek_api_key: str = ""
    deepseek_model: str = "deepseek-chat"
    evaluator_timeout: float = 20.0

    # Scoring
    scoring_deadline_seconds: float = 30.0
    scoring_workers: int = 4

    # Listings
    default_page_size: int = 10
    max_page_size: int = 100

    # Rate limits
    rate_limit_enabled: bool = True
    auth_rate_limit: str = "10/minute"
    apply_rate_limit: str = "20/minute"
    rate_limit_storage_uri: str = "memory://"

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()
