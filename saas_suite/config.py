"""
Application Configuration

Centralized configuration management using Pydantic settings.
Loads from environment variables with fallback to .env file.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

from saas_suite.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    get_settings() caches the instance, so tests that change the
    environment must call get_settings.cache_clear().
    """

    # Database settings
    DATABASE_URL: str = "postgresql://localhost/saas_suite_dev"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Session token settings
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Application settings
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Public URL used when handing out calendar feed links to channels
    PUBLIC_BASE_URL: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def require_setting(name: str) -> str:
    """
    Return an optional setting that a specific call site cannot work without.

    Missing values are a configuration error for that request only;
    the application itself still starts.
    """
    value = getattr(get_settings(), name, None)
    if not value:
        raise ConfigurationError(name)
    return value
