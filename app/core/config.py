# app/core/config.py

import os
from functools import lru_cache
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./migrator.db"

    # Ozon Seller API (source marketplace)
    OZON_CLIENT_ID: str = ""
    OZON_API_KEY: str = ""
    OZON_API_URL: str = "https://api-seller.ozon.ru"

    # Wildberries API (target marketplace)
    WILDBERRIES_API_KEY: str = ""
    WILDBERRIES_API_URL: str = "https://suppliers-api.wildberries.ru"
    WILDBERRIES_CONTENT_API_URL: str = "https://content-api.wildberries.ru"

    # Outbound marketplace calls
    MARKETPLACE_HTTP_TIMEOUT: float = 30.0

    # Migrations
    RECOVER_STUCK_MIGRATIONS: bool = True  # Relaunch in_progress migrations on startup
    RECENT_MIGRATIONS_LIMIT: int = 5
    RUN_MIGRATIONS: bool = False  # alembic upgrade head on startup

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env'),
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def async_database_url(self) -> str:
        """DATABASE_URL with the async driver selected."""
        url = self.DATABASE_URL
        # Convert postgresql:// to postgresql+asyncpg:// for async support
        if url.startswith('postgresql://'):
            url = url.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.async_database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Cached settings to avoid loading .env file for every request"""
    return Settings()


def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
