"""
Configuration management using pydantic-settings.
Loads configuration from environment variables and .env file.
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Configuration
    APP_NAME: str = "TreasureBook Insights"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

    # File logging is opt-in; console logging is always on
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"

    # Insights Configuration
    INSIGHTS_RULES_PATH: Optional[str] = None  # Defaults to config/insights/rules/
    INSIGHTS_RECORD_PROVIDER: Literal["static", "json_file"] = "static"
    INSIGHTS_EXPORT_DIR: str = "data/exports"

    @property
    def log_file_path(self) -> str:
        """Get the application log file path."""
        return f"{self.LOG_DIR}/app.log"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
