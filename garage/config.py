"""
Configuration settings for the garage persistence core.
Uses Pydantic for type-safe configuration management.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Garage Management System"
    app_version: str = "3.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Storage
    storage_backend: Literal["sql", "memory"] = "sql"
    database_url: str = "sqlite+aiosqlite:///./garage.db"
    entity_key_prefix: str = "entities_"
    storage_ready_timeout: float = 2.0  # seconds
    storage_ready_interval: float = 0.1  # seconds

    # Persistence behaviour
    validate_on_update: bool = True
    default_tax_rate: float = 20.0  # percent

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # API
    api_v1_prefix: str = "/api/v1"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
