"""
Configuration management for the music lesson scheduler API.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Music Lesson Scheduler API"
    app_version: str = "1.0.0"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False

    # Storage
    storage_backend: Literal["memory", "json"] = "memory"
    storage_path: str = "data/scheduler.json"

    # Matching
    good_match_threshold: int = 50
    bookable_min_score: int = 25

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
    )


settings = Settings()
