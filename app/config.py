"""
Application configuration using pydantic-settings.
Loads from environment variables / .env file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "devalaya"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # API Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Postgres (asyncpg)
    database_url: str = ""

    # Redis (public card cache + Celery broker)
    redis_url: str = "redis://localhost:6379/0"

    # Cloudinary media store
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "devalaya/temples"

    # Caller roles (supplied by the auth gateway)
    temple_creator_roles: List[str] = ["templeAdmin"]
    privileged_role: str = "admin"
    active_account_status: str = "active"

    # Listing
    default_page_size: int = 10
    max_page_size: int = 100

    # Seconds; 0 disables the public card cache
    public_cards_cache_ttl: int = 300

    # Hand remote deletions to the Celery worker instead of deleting inline
    media_cleanup_via_worker: bool = False

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
