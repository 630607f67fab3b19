"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Scrape execution mode: "auto" picks fallback on hosted platforms
    scrape_run_mode: Literal["auto", "live", "fallback"] = "auto"

    # Hosting platform markers (set by the platform itself)
    vercel: str = ""
    netlify: str = ""

    # Browser automation
    headless: bool = True
    navigation_timeout: float = 30.0  # seconds per page.goto
    action_timeout: float = 15.0  # seconds per click, fill, text read or wait
    settle_delay: float = 3.0  # seconds to let dynamic content render
    store_settle_delay: float = 5.0  # seconds for store locator results
    scraping_max_retries: int = 2
    health_check_timeout: float = 15.0

    # Inventory endpoint
    inventory_cache_ttl: float = 300.0  # five minutes
    default_query: str = "food"

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    # Comma-separated; "*" lets any site call the inventory API
    allowed_origins: str = "*"

    @property
    def is_deployment(self) -> bool:
        """Check if running on a hosted platform where Chromium cannot launch."""
        return bool(self.vercel or self.netlify or self.environment.lower() == "production")

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
