"""
Tiered Job Feed - Configuration Settings
Environment-specific configs with validation
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR = Path(__file__).resolve().parent


class DatabaseSettings(BaseSettings):
    """Database configuration"""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: SecretStr = Field(default="sqlite+aiosqlite:///./jobfeed.db")
    pool_size: int = Field(default=10, ge=1, le=100)
    max_overflow: int = Field(default=5, ge=0, le=50)
    echo: bool = Field(default=False)


class RedisSettings(BaseSettings):
    """Redis configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    cache_url: str = Field(default="redis://localhost:6379/1")
    enabled: bool = Field(default=True)


class SourceSettings(BaseSettings):
    """Outbound job-board client configuration"""

    model_config = SettingsConfigDict(env_prefix="SOURCE_")

    timeout_seconds: float = Field(default=5.0, gt=0, le=60)
    batch_size: int = Field(default=10, ge=1, le=100)
    greenhouse_cap: int = Field(default=50, ge=1)
    workable_cap: int = Field(default=30, ge=1)
    snippet_length: int = Field(default=300, ge=1)
    user_agent: str = Field(default="Tiered-Job-Feed/1.0")


class MixerSettings(BaseSettings):
    """Tier mixing quotas"""

    model_config = SettingsConfigDict(env_prefix="MIXER_")

    tier1_ratio: float = Field(default=0.7, ge=0, le=1)
    tier2_ratio: float = Field(default=0.2, ge=0, le=1)
    tier3_ratio: float = Field(default=0.1, ge=0, le=1)
    recent_window_hours: int = Field(default=24, ge=1)

    @model_validator(mode="after")
    def validate_ratios_sum(self) -> "MixerSettings":
        total = self.tier1_ratio + self.tier2_ratio + self.tier3_ratio
        if total > 1.0 + 1e-9:
            raise ValueError(f"Tier ratios must not exceed 1.0, got {total}")
        return self


class FeedSettings(BaseSettings):
    """Feed query configuration"""

    model_config = SettingsConfigDict(env_prefix="FEED_")

    default_limit: int = Field(default=50, ge=1)
    max_limit: int = Field(default=100, ge=1)
    cache_max_age: int = Field(default=5, ge=0)
    new_window_minutes: int = Field(default=5, ge=0)


class ScrapeSettings(BaseSettings):
    """Aggregation pass configuration"""

    model_config = SettingsConfigDict(env_prefix="SCRAPE_")

    default_limit: int = Field(default=200, ge=1)
    max_limit: int = Field(default=500, ge=1)
    max_inserts: int = Field(default=100, ge=0)
    schedule_enabled: bool = Field(default=False)
    schedule_minutes: int = Field(default=30, ge=1)
    schedule_owner_id: str = Field(default="public")


class Settings(BaseSettings):
    """Main application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="tiered-job-feed")
    app_env: Literal["development", "test", "staging", "production"] = Field(
        default="development"
    )
    debug: bool = Field(default=False)

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_workers: int = Field(default=1)
    allowed_origins: list[str] = Field(default=["*"])

    # Company tiers and source list
    tiers_file: Path = Field(default=CONFIG_DIR / "companies.yaml")

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    sources: SourceSettings = Field(default_factory=SourceSettings)
    mixer: MixerSettings = Field(default_factory=MixerSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    scrape: ScrapeSettings = Field(default_factory=ScrapeSettings)

    # Monitoring
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "text"] = Field(default="json")

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Export commonly used settings
settings = get_settings()
