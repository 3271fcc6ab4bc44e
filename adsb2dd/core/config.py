"""
Application configuration using Pydantic settings.
"""
from functools import lru_cache
from pydantic_settings import BaseSettings

from adsb2dd import __version__


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Scheduler
    update_interval: float = 1.0  # seconds between passes
    max_configs: int = 10  # concurrent registered configurations
    inactivity_timeout: float = 600  # seconds without a fresh snapshot before eviction

    # Upstream tar1090 servers
    aircraft_path: str = "/data/aircraft.json"
    upstream_timeout: float = 5.0  # per request
    tick_deadline: float = 10.0  # whole fetch phase of one pass
    user_agent: str = f"adsb2dd/{__version__}"

    # Server
    host: str = "0.0.0.0"
    port: int = 80
    static_dir: str = "public"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
