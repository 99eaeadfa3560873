"""
Application Settings.

All configuration comes from .env / environment variables.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # --- App ---
    env: str = "development"
    debug: bool = True
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # --- Database ---
    database_url: str = "sqlite:///drm_engine.db"

    # --- Geolocation ---
    geo_provider: str = "ip-api"           # "ip-api" | "static" | "none"
    geo_api_url: str = "http://ip-api.com/json/{ip}"
    geo_timeout_seconds: float = 2.0
    geo_static_countries: dict[str, str] = {}   # ip -> ISO country code, for geo_provider="static"

    # --- Sessions ---
    session_token_bytes: int = 32
    trust_forwarded_for: bool = False

    # --- Policy evaluation ---
    default_watermark_opacity: float = 0.3
    default_watermark_position: str = "diagonal"
    policy_timezone: str = ""              # empty = server local time

    # --- Owner endpoints ---
    owner_api_key: str = "change-me"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Settings singleton."""
    return Settings()
