from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False)

    app_name: str = "Travel Storefront"
    environment: str = "local"
    log_level: str = "INFO"
    catalog_path: Optional[str] = None
    catalog_url: Optional[str] = None
    catalog_timeout: int = 10
    booking_id_prefix: str = "XYZ"
    featured_trip_count: int = 6
    max_booking_sessions: int = 1000


@lru_cache()
def get_settings() -> Settings:
    load_dotenv(".env")
    return Settings()


settings = get_settings()
