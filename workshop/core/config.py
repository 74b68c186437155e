# workshop/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    DATABASE_URL: str = Field(default="sqlite:///./workshop.db")
    APP_NAME: str = "Workshop Tickets"
    APP_DESC: str = "Repair tickets backed by a record store and a device-local extras store"
    APP_VERSION: str = "1.0.0"

    # Device-local storage for ticket fields not present in the record store.
    # None keeps the extras in memory only.
    EXTRAS_PATH: str | None = Field(default="./ticket_extras.json")

    TICKET_NUMBER_FLOOR: int = 2400
    SCHEMA_VERSION: int = 3
    REFRESH_INTERVAL_SECONDS: float = 10.0

    LOCALE: str = "he"
    LOG_LEVEL: str = "INFO"

    # CORS origins, comma separated
    CORS_ORIGINS: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins(self) -> list[str]:
        if not self.CORS_ORIGINS:
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
