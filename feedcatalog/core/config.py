from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Feed Catalog API"
    sheet_csv_url: str | None = Field(default=None)
    refresh_interval_seconds: float = Field(default=5.0, gt=0)
    fetch_timeout_seconds: float = 15.0
    max_fetch_retries: int = 2
    retry_backoff_seconds: float = 0.5
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="FEEDCATALOG_", extra="ignore")


class VismaSettings(BaseSettings):
    base_url: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    token_url: str = "https://connect.visma.com/connect/token"
    scope: str = "ea:api"
    timeout_seconds: float = 15.0

    model_config = SettingsConfigDict(env_file=".env", env_prefix="VISMA_", extra="ignore")

    def missing(self) -> list[str]:
        required = {
            "VISMA_BASE_URL": self.base_url,
            "VISMA_CLIENT_ID": self.client_id,
            "VISMA_CLIENT_SECRET": self.client_secret,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    return Settings()


@lru_cache
def get_visma_settings() -> VismaSettings:
    return VismaSettings()
