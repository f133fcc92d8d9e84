from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    db_pool_size: int = Field(20, alias="DB_POOL_SIZE")

    auth_provider_url: str = Field(..., alias="AUTH_PROVIDER_URL")
    auth_anon_key: str = Field(..., alias="AUTH_ANON_KEY")
    auth_service_role_key: str = Field(..., alias="AUTH_SERVICE_ROLE_KEY")
    auth_timeout_seconds: float = Field(10.0, alias="AUTH_TIMEOUT_SECONDS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def auth_base_url(self) -> str:
        return f"{self.auth_provider_url.rstrip('/')}/auth/v1"


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
