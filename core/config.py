from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "Reading Group"
    environment: str = "development"
    postgres_host: str = "db"
    postgres_port: int = 5432
    postgres_db: str = "readinggroup"
    postgres_user: str = "readinggroup"
    postgres_password: str = "readinggrouppwd"
    database_url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")
    secrets_key: str
    admin_username: str = "admin"
    admin_password: str | None = None
    admin_cookie_name: str = "gs_admin"
    admin_session_days: int = 30
    seating_policy: Literal["strict", "permissive"] = "strict"
    scheduled_quota: int = 4
    bonus_quota: int = 2
    single_group_limit: int = 8
    week_start_weekday: int = Field(default=1, ge=0, le=6)
    log_file: str = "logs/readinggroup.log"

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override

        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def admin_session_seconds(self) -> int:
        return self.admin_session_days * 24 * 60 * 60


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
