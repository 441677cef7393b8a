"""Application settings and shared constants."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SYSTEM_OWNER_ID = "system"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Variation Costing"
    database_url: str = "sqlite:///./variation_costing.db"
    log_level: str = "INFO"
    system_owner_id: str = SYSTEM_OWNER_ID
    currency: str = "IDR"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return level

    @field_validator("system_owner_id")
    @classmethod
    def validate_system_owner(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("system_owner_id must not be blank")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
