"""Handler configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    atomic_status: bool = True
    map_unclassified_errors: bool = True
    expose_error_messages: bool = False

    model_config = SettingsConfigDict(env_prefix="REST_ERRORS_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
