from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DIALECT: Literal["posix", "dos"] = "posix"
    SESSION_FILE: str = ""
    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(env_prefix="GITGUD_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
