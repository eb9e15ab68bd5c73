"""Runtime configuration for protolink."""

from functools import cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="PROTOLINK_", env_file=".env", extra="ignore")

    log_level: str = "WARNING"
    max_tree_bytes: int = Field(
        default=16 * 1024 * 1024,
        ge=0,
        description="Upper bound on bytes held by one virtual file tree (0 disables the limit).",
    )
    max_tree_entries: int = Field(
        default=10_000,
        ge=0,
        description="Upper bound on directories and files in one virtual file tree (0 disables the limit).",
    )


@cache
def get_settings() -> Settings:
    return Settings()
