from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """CLI defaults, overridable through PATHBIND_* environment variables or .env."""

    model_config = SettingsConfigDict(env_prefix="PATHBIND_", env_file=".env", extra="ignore")

    log_level: str = "WARNING"
    output_format: Literal["table", "json"] = "table"
    graph_format: Literal["json", "dot"] = "json"


def get_settings() -> Settings:
    return Settings()
