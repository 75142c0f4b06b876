"""Runtime settings loaded from the environment or a ``.env`` file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Data store endpoint, credential and pipeline knobs."""

    backend: Literal["sqlite", "supabase"] = Field(
        "sqlite", description="Which store holds teams and the production snapshot."
    )
    db_path: Path = Field(Path("prodsync.sqlite"), description="SQLite database file.")
    supabase_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("SUPABASE_URL", "PRODSYNC_SUPABASE_URL"),
        description="Supabase project URL.",
    )
    supabase_service_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "SUPABASE_SERVICE_ROLE_KEY", "PRODSYNC_SUPABASE_SERVICE_KEY"
        ),
        description="Service role key; bypasses row level security.",
    )
    team_codes_path: Optional[Path] = Field(
        None, description="JSON file overriding the bundled team code table."
    )
    max_documents: int = Field(
        10, ge=1, description="Ceiling on JSON documents split out of one body."
    )
    log_level: str = Field("INFO", description="Logging level name.")

    model_config = SettingsConfigDict(
        env_prefix="PRODSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            logging.getLogger(__name__).warning("Invalid log level %r, using INFO", value)
            return "INFO"
        return level


def load_settings(**overrides: object) -> Settings:
    return Settings(**overrides)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s - %(message)s",
    )
