"""
Pipeline configuration.

Values come from the process environment first, then from an env file in
the project root: ``.env.{ENVIRONMENT}`` when it exists (``.env.test``,
``.env.production``), plain ``.env`` otherwise.

The store and the logging setup take explicit arguments and only fall back
to the module-level ``settings`` when the caller passes nothing.
"""
import os
import logging
from pathlib import Path
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Typed view over environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    # Scrapers write to data/db/fantrax.db under the project root
    DATABASE_URL: str = f"sqlite:///{PROJECT_ROOT / 'data' / 'db' / 'fantrax.db'}"
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Position code the platform gives the team-pitching slot
    TEAM_PITCHING_CODE: str = "TmP"

    # rapidfuzz WRatio floor for linking a team-pitching slot to an MLB club
    PITCHING_STAFF_FUZZY_THRESHOLD: int = 90

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def is_sqlite(self) -> bool:
        """True for any sqlite:// URL, file or in-memory."""
        return self.DATABASE_URL.startswith("sqlite")


def _env_file_for(environment: str) -> Path:
    specific = PROJECT_ROOT / f".env.{environment}"
    if specific.exists():
        logger.info("Using settings file %s", specific.name)
        return specific
    return PROJECT_ROOT / ".env"


settings = Settings(_env_file=_env_file_for(os.getenv("ENVIRONMENT", "development")))
