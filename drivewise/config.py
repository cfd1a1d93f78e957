"""Runtime settings and logging setup.

Settings are read from ``DRIVEWISE_``-prefixed environment variables or an
optional ``.env`` file in the working directory.  Formula constants are not
configuration; they live in :mod:`drivewise.presets`.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DRIVEWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- Recommendations --
    llm_api_key: Optional[str] = Field(
        default=None,
        description="API key for an OpenAI-compatible endpoint. Unset means rule-based text only.",
    )
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_timeout: float = Field(default=15.0, gt=0)

    # -- Logging --
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Install a basic root handler once; later calls only adjust the level."""

    level = (level or get_settings().log_level).upper()
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
