"""
Platform configuration — environment-driven settings for all modules.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

LOG_FORMAT: str = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


class Settings(BaseSettings):
    """Central configuration for SquashAnalyzer."""

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "SquashAnalyzer"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── API ──────────────────────────────────────────────
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: list[str] = ["*"]

    # ── Database ─────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./squash.db"

    # ── AI coach ─────────────────────────────────────────
    OPENAI_API_KEY_ENV: str = "OPENAI_API_KEY"
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    ADVICE_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    ADVICE_MAX_TOKENS: int = Field(default=500, gt=0)

    # ── Squash defaults ──────────────────────────────────
    DEFAULT_BEST_OF: int = 5
    DEFAULT_PLAYER1_NAME: str = "Player 1"
    DEFAULT_PLAYER2_NAME: str = "Player 2"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return settings


def get_logger(name: str) -> logging.Logger:
    """Module logger with the shared platform format."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(settings.LOG_LEVEL)
    return logger
