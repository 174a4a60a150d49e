"""
Todo Reminder Bot — Centralized configuration.

Loads all settings from .env and validates required keys.
Every other module reads its knobs from the `settings` singleton below.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from todobot/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str

    # SQLite
    DATABASE_PATH: str = "data/todos.db"
    DB_TIMEOUT_SECONDS: float = 30.0

    # Access control (empty list → bot is open to everyone)
    ALLOWED_USER_IDS: list[int] = []

    # Reminder checker
    REMINDER_CHECK_INTERVAL_SECONDS: float = 30.0
    IO_TIMEOUT_SECONDS: float = 10.0
    SEND_TIMEOUT_SECONDS: float = 15.0

    # Defaults for newly registered users
    DEFAULT_TIMEZONE: str = "UTC"
    DEFAULT_LANGUAGE: str = "en"

    LOG_LEVEL: str = "INFO"

    @field_validator("ALLOWED_USER_IDS", mode="before")
    @classmethod
    def parse_user_ids(cls, v: str | list[int]) -> list[int]:
        if isinstance(v, list):
            return v
        if isinstance(v, str) and v.strip():
            return [int(uid.strip()) for uid in v.split(",") if uid.strip()]
        return []

    @field_validator(
        "REMINDER_CHECK_INTERVAL_SECONDS",
        "IO_TIMEOUT_SECONDS",
        "SEND_TIMEOUT_SECONDS",
        "DB_TIMEOUT_SECONDS",
        mode="before",
    )
    @classmethod
    def parse_seconds(cls, v: str | float) -> float:
        value = float(v)
        if value <= 0:
            raise ValueError("must be a positive number of seconds")
        return value

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if not token or token.startswith("your-"):
        print("ERROR: TELEGRAM_BOT_TOKEN is missing or not set in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        TELEGRAM_BOT_TOKEN=token,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/todos.db"),
        DB_TIMEOUT_SECONDS=os.getenv("DB_TIMEOUT_SECONDS", "30"),
        ALLOWED_USER_IDS=os.getenv("ALLOWED_USER_IDS", ""),
        REMINDER_CHECK_INTERVAL_SECONDS=os.getenv("REMINDER_CHECK_INTERVAL_SECONDS", "30"),
        IO_TIMEOUT_SECONDS=os.getenv("IO_TIMEOUT_SECONDS", "10"),
        SEND_TIMEOUT_SECONDS=os.getenv("SEND_TIMEOUT_SECONDS", "15"),
        DEFAULT_TIMEZONE=os.getenv("DEFAULT_TIMEZONE", "UTC"),
        DEFAULT_LANGUAGE=os.getenv("DEFAULT_LANGUAGE", "en"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton, imported by all other modules as:
#   from todobot.config import settings
settings = _load_settings()
