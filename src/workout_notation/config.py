"""Configuration settings for the workout notation engine."""
import os
from typing import List, Literal

from workout_notation.utils import to_int


EnvironmentType = Literal["development", "staging", "production"]


def _env_int(name: str, default: int) -> int:
    value = to_int(os.getenv(name))
    return default if value is None else value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


class Settings:
    """Application settings."""

    # Environment
    ENVIRONMENT: EnvironmentType = "development"
    LOG_LEVEL: str = "INFO"

    # Text sync timing (milliseconds)
    TEXT_SYNC_DEBOUNCE_MS: int = 300
    TYPING_IDLE_MS: int = 1000

    # Feature flags
    REALTIME_TEXT_SYNC: bool = True
    EMBED_EXERCISE_IDS: bool = False

    # Parsing / defaults
    MAX_PARSED_SETS: int = 99
    DEFAULT_REST_TIME: int = 90

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:3001"]

    def __init__(self):
        # Environment
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env in ("development", "staging", "production"):
            self.ENVIRONMENT = env  # type: ignore
        else:
            self.ENVIRONMENT = "development"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

        # Timing
        self.TEXT_SYNC_DEBOUNCE_MS = _env_int("TEXT_SYNC_DEBOUNCE_MS", 300)
        self.TYPING_IDLE_MS = _env_int("TYPING_IDLE_MS", 1000)

        # Feature flags
        self.REALTIME_TEXT_SYNC = _env_bool("REALTIME_TEXT_SYNC", True)
        self.EMBED_EXERCISE_IDS = _env_bool("EMBED_EXERCISE_IDS", False)

        self.MAX_PARSED_SETS = max(1, _env_int("MAX_PARSED_SETS", 99))
        self.DEFAULT_REST_TIME = _env_int("DEFAULT_REST_TIME", 90)

        origins = os.getenv("CORS_ORIGINS")
        if origins:
            self.CORS_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]
        else:
            self.CORS_ORIGINS = ["http://localhost:3000", "http://localhost:3001"]


settings = Settings()
