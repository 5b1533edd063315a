"""
Configuration settings for the transaction categorizer.

All settings are managed through environment variables with sensible defaults.
"""

import os
from pathlib import Path


class Config:
    """Centralized configuration with environment variable support."""

    # Validation Constants
    MIN_JOB_TIMEOUT_SECONDS: int = 1
    MAX_JOB_TIMEOUT_SECONDS: int = 600
    DEFAULT_JOB_TIMEOUT_SECONDS: int = 30
    DEFAULT_JOB_HISTORY_LIMIT: int = 1000

    # Ledger (Firefly III)
    FIREFLY_URL: str | None = os.environ.get("FIREFLY_URL")
    FIREFLY_PERSONAL_TOKEN: str | None = os.environ.get("FIREFLY_PERSONAL_TOKEN")
    FIREFLY_TAG: str = os.environ.get("FIREFLY_TAG", "AI categorized")

    # Classifier (OpenAI)
    OPENAI_API_KEY: str | None = os.environ.get("OPENAI_API_KEY")
    OPENAI_MODEL: str = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
    CLASSIFIER_MATCH_MODE: str = os.environ.get("CLASSIFIER_MATCH_MODE", "exact")
    CLASSIFIER_PROMPT_LOCALE: str = os.environ.get("CLASSIFIER_PROMPT_LOCALE", "en")

    # Manual rules
    MANUAL_CATEGORIES_PATH: Path = Path(
        os.environ.get("MANUAL_CATEGORIES_PATH", "./manual_categories/config.json")
    )

    # Work queue
    JOB_TIMEOUT_SECONDS: float = float(
        os.environ.get("JOB_TIMEOUT_SECONDS", str(DEFAULT_JOB_TIMEOUT_SECONDS))
    )
    JOB_HISTORY_LIMIT: int = int(
        os.environ.get("JOB_HISTORY_LIMIT", str(DEFAULT_JOB_HISTORY_LIMIT))
    )
    HTTP_TIMEOUT_SECONDS: float = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "10"))

    # Push channel
    EVENT_QUEUE_SIZE: int = int(os.environ.get("EVENT_QUEUE_SIZE", "100"))
    EVENT_KEEPALIVE_SECONDS: float = float(os.environ.get("EVENT_KEEPALIVE_SECONDS", "15"))

    # Security - Flask
    SECRET_KEY: str = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key-change-in-production")

    # Flask settings
    DEBUG: bool = os.environ.get("FLASK_DEBUG", "false").lower() in ("true", "1", "yes")
    TESTING: bool = os.environ.get("FLASK_TESTING", "false").lower() in ("true", "1", "yes")
    ENABLE_UI: bool = os.environ.get("ENABLE_UI", "false").lower() in ("true", "1", "yes")

    # Application settings
    APP_HOST: str = os.environ.get("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.environ.get("PORT", "3000"))
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    @classmethod
    def validate(cls) -> list[str]:
        """Validate configuration and return list of errors.

        Returns empty list if configuration is valid.
        """
        errors: list[str] = []

        # Validate required settings
        for name in ("FIREFLY_URL", "FIREFLY_PERSONAL_TOKEN", "OPENAI_API_KEY"):
            if not getattr(cls, name):
                errors.append(f"The required environment variable '{name}' is missing")

        if cls.CLASSIFIER_MATCH_MODE not in MATCH_MODES:
            errors.append(f"CLASSIFIER_MATCH_MODE must be one of {', '.join(MATCH_MODES)}")

        if cls.CLASSIFIER_PROMPT_LOCALE not in PROMPT_LOCALES:
            errors.append(
                f"CLASSIFIER_PROMPT_LOCALE must be one of {', '.join(PROMPT_LOCALES)}"
            )

        # Validate numeric ranges
        if (
            cls.JOB_TIMEOUT_SECONDS < cls.MIN_JOB_TIMEOUT_SECONDS
            or cls.JOB_TIMEOUT_SECONDS > cls.MAX_JOB_TIMEOUT_SECONDS
        ):
            errors.append(
                f"JOB_TIMEOUT_SECONDS must be between {cls.MIN_JOB_TIMEOUT_SECONDS} and {cls.MAX_JOB_TIMEOUT_SECONDS}"
            )

        if cls.JOB_HISTORY_LIMIT < 0:
            errors.append("JOB_HISTORY_LIMIT must be non-negative (0 disables the limit)")

        if cls.EVENT_QUEUE_SIZE < 1:
            errors.append("EVENT_QUEUE_SIZE must be at least 1")

        if not cls.MANUAL_CATEGORIES_PATH.exists():
            errors.append(f"Manual categories file not found: {cls.MANUAL_CATEGORIES_PATH}")

        return errors


# Job status constants
STATUS_QUEUED: str = "queued"
STATUS_IN_PROGRESS: str = "in_progress"
STATUS_FINISHED: str = "finished"

ALL_STATUSES: list[str] = [
    STATUS_QUEUED,
    STATUS_IN_PROGRESS,
    STATUS_FINISHED,
]

# Registry event names
EVENT_JOB_CREATED: str = "job created"
EVENT_JOB_UPDATED: str = "job updated"
EVENT_JOBS: str = "jobs"

REGISTRY_EVENTS: list[str] = [EVENT_JOB_CREATED, EVENT_JOB_UPDATED]

# Classifier options
MATCH_MODE_EXACT: str = "exact"
MATCH_MODE_SUBSTRING: str = "substring-contains"

MATCH_MODES: list[str] = [MATCH_MODE_EXACT, MATCH_MODE_SUBSTRING]

PROMPT_LOCALES: list[str] = ["en", "it"]

MANUAL_CATEGORY_PROMPT: str = "Fetched from manual categories configuration"


def get_config() -> type[Config]:
    """Get the Config class."""
    return Config
