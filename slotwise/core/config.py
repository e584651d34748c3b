# slotwise/core/config.py
from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime and cover:
    - DB connection and SQLite lock behaviour
    - Default timezone used when callers omit one
    - Logging level / format
    - Google Calendar OAuth client credentials and fetch timeout
    - SMTP settings for booking emails
    """

    APP_NAME: str = "Slotwise"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")
    APP_URL: str = Field(
        "http://localhost:8000",
        description="Public base URL, used to build links in booking emails.",
    )

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./slotwise.db",
        description="SQLAlchemy-compatible async database URL",
    )
    SQLITE_BUSY_TIMEOUT_SECONDS: float = Field(
        30.0,
        description="How long a SQLite writer waits for the database lock before failing.",
    )

    DEFAULT_TIMEZONE: str = Field(
        "UTC",
        description="IANA timezone used when a host or a slot query does not specify one.",
    )

    LOG_LEVEL: str = Field("INFO", description="Root log level.")
    LOG_JSON: bool = Field(False, description="Emit JSON log lines instead of plain text.")

    # --- Google Calendar (free/busy + event creation) ---
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_TOKEN_URL: AnyHttpUrl | None = None
    GOOGLE_CALENDAR_BASE_URL: AnyHttpUrl | None = None
    EXTERNAL_CALENDAR_TIMEOUT_SECONDS: float = Field(
        5.0,
        description=(
            "Timeout applied to every external calendar HTTP call. A slow or "
            "unreachable calendar must not stall slot computation."
        ),
    )

    # --- SMTP / Email configuration ---
    SMTP_HOST: str | None = Field(
        default=None,
        description="SMTP server hostname for sending emails.",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port (usually 587 for TLS).",
    )
    SMTP_USERNAME: str | None = Field(
        default=None,
        description="SMTP username (if authentication is required).",
    )
    SMTP_PASSWORD: str | None = Field(
        default=None,
        description="SMTP password (if authentication is required).",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Whether to use STARTTLS when connecting to SMTP.",
    )
    SMTP_FROM_ADDRESS: str | None = Field(
        default=None,
        description="From address used in booking emails.",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
