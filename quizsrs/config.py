"""
Configuration for the review scheduler.

Values come from environment variables (optionally loaded from a .env file).
Nothing here builds long-lived objects; callers construct stores and
schedulers explicitly.
"""

from __future__ import annotations

import os
from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load environment
load_dotenv()

# Defaults
DEFAULT_DATABASE_URL = "sqlite:///logs/srs.sqlite"
DEFAULT_JSON_STORE_PATH = Path("logs/srs_schedules.json")
STORE_BACKENDS = ("sql", "json")


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the schedule database URL from environment variables.

    Uses SRS_DATABASE_URL (default: a SQLite file under logs/).
    In test mode the database name gets a 'test_' prefix, e.g.
    sqlite:///logs/srs.sqlite -> sqlite:///logs/test_srs.sqlite

    Returns:
        SQLAlchemy database URL
    """
    url = os.getenv("SRS_DATABASE_URL", DEFAULT_DATABASE_URL)
    if is_test_mode():
        head, sep, name = url.rpartition("/")
        if sep and name and not name.startswith("test_") and name != ":memory:":
            url = f"{head}/test_{name}"
    return url


def get_json_store_path() -> Path:
    """Path of the single-document JSON schedule store."""
    return Path(os.getenv("SRS_JSON_STORE_PATH", str(DEFAULT_JSON_STORE_PATH)))


def get_store_backend() -> str:
    """Schedule store backend: 'sql' (default) or 'json'."""
    backend = os.getenv("SRS_STORE_BACKEND", "sql").lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(
            f"SRS_STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {backend!r}"
        )
    return backend


def get_default_user_id() -> str:
    """Get default user id for scoping schedules."""
    return os.getenv("DEFAULT_USER_ID", "default")


def get_day_timezone() -> tzinfo:
    """
    Timezone that defines the calendar day for "due today".

    Uses SRS_DAY_TIMEZONE (IANA name, default: UTC).
    """
    name = os.getenv("SRS_DAY_TIMEZONE", "UTC")
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown SRS_DAY_TIMEZONE: {name!r}") from exc
