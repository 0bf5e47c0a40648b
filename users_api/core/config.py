"""
Configuration helpers for the users API.

Settings are read from environment variables once and exposed through
``get_settings`` so that routers/services do not fetch os.environ directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    users_file: Path
    log_level: str
    host: str
    port: int
    cors_origins: tuple[str, ...]
    max_body_bytes: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _list(value: str | None) -> tuple[str, ...]:
        if not value:
            return ()
        return tuple(item.strip().rstrip("/") for item in value.split(",") if item.strip())

    users_file = Path(os.getenv("USERS_FILE") or "users.json").expanduser().resolve()

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        users_file=users_file,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        host=os.getenv("HOST", "127.0.0.1"),
        port=_int(os.getenv("PORT", "3000"), 3000),
        cors_origins=_list(os.getenv("CORS_ORIGINS")),
        max_body_bytes=_int(os.getenv("MAX_BODY_BYTES", "1048576"), 1048576),
    )
