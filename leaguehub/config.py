"""
Environment-driven settings and logging setup.
"""
from __future__ import annotations

import logging
import os
from datetime import timedelta
from pathlib import Path

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)
DEFAULT_TOKEN_TTL_HOURS = 24 * 7


def project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def db_path_from_env() -> Path:
    """LEAGUEHUB_DB_PATH, else <project root>/data/leaguehub.db."""
    value = os.environ.get("LEAGUEHUB_DB_PATH", "").strip()
    if value:
        return Path(value)
    return project_root() / "data" / "leaguehub.db"


def jwt_secret_key() -> str:
    return os.environ.get("JWT_SECRET_KEY", "leaguehub-dev-secret-change-in-production")


def token_ttl() -> timedelta:
    """Bearer token lifetime from LEAGUEHUB_TOKEN_TTL_HOURS; non-positive or junk values use the default."""
    raw = os.environ.get("LEAGUEHUB_TOKEN_TTL_HOURS", "").strip()
    try:
        hours = int(raw) if raw else DEFAULT_TOKEN_TTL_HOURS
    except ValueError:
        hours = DEFAULT_TOKEN_TTL_HOURS
    if hours <= 0:
        hours = DEFAULT_TOKEN_TTL_HOURS
    return timedelta(hours=hours)


def cors_origins() -> list[str]:
    raw = os.environ.get("LEAGUEHUB_CORS_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or list(DEFAULT_CORS_ORIGINS)


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once. Explicit level wins over LEAGUEHUB_LOG_LEVEL,
    which wins over INFO. Unknown names fall back to INFO.
    """
    name = (level or os.environ.get("LEAGUEHUB_LOG_LEVEL") or "INFO").upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
