"""
Share-code generation and lookup.

A code is 6 characters drawn uniformly from A-Z0-9 (36^6 ≈ 2.2e9 codes).
Codes are stored uppercase, so lookups are case-insensitive once normalized.
Allocation retries a bounded number of times before giving up.
"""
from __future__ import annotations

import logging
import random
import secrets
import sqlite3
import string

from leaguehub.errors import CodeExhaustionError, NotFound
from leaguehub.models import League
from leaguehub.persistence.repositories import LeagueRepository

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
MAX_CODE_ATTEMPTS = 10

_system_rng = secrets.SystemRandom()


def generate_code(rng: random.Random | None = None) -> str:
    """Return a fresh candidate code. Pass a seeded Random for reproducible output."""
    r = rng or _system_rng
    return "".join(r.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(code: str) -> str:
    return code.strip().upper()


def is_valid_code(code: str) -> bool:
    c = normalize_code(code)
    return len(c) == CODE_LENGTH and all(ch in CODE_ALPHABET for ch in c)


def is_available(conn: sqlite3.Connection, code: str, store: LeagueRepository) -> bool:
    """True when no league holds this code (case-insensitive)."""
    return store.get_by_code(conn, normalize_code(code)) is None


def allocate_code(
    conn: sqlite3.Connection,
    store: LeagueRepository,
    attempts: int = MAX_CODE_ATTEMPTS,
    rng: random.Random | None = None,
) -> str:
    """
    Generate candidates until one is unused.
    Raises CodeExhaustionError after `attempts` collisions.
    """
    for attempt in range(1, attempts + 1):
        candidate = generate_code(rng)
        if is_available(conn, candidate, store):
            return candidate
        logger.warning("Share code collision on attempt %d/%d", attempt, attempts)
    logger.warning("No free share code after %d attempts", attempts)
    raise CodeExhaustionError(
        f"Could not allocate a unique league code after {attempts} attempts; try again later"
    )


def resolve_code(conn: sqlite3.Connection, code: str, store: LeagueRepository) -> League:
    """Look up a league by share code. Raises NotFound for unknown or malformed codes."""
    normalized = normalize_code(code)
    if not is_valid_code(normalized):
        raise NotFound(f"No league with code {code!r}")
    league = store.get_by_code(conn, normalized)
    if league is None:
        raise NotFound(f"No league with code {normalized}")
    logger.debug("Resolved code %s to league %s", normalized, league.id)
    return league
