"""
Shared fixtures: a temporary SQLite database per test and a small seeded league.
"""
from __future__ import annotations

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from leaguehub.models import Sport
from leaguehub.persistence.db import get_connection, init_db, set_db_path
from leaguehub.services.league_service import LeagueService


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "league_test.db"
    set_db_path(path)
    init_db(db_path=path)
    return path


@pytest.fixture
def db_conn(db_path):
    """Connection to the temporary DB, closed after the test."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def league_service():
    return LeagueService()


@pytest.fixture
def league(db_conn, league_service):
    return league_service.create_league(db_conn, "Sunday Football", Sport.FOOTBALL, "admin-1")


@pytest.fixture
def teams(db_conn, league_service, league):
    """Three teams A, B, C in insertion order."""
    return [league_service.add_team(db_conn, league, name) for name in ("A", "B", "C")]
