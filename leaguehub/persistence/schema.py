"""
SQLite schema for league entities.
Migration-friendly: each table created with IF NOT EXISTS.
Ownership is enforced with ON DELETE CASCADE (requires PRAGMA foreign_keys = ON).
"""
from __future__ import annotations


def users_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """


def leagues_schema() -> str:
    """code is stored uppercase; uniqueness is therefore case-insensitive."""
    return """
    CREATE TABLE IF NOT EXISTS leagues (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        sport_type TEXT NOT NULL CHECK (sport_type IN ('Cricket', 'Football', 'Badminton')),
        code TEXT NOT NULL,
        admin_id TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_leagues_code ON leagues(code);
    CREATE INDEX IF NOT EXISTS ix_leagues_admin ON leagues(admin_id);
    """


def teams_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        name TEXT NOT NULL,
        logo_url TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_teams_league ON teams(league_id);
    """


def players_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_players_team ON players(team_id);
    """


def matches_schema() -> str:
    """status: scheduled | completed | cancelled. Scores NULL unless completed."""
    return """
    CREATE TABLE IF NOT EXISTS matches (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        home_team_id TEXT NOT NULL,
        away_team_id TEXT NOT NULL,
        match_date TEXT NOT NULL,
        match_time TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'scheduled'
            CHECK (status IN ('scheduled', 'completed', 'cancelled')),
        home_score INTEGER,
        away_score INTEGER,
        created_at TEXT NOT NULL,
        CHECK (home_team_id <> away_team_id),
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE,
        FOREIGN KEY (home_team_id) REFERENCES teams(id) ON DELETE CASCADE,
        FOREIGN KEY (away_team_id) REFERENCES teams(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_matches_league ON matches(league_id);
    CREATE INDEX IF NOT EXISTS ix_matches_home ON matches(home_team_id);
    CREATE INDEX IF NOT EXISTS ix_matches_away ON matches(away_team_id);
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Order: users, leagues, teams, players, matches."""
    return "\n".join([
        users_schema(),
        leagues_schema(),
        teams_schema(),
        players_schema(),
        matches_schema(),
    ])
