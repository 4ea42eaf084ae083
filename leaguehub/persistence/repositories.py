"""
Repository interfaces for league data.
No business logic — only read/write operations.

Every repository takes the connection as its first argument; get/update return
None and delete returns False when the id does not resolve.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Iterable

from leaguehub.errors import ConflictError, NotFound, ValidationError
from leaguehub.models import League, Match, MatchStatus, Player, Sport, Team, User


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, time, datetime)):
        return value.isoformat()
    return value


def _integrity_error(exc: sqlite3.IntegrityError, what: str) -> Exception:
    """Translate a SQLite constraint failure into the engine's taxonomy."""
    msg = str(exc)
    if "UNIQUE" in msg:
        return ConflictError(f"{what} already exists: {msg}")
    if "FOREIGN KEY" in msg:
        return NotFound(f"{what} references a missing record")
    return ValidationError(f"{what} rejected by store: {msg}")


def _update(
    conn: sqlite3.Connection,
    table: str,
    record_id: str,
    fields: dict[str, Any],
    allowed: set[str],
    what: str,
) -> bool:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Cannot update {table} fields: {sorted(unknown)}")
    if not fields:
        row = conn.execute(f"SELECT 1 FROM {table} WHERE id = ?", (record_id,)).fetchone()
        return row is not None
    assignments = ", ".join(f"{col} = ?" for col in fields)
    args = [_to_db(v) for v in fields.values()] + [record_id]
    try:
        cur = conn.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", args)
    except sqlite3.IntegrityError as e:
        conn.rollback()
        raise _integrity_error(e, what) from e
    conn.commit()
    return cur.rowcount > 0


def _delete(conn: sqlite3.Connection, table: str, record_id: str) -> bool:
    cur = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
    conn.commit()
    return cur.rowcount > 0


# ---------- UserRepository ----------


def _row_to_user(r: sqlite3.Row) -> User:
    return User(
        id=r["id"],
        email=r["email"],
        created_at=_parse_datetime(r["created_at"]),
        password_hash=r["password_hash"],
    )


class UserRepository:
    """Accounts for league admins. Email stored lower-case."""

    def create(self, conn: sqlite3.Connection, email: str, password_hash: str, id: str | None = None) -> User:
        uid = id or str(uuid.uuid4())
        now = _now()
        try:
            conn.execute(
                "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                (uid, email.strip().lower(), password_hash, now.isoformat()),
            )
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise _integrity_error(e, "User") from e
        conn.commit()
        return User(id=uid, email=email.strip().lower(), created_at=now, password_hash=password_hash)

    def get(self, conn: sqlite3.Connection, user_id: str) -> User | None:
        row = conn.execute(
            "SELECT id, email, password_hash, created_at FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, conn: sqlite3.Connection, email: str) -> User | None:
        row = conn.execute(
            "SELECT id, email, password_hash, created_at FROM users WHERE email = ?",
            (email.strip().lower(),),
        ).fetchone()
        return _row_to_user(row) if row is not None else None


# ---------- LeagueRepository ----------


_LEAGUE_COLS = "id, name, sport_type, code, admin_id, created_at"


def _row_to_league(r: sqlite3.Row) -> League:
    return League(
        id=r["id"],
        name=r["name"],
        sport=Sport(r["sport_type"]),
        code=r["code"],
        admin_id=r["admin_id"],
        created_at=_parse_datetime(r["created_at"]),
    )


class LeagueRepository:
    """CRUD for leagues plus share-code lookup. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        sport: Sport,
        code: str,
        admin_id: str,
        id: str | None = None,
    ) -> League:
        lid = id or str(uuid.uuid4())
        now = _now()
        code = code.upper()
        try:
            conn.execute(
                f"INSERT INTO leagues ({_LEAGUE_COLS}) VALUES (?, ?, ?, ?, ?, ?)",
                (lid, name, sport.value, code, admin_id, now.isoformat()),
            )
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise _integrity_error(e, "League") from e
        conn.commit()
        return League(id=lid, name=name, sport=sport, code=code, admin_id=admin_id, created_at=now)

    def get(self, conn: sqlite3.Connection, league_id: str) -> League | None:
        row = conn.execute(f"SELECT {_LEAGUE_COLS} FROM leagues WHERE id = ?", (league_id,)).fetchone()
        return _row_to_league(row) if row is not None else None

    def get_by_code(self, conn: sqlite3.Connection, code: str) -> League | None:
        """Case-insensitive exact match on the share code."""
        row = conn.execute(
            f"SELECT {_LEAGUE_COLS} FROM leagues WHERE code = ?", (code.strip().upper(),)
        ).fetchone()
        return _row_to_league(row) if row is not None else None

    def list_by_admin(self, conn: sqlite3.Connection, admin_id: str) -> list[League]:
        rows = conn.execute(
            f"SELECT {_LEAGUE_COLS} FROM leagues WHERE admin_id = ? ORDER BY created_at DESC",
            (admin_id,),
        ).fetchall()
        return [_row_to_league(r) for r in rows]

    def count_children(self, conn: sqlite3.Connection, league_id: str) -> tuple[int, int]:
        """Return (team_count, match_count) for a league."""
        teams = conn.execute("SELECT COUNT(*) FROM teams WHERE league_id = ?", (league_id,)).fetchone()[0]
        matches = conn.execute("SELECT COUNT(*) FROM matches WHERE league_id = ?", (league_id,)).fetchone()[0]
        return int(teams), int(matches)

    def update(self, conn: sqlite3.Connection, league_id: str, **fields: Any) -> League | None:
        """Only name is editable; id, code, sport and admin are fixed at creation."""
        if not _update(conn, "leagues", league_id, fields, {"name"}, "League"):
            return None
        return self.get(conn, league_id)

    def delete(self, conn: sqlite3.Connection, league_id: str) -> bool:
        """Cascade removes teams, players and matches."""
        return _delete(conn, "leagues", league_id)


# ---------- TeamRepository ----------


_TEAM_COLS = "id, league_id, name, logo_url, created_at"


def _row_to_team(r: sqlite3.Row) -> Team:
    return Team(
        id=r["id"],
        league_id=r["league_id"],
        name=r["name"],
        logo_url=r["logo_url"],
        created_at=_parse_datetime(r["created_at"]),
    )


class TeamRepository:
    """CRUD for teams. A team belongs to exactly one league."""

    def create(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        name: str,
        logo_url: str | None = None,
        id: str | None = None,
    ) -> Team:
        tid = id or str(uuid.uuid4())
        now = _now()
        try:
            conn.execute(
                f"INSERT INTO teams ({_TEAM_COLS}) VALUES (?, ?, ?, ?, ?)",
                (tid, league_id, name, logo_url, now.isoformat()),
            )
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise _integrity_error(e, "Team") from e
        conn.commit()
        return Team(id=tid, league_id=league_id, name=name, logo_url=logo_url, created_at=now)

    def get(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        row = conn.execute(f"SELECT {_TEAM_COLS} FROM teams WHERE id = ?", (team_id,)).fetchone()
        return _row_to_team(row) if row is not None else None

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Team]:
        rows = conn.execute(
            f"SELECT {_TEAM_COLS} FROM teams WHERE league_id = ? ORDER BY created_at, rowid",
            (league_id,),
        ).fetchall()
        return [_row_to_team(r) for r in rows]

    def update(self, conn: sqlite3.Connection, team_id: str, **fields: Any) -> Team | None:
        if not _update(conn, "teams", team_id, fields, {"name", "logo_url"}, "Team"):
            return None
        return self.get(conn, team_id)

    def delete(self, conn: sqlite3.Connection, team_id: str) -> bool:
        """Cascade removes the team's players and every match it takes part in."""
        return _delete(conn, "teams", team_id)


# ---------- PlayerRepository ----------


_PLAYER_COLS = "id, team_id, name, created_at"


def _row_to_player(r: sqlite3.Row) -> Player:
    return Player(
        id=r["id"],
        team_id=r["team_id"],
        name=r["name"],
        created_at=_parse_datetime(r["created_at"]),
    )


class PlayerRepository:
    """CRUD for players. A player belongs to exactly one team."""

    def create(self, conn: sqlite3.Connection, team_id: str, name: str, id: str | None = None) -> Player:
        pid = id or str(uuid.uuid4())
        now = _now()
        try:
            conn.execute(
                f"INSERT INTO players ({_PLAYER_COLS}) VALUES (?, ?, ?, ?)",
                (pid, team_id, name, now.isoformat()),
            )
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise _integrity_error(e, "Player") from e
        conn.commit()
        return Player(id=pid, team_id=team_id, name=name, created_at=now)

    def get(self, conn: sqlite3.Connection, player_id: str) -> Player | None:
        row = conn.execute(f"SELECT {_PLAYER_COLS} FROM players WHERE id = ?", (player_id,)).fetchone()
        return _row_to_player(row) if row is not None else None

    def list_by_team(self, conn: sqlite3.Connection, team_id: str) -> list[Player]:
        return self.list_by_team_ids(conn, [team_id])

    def list_by_team_ids(self, conn: sqlite3.Connection, team_ids: Iterable[str]) -> list[Player]:
        ids = list(team_ids)
        if not ids:
            return []
        placeholders = ",".join("?" for _ in ids)
        rows = conn.execute(
            f"SELECT {_PLAYER_COLS} FROM players WHERE team_id IN ({placeholders}) ORDER BY created_at, rowid",
            ids,
        ).fetchall()
        return [_row_to_player(r) for r in rows]

    def update(self, conn: sqlite3.Connection, player_id: str, **fields: Any) -> Player | None:
        if not _update(conn, "players", player_id, fields, {"name"}, "Player"):
            return None
        return self.get(conn, player_id)

    def delete(self, conn: sqlite3.Connection, player_id: str) -> bool:
        return _delete(conn, "players", player_id)


# ---------- MatchRepository ----------


_MATCH_COLS = (
    "id, league_id, home_team_id, away_team_id, match_date, match_time, "
    "status, home_score, away_score, created_at"
)


def _row_to_match(r: sqlite3.Row) -> Match:
    return Match(
        id=r["id"],
        league_id=r["league_id"],
        home_team_id=r["home_team_id"],
        away_team_id=r["away_team_id"],
        match_date=date.fromisoformat(r["match_date"]),
        match_time=time.fromisoformat(r["match_time"]),
        status=MatchStatus(r["status"]),
        home_score=r["home_score"],
        away_score=r["away_score"],
        created_at=_parse_datetime(r["created_at"]),
    )


class MatchRepository:
    """CRUD for matches (fixtures). No business logic; lifecycle rules live in MatchService."""

    def create(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        home_team_id: str,
        away_team_id: str,
        match_date: date,
        match_time: time,
        id: str | None = None,
    ) -> Match:
        mid = id or str(uuid.uuid4())
        now = _now()
        try:
            conn.execute(
                f"INSERT INTO matches ({_MATCH_COLS}) VALUES (?, ?, ?, ?, ?, ?, 'scheduled', NULL, NULL, ?)",
                (
                    mid, league_id, home_team_id, away_team_id,
                    match_date.isoformat(), match_time.isoformat(), now.isoformat(),
                ),
            )
        except sqlite3.IntegrityError as e:
            conn.rollback()
            raise _integrity_error(e, "Match") from e
        conn.commit()
        return Match(
            id=mid, league_id=league_id, home_team_id=home_team_id, away_team_id=away_team_id,
            match_date=match_date, match_time=match_time, status=MatchStatus.SCHEDULED,
            created_at=now,
        )

    def get(self, conn: sqlite3.Connection, match_id: str) -> Match | None:
        row = conn.execute(f"SELECT {_MATCH_COLS} FROM matches WHERE id = ?", (match_id,)).fetchone()
        return _row_to_match(row) if row is not None else None

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Match]:
        rows = conn.execute(
            f"SELECT {_MATCH_COLS} FROM matches WHERE league_id = ? ORDER BY match_date, match_time, rowid",
            (league_id,),
        ).fetchall()
        return [_row_to_match(r) for r in rows]

    def update(self, conn: sqlite3.Connection, match_id: str, **fields: Any) -> Match | None:
        """Single UPDATE so status and scores never diverge."""
        allowed = {"status", "home_score", "away_score", "match_date", "match_time"}
        if not _update(conn, "matches", match_id, fields, allowed, "Match"):
            return None
        return self.get(conn, match_id)

    def delete(self, conn: sqlite3.Connection, match_id: str) -> bool:
        return _delete(conn, "matches", match_id)
