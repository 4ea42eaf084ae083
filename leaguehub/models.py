"""
Data models for the league engine.
Domain objects only — no persistence or API logic.

A league owns its teams and matches; a team owns its players. Standings are
derived from completed matches and never stored.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any


# ---------- Sport ----------
class Sport(str, Enum):
    CRICKET = "Cricket"
    FOOTBALL = "Football"
    BADMINTON = "Badminton"


# ---------- Match status (state machine) ----------
class MatchStatus(str, Enum):
    """Match lifecycle: scheduled → completed | cancelled. completed may be cleared back to scheduled."""
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ---------- User ----------
@dataclass(frozen=True)
class User:
    """
    An account that can administer leagues.
    email is unique (stored lower-case); password_hash is never plain text.
    """
    id: str
    email: str
    created_at: datetime
    password_hash: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }


# ---------- League ----------
@dataclass(frozen=True)
class League:
    """
    Named competition for one sport. Owns teams and matches.
    code is the 6-character share code, unique and stored uppercase.
    """
    id: str
    name: str
    sport: Sport
    code: str
    admin_id: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sport_type": self.sport.value,
            "code": self.code,
            "admin_id": self.admin_id,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Team ----------
@dataclass(frozen=True)
class Team:
    """Roster container registered to exactly one league."""
    id: str
    league_id: str
    name: str
    created_at: datetime
    logo_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "league_id": self.league_id,
            "name": self.name,
            "logo_url": self.logo_url,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Player ----------
@dataclass(frozen=True)
class Player:
    id: str
    team_id: str
    name: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Match ----------
@dataclass(frozen=True)
class Match:
    """
    A fixture between two teams of the same league.
    home_score and away_score are set if and only if status is completed.
    """
    id: str
    league_id: str
    home_team_id: str
    away_team_id: str
    match_date: date
    match_time: time
    status: MatchStatus
    created_at: datetime
    home_score: int | None = None
    away_score: int | None = None

    @property
    def has_result(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    def involves(self, team_id: str) -> bool:
        return team_id in (self.home_team_id, self.away_team_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "league_id": self.league_id,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "match_date": self.match_date.isoformat(),
            "match_time": self.match_time.strftime("%H:%M"),
            "status": self.status.value,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Standings ----------
@dataclass
class StandingsRow:
    """Per-team aggregate derived from completed matches."""
    team_id: str
    team_name: str
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0

    @property
    def played(self) -> int:
        return self.wins + self.draws + self.losses

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "played": self.played,
            "wins": self.wins,
            "draws": self.draws,
            "losses": self.losses,
            "points": self.points,
        }


# ---------- Display payloads ----------
@dataclass
class LeagueSummary:
    """Dashboard entry: a league with its team and match counts."""
    league: League
    team_count: int
    match_count: int

    def to_dict(self) -> dict[str, Any]:
        d = self.league.to_dict()
        d["team_count"] = self.team_count
        d["match_count"] = self.match_count
        return d


@dataclass
class MatchWithTeamNames:
    match: Match
    home_team_name: str
    away_team_name: str

    def to_dict(self) -> dict[str, Any]:
        d = self.match.to_dict()
        d["home_team_name"] = self.home_team_name
        d["away_team_name"] = self.away_team_name
        return d


@dataclass
class LeagueOverview:
    """
    Everything a league page shows: teams with rosters, standings and fixtures.
    upcoming holds scheduled matches, results holds completed ones.
    """
    league: League
    teams: list[Team]
    rosters: dict[str, list[Player]]
    standings: list[StandingsRow]
    upcoming: list[MatchWithTeamNames] = field(default_factory=list)
    results: list[MatchWithTeamNames] = field(default_factory=list)
    cancelled: list[MatchWithTeamNames] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        standings_by_team = {row.team_id: row for row in self.standings}
        teams: list[dict[str, Any]] = []
        for team in self.teams:
            d = team.to_dict()
            d["players"] = [p.to_dict() for p in self.rosters.get(team.id, [])]
            row = standings_by_team.get(team.id)
            if row is not None:
                d.update({"wins": row.wins, "draws": row.draws, "losses": row.losses, "points": row.points})
            teams.append(d)
        return {
            "league": self.league.to_dict(),
            "teams": teams,
            "standings": [row.to_dict() for row in self.standings],
            "upcoming_matches": [m.to_dict() for m in self.upcoming],
            "completed_matches": [m.to_dict() for m in self.results],
            "cancelled_matches": [m.to_dict() for m in self.cancelled],
        }
