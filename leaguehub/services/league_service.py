"""
League-centric service: creation with share codes, teams, players, and page payloads.
Composes the code generator, standings calculator and roster aggregator; persistence via repositories.
"""
from __future__ import annotations

import logging
import random
import sqlite3
from typing import Any

from leaguehub.errors import CodeExhaustionError, ConflictError, NotFound, ValidationError
from leaguehub.models import (
    League,
    LeagueOverview,
    LeagueSummary,
    MatchStatus,
    MatchWithTeamNames,
    Player,
    Sport,
    StandingsRow,
    Team,
)
from leaguehub.persistence.repositories import (
    LeagueRepository,
    MatchRepository,
    PlayerRepository,
    TeamRepository,
)
from leaguehub.services.codes import MAX_CODE_ATTEMPTS, generate_code, is_available, resolve_code
from leaguehub.services.roster import group_by_team
from leaguehub.services.standings import compute_standings

logger = logging.getLogger(__name__)

LEAGUE_NAME_MIN_LENGTH = 3


def _clean_name(value: Any, what: str, min_length: int = 1) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} name is required")
    name = value.strip()
    if len(name) < min_length:
        raise ValidationError(f"{what} name must be at least {min_length} characters")
    return name


def parse_sport(value: Any) -> Sport:
    """Accept a Sport or its display value, case-insensitive ('football' → Football)."""
    if isinstance(value, Sport):
        return value
    if isinstance(value, str):
        for sport in Sport:
            if sport.value.lower() == value.strip().lower():
                return sport
    raise ValidationError(
        f"Sport must be one of: {', '.join(s.value for s in Sport)}; got {value!r}"
    )


class LeagueService:
    """
    Domain logic for leagues, teams and players.
    Persistence is delegated to repositories.
    """

    def __init__(self, rng: random.Random | None = None, league_repo: LeagueRepository | None = None) -> None:
        self._league_repo = league_repo or LeagueRepository()
        self._team_repo = TeamRepository()
        self._player_repo = PlayerRepository()
        self._match_repo = MatchRepository()
        self._rng = rng

    # ---------- Leagues ----------

    def create_league(self, conn: sqlite3.Connection, name: str, sport: Any, admin_id: str) -> League:
        """
        Create a league owned by admin_id with a fresh share code.
        Every candidate, whether it collides at lookup or at insert, spends one of MAX_CODE_ATTEMPTS.
        """
        clean = _clean_name(name, "League", LEAGUE_NAME_MIN_LENGTH)
        sport_value = parse_sport(sport)
        if not admin_id:
            raise ValidationError("admin_id is required")
        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            code = generate_code(self._rng)
            if not is_available(conn, code, self._league_repo):
                logger.warning("Share code collision on attempt %d/%d", attempt, MAX_CODE_ATTEMPTS)
                continue
            try:
                league = self._league_repo.create(conn, clean, sport_value, code, admin_id)
            except ConflictError:
                logger.warning("Share code %s taken at insert on attempt %d/%d", code, attempt, MAX_CODE_ATTEMPTS)
                continue
            logger.info("Created league %s (%s, code %s) for admin %s", league.id, sport_value.value, code, admin_id)
            return league
        logger.warning("No free share code after %d attempts", MAX_CODE_ATTEMPTS)
        raise CodeExhaustionError(
            f"Could not allocate a unique league code after {MAX_CODE_ATTEMPTS} attempts; try again later"
        )

    def get_league(self, conn: sqlite3.Connection, league_id: str) -> League:
        league = self._league_repo.get(conn, league_id)
        if league is None:
            raise NotFound(f"League not found: {league_id}")
        return league

    def get_league_by_code(self, conn: sqlite3.Connection, code: str) -> League:
        return resolve_code(conn, code, self._league_repo)

    def list_admin_leagues(self, conn: sqlite3.Connection, admin_id: str) -> list[LeagueSummary]:
        """Dashboard: the admin's leagues, newest first, with team and match counts."""
        summaries: list[LeagueSummary] = []
        for league in self._league_repo.list_by_admin(conn, admin_id):
            team_count, match_count = self._league_repo.count_children(conn, league.id)
            summaries.append(LeagueSummary(league=league, team_count=team_count, match_count=match_count))
        return summaries

    def rename_league(self, conn: sqlite3.Connection, league_id: str, name: str) -> League:
        clean = _clean_name(name, "League", LEAGUE_NAME_MIN_LENGTH)
        league = self._league_repo.update(conn, league_id, name=clean)
        if league is None:
            raise NotFound(f"League not found: {league_id}")
        return league

    def delete_league(self, conn: sqlite3.Connection, league_id: str) -> None:
        """Remove the league with its teams, players and matches."""
        if not self._league_repo.delete(conn, league_id):
            raise NotFound(f"League not found: {league_id}")
        logger.info("Deleted league %s", league_id)

    # ---------- Teams ----------

    def add_team(self, conn: sqlite3.Connection, league: League, name: str, logo_url: str | None = None) -> Team:
        clean = _clean_name(name, "Team")
        logo = logo_url.strip() if isinstance(logo_url, str) and logo_url.strip() else None
        team = self._team_repo.create(conn, league.id, clean, logo_url=logo)
        logger.info("Added team %s to league %s", team.id, league.id)
        return team

    def get_team(self, conn: sqlite3.Connection, team_id: str) -> Team:
        team = self._team_repo.get(conn, team_id)
        if team is None:
            raise NotFound(f"Team not found: {team_id}")
        return team

    def list_teams(self, conn: sqlite3.Connection, league_id: str) -> list[Team]:
        return self._team_repo.list_by_league(conn, league_id)

    def delete_team(self, conn: sqlite3.Connection, team_id: str) -> None:
        """Also removes the team's players and its matches."""
        if not self._team_repo.delete(conn, team_id):
            raise NotFound(f"Team not found: {team_id}")
        logger.info("Deleted team %s", team_id)

    # ---------- Players ----------

    def add_player(self, conn: sqlite3.Connection, team: Team, name: str) -> Player:
        clean = _clean_name(name, "Player")
        return self._player_repo.create(conn, team.id, clean)

    def get_player(self, conn: sqlite3.Connection, player_id: str) -> Player:
        player = self._player_repo.get(conn, player_id)
        if player is None:
            raise NotFound(f"Player not found: {player_id}")
        return player

    def delete_player(self, conn: sqlite3.Connection, player_id: str) -> None:
        if not self._player_repo.delete(conn, player_id):
            raise NotFound(f"Player not found: {player_id}")

    # ---------- Payloads ----------

    def standings(self, conn: sqlite3.Connection, league: League) -> list[StandingsRow]:
        """Standings rows in the order teams were added."""
        teams = self._team_repo.list_by_league(conn, league.id)
        return compute_standings(teams, self._match_repo.list_by_league(conn, league.id))

    def league_overview(self, conn: sqlite3.Connection, league: League) -> LeagueOverview:
        """Teams with rosters, standings in team order, and fixtures split by status."""
        teams = self._team_repo.list_by_league(conn, league.id)
        team_ids = [t.id for t in teams]
        players = self._player_repo.list_by_team_ids(conn, team_ids)
        matches = self._match_repo.list_by_league(conn, league.id)
        names = {t.id: t.name for t in teams}
        overview = LeagueOverview(
            league=league,
            teams=teams,
            rosters=group_by_team(players, team_ids),
            standings=compute_standings(teams, matches),
        )
        buckets = {
            MatchStatus.SCHEDULED: overview.upcoming,
            MatchStatus.COMPLETED: overview.results,
            MatchStatus.CANCELLED: overview.cancelled,
        }
        for m in matches:
            buckets[m.status].append(
                MatchWithTeamNames(
                    match=m,
                    home_team_name=names.get(m.home_team_id, "Unknown"),
                    away_team_name=names.get(m.away_team_id, "Unknown"),
                )
            )
        return overview
