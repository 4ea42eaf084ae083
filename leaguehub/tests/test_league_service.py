"""
Tests for league-centric service: creation with share codes, teams and players, cascades, page payload.
"""
from __future__ import annotations

import random

import pytest

from leaguehub.errors import CodeExhaustionError, ConflictError, NotFound, ValidationError
from leaguehub.models import MatchStatus, Sport
from leaguehub.persistence.repositories import LeagueRepository, MatchRepository, PlayerRepository
from leaguehub.services.codes import MAX_CODE_ATTEMPTS, generate_code, is_valid_code
from leaguehub.services.league_service import LeagueService, parse_sport
from leaguehub.services.match_service import MatchService


# ---------- create_league ----------


def test_create_league_assigns_valid_code(db_conn, league):
    assert league.name == "Sunday Football"
    assert league.sport == Sport.FOOTBALL
    assert league.admin_id == "admin-1"
    assert is_valid_code(league.code)
    assert league.code == league.code.upper()


def test_create_league_trims_name_and_parses_sport(db_conn, league_service):
    league = league_service.create_league(db_conn, "  Shuttle Stars  ", "badminton", "admin-1")
    assert league.name == "Shuttle Stars"
    assert league.sport == Sport.BADMINTON


@pytest.mark.parametrize("name", ["", "   ", "ab", None])
def test_create_league_rejects_short_or_missing_name(db_conn, league_service, name):
    with pytest.raises(ValidationError):
        league_service.create_league(db_conn, name, Sport.CRICKET, "admin-1")


def test_create_league_rejects_unknown_sport(db_conn, league_service):
    with pytest.raises(ValidationError):
        league_service.create_league(db_conn, "Chess Club", "Chess", "admin-1")


def test_parse_sport_is_case_insensitive():
    assert parse_sport("CRICKET") == Sport.CRICKET
    assert parse_sport(" Football ") == Sport.FOOTBALL
    assert parse_sport(Sport.BADMINTON) == Sport.BADMINTON


def test_create_league_skips_existing_code(db_conn):
    taken = generate_code(random.Random(5))
    LeagueRepository().create(db_conn, "Existing", Sport.CRICKET, taken, "admin-9")
    svc = LeagueService(rng=random.Random(5))
    league = svc.create_league(db_conn, "Newcomers", Sport.CRICKET, "admin-1")
    assert league.code != taken


class _RacyLeagueStore:
    """
    Every other lookup reports the code taken; every insert loses a race.
    Counts candidates seen at either step.
    """

    def __init__(self) -> None:
        self.lookups = 0
        self.inserts = 0

    def get_by_code(self, conn, code):
        self.lookups += 1
        return object() if self.lookups % 2 else None

    def create(self, conn, name, sport, code, admin_id, id=None):
        self.inserts += 1
        raise ConflictError(f"League already exists: {code}")


class _AllTakenStore(_RacyLeagueStore):
    def get_by_code(self, conn, code):
        self.lookups += 1
        return object()


def test_create_league_exhaustion_surfaces(db_conn):
    store = _AllTakenStore()
    svc = LeagueService(league_repo=store)
    with pytest.raises(CodeExhaustionError):
        svc.create_league(db_conn, "Unlucky League", Sport.FOOTBALL, "admin-1")
    assert (store.lookups, store.inserts) == (MAX_CODE_ATTEMPTS, 0)
    assert LeagueRepository().list_by_admin(db_conn, "admin-1") == []


def test_lookup_and_insert_collisions_share_one_budget(db_conn):
    store = _RacyLeagueStore()
    svc = LeagueService(league_repo=store)
    with pytest.raises(CodeExhaustionError):
        svc.create_league(db_conn, "Crowded League", Sport.CRICKET, "admin-1")
    assert store.lookups == MAX_CODE_ATTEMPTS
    assert store.inserts == MAX_CODE_ATTEMPTS // 2


def test_insert_conflict_then_success(db_conn):
    class _OneRace(_RacyLeagueStore):
        def get_by_code(self, conn, code):
            self.lookups += 1
            return None

        def create(self, conn, name, sport, code, admin_id, id=None):
            self.inserts += 1
            if self.inserts == 1:
                raise ConflictError("League already exists")
            return LeagueRepository().create(conn, name, sport, code, admin_id)

    store = _OneRace()
    league = LeagueService(league_repo=store).create_league(db_conn, "Second Try", Sport.FOOTBALL, "admin-1")
    assert (store.lookups, store.inserts) == (2, 2)
    assert LeagueRepository().get(db_conn, league.id) is not None


def test_get_league_by_code_any_case(db_conn, league_service, league):
    assert league_service.get_league_by_code(db_conn, league.code.lower()).id == league.id
    missing = "ZZZZZZ" if league.code != "ZZZZZZ" else "YYYYYY"
    with pytest.raises(NotFound):
        league_service.get_league_by_code(db_conn, missing)


# ---------- dashboard, rename, delete ----------


def test_list_admin_leagues_with_counts(db_conn, league_service, league, teams):
    other = league_service.create_league(db_conn, "Midweek Cricket", Sport.CRICKET, "admin-1")
    league_service.create_league(db_conn, "Not Mine", Sport.CRICKET, "admin-2")
    MatchService().schedule(db_conn, league, teams[0], teams[1], "2024-06-01", "18:00")
    summaries = {s.league.id: s for s in league_service.list_admin_leagues(db_conn, "admin-1")}
    assert set(summaries) == {league.id, other.id}
    assert (summaries[league.id].team_count, summaries[league.id].match_count) == (3, 1)
    assert (summaries[other.id].team_count, summaries[other.id].match_count) == (0, 0)


def test_rename_league(db_conn, league_service, league):
    renamed = league_service.rename_league(db_conn, league.id, "Saturday Football")
    assert renamed.name == "Saturday Football"
    assert renamed.code == league.code
    with pytest.raises(ValidationError):
        league_service.rename_league(db_conn, league.id, "x")
    with pytest.raises(NotFound):
        league_service.rename_league(db_conn, "missing", "Valid Name")


def test_delete_league_cascades(db_conn, league_service, league, teams):
    player = league_service.add_player(db_conn, teams[0], "Keeper")
    match = MatchService().schedule(db_conn, league, teams[0], teams[1], "2024-06-01", "18:00")
    league_service.delete_league(db_conn, league.id)
    with pytest.raises(NotFound):
        league_service.get_league(db_conn, league.id)
    assert league_service.list_teams(db_conn, league.id) == []
    assert PlayerRepository().get(db_conn, player.id) is None
    assert MatchRepository().get(db_conn, match.id) is None
    with pytest.raises(NotFound):
        league_service.delete_league(db_conn, league.id)


# ---------- teams & players ----------


def test_add_team_with_logo(db_conn, league_service, league):
    team = league_service.add_team(db_conn, league, "  Rovers ", logo_url=" https://img.example/rovers.png ")
    assert team.name == "Rovers"
    assert team.logo_url == "https://img.example/rovers.png"
    assert league_service.add_team(db_conn, league, "United", logo_url="  ").logo_url is None


def test_add_team_requires_name(db_conn, league_service, league):
    with pytest.raises(ValidationError):
        league_service.add_team(db_conn, league, "   ")


def test_list_teams_in_insertion_order(db_conn, league_service, league, teams):
    assert [t.name for t in league_service.list_teams(db_conn, league.id)] == ["A", "B", "C"]


def test_delete_team_removes_players_and_matches(db_conn, league_service, league, teams):
    a, b, c = teams
    league_service.add_player(db_conn, a, "Striker")
    ab = MatchService().schedule(db_conn, league, a, b, "2024-06-01", "18:00")
    bc = MatchService().schedule(db_conn, league, b, c, "2024-06-02", "18:00")
    league_service.delete_team(db_conn, a.id)
    assert PlayerRepository().list_by_team(db_conn, a.id) == []
    remaining = [m.id for m in MatchRepository().list_by_league(db_conn, league.id)]
    assert remaining == [bc.id]
    assert ab.id not in remaining
    with pytest.raises(NotFound):
        league_service.get_team(db_conn, a.id)


def test_player_lifecycle(db_conn, league_service, teams):
    player = league_service.add_player(db_conn, teams[1], " Wing Back ")
    assert player.name == "Wing Back"
    assert league_service.get_player(db_conn, player.id).team_id == teams[1].id
    league_service.delete_player(db_conn, player.id)
    with pytest.raises(NotFound):
        league_service.get_player(db_conn, player.id)
    with pytest.raises(ValidationError):
        league_service.add_player(db_conn, teams[1], "")


# ---------- standings & overview ----------


def test_standings_follow_recorded_results(db_conn, league_service, league, teams):
    a, b, c = teams
    ms = MatchService()
    ms.record_result(db_conn, ms.schedule(db_conn, league, a, b, "2024-06-01", "18:00"), 3, 1)
    ms.record_result(db_conn, ms.schedule(db_conn, league, b, c, "2024-06-08", "18:00"), 2, 2)
    ms.record_result(db_conn, ms.schedule(db_conn, league, c, a, "2024-06-15", "18:00"), 0, 1)
    rows = league_service.standings(db_conn, league)
    assert [r.team_name for r in rows] == ["A", "B", "C"]
    assert [(r.played, r.wins, r.draws, r.losses, r.points) for r in rows] == [
        (2, 2, 0, 0, 6),
        (2, 0, 1, 1, 1),
        (2, 0, 1, 1, 1),
    ]


def test_league_overview_buckets_matches(db_conn, league_service, league, teams):
    a, b, c = teams
    league_service.add_player(db_conn, a, "Alice")
    league_service.add_player(db_conn, a, "Ann")
    ms = MatchService()
    upcoming = ms.schedule(db_conn, league, a, b, "2024-06-20", "18:00")
    done = ms.record_result(db_conn, ms.schedule(db_conn, league, b, c, "2024-06-01", "18:00"), 1, 0)
    dropped = ms.cancel(db_conn, ms.schedule(db_conn, league, c, a, "2024-06-10", "18:00"))

    overview = league_service.league_overview(db_conn, league)
    assert [m.match.id for m in overview.upcoming] == [upcoming.id]
    assert [m.match.id for m in overview.results] == [done.id]
    assert [m.match.id for m in overview.cancelled] == [dropped.id]
    assert overview.results[0].home_team_name == "B"
    assert [p.name for p in overview.rosters[a.id]] == ["Alice", "Ann"]
    assert overview.rosters[c.id] == []

    payload = overview.to_dict()
    assert payload["league"]["code"] == league.code
    assert payload["upcoming_matches"][0]["status"] == MatchStatus.SCHEDULED.value
    assert payload["completed_matches"][0]["home_score"] == 1
    team_b = next(t for t in payload["teams"] if t["id"] == b.id)
    assert (team_b["wins"], team_b["points"]) == (1, 3)
    assert [p["name"] for p in payload["teams"][0]["players"]] == ["Alice", "Ann"]
