"""
Tests for the standings calculator: W/D/L tallies, points, ordering, defensive skips.
Pure function, no database.
"""
from __future__ import annotations

import random
from datetime import date, datetime, time, timezone

from leaguehub.models import Match, MatchStatus, Team
from leaguehub.services.standings import compute_standings

_NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _team(tid: str) -> Team:
    return Team(id=tid, league_id="L1", name=f"Team {tid}", created_at=_NOW)


def _match(mid: str, home: str, away: str, hs: int | None, as_: int | None,
           status: MatchStatus = MatchStatus.COMPLETED) -> Match:
    return Match(
        id=mid, league_id="L1", home_team_id=home, away_team_id=away,
        match_date=date(2024, 5, 4), match_time=time(15, 0), status=status,
        created_at=_NOW, home_score=hs, away_score=as_,
    )


def _by_id(rows):
    return {r.team_id: r for r in rows}


def test_three_team_example():
    """A 3-1 B, B 2-2 C, C 0-1 A."""
    teams = [_team("A"), _team("B"), _team("C")]
    matches = [
        _match("m1", "A", "B", 3, 1),
        _match("m2", "B", "C", 2, 2),
        _match("m3", "C", "A", 0, 1),
    ]
    rows = _by_id(compute_standings(teams, matches))
    a, b, c = rows["A"], rows["B"], rows["C"]
    assert (a.played, a.wins, a.draws, a.losses, a.points) == (2, 2, 0, 0, 6)
    assert (b.played, b.wins, b.draws, b.losses, b.points) == (2, 0, 1, 1, 1)
    assert (c.played, c.wins, c.draws, c.losses, c.points) == (2, 0, 1, 1, 1)


def test_rows_follow_input_team_order():
    """No ranking sort: a team with fewer points listed first stays first."""
    teams = [_team("C"), _team("A"), _team("B")]
    matches = [_match("m1", "A", "B", 5, 0)]
    rows = compute_standings(teams, matches)
    assert [r.team_id for r in rows] == ["C", "A", "B"]
    assert rows[1].points == 3


def test_team_without_matches_gets_zero_row():
    rows = compute_standings([_team("A")], [])
    assert len(rows) == 1
    r = rows[0]
    assert (r.played, r.wins, r.draws, r.losses, r.points) == (0, 0, 0, 0, 0)
    assert r.team_name == "Team A"


def test_empty_team_list():
    assert compute_standings([], [_match("m1", "A", "B", 1, 0)]) == []


def test_only_completed_matches_count():
    teams = [_team("A"), _team("B")]
    matches = [
        _match("m1", "A", "B", None, None, status=MatchStatus.SCHEDULED),
        _match("m2", "A", "B", None, None, status=MatchStatus.CANCELLED),
        _match("m3", "A", "B", 2, 0),
    ]
    rows = _by_id(compute_standings(teams, matches))
    assert rows["A"].played == 1 and rows["A"].wins == 1
    assert rows["B"].played == 1 and rows["B"].losses == 1


def test_completed_match_missing_score_is_skipped():
    teams = [_team("A"), _team("B")]
    matches = [
        _match("m1", "A", "B", 3, None),
        _match("m2", "A", "B", None, 1),
    ]
    rows = _by_id(compute_standings(teams, matches))
    assert rows["A"].played == 0
    assert rows["B"].played == 0


def test_away_win_credited_to_away_side():
    teams = [_team("A"), _team("B")]
    rows = _by_id(compute_standings(teams, [_match("m1", "A", "B", 0, 2)]))
    assert rows["B"].wins == 1 and rows["B"].points == 3
    assert rows["A"].losses == 1 and rows["A"].points == 0


def test_points_and_played_identities_hold_on_random_league():
    rng = random.Random(7)
    ids = ["A", "B", "C", "D", "E"]
    teams = [_team(t) for t in ids]
    matches = []
    for i in range(40):
        home, away = rng.sample(ids, 2)
        status = rng.choice(list(MatchStatus))
        if status == MatchStatus.COMPLETED:
            matches.append(_match(f"m{i}", home, away, rng.randint(0, 4), rng.randint(0, 4)))
        else:
            matches.append(_match(f"m{i}", home, away, None, None, status=status))
    rows = compute_standings(teams, matches)
    for r in rows:
        assert r.points == 3 * r.wins + r.draws
        participated = [
            m for m in matches
            if m.status == MatchStatus.COMPLETED and r.team_id in (m.home_team_id, m.away_team_id)
        ]
        assert r.played == len(participated)
    assert sum(r.wins for r in rows) == sum(r.losses for r in rows)


def test_input_match_order_does_not_matter():
    teams = [_team("A"), _team("B"), _team("C")]
    matches = [
        _match("m1", "A", "B", 3, 1),
        _match("m2", "B", "C", 2, 2),
        _match("m3", "C", "A", 0, 1),
    ]
    forward = [r.to_dict() for r in compute_standings(teams, matches)]
    backward = [r.to_dict() for r in compute_standings(teams, list(reversed(matches)))]
    assert forward == backward
