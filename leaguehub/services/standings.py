"""
Standings table derived from completed matches.

Pure aggregation: rows come back in the order of the input teams, with no ranking sort.
Points: win 3, draw 1, loss 0. Only matches with status completed and both scores set count.
"""
from __future__ import annotations

from typing import Iterable

from leaguehub.models import Match, MatchStatus, StandingsRow, Team

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1
POINTS_FOR_LOSS = 0


def _counts(match: Match) -> bool:
    return match.status == MatchStatus.COMPLETED and match.has_result


def _own_and_opponent(match: Match, team_id: str) -> tuple[int, int]:
    if match.home_team_id == team_id:
        return match.home_score, match.away_score
    return match.away_score, match.home_score


def compute_standings(teams: Iterable[Team], matches: Iterable[Match]) -> list[StandingsRow]:
    """
    One StandingsRow per team. A team with no completed matches gets an all-zero row.
    A completed match missing a score is skipped.
    """
    completed = [m for m in matches if _counts(m)]
    rows: list[StandingsRow] = []
    for team in teams:
        row = StandingsRow(team_id=team.id, team_name=team.name)
        for m in completed:
            if not m.involves(team.id):
                continue
            own, opponent = _own_and_opponent(m, team.id)
            if own > opponent:
                row.wins += 1
            elif own == opponent:
                row.draws += 1
            else:
                row.losses += 1
        row.points = row.wins * POINTS_FOR_WIN + row.draws * POINTS_FOR_DRAW + row.losses * POINTS_FOR_LOSS
        rows.append(row)
    return rows
