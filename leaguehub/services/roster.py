"""Group players under their teams for display payloads."""
from __future__ import annotations

from typing import Iterable

from leaguehub.models import Player


def group_by_team(players: Iterable[Player], team_ids: Iterable[str]) -> dict[str, list[Player]]:
    """
    Map every id in team_ids to its players (empty list when none).
    Players of teams outside team_ids are dropped as stale.
    """
    grouped: dict[str, list[Player]] = {tid: [] for tid in team_ids}
    for p in players:
        bucket = grouped.get(p.team_id)
        if bucket is not None:
            bucket.append(p)
    return grouped
