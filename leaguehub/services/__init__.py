"""
Service layer: share codes, match lifecycle, standings, rosters.
compute_standings and group_by_team are pure; the services persist through repositories.
"""
from .codes import allocate_code, generate_code, is_available, resolve_code
from .league_service import LeagueService
from .match_service import MatchService, MatchTransitionError
from .roster import group_by_team
from .standings import compute_standings

__all__ = [
    "allocate_code",
    "generate_code",
    "is_available",
    "resolve_code",
    "LeagueService",
    "MatchService",
    "MatchTransitionError",
    "group_by_team",
    "compute_standings",
]
