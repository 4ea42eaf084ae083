"""leaguehub: league standings and match lifecycle engine."""

from .errors import (
    CodeExhaustionError,
    ConflictError,
    LeagueHubError,
    NotFound,
    ValidationError,
)
from .models import League, Match, MatchStatus, Player, Sport, StandingsRow, Team

__all__ = [
    "CodeExhaustionError",
    "ConflictError",
    "LeagueHubError",
    "NotFound",
    "ValidationError",
    "League",
    "Match",
    "MatchStatus",
    "Player",
    "Sport",
    "StandingsRow",
    "Team",
]
