"""
Persistence layer for league data.
No business logic — only read/write interfaces.
"""
from .db import get_connection, get_db_path, init_db, set_db_path
from .repositories import (
    UserRepository,
    LeagueRepository,
    TeamRepository,
    PlayerRepository,
    MatchRepository,
)

__all__ = [
    "get_connection",
    "get_db_path",
    "init_db",
    "set_db_path",
    "UserRepository",
    "LeagueRepository",
    "TeamRepository",
    "PlayerRepository",
    "MatchRepository",
]
