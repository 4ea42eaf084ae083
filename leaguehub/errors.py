"""
Error taxonomy shared by persistence, services and the API.
"""
from __future__ import annotations


class LeagueHubError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(LeagueHubError, ValueError):
    """Malformed input: same team on both sides, bad score, missing field."""


class NotFound(LeagueHubError, LookupError):
    """A referenced id or share code does not resolve."""


class ConflictError(LeagueHubError):
    """Unique constraint violated (duplicate league code, duplicate email)."""


class CodeExhaustionError(LeagueHubError):
    """No unused share code found within the retry budget."""
