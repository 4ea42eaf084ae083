"""
Match lifecycle: scheduling, results, cancellation.
States: scheduled (initial) → completed (editable) | cancelled.
Every operation validates first and writes once; a failed call leaves the stored record unchanged.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any

from leaguehub.errors import NotFound, ValidationError
from leaguehub.models import League, Match, MatchStatus, Team
from leaguehub.persistence.repositories import MatchRepository

logger = logging.getLogger(__name__)


# ---------- Exceptions ----------


class MatchTransitionError(ValidationError):
    """Operation not allowed from the match's current status (e.g. cancel a cancelled match)."""


# ---------- Allowed source states per operation ----------

_ALLOWED_FROM: dict[str, set[MatchStatus]] = {
    # Recording is an update, not a creation: any prior status.
    "record_result": {MatchStatus.SCHEDULED, MatchStatus.COMPLETED, MatchStatus.CANCELLED},
    "clear_result": {MatchStatus.SCHEDULED, MatchStatus.COMPLETED},
    "cancel": {MatchStatus.SCHEDULED, MatchStatus.COMPLETED},
    "reschedule": {MatchStatus.SCHEDULED, MatchStatus.COMPLETED},
}

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")

# Largest value an SQLite INTEGER column holds
MAX_SCORE = 2**63 - 1


# ---------- Input parsing ----------


def parse_match_date(value: Any) -> date:
    """Accept a date or an ISO YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            pass
    raise ValidationError(f"Match date must be a calendar date (YYYY-MM-DD), got {value!r}")


def parse_match_time(value: Any) -> time:
    """Accept a time or an HH:MM / HH:MM:SS string. Seconds and timezone are dropped."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0, tzinfo=None)
    if isinstance(value, str) and value.strip():
        for fmt in _TIME_FORMATS:
            try:
                parsed = datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
            return parsed.replace(second=0)
    raise ValidationError(f"Match time must be a time of day (HH:MM), got {value!r}")


def parse_score(value: Any, side: str) -> int:
    """
    Scores are non-negative integers. Integral floats and digit strings (form input) are accepted;
    bools, fractions, blanks, negatives and values beyond MAX_SCORE are not.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{side} score is required")
    if isinstance(value, bool):
        raise ValidationError(f"{side} score must be an integer, got {value!r}")
    if isinstance(value, int):
        score = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{side} score must be an integer, got {value!r}")
        score = int(value)
    elif isinstance(value, str):
        try:
            score = int(value.strip())
        except ValueError:
            raise ValidationError(f"{side} score must be an integer, got {value!r}") from None
    else:
        raise ValidationError(f"{side} score must be an integer, got {value!r}")
    if score < 0:
        raise ValidationError(f"{side} score must not be negative, got {score}")
    if score > MAX_SCORE:
        raise ValidationError(f"{side} score is too large, got {score}")
    return score


def validate_match(match: Match) -> None:
    """Raise ValidationError if the record breaks a match invariant."""
    if match.home_team_id == match.away_team_id:
        raise ValidationError("Home and away teams must be different")
    if match.status == MatchStatus.COMPLETED:
        if not match.has_result:
            raise ValidationError("Completed match must have both scores")
        for side, score in (("Home", match.home_score), ("Away", match.away_score)):
            if isinstance(score, bool) or not isinstance(score, int) or score < 0:
                raise ValidationError(f"{side} score must be a non-negative integer")
    elif match.home_score is not None or match.away_score is not None:
        raise ValidationError(f"{match.status.value} match must not carry scores")


# ---------- MatchService ----------


class MatchService:
    """
    Validates and transitions match records.
    Persistence is delegated to the injected repository.
    """

    def __init__(self, match_repo: MatchRepository | None = None) -> None:
        self._match_repo = match_repo or MatchRepository()

    def get_match(self, conn: sqlite3.Connection, match_id: str) -> Match:
        match = self._match_repo.get(conn, match_id)
        if match is None:
            raise NotFound(f"Match not found: {match_id}")
        return match

    def schedule(
        self,
        conn: sqlite3.Connection,
        league: League,
        home_team: Team,
        away_team: Team,
        match_date: Any,
        match_time: Any,
    ) -> Match:
        """Create a scheduled fixture between two different teams of `league`."""
        if home_team.id == away_team.id:
            raise ValidationError("Home and away teams must be different")
        for team in (home_team, away_team):
            if team.league_id != league.id:
                raise ValidationError(f"Team {team.id} does not belong to league {league.id}")
        d = parse_match_date(match_date)
        t = parse_match_time(match_time)
        match = self._match_repo.create(conn, league.id, home_team.id, away_team.id, d, t)
        logger.info("Scheduled match %s in league %s for %s %s", match.id, league.id, d, t)
        return match

    def record_result(self, conn: sqlite3.Connection, match: Match, home_score: Any, away_score: Any) -> Match:
        """Set both scores and mark completed in one write. Re-recording overwrites."""
        self._assert_allowed("record_result", match)
        home = parse_score(home_score, "Home")
        away = parse_score(away_score, "Away")
        saved = self._write(conn, match, status=MatchStatus.COMPLETED, home_score=home, away_score=away)
        logger.info("Recorded result %d-%d for match %s", home, away, match.id)
        return saved

    def clear_result(self, conn: sqlite3.Connection, match: Match) -> Match:
        """Undo completion: back to scheduled with both scores cleared."""
        self._assert_allowed("clear_result", match)
        saved = self._write(conn, match, status=MatchStatus.SCHEDULED, home_score=None, away_score=None)
        logger.info("Cleared result for match %s", match.id)
        return saved

    def cancel(self, conn: sqlite3.Connection, match: Match) -> Match:
        """Cancel a scheduled or completed match. Scores are dropped; a cancelled match never counts."""
        self._assert_allowed("cancel", match)
        saved = self._write(conn, match, status=MatchStatus.CANCELLED, home_score=None, away_score=None)
        logger.info("Cancelled match %s (was %s)", match.id, match.status.value)
        return saved

    def reschedule(self, conn: sqlite3.Connection, match: Match, match_date: Any, match_time: Any) -> Match:
        """Move a match to a new date/time. Status and scores are kept."""
        self._assert_allowed("reschedule", match)
        d = parse_match_date(match_date)
        t = parse_match_time(match_time)
        saved = self._write(conn, match, match_date=d, match_time=t)
        logger.info("Rescheduled match %s to %s %s", match.id, d, t)
        return saved

    # ---------- internals ----------

    def _assert_allowed(self, operation: str, match: Match) -> None:
        allowed = _ALLOWED_FROM[operation]
        if match.status not in allowed:
            raise MatchTransitionError(
                f"Cannot {operation.replace('_', ' ')} for a {match.status.value} match"
            )

    def _write(self, conn: sqlite3.Connection, match: Match, **fields: Any) -> Match:
        validate_match(replace(match, **fields))
        saved = self._match_repo.update(conn, match.id, **fields)
        if saved is None:
            raise NotFound(f"Match not found: {match.id}")
        return saved
