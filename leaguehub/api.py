"""
REST API for the league engine.
Thin wrappers around domain logic and persistence.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from leaguehub.auth import hash_password, issue_token, user_id_from_token, verify_password
from leaguehub.config import configure_logging, cors_origins
from leaguehub.errors import (
    CodeExhaustionError,
    ConflictError,
    LeagueHubError,
    NotFound,
    ValidationError,
)
from leaguehub.models import League, Match
from leaguehub.persistence import UserRepository, get_connection, init_db
from leaguehub.services.league_service import LeagueService
from leaguehub.services.match_service import MatchService

logger = logging.getLogger(__name__)


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def http_errors() -> Generator:
    """Map engine errors to HTTP status codes."""
    try:
        yield
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CodeExhaustionError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except LeagueHubError as e:
        logger.error("Unhandled engine error: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    init_db()
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="LeagueHub API",
    description="Leagues, teams, fixtures and standings",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

security = HTTPBearer(auto_error=False)


# ---------- Request models ----------


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: str
    password: str


class CreateLeagueRequest(BaseModel):
    name: str = Field(..., max_length=200)
    sport_type: str = Field(..., description="Cricket, Football or Badminton")


class RenameLeagueRequest(BaseModel):
    name: str = Field(..., max_length=200)


class CreateTeamRequest(BaseModel):
    name: str = Field(..., max_length=200)
    logo_url: str | None = None


class CreatePlayerRequest(BaseModel):
    name: str = Field(..., max_length=200)


class ScheduleMatchRequest(BaseModel):
    home_team_id: str
    away_team_id: str
    match_date: str = Field(..., description="YYYY-MM-DD")
    match_time: str = Field(..., description="HH:MM")


class RecordResultRequest(BaseModel):
    # Untyped so the service reports bad scores with its own messages
    home_score: Any = None
    away_score: Any = None


class RescheduleMatchRequest(BaseModel):
    match_date: str
    match_time: str


# ---------- Auth helpers ----------


def _get_current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str | None:
    """Return user_id from JWT or None if no/invalid token."""
    if credentials is None:
        return None
    return user_id_from_token(credentials.credentials)


def _require_user(user_id: str | None) -> str:
    if not user_id:
        raise HTTPException(status_code=401, detail="Login required")
    return user_id


def _require_admin(league: League, user_id: str | None) -> None:
    uid = _require_user(user_id)
    if league.admin_id != uid:
        raise HTTPException(status_code=403, detail="Only the league admin can change this league")


# ---------- Accounts ----------


@app.post("/signup")
def signup(req: SignupRequest) -> dict[str, Any]:
    """Create account. Passwords hashed, never stored plain."""
    with db_conn() as conn, http_errors():
        user_repo = UserRepository()
        if user_repo.get_by_email(conn, req.email):
            raise HTTPException(status_code=400, detail="Email already registered")
        user = user_repo.create(conn, req.email, hash_password(req.password))
        token = issue_token(user.id)
        return {"user_id": user.id, "email": user.email, "token": token}


@app.post("/login")
def login(req: LoginRequest) -> dict[str, Any]:
    """Returns JWT token."""
    with db_conn() as conn:
        user = UserRepository().get_by_email(conn, req.email)
        if user is None or not verify_password(req.password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid email or password")
        token = issue_token(user.id)
        return {"user_id": user.id, "email": user.email, "token": token}


# ---------- Leagues ----------


@app.post("/leagues")
def create_league(
    req: CreateLeagueRequest,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    """Create a league. Creator is admin; a share code is allocated."""
    uid = _require_user(caller_id)
    with db_conn() as conn, http_errors():
        league = LeagueService().create_league(conn, req.name, req.sport_type, uid)
        return league.to_dict()


@app.get("/leagues")
def list_my_leagues(caller_id: str | None = Depends(_get_current_user_id)) -> dict[str, Any]:
    """Dashboard: leagues administered by the caller, with team and match counts."""
    uid = _require_user(caller_id)
    with db_conn() as conn:
        summaries = LeagueService().list_admin_leagues(conn, uid)
        return {"leagues": [s.to_dict() for s in summaries]}


@app.get("/leagues/code/{code}")
def get_league_by_code(code: str) -> dict[str, Any]:
    """Public view: resolve a share code (any case) to the full league page."""
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        league = svc.get_league_by_code(conn, code)
        return svc.league_overview(conn, league).to_dict()


@app.get("/leagues/{league_id}")
def get_league(league_id: str) -> dict[str, Any]:
    """League page: teams with players, standings, upcoming and completed matches."""
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        league = svc.get_league(conn, league_id)
        return svc.league_overview(conn, league).to_dict()


@app.patch("/leagues/{league_id}")
def rename_league(
    league_id: str,
    req: RenameLeagueRequest,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        _require_admin(svc.get_league(conn, league_id), caller_id)
        return svc.rename_league(conn, league_id, req.name).to_dict()


@app.delete("/leagues/{league_id}")
def delete_league(
    league_id: str,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    """Delete a league with its teams, players and matches."""
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        _require_admin(svc.get_league(conn, league_id), caller_id)
        svc.delete_league(conn, league_id)
        return {"league_id": league_id, "deleted": True}


@app.get("/leagues/{league_id}/standings")
def get_league_standings(league_id: str) -> dict[str, Any]:
    """Standings rows in team order: played, wins, draws, losses, points."""
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        league = svc.get_league(conn, league_id)
        rows = svc.standings(conn, league)
        return {"league_id": league.id, "standings": [r.to_dict() for r in rows]}


# ---------- Teams & players ----------


@app.post("/leagues/{league_id}/teams")
def create_team(
    league_id: str,
    req: CreateTeamRequest,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        league = svc.get_league(conn, league_id)
        _require_admin(league, caller_id)
        return svc.add_team(conn, league, req.name, logo_url=req.logo_url).to_dict()


@app.delete("/teams/{team_id}")
def delete_team(
    team_id: str,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    """Delete a team with its players and matches."""
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        team = svc.get_team(conn, team_id)
        _require_admin(svc.get_league(conn, team.league_id), caller_id)
        svc.delete_team(conn, team_id)
        return {"team_id": team_id, "deleted": True}


@app.post("/teams/{team_id}/players")
def create_player(
    team_id: str,
    req: CreatePlayerRequest,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        team = svc.get_team(conn, team_id)
        _require_admin(svc.get_league(conn, team.league_id), caller_id)
        return svc.add_player(conn, team, req.name).to_dict()


@app.delete("/players/{player_id}")
def delete_player(
    player_id: str,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        player = svc.get_player(conn, player_id)
        team = svc.get_team(conn, player.team_id)
        _require_admin(svc.get_league(conn, team.league_id), caller_id)
        svc.delete_player(conn, player_id)
        return {"player_id": player_id, "deleted": True}


# ---------- Matches ----------


def _admin_match(conn, match_id: str, user_id: str | None) -> tuple[MatchService, Match]:
    """Load a match and check the caller administers its league."""
    match_svc = MatchService()
    match = match_svc.get_match(conn, match_id)
    _require_admin(LeagueService().get_league(conn, match.league_id), user_id)
    return match_svc, match


@app.post("/leagues/{league_id}/matches")
def schedule_match(
    league_id: str,
    req: ScheduleMatchRequest,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    """Schedule a fixture between two teams of this league."""
    with db_conn() as conn, http_errors():
        svc = LeagueService()
        league = svc.get_league(conn, league_id)
        _require_admin(league, caller_id)
        home = svc.get_team(conn, req.home_team_id)
        away = svc.get_team(conn, req.away_team_id)
        match = MatchService().schedule(conn, league, home, away, req.match_date, req.match_time)
        return match.to_dict()


@app.get("/matches/{match_id}")
def get_match(match_id: str) -> dict[str, Any]:
    with db_conn() as conn, http_errors():
        return MatchService().get_match(conn, match_id).to_dict()


@app.post("/matches/{match_id}/result")
def record_result(
    match_id: str,
    req: RecordResultRequest,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    """Record (or overwrite) the final score; the match becomes completed."""
    with db_conn() as conn, http_errors():
        match_svc, match = _admin_match(conn, match_id, caller_id)
        return match_svc.record_result(conn, match, req.home_score, req.away_score).to_dict()


@app.delete("/matches/{match_id}/result")
def clear_result(
    match_id: str,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    """Undo completion: back to scheduled, scores removed."""
    with db_conn() as conn, http_errors():
        match_svc, match = _admin_match(conn, match_id, caller_id)
        return match_svc.clear_result(conn, match).to_dict()


@app.post("/matches/{match_id}/cancel")
def cancel_match(
    match_id: str,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    with db_conn() as conn, http_errors():
        match_svc, match = _admin_match(conn, match_id, caller_id)
        return match_svc.cancel(conn, match).to_dict()


@app.patch("/matches/{match_id}")
def reschedule_match(
    match_id: str,
    req: RescheduleMatchRequest,
    caller_id: str | None = Depends(_get_current_user_id),
) -> dict[str, Any]:
    with db_conn() as conn, http_errors():
        match_svc, match = _admin_match(conn, match_id, caller_id)
        return match_svc.reschedule(conn, match, req.match_date, req.match_time).to_dict()
