"""
REST API for the playoff survivor pool.
Thin wrappers around the services; config files come from an injectable store.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field

from backend.auth import check_admin_password, create_access_token, is_admin_token
from backend.catalog import load_catalog
from backend.config import cors_origins, data_dir
from backend.config_store import ConfigStore, FileConfigStore
from backend.errors import AuthError, PoolError
from backend.persistence import get_connection, init_db
from backend.persistence.db import get_db_path
from backend.services import AdminService, EntryService, ScoringService

logger = logging.getLogger("uvicorn.error")


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def get_config_store() -> ConfigStore:
    """Dependency: file-backed config in DATA_DIR. Tests override this."""
    return FileConfigStore(data_dir())


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_db(db_path=get_db_path())
    logger.info("Database ready at %s", get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Playoff Survivor Pool API",
    description="Entries, scores and leaderboard for a playoff fantasy survivor pool",
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


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


security = HTTPBearer(auto_error=False)


def require_admin(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> None:
    """Gate for /api/admin/*: a bearer token issued by /admin-login."""
    if credentials is None:
        raise AuthError("Admin only")
    if not is_admin_token(credentials.credentials):
        raise AuthError("Invalid token")


# ---------- Request models ----------


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AdminLoginRequest(BaseModel):
    password: str


class PickIn(BaseModel):
    id: str
    name: str
    position: str
    team: str


class SubmitEntryRequest(_CamelModel):
    entry_name: str = Field(..., alias="entryName")
    email: str
    players: list[PickIn]


class PlayoffTeamsRequest(BaseModel):
    teams: list[str]


class PlayerPoolRequest(BaseModel):
    pool: dict[str, Any] | None = None


class ScoreRequest(_CamelModel):
    player_id: str = Field(..., alias="playerId")
    wildcard: int = 0
    divisional: int = 0
    conference: int = 0
    superbowl: int = 0


class EntryStatusRequest(_CamelModel):
    entries_open: bool = Field(..., alias="entriesOpen")


class EntryAdminUpdateRequest(BaseModel):
    paid: bool | None = None
    notes: str | None = None


class ImportEntriesRequest(BaseModel):
    entries: list[dict[str, Any]]


# ---------- Public endpoints ----------


@app.get("/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


@app.post("/admin-login")
def admin_login(req: AdminLoginRequest) -> dict[str, Any]:
    """Exchange the admin password for a bearer token."""
    if not check_admin_password(req.password):
        raise HTTPException(status_code=401, detail="Invalid password")
    return {"token": create_access_token()}


@app.get("/api/players")
def get_players(store: ConfigStore = Depends(get_config_store)) -> list[dict[str, Any]]:
    """The generated catalog; empty until the admin has generated it."""
    players = load_catalog(store) or []
    return [p.to_dict() for p in players]


@app.post("/api/entries")
def submit_entry(
    req: SubmitEntryRequest,
    store: ConfigStore = Depends(get_config_store),
) -> dict[str, Any]:
    with db_conn() as conn:
        entry = EntryService().submit_entry(
            conn, store, req.entry_name, req.email, [p.model_dump() for p in req.players]
        )
    return {"success": True, "entryId": entry.id, "entryName": entry.entry_name}


@app.get("/api/entries/count")
def count_entries(email: str = Query(..., min_length=1)) -> dict[str, Any]:
    """Clients use limitReached to send the user to the payment flow."""
    svc = EntryService()
    with db_conn() as conn:
        count = svc.count_entries(conn, email)
    return {
        "email": email.strip().lower(),
        "count": count,
        "limit": svc.quota,
        "limitReached": count >= svc.quota,
    }


@app.get("/api/leaderboard")
def get_leaderboard() -> dict[str, Any]:
    with db_conn() as conn:
        rows = ScoringService().leaderboard(conn)
    return {"leaderboard": [r.to_dict() for r in rows]}


@app.get("/api/entry-status")
def get_entry_status(store: ConfigStore = Depends(get_config_store)) -> dict[str, Any]:
    return AdminService().get_settings(store).to_dict()


# ---------- Admin endpoints ----------


@app.get("/api/admin/playoff-teams", dependencies=[Depends(require_admin)])
def get_playoff_teams(store: ConfigStore = Depends(get_config_store)) -> dict[str, Any]:
    return {"teams": AdminService().get_playoff_teams(store)}


@app.post("/api/admin/playoff-teams", dependencies=[Depends(require_admin)])
def set_playoff_teams(
    req: PlayoffTeamsRequest,
    store: ConfigStore = Depends(get_config_store),
) -> dict[str, Any]:
    teams = AdminService().set_playoff_teams(store, req.teams)
    return {"success": True, "teams": teams}


@app.get("/api/admin/player-pool", dependencies=[Depends(require_admin)])
def get_player_pool(store: ConfigStore = Depends(get_config_store)) -> dict[str, Any]:
    return AdminService().get_player_pool(store)


@app.post("/api/admin/player-pool", dependencies=[Depends(require_admin)])
def set_player_pool(
    req: PlayerPoolRequest,
    store: ConfigStore = Depends(get_config_store),
) -> dict[str, Any]:
    players = AdminService().set_player_pool(store, req.pool)
    return {"success": True, "count": len(players)}


@app.post("/api/admin/generate-players-csv", dependencies=[Depends(require_admin)])
def generate_players_csv(store: ConfigStore = Depends(get_config_store)) -> dict[str, Any]:
    players = AdminService().generate_catalog(store)
    return {"success": True, "count": len(players)}


@app.get("/api/admin/scores", dependencies=[Depends(require_admin)])
def get_scores(store: ConfigStore = Depends(get_config_store)) -> dict[str, Any]:
    """Score sheet over the catalog; falls back to stored rows when there is no catalog."""
    svc = ScoringService()
    catalog = load_catalog(store)
    with db_conn() as conn:
        if catalog:
            return {"scores": svc.score_sheet(conn, catalog)}
        return {"scores": [s.to_dict() for s in svc.list_scores(conn)]}


@app.post("/api/admin/scores", dependencies=[Depends(require_admin)])
def record_score(req: ScoreRequest) -> dict[str, Any]:
    with db_conn() as conn:
        score = ScoringService().record_score(
            conn, req.player_id,
            wildcard=req.wildcard,
            divisional=req.divisional,
            conference=req.conference,
            superbowl=req.superbowl,
        )
    return {"success": True, "score": score.to_dict()}


@app.post("/api/admin/entry-status", dependencies=[Depends(require_admin)])
def set_entry_status(
    req: EntryStatusRequest,
    store: ConfigStore = Depends(get_config_store),
) -> dict[str, Any]:
    return AdminService().set_entries_open(store, req.entries_open).to_dict()


@app.get("/api/admin/entries", dependencies=[Depends(require_admin)])
def list_entries() -> dict[str, Any]:
    with db_conn() as conn:
        entries = AdminService().list_entries(conn)
    return {"entries": [e.to_dict(include_players=True) for e in entries]}


@app.patch("/api/admin/entries/{entry_id}", dependencies=[Depends(require_admin)])
def update_entry(entry_id: str, req: EntryAdminUpdateRequest) -> dict[str, Any]:
    with db_conn() as conn:
        entry = AdminService().update_entry(conn, entry_id, paid=req.paid, notes=req.notes)
    return entry.to_dict()


@app.post("/api/admin/reset", dependencies=[Depends(require_admin)])
def reset_season() -> dict[str, Any]:
    with db_conn() as conn:
        AdminService().reset_season(conn)
    return {"success": True}


@app.post("/api/admin/import", dependencies=[Depends(require_admin)])
def import_entries(
    req: ImportEntriesRequest,
    store: ConfigStore = Depends(get_config_store),
) -> dict[str, Any]:
    with db_conn() as conn:
        created = AdminService().import_entries(conn, store, req.entries)
    return {"success": True, "imported": len(created)}


@app.get("/api/admin/export", dependencies=[Depends(require_admin)])
def export_entries() -> Response:
    with db_conn() as conn:
        body = AdminService().export_entries_csv(conn)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="entries.csv"'},
    )
