"""
Process configuration from environment variables.
Pool rules (team count, picks per entry, rounds) are module constants.
"""
from __future__ import annotations

import os
from pathlib import Path

# ---------- Pool rules ----------
PLAYOFF_TEAM_COUNT = 14
PICKS_PER_ENTRY = 14
DEFAULT_ENTRY_QUOTA = 4
POOL_POSITIONS = ("QB", "RB", "WR", "TE")
KICKER_POSITION = "K"


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def data_dir() -> Path:
    """Directory for config files, the catalog and the database (DATA_DIR, default ./data)."""
    raw = os.environ.get("DATA_DIR", "").strip()
    return Path(raw) if raw else _project_root() / "data"


def entry_quota() -> int:
    """Max entries per email (ENTRY_QUOTA). Invalid values fall back to the default."""
    raw = os.environ.get("ENTRY_QUOTA", "").strip()
    if not raw:
        return DEFAULT_ENTRY_QUOTA
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_ENTRY_QUOTA
    return value if value > 0 else DEFAULT_ENTRY_QUOTA


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    return [o.strip() for o in raw.split(",") if o.strip()]
