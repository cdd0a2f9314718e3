"""
Shared fixtures: a temporary SQLite DB and an in-memory config store
holding 14 playoff teams, a small pool and the generated catalog.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from backend.catalog import regenerate_catalog
from backend.config_store import MemoryConfigStore
from backend.persistence.db import get_connection, init_db, set_db_path

TEAMS = ["BUF", "KC", "BAL", "HOU", "PIT", "LAC", "DEN", "PHI", "DET", "LAR", "TB", "MIN", "WAS", "GB"]

QB_NAMES = {
    "BUF": "Josh Allen", "KC": "Patrick Mahomes", "BAL": "Lamar Jackson", "HOU": "C.J. Stroud",
    "PIT": "Russell Wilson", "LAC": "Justin Herbert", "DEN": "Bo Nix", "PHI": "Jalen Hurts",
    "DET": "Jared Goff", "LAR": "Matthew Stafford", "TB": "Baker Mayfield", "MIN": "Sam Darnold",
    "WAS": "Jayden Daniels", "GB": "Jordan Love",
}


def sample_pool() -> dict:
    return {
        "QB": {team: [{"name": name}] for team, name in QB_NAMES.items()},
        "RB": {
            "BUF": [{"name": "James Cook"}],
            "BAL": [{"name": "Derrick Henry"}, {"name": "Justice Hill"}],
            "DET": [{"name": "Jahmyr Gibbs"}, {"name": "David Montgomery"}],
        },
        "WR": {
            "PHI": [{"name": "A.J. Brown"}, {"name": "DeVonta Smith"}],
            "MIN": [{"name": "Justin Jefferson"}],
        },
        "TE": {
            "KC": [{"name": "Travis Kelce"}],
            "BAL": [{"name": "Mark Andrews"}],
        },
    }


def qb_picks(store) -> list[dict]:
    """14 valid picks (the QBs) in the API payload shape."""
    from backend.catalog import load_catalog
    return [
        {"id": p.player_id, "name": p.name, "position": p.position, "team": p.team}
        for p in load_catalog(store)
        if p.position == "QB"
    ]


@pytest.fixture
def store():
    s = MemoryConfigStore()
    s.save_teams(list(TEAMS))
    s.save_pool(sample_pool())
    regenerate_catalog(s)
    return s


@pytest.fixture
def picks(store):
    return qb_picks(store)


@pytest.fixture
def db_conn(tmp_path):
    """Temporary DB with schema."""
    db_path = tmp_path / "entries_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()
