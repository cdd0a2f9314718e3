#!/usr/bin/env python3
"""
Demo season: configure teams + pool → generate catalog → submit entries →
record scores → print leaderboard and the admin CSV export.
Run from project root: python3 scripts/demo_season.py [data_dir]
"""
from __future__ import annotations

import argparse
import logging
import sys
import tempfile
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from backend.catalog import load_catalog
from backend.config_store import FileConfigStore
from backend.persistence import get_connection, init_db
from backend.persistence.db import set_db_path
from backend.services import AdminService, EntryService, ScoringService

TEAMS = ["BUF", "KC", "BAL", "HOU", "PIT", "LAC", "DEN", "PHI", "DET", "LAR", "TB", "MIN", "WAS", "GB"]


def _demo_pool() -> dict:
    return {
        "QB": {team: [{"name": f"{team} Quarterback"}] for team in TEAMS},
        "RB": {team: [{"name": f"{team} Runner"}] for team in TEAMS[:7]},
        "WR": {team: [{"name": f"{team} Receiver"}] for team in TEAMS[7:]},
        "TE": {"KC": [{"name": "Travis Kelce"}]},
    }


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("data_dir", nargs="?", help="Directory for config files and DB (default: temp dir)")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    data_dir = Path(args.data_dir) if args.data_dir else Path(tempfile.mkdtemp(prefix="survivor-pool-"))
    store = FileConfigStore(data_dir)
    db_path = data_dir / "entries.db"
    set_db_path(db_path)
    init_db(db_path=db_path)

    admin = AdminService()
    admin.set_playoff_teams(store, TEAMS)
    catalog = admin.set_player_pool(store, _demo_pool())
    print(f"1. Catalog: {len(catalog)} players -> {data_dir / 'players.csv'}")

    conn = get_connection()
    try:
        entries = EntryService()
        by_pos = {pos: [p for p in load_catalog(store) if p.position == pos] for pos in ("QB", "RB", "WR", "K")}
        lineups = {
            "Quarterback Club": by_pos["QB"],
            "Skill Players": by_pos["RB"] + by_pos["WR"],
            "Boot Camp": by_pos["K"],
        }
        for name, players in lineups.items():
            picks = [{"id": p.player_id, "name": p.name, "position": p.position, "team": p.team} for p in players]
            entry = entries.submit_entry(conn, store, name, "demo@example.com", picks)
            print(f"2. Submitted {entry.entry_name!r} ({entry.id})")

        scoring = ScoringService()
        for i, p in enumerate(catalog):
            scoring.record_score(conn, p.player_id, wildcard=i % 5, divisional=(i * 3) % 7)
        print("3. Scores recorded")

        print("4. Leaderboard:")
        for row in scoring.leaderboard(conn):
            print(f"   {row.rank}. {row.entry_name:<20} {row.total_score:>4}")

        print("5. Export:")
        print(admin.export_entries_csv(conn))
    finally:
        conn.close()


if __name__ == "__main__":
    main()
