"""
SQLite schema for entries and scores.
Migration-friendly: each table created with IF NOT EXISTS.
"""
from __future__ import annotations


def entries_schema() -> str:
    """One row per submission. email stored lower-cased; paid/notes are admin-editable."""
    return """
    CREATE TABLE IF NOT EXISTS entries (
        id TEXT PRIMARY KEY,
        entry_name TEXT NOT NULL,
        email TEXT NOT NULL,
        paid INTEGER NOT NULL DEFAULT 0,
        notes TEXT NOT NULL DEFAULT '',
        created_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS ix_entries_email ON entries(email);
    CREATE INDEX IF NOT EXISTS ix_entries_created_at ON entries(created_at);
    """


def entry_players_schema() -> str:
    """Picks, copied from the catalog at submission time. slot keeps submission order."""
    return """
    CREATE TABLE IF NOT EXISTS entry_players (
        entry_id TEXT NOT NULL,
        slot INTEGER NOT NULL,
        player_id TEXT NOT NULL,
        player_name TEXT NOT NULL,
        position TEXT NOT NULL,
        team TEXT NOT NULL,
        PRIMARY KEY (entry_id, slot),
        FOREIGN KEY (entry_id) REFERENCES entries(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_entry_players_player_id ON entry_players(player_id);
    """


def player_scores_schema() -> str:
    """Per-round points. Keyed by catalog player id, not by entry."""
    return """
    CREATE TABLE IF NOT EXISTS player_scores (
        player_id TEXT PRIMARY KEY,
        wildcard INTEGER NOT NULL DEFAULT 0,
        divisional INTEGER NOT NULL DEFAULT 0,
        conference INTEGER NOT NULL DEFAULT 0,
        superbowl INTEGER NOT NULL DEFAULT 0,
        updated_at TEXT
    );
    """


def all_schema_sql() -> str:
    """Combine all schema DDL for a single execution. Order: entries, entry_players, player_scores."""
    return "\n".join([
        entries_schema(),
        entry_players_schema(),
        player_scores_schema(),
    ])
