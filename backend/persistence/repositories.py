"""
Repository interfaces for entries and scores.
No business logic — only read/write operations.

Methods that write several rows (entry + picks, bulk deletes) do not commit;
the calling service owns the transaction. Single-row admin edits commit.
"""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone

from backend.models import CatalogPlayer, Entry, EntryPlayer, PlayerScore


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_entry(r: sqlite3.Row) -> Entry:
    return Entry(
        id=r["id"],
        entry_name=r["entry_name"],
        email=r["email"],
        paid=bool(r["paid"]),
        notes=r["notes"] or "",
        created_at=_parse_datetime(r["created_at"]),
    )


# ---------- EntryRepository ----------


class EntryRepository:
    """CRUD for entries and entry_players."""

    def insert(
        self,
        conn: sqlite3.Connection,
        entry_name: str,
        email: str,
        picks: list[CatalogPlayer],
        id: str | None = None,
        created_at: datetime | None = None,
        paid: bool = False,
        notes: str = "",
    ) -> Entry:
        """Insert one entry and its picks. Caller commits."""
        eid = id or str(uuid.uuid4())
        created = created_at.isoformat() if created_at else _utcnow_iso()
        conn.execute(
            "INSERT INTO entries (id, entry_name, email, paid, notes, created_at) VALUES (?, ?, ?, ?, ?, ?)",
            (eid, entry_name, email, 1 if paid else 0, notes, created),
        )
        players = [
            self.add_player(conn, eid, slot, p)
            for slot, p in enumerate(picks, start=1)
        ]
        return Entry(
            id=eid, entry_name=entry_name, email=email, paid=paid, notes=notes,
            created_at=_parse_datetime(created), players=players,
        )

    def add_player(
        self, conn: sqlite3.Connection, entry_id: str, slot: int, player: CatalogPlayer
    ) -> EntryPlayer:
        conn.execute(
            "INSERT INTO entry_players (entry_id, slot, player_id, player_name, position, team) VALUES (?, ?, ?, ?, ?, ?)",
            (entry_id, slot, player.player_id, player.name, player.position, player.team),
        )
        return EntryPlayer(
            entry_id=entry_id, player_id=player.player_id, player_name=player.name,
            position=player.position, team=player.team,
        )

    def count_by_email(self, conn: sqlite3.Connection, email: str) -> int:
        row = conn.execute("SELECT COUNT(*) FROM entries WHERE email = ?", (email,)).fetchone()
        return int(row[0])

    def count_all(self, conn: sqlite3.Connection) -> tuple[int, int]:
        """(entries, entry_players) row counts."""
        entries = conn.execute("SELECT COUNT(*) FROM entries").fetchone()[0]
        picks = conn.execute("SELECT COUNT(*) FROM entry_players").fetchone()[0]
        return int(entries), int(picks)

    def get(self, conn: sqlite3.Connection, entry_id: str) -> Entry | None:
        row = conn.execute(
            "SELECT id, entry_name, email, paid, notes, created_at FROM entries WHERE id = ?",
            (entry_id,),
        ).fetchone()
        if row is None:
            return None
        entry = _row_to_entry(row)
        entry.players = self.get_players(conn, entry_id)
        return entry

    def get_players(self, conn: sqlite3.Connection, entry_id: str) -> list[EntryPlayer]:
        rows = conn.execute(
            "SELECT entry_id, player_id, player_name, position, team FROM entry_players WHERE entry_id = ? ORDER BY slot",
            (entry_id,),
        ).fetchall()
        return [
            EntryPlayer(
                entry_id=r["entry_id"], player_id=r["player_id"], player_name=r["player_name"],
                position=r["position"], team=r["team"],
            )
            for r in rows
        ]

    def list_all(self, conn: sqlite3.Connection, include_players: bool = False) -> list[Entry]:
        """All entries, oldest first."""
        rows = conn.execute(
            "SELECT id, entry_name, email, paid, notes, created_at FROM entries ORDER BY created_at, rowid"
        ).fetchall()
        entries = [_row_to_entry(r) for r in rows]
        if include_players:
            for e in entries:
                e.players = self.get_players(conn, e.id)
        return entries

    def update_admin_fields(
        self,
        conn: sqlite3.Connection,
        entry_id: str,
        paid: bool | None = None,
        notes: str | None = None,
    ) -> bool:
        """Set paid and/or notes. Returns False if the entry does not exist."""
        sets: list[str] = []
        args: list = []
        if paid is not None:
            sets.append("paid = ?")
            args.append(1 if paid else 0)
        if notes is not None:
            sets.append("notes = ?")
            args.append(notes)
        if not sets:
            return self.get(conn, entry_id) is not None
        args.append(entry_id)
        cur = conn.execute(f"UPDATE entries SET {', '.join(sets)} WHERE id = ?", args)
        conn.commit()
        return cur.rowcount > 0

    def delete_all(self, conn: sqlite3.Connection) -> None:
        """Caller commits."""
        conn.execute("DELETE FROM entry_players")
        conn.execute("DELETE FROM entries")


# ---------- ScoreRepository ----------


class ScoreRepository:
    """player_scores plus the leaderboard aggregate."""

    def upsert(self, conn: sqlite3.Connection, score: PlayerScore) -> PlayerScore:
        """Insert or replace all four round values. Never accumulates."""
        conn.execute(
            """
            INSERT INTO player_scores (player_id, wildcard, divisional, conference, superbowl, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(player_id) DO UPDATE SET
                wildcard = excluded.wildcard,
                divisional = excluded.divisional,
                conference = excluded.conference,
                superbowl = excluded.superbowl,
                updated_at = excluded.updated_at
            """,
            (
                score.player_id, score.wildcard, score.divisional,
                score.conference, score.superbowl, _utcnow_iso(),
            ),
        )
        conn.commit()
        return score

    def get(self, conn: sqlite3.Connection, player_id: str) -> PlayerScore | None:
        row = conn.execute(
            "SELECT player_id, wildcard, divisional, conference, superbowl FROM player_scores WHERE player_id = ?",
            (player_id,),
        ).fetchone()
        if row is None:
            return None
        return PlayerScore(
            player_id=row["player_id"], wildcard=row["wildcard"], divisional=row["divisional"],
            conference=row["conference"], superbowl=row["superbowl"],
        )

    def list_all(self, conn: sqlite3.Connection) -> list[PlayerScore]:
        rows = conn.execute(
            "SELECT player_id, wildcard, divisional, conference, superbowl FROM player_scores ORDER BY player_id"
        ).fetchall()
        return [
            PlayerScore(
                player_id=r["player_id"], wildcard=r["wildcard"], divisional=r["divisional"],
                conference=r["conference"], superbowl=r["superbowl"],
            )
            for r in rows
        ]

    def delete_all(self, conn: sqlite3.Connection) -> None:
        """Caller commits."""
        conn.execute("DELETE FROM player_scores")

    def entry_totals(self, conn: sqlite3.Connection) -> list[tuple[str, str, datetime, int]]:
        """
        (entry_id, entry_name, created_at, total) for every entry, best first.
        Missing score rows count as zero; ties go to the earlier submission.
        """
        rows = conn.execute(
            """
            SELECT e.id, e.entry_name, e.created_at,
                   COALESCE(SUM(
                       COALESCE(s.wildcard, 0) + COALESCE(s.divisional, 0)
                       + COALESCE(s.conference, 0) + COALESCE(s.superbowl, 0)
                   ), 0) AS total
            FROM entries e
            LEFT JOIN entry_players ep ON ep.entry_id = e.id
            LEFT JOIN player_scores s ON s.player_id = ep.player_id
            GROUP BY e.id
            ORDER BY total DESC, e.created_at ASC, e.rowid ASC
            """
        ).fetchall()
        return [
            (r["id"], r["entry_name"], _parse_datetime(r["created_at"]), int(r["total"]))
            for r in rows
        ]
