"""
Admin operations: season reset, entry lock, paid/notes, playoff teams,
player pool (with catalog regeneration), bulk import and CSV export.
"""
from __future__ import annotations

import csv
import logging
import sqlite3
from datetime import datetime, timezone
from io import StringIO
from typing import Any, Mapping, Sequence

from backend.catalog import (
    generate_catalog,
    regenerate_catalog,
    render_catalog_csv,
    require_catalog,
    validate_pool,
)
from backend.config import KICKER_POSITION, PICKS_PER_ENTRY, PLAYOFF_TEAM_COUNT
from backend.config_store import ConfigStore, read_settings
from backend.errors import ConfigIncomplete, EntryNotFound, PlayerNotFound, ValidationError
from backend.models import CatalogPlayer, Entry, Settings
from backend.persistence.db import immediate_transaction
from backend.persistence.repositories import EntryRepository, ScoreRepository
from backend.services.entry_service import normalize_email

logger = logging.getLogger(__name__)

EXPORT_HEADER = ("Entry Name", "Email", "Paid", "Notes", "Created At")


def _pick_key(position: str, team: str, name: str) -> tuple[str, str, str]:
    return (position.strip().upper(), team.strip().upper(), " ".join(name.split()).lower())


def infer_kicker_team(name: str) -> str:
    """Kickers are named "{TEAM}K"; recover the team when an import leaves it blank."""
    name = name.strip()
    if len(name) > 1 and name.upper().endswith("K"):
        return name[:-1].upper()
    return ""


def _parse_created_at(raw: Any, label: str) -> datetime | None:
    if raw is None or raw == "":
        return None
    try:
        dt = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"{label}.createdAt is not an ISO timestamp: {raw!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


_PAID_WORDS = {"yes": True, "true": True, "no": False, "false": False}


def _parse_paid(raw: Any, label: str) -> bool:
    """Booleans, or the Yes/No the export writes (true/false also accepted)."""
    if isinstance(raw, bool):
        return raw
    if raw is None or raw == "":
        return False
    if isinstance(raw, str) and raw.strip().lower() in _PAID_WORDS:
        return _PAID_WORDS[raw.strip().lower()]
    raise ValidationError(f"{label}.paid must be true/false or Yes/No, got {raw!r}")


class AdminService:
    """Everything behind the admin token. Config files via the store, rows via repositories."""

    def __init__(self) -> None:
        self._entry_repo = EntryRepository()
        self._score_repo = ScoreRepository()

    # ---------- Settings ----------

    def get_settings(self, store: ConfigStore) -> Settings:
        return read_settings(store)

    def set_entries_open(self, store: ConfigStore, entries_open: bool) -> Settings:
        settings = read_settings(store)
        settings.entries_open = bool(entries_open)
        store.save_settings(settings.to_dict())
        logger.info("Entries %s", "opened" if settings.entries_open else "closed")
        return settings

    # ---------- Teams & pool ----------

    def get_playoff_teams(self, store: ConfigStore) -> list[str]:
        return store.load_teams() or []

    def set_playoff_teams(self, store: ConfigStore, teams: Sequence[Any]) -> list[str]:
        """
        Save exactly 14 unique abbreviations (upper-cased). Pool players of teams
        that dropped out are removed, then the catalog is regenerated if a pool exists.
        """
        if not isinstance(teams, (list, tuple)) or len(teams) != PLAYOFF_TEAM_COUNT:
            raise ValidationError(f"teams: exactly {PLAYOFF_TEAM_COUNT} teams required")
        cleaned: list[str] = []
        for i, t in enumerate(teams):
            abbr = str(t or "").strip().upper()
            if not abbr or not abbr.isalnum():
                raise ValidationError(f"teams[{i}] must be a letters/digits abbreviation")
            if abbr in cleaned:
                raise ValidationError(f"teams[{i}]: duplicate team {abbr}")
            cleaned.append(abbr)
        store.save_teams(cleaned)
        logger.info("Playoff teams set: %s", ", ".join(cleaned))

        pool = store.load_pool()
        if pool is not None:
            kept = set(cleaned)
            pruned = {
                pos: {team: players for team, players in by_team.items() if team in kept}
                for pos, by_team in pool.items()
            }
            if pruned != pool:
                logger.warning("Removed pool players for teams no longer in the playoffs")
                store.save_pool(pruned)
            regenerate_catalog(store)
        return cleaned

    def get_player_pool(self, store: ConfigStore) -> dict[str, Any]:
        return {"teams": store.load_teams() or [], "pool": store.load_pool() or {}}

    def set_player_pool(self, store: ConfigStore, pool: Any) -> list[CatalogPlayer]:
        """
        Validate against the playoff teams and build the catalog, then save both.
        Nothing is written if validation or generation fails. Returns the new catalog.
        """
        teams = store.load_teams()
        if not teams or len(teams) != PLAYOFF_TEAM_COUNT:
            raise ConfigIncomplete(f"Set the {PLAYOFF_TEAM_COUNT} playoff teams before the player pool")
        validate_pool(pool, teams)
        players = generate_catalog(teams, pool)
        text = render_catalog_csv(players)
        store.save_pool(pool)
        store.save_catalog(text)
        logger.info("Player pool saved; catalog regenerated: %d players", len(players))
        return players

    def generate_catalog(self, store: ConfigStore) -> list[CatalogPlayer]:
        return regenerate_catalog(store)

    # ---------- Entries ----------

    def list_entries(self, conn: sqlite3.Connection) -> list[Entry]:
        return self._entry_repo.list_all(conn, include_players=True)

    def update_entry(
        self,
        conn: sqlite3.Connection,
        entry_id: str,
        paid: bool | None = None,
        notes: str | None = None,
    ) -> Entry:
        updated = self._entry_repo.update_admin_fields(conn, entry_id, paid=paid, notes=notes)
        entry = self._entry_repo.get(conn, entry_id) if updated else None
        if entry is None:
            raise EntryNotFound(f"Entry not found: {entry_id}")
        return entry

    def reset_season(self, conn: sqlite3.Connection) -> None:
        """Delete every entry, pick and score."""
        with immediate_transaction(conn):
            self._entry_repo.delete_all(conn)
            self._score_repo.delete_all(conn)
        logger.warning("Season reset: entries and scores cleared")

    # ---------- Import / export ----------

    def _resolve_import_pick(
        self,
        index: dict[tuple[str, str, str], CatalogPlayer],
        pick: Mapping[str, Any],
        label: str,
    ) -> CatalogPlayer:
        name = str(pick.get("name") or "").strip()
        position = str(pick.get("position") or "").strip().upper()
        team = str(pick.get("team") or "").strip().upper()
        if position == KICKER_POSITION and not team:
            team = infer_kicker_team(name)
        player = index.get(_pick_key(position, team, name))
        if player is None:
            raise PlayerNotFound(f"{label}: no player {name!r} ({position}, {team or '?'}) in the player list")
        return player

    def import_entries(
        self, conn: sqlite3.Connection, store: ConfigStore, entries: Sequence[Mapping[str, Any]]
    ) -> list[Entry]:
        """
        Bulk-load entries exported elsewhere. Picks are matched by name + team +
        position against the catalog; any miss aborts the whole import.
        Names are kept verbatim; the lock and quota do not apply.
        """
        catalog = require_catalog(store)
        index = {_pick_key(p.position, p.team, p.name): p for p in catalog}
        prepared: list[tuple[str, str, list[CatalogPlayer], bool, str, datetime | None]] = []
        for i, raw in enumerate(entries):
            label = f"entries[{i}]"
            if not isinstance(raw, Mapping):
                raise ValidationError(f"{label} must be an object")
            name = str(raw.get("entryName") or "").strip()
            email = normalize_email(raw.get("email"))
            if not name:
                raise ValidationError(f"{label}.entryName is required")
            if not email:
                raise ValidationError(f"{label}.email is required")
            picks = raw.get("players")
            if not isinstance(picks, list) or not all(isinstance(p, Mapping) for p in picks):
                raise ValidationError(f"{label}.players must be a list of player objects")
            if len(picks) != PICKS_PER_ENTRY:
                raise ValidationError(f"{label}.players: exactly {PICKS_PER_ENTRY} players required")
            resolved = [
                self._resolve_import_pick(index, p, f"{label}.players[{j}]")
                for j, p in enumerate(picks)
            ]
            prepared.append((
                name, email, resolved,
                _parse_paid(raw.get("paid"), label),
                str(raw.get("notes") or ""),
                _parse_created_at(raw.get("createdAt"), label),
            ))

        created: list[Entry] = []
        with immediate_transaction(conn):
            for name, email, resolved, paid, notes, created_at in prepared:
                created.append(self._entry_repo.insert(
                    conn, name, email, resolved, created_at=created_at, paid=paid, notes=notes,
                ))
        logger.info("Imported %d entries", len(created))
        return created

    def export_entries_csv(self, conn: sqlite3.Connection) -> str:
        buf = StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for e in self._entry_repo.list_all(conn):
            writer.writerow((
                e.entry_name,
                e.email,
                "Yes" if e.paid else "No",
                e.notes,
                e.created_at.isoformat(),
            ))
        return buf.getvalue()
