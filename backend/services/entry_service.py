"""
Entry submission: lock check, field validation, catalog re-validation,
per-email quota and name disambiguation, atomic persistence.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any, Mapping, Sequence

from backend.catalog import catalog_index, require_catalog
from backend.config import PICKS_PER_ENTRY, entry_quota
from backend.config_store import ConfigStore, read_settings
from backend.errors import QuotaExceeded, SubmissionsClosed, ValidationError
from backend.models import CatalogPlayer, Entry
from backend.persistence.db import immediate_transaction
from backend.persistence.repositories import EntryRepository

logger = logging.getLogger(__name__)

_PICK_FIELDS = ("id", "name", "position", "team")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def disambiguated_name(entry_name: str, prior_count: int) -> str:
    """First entry keeps its name; the nth entry for an email becomes "name-n"."""
    if prior_count == 0:
        return entry_name
    return f"{entry_name}-{prior_count + 1}"


def _field(pick: Any, key: str) -> Any:
    if isinstance(pick, Mapping):
        return pick.get(key)
    return getattr(pick, key, None)


class EntryService:
    """
    Core submission logic. Config (settings, catalog) is read through the
    injected store; entries are written through EntryRepository.
    """

    def __init__(self, quota: int | None = None) -> None:
        self._entry_repo = EntryRepository()
        self._quota = quota

    @property
    def quota(self) -> int:
        return self._quota if self._quota is not None else entry_quota()

    def count_entries(self, conn: sqlite3.Connection, email: str) -> int:
        return self._entry_repo.count_by_email(conn, normalize_email(email))

    def resolve_picks(
        self, store: ConfigStore, players: Sequence[Any]
    ) -> list[CatalogPlayer]:
        """
        Check shape (14 picks, each with id/name/position/team) and resolve every
        id against the current catalog. Stored fields come from the catalog row.
        """
        if players is None or len(players) != PICKS_PER_ENTRY:
            count = 0 if players is None else len(players)
            raise ValidationError(f"players: exactly {PICKS_PER_ENTRY} players required (got {count})")
        for i, pick in enumerate(players):
            for key in _PICK_FIELDS:
                value = _field(pick, key)
                if value is None or not str(value).strip():
                    raise ValidationError(f"players[{i}].{key} is required")
        index = catalog_index(require_catalog(store))
        resolved: list[CatalogPlayer] = []
        seen: set[str] = set()
        for i, pick in enumerate(players):
            pid = str(_field(pick, "id")).strip()
            if pid in seen:
                raise ValidationError(f"players[{i}].id: {pid} picked more than once")
            seen.add(pid)
            player = index.get(pid)
            if player is None:
                raise ValidationError(f"players[{i}].id: unknown player {pid}")
            resolved.append(player)
        return resolved

    def submit_entry(
        self,
        conn: sqlite3.Connection,
        store: ConfigStore,
        entry_name: str,
        email: str,
        players: Sequence[Any],
    ) -> Entry:
        """
        Persist one entry with its 14 picks and return it.
        The quota count and the inserts share one BEGIN IMMEDIATE transaction,
        so concurrent submissions for an email cannot both pass the check.
        """
        if not read_settings(store).entries_open:
            raise SubmissionsClosed("Entries are closed")
        name = (entry_name or "").strip()
        if not name:
            raise ValidationError("entryName is required")
        addr = normalize_email(email)
        if not addr:
            raise ValidationError("email is required")
        picks = self.resolve_picks(store, players)

        with immediate_transaction(conn):
            prior = self._entry_repo.count_by_email(conn, addr)
            if prior >= self.quota:
                raise QuotaExceeded(f"Maximum of {self.quota} entries per email reached")
            entry = self._entry_repo.insert(conn, disambiguated_name(name, prior), addr, picks)
        logger.info("Entry %s submitted as %r (%d of %d for this email)", entry.id, entry.entry_name, prior + 1, self.quota)
        return entry
