"""
Data models for the survivor pool backend.
Domain objects only — no persistence or API logic.

Entries hold denormalized copies of catalog players so that scoring survives
catalog regeneration.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


# ---------- Scoring rounds ----------
class Round(str, Enum):
    """Playoff scoring periods, in play order."""
    WILDCARD = "wildcard"
    DIVISIONAL = "divisional"
    CONFERENCE = "conference"
    SUPERBOWL = "superbowl"


# ---------- Pool / catalog ----------
@dataclass(frozen=True)
class PoolPlayer:
    """A candidate player as configured by the admin (position, team, name)."""
    name: str
    position: str
    team: str


@dataclass(frozen=True)
class CatalogPlayer:
    """One row of the generated players.csv."""
    player_id: str
    name: str
    position: str
    team: str

    def to_dict(self) -> dict[str, Any]:
        # Keys mirror the CSV header; clients read the catalog in this shape.
        return {
            "PlayerID": self.player_id,
            "PlayerName": self.name,
            "Position": self.position,
            "TeamID": self.team,
        }


# ---------- Settings ----------
@dataclass
class Settings:
    entries_open: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {"entriesOpen": self.entries_open}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Settings":
        if not data:
            return cls()
        return cls(entries_open=bool(data.get("entriesOpen", True)))


# ---------- Entry ----------
@dataclass
class EntryPlayer:
    """One pick. Copied from the catalog at submission time, not a live reference."""
    entry_id: str
    player_id: str
    player_name: str
    position: str
    team: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "position": self.position,
            "team": self.team,
        }


@dataclass
class Entry:
    """
    A participant's submission: 14 picks under one display name.
    Only paid/notes change after creation (admin edits).
    """
    id: str
    entry_name: str
    email: str
    created_at: datetime
    paid: bool = False
    notes: str = ""
    players: list[EntryPlayer] = field(default_factory=list)

    def to_dict(self, include_players: bool = False) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "entryName": self.entry_name,
            "email": self.email,
            "paid": self.paid,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat(),
        }
        if include_players:
            d["players"] = [p.to_dict() for p in self.players]
        return d


# ---------- Scores ----------
@dataclass
class PlayerScore:
    """Per-round points for one player. A player with no row scores zero everywhere."""
    player_id: str
    wildcard: int = 0
    divisional: int = 0
    conference: int = 0
    superbowl: int = 0

    def round_points(self) -> dict[str, int]:
        return {
            Round.WILDCARD.value: self.wildcard,
            Round.DIVISIONAL.value: self.divisional,
            Round.CONFERENCE.value: self.conference,
            Round.SUPERBOWL.value: self.superbowl,
        }

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"playerId": self.player_id}
        d.update(self.round_points())
        return d


@dataclass
class LeaderboardRow:
    rank: int
    entry_id: str
    entry_name: str
    total_score: int
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "entryId": self.entry_id,
            "entryName": self.entry_name,
            "totalScore": self.total_score,
            "createdAt": self.created_at.isoformat(),
        }
