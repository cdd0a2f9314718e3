"""
Player catalog: the flat, authoritative list of draftable players.

Derived from the playoff teams and the admin-curated pool:
QB, RB, WR, TE straight from the pool, then one synthesized kicker per team.
Generation is pure; identical teams + pool give an identical players.csv.
"""
from __future__ import annotations

import csv
import logging
import re
from io import StringIO
from typing import Any

from backend.config import KICKER_POSITION, PLAYOFF_TEAM_COUNT, POOL_POSITIONS
from backend.config_store import ConfigStore
from backend.errors import ConfigIncomplete, ValidationError
from backend.models import CatalogPlayer, PoolPlayer

logger = logging.getLogger(__name__)

CATALOG_HEADER = ("PlayerID", "PlayerName", "Position", "TeamID")

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
# The unquoted CSV writer cannot emit these
_UNWRITABLE = ('"', "\n", "\r")


def sanitize_name(name: str) -> str:
    """Strip everything but ASCII letters and digits ("A.J. Brown" -> "AJBrown")."""
    return _NON_ALNUM.sub("", name)


def make_player_id(position: str, team: str, name: str) -> str:
    return f"{position}_{team}_{sanitize_name(name)}"


def kicker_name(team: str) -> str:
    return f"{team}K"


# ---------- Pool ----------


def validate_pool(pool: Any, teams: list[str]) -> None:
    """
    Raise ValidationError unless pool is {position: {team: [{"name": ...}, ...]}}
    with known positions and playoff teams only. Names must be non-blank, keep at
    least one letter or digit, and hold no comma, double quote or line break.
    Every team listed under QB has exactly one QB.
    """
    if not isinstance(pool, dict) or not isinstance(pool.get("QB"), dict):
        raise ValidationError("Invalid player pool")
    team_set = set(teams)
    for pos, by_team in pool.items():
        if pos not in POOL_POSITIONS:
            raise ValidationError(f"Unknown position '{pos}'. Must be one of: {', '.join(POOL_POSITIONS)}")
        if not isinstance(by_team, dict):
            raise ValidationError(f"pool.{pos} must map team to a list of players")
        for team, players in by_team.items():
            if team not in team_set:
                raise ValidationError(f"Team {team} ({pos}) is not a playoff team")
            if not isinstance(players, list):
                raise ValidationError(f"pool.{pos}.{team} must be a list")
            for p in players:
                name = p.get("name") if isinstance(p, dict) else None
                if not isinstance(name, str) or not name.strip():
                    raise ValidationError(f"pool.{pos}.{team}: every player needs a name")
                if "," in name:
                    raise ValidationError(f"Player name may not contain a comma: {name!r}")
                if any(c in name for c in _UNWRITABLE):
                    raise ValidationError(f"Player name may not contain quotes or line breaks: {name!r}")
                if not sanitize_name(name):
                    raise ValidationError(f"Player name has no letters or digits: {name!r}")
            if pos == "QB" and len(players) != 1:
                raise ValidationError(f"Team {team} must have exactly 1 QB")


def iter_pool(pool: dict[str, Any]) -> list[PoolPlayer]:
    """Flatten the pool in catalog order: positions QB/RB/WR/TE, teams and players in file order."""
    out: list[PoolPlayer] = []
    for pos in POOL_POSITIONS:
        by_team = pool.get(pos) or {}
        for team, players in by_team.items():
            for p in players:
                out.append(PoolPlayer(name=p["name"].strip(), position=pos, team=team))
    return out


# ---------- Generation ----------


def generate_catalog(teams: list[str] | None, pool: dict[str, Any] | None) -> list[CatalogPlayer]:
    """Build the catalog. ConfigIncomplete if either input is missing or there are not 14 teams."""
    if teams is None or pool is None:
        raise ConfigIncomplete("Missing playoff teams or player pool")
    if len(teams) != PLAYOFF_TEAM_COUNT:
        raise ConfigIncomplete(
            f"Exactly {PLAYOFF_TEAM_COUNT} playoff teams required (have {len(teams)})"
        )
    players = [
        CatalogPlayer(
            player_id=make_player_id(p.position, p.team, p.name),
            name=p.name,
            position=p.position,
            team=p.team,
        )
        for p in iter_pool(pool)
    ]
    for team in teams:
        name = kicker_name(team)
        players.append(CatalogPlayer(
            player_id=make_player_id(KICKER_POSITION, team, name),
            name=name,
            position=KICKER_POSITION,
            team=team,
        ))
    seen: set[str] = set()
    for p in players:
        if p.player_id in seen:
            raise ValidationError(f"Duplicate player id {p.player_id}; player names must be unique per team and position")
        seen.add(p.player_id)
    return players


def render_catalog_csv(players: list[CatalogPlayer]) -> str:
    """Unquoted CSV; validate_pool keeps commas, quotes and line breaks out of names."""
    buf = StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_NONE, lineterminator="\n")
    writer.writerow(CATALOG_HEADER)
    try:
        for p in players:
            writer.writerow((p.player_id, p.name, p.position, p.team))
    except csv.Error as e:
        raise ValidationError(f"Catalog value cannot be written unquoted: {e}") from e
    return buf.getvalue()


def parse_catalog_csv(text: str) -> list[CatalogPlayer]:
    reader = csv.reader(StringIO(text))
    rows = [row for row in reader if row and any(c.strip() for c in row)]
    if not rows:
        return []
    header = tuple(h.strip() for h in rows[0])
    if header != CATALOG_HEADER:
        raise ConfigIncomplete(f"players.csv has unexpected header: {','.join(header)}")
    return [
        CatalogPlayer(
            player_id=r[0].strip(),
            name=r[1].strip(),
            position=r[2].strip(),
            team=r[3].strip(),
        )
        for r in rows[1:]
    ]


# ---------- Store helpers ----------


def load_catalog(store: ConfigStore) -> list[CatalogPlayer] | None:
    """Current catalog, or None if it has never been generated."""
    text = store.load_catalog()
    if text is None:
        return None
    return parse_catalog_csv(text)


def require_catalog(store: ConfigStore) -> list[CatalogPlayer]:
    players = load_catalog(store)
    if not players:
        raise ConfigIncomplete("Player list has not been generated yet")
    return players


def catalog_index(players: list[CatalogPlayer]) -> dict[str, CatalogPlayer]:
    return {p.player_id: p for p in players}


def regenerate_catalog(store: ConfigStore) -> list[CatalogPlayer]:
    """Regenerate players.csv from the stored teams and pool. Run after every teams/pool change."""
    players = generate_catalog(store.load_teams(), store.load_pool())
    store.save_catalog(render_catalog_csv(players))
    logger.info("Regenerated player catalog: %d players", len(players))
    return players
