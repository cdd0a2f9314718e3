"""
Round scoring for the survivor pool.
Admins enter whole-number points per player per playoff round; an entry's
total is the plain sum over its picks and rounds.
"""
from __future__ import annotations

from typing import Any

from backend.errors import ValidationError
from backend.models import PlayerScore, Round

ROUNDS: tuple[str, ...] = tuple(r.value for r in Round)


def player_total(score: PlayerScore | None) -> int:
    """All four rounds summed. No row means zero."""
    if score is None:
        return 0
    return score.wildcard + score.divisional + score.conference + score.superbowl


def _coerce_points(field: str, value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(f"{field} must be an integer")


def build_player_score(player_id: str, **rounds: Any) -> PlayerScore:
    """PlayerScore from loose input: missing rounds default to 0, unknown rounds rejected."""
    if not player_id or not str(player_id).strip():
        raise ValidationError("playerId is required")
    unknown = set(rounds) - set(ROUNDS)
    if unknown:
        raise ValidationError(f"Unknown round(s): {', '.join(sorted(unknown))}")
    values = {r: _coerce_points(r, rounds.get(r)) for r in ROUNDS}
    return PlayerScore(player_id=str(player_id).strip(), **values)
