"""
Scores and leaderboard. Scores are keyed by catalog player id; totals are
aggregated from each entry's stored picks.
"""
from __future__ import annotations

import sqlite3
from typing import Any

from backend.models import CatalogPlayer, LeaderboardRow, PlayerScore
from backend.persistence.repositories import ScoreRepository
from backend.scoring import build_player_score, player_total


class ScoringService:

    def __init__(self) -> None:
        self._score_repo = ScoreRepository()

    def record_score(
        self,
        conn: sqlite3.Connection,
        player_id: str,
        wildcard: Any = 0,
        divisional: Any = 0,
        conference: Any = 0,
        superbowl: Any = 0,
    ) -> PlayerScore:
        """Upsert: replaces all four rounds for the player, missing values stored as 0."""
        score = build_player_score(
            player_id,
            wildcard=wildcard,
            divisional=divisional,
            conference=conference,
            superbowl=superbowl,
        )
        return self._score_repo.upsert(conn, score)

    def get_score(self, conn: sqlite3.Connection, player_id: str) -> PlayerScore:
        return self._score_repo.get(conn, player_id) or PlayerScore(player_id=player_id)

    def list_scores(self, conn: sqlite3.Connection) -> list[PlayerScore]:
        return self._score_repo.list_all(conn)

    def score_sheet(
        self, conn: sqlite3.Connection, catalog: list[CatalogPlayer]
    ) -> list[dict[str, Any]]:
        """Every catalog player with its rounds (zeros when unscored), in catalog order."""
        scores = {s.player_id: s for s in self._score_repo.list_all(conn)}
        sheet = []
        for p in catalog:
            score = scores.get(p.player_id) or PlayerScore(player_id=p.player_id)
            row = score.to_dict()
            row.update({
                "playerName": p.name,
                "position": p.position,
                "team": p.team,
                "total": player_total(score),
            })
            sheet.append(row)
        return sheet

    def leaderboard(self, conn: sqlite3.Connection) -> list[LeaderboardRow]:
        """Entries by total desc; equal totals rank the earlier submission first."""
        return [
            LeaderboardRow(
                rank=i,
                entry_id=entry_id,
                entry_name=name,
                total_score=total,
                created_at=created_at,
            )
            for i, (entry_id, name, created_at, total) in enumerate(
                self._score_repo.entry_totals(conn), start=1
            )
        ]
