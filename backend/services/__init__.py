"""
Service layer: entry submission, scoring/leaderboard, admin operations.
Services hold the rules; persistence is delegated to repositories.
"""
from .admin_service import AdminService
from .entry_service import EntryService
from .scoring_service import ScoringService

__all__ = [
    "AdminService",
    "EntryService",
    "ScoringService",
]
