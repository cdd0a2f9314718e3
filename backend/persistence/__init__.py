"""
Persistence layer for entries and scores.
No business logic — only read/write interfaces.
"""
from .db import get_connection, immediate_transaction, init_db
from .repositories import (
    EntryRepository,
    ScoreRepository,
)

__all__ = [
    "get_connection",
    "immediate_transaction",
    "init_db",
    "EntryRepository",
    "ScoreRepository",
]
