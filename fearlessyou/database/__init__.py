"""
Persistence and data models for FearlessYou.
"""

from .connection import DatabaseManager, get_database_manager, close_database
from .models import ActiveChallenge, ChallengeProgress, DayState, Feedback, Feeling
from .store import (
    ProgressStore,
    MemoryProgressStore,
    FileProgressStore,
    MongoProgressStore,
    create_progress_store,
)

__all__ = [
    "DatabaseManager",
    "get_database_manager",
    "close_database",
    "ActiveChallenge",
    "ChallengeProgress",
    "DayState",
    "Feedback",
    "Feeling",
    "ProgressStore",
    "MemoryProgressStore",
    "FileProgressStore",
    "MongoProgressStore",
    "create_progress_store"
]
