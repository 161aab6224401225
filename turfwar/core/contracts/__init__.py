"""
Contract Validation Module

Валидация JSON контрактов на границах с коллабораторами.
"""

from .validators import (
    ContractValidator,
    GameSnapshotValidator,
    LeaderboardFeedValidator,
    SchemaLoader,
    validate_game_snapshot,
    validate_leaderboard_feed,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "GameSnapshotValidator",
    "LeaderboardFeedValidator",
    # Functions
    "validate_game_snapshot",
    "validate_leaderboard_feed",
]
