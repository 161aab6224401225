"""Scoreboard: ранжированный leaderboard и reconcile с remote change feed."""

from .sync import (
    ConsistencyIssue,
    ConsistencyReport,
    LeaderboardConfig,
    ReconcileResult,
    ScoreboardSync,
)

__all__ = [
    "ScoreboardSync",
    "LeaderboardConfig",
    "ReconcileResult",
    "ConsistencyIssue",
    "ConsistencyReport",
]
