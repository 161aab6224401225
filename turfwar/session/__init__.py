"""Session: GameSession и persistence-коллабораторы."""

from .game_session import AttackResult, CaptureCompletion, GameSession, PersistenceResult
from .persistence import (
    FallbackSnapshotStore,
    InMemorySnapshotStore,
    JsonFileSnapshotStore,
    SnapshotStore,
)

__all__ = [
    "GameSession",
    "AttackResult",
    "CaptureCompletion",
    "PersistenceResult",
    "SnapshotStore",
    "InMemorySnapshotStore",
    "JsonFileSnapshotStore",
    "FallbackSnapshotStore",
]
