"""
GameSnapshot: снапшот состояния для persistence

Единая форма для локального и удалённого хранилища:
{player, territories, leaderboard}. Соответствует JSON Schema контракту
(turfwar/core/contracts/schema/game_snapshot.json).
"""

from typing import Any, Dict

from pydantic import BaseModel, Field

from .leaderboard import LeaderboardEntry
from .player import Player
from .territory import Territory

SNAPSHOT_SCHEMA_VERSION = "1"


class GameSnapshot(BaseModel):
    """Снапшот сессии: игрок, территории, leaderboard."""

    schema_version: str = Field(SNAPSHOT_SCHEMA_VERSION, description="Версия схемы")
    player: Player = Field(..., description="Игрок сессии")
    territories: list[Territory] = Field(default_factory=list, description="Все территории")
    leaderboard: list[LeaderboardEntry] = Field(
        default_factory=list, description="Ранжированный leaderboard"
    )

    model_config = {"frozen": True}

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON-совместимый dict (для contract validation и хранения)."""
        return self.model_dump(mode="json")
