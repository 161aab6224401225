"""
LeaderboardEntry: строка рейтинга

Производная/кэш-структура, никогда не источник истины. Всегда может быть
пересобрана из TerritoryStore (territory_count) и Player (score).
"""

from pydantic import BaseModel, Field

from .units import floor_at_zero


class LeaderboardEntry(BaseModel):
    """Строка leaderboard."""

    id: str = Field(..., min_length=1, description="id игрока")
    display_name: str = Field("", description="Отображаемое имя")
    score: int = Field(0, ge=0, description="Очки игрока")
    territory_count: int = Field(0, ge=0, description="Число территорий игрока")
    updated_ts_utc_ms: int = Field(
        0, ge=0, description="Время последнего изменения строки (UTC, мс)"
    )

    model_config = {"frozen": True}

    def apply(
        self,
        score_delta: int,
        territory_count_delta: int,
        updated_ts_utc_ms: int,
    ) -> "LeaderboardEntry":
        """
        Применение дельты с floor at 0 для очков и счетчика.

        Returns:
            Новый экземпляр строки
        """
        return self.model_copy(
            update={
                "score": floor_at_zero(self.score + score_delta),
                "territory_count": floor_at_zero(self.territory_count + territory_count_delta),
                "updated_ts_utc_ms": updated_ts_utc_ms,
            }
        )
