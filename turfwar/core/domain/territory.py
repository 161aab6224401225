"""
Territory: захваченный замкнутый полигон на карте

Immutable Pydantic модель. Boundary и площадь фиксируются при создании;
owner-поля и captured_ts_utc_ms переписываются только успешным захватом
(через создание нового экземпляра в TerritoryStore).
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from .coordinate import Coordinate
from .units import MIN_RING_LENGTH, score_for_area


class Territory(BaseModel):
    """
    Модель территории.

    Инварианты:
    - len(boundary) >= 4 (3 различные вершины + повтор первой)
    - boundary[0] == boundary[-1]
    - score_value == floor(area_square_meters / 100)
    """

    # Идентификация
    id: str = Field(..., min_length=1, description="Уникальный непрозрачный id")
    name: str = Field(..., description="Название территории")

    # Геометрия (неизменна после создания)
    boundary: tuple[Coordinate, ...] = Field(..., description="Замкнутое кольцо вершин")
    area_square_meters: float = Field(..., ge=0, description="Площадь (м²)")
    score_value: int = Field(..., ge=0, description="Стоимость в очках")

    # Владение (переписывается при захвате)
    owner_id: str = Field(..., min_length=1, description="id владельца")
    owner_display_name: str = Field(..., description="Имя владельца")
    owner_color: str = Field(..., description="Цвет владельца (непрозрачный токен)")
    captured_ts_utc_ms: int = Field(..., ge=0, description="Время захвата (UTC, мс)")

    model_config = {"frozen": True}

    @field_validator("boundary")
    @classmethod
    def validate_closed_ring(cls, v: tuple[Coordinate, ...]) -> tuple[Coordinate, ...]:
        """Boundary обязан быть замкнутым кольцом минимум из 4 точек."""
        if len(v) < MIN_RING_LENGTH:
            raise ValueError(
                f"boundary must have at least {MIN_RING_LENGTH} points, got {len(v)}"
            )
        if v[0] != v[-1]:
            raise ValueError("boundary must be closed (first point == last point)")
        return v

    @model_validator(mode="after")
    def validate_score_matches_area(self) -> "Territory":
        expected = score_for_area(self.area_square_meters)
        if self.score_value != expected:
            raise ValueError(
                f"score_value {self.score_value} does not match area "
                f"{self.area_square_meters:.2f} m² (expected {expected})"
            )
        return self

    def is_owned_by(self, player_id: str) -> bool:
        return self.owner_id == player_id
