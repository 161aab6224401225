"""
Coordinate: географическая точка (WGS-84, градусы)

Immutable Pydantic value type. Равенство строгое (по значениям полей),
на нём построено замыкание кольца в PathRecorder.
"""

from pydantic import BaseModel, Field


class Coordinate(BaseModel):
    """
    Географическая координата.

    Immutable модель (frozen=True): точки пути и вершины полигона
    никогда не изменяются после создания.
    """

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Широта (градусы)")
    longitude: float = Field(..., ge=-180.0, le=180.0, description="Долгота (градусы)")

    model_config = {"frozen": True}

    def as_tuple(self) -> tuple[float, float]:
        """(latitude, longitude)"""
        return (self.latitude, self.longitude)
