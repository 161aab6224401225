"""
Units: единицы площади, очков и расстояний

Единственный допустимый способ преобразований между:
- area_square_meters (м², float)
- score_value (очки, int)

Все игровые и физические константы движка собраны здесь.
"""

import math
from typing import Final


# =============================================================================
# ФИЗИЧЕСКИЕ КОНСТАНТЫ
# =============================================================================

# Радиус Земли для haversine-расстояния (средний радиус)
EARTH_RADIUS_HAVERSINE_M: Final[float] = 6_371_000.0

# Радиус Земли для площади полигона (WGS-84, большая полуось)
EARTH_RADIUS_AREA_M: Final[float] = 6_378_137.0


# =============================================================================
# ИГРОВЫЕ КОНСТАНТЫ
# =============================================================================

# 1 очко за каждые 100 м² территории
SQUARE_METERS_PER_POINT: Final[float] = 100.0

# Минимальное смещение для принятия GPS-сэмпла (фильтр jitter)
JITTER_THRESHOLD_M: Final[float] = 5.0

# Минимум принятых точек для замыкания полигона
MIN_CAPTURE_POINTS: Final[int] = 3

# Минимальная длина замкнутого кольца: 3 вершины + повтор первой
MIN_RING_LENGTH: Final[int] = 4


# =============================================================================
# КОНВЕРТЕРЫ
# =============================================================================


def score_for_area(area_square_meters: float) -> int:
    """
    Конверсия: площадь в м² → очки территории.

    score_value = floor(area / 100)

    Args:
        area_square_meters: Площадь (неотрицательная)

    Returns:
        Количество очков (int >= 0)

    Raises:
        ValueError: Если площадь отрицательная или не конечна
    """
    if not math.isfinite(area_square_meters) or area_square_meters < 0:
        raise ValueError(
            f"area_square_meters must be finite and non-negative, got {area_square_meters}"
        )
    return int(math.floor(area_square_meters / SQUARE_METERS_PER_POINT))


def floor_at_zero(value: int) -> int:
    """Счетчики и очки никогда не уходят ниже нуля."""
    return max(0, value)
