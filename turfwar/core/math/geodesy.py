"""
GeoMath: геодезические примитивы

Чистые функции без состояния:
- Great-circle (haversine) расстояние между координатами
- Знаковая площадь замкнутого кольца на сфере (spherical excess summation)
- Центроид вершин
- Ray casting point-in-polygon

КОНТРАКТ ТОЧНОСТИ:
Рассчитано на полигоны масштаба района (периметр до нескольких км).
Для полигонов масштаба страны не предназначено.
"""

import math
from typing import Sequence

from turfwar.core.domain.coordinate import Coordinate
from turfwar.core.domain.units import (
    EARTH_RADIUS_AREA_M,
    EARTH_RADIUS_HAVERSINE_M,
    score_for_area,
)


# =============================================================================
# РАССТОЯНИЕ
# =============================================================================


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle расстояние по формуле haversine.

    R = 6 371 000 м. Ошибочных случаев нет, для совпадающих точек 0.

    Args:
        a: Первая точка
        b: Вторая точка

    Returns:
        Расстояние в метрах (>= 0)

    Examples:
        >>> p = Coordinate(latitude=43.615, longitude=-116.2023)
        >>> distance_meters(p, p)
        0.0
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    # Защита от выхода за [0, 1] из-за округления
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_HAVERSINE_M * c


# =============================================================================
# ПЛОЩАДЬ
# =============================================================================


def signed_area(ring: Sequence[Coordinate]) -> float:
    """
    Знаковая площадь кольца на сфере R = 6 378 137 м (WGS-84).

    Для каждой пары соседних вершин (с переходом last → first):
        sum += Δlon_rad * (2 + sin(lat1_rad) + sin(lat2_rad))
    area = sum * R² / 2

    Знак кодирует направление обхода; для отображения и очков
    используется abs(). Кольцо может быть как замкнутым (first == last),
    так и открытым: замыкающая пара даёт Δlon = 0.

    Args:
        ring: Вершины полигона

    Returns:
        Знаковая площадь в м². Для len(ring) < 3 ровно 0.0.
    """
    n = len(ring)
    if n < 3:
        return 0.0

    total = 0.0
    for i in range(n):
        p1 = ring[i]
        p2 = ring[(i + 1) % n]
        total += math.radians(p2.longitude - p1.longitude) * (
            2 + math.sin(math.radians(p1.latitude)) + math.sin(math.radians(p2.latitude))
        )

    return total * EARTH_RADIUS_AREA_M * EARTH_RADIUS_AREA_M / 2.0


def polygon_area(ring: Sequence[Coordinate]) -> float:
    """Абсолютная площадь кольца (м²)."""
    return abs(signed_area(ring))


def polygon_score(ring: Sequence[Coordinate]) -> int:
    """Стоимость кольца в очках: floor(|area| / 100)."""
    return score_for_area(polygon_area(ring))


# =============================================================================
# ЦЕНТРОИД
# =============================================================================


def centroid(points: Sequence[Coordinate]) -> Coordinate:
    """
    Среднее арифметическое вершин.

    Для замкнутого кольца повтор первой вершины смещает центр к ней,
    но для выпуклых полигонов результат остаётся внутри.

    Raises:
        ValueError: Если points пуст
    """
    if not points:
        raise ValueError("centroid of empty point sequence is undefined")

    n = len(points)
    return Coordinate(
        latitude=sum(p.latitude for p in points) / n,
        longitude=sum(p.longitude for p in points) / n,
    )


# =============================================================================
# POINT-IN-POLYGON
# =============================================================================


def point_in_ring(point: Coordinate, ring: Sequence[Coordinate]) -> bool:
    """
    Ray casting: горизонтальный луч из точки в сторону уменьшения долготы.

    Для каждого ребра (j → i), пересекающего широту точки, вычисляется
    долгота пересечения; пересечение засчитывается, если оно западнее точки.
    Точка внутри ⇔ число пересечений нечётно.

    Точки на самой границе: поведение не гарантируется.

    Args:
        point: Проверяемая точка
        ring: Вершины полигона (замкнутые или нет)

    Returns:
        True если точка внутри полигона
    """
    x = point.longitude
    y = point.latitude
    inside = False

    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i].longitude, ring[i].latitude
        xj, yj = ring[j].longitude, ring[j].latitude

        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / (yj - yi) + xi
            if x > x_cross:
                inside = not inside
        j = i

    return inside
