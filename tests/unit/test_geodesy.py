"""Тесты для GeoMath.

Coverage:
- Haversine расстояние
- Знаковая площадь (spherical excess), вырожденные кольца
- Центроид
- Ray casting point-in-polygon (выпуклые и невыпуклые полигоны)
"""

import math

import pytest

from turfwar.core.domain import Coordinate
from turfwar.core.math import (
    centroid,
    distance_meters,
    point_in_ring,
    polygon_area,
    polygon_score,
    signed_area,
)

BOISE_LAT = 43.6150
BOISE_LON = -116.2023


def offset(origin: Coordinate, north_m: float, east_m: float) -> Coordinate:
    """Смещение точки на north_m / east_m метров (локальная плоская аппроксимация)."""
    d_lat = math.degrees(north_m / 6_371_000.0)
    d_lon = math.degrees(east_m / (6_371_000.0 * math.cos(math.radians(origin.latitude))))
    return Coordinate(latitude=origin.latitude + d_lat, longitude=origin.longitude + d_lon)


def square_ring(origin: Coordinate, side_m: float, closed: bool = True) -> list[Coordinate]:
    ring = [
        origin,
        offset(origin, 0, side_m),
        offset(origin, side_m, side_m),
        offset(origin, side_m, 0),
    ]
    if closed:
        ring.append(origin)
    return ring


@pytest.fixture
def origin() -> Coordinate:
    return Coordinate(latitude=BOISE_LAT, longitude=BOISE_LON)


# =============================================================================
# DISTANCE
# =============================================================================


class TestDistance:
    """Тесты haversine расстояния."""

    def test_identical_points_zero(self, origin):
        """Совпадающие точки → ровно 0."""
        assert distance_meters(origin, origin) == 0.0

    def test_one_degree_latitude(self):
        """1° широты ≈ R * π / 180 ≈ 111 195 м."""
        a = Coordinate(latitude=0.0, longitude=0.0)
        b = Coordinate(latitude=1.0, longitude=0.0)
        expected = 6_371_000.0 * math.pi / 180.0
        assert distance_meters(a, b) == pytest.approx(expected, rel=1e-9)

    def test_symmetric(self, origin):
        other = offset(origin, 30, -40)
        assert distance_meters(origin, other) == pytest.approx(distance_meters(other, origin))

    def test_small_offset_matches_meters(self, origin):
        """Смещение 3-4-5: расстояние ≈ 50 м."""
        other = offset(origin, 30, 40)
        assert distance_meters(origin, other) == pytest.approx(50.0, rel=1e-3)


# =============================================================================
# AREA
# =============================================================================


class TestSignedArea:
    """Тесты знаковой площади кольца."""

    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_degenerate_ring_exactly_zero(self, origin, count):
        """Меньше 3 точек → ровно 0."""
        ring = square_ring(origin, 20)[:count]
        assert signed_area(ring) == 0.0

    @pytest.mark.parametrize("side_m", [10.0, 20.0, 100.0, 500.0])
    def test_square_area_close_to_side_squared(self, origin, side_m):
        """|area| квадрата ≈ s² с точностью 1%."""
        area = abs(signed_area(square_ring(origin, side_m)))
        assert area == pytest.approx(side_m ** 2, rel=0.01)

    def test_winding_direction_flips_sign(self, origin):
        ring = square_ring(origin, 50)
        forward = signed_area(ring)
        backward = signed_area(list(reversed(ring)))
        assert forward != 0.0
        assert forward == pytest.approx(-backward)

    def test_open_and_closed_ring_same_area(self, origin):
        """Замыкающая пара даёт Δlon = 0."""
        closed = signed_area(square_ring(origin, 40, closed=True))
        opened = signed_area(square_ring(origin, 40, closed=False))
        assert closed == pytest.approx(opened)

    def test_polygon_area_non_negative(self, origin):
        ring = list(reversed(square_ring(origin, 30)))
        assert polygon_area(ring) > 0

    def test_polygon_score_twenty_meter_square(self, origin):
        """Квадрат 20 м ≈ 400 м² → 4 очка."""
        assert polygon_score(square_ring(origin, 20)) == 4


# =============================================================================
# CENTROID
# =============================================================================


class TestCentroid:
    def test_centroid_of_open_square_is_center(self, origin):
        center = centroid(square_ring(origin, 20, closed=False))
        expected = offset(origin, 10, 10)
        assert center.latitude == pytest.approx(expected.latitude, abs=1e-9)
        assert center.longitude == pytest.approx(expected.longitude, abs=1e-9)

    def test_centroid_of_closed_ring_inside(self, origin):
        ring = square_ring(origin, 20)
        assert point_in_ring(centroid(ring), ring)

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            centroid([])


# =============================================================================
# POINT IN POLYGON
# =============================================================================


class TestPointInRing:
    """Тесты ray casting."""

    def test_center_inside(self, origin):
        ring = square_ring(origin, 20)
        assert point_in_ring(offset(origin, 10, 10), ring)

    @pytest.mark.parametrize(
        "north_m,east_m",
        [(-5, 10), (25, 10), (10, -5), (10, 25), (-50, -50), (100, 100)],
    )
    def test_outside_points(self, origin, north_m, east_m):
        ring = square_ring(origin, 20)
        assert not point_in_ring(offset(origin, north_m, east_m), ring)

    def test_concave_notch_is_outside(self, origin):
        """L-образный полигон: точка в вырезе снаружи, в плече внутри."""
        ring = [
            origin,
            offset(origin, 0, 40),
            offset(origin, 20, 40),
            offset(origin, 20, 20),
            offset(origin, 40, 20),
            offset(origin, 40, 0),
            origin,
        ]
        assert not point_in_ring(offset(origin, 30, 30), ring)
        assert point_in_ring(offset(origin, 10, 30), ring)
        assert point_in_ring(offset(origin, 30, 10), ring)

    def test_open_ring_same_result(self, origin):
        point = offset(origin, 5, 15)
        assert point_in_ring(point, square_ring(origin, 20, closed=False))
        assert point_in_ring(point, square_ring(origin, 20, closed=True))

    def test_deterministic(self, origin):
        ring = square_ring(origin, 20)
        point = offset(origin, 3, 17)
        results = {point_in_ring(point, ring) for _ in range(10)}
        assert results == {True}
