"""
Core math modules для turfwar

Геодезические примитивы: расстояние, площадь, центроид, point-in-polygon.
"""

from turfwar.core.math.geodesy import (
    centroid,
    distance_meters,
    point_in_ring,
    polygon_area,
    polygon_score,
    signed_area,
)

__all__ = [
    # Distance
    "distance_meters",
    # Area
    "signed_area",
    "polygon_area",
    "polygon_score",
    # Geometry
    "centroid",
    "point_in_ring",
]
