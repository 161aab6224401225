"""
Domain models and value objects.

Contains fundamental domain entities: Coordinate, Territory, Player,
LeaderboardEntry, GameSnapshot, error taxonomy and unit conversions.
"""

from turfwar.core.domain.coordinate import Coordinate
from turfwar.core.domain.errors import ErrorCode, PersistenceError
from turfwar.core.domain.leaderboard import LeaderboardEntry
from turfwar.core.domain.player import (
    DEFAULT_DISPLAY_NAME,
    DEFAULT_GUEST_ID,
    Player,
    generate_guest_id,
    identity_hash,
    player_color,
)
from turfwar.core.domain.snapshot import SNAPSHOT_SCHEMA_VERSION, GameSnapshot
from turfwar.core.domain.territory import Territory
from turfwar.core.domain.units import (
    EARTH_RADIUS_AREA_M,
    EARTH_RADIUS_HAVERSINE_M,
    JITTER_THRESHOLD_M,
    MIN_CAPTURE_POINTS,
    MIN_RING_LENGTH,
    SQUARE_METERS_PER_POINT,
    floor_at_zero,
    score_for_area,
)

__all__ = [
    # Units module
    "EARTH_RADIUS_AREA_M",
    "EARTH_RADIUS_HAVERSINE_M",
    "JITTER_THRESHOLD_M",
    "MIN_CAPTURE_POINTS",
    "MIN_RING_LENGTH",
    "SQUARE_METERS_PER_POINT",
    "floor_at_zero",
    "score_for_area",
    # Errors
    "ErrorCode",
    "PersistenceError",
    # Models
    "Coordinate",
    "Territory",
    "Player",
    "LeaderboardEntry",
    "GameSnapshot",
    "SNAPSHOT_SCHEMA_VERSION",
    # Identity
    "DEFAULT_GUEST_ID",
    "DEFAULT_DISPLAY_NAME",
    "generate_guest_id",
    "identity_hash",
    "player_color",
]
