"""
Таксономия ошибок движка

Все игровые условия восстановимы и возвращаются как typed result
(поле error в frozen dataclass результата), а не исключением.
Исключения остаются для нарушений инвариантов и I/O коллабораторов.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Код восстановимой ошибки, показываемой пользователю."""

    PERMISSION_DENIED = "permission_denied"
    ALREADY_CAPTURING = "already_capturing"
    INSUFFICIENT_POINTS = "insufficient_points"
    POSITION_UNKNOWN = "position_unknown"
    NOT_INSIDE_TERRITORY = "not_inside_territory"
    NOT_FOUND = "not_found"
    ALREADY_OWNER = "already_owner"
    PERSISTENCE_FAILED = "persistence_failed"


class PersistenceError(Exception):
    """Ошибка save/load коллаборатора хранения."""
