"""Territory: авторитетное хранилище территорий и их владельцев."""

from .store import TerritoryScope, TerritoryStore, TransferResult

__all__ = [
    "TerritoryStore",
    "TerritoryScope",
    "TransferResult",
]
