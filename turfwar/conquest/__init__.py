"""Conquest: бинарный контест за владение территорией."""

from .resolver import (
    ConquestConfig,
    ConquestOutcome,
    ConquestResolver,
    OwnershipTransfer,
    ScoreDelta,
)

__all__ = [
    "ConquestResolver",
    "ConquestConfig",
    "ConquestOutcome",
    "OwnershipTransfer",
    "ScoreDelta",
]
