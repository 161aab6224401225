"""
Structured Log Event Types
==========================

Typed event names for structured logging.

Event Naming Convention:
    <component>.<action>[.<outcome>]

    component: capture, territory, conquest, scoreboard, persistence, session
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - capture.*: запись пути (PathRecorder)
    - territory.*: изменения TerritoryStore
    - conquest.*: решения ConquestResolver
    - scoreboard.*: leaderboard deltas и reconcile
    - persistence.*: save/load снапшота
    - session.*: жизненный цикл GameSession
    """

    # ========== Capture Events ==========
    CAPTURE_STARTED = "capture.started"
    CAPTURE_REJECTED = "capture.rejected"
    CAPTURE_SAMPLE_ACCEPTED = "capture.sample.accepted"
    CAPTURE_SAMPLE_DISCARDED = "capture.sample.discarded"
    CAPTURE_COMPLETED = "capture.completed"
    CAPTURE_FAILED = "capture.failed"
    CAPTURE_CANCELLED = "capture.cancelled"

    # ========== Territory Events ==========
    TERRITORY_ADDED = "territory.added"
    TERRITORY_TRANSFERRED = "territory.transferred"
    TERRITORY_NOT_FOUND = "territory.not_found"

    # ========== Conquest Events ==========
    CONQUEST_REJECTED = "conquest.rejected"
    CONQUEST_RESOLVED = "conquest.resolved"

    # ========== Scoreboard Events ==========
    SCOREBOARD_DELTA_APPLIED = "scoreboard.delta.applied"
    SCOREBOARD_RECONCILED = "scoreboard.reconciled"
    SCOREBOARD_LOCAL_ROW_PROTECTED = "scoreboard.local_row.protected"
    SCOREBOARD_INCONSISTENT = "scoreboard.inconsistent"
    SCOREBOARD_REBUILT = "scoreboard.rebuilt"

    # ========== Persistence Events ==========
    PERSISTENCE_SAVED = "persistence.saved"
    PERSISTENCE_SAVE_FAILED = "persistence.save.failed"
    PERSISTENCE_LOADED = "persistence.loaded"
    PERSISTENCE_LOAD_FAILED = "persistence.load.failed"
    PERSISTENCE_FALLBACK = "persistence.fallback"

    # ========== Session Events ==========
    SESSION_STARTED = "session.started"
    SESSION_RESET = "session.reset"
    SESSION_PLAYER_RENAMED = "session.player.renamed"
