"""
turfwar: Territory Capture & Conquest Engine

Ядро локационной игры "захвати территорию, обойдя её по периметру":
- capture/     : PathRecorder, state machine записи GPS-пути
- territory/   : TerritoryStore, авторитетная модель территорий
- conquest/    : ConquestResolver, решение о захвате чужой территории
- scoreboard/  : ScoreboardSync, leaderboard и reconcile с remote
- session/     : GameSession и persistence контракт
"""

__version__ = "0.1.0"
