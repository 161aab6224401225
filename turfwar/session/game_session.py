"""GameSession: явный владелец состояния игровой сессии

Связывает компоненты движка без глобального состояния:
- PathRecorder → TerritoryStore.add_territory → ScoreboardSync.apply_delta
- ConquestResolver → TerritoryStore.transfer_ownership → ScoreboardSync.apply_delta
- change feed → ScoreboardSync.reconcile_from_remote
- SnapshotStore.save / load

Ошибки persistence сообщаются наверх (PersistenceResult) и логируются,
но in-memory состояние не откатывается: игра продолжается оптимистично.
"""

import random
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from turfwar.capture.state_machine import (
    CaptureConfig,
    CaptureStartResult,
    PathRecorder,
    SampleResult,
)
from turfwar.conquest.resolver import (
    ConquestConfig,
    ConquestOutcome,
    ConquestResolver,
)
from turfwar.core.clock import Clock, now_utc_ms
from turfwar.core.contracts import validate_leaderboard_feed
from turfwar.core.domain.coordinate import Coordinate
from turfwar.core.domain.errors import ErrorCode, PersistenceError
from turfwar.core.domain.player import (
    DEFAULT_DISPLAY_NAME,
    DEFAULT_GUEST_ID,
    Player,
    generate_guest_id,
)
from turfwar.core.domain.snapshot import GameSnapshot
from turfwar.core.domain.territory import Territory
from turfwar.core.logging import LogEvent, StructuredLogger
from turfwar.scoreboard.sync import (
    ConsistencyReport,
    LeaderboardConfig,
    ReconcileResult,
    RemoteRow,
    ScoreboardSync,
)
from turfwar.session.persistence import SnapshotStore
from turfwar.territory.store import TerritoryScope, TerritoryStore


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class PersistenceResult:
    """Результат save()/load()."""

    ok: bool
    error: Optional[ErrorCode]
    details: str


@dataclass(frozen=True)
class CaptureCompletion:
    """Результат stop_capture()."""

    ok: bool
    error: Optional[ErrorCode]
    territory: Optional[Territory]
    score_awarded: int
    persistence: Optional[PersistenceResult]
    details: str


@dataclass(frozen=True)
class AttackResult:
    """Результат attack(): решение resolver и применённые мутации."""

    success: bool
    error: Optional[ErrorCode]
    outcome: Optional[ConquestOutcome]
    territory: Optional[Territory]
    persistence: Optional[PersistenceResult]
    details: str


# =============================================================================
# SESSION
# =============================================================================


class GameSession:
    """Игровая сессия одного устройства (один mutator thread)."""

    def __init__(
        self,
        snapshot_store: Optional[SnapshotStore] = None,
        capture_config: CaptureConfig | None = None,
        conquest_config: ConquestConfig | None = None,
        leaderboard_config: LeaderboardConfig | None = None,
        clock: Clock = now_utc_ms,
        rng: random.Random | None = None,
        autosave: bool = False,
    ):
        """
        Args:
            snapshot_store: persistence-коллаборатор (None: без сохранения)
            capture_config: конфигурация PathRecorder
            conquest_config: конфигурация ConquestResolver
            leaderboard_config: фильтр скрытых аккаунтов
            clock: источник времени (UTC мс)
            rng: источник случайности (guest id и бросок монеты)
            autosave: сохранять снапшот после захвата и атаки
        """
        self._rng = rng or random.Random()
        self._snapshot_store = snapshot_store
        self.autosave = autosave

        self.recorder = PathRecorder(capture_config)
        self.territory_store = TerritoryStore(clock=clock)
        self.resolver = ConquestResolver(conquest_config, rng=self._rng)
        self.scoreboard = ScoreboardSync(config=leaderboard_config, clock=clock)

        self._player = Player(id=DEFAULT_GUEST_ID, display_name=DEFAULT_DISPLAY_NAME)
        self._current_position: Optional[Coordinate] = None
        self._log = StructuredLogger("session")

    # -------------------------------------------------------------------------
    # Identity и жизненный цикл
    # -------------------------------------------------------------------------

    @property
    def player(self) -> Player:
        return self._player

    @property
    def current_position(self) -> Optional[Coordinate]:
        return self._current_position

    def begin(
        self,
        player_id: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> PersistenceResult:
        """Старт сессии с identity от коллаборатора или guest id.

        Состояние загружается из snapshot store; при его отсутствии
        сессия начинается с пустым списком территорий и нулевым score.
        """
        resolved_id = player_id or generate_guest_id(self._rng)
        self._player = Player(
            id=resolved_id,
            display_name=display_name or DEFAULT_DISPLAY_NAME,
        )
        self.scoreboard.set_local_player(resolved_id)
        self._log.info(
            LogEvent.SESSION_STARTED,
            "Session started",
            {"player_id": resolved_id, "guest": player_id is None},
        )
        return self.load()

    def reset(self) -> None:
        """Logout: очистка состояния и возврат к гостю по умолчанию."""
        self.recorder.cancel()
        self.territory_store.clear()
        self.scoreboard.clear()
        self.scoreboard.set_local_player(None)
        self._player = Player(id=DEFAULT_GUEST_ID, display_name=DEFAULT_DISPLAY_NAME)
        self._current_position = None
        self._log.info(LogEvent.SESSION_RESET, "Session reset")

    def rename_player(self, display_name: str) -> bool:
        """Смена имени игрока с распространением на территории и leaderboard.

        Returns:
            False если имя не изменилось
        """
        if display_name == self._player.display_name:
            return False

        self._player = self._player.with_display_name(display_name)
        updated = self.territory_store.rename_owner(self._player.id, display_name)
        self.scoreboard.rename(self._player.id, display_name)
        self._log.info(
            LogEvent.SESSION_PLAYER_RENAMED,
            "Player renamed",
            {"player_id": self._player.id, "territories_updated": updated},
        )
        return True

    # -------------------------------------------------------------------------
    # Capture
    # -------------------------------------------------------------------------

    def update_position(self, coord: Optional[Coordinate]) -> None:
        self._current_position = coord

    def start_capture(self, permission_granted: bool) -> CaptureStartResult:
        return self.recorder.start(permission_granted)

    def on_location_sample(self, coord: Coordinate) -> SampleResult:
        """Сэмпл от location-коллаборатора: позиция + запись пути."""
        self._current_position = coord
        return self.recorder.on_sample(coord)

    def stop_capture(self, name: Optional[str] = None) -> CaptureCompletion:
        """Завершение записи: территория, очки игроку, дельта leaderboard."""
        stopped = self.recorder.stop()
        if not stopped.ok:
            return CaptureCompletion(
                ok=False,
                error=stopped.error,
                territory=None,
                score_awarded=0,
                persistence=None,
                details=stopped.details,
            )

        territory = self.territory_store.add_territory(stopped.ring, self._player, name)
        self._player = self._player.with_score(self._player.score + territory.score_value)
        self.scoreboard.apply_delta(
            self._player.id,
            territory.score_value,
            1,
            display_name=self._player.display_name,
        )

        return CaptureCompletion(
            ok=True,
            error=None,
            territory=territory,
            score_awarded=territory.score_value,
            persistence=self._autosave(),
            details=(
                f"Claimed {territory.area_square_meters:.0f} m² "
                f"worth {territory.score_value} points"
            ),
        )

    # -------------------------------------------------------------------------
    # Conquest
    # -------------------------------------------------------------------------

    def attack(self, territory_id: str) -> AttackResult:
        """Атака территории с текущей позиции игрока сессии."""
        target = self.territory_store.get(territory_id)
        if target is None:
            return AttackResult(
                success=False,
                error=ErrorCode.NOT_FOUND,
                outcome=None,
                territory=None,
                persistence=None,
                details=f"Territory {territory_id} not found",
            )

        outcome = self.resolver.attack(self._current_position, self._player, target)
        if not outcome.success:
            return AttackResult(
                success=False,
                error=outcome.error,
                outcome=outcome,
                territory=target,
                persistence=None,
                details=outcome.details,
            )

        applied = self.apply_outcome(outcome)
        if applied.error is not None:
            return applied

        return AttackResult(
            success=True,
            error=None,
            outcome=outcome,
            territory=applied.territory,
            persistence=self._autosave(),
            details=outcome.details,
        )

    def apply_outcome(self, outcome: ConquestOutcome) -> AttackResult:
        """Транзакционное применение мутаций ConquestOutcome.

        Сначала смена владельца; дельты применяются только если она
        прошла. Score игрока сессии обновляется, если он участник.
        """
        if outcome.transfer is None:
            return AttackResult(
                success=False,
                error=outcome.error,
                outcome=outcome,
                territory=None,
                persistence=None,
                details="No mutations to apply",
            )

        transfer = outcome.transfer
        new_owner = Player(
            id=transfer.new_owner_id,
            display_name=transfer.new_owner_display_name,
        )
        transferred = self.territory_store.transfer_ownership(transfer.territory_id, new_owner)
        if not transferred.ok:
            return AttackResult(
                success=False,
                error=transferred.error,
                outcome=outcome,
                territory=None,
                persistence=None,
                details=transferred.details,
            )

        for delta in outcome.score_deltas:
            self.scoreboard.apply_delta(
                delta.player_id,
                delta.score_delta,
                delta.territory_count_delta,
                display_name=delta.display_name,
            )
            if delta.player_id == self._player.id:
                self._player = self._player.with_score(self._player.score + delta.score_delta)

        return AttackResult(
            success=True,
            error=None,
            outcome=outcome,
            territory=transferred.territory,
            persistence=None,
            details=transferred.details,
        )

    # -------------------------------------------------------------------------
    # Запросы
    # -------------------------------------------------------------------------

    def territories(self, scope: TerritoryScope = TerritoryScope.ALL) -> List[Territory]:
        return self.territory_store.filter(scope, self._player.id)

    def territories_at(self, point: Coordinate) -> List[Territory]:
        return self.territory_store.find_containing(point)

    def check_consistency(self) -> ConsistencyReport:
        return self.scoreboard.check_consistency(self.territory_store, self._player)

    # -------------------------------------------------------------------------
    # Remote change feed
    # -------------------------------------------------------------------------

    def on_remote_leaderboard(self, rows: Iterable[RemoteRow]) -> ReconcileResult:
        """Полный remote-снапшот рейтинга из change feed.

        Принятая remote-строка игрока сессии (например, проигрыш на другом
        устройстве) переносится в Player.score, чтобы профиль и рейтинг
        не расходились.

        Raises:
            jsonschema.ValidationError: если dict-строки нарушают контракт
        """
        rows = list(rows)
        if rows and all(isinstance(r, Mapping) for r in rows):
            validate_leaderboard_feed([dict(r) for r in rows])
        result = self.scoreboard.reconcile_from_remote(rows)

        if not result.local_row_protected:
            local_row = self.scoreboard.get(self._player.id)
            if local_row is not None and local_row.score != self._player.score:
                self._player = self._player.with_score(local_row.score)
        return result

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            player=self._player,
            territories=self.territory_store.all(),
            leaderboard=self.scoreboard.entries(),
        )

    def save(self) -> PersistenceResult:
        """Best-effort сохранение; состояние не откатывается при ошибке."""
        if self._snapshot_store is None:
            return PersistenceResult(ok=True, error=None, details="No snapshot store configured")

        try:
            self._snapshot_store.save(self.snapshot())
        except PersistenceError as e:
            self._log.error(LogEvent.PERSISTENCE_SAVE_FAILED, "Snapshot save failed", exc_info=e)
            return PersistenceResult(
                ok=False, error=ErrorCode.PERSISTENCE_FAILED, details=str(e)
            )

        self._log.info(
            LogEvent.PERSISTENCE_SAVED,
            "Snapshot saved",
            {"territories": len(self.territory_store)},
        )
        return PersistenceResult(ok=True, error=None, details="Snapshot saved")

    def load(self) -> PersistenceResult:
        """Загрузка снапшота.

        - Нет store или снапшота: пустые территории, score 0
        - Снапшот другого игрока: берутся территории и рейтинг, но не профиль
        - Ошибка: состояние не меняется, ошибка возвращается
        """
        if self._snapshot_store is None:
            self._start_empty()
            return PersistenceResult(ok=True, error=None, details="No snapshot store configured")

        try:
            snapshot = self._snapshot_store.load()
        except PersistenceError as e:
            self._log.error(LogEvent.PERSISTENCE_LOAD_FAILED, "Snapshot load failed", exc_info=e)
            return PersistenceResult(
                ok=False, error=ErrorCode.PERSISTENCE_FAILED, details=str(e)
            )

        if snapshot is None:
            self._start_empty()
            return PersistenceResult(ok=True, error=None, details="No snapshot, started empty")

        self.territory_store.load(snapshot.territories)
        if snapshot.player.id == self._player.id:
            self._player = Player(
                id=self._player.id,
                display_name=snapshot.player.display_name,
                score=snapshot.player.score,
            )
        else:
            self._player = self._player.with_score(0)
        self.scoreboard.load(snapshot.leaderboard)

        self._log.info(
            LogEvent.PERSISTENCE_LOADED,
            "Snapshot loaded",
            {
                "territories": len(snapshot.territories),
                "leaderboard_rows": len(snapshot.leaderboard),
            },
        )
        return PersistenceResult(ok=True, error=None, details="Snapshot loaded")

    def _start_empty(self) -> None:
        self.territory_store.clear()
        self.scoreboard.clear()
        self._player = self._player.with_score(0)

    def _autosave(self) -> Optional[PersistenceResult]:
        if not self.autosave:
            return None
        return self.save()
