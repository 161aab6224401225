"""ScoreboardSync: leaderboard, локальные дельты и reconcile с remote

Leaderboard это производная кэш-структура: источник истины для очков
это Player, для числа территорий это TerritoryStore.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Сортировка по score по убыванию, стабильная (без вторичного ключа)
2. score и territory_count никогда не уходят ниже 0
3. reconcile_from_remote это полная перезапись (last snapshot wins)
4. Monotonicity guard: устаревший remote-снапшот не откатывает строку
   локального игрока ниже последнего значения, выставленного локально,
   если только remote-строка не строго новее по updated_ts_utc_ms
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from turfwar.core.clock import Clock, now_utc_ms
from turfwar.core.domain.leaderboard import LeaderboardEntry
from turfwar.core.domain.player import DEFAULT_GUEST_ID, Player
from turfwar.core.logging import LogEvent, StructuredLogger
from turfwar.territory.store import TerritoryStore

RemoteRow = Union[LeaderboardEntry, Mapping[str, Any]]


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class LeaderboardConfig:
    """Конфигурация фильтра скрытых аккаунтов в remote-рейтинге.

    По умолчанию скрываются гостевой id по умолчанию, тестовые имена
    и dev/example аккаунты (сравнение без учёта регистра).
    """

    hide_accounts: bool = True
    hidden_ids: tuple[str, ...] = (DEFAULT_GUEST_ID,)
    hidden_display_name_substrings: tuple[str, ...] = ("test",)
    hidden_id_substrings: tuple[str, ...] = ("dev", "@example.com")

    def is_hidden(self, entry: LeaderboardEntry) -> bool:
        if not self.hide_accounts:
            return False
        if entry.id in self.hidden_ids:
            return True
        name = entry.display_name.lower()
        if any(s.lower() in name for s in self.hidden_display_name_substrings):
            return True
        player_id = entry.id.lower()
        return any(s.lower() in player_id for s in self.hidden_id_substrings)


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class ReconcileResult:
    """Результат reconcile_from_remote()."""

    rows_received: int
    rows_hidden: int
    duplicates_dropped: int
    rows_total: int
    local_row_protected: bool
    details: str


@dataclass(frozen=True)
class ConsistencyIssue:
    """Расхождение leaderboard с полным пересчётом."""

    player_id: str
    field: str
    leaderboard_value: Optional[int]
    expected_value: int


@dataclass(frozen=True)
class ConsistencyReport:
    """Результат check_consistency()."""

    consistent: bool
    issues: tuple[ConsistencyIssue, ...]


# =============================================================================
# SCOREBOARD
# =============================================================================


class ScoreboardSync:
    """Ранжированный, дедуплицированный leaderboard сессии."""

    def __init__(
        self,
        local_player_id: Optional[str] = None,
        config: LeaderboardConfig | None = None,
        clock: Clock = now_utc_ms,
    ):
        """
        Args:
            local_player_id: id аутентифицированного игрока сессии
            config: фильтр скрытых аккаунтов
            clock: источник времени (UTC мс)
        """
        self.config = config or LeaderboardConfig()
        self._clock = clock
        self._rows: List[LeaderboardEntry] = []
        self._log = StructuredLogger("scoreboard")

        self._local_player_id = local_player_id
        # Последний score, выставленный локально (для monotonicity guard)
        self._last_local_score: Optional[int] = None
        self._last_local_ts_utc_ms: Optional[int] = None

    # -------------------------------------------------------------------------
    # Локальный игрок
    # -------------------------------------------------------------------------

    @property
    def local_player_id(self) -> Optional[str]:
        return self._local_player_id

    @property
    def last_local_score(self) -> Optional[int]:
        return self._last_local_score

    def set_local_player(self, player_id: Optional[str]) -> None:
        """Смена identity сессии сбрасывает отслеживание локального score."""
        if player_id != self._local_player_id:
            self._last_local_score = None
            self._last_local_ts_utc_ms = None
        self._local_player_id = player_id

    def _remember_local(self, row: LeaderboardEntry) -> None:
        self._last_local_score = row.score
        self._last_local_ts_utc_ms = row.updated_ts_utc_ms

    # -------------------------------------------------------------------------
    # Запросы
    # -------------------------------------------------------------------------

    def entries(self) -> List[LeaderboardEntry]:
        return list(self._rows)

    def get(self, player_id: str) -> Optional[LeaderboardEntry]:
        for row in self._rows:
            if row.id == player_id:
                return row
        return None

    def rank_of(self, player_id: str) -> Optional[int]:
        """Позиция в рейтинге, начиная с 1 (None если строки нет)."""
        for index, row in enumerate(self._rows):
            if row.id == player_id:
                return index + 1
        return None

    def _index_of(self, player_id: str) -> Optional[int]:
        for index, row in enumerate(self._rows):
            if row.id == player_id:
                return index
        return None

    def _sort(self) -> None:
        # list.sort стабилен и при reverse=True
        self._rows.sort(key=lambda r: r.score, reverse=True)

    # -------------------------------------------------------------------------
    # Локальные мутации
    # -------------------------------------------------------------------------

    def apply_delta(
        self,
        player_id: str,
        score_delta: int,
        territory_count_delta: int,
        display_name: Optional[str] = None,
    ) -> LeaderboardEntry:
        """Применение дельты к строке игрока (строка создаётся при отсутствии).

        Очки и счетчик территорий ограничены снизу нулём. После изменения
        весь список пересортировывается по score (стабильно).

        Args:
            player_id: id игрока
            score_delta: изменение очков
            territory_count_delta: изменение числа территорий
            display_name: имя для новой строки (существующая не переименовывается)

        Returns:
            Обновлённая строка
        """
        ts = self._clock()
        index = self._index_of(player_id)

        if index is None:
            base = LeaderboardEntry(id=player_id, display_name=display_name or "")
            row = base.apply(score_delta, territory_count_delta, ts)
            self._rows.append(row)
        else:
            row = self._rows[index].apply(score_delta, territory_count_delta, ts)
            self._rows[index] = row

        self._sort()

        if player_id == self._local_player_id:
            self._remember_local(row)

        self._log.info(
            LogEvent.SCOREBOARD_DELTA_APPLIED,
            "Leaderboard delta applied",
            {
                "player_id": player_id,
                "score_delta": score_delta,
                "territory_count_delta": territory_count_delta,
                "score": row.score,
                "territory_count": row.territory_count,
            },
        )
        return row

    def rename(self, player_id: str, display_name: str) -> bool:
        """Смена display_name в строке игрока (очки и порядок не меняются)."""
        index = self._index_of(player_id)
        if index is None:
            return False
        self._rows[index] = self._rows[index].model_copy(update={"display_name": display_name})
        return True

    def load(self, rows: Iterable[RemoteRow]) -> None:
        """Загрузка сохранённого leaderboard (без фильтров и guard)."""
        self._rows = [self._coerce(r) for r in rows]
        self._sort()
        if self._local_player_id is not None:
            local = self.get(self._local_player_id)
            if local is not None:
                self._remember_local(local)

    def clear(self) -> None:
        self._rows = []
        self._last_local_score = None
        self._last_local_ts_utc_ms = None

    # -------------------------------------------------------------------------
    # Remote reconcile
    # -------------------------------------------------------------------------

    def reconcile_from_remote(self, remote_rows: Iterable[RemoteRow]) -> ReconcileResult:
        """Полная перезапись leaderboard remote-снапшотом.

        Порядок:
        1. Фильтр скрытых аккаунтов
        2. Дедупликация по id (новейший updated_ts_utc_ms, при равенстве
           последняя строка)
        3. Monotonicity guard для строки локального игрока
        4. Стабильная сортировка по score

        Несинхронизированные локальные дельты других игроков теряются.

        Args:
            remote_rows: строки из change feed (LeaderboardEntry или dict)

        Returns:
            ReconcileResult
        """
        received = [self._coerce(r) for r in remote_rows]

        visible = [r for r in received if not self.config.is_hidden(r)]
        hidden = len(received) - len(visible)

        deduped: Dict[str, LeaderboardEntry] = {}
        for row in visible:
            existing = deduped.get(row.id)
            if existing is None or row.updated_ts_utc_ms >= existing.updated_ts_utc_ms:
                deduped[row.id] = row
        duplicates = len(visible) - len(deduped)

        protected = self._guard_local_row(deduped)

        self._rows = list(deduped.values())
        self._sort()

        result = ReconcileResult(
            rows_received=len(received),
            rows_hidden=hidden,
            duplicates_dropped=duplicates,
            rows_total=len(self._rows),
            local_row_protected=protected,
            details=(
                f"received={len(received)} hidden={hidden} "
                f"duplicates={duplicates} protected={protected}"
            ),
        )
        self._log.info(
            LogEvent.SCOREBOARD_RECONCILED,
            "Leaderboard reconciled from remote",
            {
                "rows_received": result.rows_received,
                "rows_total": result.rows_total,
                "local_row_protected": protected,
            },
        )
        return result

    def _guard_local_row(self, deduped: Dict[str, LeaderboardEntry]) -> bool:
        """Monotonicity guard (изменяет deduped на месте).

        Returns:
            True если строка локального игрока сохранена вопреки remote
        """
        player_id = self._local_player_id
        if player_id is None or self._last_local_score is None:
            return False

        local_row = self.get(player_id) or LeaderboardEntry(
            id=player_id,
            score=self._last_local_score,
            updated_ts_utc_ms=self._last_local_ts_utc_ms or 0,
        )
        remote_row = deduped.get(player_id)

        if remote_row is None:
            deduped[player_id] = local_row
            self._log.warning(
                LogEvent.SCOREBOARD_LOCAL_ROW_PROTECTED,
                "Local row missing from remote snapshot, kept",
                {"player_id": player_id, "score": local_row.score},
            )
            return True

        last_ts = self._last_local_ts_utc_ms or 0
        is_stale = remote_row.updated_ts_utc_ms <= last_ts
        if remote_row.score < self._last_local_score and is_stale:
            deduped[player_id] = local_row
            self._log.warning(
                LogEvent.SCOREBOARD_LOCAL_ROW_PROTECTED,
                "Stale remote row would roll back local score, kept local",
                {
                    "player_id": player_id,
                    "remote_score": remote_row.score,
                    "local_score": self._last_local_score,
                    "remote_ts": remote_row.updated_ts_utc_ms,
                    "local_ts": last_ts,
                },
            )
            return True

        # Remote строка принята. Baseline только растёт: устаревшая строка
        # не откатывает ни timestamp, ни score последней локальной мутации.
        if not is_stale:
            self._remember_local(remote_row)
        else:
            self._last_local_score = max(self._last_local_score, remote_row.score)
        return False

    @staticmethod
    def _coerce(row: RemoteRow) -> LeaderboardEntry:
        if isinstance(row, LeaderboardEntry):
            return row
        return LeaderboardEntry.model_validate(dict(row))

    # -------------------------------------------------------------------------
    # Consistency
    # -------------------------------------------------------------------------

    def check_consistency(
        self,
        store: TerritoryStore,
        local_player: Optional[Player] = None,
    ) -> ConsistencyReport:
        """Сверка инкрементального leaderboard с полным пересчётом.

        - territory_count каждой строки == числу территорий в store
        - владельцы территорий без строки в leaderboard
        - score строки локального игрока == Player.score
        """
        counts = store.count_by_owner()
        issues: List[ConsistencyIssue] = []

        for row in self._rows:
            expected = counts.get(row.id, 0)
            if row.territory_count != expected:
                issues.append(
                    ConsistencyIssue(row.id, "territory_count", row.territory_count, expected)
                )

        row_ids = {row.id for row in self._rows}
        for owner_id, expected in counts.items():
            if owner_id not in row_ids:
                issues.append(ConsistencyIssue(owner_id, "territory_count", None, expected))

        if local_player is not None:
            local_row = self.get(local_player.id)
            if local_row is None:
                if local_player.score > 0:
                    issues.append(
                        ConsistencyIssue(local_player.id, "score", None, local_player.score)
                    )
            elif local_row.score != local_player.score:
                issues.append(
                    ConsistencyIssue(
                        local_player.id, "score", local_row.score, local_player.score
                    )
                )

        if issues:
            self._log.warning(
                LogEvent.SCOREBOARD_INCONSISTENT,
                "Leaderboard diverged from recompute",
                {"issues": len(issues)},
            )
        return ConsistencyReport(consistent=not issues, issues=tuple(issues))

    def rebuild(self, store: TerritoryStore, players: Iterable[Player]) -> List[LeaderboardEntry]:
        """Полный пересчёт leaderboard из TerritoryStore и Player.

        score известных игроков берётся из Player, для остальных владельцев
        сохраняется текущее значение строки. Порядок существующих строк
        сохраняется для равных score.
        """
        ts = self._clock()
        counts = store.count_by_owner()
        known = {p.id: p for p in players}

        rebuilt: Dict[str, LeaderboardEntry] = {}
        for row in self._rows:
            rebuilt[row.id] = row
        for player_id in list(known) + list(counts):
            if player_id not in rebuilt:
                rebuilt[player_id] = LeaderboardEntry(id=player_id)

        rows: List[LeaderboardEntry] = []
        for player_id, row in rebuilt.items():
            player = known.get(player_id)
            rows.append(
                row.model_copy(
                    update={
                        "display_name": player.display_name if player else row.display_name,
                        "score": player.score if player else row.score,
                        "territory_count": counts.get(player_id, 0),
                        "updated_ts_utc_ms": ts,
                    }
                )
            )

        self._rows = rows
        self._sort()
        if self._local_player_id is not None:
            local = self.get(self._local_player_id)
            if local is not None:
                self._remember_local(local)

        self._log.info(
            LogEvent.SCOREBOARD_REBUILT, "Leaderboard rebuilt", {"rows": len(self._rows)}
        )
        return self.entries()
