"""ConquestResolver: решение о захвате чужой территории

Порядок проверок (каждая даёт отдельную ошибку):
1. Позиция претендента известна → иначе POSITION_UNKNOWN
2. Претендент внутри boundary цели → иначе NOT_INSIDE_TERRITORY
3. Цель не принадлежит претенденту → иначе ALREADY_OWNER

Исход: равновероятный бросок монеты (p = 0.5), без учёта навыка,
расстояния или размера территории. Это упрощение игрового дизайна.

Resolver чистый: не выполняет I/O и не меняет состояние. Он возвращает
описание мутаций, которые вызывающий код применяет транзакционно.
"""

import random
from dataclasses import dataclass
from typing import Optional

from turfwar.core.domain.coordinate import Coordinate
from turfwar.core.domain.errors import ErrorCode
from turfwar.core.domain.player import Player
from turfwar.core.domain.territory import Territory
from turfwar.core.logging import LogEvent, StructuredLogger
from turfwar.core.math.geodesy import point_in_ring


# =============================================================================
# MUTATIONS
# =============================================================================


@dataclass(frozen=True)
class OwnershipTransfer:
    """Инструкция смены владельца территории."""

    territory_id: str
    previous_owner_id: str
    new_owner_id: str
    new_owner_display_name: str
    new_owner_color: str


@dataclass(frozen=True)
class ScoreDelta:
    """Дельта строки leaderboard (floor at 0 применяется при применении)."""

    player_id: str
    score_delta: int
    territory_count_delta: int
    display_name: Optional[str] = None


# =============================================================================
# RESULT
# =============================================================================


@dataclass(frozen=True)
class ConquestOutcome:
    """Результат attack()."""

    success: bool
    error: Optional[ErrorCode]

    # Мутации (пусты при отказе или проигрыше)
    transfer: Optional[OwnershipTransfer]
    score_deltas: tuple[ScoreDelta, ...]

    # Диагностика
    draw: Optional[float]
    details: str

    @property
    def attempted(self) -> bool:
        """Все предусловия выполнены и монета брошена."""
        return self.error is None

    @property
    def has_mutations(self) -> bool:
        return self.transfer is not None or bool(self.score_deltas)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class ConquestConfig:
    """Конфигурация ConquestResolver."""

    # Вероятность успешного захвата (симметричная монета)
    success_probability: float = 0.5

    def __post_init__(self):
        if not 0.0 <= self.success_probability <= 1.0:
            raise ValueError(
                f"success_probability must be in [0, 1], got {self.success_probability}"
            )


# =============================================================================
# RESOLVER
# =============================================================================


class ConquestResolver:
    """Бинарный контест за территорию."""

    def __init__(
        self,
        config: ConquestConfig | None = None,
        rng: random.Random | None = None,
    ):
        """
        Args:
            config: конфигурация (опционально, используется default)
            rng: источник случайности (инжектируется для детерминизма)
        """
        self.config = config or ConquestConfig()
        self._rng = rng or random.Random()
        self._log = StructuredLogger("conquest")

    def attack(
        self,
        challenger_position: Optional[Coordinate],
        challenger: Player,
        target: Territory,
    ) -> ConquestOutcome:
        """Попытка захвата территории.

        Args:
            challenger_position: текущая позиция претендента (None если неизвестна)
            challenger: игрок-претендент
            target: атакуемая территория

        Returns:
            ConquestOutcome: при успехе transfer + две дельты
            (+score_value/+1 претенденту, -score_value/-1 прежнему владельцу)
        """
        # 1. Позиция известна
        if challenger_position is None:
            return self._rejected(
                ErrorCode.POSITION_UNKNOWN,
                target,
                "Your current position is unknown",
            )

        # 2. Претендент внутри территории
        if not point_in_ring(challenger_position, target.boundary):
            return self._rejected(
                ErrorCode.NOT_INSIDE_TERRITORY,
                target,
                "You must be physically inside a territory to challenge it",
            )

        # 3. Своя территория
        if target.owner_id == challenger.id:
            return self._rejected(
                ErrorCode.ALREADY_OWNER,
                target,
                "Territory is already owned by the challenger",
            )

        # 4. Бросок монеты
        draw = self._rng.random()
        success = draw < self.config.success_probability

        if not success:
            self._log.info(
                LogEvent.CONQUEST_RESOLVED,
                "Attack failed",
                {"territory_id": target.id, "challenger_id": challenger.id, "success": False},
            )
            return ConquestOutcome(
                success=False,
                error=None,
                transfer=None,
                score_deltas=(),
                draw=draw,
                details=f"Challenge for {target.name} was unsuccessful",
            )

        transfer = OwnershipTransfer(
            territory_id=target.id,
            previous_owner_id=target.owner_id,
            new_owner_id=challenger.id,
            new_owner_display_name=challenger.display_name,
            new_owner_color=challenger.color,
        )
        deltas = (
            ScoreDelta(
                player_id=challenger.id,
                score_delta=target.score_value,
                territory_count_delta=1,
                display_name=challenger.display_name,
            ),
            ScoreDelta(
                player_id=target.owner_id,
                score_delta=-target.score_value,
                territory_count_delta=-1,
                display_name=target.owner_display_name,
            ),
        )

        self._log.info(
            LogEvent.CONQUEST_RESOLVED,
            "Attack succeeded",
            {
                "territory_id": target.id,
                "challenger_id": challenger.id,
                "previous_owner_id": target.owner_id,
                "score_value": target.score_value,
                "success": True,
            },
        )
        return ConquestOutcome(
            success=True,
            error=None,
            transfer=transfer,
            score_deltas=deltas,
            draw=draw,
            details=f"Captured {target.name} from {target.owner_display_name}",
        )

    def _rejected(self, error: ErrorCode, target: Territory, details: str) -> ConquestOutcome:
        self._log.info(
            LogEvent.CONQUEST_REJECTED,
            "Attack rejected",
            {"territory_id": target.id, "reason": error.value},
        )
        return ConquestOutcome(
            success=False,
            error=error,
            transfer=None,
            score_deltas=(),
            draw=None,
            details=details,
        )
