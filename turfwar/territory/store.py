"""TerritoryStore: авторитетная in-memory модель территорий

- add_territory: площадь, очки, id и timestamp назначаются здесь
- find_containing: ray casting по всем boundary
- transfer_ownership: единственный путь мутации существующей территории

Boundary и площадь неизменны после создания. Смена владельца заменяет
frozen экземпляр целиком, поэтому читатель никогда не видит
частично переписанные owner-поля.
"""

import uuid
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from turfwar.core.clock import Clock, now_utc_ms
from turfwar.core.domain.coordinate import Coordinate
from turfwar.core.domain.errors import ErrorCode
from turfwar.core.domain.player import Player
from turfwar.core.domain.territory import Territory
from turfwar.core.domain.units import score_for_area
from turfwar.core.logging import LogEvent, StructuredLogger
from turfwar.core.math.geodesy import point_in_ring, polygon_area


class TerritoryScope(str, Enum):
    """Фильтр списка территорий."""
    ALL = "all"
    MINE = "mine"


@dataclass(frozen=True)
class TransferResult:
    """Результат transfer_ownership()."""

    ok: bool
    error: Optional[ErrorCode]
    territory: Optional[Territory]
    previous_owner_id: Optional[str]
    details: str


def _new_territory_id() -> str:
    return uuid.uuid4().hex


class TerritoryStore:
    """In-memory коллекция территорий в порядке добавления."""

    def __init__(
        self,
        clock: Clock = now_utc_ms,
        id_factory: Callable[[], str] = _new_territory_id,
    ):
        """
        Args:
            clock: источник времени (UTC мс)
            id_factory: генератор уникальных id территорий
        """
        self._clock = clock
        self._id_factory = id_factory
        self._territories: Dict[str, Territory] = {}
        self._log = StructuredLogger("territory")

    def __len__(self) -> int:
        return len(self._territories)

    def __contains__(self, territory_id: object) -> bool:
        return territory_id in self._territories

    # -------------------------------------------------------------------------
    # Создание
    # -------------------------------------------------------------------------

    def add_territory(
        self,
        boundary: Sequence[Coordinate],
        owner: Player,
        name: Optional[str] = None,
    ) -> Territory:
        """Создание территории из замкнутого кольца.

        area = |signed_area(boundary)|, score = floor(area / 100).
        Кольцо уже проверено PathRecorder; нарушение инварианта
        Territory здесь означает ошибку вызывающего кода (ValidationError).

        Args:
            boundary: замкнутое кольцо (first == last)
            owner: игрок-владелец
            name: название (по умолчанию "Territory N")

        Returns:
            Созданная территория
        """
        area = polygon_area(boundary)
        territory_id = self._id_factory()
        while territory_id in self._territories:
            territory_id = self._id_factory()

        territory = Territory(
            id=territory_id,
            name=name if name is not None else f"Territory {len(self._territories) + 1}",
            boundary=tuple(boundary),
            area_square_meters=area,
            score_value=score_for_area(area),
            owner_id=owner.id,
            owner_display_name=owner.display_name,
            owner_color=owner.color,
            captured_ts_utc_ms=self._clock(),
        )
        self._territories[territory.id] = territory

        self._log.info(
            LogEvent.TERRITORY_ADDED,
            "Territory added",
            {
                "territory_id": territory.id,
                "owner_id": owner.id,
                "area_m2": round(area, 2),
                "score_value": territory.score_value,
            },
        )
        return territory

    def load(self, territories: Iterable[Territory]) -> None:
        """Замена коллекции (например, после load() снапшота)."""
        self._territories = {t.id: t for t in territories}

    def clear(self) -> None:
        self._territories = {}

    # -------------------------------------------------------------------------
    # Запросы
    # -------------------------------------------------------------------------

    def get(self, territory_id: str) -> Optional[Territory]:
        return self._territories.get(territory_id)

    def all(self) -> List[Territory]:
        return list(self._territories.values())

    def owned_by(self, player_id: str) -> List[Territory]:
        return [t for t in self._territories.values() if t.owner_id == player_id]

    def filter(self, scope: TerritoryScope, player_id: str) -> List[Territory]:
        """Все территории или только принадлежащие player_id."""
        if scope == TerritoryScope.MINE:
            return self.owned_by(player_id)
        return self.all()

    def count_by_owner(self) -> Dict[str, int]:
        return dict(Counter(t.owner_id for t in self._territories.values()))

    def find_containing(self, point: Coordinate) -> List[Territory]:
        """Все территории, boundary которых содержит point.

        Детерминировано и идемпотентно: порядок совпадает с порядком
        добавления, состояние не меняется.
        """
        return [
            t for t in self._territories.values() if point_in_ring(point, t.boundary)
        ]

    @staticmethod
    def contains(territory: Territory, point: Coordinate) -> bool:
        """Point-in-polygon тест для одной территории."""
        return point_in_ring(point, territory.boundary)

    # -------------------------------------------------------------------------
    # Мутации владения
    # -------------------------------------------------------------------------

    def transfer_ownership(self, territory_id: str, new_owner: Player) -> TransferResult:
        """Атомарная смена владельца.

        Переписываются owner_id, owner_display_name, owner_color и
        captured_ts_utc_ms. Boundary и площадь не меняются.

        Returns:
            TransferResult (NOT_FOUND для неизвестного id)
        """
        current = self._territories.get(territory_id)
        if current is None:
            self._log.warning(
                LogEvent.TERRITORY_NOT_FOUND,
                "Transfer for unknown territory",
                {"territory_id": territory_id},
            )
            return TransferResult(
                ok=False,
                error=ErrorCode.NOT_FOUND,
                territory=None,
                previous_owner_id=None,
                details=f"Territory {territory_id} not found",
            )

        updated = current.model_copy(
            update={
                "owner_id": new_owner.id,
                "owner_display_name": new_owner.display_name,
                "owner_color": new_owner.color,
                "captured_ts_utc_ms": self._clock(),
            }
        )
        self._territories[territory_id] = updated

        self._log.info(
            LogEvent.TERRITORY_TRANSFERRED,
            "Territory ownership transferred",
            {
                "territory_id": territory_id,
                "from": current.owner_id,
                "to": new_owner.id,
            },
        )
        return TransferResult(
            ok=True,
            error=None,
            territory=updated,
            previous_owner_id=current.owner_id,
            details=f"{current.owner_id} → {new_owner.id}",
        )

    def rename_owner(self, player_id: str, display_name: str) -> int:
        """Распространение нового имени игрока на его территории.

        Returns:
            Число обновлённых территорий
        """
        updated = 0
        for territory_id, territory in list(self._territories.items()):
            if territory.owner_id == player_id:
                self._territories[territory_id] = territory.model_copy(
                    update={"owner_display_name": display_name}
                )
                updated += 1
        return updated
