"""Capture State Machine: запись GPS-пути для захвата территории.

- Состояния IDLE → RECORDING → IDLE (паузы нет)
- Jitter-фильтр: сэмпл принимается только при смещении >= 5 м
- stop() замыкает путь в кольцо добавлением первой точки

Таймер сэмплов принадлежит внешнему location-коллаборатору: машина
только реагирует на доставленные сэмплы.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from turfwar.core.domain.coordinate import Coordinate
from turfwar.core.domain.errors import ErrorCode
from turfwar.core.domain.units import JITTER_THRESHOLD_M, MIN_CAPTURE_POINTS, MIN_RING_LENGTH
from turfwar.core.logging import LogEvent, StructuredLogger
from turfwar.core.math.geodesy import distance_meters


class CaptureState(str, Enum):
    """Состояние записи пути."""
    IDLE = "IDLE"
    RECORDING = "RECORDING"


@dataclass(frozen=True)
class CaptureConfig:
    """Конфигурация записи пути.

    - jitter_threshold_m: минимальное смещение от последней принятой точки
    - min_points: минимум принятых сэмплов для замыкания
    """
    jitter_threshold_m: float = JITTER_THRESHOLD_M
    min_points: int = MIN_CAPTURE_POINTS


@dataclass(frozen=True)
class CaptureStartResult:
    """Результат start()."""

    ok: bool
    error: Optional[ErrorCode]
    state: CaptureState
    details: str


@dataclass(frozen=True)
class SampleResult:
    """Результат on_sample()."""

    accepted: bool
    point_count: int
    distance_from_last_m: Optional[float]
    reason: str


@dataclass(frozen=True)
class CaptureStopResult:
    """Результат stop(): замкнутое кольцо или ошибка."""

    ok: bool
    error: Optional[ErrorCode]
    ring: tuple[Coordinate, ...]
    recorded_points: int
    closed_by_append: bool
    details: str


class PathRecorder:
    """State machine записи пути.

    Переходы:
    - IDLE --start()--> RECORDING (при наличии доступа к геолокации)
    - RECORDING --start()--> RECORDING, ALREADY_CAPTURING (без изменений)
    - RECORDING --stop()--> IDLE (кольцо или INSUFFICIENT_POINTS)
    - RECORDING --cancel()--> IDLE (без результата)
    """

    def __init__(self, config: Optional[CaptureConfig] = None):
        """
        Args:
            config: конфигурация записи (опционально, используется default)
        """
        self.config = config or CaptureConfig()
        self._state = CaptureState.IDLE
        self._path: List[Coordinate] = []
        self._log = StructuredLogger("capture")

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == CaptureState.RECORDING

    @property
    def path(self) -> tuple[Coordinate, ...]:
        """Снимок текущего пути (immutable)."""
        return tuple(self._path)

    def start(self, permission_granted: bool) -> CaptureStartResult:
        """Начало записи.

        Порядок проверок:
        1. Уже идёт запись → ALREADY_CAPTURING, состояние не меняется
        2. Нет доступа к геолокации → PERMISSION_DENIED
        3. Очистка пути, переход в RECORDING

        Args:
            permission_granted: доступна ли геолокация

        Returns:
            CaptureStartResult
        """
        if self._state == CaptureState.RECORDING:
            self._log.warning(
                LogEvent.CAPTURE_REJECTED,
                "Capture already in progress",
                {"reason": ErrorCode.ALREADY_CAPTURING.value, "points": len(self._path)},
            )
            return CaptureStartResult(
                ok=False,
                error=ErrorCode.ALREADY_CAPTURING,
                state=self._state,
                details=f"Already recording, {len(self._path)} points so far",
            )

        if not permission_granted:
            self._log.warning(
                LogEvent.CAPTURE_REJECTED,
                "Location permission unavailable",
                {"reason": ErrorCode.PERMISSION_DENIED.value},
            )
            return CaptureStartResult(
                ok=False,
                error=ErrorCode.PERMISSION_DENIED,
                state=self._state,
                details="Location permission is needed to capture territory",
            )

        self._path = []
        self._state = CaptureState.RECORDING
        self._log.info(LogEvent.CAPTURE_STARTED, "Capture started")

        return CaptureStartResult(
            ok=True,
            error=None,
            state=self._state,
            details="Recording started",
        )

    def on_sample(self, coord: Coordinate) -> SampleResult:
        """Обработка GPS-сэмпла.

        - Вне RECORDING сэмпл игнорируется
        - Первый сэмпл принимается всегда
        - Далее только если distance(last_appended, coord) >= jitter_threshold_m

        Args:
            coord: сэмпл от location-коллаборатора

        Returns:
            SampleResult (отклонённый сэмпл не влияет на путь)
        """
        if self._state != CaptureState.RECORDING:
            return SampleResult(
                accepted=False,
                point_count=len(self._path),
                distance_from_last_m=None,
                reason="not_recording",
            )

        if not self._path:
            self._path.append(coord)
            self._log.debug(
                LogEvent.CAPTURE_SAMPLE_ACCEPTED, "First sample accepted", {"points": 1}
            )
            return SampleResult(
                accepted=True,
                point_count=1,
                distance_from_last_m=None,
                reason="first_sample",
            )

        distance = distance_meters(self._path[-1], coord)
        if distance < self.config.jitter_threshold_m:
            self._log.debug(
                LogEvent.CAPTURE_SAMPLE_DISCARDED,
                "Sample within jitter threshold",
                {"distance_m": round(distance, 3)},
            )
            return SampleResult(
                accepted=False,
                point_count=len(self._path),
                distance_from_last_m=distance,
                reason="jitter",
            )

        self._path.append(coord)
        self._log.debug(
            LogEvent.CAPTURE_SAMPLE_ACCEPTED,
            "Sample accepted",
            {"points": len(self._path), "distance_m": round(distance, 3)},
        )
        return SampleResult(
            accepted=True,
            point_count=len(self._path),
            distance_from_last_m=distance,
            reason="moved",
        )

    def stop(self) -> CaptureStopResult:
        """Завершение записи и замыкание кольца.

        Переход в IDLE происходит всегда.
        - Вызов вне RECORDING → ok=False без кода ошибки ("Not recording")
        - Меньше min_points сэмплов → INSUFFICIENT_POINTS
        - last != first (строгое равенство) → добавляется первая точка
        - Кольцо короче 4 точек (меньше 3 различных вершин) → INSUFFICIENT_POINTS

        Returns:
            CaptureStopResult с замкнутым кольцом
        """
        recorded = list(self._path)
        was_recording = self._state == CaptureState.RECORDING
        self._state = CaptureState.IDLE

        if not was_recording:
            # Не ошибка захвата: записи просто не было
            return CaptureStopResult(
                ok=False,
                error=None,
                ring=(),
                recorded_points=0,
                closed_by_append=False,
                details="Not recording",
            )

        if len(recorded) < self.config.min_points:
            return self._failed_result(
                recorded,
                f"Not enough points: {len(recorded)} < {self.config.min_points}",
            )

        closed_by_append = False
        ring = recorded
        if ring[-1] != ring[0]:
            ring = ring + [ring[0]]
            closed_by_append = True

        if len(ring) < MIN_RING_LENGTH:
            return self._failed_result(
                recorded,
                f"Closed ring has {len(ring)} points, fewer than 3 distinct vertices",
            )

        self._log.info(
            LogEvent.CAPTURE_COMPLETED,
            "Capture completed",
            {"points": len(recorded), "closed_by_append": closed_by_append},
        )

        return CaptureStopResult(
            ok=True,
            error=None,
            ring=tuple(ring),
            recorded_points=len(recorded),
            closed_by_append=closed_by_append,
            details=f"Closed ring of {len(ring)} points",
        )

    def cancel(self) -> None:
        """Прерывание записи без результата."""
        if self._state == CaptureState.RECORDING:
            self._log.info(
                LogEvent.CAPTURE_CANCELLED, "Capture cancelled", {"points": len(self._path)}
            )
        self._path = []
        self._state = CaptureState.IDLE

    def _failed_result(self, recorded: List[Coordinate], details: str) -> CaptureStopResult:
        self._log.warning(
            LogEvent.CAPTURE_FAILED,
            "Capture failed",
            {"reason": ErrorCode.INSUFFICIENT_POINTS.value, "points": len(recorded)},
        )
        return CaptureStopResult(
            ok=False,
            error=ErrorCode.INSUFFICIENT_POINTS,
            ring=(),
            recorded_points=len(recorded),
            closed_by_append=False,
            details=details,
        )
