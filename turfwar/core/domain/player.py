"""
Player: модель игрока и детерминированная identity-раскраска

Цвет игрока это чистая функция от id: одна identity всегда рисуется
одним цветом на всех устройствах и сессиях. Цвет не хранится, а
вычисляется (computed_field), поэтому не может "уплыть".
"""

import random
from typing import Final, Optional

from pydantic import BaseModel, Field, computed_field

from .units import floor_at_zero


# =============================================================================
# CONSTANTS
# =============================================================================

# id гостя по умолчанию (до выдачи identity)
DEFAULT_GUEST_ID: Final[str] = "guestUser"

# display name гостя по умолчанию
DEFAULT_DISPLAY_NAME: Final[str] = "Player1"

GUEST_ID_PREFIX: Final[str] = "guest"


# =============================================================================
# IDENTITY COLOR
# =============================================================================


def _to_int32(value: int) -> int:
    """Приведение к знаковому 32-битному целому (wraparound)."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def identity_hash(seed: str) -> int:
    """
    Строковый hash с множителем 31 и 32-битным wraparound сдвига.

    hash = code + ((hash << 5) - hash), где сдвиг выполняется над int32.
    Совпадает с hash, которым раскрашивались игроки на клиентах.

    Args:
        seed: Строка-источник (обычно player id)

    Returns:
        Знаковое целое (может выходить за int32 из-за сложения)
    """
    h = 0
    for ch in seed:
        h = ord(ch) + (_to_int32(_to_int32(h) << 5) - h)
    return h


def player_color(player_id: str) -> str:
    """
    Детерминированный цвет игрока в формате hsl().

    - hue: |hash| mod 360
    - saturation: 65-84%
    - lightness: 55-64%

    Args:
        player_id: Стабильный id игрока

    Returns:
        Строка вида "hsl(H, S%, L%)"
    """
    h = abs(identity_hash(player_id))
    hue = h % 360
    saturation = 65 + (h % 20)
    lightness = 55 + (h % 10)
    return f"hsl({hue}, {saturation}%, {lightness}%)"


def generate_guest_id(rng: Optional[random.Random] = None) -> str:
    """
    Генерация guest id для неаутентифицированной сессии.

    Формат: "guest" + 5 цифр (10000-99999).
    """
    rng = rng or random.Random()
    return f"{GUEST_ID_PREFIX}{rng.randint(10000, 99999)}"


# =============================================================================
# PLAYER MODEL
# =============================================================================


class Player(BaseModel):
    """
    Модель игрока.

    Immutable модель: изменение очков или имени создаёт новый экземпляр
    (model_copy), владельцем состояния является GameSession.
    """

    id: str = Field(..., min_length=1, description="Стабильный id игрока")
    display_name: str = Field(..., description="Отображаемое имя")
    score: int = Field(0, ge=0, description="Накопленные очки")

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def color(self) -> str:
        """Цвет игрока, производный от id."""
        return player_color(self.id)

    def with_score(self, score: int) -> "Player":
        """Новый экземпляр с обновлёнными очками (floor at 0)."""
        return self.model_copy(update={"score": floor_at_zero(score)})

    def with_display_name(self, display_name: str) -> "Player":
        return self.model_copy(update={"display_name": display_name})

    @property
    def is_guest(self) -> bool:
        return self.id.startswith(GUEST_ID_PREFIX)
