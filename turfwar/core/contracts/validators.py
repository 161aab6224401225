"""
JSON Schema Contract Validators

Валидация JSON данных на границе с коллабораторами (persistence,
remote change feed) согласно формальным JSON Schema контрактам.
Использует библиотеку jsonschema.

Схемы (turfwar/core/contracts/schema/):
- game_snapshot.json: снапшот {player, territories, leaderboard}
- leaderboard_feed.json: полный снапшот рейтинга из change feed
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются внутри пакета, рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'game_snapshot')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Meta-validation самой схемы
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str, loader: SchemaLoader | None = None):
        self.schema_name = schema_name
        self.schema = (loader or _SCHEMA_LOADER).load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Any) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Any) -> bool:
        """Проверка валидности без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Any) -> Iterator[ValidationError]:
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class GameSnapshotValidator(ContractValidator):
    """Валидатор для game_snapshot контракта."""

    def __init__(self):
        super().__init__("game_snapshot")


class LeaderboardFeedValidator(ContractValidator):
    """Валидатор для leaderboard_feed контракта."""

    def __init__(self):
        super().__init__("leaderboard_feed")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_game_snapshot(data: Dict[str, Any]) -> None:
    """
    Валидация game_snapshot данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    GameSnapshotValidator().validate(data)


def validate_leaderboard_feed(data: list) -> None:
    """
    Валидация leaderboard_feed данных.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    LeaderboardFeedValidator().validate(data)
