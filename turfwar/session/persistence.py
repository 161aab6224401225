"""Persistence: контракт хранения снапшота и реализации

Контракт коллаборатора: save(snapshot) / load() -> snapshot | None.
Локальное и удалённое хранилище имеют одну и ту же форму.
Ошибки I/O поднимаются как PersistenceError.
"""

import json
from pathlib import Path
from typing import Optional, Protocol

from jsonschema import ValidationError as ContractViolation
from pydantic import ValidationError

from turfwar.core.contracts import validate_game_snapshot
from turfwar.core.domain.errors import PersistenceError
from turfwar.core.domain.snapshot import GameSnapshot
from turfwar.core.logging import LogEvent, StructuredLogger


class SnapshotStore(Protocol):
    """Коллаборатор хранения снапшота."""

    def save(self, snapshot: GameSnapshot) -> None:
        ...

    def load(self) -> Optional[GameSnapshot]:
        ...


class InMemorySnapshotStore:
    """Хранилище в памяти (тесты, офлайн-сессии)."""

    def __init__(self, snapshot: Optional[GameSnapshot] = None):
        self._snapshot = snapshot
        self.save_count = 0

    def save(self, snapshot: GameSnapshot) -> None:
        self._snapshot = snapshot
        self.save_count += 1

    def load(self) -> Optional[GameSnapshot]:
        return self._snapshot


class JsonFileSnapshotStore:
    """Снапшот в JSON-файле, валидируемый контрактом game_snapshot.

    Отсутствующий файл означает отсутствие снапшота (None), а не ошибку.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def save(self, snapshot: GameSnapshot) -> None:
        data = snapshot.to_json_dict()
        try:
            validate_game_snapshot(data)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            try:
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
                tmp_path.replace(self.path)
            finally:
                # После успешного replace tmp-файла уже нет
                tmp_path.unlink(missing_ok=True)
        except (OSError, ContractViolation) as e:
            raise PersistenceError(f"Failed to save snapshot to {self.path}: {e}") from e

    def load(self) -> Optional[GameSnapshot]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            validate_game_snapshot(data)
            return GameSnapshot.model_validate(data)
        except (OSError, json.JSONDecodeError, ContractViolation, ValidationError) as e:
            raise PersistenceError(f"Failed to load snapshot from {self.path}: {e}") from e

    def delete(self) -> None:
        """Удаление локального снапшота (logout)."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete snapshot {self.path}: {e}") from e


class FallbackSnapshotStore:
    """Remote-хранилище с локальным fallback.

    - save(): сначала локально, затем remote; ошибка любого поднимается
      после попытки обоих
    - load(): remote, при ошибке или отсутствии данных local
    """

    def __init__(self, remote: SnapshotStore, local: SnapshotStore):
        self.remote = remote
        self.local = local
        self._log = StructuredLogger("persistence")

    def save(self, snapshot: GameSnapshot) -> None:
        errors = []
        for label, store in (("local", self.local), ("remote", self.remote)):
            try:
                store.save(snapshot)
            except PersistenceError as e:
                errors.append(f"{label}: {e}")
        if errors:
            raise PersistenceError("; ".join(errors))

    def load(self) -> Optional[GameSnapshot]:
        try:
            snapshot = self.remote.load()
        except PersistenceError as e:
            self._log.warning(
                LogEvent.PERSISTENCE_FALLBACK,
                "Remote load failed, falling back to local",
                exc_info=e,
            )
            return self.local.load()

        if snapshot is None:
            self._log.info(
                LogEvent.PERSISTENCE_FALLBACK, "No remote snapshot, falling back to local"
            )
            return self.local.load()
        return snapshot
