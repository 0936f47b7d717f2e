# chantier/store/entity_store.py
import copy
import json
from typing import Any, Callable, Dict, List, Union

from chantier.db.enums import CollectionKey
from chantier.errors import StorageError, StorageUnavailable
from chantier.logger import get_logger
from chantier.store.ports import StoragePort

logger = get_logger(__name__)

Key = Union[str, CollectionKey]


def _key(key: Key) -> str:
    return key.value if isinstance(key, CollectionKey) else key


class EntityStore:
    """
    In-memory collections flushed synchronously through a StoragePort.

    Read failures fall back to the caller's default without being cached, and a
    read-modify-write over an unreadable key is refused. Write failures keep the
    in-memory state and are recorded in ``warnings`` for the caller to surface.
    """

    def __init__(self, storage: StoragePort):
        self.storage = storage
        self._cache: Dict[str, Any] = {}
        self.warnings: List[str] = []

    def get(self, key: Key, default: Any = None) -> Any:
        """Return a copy of the value under ``key`` (loaded lazily)."""
        key = _key(key)
        if key not in self._cache:
            try:
                self._cache[key] = self._load(key, default)
            except StorageError as e:
                # 读取失败不缓存，下次再读存储
                logger.warning(f"Read of '{key}' failed, using default: {e}")
                self._warn(f"Les données '{key}' n'ont pas pu être lues: {e.message}")
                return copy.deepcopy(default)
        return copy.deepcopy(self._cache[key])

    def _current(self, key: str, default: Any) -> Any:
        """Current value for a read-modify-write; raises StorageUnavailable when it cannot be read."""
        if key not in self._cache:
            try:
                self._cache[key] = self._load(key, default)
            except StorageError as e:
                logger.error(f"Read of '{key}' failed, refusing to overwrite it: {e}")
                raise StorageUnavailable(
                    f"Les données '{key}' sont momentanément illisibles, modification annulée"
                ) from e
        return copy.deepcopy(self._cache[key])

    def _load(self, key: str, default: Any) -> Any:
        text = self.storage.load(key)
        if text is None:
            return copy.deepcopy(default)
        try:
            return json.loads(text)
        except ValueError as e:
            logger.warning(f"Stored value of '{key}' is not valid JSON, using default: {e}")
            return copy.deepcopy(default)

    def set(self, key: Key, value: Union[Any, Callable[[Any], Any]], default: Any = None) -> Any:
        """
        Replace the value under ``key``.
        :param value: new value, or a function receiving the current value and returning the new one
        :param default: current value passed to ``value`` when nothing is stored yet
        :raises StorageUnavailable: ``value`` is a function and the current value cannot be read
        """
        key = _key(key)
        if callable(value):
            value = value(self._current(key, default))
        self._cache[key] = copy.deepcopy(value)
        self._flush(key, value)
        return value

    def _flush(self, key: str, value: Any):
        try:
            self.storage.save(key, json.dumps(value, ensure_ascii=False))
        except StorageError as e:
            # 写入失败：保留内存状态，记录警告
            logger.error(f"Write of '{key}' failed, keeping in-memory state only: {e}")
            self._warn(f"Les données '{key}' n'ont pas pu être sauvegardées: {e.message}")

    def delete(self, key: Key):
        key = _key(key)
        self._cache.pop(key, None)
        try:
            self.storage.delete(key)
        except StorageError as e:
            logger.error(f"Delete of '{key}' failed: {e}")
            self._warn(f"La clé '{key}' n'a pas pu être supprimée: {e.message}")

    def _warn(self, message: str):
        if message not in self.warnings:
            self.warnings.append(message)

    def pop_warnings(self) -> List[str]:
        warnings, self.warnings = self.warnings, []
        return warnings

    def reload(self):
        """Forget cached values so the next read goes to storage."""
        self._cache.clear()
