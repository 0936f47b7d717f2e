# chantier/store/memory.py
from typing import Dict, List, Optional

from chantier.errors import StorageQuotaExceeded
from chantier.store.ports import StoragePort


class InMemoryStorage(StoragePort):
    """Dict-backed storage. ``quota_bytes`` simulates a browser storage quota."""

    def __init__(self, quota_bytes: Optional[int] = None, initial: Optional[Dict[str, str]] = None):
        self.quota_bytes = quota_bytes
        self._data: Dict[str, str] = dict(initial or {})

    def _used_bytes(self, excluding: Optional[str] = None) -> int:
        return sum(
            len(k.encode("utf-8")) + len(v.encode("utf-8"))
            for k, v in self._data.items()
            if k != excluding
        )

    def load(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def save(self, key: str, text: str) -> None:
        if self.quota_bytes is not None:
            needed = self._used_bytes(excluding=key) + len(key.encode("utf-8")) + len(text.encode("utf-8"))
            if needed > self.quota_bytes:
                raise StorageQuotaExceeded(
                    f"Storage quota exceeded writing '{key}' ({needed} > {self.quota_bytes} bytes)"
                )
        self._data[key] = text

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)
