# chantier/store/ports.py
from abc import ABC, abstractmethod
from typing import List, Optional


class StoragePort(ABC):
    """Key/value persistence for JSON text. Implementations raise StorageError on failure."""

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """Return the stored text, or None when the key was never written."""

    @abstractmethod
    def save(self, key: str, text: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...
