# chantier/store/repository.py
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import ValidationError

from chantier.db.enums import CollectionKey
from chantier.errors import NotFoundError
from chantier.logger import get_logger
from chantier.schemas.base import EntityModel
from chantier.schemas.entities import (
    Apartment,
    AppSettings,
    Block,
    Category,
    Contractor,
    Notification,
    NotificationSettings,
    Project,
    Reception,
    Reserve,
    Task,
)
from chantier.store.entity_store import EntityStore

logger = get_logger(__name__)

T = TypeVar("T", bound=EntityModel)


class Repository(Generic[T]):
    """
    list / get / create / update / delete over one collection of the store.

    Writes work on the raw records so an unparseable record is skipped on read
    but never dropped by an unrelated write.
    """

    def __init__(self, store: EntityStore, key: CollectionKey, model: Type[T], label: str):
        self.store = store
        self.key = key
        self.model = model
        self.label = label

    def _records(self) -> List[Dict[str, Any]]:
        records = self.store.get(self.key, [])
        if not isinstance(records, list):
            logger.warning(f"Collection '{self.key.value}' is not a list, ignoring it")
            return []
        return records

    def _parse(self, record: Any) -> Optional[T]:
        try:
            return self.model.model_validate(record)
        except ValidationError as e:
            record_id = record.get("id") if isinstance(record, dict) else None
            logger.warning(f"Skipping unreadable {self.label} record {record_id}: {e.error_count()} error(s)")
            return None

    def list(self) -> List[T]:
        return [e for e in (self._parse(r) for r in self._records()) if e is not None]

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        return [e for e in self.list() if predicate(e)]

    def get(self, entity_id: Optional[str]) -> Optional[T]:
        if not entity_id:
            return None
        for record in self._records():
            if isinstance(record, dict) and record.get("id") == entity_id:
                return self._parse(record)
        return None

    def require(self, entity_id: str) -> T:
        entity = self.get(entity_id)
        if entity is None:
            raise NotFoundError(self.label, entity_id)
        return entity

    def create(self, entity: T) -> T:
        self.store.set(self.key, lambda records: list(records or []) + [entity.to_record()], default=[])
        return entity

    def update(self, entity_id: str, **changes) -> T:
        """Apply ``changes`` (snake_case field names) and persist; raises NotFoundError."""
        updated = self.require(entity_id).replace(**changes)
        self.save(updated)
        return updated

    def save(self, entity: T) -> T:
        """Replace the stored record carrying the same id."""
        def _replace(records):
            return [
                entity.to_record() if isinstance(r, dict) and r.get("id") == entity.id else r
                for r in records or []
            ]
        self.store.set(self.key, _replace, default=[])
        return entity

    def delete(self, entity_id: str) -> bool:
        records = self._records()
        remaining = [r for r in records if not (isinstance(r, dict) and r.get("id") == entity_id)]
        if len(remaining) == len(records):
            return False
        self.store.set(self.key, remaining)
        return True

    def replace_all(self, entities: Iterable[T]) -> List[T]:
        entities = list(entities)
        self.store.set(self.key, [e.to_record() for e in entities])
        return entities

    def clear(self):
        self.store.set(self.key, [])


class SingletonRepository(Generic[T]):
    """A single settings-like object stored under one key; falls back to the model defaults."""

    def __init__(self, store: EntityStore, key: CollectionKey, model: Type[T]):
        self.store = store
        self.key = key
        self.model = model

    def get(self) -> T:
        return self._parse(self.store.get(self.key, None))

    def _parse(self, record: Any) -> T:
        if record is None:
            return self.model()
        try:
            return self.model.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Stored '{self.key.value}' is unreadable, using defaults: {e.error_count()} error(s)")
            return self.model()

    def save(self, value: T) -> T:
        self.store.set(self.key, value.to_record())
        return value

    def update(self, **changes) -> T:
        """Apply ``changes`` to the stored value; refused when the stored value cannot be read."""
        record = self.store.set(self.key, lambda current: self._parse(current).replace(**changes).to_record())
        return self.model.model_validate(record)


class Repositories:
    """All repositories over one store."""

    def __init__(self, store: EntityStore):
        self.store = store
        self.projects: Repository[Project] = Repository(store, CollectionKey.projects, Project, "Project")
        self.blocks: Repository[Block] = Repository(store, CollectionKey.blocks, Block, "Block")
        self.apartments: Repository[Apartment] = Repository(store, CollectionKey.apartments, Apartment, "Apartment")
        self.categories: Repository[Category] = Repository(store, CollectionKey.categories, Category, "Category")
        self.contractors: Repository[Contractor] = Repository(store, CollectionKey.contractors, Contractor, "Contractor")
        self.reserves: Repository[Reserve] = Repository(store, CollectionKey.reserves, Reserve, "Reserve")
        self.tasks: Repository[Task] = Repository(store, CollectionKey.tasks, Task, "Task")
        self.receptions: Repository[Reception] = Repository(store, CollectionKey.receptions, Reception, "Reception")
        self.notifications: Repository[Notification] = Repository(
            store, CollectionKey.notifications, Notification, "Notification"
        )
        self.settings: SingletonRepository[AppSettings] = SingletonRepository(
            store, CollectionKey.settings, AppSettings
        )
        self.notification_settings: SingletonRepository[NotificationSettings] = SingletonRepository(
            store, CollectionKey.notification_settings, NotificationSettings
        )

    def collection(self, key: CollectionKey) -> Repository:
        return getattr(self, key.name)
