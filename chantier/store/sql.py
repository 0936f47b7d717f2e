# chantier/store/sql.py
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chantier.db.session import get_session
from chantier.errors import StorageError
from chantier.models.collection_record import CollectionRecord
from chantier.store.ports import StoragePort


class SqlStorage(StoragePort):
    """
    Storage port over the ``collection_records`` table.

    One short session per operation; SQLAlchemy errors are wrapped in StorageError
    so the EntityStore can degrade instead of crashing.
    """

    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self.session_factory = session_factory

    def load(self, key: str) -> Optional[str]:
        db = self.session_factory()
        try:
            record = db.get(CollectionRecord, key)
            return record.payload if record is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e
        finally:
            db.close()

    def save(self, key: str, text: str) -> None:
        db = self.session_factory()
        try:
            record = db.get(CollectionRecord, key)
            if record is None:
                db.add(CollectionRecord(key=key, payload=text))
            else:
                record.payload = text
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError(f"Failed to write '{key}': {e}") from e
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self.session_factory()
        try:
            record = db.get(CollectionRecord, key)
            if record is not None:
                db.delete(record)
                db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError(f"Failed to delete '{key}': {e}") from e
        finally:
            db.close()

    def keys(self) -> List[str]:
        db = self.session_factory()
        try:
            return list(db.scalars(select(CollectionRecord.key)))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list keys: {e}") from e
        finally:
            db.close()
