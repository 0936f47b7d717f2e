# chantier/models/collection_record.py
from chantier.db.base import Base
from datetime import datetime

from sqlalchemy import String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column


class CollectionRecord(Base):
    """One row per storage key; the payload is the JSON text of the whole collection."""

    __tablename__ = "collection_records"

    key : Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Storage key (projects, reserves, settings, ...)")
    payload : Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="JSON document of the collection")
    updated_at : Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Last write timestamp",
    )

    def __repr__(self) -> str:
        return f"<CollectionRecord key={self.key} size={len(self.payload or '')}>"
