"""
Firenotes — Document SQLAlchemy Model
======================================

What:  ORM model for the `documents` table backing SqlDocumentStore.
Why:   Mirrors the Firestore data model (collection → document id → flat
       field map) in one relational table, so both backends are
       interchangeable behind the DocumentStore interface.

Table Design:
    - (collection, doc_id) composite primary key: ids are unique per
      collection, exactly like Firestore document paths
    - data: JSON field map; no schema enforcement beyond what readers apply
    - created_at: preserves insertion order for listing
    - updated_at: bumped on every set/update
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from firenotes.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(Base):
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="Collection name, e.g. notes, products, users",
    )
    doc_id: Mapped[str] = mapped_column(
        String(128),
        primary_key=True,
        comment="Document id, unique within its collection",
    )
    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Flat field/value map",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_documents_collection_created", "collection", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Document({self.collection}/{self.doc_id})>"
