"""
Firenotes — SQL Document Store
===============================

What:  DocumentStore implementation over the `documents` table.
Why:   Runs the whole application without a Firebase project: local
       development, demos and the test suite use SQLite through aiosqlite;
       a PostgreSQL URL works unchanged.
How:   One short-lived AsyncSession per operation (the store has no request
       scope of its own). Store-assigned ids are random hex strings, the
       same shape Firestore uses for auto-ids.

Error Handling:
    Every SQLAlchemy failure is wrapped in StoreError with the driver's raw
    message, matching what the Firestore adapter reports.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping

from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from firenotes.exceptions import StoreError
from firenotes.models.document import Document
from firenotes.services.document_store import DocumentStore, StoredDocument

logger = logging.getLogger(__name__)


def new_document_id() -> str:
    """20 hex characters, the length of a Firestore auto-id."""
    return uuid.uuid4().hex[:20]


class SqlDocumentStore(DocumentStore):
    """
    Args:
        session_factory: async_sessionmaker bound to the target engine.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                existing = await session.get(Document, (collection, doc_id))
                if existing is None:
                    session.add(Document(collection=collection, doc_id=doc_id, data=dict(data)))
                else:
                    existing.data = dict(data)
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(message=str(e), context={"collection": collection}) from e

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        try:
            async with self._session_factory() as session:
                session.add(Document(collection=collection, doc_id=doc_id, data=dict(data)))
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(message=str(e), context={"collection": collection}) from e
        return doc_id

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        try:
            async with self._session_factory() as session:
                existing = await session.get(Document, (collection, doc_id))
                if existing is None:
                    session.add(Document(collection=collection, doc_id=doc_id, data=dict(fields)))
                else:
                    # Assign a new dict so the JSON column registers the change
                    existing.data = {**existing.data, **fields}
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(message=str(e), context={"collection": collection}) from e

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(Document).where(
                        Document.collection == collection,
                        Document.doc_id == doc_id,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise StoreError(message=str(e), context={"collection": collection}) from e

    async def list(self, collection: str) -> List[StoredDocument]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Document)
                    .where(Document.collection == collection)
                    .order_by(Document.created_at, Document.doc_id)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StoreError(message=str(e), context={"collection": collection}) from e

        documents: List[StoredDocument] = []
        for row in rows:
            data: Dict[str, Any] = row.data if isinstance(row.data, dict) else {}
            documents.append((row.doc_id, dict(data)))
        return documents

    async def health_check(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning("SQL document store unreachable: %s", str(e))
            return False
