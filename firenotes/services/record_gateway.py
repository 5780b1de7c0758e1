"""
Firenotes — Record Store Gateway
=================================

What:  Create/read/update/delete for notes and products over a DocumentStore.
Why:   Gives the controller plain async functions per record kind and keeps
       every default and read policy in one place.
How:   Mutations return StoreOk/StoreFailure and log the outcome. Reads
       always deliver a list (empty on failure), both as the return value
       and through the optional callback.

Policies (same for both record kinds):
    Identifiers:   assigned by the store on add, never by the client
    Defaults:      missing fields read as the sentinel defaults
    Blank records: documents whose every field is a default are skipped
    Failures:      logged with the store's raw message; no retries
"""

import logging
from typing import Any, Callable, List, Mapping, Optional, Type, TypeVar

from firenotes.exceptions import StoreError
from firenotes.models.records import Note, Product
from firenotes.results import StoreFailure, StoreOk, StoreResult
from firenotes.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

R = TypeVar("R", Note, Product)


class RecordStoreGateway:
    """
    Args:
        store: Backend holding the collections.
        notes_collection / products_collection: Collection names.
    """

    def __init__(
        self,
        store: DocumentStore,
        notes_collection: str = "notes",
        products_collection: str = "products",
    ):
        self._store = store
        self.notes_collection = notes_collection
        self.products_collection = products_collection

    # ── Notes ─────────────────────────────────────────────────────────────

    async def add_note(self, title: str, content: str) -> StoreResult[str]:
        return await self._add(self.notes_collection, Note.to_document(title, content))

    async def get_notes(
        self, callback: Optional[Callable[[List[Note]], None]] = None
    ) -> List[Note]:
        return await self._get_all(self.notes_collection, Note, callback)

    async def update_note(self, note_id: str, title: str, content: str) -> StoreResult[None]:
        return await self._update(self.notes_collection, note_id, Note.to_document(title, content))

    async def delete_note(self, note_id: str) -> StoreResult[None]:
        return await self._delete(self.notes_collection, note_id)

    # ── Products ──────────────────────────────────────────────────────────

    async def add_product(self, name: str, price: float) -> StoreResult[str]:
        return await self._add(self.products_collection, Product.to_document(name, price))

    async def get_products(
        self, callback: Optional[Callable[[List[Product]], None]] = None
    ) -> List[Product]:
        return await self._get_all(self.products_collection, Product, callback)

    async def update_product(self, product_id: str, name: str, price: float) -> StoreResult[None]:
        return await self._update(
            self.products_collection, product_id, Product.to_document(name, price)
        )

    async def delete_product(self, product_id: str) -> StoreResult[None]:
        return await self._delete(self.products_collection, product_id)

    # ── Shared implementation ─────────────────────────────────────────────

    async def _add(self, collection: str, document: Mapping[str, Any]) -> StoreResult[str]:
        try:
            doc_id = await self._store.add(collection, document)
        except StoreError as e:
            logger.error("Error adding to %s: %s", collection, e.message)
            return StoreFailure(message=e.message)
        logger.info("Added %s/%s", collection, doc_id)
        return StoreOk(doc_id)

    async def _get_all(
        self,
        collection: str,
        kind: Type[R],
        callback: Optional[Callable[[List[R]], None]],
    ) -> List[R]:
        records: List[R] = []
        try:
            documents = await self._store.list(collection)
        except StoreError as e:
            # Deliver an empty result so the caller never waits on a failed read
            logger.error("Error fetching %s: %s", collection, e.message)
            documents = []

        for doc_id, data in documents:
            record = kind.from_document(doc_id, data)
            if record.is_blank:
                logger.debug("Skipping blank document %s/%s", collection, doc_id)
                continue
            records.append(record)

        if callback is not None:
            callback(records)
        return records

    async def _update(
        self, collection: str, doc_id: str, fields: Mapping[str, Any]
    ) -> StoreResult[None]:
        try:
            await self._store.update(collection, doc_id, fields)
        except StoreError as e:
            logger.error("Error updating %s/%s: %s", collection, doc_id, e.message)
            return StoreFailure(message=e.message)
        logger.info("Updated %s/%s", collection, doc_id)
        return StoreOk(None)

    async def _delete(self, collection: str, doc_id: str) -> StoreResult[None]:
        try:
            await self._store.delete(collection, doc_id)
        except StoreError as e:
            logger.error("Error deleting %s/%s: %s", collection, doc_id, e.message)
            return StoreFailure(message=e.message)
        logger.info("Deleted %s/%s", collection, doc_id)
        return StoreOk(None)
