"""
Firenotes — SQL Document Store Tests
=====================================

What:  SqlDocumentStore on a temporary SQLite database.

What we test:
    ✅ set creates, then replaces the whole field map
    ✅ update merges, creating missing documents
    ✅ list returns one collection in insertion order
    ✅ delete of an unknown id is a no-op
    ✅ database failures surface as StoreError
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from firenotes.database import build_session_factory
from firenotes.exceptions import StoreError
from firenotes.services.sql_store import SqlDocumentStore, new_document_id


class TestSqlDocumentStore:
    def test_new_ids_look_like_firestore_auto_ids(self):
        doc_id = new_document_id()
        assert len(doc_id) == 20
        assert doc_id != new_document_id()

    @pytest.mark.asyncio
    async def test_set_then_replace(self, sql_store):
        await sql_store.set("users", "u1", {"email": "a@b.co", "notes": [], "products": []})
        await sql_store.set("users", "u1", {"email": "c@d.co"})

        assert await sql_store.list("users") == [("u1", {"email": "c@d.co"})]

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, sql_store):
        await sql_store.set("products", "p1", {"name": "A", "price": 1.0, "sku": "x"})

        await sql_store.update("products", "p1", {"price": 2.0})

        assert await sql_store.list("products") == [("p1", {"name": "A", "price": 2.0, "sku": "x"})]

    @pytest.mark.asyncio
    async def test_update_missing_document_creates_it(self, sql_store):
        await sql_store.update("notes", "ghost", {"title": "T"})
        assert await sql_store.list("notes") == [("ghost", {"title": "T"})]

    @pytest.mark.asyncio
    async def test_list_is_scoped_and_ordered(self, sql_store):
        first = await sql_store.add("notes", {"title": "first"})
        await sql_store.add("products", {"name": "other"})
        second = await sql_store.add("notes", {"title": "second"})

        documents = await sql_store.list("notes")

        assert [doc_id for doc_id, _ in documents] == [first, second]

    @pytest.mark.asyncio
    async def test_delete(self, sql_store):
        doc_id = await sql_store.add("notes", {"title": "T"})

        await sql_store.delete("notes", doc_id)
        await sql_store.delete("notes", "never-existed")

        assert await sql_store.list("notes") == []

    @pytest.mark.asyncio
    async def test_health_check(self, sql_store):
        assert await sql_store.health_check() is True

    @pytest.mark.asyncio
    async def test_missing_table_raises_store_error(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
        store = SqlDocumentStore(build_session_factory(engine))
        try:
            with pytest.raises(StoreError):
                await store.list("notes")
        finally:
            await engine.dispose()
