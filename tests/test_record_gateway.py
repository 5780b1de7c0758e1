"""
Firenotes — Record Store Gateway Tests
=======================================

What:  Notes and products CRUD over both document store backends.

What we test:
    ✅ Store-assigned ids, full add/update/delete round trips
    ✅ Missing fields read as defaults; all-default documents are skipped
    ✅ Read failures deliver an empty list (and still call the callback)
    ✅ Mutation failures come back as StoreFailure with the raw message
    ✅ Prices are kept exactly (9.99 stays 9.99)
"""

import pytest

from firenotes.models.records import Note, Product
from firenotes.results import StoreFailure, StoreOk
from firenotes.services.record_gateway import RecordStoreGateway


@pytest.fixture(params=["sql", "firestore"])
def gateway(request, sql_store, firestore_store):
    return RecordStoreGateway(sql_store if request.param == "sql" else firestore_store)


@pytest.fixture
def firestore_gateway(firestore_store):
    return RecordStoreGateway(firestore_store)


class TestNotes:
    @pytest.mark.asyncio
    async def test_note_lifecycle(self, gateway):
        added = await gateway.add_note("Groceries", "Milk")
        assert isinstance(added, StoreOk)
        note_id = added.value

        assert await gateway.get_notes() == [Note(id=note_id, title="Groceries", content="Milk")]

        updated = await gateway.update_note(note_id, "Groceries", "Milk, Eggs")
        assert updated.ok
        assert await gateway.get_notes() == [Note(id=note_id, title="Groceries", content="Milk, Eggs")]

        deleted = await gateway.delete_note(note_id)
        assert deleted.ok
        assert await gateway.get_notes() == []

    @pytest.mark.asyncio
    async def test_ids_are_assigned_by_store(self, gateway):
        first = await gateway.add_note("a", "b")
        second = await gateway.add_note("a", "b")
        assert first.value and second.value
        assert first.value != second.value

    @pytest.mark.asyncio
    async def test_callback_receives_same_list(self, gateway):
        await gateway.add_note("T", "C")
        received = []

        notes = await gateway.get_notes(callback=received.append)

        assert received == [notes]

    @pytest.mark.asyncio
    async def test_missing_fields_read_as_defaults(self, sql_store):
        gateway = RecordStoreGateway(sql_store)
        await sql_store.set("notes", "n1", {"title": "Only title"})
        await sql_store.set("notes", "n2", {"content": "Only content"})

        notes = sorted(await gateway.get_notes(), key=lambda n: n.id)

        assert notes == [
            Note(id="n1", title="Only title", content="No content"),
            Note(id="n2", title="Untitled", content="Only content"),
        ]

    @pytest.mark.asyncio
    async def test_blank_documents_are_skipped(self, sql_store):
        gateway = RecordStoreGateway(sql_store)
        await sql_store.set("notes", "empty", {})
        await sql_store.set("notes", "defaults", {"title": "Untitled", "content": "No content"})
        await sql_store.set("notes", "real", {"title": "Real", "content": "No content"})

        notes = await gateway.get_notes()

        assert [n.id for n in notes] == ["real"]

    @pytest.mark.asyncio
    async def test_update_of_missing_note_writes_it(self, gateway):
        result = await gateway.update_note("does-not-exist", "T", "C")

        assert result.ok
        assert await gateway.get_notes() == [Note(id="does-not-exist", title="T", content="C")]


class TestProducts:
    @pytest.mark.asyncio
    async def test_price_is_kept_exactly(self, gateway):
        added = await gateway.add_product("Widget", 9.99)

        products = await gateway.get_products()

        assert products == [Product(id=added.value, name="Widget", price=9.99)]
        assert products[0].price == 9.99

    @pytest.mark.asyncio
    async def test_update_product(self, gateway):
        added = await gateway.add_product("Widget", 9.99)

        result = await gateway.update_product(added.value, "Gadget", 12.5)

        assert result.ok
        assert await gateway.get_products() == [Product(id=added.value, name="Gadget", price=12.5)]

    @pytest.mark.asyncio
    async def test_blank_and_mistyped_products(self, sql_store):
        gateway = RecordStoreGateway(sql_store)
        await sql_store.set("products", "blank", {"name": "Unnamed", "price": 0})
        await sql_store.set("products", "bool", {"name": "Flag", "price": True})
        await sql_store.set("products", "int", {"name": "Int", "price": 3})

        products = sorted(await gateway.get_products(), key=lambda p: p.id)

        assert products == [
            Product(id="bool", name="Flag", price=0.0),
            Product(id="int", name="Int", price=3.0),
        ]

    @pytest.mark.asyncio
    async def test_delete_product(self, gateway):
        added = await gateway.add_product("Widget", 1.0)
        assert (await gateway.delete_product(added.value)).ok
        assert await gateway.get_products() == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_failed_read_delivers_empty_list(self, firestore_gateway, fake_firebase):
        await firestore_gateway.add_note("T", "C")
        fake_firebase.failing_collections.add("notes")
        received = []

        notes = await firestore_gateway.get_notes(callback=received.append)

        assert notes == []
        assert received == [[]]

    @pytest.mark.asyncio
    async def test_failed_add_returns_raw_message(self, firestore_gateway, fake_firebase):
        fake_firebase.failing_collections.add("products")

        result = await firestore_gateway.add_product("Widget", 9.99)

        assert result == StoreFailure(message="The service is currently unavailable.")

    @pytest.mark.asyncio
    async def test_failed_delete(self, firestore_gateway, fake_firebase):
        fake_firebase.failing_collections.add("notes")
        result = await firestore_gateway.delete_note("n1")
        assert not result.ok

    @pytest.mark.asyncio
    async def test_failure_in_one_collection_leaves_other(self, firestore_gateway, fake_firebase):
        await firestore_gateway.add_product("Widget", 2.0)
        fake_firebase.failing_collections.add("notes")

        assert await firestore_gateway.get_notes() == []
        assert [p.name for p in await firestore_gateway.get_products()] == ["Widget"]
