"""
Firenotes — Home View-State Controller
=======================================

What:  Holds the latest known notes and products of one signed-in client and
       turns user intents (reload, add, edit, delete) into gateway calls.
Why:   The Home screen renders from these cells only; it never talks to the
       store directly.
How:   Every mutation awaits its gateway call, then unconditionally refreshes
       that collection. No optimistic local updates: the cell keeps showing
       the previous snapshot until the refresh lands.

Concurrency:
    - load_data() refreshes both collections concurrently; each cell is
      published independently as its own response arrives
    - refreshes reserve a ticket from their cell before fetching, so a stale
      slower response never overwrites a newer one (see observable.py)
    - close() marks the controller dead; in-flight calls are not cancelled
      but their results are dropped instead of published
"""

import asyncio
import logging
from typing import Any, Coroutine, List, Optional, Set

from firenotes.models.records import Note, Product
from firenotes.results import StoreResult
from firenotes.services.observable import StateCell
from firenotes.services.record_gateway import RecordStoreGateway

logger = logging.getLogger(__name__)


class HomeController:
    """
    Attributes:
        notes:      StateCell[List[Note]]
        products:   StateCell[List[Product]]
        last_error: StateCell[Optional[str]], message of the most recent
                    failed mutation, cleared by the next successful one
    """

    def __init__(self, records: RecordStoreGateway):
        self._records = records
        self.notes: StateCell[List[Note]] = StateCell([], name="notes")
        self.products: StateCell[List[Product]] = StateCell([], name="products")
        self.last_error: StateCell[Optional[str]] = StateCell(None, name="last_error")
        self._closed = False
        self._tasks: Set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Loading ───────────────────────────────────────────────────────────

    async def load_data(self) -> None:
        await asyncio.gather(self.refresh_notes(), self.refresh_products())

    async def refresh_notes(self) -> None:
        ticket = self.notes.reserve()
        notes = await self._records.get_notes()
        self._publish(self.notes, notes, ticket)

    async def refresh_products(self) -> None:
        ticket = self.products.reserve()
        products = await self._records.get_products()
        self._publish(self.products, products, ticket)

    # ── Notes ─────────────────────────────────────────────────────────────

    async def add_note(self, title: str, content: str) -> StoreResult[str]:
        result = await self._records.add_note(title, content)
        self._record_outcome(result)
        await self.refresh_notes()
        return result

    async def edit_note(self, note_id: str, title: str, content: str) -> StoreResult[None]:
        result = await self._records.update_note(note_id, title, content)
        self._record_outcome(result)
        await self.refresh_notes()
        return result

    async def delete_note(self, note_id: str) -> StoreResult[None]:
        result = await self._records.delete_note(note_id)
        self._record_outcome(result)
        await self.refresh_notes()
        return result

    # ── Products ──────────────────────────────────────────────────────────

    async def add_product(self, name: str, price: float) -> StoreResult[str]:
        result = await self._records.add_product(name, price)
        self._record_outcome(result)
        await self.refresh_products()
        return result

    async def edit_product(self, product_id: str, name: str, price: float) -> StoreResult[None]:
        result = await self._records.update_product(product_id, name, price)
        self._record_outcome(result)
        await self.refresh_products()
        return result

    async def delete_product(self, product_id: str) -> StoreResult[None]:
        result = await self._records.delete_product(product_id)
        self._record_outcome(result)
        await self.refresh_products()
        return result

    def products_by_price(self, descending: bool = False) -> List[Product]:
        return sorted(self.products.value, key=lambda p: p.price, reverse=descending)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def launch(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """
        Fire-and-forget an intent from UI code that must not wait on I/O.

        The task is referenced until it finishes so it cannot be garbage
        collected mid-flight.
        """
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    async def wait_idle(self) -> None:
        """Wait for every launched intent to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def close(self) -> None:
        self._closed = True

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Home intent failed", exc_info=task.exception())

    def _publish(self, cell: StateCell, value: Any, ticket: int) -> None:
        if self._closed:
            logger.debug("Controller closed; dropping %s result", cell.name)
            return
        cell.publish(value, ticket)

    def _record_outcome(self, result: StoreResult) -> None:
        if self._closed:
            return
        self.last_error.set(None if result.ok else result.message)
