"""
Firenotes — Observable State Cells
===================================

What:  Single-writer state containers the UI observes.
Why:   Several refreshes of the same collection may be in flight at once and
       complete in any order. Without ordering, a slow response for an older
       request would overwrite the result of a newer one.
How:   Each request reserves a ticket (monotonically increasing int) before
       it starts. publish() accepts a value only if its ticket is newer than
       the last published ticket, then notifies subscribers.

    issue t1 ──────────────── complete t1 (dropped, t2 already published)
        issue t2 ── complete t2 (published)
"""

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Observer = Callable[[T], None]


class StateCell(Generic[T]):
    """Latest-known value plus the ticket that produced it."""

    def __init__(self, initial: T, name: str = "state"):
        self.name = name
        self._value = initial
        self._issued = 0
        self._published = 0
        self._observers: List[Observer] = []

    @property
    def value(self) -> T:
        return self._value

    @property
    def version(self) -> int:
        """Ticket of the value currently held (0 = initial value)."""
        return self._published

    def reserve(self) -> int:
        self._issued += 1
        return self._issued

    def publish(self, value: T, ticket: int) -> bool:
        """
        Store `value` if `ticket` is newer than the current one.

        Returns:
            True if the value was stored and observers were notified.
        """
        if ticket <= self._published:
            logger.debug(
                "Dropping stale %s result (ticket %d <= %d)", self.name, ticket, self._published
            )
            return False

        self._value = value
        self._published = ticket
        for observer in list(self._observers):
            observer(value)
        return True

    def set(self, value: T) -> None:
        """Publish under a fresh ticket (for writes with no request in flight)."""
        self.publish(value, self.reserve())

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe
