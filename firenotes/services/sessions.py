"""
Firenotes — Client Contexts & Session Registry
===============================================

What:  Everything one signed-in client owns, and the table of live clients.
Why:   The authenticated session is passed explicitly: a ClientContext is
       built for each client at sign-in/sign-up and injected into the Home
       route handlers. Nothing looks the session up from global state.
How:   The registry hands the client an opaque token
       (secrets.token_urlsafe); requests present it as a bearer token.

ClientContext:
    identity    IdentityGateway holding this client's AuthSession
    records     RecordStoreGateway whose store authenticates with that session
    controller  HomeController (notes/products state cells)
    navigator   Navigator (screen back stack)

Eviction:
    A context is stale once its ID token has expired, its identity is signed
    out, or it has not been used for idle_timeout_seconds. Stale contexts are
    dropped (and closed) when looked up, and swept on every register().
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from firenotes.navigation import Navigator
from firenotes.services.home_controller import HomeController
from firenotes.services.identity_gateway import IdentityGateway
from firenotes.services.record_gateway import RecordStoreGateway

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ClientContext:
    identity: IdentityGateway
    records: RecordStoreGateway
    controller: HomeController
    navigator: Navigator = field(default_factory=Navigator)
    created_at: datetime = field(default_factory=_utcnow)
    last_seen: datetime = field(default_factory=_utcnow)

    def touch(self) -> None:
        self.last_seen = _utcnow()

    def is_stale(self, idle_timeout_seconds: Optional[float] = None) -> bool:
        session = self.identity.session
        if session is None or session.is_expired:
            return True
        if idle_timeout_seconds is None:
            return False
        return _utcnow() - self.last_seen > timedelta(seconds=idle_timeout_seconds)

    def close(self) -> None:
        """Sign out and stop publishing results of in-flight calls."""
        self.identity.sign_out()
        self.controller.close()


class SessionRegistry:
    """
    In-process map of client token → ClientContext.

    Args:
        idle_timeout_seconds: Evict contexts unused for this long. None keeps
            them until their ID token expires or they are dropped.
    """

    def __init__(self, idle_timeout_seconds: Optional[float] = None) -> None:
        self._contexts: Dict[str, ClientContext] = {}
        self._idle_timeout = idle_timeout_seconds

    def __len__(self) -> int:
        return len(self._contexts)

    def register(self, context: ClientContext) -> str:
        self.evict_stale()
        token = secrets.token_urlsafe(32)
        context.touch()
        self._contexts[token] = context
        logger.debug("Registered client context (%d live)", len(self._contexts))
        return token

    def get(self, token: str) -> Optional[ClientContext]:
        """The live context for `token`; a stale one is dropped and None returned."""
        context = self._contexts.get(token)
        if context is None:
            return None
        if context.is_stale(self._idle_timeout):
            self.drop(token)
            logger.info("Evicted stale client context (%d live)", len(self._contexts))
            return None
        context.touch()
        return context

    def drop(self, token: str) -> Optional[ClientContext]:
        """Remove and close the context; dropping an unknown token is a no-op."""
        context = self._contexts.pop(token, None)
        if context is not None:
            context.close()
        return context

    def evict_stale(self) -> int:
        stale = [
            token for token, context in self._contexts.items()
            if context.is_stale(self._idle_timeout)
        ]
        for token in stale:
            self.drop(token)
        if stale:
            logger.info("Evicted %d stale client contexts (%d live)", len(stale), len(self._contexts))
        return len(stale)

    def close_all(self) -> None:
        for token in list(self._contexts):
            self.drop(token)
