"""
Firenotes — Application Service Container
==========================================

What:  Builds the long-lived objects shared by every client: the httpx
       client, the identity provider, the document store backend and the
       session registry. Also builds per-client ClientContexts.
Why:   One place decides which backend is used (settings.store_backend) and
       how the pieces are wired, so routes and tests receive finished objects.
Who:   Created by create_app(); stored on app.state.services.

Wiring per client:
    IdentityGateway ──id_token()──▶ FirestoreDocumentStore ──▶ RecordStoreGateway ──▶ HomeController
          └──────── profile_store (same store) ◀──┘
"""

import logging
from typing import Callable, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from firenotes.config import Settings
from firenotes.navigation import Destination, Navigator
from firenotes.services.document_store import DocumentStore
from firenotes.services.firebase_identity import FirebaseIdentityProvider
from firenotes.services.firestore_store import FirestoreDocumentStore
from firenotes.services.home_controller import HomeController
from firenotes.services.identity_base import IdentityProvider
from firenotes.services.identity_gateway import IdentityGateway
from firenotes.services.record_gateway import RecordStoreGateway
from firenotes.services.sessions import ClientContext, SessionRegistry
from firenotes.services.sql_store import SqlDocumentStore

logger = logging.getLogger(__name__)


class AppServices:
    """
    Args:
        config: Application settings.
        http_client: Client used for every provider call. Built from config
            when omitted (tests pass one with a mock transport).
        session_factory: Required for the sql backend.
        identity_provider: Overrides the Firebase provider.
    """

    def __init__(
        self,
        config: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        identity_provider: Optional[IdentityProvider] = None,
    ):
        self.config = config
        self.http = http_client or httpx.AsyncClient(timeout=config.request_timeout_seconds)
        self.identity_provider = identity_provider or FirebaseIdentityProvider(
            self.http,
            api_key=config.firebase_api_key,
            base_url=config.identity_base_url,
        )
        self.registry = SessionRegistry(idle_timeout_seconds=config.client_idle_timeout_seconds)

        self._shared_store: Optional[DocumentStore] = None
        if config.store_backend == "sql":
            if session_factory is None:
                raise ValueError("The sql store backend needs a session factory")
            self._shared_store = SqlDocumentStore(session_factory)

    def store_for(self, id_token: Callable[[], Optional[str]]) -> DocumentStore:
        """Document store acting with the credentials `id_token` returns."""
        if self._shared_store is not None:
            return self._shared_store
        return FirestoreDocumentStore(
            self.http,
            project_id=self.config.firebase_project_id,
            id_token=id_token,
            base_url=self.config.firestore_base_url,
            database=self.config.firestore_database,
        )

    def new_client(self, stack: Optional[List[Destination]] = None) -> ClientContext:
        identity = IdentityGateway(
            self.identity_provider,
            users_collection=self.config.users_collection,
            min_password_length=self.config.min_password_length,
        )
        store = self.store_for(identity.id_token)
        identity.attach_profile_store(store)
        records = RecordStoreGateway(
            store,
            notes_collection=self.config.notes_collection,
            products_collection=self.config.products_collection,
        )
        return ClientContext(
            identity=identity,
            records=records,
            controller=HomeController(records),
            navigator=Navigator(stack),
        )

    async def health_check_store(self) -> bool:
        return await self.store_for(lambda: None).health_check()

    async def aclose(self) -> None:
        self.registry.close_all()
        await self.http.aclose()
        logger.info("Provider HTTP client closed")
