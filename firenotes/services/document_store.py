"""
Firenotes — Abstract Document Store Interface
==============================================

What:  The narrow contract every document database backend implements.
Why:   The record gateway and the identity gateway's profile side effect
       only need five operations. Keeping them behind one interface lets
       Firestore (production) and the SQL table (development, tests) be
       swapped by configuration.
How:   Concrete stores inherit from DocumentStore and translate every
       backend failure into StoreError carrying the backend's raw message.

Write semantics:
    set()    → full-document replace, creating the document if missing
    add()    → create with a store-assigned id, returns the id
    update() → merge the given fields by id, no existence precondition
               (a missing document is created with just those fields)
    delete() → remove by id (deleting a missing document is not an error)
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Tuple

# (document id, field map)
StoredDocument = Tuple[str, Dict[str, Any]]


class DocumentStore(ABC):
    """
    Abstract interface to a collection-oriented document database.

    Implementations:
        - FirestoreDocumentStore: Cloud Firestore REST API
        - SqlDocumentStore: JSON documents in a SQL table
    """

    @abstractmethod
    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Replace (or create) the document at collection/doc_id."""
        ...

    @abstractmethod
    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        """Create a document with a store-assigned id and return that id."""
        ...

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        """Merge `fields` into the document; untouched fields are kept, a missing document is created."""
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        ...

    @abstractmethod
    async def list(self, collection: str) -> List[StoredDocument]:
        """
        Fetch every document in the collection.

        Order is the backend's own: insertion order for the SQL table,
        document-id order for Firestore. Callers that need an order sort.

        Raises:
            StoreError: The backend could not be read.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the backend answers a lightweight request."""
        ...
