"""
Firenotes — Cloud Firestore Document Store
===========================================

What:  DocumentStore implementation over the Firestore REST API (v1).
Why:   The production backend: notes, products and user profiles live in a
       managed Firestore database shared with the mobile clients.
How:   httpx requests against
           {base}/projects/{project}/databases/{db}/documents/{collection}[/{id}]
       authenticated with the signed-in user's Firebase ID token, so the
       project's security rules apply exactly as they do for mobile clients.

Typed Value Codec:
    Firestore wraps every field value in a type tag:
        "A"          ↔ {"stringValue": "A"}
        9.99         ↔ {"doubleValue": 9.99}
        3            ↔ {"integerValue": "3"}     (int64 travels as a string)
        True         ↔ {"booleanValue": true}
        None         ↔ {"nullValue": null}
        [..]         ↔ {"arrayValue": {"values": [..]}}
        {..}         ↔ {"mapValue": {"fields": {..}}}
        datetime     ↔ {"timestampValue": "2024-01-15T12:00:00Z"}

Operation mapping:
    add     → POST   .../{collection}               (server assigns id)
    set     → PATCH  .../{collection}/{id}          (no mask = full replace)
    update  → PATCH  .../{collection}/{id}?updateMask.fieldPaths=..
    delete  → DELETE .../{collection}/{id}
    list    → GET    .../{collection}?pageSize=..&pageToken=..

A 2xx answer whose body is not the expected resource JSON is reported as
StoreError, the same as an HTTP failure.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import httpx

from firenotes.exceptions import StoreError
from firenotes.services.document_store import DocumentStore, StoredDocument

logger = logging.getLogger(__name__)

# Largest page the list endpoint accepts
LIST_PAGE_SIZE = 300


# ══════════════════════════════════════════════════════════════════════════
# Value Codec
# ══════════════════════════════════════════════════════════════════════════

def encode_value(value: Any) -> Dict[str, Any]:
    """Wrap a Python value in its Firestore type tag."""
    # bool before int: bool is an int subclass
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        stamp = value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
        return {"timestampValue": stamp}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, Mapping):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Cannot store value of type {type(value).__name__} in Firestore")


def encode_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: encode_value(val) for key, val in data.items()}


def decode_value(wrapped: Mapping[str, Any]) -> Any:
    """Unwrap a Firestore typed value. Unknown tags decode to None."""
    if "stringValue" in wrapped:
        return wrapped["stringValue"]
    if "doubleValue" in wrapped:
        return float(wrapped["doubleValue"])
    if "integerValue" in wrapped:
        return int(wrapped["integerValue"])
    if "booleanValue" in wrapped:
        return bool(wrapped["booleanValue"])
    if "nullValue" in wrapped:
        return None
    if "timestampValue" in wrapped:
        return datetime.fromisoformat(wrapped["timestampValue"].replace("Z", "+00:00"))
    if "arrayValue" in wrapped:
        return [decode_value(v) for v in wrapped["arrayValue"].get("values", [])]
    if "mapValue" in wrapped:
        return decode_fields(wrapped["mapValue"].get("fields", {}))
    # referenceValue, geoPointValue, bytesValue: not used by this application
    return None


def decode_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: decode_value(val) for key, val in fields.items()}


def document_id(name: str) -> str:
    """projects/p/databases/(default)/documents/notes/abc → abc"""
    return name.rsplit("/", 1)[-1]


# ══════════════════════════════════════════════════════════════════════════
# Firestore Store
# ══════════════════════════════════════════════════════════════════════════

class FirestoreDocumentStore(DocumentStore):
    """
    Firestore REST adapter.

    Args:
        http_client: Shared httpx.AsyncClient (owned by the application).
        project_id: Firebase project id.
        id_token: Callable returning the current user's ID token, or None
            when signed out. Evaluated per request so a sign-out takes effect
            immediately.
        base_url: Firestore REST root (overridable for the emulator).
        database: Database id, "(default)" unless configured otherwise.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        project_id: str,
        id_token: Optional[Callable[[], Optional[str]]] = None,
        base_url: str = "https://firestore.googleapis.com/v1",
        database: str = "(default)",
    ):
        self._http = http_client
        self._id_token = id_token or (lambda: None)
        self._documents_url = (
            f"{base_url.rstrip('/')}/projects/{project_id}/databases/{database}/documents"
        )

    def _headers(self) -> Dict[str, str]:
        token = self._id_token()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Any = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            response = await self._http.request(
                method, url, params=params, json=json, headers=self._headers()
            )
        except httpx.HTTPError as e:
            raise StoreError(
                message=str(e) or type(e).__name__,
                context={"method": method, "url": url},
            ) from e

        if response.status_code >= 400:
            raise StoreError(
                message=self._error_message(response),
                context={"method": method, "status": response.status_code},
            )
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Firestore errors look like {"error": {"code", "message", "status"}}."""
        try:
            error = response.json().get("error", {})
            return error.get("message") or error.get("status") or response.text
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as e:
            raise StoreError(
                message="Firestore returned a response that is not JSON",
                context={"status": response.status_code},
            ) from e
        if not isinstance(payload, dict):
            raise StoreError(
                message="Firestore returned an unexpected response body",
                context={"status": response.status_code},
            )
        return payload

    @staticmethod
    def _decode_document(resource: Any) -> StoredDocument:
        """Resource JSON → (id, fields); malformed resources raise StoreError."""
        name = resource.get("name") if isinstance(resource, dict) else None
        if not isinstance(name, str) or not name:
            raise StoreError(message="Firestore returned a document without a name")
        try:
            return document_id(name), decode_fields(resource.get("fields") or {})
        except (AttributeError, TypeError, ValueError) as e:
            raise StoreError(
                message=f"Firestore returned malformed fields for {document_id(name)}",
                context={"document": name},
            ) from e

    # ── DocumentStore operations ──────────────────────────────────────────

    async def set(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        url = f"{self._documents_url}/{collection}/{doc_id}"
        await self._request("PATCH", url, json={"fields": encode_fields(data)})

    async def add(self, collection: str, data: Mapping[str, Any]) -> str:
        url = f"{self._documents_url}/{collection}"
        response = await self._request("POST", url, json={"fields": encode_fields(data)})
        doc_id, _ = self._decode_document(self._json(response))
        return doc_id

    async def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        url = f"{self._documents_url}/{collection}/{doc_id}"
        # A masked PATCH with no precondition: missing documents are created
        params = [("updateMask.fieldPaths", key) for key in fields]
        await self._request("PATCH", url, params=params, json={"fields": encode_fields(fields)})

    async def delete(self, collection: str, doc_id: str) -> None:
        url = f"{self._documents_url}/{collection}/{doc_id}"
        await self._request("DELETE", url)

    async def list(self, collection: str) -> List[StoredDocument]:
        url = f"{self._documents_url}/{collection}"
        documents: List[StoredDocument] = []
        page_token: Optional[str] = None

        # The REST API pages its results; the application always wants all of them
        while True:
            params: Dict[str, Any] = {"pageSize": LIST_PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            payload = self._json(await self._request("GET", url, params=params))

            page = payload.get("documents") or []
            if not isinstance(page, list):
                raise StoreError(message="Firestore returned an unexpected document list")
            documents.extend(self._decode_document(doc) for doc in page)

            page_token = payload.get("nextPageToken")
            if not page_token:
                break

        logger.debug("Listed %d documents from %s", len(documents), collection)
        return documents

    async def health_check(self) -> bool:
        try:
            await self._http.get(self._documents_url, params={"pageSize": 1})
            return True
        except httpx.HTTPError as e:
            logger.warning("Firestore health check failed: %s", str(e))
            return False
