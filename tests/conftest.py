"""
Firenotes — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests never reach Google: a FakeFirebase answers the Identity Toolkit
       and Firestore REST calls through httpx.MockTransport, and the SQL
       backend runs on a throwaway SQLite file.

Fixture Hierarchy:
    fake_firebase ──▶ http_client ──▶ identity_provider
                              └─────▶ firestore_store
    sql_session_factory ──▶ sql_store
    test_settings ──▶ app ──▶ test_client
"""

import json
import os
import re
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Set

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any firenotes import so the module-level settings never see
# real credentials
os.environ["FIREBASE_API_KEY"] = "test-key-not-real"
os.environ["FIREBASE_PROJECT_ID"] = "test-project"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from firenotes.config import Settings  # noqa: E402
from firenotes.database import build_session_factory, create_schema  # noqa: E402
from firenotes.services.firebase_identity import FirebaseIdentityProvider  # noqa: E402
from firenotes.services.firestore_store import FirestoreDocumentStore  # noqa: E402
from firenotes.services.sql_store import SqlDocumentStore  # noqa: E402

API_KEY = "test-key-not-real"
PROJECT_ID = "test-project"
IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1"
FIRESTORE_URL = "https://firestore.googleapis.com/v1"


# ══════════════════════════════════════════════════════════════════════════
# Fake Firebase
# ══════════════════════════════════════════════════════════════════════════

def _error(status: int, message: str, code: str = "") -> httpx.Response:
    body = {"error": {"code": status, "message": message}}
    if code:
        body["error"]["status"] = code
    return httpx.Response(status, json=body)


class FakeFirebase:
    """
    In-memory Identity Toolkit + Firestore, speaking just enough of both
    REST APIs for the adapters.

    Knobs:
        failing_collections: Firestore calls on these collections answer 503.
        identity_down:       Identity calls raise a connect error.
        page_size:           Max documents per list page (forces paging).
        require_auth:        Firestore calls need a bearer token issued here.
    """

    EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    def __init__(self) -> None:
        self.users: Dict[str, Dict[str, str]] = {}
        self.collections: Dict[str, "OrderedDict[str, Dict[str, Any]]"] = {}
        self.reset_emails: List[str] = []
        self.requests: List[httpx.Request] = []
        self.failing_collections: Set[str] = set()
        self.identity_down = False
        self.page_size = 2
        self.require_auth = True
        self._issued_tokens: Set[str] = set()
        self._counter = 0

    # ── Helpers for tests ─────────────────────────────────────────────────

    def add_user(self, email: str, password: str, display_name: str = "") -> str:
        self._counter += 1
        uid = f"uid{self._counter}"
        self.users[email] = {"uid": uid, "password": password, "displayName": display_name}
        return uid

    def documents(self, collection: str) -> Dict[str, Dict[str, Any]]:
        """Stored documents of a collection, typed values decoded to plain ones."""
        from firenotes.services.firestore_store import decode_fields

        return {
            doc_id: decode_fields(fields)
            for doc_id, fields in self.collections.get(collection, {}).items()
        }

    def put_raw(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Insert an already-encoded document, bypassing the adapters."""
        self.collections.setdefault(collection, OrderedDict())[doc_id] = fields

    # ── Transport entry point ─────────────────────────────────────────────

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        if url.startswith(IDENTITY_URL):
            return self._identity(request)
        if url.startswith(FIRESTORE_URL):
            return self._firestore(request)
        return httpx.Response(404, json={"error": {"message": "NOT_FOUND"}})

    # ── Identity Toolkit ──────────────────────────────────────────────────

    def _issue(self, email: str, user: Dict[str, str]) -> httpx.Response:
        self._counter += 1
        token = f"id-token-{user['uid']}-{self._counter}"
        self._issued_tokens.add(token)
        return httpx.Response(
            200,
            json={
                "localId": user["uid"],
                "idToken": token,
                "refreshToken": f"refresh-{self._counter}",
                "email": email,
                "displayName": user.get("displayName", ""),
                "expiresIn": "3600",
            },
        )

    def _identity(self, request: httpx.Request) -> httpx.Response:
        if self.identity_down:
            raise httpx.ConnectError("connection refused", request=request)
        if request.method == "GET":
            return httpx.Response(404, json={"error": {"message": "NOT_FOUND"}})
        if request.url.params.get("key") != API_KEY:
            return _error(400, "API key not valid. Please pass a valid API key.")

        method = request.url.path.rsplit(":", 1)[-1]
        body = json.loads(request.content or b"{}")
        email = body.get("email", "")

        if method == "signUp":
            if not email:
                return _error(400, "MISSING_EMAIL")
            if not self.EMAIL_RE.match(email):
                return _error(400, "INVALID_EMAIL")
            if email in self.users:
                return _error(400, "EMAIL_EXISTS")
            if len(body.get("password", "")) < 6:
                return _error(400, "WEAK_PASSWORD : Password should be at least 6 characters")
            self.add_user(email, body["password"])
            return self._issue(email, self.users[email])

        if method == "signInWithPassword":
            user = self.users.get(email)
            if user is None or user["password"] != body.get("password"):
                return _error(400, "INVALID_LOGIN_CREDENTIALS")
            return self._issue(email, user)

        if method == "sendOobCode":
            if not self.EMAIL_RE.match(email):
                return _error(400, "INVALID_EMAIL")
            if email not in self.users:
                return _error(400, "EMAIL_NOT_FOUND")
            self.reset_emails.append(email)
            return httpx.Response(200, json={"email": email})

        return _error(404, "NOT_FOUND")

    # ── Firestore ─────────────────────────────────────────────────────────

    def _firestore(self, request: httpx.Request) -> httpx.Response:
        root = f"/v1/projects/{PROJECT_ID}/databases/(default)/documents"
        path = request.url.path
        if not path.startswith(root):
            return _error(404, "Project not found", "NOT_FOUND")
        parts = [p for p in path[len(root):].split("/") if p]

        if not parts:
            return httpx.Response(200, json={})

        collection = parts[0]
        doc_id: Optional[str] = parts[1] if len(parts) > 1 else None

        if self.require_auth:
            auth = request.headers.get("Authorization", "")
            if auth.removeprefix("Bearer ") not in self._issued_tokens:
                return _error(403, "Missing or insufficient permissions.", "PERMISSION_DENIED")
        if collection in self.failing_collections:
            return _error(503, "The service is currently unavailable.", "UNAVAILABLE")

        docs = self.collections.setdefault(collection, OrderedDict())
        body = json.loads(request.content) if request.content else {}

        if request.method == "POST" and doc_id is None:
            self._counter += 1
            new_id = f"doc{self._counter:04d}"
            docs[new_id] = body.get("fields", {})
            return httpx.Response(200, json=self._resource(root, collection, new_id, docs[new_id]))

        if request.method == "PATCH" and doc_id is not None:
            mask = request.url.params.get_list("updateMask.fieldPaths")
            if mask:
                merged = dict(docs.get(doc_id, {}))
                for key in mask:
                    if key in body.get("fields", {}):
                        merged[key] = body["fields"][key]
                    else:
                        merged.pop(key, None)
                docs[doc_id] = merged
            else:
                docs[doc_id] = body.get("fields", {})
            return httpx.Response(200, json=self._resource(root, collection, doc_id, docs[doc_id]))

        if request.method == "DELETE" and doc_id is not None:
            docs.pop(doc_id, None)
            return httpx.Response(200, json={})

        if request.method == "GET" and doc_id is None:
            ids = list(docs)
            start = int(request.url.params.get("pageToken") or 0)
            size = min(int(request.url.params.get("pageSize") or self.page_size), self.page_size)
            page = ids[start:start + size]
            payload: Dict[str, Any] = {
                "documents": [self._resource(root, collection, i, docs[i]) for i in page]
            }
            if start + size < len(ids):
                payload["nextPageToken"] = str(start + size)
            if not page:
                payload = {}
            return httpx.Response(200, json=payload)

        return _error(400, "Unsupported request", "INVALID_ARGUMENT")

    @staticmethod
    def _resource(root: str, collection: str, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return {"name": f"{root[len('/v1/'):]}/{collection}/{doc_id}", "fields": fields}


# ══════════════════════════════════════════════════════════════════════════
# Provider Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_firebase() -> FakeFirebase:
    return FakeFirebase()


@pytest_asyncio.fixture
async def http_client(fake_firebase):
    """httpx client whose every request is answered by FakeFirebase."""
    transport = httpx.MockTransport(fake_firebase.handler)
    async with httpx.AsyncClient(transport=transport) as client:
        yield client


@pytest.fixture
def identity_provider(http_client) -> FirebaseIdentityProvider:
    return FirebaseIdentityProvider(http_client, api_key=API_KEY, base_url=IDENTITY_URL)


@pytest.fixture
def firestore_token():
    """Mutable holder for the bearer token the Firestore store sends."""
    return {"token": None}


@pytest.fixture
def firestore_store(http_client, fake_firebase, firestore_token) -> FirestoreDocumentStore:
    fake_firebase.require_auth = False
    return FirestoreDocumentStore(
        http_client,
        project_id=PROJECT_ID,
        id_token=lambda: firestore_token["token"],
        base_url=FIRESTORE_URL,
    )


# ══════════════════════════════════════════════════════════════════════════
# SQL Backend Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def sql_session_factory(tmp_path):
    """Fresh SQLite database file with the documents table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'firenotes.db'}")
    await create_schema(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def sql_store(sql_session_factory) -> SqlDocumentStore:
    return SqlDocumentStore(sql_session_factory)


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        firebase_api_key=API_KEY,
        firebase_project_id=PROJECT_ID,
        identity_base_url=IDENTITY_URL,
        firestore_base_url=FIRESTORE_URL,
        store_backend="firestore",
        log_level="WARNING",
    )


@pytest.fixture
def app(test_settings, http_client):
    from firenotes.main import create_app

    return create_app(config=test_settings, http_client=http_client)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the FastAPI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def signed_in_client(test_client, fake_firebase):
    """test_client carrying the bearer token of a freshly signed-in user."""
    fake_firebase.add_user("ada@example.com", "secret123", display_name="Ada")
    response = await test_client.post(
        "/auth/login", json={"email": "ada@example.com", "password": "secret123"}
    )
    assert response.status_code == 200, response.text
    test_client.headers["Authorization"] = f"Bearer {response.json()['client_token']}"
    return test_client
