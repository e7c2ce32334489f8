"""
CaseFamily Backend: Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   An in-memory stand-in for the two MongoDB collections, plus an HTTPX
       AsyncClient wired to an app built around it. No MongoDB server is
       needed.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── store: FakeStore with empty `clients` and `relations`
    └── test_client: HTTPX AsyncClient for API endpoint testing

The fake collections understand exactly the operations the services issue:
    find / find_one with equality, `$in`, and `$regex` (+ `$options: "i"`)
    insert_one, update_one ({"$set": ...}), delete_one, delete_many
An invalid `$regex` raises OperationFailure, as the server does.
"""

import copy
import os
import re
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from pymongo.errors import OperationFailure

# Keep tests off any real database configured in the environment
os.environ["MONGODB_URI"] = "mongodb://localhost:27017"
os.environ["MONGODB_DB"] = "casefamily_test"
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Document Store
# ══════════════════════════════════════════════════════════════════════════

def _matches(document: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
    for key, condition in (query or {}).items():
        value = document.get(key)
        if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
            if "$in" in condition and value not in condition["$in"]:
                return False
            if "$regex" in condition:
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if not isinstance(value, str) or not re.search(condition["$regex"], value, flags):
                    return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._documents if length is None else self._documents[:length]


class FakeCollection:
    """Insertion-ordered list of documents behind the async collection API."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []

    def find(self, query=None, projection=None) -> FakeCursor:
        try:
            matched = [copy.deepcopy(d) for d in self.documents if _matches(d, query)]
        except re.error as e:
            # Same failure the server reports for an uncompilable $regex
            raise OperationFailure(f"Regular expression is invalid: {e}", code=51091)
        return FakeCursor(matched)

    async def find_one(self, query=None, projection=None):
        for document in self.documents:
            if _matches(document, query):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document: Dict[str, Any]):
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, query, update):
        for document in self.documents:
            if _matches(document, query):
                document.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def delete_many(self, query):
        kept = [d for d in self.documents if not _matches(d, query)]
        deleted = len(self.documents) - len(kept)
        self.documents = kept
        return SimpleNamespace(deleted_count=deleted)


class FakeStore:
    """Duck-typed DocumentStore exposing the two collections."""

    def __init__(self):
        self.clients = FakeCollection("clients")
        self.relations = FakeCollection("relations")
        self.closed = False

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True

    # ── Seeding helpers ───────────────────────────────────────────────────

    def add_client(self, **fields) -> ObjectId:
        oid = ObjectId()
        self.clients.documents.append({"_id": oid, **fields})
        return oid

    def add_relation(self, client_id: ObjectId, relative_id: ObjectId, relationship: str) -> ObjectId:
        oid = ObjectId()
        self.relations.documents.append(
            {"_id": oid, "clientId": client_id, "relativeId": relative_id, "relationship": relationship}
        )
        return oid

    def relations_of(self, client_id: ObjectId) -> List[Dict[str, Any]]:
        return [r for r in self.relations.documents if r["clientId"] == client_id]


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest_asyncio.fixture
async def test_client(store):
    """
    HTTPX AsyncClient talking to an app built around the fake store.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/clients")
            assert response.status_code == 200
    """
    from casefamily.main import create_app
    app = create_app(store=store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
