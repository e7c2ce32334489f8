"""
CaseFamily Backend: Document Store Gateway
=============================================

What:  Lazily-connected MongoDB handle exposing the `clients` and `relations`
       collections, plus the FastAPI dependency that hands it to routes.
How:   DocumentStore wraps a PyMongo AsyncMongoClient that is created on first
       use and reused for every request until shutdown.
Who:   Built by the application factory (main.py), stored on app.state and
       injected into services through get_store().
When:  Created at app construction; the driver connects on the first query.

Collections:
    clients    {_id: ObjectId, fullName, caseNumber, ...free-form fields}
    relations  {_id: ObjectId, clientId: ObjectId, relativeId: ObjectId,
                relationship: str}
"""

import logging
from typing import Optional

from bson.errors import BSONError
from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from casefamily.config import Settings

logger = logging.getLogger(__name__)

CLIENTS_COLLECTION = "clients"
RELATIONS_COLLECTION = "relations"

# Everything the driver can raise on a query or write. BSON encoding
# failures (oversized documents, ints wider than 8 bytes) are not
# PyMongoError subclasses.
STORAGE_ERRORS = (PyMongoError, BSONError, OverflowError)


class DocumentStore:
    """
    Process-wide handle on the document database.

    The AsyncMongoClient is not constructed until one of `db`, `clients`
    or `relations` is first accessed, so building a DocumentStore never
    touches the network.
    """

    def __init__(
        self,
        uri: str,
        database_name: str,
        server_selection_timeout_ms: int = 5000,
    ):
        self._uri = uri
        self._database_name = database_name
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._client: Optional[AsyncMongoClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocumentStore":
        return cls(
            uri=settings.mongodb_uri,
            database_name=settings.mongodb_db,
            server_selection_timeout_ms=settings.mongodb_server_selection_timeout_ms,
        )

    @property
    def db(self) -> AsyncDatabase:
        if self._client is None:
            self._client = AsyncMongoClient(
                self._uri,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
            )
            logger.info("MongoDB client created for database '%s'", self._database_name)
        return self._client[self._database_name]

    @property
    def clients(self) -> AsyncCollection:
        return self.db[CLIENTS_COLLECTION]

    @property
    def relations(self) -> AsyncCollection:
        return self.db[RELATIONS_COLLECTION]

    async def ping(self) -> bool:
        """Round-trip a `ping` command; raises on an unreachable server."""
        await self.db.command("ping")
        return True

    async def close(self) -> None:
        """
        Close the driver's connection pool.

        Called from the lifespan shutdown. A store that never connected
        has nothing to close.
        """
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("MongoDB client closed")


# ── Store Dependency ──────────────────────────────────────────────────────
def get_store(request: Request) -> DocumentStore:
    """
    FastAPI dependency returning the application's DocumentStore.

    Example usage in a route:
        @router.get("/clients")
        async def list_clients(store: DocumentStore = Depends(get_store)):
            ...
    """
    return request.app.state.store
