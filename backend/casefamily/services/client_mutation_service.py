"""
CaseFamily Backend: Client Mutation Service
==============================================

What:  Creates, updates and deletes client documents.
How:   Direct writes against the `clients` collection; deletion first
       removes every relation that mentions the client on either side.
Who:   Called by the POST/PUT/DELETE client handlers.

Cascade delete (DELETE /api/clients/{id}):
    1. relations.delete_many({clientId: id})
    2. relations.delete_many({relativeId: id})
    3. clients.delete_one({_id: id})  → 404 if nothing was deleted

    Steps 1-2 always run, so deleting an already-deleted client still
    sweeps any relation left behind. No transaction spans the steps.
"""

import logging
from typing import Any, Dict

from casefamily.database import STORAGE_ERRORS, DocumentStore
from casefamily.exceptions import NotFoundError, StorageError
from casefamily.models.documents import parse_object_id, serialize_document
from casefamily.schemas.client import MessageResponse

logger = logging.getLogger(__name__)


class ClientMutationService:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_client(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Store `payload` as a new client and return it with its new `id`.

        The store assigns the identifier; no field is required.
        """
        document = dict(payload)
        try:
            result = await self.store.clients.insert_one(document)
        except STORAGE_ERRORS as e:
            logger.error("Storage error creating client: %s", str(e))
            raise StorageError(
                message="Could not create the client",
                reason=str(e),
                context={"operation": "create_client"},
            )

        logger.info("Client created: %s", result.inserted_id)
        return serialize_document({**payload, "_id": result.inserted_id})

    async def update_client(self, client_id: str, payload: Dict[str, Any]) -> MessageResponse:
        """
        Overwrite the given top-level fields of a client (`$set`).

        Fields absent from `payload` are untouched and nested objects are
        replaced whole. An empty payload writes nothing but still reports
        a missing client.

        Raises:
            ValidationError: malformed client_id (→ 400)
            NotFoundError: no such client (→ 404)
        """
        oid = parse_object_id(client_id, field="clientId")
        try:
            if payload:
                result = await self.store.clients.update_one({"_id": oid}, {"$set": payload})
                found = result.matched_count > 0
            else:
                found = await self.store.clients.find_one({"_id": oid}, {"_id": 1}) is not None
        except STORAGE_ERRORS as e:
            logger.error("Storage error updating client %s: %s", client_id, str(e))
            raise StorageError(
                message="Could not update the client",
                reason=str(e),
                context={"operation": "update_client", "client_id": client_id},
            )

        if not found:
            raise NotFoundError(resource="client", resource_id=client_id)

        logger.info("Client %s updated (%d fields)", client_id, len(payload))
        return MessageResponse(message="Client updated successfully")

    async def delete_client(self, client_id: str) -> MessageResponse:
        """
        Delete a client and every relation that references it.

        Raises:
            ValidationError: malformed client_id (→ 400)
            NotFoundError: client document did not exist (→ 404), raised
                           after the relation cleanup has run
        """
        oid = parse_object_id(client_id, field="clientId")
        try:
            owned = await self.store.relations.delete_many({"clientId": oid})
            referencing = await self.store.relations.delete_many({"relativeId": oid})
            result = await self.store.clients.delete_one({"_id": oid})
        except STORAGE_ERRORS as e:
            logger.error("Storage error deleting client %s: %s", client_id, str(e))
            raise StorageError(
                message="Could not delete the client",
                reason=str(e),
                context={"operation": "delete_client", "client_id": client_id},
            )

        logger.info(
            "Relations removed for client %s: %d owned, %d referencing",
            client_id,
            owned.deleted_count,
            referencing.deleted_count,
        )
        if result.deleted_count == 0:
            raise NotFoundError(resource="client", resource_id=client_id)

        logger.info("Client deleted: %s", client_id)
        return MessageResponse(message="Client deleted successfully")
