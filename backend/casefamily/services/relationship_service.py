"""
CaseFamily Backend: Relationship Mutation Service
====================================================

What:  Adds, replaces and removes relation records between two clients.
How:   Validates identifiers and label, checks both clients exist, then
       writes to the `relations` collection.
Who:   Called by the /api/clients/{clientId}/relatives handlers.

Replace semantics of update_relative:
    PUT /api/clients/{clientId}/relatives deletes EVERY relation owned by
    clientId, whichever relative it points to, then inserts the single new
    one. After the call the client has exactly one outgoing relation.
    Existing frontends rely on this, so it is kept as is.
"""

import logging
from typing import Optional, Tuple

from bson import ObjectId

from casefamily.database import STORAGE_ERRORS, DocumentStore
from casefamily.exceptions import NotFoundError, StorageError, ValidationError
from casefamily.models.documents import parse_object_id, relation_document
from casefamily.schemas.client import MessageResponse

logger = logging.getLogger(__name__)


class RelationshipService:
    """
    Responsibilities:
        - add_relative(): append a relation (duplicates allowed)
        - update_relative(): replace all of a client's relations with one
        - delete_relative(): remove the relation between two given clients
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def _validate_link(
        client_id: str,
        relative_id: Optional[str],
        relationship: Optional[str],
    ) -> Tuple[ObjectId, ObjectId, str]:
        client_oid = parse_object_id(client_id, field="clientId")
        relative_oid = parse_object_id(relative_id, field="relativeId")
        if not relationship:
            raise ValidationError(message="relationship required", field="relationship")
        return client_oid, relative_oid, relationship

    async def _ensure_clients_exist(self, client_oid: ObjectId, relative_oid: ObjectId) -> None:
        for oid in (client_oid, relative_oid):
            if await self.store.clients.find_one({"_id": oid}, {"_id": 1}) is None:
                raise NotFoundError(resource="client", resource_id=str(oid))

    async def add_relative(
        self,
        client_id: str,
        relative_id: Optional[str],
        relationship: Optional[str],
    ) -> MessageResponse:
        """
        Record that `relative_id` is `relationship` of `client_id`.

        Raises:
            ValidationError: malformed id or blank relationship (→ 400)
            NotFoundError: either client is missing (→ 404)
        """
        client_oid, relative_oid, label = self._validate_link(client_id, relative_id, relationship)
        try:
            await self._ensure_clients_exist(client_oid, relative_oid)
            result = await self.store.relations.insert_one(
                relation_document(client_oid, relative_oid, label)
            )
        except STORAGE_ERRORS as e:
            logger.error("Storage error adding relative to %s: %s", client_id, str(e))
            raise StorageError(
                message="Could not add the relative",
                reason=str(e),
                context={"operation": "add_relative", "client_id": client_id},
            )

        logger.info(
            "Relation %s created: %s is %r of %s",
            result.inserted_id, relative_id, label, client_id,
        )
        return MessageResponse(message="Relative added successfully")

    async def update_relative(
        self,
        client_id: str,
        relative_id: Optional[str],
        relationship: Optional[str],
    ) -> MessageResponse:
        """
        Replace all relations owned by `client_id` with a single new one.

        Raises:
            ValidationError: malformed id or blank relationship (→ 400)
            NotFoundError: either client is missing (→ 404); nothing is deleted
        """
        client_oid, relative_oid, label = self._validate_link(client_id, relative_id, relationship)
        try:
            await self._ensure_clients_exist(client_oid, relative_oid)
            removed = await self.store.relations.delete_many({"clientId": client_oid})
            await self.store.relations.insert_one(
                relation_document(client_oid, relative_oid, label)
            )
        except STORAGE_ERRORS as e:
            logger.error("Storage error updating relative of %s: %s", client_id, str(e))
            raise StorageError(
                message="Could not update the relative",
                reason=str(e),
                context={"operation": "update_relative", "client_id": client_id},
            )

        logger.info(
            "Relations of %s replaced (%d removed): %s is %r",
            client_id, removed.deleted_count, relative_id, label,
        )
        return MessageResponse(message="Relative updated successfully")

    async def delete_relative(self, client_id: str, relative_id: str) -> MessageResponse:
        """
        Delete one relation from `client_id` to `relative_id`.

        Raises:
            ValidationError: malformed id (→ 400)
            NotFoundError: no such relation (→ 404)
        """
        client_oid = parse_object_id(client_id, field="clientId")
        relative_oid = parse_object_id(relative_id, field="relativeId")
        try:
            result = await self.store.relations.delete_one(
                {"clientId": client_oid, "relativeId": relative_oid}
            )
        except STORAGE_ERRORS as e:
            logger.error("Storage error deleting relation %s→%s: %s", client_id, relative_id, str(e))
            raise StorageError(
                message="Could not delete the relation",
                reason=str(e),
                context={"operation": "delete_relative", "client_id": client_id},
            )

        if result.deleted_count == 0:
            raise NotFoundError(
                resource="relation",
                context={"client_id": client_id, "relative_id": relative_id},
            )

        logger.info("Relation removed: %s → %s", client_id, relative_id)
        return MessageResponse(message="Relation deleted successfully")
