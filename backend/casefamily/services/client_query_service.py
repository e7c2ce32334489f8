"""
CaseFamily Backend: Client Query Service
===========================================

What:  Read side of the clients API: listing, name search and family view.
How:   Queries the `clients` collection and decorates results through the
       RelativeResolver.
Who:   Called by the GET handlers in routes/clients.py.

Search result layout (GET /api/clients/search):
    [matched A + relatives, A's new relatives..., matched B + relatives, ...]

    Each entry's identifier appears once. The first occurrence wins, so a
    client already listed as somebody's relative is not repeated when it
    matches the pattern itself.
"""

import logging
from typing import Any, Dict, List, Optional, Set

from casefamily.database import STORAGE_ERRORS, DocumentStore
from casefamily.exceptions import NotFoundError, StorageError, ValidationError
from casefamily.models.documents import display_name, parse_object_id, serialize_document
from casefamily.schemas.client import ClientListResponse, FamilyResponse, Relative
from casefamily.services.relative_resolver import RelativeResolver

logger = logging.getLogger(__name__)


class ClientQueryService:
    """
    Responsibilities:
        - list_clients(): every client with its `relatives`
        - search_clients(): case-insensitive name search plus relatives
        - get_client_family(): one client's `familyMembers`

    Driver failures are wrapped in StorageError with the driver's message
    kept as the reason.
    """

    def __init__(self, store: DocumentStore, resolver: Optional[RelativeResolver] = None):
        self.store = store
        self.resolver = resolver or RelativeResolver(store)

    async def list_clients(self) -> ClientListResponse:
        try:
            documents = await self.store.clients.find().to_list()
            relatives = await self.resolver.resolve_many(doc["_id"] for doc in documents)
        except STORAGE_ERRORS as e:
            logger.error("Storage error listing clients: %s", str(e))
            raise StorageError(
                message="Could not retrieve clients",
                reason=str(e),
                context={"operation": "list_clients"},
            )

        return ClientListResponse(
            clients=[
                {**serialize_document(doc), "relatives": relatives.get(doc["_id"], [])}
                for doc in documents
            ]
        )

    async def search_clients(self, family_name: Optional[str]) -> ClientListResponse:
        """
        Clients whose `fullName` matches `family_name`, with their relatives.

        Args:
            family_name: Regular expression fragment, matched case-insensitively
                         by the server's regex engine.

        Raises:
            ValidationError: pattern missing or blank (→ 400)
            StorageError: driver failure, including a pattern the server
                          rejects (→ 500)
        """
        if not family_name or not family_name.strip():
            raise ValidationError(message="familyName required", field="familyName")

        try:
            matched = await self.store.clients.find(
                {"fullName": {"$regex": family_name, "$options": "i"}}
            ).to_list()
            relatives = await self.resolver.resolve_many(doc["_id"] for doc in matched)
        except STORAGE_ERRORS as e:
            logger.error("Storage error searching clients for %r: %s", family_name, str(e))
            raise StorageError(
                message="Could not search clients",
                reason=str(e),
                context={"operation": "search_clients", "familyName": family_name},
            )

        results: List[Dict[str, Any]] = []
        seen: Set[str] = set()
        for doc in matched:
            client_relatives = relatives.get(doc["_id"], [])
            entry = {**serialize_document(doc), "relatives": client_relatives}
            if entry["id"] not in seen:
                seen.add(entry["id"])
                results.append(entry)
            for relative in client_relatives:
                if relative["id"] not in seen:
                    seen.add(relative["id"])
                    results.append(relative)

        logger.debug("Search %r matched %d clients, %d entries", family_name, len(matched), len(results))
        return ClientListResponse(clients=results)

    async def get_client_family(self, client_id: str) -> FamilyResponse:
        """
        One client and its relatives under `familyMembers`.

        Raises:
            ValidationError: malformed client_id (→ 400)
            NotFoundError: no such client (→ 404)
            StorageError: driver failure (→ 500)
        """
        oid = parse_object_id(client_id, field="clientId")
        try:
            client = await self.store.clients.find_one({"_id": oid})
            if client is None:
                raise NotFoundError(resource="client", resource_id=client_id)
            members = await self.resolver.resolve(oid)
        except STORAGE_ERRORS as e:
            logger.error("Storage error fetching family of %s: %s", client_id, str(e))
            raise StorageError(
                message="Could not retrieve the client's family",
                reason=str(e),
                context={"operation": "get_client_family", "client_id": client_id},
            )

        return FamilyResponse(
            id=str(client["_id"]),
            fullName=display_name(client),
            familyMembers=[Relative(**member) for member in members],
        )
