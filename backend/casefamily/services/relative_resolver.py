"""
CaseFamily Backend: Relative Resolver
========================================

What:  Turns a client's relation records into `{id, fullName, relationship}`
       entries, one per relation.
How:   Application-side join in two queries: read the relation records, then
       batch-fetch every referenced client with a single `$in` lookup.
Who:   Used by ClientQueryService for listing, search and the family view.

Ordering:
    Entries follow the relation records' retrieval order (natural order of
    the `relations` collection), which is stable while the data is unchanged.

Dangling references:
    A relation can point at a client that was deleted outside the cascade.
    Such relations are skipped (and logged) instead of failing the request.
"""

import logging
from typing import Any, Dict, Iterable, List

from bson import ObjectId

from casefamily.database import DocumentStore
from casefamily.models.documents import display_name

logger = logging.getLogger(__name__)

RelativeEntry = Dict[str, str]


class RelativeResolver:
    """Read-only join between `relations` and `clients`."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def resolve(self, client_id: ObjectId) -> List[RelativeEntry]:
        """Relatives of one client, in relation order."""
        relations = await self.store.relations.find({"clientId": client_id}).to_list()
        relatives_by_id = await self._fetch_relatives(relations)
        return [
            entry
            for entry in (self._entry(rel, relatives_by_id) for rel in relations)
            if entry is not None
        ]

    async def resolve_many(
        self, client_ids: Iterable[ObjectId]
    ) -> Dict[ObjectId, List[RelativeEntry]]:
        """
        Relatives of several clients at once.

        Issues two queries no matter how many clients are asked for. Every
        requested id gets a key, with an empty list when it owns no relations.
        """
        ids = list(client_ids)
        grouped: Dict[ObjectId, List[RelativeEntry]] = {cid: [] for cid in ids}
        if not ids:
            return grouped

        relations = await self.store.relations.find({"clientId": {"$in": ids}}).to_list()
        relatives_by_id = await self._fetch_relatives(relations)

        for rel in relations:
            entry = self._entry(rel, relatives_by_id)
            if entry is not None:
                grouped.setdefault(rel["clientId"], []).append(entry)
        return grouped

    async def _fetch_relatives(
        self, relations: List[Dict[str, Any]]
    ) -> Dict[ObjectId, Dict[str, Any]]:
        relative_ids = list({rel["relativeId"] for rel in relations})
        if not relative_ids:
            return {}
        documents = await self.store.clients.find({"_id": {"$in": relative_ids}}).to_list()
        return {doc["_id"]: doc for doc in documents}

    @staticmethod
    def _entry(
        relation: Dict[str, Any],
        relatives_by_id: Dict[ObjectId, Dict[str, Any]],
    ) -> RelativeEntry | None:
        relative = relatives_by_id.get(relation["relativeId"])
        if relative is None:
            logger.warning(
                "Skipping relation %s: relative %s no longer exists",
                relation.get("_id"),
                relation["relativeId"],
            )
            return None
        return {
            "id": str(relative["_id"]),
            "fullName": display_name(relative),
            "relationship": relation.get("relationship") or "",
        }
