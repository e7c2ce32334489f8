"""
CaseFamily Backend: Client Query Service Unit Tests
======================================================

What we test:
    ✅ Listing decorates every client with `relatives`
    ✅ Search: required pattern, server-side regex errors, case-insensitivity, dedup, order
    ✅ Family view: shape, legacy name fallback, 400/404
    ✅ Driver errors become StorageError
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from casefamily.exceptions import NotFoundError, StorageError, ValidationError
from casefamily.services.client_query_service import ClientQueryService


class TestListClients:

    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        result = await ClientQueryService(store).list_clients()
        assert result.clients == []

    @pytest.mark.asyncio
    async def test_clients_carry_relatives(self, store):
        ana = store.add_client(fullName="Ana Torres", caseNumber="C-1")
        luis = store.add_client(fullName="Luis Torres")
        store.add_relation(ana, luis, "father")

        result = await ClientQueryService(store).list_clients()

        assert result.clients == [
            {
                "id": str(ana),
                "fullName": "Ana Torres",
                "caseNumber": "C-1",
                "relatives": [{"id": str(luis), "fullName": "Luis Torres", "relationship": "father"}],
            },
            {"id": str(luis), "fullName": "Luis Torres", "relatives": []},
        ]

    @pytest.mark.asyncio
    async def test_storage_failure_is_wrapped(self, store):
        store.clients.find = MagicMock(side_effect=ServerSelectionTimeoutError("no servers available"))

        with pytest.raises(StorageError) as excinfo:
            await ClientQueryService(store).list_clients()

        assert excinfo.value.reason == "no servers available"


class TestSearchClients:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pattern", [None, "", "   "])
    async def test_pattern_is_required(self, store, pattern):
        with pytest.raises(ValidationError, match="familyName required"):
            await ClientQueryService(store).search_clients(pattern)

    @pytest.mark.asyncio
    async def test_pattern_rejected_by_server(self, store):
        store.add_client(fullName="Smith")

        with pytest.raises(StorageError) as excinfo:
            await ClientQueryService(store).search_clients("Smith(")

        assert "Regular expression is invalid" in excinfo.value.reason

    @pytest.mark.asyncio
    async def test_pattern_sent_to_server_unchanged(self, store):
        cursor = MagicMock()
        cursor.to_list = AsyncMock(return_value=[])
        store.clients.find = MagicMock(return_value=cursor)

        response = await ClientQueryService(store).search_clients(r"^\p{Lu}(?<rest>.*)$")

        assert response.clients == []
        store.clients.find.assert_called_once_with(
            {"fullName": {"$regex": r"^\p{Lu}(?<rest>.*)$", "$options": "i"}}
        )

    @pytest.mark.asyncio
    async def test_match_is_case_insensitive(self, store):
        smith = store.add_client(fullName="John Smith")
        store.add_client(fullName="Mary Jones")

        result = await ClientQueryService(store).search_clients("SMITH")

        assert [c["id"] for c in result.clients] == [str(smith)]

    @pytest.mark.asyncio
    async def test_overlapping_match_and_relative_listed_once(self, store):
        a = store.add_client(fullName="Smith")
        b = store.add_client(fullName="Smithson")
        store.add_relation(a, b, "sibling")

        result = await ClientQueryService(store).search_clients("Smith")

        ids = [c["id"] for c in result.clients]
        assert set(ids) == {str(a), str(b)}
        assert len(ids) == len(set(ids))
        first = next(c for c in result.clients if c["id"] == str(a))
        assert first["relatives"] == [{"id": str(b), "fullName": "Smithson", "relationship": "sibling"}]

    @pytest.mark.asyncio
    async def test_matched_clients_followed_by_their_new_relatives(self, store):
        a = store.add_client(fullName="Ana Smith")
        shared = store.add_client(fullName="Carla Jones")
        b = store.add_client(fullName="Bruno Smithers")
        other = store.add_client(fullName="Dario Ruiz")
        store.add_relation(a, shared, "mother")
        store.add_relation(b, shared, "aunt")
        store.add_relation(b, other, "cousin")

        result = await ClientQueryService(store).search_clients("smith")

        assert [c["id"] for c in result.clients] == [str(a), str(shared), str(b), str(other)]
        # Relatives are added in their projected shape, not as full documents
        assert result.clients[1] == {"id": str(shared), "fullName": "Carla Jones", "relationship": "mother"}
        assert "relatives" in result.clients[2]

    @pytest.mark.asyncio
    async def test_no_match(self, store):
        store.add_client(fullName="Mary Jones")
        result = await ClientQueryService(store).search_clients("Smith")
        assert result.clients == []


class TestGetClientFamily:

    @pytest.mark.asyncio
    async def test_family_members(self, store):
        ana = store.add_client(fullName="Ana Torres")
        luis = store.add_client(fullName="Luis Torres")
        store.add_relation(ana, luis, "father")

        family = await ClientQueryService(store).get_client_family(str(ana))

        assert family.id == str(ana)
        assert family.fullName == "Ana Torres"
        assert [(m.id, m.relationship) for m in family.familyMembers] == [(str(luis), "father")]

    @pytest.mark.asyncio
    async def test_legacy_name_fallback(self, store):
        legacy = store.add_client(nombres="Rosa Pérez")
        family = await ClientQueryService(store).get_client_family(str(legacy))
        assert family.fullName == "Rosa Pérez"
        assert family.familyMembers == []

    @pytest.mark.asyncio
    async def test_unknown_client(self, store):
        with pytest.raises(NotFoundError):
            await ClientQueryService(store).get_client_family(str(ObjectId()))

    @pytest.mark.asyncio
    async def test_malformed_id(self, store):
        with pytest.raises(ValidationError):
            await ClientQueryService(store).get_client_family("not-an-id")
