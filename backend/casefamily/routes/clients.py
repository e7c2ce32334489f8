"""
CaseFamily Backend: Client Route Handlers
============================================

What:  HTTP surface for clients and their relations under /api/clients.
How:   Each handler builds its service from the injected DocumentStore,
       delegates, and returns the service result. Errors raised by the
       services are turned into responses by the handlers in main.py.
Who:   Called by the case-management frontend.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status

from casefamily.database import DocumentStore, get_store
from casefamily.schemas.client import (
    ClientCreate,
    ClientListResponse,
    ClientUpdate,
    ErrorResponse,
    FamilyResponse,
    MessageResponse,
    RelativeLink,
)
from casefamily.services.client_mutation_service import ClientMutationService
from casefamily.services.client_query_service import ClientQueryService
from casefamily.services.relationship_service import RelationshipService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["Clients"])

_BAD_REQUEST = {400: {"description": "Malformed identifier or missing field", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Client or relation not found", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Storage error", "model": ErrorResponse}}


# ── Service Dependencies ──────────────────────────────────────────────────

def get_query_service(store: DocumentStore = Depends(get_store)) -> ClientQueryService:
    return ClientQueryService(store)


def get_mutation_service(store: DocumentStore = Depends(get_store)) -> ClientMutationService:
    return ClientMutationService(store)


def get_relationship_service(store: DocumentStore = Depends(get_store)) -> RelationshipService:
    return RelationshipService(store)


# ── Clients ───────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=ClientListResponse,
    responses={**_SERVER_ERROR},
    summary="List all clients with their relatives",
)
async def list_clients(
    service: ClientQueryService = Depends(get_query_service),
) -> ClientListResponse:
    return await service.list_clients()


@router.get(
    "/search",
    response_model=ClientListResponse,
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
    summary="Search clients by name",
    description=(
        "Case-insensitive pattern match on fullName. Each matched client is "
        "followed by those of its relatives not already in the result."
    ),
)
async def search_clients(
    familyName: str | None = Query(
        default=None,
        description="Name fragment or regular expression to match against fullName",
    ),
    service: ClientQueryService = Depends(get_query_service),
) -> ClientListResponse:
    return await service.search_clients(familyName)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
    summary="Create a client",
)
async def create_client(
    body: ClientCreate,
    service: ClientMutationService = Depends(get_mutation_service),
) -> Dict[str, Any]:
    """Returns the stored fields plus the newly assigned `id`."""
    return await service.create_client(body.to_document())


@router.put(
    "/{clientId}",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Update some fields of a client",
)
async def update_client(
    clientId: str,
    body: ClientUpdate,
    service: ClientMutationService = Depends(get_mutation_service),
) -> MessageResponse:
    return await service.update_client(clientId, body.to_document())


@router.delete(
    "/{clientId}",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Delete a client and every relation referencing it",
)
async def delete_client(
    clientId: str,
    service: ClientMutationService = Depends(get_mutation_service),
) -> MessageResponse:
    return await service.delete_client(clientId)


@router.get(
    "/{clientId}/family",
    response_model=FamilyResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Get a client's family members",
)
async def get_client_family(
    clientId: str,
    service: ClientQueryService = Depends(get_query_service),
) -> FamilyResponse:
    return await service.get_client_family(clientId)


# ── Relatives ─────────────────────────────────────────────────────────────

@router.post(
    "/{clientId}/relatives",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Add a relative to a client",
)
async def add_relative(
    clientId: str,
    body: RelativeLink,
    service: RelationshipService = Depends(get_relationship_service),
) -> MessageResponse:
    return await service.add_relative(clientId, body.relativeId, body.relationship)


@router.put(
    "/{clientId}/relatives",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Replace all of a client's relations with one",
    description=(
        "Deletes every relation owned by the client, then records the given "
        "relative. The client ends up with exactly one outgoing relation."
    ),
)
async def update_relative(
    clientId: str,
    body: RelativeLink,
    service: RelationshipService = Depends(get_relationship_service),
) -> MessageResponse:
    return await service.update_relative(clientId, body.relativeId, body.relationship)


@router.delete(
    "/{clientId}/relatives/{relativeId}",
    response_model=MessageResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="Remove the relation between two clients",
)
async def delete_relative(
    clientId: str,
    relativeId: str,
    service: RelationshipService = Depends(get_relationship_service),
) -> MessageResponse:
    return await service.delete_relative(clientId, relativeId)
