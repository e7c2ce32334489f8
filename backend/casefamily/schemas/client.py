"""
CaseFamily Backend: Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract for clients and relations.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate the OpenAPI documentation.

Client records are free-form documents. ClientFields names the attributes
the frontend knows about (current and legacy spellings) and lets any other
key through unchanged, so stored documents keep whatever the caller sent.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Keys a payload may never write; the store owns the identifier.
RESERVED_KEYS = {"id", "_id"}


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ClientFields(BaseModel):
    """
    Attributes of a client, all optional.

    Legacy records (`nombres`, `numeroCaso`, `cedula`, `correo`, `telefono`,
    `direccion`, `parentesco`) are still accepted so older frontends keep
    working.
    """
    fullName: Optional[str] = Field(default=None, description="Full name of the case subject")
    caseNumber: Optional[str] = Field(default=None, description="Case file number")
    nationalId: Optional[str] = Field(default=None, description="National identity number")
    email: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    address: Optional[str] = Field(default=None)
    relationship: Optional[str] = Field(
        default=None,
        description="Free-text relationship label stored on the client itself",
    )

    nombres: Optional[str] = Field(default=None, description="Legacy full name")
    numeroCaso: Optional[str] = Field(default=None, description="Legacy case number")
    cedula: Optional[str] = Field(default=None, description="Legacy national ID")
    correo: Optional[str] = Field(default=None, description="Legacy email")
    telefono: Optional[str] = Field(default=None, description="Legacy phone")
    direccion: Optional[str] = Field(default=None, description="Legacy address")
    parentesco: Optional[str] = Field(default=None, description="Legacy relationship label")

    model_config = {"extra": "allow"}

    def to_document(self) -> Dict[str, Any]:
        """
        Fields the caller actually sent, ready for insert or `$set`.

        Unset named fields are left out so an update never blanks attributes
        the caller did not mention.
        """
        document = self.model_dump(exclude_unset=True)
        document.update(self.model_extra or {})
        for key in RESERVED_KEYS:
            document.pop(key, None)
        return document


class ClientCreate(ClientFields):
    """Body of POST /api/clients."""


class ClientUpdate(ClientFields):
    """Body of PUT /api/clients/{clientId}; only the sent fields change."""


class RelativeLink(BaseModel):
    """
    Body of POST/PUT /api/clients/{clientId}/relatives.

    Both fields are optional here so a missing value surfaces as a 400 from
    the service instead of a schema error.
    """
    relativeId: Optional[str] = Field(default=None, description="Identifier of the related client")
    relationship: Optional[str] = Field(
        default=None,
        description="Label read as 'relativeId is <relationship> of clientId'",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class Relative(BaseModel):
    id: str = Field(description="Identifier of the related client")
    fullName: str = Field(description="Display name of the related client")
    relationship: str = Field(description="Relationship label from the relation record")


class ClientListResponse(BaseModel):
    """
    Wrapper for GET /api/clients and GET /api/clients/search.

    Items are full client documents with a `relatives` list, except search
    results may also contain bare Relative-shaped entries.
    """
    clients: List[Dict[str, Any]] = Field(description="Client documents")


class FamilyResponse(BaseModel):
    """GET /api/clients/{clientId}/family."""
    id: str
    fullName: str
    familyMembers: List[Relative]


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    Standardized error body.

    Example:
        {
            "error": "not_found",
            "message": "client with ID '66f...' was not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Error code, or the driver message for storage errors")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
