"""
CaseFamily Backend: Document Shapes
======================================

What:  Helpers that convert between MongoDB documents and API values.
How:   ObjectId parsing at the validation boundary, recursive ObjectId → str
       serialization on the way out, and the relation document builder.
Who:   Used by every service; nothing here touches the network.

Document layout:
    clients    {_id, fullName | nombres, caseNumber, nationalId, email, ...}
    relations  {_id, clientId, relativeId, relationship}

A relation reads "relativeId is <relationship> of clientId". No reverse
record is created for it.
"""

from typing import Any, Dict

from bson import ObjectId

from casefamily.exceptions import ValidationError

# Legacy records were written with Spanish field names; `nombres` carries
# the full name on those.
LEGACY_NAME_FIELD = "nombres"


def parse_object_id(value: Any, field: str = "clientId") -> ObjectId:
    """
    Convert a 24-character hex string into an ObjectId.

    bson accepts any 12-byte string as a raw ObjectId; only the hex form is
    a valid identifier on the wire.

    Raises:
        ValidationError: value is not a 24-character hex string (→ 400)
    """
    if not isinstance(value, str) or len(value) != 24 or not ObjectId.is_valid(value):
        raise ValidationError(
            message=f"Invalid {field}: '{value}' is not a valid identifier",
            field=field,
        )
    return ObjectId(value)


def _to_wire(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: _to_wire(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_wire(v) for v in value]
    return value


def serialize_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Rename `_id` to `id` and stringify every ObjectId in the document."""
    body = {k: _to_wire(v) for k, v in document.items() if k != "_id"}
    return {"id": str(document["_id"]), **body}


def display_name(document: Dict[str, Any]) -> str:
    """`fullName`, else the legacy `nombres`, else an empty string."""
    return document.get("fullName") or document.get(LEGACY_NAME_FIELD) or ""


def relation_document(
    client_id: ObjectId,
    relative_id: ObjectId,
    relationship: str,
) -> Dict[str, Any]:
    return {
        "clientId": client_id,
        "relativeId": relative_id,
        "relationship": relationship,
    }
