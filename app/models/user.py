"""
app/models/user.py

Purpose: User document model

- Builds new user documents with their initial counters
- Renders stored documents as JSON-safe dicts
- Keeps the password digest out of every response
"""

from bson import ObjectId
from typing import Any, Dict, Optional

# Rating value of a user nobody has reviewed yet
NO_RATING = -1

# Fields the image update must never overwrite
PROTECTED_FIELDS = frozenset({"_id", "password", "email", "rating", "reviews", "bikes"})


def new_user_document(email: str, password_digest: str, name: str) -> Dict[str, Any]:
    return {
        "email": email,
        "password": password_digest,
        "name": name,
        "location": "",
        "rating": NO_RATING,
        "reviews": [],
        "rentedTo": 0,
        "bikes": [],
    }


def to_json(value: Any) -> Any:
    """Recursively converts ObjectIds to their hex string."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_json(item) for item in value]
    return value


def serialize_user(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    public = {key: value for key, value in document.items() if key != "password"}
    return to_json(public)


def as_object_id(value: Any) -> Any:
    """Bike references may have been stored as hex strings; the store keys on ObjectId."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value
