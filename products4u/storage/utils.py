"""Utility functions for the storage layer.

Helpers for validating document identifiers and turning raw MongoDB
documents into JSON-ready dictionaries.
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId


def is_valid_object_id(value: Optional[str]) -> bool:
    """Check whether a string is a well-formed MongoDB ObjectId.

    Args:
        value: Candidate identifier, usually taken from a URL path.

    Returns:
        True if the value is a 24-character hex string (or other form
        accepted by ``bson.ObjectId``), False otherwise.

    Example:
        >>> is_valid_object_id("65f1c2a9e4b0a1b2c3d4e5f6")
        True
        >>> is_valid_object_id("not-an-id")
        False
    """
    if not value:
        return False
    return ObjectId.is_valid(value)


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return serialize_document(value)
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value


def serialize_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a MongoDB document into a JSON-ready dictionary.

    ObjectId values (including ``_id`` and any nested ones) are rendered as
    their hex strings. Datetimes are left untouched; FastAPI encodes them
    as ISO 8601 strings.

    Args:
        document: Raw document as returned by the driver.

    Returns:
        A new dictionary safe to hand to the response encoder.
    """
    return {key: _serialize_value(value) for key, value in document.items()}


def serialize_documents(documents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Serialize a list of documents, preserving order."""
    return [serialize_document(document) for document in documents]
