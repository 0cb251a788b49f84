"""FastAPI dependencies shared by the route modules."""

from bson import ObjectId
from fastapi import Request

from products4u.api.exceptions import InvalidIdentifierError, MissingParameterError
from products4u.storage.gateway import PersistenceGateway
from products4u.storage.utils import is_valid_object_id


def get_gateway(request: Request) -> PersistenceGateway:
    """Return the gateway installed on the application at startup."""
    return request.app.state.gateway


def parse_query_id(raw_id: str, parameter: str = "id") -> ObjectId:
    """Turn a path id into an ObjectId before any storage call is made.

    Args:
        raw_id: Identifier from the URL path.
        parameter: Parameter name used in the error message when blank.

    Raises:
        MissingParameterError: If the id is blank.
        InvalidIdentifierError: If the id is not a well-formed ObjectId.
    """
    if not raw_id or not raw_id.strip():
        raise MissingParameterError(parameter)
    if not is_valid_object_id(raw_id):
        raise InvalidIdentifierError(raw_id)
    return ObjectId(raw_id)
