"""Query endpoints for the Products4U API.

A query is a user-submitted record describing a product to boycott and
why. These endpoints list, fetch, create and delete queries, and bump the
counter of recommendations made for one.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from products4u.api.dependencies import get_gateway, parse_query_id
from products4u.api.exceptions import QueryNotFoundError, StorageError
from products4u.storage.gateway import PersistenceGateway

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["queries"])

DEFAULT_LATEST_LIMIT = 3


class QueryCreate(BaseModel):
    """Request body for creating a query.

    Attributes:
        productName: Name of the product.
        productBrand: Brand that makes the product.
        productImageURL: Link to a picture of the product.
        queryTitle: Short title shown in listings.
        boycottingReasonDetails: Why the product is being boycotted.
        userEmail: Email of the submitting user, if known.
    """

    productName: str = Field(..., min_length=1)
    productBrand: str = Field(..., min_length=1)
    productImageURL: str = Field(..., min_length=1)
    queryTitle: str = Field(..., min_length=1)
    boycottingReasonDetails: str = Field(..., min_length=1)
    userEmail: Optional[str] = None


class QueryCreatedResponse(BaseModel):
    """Response for a created query."""

    queryId: str = Field(..., description="Generated id of the new query")


class MessageResponse(BaseModel):
    message: str


@router.get("/queries")
async def list_queries(
    gateway: PersistenceGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    """List every query in the order storage returns them."""
    try:
        return await gateway.list_queries()
    except Exception as e:
        logger.error(f"Error fetching queries: {e}", exc_info=True)
        raise StorageError("list_queries", e) from e


@router.get("/queries/byUserEmail")
async def list_queries_by_user_email(
    user_email: Optional[str] = Query(None, alias="userEmail"),
    gateway: PersistenceGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    """List queries submitted by one user.

    Matching on ``userEmail`` is exact. Without the parameter, queries that
    carry no email are returned.
    """
    try:
        return await gateway.list_queries_by_user(user_email)
    except Exception as e:
        logger.error(f"Error fetching queries for {user_email}: {e}", exc_info=True)
        raise StorageError("list_queries_by_user", e) from e


@router.get("/queries/latest")
async def list_latest_queries(
    limit: int = Query(DEFAULT_LATEST_LIMIT, ge=1),
    sort: Optional[str] = None,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    """List at most ``limit`` queries ordered by timestamp.

    Args:
        limit: Maximum number of queries to return (default: 3).
        sort: ``desc`` for newest first; anything else sorts ascending.
        gateway: Injected persistence gateway.

    Example:
        GET /queries/latest?limit=2&sort=desc
    """
    descending = sort == "desc"
    try:
        return await gateway.list_latest_queries(limit, descending=descending)
    except Exception as e:
        logger.error(f"Error fetching latest queries: {e}", exc_info=True)
        raise StorageError("list_latest_queries", e) from e


@router.get("/query/{query_id}")
async def get_query(
    query_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> Dict[str, Any]:
    """Fetch a single query by id.

    Raises:
        InvalidIdentifierError: If the id is malformed (400).
        QueryNotFoundError: If no query has this id (404).
        StorageError: If the lookup fails (500).
    """
    oid = parse_query_id(query_id)

    try:
        query = await gateway.get_query(oid)
    except Exception as e:
        logger.error(f"Error fetching query {query_id}: {e}", exc_info=True)
        raise StorageError("get_query", e) from e

    if query is None:
        raise QueryNotFoundError(query_id)
    return query


@router.post(
    "/queries",
    response_model=QueryCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_query(
    payload: QueryCreate,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> QueryCreatedResponse:
    """Create a query.

    Missing or empty required fields are rejected with 400 before storage
    is touched. ``createdAt`` is assigned by the server.
    """
    logger.info(
        "Creating query",
        extra={"query_title": payload.queryTitle, "user_email": payload.userEmail},
    )

    try:
        query_id = await gateway.create_query(payload.model_dump())
    except Exception as e:
        logger.error(f"Error creating query: {e}", exc_info=True)
        raise StorageError("create_query", e) from e

    return QueryCreatedResponse(queryId=query_id)


@router.delete("/query/{query_id}", response_model=MessageResponse)
async def delete_query(
    query_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> MessageResponse:
    """Delete a query by id.

    Deleting the same id twice yields 200 then 404.
    """
    oid = parse_query_id(query_id, parameter="queryId")

    try:
        deleted = await gateway.delete_query(oid)
    except Exception as e:
        logger.error(f"Error deleting query {query_id}: {e}", exc_info=True)
        raise StorageError("delete_query", e) from e

    if not deleted:
        raise QueryNotFoundError(query_id)

    logger.info("Query deleted", extra={"query_id": query_id})
    return MessageResponse(message="Query deleted successfully")


@router.patch("/update-query/{query_id}", response_model=MessageResponse)
async def increment_recommendation_count(
    query_id: str,
    gateway: PersistenceGateway = Depends(get_gateway),
) -> MessageResponse:
    """Add one to a query's ``recommendationCount``."""
    oid = parse_query_id(query_id)

    try:
        modified = await gateway.increment_recommendation_count(oid)
    except Exception as e:
        logger.error(
            f"Error updating recommendation count for {query_id}: {e}",
            exc_info=True,
        )
        raise StorageError("increment_recommendation_count", e) from e

    if not modified:
        raise QueryNotFoundError(query_id)
    return MessageResponse(message="Recommendation count updated")
