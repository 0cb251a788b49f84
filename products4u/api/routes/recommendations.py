"""Recommendation endpoints for the Products4U API.

A recommendation suggests an alternative product for a query. Bodies are
stored as submitted; no field is required.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import BaseModel

from products4u.api.dependencies import get_gateway
from products4u.api.exceptions import (
    MissingParameterError,
    RecommendationNotCreatedError,
    StorageError,
)
from products4u.storage.gateway import PersistenceGateway

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["recommendations"])


class RecommendationCreatedResponse(BaseModel):
    """Response for a stored recommendation."""

    message: str
    recommendationId: str


@router.post(
    "/recommendation",
    response_model=RecommendationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_recommendation(
    recommendation: Optional[Dict[str, Any]] = Body(None),
    gateway: PersistenceGateway = Depends(get_gateway),
) -> RecommendationCreatedResponse:
    """Store a recommendation verbatim.

    Expected keys are title, productName, productImage, reason, queryId,
    queryTitle, userEmail, userName, recommenderEmail, recommenderName and
    timestamp, but none of them is checked. A missing body is stored as an
    empty document.

    Raises:
        RecommendationNotCreatedError: If storage reports no inserted id (400).
        StorageError: If the insert fails (500).
    """
    if recommendation is None:
        recommendation = {}

    try:
        recommendation_id = await gateway.create_recommendation(recommendation)
    except Exception as e:
        logger.error(f"Error adding recommendation: {e}", exc_info=True)
        raise StorageError("create_recommendation", e) from e

    if recommendation_id is None:
        raise RecommendationNotCreatedError()

    logger.info(
        "Recommendation added",
        extra={
            "recommendation_id": recommendation_id,
            "query_id": recommendation.get("queryId"),
        },
    )
    return RecommendationCreatedResponse(
        message="Recommendation added successfully",
        recommendationId=recommendation_id,
    )


@router.get("/recommendations")
async def list_recommendations(
    user_email: Optional[str] = Query(None, alias="userEmail"),
    gateway: PersistenceGateway = Depends(get_gateway),
) -> List[Dict[str, Any]]:
    """List recommendations made by one recommender.

    ``userEmail`` is matched against ``recommenderEmail``. No match gives
    an empty list, not 404.
    """
    if not user_email:
        raise MissingParameterError("userEmail")

    try:
        return await gateway.list_recommendations_by_recommender(user_email)
    except Exception as e:
        logger.error(
            f"Error fetching recommendations for {user_email}: {e}", exc_info=True
        )
        raise StorageError("list_recommendations_by_recommender", e) from e
