"""Custom exceptions for the Products4U API.

Defines specific exception types for better error handling and reporting.
Every exception carries the HTTP status code it maps to; the application
renders them as ``{"error": <message>}``.
"""

from typing import Any, Dict, Optional


class Products4UException(Exception):
    """Base exception for Products4U errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message returned to the client
            status_code: HTTP status code for API responses
            details: Additional error details for logging only
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class InvalidIdentifierError(Products4UException):
    """Raised when a path id is not a well-formed ObjectId."""

    def __init__(self, raw_id: str, entity: str = "query"):
        super().__init__(
            message=f"Invalid {entity} ID format",
            status_code=400,
            details={"id": raw_id},
        )


class MissingParameterError(Products4UException):
    """Raised when a required path or query parameter is absent."""

    def __init__(self, parameter: str):
        super().__init__(
            message=f"{parameter} is required",
            status_code=400,
            details={"parameter": parameter},
        )


class QueryNotFoundError(Products4UException):
    """Raised when no query document matches or is affected."""

    def __init__(self, query_id: str):
        super().__init__(
            message="Query not found",
            status_code=404,
            details={"query_id": query_id},
        )


class RecommendationNotCreatedError(Products4UException):
    """Raised when storage reports no inserted id for a recommendation."""

    def __init__(self):
        super().__init__(
            message="Failed to add recommendation",
            status_code=400,
        )


class StorageError(Products4UException):
    """Raised when a storage call fails while serving a request.

    The underlying error is kept in ``details`` for logs; the client only
    sees a generic message.
    """

    def __init__(self, operation: str, error: Exception):
        super().__init__(
            message="Internal Server Error",
            status_code=500,
            details={
                "operation": operation,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
