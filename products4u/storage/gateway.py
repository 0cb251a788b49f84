"""Persistence gateway over the Products4U MongoDB collections.

Each public coroutine issues exactly one storage operation and translates
the driver's result shape (matched/modified/deleted counts, inserted ids,
documents or their absence) into the plain values the request handlers
branch on. Identifier validation is the caller's job; methods taking an id
expect an already-parsed ``ObjectId``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

from products4u.storage.utils import serialize_document, serialize_documents

# Configure module logger
logger = logging.getLogger(__name__)

# Field used to order /queries/latest. Query documents store ``createdAt``;
# the sort key is kept as ``timestamp`` to match the deployed clients.
LATEST_SORT_FIELD = "timestamp"

RECOMMENDATION_COUNT_FIELD = "recommendationCount"


class StorageUnavailableError(Exception):
    """Raised when the initial handshake with MongoDB fails."""

    def __init__(self, database_name: str, error: Exception):
        self.database_name = database_name
        self.error = error
        super().__init__(
            f"Could not connect to MongoDB database '{database_name}': {error}"
        )


class PersistenceGateway:
    """Facade over the queries and recommendations collections.

    The gateway owns a single ``AsyncMongoClient`` shared by every in-flight
    request. Construct it once at startup and hand it to the application.

    Attributes:
        client: The async MongoDB client.
        database_name: Name of the database holding both collections.
    """

    def __init__(
        self,
        client: AsyncMongoClient,
        database_name: str,
        queries_collection: str,
        recommendations_collection: str,
    ):
        self.client = client
        self.database_name = database_name
        self._db = client[database_name]
        self._queries = self._db[queries_collection]
        self._recommendations = self._db[recommendations_collection]
        self.queries_collection_name = queries_collection
        self.recommendations_collection_name = recommendations_collection

    @classmethod
    def from_uri(
        cls,
        uri: str,
        database_name: str,
        queries_collection: str,
        recommendations_collection: str,
        timeout_ms: int = 5000,
    ) -> "PersistenceGateway":
        """Build a gateway with a new client pinned to Stable API v1.

        Args:
            uri: MongoDB connection string.
            database_name: Database to use.
            queries_collection: Collection holding query documents.
            recommendations_collection: Collection holding recommendations.
            timeout_ms: Server selection timeout in milliseconds.

        Returns:
            A gateway that has not yet contacted the server. Call
            ``connect()`` before serving requests.
        """
        client = AsyncMongoClient(
            uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=timeout_ms,
        )
        return cls(client, database_name, queries_collection, recommendations_collection)

    async def connect(self) -> None:
        """Confirm the deployment is reachable.

        Raises:
            StorageUnavailableError: If the ping or the startup count fails.
        """
        try:
            await self.client.admin.command("ping")
            query_count = await self.count_queries()
        except PyMongoError as e:
            logger.error(
                "MongoDB handshake failed",
                extra={"database": self.database_name, "error": str(e)},
            )
            raise StorageUnavailableError(self.database_name, e) from e

        logger.info(
            "Connected to MongoDB",
            extra={
                "database": self.database_name,
                "queries_collection": self.queries_collection_name,
                "recommendations_collection": self.recommendations_collection_name,
                "query_count": query_count,
            },
        )

    async def close(self) -> None:
        """Close the underlying client."""
        await self.client.close()
        logger.info("MongoDB connection closed")

    async def count_queries(self) -> int:
        return await self._queries.count_documents({})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_queries(self) -> List[Dict[str, Any]]:
        """Return every query document in storage order."""
        documents = await self._queries.find().to_list(length=None)
        return serialize_documents(documents)

    async def get_query(self, query_id: ObjectId) -> Optional[Dict[str, Any]]:
        """Return the query with the given id, or None if there is none."""
        document = await self._queries.find_one({"_id": query_id})
        if document is None:
            return None
        return serialize_document(document)

    async def list_queries_by_user(
        self, user_email: Optional[str]
    ) -> List[Dict[str, Any]]:
        """Return queries whose ``userEmail`` equals ``user_email`` exactly.

        A ``None`` email matches documents with no (or a null) ``userEmail``.
        """
        cursor = self._queries.find({"userEmail": user_email})
        documents = await cursor.to_list(length=None)
        return serialize_documents(documents)

    async def list_latest_queries(
        self, limit: int, descending: bool = False
    ) -> List[Dict[str, Any]]:
        """Return at most ``limit`` queries ordered by ``LATEST_SORT_FIELD``.

        Args:
            limit: Maximum number of documents. Must be positive; the driver
                reads zero as no limit.
            descending: Sort newest first when True.
        """
        direction = DESCENDING if descending else ASCENDING
        cursor = self._queries.find().sort(LATEST_SORT_FIELD, direction).limit(limit)
        documents = await cursor.to_list(length=None)
        return serialize_documents(documents)

    async def create_query(self, fields: Dict[str, Any]) -> str:
        """Insert a query, stamping ``createdAt``.

        Args:
            fields: Validated query fields.

        Returns:
            The hex string of the generated id.
        """
        document = dict(fields)
        document["createdAt"] = datetime.now(timezone.utc)
        result = await self._queries.insert_one(document)
        return str(result.inserted_id)

    async def delete_query(self, query_id: ObjectId) -> bool:
        """Delete a query. Returns True if a document was removed."""
        result = await self._queries.delete_one({"_id": query_id})
        return result.deleted_count == 1

    async def increment_recommendation_count(self, query_id: ObjectId) -> bool:
        """Add one to a query's recommendation counter.

        Returns:
            True if exactly one document was modified.
        """
        result = await self._queries.update_one(
            {"_id": query_id}, {"$inc": {RECOMMENDATION_COUNT_FIELD: 1}}
        )
        return result.modified_count == 1

    # ------------------------------------------------------------------
    # Recommendations
    # ------------------------------------------------------------------

    async def create_recommendation(self, fields: Dict[str, Any]) -> Optional[str]:
        """Insert a recommendation exactly as submitted.

        Returns:
            The generated id as a hex string, or None if the server did not
            report one.
        """
        result = await self._recommendations.insert_one(dict(fields))
        if result.inserted_id is None:
            return None
        return str(result.inserted_id)

    async def list_recommendations_by_recommender(
        self, recommender_email: str
    ) -> List[Dict[str, Any]]:
        """Return recommendations whose ``recommenderEmail`` matches exactly."""
        cursor = self._recommendations.find({"recommenderEmail": recommender_email})
        documents = await cursor.to_list(length=None)
        return serialize_documents(documents)
