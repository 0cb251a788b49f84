"""Shared fixtures for the Products4U test suite.

API tests run against an in-memory gateway that mirrors the public
interface of ``PersistenceGateway``, so no MongoDB server is needed.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from products4u.api.config import Settings
from products4u.api.main import create_app
from products4u.storage.gateway import LATEST_SORT_FIELD, StorageUnavailableError
from products4u.storage.utils import serialize_document, serialize_documents


class InMemoryGateway:
    """Dict-backed stand-in for ``PersistenceGateway``.

    Set ``error`` to make every storage call raise it, and ``reachable`` to
    False to make ``connect()`` fail.
    """

    def __init__(self):
        self.queries: List[Dict[str, Any]] = []
        self.recommendations: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None
        self.reachable = True
        self.connected = False
        self.closed = False
        self.calls: List[str] = []
        self.report_inserted_id = True

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.error is not None:
            raise self.error

    def _find_query(self, query_id: ObjectId) -> Optional[Dict[str, Any]]:
        for document in self.queries:
            if document["_id"] == query_id:
                return document
        return None

    async def connect(self) -> None:
        if not self.reachable:
            raise StorageUnavailableError("Products4U", PyMongoError("unreachable"))
        self.connected = True

    async def close(self) -> None:
        self.closed = True

    async def count_queries(self) -> int:
        self._record("count_queries")
        return len(self.queries)

    async def list_queries(self) -> List[Dict[str, Any]]:
        self._record("list_queries")
        return serialize_documents(self.queries)

    async def get_query(self, query_id: ObjectId) -> Optional[Dict[str, Any]]:
        self._record("get_query")
        document = self._find_query(query_id)
        return serialize_document(document) if document is not None else None

    async def list_queries_by_user(
        self, user_email: Optional[str]
    ) -> List[Dict[str, Any]]:
        self._record("list_queries_by_user")
        matches = [d for d in self.queries if d.get("userEmail") == user_email]
        return serialize_documents(matches)

    async def list_latest_queries(
        self, limit: int, descending: bool = False
    ) -> List[Dict[str, Any]]:
        self._record("list_latest_queries")

        def sort_key(document):
            value = document.get(LATEST_SORT_FIELD)
            return (value is not None, value)

        ordered = sorted(self.queries, key=sort_key, reverse=descending)
        return serialize_documents(ordered[:limit])

    async def create_query(self, fields: Dict[str, Any]) -> str:
        self._record("create_query")
        document = dict(fields)
        document["_id"] = ObjectId()
        document["createdAt"] = datetime.now(timezone.utc)
        self.queries.append(document)
        return str(document["_id"])

    async def delete_query(self, query_id: ObjectId) -> bool:
        self._record("delete_query")
        document = self._find_query(query_id)
        if document is None:
            return False
        self.queries.remove(document)
        return True

    async def increment_recommendation_count(self, query_id: ObjectId) -> bool:
        self._record("increment_recommendation_count")
        document = self._find_query(query_id)
        if document is None:
            return False
        document["recommendationCount"] = document.get("recommendationCount", 0) + 1
        return True

    async def create_recommendation(self, fields: Dict[str, Any]) -> Optional[str]:
        self._record("create_recommendation")
        if not self.report_inserted_id:
            return None
        document = dict(fields)
        document["_id"] = ObjectId()
        self.recommendations.append(document)
        return str(document["_id"])

    async def list_recommendations_by_recommender(
        self, recommender_email: str
    ) -> List[Dict[str, Any]]:
        self._record("list_recommendations_by_recommender")
        matches = [
            d
            for d in self.recommendations
            if d.get("recommenderEmail") == recommender_email
        ]
        return serialize_documents(matches)


@pytest.fixture
def settings() -> Settings:
    """Settings that never touch a real deployment."""
    return Settings(mongodb_uri="mongodb://localhost:27017", log_level="WARNING")


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def client(settings, gateway):
    """Test client with the application started (lifespan run)."""
    app = create_app(settings=settings, gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_query() -> Dict[str, str]:
    return {
        "productName": "X",
        "productBrand": "Y",
        "productImageURL": "u",
        "queryTitle": "T",
        "boycottingReasonDetails": "R",
    }
