"""Tests for error handling in the Products4U API.

Tests storage failures during requests, the generic 500 body, and the
startup barrier when MongoDB cannot be reached.
"""

import logging

import pytest
from bson import Decimal128, ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from products4u.api.exceptions import (
    InvalidIdentifierError,
    MissingParameterError,
    QueryNotFoundError,
    RecommendationNotCreatedError,
    StorageError,
)
from products4u.api.main import create_app
from products4u.storage.gateway import StorageUnavailableError

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)

STORAGE_BACKED_REQUESTS = [
    ("get", "/queries", None),
    ("get", "/queries/byUserEmail?userEmail=a@example.com", None),
    ("get", "/queries/latest", None),
    ("get", f"/query/{ObjectId()}", None),
    ("delete", f"/query/{ObjectId()}", None),
    ("patch", f"/update-query/{ObjectId()}", None),
    ("get", "/recommendations?userEmail=a@example.com", None),
    ("post", "/recommendation", {"title": "t"}),
    (
        "post",
        "/queries",
        {
            "productName": "X",
            "productBrand": "Y",
            "productImageURL": "u",
            "queryTitle": "T",
            "boycottingReasonDetails": "R",
        },
    ),
]


@pytest.mark.parametrize("method,url,body", STORAGE_BACKED_REQUESTS)
def test_storage_failure_returns_generic_500(client, gateway, method, url, body):
    """Test that driver errors become 500 without leaking details."""
    gateway.error = ServerSelectionTimeoutError("cluster0 unreachable: secret-host:27017")

    kwargs = {"json": body} if body is not None else {}
    response = getattr(client, method)(url, **kwargs)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal Server Error"}
    assert "secret-host" not in response.text


def test_storage_failure_is_per_request(client, gateway):
    """Test that the service keeps answering once storage recovers."""
    gateway.error = ServerSelectionTimeoutError("down")
    assert client.get("/queries").status_code == 500

    gateway.error = None
    assert client.get("/queries").status_code == 200


def test_validation_precedes_storage_failure(client, gateway):
    """Test that a bad id is reported as 400 even when storage is down."""
    gateway.error = ServerSelectionTimeoutError("down")

    response = client.get("/query/bad-id")

    assert response.status_code == 400


def test_startup_fails_when_storage_unreachable(settings, gateway):
    """Test that the app refuses to start without a storage handshake."""
    gateway.reachable = False
    app = create_app(settings=settings, gateway=gateway)

    with pytest.raises(StorageUnavailableError):
        with TestClient(app):
            pass


def test_exception_status_codes():
    """Test the status code carried by each exception type."""
    assert InvalidIdentifierError("x").status_code == 400
    assert MissingParameterError("userEmail").status_code == 400
    assert QueryNotFoundError(str(ObjectId())).status_code == 404
    assert RecommendationNotCreatedError().status_code == 400

    error = StorageError("list_queries", RuntimeError("boom"))
    assert error.status_code == 500
    assert error.message == "Internal Server Error"
    assert error.details["error_type"] == "RuntimeError"


def test_error_response_structure(client):
    """Test that error responses have a single error field."""
    responses = [
        client.get("/query/bad"),
        client.get(f"/query/{ObjectId()}"),
        client.get("/recommendations"),
        client.post("/queries", json={}),
    ]

    for response in responses:
        assert response.status_code in (400, 404)
        data = response.json()
        assert list(data.keys()) == ["error"]
        assert isinstance(data["error"], str)


def test_unexpected_error_returns_json_500(settings, gateway):
    """Test that a document the encoder cannot render still gets a JSON 500."""
    gateway.queries.append({"_id": ObjectId(), "price": Decimal128("1.5")})
    app = create_app(settings=settings, gateway=gateway)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.get("/queries")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"error": "Internal Server Error"}


def test_malformed_json_body_returns_400(client, gateway):
    """Test that unparsable JSON gets a readable message."""
    response = client.post(
        "/queries",
        content='{"productName": "X",',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Malformed JSON body"}
    assert gateway.queries == []
