# 📄 File: tests/test_app.py
#
# 🧭 Purpose (Layman Explanation):
# Checks the front door of the API: it says hello, reports it is healthy, and answers
# mistakes with the same tidy error format every time.
#
# 🧪 Purpose (Technical Summary):
# Tests for the root and health endpoints, the error envelope for unknown routes, request
# validation and domain exceptions, request ID propagation and the response helpers.
#
# 🔗 Dependencies:
# - pytest, pytest-asyncio, httpx
#
# 🔄 Connected Modules / Calls From:
# - pytest

from sproutsync.shared.core.exceptions import NotFoundError
from sproutsync.shared.core.responses import api_response, pagination_meta, paginated_response
from tests.conftest import auth_headers


async def test_root_describes_the_api(client):
    response = await client.get("/")

    body = response.json()
    assert response.status_code == 200
    assert body["message"] == "SproutSync API is running"
    assert body["environment"] == "testing"
    assert set(body) == {"message", "version", "environment", "timestamp"}


async def test_health_endpoints(client):
    health = await client.get("/api/health")
    database = await client.get("/api/health/database")

    assert health.json()["status"] == "healthy"
    assert database.status_code == 200
    assert database.json()["database"] == "sqlite"


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/not-a-route")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"
    assert body["error"]["message"] == "Route not found"
    assert body["error"]["details"] == {"path": "/api/not-a-route"}
    assert body["error"]["timestamp"]


async def test_request_id_is_echoed(client):
    response = await client.get("/api/not-a-route", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["error"]["request_id"] == "req-123"


async def test_request_id_is_generated(client):
    response = await client.get("/api/health")

    assert response.headers["X-Request-ID"]


async def test_validation_errors_list_fields(client, make_user):
    user = await make_user()

    response = await client.post("/api/tags", json={"color_hex": "#10B981"}, headers=auth_headers(user))

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"] == "Validation error"
    assert error["details"][0]["field"] == "name"


async def test_domain_errors_keep_their_details(client, make_user):
    user = await make_user()

    response = await client.get("/api/tags/missing-tag", headers=auth_headers(user))

    assert response.status_code == 404
    assert response.json()["error"]["details"]["resource_type"] == "tag"


def test_not_found_error_details():
    error = NotFoundError("Plant not found", resource_type="plant", resource_id="p1")

    assert error.status_code == 404
    assert error.details == {"resource_type": "plant", "resource_id": "p1"}


def test_api_response_omits_unset_keys():
    assert api_response(data=[1, 2], count=2) == {"success": True, "data": [1, 2], "count": 2}
    assert api_response(message="Done") == {"success": True, "data": None, "message": "Done"}


def test_paginated_response():
    assert pagination_meta(page=2, limit=20, total=45) == {"page": 2, "limit": 20, "total": 45, "pages": 3}
    assert paginated_response([], 1, 20, 0)["pagination"]["pages"] == 0
