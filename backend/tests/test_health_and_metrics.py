"""
Tests for health, metrics and service info endpoints
"""
from unittest.mock import patch
from uuid import uuid4

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from addressbook.core.metrics import get_metrics


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "AddressBook"


def test_detailed_health(client):
    response = client.get("/health/detailed")

    assert response.status_code == 200
    assert response.json()["components"]["database"] == {"status": "healthy"}


def test_detailed_health_reports_database_failure(client):
    error = OperationalError("SELECT 1", {}, Exception("connection refused"))

    with patch.object(Session, "execute", side_effect=error):
        response = client.get("/health/detailed")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["components"]["database"]["status"] == "unhealthy"


def test_api_root(client):
    response = client.get("/api")

    assert response.status_code == 200
    assert response.json()["status"] == "running"
    assert response.json()["version"] == "1.0.0"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated(client):
    response = client.get("/health")

    assert response.headers["X-Request-ID"]


def test_metrics_endpoint(client, auth_headers):
    client.get("/api/contacts", headers=auth_headers)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    body = response.text
    assert "http_requests_total" in body
    assert "contact_operations_total" in body
    assert 'endpoint="/api/contacts"' in body


def test_unknown_route_renders_message(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def _request_series() -> int:
    return sum(
        1 for line in get_metrics().decode().splitlines()
        if line.startswith("http_requests_total{")
    )


def test_metrics_are_labelled_by_route_template(client, auth_headers):
    client.get(f"/api/contacts/{uuid4()}", headers=auth_headers)
    client.get("/api/contacts/not-a-uuid", headers=auth_headers)

    body = get_metrics().decode()

    assert 'endpoint="/api/contacts/{contact_id}"' in body
    assert "not-a-uuid" not in body


def test_arbitrary_paths_do_not_grow_label_series(client, auth_headers):
    client.get("/api/contacts/junk-warmup", headers=auth_headers)
    client.get("/nowhere/warmup")
    before = _request_series()

    for _ in range(25):
        client.get(f"/api/contacts/junk-{uuid4().hex}", headers=auth_headers)
        client.get(f"/nowhere/{uuid4().hex}")

    assert _request_series() == before
    assert 'endpoint="unmatched"' in get_metrics().decode()
