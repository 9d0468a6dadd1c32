"""App wiring: health, middleware headers, error envelope."""

import pytest
from httpx import AsyncClient

from esg_api.core.config import settings

pytestmark = pytest.mark.anyio


async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["status"] == "healthy"


async def test_security_and_version_headers(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert resp.headers["x-api-version"] == "v1"


async def test_oversized_body_is_rejected(client: AsyncClient):
    resp = await client.post(
        "/auth/login",
        content=b"x" * (settings.MAX_REQUEST_BODY_BYTES + 1),
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 413
    assert resp.json()["error"] == "payload_too_large"


async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    resp = await client.get("/nope")
    assert resp.status_code == 404
    assert set(resp.json()) == {"error", "message", "detail", "request_id"}


async def test_request_id_is_echoed_in_errors(client: AsyncClient):
    resp = await client.get("/responses", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 401
    assert resp.json()["request_id"] == "req-123"


async def test_export_responses_are_not_cached(client: AsyncClient, auth_headers):
    resp = await client.get("/export/pdf", headers=auth_headers)
    assert resp.headers["cache-control"] == "no-store"


async def test_health_is_cacheable(client: AsyncClient):
    resp = await client.get("/health")
    assert "cache-control" not in resp.headers


def test_sentry_event_scrubbing():
    from esg_api.core.sentry import _scrub_event

    event = {
        "request": {
            "headers": {"Authorization": "Bearer abc", "Accept": "application/json"},
            "data": {"email": "a@example.com", "password": "hunter22"},
        }
    }
    scrubbed = _scrub_event(event, {})
    assert scrubbed["request"]["headers"]["Authorization"] == "[REDACTED]"
    assert scrubbed["request"]["headers"]["Accept"] == "application/json"
    assert scrubbed["request"]["data"]["password"] == "[REDACTED]"
    assert scrubbed["request"]["data"]["email"] == "a@example.com"
