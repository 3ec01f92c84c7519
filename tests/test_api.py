"""Tests for public API endpoints and redirects."""

import logging

import pytest
from datetime import datetime, timezone
from httpx import ASGITransport, AsyncClient

from shortlink.database.memory import InMemoryURLStore
from shortlink.errors import StoreError
from shortlink.service import URLShortenerService
from web_app import create_app


class BrokenStore(InMemoryURLStore):
    """Store whose writes always fail."""

    async def create_url(self, *args, **kwargs):
        raise StoreError("connection refused on 10.1.2.3:5432")


@pytest.mark.asyncio
class TestShortenEndpoint:
    """Test POST /api/shorten."""

    async def test_shorten_url(self, client, sample_urls):
        response = await client.post(
            "/api/shorten",
            json={"originalUrl": sample_urls[0]}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert data["originalUrl"] == sample_urls[0]
        assert len(data["shortCode"]) == 7
        assert data["shortUrl"] == f"http://testserver/{data['shortCode']}"
        assert data["clicks"] == 0
        assert "createdAt" in data

    async def test_shorten_same_url_returns_existing(self, client, test_db, sample_urls):
        first = await client.post("/api/shorten", json={"originalUrl": sample_urls[0]})
        second = await client.post("/api/shorten", json={"originalUrl": sample_urls[0]})

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["success"] is True
        assert second.json()["data"]["shortCode"] == first.json()["data"]["shortCode"]
        assert await test_db.count_urls() == 1

    async def test_shorten_records_client(self, client, test_db, sample_urls):
        response = await client.post("/api/shorten", json={"originalUrl": sample_urls[0]})

        record = await test_db.get_by_short_code(response.json()["data"]["shortCode"])
        assert record.created_by == "127.0.0.1"

    @pytest.mark.parametrize("url", ["ftp://example.com", "http://localhost/x", "not-a-url"])
    async def test_shorten_invalid_url(self, client, test_db, url):
        response = await client.post("/api/shorten", json={"originalUrl": url})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"]
        assert await test_db.count_urls() == 0

    async def test_shorten_local_url_message(self, client):
        response = await client.post("/api/shorten", json={"originalUrl": "http://localhost/x"})

        assert response.json()["error"] == "Cannot shorten local URLs"

    async def test_shorten_missing_url(self, client):
        response = await client.post("/api/shorten", json={})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "URL is required"}

    async def test_shorten_without_body(self, client):
        response = await client.post("/api/shorten")

        assert response.status_code == 400
        assert response.json()["success"] is False

    async def test_shorten_wrong_type(self, client):
        response = await client.post("/api/shorten", json={"originalUrl": 42})

        assert response.status_code == 400
        assert "originalUrl" in response.json()["error"]

    async def test_store_failure_is_generic_500(self, config):
        store = BrokenStore()
        app = create_app(db_instance=store, service_instance=URLShortenerService(db=store), config=config)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
            response = await client.post("/api/shorten", json={"originalUrl": "https://example.com/page"})

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert "10.1.2.3" not in response.json()["error"]


@pytest.mark.asyncio
class TestRedirect:
    """Test GET /{short_code}."""

    async def test_redirect(self, client, sample_urls):
        create_response = await client.post("/api/shorten", json={"originalUrl": sample_urls[0]})
        short_code = create_response.json()["data"]["shortCode"]
        before = datetime.now(timezone.utc)

        response = await client.get(f"/{short_code}")

        assert response.status_code == 301
        assert response.headers["location"] == sample_urls[0]

        analytics = (await client.get(f"/api/analytics/{short_code}")).json()["data"]
        assert analytics["clicks"] == 1
        assert datetime.fromisoformat(analytics["lastAccessed"].replace("Z", "+00:00")) >= before

    async def test_each_redirect_counts_once(self, client, sample_urls):
        create_response = await client.post("/api/shorten", json={"originalUrl": sample_urls[1]})
        short_code = create_response.json()["data"]["shortCode"]

        for _ in range(3):
            await client.get(f"/{short_code}")

        analytics = (await client.get(f"/api/analytics/{short_code}")).json()["data"]
        assert analytics["clicks"] == 3

    async def test_redirect_not_found(self, client, test_db):
        response = await client.get("/unknown")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Short URL not found"}
        assert await test_db.count_urls() == 0

    async def test_redirect_under_path_prefix(self, test_db, service, config, sample_urls):
        prefixed = config.model_copy(update={"path_prefix": "/s"})
        app = create_app(db_instance=test_db, service_instance=service, config=prefixed)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
            data = (await client.post("/api/shorten", json={"originalUrl": sample_urls[0]})).json()["data"]
            response = await client.get(f"/s/{data['shortCode']}")

        assert data["shortUrl"] == f"http://testserver/s/{data['shortCode']}"
        assert response.status_code == 301
        assert response.headers["location"] == sample_urls[0]

    async def test_redirect_after_delete(self, client, test_db, admin_headers, sample_urls):
        create_response = await client.post("/api/shorten", json={"originalUrl": sample_urls[0]})
        short_code = create_response.json()["data"]["shortCode"]
        record = await test_db.get_by_short_code(short_code)
        await client.delete(f"/api/admin/urls/{record.id}", headers=admin_headers)

        response = await client.get(f"/{short_code}")

        assert response.status_code == 404
        stored = await test_db.get_by_short_code(short_code, active_only=False)
        assert stored.clicks == 0


@pytest.mark.asyncio
class TestAnalyticsEndpoint:
    """Test GET /api/analytics/{short_code}."""

    async def test_get_analytics(self, client, sample_urls):
        create_response = await client.post("/api/shorten", json={"originalUrl": sample_urls[0]})
        short_code = create_response.json()["data"]["shortCode"]

        response = await client.get(f"/api/analytics/{short_code}")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["shortCode"] == short_code
        assert body["data"]["originalUrl"] == sample_urls[0]
        assert body["data"]["clicks"] == 0
        assert body["data"]["lastAccessed"] is None

    async def test_get_analytics_not_found(self, client):
        response = await client.get("/api/analytics/nonexistent")

        assert response.status_code == 404
        assert response.json()["success"] is False


@pytest.mark.asyncio
class TestMiscEndpoints:

    async def test_health_check(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Server is running"
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert "timestamp" in data

    async def test_security_headers(self, client):
        response = await client.get("/api/health")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"

    @pytest.mark.parametrize("trusted, expected", [(False, "127.0.0.1"), (True, "203.0.113.7")])
    async def test_access_log_client(self, test_db, service, config, caplog, trusted, expected):
        app = create_app(
            db_instance=test_db,
            service_instance=service,
            config=config.model_copy(update={"trust_forwarded_for": trusted}),
        )
        caplog.set_level(logging.INFO, logger="shortlink.web")

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
            await client.get("/api/health", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

        access = [r.getMessage() for r in caplog.records if r.name == "shortlink.web"]
        assert len(access) == 1
        assert access[0].startswith(f"{expected} GET /api/health 200 ")
        assert access[0].endswith("ms")

    async def test_unknown_api_path(self, client):
        response = await client.get("/api/does/not/exist")

        assert response.status_code == 404
        assert response.json()["success"] is False
