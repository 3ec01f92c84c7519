"""Tests that the server handles many concurrent requests correctly.

The app is async (FastAPI + asyncpg pool). These tests fire simultaneous
requests at one app instance and check that codes stay unique and no click
is lost.
"""

import asyncio
import pytest


@pytest.mark.asyncio
class TestConcurrentConnections:
    """Prove the server handles many simultaneous requests."""

    async def test_concurrent_health_requests(self, client):
        """Many concurrent GET /api/health requests all succeed."""
        concurrency = 50
        tasks = [client.get("/api/health") for _ in range(concurrency)]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 200, f"Request {i}: status {r.status_code}"
            assert r.json()["status"] == "healthy"

    async def test_concurrent_shorten_requests(self, client):
        """Many concurrent POST /api/shorten with different URLs; all succeed and short codes are unique."""
        concurrency = 30
        urls = [f"https://example.com/page_{i}" for i in range(concurrency)]
        tasks = [
            client.post("/api/shorten", json={"originalUrl": url})
            for url in urls
        ]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        short_codes = []
        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 201, f"Request {i}: status {r.status_code} body={r.text}"
            data = r.json()["data"]
            assert data["originalUrl"] == urls[i]
            short_codes.append(data["shortCode"])

        assert len(short_codes) == len(set(short_codes)), "All short codes must be unique under concurrency"

    async def test_concurrent_redirect_requests(self, client):
        """Concurrent redirects to one code all succeed and every click is counted."""
        create_resp = await client.post(
            "/api/shorten",
            json={"originalUrl": "https://example.com/redirect-target"},
        )
        assert create_resp.status_code == 201
        short_code = create_resp.json()["data"]["shortCode"]

        concurrency = 40
        tasks = [client.get(f"/{short_code}") for _ in range(concurrency)]
        responses = await asyncio.gather(*tasks, return_exceptions=True)

        for i, r in enumerate(responses):
            if isinstance(r, Exception):
                pytest.fail(f"Request {i} raised: {r}")
            assert r.status_code == 301, f"Request {i}: status {r.status_code}"
            assert r.headers.get("location") == "https://example.com/redirect-target"

        analytics = await client.get(f"/api/analytics/{short_code}")
        assert analytics.json()["data"]["clicks"] == concurrency
