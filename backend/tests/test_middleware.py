"""
SNApp Backend: Middleware Tests
=================================

What we test:
    ✅ Sliding-window rate limit per user id, falling back to client IP
    ✅ Excluded paths are never limited
    ✅ Request id generated or echoed, including on 429 responses
"""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from snapp.middleware.rate_limit import RateLimitMiddleware
from snapp.middleware.request_id import RequestIDMiddleware


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


class TestRateLimitMiddleware:
    def setup_method(self):
        self.app = _build_app()

    async def _client(self):
        return AsyncClient(transport=ASGITransport(app=self.app), base_url="http://test")

    @pytest.mark.asyncio
    async def test_limit_per_user(self):
        with patch("snapp.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 2
            mock_settings.rate_limit_window = 60
            async with await self._client() as client:
                alice = {"X-User-ID": "alice"}
                assert (await client.get("/ping", headers=alice)).status_code == 200
                assert (await client.get("/ping", headers=alice)).status_code == 200

                blocked = await client.get("/ping", headers=alice)
                other = await client.get("/ping", headers={"X-User-ID": "bob"})

        assert blocked.status_code == 429
        assert int(blocked.headers["Retry-After"]) >= 1
        assert blocked.json()["error"] == "rate_limit_exceeded"
        assert other.status_code == 200

    @pytest.mark.asyncio
    async def test_anonymous_callers_share_ip_budget(self):
        with patch("snapp.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 1
            mock_settings.rate_limit_window = 60
            async with await self._client() as client:
                first = await client.get("/ping")
                second = await client.get("/ping")

        assert first.status_code == 200
        assert second.status_code == 429

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self):
        with patch("snapp.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 1
            mock_settings.rate_limit_window = 60
            async with await self._client() as client:
                statuses = [(await client.get("/health")).status_code for _ in range(3)]

        assert statuses == [200, 200, 200]


class TestRequestIDMiddleware:
    @pytest.mark.asyncio
    async def test_generated_and_echoed(self):
        transport = ASGITransport(app=_build_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            generated = await client.get("/ping")
            echoed = await client.get("/ping", headers={"X-Request-ID": "trace-1"})

        assert len(generated.headers["X-Request-ID"]) == 8
        assert echoed.headers["X-Request-ID"] == "trace-1"

    @pytest.mark.asyncio
    async def test_rejected_request_carries_request_id(self):
        from snapp.main import create_app

        transport = ASGITransport(app=create_app())
        with patch("snapp.middleware.rate_limit.settings") as mock_settings:
            mock_settings.rate_limit_requests = 1
            mock_settings.rate_limit_window = 60
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                headers = {"X-User-ID": "alice"}
                first = await client.post("/api/outline", json={"content": "# A"}, headers=headers)
                blocked = await client.post(
                    "/api/outline",
                    json={"content": "# A"},
                    headers={**headers, "X-Request-ID": "rid-2"},
                )

        assert first.status_code == 200
        assert blocked.status_code == 429
        assert blocked.json()["request_id"] == "rid-2"
        assert blocked.headers["X-Request-ID"] == "rid-2"
