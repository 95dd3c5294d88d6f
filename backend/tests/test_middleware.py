"""
Gatherly Backend — Middleware and Error-Shape Tests
=====================================================
"""

import logging

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.main import validation_errors_by_field
from app.middleware.rate_limit import RateLimitMiddleware, SlidingWindowCounter
from app.middleware.request_id import RequestIDLogFilter, request_id_var


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestSlidingWindowCounter:

    def test_allows_up_to_limit_then_rejects(self):
        clock = FakeClock()
        counter = SlidingWindowCounter(limit=2, window=60, clock=clock)

        assert counter.hit("1.2.3.4") is None
        assert counter.hit("1.2.3.4") is None
        assert counter.hit("1.2.3.4") == 61
        # Other clients are counted separately
        assert counter.hit("5.6.7.8") is None

    def test_window_slides(self):
        clock = FakeClock()
        counter = SlidingWindowCounter(limit=1, window=60, clock=clock)
        counter.hit("ip")

        clock.now += 30
        assert counter.hit("ip") == 31

        clock.now += 30
        assert counter.hit("ip") is None

    def test_prune_drops_idle_clients(self):
        clock = FakeClock()
        counter = SlidingWindowCounter(limit=5, window=60, clock=clock)
        counter.hit("old")
        clock.now += 61
        counter.hit("new")

        assert counter.prune() == 1
        assert len(counter) == 1


class TestRateLimitMiddleware:

    @pytest.mark.asyncio
    async def test_over_limit_is_429_with_retry_after(self):
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, limit=2, window=60)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200
            response = await client.get("/ping")

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert response.json()["error"] == "rate_limit_exceeded"

    @pytest.mark.asyncio
    async def test_rejection_carries_request_id_and_cors_headers(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 2)
        headers = {"Origin": "http://localhost:3000"}

        for _ in range(2):
            await test_client.get("/api/profiles/bob", headers=headers)
        response = await test_client.get("/api/profiles/bob", headers=headers)

        assert response.status_code == 429
        request_id = response.headers["X-Request-ID"]
        assert request_id
        assert response.json()["request_id"] == request_id
        assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
        assert "Retry-After" in response.headers["Access-Control-Expose-Headers"]


class TestRequestIdFilter:

    def test_record_gets_current_request_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        token = request_id_var.set("abc123")
        try:
            RequestIDLogFilter().filter(record)
        finally:
            request_id_var.reset(token)
        assert record.request_id == "abc123"

    def test_outside_a_request(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        RequestIDLogFilter().filter(record)
        assert record.request_id == "-"


class TestValidationErrorsByField:

    def test_location_prefixes_are_dropped(self):
        errors = [
            {"loc": ("body", "title"), "msg": "Field required"},
            {"loc": ("body", "title"), "msg": "must not be blank"},
            {"loc": ("path", "id"), "msg": "Input should be a valid UUID"},
        ]

        assert validation_errors_by_field(errors) == {
            "title": ["Field required", "must not be blank"],
            "id": ["Input should be a valid UUID"],
        }

    def test_whole_body_error(self):
        assert validation_errors_by_field([{"loc": ("body",), "msg": "JSON decode error"}]) == {
            "body": ["JSON decode error"]
        }
