# FILE: tests/test_middleware.py
"""Rate limiting window and client bookkeeping"""
from collections import deque

from fastapi import FastAPI
from fastapi.testclient import TestClient

from backend.middleware.rate_limit import RateLimitMiddleware
from tests.conftest import FakeClock


async def _noop_app(scope, receive, send):
    pass


def make_limited_app(clock, rpm=2):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, rpm=rpm, clock=clock)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return app


def test_requests_beyond_rpm_are_rejected_until_window_passes():
    clock = FakeClock()
    client = TestClient(make_limited_app(clock))

    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200
    limited = client.get("/ping")
    assert limited.status_code == 429
    assert limited.json()["error"] == "Too many requests"

    clock.advance(61)
    assert client.get("/ping").status_code == 200


def test_idle_clients_are_forgotten():
    clock = FakeClock()
    limiter = RateLimitMiddleware(_noop_app, rpm=5, clock=clock)
    limiter.requests["10.0.0.1"] = deque([clock()])
    limiter.requests["10.0.0.2"] = deque()

    clock.advance(61)
    limiter.requests["10.0.0.3"] = deque([clock()])
    limiter._prune(clock())

    assert set(limiter.requests) == {"10.0.0.3"}


def test_prune_runs_at_most_once_per_window():
    clock = FakeClock()
    limiter = RateLimitMiddleware(_noop_app, rpm=5, clock=clock)
    limiter.requests["10.0.0.1"] = deque()

    clock.advance(30)
    limiter._prune(clock())

    assert "10.0.0.1" in limiter.requests
