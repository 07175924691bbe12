# FILE: tests/conftest.py

import os
import random
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Test environment, set before any backend module reads settings
os.environ.setdefault("LOGS_DIR", str(project_root / ".pytest_logs"))
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["AUDIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STORE_BACKEND"] = "memory"
os.environ["OPENAI_API_KEY"] = ""
os.environ["GOOGLE_CLOUD_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from backend.config import reload_settings
from backend.errors import UpstreamUnavailable
from backend.models.safety import ModerationVerdict, SentimentResult
from backend.providers.registry import ProviderRegistry
from backend.services.container import build_container
from backend.services.ephemeral_store import MemoryStore

START = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc).timestamp()


class FakeClock:
    """Manually advanced clock: call for epoch seconds, now() for a datetime"""

    def __init__(self, start: float = START):
        self.t = start

    def __call__(self) -> float:
        return self.t

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.t, tz=timezone.utc)

    def advance(self, seconds: float):
        self.t += seconds


class FakeModeration:
    """Moderation provider returning a fixed verdict, or raising"""

    def __init__(self, verdict=None, error=None):
        self.verdict = verdict
        self.error = error
        self.calls = 0

    async def moderate(self, text):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.verdict or ModerationVerdict(flagged=False, categories={}, safe=True)


class FakeGenerator:
    """Generation provider with a canned text, or raising"""

    def __init__(self, text="You are not alone in this.", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate(self, messages, temperature, max_tokens):
        self.calls.append({"messages": messages, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return {"text": self.text, "model": "fake", "usage": {}}


class FakeSentiment:
    def __init__(self, score=0.0, error=None):
        self.score = score
        self.error = error

    async def analyze(self, text):
        if self.error is not None:
            raise self.error
        return SentimentResult(
            score=self.score, magnitude=abs(self.score), label="neutral", confidence=abs(self.score)
        )


@pytest.fixture
def settings():
    """Fresh settings from the test environment"""
    return reload_settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def rng():
    return random.Random(7)


def make_container(settings, store, clock, rng, providers=None, moderation=None, sentiment=None):
    registry = ProviderRegistry(settings, providers=providers or {})
    return build_container(
        settings,
        store=store,
        registry=registry,
        moderation_provider=moderation,
        sentiment_provider=sentiment,
        rng=rng,
        now=clock.now,
    )


@pytest.fixture
def container(settings, store, clock, rng):
    """No generation or moderation providers: canned replies, local moderation"""
    return make_container(settings, store, clock, rng)


@pytest.fixture
def client(container):
    from backend.app import create_app

    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def failing_generator():
    return FakeGenerator(error=UpstreamUnavailable("down"))
