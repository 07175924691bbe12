# FILE: tests/test_provider_registry.py
"""Provider routing, failover and circuit breaker"""
import asyncio
import json

import httpx
import pytest

from backend.errors import UpstreamUnavailable
from backend.providers.ollama import OllamaProvider
from backend.providers.registry import CircuitBreaker, ProviderRegistry
from backend.services.prompts import CRISIS_SYSTEM_PROMPT, SUPPORT_SYSTEM_PROMPT
from tests.conftest import FakeGenerator


class SlowGenerator:
    async def generate(self, messages, temperature, max_tokens):
        await asyncio.sleep(5)


def test_offline_mode_skips_remote_providers(settings):
    settings.llm_mode = "offline"
    settings.openai_api_key = "sk-test"

    registry = ProviderRegistry(settings)

    assert list(registry.providers) == ["ollama"]
    assert registry.moderation_provider is None


def test_online_mode_without_key_has_no_providers(settings):
    settings.llm_mode = "online"
    settings.openai_api_key = None

    assert ProviderRegistry(settings).providers == {}


@pytest.mark.asyncio
async def test_falls_over_to_next_provider(settings):
    broken = FakeGenerator(error=RuntimeError("boom"))
    healthy = FakeGenerator(text="Take a slow breath with me.")
    registry = ProviderRegistry(settings, providers={"openai": broken, "ollama": healthy})

    result = await registry.generate([{"role": "user", "content": "hi"}])

    assert result["text"] == "Take a slow breath with me."
    assert result["provider"] == "ollama"
    assert len(broken.calls) == 1


@pytest.mark.asyncio
async def test_all_failing_raises_upstream_unavailable(settings):
    registry = ProviderRegistry(settings, providers={"openai": FakeGenerator(error=RuntimeError())})

    with pytest.raises(UpstreamUnavailable):
        await registry.generate([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_timeout_counts_as_failure(settings):
    settings.generation_timeout_seconds = 0.05
    registry = ProviderRegistry(settings, providers={"openai": SlowGenerator()})

    with pytest.raises(UpstreamUnavailable):
        await registry.generate([{"role": "user", "content": "hi"}])
    assert registry.get_recent_io()[-1]["error"] == "TimeoutError"


@pytest.mark.asyncio
async def test_empty_completion_is_a_failure(settings):
    registry = ProviderRegistry(settings, providers={"openai": FakeGenerator(text="   ")})

    with pytest.raises(UpstreamUnavailable):
        await registry.generate([{"role": "user", "content": "hi"}])


@pytest.mark.asyncio
async def test_urgent_reply_swaps_instruction_set(settings):
    generator = FakeGenerator()
    registry = ProviderRegistry(settings, providers={"openai": generator})

    await registry.generate_reply("hello", [], urgent=False)
    await registry.generate_reply("I want to end it all", [], urgent=True)

    calm, urgent = generator.calls
    assert calm["messages"][0]["content"] == SUPPORT_SYSTEM_PROMPT
    assert urgent["messages"][0]["content"] == CRISIS_SYSTEM_PROMPT
    assert urgent["max_tokens"] > calm["max_tokens"]


@pytest.mark.asyncio
async def test_reply_context_is_last_six_messages(settings):
    generator = FakeGenerator()
    registry = ProviderRegistry(settings, providers={"openai": generator})
    history = [{"role": "user", "content": f"m{i}"} for i in range(10)]

    await registry.generate_reply("now", history)

    messages = generator.calls[0]["messages"]
    assert [m["content"] for m in messages[1:-1]] == [f"m{i}" for i in range(4, 10)]
    assert messages[-1] == {"role": "user", "content": "now"}


def test_io_log_holds_no_content(settings):
    registry = ProviderRegistry(settings, providers={})
    registry._log_io("openai", "gpt", 42, 10)

    entry = registry.get_recent_io()[0]
    assert set(entry) == {
        "timestamp", "correlation_id", "provider", "model", "output_length", "duration_ms", "error"
    }


def test_circuit_opens_after_threshold():
    breaker = CircuitBreaker(threshold=2, timeout_seconds=60)

    breaker.record_failure("openai")
    assert not breaker.is_open("openai")
    breaker.record_failure("openai")
    assert breaker.is_open("openai")

    breaker.record_success("openai")
    assert not breaker.is_open("openai")


@pytest.mark.asyncio
async def test_ollama_adapter_posts_chat_payload():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"message": {"role": "assistant", "content": " I hear you. "}})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = OllamaProvider("http://ollama:11434/", "llama3.2:3b", client=client)

    result = await provider.generate([{"role": "user", "content": "hi"}], 0.7, 200)

    assert result["text"] == "I hear you."
    assert seen["url"] == "http://ollama:11434/api/chat"
    assert seen["body"]["options"] == {"temperature": 0.7, "num_predict": 200}
    assert seen["body"]["stream"] is False
    await client.aclose()
