# FILE: tests/test_chat_orchestrator.py
"""Chat orchestration: session state, fallbacks, persistence"""
import random

import pytest

from backend.errors import ContentBlocked, ValidationError
from backend.models.safety import ModerationVerdict
from backend.services.chat_orchestrator import (
    CRISIS_REPLIES, SUPPORTIVE_REPLIES, ChatOrchestrator
)
from backend.services.repositories import ChatRepository
from backend.services.safety_gate import SafetyGate
from tests.conftest import FakeGenerator, FakeModeration


def make_orchestrator(store, clock, generator=None, moderation=None, seed=7):
    return ChatOrchestrator(
        ChatRepository(store, 3600),
        SafetyGate(moderation),
        generator,
        rng=random.Random(seed),
        now=clock.now,
    )


class ReplyGenerator:
    """Stands in for the registry's generate_reply"""

    def __init__(self, inner):
        self.inner = inner

    async def generate_reply(self, message, history, urgent=False):
        self.last_history = history
        self.last_urgent = urgent
        return await self.inner.generate([{"role": "user", "content": message}], 0.7, 200)


@pytest.mark.asyncio
async def test_first_message_is_new_then_active(store, clock):
    orchestrator = make_orchestrator(store, clock)

    first = await orchestrator.handle_message("hello", "s1")
    second = await orchestrator.handle_message("still here", "s1")

    assert first.session_state == "new"
    assert second.session_state == "active"


@pytest.mark.asyncio
async def test_expired_session_is_treated_as_new(store, clock):
    orchestrator = make_orchestrator(store, clock)
    await orchestrator.handle_message("hello", "s1")

    clock.advance(3601)

    assert (await orchestrator.history("s1")).messages == []
    reply = await orchestrator.handle_message("hello again", "s1")
    assert reply.session_state == "new"


@pytest.mark.asyncio
async def test_generation_failure_yields_canned_reply(store, clock, failing_generator):
    orchestrator = make_orchestrator(store, clock, ReplyGenerator(failing_generator))

    reply = await orchestrator.handle_message("today was rough", "s1")

    assert reply.ai_response.content in SUPPORTIVE_REPLIES
    stored = await ChatRepository(store, 3600).recent("s1", 10)
    assert stored[-1]["fallback"] is True


@pytest.mark.asyncio
async def test_crisis_fallback_uses_crisis_pool_and_alert(store, clock):
    orchestrator = make_orchestrator(store, clock)

    reply = await orchestrator.handle_message("i want to end it all", "s1")

    assert reply.ai_response.content in CRISIS_REPLIES
    assert reply.crisis_alert is not None
    assert reply.crisis_alert.resources[0].available == "24/7"
    assert reply.support_resources is None


@pytest.mark.asyncio
async def test_canned_selection_is_reproducible_with_seed(store, clock):
    expected = random.Random(3).choice(SUPPORTIVE_REPLIES)
    orchestrator = make_orchestrator(store, clock, seed=3)

    reply = await orchestrator.handle_message("hi", "s1")

    assert reply.ai_response.content == expected


@pytest.mark.asyncio
async def test_distress_attaches_support_resources(store, clock):
    reply = await make_orchestrator(store, clock).handle_message("I feel so alone", "s1")

    assert reply.support_resources is not None
    assert reply.crisis_alert is None


@pytest.mark.asyncio
async def test_generated_reply_gets_history_and_urgency(store, clock):
    generator = ReplyGenerator(FakeGenerator(text="I'm here with you."))
    orchestrator = make_orchestrator(store, clock, generator)

    await orchestrator.handle_message("first", "s1")
    reply = await orchestrator.handle_message("i want to die", "s1")

    assert reply.ai_response.content == "I'm here with you."
    assert generator.last_urgent is True
    assert [m["role"] for m in generator.last_history] == ["user", "assistant"]


@pytest.mark.asyncio
async def test_both_messages_are_appended_in_order(store, clock):
    orchestrator = make_orchestrator(store, clock)
    await orchestrator.handle_message("one", "s1")
    await orchestrator.handle_message("two", "s1")

    history = await orchestrator.history("s1")

    assert [m.role for m in history.messages] == ["user", "assistant", "user", "assistant"]
    assert history.messages[2].content == "two"


@pytest.mark.asyncio
async def test_unsafe_message_is_rejected_without_write(store, clock):
    unsafe = ModerationVerdict(flagged=True, categories={"harassment": True}, safe=False)
    orchestrator = make_orchestrator(store, clock, moderation=FakeModeration(verdict=unsafe))

    with pytest.raises(ContentBlocked):
        await orchestrator.handle_message("something nasty", "s1")
    assert (await orchestrator.history("s1")).total == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("message", [None, "", "   ", "x" * 1001])
async def test_invalid_message_is_rejected(store, clock, message):
    with pytest.raises(ValidationError):
        await make_orchestrator(store, clock).handle_message(message, "s1")


@pytest.mark.asyncio
async def test_missing_session_id_gets_generated(store, clock):
    reply = await make_orchestrator(store, clock).handle_message("hi", None)

    assert reply.session_id
    assert reply.session_state == "new"
