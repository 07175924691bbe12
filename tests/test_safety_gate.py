# FILE: tests/test_safety_gate.py
"""Safety gate: fallback behaviour and per-content-type policy"""
import asyncio
import json

import pytest

from backend.governance.enforcer import enforce_safety_policy
from backend.governance.crisis import detect_crisis
from backend.governance.policy import load_safety_policy
from backend.models.safety import ModerationVerdict
from backend.services.safety_gate import SafetyGate
from tests.conftest import FakeModeration


class HangingModeration:
    async def moderate(self, text):
        await asyncio.sleep(5)


@pytest.mark.asyncio
async def test_moderation_error_falls_back_without_raising():
    gate = SafetyGate(FakeModeration(error=RuntimeError("503 from upstream")))

    verdict = await gate.moderate("hello there")

    assert verdict.fallback
    assert verdict.safe


@pytest.mark.asyncio
async def test_moderation_timeout_falls_back():
    gate = SafetyGate(HangingModeration(), timeout=0.05)

    verdict = await gate.moderate("hello there")

    assert verdict.fallback


@pytest.mark.asyncio
async def test_crisis_detection_unaffected_by_moderation_outage():
    text = "i want to end it all"
    healthy = await SafetyGate(FakeModeration()).screen(text, "post")
    broken = await SafetyGate(FakeModeration(error=ConnectionError())).screen(text, "post")

    assert healthy.crisis == broken.crisis
    assert broken.crisis.severity == "high"
    assert broken.moderation.fallback and not healthy.moderation.fallback


@pytest.mark.asyncio
async def test_authoritative_verdict_is_used_when_available():
    unsafe = ModerationVerdict(flagged=True, categories={"harassment": True}, safe=False)
    gate = SafetyGate(FakeModeration(verdict=unsafe))

    screen = await gate.screen("some text", "chat")

    assert screen.blocked
    assert not screen.moderation.fallback


def _verdict(**categories):
    return ModerationVerdict(flagged=bool(categories), categories=categories, safe=False)


def test_posts_and_chat_reject_unsafe_content():
    crisis = detect_crisis("neutral words")
    verdict = _verdict(harassment=True)

    assert enforce_safety_policy("post", verdict, crisis).blocked
    assert enforce_safety_policy("chat", verdict, crisis).blocked


def test_journal_tolerates_milder_flags():
    crisis = detect_crisis("neutral words")

    assert not enforce_safety_policy("journal", _verdict(harassment=True), crisis).blocked
    assert enforce_safety_policy("journal", _verdict(violence=True), crisis).blocked
    assert enforce_safety_policy("journal", _verdict(**{"hate/threatening": True}), crisis).blocked


def test_self_harm_flag_routes_to_support_not_rejection():
    crisis = detect_crisis("i want to end it all")
    verdict = ModerationVerdict(flagged=True, categories={"self-harm": True}, safe=True)

    screen = enforce_safety_policy("post", verdict, crisis)

    assert not screen.blocked
    assert screen.crisis.severity == "high"


@pytest.mark.asyncio
async def test_audit_trail_holds_hash_not_content(tmp_path):
    gate = SafetyGate(None, logs_dir=str(tmp_path), audit_enabled=True)

    await gate.screen("my very private words", "journal")

    files = list((tmp_path / "safety").glob("*.jsonl"))
    assert len(files) == 1
    raw = files[0].read_text()
    assert "private words" not in raw
    entry = json.loads(raw.splitlines()[0])
    assert entry["kind"] == "journal"
    assert len(entry["content_hash"]) == 64


def test_policy_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({"journal_blocking_classes": ["violence"]}))

    policy = load_safety_policy(str(path))

    assert policy["journal_blocking_classes"] == ["violence"]
    assert policy["block_unsafe"] == ["post", "chat"]
    assert load_safety_policy(str(tmp_path / "missing.json"))["block_unsafe"] == ["post", "chat"]
