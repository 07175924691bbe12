# FILE: backend/services/journal.py
"""
Private journaling: entries, stats and reflection prompts
"""
import asyncio
import logging
import random
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from backend.errors import ContentBlocked, NotFoundOrExpired, ValidationError
from backend.governance.resources import journal_support
from backend.models.journal import (
    JournalCreateResponse, JournalEntries, JournalEntry, JournalEntryResponse,
    JournalEntryView, JournalPrompt, JournalPrompts, JournalStats
)
from backend.services.correlation import get_correlation_id
from backend.services.prompts import build_journal_prompt_messages
from backend.services.repositories import JournalRepository, check_session_id
from backend.services.safety_gate import SafetyGate
from backend.services.telemetry import record_event

logger = logging.getLogger(__name__)

MAX_ENTRY_LENGTH = 5000
DEFAULT_ENTRY_LIMIT = 50
DEFAULT_PROMPT_COUNT = 3
MAX_PROMPT_COUNT = 10

FALLBACK_PROMPTS = [
    "What is one thing you're grateful for today, and how did it make you feel?",
    "Describe a moment recently when you felt peaceful or content. What contributed to that feeling?",
    "What would you say to a friend who was going through what you're experiencing right now?",
    "Write about a small accomplishment from this week, no matter how minor it might seem.",
    "What emotions are you carrying today, and what do they need from you?",
    "If today was a color, what would it be and why?",
    "What is one way you've grown or learned something about yourself recently?",
    "Describe something in nature that brings you comfort or peace.",
    "What does self-compassion look like for you right now?",
    "Write about a person, place, or activity that brings you joy.",
]

# Checked in order; first hit wins
PROMPT_CATEGORIES = [
    ("gratitude", ["grateful", "thankful"]),
    ("goals", ["goal", "future", "dream"]),
    ("emotions", ["emotion", "feeling", "feel"]),
    ("relationships", ["relationship", "friend", "family"]),
    ("self-reflection", ["self", "identity", "personal"]),
    ("challenges", ["challenge", "difficult", "overcome"]),
    ("memories", ["memory", "remember", "past"]),
]


def get_prompt_category(prompt: str) -> str:
    lowered = prompt.lower()
    for category, keywords in PROMPT_CATEGORIES:
        if any(k in lowered for k in keywords):
            return category
    return "general"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _view(record: dict) -> JournalEntryView:
    return JournalEntryView(
        id=record["id"],
        content=record["content"],
        mood=record.get("mood"),
        prompt=record.get("prompt"),
        timestamp=record["timestamp"],
        word_count=record.get("wordCount") or 0,
    )


class JournalService:
    """Journal entries keyed by session, plus generated prompts"""

    def __init__(
        self,
        entries: JournalRepository,
        gate: SafetyGate,
        generator: Optional[Any] = None,
        rng: Optional[random.Random] = None,
        now: Callable[[], datetime] = _utcnow,
        timeout: float = 15.0
    ):
        self.entries = entries
        self.gate = gate
        self.generator = generator
        self.rng = rng or random.Random()
        self.now = now
        self.timeout = timeout

    async def create_entry(
        self,
        content: Optional[str],
        session_id: Optional[str],
        mood: Optional[str] = None,
        prompt: Optional[str] = None
    ) -> JournalCreateResponse:
        if not content or not content.strip():
            raise ValidationError("Content is required")
        if not session_id:
            raise ValidationError("Session ID is required")
        check_session_id(session_id)
        if len(content) > MAX_ENTRY_LENGTH:
            raise ValidationError(f"Content must be {MAX_ENTRY_LENGTH} characters or less")

        screen = await self.gate.screen(content, "journal")
        if screen.blocked:
            raise ContentBlocked(
                "Journal entry contains content that may be harmful. Please revise and try again."
            )
        crisis = screen.crisis

        text = content.strip()
        entry = JournalEntry(
            id=str(uuid.uuid4()),
            content=text,
            mood=mood or None,
            prompt=prompt or None,
            timestamp=self.now().isoformat(),
            word_count=len(text.split()),
            crisis_detected=crisis.needs_support,
            severity=crisis.severity,
        )
        record = entry.to_record()
        await self.entries.save(session_id, record)

        logger.info(f"[{get_correlation_id()}] Journal entry stored: {entry.id} severity={entry.severity}")
        record_event("journal_entry", severity=entry.severity, words=entry.word_count)

        return JournalCreateResponse(entry=_view(record), support_message=journal_support(crisis))

    async def list_entries(self, session_id: str, limit: Optional[int] = None) -> JournalEntries:
        limit = limit if limit and limit > 0 else DEFAULT_ENTRY_LIMIT
        views = [_view(r) for r in (await self.entries.for_session(session_id))[:limit]]

        total_words = sum(v.word_count for v in views)
        stats = JournalStats(
            total_entries=len(views),
            total_words=total_words,
            average_words_per_entry=round(total_words / len(views)) if views else 0,
            mood_trend=[
                {"mood": v.mood, "timestamp": v.timestamp} for v in views if v.mood
            ][:10],
        )
        return JournalEntries(entries=views, stats=stats, session_id=session_id)

    async def get_entry(self, session_id: str, entry_id: str) -> JournalEntryResponse:
        record = await self.entries.get(session_id, entry_id)
        if record is None:
            raise NotFoundOrExpired("Journal entry not found or expired")
        return JournalEntryResponse(entry=_view(record))

    def fallback_prompt(self) -> str:
        return self.rng.choice(FALLBACK_PROMPTS)

    async def _generate_prompt(self, mood: Optional[str], themes: List[str]) -> Optional[str]:
        if self.generator is None:
            return None
        try:
            result = await asyncio.wait_for(
                self.generator.generate(
                    build_journal_prompt_messages(mood, themes),
                    temperature=0.8,
                    max_tokens=100
                ),
                timeout=self.timeout
            )
        except Exception as e:
            logger.warning(f"[{get_correlation_id()}] Prompt generation failed: {e!r}")
            return None
        text = (result or {}).get("text", "").strip()
        return text or None

    async def prompt(self, mood: Optional[str] = None, session_id: Optional[str] = None) -> JournalPrompt:
        """One prompt, themed by the session's recent entries when available"""
        themes: List[str] = []
        if session_id:
            themes = [
                get_prompt_category(r["prompt"]) if r.get("prompt") else "general"
                for r in await self.entries.for_session(session_id)
            ]

        text = await self._generate_prompt(mood, themes)
        fallback = text is None
        if fallback:
            text = self.fallback_prompt()

        return JournalPrompt(
            prompt=text,
            category=get_prompt_category(text),
            mood=mood,
            timestamp=self.now().isoformat(),
            fallback=fallback,
        )

    async def prompts(self, count: Optional[int] = None, mood: Optional[str] = None) -> JournalPrompts:
        count = min(count if count and count > 0 else DEFAULT_PROMPT_COUNT, MAX_PROMPT_COUNT)
        results = []
        for _ in range(count):
            text = await self._generate_prompt(mood, [])
            if text is None:
                text = self.fallback_prompt()
                results.append(JournalPrompt(
                    id=str(uuid.uuid4()), prompt=text, category="general", mood=mood, fallback=True
                ))
            else:
                results.append(JournalPrompt(
                    id=str(uuid.uuid4()), prompt=text, category=get_prompt_category(text), mood=mood
                ))
        return JournalPrompts(prompts=results, timestamp=self.now().isoformat(), count=len(results))
