# FILE: backend/services/container.py
"""
Service wiring

Every collaborator is built once here and handed to the services that need
it. Tests build a container around a MemoryStore and fake providers.
"""
import logging
import random
from dataclasses import dataclass
from typing import Any, Optional

from starlette.requests import Request

from backend.config import Settings, get_settings
from backend.governance.policy import load_safety_policy
from backend.providers.google_language import GoogleSentimentProvider
from backend.providers.registry import ProviderRegistry
from backend.services.chat_orchestrator import ChatOrchestrator
from backend.services.community import CommunityService
from backend.services.ephemeral_store import EphemeralStore, MemoryStore
from backend.services.journal import JournalService
from backend.services.mood_tracker import MoodTracker
from backend.services.redis_store import RedisStore
from backend.services.repositories import (
    ChatRepository, JournalRepository, MoodRepository, PostRepository
)
from backend.services.safety_gate import SafetyGate
from backend.services.sentiment import SentimentAnalyzer
from backend.services.sessions import SessionService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    store: EphemeralStore
    registry: ProviderRegistry
    gate: SafetyGate
    community: CommunityService
    chat: ChatOrchestrator
    journal: JournalService
    mood: MoodTracker
    sessions: SessionService

    async def close(self) -> None:
        await self.store.close()


def build_store(settings: Settings) -> EphemeralStore:
    if settings.store_backend == "redis":
        return RedisStore(
            url=settings.redis_url,
            password=settings.redis_password,
            timeout_seconds=settings.store_timeout_seconds
        )
    logger.info("Using in-process memory store")
    return MemoryStore()


def build_container(
    settings: Optional[Settings] = None,
    store: Optional[EphemeralStore] = None,
    registry: Optional[ProviderRegistry] = None,
    moderation_provider: Optional[Any] = None,
    sentiment_provider: Optional[Any] = None,
    rng: Optional[random.Random] = None,
    now: Optional[Any] = None
) -> ServiceContainer:
    """
    Assemble the service graph

    Anything not passed in is built from settings. `now` (a callable returning
    an aware datetime) and `rng` are shared by every service that stamps or
    picks something.
    """
    settings = settings or get_settings()
    store = store or build_store(settings)
    registry = registry or ProviderRegistry(settings)
    rng = rng or random.Random(settings.random_seed)
    clock = {"now": now} if now is not None else {}

    if moderation_provider is None and settings.moderation_enabled:
        moderation_provider = registry.moderation_provider
    if sentiment_provider is None and settings.google_cloud_api_key:
        sentiment_provider = GoogleSentimentProvider(
            api_key=settings.google_cloud_api_key,
            timeout=settings.sentiment_timeout_seconds
        )

    gate = SafetyGate(
        moderation_provider=moderation_provider,
        timeout=settings.moderation_timeout_seconds,
        policy=load_safety_policy(settings.safety_policy_path),
        logs_dir=settings.logs_dir,
        audit_enabled=settings.audit_enabled
    )

    posts = PostRepository(store, settings.post_ttl_seconds)
    chats = ChatRepository(store, settings.chat_ttl_seconds)
    journals = JournalRepository(store, settings.journal_ttl_seconds)
    moods = MoodRepository(store, settings.mood_ttl_seconds)

    generator = registry if registry.providers else None
    if generator is None:
        logger.info("No generation providers configured; chat and prompts use canned text")

    return ServiceContainer(
        settings=settings,
        store=store,
        registry=registry,
        gate=gate,
        community=CommunityService(posts, gate, redact=settings.redaction_enabled, **clock),
        chat=ChatOrchestrator(
            chats, gate, generator, rng=rng,
            timeout=settings.generation_timeout_seconds, **clock
        ),
        journal=JournalService(
            journals, gate, generator, rng=rng,
            timeout=settings.generation_timeout_seconds, **clock
        ),
        mood=MoodTracker(
            moods,
            SentimentAnalyzer(sentiment_provider, timeout=settings.sentiment_timeout_seconds),
            **clock
        ),
        sessions=SessionService(chats, journals, moods),
    )


def get_container(request: Request) -> ServiceContainer:
    """FastAPI dependency: the container attached at startup"""
    return request.app.state.container
