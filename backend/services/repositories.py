# FILE: backend/services/repositories.py
"""
Store-backed repositories

Each repository owns one namespace, its key format and its retention window.
Session-scoped records are keyed '<session_id>:<record_id>' so a session's
records can be scanned, moved or purged by prefix.
"""
import logging
from typing import Any, Dict, List, Optional

from backend.errors import ValidationError
from backend.services.ephemeral_store import EphemeralStore

logger = logging.getLogger(__name__)

KEY_SEPARATOR = ":"


def check_session_id(session_id: Optional[str]) -> str:
    """Reject tokens that would widen a session's key prefix into other sessions"""
    if not session_id or KEY_SEPARATOR in session_id:
        raise ValidationError("Invalid session ID")
    return session_id


class PostRepository:
    """Public community posts, keyed by post id"""

    namespace = "post"

    def __init__(self, store: EphemeralStore, ttl_seconds: int):
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def save(self, post: Dict[str, Any]) -> None:
        await self.store.put(self.namespace, post["id"], post, self.ttl_seconds)

    async def get(self, post_id: str) -> Optional[Dict[str, Any]]:
        return await self.store.get(self.namespace, post_id)

    async def all(self) -> List[Dict[str, Any]]:
        """Live posts, newest first"""
        return [value for _, value in await self.store.scan_all(self.namespace)]

    async def add_support(self, post_id: str) -> Optional[int]:
        return await self.store.increment_field(self.namespace, post_id, "supportCount")


class ChatRepository:
    """Per-session append-only message list"""

    namespace = "chat"

    def __init__(self, store: EphemeralStore, ttl_seconds: int):
        self.store = store
        self.ttl_seconds = ttl_seconds

    async def append(self, session_id: str, message: Dict[str, Any]) -> None:
        check_session_id(session_id)
        await self.store.append(self.namespace, session_id, message, self.ttl_seconds)

    async def recent(self, session_id: str, limit: int) -> List[Dict[str, Any]]:
        """Last `limit` messages, oldest first"""
        check_session_id(session_id)
        return await self.store.read_list(self.namespace, session_id, limit)

    async def purge(self, session_id: str) -> int:
        check_session_id(session_id)
        count = len(await self.store.read_list(self.namespace, session_id))
        await self.store.delete(self.namespace, session_id)
        return count

    async def move(self, old_session: str, new_session: str) -> int:
        """Re-home a session's messages, keeping the remaining retention"""
        check_session_id(old_session)
        check_session_id(new_session)
        messages = await self.store.read_list(self.namespace, old_session)
        if not messages:
            return 0
        remaining = await self.store.ttl(self.namespace, old_session) or self.ttl_seconds
        for message in messages:
            await self.store.append(self.namespace, new_session, message, remaining)
        await self.store.delete(self.namespace, old_session)
        return len(messages)


class SessionScopedRepository:
    """Records keyed '<session_id>:<record_id>' within one namespace"""

    namespace = ""

    def __init__(self, store: EphemeralStore, ttl_seconds: int):
        self.store = store
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def key(session_id: str, record_id: str) -> str:
        return f"{check_session_id(session_id)}{KEY_SEPARATOR}{record_id}"

    async def save(self, session_id: str, record: Dict[str, Any]) -> None:
        await self.store.put(
            self.namespace, self.key(session_id, record["id"]), record, self.ttl_seconds
        )

    async def get(self, session_id: str, record_id: str) -> Optional[Dict[str, Any]]:
        return await self.store.get(self.namespace, self.key(session_id, record_id))

    async def for_session(self, session_id: str) -> List[Dict[str, Any]]:
        """Live records for a session, newest first"""
        check_session_id(session_id)
        return [
            value for _, value in await self.store.scan_by_prefix(self.namespace, session_id)
        ]

    async def purge(self, session_id: str) -> int:
        check_session_id(session_id)
        return await self.store.delete_prefix(self.namespace, session_id)

    async def move(self, old_session: str, new_session: str) -> int:
        """Re-key every record under a new session, keeping remaining TTLs"""
        check_session_id(old_session)
        check_session_id(new_session)
        moved = 0
        for key, value in await self.store.scan_by_prefix(self.namespace, old_session):
            remaining = await self.store.ttl(self.namespace, key)
            if remaining is None:
                # Expired between scan and move
                continue
            record_id = key[len(old_session) + 1:]
            await self.store.put(self.namespace, self.key(new_session, record_id), value, remaining)
            await self.store.delete(self.namespace, key)
            moved += 1
        return moved


class JournalRepository(SessionScopedRepository):
    """Private journal entries"""

    namespace = "journal"


class MoodRepository(SessionScopedRepository):
    """Mood check-ins"""

    namespace = "mood"
