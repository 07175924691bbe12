# FILE: backend/services/sessions.py
"""
Anonymous session lifecycle

A session token is an opaque UUID held by the client. Rotating it moves the
session's records under a new token; destroying it purges them.
"""
import logging
import uuid

from backend.errors import ValidationError
from backend.models.sessions import SessionDestroyed, SessionRotated, SessionToken
from backend.services.repositories import ChatRepository, JournalRepository, MoodRepository
from backend.services.telemetry import record_event

logger = logging.getLogger(__name__)


class SessionService:
    """Create, rotate and destroy session tokens"""

    def __init__(self, chats: ChatRepository, journals: JournalRepository, moods: MoodRepository):
        self.chats = chats
        self.journals = journals
        self.moods = moods

    def create(self) -> SessionToken:
        return SessionToken(session_id=str(uuid.uuid4()))

    async def rotate(self, token: str) -> SessionRotated:
        if not token:
            raise ValidationError("Session ID is required")
        new_token = str(uuid.uuid4())
        moved = (
            await self.chats.move(token, new_token)
            + await self.journals.move(token, new_token)
            + await self.moods.move(token, new_token)
        )
        logger.info(f"Session rotated, {moved} records moved")
        record_event("session_rotated", moved=moved)
        return SessionRotated(session_id=new_token, moved=moved)

    async def destroy(self, token: str) -> SessionDestroyed:
        if not token:
            raise ValidationError("Session ID is required")
        purged = (
            await self.chats.purge(token)
            + await self.journals.purge(token)
            + await self.moods.purge(token)
        )
        logger.info(f"Session destroyed, {purged} records purged")
        record_event("session_destroyed", purged=purged)
        return SessionDestroyed(purged=purged)
