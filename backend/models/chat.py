# FILE: backend/models/chat.py
"""
Chat models
"""
from typing import List, Literal, Optional

from backend.models.base import CamelModel
from backend.models.safety import Severity, SupportBlock


class ChatMessageRequest(CamelModel):
    """Incoming chat message"""
    message: Optional[str] = None
    session_id: Optional[str] = None


class ChatMessage(CamelModel):
    """Stored chat message"""
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: str
    crisis_detected: bool = False
    severity: Severity = "low"
    fallback: bool = False


class MessageView(CamelModel):
    id: str
    role: Optional[Literal["user", "assistant"]] = None
    content: str
    timestamp: str


class ChatReply(CamelModel):
    """Reply to a chat message"""
    session_id: str
    session_state: Literal["new", "active"]
    user_message: MessageView
    ai_response: MessageView
    crisis_alert: Optional[SupportBlock] = None
    support_resources: Optional[SupportBlock] = None


class ChatHistory(CamelModel):
    session_id: str
    messages: List[MessageView]
    total: int


class ChatSessionStart(CamelModel):
    session_id: str
    message: str
    welcome_message: str


class Exercise(CamelModel):
    """Breathing exercise or grounding technique"""
    name: str
    description: str
    steps: List[str]
    duration: Optional[str] = None
    type: Optional[str] = None


class ExerciseSuggestion(CamelModel):
    """Breathing suggestions fill exercise, grounding ones fill technique"""
    exercise: Optional[Exercise] = None
    technique: Optional[Exercise] = None
    message: str
    tip: str
