# FILE: backend/models/journal.py
"""
Journal models
"""
from typing import Any, Dict, List, Optional

from backend.models.base import CamelModel
from backend.models.safety import Severity, SupportBlock


class JournalEntryCreate(CamelModel):
    """Create private journal entry"""
    content: Optional[str] = None
    session_id: Optional[str] = None
    mood: Optional[str] = None
    prompt: Optional[str] = None


class JournalEntry(CamelModel):
    """Stored journal entry"""
    id: str
    content: str
    mood: Optional[str] = None
    prompt: Optional[str] = None
    timestamp: str
    word_count: int
    crisis_detected: bool = False
    severity: Severity = "low"


class JournalEntryView(CamelModel):
    id: str
    content: str
    mood: Optional[str] = None
    prompt: Optional[str] = None
    timestamp: str
    word_count: int


class JournalCreateResponse(CamelModel):
    success: bool = True
    entry: JournalEntryView
    support_message: SupportBlock


class JournalStats(CamelModel):
    total_entries: int
    total_words: int
    average_words_per_entry: int
    mood_trend: List[Dict[str, Any]]


class JournalEntries(CamelModel):
    entries: List[JournalEntryView]
    stats: JournalStats
    session_id: str


class JournalEntryResponse(CamelModel):
    entry: JournalEntryView


class JournalPrompt(CamelModel):
    id: Optional[str] = None
    prompt: str
    category: str
    mood: Optional[str] = None
    timestamp: Optional[str] = None
    fallback: bool = False


class JournalPrompts(CamelModel):
    prompts: List[JournalPrompt]
    timestamp: str
    count: int
