# FILE: backend/models/mood.py
"""
Mood tracking models
"""
from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import Field

from backend.models.base import CamelModel

MOODS = [
    "very_happy", "happy", "content", "neutral", "sad", "very_sad",
    "excited", "calm", "anxious", "angry", "frustrated", "grateful",
    "hopeful", "overwhelmed", "peaceful", "energetic", "tired", "stressed"
]

TrendLabel = Literal["improving", "declining", "stable", "insufficient_data"]


class MoodCheckIn(CamelModel):
    """Mood check-in request"""
    mood: Optional[str] = None
    intensity: Optional[Union[int, str]] = None
    notes: Optional[str] = None
    session_id: Optional[str] = None


class MoodEntry(CamelModel):
    """Stored mood entry"""
    id: str
    mood: str
    intensity: int = Field(ge=1, le=10)
    notes: Optional[str] = None
    timestamp: str
    sentiment_score: Optional[float] = None
    sentiment_magnitude: Optional[float] = None
    insight: Optional[str] = None


class MoodEntryView(CamelModel):
    id: str
    mood: str
    intensity: int
    notes: Optional[str] = None
    timestamp: str
    sentiment_score: Optional[float] = None


class MoodTrend(CamelModel):
    trend: TrendLabel
    message: str
    recent_average: Optional[float] = None
    earlier_average: Optional[float] = None


class SentimentView(CamelModel):
    score: float
    label: str
    confidence: float


class MoodCheckInResponse(CamelModel):
    success: bool = True
    entry: MoodEntryView
    trend: MoodTrend
    insight: Optional[str] = None
    sentiment: Optional[SentimentView] = None


class MoodHistory(CamelModel):
    entries: List[MoodEntryView]
    analytics: Dict[str, Any]
    period: str
    total: int


class MoodAnalytics(CamelModel):
    analytics: Dict[str, Any]
    insights: List[str]
    period: str
    data_points: int


class MoodOption(CamelModel):
    value: str
    label: str
    emoji: str
    color: str


class MoodOptions(CamelModel):
    options: List[MoodOption]
    intensity_scale: Dict[str, Any]
