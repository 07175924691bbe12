# FILE: backend/services/mood_tracker.py
"""
Mood check-ins, history and analytics
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Union

from backend.errors import ValidationError
from backend.models.mood import (
    MOODS, MoodAnalytics, MoodCheckInResponse, MoodEntry, MoodEntryView,
    MoodHistory, MoodOption, MoodOptions, SentimentView
)
from backend.services.correlation import get_correlation_id
from backend.services.mood_insights import (
    TREND_WINDOW, analyze_trend, generate_analytics, mood_insight, personal_insights
)
from backend.services.repositories import MoodRepository, check_session_id
from backend.services.sentiment import SentimentAnalyzer
from backend.services.telemetry import record_event

logger = logging.getLogger(__name__)

DEFAULT_INTENSITY = 5
DEFAULT_HISTORY_DAYS = 30
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_ANALYTICS_DAYS = 7

MOOD_OPTIONS = [
    MoodOption(value="very_happy", label="Very Happy", emoji="😄", color="#4CAF50"),
    MoodOption(value="happy", label="Happy", emoji="😊", color="#8BC34A"),
    MoodOption(value="content", label="Content", emoji="😌", color="#CDDC39"),
    MoodOption(value="neutral", label="Neutral", emoji="😐", color="#FFC107"),
    MoodOption(value="sad", label="Sad", emoji="😢", color="#FF9800"),
    MoodOption(value="very_sad", label="Very Sad", emoji="😭", color="#F44336"),
    MoodOption(value="excited", label="Excited", emoji="🤩", color="#9C27B0"),
    MoodOption(value="calm", label="Calm", emoji="😇", color="#00BCD4"),
    MoodOption(value="anxious", label="Anxious", emoji="😰", color="#795548"),
    MoodOption(value="angry", label="Angry", emoji="😠", color="#D32F2F"),
    MoodOption(value="frustrated", label="Frustrated", emoji="😤", color="#E64A19"),
    MoodOption(value="grateful", label="Grateful", emoji="🙏", color="#689F38"),
    MoodOption(value="hopeful", label="Hopeful", emoji="🌟", color="#1976D2"),
    MoodOption(value="overwhelmed", label="Overwhelmed", emoji="🤯", color="#7B1FA2"),
    MoodOption(value="peaceful", label="Peaceful", emoji="☮️", color="#388E3C"),
    MoodOption(value="energetic", label="Energetic", emoji="⚡", color="#FFB300"),
    MoodOption(value="tired", label="Tired", emoji="😴", color="#546E7A"),
    MoodOption(value="stressed", label="Stressed", emoji="😵", color="#BF360C"),
]

INTENSITY_SCALE: Dict[str, Any] = {
    "min": 1,
    "max": 10,
    "labels": {"1": "Very Mild", "3": "Mild", "5": "Moderate", "7": "Strong", "10": "Very Strong"},
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clamp_intensity(value: Optional[Union[int, str]]) -> int:
    """Coerce to 1..10; missing or unparseable means the default"""
    if value is None or value == "":
        return DEFAULT_INTENSITY
    try:
        parsed = int(float(value))
    except (TypeError, ValueError):
        return DEFAULT_INTENSITY
    return max(1, min(10, parsed))


def _view(record: Dict[str, Any]) -> MoodEntryView:
    return MoodEntryView(
        id=record["id"],
        mood=record["mood"],
        intensity=record["intensity"],
        notes=record.get("notes"),
        timestamp=record["timestamp"],
        sentiment_score=record.get("sentimentScore"),
    )


class MoodTracker:
    """Mood check-ins for an anonymous session"""

    def __init__(
        self,
        moods: MoodRepository,
        sentiment: SentimentAnalyzer,
        now: Callable[[], datetime] = _utcnow
    ):
        self.moods = moods
        self.sentiment = sentiment
        self.now = now

    async def check_in(
        self,
        mood: Optional[str],
        session_id: Optional[str],
        intensity: Optional[Union[int, str]] = None,
        notes: Optional[str] = None
    ) -> MoodCheckInResponse:
        if not mood:
            raise ValidationError("Mood is required")
        if not session_id:
            raise ValidationError("Session ID is required")
        check_session_id(session_id)
        if mood not in MOODS:
            raise ValidationError("Invalid mood", validMoods=MOODS)

        level = clamp_intensity(intensity)
        notes = notes.strip() if notes and notes.strip() else None

        sentiment = await self.sentiment.analyze(notes) if notes else None
        insight = mood_insight(mood, level, sentiment) if sentiment else None

        entry = MoodEntry(
            id=str(uuid.uuid4()),
            mood=mood,
            intensity=level,
            notes=notes,
            timestamp=self.now().isoformat(),
            sentiment_score=sentiment.score if sentiment else None,
            sentiment_magnitude=sentiment.magnitude if sentiment else None,
            insight=insight,
        )
        record = entry.to_record()
        await self.moods.save(session_id, record)

        recent = await self.moods.for_session(session_id)
        trend = analyze_trend(recent[:TREND_WINDOW])

        logger.info(f"[{get_correlation_id()}] Mood check-in stored: {entry.id} trend={trend.trend}")
        record_event("mood_checkin", trend=trend.trend)

        return MoodCheckInResponse(
            entry=_view(record),
            trend=trend,
            insight=insight,
            sentiment=SentimentView(
                score=sentiment.score, label=sentiment.label, confidence=sentiment.confidence
            ) if sentiment else None,
        )

    async def _window(self, session_id: str, days: int) -> List[Dict[str, Any]]:
        """Entries newer than now - days, newest first"""
        cutoff = self.now() - timedelta(days=days)
        return [
            r for r in await self.moods.for_session(session_id)
            if datetime.fromisoformat(r["timestamp"]) >= cutoff
        ]

    async def history(
        self, session_id: str, days: Optional[int] = None, limit: Optional[int] = None
    ) -> MoodHistory:
        days = days if days and days > 0 else DEFAULT_HISTORY_DAYS
        limit = limit if limit and limit > 0 else DEFAULT_HISTORY_LIMIT
        entries = (await self._window(session_id, days))[:limit]
        return MoodHistory(
            entries=[_view(r) for r in entries],
            analytics=generate_analytics(entries),
            period=f"{days} days",
            total=len(entries),
        )

    async def analytics(self, session_id: str, period_days: Optional[int] = None) -> MoodAnalytics:
        days = period_days if period_days and period_days > 0 else DEFAULT_ANALYTICS_DAYS
        entries = await self._window(session_id, days)
        analytics = generate_analytics(entries)
        if entries:
            analytics["trend"] = analyze_trend(entries).model_dump(by_alias=True, exclude_none=True)
        return MoodAnalytics(
            analytics=analytics,
            insights=personal_insights(entries),
            period=f"{days} days",
            data_points=len(entries),
        )

    def options(self) -> MoodOptions:
        return MoodOptions(options=list(MOOD_OPTIONS), intensity_scale=INTENSITY_SCALE)
