# FILE: backend/services/mood_insights.py
"""
Mood trend and insight engine

Pure functions over stored mood entries (newest first). Nothing here touches
the store or the network.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from backend.models.mood import MoodTrend
from backend.models.safety import SentimentResult

MOOD_VALUES: Dict[str, int] = {
    "very_sad": 1, "sad": 2, "frustrated": 3, "angry": 3, "anxious": 3,
    "overwhelmed": 3, "stressed": 3, "tired": 4, "neutral": 5,
    "content": 6, "calm": 7, "peaceful": 7, "grateful": 8,
    "happy": 8, "hopeful": 8, "excited": 9, "energetic": 9, "very_happy": 10,
}
DEFAULT_MOOD_VALUE = 5

TREND_WINDOW = 10
TREND_GROUP = 5
TREND_THRESHOLD = 1.0
MIN_DISTINCT_HOURS = 3

DEFAULT_INSIGHT = (
    "Thank you for checking in with your emotions. "
    "Self-awareness is an important step in mental wellness."
)


def _hour_utc(timestamp: str) -> int:
    parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).hour


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def mood_score(entry: Dict[str, Any]) -> float:
    """Ordinal mood baseline shifted by half a point per intensity step from 5"""
    base = MOOD_VALUES.get(entry.get("mood"), DEFAULT_MOOD_VALUE)
    return base + (int(entry.get("intensity", 5)) - 5) * 0.5


def analyze_trend(entries: List[Dict[str, Any]]) -> MoodTrend:
    """
    Compare the mean score of the 5 most recent entries with the 5 before them

    improving when the difference exceeds +1, declining below -1, stable
    otherwise. With no earlier group the earlier mean equals the recent mean.
    """
    window = entries[:TREND_WINDOW]
    if len(window) < 2:
        return MoodTrend(
            trend="insufficient_data",
            message="Need more data points to analyze trends",
        )

    recent = [mood_score(e) for e in window[:TREND_GROUP]]
    earlier = [mood_score(e) for e in window[TREND_GROUP:TREND_WINDOW]]
    recent_avg = _mean(recent)
    earlier_avg = _mean(earlier) if earlier else recent_avg
    difference = recent_avg - earlier_avg

    if difference > TREND_THRESHOLD:
        trend, message = "improving", "Your mood seems to be improving recently"
    elif difference < -TREND_THRESHOLD:
        trend, message = (
            "declining",
            "Your mood seems to be declining. Consider self-care or reaching out for support",
        )
    else:
        trend, message = "stable", "Your mood has been relatively stable"

    return MoodTrend(
        trend=trend,
        message=message,
        recent_average=round(recent_avg, 2),
        earlier_average=round(earlier_avg, 2),
    )


def generate_analytics(entries: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Counts, mean intensity, most common mood and (if not sparse) hourly buckets"""
    if not entries:
        return {"message": "No mood data available for this period"}

    # Insertion order is newest first, so ties go to the most recently logged mood
    mood_counts: Dict[str, int] = {}
    for entry in entries:
        mood_counts[entry["mood"]] = mood_counts.get(entry["mood"], 0) + 1
    most_common = max(mood_counts, key=mood_counts.get)

    average_intensity = _mean([float(e["intensity"]) for e in entries])

    hourly: Dict[int, List[int]] = {}
    for entry in entries:
        hourly.setdefault(_hour_utc(entry["timestamp"]), []).append(entry["intensity"])

    return {
        "totalEntries": len(entries),
        "averageIntensity": round(average_intensity, 1),
        "mostCommonMood": most_common,
        "moodDistribution": mood_counts,
        # Sparse routines are suppressed so they cannot fingerprint a user
        "hourlyPatterns": (
            {str(h): v for h, v in sorted(hourly.items())}
            if len(hourly) > MIN_DISTINCT_HOURS else None
        ),
    }


def mood_insight(mood: str, intensity: int, sentiment: Optional[SentimentResult]) -> str:
    """First applicable supportive sentence for a single check-in"""
    insights: List[str] = []

    if "sad" in mood and intensity > 7:
        insights.append(
            "I notice you're experiencing deep sadness. Remember that it's okay to feel "
            "this way, and these feelings will pass."
        )
    elif "anxious" in mood and intensity > 6:
        insights.append(
            "Anxiety can feel overwhelming. Try some deep breathing exercises or grounding techniques."
        )
    elif "happy" in mood or mood == "grateful":
        insights.append(
            "It's wonderful that you're feeling positive! Take a moment to appreciate this feeling."
        )

    if sentiment is not None and sentiment.score < -0.5:
        insights.append(
            "Your notes suggest you're going through a challenging time. "
            "Consider reaching out to someone you trust."
        )
    elif sentiment is not None and sentiment.score > 0.5:
        insights.append("Your notes reflect a positive mindset. That's a great strength to recognize.")

    if intensity >= 8:
        insights.append(
            "You're experiencing intense emotions. Remember to be gentle with yourself during this time."
        )

    return insights[0] if insights else DEFAULT_INSIGHT


def personal_insights(entries: List[Dict[str, Any]]) -> List[str]:
    """Time-of-day and improvement patterns across a window of entries"""
    if len(entries) < 3:
        return ["Keep tracking your mood to discover personal patterns and insights."]

    insights: List[str] = []

    morning = [e["intensity"] for e in entries if _hour_utc(e["timestamp"]) < 12]
    evening = [e["intensity"] for e in entries if _hour_utc(e["timestamp"]) >= 18]
    if len(morning) > 2 and len(evening) > 2:
        morning_avg, evening_avg = _mean(morning), _mean(evening)
        if morning_avg > evening_avg + 1:
            insights.append(
                "You tend to feel better in the mornings. "
                "Consider tackling important tasks early in the day."
            )
        elif evening_avg > morning_avg + 1:
            insights.append(
                "Your mood tends to improve throughout the day. Gentle morning routines might help."
            )

    half = len(entries) // 2
    recent, older = entries[:half], entries[half:]
    if recent and older:
        if _mean([e["intensity"] for e in recent]) > _mean([e["intensity"] for e in older]) + 0.5:
            insights.append("Your mood has been improving recently. Keep up the positive momentum!")

    if not insights:
        insights.append("Continue tracking to discover more about your mood patterns.")
    return insights
