# FILE: tests/test_mood_insights.py
"""Mood scoring, trend classification, analytics and insights"""
import random
from datetime import datetime, timedelta, timezone

import pytest

from backend.models.safety import SentimentResult
from backend.services.mood_insights import (
    DEFAULT_INSIGHT, analyze_trend, generate_analytics, mood_insight, mood_score,
    personal_insights
)

BASE = datetime(2026, 3, 2, tzinfo=timezone.utc)


def entry(mood="neutral", intensity=5, hour=9, day=0):
    ts = BASE + timedelta(days=day, hours=hour)
    return {"mood": mood, "intensity": intensity, "timestamp": ts.isoformat()}


def test_mood_score_adjusts_by_intensity():
    assert mood_score(entry("very_happy", 9)) == 12.0
    assert mood_score(entry("sad", 2)) == 0.5
    assert mood_score(entry("unknown", 5)) == 5


def test_fewer_than_two_entries_is_insufficient():
    assert analyze_trend([]).trend == "insufficient_data"
    assert analyze_trend([entry()]).trend == "insufficient_data"


def test_happy_then_sad_is_declining():
    # Newest first: five sad check-ins after five very happy ones
    entries = [entry("sad", 2)] * 5 + [entry("very_happy", 9)] * 5

    trend = analyze_trend(entries)

    assert trend.trend == "declining"
    assert trend.recent_average == 0.5
    assert trend.earlier_average == 12.0


def test_short_history_without_earlier_group_is_stable():
    assert analyze_trend([entry("sad", 1), entry("very_happy", 10)]).trend == "stable"


def test_only_first_ten_entries_count():
    entries = [entry("neutral")] * 10 + [entry("very_sad", 1)] * 10

    assert analyze_trend(entries).trend == "stable"


@pytest.mark.parametrize("seed", range(25))
def test_trend_is_monotonic_in_score_difference(seed):
    rnd = random.Random(seed)
    moods = ["very_sad", "sad", "tired", "neutral", "content", "calm", "happy", "excited", "very_happy"]
    entries = [entry(rnd.choice(moods), rnd.randint(1, 10)) for _ in range(10)]

    recent = sum(mood_score(e) for e in entries[:5]) / 5
    earlier = sum(mood_score(e) for e in entries[5:]) / 5
    diff = recent - earlier

    expected = "improving" if diff > 1 else "declining" if diff < -1 else "stable"
    assert analyze_trend(entries).trend == expected


def test_analytics_empty_window():
    assert generate_analytics([]) == {"message": "No mood data available for this period"}


def test_analytics_counts_and_average():
    entries = [entry("happy", 8), entry("sad", 3), entry("happy", 6)]

    analytics = generate_analytics(entries)

    assert analytics["totalEntries"] == 3
    assert analytics["averageIntensity"] == 5.7
    assert analytics["mostCommonMood"] == "happy"
    assert analytics["moodDistribution"] == {"happy": 2, "sad": 1}


def test_most_common_tie_goes_to_most_recent():
    entries = [entry("calm"), entry("tired"), entry("tired"), entry("calm")]

    assert generate_analytics(entries)["mostCommonMood"] == "calm"


def test_hourly_patterns_suppressed_when_sparse():
    sparse = [entry(hour=h) for h in (8, 12, 20)]
    dense = [entry(hour=h) for h in (8, 12, 16, 20)]

    assert generate_analytics(sparse)["hourlyPatterns"] is None
    assert set(generate_analytics(dense)["hourlyPatterns"]) == {"8", "12", "16", "20"}


def test_hourly_buckets_use_utc():
    ist = timezone(timedelta(hours=5, minutes=30))
    entries = [
        {"mood": "calm", "intensity": 5, "timestamp": datetime(2026, 3, 2, h, 0, tzinfo=ist).isoformat()}
        for h in (6, 10, 14, 18)
    ]

    hours = set(generate_analytics(entries)["hourlyPatterns"])
    assert hours == {"0", "4", "8", "12"}


def test_mood_insight_rules():
    negative = SentimentResult(score=-0.8, magnitude=1, label="negative", confidence=0.8)

    assert "deep sadness" in mood_insight("very_sad", 9, None)
    assert "breathing" in mood_insight("anxious", 7, None)
    assert "positive" in mood_insight("grateful", 5, None)
    assert "challenging time" in mood_insight("neutral", 5, negative)
    assert "intense emotions" in mood_insight("angry", 9, None)
    assert mood_insight("neutral", 5, None) == DEFAULT_INSIGHT


def test_personal_insights_needs_three_entries():
    assert personal_insights([entry(), entry()]) == [
        "Keep tracking your mood to discover personal patterns and insights."
    ]


def test_personal_insights_morning_person():
    mornings = [entry(intensity=8, hour=8, day=d) for d in range(3)]
    evenings = [entry(intensity=4, hour=20, day=d) for d in range(3)]

    insights = personal_insights(evenings + mornings)

    assert any("better in the mornings" in i for i in insights)


def test_personal_insights_recent_improvement():
    entries = [entry(intensity=8)] * 3 + [entry(intensity=4)] * 3

    assert any("improving recently" in i for i in personal_insights(entries))
