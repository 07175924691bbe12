# FILE: backend/services/sentiment.py
"""
Sentiment scoring for free-text mood notes
"""
import asyncio
import logging
from typing import Any, Optional

from backend.models.safety import SentimentResult
from backend.providers.google_language import label_for
from backend.services.correlation import get_correlation_id
from backend.services.telemetry import record_event

logger = logging.getLogger(__name__)

POSITIVE_WORDS = [
    "happy", "good", "great", "wonderful", "amazing", "love", "joy", "excited",
    "grateful", "blessed", "peaceful", "calm", "content", "proud", "hopeful",
]
NEGATIVE_WORDS = [
    "sad", "bad", "terrible", "awful", "hate", "angry", "frustrated", "worried",
    "anxious", "stressed", "overwhelmed", "hopeless", "tired", "exhausted",
]

LEXICON_LABEL_THRESHOLD = 0.1


def lexicon_sentiment(text: str) -> SentimentResult:
    """
    Count words containing a positive or negative stem

    score = (positive - negative) / matched, magnitude = matched / words.
    Matching is by substring, so "unhappy" counts as positive.
    """
    words = (text or "").lower().split()
    positive = sum(1 for w in words if any(p in w for p in POSITIVE_WORDS))
    negative = sum(1 for w in words if any(n in w for n in NEGATIVE_WORDS))

    matched = positive + negative
    score = (positive - negative) / matched if matched else 0.0
    score = max(-1.0, min(1.0, score))
    magnitude = matched / len(words) if words else 0.0

    return SentimentResult(
        score=score,
        magnitude=magnitude,
        label=label_for(score, LEXICON_LABEL_THRESHOLD),
        confidence=abs(score),
        fallback=True,
    )


class SentimentAnalyzer:
    """External sentiment when configured, lexicon scorer otherwise"""

    def __init__(self, provider: Optional[Any] = None, timeout: float = 5.0):
        self.provider = provider
        self.timeout = timeout

    async def analyze(self, text: str) -> SentimentResult:
        if self.provider is not None:
            try:
                return await asyncio.wait_for(self.provider.analyze(text), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"[{get_correlation_id()}] Sentiment service timed out")
            except Exception as e:
                logger.warning(f"[{get_correlation_id()}] Sentiment service failed: {e!r}")
            record_event("sentiment_fallback")
        return lexicon_sentiment(text)
