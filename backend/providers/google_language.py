# FILE: backend/providers/google_language.py
"""
Google Cloud Natural Language sentiment adapter
"""
import logging
import httpx
from typing import Optional

from backend.models.safety import SentimentResult

logger = logging.getLogger(__name__)

ANALYZE_SENTIMENT_URL = "https://language.googleapis.com/v1/documents:analyzeSentiment"


def label_for(score: float, threshold: float) -> str:
    if score > threshold:
        return "positive"
    if score < -threshold:
        return "negative"
    return "neutral"


class GoogleSentimentProvider:
    """Document sentiment from the Natural Language API"""

    def __init__(self, api_key: str, timeout: float = 5.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.client = client
        logger.info("Google sentiment provider enabled")

    async def analyze(self, text: str) -> SentimentResult:
        payload = {
            "document": {"type": "PLAIN_TEXT", "content": text},
            "encodingType": "UTF8"
        }
        params = {"key": self.api_key}

        if self.client is not None:
            response = await self.client.post(
                ANALYZE_SENTIMENT_URL, json=payload, params=params, timeout=self.timeout
            )
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(ANALYZE_SENTIMENT_URL, json=payload, params=params)
        response.raise_for_status()

        sentiment = response.json()["documentSentiment"]
        score = max(-1.0, min(1.0, float(sentiment.get("score", 0.0))))
        magnitude = max(0.0, float(sentiment.get("magnitude", 0.0)))

        return SentimentResult(
            score=score,
            magnitude=magnitude,
            label=label_for(score, 0.25),
            confidence=min(abs(score), 1.0)
        )
