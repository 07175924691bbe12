# FILE: tests/test_sentiment.py
"""Sentiment analysis: external path and lexicon fallback share one contract"""
import httpx
import pytest

from backend.providers.google_language import GoogleSentimentProvider
from backend.services.sentiment import SentimentAnalyzer, lexicon_sentiment
from tests.conftest import FakeSentiment


def test_lexicon_positive():
    result = lexicon_sentiment("I feel happy and grateful today")

    assert result.score == 1.0
    assert result.label == "positive"
    assert result.fallback
    assert result.magnitude == pytest.approx(2 / 6)


def test_lexicon_mixed_and_empty():
    mixed = lexicon_sentiment("good day but tired")
    assert mixed.score == 0.0
    assert mixed.label == "neutral"

    empty = lexicon_sentiment("")
    assert empty.score == 0.0
    assert empty.magnitude == 0.0


def test_lexicon_negative():
    result = lexicon_sentiment("stressed and worried, just awful")

    assert result.score == -1.0
    assert result.label == "negative"
    assert result.confidence == 1.0


@pytest.mark.asyncio
async def test_provider_failure_falls_back_to_lexicon():
    analyzer = SentimentAnalyzer(FakeSentiment(error=httpx.ConnectError("down")))

    result = await analyzer.analyze("feeling calm")

    assert result.fallback
    assert result.label == "positive"


@pytest.mark.asyncio
async def test_provider_result_is_passed_through():
    analyzer = SentimentAnalyzer(FakeSentiment(score=0.4))

    result = await analyzer.analyze("anything")

    assert result.score == 0.4
    assert not result.fallback


@pytest.mark.asyncio
async def test_google_provider_parses_document_sentiment():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["key"] == "test-key"
        return httpx.Response(200, json={"documentSentiment": {"score": -0.6, "magnitude": 1.2}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        provider = GoogleSentimentProvider("test-key", client=client)
        result = await provider.analyze("rough week")

    assert result.score == -0.6
    assert result.magnitude == 1.2
    assert result.label == "negative"
    assert result.confidence == pytest.approx(0.6)
