# FILE: backend/providers/openai.py
"""
OpenAI provider adapter (chat completions + moderation)
"""
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from backend.governance.policy import is_safe
from backend.models.safety import ModerationVerdict

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """OpenAI provider"""

    def __init__(
        self,
        api_key: str,
        model: str,
        moderation_model: str = "omni-moderation-latest",
        client: Optional[AsyncOpenAI] = None
    ):
        # Callers bound each call; no SDK retries
        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.moderation_model = moderation_model
        logger.info(f"OpenAI provider: model={model}, moderation={moderation_model}")

    async def generate(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int
    ) -> Dict[str, Any]:
        """Generate text using OpenAI"""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            presence_penalty=0.6,
            frequency_penalty=0.3
        )

        text = response.choices[0].message.content or ""
        usage = response.usage

        return {
            "text": text.strip(),
            "model": self.model,
            "usage": {
                "prompt_tokens": usage.prompt_tokens if usage else 0,
                "completion_tokens": usage.completion_tokens if usage else 0,
                "total_tokens": usage.total_tokens if usage else 0
            }
        }

    async def moderate(self, text: str) -> ModerationVerdict:
        """Classify text with the OpenAI moderation endpoint"""
        response = await self.client.moderations.create(
            model=self.moderation_model,
            input=text
        )
        result = response.results[0]

        raw = result.categories.model_dump(by_alias=True)
        categories = {name: bool(hit) for name, hit in raw.items() if hit is not None}

        return ModerationVerdict(
            flagged=bool(result.flagged),
            categories=categories,
            safe=is_safe(categories)
        )
