# FILE: backend/providers/ollama.py
"""
Ollama provider adapter
"""
import logging
import httpx
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class OllamaProvider:
    """Locally hosted model served by Ollama"""

    def __init__(self, base_url: str, model: str, timeout: float = 30.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.client = client
        logger.info(f"Ollama provider: {base_url}, model: {model}")

    async def generate(
        self,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int
    ) -> Dict[str, Any]:
        """Generate text using Ollama chat endpoint"""
        url = f"{self.base_url}/api/chat"

        payload = {
            "model": self.model,
            "messages": messages,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens
            },
            "stream": False
        }

        if self.client is not None:
            response = await self.client.post(url, json=payload, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
        response.raise_for_status()

        data = response.json()
        text = data["message"]["content"]

        return {
            "text": text.strip(),
            "model": self.model,
            "usage": {}
        }
