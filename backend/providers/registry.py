# FILE: backend/providers/registry.py
"""
Provider registry: ordered generation providers behind a circuit breaker
"""
import asyncio
import logging
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Any, Deque, Dict, List, Optional, Set

from backend.config import Settings, get_settings
from backend.errors import UpstreamUnavailable
from backend.providers.ollama import OllamaProvider
from backend.providers.openai import OpenAIProvider
from backend.services.correlation import get_correlation_id
from backend.services.prompts import build_chat_messages

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CircuitBreaker:
    """Simple circuit breaker for provider failover"""

    def __init__(self, threshold: int = 3, timeout_seconds: int = 60):
        self.threshold = threshold
        self.timeout_seconds = timeout_seconds
        self.failures: Dict[str, int] = {}
        self.open_until: Dict[str, datetime] = {}

    def record_failure(self, provider: str):
        """Record a failure for provider"""
        self.failures[provider] = self.failures.get(provider, 0) + 1
        if self.failures[provider] >= self.threshold:
            self.open_until[provider] = _utcnow() + timedelta(seconds=self.timeout_seconds)
            logger.warning(f"Circuit breaker opened for {provider}")

    def record_success(self, provider: str):
        """Record a success for provider"""
        self.failures[provider] = 0
        if provider in self.open_until:
            del self.open_until[provider]

    def is_open(self, provider: str) -> bool:
        """Check if circuit is open for provider"""
        if provider in self.open_until:
            if _utcnow() < self.open_until[provider]:
                return True
            # Timeout expired, reset
            del self.open_until[provider]
            self.failures[provider] = 0
        return False


class ProviderRegistry:
    """Registry of generation providers with routing logic and call log"""

    OFFLINE_PROVIDERS: Set[str] = {"ollama"}
    ONLINE_PROVIDERS: Set[str] = {"openai"}

    def __init__(self, settings: Optional[Settings] = None,
                 providers: Optional[Dict[str, Any]] = None):
        self.settings = settings or get_settings()
        self.circuit_breaker = CircuitBreaker()
        # Metadata only; prompts and replies are never retained
        self.io_log: Deque[Dict[str, Any]] = deque(maxlen=100)
        if providers is not None:
            self.providers: Dict[str, Any] = dict(providers)
        else:
            self.providers = {}
            self._initialize_providers()

    def _allowed_providers_by_mode(self) -> Set[str]:
        """
        Enforce LLM_MODE semantics:
        - offline: local only
        - online: remote only
        - hybrid: both
        """
        mode = (self.settings.llm_mode or "online").strip().lower()
        if mode == "offline":
            return set(self.OFFLINE_PROVIDERS)
        if mode == "online":
            return set(self.ONLINE_PROVIDERS)
        return set(self.OFFLINE_PROVIDERS | self.ONLINE_PROVIDERS)

    def _initialize_providers(self):
        """Initialize providers allowed by current mode"""
        allowed = self._allowed_providers_by_mode()
        settings = self.settings

        if "ollama" in allowed:
            try:
                self.providers["ollama"] = OllamaProvider(
                    base_url=settings.ollama_base_url,
                    model=settings.ollama_model,
                    timeout=settings.generation_timeout_seconds
                )
            except Exception as e:
                logger.warning(f"Failed to initialize Ollama: {e}")

        if "openai" in allowed and settings.openai_api_key:
            try:
                self.providers["openai"] = OpenAIProvider(
                    api_key=settings.openai_api_key,
                    model=settings.openai_model,
                    moderation_model=settings.moderation_model
                )
            except Exception as e:
                logger.warning(f"Failed to initialize OpenAI: {e}")

        logger.info(
            f"Initialized providers (mode={settings.llm_mode}): {list(self.providers.keys())}"
        )

    @property
    def moderation_provider(self) -> Optional[Any]:
        """Provider exposing moderate(), if one is configured"""
        provider = self.providers.get("openai")
        if provider is not None and hasattr(provider, "moderate"):
            return provider
        return None

    def _get_provider_order(self) -> List[str]:
        """Get provider order based on policy"""
        if self.settings.router_policy == "offline_first":
            base = ["ollama", "openai"]
        else:
            base = ["openai", "ollama"]
        ordered = [p for p in base if p in self.providers]
        # Injected providers with other names go last in insertion order
        ordered += [p for p in self.providers if p not in ordered]
        return ordered

    def _log_io(self, provider: str, model: str, output_length: int,
                duration_ms: int, error: Optional[str] = None):
        self.io_log.append({
            "timestamp": _utcnow().isoformat(),
            "correlation_id": get_correlation_id(),
            "provider": provider,
            "model": model,
            "output_length": output_length,
            "duration_ms": duration_ms,
            "error": error
        })

    async def generate(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Generate text using first available provider

        Returns:
            {text: str, provider: str, model: str, duration_ms: int}

        Raises:
            UpstreamUnavailable when every provider failed, timed out or is
            behind an open circuit
        """
        temperature = self.settings.generation_temperature if temperature is None else temperature
        max_tokens = max_tokens or self.settings.generation_max_tokens
        timeout = self.settings.generation_timeout_seconds
        correlation_id = get_correlation_id()

        for provider_name in self._get_provider_order():
            if self.circuit_breaker.is_open(provider_name):
                logger.debug(f"Skipping {provider_name} (circuit open)")
                continue

            provider = self.providers[provider_name]
            provider_start = _utcnow()

            try:
                logger.info(f"[{correlation_id}] Trying provider: {provider_name}")
                result = await asyncio.wait_for(
                    provider.generate(
                        messages=messages,
                        temperature=temperature,
                        max_tokens=max_tokens
                    ),
                    timeout=timeout
                )
                text = (result.get("text") or "").strip()
                if not text:
                    raise ValueError("empty completion")

                duration_ms = int((_utcnow() - provider_start).total_seconds() * 1000)
                self.circuit_breaker.record_success(provider_name)
                self._log_io(provider_name, result.get("model", "unknown"), len(text), duration_ms)

                return {
                    **result,
                    "text": text,
                    "provider": provider_name,
                    "duration_ms": duration_ms
                }

            except Exception as e:
                # asyncio.TimeoutError included: the call is abandoned, nothing partial is kept
                duration_ms = int((_utcnow() - provider_start).total_seconds() * 1000)
                logger.warning(f"[{correlation_id}] Provider {provider_name} failed: {e!r}")
                self.circuit_breaker.record_failure(provider_name)
                self._log_io(provider_name, "unknown", 0, duration_ms, error=type(e).__name__)

                if not self.settings.router_fallback:
                    break

        raise UpstreamUnavailable(
            f"No generation provider succeeded (mode={self.settings.llm_mode}, "
            f"initialized={list(self.providers.keys())})"
        )

    async def generate_reply(
        self,
        message: str,
        history: List[Dict[str, str]],
        urgent: bool = False
    ) -> Dict[str, Any]:
        """Chat reply; urgent swaps in the crisis instruction set and lifts the length cap"""
        messages = build_chat_messages(message, history, urgent)
        max_tokens = self.settings.generation_max_tokens
        if urgent:
            max_tokens = max_tokens * 2
        return await self.generate(messages, max_tokens=max_tokens)

    def get_status(self) -> Dict[str, Any]:
        """Router status for health reporting"""
        return {
            "policy": self.settings.router_policy,
            "fallback_enabled": self.settings.router_fallback,
            "timeout_seconds": self.settings.generation_timeout_seconds,
            "available_providers": list(self.providers.keys()),
            "moderation_provider": self.moderation_provider is not None,
            "circuit_breaker": {
                "threshold": self.circuit_breaker.threshold,
                "timeout_seconds": self.circuit_breaker.timeout_seconds,
                "open_circuits": list(self.circuit_breaker.open_until.keys())
            }
        }

    def get_recent_io(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Get recent call metadata"""
        return list(self.io_log)[-limit:]
