# FILE: backend/services/diagnostics.py
"""
Diagnostic utilities
"""
import logging
from typing import Any, Dict

from backend.errors import StoreUnavailable
from backend.services.telemetry import get_telemetry_summary

logger = logging.getLogger(__name__)


async def run_diagnostics(container) -> Dict[str, Any]:
    """Run system diagnostics"""
    return {
        "config": check_config(container.settings),
        "store": await check_store(container.store, container.settings.store_backend),
        "providers": check_providers(container),
        "telemetry": {"counters": get_telemetry_summary()["counters"]},
    }


def check_config(settings) -> Dict[str, Any]:
    """Check configuration"""
    return {
        "llm_mode": settings.llm_mode,
        "router_policy": settings.router_policy,
        "store_backend": settings.store_backend,
        "moderation_enabled": settings.moderation_enabled,
        "status": "ok"
    }


async def check_store(store, backend: str) -> Dict[str, Any]:
    """Check the ephemeral store answers a ping"""
    try:
        reachable = await store.ping()
    except StoreUnavailable as e:
        logger.warning(f"Store ping failed: {e.detail}")
        reachable = False
    return {"backend": backend, "status": "ok" if reachable else "error"}


def check_providers(container) -> Dict[str, Any]:
    """Check provider availability; canned replies cover an empty registry"""
    status = container.registry.get_status()
    return {
        "available": status["available_providers"],
        "moderation": status["moderation_provider"],
        "open_circuits": status["circuit_breaker"]["open_circuits"],
        "status": "ok" if status["available_providers"] else "fallback"
    }
