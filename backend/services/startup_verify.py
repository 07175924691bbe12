# FILE: backend/services/startup_verify.py
"""
Startup verification
"""
import logging
from typing import Any, Dict

from backend.services.diagnostics import run_diagnostics

logger = logging.getLogger(__name__)


async def verify_startup(container) -> Dict[str, Any]:
    """
    Verify system startup requirements

    The store must answer. Generation and moderation providers are optional:
    without them chat uses canned replies and moderation uses local rules.
    """
    logger.info("Running startup verification")
    diagnostics = await run_diagnostics(container)

    store_ok = diagnostics["store"]["status"] == "ok"
    if not store_ok:
        logger.error(f"Ephemeral store unreachable ({container.settings.store_backend})")

    providers = diagnostics["providers"]["available"]
    if not providers:
        logger.warning("No generation providers available; replies will use canned text")
    if not diagnostics["providers"]["moderation"]:
        logger.warning("No moderation provider; local moderation rules apply")

    return {
        "store_ok": store_ok,
        "mode": container.settings.llm_mode,
        "providers": providers,
        "diagnostics": diagnostics
    }
