# FILE: backend/services/safety_gate.py
"""
Content safety gate

Moderation is external with a local fallback; crisis detection is always
local. The gate never raises: a degraded classifier yields a verdict marked
fallback=True, and crisis severity does not depend on moderation at all.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

from backend.governance.audit import log_safety_decision
from backend.governance.crisis import detect_crisis
from backend.governance.enforcer import enforce_safety_policy
from backend.governance.moderation import fallback_moderation
from backend.models.safety import ContentKind, CrisisAssessment, ModerationVerdict, SafetyScreen
from backend.services.correlation import get_correlation_id
from backend.services.telemetry import record_event

logger = logging.getLogger(__name__)


class SafetyGate:
    """Moderation + crisis screening for every piece of user text"""

    def __init__(
        self,
        moderation_provider: Optional[Any] = None,
        timeout: float = 5.0,
        policy: Optional[Dict[str, Any]] = None,
        logs_dir: Optional[str] = None,
        audit_enabled: bool = False
    ):
        self.moderation_provider = moderation_provider
        self.timeout = timeout
        self.policy = policy
        self.logs_dir = logs_dir
        self.audit_enabled = audit_enabled and bool(logs_dir)

    async def moderate(self, text: str) -> ModerationVerdict:
        """External verdict when available, local heuristic otherwise"""
        if self.moderation_provider is None:
            return fallback_moderation(text)

        try:
            return await asyncio.wait_for(
                self.moderation_provider.moderate(text), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"[{get_correlation_id()}] Moderation timed out after {self.timeout}s, using fallback"
            )
        except Exception as e:
            logger.warning(f"[{get_correlation_id()}] Moderation failed ({e!r}), using fallback")

        record_event("moderation_fallback")
        return fallback_moderation(text)

    def detect_crisis(self, text: str) -> CrisisAssessment:
        return detect_crisis(text)

    async def screen(self, text: str, kind: ContentKind) -> SafetyScreen:
        """Run both checks and apply the policy for this content type"""
        correlation_id = get_correlation_id()
        moderation = await self.moderate(text)
        crisis = self.detect_crisis(text)

        screen = enforce_safety_policy(
            kind, moderation, crisis, policy=self.policy, correlation_id=correlation_id
        )

        if crisis.severity != "low":
            logger.info(f"[{correlation_id}] {kind} severity={crisis.severity}")
            record_event("crisis_detected", kind=kind, severity=crisis.severity)
        if screen.blocked:
            record_event("content_blocked", kind=kind, fallback=moderation.fallback)

        if self.audit_enabled:
            log_safety_decision(self.logs_dir, screen, text, correlation_id)

        return screen
