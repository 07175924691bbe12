# FILE: backend/governance/enforcer.py
"""
Safety enforcer: apply the per-content-type moderation policy
"""
import logging
from typing import Any, Dict, Optional

from backend.governance.policy import DEFAULT_POLICY, is_safe, is_severe
from backend.models.safety import ContentKind, CrisisAssessment, ModerationVerdict, SafetyScreen

logger = logging.getLogger(__name__)


def enforce_safety_policy(
    kind: ContentKind,
    moderation: ModerationVerdict,
    crisis: CrisisAssessment,
    policy: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None
) -> SafetyScreen:
    """
    Decide whether content of this kind is rejected

    Posts and chat are rejected on any unsafe verdict. Journals are private
    reflection and are rejected only for the severe classes. Crisis severity
    never blocks.
    """
    policy = policy or DEFAULT_POLICY

    if kind == "journal":
        blocked = moderation.flagged and is_severe(
            moderation.categories, policy.get("journal_blocking_classes")
        )
    elif kind in policy.get("block_unsafe", []):
        blocked = moderation.flagged and not is_safe(
            moderation.categories, policy.get("support_categories")
        )
    else:
        blocked = False

    if blocked:
        flagged = sorted(name for name, hit in moderation.categories.items() if hit)
        logger.info(
            f"[{correlation_id}] Blocked {kind}: categories={flagged} fallback={moderation.fallback}"
        )

    return SafetyScreen(kind=kind, moderation=moderation, crisis=crisis, blocked=blocked)
