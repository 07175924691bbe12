# FILE: backend/governance/moderation.py
"""
Deterministic moderation heuristic used when the external classifier is unavailable
"""
import logging
import re
from typing import Dict, List

from backend.governance.crisis import IMMEDIATE_PATTERNS
from backend.governance.policy import is_safe
from backend.models.safety import ModerationVerdict

logger = logging.getLogger(__name__)

CATEGORY_PATTERNS: Dict[str, List[str]] = {
    "self-harm": IMMEDIATE_PATTERNS,
    "violence": [
        r"\b(kill|hurt|attack|shoot|stab|beat up)\s+(you|him|her|them|someone|somebody|people|everyone|everybody)\b",
        r"\b(weapon|gun|bomb)s?\b",
    ],
    "hate": [
        r"\b(hate|despise)\s+(all|those|these)\s+\w+",
        r"\b\w+\s+(people|folks)\s+(are|r)\s+(trash|vermin|animals|subhuman)\b",
    ],
    "illicit": [
        r"\b(buy|sell|selling|dealing|deal)\s+(drugs?|weapons?|guns?)\b",
        r"\billegal\b",
    ],
}


def fallback_moderation(text: str) -> ModerationVerdict:
    """Keyword/pattern verdict; no match means safe"""
    lowered = (text or "").lower().replace("’", "'")

    categories: Dict[str, bool] = {}
    for category, patterns in CATEGORY_PATTERNS.items():
        if any(re.search(p, lowered) for p in patterns):
            categories[category] = True

    flagged = bool(categories)
    if flagged:
        logger.debug(f"Fallback moderation flagged: {sorted(categories)}")

    return ModerationVerdict(
        flagged=flagged,
        categories=categories,
        safe=is_safe(categories),
        fallback=True,
    )
