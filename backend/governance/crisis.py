# FILE: backend/governance/crisis.py
"""
Local crisis detection

Runs entirely in-process and never calls an external service, so its output
is the same whether or not moderation is reachable.
"""
import re
from typing import List

from backend.models.safety import CrisisAssessment

IMMEDIATE_PATTERNS = [
    r"\bsuicid(e|al)\b",
    r"\bkill(ing)? myself\b",
    r"\bend(ing)? my life\b",
    r"\bwant(ed)? to die\b",
    r"\bwish i (was|were) dead\b",
    r"\bhurt(ing)? myself\b",
    r"\bself[- ]?harm(ing)?\b",
    r"\bcut(ting)? myself\b",
    r"\boverdos(e|ing)\b",
    r"\bjump(ing)? off\b",
    r"\bhang(ing)? myself\b",
    r"\bworthless\b",
    r"\bhopeless\b",
    r"\bcan'?t go on\b",
    r"\bgive up on (life|everything)\b",
    r"\bend it all\b",
    r"\bbetter off dead\b",
    r"\bno reason to live\b",
]

DISTRESS_PATTERNS = [
    r"\bdepress(ed|ion|ing)\b",
    r"\banxi(ety|ous)\b",
    r"\bpanic(king)?\b",
    r"\boverwhelm(ed|ing)\b",
    r"\balone\b",
    r"\blonely\b",
    r"\bscared\b",
    r"\bafraid\b",
    r"\bcry(ing)?\b",
    r"\bcried\b",
    r"\btears\b",
    r"\bhelp me\b",
    r"\bgive up\b",
]


def _find_matches(text: str, patterns: List[str]) -> List[str]:
    matches: List[str] = []
    for pattern in patterns:
        found = re.search(pattern, text)
        if found:
            matches.append(found.group(0))
    return matches


def _normalize(text: str) -> str:
    return text.lower().replace("’", "'")


def detect_crisis(text: str) -> CrisisAssessment:
    """Classify text into low / medium / high crisis severity"""
    lowered = _normalize(text or "")

    immediate = _find_matches(lowered, IMMEDIATE_PATTERNS)
    distress = _find_matches(lowered, DISTRESS_PATTERNS)

    if immediate:
        severity = "high"
    elif distress:
        severity = "medium"
    else:
        severity = "low"

    return CrisisAssessment(
        immediate_crisis=bool(immediate),
        emotional_distress=bool(distress),
        needs_support=bool(immediate or distress),
        severity=severity,
        matched_terms=list(dict.fromkeys(immediate + distress)),
    )
