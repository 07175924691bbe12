# FILE: backend/governance/policy.py
"""
Content safety policy definitions

Moderation categories use the classifier's names ("self-harm",
"violence/graphic", ...). A sub-category belongs to the class named before
the slash.
"""
import json
import logging
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

# First-person distress is routed to crisis support, not rejected
SUPPORT_CATEGORIES = {"self-harm", "self-harm/intent"}

# Journals are private; only these classes block them
SEVERE_CLASSES = {"violence", "hate"}

DEFAULT_POLICY: Dict[str, Any] = {
    "support_categories": sorted(SUPPORT_CATEGORIES),
    "journal_blocking_classes": sorted(SEVERE_CLASSES),
    "block_unsafe": ["post", "chat"],
}


def category_class(category: str) -> str:
    return category.split("/", 1)[0]


def flagged_categories(categories: Dict[str, bool]) -> Iterable[str]:
    return (name for name, hit in categories.items() if hit)


def is_safe(categories: Dict[str, bool], support_categories: Optional[Iterable[str]] = None) -> bool:
    """Safe unless a category outside the support set is flagged"""
    support = set(support_categories or SUPPORT_CATEGORIES)
    return not any(name not in support for name in flagged_categories(categories))


def is_severe(categories: Dict[str, bool], severe_classes: Optional[Iterable[str]] = None) -> bool:
    """True when a flagged category belongs to a class that blocks journals"""
    severe = set(severe_classes or SEVERE_CLASSES)
    return any(category_class(name) in severe for name in flagged_categories(categories))


def load_safety_policy(policy_path: Optional[str]) -> Dict[str, Any]:
    """Load safety policy overrides from JSON file"""
    if not policy_path:
        return dict(DEFAULT_POLICY)
    try:
        with open(policy_path, 'r') as f:
            overrides = json.load(f)
    except FileNotFoundError:
        return dict(DEFAULT_POLICY)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring malformed safety policy {policy_path}: {e}")
        return dict(DEFAULT_POLICY)
    return {**DEFAULT_POLICY, **overrides}
