# FILE: backend/governance/redaction.py
"""
PII redaction for public content

Posts are visible to every anonymous visitor, so contact details are
replaced before they are stored.
"""
import re
import logging

logger = logging.getLogger(__name__)

_PATTERNS = [
    # Email addresses
    (re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b'), '[EMAIL]'),
    # Card numbers before phones so 16 digits are not split into a phone
    (re.compile(r'\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b'), '[CARD]'),
    # Phone numbers, optional country code and bracketed area code
    (re.compile(r'(?<!\w)(\+\d{1,3}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}\b'), '[PHONE]'),
    # Social handles
    (re.compile(r'(?<![\w@])@[A-Za-z0-9_]{3,30}\b'), '[HANDLE]'),
]


def redact_pii(text: str) -> str:
    """Redact PII from text"""
    redacted = text
    for pattern, token in _PATTERNS:
        redacted = pattern.sub(token, redacted)

    if redacted != text:
        logger.debug("PII redacted from content")
    return redacted
