# FILE: backend/governance/audit.py
"""
Audit logging for safety decisions

Entries hold a content hash, never the content.
"""
import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from backend.models.safety import SafetyScreen

logger = logging.getLogger(__name__)


def content_hash(text: str) -> str:
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()


def log_safety_decision(
    logs_dir: str,
    screen: SafetyScreen,
    text: str,
    correlation_id: Optional[str] = None
) -> None:
    """Append safety decision to the daily audit trail"""
    audit_dir = Path(logs_dir) / "safety"

    now = datetime.now(timezone.utc)
    entry = {
        "timestamp": now.isoformat(),
        "correlation_id": correlation_id,
        "kind": screen.kind,
        "blocked": screen.blocked,
        "flagged": screen.moderation.flagged,
        "categories": sorted(k for k, v in screen.moderation.categories.items() if v),
        "moderation_fallback": screen.moderation.fallback,
        "severity": screen.crisis.severity,
        "content_hash": content_hash(text)
    }

    try:
        audit_dir.mkdir(parents=True, exist_ok=True)
        audit_file = audit_dir / f"{now.strftime('%Y-%m-%d')}.jsonl"
        with open(audit_file, 'a') as f:
            f.write(json.dumps(entry) + '\n')
    except OSError as e:
        # Audit write failures never fail the request
        logger.warning(f"Failed to write safety audit entry: {e}")
