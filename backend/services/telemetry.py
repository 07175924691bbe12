# FILE: backend/services/telemetry.py
"""
Telemetry and metrics collection (summary-only, rotated JSONL)

- Events carry ids, severities, categories and counts. Never user text.
- Persisted append-only to LOGS_DIR/telemetry/events-YYYY-MM-DD.jsonl (UTC).
- Keeps a small in-memory tail and per-event counters for the health route.
"""
from __future__ import annotations

import json
import logging
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Deque, Dict

from backend.config import get_settings

logger = logging.getLogger(__name__)

_MAX_IN_MEMORY_EVENTS = 200
_RETENTION_DAYS = 30
_recent_events: Deque[Dict[str, Any]] = deque(maxlen=_MAX_IN_MEMORY_EVENTS)
_counters: Dict[str, int] = defaultdict(int)


@dataclass(frozen=True)
class TelemetryConfig:
    enabled: bool
    logs_dir: Path


def _get_config() -> TelemetryConfig:
    settings = get_settings()
    return TelemetryConfig(
        enabled=bool(settings.telemetry_enabled),
        logs_dir=Path(settings.logs_dir),
    )


def _telemetry_dir(cfg: TelemetryConfig) -> Path:
    d = cfg.logs_dir / "telemetry"
    d.mkdir(parents=True, exist_ok=True)
    return d


def _prune_old_files(cfg: TelemetryConfig) -> None:
    """Delete rotated telemetry files older than the retention window"""
    cutoff = datetime.now(timezone.utc) - timedelta(days=_RETENTION_DAYS)
    try:
        for p in _telemetry_dir(cfg).glob("events-*.jsonl"):
            date_part = p.name.replace("events-", "").replace(".jsonl", "")
            try:
                file_date = datetime.fromisoformat(date_part).replace(tzinfo=timezone.utc)
            except ValueError:
                continue
            if file_date < cutoff:
                p.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Telemetry prune skipped: %s", e)


def init_telemetry() -> None:
    """Initialize telemetry (create dirs + retention prune)."""
    cfg = _get_config()
    if not cfg.enabled:
        logger.info("Telemetry disabled")
        return

    _telemetry_dir(cfg)
    _prune_old_files(cfg)
    logger.info("Telemetry initialized (dir=%s)", str(cfg.logs_dir))


def record_event(event: str, **fields: Any) -> None:
    """Record telemetry event (summary-only)."""
    _counters[event] += 1

    cfg = _get_config()
    if not cfg.enabled:
        return

    now_utc = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {"ts": now_utc.isoformat(), "event": event, **fields}
    _recent_events.append(payload)

    path = cfg.logs_dir / "telemetry" / f"events-{now_utc.date().isoformat()}.jsonl"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError as e:
        # Telemetry failure never fails a request
        logger.warning("Failed to write telemetry event to %s: %s", str(path), e)


def get_telemetry_summary() -> Dict[str, Any]:
    """Lightweight summary (does NOT scan JSONL files)."""
    return {
        "enabled": _get_config().enabled,
        "total_events_in_memory": len(_recent_events),
        "counters": dict(_counters),
        "recent_events": list(_recent_events)[-10:],
    }
