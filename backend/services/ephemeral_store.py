# FILE: backend/services/ephemeral_store.py
"""
Ephemeral namespaced key-value store with per-write TTL

Two backends share one async contract:
- MemoryStore: in-process, injectable clock (development and tests)
- RedisStore: redis.asyncio (see backend/services/redis_store.py)

Expiry is time-based. Nothing needs to delete a record for it to disappear;
once now > expires_at every read path behaves as if the key never existed.
"""
import json
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

ScanResult = List[Tuple[str, Any]]

# MemoryStore drops every expired entry at most once per interval
SWEEP_INTERVAL_SECONDS = 60


def timestamp_of(value: Any) -> str:
    """Embedded ISO timestamp used for newest-first ordering"""
    if isinstance(value, dict):
        return str(value.get("timestamp") or "")
    return ""


class EphemeralStore:
    """Contract every store backend implements"""

    async def put(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def scan_all(self, namespace: str) -> ScanResult:
        raise NotImplementedError

    async def scan_by_prefix(self, namespace: str, prefix: str) -> ScanResult:
        raise NotImplementedError

    async def increment_field(
        self, namespace: str, key: str, field_name: str, amount: int = 1
    ) -> Optional[int]:
        raise NotImplementedError

    async def append(self, namespace: str, key: str, item: Any, ttl_seconds: int) -> None:
        raise NotImplementedError

    async def read_list(self, namespace: str, key: str, limit: Optional[int] = None) -> List[Any]:
        raise NotImplementedError

    async def delete(self, namespace: str, key: str) -> None:
        raise NotImplementedError

    async def delete_prefix(self, namespace: str, prefix: str) -> int:
        raise NotImplementedError

    async def ttl(self, namespace: str, key: str) -> Optional[int]:
        raise NotImplementedError

    async def ping(self) -> bool:
        raise NotImplementedError

    async def close(self) -> None:
        return None


@dataclass
class _Entry:
    value: Any
    expires_at: float
    seq: int


@dataclass
class _ListEntry:
    items: List[Any] = field(default_factory=list)
    expires_at: float = 0.0


class MemoryStore(EphemeralStore):
    """In-process ephemeral store"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._values: Dict[Tuple[str, str], _Entry] = {}
        self._lists: Dict[Tuple[str, str], _ListEntry] = {}
        self._seq = 0
        self._last_sweep = clock()
        # No awaits happen while the lock is held, so a thread lock is enough
        # for TestClient threads and the event loop alike.
        self._lock = threading.RLock()

    @staticmethod
    def _copy(value: Any) -> Any:
        # Payloads are opaque JSON; round-tripping keeps callers from
        # mutating stored state through shared references.
        return json.loads(json.dumps(value))

    def _sweep(self) -> None:
        """Evict expired records and lists; caller holds the lock"""
        now = self.clock()
        if now - self._last_sweep < SWEEP_INTERVAL_SECONDS:
            return
        self._last_sweep = now
        expired_values = [k for k, e in self._values.items() if now > e.expires_at]
        for k in expired_values:
            del self._values[k]
        expired_lists = [k for k, e in self._lists.items() if now > e.expires_at]
        for k in expired_lists:
            del self._lists[k]
        if expired_values or expired_lists:
            logger.debug(f"Swept {len(expired_values)} records and {len(expired_lists)} lists")

    def _live(self, namespace: str, key: str) -> Optional[_Entry]:
        entry = self._values.get((namespace, key))
        if entry is None:
            return None
        if self.clock() > entry.expires_at:
            logger.debug(f"Record expired: {namespace}:{key}")
            del self._values[(namespace, key)]
            return None
        return entry

    def _live_list(self, namespace: str, key: str) -> Optional[_ListEntry]:
        entry = self._lists.get((namespace, key))
        if entry is None:
            return None
        if self.clock() > entry.expires_at:
            logger.debug(f"List expired: {namespace}:{key}")
            del self._lists[(namespace, key)]
            return None
        return entry

    async def put(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        """Upsert a record and reset its expiry"""
        with self._lock:
            self._sweep()
            self._seq += 1
            self._values[(namespace, key)] = _Entry(
                value=self._copy(value),
                expires_at=self.clock() + ttl_seconds,
                seq=self._seq
            )
        logger.debug(f"Record stored: {namespace}:{key} ttl={ttl_seconds}s")

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        """Retrieve a record unless it has expired"""
        with self._lock:
            entry = self._live(namespace, key)
            return None if entry is None else self._copy(entry.value)

    def _scan(self, namespace: str, prefix: Optional[str]) -> ScanResult:
        with self._lock:
            self._sweep()
            matched = []
            for (ns, key) in list(self._values.keys()):
                if ns != namespace:
                    continue
                if prefix is not None and not key.startswith(f"{prefix}:"):
                    continue
                entry = self._live(ns, key)
                if entry is not None:
                    matched.append((key, entry))

            matched.sort(key=lambda kv: (timestamp_of(kv[1].value), kv[1].seq), reverse=True)
            return [(key, self._copy(entry.value)) for key, entry in matched]

    async def scan_all(self, namespace: str) -> ScanResult:
        """All live records in a namespace, newest first"""
        return self._scan(namespace, None)

    async def scan_by_prefix(self, namespace: str, prefix: str) -> ScanResult:
        """Live records whose key starts with '<prefix>:', newest first"""
        return self._scan(namespace, prefix)

    async def increment_field(
        self, namespace: str, key: str, field_name: str, amount: int = 1
    ) -> Optional[int]:
        """Atomically bump a numeric field, keeping the remaining TTL"""
        with self._lock:
            entry = self._live(namespace, key)
            if entry is None or not isinstance(entry.value, dict):
                return None
            new_value = int(entry.value.get(field_name) or 0) + amount
            entry.value[field_name] = new_value
            return new_value

    async def append(self, namespace: str, key: str, item: Any, ttl_seconds: int) -> None:
        """Append to an ordered list and refresh the list's TTL"""
        with self._lock:
            self._sweep()
            entry = self._live_list(namespace, key)
            if entry is None:
                entry = _ListEntry()
                self._lists[(namespace, key)] = entry
            entry.items.append(self._copy(item))
            entry.expires_at = self.clock() + ttl_seconds

    async def read_list(self, namespace: str, key: str, limit: Optional[int] = None) -> List[Any]:
        """List items oldest first; limit keeps the most recent ones"""
        with self._lock:
            entry = self._live_list(namespace, key)
            if entry is None:
                return []
            items = entry.items if not limit else entry.items[-limit:]
            return [self._copy(item) for item in items]

    async def delete(self, namespace: str, key: str) -> None:
        with self._lock:
            self._values.pop((namespace, key), None)
            self._lists.pop((namespace, key), None)

    async def delete_prefix(self, namespace: str, prefix: str) -> int:
        with self._lock:
            doomed = [
                k for k in self._values
                if k[0] == namespace and k[1].startswith(f"{prefix}:")
            ]
            for k in doomed:
                del self._values[k]
            return len(doomed)

    async def ttl(self, namespace: str, key: str) -> Optional[int]:
        """Remaining whole seconds before expiry, or None when absent"""
        with self._lock:
            entry = self._live(namespace, key) or self._live_list(namespace, key)
            if entry is None:
                return None
            return max(int(entry.expires_at - self.clock()), 1)

    async def ping(self) -> bool:
        return True
