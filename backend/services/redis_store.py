# FILE: backend/services/redis_store.py
"""
Redis-backed ephemeral store (redis.asyncio)

Key layout:
- value records: "<namespace>:<key>"            (SET ... EX ttl)
- ordered lists: "list:<namespace>:<key>"       (RPUSH + EXPIRE)
"""
import asyncio
import json
import logging
import re
from typing import Any, Awaitable, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError, WatchError

from backend.errors import StoreUnavailable
from backend.services.ephemeral_store import EphemeralStore, ScanResult, timestamp_of

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _escape_glob(text: str) -> str:
    return _GLOB_SPECIAL.sub(r"\\\1", text)


class RedisStore(EphemeralStore):
    """Ephemeral store backed by Redis"""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        password: Optional[str] = None,
        timeout_seconds: float = 2.0,
        client: Optional[Any] = None
    ):
        self.timeout_seconds = timeout_seconds
        self.client = client or redis.Redis.from_url(
            url,
            password=password,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds
        )
        logger.info(f"Redis store: {url}")

    @staticmethod
    def _key(namespace: str, key: str) -> str:
        return f"{namespace}:{key}"

    @staticmethod
    def _list_key(namespace: str, key: str) -> str:
        return f"list:{namespace}:{key}"

    async def _call(self, op: str, awaitable: Awaitable) -> Any:
        """Run one store operation under the timeout; failures close the request"""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except (RedisError, OSError, asyncio.TimeoutError) as e:
            logger.error(f"Redis {op} failed: {e!r}")
            raise StoreUnavailable() from e

    async def put(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        await self._call(
            "put",
            self.client.set(self._key(namespace, key), json.dumps(value), ex=ttl_seconds)
        )

    async def get(self, namespace: str, key: str) -> Optional[Any]:
        raw = await self._call("get", self.client.get(self._key(namespace, key)))
        return None if raw is None else json.loads(raw)

    async def _scan(self, pattern: str) -> ScanResult:
        async def _collect():
            keys = [k async for k in self.client.scan_iter(match=pattern, count=200)]
            if not keys:
                return []
            # Keys that expire between SCAN and MGET come back as None
            raws = await self.client.mget(keys)
            return [
                (k.split(":", 1)[1], json.loads(raw))
                for k, raw in zip(keys, raws)
                if raw is not None
            ]

        records = await self._call("scan", _collect())
        records.sort(key=lambda kv: timestamp_of(kv[1]), reverse=True)
        return records

    async def scan_all(self, namespace: str) -> ScanResult:
        return await self._scan(f"{_escape_glob(namespace)}:*")

    async def scan_by_prefix(self, namespace: str, prefix: str) -> ScanResult:
        return await self._scan(f"{_escape_glob(namespace)}:{_escape_glob(prefix)}:*")

    async def increment_field(
        self, namespace: str, key: str, field_name: str, amount: int = 1
    ) -> Optional[int]:
        """Optimistic WATCH/MULTI increment; concurrent writers retry instead of losing updates"""
        redis_key = self._key(namespace, key)

        async def _increment():
            async with self.client.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(redis_key)
                        raw = await pipe.get(redis_key)
                        if raw is None:
                            return None
                        record = json.loads(raw)
                        record[field_name] = int(record.get(field_name) or 0) + amount
                        pipe.multi()
                        pipe.set(redis_key, json.dumps(record), keepttl=True)
                        await pipe.execute()
                        return record[field_name]
                    except WatchError:
                        logger.debug(f"Increment raced on {redis_key}, retrying")
                        continue

        return await self._call("increment", _increment())

    async def append(self, namespace: str, key: str, item: Any, ttl_seconds: int) -> None:
        list_key = self._list_key(namespace, key)

        async def _append():
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.rpush(list_key, json.dumps(item))
                pipe.expire(list_key, ttl_seconds)
                await pipe.execute()

        await self._call("append", _append())

    async def read_list(self, namespace: str, key: str, limit: Optional[int] = None) -> List[Any]:
        start = -limit if limit else 0
        raws = await self._call("read_list", self.client.lrange(self._list_key(namespace, key), start, -1))
        return [json.loads(raw) for raw in raws]

    async def delete(self, namespace: str, key: str) -> None:
        await self._call(
            "delete",
            self.client.delete(self._key(namespace, key), self._list_key(namespace, key))
        )

    async def delete_prefix(self, namespace: str, prefix: str) -> int:
        pattern = f"{_escape_glob(namespace)}:{_escape_glob(prefix)}:*"

        async def _purge():
            keys = [k async for k in self.client.scan_iter(match=pattern, count=200)]
            if not keys:
                return 0
            return await self.client.delete(*keys)

        return await self._call("delete_prefix", _purge())

    async def ttl(self, namespace: str, key: str) -> Optional[int]:
        remaining = await self._call("ttl", self.client.ttl(self._key(namespace, key)))
        if remaining is None or remaining < 0:
            remaining = await self._call("ttl", self.client.ttl(self._list_key(namespace, key)))
        # -2 means missing, -1 means no expiry (never written by this store)
        if remaining is None or remaining < 0:
            return None
        return remaining

    async def ping(self) -> bool:
        return bool(await self._call("ping", self.client.ping()))

    async def close(self) -> None:
        await self.client.aclose()
