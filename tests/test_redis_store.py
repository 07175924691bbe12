# FILE: tests/test_redis_store.py
"""Redis store: failure mapping, key layout and store semantics (no server needed)"""
import asyncio
import json

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from backend.errors import StoreUnavailable
from backend.services.redis_store import RedisStore, _escape_glob


class DownClient:
    """Every command fails as if the server were unreachable"""

    async def get(self, key):
        raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        raise RedisConnectionError("connection refused")

    async def ping(self):
        raise RedisConnectionError("connection refused")


class SlowClient:
    async def get(self, key):
        await asyncio.sleep(5)


class RecordingClient:
    """Keeps SET calls and serves them back on GET"""

    def __init__(self):
        self.data = {}
        self.expiry = {}

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex

    async def get(self, key):
        return self.data.get(key)


@pytest.mark.asyncio
async def test_connection_error_raises_store_unavailable():
    store = RedisStore(client=DownClient())

    with pytest.raises(StoreUnavailable):
        await store.get("post", "a")
    with pytest.raises(StoreUnavailable):
        await store.put("post", "a", {"id": "a"}, 60)


@pytest.mark.asyncio
async def test_timeout_raises_store_unavailable():
    store = RedisStore(client=SlowClient(), timeout_seconds=0.05)

    with pytest.raises(StoreUnavailable):
        await store.get("post", "a")


@pytest.mark.asyncio
async def test_put_uses_namespaced_key_and_expiry():
    client = RecordingClient()
    store = RedisStore(client=client)

    await store.put("journal", "s1:e1", {"id": "e1"}, 86400)

    assert json.loads(client.data["journal:s1:e1"]) == {"id": "e1"}
    assert client.expiry["journal:s1:e1"] == 86400
    assert await store.get("journal", "s1:e1") == {"id": "e1"}


def test_glob_escaping():
    assert _escape_glob("a*b?[c]") == "a\\*b\\?\\[c\\]"


@pytest.fixture
def fake_redis():
    return fakeredis.FakeAsyncRedis(decode_responses=True)


@pytest.fixture
def redis_store(fake_redis):
    return RedisStore(client=fake_redis)


def stamped(record_id, minute):
    return {"id": record_id, "timestamp": f"2026-03-02T09:{minute:02d}:00+00:00"}


@pytest.mark.asyncio
async def test_scan_all_is_newest_first(redis_store):
    await redis_store.put("post", "b", stamped("b", 5), 60)
    await redis_store.put("post", "a", stamped("a", 1), 60)
    await redis_store.put("post", "c", stamped("c", 9), 60)
    await redis_store.put("journal", "s1:x", stamped("x", 30), 60)

    records = await redis_store.scan_all("post")

    assert [key for key, _ in records] == ["c", "b", "a"]
    assert records[0][1] == stamped("c", 9)


@pytest.mark.asyncio
async def test_scan_by_prefix_stays_inside_one_session(redis_store):
    await redis_store.put("journal", "s1:a", stamped("a", 1), 60)
    await redis_store.put("journal", "s10:b", stamped("b", 2), 60)
    await redis_store.put("journal", "s1:c", stamped("c", 3), 60)

    records = await redis_store.scan_by_prefix("journal", "s1")

    assert [key for key, _ in records] == ["s1:c", "s1:a"]


class VanishingClient:
    """Drops one key between SCAN and MGET, as an expiry would"""

    def __init__(self, inner, vanish):
        self.inner = inner
        self.vanish = vanish

    def scan_iter(self, **kwargs):
        return self.inner.scan_iter(**kwargs)

    async def mget(self, keys):
        raws = await self.inner.mget(keys)
        return [None if key == self.vanish else raw for key, raw in zip(keys, raws)]


@pytest.mark.asyncio
async def test_scan_skips_keys_expiring_mid_scan(fake_redis, redis_store):
    await redis_store.put("post", "a", stamped("a", 1), 60)
    await redis_store.put("post", "b", stamped("b", 2), 60)

    store = RedisStore(client=VanishingClient(fake_redis, "post:a"))

    assert await store.scan_all("post") == [("b", stamped("b", 2))]


@pytest.mark.asyncio
async def test_increment_keeps_ttl(fake_redis, redis_store):
    await redis_store.put("post", "p", {"id": "p", "supportCount": 0}, 100)

    assert await redis_store.increment_field("post", "p", "supportCount") == 1
    assert await redis_store.increment_field("post", "p", "supportCount", 2) == 3

    remaining = await fake_redis.ttl("post:p")
    assert 0 < remaining <= 100
    assert (await redis_store.get("post", "p"))["supportCount"] == 3


@pytest.mark.asyncio
async def test_increment_missing_record_is_none(redis_store):
    assert await redis_store.increment_field("post", "gone", "supportCount") is None


@pytest.mark.asyncio
async def test_concurrent_increments_are_not_lost(fake_redis, redis_store):
    await redis_store.put("post", "p", {"id": "p", "supportCount": 0}, 100)

    await asyncio.gather(*[
        redis_store.increment_field("post", "p", "supportCount") for _ in range(20)
    ])

    assert (await redis_store.get("post", "p"))["supportCount"] == 20
    assert await fake_redis.ttl("post:p") > 0


@pytest.mark.asyncio
async def test_read_list_limit_keeps_most_recent(redis_store):
    for i in range(5):
        await redis_store.append("chat", "s1", {"n": i}, 60)

    assert await redis_store.read_list("chat", "s1", 2) == [{"n": 3}, {"n": 4}]
    assert len(await redis_store.read_list("chat", "s1")) == 5


@pytest.mark.asyncio
async def test_ttl_falls_back_to_list_key(redis_store):
    await redis_store.append("chat", "s1", {"n": 0}, 60)

    remaining = await redis_store.ttl("chat", "s1")

    assert 0 < remaining <= 60
    assert await redis_store.ttl("chat", "nobody") is None


@pytest.mark.asyncio
async def test_delete_prefix_removes_one_session(redis_store):
    await redis_store.put("mood", "s1:a", stamped("a", 1), 60)
    await redis_store.put("mood", "s1:b", stamped("b", 2), 60)
    await redis_store.put("mood", "s10:c", stamped("c", 3), 60)

    assert await redis_store.delete_prefix("mood", "s1") == 2
    assert [key for key, _ in await redis_store.scan_all("mood")] == ["s10:c"]


@pytest.mark.asyncio
async def test_delete_removes_value_and_list(redis_store):
    await redis_store.put("chat", "s1", {"id": "x"}, 60)
    await redis_store.append("chat", "s1", {"n": 0}, 60)

    await redis_store.delete("chat", "s1")

    assert await redis_store.get("chat", "s1") is None
    assert await redis_store.read_list("chat", "s1") == []
