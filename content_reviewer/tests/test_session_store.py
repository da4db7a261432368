from __future__ import annotations

from typing import Dict

import redis

from content_reviewer.config.ini_config import AppSettings
from content_reviewer.web.session_store import (
    MemorySessionStore,
    RedisSessionStore,
    create_session_store,
)


# -----------------------------
# Test doubles
# -----------------------------
class FakeRedis:
    def __init__(self, ping_error: Exception = None):
        self.ping_error = ping_error
        self.data: Dict[str, bytes] = {}
        self.ttls: Dict[str, int] = {}

    def ping(self):
        if self.ping_error:
            raise self.ping_error
        return True

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value.encode("utf-8")
        self.ttls[key] = ttl

    def delete(self, key):
        self.data.pop(key, None)


class FakeClock:
    def __init__(self):
        self.t = 1000.0

    def __call__(self) -> float:
        return self.t


def test_memory_store_expires_entries():
    clock = FakeClock()
    store = MemorySessionStore(clock=clock)
    store.set("sid", {"a": 1}, ttl_seconds=60)

    assert store.get("sid") == {"a": 1}
    clock.t += 61
    assert store.get("sid") is None


def test_redis_store_round_trip_with_expiry():
    client = FakeRedis()
    store = RedisSessionStore(client)

    store.set("sid", {"_flashes": [["error", "boom"]]}, ttl_seconds=300)

    assert store.get("sid") == {"_flashes": [["error", "boom"]]}
    assert list(client.ttls.values()) == [300]
    store.delete("sid")
    assert store.get("sid") is None


def test_redis_store_discards_garbage():
    client = FakeRedis()
    client.data["content-reviewer:session:sid"] = b"not json"
    assert RedisSessionStore(client).get("sid") is None


def test_factory_picks_redis_when_reachable():
    client = FakeRedis()
    store = create_session_store(AppSettings(session_cache_engine="redis"), redis_factory=lambda url: client)
    assert isinstance(store, RedisSessionStore)


def test_factory_falls_back_to_memory(caplog):
    broken = FakeRedis(ping_error=redis.ConnectionError("refused"))

    store = create_session_store(AppSettings(session_cache_engine="redis"), redis_factory=lambda url: broken)

    assert isinstance(store, MemorySessionStore)
    assert "falling back to in-memory" in caplog.text


def test_factory_memory_engine():
    assert isinstance(create_session_store(AppSettings()), MemorySessionStore)


def test_cookie_carries_only_the_session_id(client):
    client.post("/", data={"textContent": "short"})

    cookie = client.get_cookie("session")
    assert cookie is not None
    assert "short" not in cookie.value
    assert len(cookie.value) == 32


def test_memory_store_sweeps_abandoned_sessions_on_write():
    clock = FakeClock()
    store = MemorySessionStore(clock=clock)
    store.set("abandoned-1", {"a": 1}, ttl_seconds=60)
    store.set("abandoned-2", {"a": 2}, ttl_seconds=60)
    clock.t += 61

    store.set("fresh", {"b": 1}, ttl_seconds=60)

    assert len(store) == 1
    assert store.get("fresh") == {"b": 1}
