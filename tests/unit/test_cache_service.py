"""캐시 서비스 유닛 테스트 (Redis는 Mock 사용)"""
import json
from unittest.mock import MagicMock, patch

import pytest

from tubescout.core.exceptions import (
    CacheConnectionException,
    CacheException,
    CacheSerializationException,
)
from tubescout.services.impl.cache_service import (
    MemoryCacheService,
    RedisCacheService,
    create_cache_service,
)
from tests.conftest import FakeClock, HookedDict


class TestMemoryCacheService:
    """인메모리 TTL 캐시"""

    def test_set_and_get(self, memory_cache: MemoryCacheService):
        assert memory_cache.set("channel:videos:UC1", {"videos": []}, 3600) is True
        assert memory_cache.get("channel:videos:UC1") == {"videos": []}

    def test_get_missing_key(self, memory_cache: MemoryCacheService):
        assert memory_cache.get("missing") is None

    def test_expired_entry_is_miss_and_evicted(self, memory_cache: MemoryCacheService, clock: FakeClock):
        memory_cache.set("k", "v", 10)

        clock.advance(10)

        assert memory_cache.get("k") is None
        assert len(memory_cache) == 0

    def test_entry_alive_before_expiry(self, memory_cache: MemoryCacheService, clock: FakeClock):
        memory_cache.set("k", "v", 10)
        clock.advance(9.9)
        assert memory_cache.get("k") == "v"

    def test_set_overwrites_and_resets_ttl(self, memory_cache: MemoryCacheService, clock: FakeClock):
        memory_cache.set("k", "old", 10)
        clock.advance(8)
        memory_cache.set("k", "new", 10)
        clock.advance(8)

        assert memory_cache.get("k") == "new"

    def test_non_positive_ttl_removes_key(self, memory_cache: MemoryCacheService):
        memory_cache.set("k", "v", 10)

        assert memory_cache.set("k", "v2", 0) is False
        assert memory_cache.get("k") is None

    def test_delete_and_clear(self, memory_cache: MemoryCacheService):
        memory_cache.set("a", 1, 10)
        memory_cache.set("b", 2, 10)

        assert memory_cache.delete("a") is True
        assert memory_cache.delete("a") is False
        memory_cache.clear()
        assert len(memory_cache) == 0

    def test_sweep_removes_only_expired(self, memory_cache: MemoryCacheService, clock: FakeClock):
        memory_cache.set("short", 1, 5)
        memory_cache.set("long", 2, 500)
        clock.advance(6)

        assert memory_cache.sweep() == 1
        assert len(memory_cache) == 1
        assert memory_cache.get("long") == 2

    def test_sweep_keeps_entry_rewritten_after_snapshot(self, memory_cache: MemoryCacheService, clock: FakeClock):
        memory_cache.set("channel:videos:UC1", {"videos": []}, 5)
        clock.advance(5)

        entries = HookedDict(memory_cache._entries)
        entries.after_items = lambda: memory_cache.set("channel:videos:UC1", {"videos": ["fresh"]}, 3600)
        memory_cache._entries = entries

        assert memory_cache.sweep() == 0
        assert memory_cache.get("channel:videos:UC1") == {"videos": ["fresh"]}

    def test_health_check(self, memory_cache: MemoryCacheService):
        assert memory_cache.health_check() is True
        assert memory_cache.backend == "memory"


class TestRedisCacheService:
    """Redis 변형 (클라이언트 Mock)"""

    def test_get_deserializes_json(self):
        client = MagicMock()
        client.get.return_value = json.dumps({"topics": ["a"], "summary": "s"})
        service = RedisCacheService(redis_client=client)

        assert service.get("channel:topics:abc") == {"topics": ["a"], "summary": "s"}

    def test_get_miss(self):
        client = MagicMock()
        client.get.return_value = None
        assert RedisCacheService(redis_client=client).get("missing") is None

    def test_get_invalid_json_raises_serialization_error(self):
        client = MagicMock()
        client.get.return_value = "{not json"
        service = RedisCacheService(redis_client=client)

        with pytest.raises(CacheSerializationException):
            service.get("k")

    def test_get_connection_error(self):
        client = MagicMock()
        client.get.side_effect = Exception("Connection reset")
        service = RedisCacheService(redis_client=client)

        with pytest.raises(CacheConnectionException):
            service.get("k")

    def test_set_uses_setex(self):
        client = MagicMock()
        service = RedisCacheService(redis_client=client)

        assert service.set("k", {"a": 1}, 3600) is True
        client.setex.assert_called_once_with("k", 3600, json.dumps({"a": 1}, ensure_ascii=False))

    def test_set_unserializable_value(self):
        service = RedisCacheService(redis_client=MagicMock())

        with pytest.raises(CacheSerializationException):
            service.set("k", object(), 10)

    def test_set_non_positive_ttl_skips_write(self):
        client = MagicMock()
        assert RedisCacheService(redis_client=client).set("k", 1, 0) is False
        client.setex.assert_not_called()

    def test_health_check_ping_failure(self):
        client = MagicMock()
        client.ping.side_effect = Exception("down")
        assert RedisCacheService(redis_client=client).health_check() is False

    @patch("tubescout.services.impl.cache_service.Redis")
    def test_init_failure(self, mock_redis):
        mock_redis.from_url.return_value.ping.side_effect = Exception("Connection failed")

        with pytest.raises(CacheException):
            RedisCacheService(redis_url="redis://localhost:6379/0")


class TestCreateCacheService:
    def test_no_url_uses_memory(self):
        assert isinstance(create_cache_service(""), MemoryCacheService)

    @patch("tubescout.services.impl.cache_service.Redis")
    def test_redis_available(self, mock_redis):
        mock_redis.from_url.return_value.ping.return_value = True

        service = create_cache_service("redis://localhost:6379/0")

        assert isinstance(service, RedisCacheService)

    @patch("tubescout.services.impl.cache_service.Redis")
    def test_redis_unavailable_falls_back_to_memory(self, mock_redis):
        mock_redis.from_url.return_value.ping.side_effect = Exception("refused")

        service = create_cache_service("redis://localhost:6379/0")

        assert isinstance(service, MemoryCacheService)
