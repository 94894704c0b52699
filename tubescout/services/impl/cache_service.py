"""캐시 서비스 - 캐싱 로직만 담당

- MemoryCacheService: 프로세스 내 dict + 항목별 만료 시각 (기본)
- RedisCacheService: 동일 인터페이스의 외부 저장소 변형 (REDIS_URL 설정 시)

두 구현 모두 TTL 외의 축출 정책(용량 제한)은 없습니다.
키 개수는 실제로 조회된 채널 수에 비례합니다.
"""
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional
from redis import Redis

from tubescout.core.config import settings
from tubescout.core.logging import logger
from tubescout.core.exceptions import (
    CacheConnectionException,
    CacheSerializationException,
)


@dataclass
class CacheEntry:
    """캐시 항목 (값 + 절대 만료 시각)"""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class MemoryCacheService:
    """인메모리 TTL 캐시

    - get: 만료된 항목은 없는 것으로 취급하고 즉시 제거 (lazy eviction)
    - sweep: 다시 읽히지 않는 키를 주기적으로 정리 (scheduler에서 호출)
    """

    backend = "memory"

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Args:
            clock: 현재 시각 함수 (테스트 주입용, 기본 time.monotonic)
        """
        self._clock = clock or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        """
        캐시 조회

        Args:
            key: 캐시 키

        Returns:
            저장된 값 또는 None
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None

        if entry.is_expired(self._clock()):
            self._entries.pop(key, None)
            logger.debug(f"Cache expired for key: {key}")
            return None

        logger.debug(f"Cache hit for key: {key}")
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """
        캐시 저장 (항상 덮어쓰며 TTL도 재설정)

        Args:
            key: 캐시 키
            value: 저장할 값
            ttl_seconds: TTL (초)

        Returns:
            성공 여부
        """
        if ttl_seconds <= 0:
            # TTL이 0 이하이면 즉시 만료와 같음
            self._entries.pop(key, None)
            return False
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)
        logger.debug(f"Cache set for key: {key}, TTL: {ttl_seconds}s")
        return True

    def delete(self, key: str) -> bool:
        """캐시 삭제"""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """전체 캐시 삭제"""
        self._entries.clear()

    def sweep(self) -> int:
        """만료 항목 일괄 정리

        Returns:
            제거된 항목 수
        """
        now = self._clock()
        expired = [key for key, entry in list(self._entries.items()) if entry.is_expired(now)]
        removed = 0
        for key in expired:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(now):
                self._entries.pop(key, None)
                removed += 1
        if removed:
            logger.debug(f"Cache sweep removed {removed} entries")
        return removed

    def __len__(self) -> int:
        return len(self._entries)

    def health_check(self) -> bool:
        return True


class RedisCacheService:
    """Redis 캐시 관리 서비스 (외부 저장소 변형)

    값은 JSON 문자열로 저장되며 만료는 Redis SETEX에 맡깁니다.
    실패는 CacheConnectionException/CacheSerializationException으로 올리고,
    CacheAdapter가 이를 캐시 미스로 흡수합니다.
    """

    backend = "redis"

    def __init__(self, redis_url: Optional[str] = None, redis_client: Optional[Redis] = None):
        """Redis 클라이언트 초기화

        Args:
            redis_url: Redis URL (없으면 settings.redis_url)
            redis_client: 이미 생성된 클라이언트 (테스트 주입용)

        Raises:
            CacheConnectionException: 연결 실패
        """
        if redis_client is not None:
            self.redis_client = redis_client
            return

        try:
            self.redis_client = Redis.from_url(
                redis_url or settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5
            )
            # 연결 테스트
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise CacheConnectionException(
                reason=str(e),
                details={"operation": "connect"},
            )

    def get(self, key: str) -> Optional[Any]:
        """
        캐시 조회

        Args:
            key: 캐시 키

        Returns:
            역직렬화된 값 또는 None

        Raises:
            CacheConnectionException: Redis 오류
            CacheSerializationException: JSON 형식 오류
        """
        try:
            cached_data = self.redis_client.get(key)
        except Exception as e:
            logger.error(f"Cache read error: {e}")
            raise CacheConnectionException(
                reason=str(e),
                details={"operation": "get", "key": key},
            )

        if cached_data is None:
            logger.debug(f"Cache miss for key: {key}")
            return None

        try:
            logger.debug(f"Cache hit for key: {key}")
            return json.loads(cached_data)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Failed to deserialize cache: {e}")
            raise CacheSerializationException(
                operation="deserialize",
                reason=str(e),
                details={"key": key},
            )

    def set(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """
        캐시 저장

        Args:
            key: 캐시 키
            value: JSON 직렬화 가능한 값
            ttl_seconds: TTL (초)

        Returns:
            성공 여부
        """
        if ttl_seconds <= 0:
            return False

        try:
            cached_value = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize cache data: {e}")
            raise CacheSerializationException(
                operation="serialize",
                reason=str(e),
                details={"key": key},
            )

        try:
            self.redis_client.setex(key, ttl_seconds, cached_value)
        except Exception as e:
            logger.error(f"Cache write error: {e}")
            raise CacheConnectionException(
                reason=str(e),
                details={"operation": "set", "key": key},
            )
        logger.debug(f"Cache set for key: {key}, TTL: {ttl_seconds}s")
        return True

    def delete(self, key: str) -> bool:
        """캐시 삭제"""
        try:
            result = self.redis_client.delete(key)
            return result > 0
        except Exception as e:
            logger.error(f"Cache delete error: {e}")
            raise CacheConnectionException(
                reason=str(e),
                details={"operation": "delete", "key": key},
            )

    def clear(self) -> None:
        """현재 DB의 키 전체 삭제"""
        try:
            self.redis_client.flushdb()
        except Exception as e:
            logger.error(f"Cache clear error: {e}")
            raise CacheConnectionException(
                reason=str(e),
                details={"operation": "clear"},
            )

    def sweep(self) -> int:
        """Redis는 자체적으로 만료를 처리하므로 정리할 항목이 없음"""
        return 0

    def health_check(self) -> bool:
        """Redis 연결 상태 확인"""
        try:
            self.redis_client.ping()
            return True
        except Exception:
            return False


def create_cache_service(redis_url: Optional[str] = None):
    """설정에 따라 캐시 서비스 생성

    REDIS_URL이 있고 연결되면 Redis, 아니면 인메모리 캐시를 사용합니다.
    캐시는 성능 최적화일 뿐이므로 Redis 연결 실패로 앱이 죽지 않습니다.
    """
    url = redis_url if redis_url is not None else settings.redis_url
    if url:
        try:
            return RedisCacheService(redis_url=url)
        except CacheConnectionException as e:
            logger.warning(f"Redis unavailable, falling back to memory cache: {e.error_code}")
    return MemoryCacheService()
