"""Cache Adapter - 캐시 실패를 캐시 미스로 흡수하는 비동기 어댑터"""

from typing import Any, Optional, Union

from tubescout.core.exceptions import CacheException
from tubescout.core.logging import logger
from tubescout.services.impl.cache_service import MemoryCacheService, RedisCacheService


CacheBackend = Union[MemoryCacheService, RedisCacheService]


class CacheAdapter:
    """Cache 서비스 어댑터

    제공자 어댑터와 토큰 캐시는 이 어댑터만 사용합니다.
    캐시는 정합성 의존성이 아니라 성능 최적화이므로
    모든 예외는 로깅 후 None(미스) 또는 no-op으로 바뀝니다.
    """

    def __init__(self, cache_service: Optional[CacheBackend] = None):
        """
        Args:
            cache_service: 캐시 서비스 (없으면 인메모리 캐시 생성)
        """
        if cache_service is None:
            self.cache_service: CacheBackend = MemoryCacheService()
        else:
            self.cache_service = cache_service

    @property
    def backend(self) -> str:
        return getattr(self.cache_service, "backend", "unknown")

    async def get(self, key: str) -> Optional[Any]:
        """캐시 조회

        Args:
            key: 캐시 키

        Returns:
            캐시된 값 또는 None

        Raises:
            None: 모든 예외는 로깅되고 None 반환
        """
        if not key or not isinstance(key, str):
            logger.warning(f"Invalid key for cache.get: {key!r}")
            return None

        try:
            return self.cache_service.get(key)
        except CacheException as e:
            logger.warning(f"Cache get failed: {e}")
            return None
        except Exception as e:
            logger.warning(f"Cache get failed: {type(e).__name__}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """캐시 저장

        Args:
            key: 캐시 키
            value: 저장할 값 (JSON 직렬화 가능해야 Redis에서도 동작)
            ttl: TTL (초)

        Raises:
            None: 모든 예외는 로깅됨
        """
        if not key or not isinstance(key, str):
            logger.warning(f"Invalid key for cache.set: {key!r}")
            return

        try:
            self.cache_service.set(key, value, ttl)
        except CacheException as e:
            logger.warning(f"Cache set failed: {e}")
        except Exception as e:
            logger.warning(f"Cache set failed: {type(e).__name__}: {e}")

    async def delete(self, key: str) -> None:
        """캐시 삭제 (실패 무시)"""
        try:
            self.cache_service.delete(key)
        except Exception as e:
            logger.warning(f"Cache delete failed: {type(e).__name__}: {e}")

    def health_check(self) -> bool:
        try:
            return self.cache_service.health_check()
        except Exception:
            return False
