"""공유 서비스(캐시/토큰/Rate limit) - export only."""

from .impl import (
    MemoryCacheService,
    RateLimiter,
    RateLimitResult,
    RedditTokenCache,
    RedisCacheService,
    create_cache_service,
)

__all__ = [
    "MemoryCacheService",
    "RateLimiter",
    "RateLimitResult",
    "RedditTokenCache",
    "RedisCacheService",
    "create_cache_service",
]
