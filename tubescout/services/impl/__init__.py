"""Services implementation package."""

from .cache_service import MemoryCacheService, RedisCacheService, create_cache_service
from .rate_limiter import RateLimiter, RateLimitResult
from .token_cache import RedditTokenCache

__all__ = [
    "MemoryCacheService",
    "RedisCacheService",
    "create_cache_service",
    "RateLimiter",
    "RateLimitResult",
    "RedditTokenCache",
]
