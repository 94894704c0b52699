"""API 엔드포인트 패키지 - export only."""

from .routes import (
    analysis_router,
    get_cache_adapter,
    get_cache_service,
    get_orchestrator,
    get_rate_limiter,
    health_router,
    reset_orchestrator,
)

__all__ = [
    "analysis_router",
    "health_router",
    "get_cache_adapter",
    "get_cache_service",
    "get_orchestrator",
    "get_rate_limiter",
    "reset_orchestrator",
]
