"""API routes package."""

from .analysis_routes import (
    get_cache_adapter,
    get_cache_service,
    get_orchestrator,
    get_rate_limiter,
    reset_orchestrator,
    router as analysis_router,
)
from .health_routes import router as health_router

__all__ = [
    "analysis_router",
    "health_router",
    "get_cache_adapter",
    "get_cache_service",
    "get_orchestrator",
    "get_rate_limiter",
    "reset_orchestrator",
]
