"""헬스 체크 엔드포인트"""
from fastapi import APIRouter, Depends
from datetime import datetime

from tubescout.schemas import HealthResponse
from tubescout.api.routes.analysis_routes import get_cache_adapter
from tubescout.engine import CacheAdapter
from tubescout.core.logging import logger
from tubescout import __version__

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(cache: CacheAdapter = Depends(get_cache_adapter)):
    """
    헬스 체크 엔드포인트

    - 서버 상태
    - 캐시 백엔드 연결 상태 (Redis 장애 시 degraded)
    """
    cache_ok = cache.health_check()
    if not cache_ok:
        logger.warning(f"Cache backend unhealthy: backend={cache.backend}")

    return HealthResponse(
        status="ok" if cache_ok else "degraded",
        cache_backend=cache.backend,
        timestamp=datetime.now(),
        version=__version__,
    )


@router.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "service": "YouTube 채널 분석 및 영상 아이디어 생성 서비스",
        "version": __version__,
        "docs": "/docs",
    }
