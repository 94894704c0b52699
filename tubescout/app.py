"""FastAPI 앱 팩토리"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from tubescout.core.config import settings
from tubescout.core.logging import logger
from tubescout.api import (
    analysis_router,
    get_cache_service,
    get_rate_limiter,
    health_router,
    reset_orchestrator,
)
from tubescout.providers import shutdown_shared_http_client
from tubescout.scheduler import SweepScheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기"""
    logger.info("Starting application...")
    sweeper = SweepScheduler(get_cache_service(), get_rate_limiter(), settings)
    sweeper.start()
    app.state.sweeper = sweeper
    logger.info("Application started")
    yield
    logger.info("Shutting down application...")
    sweeper.shutdown()
    try:
        await shutdown_shared_http_client()
    except Exception as e:
        logger.warning(f"HTTP client shutdown failed: {type(e).__name__}: {e}")
    finally:
        reset_orchestrator()


def create_app() -> FastAPI:
    """
    FastAPI 앱 생성 (Factory Pattern)

    Returns:
        FastAPI 앱 인스턴스
    """
    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 라우터 등록
    app.include_router(health_router)
    app.include_router(analysis_router)

    return app

# 앱 인스턴스 생성 (uvicorn이 로드할 수 있도록)
app = create_app()
