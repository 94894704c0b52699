"""Analysis Routes (Engine Layer)

HTTP Layer는 요청을 AnalysisOrchestrator에 위임하고,
오케스트레이터가 채널에 넣는 이벤트를 SSE 프레임으로 흘려보내기만 합니다.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from tubescout.core.config import settings
from tubescout.core.logging import logger
from tubescout.core.security import get_client_identifier
from tubescout.engine import AnalysisOrchestrator, CacheAdapter, EventChannel
from tubescout.providers import (
    CompletionClient,
    ForumSearchClient,
    IdeaGenerator,
    NewsClient,
    TopicAnalyzer,
    YouTubeClient,
    get_shared_http_client,
)
from tubescout.schemas import AnalysisRequest
from tubescout.services.impl.cache_service import create_cache_service
from tubescout.services.impl.rate_limiter import RateLimiter
from tubescout.services.impl.token_cache import RedditTokenCache

router = APIRouter(prefix="/api", tags=["analysis"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

# 싱글톤 서비스
_cache_service = None
_cache_adapter: Optional[CacheAdapter] = None
_rate_limiter: Optional[RateLimiter] = None
_orchestrator: Optional[AnalysisOrchestrator] = None

# 실행 중인 파이프라인 태스크 (완료 시 제거)
_running_tasks: set = set()


def get_cache_service():
    """캐시 서비스 싱글톤 (Redis 또는 인메모리)"""
    global _cache_service
    if _cache_service is None:
        _cache_service = create_cache_service(settings.redis_url)
    return _cache_service


def get_cache_adapter() -> CacheAdapter:
    """CacheAdapter 싱글톤"""
    global _cache_adapter
    if _cache_adapter is None:
        _cache_adapter = CacheAdapter(get_cache_service())
    return _cache_adapter


def get_rate_limiter() -> RateLimiter:
    """RateLimiter 싱글톤 (프로세스 단위)"""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


async def get_orchestrator(
    cache: CacheAdapter = Depends(get_cache_adapter),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
) -> AnalysisOrchestrator:
    """AnalysisOrchestrator 싱글톤

    Engine Layer의 진입점을 제공합니다.
    """
    global _orchestrator
    if _orchestrator is None:
        http_client = await get_shared_http_client().get_client()
        completion = CompletionClient(settings)

        _orchestrator = AnalysisOrchestrator(
            youtube=YouTubeClient(http_client, cache, settings),
            topic_analyzer=TopicAnalyzer(completion, cache, settings),
            idea_generator=IdeaGenerator(completion),
            news=NewsClient(http_client, settings),
            forum=ForumSearchClient(http_client, RedditTokenCache(cache, http_client, settings), settings),
            rate_limiter=rate_limiter,
            config=settings,
        )

    return _orchestrator


def reset_orchestrator() -> None:
    """오케스트레이터 싱글톤 폐기

    어댑터가 공유 HTTP 클라이언트를 붙잡고 있으므로 클라이언트를 닫을 때 함께 호출합니다.
    다음 요청에서 새 클라이언트로 다시 만들어집니다.
    """
    global _orchestrator
    _orchestrator = None


@router.post("/analyze-stream")
async def analyze_stream(
    request: Request,
    body: Optional[AnalysisRequest] = None,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """채널 분석 스트리밍 API (Server-Sent Events)

    Flow:
        1. 호출자 식별 (X-Forwarded-For → X-Real-IP → peer)
        2. 파이프라인을 백그라운드 태스크로 시작
        3. 채널의 이벤트를 `data: {json}` 프레임으로 전송
        4. 종료 이벤트 후 채널이 닫히면 스트림 종료

    클라이언트가 먼저 끊으면 채널을 닫고, 이후 이벤트는 버려집니다.
    """
    analysis_request = body or AnalysisRequest()
    client_id = get_client_identifier(request)
    logger.info(f"[API] Analyze stream request: source_ref (length: {len(analysis_request.source_ref)})")

    channel = EventChannel()
    task = asyncio.create_task(orchestrator.run(analysis_request, client_id, channel))
    _running_tasks.add(task)
    task.add_done_callback(_running_tasks.discard)

    async def event_generator():
        try:
            async for event in channel:
                yield event.to_sse()
        finally:
            if not channel.closed:
                logger.info("[API] Client disconnected before run finished")
            channel.close()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
