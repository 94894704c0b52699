"""만료 항목 정리 스케줄러

인메모리 캐시와 rate limiter 윈도우는 조회 시점에만 만료가 확인되므로,
다시 조회되지 않는 키가 쌓이지 않도록 주기적으로 정리합니다.
"""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tubescout.core.config import Settings, settings as default_settings
from tubescout.core.logging import logger
from tubescout.services.impl.rate_limiter import RateLimiter


class SweepScheduler:
    """캐시 sweep + rate limiter cleanup 주기 실행

    Usage:
        sweeper = SweepScheduler(cache_service, rate_limiter)
        sweeper.start()      # 이벤트 루프 안에서 호출
        ...
        sweeper.shutdown()
    """

    CACHE_JOB_ID = "cache_sweep"
    RATE_LIMIT_JOB_ID = "rate_limit_cleanup"

    def __init__(self, cache_service, rate_limiter: RateLimiter, config: Optional[Settings] = None):
        """
        Args:
            cache_service: sweep()을 가진 캐시 서비스
            rate_limiter: RateLimiter
            config: 설정 (기본: 전역 settings)
        """
        self.cache_service = cache_service
        self.rate_limiter = rate_limiter
        self.config = config or default_settings
        self.scheduler: Optional[AsyncIOScheduler] = None

    async def sweep_cache(self) -> int:
        """만료 캐시 항목 제거 (제거 수 반환, 예외 없음)

        코루틴 잡이므로 AsyncIOScheduler가 이벤트 루프 스레드에서 실행합니다.
        """
        try:
            removed = self.cache_service.sweep()
        except Exception as e:
            logger.warning(f"[Scheduler] Cache sweep failed: {type(e).__name__}: {e}")
            return 0
        if removed:
            logger.debug(f"[Scheduler] Cache sweep removed {removed} entries")
        return removed

    async def cleanup_rate_limits(self) -> int:
        """만료 rate limit 윈도우 제거 (제거 수 반환, 예외 없음)"""
        try:
            return self.rate_limiter.cleanup()
        except Exception as e:
            logger.warning(f"[Scheduler] Rate limit cleanup failed: {type(e).__name__}: {e}")
            return 0

    def start(self) -> AsyncIOScheduler:
        if self.scheduler is not None and self.scheduler.running:
            return self.scheduler

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            self.sweep_cache,
            trigger=IntervalTrigger(seconds=self.config.cache_sweep_interval_s),
            id=self.CACHE_JOB_ID,
            name="Cache expiry sweep",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        scheduler.add_job(
            self.cleanup_rate_limits,
            trigger=IntervalTrigger(seconds=self.config.rate_limit_sweep_interval_s),
            id=self.RATE_LIMIT_JOB_ID,
            name="Rate limit window cleanup",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        scheduler.start()
        self.scheduler = scheduler
        logger.info(
            f"[Scheduler] Sweeps scheduled: cache every {self.config.cache_sweep_interval_s}s, "
            f"rate limits every {self.config.rate_limit_sweep_interval_s}s"
        )
        return scheduler

    def shutdown(self) -> None:
        if self.scheduler is None:
            return
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None
        logger.info("[Scheduler] Sweeps stopped")
