"""고정 윈도우 Rate Limiter (인메모리, 프로세스 단위)

슬라이딩 윈도우가 아니므로 윈도우 경계에서 최대 2×max 요청이 통과할 수 있습니다.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from tubescout.core.logging import logger


@dataclass
class RateWindow:
    """식별자별 고정 윈도우 상태"""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    """check() 결과

    Attributes:
        allowed: 요청 허용 여부
        remaining: 현재 윈도우에서 남은 요청 수
        reset_at: 윈도우 리셋 시각 (epoch 초)
    """

    allowed: bool
    remaining: int
    reset_at: float


class RateLimiter:
    """식별자(IP, 채널 등) 단위 고정 윈도우 카운터

    Usage:
        limiter = RateLimiter()
        result = limiter.check("ip:1.2.3.4", max_requests=10, window_seconds=60)
        if not result.allowed:
            ...

    윈도우 생성/증가는 await 없이 한 번에 끝나므로
    단일 이벤트 루프 안에서는 별도의 락이 필요 없습니다.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Args:
            clock: 현재 시각 함수 (epoch 초, 테스트 주입용)
        """
        self._clock = clock or time.time
        self._windows: dict[str, RateWindow] = {}

    def check(self, identity: str, max_requests: int, window_seconds: float) -> RateLimitResult:
        """요청 허용 여부 확인 및 카운트 소비

        Args:
            identity: 식별자 키
            max_requests: 윈도우당 최대 요청 수
            window_seconds: 윈도우 길이 (초)

        Returns:
            RateLimitResult
        """
        now = self._clock()
        window = self._windows.get(identity)

        # 리셋 시각에 정확히 도착한 요청은 새 윈도우의 첫 요청으로 취급
        if window is None or now >= window.reset_at:
            reset_at = now + window_seconds
            self._windows[identity] = RateWindow(count=1, reset_at=reset_at)
            return RateLimitResult(
                allowed=True,
                remaining=max(0, max_requests - 1),
                reset_at=reset_at,
            )

        if window.count >= max_requests:
            logger.warning(
                f"[RATE_LIMIT] Denied: identity='{identity}', count={window.count}/{max_requests}"
            )
            return RateLimitResult(allowed=False, remaining=0, reset_at=window.reset_at)

        window.count += 1
        return RateLimitResult(
            allowed=True,
            remaining=max_requests - window.count,
            reset_at=window.reset_at,
        )

    def cleanup(self) -> int:
        """만료된 윈도우 정리 (무한 증가 방지)

        Returns:
            제거된 윈도우 수
        """
        now = self._clock()
        expired = [key for key, window in list(self._windows.items()) if now >= window.reset_at]
        removed = 0
        for key in expired:
            window = self._windows.get(key)
            # 목록 작성 이후 새 윈도우가 열린 키는 남김
            if window is not None and now >= window.reset_at:
                self._windows.pop(key, None)
                removed += 1
        if removed:
            logger.debug(f"[RATE_LIMIT] Cleanup removed {removed} windows")
        return removed

    def __len__(self) -> int:
        return len(self._windows)
