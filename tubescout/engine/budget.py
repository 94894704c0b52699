"""Budget Manager - 파이프라인 실행 전체의 시간 상한

외부 호출별 타임아웃(설정값)과 별개로 실행 1회의 총 시간을 제한합니다.
각 단계는 run_stage()로 감싸 실행하며, 남은 예산을 넘기면
BudgetExhaustedException으로 실행을 끝냅니다.
"""

import asyncio
from dataclasses import dataclass
from time import monotonic
from typing import Any, Awaitable, Callable, Optional

from tubescout.core.exceptions import BudgetExhaustedException


@dataclass
class BudgetConfig:
    """예산 설정"""

    total_budget: float = 300.0  # 실행 1회 전체 예산 (초)
    min_remaining: float = 1.0  # 이보다 적게 남으면 새 단계를 시작하지 않음 (초)

    def __post_init__(self):
        if self.total_budget <= 0:
            raise ValueError(f"total_budget must be positive: {self.total_budget}")
        if self.min_remaining < 0 or self.min_remaining >= self.total_budget:
            raise ValueError(
                f"min_remaining ({self.min_remaining}s) must be in [0, total_budget ({self.total_budget}s))"
            )


class BudgetManager:
    """실행 예산 관리자 (실행 1회당 1개)

    Usage:
        budget = BudgetManager(BudgetConfig(total_budget=300))
        budget.start()

        videos = await budget.run_stage("videos", youtube.fetch_channel_videos, channel_id)

        logger.debug(budget.get_report())
    """

    def __init__(self, config: Optional[BudgetConfig] = None, clock: Optional[Callable[[], float]] = None):
        self.config = config or BudgetConfig()
        self._clock = clock or monotonic
        self.start_time: Optional[float] = None
        self._checkpoints: dict[str, float] = {}

    def start(self) -> None:
        self.start_time = self._clock()
        self._checkpoints.clear()

    def checkpoint(self, name: str) -> None:
        """단계 종료 시각 기록 (시작 기준 경과 초)

        Raises:
            RuntimeError: start()가 호출되지 않은 경우
        """
        if self.start_time is None:
            raise RuntimeError("Budget not started. Call start() first.")
        self._checkpoints[name] = self._clock() - self.start_time

    def elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        return self._clock() - self.start_time

    def remaining(self) -> float:
        """남은 예산 (초, 음수 없음)"""
        return max(0.0, self.config.total_budget - self.elapsed())

    def is_exhausted(self) -> bool:
        return self.remaining() < self.config.min_remaining

    def ensure(self, stage: str) -> float:
        """단계 시작 가능 여부 확인

        Returns:
            이 단계에 허용되는 최대 시간 (초)

        Raises:
            BudgetExhaustedException: 남은 예산이 min_remaining 미만
        """
        if self.is_exhausted():
            raise BudgetExhaustedException(stage, self.elapsed())
        return self.remaining()

    async def run_stage(self, stage: str, func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """남은 예산 안에서 단계 실행 후 체크포인트 기록

        Args:
            stage: 단계 이름 ("resolve", "videos", "topics", "context", "ideas")
            func: 코루틴 함수
            *args: func 인자

        Raises:
            BudgetExhaustedException: 시작 전 예산 부족 또는 실행 중 예산 초과
        """
        timeout = self.ensure(stage)
        try:
            result = await asyncio.wait_for(func(*args), timeout=timeout)
        except asyncio.TimeoutError:
            raise BudgetExhaustedException(stage, self.elapsed())
        self.checkpoint(stage)
        return result

    def get_report(self) -> dict:
        """예산 사용 리포트 (total_budget, elapsed, remaining, checkpoints, is_exhausted)"""
        return {
            "total_budget": self.config.total_budget,
            "elapsed": self.elapsed(),
            "remaining": self.remaining(),
            "checkpoints": self._checkpoints.copy(),
            "is_exhausted": self.is_exhausted(),
        }
