"""주기 작업 스케줄러 패키지."""

from .sweeper import SweepScheduler

__all__ = ["SweepScheduler"]
