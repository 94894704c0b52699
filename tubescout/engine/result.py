"""Provider Result - Standardized Adapter Result Format

모든 제공자 어댑터는 예외 대신 이 결과 타입을 반환합니다.
오케스트레이터는 "실행했지만 결과 없음"(EMPTY)과 "실패"(FAILED/TIMEOUT)를
구분해서 집계합니다.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ProviderStatus(str, Enum):
    """어댑터 실행 상태"""

    SUCCESS = "success"  # 결과 있음
    EMPTY = "empty"  # 정상 실행, 결과 없음
    SKIPPED = "skipped"  # 미설정 등으로 호출하지 않음
    FAILED = "failed"  # 전송/응답 오류
    TIMEOUT = "timeout"  # 타임아웃


@dataclass
class ProviderResult(Generic[T]):
    """어댑터 결과 표준 포맷

    Attributes:
        status: 실행 상태
        provider: 제공자 이름 ("youtube" | "news" | "forum" | "completion")
        value: 결과 값 (SUCCESS/EMPTY일 때만 의미 있음)
        error_message: 오류 메시지
        elapsed_ms: 소요 시간 (밀리초)
    """

    status: ProviderStatus
    provider: str
    value: Optional[T] = None
    error_message: Optional[str] = None
    elapsed_ms: Optional[float] = None

    @property
    def is_success(self) -> bool:
        """성공 여부 반환"""
        return self.status == ProviderStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        """오류 여부 반환 (결과 없음과 구분)"""
        return self.status in (ProviderStatus.FAILED, ProviderStatus.TIMEOUT)

    def value_or(self, default: T) -> T:
        """성공 시 값, 아니면 default"""
        if self.is_success and self.value is not None:
            return self.value
        return default

    @classmethod
    def ok(cls, provider: str, value: T, elapsed_ms: Optional[float] = None) -> "ProviderResult[T]":
        """성공 결과 생성"""
        return cls(status=ProviderStatus.SUCCESS, provider=provider, value=value, elapsed_ms=elapsed_ms)

    @classmethod
    def empty(cls, provider: str, value: Optional[T] = None, elapsed_ms: Optional[float] = None) -> "ProviderResult[T]":
        """결과 없음 생성"""
        return cls(status=ProviderStatus.EMPTY, provider=provider, value=value, elapsed_ms=elapsed_ms)

    @classmethod
    def skipped(cls, provider: str, reason: str) -> "ProviderResult[T]":
        """호출 생략 결과 생성"""
        return cls(status=ProviderStatus.SKIPPED, provider=provider, error_message=reason, elapsed_ms=0.0)

    @classmethod
    def failed(cls, provider: str, error: str, elapsed_ms: Optional[float] = None) -> "ProviderResult[T]":
        """실패 결과 생성"""
        return cls(status=ProviderStatus.FAILED, provider=provider, error_message=error, elapsed_ms=elapsed_ms)

    @classmethod
    def timeout(cls, provider: str, elapsed_ms: Optional[float] = None) -> "ProviderResult[T]":
        """타임아웃 결과 생성"""
        return cls(
            status=ProviderStatus.TIMEOUT,
            provider=provider,
            error_message=f"{provider} request timed out",
            elapsed_ms=elapsed_ms,
        )


def elapsed_ms_since(started: float) -> float:
    """time.monotonic() 기준 시작 시각으로부터 경과 밀리초"""
    return (time.monotonic() - started) * 1000
