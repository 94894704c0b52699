"""커스텀 예외 정의 (Structured Exception Hierarchy)"""
from typing import Any, Optional


# 기본 예외 클래스
class TubeScoutException(Exception):
    """기본 예외 클래스 - 모든 커스텀 예외의 부모"""
    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# 파이프라인(실행 종료) 관련 예외
class PipelineException(TubeScoutException):
    """파이프라인 실행을 종료시키는 예외의 기본 클래스

    message는 그대로 사용자에게 error 이벤트로 전달됩니다.
    """
    def __init__(self, message: str, error_code: str = "PIPELINE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "PIPELINE_ERROR", details)


class ChannelNotResolvedException(PipelineException):
    """채널 참조를 채널 ID로 변환할 수 없을 때"""
    def __init__(self, source_ref: str, details: Optional[dict[str, Any]] = None):
        super().__init__(
            "Could not extract channel ID from URL",
            "CHANNEL_NOT_RESOLVED",
            details or {"source_ref": source_ref},
        )


class MissingCredentialsException(PipelineException):
    """필수 API 키가 설정되지 않았을 때"""
    def __init__(self, missing: list[str], details: Optional[dict[str, Any]] = None):
        super().__init__(
            "API keys not configured",
            "MISSING_CREDENTIALS",
            details or {"missing": missing},
        )


class RateLimitExceededException(PipelineException):
    """Rate limit 초과"""
    def __init__(self, message: str, reset_at: float, details: Optional[dict[str, Any]] = None):
        self.reset_at = reset_at
        super().__init__(message, "RATE_LIMITED", details or {"reset_at": reset_at})


class StageFailedException(PipelineException):
    """필수 단계(영상/토픽/아이디어) 실패"""
    def __init__(self, stage: str, reason: str, details: Optional[dict[str, Any]] = None):
        self.stage = stage
        super().__init__(reason, "STAGE_FAILED", details or {"stage": stage, "reason": reason})


class BudgetExhaustedException(PipelineException):
    """실행 예산 소진"""
    def __init__(self, stage: str, elapsed_s: float, details: Optional[dict[str, Any]] = None):
        message = f"Analysis timed out before '{stage}' (elapsed: {elapsed_s:.1f}s)"
        super().__init__(message, "BUDGET_EXHAUSTED",
                         details or {"stage": stage, "elapsed_s": elapsed_s})


# 외부 제공자 관련 예외 (어댑터 내부에서만 사용, 밖으로 전파되지 않음)
class ProviderException(TubeScoutException):
    """외부 제공자 호출 예외의 기본 클래스"""
    def __init__(self, provider: str, message: str, error_code: str = "PROVIDER_ERROR", details: Optional[dict[str, Any]] = None):
        self.provider = provider
        super().__init__(message, error_code or "PROVIDER_ERROR", details or {"provider": provider})


class ProviderTimeoutException(ProviderException):
    """외부 호출 타임아웃"""
    def __init__(self, provider: str, timeout_s: float, details: Optional[dict[str, Any]] = None):
        message = f"{provider} request timed out after {timeout_s}s"
        super().__init__(provider, message, "PROVIDER_TIMEOUT",
                         details or {"provider": provider, "timeout_s": timeout_s})


class ProviderResponseException(ProviderException):
    """외부 응답 오류 (5xx, 형식 오류 등)"""
    def __init__(self, provider: str, reason: str, status_code: Optional[int] = None, details: Optional[dict[str, Any]] = None):
        self.status_code = status_code
        message = f"{provider} returned an invalid response: {reason}"
        super().__init__(provider, message, "PROVIDER_BAD_RESPONSE",
                         details or {"provider": provider, "reason": reason, "status_code": status_code})


# 캐시 관련 예외
class CacheException(TubeScoutException):
    """캐시 관련 예외"""
    def __init__(self, message: str, error_code: str = "CACHE_ERROR", details: Optional[dict[str, Any]] = None):
        super().__init__(message, error_code or "CACHE_ERROR", details)


class CacheConnectionException(CacheException):
    """캐시 연결 실패"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Failed to connect to cache: {reason}"
        super().__init__(message, "CACHE_CONNECTION_ERROR", details)


class CacheSerializationException(CacheException):
    """캐시 직렬화/역직렬화 오류"""
    def __init__(self, operation: str, reason: str, details: Optional[dict[str, Any]] = None):
        message = f"Cache {operation} failed: {reason}"
        super().__init__(message, "CACHE_SERIALIZATION_ERROR",
                         details or {"operation": operation, "reason": reason})


# 입력 검증 관련 예외
class InvalidSourceRefException(PipelineException):
    """유효하지 않은 채널 참조 (빈 값, 길이 초과, 금지 문자)"""
    def __init__(self, reason: str, details: Optional[dict[str, Any]] = None):
        super().__init__(reason, "INVALID_SOURCE_REF", details or {"reason": reason})
