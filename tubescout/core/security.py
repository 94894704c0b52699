"""
입력 보안 검증 및 호출자 식별
"""

from fastapi import Request
from tubescout.core.logging import logger, sanitize_for_log


class SecurityValidator:
    """입력 보안 검증"""

    MAX_SOURCE_REF_LENGTH = 2048

    # 제어 문자 및 마크업 (로그/프롬프트 오염 방지)
    DANGEROUS_CHARS = ['<', '>', '"', '\\', '\0', '\n', '\r']

    @staticmethod
    def validate_source_ref(source_ref: str) -> bool:
        """채널 참조(URL) 검증

        Args:
            source_ref: 채널/핸들/영상 URL

        Returns:
            유효성 여부

        Raises:
            ValueError: 유효하지 않은 입력
        """
        if not source_ref or not source_ref.strip():
            raise ValueError("URL is required")

        if len(source_ref) > SecurityValidator.MAX_SOURCE_REF_LENGTH:
            raise ValueError(f"URL은 {SecurityValidator.MAX_SOURCE_REF_LENGTH}자 이하여야 합니다")

        for char in SecurityValidator.DANGEROUS_CHARS:
            if char in source_ref:
                logger.warning(
                    f"URL에 위험한 문자 감지: {sanitize_for_log(repr(char))}"
                )
                raise ValueError("URL에 허용되지 않는 문자가 포함되어 있습니다")

        return True


def get_client_identifier(request: Request) -> str:
    """Rate limit용 호출자 식별자 추출

    X-Forwarded-For 첫 번째 값 → X-Real-IP → 소켓 peer → "unknown" 순서.

    Args:
        request: FastAPI Request 객체

    Returns:
        호출자 식별자 (IP 문자열)
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    client = request.client
    if client is not None and client.host:
        return client.host

    return "unknown"

