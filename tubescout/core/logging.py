"""로깅 설정 (Security Enhanced)

- 단일 named logger "tubescout" (stdout)
- YouTube/NewsAPI 키는 쿼리스트링으로 전달되므로 외부 라이브러리 요청 로그는 WARNING 이상만 남김
- sanitize_for_log: 키/토큰 값을 가린 문자열
"""
import logging
import os
import re
import sys

from tubescout.core.config import settings


# Production 환경에서는 DEBUG 로그 비활성화
IS_PRODUCTION = os.getenv("ENVIRONMENT", "development") == "production"

# 요청 URL을 INFO로 남기는 라이브러리
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "apscheduler")

PRODUCTION_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEVELOPMENT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

# key=..., apiKey=..., access_token=..., client_secret=... 형태의 값
_SECRET_PARAM_RE = re.compile(
    r"(?i)\b(key|api_?key|access_token|token|client_secret|secret)=([^&\s\"']+)"
)
_BEARER_RE = re.compile(r"(?i)\b(bearer|basic)\s+[A-Za-z0-9._~+/=-]+")


def _resolve_level() -> int:
    level_name = settings.log_level.upper()
    if IS_PRODUCTION and level_name == "DEBUG":
        level_name = "INFO"
    return getattr(logging, level_name, logging.INFO)


def setup_logging() -> logging.Logger:
    """로거 초기화 및 설정 (중복 핸들러 없이 여러 번 호출 가능)"""
    logger = logging.getLogger("tubescout")
    level = _resolve_level()
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter(
                fmt=PRODUCTION_FORMAT if IS_PRODUCTION else DEVELOPMENT_FORMAT,
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger = setup_logging()


def sanitize_for_log(value: str, max_length: int = 100) -> str:
    """민감 정보를 가린 로깅용 문자열 반환

    Args:
        value: 로깅할 문자열 (URL, 응답 본문, 식별자 등)
        max_length: 최대 길이

    Returns:
        키/토큰 값이 *** 로 바뀐 문자열

    Examples:
        >>> sanitize_for_log("https://newsapi.org/v2/everything?q=ai&apiKey=abc123")
        'https://newsapi.org/v2/everything?q=ai&apiKey=***'
        >>> sanitize_for_log("Bearer eyJhbGciOi")
        'Bearer ***'
    """
    if not value:
        return "[empty]"

    result = _SECRET_PARAM_RE.sub(lambda m: f"{m.group(1)}=***", value)
    result = _BEARER_RE.sub(lambda m: f"{m.group(1)} ***", result)

    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result
