"""Reddit OAuth 토큰 캐시 (client credentials flow)

토큰은 CacheAdapter를 통해 저장되므로 Redis를 쓰면 프로세스 간에도 공유됩니다.
갱신 경로에는 락이 없습니다. 만료 직전 동시 호출은 각자 갱신할 수 있으며,
각 갱신은 독립적으로 완결된 토큰을 저장하므로 정합성 문제는 없습니다.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

import httpx

from tubescout.core.config import Settings, settings as default_settings
from tubescout.core.logging import logger, sanitize_for_log
from tubescout.utils.hash_utils import REDDIT_TOKEN_CACHE_KEY

if TYPE_CHECKING:
    from tubescout.engine.cache_adapter import CacheAdapter

REDDIT_TOKEN_URL = "https://www.reddit.com/api/v1/access_token"

# 만료까지 이 시간(초) 이내로 남은 토큰은 없는 것으로 취급
TOKEN_SAFETY_MARGIN_S = 60


@dataclass(frozen=True)
class TokenRecord:
    """Bearer 토큰 + 절대 만료 시각 (epoch 초)"""

    token: str
    expires_at: float

    def is_usable(self, now: float) -> bool:
        return self.expires_at > now + TOKEN_SAFETY_MARGIN_S

    def to_dict(self) -> dict[str, Any]:
        return {"token": self.token, "expires_at": self.expires_at}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["TokenRecord"]:
        if not isinstance(data, dict):
            return None
        token = data.get("token")
        expires_at = data.get("expires_at")
        if not isinstance(token, str) or not token:
            return None
        if not isinstance(expires_at, (int, float)):
            return None
        return cls(token=token, expires_at=float(expires_at))


class RedditTokenCache:
    """Reddit 애플리케이션 토큰 관리

    get_token()은 절대 예외를 던지지 않습니다. 실패 시 None.
    """

    def __init__(
        self,
        cache: CacheAdapter,
        http_client: httpx.AsyncClient,
        config: Optional[Settings] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            cache: 캐시 어댑터
            http_client: 공유 httpx 클라이언트
            config: 설정 (기본: 전역 settings)
            clock: 현재 시각 함수 (epoch 초, 테스트 주입용)
        """
        self.cache = cache
        self.http_client = http_client
        self.config = config or default_settings
        self._clock = clock or time.time

    @property
    def is_configured(self) -> bool:
        return bool(self.config.reddit_client_id and self.config.reddit_client_secret)

    async def get_token(self) -> Optional[str]:
        """사용 가능한 Bearer 토큰 반환

        Returns:
            토큰 문자열 또는 None (미설정/갱신 실패)
        """
        if not self.is_configured:
            logger.debug("[REDDIT_TOKEN] OAuth credentials not configured")
            return None

        cached = await self.cache.get(REDDIT_TOKEN_CACHE_KEY)
        if cached is not None:
            record = TokenRecord.from_dict(cached)
            if record is None:
                logger.warning("[REDDIT_TOKEN] Malformed token record in cache, discarding")
                await self.cache.delete(REDDIT_TOKEN_CACHE_KEY)
            elif record.is_usable(self._clock()):
                return record.token

        record = await self._refresh()
        return record.token if record else None

    async def _refresh(self) -> Optional[TokenRecord]:
        """client credentials 교환으로 새 토큰 발급 후 캐시에 저장"""
        try:
            response = await self.http_client.post(
                REDDIT_TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(self.config.reddit_client_id, self.config.reddit_client_secret),
                headers={"User-Agent": self.config.reddit_user_agent},
                timeout=self.config.reddit_token_timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            body = sanitize_for_log(e.response.text or "", max_length=200)
            logger.error(
                f"[REDDIT_TOKEN] Token exchange failed: status={e.response.status_code}, body={body}"
            )
            return None
        except Exception as e:
            logger.error(f"[REDDIT_TOKEN] Token exchange failed: {type(e).__name__}: {e}")
            return None

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        expires_in = payload.get("expires_in") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token or not isinstance(expires_in, (int, float)):
            logger.error("[REDDIT_TOKEN] Token response missing access_token/expires_in")
            return None

        record = TokenRecord(token=access_token, expires_at=self._clock() + float(expires_in))
        ttl = int(expires_in) - TOKEN_SAFETY_MARGIN_S
        if ttl > 0:
            await self.cache.set(REDDIT_TOKEN_CACHE_KEY, record.to_dict(), ttl=ttl)
        logger.info(f"[REDDIT_TOKEN] Token refreshed (expires_in={int(expires_in)}s)")
        return record
