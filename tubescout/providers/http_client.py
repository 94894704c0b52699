"""공유 HTTP 클라이언트 (httpx)

- 제공자 어댑터마다 클라이언트를 만들면 TLS/커넥션 오버헤드가 커지므로
  프로세스 단위로 AsyncClient 하나를 재사용합니다.
- 타임아웃은 요청별로 지정합니다.
- 앱 종료 시 close()로 정리합니다.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from tubescout.core.logging import logger

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class SharedHttpClient:
    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is not None and not self._client.is_closed:
                return self._client
            self._client = httpx.AsyncClient(
                headers=self.default_headers(),
                follow_redirects=True,
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
                trust_env=False,
            )
            return self._client

    def default_headers(self) -> dict[str, str]:
        return {
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-US,en;q=0.9",
        }

    async def close(self) -> None:
        async with self._lock:
            if self._client is None:
                return
            try:
                await self._client.aclose()
            except Exception as e:
                logger.info(f"[HTTP_CLIENT] close failed: {type(e).__name__}: {e}")
            self._client = None


_shared_http_client = SharedHttpClient()


def get_shared_http_client() -> SharedHttpClient:
    return _shared_http_client


async def shutdown_shared_http_client() -> None:
    await _shared_http_client.close()
