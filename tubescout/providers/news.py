"""NewsAPI 어댑터 (토픽 관련 최신 뉴스)"""

from __future__ import annotations

import time
from datetime import date
from typing import Callable, Optional

import httpx

from tubescout.core.config import Settings, settings as default_settings
from tubescout.core.logging import logger, sanitize_for_log
from tubescout.engine.result import ProviderResult, elapsed_ms_since
from tubescout.schemas import NewsArticle

NEWS_API_URL = "https://newsapi.org/v2/everything"
PROVIDER = "news"


class NewsClient:
    """뉴스 검색 어댑터

    상위 토픽을 OR로 묶어 오늘 날짜 범위에서 관련도순으로 검색합니다.
    API 키가 없으면 호출하지 않고 SKIPPED를 반환합니다.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config: Optional[Settings] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.http_client = http_client
        self.config = config or default_settings
        self._today = today or date.today

    async def fetch_relevant_news(self, topics: list[str]) -> ProviderResult[list[NewsArticle]]:
        """토픽 관련 뉴스 조회

        Args:
            topics: 토픽 목록 (앞에서부터 max_search_topics개 사용)

        Returns:
            ProviderResult[list[NewsArticle]]
        """
        if not topics:
            return ProviderResult.empty(PROVIDER, [])
        if not self.config.news_api_key:
            return ProviderResult.skipped(PROVIDER, "NEWS_API_KEY not configured")

        started = time.monotonic()
        query = " OR ".join(topics[: self.config.max_search_topics])
        day = self._today().isoformat()

        try:
            response = await self.http_client.get(
                NEWS_API_URL,
                params={
                    "q": query,
                    "from": day,
                    "to": day,
                    "sortBy": "relevancy",
                    "pageSize": self.config.news_page_size,
                    "apiKey": self.config.news_api_key,
                },
                timeout=self.config.news_timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException:
            logger.warning(f"[NEWS] Timeout after {self.config.news_timeout_s}s")
            return ProviderResult.timeout(PROVIDER, elapsed_ms=elapsed_ms_since(started))
        except httpx.HTTPStatusError as e:
            logger.warning(f"[NEWS] HTTP {e.response.status_code} from NewsAPI")
            return ProviderResult.failed(
                PROVIDER, f"HTTP {e.response.status_code}", elapsed_ms=elapsed_ms_since(started)
            )
        except Exception as e:
            reason = sanitize_for_log(str(e), 200)
            logger.warning(f"[NEWS] Fetch failed: {type(e).__name__}: {reason}")
            return ProviderResult.failed(PROVIDER, reason, elapsed_ms=elapsed_ms_since(started))

        articles = payload.get("articles") if isinstance(payload, dict) else None
        if not isinstance(articles, list):
            articles = []

        news = [article for article in (_parse_article(a) for a in articles) if article is not None]
        logger.info(f"[NEWS] Found {len(news)} articles")
        if not news:
            return ProviderResult.empty(PROVIDER, [], elapsed_ms=elapsed_ms_since(started))
        return ProviderResult.ok(PROVIDER, news, elapsed_ms=elapsed_ms_since(started))


def _parse_article(raw: object) -> Optional[NewsArticle]:
    if not isinstance(raw, dict):
        return None
    title = raw.get("title")
    url = raw.get("url")
    if not title or not url:
        return None
    source = raw.get("source") or {}
    return NewsArticle(
        title=str(title),
        url=str(url),
        source=(source.get("name") if isinstance(source, dict) else None) or "Unknown",
        published_at=raw.get("publishedAt") or "",
    )
