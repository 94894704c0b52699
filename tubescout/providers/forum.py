"""Reddit 검색 어댑터 (OAuth → Public Fallback)

토픽마다 순차적으로:
1. 토큰이 있으면 oauth.reddit.com 검색
2. 예외 또는 0건이면 공개 search.json으로 폴백
3. 토큰이 없으면 바로 공개 엔드포인트

토픽별 결과는 해당 토픽의 시도(폴백 포함)가 끝난 뒤에만 누적됩니다.
누적 결과는 정규화 URL 기준 중복 제거(먼저 나온 것 유지) → score 내림차순 → 상위 N개.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Iterable, Optional

import httpx

from tubescout.core.config import Settings, settings as default_settings
from tubescout.core.exceptions import (
    ProviderException,
    ProviderResponseException,
    ProviderTimeoutException,
)
from tubescout.core.logging import logger
from tubescout.engine.result import ProviderResult, elapsed_ms_since
from tubescout.schemas import ForumPost
from tubescout.services.impl.token_cache import RedditTokenCache

REDDIT_OAUTH_SEARCH_URL = "https://oauth.reddit.com/search"
REDDIT_PUBLIC_SEARCH_URL = "https://www.reddit.com/search.json"
REDDIT_BASE_URL = "https://reddit.com"
PROVIDER = "forum"

PUBLIC_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://www.reddit.com/",
    "Origin": "https://www.reddit.com",
}


class SearchPath(str, Enum):
    """검색 경로"""

    OAUTH = "oauth"
    PUBLIC = "public"


def canonical_post_url(data: dict[str, Any]) -> str:
    """게시글의 정규화 URL (중복 제거 키)

    permalink가 있으면 https://reddit.com + permalink ('/' 보장),
    없으면 /r/{subreddit}/comments/{id}.
    """
    permalink = data.get("permalink")
    if isinstance(permalink, str) and permalink:
        if not permalink.startswith("/"):
            permalink = "/" + permalink
        return f"{REDDIT_BASE_URL}{permalink}"
    return f"{REDDIT_BASE_URL}/r/{data.get('subreddit')}/comments/{data.get('id')}"


def parse_listing(payload: Any) -> list[ForumPost]:
    """검색 응답(listing)을 ForumPost 목록으로 변환

    data.children / children 두 형태를 모두 허용하며 제목 없는 항목은 버립니다.
    """
    if not isinstance(payload, dict):
        return []
    container = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    children = container.get("children") or []
    if not isinstance(children, list):
        return []

    posts: list[ForumPost] = []
    for child in children:
        if not isinstance(child, dict):
            continue
        data = child.get("data") if isinstance(child.get("data"), dict) else child
        title = data.get("title")
        if not title:
            continue
        score = data.get("score")
        created = data.get("created_utc") or data.get("created") or time.time()
        posts.append(
            ForumPost(
                title=str(title),
                url=canonical_post_url(data),
                subreddit=data.get("subreddit") or "unknown",
                score=int(score) if isinstance(score, (int, float)) else 0,
                created=float(created) if isinstance(created, (int, float)) else time.time(),
            )
        )
    return posts


def merge_forum_posts(posts: Iterable[ForumPost], limit: int) -> list[ForumPost]:
    """중복 제거(먼저 나온 URL 유지) → score 내림차순(안정 정렬) → 상위 limit개"""
    seen: set[str] = set()
    unique: list[ForumPost] = []
    for post in posts:
        if post.url in seen:
            continue
        seen.add(post.url)
        unique.append(post)
    unique.sort(key=lambda p: p.score, reverse=True)
    return unique[:limit]


class ForumSearchClient:
    """포럼 검색 어댑터 (search-with-fallback)

    search_posts()는 예외를 던지지 않습니다.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_cache: RedditTokenCache,
        config: Optional[Settings] = None,
    ):
        self.http_client = http_client
        self.token_cache = token_cache
        self.config = config or default_settings

    async def search_posts(self, topics: list[str]) -> ProviderResult[list[ForumPost]]:
        """토픽별 게시글 검색 후 병합

        Args:
            topics: 토픽 목록 (앞에서부터 max_search_topics개 사용)

        Returns:
            ProviderResult[list[ForumPost]]
                - FAILED: 모든 시도가 실패하고 결과도 없음
                - EMPTY: 정상 실행, 0건
        """
        if not topics:
            return ProviderResult.empty(PROVIDER, [])

        started = time.monotonic()
        try:
            token = await self.token_cache.get_token()
        except Exception as e:
            logger.warning(f"[FORUM] Token lookup failed, using public endpoint: {type(e).__name__}: {e}")
            token = None

        pooled: list[ForumPost] = []
        attempts = 0
        failures = 0

        for topic in topics[: self.config.max_search_topics]:
            topic_posts: list[ForumPost] = []

            if token:
                attempts += 1
                try:
                    topic_posts = await self._search(SearchPath.OAUTH, topic, token)
                except ProviderException as e:
                    failures += 1
                    logger.warning(f"[FORUM] OAuth search failed for '{topic}': {e}")
                except Exception as e:
                    failures += 1
                    logger.error(f"[FORUM] OAuth search crashed for '{topic}': {type(e).__name__}: {e}")

                if not topic_posts:
                    logger.info(f"[FORUM] Falling back to public search for '{topic}'")

            if not topic_posts:
                attempts += 1
                try:
                    topic_posts = await self._search(SearchPath.PUBLIC, topic, None)
                except ProviderException as e:
                    failures += 1
                    logger.warning(f"[FORUM] Public search failed for '{topic}': {e}")
                except Exception as e:
                    failures += 1
                    logger.error(f"[FORUM] Public search crashed for '{topic}': {type(e).__name__}: {e}")

            if topic_posts:
                logger.info(f"[FORUM] Found {len(topic_posts)} posts for topic: {topic}")
                pooled.extend(topic_posts)
            else:
                logger.info(f"[FORUM] No posts for topic: {topic}")

        merged = merge_forum_posts(pooled, self.config.max_forum_posts)
        logger.info(f"[FORUM] Total unique posts: {len(merged)}")

        if merged:
            return ProviderResult.ok(PROVIDER, merged, elapsed_ms=elapsed_ms_since(started))
        if attempts > 0 and failures == attempts:
            return ProviderResult.failed(
                PROVIDER, "all forum search attempts failed", elapsed_ms=elapsed_ms_since(started)
            )
        return ProviderResult.empty(PROVIDER, [], elapsed_ms=elapsed_ms_since(started))

    async def _search(self, path: SearchPath, topic: str, token: Optional[str]) -> list[ForumPost]:
        """단일 검색 시도

        4xx는 0건으로 취급하고, 5xx/전송 오류/형식 오류는 예외로 올립니다.

        Raises:
            ProviderTimeoutException: 타임아웃
            ProviderResponseException: 5xx, 전송 오류, JSON 형식 오류
        """
        params: dict[str, Any] = {
            "q": topic,
            "sort": "relevance",
            "limit": self.config.forum_posts_per_topic,
            "t": "week",
        }
        if path == SearchPath.OAUTH:
            url = REDDIT_OAUTH_SEARCH_URL
            headers = {
                "Authorization": f"Bearer {token}",
                "User-Agent": self.config.reddit_user_agent,
            }
            params["raw_json"] = 1
            timeout = self.config.reddit_oauth_timeout_s
        else:
            url = REDDIT_PUBLIC_SEARCH_URL
            headers = PUBLIC_HEADERS
            params["restrict_sr"] = "false"
            timeout = self.config.reddit_public_timeout_s

        provider = f"reddit-{path.value}"
        try:
            response = await self.http_client.get(url, params=params, headers=headers, timeout=timeout)
        except httpx.TimeoutException:
            raise ProviderTimeoutException(provider, timeout)
        except httpx.HTTPError as e:
            raise ProviderResponseException(provider, f"{type(e).__name__}: {e}")

        if response.status_code >= 500:
            raise ProviderResponseException(
                provider, f"HTTP {response.status_code}", status_code=response.status_code
            )
        if response.status_code >= 400:
            logger.warning(f"[FORUM] {provider} returned HTTP {response.status_code} for '{topic}'")
            return []

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderResponseException(provider, f"invalid JSON: {e}")
        return parse_listing(payload)
