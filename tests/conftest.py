"""전역 테스트 설정

역할:
- 테스트 환경 구성
- 공통 Fake 주입 (시계, 설정, HTTP transport)
- 전역 싱글톤 초기화

금지:
- 실제 네트워크/Redis/OpenAI 호출
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
import pytest

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "INFO")

from tubescout.core.config import Settings  # noqa: E402
from tubescout.engine.cache_adapter import CacheAdapter  # noqa: E402
from tubescout.engine.result import ProviderResult  # noqa: E402
from tubescout.schemas import (  # noqa: E402
    ChannelVideos,
    ForumPost,
    NewsArticle,
    TopicAnalysis,
    Video,
    VideoIdea,
)
from tubescout.services.impl.cache_service import MemoryCacheService  # noqa: E402


@dataclass
class FakeClock:
    """수동으로 진행시키는 시계 (epoch/monotonic 공용)"""

    now: float = 1_700_000_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def make_settings(**overrides: Any) -> Settings:
    """.env를 읽지 않는 테스트용 설정"""
    values: dict[str, Any] = {
        "youtube_api_key": "yt-key",
        "openai_api_key": "openai-key",
        "news_api_key": "news-key",
        "reddit_client_id": "reddit-id",
        "reddit_client_secret": "reddit-secret",
        "redis_url": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


class HookedDict(dict):
    """items() 스냅샷 직후 한 번 hook을 실행하는 dict (정리 도중 갱신 재현용)"""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.after_items: Optional[Callable[[], Any]] = None

    def items(self):
        snapshot = list(super().items())
        hook, self.after_items = self.after_items, None
        if hook is not None:
            hook()
        return snapshot


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """httpx.MockTransport 기반 AsyncClient"""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def memory_cache(clock: FakeClock) -> MemoryCacheService:
    return MemoryCacheService(clock=clock)


@pytest.fixture
def cache_adapter(memory_cache: MemoryCacheService) -> CacheAdapter:
    return CacheAdapter(memory_cache)


# ============================================================================
# 파이프라인 테스트용 샘플 데이터 / Fake 제공자
# ============================================================================

def sample_videos(count: int = 3) -> ChannelVideos:
    return ChannelVideos(
        channel_name="Test Channel",
        videos=[
            Video(
                id=f"vid{i}",
                title=f"Video {i}",
                description=f"Description {i}",
                published_at="2024-01-01T00:00:00Z",
                thumbnail=f"https://img.example.com/{i}.jpg",
                url=f"https://www.youtube.com/watch?v=vid{i}",
            )
            for i in range(count)
        ],
    )


class FakeYouTube:
    def __init__(
        self,
        channel_id: Optional[str] = "UC123",
        videos: Optional[ProviderResult[ChannelVideos]] = None,
        configured: bool = True,
    ):
        self.channel_id = channel_id
        self.videos = videos or ProviderResult.ok("youtube", sample_videos())
        self.is_configured = configured
        self.resolve_calls = 0

    async def resolve_channel_id(self, source_ref: str) -> Optional[str]:
        self.resolve_calls += 1
        return self.channel_id

    async def fetch_channel_videos(self, channel_id: str) -> ProviderResult[ChannelVideos]:
        return self.videos


class FakeTopicAnalyzer:
    def __init__(self, result: Optional[ProviderResult[TopicAnalysis]] = None, configured: bool = True):
        self.result = result or ProviderResult.ok(
            "completion", TopicAnalysis(topics=["python", "fastapi"], summary="Backend tutorials.")
        )
        self.is_configured = configured

    async def analyze(self, videos: list[Video]) -> ProviderResult[TopicAnalysis]:
        return self.result


class FakeIdeaGenerator:
    def __init__(self, result: Optional[ProviderResult[list[VideoIdea]]] = None):
        self.result = result or ProviderResult.ok(
            "completion",
            [VideoIdea(title="Idea", thumb_design="Bold text", video_idea="Outline")],
        )
        self.calls: list[dict[str, Any]] = []

    async def generate(self, videos, topics, news, forum_posts) -> ProviderResult[list[VideoIdea]]:
        self.calls.append({"videos": videos, "topics": topics, "news": news, "forum_posts": forum_posts})
        return self.result


class FakeNews:
    def __init__(self, result: Any = None, error: Optional[BaseException] = None):
        self.result = result or ProviderResult.ok(
            "news", [NewsArticle(title="News", url="https://news.example.com/1", source="Example")]
        )
        self.error = error

    async def fetch_relevant_news(self, topics: list[str]):
        if self.error is not None:
            raise self.error
        return self.result


class FakeForum:
    def __init__(self, result: Any = None, error: Optional[BaseException] = None):
        self.result = result or ProviderResult.ok(
            "forum",
            [ForumPost(title="Post", url="https://reddit.com/r/python/comments/a", subreddit="python", score=10)],
        )
        self.error = error

    async def search_posts(self, topics: list[str]):
        if self.error is not None:
            raise self.error
        return self.result
