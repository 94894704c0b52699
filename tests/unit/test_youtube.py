"""YouTube 어댑터 테스트 (MockTransport)"""
import httpx
import pytest

from tubescout.engine.cache_adapter import CacheAdapter
from tubescout.engine.result import ProviderStatus
from tubescout.providers.youtube import YouTubeClient
from tubescout.utils.hash_utils import generate_channel_videos_key
from tests.conftest import make_settings, mock_http_client


class FakeYouTubeApi:
    """YouTube Data API v3 Fake"""

    def __init__(self, uploads: str = "UUabc", video_ids=("v1", "v2"), fail_resource: str = ""):
        self.uploads = uploads
        self.video_ids = list(video_ids)
        self.fail_resource = fail_resource
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        resource = request.url.path.rsplit("/", 1)[-1]
        params = request.url.params
        self.calls.append(resource)
        assert params["key"] == "yt-key"

        if resource == self.fail_resource:
            return httpx.Response(500, json={"error": {"message": "backend"}})

        if resource == "channels":
            if params.get("forHandle") == "veritasium":
                return httpx.Response(200, json={"items": [{"id": "UCabc"}]})
            if params.get("forHandle"):
                return httpx.Response(200, json={"items": []})
            if params.get("part") == "id":
                return httpx.Response(200, json={"items": [{"id": params["id"]}]})
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": params["id"],
                            "snippet": {"title": "Veritasium"},
                            "contentDetails": {"relatedPlaylists": {"uploads": self.uploads}},
                        }
                    ]
                },
            )
        if resource == "playlistItems":
            return httpx.Response(
                200, json={"items": [{"contentDetails": {"videoId": vid}} for vid in self.video_ids]}
            )
        if resource == "videos":
            if params.get("part") == "snippet":
                return httpx.Response(200, json={"items": [{"id": params["id"], "snippet": {"channelId": "UCvideo"}}]})
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": vid,
                            "snippet": {
                                "title": f"Title {vid}",
                                "description": "desc",
                                "publishedAt": "2024-05-01T00:00:00Z",
                                "thumbnails": {"high": {"url": f"https://i.ytimg.com/{vid}.jpg"}},
                            },
                        }
                        for vid in params["id"].split(",")
                    ]
                },
            )
        if resource == "search":
            return httpx.Response(200, json={"items": [{"snippet": {"channelId": "UCsearch"}}]})
        return httpx.Response(404)


def make_client(api, cache: CacheAdapter, **overrides) -> YouTubeClient:
    return YouTubeClient(mock_http_client(api), cache, make_settings(**overrides))


@pytest.mark.asyncio
class TestResolveChannelId:

    async def test_handle(self, cache_adapter):
        client = make_client(FakeYouTubeApi(), cache_adapter)
        assert await client.resolve_channel_id("https://www.youtube.com/@veritasium") == "UCabc"

    async def test_channel_id(self, cache_adapter):
        client = make_client(FakeYouTubeApi(), cache_adapter)
        assert await client.resolve_channel_id("https://www.youtube.com/channel/UCdirect") == "UCdirect"

    async def test_video_url(self, cache_adapter):
        client = make_client(FakeYouTubeApi(), cache_adapter)
        assert await client.resolve_channel_id("https://youtu.be/abc123") == "UCvideo"

    async def test_custom_url_uses_search(self, cache_adapter):
        client = make_client(FakeYouTubeApi(), cache_adapter)
        assert await client.resolve_channel_id("https://www.youtube.com/c/SomeName") == "UCsearch"

    async def test_unknown_handle_returns_none(self, cache_adapter):
        client = make_client(FakeYouTubeApi(), cache_adapter)
        assert await client.resolve_channel_id("https://www.youtube.com/@nobody") is None

    async def test_unrecognized_url(self, cache_adapter):
        api = FakeYouTubeApi()
        client = make_client(api, cache_adapter)

        assert await client.resolve_channel_id("https://example.com/nothing") is None
        assert api.calls == []

    async def test_api_error_returns_none(self, cache_adapter):
        client = make_client(FakeYouTubeApi(fail_resource="channels"), cache_adapter)
        assert await client.resolve_channel_id("https://www.youtube.com/@veritasium") is None


@pytest.mark.asyncio
class TestFetchChannelVideos:

    async def test_success_and_cached(self, cache_adapter):
        api = FakeYouTubeApi()
        client = make_client(api, cache_adapter)

        result = await client.fetch_channel_videos("UCabc")

        assert result.status == ProviderStatus.SUCCESS
        assert result.value.channel_name == "Veritasium"
        assert [v.id for v in result.value.videos] == ["v1", "v2"]
        assert result.value.videos[0].url == "https://www.youtube.com/watch?v=v1"
        assert result.value.videos[0].thumbnail == "https://i.ytimg.com/v1.jpg"
        assert await cache_adapter.get(generate_channel_videos_key("UCabc")) is not None

        calls_before = len(api.calls)
        cached = await client.fetch_channel_videos("UCabc")
        assert cached.is_success
        assert len(api.calls) == calls_before

    async def test_playlist_request_is_bounded(self, cache_adapter):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("playlistItems"):
                seen["maxResults"] = request.url.params["maxResults"]
            return FakeYouTubeApi()(request)

        client = YouTubeClient(mock_http_client(handler), cache_adapter, make_settings(max_channel_videos=7))
        await client.fetch_channel_videos("UCabc")

        assert seen["maxResults"] == "7"

    async def test_empty_uploads(self, cache_adapter):
        client = make_client(FakeYouTubeApi(video_ids=()), cache_adapter)

        result = await client.fetch_channel_videos("UCabc")

        assert result.status == ProviderStatus.EMPTY
        assert await cache_adapter.get(generate_channel_videos_key("UCabc")) is None

    async def test_missing_uploads_playlist_is_failure(self, cache_adapter):
        client = make_client(FakeYouTubeApi(uploads=""), cache_adapter)

        result = await client.fetch_channel_videos("UCabc")

        assert result.status == ProviderStatus.FAILED
        assert "uploads playlist" in result.error_message

    async def test_http_error_is_failure(self, cache_adapter):
        client = make_client(FakeYouTubeApi(fail_resource="videos"), cache_adapter)

        result = await client.fetch_channel_videos("UCabc")

        assert result.is_error

    async def test_timeout(self, cache_adapter):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        client = YouTubeClient(mock_http_client(handler), cache_adapter, make_settings())

        result = await client.fetch_channel_videos("UCabc")

        assert result.status == ProviderStatus.TIMEOUT

    async def test_invalid_cached_payload_is_refetched(self, cache_adapter):
        await cache_adapter.set(generate_channel_videos_key("UCabc"), {"videos": "broken"}, ttl=60)
        client = make_client(FakeYouTubeApi(), cache_adapter)

        result = await client.fetch_channel_videos("UCabc")

        assert result.is_success
        assert len(result.value.videos) == 2


class TestConfiguration:
    def test_is_configured(self, cache_adapter):
        assert make_client(FakeYouTubeApi(), cache_adapter).is_configured is True
        assert make_client(FakeYouTubeApi(), cache_adapter, youtube_api_key="").is_configured is False
