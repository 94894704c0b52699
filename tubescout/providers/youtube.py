"""YouTube Data API v3 어댑터 (채널 해석 + 최근 영상 조회)"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from tubescout.core.config import Settings, settings as default_settings
from tubescout.core.exceptions import (
    ProviderException,
    ProviderResponseException,
    ProviderTimeoutException,
)
from tubescout.core.logging import logger, sanitize_for_log
from tubescout.engine.cache_adapter import CacheAdapter
from tubescout.engine.result import ProviderResult, elapsed_ms_since
from tubescout.schemas import ChannelVideos, Video
from tubescout.utils.hash_utils import generate_channel_videos_key
from tubescout.utils.url_utils import ChannelRef, ChannelRefKind, extract_channel_refs

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
PROVIDER = "youtube"


class YouTubeClient:
    """YouTube 카탈로그 조회 어댑터

    - resolve_channel_id: URL → 채널 ID (실패 시 None)
    - fetch_channel_videos: 채널 ID → 최근 영상 (ProviderResult)

    두 메서드 모두 예외를 밖으로 던지지 않습니다.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        cache: CacheAdapter,
        config: Optional[Settings] = None,
    ):
        self.http_client = http_client
        self.cache = cache
        self.config = config or default_settings

    @property
    def is_configured(self) -> bool:
        return bool(self.config.youtube_api_key)

    async def _get_json(self, resource: str, params: dict[str, Any]) -> dict[str, Any]:
        """API GET 호출

        Raises:
            ProviderTimeoutException: 타임아웃
            ProviderResponseException: 비정상 상태 코드/형식
        """
        query = dict(params)
        query["key"] = self.config.youtube_api_key
        try:
            response = await self.http_client.get(
                f"{YOUTUBE_API_BASE}/{resource}",
                params=query,
                timeout=self.config.youtube_timeout_s,
            )
        except httpx.TimeoutException:
            raise ProviderTimeoutException(PROVIDER, self.config.youtube_timeout_s)
        except httpx.HTTPError as e:
            raise ProviderResponseException(PROVIDER, f"{type(e).__name__}: {sanitize_for_log(str(e), 200)}")

        if response.status_code >= 400:
            raise ProviderResponseException(
                PROVIDER, f"{resource} returned HTTP {response.status_code}", status_code=response.status_code
            )
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseException(PROVIDER, f"invalid JSON from {resource}: {e}")
        if not isinstance(data, dict):
            raise ProviderResponseException(PROVIDER, f"unexpected payload from {resource}")
        return data

    @staticmethod
    def _first_item(data: dict[str, Any]) -> dict[str, Any]:
        items = data.get("items") or []
        if items and isinstance(items[0], dict):
            return items[0]
        return {}

    async def resolve_channel_id(self, source_ref: str) -> Optional[str]:
        """채널 참조 URL을 채널 ID로 해석

        channel id → @handle → 영상 URL → /c/, /user/ 순서로 시도하며,
        각 시도의 실패는 로깅만 하고 다음 후보로 넘어갑니다.

        Args:
            source_ref: 채널/핸들/영상 URL

        Returns:
            채널 ID 또는 None
        """
        for ref in extract_channel_refs(source_ref):
            try:
                channel_id = await self._resolve_ref(ref)
            except ProviderException as e:
                logger.warning(f"[YOUTUBE] Resolve via {ref.kind.value} failed: {e}")
                continue
            except Exception as e:
                logger.error(f"[YOUTUBE] Resolve via {ref.kind.value} crashed: {type(e).__name__}: {e}")
                continue
            if channel_id:
                logger.info(f"[YOUTUBE] Resolved channel via {ref.kind.value}: {channel_id}")
                return channel_id

        logger.info("[YOUTUBE] Could not resolve channel from source_ref")
        return None

    async def _resolve_ref(self, ref: ChannelRef) -> Optional[str]:
        if ref.kind == ChannelRefKind.CHANNEL_ID:
            data = await self._get_json("channels", {"part": "id", "id": ref.value})
            return ref.value if self._first_item(data).get("id") else None

        if ref.kind == ChannelRefKind.HANDLE:
            data = await self._get_json("channels", {"part": "id", "forHandle": ref.value})
            return self._first_item(data).get("id") or None

        if ref.kind == ChannelRefKind.VIDEO:
            data = await self._get_json("videos", {"part": "snippet", "id": ref.value})
            snippet = self._first_item(data).get("snippet") or {}
            return snippet.get("channelId") or None

        data = await self._get_json(
            "search",
            {"part": "snippet", "q": ref.value, "type": "channel", "maxResults": 1},
        )
        snippet = self._first_item(data).get("snippet") or {}
        return snippet.get("channelId") or None

    async def fetch_channel_videos(self, channel_id: str) -> ProviderResult[ChannelVideos]:
        """채널의 최근 영상 조회 (캐시 우선)

        Args:
            channel_id: 채널 ID

        Returns:
            ProviderResult[ChannelVideos]
                - SUCCESS: 영상 1개 이상
                - EMPTY: 업로드 영상 없음
                - FAILED/TIMEOUT: 호출 실패 또는 업로드 재생목록 없음
        """
        started = time.monotonic()
        cache_key = generate_channel_videos_key(channel_id)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            try:
                result = ChannelVideos.model_validate(cached)
                if result.videos:
                    logger.debug(f"[YOUTUBE] Videos cache hit: channel_id={channel_id}")
                    return ProviderResult.ok(PROVIDER, result, elapsed_ms=elapsed_ms_since(started))
            except ValidationError as e:
                logger.warning(f"[YOUTUBE] Invalid cached videos, refetching: {e.error_count()} errors")

        try:
            result = await self._fetch_uncached(channel_id)
        except ProviderTimeoutException as e:
            logger.warning(f"[YOUTUBE] {e}")
            return ProviderResult.timeout(PROVIDER, elapsed_ms=elapsed_ms_since(started))
        except ProviderException as e:
            logger.warning(f"[YOUTUBE] Fetch videos failed: {e}")
            return ProviderResult.failed(PROVIDER, e.message, elapsed_ms=elapsed_ms_since(started))
        except Exception as e:
            logger.error(f"[YOUTUBE] Fetch videos crashed: {type(e).__name__}: {e}", exc_info=True)
            return ProviderResult.failed(PROVIDER, str(e), elapsed_ms=elapsed_ms_since(started))

        if not result.videos:
            return ProviderResult.empty(PROVIDER, result, elapsed_ms=elapsed_ms_since(started))

        await self.cache.set(
            cache_key,
            result.model_dump(mode="json"),
            ttl=self.config.cache_ttl_channel_videos,
        )
        logger.info(f"[YOUTUBE] Fetched {len(result.videos)} videos: channel_id={channel_id}")
        return ProviderResult.ok(PROVIDER, result, elapsed_ms=elapsed_ms_since(started))

    async def _fetch_uncached(self, channel_id: str) -> ChannelVideos:
        channel_data = await self._get_json(
            "channels", {"part": "snippet,contentDetails", "id": channel_id}
        )
        channel = self._first_item(channel_data)
        channel_name = (channel.get("snippet") or {}).get("title") or "Unknown Channel"
        uploads_playlist_id = (
            (channel.get("contentDetails") or {}).get("relatedPlaylists") or {}
        ).get("uploads")

        if not uploads_playlist_id:
            raise ProviderResponseException(PROVIDER, "Could not find uploads playlist")

        playlist_data = await self._get_json(
            "playlistItems",
            {
                "part": "snippet,contentDetails",
                "playlistId": uploads_playlist_id,
                "maxResults": self.config.max_channel_videos,
            },
        )
        video_ids = [
            (item.get("contentDetails") or {}).get("videoId")
            for item in playlist_data.get("items") or []
            if isinstance(item, dict)
        ]
        video_ids = [vid for vid in video_ids if vid]
        if not video_ids:
            return ChannelVideos(channel_name=channel_name, videos=[])

        videos_data = await self._get_json(
            "videos", {"part": "snippet,statistics", "id": ",".join(video_ids)}
        )
        videos = [
            _parse_video(item)
            for item in videos_data.get("items") or []
            if isinstance(item, dict) and item.get("id")
        ]
        return ChannelVideos(channel_name=channel_name, videos=videos)


def _parse_video(item: dict[str, Any]) -> Video:
    snippet = item.get("snippet") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url") or ""
    video_id = item["id"]
    return Video(
        id=video_id,
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        published_at=snippet.get("publishedAt") or "",
        thumbnail=thumbnail,
        url=f"https://www.youtube.com/watch?v={video_id}",
    )
