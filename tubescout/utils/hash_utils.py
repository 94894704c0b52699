"""해싱 및 캐시 키 유틸리티"""
import hashlib
from typing import Iterable


REDDIT_TOKEN_CACHE_KEY = "reddit:access_token"


def hash_string(text: str) -> str:
    """
    문자열을 MD5 해시로 변환

    Args:
        text: 해시할 문자열

    Returns:
        MD5 해시 문자열
    """
    return hashlib.md5(text.encode()).hexdigest()


def generate_channel_videos_key(channel_id: str) -> str:
    """
    채널 ID로 영상 목록 캐시 키 생성

    Args:
        channel_id: 채널 ID

    Returns:
        캐시 키
    """
    return f"channel:videos:{channel_id}"


def generate_topics_key(video_ids: Iterable[str]) -> str:
    """영상 ID 집합으로 토픽 분석 캐시 키 생성

    순서와 무관하게 같은 영상 집합이면 같은 키가 나오도록 정렬 후 해시합니다.
    """
    joined = ",".join(sorted(video_ids))
    return f"channel:topics:{hash_string(joined)}"
