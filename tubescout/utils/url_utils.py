"""채널 URL 파싱 유틸리티"""
import re
from dataclasses import dataclass
from enum import Enum


class ChannelRefKind(str, Enum):
    """URL에서 인식한 채널 참조 종류 (해석 우선순위 순)"""

    CHANNEL_ID = "channel_id"
    HANDLE = "handle"
    VIDEO = "video"
    CUSTOM_URL = "custom_url"


URL_PATTERNS: dict[ChannelRefKind, re.Pattern[str]] = {
    ChannelRefKind.CHANNEL_ID: re.compile(r"youtube\.com/channel/([a-zA-Z0-9_-]+)"),
    ChannelRefKind.HANDLE: re.compile(r"youtube\.com/@([a-zA-Z0-9_.-]+)"),
    ChannelRefKind.VIDEO: re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/|youtube\.com/shorts/)([a-zA-Z0-9_-]+)"),
    ChannelRefKind.CUSTOM_URL: re.compile(r"youtube\.com/(?:c|user)/([a-zA-Z0-9_-]+)"),
}


@dataclass(frozen=True)
class ChannelRef:
    """URL에서 추출한 채널 참조 후보"""

    kind: ChannelRefKind
    value: str


def extract_channel_refs(url: str) -> list[ChannelRef]:
    """
    URL에서 채널 참조 후보를 우선순위 순으로 추출

    Examples:
        >>> extract_channel_refs("https://www.youtube.com/@veritasium")
        [ChannelRef(kind=<ChannelRefKind.HANDLE: 'handle'>, value='veritasium')]
        >>> extract_channel_refs("https://youtu.be/dQw4w9WgXcQ")
        [ChannelRef(kind=<ChannelRefKind.VIDEO: 'video'>, value='dQw4w9WgXcQ')]
        >>> extract_channel_refs("invalid")
        []

    Args:
        url: 채널/핸들/영상 URL

    Returns:
        ChannelRef 목록 (해석 시도 순서)
    """
    if not url:
        return []

    refs: list[ChannelRef] = []
    for kind, pattern in URL_PATTERNS.items():
        match = pattern.search(url)
        if match:
            refs.append(ChannelRef(kind=kind, value=match.group(1)))
    return refs

