"""Pipeline Events - 오케스트레이터가 생산하고 전송 계층이 소비하는 이벤트

- PipelineEvent: status / partial / error / complete 태그 이벤트
- EventChannel: asyncio.Queue 기반 단일 생산자/단일 소비자 채널

오케스트레이터는 채널에 이벤트를 넣기만 하고, 전송(SSE) 쪽은 채널을 순회합니다.
소비자가 떠난 뒤(close) send는 조용히 무시됩니다.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Optional

from tubescout.core.logging import logger


class EventType(str, Enum):
    """이벤트 종류"""

    STATUS = "status"
    PARTIAL = "partial"
    ERROR = "error"
    COMPLETE = "complete"


class PartialKind(str, Enum):
    """partial 이벤트의 단계 종류"""

    VIDEOS = "videos"
    TOPICS = "topics"
    NEWS = "news"
    FORUM = "forum"
    IDEAS = "ideas"


@dataclass(frozen=True)
class PipelineEvent:
    """파이프라인 이벤트

    Attributes:
        type: 이벤트 종류
        message: status/error 메시지
        kind: partial 단계 종류
        data: partial 페이로드 (JSON 직렬화 가능)
        reset_at: rate limit 리셋 시각 (epoch 초, error 전용)
    """

    type: EventType
    message: Optional[str] = None
    kind: Optional[PartialKind] = None
    data: Any = None
    reset_at: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.type in (EventType.COMPLETE, EventType.ERROR)

    @classmethod
    def status(cls, message: str) -> "PipelineEvent":
        return cls(type=EventType.STATUS, message=message)

    @classmethod
    def partial(cls, kind: PartialKind, data: Any) -> "PipelineEvent":
        return cls(type=EventType.PARTIAL, kind=kind, data=data)

    @classmethod
    def error(cls, message: str, reset_at: Optional[float] = None) -> "PipelineEvent":
        return cls(type=EventType.ERROR, message=message, reset_at=reset_at)

    @classmethod
    def complete(cls) -> "PipelineEvent":
        return cls(type=EventType.COMPLETE)

    def to_dict(self) -> dict[str, Any]:
        """전송용 dict 변환 (None 필드 제외)"""
        payload: dict[str, Any] = {"type": self.type.value}
        if self.type == EventType.PARTIAL:
            payload["kind"] = self.kind.value if self.kind else None
            payload["data"] = self.data
        elif self.type in (EventType.STATUS, EventType.ERROR):
            payload["message"] = self.message
            if self.reset_at is not None:
                payload["reset_at"] = self.reset_at
        return payload

    def to_sse(self) -> str:
        """Server-Sent Events 프레임 문자열"""
        return f"data: {json.dumps(self.to_dict(), ensure_ascii=False)}\n\n"


_CLOSED = object()


class EventChannel:
    """파이프라인 이벤트 채널

    Usage:
        channel = EventChannel()
        task = asyncio.create_task(orchestrator.run(request, client_id, channel))
        async for event in channel:
            ...
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: PipelineEvent) -> bool:
        """이벤트 전송

        Returns:
            전달 여부 (닫힌 채널이면 False, 예외 없음)
        """
        if self._closed:
            self.dropped += 1
            logger.debug(f"[CHANNEL] Dropped event on closed channel: type={event.type.value}")
            return False
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        """채널 닫기 (중복 호출 허용)

        이미 넣은 이벤트는 소비자가 끝까지 읽을 수 있습니다.
        """
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> AsyncIterator[PipelineEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[PipelineEvent]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item
