"""OpenAI 기반 Completion 어댑터 (토픽 분석 / 영상 아이디어 생성)

- CompletionClient: JSON 응답 요청 + 방어적 파싱 (예외 없음)
- TopicAnalyzer: 영상 목록 → TopicAnalysis (24시간 캐시)
- IdeaGenerator: 영상/토픽/뉴스/포럼 → VideoIdea 목록

모델 출력은 반복 실행 시 같다는 보장이 없으므로 구조적 유효성만 보장합니다.
필드가 없거나 타입이 틀리면 해당 필드는 빈 기본값이 됩니다.
"""

from __future__ import annotations

import json
import time
from typing import Any, Optional

from openai import APITimeoutError, AsyncOpenAI, OpenAIError

from tubescout.core.config import Settings, settings as default_settings
from tubescout.core.logging import logger
from tubescout.engine.cache_adapter import CacheAdapter
from tubescout.engine.result import ProviderResult, elapsed_ms_since
from tubescout.schemas import ForumPost, NewsArticle, TopicAnalysis, Video, VideoIdea
from tubescout.utils.hash_utils import generate_topics_key

PROVIDER = "completion"

TOPIC_SYSTEM_PROMPT = (
    "You are an expert at analyzing YouTube content and identifying topics. "
    "Always respond with valid JSON."
)

IDEA_SYSTEM_PROMPT = (
    "You are an expert YouTube content strategist. Always respond with valid JSON."
)


class CompletionClient:
    """Chat completion 호출 래퍼

    complete_json()은 예외를 던지지 않습니다.
    """

    def __init__(self, config: Optional[Settings] = None, openai_client: Optional[AsyncOpenAI] = None):
        """
        Args:
            config: 설정 (기본: 전역 settings)
            openai_client: AsyncOpenAI 인스턴스 (테스트 주입용, 없으면 API 키로 생성)
        """
        self.config = config or default_settings
        self._client = openai_client
        if self._client is None and self.config.openai_api_key:
            self._client = AsyncOpenAI(
                api_key=self.config.openai_api_key,
                timeout=self.config.openai_timeout_s,
                max_retries=1,
            )

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def complete_json(self, system_prompt: str, user_prompt: str) -> ProviderResult[dict[str, Any]]:
        """JSON 객체 응답 요청

        Returns:
            ProviderResult[dict]
                - SUCCESS: 파싱된 dict (형식 오류면 빈 dict)
                - FAILED/TIMEOUT: 호출 실패
        """
        if self._client is None:
            return ProviderResult.skipped(PROVIDER, "OPENAI_API_KEY not configured")

        started = time.monotonic()
        try:
            completion = await self._client.chat.completions.create(
                model=self.config.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
            )
        except APITimeoutError:
            logger.warning(f"[COMPLETION] Timeout after {self.config.openai_timeout_s}s")
            return ProviderResult.timeout(PROVIDER, elapsed_ms=elapsed_ms_since(started))
        except OpenAIError as e:
            logger.warning(f"[COMPLETION] Request failed: {type(e).__name__}: {e}")
            return ProviderResult.failed(PROVIDER, str(e), elapsed_ms=elapsed_ms_since(started))
        except Exception as e:
            logger.error(f"[COMPLETION] Request crashed: {type(e).__name__}: {e}", exc_info=True)
            return ProviderResult.failed(PROVIDER, str(e), elapsed_ms=elapsed_ms_since(started))

        return ProviderResult.ok(PROVIDER, _parse_json_content(completion), elapsed_ms=elapsed_ms_since(started))


def _parse_json_content(completion: Any) -> dict[str, Any]:
    """completion 응답의 첫 메시지를 dict로 파싱 (실패 시 빈 dict)"""
    try:
        content = completion.choices[0].message.content
    except (AttributeError, IndexError, TypeError):
        logger.warning("[COMPLETION] Response has no message content")
        return {}
    if not content:
        return {}
    try:
        parsed = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning(f"[COMPLETION] Malformed JSON content: {e}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _truncate(text: str, limit: int) -> str:
    return text[:limit] if text else ""


def build_topic_prompt(videos: list[Video], description_chars: int) -> str:
    video_titles = "\n".join(v.title for v in videos)
    video_descriptions = "\n".join(_truncate(v.description, description_chars) for v in videos)
    return f"""Analyze the following YouTube videos from a channel and identify the main topics covered.

Video Titles:
{video_titles}

Video Descriptions (first {description_chars} chars each):
{video_descriptions}

Please provide:
1. A list of 5-10 main topics/keywords that this channel covers
2. A brief summary (2-3 sentences) of the channel's content focus

Respond in JSON format:
{{
  "topics": ["topic1", "topic2", ...],
  "summary": "brief summary here"
}}"""


def build_idea_prompt(
    videos: list[Video],
    topics: list[str],
    news: list[NewsArticle],
    forum_posts: list[ForumPost],
) -> str:
    video_titles = "\n".join(v.title for v in videos)
    news_titles = "\n".join(n.title for n in news)
    forum_titles = "\n".join(p.title for p in forum_posts)
    return f"""Based on the following information, generate 5 potential video ideas for this YouTube channel.

Recent Video Titles (to understand the style):
{video_titles}

Main Topics Covered:
{", ".join(topics)}

Recent Relevant News:
{news_titles or "No recent news found"}

Forum Discussions:
{forum_titles or "No forum discussions found"}

Generate 5 video ideas that:
1. Match the channel's content style and topics
2. Are relevant to current news and discussions
3. Have engaging titles in the same style as the existing videos
4. Include thumbnail design suggestions
5. Include a detailed video idea/outline

Respond in JSON format:
{{
  "ideas": [
    {{
      "title": "Video title in the same style",
      "thumbDesign": "Description of thumbnail design (colors, text, imagery)",
      "videoIdea": "Detailed video idea and outline"
    }}
  ]
}}"""


def parse_topic_analysis(payload: dict[str, Any]) -> TopicAnalysis:
    raw_topics = payload.get("topics")
    topics = [t.strip() for t in raw_topics if isinstance(t, str) and t.strip()] if isinstance(raw_topics, list) else []
    summary = payload.get("summary")
    return TopicAnalysis(topics=topics, summary=summary if isinstance(summary, str) else "")


def _str_field(raw: dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str):
            return value
    return ""


def parse_video_ideas(payload: dict[str, Any]) -> list[VideoIdea]:
    raw_ideas = payload.get("ideas")
    if not isinstance(raw_ideas, list):
        return []
    return [
        VideoIdea(
            title=_str_field(raw, "title"),
            thumb_design=_str_field(raw, "thumbDesign", "thumb_design"),
            video_idea=_str_field(raw, "videoIdea", "video_idea"),
        )
        for raw in raw_ideas
        if isinstance(raw, dict)
    ]


class TopicAnalyzer:
    """영상 목록 → 토픽 분석 (같은 영상 집합은 캐시 재사용)"""

    def __init__(self, completion: CompletionClient, cache: CacheAdapter, config: Optional[Settings] = None):
        self.completion = completion
        self.cache = cache
        self.config = config or default_settings

    @property
    def is_configured(self) -> bool:
        return self.completion.is_configured

    async def analyze(self, videos: list[Video]) -> ProviderResult[TopicAnalysis]:
        cache_key = generate_topics_key(v.id for v in videos)
        cached = await self.cache.get(cache_key)
        if isinstance(cached, dict):
            logger.debug("[TOPICS] Cache hit")
            return ProviderResult.ok(PROVIDER, parse_topic_analysis(cached))

        prompt = build_topic_prompt(videos, self.config.prompt_description_chars)
        result = await self.completion.complete_json(TOPIC_SYSTEM_PROMPT, prompt)
        if not result.is_success:
            return ProviderResult(
                status=result.status,
                provider=PROVIDER,
                error_message=result.error_message,
                elapsed_ms=result.elapsed_ms,
            )

        analysis = parse_topic_analysis(result.value or {})
        if analysis.topics:
            await self.cache.set(
                cache_key, analysis.model_dump(mode="json"), ttl=self.config.cache_ttl_topic_analysis
            )
        logger.info(f"[TOPICS] Extracted {len(analysis.topics)} topics")
        return ProviderResult.ok(PROVIDER, analysis, elapsed_ms=result.elapsed_ms)


class IdeaGenerator:
    """영상 아이디어 생성 (뉴스/포럼이 비어 있어도 동작)"""

    def __init__(self, completion: CompletionClient):
        self.completion = completion

    async def generate(
        self,
        videos: list[Video],
        topics: list[str],
        news: list[NewsArticle],
        forum_posts: list[ForumPost],
    ) -> ProviderResult[list[VideoIdea]]:
        prompt = build_idea_prompt(videos, topics, news, forum_posts)
        result = await self.completion.complete_json(IDEA_SYSTEM_PROMPT, prompt)
        if not result.is_success:
            return ProviderResult(
                status=result.status,
                provider=PROVIDER,
                error_message=result.error_message,
                elapsed_ms=result.elapsed_ms,
            )

        ideas = parse_video_ideas(result.value or {})
        logger.info(f"[IDEAS] Generated {len(ideas)} ideas")
        return ProviderResult.ok(PROVIDER, ideas, elapsed_ms=result.elapsed_ms)
