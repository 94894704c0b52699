"""Analysis Orchestrator - Main Engine Entry Point

Coordinates the channel analysis pipeline:
1. Rate check (caller) / input check
2. Channel resolve → rate check (channel)
3. Videos → Topics
4. News ∥ Forum (best-effort)
5. Ideas → complete

각 단계의 결과는 끝나는 즉시 partial 이벤트로 내보내고,
실행당 정확히 하나의 종료 이벤트(complete 또는 error)를 보낸 뒤 채널을 닫습니다.
"""

import asyncio
from datetime import datetime
from typing import Any, Optional

from tubescout.core.config import Settings, settings as default_settings
from tubescout.core.exceptions import (
    ChannelNotResolvedException,
    InvalidSourceRefException,
    MissingCredentialsException,
    PipelineException,
    RateLimitExceededException,
    StageFailedException,
)
from tubescout.core.logging import logger, sanitize_for_log
from tubescout.core.security import SecurityValidator
from tubescout.schemas import AnalysisRequest, ChannelVideos, ForumPost, NewsArticle, TopicAnalysis

from .budget import BudgetConfig, BudgetManager
from .events import EventChannel, PartialKind, PipelineEvent
from .result import ProviderResult, ProviderStatus

STATUS_FETCHING_VIDEOS = "Fetching channel videos..."
STATUS_ANALYZING_TOPICS = "Analyzing topics..."
STATUS_FETCHING_CONTEXT = "Fetching news and forum discussions..."
STATUS_GENERATING_IDEAS = "Generating video ideas..."

CHANNEL_RATE_LIMIT_MESSAGE = "Too many requests for this channel. Please try again later."


def format_rate_limit_message(reset_at: float) -> str:
    """호출자 rate limit 메시지 (리셋 시각 HH:MM:SS, 로컬 시간)"""
    return f"Rate limit exceeded. Please try again after {datetime.fromtimestamp(reset_at):%H:%M:%S}"


class AnalysisOrchestrator:
    """채널 분석 파이프라인 오케스트레이터

    어댑터는 예외 대신 ProviderResult를 돌려주므로 단계 판단은 상태값으로 합니다.
    치명적 상황은 내부적으로 PipelineException을 던지고 run()이 최상단에서
    단 하나의 error 이벤트로 바꿉니다.
    """

    def __init__(
        self,
        youtube,
        topic_analyzer,
        idea_generator,
        news,
        forum,
        rate_limiter,
        config: Optional[Settings] = None,
        budget_config: Optional[BudgetConfig] = None,
    ):
        """
        Args:
            youtube: YouTube 어댑터 (is_configured, resolve_channel_id, fetch_channel_videos)
            topic_analyzer: 토픽 분석기 (is_configured, analyze)
            idea_generator: 아이디어 생성기 (generate)
            news: 뉴스 어댑터 (fetch_relevant_news)
            forum: 포럼 어댑터 (search_posts)
            rate_limiter: RateLimiter
            config: 설정 (기본: 전역 settings)
            budget_config: 실행 예산 (기본: settings.pipeline_total_budget_s)
        """
        if youtube is None:
            raise ValueError("youtube must not be None")
        if topic_analyzer is None or idea_generator is None:
            raise ValueError("topic_analyzer and idea_generator must not be None")
        if rate_limiter is None:
            raise ValueError("rate_limiter must not be None")

        self.youtube = youtube
        self.topic_analyzer = topic_analyzer
        self.idea_generator = idea_generator
        self.news = news
        self.forum = forum
        self.rate_limiter = rate_limiter
        self.config = config or default_settings
        self.budget_config = budget_config or BudgetConfig(
            total_budget=float(self.config.pipeline_total_budget_s)
        )

    async def run(self, request: AnalysisRequest, client_id: str, channel: EventChannel) -> None:
        """파이프라인 1회 실행

        예외를 던지지 않습니다. 모든 결과는 channel로 전달되고,
        종료 시 channel은 항상 닫힙니다.

        Args:
            request: 분석 요청
            client_id: 호출자 식별자 (IP 등)
            channel: 이벤트 채널
        """
        budget = BudgetManager(self.budget_config)
        budget.start()
        logger.info(f"[PIPELINE] Run started: client={sanitize_for_log(client_id)}")

        try:
            await self._run_stages(request, client_id, channel, budget)
            channel.send(PipelineEvent.complete())
            logger.info(f"[PIPELINE] Run completed in {budget.elapsed():.2f}s")
        except RateLimitExceededException as e:
            logger.warning(f"[PIPELINE] {e}")
            channel.send(PipelineEvent.error(e.message, reset_at=e.reset_at))
        except PipelineException as e:
            logger.warning(f"[PIPELINE] Run ended: {e}")
            channel.send(PipelineEvent.error(e.message))
        except asyncio.CancelledError:
            logger.info("[PIPELINE] Run cancelled")
            raise
        except Exception as e:
            logger.error(f"[PIPELINE] Run crashed: {type(e).__name__}: {e}", exc_info=True)
            channel.send(PipelineEvent.error(str(e) or type(e).__name__))
        finally:
            channel.close()
            logger.debug(f"[PIPELINE] Budget report: {budget.get_report()}")

    async def _run_stages(
        self,
        request: AnalysisRequest,
        client_id: str,
        channel: EventChannel,
        budget: BudgetManager,
    ) -> None:
        self._check_rate(
            f"ip:{client_id}",
            self.config.rate_limit_ip_max_requests,
            self.config.rate_limit_ip_window_s,
            channel_scope=False,
        )
        self._check_inputs(request)

        channel.send(PipelineEvent.status(STATUS_FETCHING_VIDEOS))
        channel_id = await budget.run_stage("resolve", self.youtube.resolve_channel_id, request.source_ref)
        if not channel_id:
            raise ChannelNotResolvedException(request.source_ref)

        self._check_rate(
            f"channel:{channel_id}",
            self.config.rate_limit_channel_max_requests,
            self.config.rate_limit_channel_window_s,
            channel_scope=True,
        )

        videos = await budget.run_stage("videos", self._fetch_videos, channel_id)
        channel.send(
            PipelineEvent.partial(
                PartialKind.VIDEOS,
                {
                    "videos": [v.model_dump(mode="json") for v in videos.videos],
                    "channel_name": videos.channel_name,
                },
            )
        )

        channel.send(PipelineEvent.status(STATUS_ANALYZING_TOPICS))
        analysis = await budget.run_stage("topics", self._analyze_topics, videos)
        channel.send(PipelineEvent.partial(PartialKind.TOPICS, analysis.model_dump(mode="json")))

        channel.send(PipelineEvent.status(STATUS_FETCHING_CONTEXT))
        news, forum_posts = await budget.run_stage("context", self._gather_context, analysis.topics)
        if news:
            channel.send(PipelineEvent.partial(PartialKind.NEWS, [n.model_dump(mode="json") for n in news]))
        if forum_posts:
            channel.send(
                PipelineEvent.partial(PartialKind.FORUM, [p.model_dump(mode="json") for p in forum_posts])
            )

        channel.send(PipelineEvent.status(STATUS_GENERATING_IDEAS))
        result = await budget.run_stage(
            "ideas", self.idea_generator.generate, videos.videos, analysis.topics, news, forum_posts
        )
        if result.is_error or result.status == ProviderStatus.SKIPPED:
            raise StageFailedException("ideas", f"Failed to generate video ideas: {result.error_message}")
        ideas = result.value or []
        channel.send(PipelineEvent.partial(PartialKind.IDEAS, [i.model_dump(mode="json") for i in ideas]))

    def _check_rate(self, identity: str, max_requests: int, window_seconds: float, channel_scope: bool) -> None:
        result = self.rate_limiter.check(identity, max_requests, window_seconds)
        if result.allowed:
            return
        if channel_scope:
            raise RateLimitExceededException(CHANNEL_RATE_LIMIT_MESSAGE, result.reset_at)
        raise RateLimitExceededException(format_rate_limit_message(result.reset_at), result.reset_at)

    def _check_inputs(self, request: AnalysisRequest) -> None:
        try:
            SecurityValidator.validate_source_ref(request.source_ref)
        except ValueError as e:
            raise InvalidSourceRefException(str(e))

        missing = []
        if not self.youtube.is_configured:
            missing.append("YOUTUBE_API_KEY")
        if not self.topic_analyzer.is_configured:
            missing.append("OPENAI_API_KEY")
        if missing:
            raise MissingCredentialsException(missing)

    async def _fetch_videos(self, channel_id: str) -> ChannelVideos:
        result: ProviderResult[ChannelVideos] = await self.youtube.fetch_channel_videos(channel_id)
        if result.is_error:
            raise StageFailedException("videos", f"Failed to fetch channel videos: {result.error_message}")
        if not result.is_success or result.value is None or not result.value.videos:
            raise StageFailedException("videos", "No videos found for this channel")
        return result.value

    async def _analyze_topics(self, videos: ChannelVideos) -> TopicAnalysis:
        result: ProviderResult[TopicAnalysis] = await self.topic_analyzer.analyze(videos.videos)
        if not result.is_success or result.value is None:
            raise StageFailedException("topics", f"Failed to analyze topics: {result.error_message}")
        return result.value

    async def _gather_context(self, topics: list[str]) -> tuple[list[NewsArticle], list[ForumPost]]:
        """뉴스 ∥ 포럼 동시 실행 (한쪽의 실패가 다른 쪽에 영향 없음)"""
        news_outcome, forum_outcome = await asyncio.gather(
            self._call_optional(self.news, "fetch_relevant_news", topics),
            self._call_optional(self.forum, "search_posts", topics),
            return_exceptions=True,
        )
        return (
            self._best_effort("news", news_outcome),
            self._best_effort("forum", forum_outcome),
        )

    @staticmethod
    async def _call_optional(provider: Any, method: str, topics: list[str]) -> Optional[ProviderResult]:
        if provider is None:
            return None
        return await getattr(provider, method)(topics)

    @staticmethod
    def _best_effort(name: str, outcome: Any) -> list:
        if isinstance(outcome, BaseException):
            logger.warning(f"[PIPELINE] {name} stage raised, continuing without it: {type(outcome).__name__}: {outcome}")
            return []
        if outcome is None:
            return []
        if not outcome.is_success:
            if outcome.is_error:
                logger.warning(f"[PIPELINE] {name} stage {outcome.status.value}: {outcome.error_message}")
            return []
        return list(outcome.value or [])
