"""API/도메인 스키마 - export only."""

from .analysis_schema import (
    AnalysisRequest,
    ChannelVideos,
    ForumPost,
    HealthResponse,
    NewsArticle,
    TopicAnalysis,
    Video,
    VideoIdea,
)

__all__ = [
    "AnalysisRequest",
    "ChannelVideos",
    "ForumPost",
    "HealthResponse",
    "NewsArticle",
    "TopicAnalysis",
    "Video",
    "VideoIdea",
]
