"""Pydantic 스키마 정의 (Security & Validation Enhanced)"""
from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


class AnalysisRequest(BaseModel):
    """채널 분석 요청 (생성 후 불변)"""
    model_config = ConfigDict(frozen=True)

    source_ref: str = Field("", max_length=2048, description="채널/핸들/영상 URL (빈 값은 파이프라인에서 error 이벤트로 처리)")

    @field_validator('source_ref')
    @classmethod
    def validate_source_ref(cls, v: str) -> str:
        """채널 참조 검증: 제어 문자 제한"""
        for char in ['\0', '\n', '\r']:
            if char in v:
                raise ValueError('URL에 허용되지 않는 문자가 포함되어 있습니다')
        return v.strip()


class Video(BaseModel):
    """채널의 최근 영상"""
    id: str = Field(..., description="영상 ID")
    title: str = Field("", description="제목")
    description: str = Field("", description="설명")
    published_at: str = Field("", description="게시 시각 (ISO 8601)")
    thumbnail: str = Field("", description="썸네일 URL")
    url: str = Field("", description="영상 URL")


class ChannelVideos(BaseModel):
    """채널 영상 목록 (videos 단계 결과)"""
    channel_name: str = Field("Unknown Channel", description="채널명")
    videos: List[Video] = Field(default_factory=list, description="최근 영상 (최대 10개)")


class TopicAnalysis(BaseModel):
    """토픽 분석 결과 (topics 단계 결과)"""
    topics: List[str] = Field(default_factory=list, description="주요 토픽/키워드")
    summary: str = Field("", description="채널 요약")


class NewsArticle(BaseModel):
    """관련 뉴스 기사"""
    title: str
    url: str
    source: str = "Unknown"
    published_at: str = ""


class ForumPost(BaseModel):
    """포럼(Reddit) 게시글"""
    title: str
    url: str = Field(..., description="정규화된 게시글 URL (중복 제거 키)")
    subreddit: str = "unknown"
    score: int = 0
    created: float = 0.0


class VideoIdea(BaseModel):
    """생성된 영상 아이디어"""
    title: str = ""
    thumb_design: str = ""
    video_idea: str = ""


class HealthResponse(BaseModel):
    """헬스 체크 응답"""
    status: str = Field(..., description="ok | degraded")
    cache_backend: str = Field(..., description="memory | redis")
    timestamp: datetime
    version: str
