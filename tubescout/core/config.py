"""설정 관리 - 환경 변수 로드 및 검증"""
from pydantic_settings import BaseSettings
from pydantic import field_validator


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 외부 API 자격 증명
    youtube_api_key: str = ""
    openai_api_key: str = ""
    news_api_key: str = ""
    reddit_client_id: str = ""
    reddit_client_secret: str = ""
    reddit_user_agent: str = "TubeScout/1.0"

    # LLM
    openai_model: str = "gpt-4o-mini"

    # Redis (비어 있으면 인메모리 캐시 사용)
    redis_url: str = ""

    # 캐시 TTL (초)
    cache_ttl_channel_videos: int = 3600  # 1시간
    cache_ttl_topic_analysis: int = 86400  # 24시간
    cache_sweep_interval_s: float = 60.0

    # Rate limit (고정 윈도우)
    # - IP(호출자) 단위: 느슨하게
    # - 채널(리소스) 단위: 더 엄격하게
    rate_limit_ip_max_requests: int = 10
    rate_limit_ip_window_s: int = 60
    rate_limit_channel_max_requests: int = 5
    rate_limit_channel_window_s: int = 300
    rate_limit_sweep_interval_s: float = 60.0

    # 외부 호출 타임아웃 (초)
    youtube_timeout_s: float = 10.0
    news_timeout_s: float = 10.0
    reddit_token_timeout_s: float = 10.0
    reddit_oauth_timeout_s: float = 10.0
    reddit_public_timeout_s: float = 20.0
    openai_timeout_s: float = 60.0

    # 결과 크기 제한
    max_channel_videos: int = 10
    max_search_topics: int = 3
    news_page_size: int = 10
    forum_posts_per_topic: int = 5
    max_forum_posts: int = 15
    prompt_description_chars: int = 500

    # 파이프라인 전체 예산 (초)
    pipeline_total_budget_s: float = 300.0

    # API
    api_title: str = "TubeScout"
    api_version: str = "1.0.0"
    api_description: str = "채널의 최근 영상을 분석해 영상 아이디어를 스트리밍으로 생성합니다."

    # 로깅
    log_level: str = "INFO"

    @field_validator(
        "cache_ttl_channel_videos",
        "cache_ttl_topic_analysis",
    )
    @classmethod
    def validate_cache_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache ttl must be positive")
        return v

    @field_validator(
        "rate_limit_ip_max_requests",
        "rate_limit_ip_window_s",
        "rate_limit_channel_max_requests",
        "rate_limit_channel_window_s",
    )
    @classmethod
    def validate_rate_limits(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("rate limit settings must be positive")
        return v

    @field_validator(
        "youtube_timeout_s",
        "news_timeout_s",
        "reddit_token_timeout_s",
        "reddit_oauth_timeout_s",
        "reddit_public_timeout_s",
        "openai_timeout_s",
        "cache_sweep_interval_s",
        "rate_limit_sweep_interval_s",
    )
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts and intervals must be positive")
        return v

    @field_validator("pipeline_total_budget_s")
    @classmethod
    def validate_pipeline_budget(cls, v: float) -> float:
        # BudgetConfig.min_remaining(1초)보다 커야 단계를 하나라도 시작할 수 있음
        if v <= 1.0:
            raise ValueError("pipeline_total_budget_s must be greater than 1 second")
        return v

    @field_validator("max_forum_posts", "max_search_topics", "max_channel_videos")
    @classmethod
    def validate_bounds(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("result bounds must be positive")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
