"""외부 제공자 어댑터 패키지.

모든 어댑터는 예외 대신 ProviderResult(또는 None)를 반환합니다.
"""

from .completion import CompletionClient, IdeaGenerator, TopicAnalyzer
from .forum import ForumSearchClient
from .http_client import get_shared_http_client, shutdown_shared_http_client
from .news import NewsClient
from .youtube import YouTubeClient

__all__ = [
    "CompletionClient",
    "ForumSearchClient",
    "IdeaGenerator",
    "NewsClient",
    "TopicAnalyzer",
    "YouTubeClient",
    "get_shared_http_client",
    "shutdown_shared_http_client",
]
