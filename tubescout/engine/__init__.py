"""Engine Layer - 파이프라인 실행 엔진

Usage:
    from tubescout.engine import AnalysisOrchestrator, EventChannel

    channel = EventChannel()
    await orchestrator.run(request, client_id, channel)
"""

from .budget import BudgetConfig, BudgetManager
from .cache_adapter import CacheAdapter
from .events import EventChannel, EventType, PartialKind, PipelineEvent
from .orchestrator import AnalysisOrchestrator
from .result import ProviderResult, ProviderStatus

__all__ = [
    "AnalysisOrchestrator",
    "BudgetConfig",
    "BudgetManager",
    "CacheAdapter",
    "EventChannel",
    "EventType",
    "PartialKind",
    "PipelineEvent",
    "ProviderResult",
    "ProviderStatus",
]
