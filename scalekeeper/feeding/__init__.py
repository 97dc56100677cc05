"""喂食记录、喂食状态与饥饿分析。"""
from scalekeeper.feeding.models import (
    FeedingBoard,
    FeedingEvent,
    FeedingInsight,
    FeedingResponse,
    FeedingStats,
    FeedingStatus,
    FeedingStatusKind,
    HungerDuration,
    HungerUrgency,
    PreySize,
    PreyState,
    PreyType,
)

__all__ = [
    "FeedingBoard",
    "FeedingEvent",
    "FeedingInsight",
    "FeedingResponse",
    "FeedingStats",
    "FeedingStatus",
    "FeedingStatusKind",
    "HungerDuration",
    "HungerUrgency",
    "PreySize",
    "PreyState",
    "PreyType",
]
