"""蜕皮、健康记录与冬眠周期。"""
from scalekeeper.health.models import (
    BrumationCycle,
    BrumationPhase,
    BrumationStatus,
    HealthNote,
    HealthNoteType,
    HealthSeverity,
    ShedCycleInfo,
    ShedIssue,
    ShedQuality,
    ShedRecord,
)

__all__ = [
    "BrumationCycle",
    "BrumationPhase",
    "BrumationStatus",
    "HealthNote",
    "HealthNoteType",
    "HealthSeverity",
    "ShedCycleInfo",
    "ShedIssue",
    "ShedQuality",
    "ShedRecord",
]
