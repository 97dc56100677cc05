"""饲养箱与清洁计划。"""
from scalekeeper.enclosures.models import (
    CleaningBoard,
    CleaningEvent,
    CleaningSchedule,
    CleaningStatus,
    CleaningType,
    CleaningUrgency,
    Enclosure,
    EnclosureType,
)

__all__ = [
    "CleaningBoard",
    "CleaningEvent",
    "CleaningSchedule",
    "CleaningStatus",
    "CleaningType",
    "CleaningUrgency",
    "Enclosure",
    "EnclosureType",
]
