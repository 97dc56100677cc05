"""饲养箱、清洁计划与清洁记录数据模型。"""
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field

from scalekeeper.config import DEFAULT_REMINDER_ADVANCE_DAYS
from scalekeeper.dates import days_between, now
from scalekeeper.store.models import Record


class EnclosureType(str, Enum):
    """饲养箱类型。"""
    TERRARIUM = "terrarium"
    VIVARIUM = "vivarium"
    RACK = "rack_tub"
    AQUARIUM = "aquarium"
    PALUDARIUM = "paludarium"
    OUTDOOR = "outdoor"
    FREE_ROAM = "free_roam"
    OTHER = "other"


class CleaningType(str, Enum):
    """清洁类型。"""
    SPOT_CLEAN = "spot_clean"
    SUBSTRATE_CHANGE = "substrate_change"
    DEEP_CLEAN = "deep_clean"
    WATER_CHANGE = "water_change"
    BIOACTIVE_MAINTENANCE = "bioactive_maintenance"
    CUSTOM = "custom"

    @property
    def default_interval_days(self) -> int:
        return _DEFAULT_INTERVALS[self]

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()


_DEFAULT_INTERVALS = {
    CleaningType.SPOT_CLEAN: 3,
    CleaningType.SUBSTRATE_CHANGE: 30,
    CleaningType.DEEP_CLEAN: 90,
    CleaningType.WATER_CHANGE: 7,
    CleaningType.BIOACTIVE_MAINTENANCE: 14,
    CleaningType.CUSTOM: 30,
}


class Enclosure(Record):
    """饲养箱。"""
    collection: ClassVar[str] = "enclosures"

    name: str = Field(..., description="名称")
    enclosure_type: EnclosureType = Field(EnclosureType.TERRARIUM, description="类型")
    location: Optional[str] = Field(None, description="摆放位置")
    is_bioactive: bool = Field(False, description="是否生态缸")
    last_deep_clean: Optional[datetime] = Field(None, description="上次深度清洁时间")
    notes: Optional[str] = Field(None, description="备注")
    updated_at: datetime = Field(default_factory=now, description="更新时间")


class CleaningSchedule(Record):
    """某饲养箱某类清洁的计划；每个 (enclosure_id, cleaning_type) 至多一条。"""
    collection: ClassVar[str] = "cleaning_schedules"

    enclosure_id: str = Field(..., min_length=1, description="饲养箱 ID")
    cleaning_type: CleaningType = Field(..., description="清洁类型")
    interval_days: int = Field(..., gt=0, description="间隔天数")
    reminder_enabled: bool = Field(True, description="是否提醒")
    reminder_advance_days: int = Field(DEFAULT_REMINDER_ADVANCE_DAYS, ge=0, description="提前几天提醒")


class CleaningEvent(Record):
    """一次清洁。"""
    collection: ClassVar[str] = "cleaning_events"

    enclosure_id: str = Field(..., min_length=1, description="饲养箱 ID")
    cleaned_at: datetime = Field(default_factory=now, description="清洁时间")
    cleaning_type: CleaningType = Field(..., description="清洁类型")
    notes: Optional[str] = Field(None, description="备注")
    supplies_used: List[str] = Field(default_factory=list, description="使用的耗材")


class CleaningUrgency(str, Enum):
    """清洁紧迫程度（读取时计算，不落盘）。"""
    ON_TRACK = "on_track"
    DUE_SOON = "due_soon"
    OVERDUE = "overdue"


class CleaningStatus(BaseModel):
    """某饲养箱某类清洁在 as_of 时刻的状态。"""
    enclosure_id: str
    enclosure_name: str
    cleaning_type: CleaningType
    last_cleaned: Optional[datetime] = None
    interval_days: int
    reminder_advance_days: int = DEFAULT_REMINDER_ADVANCE_DAYS
    as_of: datetime

    @property
    def days_since_last_clean(self) -> Optional[int]:
        if self.last_cleaned is None:
            return None
        return days_between(self.last_cleaned, self.as_of)

    @property
    def days_until_due(self) -> int:
        days = self.days_since_last_clean
        if days is None:
            return 0
        return self.interval_days - days

    @property
    def urgency(self) -> CleaningUrgency:
        days = self.days_since_last_clean
        # 从未清洁过视为已逾期
        if days is None or days >= self.interval_days:
            return CleaningUrgency.OVERDUE
        if days >= self.interval_days - self.reminder_advance_days:
            return CleaningUrgency.DUE_SOON
        return CleaningUrgency.ON_TRACK


class CleaningBoard(BaseModel):
    """一次清洁汇总扫描的结果。"""
    overdue: List[CleaningStatus] = Field(default_factory=list)
    due_soon: List[CleaningStatus] = Field(default_factory=list)
    needing_attention: List[CleaningStatus] = Field(default_factory=list)
    generation: int = 0
    refreshed_at: Optional[datetime] = None
