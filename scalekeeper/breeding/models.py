"""繁殖配对与窝卵数据模型。"""
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import Field

from scalekeeper.dates import days_between, now
from scalekeeper.store.models import AwareModel, Record, new_id


class PairingStatus(str, Enum):
    """配对状态；ACTIVE 之外均为终态。"""
    ACTIVE = "active"
    SUCCESSFUL = "successful"
    UNSUCCESSFUL = "unsuccessful"
    CANCELLED = "cancelled"


class LockObservation(AwareModel):
    """一次交配观察。"""
    id: str = Field(default_factory=new_id)
    observed_at: datetime = Field(default_factory=now)
    duration_minutes: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class Pairing(Record):
    """一对繁殖个体。"""
    collection: ClassVar[str] = "pairings"

    male_id: str = Field(..., min_length=1, description="公体 ID")
    female_id: str = Field(..., min_length=1, description="母体 ID")
    introduction_date: datetime = Field(default_factory=now, description="合笼时间")
    separation_date: Optional[datetime] = Field(None, description="分笼时间")
    breeding_season: Optional[str] = Field(None, description="繁殖季，如 2024-2025")
    locks: List[LockObservation] = Field(default_factory=list, description="交配观察")
    status: PairingStatus = Field(PairingStatus.ACTIVE, description="状态")
    notes: Optional[str] = Field(None, description="备注")
    updated_at: datetime = Field(default_factory=now, description="更新时间")


class ClutchStatus(str, Enum):
    """孵化进度；HATCHED / FAILED 为终态。"""
    INCUBATING = "incubating"
    PIPPING = "pipping"
    HATCHING = "hatching"
    HATCHED = "hatched"
    FAILED = "failed"


class IncubationMethod(str, Enum):
    """孵化方式。"""
    INCUBATOR = "incubator"
    MATERNAL = "maternal"
    ROOM_TEMPERATURE = "room_temp"
    SUSPENDED = "suspended"
    OTHER = "other"


class Clutch(Record):
    """一窝卵。"""
    collection: ClassVar[str] = "clutches"

    pairing_id: str = Field(..., min_length=1, description="配对 ID")
    lay_date: datetime = Field(default_factory=now, description="产卵时间")
    total_eggs: int = Field(..., ge=0, description="总卵数")
    fertile_eggs: Optional[int] = Field(None, ge=0, description="受精卵")
    infertile_eggs: Optional[int] = Field(None, ge=0, description="未受精卵")
    slugs: Optional[int] = Field(None, ge=0, description="无效卵")
    incubation_start_date: Optional[datetime] = Field(None, description="开始孵化时间")
    incubation_temp_f: Optional[float] = Field(None, description="孵化温度（°F）")
    incubation_humidity: Optional[int] = Field(None, ge=0, le=100, description="孵化湿度（%）")
    incubation_method: Optional[IncubationMethod] = Field(None, description="孵化方式")
    first_pip_date: Optional[datetime] = Field(None, description="首次破壳时间")
    hatch_start_date: Optional[datetime] = Field(None, description="开始出壳时间")
    hatch_end_date: Optional[datetime] = Field(None, description="出壳结束时间")
    total_hatched: Optional[int] = Field(None, ge=0, description="出壳数")
    offspring_ids: List[str] = Field(default_factory=list, description="子代个体 ID")
    status: ClutchStatus = Field(ClutchStatus.INCUBATING, description="状态")
    notes: Optional[str] = Field(None, description="备注")
    updated_at: datetime = Field(default_factory=now, description="更新时间")

    @property
    def fertility_rate(self) -> Optional[float]:
        if self.fertile_eggs is None or self.total_eggs <= 0:
            return None
        return self.fertile_eggs / self.total_eggs * 100

    @property
    def hatch_rate(self) -> Optional[float]:
        if self.total_hatched is None or not self.fertile_eggs:
            return None
        return self.total_hatched / self.fertile_eggs * 100

    @property
    def incubation_days(self) -> Optional[int]:
        if self.incubation_start_date is None or self.hatch_start_date is None:
            return None
        return days_between(self.incubation_start_date, self.hatch_start_date)
