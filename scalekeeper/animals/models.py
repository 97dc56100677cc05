"""爬宠个体与物种数据模型。"""
from datetime import date, datetime
from enum import Enum
from typing import ClassVar, Optional

from pydantic import Field

from scalekeeper.dates import now
from scalekeeper.store.models import Record


class AnimalSex(str, Enum):
    """性别。"""
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"
    SUSPECTED_MALE = "suspected_male"
    SUSPECTED_FEMALE = "suspected_female"


class AnimalStatus(str, Enum):
    """饲养状态；只有 ACTIVE 参与喂食/饥饿等日常汇总。"""
    ACTIVE = "active"
    QUARANTINE = "quarantine"
    FOR_SALE = "for_sale"
    SOLD = "sold"
    DECEASED = "deceased"
    BREEDING_HOLD = "breeding_hold"


class SpeciesCategory(str, Enum):
    """物种大类。"""
    SNAKE = "snake"
    LIZARD = "lizard"
    GECKO = "gecko"
    TORTOISE = "tortoise"
    TURTLE = "turtle"
    CROCODILIAN = "crocodilian"
    FROG = "frog"
    SALAMANDER = "salamander"
    INVERTEBRATE = "invertebrate"
    OTHER = "other"


class Species(Record):
    """物种及其饲养默认值。"""
    collection: ClassVar[str] = "species"

    common_name: str = Field(..., description="通用名")
    scientific_name: str = Field(..., description="学名")
    category: SpeciesCategory = Field(SpeciesCategory.OTHER, description="大类")
    default_feeding_interval_days: Optional[int] = Field(None, gt=0, description="默认喂食间隔（天）")
    care_notes: Optional[str] = Field(None, description="饲养要点")


class Animal(Record):
    """饲养个体。喂食、体重、体长等记录通过 animal_id 关联。"""
    collection: ClassVar[str] = "animals"

    name: str = Field(..., description="名字")
    species_id: Optional[str] = Field(None, description="物种 ID")
    sex: AnimalSex = Field(AnimalSex.UNKNOWN, description="性别")
    morph: Optional[str] = Field(None, description="品系")
    hatch_date: Optional[date] = Field(None, description="出壳日期")
    acquisition_date: datetime = Field(default_factory=now, description="入手时间")
    status: AnimalStatus = Field(AnimalStatus.ACTIVE, description="状态")
    feeding_interval_days: Optional[int] = Field(None, gt=0, description="个体喂食间隔（天），优先于物种默认")
    current_weight_grams: Optional[float] = Field(None, description="最近一次体重（g）缓存")
    enclosure_id: Optional[str] = Field(None, description="所在饲养箱 ID")
    notes: Optional[str] = Field(None, description="备注")
    updated_at: datetime = Field(default_factory=now, description="更新时间")

    @property
    def is_active(self) -> bool:
        return self.status == AnimalStatus.ACTIVE
