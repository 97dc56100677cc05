"""体重、体长记录与生长分析数据模型。"""
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel, Field

from scalekeeper.config import (
    BODY_CONDITION_OVERWEIGHT,
    BODY_CONDITION_UNDERWEIGHT,
    GROWTH_TREND_THRESHOLD,
)
from scalekeeper.dates import now
from scalekeeper.store.models import Record


class MeasurementMethod(str, Enum):
    """体长测量方式。"""
    ESTIMATED = "estimated"
    TAPE_MEASURE = "tape_measure"
    TUBE_METHOD = "tube_method"
    PHOTO_CALCULATED = "photo_calculated"


class WeightRecord(Record):
    """一次称重（克）。"""
    collection: ClassVar[str] = "weights"

    animal_id: str = Field(..., min_length=1, description="所属个体 ID")
    recorded_at: datetime = Field(default_factory=now, description="记录时间")
    weight_grams: float = Field(..., gt=0, description="体重（g）")
    notes: Optional[str] = Field(None, description="备注")

    @property
    def formatted_weight(self) -> str:
        if self.weight_grams >= 1000:
            return f"{self.weight_grams / 1000:.2f} kg"
        return f"{self.weight_grams:.0f} g"


class LengthRecord(Record):
    """一次体长测量（厘米）。"""
    collection: ClassVar[str] = "lengths"

    animal_id: str = Field(..., min_length=1, description="所属个体 ID")
    recorded_at: datetime = Field(default_factory=now, description="记录时间")
    length_cm: float = Field(..., gt=0, description="体长（cm）")
    measurement_method: MeasurementMethod = Field(MeasurementMethod.ESTIMATED, description="测量方式")
    notes: Optional[str] = Field(None, description="备注")

    @property
    def formatted_length(self) -> str:
        if self.length_cm >= 100:
            return f"{self.length_cm / 100:.2f} m"
        return f"{self.length_cm:.1f} cm"


class GrowthTrend(str, Enum):
    """生长趋势。"""
    GROWING = "growing"
    STABLE = "stable"
    SHRINKING = "shrinking"


class WeightTrend(str, Enum):
    """体重趋势。"""
    GAINING = "gaining"
    STABLE = "stable"
    LOSING = "losing"


class WeightChange(BaseModel):
    """两次称重之间的变化。"""
    previous_weight: float
    current_weight: float
    days_between: int

    @property
    def absolute_change(self) -> float:
        return self.current_weight - self.previous_weight

    @property
    def percentage_change(self) -> float:
        if self.previous_weight <= 0:
            return 0.0
        return self.absolute_change / self.previous_weight * 100

    @property
    def is_significant_loss(self) -> bool:
        return self.percentage_change < -10

    @property
    def trend(self) -> WeightTrend:
        if self.percentage_change > 5:
            return WeightTrend.GAINING
        if self.percentage_change < -5:
            return WeightTrend.LOSING
        return WeightTrend.STABLE


class LengthChange(BaseModel):
    """两次体长测量之间的变化。"""
    previous_length: float
    current_length: float
    days_between: int

    @property
    def absolute_change(self) -> float:
        return self.current_length - self.previous_length

    @property
    def percentage_change(self) -> float:
        if self.previous_length <= 0:
            return 0.0
        return self.absolute_change / self.previous_length * 100

    @property
    def daily_growth_rate(self) -> float:
        if self.days_between <= 0:
            return 0.0
        return self.absolute_change / self.days_between

    @property
    def trend(self) -> GrowthTrend:
        # 体长缩短多半是测量误差，阈值比增长更敏感
        if self.percentage_change > 2:
            return GrowthTrend.GROWING
        if self.percentage_change < -1:
            return GrowthTrend.SHRINKING
        return GrowthTrend.STABLE


class GrowthRate(BaseModel):
    """窗口期内体重增长率，monthly_rate 为每月百分比。"""
    total_change: float
    percent_change: float
    monthly_rate: float
    period_days: int

    @property
    def trend(self) -> GrowthTrend:
        if self.monthly_rate > GROWTH_TREND_THRESHOLD:
            return GrowthTrend.GROWING
        if self.monthly_rate < -GROWTH_TREND_THRESHOLD:
            return GrowthTrend.SHRINKING
        return GrowthTrend.STABLE

    @property
    def display_text(self) -> str:
        if self.monthly_rate > 0:
            return f"+{self.monthly_rate:.1f}% per month"
        return f"{self.monthly_rate:.1f}% per month"


class BodyCondition(str, Enum):
    """体况。"""
    UNDERWEIGHT = "underweight"
    HEALTHY = "healthy"
    OVERWEIGHT = "overweight"


class BodyConditionScore(BaseModel):
    """体况评分：体重/体长比（g/cm）。"""
    weight_grams: float
    length_cm: float

    @property
    def ratio(self) -> float:
        if self.length_cm <= 0:
            return 0.0
        return self.weight_grams / self.length_cm

    @property
    def condition(self) -> BodyCondition:
        if self.ratio < BODY_CONDITION_UNDERWEIGHT:
            return BodyCondition.UNDERWEIGHT
        if self.ratio > BODY_CONDITION_OVERWEIGHT:
            return BodyCondition.OVERWEIGHT
        return BodyCondition.HEALTHY


class GrowthData(BaseModel):
    """图表用的体重/体长序列（按时间升序）。"""
    weights: List[WeightRecord] = Field(default_factory=list)
    lengths: List[LengthRecord] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime

    @property
    def weight_points(self) -> List[Tuple[datetime, float]]:
        return [(w.recorded_at, w.weight_grams) for w in self.weights]

    @property
    def length_points(self) -> List[Tuple[datetime, float]]:
        return [(r.recorded_at, r.length_cm) for r in self.lengths]

    @property
    def has_weight_data(self) -> bool:
        return bool(self.weights)

    @property
    def has_length_data(self) -> bool:
        return bool(self.lengths)
