"""喂食记录、喂食状态与饥饿分析数据模型。"""
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from scalekeeper.animals.models import Animal
from scalekeeper.biometrics.models import WeightChange, WeightRecord, WeightTrend
from scalekeeper.config import (
    HUNGER_CONCERNING_MAX_DAYS,
    HUNGER_EXTENDED_MAX_DAYS,
    HUNGER_NORMAL_MAX_DAYS,
)
from scalekeeper.dates import days_between, now
from scalekeeper.store.models import Record


class PreyType(str, Enum):
    """饵料种类。"""
    # 啮齿类
    MOUSE = "mouse"
    RAT = "rat"
    ASF = "african_soft_fur"
    HAMSTER = "hamster"
    GERBIL = "gerbil"
    GUINEA_PIG = "guinea_pig"
    RABBIT = "rabbit"
    PINKIE = "pinkie_mouse"
    # 昆虫
    CRICKET = "cricket"
    DUBIA = "dubia_roach"
    DISCOID = "discoid_roach"
    MEALWORM = "mealworm"
    SUPERWORM = "superworm"
    HORNWORM = "hornworm"
    SILKWORM = "silkworm"
    WAXWORM = "waxworm"
    BSFL = "bsfl"
    LOCUST = "locust"
    # 其他
    FISH = "fish"
    SHRIMP = "shrimp"
    EARTHWORM = "earthworm"
    CHICK = "chick"
    QUAIL = "quail"
    REPTILINKS = "reptilinks"
    OTHER = "other"


class PreySize(str, Enum):
    """饵料规格。"""
    PINKY = "pinky"
    FUZZY = "fuzzy"
    HOPPER = "hopper"
    WEANED = "weaned"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "x_large"
    JUMBO = "jumbo"
    MICRO = "micro"
    MINI = "mini"
    STANDARD = "standard"
    ADULT = "adult"


class PreyState(str, Enum):
    """饵料状态。"""
    LIVE = "live"
    FRESH_KILLED = "fresh_killed"
    FROZEN_THAWED = "frozen_thawed"


class FeedingResponse(str, Enum):
    """进食反应。"""
    STRUCK_IMMEDIATELY = "struck_immediately"
    RELUCTANT = "reluctant"
    ASSISTED_FEED = "assisted_feed"
    REFUSED = "refused"
    REGURGITATED = "regurgitated"

    @property
    def is_successful(self) -> bool:
        """是否算一次成功进食。"""
        return self in (
            FeedingResponse.STRUCK_IMMEDIATELY,
            FeedingResponse.RELUCTANT,
            FeedingResponse.ASSISTED_FEED,
        )


class FeedingEvent(Record):
    """一次喂食。创建后只允许修改备注。"""
    collection: ClassVar[str] = "feedings"

    animal_id: str = Field(..., min_length=1, description="所属个体 ID")
    feeding_date: datetime = Field(default_factory=now, description="喂食时间")
    prey_type: PreyType = Field(..., description="饵料种类")
    prey_size: PreySize = Field(..., description="饵料规格")
    prey_state: PreyState = Field(PreyState.FROZEN_THAWED, description="饵料状态")
    quantity: int = Field(1, ge=1, description="数量")
    prey_weight_grams: Optional[float] = Field(None, gt=0, description="饵料重量（g）")
    response: FeedingResponse = Field(FeedingResponse.STRUCK_IMMEDIATELY, description="进食反应")
    refused_reason: Optional[str] = Field(None, description="拒食原因")
    notes: Optional[str] = Field(None, description="备注")


class FeedingStatusKind(str, Enum):
    """喂食状态类型。"""
    FED_TODAY = "fed_today"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    NOT_SCHEDULED = "not_scheduled"


_STATUS_PRIORITY = {
    FeedingStatusKind.OVERDUE: 0,
    FeedingStatusKind.DUE_TODAY: 1,
    FeedingStatusKind.UPCOMING: 2,
    FeedingStatusKind.FED_TODAY: 3,
    FeedingStatusKind.NOT_SCHEDULED: 4,
}


class FeedingStatus(BaseModel):
    """喂食状态；OVERDUE 的 days 为逾期天数，UPCOMING 的 days 为距下次天数。"""
    kind: FeedingStatusKind
    days: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def fed_today(cls) -> "FeedingStatus":
        return cls(kind=FeedingStatusKind.FED_TODAY)

    @classmethod
    def due_today(cls) -> "FeedingStatus":
        return cls(kind=FeedingStatusKind.DUE_TODAY)

    @classmethod
    def overdue(cls, days_past: int) -> "FeedingStatus":
        return cls(kind=FeedingStatusKind.OVERDUE, days=days_past)

    @classmethod
    def upcoming(cls, days_until: int) -> "FeedingStatus":
        return cls(kind=FeedingStatusKind.UPCOMING, days=days_until)

    @classmethod
    def not_scheduled(cls) -> "FeedingStatus":
        return cls(kind=FeedingStatusKind.NOT_SCHEDULED)

    @property
    def priority(self) -> int:
        """排序优先级，越小越紧急。"""
        return _STATUS_PRIORITY[self.kind]

    @property
    def display_name(self) -> str:
        if self.kind == FeedingStatusKind.FED_TODAY:
            return "Fed Today"
        if self.kind == FeedingStatusKind.DUE_TODAY:
            return "Due Today"
        if self.kind == FeedingStatusKind.OVERDUE:
            return f"Overdue ({self.days}d)"
        if self.kind == FeedingStatusKind.UPCOMING:
            return f"In {self.days} day{'' if self.days == 1 else 's'}"
        return "Not Scheduled"


class FeedingStats(BaseModel):
    """某个体的喂食统计。"""
    total_feedings: int
    successful_feedings: int
    refusals: int
    average_interval_days: int
    last_feeding_date: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        if self.total_feedings <= 0:
            return 0.0
        return self.successful_feedings / self.total_feedings * 100

    @property
    def refusal_rate(self) -> float:
        if self.total_feedings <= 0:
            return 0.0
        return self.refusals / self.total_feedings * 100


class HungerUrgency(str, Enum):
    """禁食时长分级。"""
    UNKNOWN = "unknown"
    NORMAL = "normal"
    EXTENDED = "extended"
    CONCERNING = "concerning"
    CRITICAL = "critical"


class HungerDuration(BaseModel):
    """距上次成功进食的时长、连续拒食次数与拒食期间体重变化（%）。历史不足时字段为 None。"""
    days_since_last_meal: Optional[int] = None
    last_successful_feeding: Optional[datetime] = None
    refusal_count: int = 0
    weight_change_during_strike: Optional[float] = None

    @property
    def urgency_level(self) -> HungerUrgency:
        days = self.days_since_last_meal
        if days is None:
            return HungerUrgency.UNKNOWN
        if days <= HUNGER_NORMAL_MAX_DAYS:
            return HungerUrgency.NORMAL
        if days <= HUNGER_EXTENDED_MAX_DAYS:
            return HungerUrgency.EXTENDED
        if days <= HUNGER_CONCERNING_MAX_DAYS:
            return HungerUrgency.CONCERNING
        return HungerUrgency.CRITICAL

    @property
    def display_text(self) -> str:
        days = self.days_since_last_meal
        if days is None:
            return "No feeding records"
        if days == 0:
            return "Fed today"
        if days == 1:
            return "Last ate yesterday"
        return f"Last ate {days} days ago"


class FeedingInsight(BaseModel):
    """近一段时间的喂食与体重综合分析。"""
    animal: Animal
    recent_feedings: List[FeedingEvent] = Field(default_factory=list)
    weights: List[WeightRecord] = Field(default_factory=list)
    hunger_duration: HungerDuration

    @property
    def success_rate(self) -> float:
        if not self.recent_feedings:
            return 0.0
        successful = sum(1 for f in self.recent_feedings if f.response.is_successful)
        return successful / len(self.recent_feedings) * 100

    @property
    def weight_trend_during_strike(self) -> Optional[WeightTrend]:
        if len(self.weights) < 2:
            return None
        ordered = sorted(self.weights, key=lambda w: w.recorded_at)
        first, last = ordered[0], ordered[-1]
        change = WeightChange(
            previous_weight=first.weight_grams,
            current_weight=last.weight_grams,
            days_between=days_between(first.recorded_at, last.recorded_at),
        )
        return change.trend

    @property
    def insight_message(self) -> str:
        hunger = self.hunger_duration
        if hunger.days_since_last_meal is None:
            return "Start logging feedings to track patterns."
        if hunger.days_since_last_meal == 0:
            return "Fed successfully today!"
        if hunger.urgency_level == HungerUrgency.NORMAL:
            return "Within normal feeding schedule."
        trend = self.weight_trend_during_strike
        if trend == WeightTrend.STABLE:
            return "Weight stable during food strike, no cause for concern yet."
        if trend == WeightTrend.LOSING:
            change = hunger.weight_change_during_strike
            if change is not None and change < -10:
                return f"Weight down {abs(change):.0f}% during food strike, consider vet consultation."
            return "Slight weight loss during strike, continue monitoring."
        if trend == WeightTrend.GAINING:
            return "Weight stable/gaining, healthy despite reduced feeding."
        return "Extended fast, monitor weight closely."


class FeedingBoard(BaseModel):
    """一次喂食汇总扫描的结果，整体替换发布。"""
    due_today: List[Animal] = Field(default_factory=list)
    overdue: List[Animal] = Field(default_factory=list)
    upcoming: List[Animal] = Field(default_factory=list)
    fed_today: List[Animal] = Field(default_factory=list)
    generation: int = 0
    refreshed_at: Optional[datetime] = None
