"""蜕皮、健康记录与冬眠周期数据模型。"""
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field

from scalekeeper.dates import days_between, now
from scalekeeper.store.models import Record


class ShedQuality(str, Enum):
    """蜕皮完整度。"""
    COMPLETE = "complete"
    PARTIAL = "partial"
    STUCK = "stuck"
    ASSISTED = "assisted"

    @property
    def is_problematic(self) -> bool:
        return self != ShedQuality.COMPLETE


class ShedIssue(str, Enum):
    """蜕皮残留部位。"""
    EYE_CAPS = "eye_caps"
    TAIL_TIP = "tail_tip"
    TOES = "toes"
    BODY_PATCHES = "body_patches"
    HEAD_AREA = "head_area"

    @property
    def requires_attention(self) -> bool:
        # 眼罩和脚趾残留需要人工处理
        return self in (ShedIssue.EYE_CAPS, ShedIssue.TOES)


class ShedRecord(Record):
    """一次蜕皮。"""
    collection: ClassVar[str] = "sheds"

    animal_id: str = Field(..., min_length=1, description="所属个体 ID")
    shed_date: datetime = Field(default_factory=now, description="蜕皮时间")
    blue_phase_start_date: Optional[datetime] = Field(None, description="进入蓝眼期时间")
    quality: ShedQuality = Field(ShedQuality.COMPLETE, description="完整度")
    issues: List[ShedIssue] = Field(default_factory=list, description="残留部位")
    notes: Optional[str] = Field(None, description="备注")

    @property
    def needs_attention(self) -> bool:
        return any(issue.requires_attention for issue in self.issues)


class ShedCycleInfo(BaseModel):
    """蜕皮周期统计；不足两次蜕皮时没有平均间隔和预计日期。"""
    total_sheds: int = 0
    problematic_shed_count: int = 0
    average_interval_days: Optional[int] = None
    last_shed_date: Optional[datetime] = None
    estimated_next_shed: Optional[datetime] = None

    @property
    def problematic_shed_percentage(self) -> float:
        if self.total_sheds == 0:
            return 0.0
        return self.problematic_shed_count / self.total_sheds * 100

    def is_in_blue_phase(self, at: datetime) -> bool:
        """预计蜕皮前 7 天内视为蓝眼期。"""
        if self.estimated_next_shed is None:
            return False
        return 0 <= days_between(at, self.estimated_next_shed) <= 7


class HealthSeverity(int, Enum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class HealthNoteType(str, Enum):
    """健康记录类型。"""
    OBSERVATION = "observation"
    VET_VISIT = "vet_visit"
    MEDICATION = "medication"
    TREATMENT = "treatment"
    INJURY = "injury"
    ILLNESS = "illness"
    PARASITE = "parasite"
    RESPIRATORY_ISSUE = "respiratory_issue"
    SCALE_ROT = "scale_rot"
    MITES = "mites"
    BURN_INJURY = "burn_injury"
    MOUTH_ROT = "mouth_rot"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        if self == HealthNoteType.BURN_INJURY:
            return "Burn"
        return self.value.replace("_", " ").title()

    @property
    def severity(self) -> HealthSeverity:
        if self in (HealthNoteType.OBSERVATION, HealthNoteType.OTHER):
            return HealthSeverity.LOW
        if self in (HealthNoteType.VET_VISIT, HealthNoteType.MEDICATION, HealthNoteType.TREATMENT):
            return HealthSeverity.MEDIUM
        return HealthSeverity.HIGH


class HealthNote(Record):
    """一条健康记录：日常观察、就诊或病症。"""
    collection: ClassVar[str] = "health_notes"

    animal_id: str = Field(..., min_length=1, description="所属个体 ID")
    recorded_at: datetime = Field(default_factory=now, description="记录时间")
    note_type: HealthNoteType = Field(..., description="记录类型")
    title: str = Field(..., min_length=1, description="标题")
    content: Optional[str] = Field(None, description="内容")
    vet_name: Optional[str] = Field(None, description="兽医")
    vet_clinic: Optional[str] = Field(None, description="诊所")
    diagnosis: Optional[str] = Field(None, description="诊断")
    treatment: Optional[str] = Field(None, description="处置")
    follow_up_date: Optional[datetime] = Field(None, description="复诊时间")
    is_resolved: bool = Field(False, description="是否已解决")
    cost: Optional[float] = Field(None, ge=0, description="费用")
    updated_at: datetime = Field(default_factory=now, description="更新时间")


class BrumationStatus(str, Enum):
    """冬眠周期状态；COMPLETE 与 CANCELLED 为终态。"""
    PLANNED = "planned"
    COOLDOWN = "cooldown"
    ACTIVE = "active"
    WARMUP = "warmup"
    COMPLETE = "complete"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (BrumationStatus.COMPLETE, BrumationStatus.CANCELLED)


class BrumationPhase(str, Enum):
    """按阶段日期推算出的当前阶段。"""
    PLANNED = "planned"
    COOLDOWN = "cooldown"
    ACTIVE = "active"
    WARMUP = "warmup"
    COMPLETE = "complete"


class BrumationCycle(Record):
    """一个冬眠周期，降温、深眠、升温、结束四个日期划分阶段。"""
    collection: ClassVar[str] = "brumations"

    animal_id: str = Field(..., min_length=1, description="所属个体 ID")
    year: int = Field(..., description="年份")
    season_name: Optional[str] = Field(None, description="季节名，如 2024-2025 Winter")
    pre_brumation_weight: Optional[float] = Field(None, gt=0, description="冬眠前体重（g）")
    post_brumation_weight: Optional[float] = Field(None, gt=0, description="冬眠后体重（g）")
    last_feeding_before: Optional[datetime] = None
    first_feeding_after: Optional[datetime] = None
    cooldown_start_date: Optional[datetime] = None
    full_brumation_start_date: Optional[datetime] = None
    warmup_start_date: Optional[datetime] = None
    brumation_end_date: Optional[datetime] = None
    target_temp_low_f: Optional[float] = None
    target_temp_high_f: Optional[float] = None
    status: BrumationStatus = Field(BrumationStatus.PLANNED, description="状态")
    notes: Optional[str] = Field(None, description="备注")

    def current_phase(self, at: datetime) -> Optional[BrumationPhase]:
        if self.status.is_terminal:
            return None
        if self.brumation_end_date and at >= self.brumation_end_date:
            return BrumationPhase.COMPLETE
        if self.warmup_start_date and at >= self.warmup_start_date:
            return BrumationPhase.WARMUP
        if self.full_brumation_start_date and at >= self.full_brumation_start_date:
            return BrumationPhase.ACTIVE
        if self.cooldown_start_date and at >= self.cooldown_start_date:
            return BrumationPhase.COOLDOWN
        return BrumationPhase.PLANNED

    @property
    def total_brumation_days(self) -> Optional[int]:
        if self.cooldown_start_date is None or self.brumation_end_date is None:
            return None
        return days_between(self.cooldown_start_date, self.brumation_end_date)

    @property
    def weight_change_percentage(self) -> Optional[float]:
        if self.pre_brumation_weight is None or self.post_brumation_weight is None:
            return None
        return (self.post_brumation_weight - self.pre_brumation_weight) / self.pre_brumation_weight * 100
