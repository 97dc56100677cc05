"""药品、疗程与剂量数据模型。"""
from datetime import datetime
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field

from scalekeeper.dates import now
from scalekeeper.store.models import AwareModel, Record, new_id


class MedicationType(str, Enum):
    """给药方式。"""
    TOPICAL = "topical"
    ORAL = "oral"
    INJECTABLE = "injectable"
    SOAK = "soak"
    ENVIRONMENTAL = "environmental"
    SUPPLEMENT = "supplement"


class MedicationProtocol(BaseModel):
    """常用给药方案。"""
    id: str = Field(default_factory=new_id)
    name: str
    frequency_hours: int = Field(..., gt=0)
    total_doses: int = Field(..., gt=0)
    notes: Optional[str] = None


class Medication(Record):
    """药品。"""
    collection: ClassVar[str] = "medications"

    name: str = Field(..., description="药品名")
    medication_type: MedicationType = Field(..., description="给药方式")
    default_dosage_notes: Optional[str] = Field(None, description="默认剂量说明")
    manufacturer: Optional[str] = Field(None, description="厂家")
    common_protocols: List[MedicationProtocol] = Field(default_factory=list, description="常用方案")


class TreatmentStatus(str, Enum):
    """疗程状态：ACTIVE ⇄ PAUSED，COMPLETED / DISCONTINUED 为终态。"""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    DISCONTINUED = "discontinued"

    @property
    def is_terminal(self) -> bool:
        return self in (TreatmentStatus.COMPLETED, TreatmentStatus.DISCONTINUED)


class DoseStatus(str, Enum):
    """剂量状态。"""
    SCHEDULED = "scheduled"
    ADMINISTERED = "administered"
    SKIPPED = "skipped"
    MISSED = "missed"


class MedicationDose(AwareModel):
    """疗程中的一次给药，index 为在疗程中的序号（从 0 开始）。"""
    id: str = Field(default_factory=new_id)
    plan_id: str
    index: int = Field(..., ge=0)
    scheduled_time: datetime
    status: DoseStatus = DoseStatus.SCHEDULED
    administered_time: Optional[datetime] = None
    notes: Optional[str] = None

    def is_overdue(self, at: datetime) -> bool:
        """到点未执行（读取时判断，不改变存储状态）。"""
        return self.status == DoseStatus.SCHEDULED and self.scheduled_time < at

    def hours_overdue(self, at: datetime) -> Optional[int]:
        if not self.is_overdue(at):
            return None
        return int((at - self.scheduled_time).total_seconds() // 3600)


class TreatmentPlan(Record):
    """疗程：按固定间隔生成 total_doses 次剂量。"""
    collection: ClassVar[str] = "treatments"

    animal_id: str = Field(..., min_length=1, description="个体 ID")
    medication_id: str = Field(..., min_length=1, description="药品 ID")
    condition_treated: str = Field(..., description="病症")
    dosage: str = Field(..., description="剂量说明")
    frequency_hours: int = Field(..., gt=0, description="给药间隔（小时）")
    total_doses: int = Field(..., gt=0, description="总剂量次数")
    start_date: datetime = Field(default_factory=now, description="开始时间")
    end_date: Optional[datetime] = Field(None, description="结束时间")
    status: TreatmentStatus = Field(TreatmentStatus.ACTIVE, description="状态")
    prescribed_by: Optional[str] = Field(None, description="开药人")
    notes: Optional[str] = Field(None, description="备注")
    doses: List[MedicationDose] = Field(default_factory=list, description="按时间排序的剂量")

    @property
    def completed_doses(self) -> int:
        return sum(1 for d in self.doses if d.status == DoseStatus.ADMINISTERED)

    @property
    def remaining_doses(self) -> int:
        return max(self.total_doses - self.completed_doses, 0)

    @property
    def progress_percentage(self) -> float:
        """已给药 / 总次数 × 100；跳过与漏服只计入分母。"""
        if self.total_doses <= 0:
            return 0.0
        return min(max(self.completed_doses / self.total_doses * 100, 0.0), 100.0)

    @property
    def is_complete(self) -> bool:
        return self.completed_doses >= self.total_doses

    @property
    def next_scheduled_dose(self) -> Optional[MedicationDose]:
        pending = [d for d in self.doses if d.status == DoseStatus.SCHEDULED]
        if not pending:
            return None
        return min(pending, key=lambda d: d.scheduled_time)

    def find_dose(self, dose_id: str) -> Optional[MedicationDose]:
        for dose in self.doses:
            if dose.id == dose_id:
                return dose
        return None


class ActiveTreatmentSummary(BaseModel):
    """首页用的进行中疗程摘要。"""
    plan: TreatmentPlan
    animal_name: str
    medication_name: str
    doses_today: List[MedicationDose] = Field(default_factory=list)
    next_dose: Optional[MedicationDose] = None

    @property
    def has_doses_due_today(self) -> bool:
        return any(d.status == DoseStatus.SCHEDULED for d in self.doses_today)

    @property
    def completed_today(self) -> int:
        return sum(1 for d in self.doses_today if d.status == DoseStatus.ADMINISTERED)

    @property
    def remaining_today(self) -> int:
        return sum(1 for d in self.doses_today if d.status == DoseStatus.SCHEDULED)


class MedicationBoard(BaseModel):
    """一次用药汇总扫描的结果；只包含进行中（未暂停）的疗程。"""
    active_treatments: List[TreatmentPlan] = Field(default_factory=list)
    doses_today: List[MedicationDose] = Field(default_factory=list)
    overdue_doses: List[MedicationDose] = Field(default_factory=list)
    generation: int = 0
    refreshed_at: Optional[datetime] = None
