"""提醒数据模型。"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import ConfigDict, Field

from scalekeeper.store.models import AwareModel


class ReminderKind(str, Enum):
    """提醒类型。"""
    FEEDING = "feeding"      # 喂食
    CLEANING = "cleaning"    # 饲养箱清洁
    MEDICATION = "medication"  # 用药


class Reminder(AwareModel):
    """单条已排期的提醒；同一 (subject_id, kind) 只保留一条。"""
    subject_id: str = Field(..., description="提醒对象 ID，如饲养箱+清洁类型、剂量 ID")
    kind: ReminderKind = Field(..., description="提醒类型")
    due_at: datetime = Field(..., description="提醒时间")
    title: str = Field("", description="标题")
    body: str = Field("", description="正文")
    group_id: Optional[str] = Field(None, description="分组 ID，如疗程 ID，用于整组取消")

    model_config = ConfigDict(use_enum_values=True)
