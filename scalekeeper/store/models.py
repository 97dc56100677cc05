"""可持久化记录的基类。"""
import uuid
from datetime import datetime
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator

from scalekeeper.dates import ensure_aware, now


def new_id() -> str:
    return uuid.uuid4().hex


class AwareModel(BaseModel):
    """所有时间字段统一为带时区的时间；无时区的按 UTC 处理。"""

    @field_validator("*", mode="after")
    @classmethod
    def _aware_datetimes(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return ensure_aware(value)
        return value


class Record(AwareModel):
    """一条记录：带唯一 ID 与创建时间；collection 决定落盘的文件名。"""
    collection: ClassVar[str] = ""

    id: str = Field(default_factory=new_id, description="记录唯一 ID")
    created_at: datetime = Field(default_factory=now, description="创建时间")
