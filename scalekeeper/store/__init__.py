"""本地记录存储。"""
from scalekeeper.store.models import Record
from scalekeeper.store.record_store import RecordStore

__all__ = [
    "Record",
    "RecordStore",
]
