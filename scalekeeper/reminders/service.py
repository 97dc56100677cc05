"""提醒服务：排期、取消与到期查询（本地 JSON）。"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from scalekeeper.config import REMINDERS_DIR, ensure_dirs
from scalekeeper.dates import now
from scalekeeper.reminders.models import Reminder, ReminderKind

logger = logging.getLogger(__name__)


class ReminderService:
    """提醒的加载、保存、取消与到期筛选。"""
    _filename = "reminders.json"

    def __init__(self, data_dir: Optional[Path] = None):
        if data_dir is None:
            ensure_dirs()
        self.data_dir = data_dir or REMINDERS_DIR
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self) -> Path:
        return self.data_dir / self._filename

    def _load(self) -> List[Reminder]:
        if not self._path().exists():
            return []
        with open(self._path(), "r", encoding="utf-8") as f:
            data = json.load(f)
        return [Reminder.model_validate(r) for r in data.get("reminders", [])]

    def _save(self, reminders: List[Reminder]) -> None:
        data = {"reminders": [r.model_dump(mode="json") for r in reminders]}
        with open(self._path(), "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def list_reminders(self, kind: Optional[ReminderKind] = None) -> List[Reminder]:
        """列出已排期的提醒，按时间排序。"""
        reminders = self._load()
        if kind is not None:
            reminders = [r for r in reminders if r.kind == kind]
        return sorted(reminders, key=lambda r: r.due_at)

    def get(self, subject_id: str, kind: ReminderKind) -> Optional[Reminder]:
        for r in self._load():
            if r.subject_id == subject_id and r.kind == kind:
                return r
        return None

    def schedule_reminder(
        self,
        subject_id: str,
        kind: ReminderKind,
        due_at: datetime,
        title: str = "",
        body: str = "",
        group_id: Optional[str] = None,
    ) -> Reminder:
        """排期一条提醒（同 subject_id + kind 覆盖旧的）。"""
        reminder = Reminder(
            subject_id=subject_id,
            kind=kind,
            due_at=due_at,
            title=title,
            body=body,
            group_id=group_id,
        )
        reminders = [r for r in self._load() if not (r.subject_id == subject_id and r.kind == reminder.kind)]
        reminders.append(reminder)
        self._save(reminders)
        logger.debug("Scheduled %s reminder for %s at %s", reminder.kind, subject_id, due_at.isoformat())
        return reminder

    def cancel_reminder(self, subject_id: str, kind: ReminderKind) -> bool:
        """取消一条提醒，返回是否存在。"""
        reminders = self._load()
        kept = [r for r in reminders if not (r.subject_id == subject_id and r.kind == kind)]
        if len(kept) == len(reminders):
            return False
        self._save(kept)
        logger.debug("Cancelled %s reminder for %s", kind, subject_id)
        return True

    def cancel_group(self, group_id: str) -> int:
        """取消同组的全部提醒，返回取消数量。"""
        reminders = self._load()
        kept = [r for r in reminders if r.group_id != group_id]
        removed = len(reminders) - len(kept)
        if removed:
            self._save(kept)
            logger.debug("Cancelled %d reminders in group %s", removed, group_id)
        return removed

    def due_reminders(self, at: Optional[datetime] = None) -> List[Reminder]:
        """返回到 at 时刻（默认现在）已到期的提醒。"""
        at = at or now()
        return [r for r in self.list_reminders() if r.due_at <= at]
