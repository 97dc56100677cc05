"""饲养箱与清洁计划：清洁状态、汇总看板、记录清洁与清洁提醒。"""
import logging
import threading
from typing import List, Optional

from scalekeeper.config import DEFAULT_REMINDER_ADVANCE_DAYS
from scalekeeper.dates import Clock, add_days, days_between
from scalekeeper.dates import now as utc_now
from scalekeeper.enclosures.models import (
    CleaningBoard,
    CleaningEvent,
    CleaningSchedule,
    CleaningStatus,
    CleaningType,
    CleaningUrgency,
    Enclosure,
    EnclosureType,
)
from scalekeeper.exceptions import ScaleKeeperError
from scalekeeper.reminders.models import ReminderKind
from scalekeeper.reminders.service import ReminderService
from scalekeeper.store.data_service import DataService

logger = logging.getLogger(__name__)

# 新建饲养箱时的默认清洁计划
DEFAULT_SCHEDULE_TYPES = (
    CleaningType.SPOT_CLEAN,
    CleaningType.WATER_CHANGE,
    CleaningType.SUBSTRATE_CHANGE,
    CleaningType.DEEP_CLEAN,
)

# 排序时「从未清洁」按此天数计
NEVER_CLEANED_DAYS = 999


def _days_since_or_never(status: CleaningStatus) -> int:
    days = status.days_since_last_clean
    return NEVER_CLEANED_DAYS if days is None else days


class CleaningService:
    """饲养箱增删、清洁计划与清洁记录；看板由 refresh() 整体替换发布。"""

    def __init__(
        self,
        data_service: DataService,
        reminder_service: Optional[ReminderService] = None,
        clock: Optional[Clock] = None,
    ):
        self.data = data_service
        self.reminders = reminder_service
        self.clock = clock or utc_now
        self._refresh_lock = threading.Lock()
        self._generation = 0
        self._board = CleaningBoard()

    @property
    def board(self) -> CleaningBoard:
        return self._board

    # 饲养箱

    def create_enclosure(
        self,
        name: str,
        enclosure_type: EnclosureType = EnclosureType.TERRARIUM,
        location: Optional[str] = None,
        is_bioactive: bool = False,
        notes: Optional[str] = None,
        with_default_schedules: bool = False,
    ) -> Enclosure:
        enclosure = Enclosure(
            name=name,
            enclosure_type=enclosure_type,
            location=location,
            is_bioactive=is_bioactive,
            notes=notes,
        )
        self.data.insert(enclosure)
        self.data.save()
        logger.info("Created enclosure %s", name)
        if with_default_schedules:
            self.setup_default_schedules(enclosure)
        return enclosure

    def delete_enclosure(self, enclosure: Enclosure) -> None:
        """删除饲养箱及其清洁计划、清洁记录；箱内个体解除关联。"""
        for schedule in self.data.fetch_cleaning_schedules(enclosure):
            self.data.delete(schedule)
        for event in self.data.fetch_cleaning_events(enclosure):
            self.data.delete(event)
        for animal in self.data.fetch_all_animals():
            if animal.enclosure_id == enclosure.id:
                animal.enclosure_id = None
                animal.updated_at = self.clock()
        self.data.delete(enclosure)
        self.data.save()
        logger.info("Deleted enclosure %s", enclosure.name)
        if self.reminders is not None:
            try:
                self.reminders.cancel_group(enclosure.id)
            except (OSError, ValueError):
                logger.warning("Could not cancel cleaning reminders for %s", enclosure.name, exc_info=True)

    # 看板

    def refresh(self) -> CleaningBoard:
        """扫描全部饲养箱的清洁计划并发布新看板；扫描失败时保留旧看板。"""
        with self._refresh_lock:
            self._generation += 1
            generation = self._generation

        try:
            board = self._scan(generation)
        except (ScaleKeeperError, OSError, ValueError):
            logger.exception("Error refreshing cleaning data")
            return self._board

        with self._refresh_lock:
            if generation > self._board.generation:
                self._board = board
            return self._board

    def _scan(self, generation: int) -> CleaningBoard:
        overdue = []
        due_soon = []
        for enclosure in self.data.fetch_enclosures():
            for status in self.cleaning_status(enclosure):
                if status.urgency == CleaningUrgency.OVERDUE:
                    overdue.append(status)
                elif status.urgency == CleaningUrgency.DUE_SOON:
                    due_soon.append(status)

        # 从未清洁过的排在最前
        overdue.sort(key=_days_since_or_never, reverse=True)
        due_soon.sort(key=lambda s: s.days_until_due)
        needing_attention = sorted(
            overdue + due_soon,
            key=lambda s: -1 if s.days_since_last_clean is None else s.days_until_due,
        )
        return CleaningBoard(
            overdue=overdue,
            due_soon=due_soon,
            needing_attention=needing_attention,
            generation=generation,
            refreshed_at=self.clock(),
        )

    # 清洁记录

    def log_cleaning(
        self,
        enclosure: Enclosure,
        cleaning_type: CleaningType,
        notes: Optional[str] = None,
        supplies_used: Optional[List[str]] = None,
    ) -> CleaningEvent:
        at = self.clock()
        event = CleaningEvent(
            enclosure_id=enclosure.id,
            cleaned_at=at,
            cleaning_type=cleaning_type,
            notes=notes,
            supplies_used=supplies_used or [],
        )
        if cleaning_type == CleaningType.DEEP_CLEAN:
            enclosure.last_deep_clean = at
            enclosure.updated_at = at
        self.data.insert(event)
        self.data.save()
        logger.info("Logged %s for %s", cleaning_type.value, enclosure.name)

        schedule = self.data.fetch_cleaning_schedule(enclosure, cleaning_type)
        if schedule is not None and schedule.reminder_enabled:
            self._reschedule_reminder(enclosure, schedule)
        return event

    def quick_clean(self, enclosure: Enclosure) -> CleaningEvent:
        return self.log_cleaning(enclosure, CleaningType.SPOT_CLEAN)

    # 清洁计划

    def set_cleaning_schedule(
        self,
        enclosure: Enclosure,
        cleaning_type: CleaningType,
        interval_days: int,
        reminder_enabled: bool = True,
        reminder_advance_days: int = DEFAULT_REMINDER_ADVANCE_DAYS,
    ) -> CleaningSchedule:
        """新建或更新某类清洁计划（每个饲养箱每类至多一条）。"""
        schedule = self.data.fetch_cleaning_schedule(enclosure, cleaning_type)
        if schedule is not None:
            schedule.interval_days = interval_days
            schedule.reminder_enabled = reminder_enabled
            schedule.reminder_advance_days = reminder_advance_days
        else:
            schedule = CleaningSchedule(
                enclosure_id=enclosure.id,
                cleaning_type=cleaning_type,
                interval_days=interval_days,
                reminder_enabled=reminder_enabled,
                reminder_advance_days=reminder_advance_days,
            )
            self.data.insert(schedule)
        self.data.save()

        if reminder_enabled:
            self._reschedule_reminder(enclosure, schedule)
        else:
            self._cancel_reminder(schedule)
        return schedule

    def remove_cleaning_schedule(self, enclosure: Enclosure, cleaning_type: CleaningType) -> bool:
        schedule = self.data.fetch_cleaning_schedule(enclosure, cleaning_type)
        if schedule is None:
            return False
        self._cancel_reminder(schedule)
        self.data.delete(schedule)
        self.data.save()
        return True

    def setup_default_schedules(self, enclosure: Enclosure) -> List[CleaningSchedule]:
        types = list(DEFAULT_SCHEDULE_TYPES)
        if enclosure.is_bioactive:
            types.append(CleaningType.BIOACTIVE_MAINTENANCE)
        return [
            self.set_cleaning_schedule(enclosure, t, t.default_interval_days)
            for t in types
        ]

    # 查询

    def cleaning_history(self, enclosure: Enclosure, limit: Optional[int] = None) -> List[CleaningEvent]:
        return self.data.fetch_cleaning_events(enclosure, limit=limit)

    def cleaning_status(self, enclosure: Enclosure) -> List[CleaningStatus]:
        """饲养箱每条清洁计划的当前状态，按距到期天数升序。"""
        as_of = self.clock()
        statuses = []
        for schedule in self.data.fetch_cleaning_schedules(enclosure):
            last = self.data.last_cleaning(enclosure, schedule.cleaning_type)
            statuses.append(CleaningStatus(
                enclosure_id=enclosure.id,
                enclosure_name=enclosure.name,
                cleaning_type=schedule.cleaning_type,
                last_cleaned=last.cleaned_at if last else None,
                interval_days=schedule.interval_days,
                reminder_advance_days=schedule.reminder_advance_days,
                as_of=as_of,
            ))
        return sorted(statuses, key=lambda s: s.days_until_due)

    def days_since_last_clean(self, enclosure: Enclosure) -> Optional[int]:
        """距任意类型最近一次清洁的天数。"""
        events = self.data.fetch_cleaning_events(enclosure, limit=1)
        if not events:
            return None
        return days_between(events[0].cleaned_at, self.clock())

    # 提醒

    def _reschedule_reminder(self, enclosure: Enclosure, schedule: CleaningSchedule) -> None:
        if self.reminders is None:
            return
        last = self.data.last_cleaning(enclosure, schedule.cleaning_type)
        last_date = last.cleaned_at if last else self.clock()
        due_at = add_days(last_date, schedule.interval_days - schedule.reminder_advance_days)
        if due_at <= self.clock():
            return
        try:
            self.reminders.schedule_reminder(
                schedule.id,
                ReminderKind.CLEANING,
                due_at,
                title=f"Clean {enclosure.name}",
                body=f"{schedule.cleaning_type.display_name} is due for {enclosure.name}.",
                group_id=enclosure.id,
            )
        except (OSError, ValueError):
            logger.warning("Could not schedule cleaning reminder for %s", enclosure.name, exc_info=True)

    def _cancel_reminder(self, schedule: CleaningSchedule) -> None:
        if self.reminders is None:
            return
        try:
            self.reminders.cancel_reminder(schedule.id, ReminderKind.CLEANING)
        except (OSError, ValueError):
            logger.warning("Could not cancel cleaning reminder %s", schedule.id, exc_info=True)
