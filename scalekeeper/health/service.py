"""蜕皮记录与周期统计、健康记录、冬眠周期阶段推进。"""
import logging
from datetime import datetime
from typing import List, Optional

from scalekeeper.animals.models import Animal
from scalekeeper.dates import Clock, add_days, days_between, ensure_aware
from scalekeeper.dates import now as utc_now
from scalekeeper.exceptions import InvalidTransitionError
from scalekeeper.health.models import (
    BrumationCycle,
    BrumationStatus,
    HealthNote,
    HealthNoteType,
    ShedCycleInfo,
    ShedIssue,
    ShedQuality,
    ShedRecord,
)
from scalekeeper.store.data_service import DataService

logger = logging.getLogger(__name__)

# 冬眠只能按顺序推进；任一未结束状态都可以取消
_BRUMATION_NEXT = {
    BrumationStatus.PLANNED: BrumationStatus.COOLDOWN,
    BrumationStatus.COOLDOWN: BrumationStatus.ACTIVE,
    BrumationStatus.ACTIVE: BrumationStatus.WARMUP,
    BrumationStatus.WARMUP: BrumationStatus.COMPLETE,
}


class HealthService:
    """个体的蜕皮、健康记录和冬眠周期。"""

    def __init__(self, data_service: DataService, clock: Optional[Clock] = None):
        self.data = data_service
        self.clock = clock or utc_now

    # 蜕皮

    def log_shed(
        self,
        animal: Animal,
        quality: ShedQuality = ShedQuality.COMPLETE,
        issues: Optional[List[ShedIssue]] = None,
        shed_date: Optional[datetime] = None,
        blue_phase_start_date: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> ShedRecord:
        record = ShedRecord(
            animal_id=animal.id,
            shed_date=shed_date or self.clock(),
            blue_phase_start_date=blue_phase_start_date,
            quality=quality,
            issues=issues or [],
            notes=notes,
        )
        self.data.insert(record)
        self.data.save()
        logger.info("Logged %s shed for %s", quality.value, animal.name)
        return record

    def shed_history(self, animal: Animal, limit: Optional[int] = None) -> List[ShedRecord]:
        return self.data.fetch_shed_records(animal, limit=limit)

    def shed_cycle_info(self, animal: Animal) -> ShedCycleInfo:
        """平均蜕皮间隔（整天）与预计下次蜕皮时间。"""
        sheds = self.data.fetch_shed_records(animal)
        if not sheds:
            return ShedCycleInfo()

        info = ShedCycleInfo(
            total_sheds=len(sheds),
            problematic_shed_count=sum(1 for s in sheds if s.quality.is_problematic),
            last_shed_date=sheds[0].shed_date,
        )
        if len(sheds) >= 2:
            oldest_first = list(reversed(sheds))
            gaps = [
                days_between(a.shed_date, b.shed_date)
                for a, b in zip(oldest_first, oldest_first[1:])
            ]
            info.average_interval_days = sum(gaps) // len(gaps)
            info.estimated_next_shed = add_days(info.last_shed_date, info.average_interval_days)
        return info

    # 健康记录

    def add_health_note(
        self,
        animal: Animal,
        note_type: HealthNoteType,
        title: str,
        content: Optional[str] = None,
        recorded_at: Optional[datetime] = None,
        **details,
    ) -> HealthNote:
        """details 可带就诊字段：vet_name、diagnosis、follow_up_date、cost 等。"""
        note = HealthNote(
            animal_id=animal.id,
            note_type=note_type,
            title=title,
            content=content,
            recorded_at=recorded_at or self.clock(),
            **details,
        )
        self.data.insert(note)
        self.data.save()
        logger.info("Added %s note for %s", note_type.value, animal.name)
        return note

    def resolve_health_note(self, note: HealthNote) -> HealthNote:
        note.is_resolved = True
        note.updated_at = self.clock()
        self.data.save()
        return note

    def health_notes(self, animal: Animal, unresolved_only: bool = False) -> List[HealthNote]:
        return self.data.fetch_health_notes(animal, unresolved_only=unresolved_only)

    def notes_needing_follow_up(self, animal: Animal) -> List[HealthNote]:
        """未解决且复诊时间已到的记录。"""
        at = self.clock()
        return [
            n for n in self.data.fetch_health_notes(animal, unresolved_only=True)
            if n.follow_up_date is not None and n.follow_up_date <= at
        ]

    # 冬眠

    def plan_brumation(
        self,
        animal: Animal,
        year: int,
        season_name: Optional[str] = None,
        target_temp_low_f: Optional[float] = None,
        target_temp_high_f: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> BrumationCycle:
        """新建冬眠计划；冬眠前体重取最近一次称重。"""
        last_weight = self.data.last_weight(animal)
        last_feeding = self.data.last_feeding(animal)
        cycle = BrumationCycle(
            animal_id=animal.id,
            year=year,
            season_name=season_name,
            pre_brumation_weight=last_weight.weight_grams if last_weight else None,
            last_feeding_before=last_feeding.feeding_date if last_feeding else None,
            target_temp_low_f=target_temp_low_f,
            target_temp_high_f=target_temp_high_f,
            notes=notes,
        )
        self.data.insert(cycle)
        self.data.save()
        logger.info("Planned brumation %d for %s", year, animal.name)
        return cycle

    def advance_brumation(self, cycle: BrumationCycle, at: Optional[datetime] = None) -> BrumationCycle:
        """进入下一阶段并记下该阶段的开始日期。"""
        target = _BRUMATION_NEXT.get(cycle.status)
        if target is None:
            raise InvalidTransitionError("BrumationCycle", cycle.status.value, "next phase")
        when = ensure_aware(at) if at else self.clock()
        if target == BrumationStatus.COOLDOWN:
            cycle.cooldown_start_date = when
        elif target == BrumationStatus.ACTIVE:
            cycle.full_brumation_start_date = when
        elif target == BrumationStatus.WARMUP:
            cycle.warmup_start_date = when
        else:
            cycle.brumation_end_date = when
        cycle.status = target
        self.data.save()
        logger.info("Brumation %s is now %s", cycle.id, target.value)
        return cycle

    def record_post_brumation_weight(self, cycle: BrumationCycle, weight_grams: float) -> BrumationCycle:
        if weight_grams <= 0:
            raise ValueError("Weight must be positive")
        cycle.post_brumation_weight = weight_grams
        self.data.save()
        return cycle

    def cancel_brumation(self, cycle: BrumationCycle, reason: Optional[str] = None) -> BrumationCycle:
        if cycle.status.is_terminal:
            raise InvalidTransitionError("BrumationCycle", cycle.status.value, BrumationStatus.CANCELLED.value)
        cycle.status = BrumationStatus.CANCELLED
        if reason:
            cycle.notes = "\n".join(p for p in (cycle.notes, f"Cancelled: {reason}") if p)
        self.data.save()
        return cycle

    def active_brumations(self) -> List[BrumationCycle]:
        return self.data.fetch_active_brumations()

    def brumation_cycles_for(self, animal: Animal) -> List[BrumationCycle]:
        return self.data.fetch_brumation_cycles(animal)
