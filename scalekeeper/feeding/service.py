"""喂食服务：喂食状态、汇总看板、记录喂食与饥饿分析。"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from scalekeeper.animals.models import Animal
from scalekeeper.config import DEFAULT_FEEDING_INTERVAL_DAYS, FEEDING_INSIGHT_DAYS
from scalekeeper.dates import Clock, add_days, days_between, local_date
from scalekeeper.dates import now as utc_now
from scalekeeper.exceptions import NoHistoryError, ScaleKeeperError
from scalekeeper.feeding.models import (
    FeedingBoard,
    FeedingEvent,
    FeedingInsight,
    FeedingResponse,
    FeedingStats,
    FeedingStatus,
    FeedingStatusKind,
    HungerDuration,
    HungerUrgency,
    PreySize,
    PreyState,
    PreyType,
)
from scalekeeper.reminders.models import ReminderKind
from scalekeeper.reminders.service import ReminderService
from scalekeeper.store.data_service import DataService

logger = logging.getLogger(__name__)


class FeedingService:
    """喂食相关的读写与分析；看板由 refresh() 整体替换发布。"""

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
        self._board = FeedingBoard()

    @property
    def board(self) -> FeedingBoard:
        """最近一次成功发布的看板。"""
        return self._board

    # 状态

    def feeding_interval_for(self, animal: Animal) -> int:
        """喂食间隔（天）：个体设置 > 物种默认 > 全局默认。"""
        if animal.feeding_interval_days:
            return animal.feeding_interval_days
        if animal.species_id:
            species = self.data.fetch_species(animal.species_id)
            if species is not None and species.default_feeding_interval_days:
                return species.default_feeding_interval_days
        return DEFAULT_FEEDING_INTERVAL_DAYS

    def feeding_status(self, animal: Animal) -> FeedingStatus:
        last = self.data.last_feeding(animal)
        if last is None:
            return FeedingStatus.not_scheduled()

        today = local_date(self.clock())
        last_day = local_date(last.feeding_date)
        if last_day == today:
            return FeedingStatus.fed_today()

        next_due = last_day + timedelta(days=self.feeding_interval_for(animal))
        if next_due < today:
            return FeedingStatus.overdue((today - next_due).days)
        if next_due == today:
            return FeedingStatus.due_today()
        return FeedingStatus.upcoming((next_due - today).days)

    def refresh(self) -> FeedingBoard:
        """扫描全部在养个体并发布新看板；扫描失败时保留旧看板。"""
        with self._refresh_lock:
            self._generation += 1
            generation = self._generation

        try:
            board = self._scan(generation)
        except (ScaleKeeperError, OSError, ValueError):
            logger.exception("Error refreshing feeding data")
            return self._board

        with self._refresh_lock:
            if generation > self._board.generation:
                self._board = board
            return self._board

    def _scan(self, generation: int) -> FeedingBoard:
        board = FeedingBoard(generation=generation, refreshed_at=self.clock())
        for animal in self.data.fetch_active_animals():
            kind = self.feeding_status(animal).kind
            if kind == FeedingStatusKind.FED_TODAY:
                board.fed_today.append(animal)
            elif kind == FeedingStatusKind.DUE_TODAY:
                board.due_today.append(animal)
            elif kind == FeedingStatusKind.OVERDUE:
                board.overdue.append(animal)
            else:
                # 未排期的也归入即将喂食
                board.upcoming.append(animal)
        return board

    # 记录

    def log_feeding(
        self,
        animal: Animal,
        prey_type: PreyType,
        prey_size: PreySize,
        prey_state: PreyState = PreyState.FROZEN_THAWED,
        quantity: int = 1,
        response: FeedingResponse = FeedingResponse.STRUCK_IMMEDIATELY,
        notes: Optional[str] = None,
        refused_reason: Optional[str] = None,
        prey_weight_grams: Optional[float] = None,
        feeding_date: Optional[datetime] = None,
    ) -> FeedingEvent:
        """记录一次喂食并落盘；写入失败抛 SaveFailedError。"""
        feeding = self._build_feeding(
            animal, prey_type, prey_size, prey_state, quantity, response,
            notes, refused_reason, prey_weight_grams, feeding_date,
        )
        self.data.insert(feeding)
        self.data.save()
        logger.info("Logged feeding for %s (%s)", animal.name, feeding.response.value)
        self._schedule_next_reminder(animal, feeding)
        return feeding

    def quick_feed(self, animal: Animal) -> FeedingEvent:
        """按上一次喂食的饵料再喂一次。"""
        last = self.data.last_feeding(animal)
        if last is None:
            raise NoHistoryError(f"No feeding history for {animal.name}")
        return self.log_feeding(
            animal,
            prey_type=last.prey_type,
            prey_size=last.prey_size,
            prey_state=last.prey_state,
            quantity=last.quantity,
            prey_weight_grams=last.prey_weight_grams,
            response=FeedingResponse.STRUCK_IMMEDIATELY,
        )

    def batch_feed(
        self,
        animals: Iterable[Animal],
        prey_type: PreyType,
        prey_size: PreySize,
        prey_state: PreyState = PreyState.FROZEN_THAWED,
        quantity: int = 1,
    ) -> List[FeedingEvent]:
        """同一饵料批量喂食，一次落盘。"""
        feedings = []
        for animal in animals:
            feeding = self._build_feeding(
                animal, prey_type, prey_size, prey_state, quantity,
                FeedingResponse.STRUCK_IMMEDIATELY, None, None, None, None,
            )
            self.data.insert(feeding)
            feedings.append((animal, feeding))
        self.data.save()
        logger.info("Batch fed %d animals", len(feedings))
        for animal, feeding in feedings:
            self._schedule_next_reminder(animal, feeding)
        return [f for _, f in feedings]

    def _build_feeding(
        self,
        animal: Animal,
        prey_type: PreyType,
        prey_size: PreySize,
        prey_state: PreyState,
        quantity: int,
        response: FeedingResponse,
        notes: Optional[str],
        refused_reason: Optional[str],
        prey_weight_grams: Optional[float],
        feeding_date: Optional[datetime],
    ) -> FeedingEvent:
        return FeedingEvent(
            animal_id=animal.id,
            feeding_date=feeding_date or self.clock(),
            prey_type=prey_type,
            prey_size=prey_size,
            prey_state=prey_state,
            quantity=quantity,
            prey_weight_grams=prey_weight_grams,
            response=response,
            refused_reason=refused_reason,
            notes=notes,
        )

    def _schedule_next_reminder(self, animal: Animal, feeding: FeedingEvent) -> None:
        if self.reminders is None:
            return
        due_at = add_days(feeding.feeding_date, self.feeding_interval_for(animal))
        if due_at <= self.clock():
            return
        try:
            self.reminders.schedule_reminder(
                animal.id,
                ReminderKind.FEEDING,
                due_at,
                title=f"Feed {animal.name}",
                body=f"{animal.name} is due for a feeding.",
            )
        except (OSError, ValueError):
            logger.warning("Could not schedule feeding reminder for %s", animal.name, exc_info=True)

    # 统计与分析

    def feeding_stats(self, animal: Animal) -> FeedingStats:
        feedings = self.data.fetch_feedings(animal)
        successful = [f for f in feedings if f.response.is_successful]
        refusals = [f for f in feedings if f.response == FeedingResponse.REFUSED]

        intervals = [
            days_between(older.feeding_date, newer.feeding_date)
            for newer, older in zip(feedings, feedings[1:])
        ]
        avg_interval = sum(intervals) // len(intervals) if intervals else 0

        return FeedingStats(
            total_feedings=len(feedings),
            successful_feedings=len(successful),
            refusals=len(refusals),
            average_interval_days=avg_interval,
            last_feeding_date=feedings[0].feeding_date if feedings else None,
        )

    def hunger_duration(self, animal: Animal) -> HungerDuration:
        """距上次成功进食的天数、连续拒食次数和拒食期间的体重变化。"""
        feedings = self.data.fetch_feedings(animal)
        last_successful = next((f for f in feedings if f.response.is_successful), None)

        refusal_count = 0
        for feeding in feedings:
            if feeding.response == FeedingResponse.REFUSED:
                refusal_count += 1
            elif feeding.response.is_successful:
                break

        if last_successful is None:
            return HungerDuration(refusal_count=refusal_count)

        last_date = last_successful.feeding_date
        weights = self.data.fetch_weights(animal)
        before = next((w for w in weights if w.recorded_at <= last_date), None)
        after = [w for w in weights if w.recorded_at > last_date]
        # weights 按时间倒序，strike 期间取最早的一条
        during = after[-1] if after else None

        weight_change = None
        if before is not None and during is not None and before.weight_grams > 0:
            weight_change = (during.weight_grams - before.weight_grams) / before.weight_grams * 100

        return HungerDuration(
            days_since_last_meal=days_between(last_date, self.clock()),
            last_successful_feeding=last_date,
            refusal_count=refusal_count,
            weight_change_during_strike=weight_change,
        )

    def feeding_insight(self, animal: Animal, days: int = FEEDING_INSIGHT_DAYS) -> FeedingInsight:
        cutoff = add_days(self.clock(), -days)
        recent_feedings = [f for f in self.data.fetch_feedings(animal) if f.feeding_date >= cutoff]
        recent_weights = [w for w in self.data.fetch_weights(animal) if w.recorded_at >= cutoff]
        return FeedingInsight(
            animal=animal,
            recent_feedings=recent_feedings,
            weights=recent_weights,
            hunger_duration=self.hunger_duration(animal),
        )

    def animals_with_extended_hunger(self) -> List[Tuple[Animal, HungerDuration]]:
        """禁食偏长的在养个体，按禁食天数从多到少。"""
        results = []
        for animal in self.data.fetch_active_animals():
            hunger = self.hunger_duration(animal)
            if hunger.urgency_level not in (HungerUrgency.NORMAL, HungerUrgency.UNKNOWN):
                results.append((animal, hunger))
        results.sort(key=lambda pair: pair[1].days_since_last_meal or 0, reverse=True)
        return results
