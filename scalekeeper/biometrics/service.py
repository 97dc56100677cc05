"""体重、体长记录与生长分析。"""
import logging
from datetime import datetime
from typing import List, Optional

from scalekeeper.animals.models import Animal
from scalekeeper.biometrics.models import (
    BodyConditionScore,
    GrowthData,
    GrowthRate,
    LengthChange,
    LengthRecord,
    MeasurementMethod,
    WeightRecord,
)
from scalekeeper.config import DAYS_PER_MONTH
from scalekeeper.dates import Clock, add_days, add_months, days_between
from scalekeeper.dates import now as utc_now
from scalekeeper.store.data_service import DataService

logger = logging.getLogger(__name__)


class BiometricsService:
    """体重/体长的记录与分析；数据不足时分析返回 None。"""

    def __init__(self, data_service: DataService, clock: Optional[Clock] = None):
        self.data = data_service
        self.clock = clock or utc_now

    def log_weight(
        self,
        animal: Animal,
        weight_grams: float,
        recorded_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> WeightRecord:
        """记录体重，并在这是最新一条时同步个体的当前体重。"""
        record = WeightRecord(
            animal_id=animal.id,
            weight_grams=weight_grams,
            recorded_at=recorded_at or self.clock(),
            notes=notes,
        )
        self.data.insert(record)
        latest = self.data.last_weight(animal)
        if latest is record:
            animal.current_weight_grams = weight_grams
            animal.updated_at = self.clock()
        self.data.save()
        logger.info("Logged weight %.1fg for %s", weight_grams, animal.name)
        return record

    def log_length(
        self,
        animal: Animal,
        length_cm: float,
        method: MeasurementMethod = MeasurementMethod.ESTIMATED,
        recorded_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> LengthRecord:
        record = LengthRecord(
            animal_id=animal.id,
            length_cm=length_cm,
            measurement_method=method,
            recorded_at=recorded_at or self.clock(),
            notes=notes,
        )
        self.data.insert(record)
        self.data.save()
        logger.info("Logged length %.1fcm for %s", length_cm, animal.name)
        return record

    def weight_history(self, animal: Animal, limit: Optional[int] = None) -> List[WeightRecord]:
        return self.data.fetch_weights(animal, limit=limit)

    def length_history(self, animal: Animal, limit: Optional[int] = None) -> List[LengthRecord]:
        return self.data.fetch_lengths(animal, limit=limit)

    def current_length(self, animal: Animal) -> Optional[LengthRecord]:
        return self.data.last_length(animal)

    def length_change(self, animal: Animal, days: int = 30) -> Optional[LengthChange]:
        """最新体长与 days 天前（含）最近一次测量的对比。"""
        records = self.data.fetch_lengths(animal)
        if len(records) < 2:
            return None
        cutoff = add_days(self.clock(), -days)
        current = records[0]
        previous = next((r for r in records if r.recorded_at <= cutoff), None)
        if previous is None or previous is current:
            return None
        return LengthChange(
            previous_length=previous.length_cm,
            current_length=current.length_cm,
            days_between=days_between(previous.recorded_at, current.recorded_at),
        )

    def body_condition(self, animal: Animal) -> Optional[BodyConditionScore]:
        weight = self.data.last_weight(animal)
        length = self.data.last_length(animal)
        if weight is None or length is None:
            return None
        return BodyConditionScore(weight_grams=weight.weight_grams, length_cm=length.length_cm)

    def growth_data(self, animal: Animal, months: int = 12) -> GrowthData:
        """近 months 个月的体重/体长序列，按时间升序。"""
        end = self.clock()
        cutoff = add_months(end, -months)
        weights = [w for w in reversed(self.data.fetch_weights(animal)) if w.recorded_at >= cutoff]
        lengths = [r for r in reversed(self.data.fetch_lengths(animal)) if r.recorded_at >= cutoff]
        return GrowthData(weights=weights, lengths=lengths, start_date=cutoff, end_date=end)

    def growth_rate(self, animal: Animal, months: int = 3) -> Optional[GrowthRate]:
        """窗口期内首末两次称重的月均增长率。"""
        cutoff = add_months(self.clock(), -months)
        weights = [w for w in reversed(self.data.fetch_weights(animal)) if w.recorded_at >= cutoff]
        if len(weights) < 2:
            return None

        first, last = weights[0], weights[-1]
        period_days = days_between(first.recorded_at, last.recorded_at)
        if period_days <= 0:
            return None

        total_change = last.weight_grams - first.weight_grams
        percent_change = total_change / first.weight_grams * 100
        monthly_rate = percent_change / (period_days / DAYS_PER_MONTH)
        return GrowthRate(
            total_change=total_change,
            percent_change=percent_change,
            monthly_rate=monthly_rate,
            period_days=period_days,
        )
