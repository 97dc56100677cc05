"""按实体类型封装的常用查询。

所有服务共用同一个 DataService（同一个 RecordStore），由组装层显式注入。
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from scalekeeper.animals.models import Animal, AnimalStatus, Species, SpeciesCategory
from scalekeeper.biometrics.models import LengthRecord, WeightRecord
from scalekeeper.breeding.models import Clutch, Pairing, PairingStatus
from scalekeeper.dates import start_of_day
from scalekeeper.enclosures.models import CleaningEvent, CleaningSchedule, CleaningType, Enclosure
from scalekeeper.exceptions import NotFoundError
from scalekeeper.feeding.models import FeedingEvent
from scalekeeper.health.models import BrumationCycle, HealthNote, ShedRecord
from scalekeeper.medication.models import Medication, TreatmentPlan, TreatmentStatus
from scalekeeper.store.models import Record
from scalekeeper.store.record_store import RecordStore
from scalekeeper.subscriptions.models import ScaleUser

logger = logging.getLogger(__name__)


class DataService:
    """记录存储之上的实体查询与通用增删存。"""

    def __init__(self, store: RecordStore):
        self.store = store

    # 通用

    def insert(self, record: Record) -> None:
        self.store.insert(record)

    def delete(self, record: Record) -> None:
        self.store.delete(record)

    def save(self) -> None:
        self.store.save()

    # 个体

    def fetch_all_animals(self) -> List[Animal]:
        return self.store.fetch(Animal, sort_key=lambda a: a.name)

    def fetch_active_animals(self) -> List[Animal]:
        return self.store.fetch(
            Animal,
            predicate=lambda a: a.status == AnimalStatus.ACTIVE,
            sort_key=lambda a: a.name,
        )

    def fetch_animal(self, animal_id: str) -> Optional[Animal]:
        return self.store.get(Animal, animal_id)

    def require_animal(self, animal_id: str) -> Animal:
        animal = self.fetch_animal(animal_id)
        if animal is None:
            raise NotFoundError("Animal", animal_id)
        return animal

    def animal_count(self) -> int:
        return self.store.count(Animal)

    def active_animal_count(self) -> int:
        return self.store.count(Animal, lambda a: a.status == AnimalStatus.ACTIVE)

    # 物种

    def fetch_all_species(self) -> List[Species]:
        return self.store.fetch(Species, sort_key=lambda s: s.common_name)

    def fetch_species_by_category(self, category: SpeciesCategory) -> List[Species]:
        return self.store.fetch(
            Species,
            predicate=lambda s: s.category == category,
            sort_key=lambda s: s.common_name,
        )

    def fetch_species(self, species_id: str) -> Optional[Species]:
        return self.store.get(Species, species_id)

    # 喂食

    def fetch_feedings(self, animal: Animal, limit: Optional[int] = None) -> List[FeedingEvent]:
        """某个体的喂食记录，最新在前。"""
        return self.store.fetch(
            FeedingEvent,
            predicate=lambda f: f.animal_id == animal.id,
            sort_key=lambda f: f.feeding_date,
            reverse=True,
            limit=limit,
        )

    def last_feeding(self, animal: Animal) -> Optional[FeedingEvent]:
        feedings = self.fetch_feedings(animal, limit=1)
        return feedings[0] if feedings else None

    def feedings_on(self, day: datetime) -> List[FeedingEvent]:
        """day 所在本地日历日内的全部喂食，最新在前。"""
        start = start_of_day(day)
        end = start + timedelta(days=1)
        return self.store.fetch(
            FeedingEvent,
            predicate=lambda f: start <= f.feeding_date < end,
            sort_key=lambda f: f.feeding_date,
            reverse=True,
        )

    # 体重 / 体长

    def fetch_weights(self, animal: Animal, limit: Optional[int] = None) -> List[WeightRecord]:
        """某个体的体重记录，最新在前。"""
        return self.store.fetch(
            WeightRecord,
            predicate=lambda w: w.animal_id == animal.id,
            sort_key=lambda w: w.recorded_at,
            reverse=True,
            limit=limit,
        )

    def last_weight(self, animal: Animal) -> Optional[WeightRecord]:
        weights = self.fetch_weights(animal, limit=1)
        return weights[0] if weights else None

    def fetch_lengths(self, animal: Animal, limit: Optional[int] = None) -> List[LengthRecord]:
        """某个体的体长记录，最新在前。"""
        return self.store.fetch(
            LengthRecord,
            predicate=lambda r: r.animal_id == animal.id,
            sort_key=lambda r: r.recorded_at,
            reverse=True,
            limit=limit,
        )

    def last_length(self, animal: Animal) -> Optional[LengthRecord]:
        lengths = self.fetch_lengths(animal, limit=1)
        return lengths[0] if lengths else None

    # 蜕皮 / 健康 / 冬眠

    def fetch_shed_records(self, animal: Animal, limit: Optional[int] = None) -> List[ShedRecord]:
        """某个体的蜕皮记录，最新在前。"""
        return self.store.fetch(
            ShedRecord,
            predicate=lambda r: r.animal_id == animal.id,
            sort_key=lambda r: r.shed_date,
            reverse=True,
            limit=limit,
        )

    def last_shed(self, animal: Animal) -> Optional[ShedRecord]:
        sheds = self.fetch_shed_records(animal, limit=1)
        return sheds[0] if sheds else None

    def fetch_health_notes(
        self,
        animal: Animal,
        limit: Optional[int] = None,
        unresolved_only: bool = False,
    ) -> List[HealthNote]:
        """某个体的健康记录，最新在前。"""
        return self.store.fetch(
            HealthNote,
            predicate=lambda n: n.animal_id == animal.id and not (unresolved_only and n.is_resolved),
            sort_key=lambda n: n.recorded_at,
            reverse=True,
            limit=limit,
        )

    def fetch_brumation_cycles(self, animal: Optional[Animal] = None) -> List[BrumationCycle]:
        """冬眠周期，按年份倒序；animal 为空时返回全部。"""
        return self.store.fetch(
            BrumationCycle,
            predicate=(lambda c: c.animal_id == animal.id) if animal is not None else None,
            sort_key=lambda c: c.year,
            reverse=True,
        )

    def fetch_active_brumations(self) -> List[BrumationCycle]:
        return self.store.fetch(
            BrumationCycle,
            predicate=lambda c: not c.status.is_terminal,
            sort_key=lambda c: c.year,
            reverse=True,
        )

    # 饲养箱与清洁

    def fetch_enclosures(self) -> List[Enclosure]:
        return self.store.fetch(Enclosure, sort_key=lambda e: e.name)

    def fetch_enclosure(self, enclosure_id: str) -> Optional[Enclosure]:
        return self.store.get(Enclosure, enclosure_id)

    def fetch_cleaning_events(self, enclosure: Enclosure, limit: Optional[int] = None) -> List[CleaningEvent]:
        """某饲养箱的清洁记录，最新在前。"""
        return self.store.fetch(
            CleaningEvent,
            predicate=lambda e: e.enclosure_id == enclosure.id,
            sort_key=lambda e: e.cleaned_at,
            reverse=True,
            limit=limit,
        )

    def last_cleaning(self, enclosure: Enclosure, cleaning_type: CleaningType) -> Optional[CleaningEvent]:
        events = self.store.fetch(
            CleaningEvent,
            predicate=lambda e: e.enclosure_id == enclosure.id and e.cleaning_type == cleaning_type,
            sort_key=lambda e: e.cleaned_at,
            reverse=True,
            limit=1,
        )
        return events[0] if events else None

    def fetch_cleaning_schedules(self, enclosure: Enclosure) -> List[CleaningSchedule]:
        return self.store.fetch(
            CleaningSchedule,
            predicate=lambda s: s.enclosure_id == enclosure.id,
            sort_key=lambda s: s.created_at,
        )

    def fetch_cleaning_schedule(self, enclosure: Enclosure, cleaning_type: CleaningType) -> Optional[CleaningSchedule]:
        for schedule in self.fetch_cleaning_schedules(enclosure):
            if schedule.cleaning_type == cleaning_type:
                return schedule
        return None

    # 用药

    def fetch_active_treatments(self) -> List[TreatmentPlan]:
        return self.store.fetch(
            TreatmentPlan,
            predicate=lambda p: p.status == TreatmentStatus.ACTIVE,
            sort_key=lambda p: p.start_date,
            reverse=True,
        )

    def fetch_treatments(self, animal: Animal) -> List[TreatmentPlan]:
        return self.store.fetch(
            TreatmentPlan,
            predicate=lambda p: p.animal_id == animal.id,
            sort_key=lambda p: p.start_date,
            reverse=True,
        )

    def fetch_treatment(self, plan_id: str) -> Optional[TreatmentPlan]:
        return self.store.get(TreatmentPlan, plan_id)

    def fetch_medications(self) -> List[Medication]:
        return self.store.fetch(Medication, sort_key=lambda m: m.name)

    def fetch_medication(self, medication_id: str) -> Optional[Medication]:
        return self.store.get(Medication, medication_id)

    # 繁殖

    def fetch_pairings(self, active_only: bool = False) -> List[Pairing]:
        return self.store.fetch(
            Pairing,
            predicate=(lambda p: p.status == PairingStatus.ACTIVE) if active_only else None,
            sort_key=lambda p: p.introduction_date,
            reverse=True,
        )

    def fetch_pairings_for(self, animal: Animal) -> List[Pairing]:
        return self.store.fetch(
            Pairing,
            predicate=lambda p: animal.id in (p.male_id, p.female_id),
            sort_key=lambda p: p.introduction_date,
            reverse=True,
        )

    def fetch_clutches(self, pairing: Pairing) -> List[Clutch]:
        return self.store.fetch(
            Clutch,
            predicate=lambda c: c.pairing_id == pairing.id,
            sort_key=lambda c: c.lay_date,
            reverse=True,
        )

    def fetch_clutches_with_offspring(self, animal: Animal) -> List[Clutch]:
        """记录了该个体为出壳后代的窝卵。"""
        return self.store.fetch(Clutch, predicate=lambda c: animal.id in c.offspring_ids)

    # 用户

    def fetch_current_user(self) -> Optional[ScaleUser]:
        users = self.store.fetch(ScaleUser, sort_key=lambda u: u.created_at, limit=1)
        return users[0] if users else None

    def get_or_create_user(self) -> ScaleUser:
        user = self.fetch_current_user()
        if user is not None:
            return user
        user = ScaleUser()
        self.store.insert(user)
        self.store.save()
        logger.info("Created local user %s", user.id)
        return user
