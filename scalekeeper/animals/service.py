"""个体管理：新增（受订阅数量限制）、状态变更、删除与物种目录。"""
import logging
from datetime import date
from typing import Callable, List, Optional

from scalekeeper.animals.models import Animal, AnimalSex, AnimalStatus, Species
from scalekeeper.animals.species import default_species, search_species
from scalekeeper.dates import Clock
from scalekeeper.dates import now as utc_now
from scalekeeper.breeding.models import PairingStatus
from scalekeeper.exceptions import InvalidTransitionError, LimitReachedError
from scalekeeper.reminders.models import ReminderKind
from scalekeeper.reminders.service import ReminderService
from scalekeeper.store.data_service import DataService

logger = logging.getLogger(__name__)


class AnimalService:
    """个体与物种的增删改。can_add_animal 接收当前数量，返回是否还能新增。"""

    def __init__(
        self,
        data_service: DataService,
        reminder_service: Optional[ReminderService] = None,
        clock: Optional[Clock] = None,
        can_add_animal: Optional[Callable[[int], bool]] = None,
    ):
        self.data = data_service
        self.reminders = reminder_service
        self.clock = clock or utc_now
        self.can_add_animal = can_add_animal

    # 物种

    def seed_species(self) -> int:
        """物种表为空时写入内置目录，返回写入数量。"""
        if self.data.fetch_all_species():
            return 0
        species = default_species()
        for s in species:
            self.data.insert(s)
        self.data.save()
        logger.info("Seeded %d species", len(species))
        return len(species)

    def search_species(self, query: str) -> List[Species]:
        return search_species(self.data.fetch_all_species(), query)

    # 个体

    def create_animal(
        self,
        name: str,
        species: Optional[Species] = None,
        sex: AnimalSex = AnimalSex.UNKNOWN,
        morph: Optional[str] = None,
        hatch_date: Optional[date] = None,
        feeding_interval_days: Optional[int] = None,
        enclosure_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Animal:
        count = self.data.animal_count()
        if self.can_add_animal is not None and not self.can_add_animal(count):
            raise LimitReachedError(f"Animal limit reached ({count}); upgrade to add more")
        animal = Animal(
            name=name,
            species_id=species.id if species else None,
            sex=sex,
            morph=morph,
            hatch_date=hatch_date,
            acquisition_date=self.clock(),
            feeding_interval_days=feeding_interval_days,
            enclosure_id=enclosure_id,
            notes=notes,
        )
        self.data.insert(animal)
        self.data.save()
        logger.info("Added animal %s", name)
        return animal

    def update_status(self, animal: Animal, status: AnimalStatus) -> Animal:
        animal.status = status
        animal.updated_at = self.clock()
        self.data.save()
        if status != AnimalStatus.ACTIVE:
            self._cancel_feeding_reminder(animal)
        return animal

    def set_feeding_interval(self, animal: Animal, days: Optional[int]) -> Animal:
        """设置个体喂食间隔；None 表示回到物种默认。"""
        if days is not None and days <= 0:
            raise ValueError("Feeding interval must be positive")
        animal.feeding_interval_days = days
        animal.updated_at = self.clock()
        self.data.save()
        return animal

    def delete_animal(self, animal: Animal) -> None:
        """删除个体及其全部记录、疗程和已结束的配对。

        仍在进行中的配对需要先关闭，否则抛 InvalidTransitionError。
        """
        pairings = self.data.fetch_pairings_for(animal)
        if any(p.status == PairingStatus.ACTIVE for p in pairings):
            raise InvalidTransitionError("Animal", "in active pairing", "deleted")

        records = (
            self.data.fetch_feedings(animal)
            + self.data.fetch_weights(animal)
            + self.data.fetch_lengths(animal)
            + self.data.fetch_shed_records(animal)
            + self.data.fetch_health_notes(animal)
            + self.data.fetch_brumation_cycles(animal)
        )
        for pairing in pairings:
            records.extend(self.data.fetch_clutches(pairing))
            records.append(pairing)
        plans = self.data.fetch_treatments(animal)
        for record in records + plans:
            self.data.delete(record)
        for clutch in self.data.fetch_clutches_with_offspring(animal):
            clutch.offspring_ids.remove(animal.id)
        self.data.delete(animal)
        self.data.save()
        logger.info("Deleted animal %s and %d related records", animal.name, len(records) + len(plans))

        self._cancel_feeding_reminder(animal)
        if self.reminders is not None:
            for plan in plans:
                try:
                    self.reminders.cancel_group(plan.id)
                except (OSError, ValueError):
                    logger.warning("Could not cancel reminders for plan %s", plan.id, exc_info=True)

    def active_animals(self) -> List[Animal]:
        return self.data.fetch_active_animals()

    def all_animals(self) -> List[Animal]:
        return self.data.fetch_all_animals()

    def _cancel_feeding_reminder(self, animal: Animal) -> None:
        if self.reminders is None:
            return
        try:
            self.reminders.cancel_reminder(animal.id, ReminderKind.FEEDING)
        except (OSError, ValueError):
            logger.warning("Could not cancel feeding reminder for %s", animal.name, exc_info=True)
