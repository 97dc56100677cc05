"""繁殖记录：配对、交配观察与窝卵孵化。"""
import logging
from datetime import datetime
from typing import List, Optional

from scalekeeper.animals.models import Animal, AnimalSex
from scalekeeper.breeding.models import (
    Clutch,
    ClutchStatus,
    IncubationMethod,
    LockObservation,
    Pairing,
    PairingStatus,
)
from scalekeeper.dates import Clock, ensure_aware
from scalekeeper.dates import now as utc_now
from scalekeeper.exceptions import InvalidTransitionError
from scalekeeper.store.data_service import DataService

logger = logging.getLogger(__name__)


class BreedingService:
    def __init__(self, data_service: DataService, clock: Optional[Clock] = None):
        self.data = data_service
        self.clock = clock or utc_now

    # 配对

    def create_pairing(
        self,
        male: Animal,
        female: Animal,
        introduction_date: Optional[datetime] = None,
        breeding_season: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Pairing:
        if male.id == female.id:
            raise ValueError("An animal cannot be paired with itself")
        if male.sex == AnimalSex.FEMALE or female.sex == AnimalSex.MALE:
            raise ValueError(f"Sex mismatch for pairing {male.name} x {female.name}")
        pairing = Pairing(
            male_id=male.id,
            female_id=female.id,
            introduction_date=introduction_date or self.clock(),
            breeding_season=breeding_season,
            notes=notes,
        )
        self.data.insert(pairing)
        self.data.save()
        logger.info("Paired %s x %s", male.name, female.name)
        return pairing

    def log_lock(
        self,
        pairing: Pairing,
        duration_minutes: Optional[int] = None,
        notes: Optional[str] = None,
        observed_at: Optional[datetime] = None,
    ) -> LockObservation:
        self._require_active_pairing(pairing, "lock")
        lock = LockObservation(
            observed_at=observed_at or self.clock(),
            duration_minutes=duration_minutes,
            notes=notes,
        )
        pairing.locks.append(lock)
        pairing.updated_at = self.clock()
        self.data.save()
        return lock

    def close_pairing(self, pairing: Pairing, status: PairingStatus) -> Pairing:
        """结束配对（成功 / 失败 / 取消），记录分笼时间。"""
        if status == PairingStatus.ACTIVE:
            raise InvalidTransitionError("Pairing", pairing.status.value, status.value)
        self._require_active_pairing(pairing, status.value)
        pairing.status = status
        pairing.separation_date = self.clock()
        pairing.updated_at = self.clock()
        self.data.save()
        logger.info("Closed pairing %s as %s", pairing.id, status.value)
        return pairing

    def _require_active_pairing(self, pairing: Pairing, target: str) -> None:
        if pairing.status != PairingStatus.ACTIVE:
            raise InvalidTransitionError("Pairing", pairing.status.value, target)

    # 窝卵

    def log_clutch(
        self,
        pairing: Pairing,
        total_eggs: int,
        lay_date: Optional[datetime] = None,
        incubation_method: Optional[IncubationMethod] = None,
        incubation_temp_f: Optional[float] = None,
        incubation_humidity: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Clutch:
        laid = lay_date or self.clock()
        clutch = Clutch(
            pairing_id=pairing.id,
            lay_date=laid,
            total_eggs=total_eggs,
            incubation_start_date=laid,
            incubation_method=incubation_method,
            incubation_temp_f=incubation_temp_f,
            incubation_humidity=incubation_humidity,
            notes=notes,
        )
        self.data.insert(clutch)
        self.data.save()
        logger.info("Logged clutch of %d eggs for pairing %s", total_eggs, pairing.id)
        return clutch

    def update_clutch_counts(
        self,
        clutch: Clutch,
        fertile_eggs: Optional[int] = None,
        infertile_eggs: Optional[int] = None,
        slugs: Optional[int] = None,
    ) -> Clutch:
        """更新受精/未受精/无效卵数；三者之和不能超过总卵数。"""
        fertile = fertile_eggs if fertile_eggs is not None else clutch.fertile_eggs
        infertile = infertile_eggs if infertile_eggs is not None else clutch.infertile_eggs
        bad = slugs if slugs is not None else clutch.slugs
        counted = sum(n for n in (fertile, infertile, bad) if n is not None)
        if counted > clutch.total_eggs:
            raise ValueError(f"Egg counts ({counted}) exceed clutch size ({clutch.total_eggs})")
        clutch.fertile_eggs = fertile
        clutch.infertile_eggs = infertile
        clutch.slugs = bad
        clutch.updated_at = self.clock()
        self.data.save()
        return clutch

    def record_pip(self, clutch: Clutch, at: Optional[datetime] = None) -> Clutch:
        self._require_open_clutch(clutch, ClutchStatus.PIPPING)
        clutch.first_pip_date = ensure_aware(at) if at else self.clock()
        clutch.status = ClutchStatus.PIPPING
        clutch.updated_at = self.clock()
        self.data.save()
        return clutch

    def record_hatch(
        self,
        clutch: Clutch,
        total_hatched: int,
        offspring: Optional[List[Animal]] = None,
        hatch_start_date: Optional[datetime] = None,
        complete: bool = True,
    ) -> Clutch:
        """记录出壳数；complete 为 False 时状态为出壳中。"""
        self._require_open_clutch(clutch, ClutchStatus.HATCHED)
        if total_hatched > clutch.total_eggs:
            raise ValueError(f"Hatched count ({total_hatched}) exceeds clutch size ({clutch.total_eggs})")
        at = self.clock()
        clutch.total_hatched = total_hatched
        if clutch.hatch_start_date is None:
            clutch.hatch_start_date = ensure_aware(hatch_start_date) if hatch_start_date else at
        if offspring:
            clutch.offspring_ids.extend(a.id for a in offspring if a.id not in clutch.offspring_ids)
        if complete:
            clutch.status = ClutchStatus.HATCHED
            clutch.hatch_end_date = at
        else:
            clutch.status = ClutchStatus.HATCHING
        clutch.updated_at = at
        self.data.save()
        logger.info("Clutch %s: %d hatched", clutch.id, total_hatched)
        return clutch

    def fail_clutch(self, clutch: Clutch, reason: Optional[str] = None) -> Clutch:
        self._require_open_clutch(clutch, ClutchStatus.FAILED)
        clutch.status = ClutchStatus.FAILED
        if reason:
            clutch.notes = "\n".join(p for p in (clutch.notes, f"Failed: {reason}") if p)
        clutch.updated_at = self.clock()
        self.data.save()
        return clutch

    def _require_open_clutch(self, clutch: Clutch, target: ClutchStatus) -> None:
        if clutch.status in (ClutchStatus.HATCHED, ClutchStatus.FAILED):
            raise InvalidTransitionError("Clutch", clutch.status.value, target.value)

    # 查询

    def pairings(self, active_only: bool = False) -> List[Pairing]:
        return self.data.fetch_pairings(active_only=active_only)

    def pairings_for(self, animal: Animal) -> List[Pairing]:
        return self.data.fetch_pairings_for(animal)

    def clutches_for(self, pairing: Pairing) -> List[Clutch]:
        return self.data.fetch_clutches(pairing)
