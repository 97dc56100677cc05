"""用药服务：疗程排期、剂量状态流转、疗程状态机与用药看板。"""
import logging
import threading
from datetime import datetime, timedelta
from typing import List, Optional

from scalekeeper.animals.models import Animal
from scalekeeper.dates import Clock, add_hours, start_of_day
from scalekeeper.dates import now as utc_now
from scalekeeper.exceptions import InvalidTransitionError, NotFoundError, ScaleKeeperError
from scalekeeper.medication.models import (
    ActiveTreatmentSummary,
    DoseStatus,
    Medication,
    MedicationBoard,
    MedicationDose,
    MedicationProtocol,
    MedicationType,
    TreatmentPlan,
    TreatmentStatus,
)
from scalekeeper.reminders.models import ReminderKind
from scalekeeper.reminders.service import ReminderService
from scalekeeper.store.data_service import DataService

logger = logging.getLogger(__name__)

# 允许的疗程状态流转；终态不出现在键里
_TRANSITIONS = {
    TreatmentStatus.ACTIVE: {TreatmentStatus.PAUSED, TreatmentStatus.COMPLETED, TreatmentStatus.DISCONTINUED},
    TreatmentStatus.PAUSED: {TreatmentStatus.ACTIVE, TreatmentStatus.DISCONTINUED},
}


class MedicationService:
    """药品、疗程与剂量；看板只统计进行中的疗程。"""

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
        self._board = MedicationBoard()

    @property
    def board(self) -> MedicationBoard:
        return self._board

    # 药品

    def create_medication(
        self,
        name: str,
        medication_type: MedicationType,
        default_dosage_notes: Optional[str] = None,
        manufacturer: Optional[str] = None,
        common_protocols: Optional[List[MedicationProtocol]] = None,
    ) -> Medication:
        medication = Medication(
            name=name,
            medication_type=medication_type,
            default_dosage_notes=default_dosage_notes,
            manufacturer=manufacturer,
            common_protocols=common_protocols or [],
        )
        self.data.insert(medication)
        self.data.save()
        logger.info("Created medication %s", name)
        return medication

    # 疗程

    def create_treatment_plan(
        self,
        animal: Animal,
        medication: Medication,
        condition_treated: str,
        dosage: str,
        frequency_hours: int,
        total_doses: int,
        start_date: Optional[datetime] = None,
        prescribed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> TreatmentPlan:
        """新建疗程，按 start + k·frequency_hours 生成 total_doses 次剂量。"""
        start = start_date or self.clock()
        plan = TreatmentPlan(
            animal_id=animal.id,
            medication_id=medication.id,
            condition_treated=condition_treated,
            dosage=dosage,
            frequency_hours=frequency_hours,
            total_doses=total_doses,
            start_date=start,
            prescribed_by=prescribed_by,
            notes=notes,
        )
        plan.doses = [
            MedicationDose(plan_id=plan.id, index=k, scheduled_time=add_hours(start, k * frequency_hours))
            for k in range(total_doses)
        ]
        plan.end_date = plan.doses[-1].scheduled_time

        self.data.insert(plan)
        self.data.save()
        logger.info(
            "Created treatment plan for %s: %s, %d doses every %dh",
            animal.name, medication.name, total_doses, frequency_hours,
        )
        self._schedule_dose_reminders(plan, animal_name=animal.name, medication_name=medication.name)
        return plan

    def require_treatment(self, plan_id: str) -> TreatmentPlan:
        plan = self.data.fetch_treatment(plan_id)
        if plan is None:
            raise NotFoundError("TreatmentPlan", plan_id)
        return plan

    def _require_dose(self, plan: TreatmentPlan, dose_id: str, target: DoseStatus) -> MedicationDose:
        dose = plan.find_dose(dose_id)
        if dose is None:
            raise NotFoundError("MedicationDose", dose_id)
        if plan.status.is_terminal:
            raise InvalidTransitionError("TreatmentPlan", plan.status.value, f"dose {target.value}")
        if dose.status != DoseStatus.SCHEDULED:
            raise InvalidTransitionError("MedicationDose", dose.status.value, target.value)
        return dose

    # 剂量

    def administer_dose(self, plan: TreatmentPlan, dose_id: str, notes: Optional[str] = None) -> MedicationDose:
        """记录一次给药；已给药次数达到总次数时疗程完成。"""
        dose = self._require_dose(plan, dose_id, DoseStatus.ADMINISTERED)
        dose.status = DoseStatus.ADMINISTERED
        dose.administered_time = self.clock()
        if notes is not None:
            dose.notes = notes
        if plan.is_complete and plan.status == TreatmentStatus.ACTIVE:
            plan.status = TreatmentStatus.COMPLETED
            logger.info("Treatment plan %s completed", plan.id)
        self.data.save()
        self._cancel_dose_reminder(dose)
        if plan.status == TreatmentStatus.COMPLETED:
            self._cancel_plan_reminders(plan)
        return dose

    def skip_dose(self, plan: TreatmentPlan, dose_id: str, reason: Optional[str] = None) -> MedicationDose:
        dose = self._require_dose(plan, dose_id, DoseStatus.SKIPPED)
        dose.status = DoseStatus.SKIPPED
        if reason is not None:
            dose.notes = reason
        self.data.save()
        self._cancel_dose_reminder(dose)
        return dose

    def mark_dose_missed(self, plan: TreatmentPlan, dose_id: str) -> MedicationDose:
        dose = self._require_dose(plan, dose_id, DoseStatus.MISSED)
        dose.status = DoseStatus.MISSED
        self.data.save()
        self._cancel_dose_reminder(dose)
        return dose

    # 疗程状态机

    def _transition(self, plan: TreatmentPlan, target: TreatmentStatus) -> None:
        if target not in _TRANSITIONS.get(plan.status, set()):
            raise InvalidTransitionError("TreatmentPlan", plan.status.value, target.value)
        plan.status = target

    def pause_treatment(self, plan: TreatmentPlan) -> None:
        """暂停：剂量记录不变，只取消提醒。"""
        self._transition(plan, TreatmentStatus.PAUSED)
        self.data.save()
        self._cancel_plan_reminders(plan)
        logger.info("Paused treatment plan %s", plan.id)

    def resume_treatment(self, plan: TreatmentPlan) -> None:
        """恢复疗程；暂停期间已给完全部剂量的直接完成。"""
        self._transition(plan, TreatmentStatus.ACTIVE)
        if plan.is_complete:
            self._transition(plan, TreatmentStatus.COMPLETED)
            self.data.save()
            self._cancel_plan_reminders(plan)
            logger.info("Treatment plan %s completed on resume", plan.id)
            return
        self.data.save()
        self._schedule_dose_reminders(plan)
        logger.info("Resumed treatment plan %s", plan.id)

    def discontinue_treatment(self, plan: TreatmentPlan, reason: Optional[str] = None) -> None:
        self._transition(plan, TreatmentStatus.DISCONTINUED)
        plan.end_date = self.clock()
        if reason:
            plan.notes = "\n".join(p for p in (plan.notes, f"Discontinued: {reason}") if p)
        self.data.save()
        self._cancel_plan_reminders(plan)
        logger.info("Discontinued treatment plan %s", plan.id)

    # 看板

    def refresh(self) -> MedicationBoard:
        """扫描进行中的疗程并发布新看板；扫描失败时保留旧看板。"""
        with self._refresh_lock:
            self._generation += 1
            generation = self._generation

        try:
            board = self._scan(generation)
        except (ScaleKeeperError, OSError, ValueError):
            logger.exception("Error refreshing medication data")
            return self._board

        with self._refresh_lock:
            if generation > self._board.generation:
                self._board = board
            return self._board

    def _scan(self, generation: int) -> MedicationBoard:
        at = self.clock()
        today = start_of_day(at)
        tomorrow = today + timedelta(days=1)

        plans = self.data.fetch_active_treatments()
        doses_today = []
        overdue = []
        for plan in plans:
            for dose in plan.doses:
                if dose.is_overdue(at):
                    overdue.append(dose)
                elif dose.status == DoseStatus.SCHEDULED and today <= dose.scheduled_time < tomorrow:
                    doses_today.append(dose)

        return MedicationBoard(
            active_treatments=plans,
            doses_today=sorted(doses_today, key=lambda d: d.scheduled_time),
            overdue_doses=sorted(overdue, key=lambda d: d.scheduled_time),
            generation=generation,
            refreshed_at=at,
        )

    # 查询

    def treatments_for(self, animal: Animal) -> List[TreatmentPlan]:
        return self.data.fetch_treatments(animal)

    def active_treatment_summaries(self) -> List[ActiveTreatmentSummary]:
        today = start_of_day(self.clock())
        tomorrow = today + timedelta(days=1)
        summaries = []
        for plan in self.data.fetch_active_treatments():
            animal = self.data.fetch_animal(plan.animal_id)
            medication = self.data.fetch_medication(plan.medication_id)
            if animal is None or medication is None:
                continue
            summaries.append(ActiveTreatmentSummary(
                plan=plan,
                animal_name=animal.name,
                medication_name=medication.name,
                doses_today=[d for d in plan.doses if today <= d.scheduled_time < tomorrow],
                next_dose=plan.next_scheduled_dose,
            ))
        return summaries

    def animals_on_treatment(self) -> List[Animal]:
        """有进行中疗程的个体（去重）。"""
        seen = set()
        animals = []
        for plan in self.data.fetch_active_treatments():
            if plan.animal_id in seen:
                continue
            animal = self.data.fetch_animal(plan.animal_id)
            if animal is not None:
                seen.add(plan.animal_id)
                animals.append(animal)
        return animals

    # 提醒

    def _schedule_dose_reminders(
        self,
        plan: TreatmentPlan,
        animal_name: Optional[str] = None,
        medication_name: Optional[str] = None,
    ) -> None:
        if self.reminders is None:
            return
        if animal_name is None:
            animal = self.data.fetch_animal(plan.animal_id)
            animal_name = animal.name if animal else "your animal"
        if medication_name is None:
            medication = self.data.fetch_medication(plan.medication_id)
            medication_name = medication.name if medication else "medication"

        at = self.clock()
        try:
            for dose in plan.doses:
                if dose.status != DoseStatus.SCHEDULED or dose.scheduled_time <= at:
                    continue
                self.reminders.schedule_reminder(
                    dose.id,
                    ReminderKind.MEDICATION,
                    dose.scheduled_time,
                    title=f"Medication for {animal_name}",
                    body=f"{medication_name}: {plan.dosage}",
                    group_id=plan.id,
                )
        except (OSError, ValueError):
            logger.warning("Could not schedule dose reminders for plan %s", plan.id, exc_info=True)

    def _cancel_dose_reminder(self, dose: MedicationDose) -> None:
        if self.reminders is None:
            return
        try:
            self.reminders.cancel_reminder(dose.id, ReminderKind.MEDICATION)
        except (OSError, ValueError):
            logger.warning("Could not cancel reminder for dose %s", dose.id, exc_info=True)

    def _cancel_plan_reminders(self, plan: TreatmentPlan) -> None:
        if self.reminders is None:
            return
        try:
            self.reminders.cancel_group(plan.id)
        except (OSError, ValueError):
            logger.warning("Could not cancel reminders for plan %s", plan.id, exc_info=True)
