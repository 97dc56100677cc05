"""疗程排期、剂量流转与疗程状态机测试。"""
from datetime import timedelta

import pytest

from conftest import NOW
from scalekeeper.exceptions import InvalidTransitionError, NotFoundError
from scalekeeper.medication.models import DoseStatus, MedicationType, TreatmentStatus
from scalekeeper.medication.service import MedicationService
from scalekeeper.reminders.models import ReminderKind


@pytest.fixture
def service(data, reminders, clock) -> MedicationService:
    return MedicationService(data, reminders, clock)


@pytest.fixture
def plan_factory(service, make_animal):
    medication = service.create_medication("Baytril", MedicationType.INJECTABLE)

    def _make(animal=None, frequency_hours: int = 24, total_doses: int = 7, **kwargs):
        return service.create_treatment_plan(
            animal or make_animal(),
            medication,
            condition_treated="Respiratory infection",
            dosage="0.1ml",
            frequency_hours=frequency_hours,
            total_doses=total_doses,
            **kwargs,
        )
    return _make


def test_doses_generated_at_fixed_cadence(plan_factory) -> None:
    plan = plan_factory(frequency_hours=12, total_doses=5)
    assert len(plan.doses) == 5
    assert [d.scheduled_time for d in plan.doses] == [NOW + timedelta(hours=12 * k) for k in range(5)]
    assert all(d.status == DoseStatus.SCHEDULED for d in plan.doses)
    assert plan.end_date == NOW + timedelta(hours=48)
    assert plan.status == TreatmentStatus.ACTIVE


def test_progress_after_three_of_seven(service, plan_factory) -> None:
    plan = plan_factory()
    for dose in plan.doses[:3]:
        service.administer_dose(plan, dose.id)
    assert plan.progress_percentage == pytest.approx(42.857, rel=1e-3)
    assert plan.remaining_doses == 4
    assert plan.completed_doses == 3
    assert plan.doses[0].administered_time == NOW


def test_progress_never_decreases_and_completes(service, plan_factory) -> None:
    plan = plan_factory(total_doses=4)
    previous = plan.progress_percentage
    for dose in plan.doses:
        service.administer_dose(plan, dose.id)
        assert plan.progress_percentage >= previous
        previous = plan.progress_percentage
    assert previous == 100.0
    assert plan.status == TreatmentStatus.COMPLETED
    with pytest.raises(InvalidTransitionError):
        service.pause_treatment(plan)


def test_skipped_and_missed_count_only_in_denominator(service, plan_factory) -> None:
    plan = plan_factory(total_doses=4)
    service.administer_dose(plan, plan.doses[0].id)
    service.skip_dose(plan, plan.doses[1].id, reason="Shed in progress")
    service.mark_dose_missed(plan, plan.doses[2].id)
    assert plan.progress_percentage == pytest.approx(25.0)
    assert plan.doses[1].notes == "Shed in progress"
    assert plan.doses[2].status == DoseStatus.MISSED
    assert plan.status == TreatmentStatus.ACTIVE
    assert plan.next_scheduled_dose.id == plan.doses[3].id


def test_dose_transitions_only_from_scheduled(service, plan_factory) -> None:
    plan = plan_factory()
    dose = plan.doses[0]
    service.administer_dose(plan, dose.id)
    with pytest.raises(InvalidTransitionError):
        service.skip_dose(plan, dose.id)
    with pytest.raises(NotFoundError):
        service.administer_dose(plan, "nope")


def test_pause_and_resume(service, reminders, plan_factory) -> None:
    plan = plan_factory()
    # 第一剂就在当前时刻，只为之后的剂量排提醒
    assert len(reminders.list_reminders(ReminderKind.MEDICATION)) == 6

    service.pause_treatment(plan)
    assert plan.status == TreatmentStatus.PAUSED
    assert all(d.status == DoseStatus.SCHEDULED for d in plan.doses)
    assert reminders.list_reminders(ReminderKind.MEDICATION) == []
    assert service.refresh().active_treatments == []

    service.resume_treatment(plan)
    assert plan.status == TreatmentStatus.ACTIVE
    assert len(reminders.list_reminders(ReminderKind.MEDICATION)) == 6
    with pytest.raises(InvalidTransitionError):
        service.resume_treatment(plan)


def test_discontinue_is_terminal(service, clock, plan_factory) -> None:
    plan = plan_factory(notes="Vet visit")
    clock.advance(days=2)
    service.discontinue_treatment(plan, reason="Side effects")
    assert plan.status == TreatmentStatus.DISCONTINUED
    assert plan.end_date == clock()
    assert plan.notes == "Vet visit\nDiscontinued: Side effects"
    with pytest.raises(InvalidTransitionError):
        service.resume_treatment(plan)
    with pytest.raises(InvalidTransitionError):
        service.administer_dose(plan, plan.doses[-1].id)
    assert service.refresh().active_treatments == []


def test_board_doses_today_and_overdue(service, clock, plan_factory) -> None:
    plan = plan_factory(frequency_hours=6, total_doses=4, start_date=NOW - timedelta(hours=6))
    board = service.refresh()
    assert [d.index for d in board.overdue_doses] == [0]
    assert [d.index for d in board.doses_today] == [1, 2]
    assert board.active_treatments[0].id == plan.id

    clock.advance(hours=1)
    board = service.refresh()
    assert [d.index for d in board.overdue_doses] == [0, 1]
    assert plan.doses[1].hours_overdue(clock()) == 1
    assert board.generation == 2


def test_summaries_and_animals_on_treatment(service, plan_factory, make_animal) -> None:
    animal = make_animal("Rex")
    plan_factory(animal=animal)
    plan_factory(animal=animal, total_doses=3)
    plan_factory(animal=make_animal("Zoe"))

    assert sorted(a.name for a in service.animals_on_treatment()) == ["Rex", "Zoe"]
    summaries = service.active_treatment_summaries()
    assert len(summaries) == 3
    assert {s.medication_name for s in summaries} == {"Baytril"}
    assert all(len(s.doses_today) == 1 for s in summaries)
    assert len(service.treatments_for(animal)) == 2


def test_resume_completes_plan_finished_while_paused(service, reminders, plan_factory) -> None:
    plan = plan_factory(total_doses=2)
    service.pause_treatment(plan)
    for dose in plan.doses:
        service.administer_dose(plan, dose.id)
    assert plan.status == TreatmentStatus.PAUSED

    service.resume_treatment(plan)
    assert plan.status == TreatmentStatus.COMPLETED
    assert plan.remaining_doses == 0
    assert reminders.list_reminders(ReminderKind.MEDICATION) == []
    assert service.refresh().active_treatments == []


def test_discontinue_without_prior_notes(service, plan_factory) -> None:
    plan = plan_factory()
    service.discontinue_treatment(plan, reason="Recovered early")
    assert plan.notes == "Discontinued: Recovered early"


def test_stale_refresh_does_not_replace_newer_board(service, plan_factory, monkeypatch) -> None:
    plan_factory()
    real_scan = service._scan

    def scan(generation):
        if generation == 1:
            # 旧一轮扫描完成前，新一轮已经发布
            service.refresh()
        return real_scan(generation)

    monkeypatch.setattr(service, "_scan", scan)
    assert service.refresh().generation == 2
    assert service.board.generation == 2
