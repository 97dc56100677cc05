"""清洁状态、清洁计划与看板测试。"""
import pytest

from conftest import NOW, days_ago
from scalekeeper.enclosures.models import CleaningStatus, CleaningType, CleaningUrgency
from scalekeeper.enclosures.service import CleaningService
from scalekeeper.reminders.models import ReminderKind


@pytest.fixture
def service(data, reminders, clock) -> CleaningService:
    return CleaningService(data, reminders, clock)


def _status(last_cleaned, interval: int = 7, advance: int = 1) -> CleaningStatus:
    return CleaningStatus(
        enclosure_id="e1",
        enclosure_name="Rack A",
        cleaning_type=CleaningType.WATER_CHANGE,
        last_cleaned=last_cleaned,
        interval_days=interval,
        reminder_advance_days=advance,
        as_of=NOW,
    )


@pytest.mark.parametrize("days, urgency", [
    (3, CleaningUrgency.ON_TRACK),
    (6, CleaningUrgency.DUE_SOON),
    (7, CleaningUrgency.OVERDUE),
    (8, CleaningUrgency.OVERDUE),
])
def test_urgency_from_days_since_clean(days, urgency) -> None:
    assert _status(days_ago(days)).urgency == urgency


def test_never_cleaned_is_overdue() -> None:
    status = _status(None)
    assert status.days_since_last_clean is None
    assert status.urgency == CleaningUrgency.OVERDUE


def test_days_until_due() -> None:
    assert _status(days_ago(2)).days_until_due == 5
    assert _status(days_ago(9)).days_until_due == -2


def _clean_at(service, clock, enclosure, cleaning_type, when):
    saved = clock.at
    clock.at = when
    event = service.log_cleaning(enclosure, cleaning_type)
    clock.at = saved
    return event


def test_set_schedule_twice_keeps_one(service, data) -> None:
    enclosure = service.create_enclosure("Rack A")
    service.set_cleaning_schedule(enclosure, CleaningType.SPOT_CLEAN, 3)
    second = service.set_cleaning_schedule(
        enclosure, CleaningType.SPOT_CLEAN, 5, reminder_enabled=False, reminder_advance_days=2,
    )
    schedules = data.fetch_cleaning_schedules(enclosure)
    assert len(schedules) == 1
    assert schedules[0].id == second.id
    assert (schedules[0].interval_days, schedules[0].reminder_enabled, schedules[0].reminder_advance_days) == (5, False, 2)


def test_refresh_board(service, clock) -> None:
    a = service.create_enclosure("A")
    b = service.create_enclosure("B")
    service.set_cleaning_schedule(a, CleaningType.WATER_CHANGE, 7)
    service.set_cleaning_schedule(a, CleaningType.SUBSTRATE_CHANGE, 30)
    service.set_cleaning_schedule(b, CleaningType.WATER_CHANGE, 7)
    service.set_cleaning_schedule(b, CleaningType.SPOT_CLEAN, 3)
    _clean_at(service, clock, a, CleaningType.WATER_CHANGE, days_ago(8))
    _clean_at(service, clock, a, CleaningType.SUBSTRATE_CHANGE, days_ago(29))
    _clean_at(service, clock, b, CleaningType.WATER_CHANGE, days_ago(6))
    _clean_at(service, clock, b, CleaningType.SPOT_CLEAN, days_ago(10))

    board = service.refresh()
    assert [(s.enclosure_name, s.cleaning_type) for s in board.overdue] == [
        ("B", CleaningType.SPOT_CLEAN),
        ("A", CleaningType.WATER_CHANGE),
    ]
    assert {(s.enclosure_name, s.cleaning_type) for s in board.due_soon} == {
        ("A", CleaningType.SUBSTRATE_CHANGE),
        ("B", CleaningType.WATER_CHANGE),
    }
    assert len(board.needing_attention) == 4
    assert board.generation == 1


def test_refresh_puts_never_cleaned_first(service, clock) -> None:
    a = service.create_enclosure("A")
    service.set_cleaning_schedule(a, CleaningType.WATER_CHANGE, 7)
    service.set_cleaning_schedule(a, CleaningType.DEEP_CLEAN, 90)
    _clean_at(service, clock, a, CleaningType.WATER_CHANGE, days_ago(20))

    board = service.refresh()
    assert [s.cleaning_type for s in board.overdue] == [CleaningType.DEEP_CLEAN, CleaningType.WATER_CHANGE]


def test_deep_clean_updates_enclosure(service) -> None:
    enclosure = service.create_enclosure("A")
    assert enclosure.last_deep_clean is None
    service.log_cleaning(enclosure, CleaningType.DEEP_CLEAN, supplies_used=["F10"])
    assert enclosure.last_deep_clean == NOW
    assert service.cleaning_history(enclosure)[0].supplies_used == ["F10"]


def test_quick_clean_and_days_since(service, clock) -> None:
    enclosure = service.create_enclosure("A")
    assert service.days_since_last_clean(enclosure) is None
    _clean_at(service, clock, enclosure, CleaningType.WATER_CHANGE, days_ago(4))
    assert service.days_since_last_clean(enclosure) == 4
    event = service.quick_clean(enclosure)
    assert event.cleaning_type == CleaningType.SPOT_CLEAN
    assert service.days_since_last_clean(enclosure) == 0


def test_schedule_reminder_lifecycle(service, reminders, clock) -> None:
    enclosure = service.create_enclosure("A")
    schedule = service.set_cleaning_schedule(enclosure, CleaningType.WATER_CHANGE, 7, reminder_advance_days=2)
    reminder = reminders.get(schedule.id, ReminderKind.CLEANING)
    assert reminder.due_at == days_ago(-5)
    assert reminder.group_id == enclosure.id

    clock.advance(days=3)
    service.log_cleaning(enclosure, CleaningType.WATER_CHANGE)
    assert reminders.get(schedule.id, ReminderKind.CLEANING).due_at == days_ago(-8)

    service.set_cleaning_schedule(enclosure, CleaningType.WATER_CHANGE, 7, reminder_enabled=False)
    assert reminders.get(schedule.id, ReminderKind.CLEANING) is None


def test_past_reminder_not_scheduled(service, reminders, clock) -> None:
    enclosure = service.create_enclosure("A")
    _clean_at(service, clock, enclosure, CleaningType.SPOT_CLEAN, days_ago(10))
    schedule = service.set_cleaning_schedule(enclosure, CleaningType.SPOT_CLEAN, 3)
    assert reminders.get(schedule.id, ReminderKind.CLEANING) is None


def test_remove_schedule_cancels_reminder(service, reminders) -> None:
    enclosure = service.create_enclosure("A")
    schedule = service.set_cleaning_schedule(enclosure, CleaningType.SPOT_CLEAN, 3)
    assert service.remove_cleaning_schedule(enclosure, CleaningType.SPOT_CLEAN)
    assert reminders.get(schedule.id, ReminderKind.CLEANING) is None
    assert not service.remove_cleaning_schedule(enclosure, CleaningType.SPOT_CLEAN)


def test_default_schedules(service) -> None:
    plain = service.create_enclosure("Plain", with_default_schedules=True)
    assert {s.cleaning_type: s.interval_days for s in service.cleaning_status(plain)} == {
        CleaningType.SPOT_CLEAN: 3,
        CleaningType.WATER_CHANGE: 7,
        CleaningType.SUBSTRATE_CHANGE: 30,
        CleaningType.DEEP_CLEAN: 90,
    }
    bio = service.create_enclosure("Bio", is_bioactive=True)
    schedules = service.setup_default_schedules(bio)
    assert CleaningType.BIOACTIVE_MAINTENANCE in {s.cleaning_type for s in schedules}
    assert len(schedules) == 5


def test_delete_enclosure_cascades(service, data, reminders, make_animal) -> None:
    enclosure = service.create_enclosure("A", with_default_schedules=True)
    service.quick_clean(enclosure)
    animal = make_animal(enclosure_id=enclosure.id)

    service.delete_enclosure(enclosure)
    assert data.fetch_enclosure(enclosure.id) is None
    assert data.fetch_cleaning_schedules(enclosure) == []
    assert data.fetch_cleaning_events(enclosure) == []
    assert animal.enclosure_id is None
    assert reminders.list_reminders(ReminderKind.CLEANING) == []


def test_stale_refresh_does_not_replace_newer_board(service, monkeypatch) -> None:
    rack = service.create_enclosure("Rack")
    service.set_cleaning_schedule(rack, CleaningType.SPOT_CLEAN, 3)
    real_scan = service._scan

    def scan(generation):
        if generation == 1:
            service.refresh()
        return real_scan(generation)

    monkeypatch.setattr(service, "_scan", scan)
    board = service.refresh()
    assert board.generation == 2
    assert len(board.overdue) == 1
    assert service.board is board
