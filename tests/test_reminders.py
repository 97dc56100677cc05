"""提醒服务测试。"""
import tempfile
from pathlib import Path

from conftest import NOW, days_ago
from scalekeeper.reminders.models import ReminderKind
from scalekeeper.reminders.service import ReminderService


def test_schedule_list_and_persist() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        service = ReminderService(data_dir=Path(tmp))
        service.schedule_reminder("dose2", ReminderKind.MEDICATION, days_ago(-2), title="Later")
        service.schedule_reminder("dose1", ReminderKind.MEDICATION, days_ago(-1), title="Sooner")
        service.schedule_reminder("animal1", ReminderKind.FEEDING, days_ago(-3))

        reloaded = ReminderService(data_dir=Path(tmp))
        titles = [r.title for r in reloaded.list_reminders(ReminderKind.MEDICATION)]
        assert titles == ["Sooner", "Later"]
        assert len(reloaded.list_reminders()) == 3


def test_schedule_replaces_same_subject_and_kind() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        service = ReminderService(data_dir=Path(tmp))
        service.schedule_reminder("e1", ReminderKind.CLEANING, days_ago(-1))
        service.schedule_reminder("e1", ReminderKind.CLEANING, days_ago(-4))
        service.schedule_reminder("e1", ReminderKind.FEEDING, days_ago(-2))
        cleaning = service.list_reminders(ReminderKind.CLEANING)
        assert len(cleaning) == 1
        assert cleaning[0].due_at == days_ago(-4)
        assert len(service.list_reminders()) == 2


def test_cancel_and_cancel_group() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        service = ReminderService(data_dir=Path(tmp))
        for i in range(3):
            service.schedule_reminder(f"d{i}", ReminderKind.MEDICATION, days_ago(-i - 1), group_id="plan1")
        service.schedule_reminder("other", ReminderKind.MEDICATION, days_ago(-1), group_id="plan2")

        assert service.cancel_reminder("d0", ReminderKind.MEDICATION)
        assert not service.cancel_reminder("d0", ReminderKind.MEDICATION)
        assert service.cancel_group("plan1") == 2
        assert [r.subject_id for r in service.list_reminders()] == ["other"]


def test_due_reminders() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        service = ReminderService(data_dir=Path(tmp))
        service.schedule_reminder("a", ReminderKind.FEEDING, days_ago(1))
        service.schedule_reminder("b", ReminderKind.FEEDING, days_ago(-1))
        assert [r.subject_id for r in service.due_reminders(NOW)] == ["a"]
