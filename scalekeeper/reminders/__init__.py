"""提醒排期。"""
from scalekeeper.reminders.models import Reminder, ReminderKind
from scalekeeper.reminders.service import ReminderService

__all__ = [
    "Reminder",
    "ReminderKind",
    "ReminderService",
]
