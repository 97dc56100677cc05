"""测试公共夹具：固定时区与时钟、临时数据目录。"""
import os
import time
from datetime import datetime, timedelta, timezone

import pytest

# 按本地日历日比较的逻辑统一在 UTC 下测试
os.environ["TZ"] = "UTC"
if hasattr(time, "tzset"):
    time.tzset()

from scalekeeper.animals.models import Animal  # noqa: E402
from scalekeeper.reminders.service import ReminderService  # noqa: E402
from scalekeeper.store.data_service import DataService  # noqa: E402
from scalekeeper.store.record_store import RecordStore  # noqa: E402

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """可手动拨动的时钟。"""

    def __init__(self, at: datetime = NOW):
        self.at = at

    def __call__(self) -> datetime:
        return self.at

    def advance(self, **kwargs) -> None:
        self.at += timedelta(**kwargs)


def days_ago(n: float, base: datetime = NOW) -> datetime:
    return base - timedelta(days=n)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def data(tmp_path) -> DataService:
    return DataService(RecordStore(base_dir=tmp_path / "records"))


@pytest.fixture
def reminders(tmp_path) -> ReminderService:
    return ReminderService(data_dir=tmp_path / "reminders")


@pytest.fixture
def make_animal(data):
    def _make(name: str = "Noodle", **kwargs) -> Animal:
        animal = Animal(name=name, **kwargs)
        data.insert(animal)
        data.save()
        return animal
    return _make
