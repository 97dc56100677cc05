"""记录存储与实体查询测试。"""
from datetime import timedelta

import pytest

from conftest import NOW, days_ago
from scalekeeper.animals.models import Animal, AnimalStatus
from scalekeeper.exceptions import SaveFailedError
from scalekeeper.feeding.models import FeedingEvent, PreySize, PreyType
from scalekeeper.store.data_service import DataService
from scalekeeper.store.models import Record
from scalekeeper.store.record_store import RecordStore


def _feeding(animal: Animal, when) -> FeedingEvent:
    return FeedingEvent(
        animal_id=animal.id,
        feeding_date=when,
        prey_type=PreyType.MOUSE,
        prey_size=PreySize.ADULT,
    )


def test_save_and_reload(tmp_path) -> None:
    store = RecordStore(base_dir=tmp_path)
    animal = Animal(name="Monty")
    store.insert(animal)
    store.save()

    reloaded = RecordStore(base_dir=tmp_path).get(Animal, animal.id)
    assert reloaded is not None
    assert reloaded.name == "Monty"
    assert reloaded.status == AnimalStatus.ACTIVE
    assert (tmp_path / "animals.json").exists()


def test_pending_changes_visible_before_save(tmp_path) -> None:
    store = RecordStore(base_dir=tmp_path)
    a = Animal(name="A")
    b = Animal(name="B")
    store.insert(a)
    store.insert(b)
    assert store.count(Animal) == 2
    store.delete(a)
    assert [x.name for x in store.fetch(Animal)] == ["B"]
    store.delete(a)  # 重复删除忽略
    assert store.count(Animal) == 1


def test_fetch_filters_sorts_and_limits(tmp_path) -> None:
    store = RecordStore(base_dir=tmp_path)
    for name in ("Cobra", "Anole", "Boa"):
        store.insert(Animal(name=name))
    names = [a.name for a in store.fetch(Animal, sort_key=lambda a: a.name)]
    assert names == ["Anole", "Boa", "Cobra"]
    top = store.fetch(Animal, predicate=lambda a: a.name != "Boa", sort_key=lambda a: a.name, reverse=True, limit=1)
    assert [a.name for a in top] == ["Cobra"]


def test_save_failure_raises_save_failed(tmp_path) -> None:
    store = RecordStore(base_dir=tmp_path)
    store.insert(Animal(name="X"))
    store.base_dir = tmp_path / "missing" / "dir"
    with pytest.raises(SaveFailedError) as exc_info:
        store.save()
    assert isinstance(exc_info.value.underlying, OSError)


def test_record_without_collection_rejected(tmp_path) -> None:
    store = RecordStore(base_dir=tmp_path)
    with pytest.raises(TypeError):
        store.insert(Record())


def test_feedings_newest_first_and_last_feeding(data: DataService, make_animal) -> None:
    animal = make_animal()
    other = make_animal("Other")
    for n in (10, 3, 7):
        data.insert(_feeding(animal, days_ago(n)))
    data.insert(_feeding(other, days_ago(1)))
    data.save()

    feedings = data.fetch_feedings(animal)
    assert [f.feeding_date for f in feedings] == [days_ago(3), days_ago(7), days_ago(10)]
    assert data.last_feeding(animal).feeding_date == days_ago(3)
    assert len(data.fetch_feedings(animal, limit=2)) == 2
    assert data.last_feeding(make_animal("Hungry")) is None


def test_feedings_on_same_calendar_day(data: DataService, make_animal) -> None:
    animal = make_animal()
    morning = NOW.replace(hour=1)
    evening = NOW.replace(hour=23)
    data.insert(_feeding(animal, morning))
    data.insert(_feeding(animal, evening))
    data.insert(_feeding(animal, morning - timedelta(hours=2)))
    data.save()
    assert [f.feeding_date for f in data.feedings_on(NOW)] == [evening, morning]


def test_active_animals_and_counts(data: DataService, make_animal) -> None:
    make_animal("Zed")
    make_animal("Amy")
    make_animal("Sold", status=AnimalStatus.SOLD)
    assert [a.name for a in data.fetch_active_animals()] == ["Amy", "Zed"]
    assert data.animal_count() == 3
    assert data.active_animal_count() == 2


def test_get_or_create_user_is_stable(data: DataService) -> None:
    assert data.fetch_current_user() is None
    user = data.get_or_create_user()
    assert data.get_or_create_user().id == user.id
