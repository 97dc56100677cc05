"""个体管理与物种目录测试。"""
import pytest

from conftest import days_ago
from scalekeeper.animals.models import AnimalSex, AnimalStatus, SpeciesCategory
from scalekeeper.animals.service import AnimalService
from scalekeeper.animals.species import SPECIES_CATALOGUE
from scalekeeper.biometrics.service import BiometricsService
from scalekeeper.breeding.models import PairingStatus
from scalekeeper.breeding.service import BreedingService
from scalekeeper.exceptions import InvalidTransitionError, LimitReachedError
from scalekeeper.feeding.models import PreySize, PreyType
from scalekeeper.feeding.service import FeedingService
from scalekeeper.health.models import HealthNoteType
from scalekeeper.health.service import HealthService
from scalekeeper.reminders.models import ReminderKind


@pytest.fixture
def service(data, reminders, clock) -> AnimalService:
    return AnimalService(data, reminders, clock)


def test_seed_species_once(service, data) -> None:
    assert service.seed_species() == len(SPECIES_CATALOGUE)
    assert service.seed_species() == 0
    geckos = data.fetch_species_by_category(SpeciesCategory.GECKO)
    assert "Leopard Gecko" in {s.common_name for s in geckos}
    assert [s.common_name for s in service.search_species("python regius")] == ["Ball Python"]


def test_create_animal_with_species(service, data) -> None:
    service.seed_species()
    ball = service.search_species("Ball Python")[0]
    animal = service.create_animal("Monty", species=ball, morph="Pastel")
    assert data.fetch_animal(animal.id).species_id == ball.id
    assert [a.name for a in service.active_animals()] == ["Monty"]


def test_create_animal_respects_limit(data, reminders, clock) -> None:
    service = AnimalService(data, reminders, clock, can_add_animal=lambda count: count < 2)
    service.create_animal("One")
    service.create_animal("Two")
    with pytest.raises(LimitReachedError):
        service.create_animal("Three")
    assert data.animal_count() == 2


def test_update_status_and_interval(service, data) -> None:
    animal = service.create_animal("Monty")
    service.update_status(animal, AnimalStatus.QUARANTINE)
    assert service.active_animals() == []
    assert [a.name for a in service.all_animals()] == ["Monty"]

    service.set_feeding_interval(animal, 12)
    assert data.fetch_animal(animal.id).feeding_interval_days == 12
    service.set_feeding_interval(animal, None)
    assert animal.feeding_interval_days is None
    with pytest.raises(ValueError):
        service.set_feeding_interval(animal, 0)


def test_delete_animal_cascades(service, data, reminders, clock) -> None:
    feeding = FeedingService(data, reminders, clock)
    biometrics = BiometricsService(data, clock)
    animal = service.create_animal("Monty")
    keeper = service.create_animal("Keep")
    feeding.log_feeding(animal, PreyType.RAT, PreySize.SMALL)
    feeding.log_feeding(keeper, PreyType.RAT, PreySize.SMALL)
    biometrics.log_weight(animal, 900.0, recorded_at=days_ago(3))
    biometrics.log_length(animal, 120.0)
    assert reminders.get(animal.id, ReminderKind.FEEDING) is not None

    service.delete_animal(animal)
    assert data.fetch_animal(animal.id) is None
    assert data.fetch_feedings(animal) == []
    assert data.fetch_weights(animal) == []
    assert data.fetch_lengths(animal) == []
    assert reminders.get(animal.id, ReminderKind.FEEDING) is None
    assert len(data.fetch_feedings(keeper)) == 1


def test_delete_animal_refused_while_pairing_active(service, data, clock) -> None:
    breeding = BreedingService(data, clock)
    male = service.create_animal("Apollo", sex=AnimalSex.MALE)
    female = service.create_animal("Athena", sex=AnimalSex.FEMALE)
    breeding.create_pairing(male, female)
    with pytest.raises(InvalidTransitionError):
        service.delete_animal(male)
    assert data.fetch_animal(male.id) is not None


def test_delete_animal_removes_closed_pairings_and_offspring_links(service, data, clock) -> None:
    breeding = BreedingService(data, clock)
    health = HealthService(data, clock)
    male = service.create_animal("Apollo", sex=AnimalSex.MALE)
    female = service.create_animal("Athena", sex=AnimalSex.FEMALE)
    pairing = breeding.create_pairing(male, female)
    clutch = breeding.log_clutch(pairing, total_eggs=4)
    baby = service.create_animal("Baby")
    breeding.record_hatch(clutch, total_hatched=1, offspring=[baby])
    breeding.close_pairing(pairing, PairingStatus.SUCCESSFUL)
    health.log_shed(male)
    health.add_health_note(male, HealthNoteType.OBSERVATION, "Dull colour")
    health.plan_brumation(male, year=2024)

    service.delete_animal(baby)
    assert data.fetch_clutches(pairing)[0].offspring_ids == []

    service.delete_animal(male)
    assert data.fetch_pairings_for(female) == []
    assert data.fetch_clutches(pairing) == []
    assert data.fetch_shed_records(male) == []
    assert data.fetch_health_notes(male) == []
    assert data.fetch_brumation_cycles(male) == []
