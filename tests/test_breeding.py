"""配对与窝卵记录测试。"""
import pytest

from scalekeeper.animals.models import AnimalSex
from scalekeeper.breeding.models import ClutchStatus, PairingStatus
from scalekeeper.breeding.service import BreedingService
from scalekeeper.exceptions import InvalidTransitionError


@pytest.fixture
def service(data, clock) -> BreedingService:
    return BreedingService(data, clock)


@pytest.fixture
def pairing(service, make_animal):
    male = make_animal("Apollo", sex=AnimalSex.MALE)
    female = make_animal("Athena", sex=AnimalSex.FEMALE)
    return service.create_pairing(male, female, breeding_season="2024")


def test_pairing_locks_and_close(service, pairing, clock) -> None:
    service.log_lock(pairing, duration_minutes=45)
    service.log_lock(pairing, notes="Short lock")
    assert len(pairing.locks) == 2
    assert pairing.locks[0].duration_minutes == 45

    clock.advance(days=30)
    service.close_pairing(pairing, PairingStatus.SUCCESSFUL)
    assert pairing.status == PairingStatus.SUCCESSFUL
    assert pairing.separation_date == clock()
    with pytest.raises(InvalidTransitionError):
        service.log_lock(pairing)
    with pytest.raises(InvalidTransitionError):
        service.close_pairing(pairing, PairingStatus.CANCELLED)
    assert service.pairings(active_only=True) == []


def test_pairing_rejects_same_animal_and_wrong_sexes(service, make_animal) -> None:
    male = make_animal("M", sex=AnimalSex.MALE)
    with pytest.raises(ValueError):
        service.create_pairing(male, male)
    with pytest.raises(ValueError):
        service.create_pairing(make_animal("F", sex=AnimalSex.FEMALE), male)


def test_clutch_rates_and_hatch(service, pairing, clock, make_animal) -> None:
    clutch = service.log_clutch(pairing, total_eggs=8)
    assert clutch.fertility_rate is None

    service.update_clutch_counts(clutch, fertile_eggs=6, infertile_eggs=1, slugs=1)
    assert clutch.fertility_rate == pytest.approx(75.0)

    clock.advance(days=55)
    service.record_pip(clutch)
    assert clutch.status == ClutchStatus.PIPPING

    babies = [make_animal(f"Baby{i}") for i in range(3)]
    service.record_hatch(clutch, total_hatched=3, offspring=babies, complete=False)
    assert clutch.status == ClutchStatus.HATCHING

    clock.advance(days=2)
    service.record_hatch(clutch, total_hatched=5)
    assert clutch.status == ClutchStatus.HATCHED
    assert clutch.hatch_rate == pytest.approx(83.333, rel=1e-3)
    assert clutch.incubation_days == 55
    assert len(clutch.offspring_ids) == 3
    with pytest.raises(InvalidTransitionError):
        service.fail_clutch(clutch)
    assert service.clutches_for(pairing) == [clutch]


def test_clutch_count_validation_and_failure(service, pairing) -> None:
    clutch = service.log_clutch(pairing, total_eggs=4)
    with pytest.raises(ValueError):
        service.update_clutch_counts(clutch, fertile_eggs=3, infertile_eggs=2)
    service.fail_clutch(clutch, reason="Mold")
    assert clutch.status == ClutchStatus.FAILED
    assert clutch.notes.endswith("Failed: Mold")


def test_fail_clutch_without_prior_notes(service, pairing) -> None:
    clutch = service.log_clutch(pairing, total_eggs=2)
    service.fail_clutch(clutch, reason="Infertile")
    assert clutch.notes == "Failed: Infertile"
