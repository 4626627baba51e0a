"""Unit tests for the core schema building blocks."""

import pytest
from pydantic import ValidationError

from villagesim.schemas import (
    EventType,
    Family,
    Person,
    PersonSnapshot,
    Sex,
    SimulationEvent,
    SimulationResult,
    SimulationStatus,
)


def make_person(person_id: int, name: str, age: int, sex: Sex, outsider: bool = False) -> Person:
    return Person(person_id=person_id, name=name, age=age, sex=sex, outsider=outsider)


def test_sex_helpers():
    assert Sex.MALE.opposite is Sex.FEMALE
    assert Sex.FEMALE.opposite is Sex.MALE
    assert Sex.FEMALE.full_name == "Female"
    assert Sex.MALE.abbreviation == "M"


def test_person_validates_on_assignment():
    person = make_person(0, "Edmund", 20, Sex.MALE)
    assert person.display_name() == "Edmund (20, Male, Native)"

    with pytest.raises(ValidationError):
        person.age = 151
    with pytest.raises(ValidationError):
        make_person(1, "   ", 20, Sex.MALE)
    with pytest.raises(ValidationError):
        make_person(2, "x" * 51, 20, Sex.MALE)


def test_person_snapshot_family_status():
    unmarried = PersonSnapshot(
        person_id=0, name="Edmund", age=20, sex=Sex.MALE, alive=True, outsider=False, occupation="Farmer"
    )
    assert unmarried.family_status == "Unmarried"
    assert not unmarried.is_married

    married = unmarried.model_copy(update={"spouse_id": 1, "spouse_name": "Cora", "children_ids": [2, 3]})
    assert married.family_status == "Married to Cora, 2 children"
    assert married.has_children

    one_child = married.model_copy(update={"children_ids": [2]})
    assert one_child.family_status == "Married to Cora, 1 child"


def test_snapshot_is_read_only():
    snapshot = PersonSnapshot(
        person_id=0, name="Edmund", age=20, sex=Sex.MALE, alive=True, outsider=False, occupation="Farmer"
    )
    with pytest.raises(ValidationError):
        snapshot.age = 30


def test_family_parent_limit():
    assert Family(parent_ids=[1, 2], child_ids=[3]).has_married_parents
    assert not Family(parent_ids=[1]).has_married_parents
    with pytest.raises(ValidationError):
        Family(parent_ids=[1, 2, 3])


def test_event_descriptions():
    father = make_person(0, "Edmund", 30, Sex.MALE)
    mother = make_person(1, "Cora", 28, Sex.FEMALE, outsider=True)
    child = make_person(2, "Agnes", 0, Sex.FEMALE)

    assert SimulationEvent.birth(child, father, mother, 4).description == "Birth: Agnes born to Edmund and Cora"
    assert (
        SimulationEvent.marriage(father, mother, 3).description
        == "Marriage: Edmund (Native) married Cora (Outsider)"
    )
    assert (
        SimulationEvent.outsider_arrival(mother, 3, "No eligible females in village").description
        == "Outsider Arrival: Cora arrived (needed because: No eligible females in village)"
    )
    assert SimulationEvent.player_change(child, 9).description == "Player Change: Control passed to Agnes"
    assert SimulationEvent.simulation_end("Maximum years reached", 9).description == (
        "Simulation End: Maximum years reached"
    )

    death = SimulationEvent.death(father, 9, was_player=True)
    assert death.description == "Death: Edmund died at age 30 (was player)"
    assert death.metadata == {"age": 30, "was_player": True}
    assert str(death) == "Year 9: Death: Edmund died at age 30 (was player)"

    plain_death = SimulationEvent.death(mother, 9, was_player=False)
    assert plain_death.description == "Death: Cora died at age 28"


def test_simulation_result_helpers():
    father = make_person(0, "Edmund", 30, Sex.MALE)
    events = [
        SimulationEvent.death(father, 5, was_player=True),
        SimulationEvent.simulation_end("No heir found. Simulation ends.", 5),
    ]

    running = SimulationResult.continued(4, [])
    assert running.should_continue
    assert running.status is SimulationStatus.CONTINUING
    assert running.formatted_description() == "Simulation continuing normally (Events: 0)"

    ended = SimulationResult.ended(5, "No heir found. Simulation ends.", SimulationStatus.ENDED_PLAYER_DEATH, events)
    assert not ended.should_continue
    assert [e.event_type for e in ended.events_of(EventType.DEATH)] == [EventType.DEATH]
    assert ended.formatted_description() == (
        "Simulation ended - player lineage extinct - No heir found. Simulation ends."
    )
    assert SimulationStatus.ENDED_MAX_YEARS.description == "Simulation ended - maximum years reached"
