"""Tests for spouse search and outsider synthesis."""

import random

from villagesim.config import SimulationConfig
from villagesim.demographics import DemographicsPolicy
from villagesim.kinship import KinshipOracle
from villagesim.matchmaker import Matchmaker
from villagesim.registry import PersonRegistry
from villagesim.schemas import Sex


class StubNamer:
    """Deterministic names so assertions do not depend on the name pools."""

    def generate_name(self, sex: Sex) -> str:
        return "Stranger" if sex is Sex.MALE else "Wanderer"

    def generate_occupation(self, sex: Sex) -> str:
        return "Traveller"


def make_matchmaker(config: SimulationConfig = None, seed: int = 5):
    config = config or SimulationConfig()
    rng = random.Random(seed)
    registry = PersonRegistry(max_children=config.max_children_per_family)
    kinship = KinshipOracle(registry)
    policy = DemographicsPolicy(config, rng)
    matchmaker = Matchmaker(registry, kinship, policy, config, namer=StubNamer(), rng=rng)
    return matchmaker, registry


def add_siblings(registry: PersonRegistry):
    father = registry.create_person("Godric", 50, Sex.MALE)
    mother = registry.create_person("Maud", 48, Sex.FEMALE)
    registry.marry(father.person_id, mother.person_id)
    brother = registry.create_person(
        "Edmund", 20, Sex.MALE, mother_id=mother.person_id, father_id=father.person_id
    )
    registry.add_child(father.person_id, brother.person_id)
    sister = registry.create_person(
        "Agnes", 22, Sex.FEMALE, mother_id=mother.person_id, father_id=father.person_id
    )
    registry.add_child(father.person_id, sister.person_id)
    return brother, sister


def test_find_spouse_prefers_villagers():
    matchmaker, registry = make_matchmaker()
    seeker = registry.create_person("Edmund", 20, Sex.MALE)
    bride = registry.create_person("Cora", 22, Sex.FEMALE)
    registry.create_person("Hugh", 22, Sex.MALE)
    registry.create_person("Maud", 40, Sex.FEMALE)

    match = matchmaker.find_spouse(seeker.person_id)

    assert match is not None
    assert match.spouse is bride
    assert not match.is_outsider
    assert match.reason is None
    assert len(registry) == 4


def test_candidates_exclude_relatives_and_excluded_ids():
    matchmaker, registry = make_matchmaker()
    brother, sister = add_siblings(registry)
    widow = registry.create_person("Cora", 24, Sex.FEMALE)
    free = registry.create_person("Ida", 21, Sex.FEMALE)

    candidates = matchmaker.candidates_for(brother.person_id, exclude={widow.person_id})
    assert candidates == [free]


def test_outsider_synthesized_for_close_relatives_only():
    matchmaker, registry = make_matchmaker()
    brother, _ = add_siblings(registry)

    match = matchmaker.find_spouse(brother.person_id)

    assert match.is_outsider
    assert match.reason == "1 are close relatives"
    outsider = match.spouse
    assert outsider.outsider
    assert outsider.sex is Sex.FEMALE
    assert outsider.name == "Wanderer"
    assert outsider.occupation == "Traveller"
    assert 18 <= outsider.age <= 29
    assert registry.get(outsider.person_id) is outsider
    # The registry does not marry them; the engine does
    assert not registry.is_married(outsider.person_id)


def test_outsider_reason_when_band_is_empty():
    matchmaker, registry = make_matchmaker()
    seeker = registry.create_person("Edmund", 20, Sex.MALE)
    registry.create_person("Maud", 50, Sex.FEMALE)

    assert matchmaker.explain_outsider(seeker.person_id) == "No eligible females in village"


def test_outsider_reason_tallies_exclusions():
    matchmaker, registry = make_matchmaker()
    seeker = registry.create_person("Ida", 20, Sex.FEMALE)
    husband = registry.create_person("Hugh", 24, Sex.MALE)
    wife = registry.create_person("Cora", 24, Sex.FEMALE)
    registry.marry(husband.person_id, wife.person_id)
    father = registry.create_person("Alan", 26, Sex.MALE)
    foundling = registry.create_person("Agnes", 1, Sex.FEMALE)
    registry.add_child(father.person_id, foundling.person_id)

    assert matchmaker.explain_outsider(seeker.person_id) == "1 already married, 1 already have children"


def test_outsider_gate_declines_young_seekers():
    config = SimulationConfig(outsider_marriage_threshold=0.0, outsider_marriage_min_age=25)
    matchmaker, registry = make_matchmaker(config)
    young = registry.create_person("Edmund", 20, Sex.MALE)
    older = registry.create_person("Hugh", 25, Sex.MALE)

    assert matchmaker.find_spouse(young.person_id) is None
    assert len(registry) == 2

    match = matchmaker.find_spouse(older.person_id)
    assert match is not None and match.is_outsider


def test_excluded_candidate_leads_to_outsider():
    matchmaker, registry = make_matchmaker()
    seeker = registry.create_person("Edmund", 26, Sex.MALE)
    widow = registry.create_person("Cora", 24, Sex.FEMALE)

    match = matchmaker.find_spouse(seeker.person_id, exclude={widow.person_id})

    assert match.is_outsider
    assert match.spouse is not widow
