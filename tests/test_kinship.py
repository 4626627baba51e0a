"""Tests for ancestry and close-relative queries."""

import itertools

from villagesim.kinship import KinshipOracle
from villagesim.registry import PersonRegistry
from villagesim.schemas import Sex


def build_three_generations():
    """Grandparents -> a brother and sister -> one child each (first cousins)."""
    registry = PersonRegistry(max_children=4)
    people = {}

    def person(key, name, age, sex, mother=None, father=None):
        created = registry.create_person(
            name,
            age,
            sex,
            mother_id=people[mother].person_id if mother else None,
            father_id=people[father].person_id if father else None,
        )
        people[key] = created
        if father:
            registry.add_child(people[father].person_id, created.person_id)
        return created

    def wed(a, b):
        registry.marry(people[a].person_id, people[b].person_id)

    person("grandpa", "Godric", 70, Sex.MALE)
    person("grandma", "Maud", 68, Sex.FEMALE)
    wed("grandpa", "grandma")
    person("uncle", "Hugh", 45, Sex.MALE, mother="grandma", father="grandpa")
    person("mother", "Edith", 43, Sex.FEMALE, mother="grandma", father="grandpa")
    person("aunt_in_law", "Cora", 44, Sex.FEMALE)
    person("father", "Alfred", 46, Sex.MALE)
    wed("uncle", "aunt_in_law")
    wed("father", "mother")
    person("cousin", "Agnes", 20, Sex.FEMALE, mother="aunt_in_law", father="uncle")
    person("seeker", "Edmund", 21, Sex.MALE, mother="mother", father="father")
    person("stranger", "Ida", 21, Sex.FEMALE)
    return registry, {key: p.person_id for key, p in people.items()}


def test_parents_and_grandparents():
    registry, ids = build_three_generations()
    kinship = KinshipOracle(registry)

    assert kinship.parents(ids["seeker"]) == {ids["mother"], ids["father"]}
    assert kinship.grandparents(ids["seeker"]) == {ids["grandpa"], ids["grandma"]}
    assert kinship.parents(ids["stranger"]) == set()


def test_parents_fall_back_to_child_listings():
    registry = PersonRegistry()
    father = registry.create_person("Edmund", 40, Sex.MALE)
    foundling = registry.create_person("Agnes", 3, Sex.FEMALE)
    registry.add_child(father.person_id, foundling.person_id)

    assert KinshipOracle(registry).parents(foundling.person_id) == {father.person_id}


def test_ancestors_cover_all_generations():
    registry, ids = build_three_generations()
    kinship = KinshipOracle(registry)

    assert kinship.ancestors(ids["seeker"]) == {
        ids["mother"],
        ids["father"],
        ids["grandpa"],
        ids["grandma"],
    }
    assert kinship.is_in_lineage(ids["grandpa"], ids["seeker"])
    assert kinship.is_in_lineage(ids["seeker"], ids["seeker"])
    assert not kinship.is_in_lineage(ids["uncle"], ids["seeker"])
    assert not kinship.is_in_lineage(ids["seeker"], None)


def test_close_relatives():
    registry, ids = build_three_generations()
    kinship = KinshipOracle(registry)

    # Ancestor/descendant, siblings, first cousins
    assert kinship.are_close_relatives(ids["seeker"], ids["grandma"])
    assert kinship.are_close_relatives(ids["uncle"], ids["mother"])
    assert kinship.are_close_relatives(ids["seeker"], ids["cousin"])
    assert kinship.are_close_relatives(ids["seeker"], ids["seeker"])

    assert not kinship.are_close_relatives(ids["seeker"], ids["stranger"])
    assert not kinship.are_close_relatives(ids["father"], ids["mother"])
    # Aunt/uncle and in-laws fall outside the three tiers
    assert not kinship.are_close_relatives(ids["seeker"], ids["uncle"])
    assert not kinship.are_close_relatives(ids["seeker"], ids["aunt_in_law"])


def test_close_relatives_is_symmetric():
    registry, ids = build_three_generations()
    kinship = KinshipOracle(registry)

    for first, second in itertools.combinations(ids.values(), 2):
        assert kinship.are_close_relatives(first, second) == kinship.are_close_relatives(second, first)


def test_half_siblings_are_close_relatives():
    registry = PersonRegistry()
    father = registry.create_person("Edmund", 40, Sex.MALE)
    first_wife = registry.create_person("Cora", 38, Sex.FEMALE)
    second_wife = registry.create_person("Maud", 30, Sex.FEMALE)
    elder = registry.create_person("Alan", 10, Sex.MALE, mother_id=first_wife.person_id, father_id=father.person_id)
    younger = registry.create_person("Ida", 2, Sex.FEMALE, mother_id=second_wife.person_id, father_id=father.person_id)

    assert KinshipOracle(registry).are_close_relatives(elder.person_id, younger.person_id)


def test_ancestor_walk_terminates_on_hand_made_cycle():
    registry = PersonRegistry()
    first = registry.create_person("Edmund", 40, Sex.MALE)
    second = registry.create_person("Hugh", 40, Sex.MALE)
    registry.add_child(first.person_id, second.person_id)
    registry.add_child(second.person_id, first.person_id)

    assert KinshipOracle(registry).ancestors(first.person_id) == {first.person_id, second.person_id}


def test_descendants_follow_child_lists():
    registry, ids = build_three_generations()
    kinship = KinshipOracle(registry)

    assert kinship.descendants(ids["grandpa"]) == {ids["uncle"], ids["mother"], ids["cousin"], ids["seeker"]}
    assert kinship.descendants(ids["uncle"]) == {ids["cousin"]}
    assert kinship.descendants(ids["seeker"]) == set()


def test_lineage_reaches_heirs_in_waiting():
    registry, ids = build_three_generations()
    kinship = KinshipOracle(registry)

    assert kinship.lineage(ids["mother"]) == {
        ids["mother"],
        ids["grandpa"],
        ids["grandma"],
        ids["seeker"],
    }
    assert kinship.is_in_lineage(ids["seeker"], ids["grandpa"])
    assert kinship.is_in_lineage(ids["cousin"], ids["grandpa"])
    assert not kinship.is_in_lineage(ids["cousin"], ids["mother"])
    assert not kinship.is_in_lineage(ids["aunt_in_law"], ids["grandpa"])
    assert kinship.lineage(None) == set()


def test_close_relative_test_matches_pairwise_answers():
    registry, ids = build_three_generations()
    kinship = KinshipOracle(registry)

    for person_id in ids.values():
        is_relative = kinship.close_relative_test(person_id)
        for other_id in ids.values():
            assert is_relative(other_id) == kinship.are_close_relatives(person_id, other_id)
    assert kinship.close_relative_test(ids["seeker"])(ids["cousin"])
    assert not kinship.close_relative_test(ids["seeker"])(ids["stranger"])
