"""
Demographics policy: the stochastic decisions of the simulation.

Every draw goes through the injected random.Random so a seeded source
reproduces a run exactly. Draws are independent per call; nothing is cached.

Mortality model (defaults):
- No natural death before the onset age (60)
- Linear ramp of risk_increase_per_year percent per year after onset
  (61: 10%, 62: 20%, ... 70: 100%)
- Certain death beyond the certainty age (70), or at the person age cap
"""

import random
from typing import Optional

from .config import MAXIMUM_PERSON_AGE, SimulationConfig
from .schemas import Person, PersonSnapshot, Sex


def is_eligible_for_marriage(person: PersonSnapshot, config: SimulationConfig) -> bool:
    """The single marriage-eligibility rule.

    Living, unmarried, within the marriage age band, and without children.
    The children clause means a widowed parent never remarries.
    """
    return (
        person.alive
        and person.spouse_id is None
        and config.min_marriage_age <= person.age <= config.max_marriage_age
        and not person.children_ids
    )


def can_have_more_children(
    person: PersonSnapshot, spouse: Optional[PersonSnapshot], cap: int
) -> bool:
    """Alive, married to a living spouse (each other), and below the child cap."""
    if spouse is None:
        return False
    return (
        person.alive
        and spouse.alive
        and person.spouse_id == spouse.person_id
        and spouse.spouse_id == person.person_id
        and len(person.children_ids) < cap
    )


class DemographicsPolicy:
    """Pure decision functions over a configuration and a random source."""

    def __init__(self, config: SimulationConfig, rng: Optional[random.Random] = None):
        self.config = config
        self.rng = rng or random.Random()

    def mortality_chance(self, age: int) -> int:
        """Percent chance of dying this year at the given age."""
        config = self.config
        if age >= MAXIMUM_PERSON_AGE or age > config.mortality_certainty_age:
            return 100
        if age < config.mortality_onset_age:
            return 0
        chance = (age - config.mortality_onset_age) * config.mortality_risk_increase_per_year
        return min(chance, 100)

    def should_die(self, person: Person) -> bool:
        if not person.alive:
            return False
        if person.age >= MAXIMUM_PERSON_AGE or person.age > self.config.mortality_certainty_age:
            return True
        if person.age < self.config.mortality_onset_age:
            return False
        return self.rng.randrange(100) < self.mortality_chance(person.age)

    def spouse_age(self) -> int:
        return self.rng.randint(self.config.min_marriage_age, self.config.max_marriage_age)

    def initial_age(self) -> int:
        return self.rng.randint(
            self.config.initial_population_min_age, self.config.initial_population_max_age
        )

    def marriage_occurs(self) -> bool:
        return self.rng.random() < self.config.annual_marriage_probability

    def outsider_arrives(self, seeker_age: int) -> bool:
        """Gate for outsider synthesis; seekers at or past the min age always qualify."""
        if seeker_age >= self.config.outsider_marriage_min_age:
            return True
        return self.rng.random() < self.config.outsider_marriage_threshold

    def child_is_born(self, father: PersonSnapshot, mother: PersonSnapshot, cap: int) -> bool:
        if not can_have_more_children(father, mother, cap):
            return False
        if not can_have_more_children(mother, father, cap):
            return False
        return self.rng.random() < self.config.base_birth_probability

    def child_sex(self) -> Sex:
        return Sex.MALE if self.rng.random() < self.config.male_child_probability else Sex.FEMALE
