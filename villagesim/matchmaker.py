"""
Matchmaker: finds a spouse inside the settlement or brings one in from outside.

Candidate search applies the single eligibility rule plus opposite sex and
the close-relative check. When nobody qualifies, an outsider may be
synthesized (subject to the outsider gate in DemographicsPolicy) together
with a short explanation of why no villager was available. The explanation
is descriptive only and never feeds back into control flow.
"""

import random
from typing import Collection, List, Optional

from pydantic import BaseModel, ConfigDict

from .config import SimulationConfig
from .demographics import DemographicsPolicy, is_eligible_for_marriage
from .kinship import KinshipOracle
from .naming import NameGenerator, Namer
from .registry import PersonRegistry
from .schemas import Person


class Match(BaseModel):
    """A proposed spouse, with outsider details when one was synthesized."""

    model_config = ConfigDict(frozen=True)

    spouse: Person
    is_outsider: bool = False
    reason: Optional[str] = None


class Matchmaker:
    def __init__(
        self,
        registry: PersonRegistry,
        kinship: KinshipOracle,
        policy: DemographicsPolicy,
        config: SimulationConfig,
        *,
        namer: Optional[Namer] = None,
        rng: Optional[random.Random] = None,
    ):
        self.registry = registry
        self.kinship = kinship
        self.policy = policy
        self.config = config
        self.rng = rng or policy.rng
        self.namer = namer or NameGenerator(self.rng)

    def candidates_for(self, person_id: int, exclude: Collection[int] = ()) -> List[Person]:
        """Living, opposite-sex, eligible, non-relative villagers not in exclude."""
        seeker = self.registry.get(person_id)
        is_relative = self.kinship.close_relative_test(person_id)
        candidates: List[Person] = []
        for candidate in self.registry.living_members():
            if candidate.person_id == person_id or candidate.sex == seeker.sex:
                continue
            if candidate.person_id in exclude:
                continue
            if not is_eligible_for_marriage(self.registry.snapshot_of(candidate.person_id), self.config):
                continue
            if is_relative(candidate.person_id):
                continue
            candidates.append(candidate)
        return candidates

    def find_spouse(self, person_id: int, exclude: Collection[int] = ()) -> Optional[Match]:
        """Return a match for person_id, or None when the outsider gate declines.

        Args:
            person_id: The seeker
            exclude: Ids that may not be chosen this round (e.g. the newly widowed)
        """
        candidates = self.candidates_for(person_id, exclude)
        if candidates:
            return Match(spouse=self.rng.choice(candidates))

        seeker = self.registry.get(person_id)
        if not self.policy.outsider_arrives(seeker.age):
            return None

        # Tally before the outsider joins so they are not counted against themselves
        reason = self.explain_outsider(person_id)
        spouse_sex = seeker.sex.opposite
        outsider = self.registry.create_person(
            self.namer.generate_name(spouse_sex),
            self.policy.spouse_age(),
            spouse_sex,
            outsider=True,
            occupation=self.namer.generate_occupation(spouse_sex),
        )
        return Match(spouse=outsider, is_outsider=True, reason=reason)

    def explain_outsider(self, person_id: int) -> str:
        """Summarize why no villager in the marriage-age band could marry person_id."""
        seeker = self.registry.get(person_id)
        wanted = seeker.sex.opposite
        in_band = [
            person
            for person in self.registry.living_members()
            if person.sex == wanted
            and self.config.min_marriage_age <= person.age <= self.config.max_marriage_age
        ]
        if not in_band:
            return f"No eligible {wanted.full_name.lower()}s in village"

        married = sum(1 for p in in_band if self.registry.is_married(p.person_id))
        is_relative = self.kinship.close_relative_test(person_id)
        relatives = sum(1 for p in in_band if is_relative(p.person_id))
        with_children = sum(1 for p in in_band if self.registry.has_children(p.person_id))

        reasons = []
        if married:
            reasons.append(f"{married} already married")
        if relatives:
            reasons.append(f"{relatives} are close relatives")
        if with_children:
            reasons.append(f"{with_children} already have children")
        return ", ".join(reasons) if reasons else "no eligible candidates"
