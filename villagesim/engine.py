"""
Simulation engine: the per-year state machine.

Fully decoupled from terminal and file I/O. All collaborators (random
source, naming, registry) are injectable; console logging only happens
when the engine is constructed with verbose=True.

Coordinates the yearly pipeline, strictly in this order:
1. Aging - every living person gains a year
2. Mortality - deaths, widowing, and player succession
3. Marriage - eligible villagers are matched (or an outsider arrives)
4. Birth - married couples below their child cap may have a child
5. Housekeeping - the dead leave the active roster (never the arena)

Each phase sees the state left by the previous one. Same-year policy:
anyone widowed in phase 2 is not matched again until the next year.
"""

import random
from typing import Dict, List, Optional, Set

from .config import Config, SimulationConfig
from .demographics import DemographicsPolicy, is_eligible_for_marriage
from .errors import InvalidArgumentError, InvalidStateError
from .kinship import KinshipOracle
from .logging_utils import (
    log_deterministic,
    log_error,
    log_info,
    log_stochastic,
    log_success,
)
from .matchmaker import Matchmaker
from .naming import NameGenerator, Namer
from .registry import PersonRegistry
from .schemas import (
    EngineSnapshot,
    EngineState,
    Family,
    Person,
    PersonSnapshot,
    Sex,
    SimulationEvent,
    SimulationResult,
    SimulationStatus,
)

NO_HEIR_REASON = "No heir found. Simulation ends."
MAX_YEARS_REASON = "Maximum years reached"


class SimulationEngine:
    """
    Drives a settlement year by year and tracks the player lineage.

    The engine owns the year/player cursor and the event history; the
    registry owns every person and edge. Readers use the public accessors
    (current_year, current_player, population(), events_for()) and never
    mutate Person objects directly.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        namer: Optional[Namer] = None,
        registry: Optional[PersonRegistry] = None,
        verbose: Optional[bool] = None,
    ):
        """Initialize the engine with injected dependencies.

        Args:
            config: Run parameters (defaults to SimulationConfig())
            rng: Random source shared by policy, matchmaker and namer
            seed: Seed for a fresh random.Random when rng is not given;
                falls back to VILLAGESIM_SEED
            namer: Naming collaborator (defaults to NameGenerator)
            registry: Pre-populated registry, e.g. when resuming
            verbose: Print phase logs (defaults to VILLAGESIM_VERBOSE)
        """
        self.config = config or SimulationConfig()
        if rng is None:
            rng = random.Random(seed if seed is not None else Config.SEED)
        self.rng = rng
        self.verbose = Config.VERBOSE if verbose is None else verbose

        if registry is None:
            registry = PersonRegistry(max_children=self.config.max_children_per_family)
        self.registry = registry
        self.kinship = KinshipOracle(self.registry)
        self.policy = DemographicsPolicy(self.config, self.rng)
        self.namer = namer or NameGenerator(self.rng)
        self.matchmaker = Matchmaker(
            self.registry,
            self.kinship,
            self.policy,
            self.config,
            namer=self.namer,
            rng=self.rng,
        )

        self._year = 0
        self._player_id: Optional[int] = None
        self._state = EngineState.RUNNING
        self._status = SimulationStatus.CONTINUING
        self._end_reason: Optional[str] = None
        # Year 0 holds setup events (founding population, player arrival)
        self._events: Dict[int, List[SimulationEvent]] = {0: []}

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def start(
        self,
        player_name: str,
        *,
        sex: Sex = Sex.MALE,
        age: Optional[int] = None,
        occupation: Optional[str] = None,
        founding_couples: int = 0,
    ) -> Person:
        """Create the initial player and optionally seed founding couples."""
        self._require_no_player()
        player = self.registry.create_person(
            player_name,
            self.config.initial_player_age if age is None else age,
            sex,
            occupation=occupation or self.config.default_player_occupation,
        )
        self.set_initial_player(player)
        if founding_couples:
            self.seed_founding_couples(founding_couples)
        return player

    def set_initial_player(self, player: Person) -> None:
        """Register (if needed) and adopt player as the current player."""
        if player is None:
            raise InvalidArgumentError("Initial player cannot be None")
        self._require_no_player()
        if not player.alive:
            raise InvalidStateError(
                "Initial player must be alive", person_ids=[player.person_id]
            )
        if player.person_id not in self.registry:
            self.registry.add(player)
        self._player_id = player.person_id
        if self.verbose:
            log_info(f"[Setup] {player.display_name()} founds {self.config.village_name}")

    def _require_no_player(self) -> None:
        if self._year > 0 or self._player_id is not None:
            raise InvalidStateError("Initial player can only be set once, before the first year")

    def seed_founding_couples(self, count: int) -> List[Family]:
        """Add count married native couples before year 1."""
        if count < 0:
            raise InvalidArgumentError(f"Founding couple count cannot be negative: {count}")
        if self._year > 0:
            raise InvalidStateError("Founding couples can only be seeded before the first year")

        families: List[Family] = []
        for _ in range(count):
            husband = self._create_founder(Sex.MALE)
            wife = self._create_founder(Sex.FEMALE)
            self.registry.marry(husband.person_id, wife.person_id)
            self._events[0].append(SimulationEvent.marriage(husband, wife, 0))
            families.append(Family(parent_ids=[husband.person_id, wife.person_id]))

        if self.verbose and count:
            log_info(f"[Setup] Seeded {count} founding couple(s)")
        return families

    def _create_founder(self, sex: Sex) -> Person:
        return self.registry.create_person(
            self.namer.generate_name(sex),
            self.policy.initial_age(),
            sex,
            occupation=self.namer.generate_occupation(sex),
        )

    # ------------------------------------------------------------------
    # Yearly pipeline
    # ------------------------------------------------------------------

    def advance_year(self) -> SimulationResult:
        """Run one full year and report what happened.

        Once the engine has ENDED, further calls return an ended result with
        no events and leave the year unchanged.

        Raises:
            InvalidStateError: If no initial player was set
            CapacityError: If a child cap is breached (invariant violation)
        """
        if self._state is EngineState.ENDED:
            return SimulationResult.ended(self._year, self._end_reason or "", self._status)
        if self._player_id is None:
            raise InvalidStateError("Set an initial player before advancing the simulation")

        year = self._year + 1
        events: List[SimulationEvent] = []

        if self.verbose:
            log_info(f"=== Year {year}/{self.config.max_years} ===")

        self._process_aging(year)
        widowed = self._process_mortality(year, events)
        self._process_marriages(year, events, widowed)
        self._process_births(year, events)
        self.registry.remove_deceased()

        self._year = year

        if self._player_id is None:
            result = self._end(year, events, NO_HEIR_REASON, SimulationStatus.ENDED_PLAYER_DEATH)
        elif year >= self.config.max_years:
            events.append(SimulationEvent.simulation_end(MAX_YEARS_REASON, year))
            result = self._end(year, events, MAX_YEARS_REASON, SimulationStatus.ENDED_MAX_YEARS)
        else:
            result = SimulationResult.continued(year, events)

        self._events[year] = list(events)

        if self.verbose:
            log_success(f"[Year {year}] {len(events)} event(s), population {self.registry.population()}")
        return result

    def _end(
        self,
        year: int,
        events: List[SimulationEvent],
        reason: str,
        status: SimulationStatus,
    ) -> SimulationResult:
        self._state = EngineState.ENDED
        self._status = status
        self._end_reason = reason
        return SimulationResult.ended(year, reason, status, events)

    def _process_aging(self, year: int) -> None:
        if self.verbose:
            log_deterministic(f"[Aging] {self.registry.population()} villagers grow a year older")
        self.registry.age_living()

    def _process_mortality(self, year: int, events: List[SimulationEvent]) -> Set[int]:
        """Evaluate deaths over the living as of phase start; return newly widowed ids."""
        widowed: Set[int] = set()

        for person in self.registry.living_members():
            if not person.alive or not self.policy.should_die(person):
                continue

            was_player = person.person_id == self._player_id
            spouse_id = self.registry.spouse_id_of(person.person_id)
            self.registry.die(person.person_id)
            if spouse_id is not None:
                widowed.add(spouse_id)

            events.append(SimulationEvent.death(person, year, was_player=was_player))
            if self.verbose:
                log_stochastic(f"[Mortality] {person.name} died at {person.age}")

            if was_player:
                self._handle_player_death(person, year, events)

        return widowed

    def _handle_player_death(self, player: Person, year: int, events: List[SimulationEvent]) -> None:
        """Promote the first living child in birth order, or end the lineage."""
        heir = next(
            (child for child in self.registry.children_of(player.person_id) if child.alive),
            None,
        )
        if heir is not None:
            self._player_id = heir.person_id
            events.append(SimulationEvent.player_change(heir, year))
            if self.verbose:
                log_deterministic(f"[Succession] Control passes to {heir.name}")
        else:
            self._player_id = None
            events.append(SimulationEvent.simulation_end(NO_HEIR_REASON, year))
            if self.verbose:
                log_deterministic(f"[Succession] {player.name} left no heir")

    def _process_marriages(self, year: int, events: List[SimulationEvent], widowed: Set[int]) -> None:
        seekers = [
            person
            for person in self.registry.living_members()
            if person.person_id not in widowed
            and is_eligible_for_marriage(self.registry.snapshot_of(person.person_id), self.config)
        ]

        for seeker in seekers:
            # Earlier matches this phase may have taken this seeker already
            if not is_eligible_for_marriage(self.registry.snapshot_of(seeker.person_id), self.config):
                continue
            if not self.policy.marriage_occurs():
                continue

            try:
                match = self.matchmaker.find_spouse(seeker.person_id, exclude=widowed)
                if match is None:
                    continue
                if match.is_outsider:
                    events.append(
                        SimulationEvent.outsider_arrival(match.spouse, year, match.reason or "")
                    )
                self.registry.marry(seeker.person_id, match.spouse.person_id)
            except (InvalidStateError, InvalidArgumentError) as exc:
                if self.verbose:
                    log_error(f"[Marriage] Skipped pairing for {seeker.name}: {exc}")
                continue

            events.append(SimulationEvent.marriage(seeker, match.spouse, year))
            if self.verbose:
                log_stochastic(f"[Marriage] {seeker.name} married {match.spouse.name}")

    def _process_births(self, year: int, events: List[SimulationEvent]) -> None:
        lineage = self.kinship.lineage(self._player_id)
        fathers = [
            person
            for person in self.registry.living_members()
            if person.sex is Sex.MALE and self.registry.is_married(person.person_id)
        ]

        for father in fathers:
            mother = self.registry.spouse_of(father.person_id)
            if mother is None or not mother.alive:
                continue

            in_lineage = father.person_id in lineage or mother.person_id in lineage
            cap = (
                self.config.player_lineage_child_limit
                if in_lineage
                else self.config.max_children_per_family
            )
            father_view = self.registry.snapshot_of(father.person_id)
            mother_view = self.registry.snapshot_of(mother.person_id)
            if not self.policy.child_is_born(father_view, mother_view, cap):
                continue

            child = self._create_child(father, mother)
            events.append(SimulationEvent.birth(child, father, mother, year))
            if self.verbose:
                log_stochastic(f"[Birth] {child.name} born to {father.name} and {mother.name}")

    def _create_child(self, father: Person, mother: Person) -> Person:
        sex = self.policy.child_sex()
        child = self.registry.create_person(
            self.namer.generate_name(sex),
            0,
            sex,
            mother_id=mother.person_id,
            father_id=father.person_id,
        )
        self.registry.add_child(father.person_id, child.person_id)
        return child

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def current_year(self) -> int:
        return self._year

    @property
    def current_player(self) -> Optional[Person]:
        if self._player_id is None:
            return None
        return self.registry.get(self._player_id)

    @property
    def player_id(self) -> Optional[int]:
        return self._player_id

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def status(self) -> SimulationStatus:
        return self._status

    @property
    def end_reason(self) -> Optional[str]:
        return self._end_reason

    @property
    def is_running(self) -> bool:
        return self._state is EngineState.RUNNING

    def events_for(self, year: int) -> List[SimulationEvent]:
        """Events recorded for year (0 = setup); empty for unknown years."""
        return list(self._events.get(year, []))

    @property
    def history(self) -> Dict[int, List[SimulationEvent]]:
        return {year: list(events) for year, events in self._events.items()}

    def population(self) -> List[PersonSnapshot]:
        """Read-only snapshots of every living person."""
        return self.registry.snapshots(self.registry.living_members())

    def families(self) -> List[Family]:
        return self.registry.families()

    # ------------------------------------------------------------------
    # Save/resume
    # ------------------------------------------------------------------

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            year=self._year,
            player_id=self._player_id,
            state=self._state,
            status=self._status,
            config=self.config,
            registry=self.registry.to_snapshot(),
            events=self.history,
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: EngineSnapshot,
        *,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        namer: Optional[Namer] = None,
        verbose: Optional[bool] = None,
    ) -> "SimulationEngine":
        """Rebuild an engine from a snapshot.

        The random source is not part of the snapshot; pass rng or seed to
        make the resumed run reproducible.
        """
        registry = PersonRegistry.from_snapshot(
            snapshot.registry, max_children=snapshot.config.max_children_per_family
        )
        engine = cls(
            snapshot.config,
            rng=rng,
            seed=seed,
            namer=namer,
            registry=registry,
            verbose=verbose,
        )
        engine._year = snapshot.year
        engine._player_id = snapshot.player_id
        engine._state = snapshot.state
        engine._status = snapshot.status
        engine._events = {year: list(events) for year, events in snapshot.events.items()}
        engine._events.setdefault(0, [])
        if snapshot.state is EngineState.ENDED:
            engine._end_reason = (
                NO_HEIR_REASON
                if snapshot.status is SimulationStatus.ENDED_PLAYER_DEATH
                else MAX_YEARS_REASON
            )
        return engine
