"""
Pydantic schemas for the villagesim engine.

All data structures exchanged by the simulation are defined here.

Design Philosophy:
- Person is the only mutable model and is mutated exclusively through
  PersonRegistry; relationship edges (spouse, children) live in the
  registry's index maps keyed by person_id, not on the Person itself
- Everything handed to readers (PersonSnapshot, SimulationEvent,
  SimulationResult, Family) is frozen so reporting code cannot mutate state
- EngineSnapshot carries enough to rebuild a run for save/resume
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import MAXIMUM_NAME_LENGTH, MAXIMUM_PERSON_AGE, SimulationConfig


# ============================================================================
# Person Schemas
# ============================================================================


class Sex(str, Enum):
    """Biological sex with display helpers."""

    MALE = "MALE"
    FEMALE = "FEMALE"

    @property
    def opposite(self) -> "Sex":
        return Sex.FEMALE if self is Sex.MALE else Sex.MALE

    @property
    def full_name(self) -> str:
        return self.value.title()

    @property
    def abbreviation(self) -> str:
        return self.value[0]


class Person(BaseModel):
    """An individual in the settlement, living or dead.

    Identity attributes only. Assignment is validated so that age and name
    invariants hold after every mutation, not just at construction.
    """

    model_config = ConfigDict(validate_assignment=True)

    person_id: int = Field(..., ge=0, description="Stable arena id")
    name: str = Field(..., min_length=1, max_length=MAXIMUM_NAME_LENGTH)
    age: int = Field(..., ge=0, le=MAXIMUM_PERSON_AGE)
    sex: Sex
    alive: bool = True
    # Origin flag: True when synthesized from outside the settlement
    outsider: bool = False
    occupation: str = "None"
    # Set once at birth by the registry, never reassigned
    mother_id: Optional[int] = None
    father_id: Optional[int] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name cannot be blank")
        return value

    @property
    def origin(self) -> str:
        return "Outsider" if self.outsider else "Native"

    def display_name(self) -> str:
        """Name with key attributes, e.g. "Edmund (21, Male, Native)"."""
        return f"{self.name} ({self.age}, {self.sex.full_name}, {self.origin})"


class PersonSnapshot(BaseModel):
    """Read-only view of a person with relationship edges resolved to ids."""

    model_config = ConfigDict(frozen=True)

    person_id: int
    name: str
    age: int
    sex: Sex
    alive: bool
    outsider: bool
    occupation: str
    spouse_id: Optional[int] = None
    spouse_name: Optional[str] = None
    children_ids: List[int] = Field(default_factory=list)
    mother_id: Optional[int] = None
    father_id: Optional[int] = None

    @property
    def origin(self) -> str:
        return "Outsider" if self.outsider else "Native"

    @property
    def is_married(self) -> bool:
        return self.spouse_id is not None

    @property
    def has_children(self) -> bool:
        return bool(self.children_ids)

    @property
    def family_status(self) -> str:
        """E.g. "Married to Agnes, 2 children" or "Unmarried"."""
        status = f"Married to {self.spouse_name}" if self.spouse_id is not None else "Unmarried"
        count = len(self.children_ids)
        if count:
            status += f", {count} child" + ("ren" if count > 1 else "")
        return status


class Family(BaseModel):
    """A living couple (or widowed parent) and their living unmarried children."""

    model_config = ConfigDict(frozen=True)

    parent_ids: List[int] = Field(default_factory=list, max_length=2)
    child_ids: List[int] = Field(default_factory=list)

    @property
    def has_married_parents(self) -> bool:
        return len(self.parent_ids) == 2


# ============================================================================
# Event & Result Schemas
# ============================================================================


class EventType(str, Enum):
    BIRTH = "BIRTH"
    DEATH = "DEATH"
    MARRIAGE = "MARRIAGE"
    PLAYER_CHANGE = "PLAYER_CHANGE"
    OUTSIDER_ARRIVAL = "OUTSIDER_ARRIVAL"
    SIMULATION_END = "SIMULATION_END"


class SimulationEvent(BaseModel):
    """Immutable record of something that happened in a given year.

    Use the factory classmethods rather than the constructor so descriptions
    stay uniform across reports.
    """

    model_config = ConfigDict(frozen=True)

    event_type: EventType
    year: int = Field(..., ge=0)
    description: str
    person_ids: List[int] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def birth(cls, child: Person, father: Person, mother: Person, year: int) -> "SimulationEvent":
        return cls(
            event_type=EventType.BIRTH,
            year=year,
            description=f"Birth: {child.name} born to {father.name} and {mother.name}",
            person_ids=[child.person_id, father.person_id, mother.person_id],
        )

    @classmethod
    def death(cls, person: Person, year: int, *, was_player: bool) -> "SimulationEvent":
        suffix = " (was player)" if was_player else ""
        return cls(
            event_type=EventType.DEATH,
            year=year,
            description=f"Death: {person.name} died at age {person.age}{suffix}",
            person_ids=[person.person_id],
            metadata={"age": person.age, "was_player": was_player},
        )

    @classmethod
    def marriage(cls, first: Person, second: Person, year: int) -> "SimulationEvent":
        return cls(
            event_type=EventType.MARRIAGE,
            year=year,
            description=(
                f"Marriage: {first.name} ({first.origin}) married {second.name} ({second.origin})"
            ),
            person_ids=[first.person_id, second.person_id],
        )

    @classmethod
    def outsider_arrival(cls, person: Person, year: int, reason: str) -> "SimulationEvent":
        return cls(
            event_type=EventType.OUTSIDER_ARRIVAL,
            year=year,
            description=f"Outsider Arrival: {person.name} arrived (needed because: {reason})",
            person_ids=[person.person_id],
            metadata={"reason": reason},
        )

    @classmethod
    def player_change(cls, new_player: Person, year: int) -> "SimulationEvent":
        return cls(
            event_type=EventType.PLAYER_CHANGE,
            year=year,
            description=f"Player Change: Control passed to {new_player.name}",
            person_ids=[new_player.person_id],
        )

    @classmethod
    def simulation_end(cls, reason: str, year: int) -> "SimulationEvent":
        return cls(
            event_type=EventType.SIMULATION_END,
            year=year,
            description=f"Simulation End: {reason}",
            metadata={"reason": reason},
        )

    def __str__(self) -> str:
        return f"Year {self.year}: {self.description}"


class SimulationStatus(str, Enum):
    CONTINUING = "CONTINUING"
    ENDED_PLAYER_DEATH = "ENDED_PLAYER_DEATH"
    ENDED_MAX_YEARS = "ENDED_MAX_YEARS"

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]


_STATUS_DESCRIPTIONS = {
    SimulationStatus.CONTINUING: "Simulation continuing normally",
    SimulationStatus.ENDED_PLAYER_DEATH: "Simulation ended - player lineage extinct",
    SimulationStatus.ENDED_MAX_YEARS: "Simulation ended - maximum years reached",
}


class SimulationResult(BaseModel):
    """Outcome of one advance_year() call."""

    model_config = ConfigDict(frozen=True)

    year: int
    should_continue: bool
    events: List[SimulationEvent] = Field(default_factory=list)
    reason: Optional[str] = None
    status: SimulationStatus = SimulationStatus.CONTINUING

    @classmethod
    def continued(cls, year: int, events: List[SimulationEvent]) -> "SimulationResult":
        return cls(year=year, should_continue=True, events=list(events))

    @classmethod
    def ended(
        cls,
        year: int,
        reason: str,
        status: SimulationStatus,
        events: Optional[List[SimulationEvent]] = None,
    ) -> "SimulationResult":
        return cls(
            year=year,
            should_continue=False,
            events=list(events or []),
            reason=reason,
            status=status,
        )

    def events_of(self, event_type: EventType) -> List[SimulationEvent]:
        return [event for event in self.events if event.event_type == event_type]

    def formatted_description(self) -> str:
        if self.should_continue:
            return f"{self.status.description} (Events: {len(self.events)})"
        return f"{self.status.description} - {self.reason}"


# ============================================================================
# Save/Resume Schemas
# ============================================================================


class EngineState(str, Enum):
    RUNNING = "RUNNING"
    ENDED = "ENDED"


class RegistrySnapshot(BaseModel):
    """Serializable arena contents: persons plus relationship index maps."""

    people: List[Person] = Field(default_factory=list)
    spouses: Dict[int, int] = Field(default_factory=dict)
    children: Dict[int, List[int]] = Field(default_factory=dict)
    active_ids: List[int] = Field(default_factory=list)
    next_id: int = 0


class EngineSnapshot(BaseModel):
    """Everything needed to resume a run: registry, cursor, history and config."""

    year: int
    player_id: Optional[int] = None
    state: EngineState
    status: SimulationStatus = SimulationStatus.CONTINUING
    config: SimulationConfig
    registry: RegistrySnapshot
    events: Dict[int, List[SimulationEvent]] = Field(default_factory=dict)


class RunRecord(BaseModel):
    """Metadata about one runner invocation."""

    id: UUID
    village_name: str
    player_name: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str = Field("running", description="running, completed, or failed")
    max_years: int
    config: Dict[str, Any] = Field(default_factory=dict)
