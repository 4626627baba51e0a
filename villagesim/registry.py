"""
PersonRegistry: the arena that owns every Person and every relationship edge.

Persons are stored by a stable integer id and never deleted. Marriage and
parent/child edges are kept in index maps (spouse: id -> id, children:
id -> [id]) instead of object references, which keeps the object graph
acyclic while preserving O(1) navigation.

Mutating operations (marry, add_child, die, age_living) are the only way
simulation state changes. Each validates fully before touching any map so
a failed call leaves no partial state behind.
"""

from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from .config import MAXIMUM_PERSON_AGE
from .errors import CapacityError, InvalidArgumentError, InvalidStateError
from .schemas import Family, Person, PersonSnapshot, RegistrySnapshot, Sex


class PersonRegistry:
    """Single-writer store of persons and their marriage/parent edges."""

    def __init__(self, max_children: int = 2):
        self.max_children = max_children
        self._people: Dict[int, Person] = {}
        self._spouse: Dict[int, int] = {}
        self._children: Dict[int, List[int]] = {}
        # Reverse of _children: child id -> ids whose child list holds it
        self._parents: Dict[int, List[int]] = {}
        # Roster in insertion order; remove_deceased() prunes it, the arena keeps everyone
        self._active: List[int] = []
        self._next_id = 0

    # ------------------------------------------------------------------
    # Creation and lookup
    # ------------------------------------------------------------------

    def create_person(
        self,
        name: str,
        age: int,
        sex: Sex,
        *,
        outsider: bool = False,
        occupation: str = "None",
        mother_id: Optional[int] = None,
        father_id: Optional[int] = None,
    ) -> Person:
        """Allocate the next id, build a Person and add it to the registry."""
        for parent_id in (mother_id, father_id):
            if parent_id is not None:
                self.get(parent_id)
        try:
            person = Person(
                person_id=self._next_id,
                name=name,
                age=age,
                sex=sex,
                outsider=outsider,
                occupation=occupation or "None",
                mother_id=mother_id,
                father_id=father_id,
            )
        except ValidationError as exc:
            raise InvalidArgumentError(f"Invalid person attributes: {exc}") from exc
        return self.add(person)

    def add(self, person: Person) -> Person:
        """Insert a never-before-seen person."""
        if person is None:
            raise InvalidArgumentError("Person cannot be None")
        if person.person_id in self._people:
            raise InvalidArgumentError(
                f"Person {person.person_id} is already registered",
                person_ids=[person.person_id],
            )
        self._people[person.person_id] = person
        self._children.setdefault(person.person_id, [])
        self._active.append(person.person_id)
        self._next_id = max(self._next_id, person.person_id + 1)
        return person

    def get(self, person_id: int) -> Person:
        person = self._people.get(person_id)
        if person is None:
            raise InvalidArgumentError(f"Unknown person id {person_id}", person_ids=[person_id])
        return person

    def __contains__(self, person_id: object) -> bool:
        return person_id in self._people

    def __len__(self) -> int:
        return len(self._people)

    def all_members(self) -> List[Person]:
        """Everyone ever created, living or dead, in creation order."""
        return list(self._people.values())

    def living_members(self) -> List[Person]:
        """Living persons in insertion order."""
        return [self._people[pid] for pid in self._active if self._people[pid].alive]

    def population(self) -> int:
        return sum(1 for person in self._people.values() if person.alive)

    # ------------------------------------------------------------------
    # Relationship queries
    # ------------------------------------------------------------------

    def spouse_of(self, person_id: int) -> Optional[Person]:
        spouse_id = self._spouse.get(person_id)
        return self._people[spouse_id] if spouse_id is not None else None

    def spouse_id_of(self, person_id: int) -> Optional[int]:
        return self._spouse.get(person_id)

    def is_married(self, person_id: int) -> bool:
        return person_id in self._spouse

    def children_of(self, person_id: int) -> List[Person]:
        """Children in birth order."""
        return [self._people[cid] for cid in self._children.get(person_id, [])]

    def child_ids_of(self, person_id: int) -> List[int]:
        return list(self._children.get(person_id, []))

    def child_count(self, person_id: int) -> int:
        return len(self._children.get(person_id, []))

    def has_children(self, person_id: int) -> bool:
        return bool(self._children.get(person_id))

    def parents_listing(self, person_id: int) -> List[int]:
        """Ids of everyone whose child list contains person_id."""
        return list(self._parents.get(person_id, []))

    def snapshot_of(self, person_id: int) -> PersonSnapshot:
        person = self.get(person_id)
        spouse = self.spouse_of(person_id)
        return PersonSnapshot(
            person_id=person.person_id,
            name=person.name,
            age=person.age,
            sex=person.sex,
            alive=person.alive,
            outsider=person.outsider,
            occupation=person.occupation,
            spouse_id=spouse.person_id if spouse else None,
            spouse_name=spouse.name if spouse else None,
            children_ids=self.child_ids_of(person_id),
            mother_id=person.mother_id,
            father_id=person.father_id,
        )

    def snapshots(self, people: Iterable[Person]) -> List[PersonSnapshot]:
        return [self.snapshot_of(person.person_id) for person in people]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def marry(self, first_id: int, second_id: int) -> None:
        """Set both spouse edges.

        Raises:
            InvalidArgumentError: unknown id, same person, or same sex
            InvalidStateError: either person dead or already married
        """
        first = self.get(first_id)
        second = self.get(second_id)
        if first_id == second_id:
            raise InvalidArgumentError("A person cannot marry themselves", person_ids=[first_id])
        if not first.alive or not second.alive:
            raise InvalidStateError(
                "Cannot establish marriage: one or both persons are deceased",
                person_ids=[first_id, second_id],
            )
        if first_id in self._spouse or second_id in self._spouse:
            raise InvalidStateError(
                "Cannot establish marriage: one or both persons are already married",
                person_ids=[first_id, second_id],
            )
        if first.sex == second.sex:
            raise InvalidArgumentError(
                "Cannot establish marriage: partners must be of opposite biological sex",
                person_ids=[first_id, second_id],
            )
        self._spouse[first_id] = second_id
        self._spouse[second_id] = first_id

    def add_child(self, parent_id: int, child_id: int) -> None:
        """Append child to the parent and mirror onto the spouse without duplicates."""
        self.get(parent_id)
        self.get(child_id)
        kids = self._children[parent_id]
        if len(kids) >= self.max_children:
            raise CapacityError(parent_id=parent_id, cap=self.max_children)
        if child_id in kids:
            raise InvalidArgumentError(
                f"Person {child_id} is already a child of {parent_id}",
                person_ids=[parent_id, child_id],
            )
        kids.append(child_id)
        self._parents.setdefault(child_id, []).append(parent_id)

        spouse_id = self._spouse.get(parent_id)
        if spouse_id is not None:
            spouse_kids = self._children[spouse_id]
            if child_id not in spouse_kids:
                spouse_kids.append(child_id)
                self._parents[child_id].append(spouse_id)

    def die(self, person_id: int) -> None:
        """Mark dead and clear both spouse edges (widowing)."""
        person = self.get(person_id)
        person.alive = False
        spouse_id = self._spouse.pop(person_id, None)
        if spouse_id is not None:
            self._spouse.pop(spouse_id, None)

    def age_living(self) -> None:
        """Advance every living person by one year, clamped at the age cap."""
        for person in self.living_members():
            person.age = min(person.age + 1, MAXIMUM_PERSON_AGE)

    def remove_deceased(self) -> None:
        """Drop the dead from the active roster; the arena keeps them for kinship queries."""
        self._active = [pid for pid in self._active if self._people[pid].alive]

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def families(self) -> List[Family]:
        """Group living persons into households.

        A household is a living married couple, or a single living parent whose
        spouse has died, together with their living unmarried children.
        """
        families: List[Family] = []
        processed: set[int] = set()

        for person in self.living_members():
            pid = person.person_id
            if pid in processed:
                continue

            spouse_id = self._spouse.get(pid)
            if spouse_id is not None:
                parents = [pid, spouse_id]
            elif self.has_children(pid):
                parents = [pid]
            else:
                continue
            processed.update(parents)

            children = [
                cid
                for cid in self._children[pid]
                if self._people[cid].alive and cid not in self._spouse
            ]
            families.append(Family(parent_ids=parents, child_ids=children))

        return families

    # ------------------------------------------------------------------
    # Save/resume
    # ------------------------------------------------------------------

    def to_snapshot(self) -> RegistrySnapshot:
        return RegistrySnapshot(
            people=[person.model_copy() for person in self._people.values()],
            spouses=dict(self._spouse),
            children={pid: list(kids) for pid, kids in self._children.items()},
            active_ids=list(self._active),
            next_id=self._next_id,
        )

    @classmethod
    def from_snapshot(cls, snapshot: RegistrySnapshot, max_children: int = 2) -> "PersonRegistry":
        registry = cls(max_children=max_children)
        for person in snapshot.people:
            registry._people[person.person_id] = person.model_copy()
            registry._children[person.person_id] = list(snapshot.children.get(person.person_id, []))
        for parent_id, kids in registry._children.items():
            for child_id in kids:
                registry._parents.setdefault(child_id, []).append(parent_id)
        registry._spouse = dict(snapshot.spouses)
        registry._active = list(snapshot.active_ids)
        registry._next_id = snapshot.next_id
        return registry
