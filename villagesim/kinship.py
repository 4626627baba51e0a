"""
Kinship queries over the PersonRegistry.

The parent/child edges form a forest (every child is created at age 0 after
both parents exist), so ancestor traversal always terminates. A visited set
guards the walk anyway in case a registry was rebuilt from hand-made data.
"""

from typing import Callable, Optional, Set

from .registry import PersonRegistry


class KinshipOracle:
    """Answers ancestry and close-relative questions for the incest-avoidance policy."""

    def __init__(self, registry: PersonRegistry):
        self.registry = registry

    def parents(self, person_id: int) -> Set[int]:
        """Direct mother/father when recorded, else anyone listing person_id as a child."""
        person = self.registry.get(person_id)
        parents = {pid for pid in (person.mother_id, person.father_id) if pid is not None}
        if not parents:
            parents = set(self.registry.parents_listing(person_id))
        return parents

    def grandparents(self, person_id: int) -> Set[int]:
        grandparents: Set[int] = set()
        for parent_id in self.parents(person_id):
            grandparents |= self.parents(parent_id)
        return grandparents

    def ancestors(self, person_id: int) -> Set[int]:
        """Every ancestor across all generations."""
        ancestors: Set[int] = set()
        frontier = list(self.parents(person_id))
        while frontier:
            current = frontier.pop()
            if current in ancestors:
                continue
            ancestors.add(current)
            frontier.extend(self.parents(current))
        return ancestors

    def descendants(self, person_id: int) -> Set[int]:
        """Children, grandchildren and so on, following the registry's child lists."""
        descendants: Set[int] = set()
        frontier = self.registry.child_ids_of(person_id)
        while frontier:
            current = frontier.pop()
            if current in descendants:
                continue
            descendants.add(current)
            frontier.extend(self.registry.child_ids_of(current))
        return descendants

    def close_relative_test(self, person_id: int) -> Callable[[int], bool]:
        """Build a predicate answering are_close_relatives(person_id, other).

        person_id's own parents, grandparents and ancestors are computed once,
        so scanning many candidates only pays for the candidate side.
        """
        own_ancestors = self.ancestors(person_id)
        own_parents = self.parents(person_id)
        own_grandparents = self.grandparents(person_id)

        def is_close(other_id: int) -> bool:
            if other_id == person_id or other_id in own_ancestors:
                return True
            if person_id in self.ancestors(other_id):
                return True
            if own_parents & self.parents(other_id):
                return True
            return bool(own_grandparents & self.grandparents(other_id))

        return is_close

    def are_close_relatives(self, first_id: int, second_id: int) -> bool:
        """True for ancestor/descendant pairs, siblings (incl. half) and first cousins.

        Symmetric in its arguments. A person is their own close relative.
        """
        return self.close_relative_test(first_id)(second_id)

    def lineage(self, player_id: Optional[int]) -> Set[int]:
        """The player with every ancestor and every descendant (heirs in waiting)."""
        if player_id is None:
            return set()
        return {player_id} | self.ancestors(player_id) | self.descendants(player_id)

    def is_in_lineage(self, person_id: int, player_id: Optional[int]) -> bool:
        """True when person_id is the player, an ancestor or a descendant of the player."""
        return person_id in self.lineage(player_id)
