"""Default naming collaborator: given names and occupations by sex."""

import random
from typing import List, Optional, Protocol, Set

from .schemas import Sex

MALE_NAMES = [
    "Adam", "Alaric", "Albert", "Alfred", "Alistair", "Ambrose", "Andrew", "Anthony", "Arnold", "Arthur",
    "Baldwin", "Bartholomew", "Benedict", "Bernard", "Bertram", "Boris", "Brian", "Caspian", "Charles", "Christopher",
    "Clement", "Conrad", "Constantine", "Cuthbert", "Cyril", "Damian", "Daniel", "David", "Dominic", "Duncan",
    "Edgar", "Edmund", "Edward", "Edwin", "Elias", "Elijah", "Eric", "Ernest", "Eugene", "Felix",
    "Ferdinand", "Francis", "Frederick", "Gabriel", "Gareth", "Geoffrey", "George", "Gerald", "Gilbert", "Godric",
    "Gregory", "Harold", "Harry", "Henry", "Herbert", "Herman", "Hugh", "Ian", "Isaac", "Isaiah",
    "James", "Jasper", "Jeremiah", "John", "Jonathan", "Joseph", "Julian", "Laurence", "Leo", "Leonard",
    "Lewis", "Liam", "Louis", "Luke", "Magnus", "Malcolm", "Martin", "Matthew", "Michael", "Nathaniel",
    "Nicholas", "Nigel", "Oliver", "Oswin", "Patrick", "Paul", "Peter", "Philip", "Ralph", "Raymond",
    "Reginald", "Richard", "Robert", "Roger", "Rupert", "Samuel", "Simon", "Stephen", "Theodore", "Thomas",
    "Victor", "Vincent", "Walter", "William",
]

FEMALE_NAMES = [
    "Adelaide", "Agnes", "Alice", "Amelia", "Anastasia", "Annabel", "Anne", "Beatrice", "Bridget", "Catherine",
    "Cecilia", "Charlotte", "Clara", "Clementine", "Constance", "Cora", "Daisy", "Dorothy", "Edith", "Eleanor",
    "Eliza", "Elizabeth", "Ella", "Ellen", "Eloise", "Elsie", "Emilia", "Emily", "Emma", "Esther",
    "Ethel", "Evangeline", "Evelyn", "Fiona", "Flora", "Florence", "Frances", "Genevieve", "Georgiana", "Gertrude",
    "Giselle", "Grace", "Hannah", "Harriet", "Hazel", "Helen", "Ida", "Irene", "Isabel", "Isadora",
    "Jane", "Jeanette", "Joan", "Josephine", "Judith", "Julia", "Katherine", "Laura", "Lillian", "Lily",
    "Louisa", "Lucy", "Lydia", "Mabel", "Margaret", "Maria", "Marianne", "Martha", "Mary", "Matilda",
    "Maud", "Mildred", "Millicent", "Miriam", "Nancy", "Naomi", "Nora", "Olive", "Patricia", "Pauline",
    "Pearl", "Penelope", "Phoebe", "Priscilla", "Rebecca", "Rose", "Rosemary", "Ruth", "Sarah", "Sophia",
    "Alize", "Susanna", "Sybil", "Theresa", "Victoria", "Violet", "Virginia", "Vivian", "Winifred", "Yvonne",
]

MALE_OCCUPATIONS = [
    "Farmer", "Blacksmith", "Merchant", "Carpenter", "Miller", "Baker",
    "Fisherman", "Hunter", "Cook", "Miner", "Shepherd",
]

FEMALE_OCCUPATIONS = [
    "Homemaker", "Seamstress", "Merchant", "Herbalist", "Shepherd", "Baker", "Cook", "Farmer",
]


class Namer(Protocol):
    """Anything that can name and employ a newcomer."""

    def generate_name(self, sex: Sex) -> str: ...

    def generate_occupation(self, sex: Sex) -> str: ...


class NameGenerator:
    """Picks names from per-sex pools, avoiding recently used ones.

    Recently used names are tracked until they cover half a pool, at which
    point the history resets so the pools never run dry.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.used_names: Set[str] = set()

    def generate_name(self, sex: Sex) -> str:
        pool = MALE_NAMES if sex is Sex.MALE else FEMALE_NAMES
        available: List[str] = [name for name in pool if name not in self.used_names]
        if not available:
            self.used_names.clear()
            available = list(pool)

        name = self.rng.choice(available)
        self.used_names.add(name)

        if len(self.used_names) > len(pool) // 2:
            self.used_names.clear()
        return name

    def generate_occupation(self, sex: Sex) -> str:
        pool = MALE_OCCUPATIONS if sex is Sex.MALE else FEMALE_OCCUPATIONS
        return self.rng.choice(pool)

    def reset_used_names(self) -> None:
        self.used_names.clear()
