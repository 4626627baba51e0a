"""
Exception taxonomy for villagesim.

Every failure the core can raise derives from VillageSimError so callers can
catch the whole family at once. Each exception keeps the ids involved as
attributes for diagnostics and builds a readable message from them.

Recovery policy:
- ConfigurationError: fatal, raised before any simulation starts
- InvalidStateError / InvalidArgumentError: recovered inside the engine,
  the offending pairing is skipped for the year
- CapacityError: programming-invariant violation, always propagates
"""

from typing import Optional, Sequence


class VillageSimError(Exception):
    """Base class for all villagesim errors."""


class ConfigurationError(VillageSimError, ValueError):
    """Raised when a SimulationConfig or environment setting is invalid."""

    def __init__(self, message: str, *, problems: Optional[Sequence[str]] = None) -> None:
        self.problems = list(problems or [])
        if self.problems:
            lines = [message, "Problems:"]
            lines.extend(f"  - {problem}" for problem in self.problems)
            message = "\n".join(lines)
        super().__init__(message)


class InvalidStateError(VillageSimError):
    """Raised when an operation is attempted on persons in the wrong state.

    Typical causes: marrying a dead person or someone already married.
    """

    def __init__(self, message: str, *, person_ids: Sequence[int] = ()) -> None:
        self.person_ids = tuple(person_ids)
        super().__init__(message)


class InvalidArgumentError(VillageSimError, ValueError):
    """Raised for malformed requests (same-sex pairing, unknown or missing person)."""

    def __init__(self, message: str, *, person_ids: Sequence[int] = ()) -> None:
        self.person_ids = tuple(person_ids)
        super().__init__(message)


class CapacityError(VillageSimError):
    """Raised when a parent would exceed the configured child cap."""

    def __init__(self, *, parent_id: int, cap: int) -> None:
        self.parent_id = parent_id
        self.cap = cap
        super().__init__(
            f"Cannot add child to person {parent_id}: maximum of {cap} children per parent reached"
        )
