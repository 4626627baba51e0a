"""
villagesim - demographic and kinship simulation of a small settlement.

People age, marry, bear children and die by seeded stochastic rules while
a single player lineage is tracked and succeeded from parent to child.

No file I/O required. No global random state. All collaborators injected.
"""

__version__ = "0.1.0"

# Main simulation components
from .engine import SimulationEngine
from .runner import SimulationRunner, format_year_summary

# Core services
from .registry import PersonRegistry
from .kinship import KinshipOracle
from .demographics import DemographicsPolicy, can_have_more_children, is_eligible_for_marriage
from .matchmaker import Match, Matchmaker
from .naming import NameGenerator, Namer
from .persistence import PersistenceStrategy, InMemoryPersistence

# Configuration and errors
from .config import Config, SimulationConfig, PRESETS
from .errors import (
    VillageSimError,
    ConfigurationError,
    InvalidStateError,
    InvalidArgumentError,
    CapacityError,
)

# Core schemas
from .schemas import (
    Sex,
    Person,
    PersonSnapshot,
    Family,
    EventType,
    SimulationEvent,
    SimulationResult,
    SimulationStatus,
    EngineState,
    EngineSnapshot,
    RegistrySnapshot,
    RunRecord,
)

__all__ = [
    # Main classes
    "SimulationEngine",
    "SimulationRunner",
    "format_year_summary",
    # Services
    "PersonRegistry",
    "KinshipOracle",
    "DemographicsPolicy",
    "can_have_more_children",
    "is_eligible_for_marriage",
    "Match",
    "Matchmaker",
    "NameGenerator",
    "Namer",
    "PersistenceStrategy",
    "InMemoryPersistence",
    # Configuration
    "Config",
    "SimulationConfig",
    "PRESETS",
    # Errors
    "VillageSimError",
    "ConfigurationError",
    "InvalidStateError",
    "InvalidArgumentError",
    "CapacityError",
    # Schemas
    "Sex",
    "Person",
    "PersonSnapshot",
    "Family",
    "EventType",
    "SimulationEvent",
    "SimulationResult",
    "SimulationStatus",
    "EngineState",
    "EngineSnapshot",
    "RegistrySnapshot",
    "RunRecord",
]
