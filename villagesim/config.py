"""
villagesim Configuration

Two layers:
- Config: process-level settings loaded from environment variables
  (with .env support) such as the default seed and verbosity.
- SimulationConfig: immutable, validated parameters for a single run.
  Built once before the run and never mutated; a new run is needed to
  change anything.
"""

import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigurationError

# Load .env file if it exists
load_dotenv()


MAXIMUM_NAME_LENGTH = 50
MAXIMUM_PERSON_AGE = 150
MAXIMUM_SIMULATION_YEARS = 1000


class SimulationConfig(BaseModel):
    """Immutable parameter set shared read-only by the engine, policy and matchmaker.

    Construction validates every field and the cross-field rules below.
    Any failure surfaces as ConfigurationError rather than pydantic's
    ValidationError so callers deal with a single exception type:

    - min_marriage_age <= max_marriage_age
    - mortality_onset_age <= mortality_certainty_age
    - player_lineage_child_limit <= max_children_per_family
    - initial_population_min_age <= initial_population_max_age
    - all probabilities in [0, 1]
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Time horizon
    max_years: int = Field(150, ge=1, le=MAXIMUM_SIMULATION_YEARS)

    # Marriage
    min_marriage_age: int = Field(18, ge=0, le=MAXIMUM_PERSON_AGE)
    max_marriage_age: int = Field(29, ge=0, le=MAXIMUM_PERSON_AGE)
    annual_marriage_probability: float = Field(0.20, ge=0.0, le=1.0)
    # Probability that an outsider arrives for a seeker younger than
    # outsider_marriage_min_age. 1.0 means outsiders always come.
    outsider_marriage_threshold: float = Field(1.0, ge=0.0, le=1.0)
    outsider_marriage_min_age: int = Field(25, ge=0, le=MAXIMUM_PERSON_AGE)

    # Mortality (onset/certainty may exceed the person age cap to disable death)
    mortality_onset_age: int = Field(60, ge=0)
    mortality_certainty_age: int = Field(70, ge=0)
    mortality_risk_increase_per_year: int = Field(10, ge=0, le=100)

    # Births
    max_children_per_family: int = Field(2, ge=0)
    player_lineage_child_limit: int = Field(1, ge=0)
    base_birth_probability: float = Field(1.0, ge=0.0, le=1.0)
    male_child_probability: float = Field(0.5, ge=0.0, le=1.0)

    # Initial population
    initial_population_min_age: int = Field(18, ge=0, le=MAXIMUM_PERSON_AGE)
    initial_population_max_age: int = Field(29, ge=0, le=MAXIMUM_PERSON_AGE)
    initial_player_age: int = Field(18, ge=0, le=MAXIMUM_PERSON_AGE)
    default_player_occupation: str = Field("Farmer", min_length=1)
    village_name: str = Field("Haven", min_length=1)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            problems = [
                f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
                for error in exc.errors()
            ]
            raise ConfigurationError("Invalid simulation configuration", problems=problems) from exc

    @model_validator(mode="after")
    def _check_coherence(self) -> "SimulationConfig":
        if self.min_marriage_age > self.max_marriage_age:
            raise ValueError("Minimum marriage age cannot exceed maximum marriage age")
        if self.mortality_onset_age > self.mortality_certainty_age:
            raise ValueError("Mortality onset age cannot exceed mortality certainty age")
        if self.player_lineage_child_limit > self.max_children_per_family:
            raise ValueError("Player lineage limit cannot exceed maximum children per family")
        if self.initial_population_min_age > self.initial_population_max_age:
            raise ValueError("Initial population minimum age cannot exceed its maximum age")
        return self

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> "SimulationConfig":
        return cls()

    @classmethod
    def quick_test(cls) -> "SimulationConfig":
        """Shorter duration (50 years) with a higher marriage rate."""
        return cls(max_years=50, annual_marriage_probability=0.30)

    @classmethod
    def long_term(cls) -> "SimulationConfig":
        """Extended duration (500 years) with a lower marriage rate."""
        return cls(max_years=500, annual_marriage_probability=0.15)

    @classmethod
    def high_birth_rate(cls) -> "SimulationConfig":
        return cls(
            max_children_per_family=4,
            player_lineage_child_limit=2,
            annual_marriage_probability=0.35,
        )

    @classmethod
    def harsh_conditions(cls) -> "SimulationConfig":
        """Earlier mortality, a single child per family, fewer marriages."""
        return cls(
            mortality_onset_age=50,
            mortality_certainty_age=60,
            max_children_per_family=1,
            annual_marriage_probability=0.15,
        )

    @classmethod
    def extended_lifespan(cls) -> "SimulationConfig":
        return cls(
            mortality_onset_age=75,
            mortality_certainty_age=90,
            max_marriage_age=40,
        )

    @classmethod
    def preset(cls, name: str) -> "SimulationConfig":
        """Return a preset by name (e.g. "quick_test")."""
        factory = PRESETS.get(name)
        if factory is None:
            raise ConfigurationError(
                f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}"
            )
        return factory()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def with_overrides(self, **changes: Any) -> "SimulationConfig":
        """Return a revalidated copy with the given fields replaced."""
        data = self.model_dump()
        data.update(changes)
        return SimulationConfig(**data)

    def life_expectancy(self) -> float:
        """Midpoint of the mortality ramp, used for reporting only."""
        return (self.mortality_onset_age + self.mortality_certainty_age) / 2.0

    def mortality_description(self) -> str:
        return (
            f"Mortality Model: No death before age {self.mortality_onset_age}, "
            f"linear increase from {self.mortality_onset_age}-{self.mortality_certainty_age} "
            f"({self.mortality_risk_increase_per_year}% per year), "
            f"certain death after age {self.mortality_certainty_age}"
        )

    def marriage_rules_description(self) -> str:
        return (
            f"Marriage Rules: Eligible age {self.min_marriage_age}-{self.max_marriage_age}, "
            "must be unmarried, cannot have existing children, cannot marry close relatives"
        )

    def describe(self) -> str:
        return (
            f"SimulationConfig(max_years={self.max_years}, "
            f"marriage_probability={self.annual_marriage_probability:.2f}, "
            f"marriage_age={self.min_marriage_age}-{self.max_marriage_age}, "
            f"mortality_age={self.mortality_onset_age}-{self.mortality_certainty_age}, "
            f"max_children={self.max_children_per_family})"
        )


PRESETS = {
    "default": SimulationConfig.default,
    "quick_test": SimulationConfig.quick_test,
    "long_term": SimulationConfig.long_term,
    "high_birth_rate": SimulationConfig.high_birth_rate,
    "harsh_conditions": SimulationConfig.harsh_conditions,
    "extended_lifespan": SimulationConfig.extended_lifespan,
}


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


class Config:
    """Process-level settings loaded from environment variables."""

    # Simulation defaults
    PRESET: str = os.getenv("VILLAGESIM_PRESET", "default")
    MAX_YEARS: Optional[int] = _env_int("VILLAGESIM_MAX_YEARS")
    SEED: Optional[int] = _env_int("VILLAGESIM_SEED")

    # Logging
    VERBOSE: bool = os.getenv("VILLAGESIM_VERBOSE", "").lower() in ("1", "true", "yes")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise ConfigurationError on bad values."""
        problems: List[str] = []
        if cls.PRESET not in PRESETS:
            problems.append(
                f"VILLAGESIM_PRESET '{cls.PRESET}' is not one of: {', '.join(sorted(PRESETS))}"
            )
        if cls.MAX_YEARS is not None and not 1 <= cls.MAX_YEARS <= MAXIMUM_SIMULATION_YEARS:
            problems.append(
                f"VILLAGESIM_MAX_YEARS must be between 1 and {MAXIMUM_SIMULATION_YEARS}"
            )
        if problems:
            raise ConfigurationError("Invalid environment configuration", problems=problems)

    @classmethod
    def simulation_config(cls) -> SimulationConfig:
        """Build the configured preset with environment overrides applied."""
        cls.validate()
        config = SimulationConfig.preset(cls.PRESET)
        overrides: Dict[str, Any] = {}
        if cls.MAX_YEARS is not None:
            overrides["max_years"] = cls.MAX_YEARS
        return config.with_overrides(**overrides) if overrides else config

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "villagesim Configuration:",
            f"  Preset: {cls.PRESET}",
            f"  Max Years: {cls.MAX_YEARS if cls.MAX_YEARS is not None else '(preset)'}",
            f"  Seed: {cls.SEED if cls.SEED is not None else '(random)'}",
            f"  Verbose: {cls.VERBOSE}",
        ]
        return "\n".join(lines)
