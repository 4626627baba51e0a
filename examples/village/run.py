"""
Village Chronicle
=================

WHAT THIS SHOWS:
- Starting a settlement with a named player and founding couples
- Running the yearly pipeline to completion with SimulationRunner
- Reading results only through the engine's public accessors

RUN:
    python -m examples.village.run --name Edmund --couples 3 --seed 7
    python -m examples.village.run --preset harsh_conditions --years 40

Environment overrides (or .env): VILLAGESIM_PRESET, VILLAGESIM_MAX_YEARS,
VILLAGESIM_SEED, VILLAGESIM_VERBOSE, VILLAGESIM_NO_COLOR.
"""

import argparse
import asyncio
from collections import Counter

from villagesim import (
    Config,
    EventType,
    SimulationConfig,
    SimulationEngine,
    SimulationResult,
    SimulationRunner,
)
from villagesim.logging_utils import log_info


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate a village lineage")
    parser.add_argument("--name", default="Edmund", help="Name of the starting player (male)")
    parser.add_argument("--couples", type=int, default=0, help="Founding couples (0-10)")
    parser.add_argument("--preset", default=None, help="Configuration preset name")
    parser.add_argument("--years", type=int, default=None, help="Override the year horizon")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    return parser.parse_args()


async def main() -> None:
    args = parse_args()

    config = SimulationConfig.preset(args.preset) if args.preset else Config.simulation_config()
    if args.years is not None:
        config = config.with_overrides(max_years=args.years)

    print("=" * 60)
    print(f"THE CHRONICLE OF {config.village_name.upper()}")
    print("=" * 60)
    print(config.mortality_description())
    print(config.marriage_rules_description())
    print()

    engine = SimulationEngine(config, seed=args.seed)
    engine.start(args.name, founding_couples=max(0, min(args.couples, 10)))

    tally: Counter = Counter()

    def count_events(result: SimulationResult, _engine: SimulationEngine) -> None:
        tally.update(event.event_type for event in result.events)

    runner = SimulationRunner(engine, year_listeners=[count_events], verbose=not args.quiet)
    outcome = await runner.run()

    print()
    log_info(f"Simulation ended in year {outcome['final_year']}: {engine.end_reason}")
    log_info(f"Living villagers: {len(outcome['population'])}")
    for event_type in EventType:
        print(f"  {event_type.value.title().replace('_', ' ')}: {tally[event_type]}")

    print("\nFamilies:")
    for family in engine.families():
        parents = " & ".join(engine.registry.get(pid).display_name() for pid in family.parent_ids)
        children = ", ".join(engine.registry.get(cid).name for cid in family.child_ids)
        print(f"  {parents}" + (f" | Children: {children}" if children else ""))


if __name__ == "__main__":
    asyncio.run(main())
