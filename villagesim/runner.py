"""
Run driver for the simulation engine.

SimulationRunner repeatedly calls SimulationEngine.advance_year() until the
engine stops (or a year budget is spent), and after every year:
1. Persists the year's events and an engine snapshot via the injected strategy
2. Prints a human-readable summary when verbose
3. Invokes year listeners for optional analysis or rendering

The engine stays synchronous; the runner is async only so persistence
backends can do I/O between years without blocking.
"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
from uuid import UUID, uuid4

from .config import Config
from .engine import SimulationEngine
from .logging_utils import log_error, log_info, log_success
from .persistence import InMemoryPersistence, PersistenceStrategy
from .schemas import RunRecord, SimulationResult

YearListener = Callable[[SimulationResult, SimulationEngine], None]


def format_year_summary(result: SimulationResult, engine: SimulationEngine) -> str:
    """Format one year's outcome for console output.

    Example output:
    "Year 12: population 9, player Edmund, 3 event(s)
      Birth: Agnes born to Edmund and Cora"
    """
    player = engine.current_player
    player_label = player.name if player else "none"
    lines = [
        f"Year {result.year}: population {engine.registry.population()}, "
        f"player {player_label}, {len(result.events)} event(s)"
    ]
    for event in result.events:
        lines.append(f"  {event.description}")
    return "\n".join(lines)


class SimulationRunner:
    """
    Runs an engine to completion and records every year.

    Fully decoupled - the engine, persistence backend and listeners are all
    injected.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        *,
        persistence: Optional[PersistenceStrategy] = None,
        year_listeners: Optional[List[YearListener]] = None,
        run_id: Optional[UUID] = None,
        verbose: Optional[bool] = None,
    ):
        """Initialize runner with injected dependencies.

        Args:
            engine: A started SimulationEngine (initial player set)
            persistence: Optional persistence strategy (defaults to InMemory)
            year_listeners: Optional callables invoked after each year with
                (result, engine). Failures are logged and never abort the run.
            run_id: Reuse an existing run id, e.g. when resuming
            verbose: Print per-year summaries (defaults to VILLAGESIM_VERBOSE)
        """
        self.engine = engine
        self.persistence = persistence or InMemoryPersistence()
        self.year_listeners = year_listeners or []
        self.run_id: UUID = run_id or uuid4()
        self.verbose = Config.VERBOSE if verbose is None else verbose

    async def run(self, max_years: Optional[int] = None) -> Dict:
        """Advance until the engine stops or max_years more years have run.

        Returns:
            Dict with run_id, final_year, last_result and population
        """
        await self.persistence.initialize()

        try:
            player = self.engine.current_player
            await self.persistence.save_run_metadata(
                RunRecord(
                    id=self.run_id,
                    village_name=self.engine.config.village_name,
                    player_name=player.name if player else None,
                    start_time=datetime.now(timezone.utc),
                    max_years=self.engine.config.max_years,
                    config=self.engine.config.model_dump(),
                )
            )
            await self.persistence.save_snapshot(
                self.run_id, self.engine.current_year, self.engine.snapshot()
            )

            if self.verbose:
                log_info(f"Starting run {self.run_id}")
                log_info(self.engine.config.describe())

            last_result: Optional[SimulationResult] = None
            years_run = 0
            while self.engine.is_running and (max_years is None or years_run < max_years):
                result = self.engine.advance_year()
                last_result = result
                years_run += 1

                await self.persistence.save_events(self.run_id, result.year, result.events)
                await self.persistence.save_snapshot(
                    self.run_id, self.engine.current_year, self.engine.snapshot()
                )

                if self.verbose:
                    print(format_year_summary(result, self.engine))

                self._notify_listeners(result)

                if not result.should_continue:
                    break

            finished = not self.engine.is_running
            await self.persistence.update_run_status(
                self.run_id,
                "completed" if finished else "running",
                datetime.now(timezone.utc) if finished else None,
            )

            if self.verbose and last_result is not None:
                log_success(last_result.formatted_description())

            return {
                "run_id": self.run_id,
                "final_year": self.engine.current_year,
                "last_result": last_result,
                "population": self.engine.population(),
            }
        except Exception:
            await self.persistence.update_run_status(
                self.run_id, "failed", datetime.now(timezone.utc)
            )
            raise
        finally:
            await self.persistence.close()

    def _notify_listeners(self, result: SimulationResult) -> None:
        for listener in self.year_listeners:
            try:
                listener(result, self.engine)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_error(f"[Analysis] Listener failed: {exc}")

    @classmethod
    async def resume(
        cls,
        persistence: PersistenceStrategy,
        run_id: UUID,
        *,
        year: Optional[int] = None,
        seed: Optional[int] = None,
        **kwargs,
    ) -> "SimulationRunner":
        """Rebuild a runner from a stored snapshot (latest year by default).

        Raises:
            LookupError: If the run has no stored snapshot for the year
        """
        if year is None:
            year = await persistence.latest_year(run_id)
        snapshot = await persistence.get_snapshot(run_id, year) if year is not None else None
        if snapshot is None:
            raise LookupError(f"No snapshot stored for run {run_id} at year {year}")
        engine = SimulationEngine.from_snapshot(snapshot, seed=seed, verbose=kwargs.get("verbose"))
        return cls(engine, persistence=persistence, run_id=run_id, **kwargs)
