"""
PersistenceStrategy interface for storing per-year run data.

Persistence is OPTIONAL - the engine itself keeps everything it needs in
memory. A strategy lets a SimulationRunner record a snapshot and the event
list of every year so a run can be inspected afterwards or resumed from
any recorded year.

Included implementation:
- InMemoryPersistence - dict-based storage, data lost on exit

Snapshots are stored as JSON text (pydantic's model_dump_json) and
rehydrated on read, so every get returns an independent copy and a
resumed engine is built from exactly what a serialized save would hold.

Usage pattern:
    persistence = InMemoryPersistence()
    await persistence.initialize()
    await persistence.save_snapshot(run_id, year, engine.snapshot())
    await persistence.close()
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from .schemas import EngineSnapshot, RunRecord, SimulationEvent


class PersistenceStrategy(ABC):
    """Abstract base class for run persistence.

    Method categories:
    1. Lifecycle: initialize(), close()
    2. Run metadata: save_run_metadata(), update_run_status()
    3. Snapshots: save_snapshot(), get_snapshot(), latest_year()
    4. Events: save_events(), get_events()
    5. Cleanup: delete_run()
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend. Called once before the run starts."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources. Called once after the run."""
        pass

    @abstractmethod
    async def save_run_metadata(self, run: RunRecord) -> None:
        pass

    @abstractmethod
    async def update_run_status(
        self, run_id: UUID, status: str, end_time: Optional[datetime] = None
    ) -> None:
        pass

    @abstractmethod
    async def save_snapshot(self, run_id: UUID, year: int, snapshot: EngineSnapshot) -> None:
        pass

    @abstractmethod
    async def get_snapshot(self, run_id: UUID, year: int) -> Optional[EngineSnapshot]:
        """Return the snapshot stored for year, or None if there is none."""
        pass

    @abstractmethod
    async def latest_year(self, run_id: UUID) -> Optional[int]:
        """Highest year with a stored snapshot, or None for an unknown run."""
        pass

    @abstractmethod
    async def save_events(self, run_id: UUID, year: int, events: List[SimulationEvent]) -> None:
        pass

    @abstractmethod
    async def get_events(self, run_id: UUID, year: int) -> List[SimulationEvent]:
        pass

    @abstractmethod
    async def delete_run(self, run_id: UUID) -> None:
        pass


class InMemoryPersistence(PersistenceStrategy):
    """Dict-backed persistence for tests and single-process runs."""

    def __init__(self):
        self.runs: Dict[UUID, RunRecord] = {}
        self.snapshots: Dict[UUID, Dict[int, str]] = {}
        self.events: Dict[UUID, Dict[int, List[str]]] = {}

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        # Nothing to release; data stays available for inspection after the run
        return None

    async def save_run_metadata(self, run: RunRecord) -> None:
        self.runs[run.id] = run.model_copy(deep=True)

    async def update_run_status(
        self, run_id: UUID, status: str, end_time: Optional[datetime] = None
    ) -> None:
        run = self.runs.get(run_id)
        if run is None:  # Nothing to update yet
            return
        self.runs[run_id] = run.model_copy(update={"status": status, "end_time": end_time})

    async def save_snapshot(self, run_id: UUID, year: int, snapshot: EngineSnapshot) -> None:
        self.snapshots.setdefault(run_id, {})[year] = snapshot.model_dump_json()

    async def get_snapshot(self, run_id: UUID, year: int) -> Optional[EngineSnapshot]:
        payload = self.snapshots.get(run_id, {}).get(year)
        if payload is None:
            return None
        return EngineSnapshot.model_validate_json(payload)

    async def latest_year(self, run_id: UUID) -> Optional[int]:
        years = self.snapshots.get(run_id)
        return max(years) if years else None

    async def save_events(self, run_id: UUID, year: int, events: List[SimulationEvent]) -> None:
        self.events.setdefault(run_id, {})[year] = [event.model_dump_json() for event in events]

    async def get_events(self, run_id: UUID, year: int) -> List[SimulationEvent]:
        payload = self.events.get(run_id, {}).get(year, [])
        return [SimulationEvent.model_validate_json(item) for item in payload]

    async def delete_run(self, run_id: UUID) -> None:
        self.runs.pop(run_id, None)
        self.snapshots.pop(run_id, None)
        self.events.pop(run_id, None)
