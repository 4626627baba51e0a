"""Tests covering the async run driver, listeners and resume."""

import contextlib
import io
from uuid import uuid4

import pytest

from villagesim.config import SimulationConfig
from villagesim.engine import SimulationEngine
from villagesim.persistence import InMemoryPersistence
from villagesim.runner import SimulationRunner, format_year_summary
from villagesim.schemas import SimulationStatus

IMMORTAL = {"mortality_onset_age": 999, "mortality_certainty_age": 999}


def make_engine(max_years: int = 5, seed: int = 8) -> SimulationEngine:
    engine = SimulationEngine(SimulationConfig(max_years=max_years, **IMMORTAL), seed=seed, verbose=False)
    engine.start("Edmund", founding_couples=2)
    return engine


@pytest.mark.asyncio
async def test_run_to_completion_records_every_year():
    persistence = InMemoryPersistence()
    engine = make_engine()
    runner = SimulationRunner(engine, persistence=persistence, verbose=False)

    outcome = await runner.run()

    assert outcome["run_id"] == runner.run_id
    assert outcome["final_year"] == 5
    assert outcome["last_result"].status is SimulationStatus.ENDED_MAX_YEARS
    assert len(outcome["population"]) == engine.registry.population()

    assert await persistence.latest_year(runner.run_id) == 5
    for year in range(1, 6):
        stored = await persistence.get_events(runner.run_id, year)
        assert [str(e) for e in stored] == [str(e) for e in engine.events_for(year)]

    record = persistence.runs[runner.run_id]
    assert record.status == "completed"
    assert record.end_time is not None
    assert record.player_name == "Edmund"
    assert record.config["max_years"] == 5


@pytest.mark.asyncio
async def test_listeners_see_every_year_and_failures_do_not_abort():
    engine = make_engine(max_years=3)
    seen = []

    def record(result, engine_ref):
        assert engine_ref is engine
        seen.append(result.year)

    def broken(result, engine_ref):
        raise RuntimeError("renderer offline")

    runner = SimulationRunner(engine, year_listeners=[broken, record], verbose=False)
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        await runner.run()

    assert seen == [1, 2, 3]
    assert "Listener failed: renderer offline" in buf.getvalue()


@pytest.mark.asyncio
async def test_budgeted_run_then_resume():
    persistence = InMemoryPersistence()
    runner = SimulationRunner(make_engine(max_years=10), persistence=persistence, verbose=False)

    partial = await runner.run(max_years=3)
    assert partial["final_year"] == 3
    assert persistence.runs[runner.run_id].status == "running"

    resumed = await SimulationRunner.resume(persistence, runner.run_id, seed=8, verbose=False)
    assert resumed.engine.current_year == 3
    assert resumed.run_id == runner.run_id

    final = await resumed.run()
    assert final["final_year"] == 10
    assert persistence.runs[runner.run_id].status == "completed"


@pytest.mark.asyncio
async def test_resume_specific_year():
    persistence = InMemoryPersistence()
    runner = SimulationRunner(make_engine(max_years=5), persistence=persistence, verbose=False)
    await runner.run()

    resumed = await SimulationRunner.resume(persistence, runner.run_id, year=2, verbose=False)
    assert resumed.engine.current_year == 2
    assert resumed.engine.is_running


@pytest.mark.asyncio
async def test_resume_unknown_run_raises():
    with pytest.raises(LookupError):
        await SimulationRunner.resume(InMemoryPersistence(), uuid4())


@pytest.mark.asyncio
async def test_engine_failure_marks_run_failed(monkeypatch):
    persistence = InMemoryPersistence()
    engine = make_engine()
    runner = SimulationRunner(engine, persistence=persistence, verbose=False)

    def explode():
        raise RuntimeError("boom")

    monkeypatch.setattr(engine, "advance_year", explode)

    with pytest.raises(RuntimeError):
        await runner.run()
    assert persistence.runs[runner.run_id].status == "failed"


@pytest.mark.asyncio
async def test_verbose_run_prints_year_summaries():
    engine = make_engine(max_years=2)
    runner = SimulationRunner(engine, verbose=True)

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        await runner.run()
    out = buf.getvalue()

    assert "Year 1: population" in out
    assert "player Edmund" in out
    assert "Simulation ended - maximum years reached - Maximum years reached" in out


def test_format_year_summary_lists_events():
    engine = SimulationEngine(SimulationConfig(max_years=5), seed=1, verbose=False)
    engine.start("Edmund", age=71)
    result = engine.advance_year()

    summary = format_year_summary(result, engine)
    assert summary.splitlines() == [
        "Year 1: population 0, player none, 2 event(s)",
        "  Death: Edmund died at age 72 (was player)",
        "  Simulation End: No heir found. Simulation ends.",
    ]
