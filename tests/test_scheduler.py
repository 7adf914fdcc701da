import pytest

from leadwatch.config import Settings
import leadwatch.infrastructure.scheduler.scheduler as scheduler_module
from leadwatch.infrastructure.scheduler import (
    create_scheduler,
    get_scheduler_status,
    run_job_now,
    stop_scheduler,
)


class RecordingEngine:
    def __init__(self):
        self.calls = []

    async def detect_pond_assignments(self):
        self.calls.append("pond")
        return {"timers_started": 1}

    async def detect_source_assignments(self):
        self.calls.append("source")
        return {"timers_started": 0}

    async def resolve_expired(self):
        self.calls.append("resolve")
        return {"expired": 2}


@pytest.fixture
def recording_engine():
    engine = RecordingEngine()
    yield engine
    stop_scheduler()


@pytest.mark.asyncio
async def test_registers_three_named_jobs(recording_engine):
    settings = Settings(pond_poll_seconds=30, source_poll_seconds=60, resolution_poll_seconds=60)

    sched = create_scheduler(recording_engine, settings)

    assert {job.id for job in sched.get_jobs()} == {"pond_detection", "source_detection", "expiry_resolution"}
    for job in sched.get_jobs():
        # Immediate first run at startup
        assert job.next_run_time is not None

    status = get_scheduler_status()
    assert status["running"] is False
    assert len(status["jobs"]) == 3


@pytest.mark.asyncio
async def test_create_is_idempotent(recording_engine):
    first = create_scheduler(recording_engine, Settings())
    second = create_scheduler(recording_engine, Settings())

    assert first is second


@pytest.mark.asyncio
async def test_run_job_now_calls_engine(recording_engine):
    create_scheduler(recording_engine, Settings())

    result = await run_job_now("expiry_resolution")

    assert result == {"success": True, "result": {"expired": 2}}
    assert recording_engine.calls == ["resolve"]


@pytest.mark.asyncio
async def test_run_job_now_unknown_job(recording_engine):
    create_scheduler(recording_engine, Settings())

    result = await run_job_now("follow_up_job")

    assert result["success"] is False


@pytest.mark.asyncio
async def test_status_without_scheduler():
    stop_scheduler()

    assert get_scheduler_status()["running"] is False
    assert (await run_job_now("expiry_resolution"))["success"] is False
    assert scheduler_module.scheduler is None
