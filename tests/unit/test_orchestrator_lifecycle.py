from __future__ import annotations

import asyncio
from typing import List

import pytest

from idbatch.config import Settings
from idbatch.domain.models import GenerationSettings, Identifier
from idbatch.errors import (
    InvalidTransitionError,
    ItemGenerationError,
    JobNotFoundError,
    SettingsValidationError,
)
from idbatch.orchestrator import CANCELLED_MESSAGE, BatchOrchestrator, JobEvent, run_batch
from idbatch.pipeline import IdentifierPipeline

CHUNK_SIZE = 100
COUNT = 1000
TOTAL_CHUNKS = COUNT // CHUNK_SIZE


def _progress_events(events: List[JobEvent]) -> List[JobEvent]:
    return [event for event in events if event.kind == "progress"]


async def _wait_for_status(orchestrator: BatchOrchestrator, job_id: str, status: str) -> None:
    for _ in range(1000):
        if orchestrator.get(job_id).status == status:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"job never reached {status}")


class _BrokenPipeline(IdentifierPipeline):
    """Breaks from the second chunk on, in a way that cannot be recorded per item."""

    def produce(self, index: int) -> Identifier:
        if index >= 5:
            raise ItemGenerationError(f"item {index} failed")
        return super().produce(index)

    def reject(self, index: int, exc: Exception) -> Identifier:
        raise RuntimeError("pipeline broke")


class _FlakyPipeline(IdentifierPipeline):
    """Fails every fifth item; the failure is recorded on the item."""

    def produce(self, index: int) -> Identifier:
        if index % 5 == 0:
            raise ItemGenerationError(f"flaky item {index}")
        return super().produce(index)


@pytest.mark.asyncio
async def test_custom_alphabet_batch(orchestrator: BatchOrchestrator):
    settings = GenerationSettings(kind="custom", count=5, custom_length=8, custom_alphabet="01")
    job = await orchestrator.generate(settings)

    assert job.status == "completed"
    assert len(job.items) == 5
    for item in job.items:
        assert len(item.value) == 8
        assert set(item.value) <= {"0", "1"}


@pytest.mark.asyncio
async def test_one_progress_event_per_chunk(orchestrator: BatchOrchestrator, events: List[JobEvent]):
    settings = GenerationSettings(kind="uuid_v4", count=COUNT, chunk_size=CHUNK_SIZE)
    job = await orchestrator.generate(settings)

    progress = _progress_events(events)
    assert len(progress) == TOTAL_CHUNKS
    assert [event.job.progress for event in progress] == [
        pytest.approx((i + 1) / TOTAL_CHUNKS) for i in range(TOTAL_CHUNKS)
    ]
    assert [event.kind for event in events][-1] == "completed"
    assert events.index(progress[-1]) < len(events) - 1
    assert job.progress == 1.0
    assert job.completed_at is not None
    assert [item.index for item in job.items] == list(range(COUNT))


@pytest.mark.asyncio
async def test_event_sequence_for_a_completed_job(orchestrator: BatchOrchestrator, events: List[JobEvent]):
    await orchestrator.generate(GenerationSettings(count=10, chunk_size=5))
    assert [event.kind for event in events] == ["created", "started", "progress", "progress", "completed"]


@pytest.mark.asyncio
async def test_cancel_after_third_chunk_keeps_generated_prefix(
    orchestrator: BatchOrchestrator, events: List[JobEvent]
):
    def cancel_on_third_chunk(event: JobEvent) -> None:
        if event.kind == "progress" and len(event.job.items) == 3 * CHUNK_SIZE:
            orchestrator.cancel(event.job.id)

    orchestrator.subscribe(cancel_on_third_chunk)
    settings = GenerationSettings(kind="uuid_v4", count=COUNT, chunk_size=CHUNK_SIZE)
    job = await orchestrator.generate(settings)

    assert job.status == "failed"
    assert "cancelled" in job.error
    assert job.error == CANCELLED_MESSAGE
    assert len(job.items) == 3 * CHUNK_SIZE

    third_chunk_snapshot = _progress_events(events)[2].job
    assert job.items == third_chunk_snapshot.items
    assert [item.index for item in job.items] == list(range(3 * CHUNK_SIZE))
    assert job.statistics.total_generated == 3 * CHUNK_SIZE
    assert job.completed_at is not None


@pytest.mark.asyncio
async def test_cancel_on_last_chunk_is_not_observed(orchestrator: BatchOrchestrator):
    def cancel_on_last_chunk(event: JobEvent) -> None:
        if event.kind == "progress" and event.job.progress == 1.0:
            orchestrator.cancel(event.job.id)

    orchestrator.subscribe(cancel_on_last_chunk)
    job = await orchestrator.generate(GenerationSettings(count=20, chunk_size=10))

    assert job.status == "completed"
    assert len(job.items) == 20


@pytest.mark.asyncio
async def test_pause_and_resume_at_chunk_boundary(
    orchestrator: BatchOrchestrator, events: List[JobEvent]
):
    def pause_on_second_chunk(event: JobEvent) -> None:
        if event.kind == "progress" and len(event.job.items) == 2 * CHUNK_SIZE:
            orchestrator.pause(event.job.id)

    orchestrator.subscribe(pause_on_second_chunk)
    job = orchestrator.create_job(GenerationSettings(count=COUNT, chunk_size=CHUNK_SIZE))
    task = asyncio.create_task(orchestrator.run(job.id))

    await _wait_for_status(orchestrator, job.id, "paused")
    paused = orchestrator.get(job.id)
    assert len(paused.items) == 2 * CHUNK_SIZE
    for _ in range(5):
        await asyncio.sleep(0)
    assert len(orchestrator.get(job.id).items) == 2 * CHUNK_SIZE

    orchestrator.resume(job.id)
    final = await task

    assert final.status == "completed"
    assert len(final.items) == COUNT
    kinds = [event.kind for event in events]
    assert kinds.count("paused") == 1
    assert kinds.count("resumed") == 1
    assert kinds.index("paused") < kinds.index("resumed")


@pytest.mark.asyncio
async def test_cancel_while_paused(orchestrator: BatchOrchestrator):
    def pause_on_first_chunk(event: JobEvent) -> None:
        if event.kind == "progress" and len(event.job.items) == CHUNK_SIZE:
            orchestrator.pause(event.job.id)

    orchestrator.subscribe(pause_on_first_chunk)
    job = orchestrator.create_job(GenerationSettings(count=COUNT, chunk_size=CHUNK_SIZE))
    task = asyncio.create_task(orchestrator.run(job.id))

    await _wait_for_status(orchestrator, job.id, "paused")
    orchestrator.cancel(job.id)
    final = await task

    assert final.status == "failed"
    assert final.error == CANCELLED_MESSAGE
    assert len(final.items) == CHUNK_SIZE


@pytest.mark.asyncio
async def test_cancelled_host_task_leaves_job_terminal(
    orchestrator: BatchOrchestrator, events: List[JobEvent]
):
    job = orchestrator.create_job(GenerationSettings(count=COUNT, chunk_size=CHUNK_SIZE))
    task = asyncio.create_task(orchestrator.run(job.id))

    def cancel_task_on_third_chunk(event: JobEvent) -> None:
        if event.kind == "progress" and len(event.job.items) == 3 * CHUNK_SIZE:
            task.cancel()

    orchestrator.subscribe(cancel_task_on_third_chunk)

    with pytest.raises(asyncio.CancelledError):
        await task

    final = orchestrator.get(job.id)
    assert final.status == "failed"
    assert final.is_terminal
    assert final.error == CANCELLED_MESSAGE
    assert final.completed_at is not None
    assert len(final.items) == 3 * CHUNK_SIZE
    assert final.statistics.total_generated == 3 * CHUNK_SIZE
    assert events[-1].kind == "failed"

    with pytest.raises(InvalidTransitionError):
        orchestrator.cancel(job.id)
    orchestrator.remove(job.id)


@pytest.mark.asyncio
async def test_item_failures_are_recorded_not_fatal(app_settings: Settings):
    orchestrator = BatchOrchestrator(app_settings=app_settings, pipeline_factory=_FlakyPipeline)
    job = await orchestrator.generate(GenerationSettings(count=20, chunk_size=10))

    assert job.status == "completed"
    assert len(job.items) == 20
    failed = [item for item in job.items if not item.is_valid]
    assert [item.index for item in failed] == [0, 5, 10, 15]
    assert all(item.error.startswith("flaky item") for item in failed)
    assert job.statistics.invalid_count == 4
    assert job.statistics.valid_count == 16


@pytest.mark.asyncio
async def test_job_level_fault_tolerant_policy(app_settings: Settings):
    orchestrator = BatchOrchestrator(app_settings=app_settings, pipeline_factory=_BrokenPipeline)
    recorded: List[JobEvent] = []
    orchestrator.subscribe(recorded.append)

    job = await orchestrator.generate(GenerationSettings(count=10, chunk_size=5))

    assert job.status == "failed"
    assert job.error == "pipeline broke"
    assert job.completed_at is not None
    assert [item.index for item in job.items] == [0, 1, 2, 3, 4]
    assert job.statistics.total_generated == 5
    assert recorded[-1].kind == "failed"


@pytest.mark.asyncio
async def test_job_level_fault_strict_policy_reraises(strict_settings: Settings):
    orchestrator = BatchOrchestrator(app_settings=strict_settings, pipeline_factory=_BrokenPipeline)
    job = orchestrator.create_job(GenerationSettings(count=10, chunk_size=5))

    with pytest.raises(RuntimeError, match="pipeline broke"):
        await orchestrator.run(job.id)

    failed = orchestrator.get(job.id)
    assert failed.status == "failed"
    assert failed.error == "pipeline broke"


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_the_job(orchestrator: BatchOrchestrator):
    def broken_listener(event: JobEvent) -> None:
        raise ValueError("observer bug")

    orchestrator.subscribe(broken_listener)
    job = await orchestrator.generate(GenerationSettings(count=10, chunk_size=5))
    assert job.status == "completed"


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery(orchestrator: BatchOrchestrator):
    received: List[JobEvent] = []
    unsubscribe = orchestrator.subscribe(received.append)
    unsubscribe()
    await orchestrator.generate(GenerationSettings(count=5, chunk_size=5))
    assert received == []


@pytest.mark.asyncio
async def test_invalid_transitions(orchestrator: BatchOrchestrator):
    job = orchestrator.create_job(GenerationSettings(count=5, chunk_size=5))

    with pytest.raises(InvalidTransitionError):
        orchestrator.pause(job.id)
    with pytest.raises(InvalidTransitionError):
        orchestrator.resume(job.id)
    with pytest.raises(InvalidTransitionError):
        orchestrator.cancel(job.id)

    await orchestrator.run(job.id)

    with pytest.raises(InvalidTransitionError):
        await orchestrator.run(job.id)
    with pytest.raises(InvalidTransitionError):
        orchestrator.pause(job.id)
    with pytest.raises(InvalidTransitionError):
        orchestrator.cancel(job.id)


@pytest.mark.asyncio
async def test_snapshots_are_immutable_prefixes(orchestrator: BatchOrchestrator, events: List[JobEvent]):
    final = await orchestrator.generate(GenerationSettings(count=30, chunk_size=10))

    snapshots = [event.job for event in _progress_events(events)]
    assert [len(snapshot.items) for snapshot in snapshots] == [10, 20, 30]
    for snapshot in snapshots:
        assert isinstance(snapshot.items, tuple)
        assert final.items[: len(snapshot.items)] == snapshot.items
    with pytest.raises(Exception):
        snapshots[0].status = "completed"  # type: ignore[misc]


@pytest.mark.asyncio
async def test_statistics_invariants(orchestrator: BatchOrchestrator):
    job = await orchestrator.generate(GenerationSettings(kind="nanoid", count=200, chunk_size=50))
    stats = job.statistics

    assert stats.total_generated == 200
    assert stats.valid_count + stats.invalid_count == stats.total_generated
    assert stats.unique_count <= stats.valid_count
    assert stats.collision_rate == stats.duplicate_count / stats.total_generated
    assert sum(stats.length_distribution.values()) == stats.valid_count
    assert stats.length_distribution == {"21": 200}
    assert stats.generation_time_seconds >= 0


@pytest.mark.asyncio
async def test_seeded_jobs_are_reproducible(orchestrator: BatchOrchestrator):
    settings = GenerationSettings(kind="uuid_v4", count=20, chunk_size=10, seed=7)
    first = await orchestrator.generate(settings)
    second = await orchestrator.generate(settings)
    assert [item.value for item in first.items] == [item.value for item in second.items]


@pytest.mark.asyncio
async def test_analysis_toggle(orchestrator: BatchOrchestrator):
    job = await orchestrator.generate(GenerationSettings(count=5, chunk_size=5, enable_analysis=False))
    assert all(item.analysis is None and item.metadata is None for item in job.items)
    assert job.statistics.average_quality == 0.0
    assert job.statistics.quality_distribution == {}


@pytest.mark.asyncio
async def test_rfc_items_carry_version(orchestrator: BatchOrchestrator):
    job = await orchestrator.generate(GenerationSettings(kind="uuid_v5", count=3, chunk_size=3))
    assert {item.version for item in job.items} == {5}
    ulid = await orchestrator.generate(GenerationSettings(kind="ulid", count=3, chunk_size=3))
    assert {item.version for item in ulid.items} == {None}


@pytest.mark.asyncio
async def test_job_list_management(orchestrator: BatchOrchestrator):
    first = orchestrator.create_job(GenerationSettings(count=5, chunk_size=5), name="first")
    second = orchestrator.create_job(GenerationSettings(count=5, chunk_size=5))

    assert [job.id for job in orchestrator.jobs()] == [second.id, first.id]
    assert orchestrator.get(first.id).name == "first"
    assert second.name == "uuid_v4-5"

    orchestrator.remove(first.id)
    with pytest.raises(JobNotFoundError):
        orchestrator.get(first.id)
    with pytest.raises(KeyError):
        orchestrator.remove(first.id)

    orchestrator.clear()
    assert orchestrator.jobs() == []


@pytest.mark.asyncio
async def test_run_revalidates_settings(app_settings: Settings):
    orchestrator = BatchOrchestrator(app_settings=app_settings)
    job = orchestrator.create_job(GenerationSettings(count=50, chunk_size=10))
    orchestrator._settings = app_settings.model_copy(update={"max_count": 10})

    with pytest.raises(SettingsValidationError):
        await orchestrator.run(job.id)
    assert orchestrator.get(job.id).status == "pending"


@pytest.mark.asyncio
async def test_run_batch_refuses_running_loop(app_settings: Settings):
    with pytest.raises(RuntimeError, match="async context"):
        run_batch(GenerationSettings(count=5, chunk_size=5), app_settings=app_settings)


def test_run_batch_from_sync_code(app_settings: Settings):
    received: List[JobEvent] = []
    job = run_batch(
        GenerationSettings(count=12, chunk_size=5),
        name="sync",
        app_settings=app_settings,
        listener=received.append,
    )
    assert job.status == "completed"
    assert job.name == "sync"
    assert len(job.items) == 12
    assert len(_progress_events(received)) == 3
