"""
Batch orchestrator: chunked execution, lifecycle control and statistics.

Usage (example from an async caller):
    from idbatch.orchestrator import BatchOrchestrator

    orchestrator = BatchOrchestrator()
    orchestrator.subscribe(lambda event: print(event.kind, event.job.progress))
    job = orchestrator.create_job(GenerationSettings(kind="uuid_v4", count=1000, chunk_size=100))
    job = await orchestrator.run(job.id)

Lifecycle: ``pending -> processing -> {paused, completed, failed}``,
``paused -> processing`` (resume) or ``paused -> failed`` (cancel). Pause and
cancel are cooperative: they are honoured only at chunk boundaries, after the
chunk's snapshot has been published and control has been yielded back to the
event loop. Cancellation ends the job as ``failed`` with `CANCELLED_MESSAGE`.

Observers never see the live job: every state change publishes a new frozen
`BatchJob` snapshot.
"""

from __future__ import annotations

import asyncio
import math
import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal, Optional, Sequence

from idbatch.config import Settings, get_settings
from idbatch.domain.models import (
    BatchJob,
    BatchValidation,
    GenerationSettings,
    Identifier,
    Statistics,
    utc_now,
)
from idbatch.domain.validation import validate_settings
from idbatch.errors import InvalidTransitionError, JobNotFoundError, SettingsValidationError
from idbatch.pipeline import IdentifierPipeline, ItemPipeline
from idbatch.utils.logging import get_logger
from idbatch.utils.profiler import profile_block

log = get_logger(__name__)

CANCELLED_MESSAGE = "Batch cancelled by caller"

JobEventKind = Literal["created", "started", "progress", "paused", "resumed", "completed", "failed"]


@dataclass(frozen=True)
class JobEvent:
    """A published job snapshot together with what caused it."""

    kind: JobEventKind
    job: BatchJob


JobListener = Callable[[JobEvent], None]
PipelineFactory = Callable[[GenerationSettings], ItemPipeline]


@dataclass
class _JobRuntime:
    """Mutable execution state behind one job; never exposed to callers."""

    job: BatchJob
    items: List[Identifier] = field(default_factory=list)
    running: bool = False
    pause_requested: bool = False
    cancel_requested: bool = False
    wake: asyncio.Event = field(default_factory=asyncio.Event)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def quality_bucket(score: float) -> str:
    """Decile label for a quality score, e.g. ``87.5 -> "80-89"``."""
    low = int(score // 10) * 10
    return f"{low}-{low + 9}"


def compute_statistics(
    items: Sequence[Identifier], generation_time_seconds: float = 0.0
) -> Statistics:
    """
    Aggregate a job's items into batch statistics.

    Averages and histograms cover valid items only. Items generated without
    analysis contribute 0 to the averages and nothing to the security and
    quality histograms.
    """
    total = len(items)
    valid = [item for item in items if item.is_valid]
    unique_count = len({item.value for item in valid})
    duplicate_count = len(valid) - unique_count

    security_distribution: Counter[str] = Counter()
    quality_distribution: Counter[str] = Counter()
    length_distribution: Counter[str] = Counter()
    for item in valid:
        if item.metadata is not None:
            security_distribution[item.metadata.security_level] += 1
        if item.analysis is not None:
            # compliance (>= 50) and readability (>= 70) keep overall quality at 30 or more
            quality_distribution[quality_bucket(item.analysis.quality.overall_quality)] += 1
        length_distribution[str(len(item.value))] += 1

    return Statistics(
        total_generated=total,
        valid_count=len(valid),
        invalid_count=total - len(valid),
        unique_count=unique_count,
        duplicate_count=duplicate_count,
        average_entropy=_mean([item.metadata.entropy if item.metadata else 0.0 for item in valid]),
        average_quality=_mean(
            [item.analysis.quality.overall_quality if item.analysis else 0.0 for item in valid]
        ),
        average_security=_mean(
            [float(item.analysis.security.security_score) if item.analysis else 0.0 for item in valid]
        ),
        generation_time_seconds=generation_time_seconds,
        collision_rate=duplicate_count / total if total else 0.0,
        security_distribution=dict(security_distribution),
        quality_distribution=dict(quality_distribution),
        length_distribution=dict(length_distribution),
    )


class BatchOrchestrator:
    """
    Tracks batch jobs and drives their execution.

    Parameters
    ----------
    app_settings : Settings | None
        Process-wide defaults (count bound, yield interval, failure policy).
    pipeline_factory : callable
        Builds the per-item pipeline for a job's settings. Defaults to
        `IdentifierPipeline`; other item domains plug in here.
    """

    def __init__(
        self,
        app_settings: Optional[Settings] = None,
        pipeline_factory: PipelineFactory = IdentifierPipeline,
    ) -> None:
        self._settings = app_settings or get_settings()
        self._pipeline_factory = pipeline_factory
        self._jobs: Dict[str, _JobRuntime] = {}
        self._listeners: List[JobListener] = []

    # Observation -----------------------------------------------------------

    def subscribe(self, listener: JobListener) -> Callable[[], None]:
        """Register a listener for job events; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, kind: JobEventKind, job: BatchJob) -> None:
        event = JobEvent(kind=kind, job=job)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001 - a broken observer must not break the job
                log.exception(
                    f"[LISTENER FAILED] {kind} event for job {job.id}",
                    extra={"job_id": job.id, "event": kind},
                )

    def _runtime(self, job_id: str) -> _JobRuntime:
        try:
            return self._jobs[job_id]
        except KeyError:
            raise JobNotFoundError(job_id) from None

    def _replace(self, runtime: _JobRuntime, kind: JobEventKind, **update: object) -> BatchJob:
        runtime.job = runtime.job.model_copy(update=update)
        self._publish(kind, runtime.job)
        return runtime.job

    def get(self, job_id: str) -> BatchJob:
        """Latest snapshot of a job."""
        return self._runtime(job_id).job

    def jobs(self) -> List[BatchJob]:
        """Snapshots of all tracked jobs, newest first."""
        return [runtime.job for runtime in reversed(self._jobs.values())]

    # Job list management -----------------------------------------------------

    def validate(self, settings: GenerationSettings) -> BatchValidation:
        return validate_settings(settings, max_count=self._settings.max_count)

    def create_job(self, settings: GenerationSettings, name: Optional[str] = None) -> BatchJob:
        """
        Validate settings and register a new pending job.

        Raises
        ------
        SettingsValidationError
            If validation reports any error. Warnings are logged only.
        """
        validation = self.validate(settings)
        if not validation.is_valid:
            log.warning(
                "[JOB REJECTED] invalid settings",
                extra={"errors": [error.message for error in validation.errors]},
            )
            raise SettingsValidationError(validation)
        for warning in validation.warnings:
            log.warning(f"[SETTINGS] {warning}", extra={"kind": settings.kind, "count": settings.count})

        job = BatchJob(
            id=uuid.uuid4().hex,
            name=name or f"{settings.kind}-{settings.count}",
            kind=settings.kind,
            count=settings.count,
            settings=settings,
        )
        self._jobs[job.id] = _JobRuntime(job=job)
        log.info(
            f"[JOB CREATED] {job.name}",
            extra={"job_id": job.id, "kind": job.kind, "count": job.count},
        )
        self._publish("created", job)
        return job

    def remove(self, job_id: str) -> None:
        runtime = self._runtime(job_id)
        if runtime.running:
            raise InvalidTransitionError(f"Job '{job_id}' is running; cancel it before removing")
        del self._jobs[job_id]

    def clear(self) -> None:
        """Forget every job that is not currently running."""
        for job_id in [job_id for job_id, runtime in self._jobs.items() if not runtime.running]:
            del self._jobs[job_id]

    # Lifecycle signals -------------------------------------------------------

    def pause(self, job_id: str) -> BatchJob:
        """Ask a processing job to pause at its next chunk boundary."""
        runtime = self._runtime(job_id)
        if runtime.job.status != "processing" or not runtime.running:
            raise InvalidTransitionError(f"Cannot pause job '{job_id}' in state {runtime.job.status}")
        runtime.pause_requested = True
        return runtime.job

    def resume(self, job_id: str) -> BatchJob:
        runtime = self._runtime(job_id)
        pending_pause = runtime.job.status == "processing" and runtime.pause_requested
        if runtime.job.status != "paused" and not pending_pause:
            raise InvalidTransitionError(f"Cannot resume job '{job_id}' in state {runtime.job.status}")
        runtime.pause_requested = False
        runtime.wake.set()
        return runtime.job

    def cancel(self, job_id: str) -> BatchJob:
        """Ask a processing or paused job to stop; it ends as failed with `CANCELLED_MESSAGE`."""
        runtime = self._runtime(job_id)
        if runtime.job.status not in ("processing", "paused"):
            raise InvalidTransitionError(f"Cannot cancel job '{job_id}' in state {runtime.job.status}")
        runtime.cancel_requested = True
        runtime.wake.set()
        return runtime.job

    # Execution ---------------------------------------------------------------

    async def run(self, job_id: str) -> BatchJob:
        """
        Execute a pending job to a terminal state and return the final snapshot.

        Per-item failures are recorded on the item. Any other exception ends the
        job as failed; under the ``strict`` failure policy it is re-raised after
        the failed snapshot is published.

        If the task running the job is cancelled, the job ends as failed with
        `CANCELLED_MESSAGE` and the cancellation propagates.
        """
        runtime = self._runtime(job_id)
        job = runtime.job
        if job.status != "pending" or runtime.running:
            raise InvalidTransitionError(f"Job '{job_id}' is {job.status}; only pending jobs can run")
        validation = self.validate(job.settings)
        if not validation.is_valid:
            raise SettingsValidationError(validation)

        runtime.running = True
        total_chunks = math.ceil(job.count / job.settings.chunk_size)
        started = time.perf_counter()
        log.info(
            f"[JOB START] {job.name}",
            extra={
                "job_id": job.id,
                "kind": job.kind,
                "count": job.count,
                "chunk_size": job.settings.chunk_size,
                "total_chunks": total_chunks,
            },
        )

        try:
            with profile_block(f"job:{job.id}") as profile:
                self._replace(runtime, "started", status="processing", progress=0.0)
                pipeline = self._pipeline_factory(job.settings)
                cancelled = await self._execute(runtime, pipeline, total_chunks)
        except asyncio.CancelledError:
            log.warning(
                f"[JOB CANCELLED] {job.name} task cancelled by host",
                extra={"job_id": job.id, "generated": len(runtime.items)},
            )
            self._finish(runtime, "failed", started, error=CANCELLED_MESSAGE)
            raise
        except Exception as exc:
            log.exception(f"[JOB FAILED] {job.name}", extra={"job_id": job.id})
            self._finish(runtime, "failed", started, error=str(exc) or type(exc).__name__)
            if self._settings.failure_policy == "strict":
                raise
            return runtime.job
        finally:
            runtime.running = False

        if cancelled:
            log.info(
                f"[JOB CANCELLED] {job.name}",
                extra={"job_id": job.id, "generated": len(runtime.items)},
            )
            return self._finish(runtime, "failed", started, error=CANCELLED_MESSAGE)

        log.info(
            f"[JOB COMPLETE] {job.name}",
            extra={"job_id": job.id, "generated": len(runtime.items), **profile.as_log_extra()},
        )
        return self._finish(runtime, "completed", started, progress=1.0)

    async def generate(self, settings: GenerationSettings, name: Optional[str] = None) -> BatchJob:
        """Create a job and run it to completion."""
        job = self.create_job(settings, name=name)
        return await self.run(job.id)

    async def _execute(
        self, runtime: _JobRuntime, pipeline: ItemPipeline, total_chunks: int
    ) -> bool:
        """Run the chunk loop; returns True when the job was cancelled."""
        count = runtime.job.count
        chunk_size = runtime.job.settings.chunk_size

        for chunk_index in range(total_chunks):
            start = chunk_index * chunk_size
            self._build_chunk(runtime, pipeline, start, min(chunk_size, count - start))
            self._replace(
                runtime,
                "progress",
                items=tuple(runtime.items),
                progress=(chunk_index + 1) / total_chunks,
            )
            log.debug(
                f"[CHUNK {chunk_index + 1}/{total_chunks}] {runtime.job.name}",
                extra={"job_id": runtime.job.id, "generated": len(runtime.items)},
            )

            await asyncio.sleep(self._settings.yield_seconds)

            if chunk_index + 1 < total_chunks and await self._checkpoint(runtime):
                return True
        return False

    def _build_chunk(
        self, runtime: _JobRuntime, pipeline: ItemPipeline, start: int, size: int
    ) -> None:
        for index in range(start, start + size):
            try:
                item = pipeline.produce(index)
            except Exception as exc:  # noqa: BLE001 - item-level failure is recorded, not raised
                log.warning(
                    f"[ITEM FAILED] index={index}",
                    extra={"job_id": runtime.job.id, "index": index, "error": str(exc)},
                )
                item = pipeline.reject(index, exc)
            runtime.items.append(item)

    async def _checkpoint(self, runtime: _JobRuntime) -> bool:
        """Honour pending pause/cancel signals; returns True when the job must stop."""
        if runtime.cancel_requested:
            return True
        if not runtime.pause_requested:
            return False

        self._replace(runtime, "paused", status="paused")
        log.info(f"[JOB PAUSED] {runtime.job.name}", extra={"job_id": runtime.job.id})
        while runtime.pause_requested and not runtime.cancel_requested:
            runtime.wake.clear()
            await runtime.wake.wait()
        if runtime.cancel_requested:
            return True

        self._replace(runtime, "resumed", status="processing")
        log.info(f"[JOB RESUMED] {runtime.job.name}", extra={"job_id": runtime.job.id})
        return False

    def _finish(
        self,
        runtime: _JobRuntime,
        status: Literal["completed", "failed"],
        started: float,
        error: Optional[str] = None,
        progress: Optional[float] = None,
    ) -> BatchJob:
        update: Dict[str, object] = {
            "status": status,
            "items": tuple(runtime.items),
            "statistics": compute_statistics(runtime.items, time.perf_counter() - started),
            "error": error,
            "completed_at": utc_now(),
        }
        if progress is not None:
            update["progress"] = progress
        return self._replace(runtime, status, **update)


def run_batch(
    settings: GenerationSettings,
    name: Optional[str] = None,
    app_settings: Optional[Settings] = None,
    listener: Optional[JobListener] = None,
) -> BatchJob:
    """
    Synchronous entry point: create and run one job on a fresh event loop.

    Raises
    ------
    RuntimeError
        If called from inside a running event loop; use `BatchOrchestrator.generate`.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        raise RuntimeError("run_batch() cannot be called from an async context; await generate()")

    orchestrator = BatchOrchestrator(app_settings=app_settings)
    if listener is not None:
        orchestrator.subscribe(listener)
    return asyncio.run(orchestrator.generate(settings, name=name))


__all__ = [
    "CANCELLED_MESSAGE",
    "JobEvent",
    "JobListener",
    "BatchOrchestrator",
    "compute_statistics",
    "quality_bucket",
    "run_batch",
]
