"""
Job state machine - owns every write to a job record
"""

import asyncio
import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from auditor.analyzer.models import AnalysisResult
from auditor.exceptions import InvalidTransition, JobNotFound
from auditor.jobs.models import Job, JobStatus, can_transition
from auditor.jobs.store import JobStore

logger = logging.getLogger(__name__)

INTERRUPTED_ERROR = "interrupted: service restarted before the analysis finished"

JobListener = Callable[[Job], None]


class JobStateMachine:
    """
    pending -> crawling -> analyzing -> completed, with failed and cancelled
    reachable from any non-terminal status.

    Writes to a terminal job are no-ops that return None and leave the record
    (including updated_at) untouched. Every accepted write is a full upsert.
    """

    def __init__(self, store: JobStore):
        self.store = store
        self._lock = asyncio.Lock()
        self._listeners: list[JobListener] = []

    def add_listener(self, listener: JobListener) -> None:
        """Called with the new Job after every persisted write"""
        self._listeners.append(listener)

    def remove_listener(self, listener: JobListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, job: Job) -> None:
        for listener in list(self._listeners):
            try:
                listener(job)
            except Exception as e:
                logger.warning(f"Job listener {listener!r} failed: {e}", exc_info=True)

    async def _save(self, job: Job) -> Job:
        await self.store.upsert(job)
        self._notify(job)
        return job

    async def _load(self, job_id: str) -> Job:
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    async def create(self, url: str, prompt_ids: list[str] | None = None) -> Job:
        now = datetime.now().isoformat()
        job = Job(
            id=str(uuid.uuid4()),
            url=url,
            status=JobStatus.PENDING,
            progress=0,
            current_step="Queued",
            prompt_ids=list(prompt_ids or []),
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            await self._save(job)
        logger.info(f"Created analysis {job.id} for {url}")
        return job

    async def get(self, job_id: str) -> Job:
        return await self._load(job_id)

    async def list_jobs(self, status: JobStatus | None = None, limit: int | None = None) -> list[Job]:
        return await self.store.list(status, limit)

    async def transition(
        self,
        job_id: str,
        status: JobStatus,
        progress: int | None = None,
        step: str | None = None,
    ) -> Job | None:
        """
        Move a running job forward or update its progress.

        Returns None without writing if the job is already terminal.
        Raises InvalidTransition for a backwards move or a terminal target;
        use complete(), fail() or cancel() for those.
        """
        status = JobStatus(status)
        if status.is_terminal:
            raise InvalidTransition(job_id, "<any>", status.value)

        async with self._lock:
            job = await self._load(job_id)
            if job.is_terminal:
                logger.debug(f"Ignoring {status.value} update for {job.status.value} job {job_id}")
                return None
            if not can_transition(job.status, status):
                raise InvalidTransition(job_id, job.status.value, status.value)

            now = datetime.now().isoformat()
            changes = {"status": status, "updated_at": now}
            if progress is not None:
                changes["progress"] = max(job.progress, min(100, int(progress)))
            if step is not None:
                changes["current_step"] = step
            if job.started_at is None and status != JobStatus.PENDING:
                changes["started_at"] = now
            return await self._save(job.evolve(**changes))

    async def _finish(self, job_id: str, status: JobStatus, **changes) -> Job | None:
        async with self._lock:
            job = await self._load(job_id)
            if job.is_terminal:
                logger.debug(f"Job {job_id} already {job.status.value}, not marking {status.value}")
                return None
            if not can_transition(job.status, status):
                raise InvalidTransition(job_id, job.status.value, status.value)
            now = datetime.now().isoformat()
            job = await self._save(
                job.evolve(status=status, updated_at=now, completed_at=now, **changes)
            )
        logger.info(f"Analysis {job_id} {status.value}")
        return job

    async def complete(self, job_id: str, result: AnalysisResult) -> Job | None:
        return await self._finish(
            job_id,
            JobStatus.COMPLETED,
            result=result,
            error=None,
            progress=100,
            current_step="Analysis complete",
        )

    async def fail(self, job_id: str, error: str) -> Job | None:
        return await self._finish(
            job_id,
            JobStatus.FAILED,
            result=None,
            error=error or "Unknown error",
            current_step="Analysis failed",
        )

    async def cancel(self, job_id: str) -> Job:
        """Cancel a running job; a terminal job is returned unchanged"""
        job = await self._finish(
            job_id,
            JobStatus.CANCELLED,
            result=None,
            error=None,
            current_step="Cancelled",
        )
        return job if job is not None else await self._load(job_id)

    async def recover_interrupted(self) -> list[Job]:
        """Fail every job a previous process left in a non-terminal status"""
        recovered = []
        for status in (JobStatus.PENDING, JobStatus.CRAWLING, JobStatus.ANALYZING):
            for job in await self.store.list(status):
                failed = await self.fail(job.id, INTERRUPTED_ERROR)
                if failed is not None:
                    recovered.append(failed)
        if recovered:
            logger.warning(f"Marked {len(recovered)} interrupted analyses as failed")
        return recovered
