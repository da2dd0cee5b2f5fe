"""
Analysis service - the submit/status/result/cancel facade
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from auditor.analyzer.prompt_catalog import PromptCatalog
from auditor.cancellation import CancellationToken
from auditor.exceptions import ValidationError
from auditor.jobs.models import Job, JobStatus
from auditor.jobs.runner import JobRunner
from auditor.jobs.state_machine import JobStateMachine
from auditor.validation import validate_job_id, validate_prompt_ids, validate_url

logger = logging.getLogger(__name__)


class AnalysisService:
    """
    Starts one background task per submitted URL.

    Must be used from a single running event loop; submit() returns as soon
    as the pending job is persisted.
    """

    def __init__(
        self,
        state_machine: JobStateMachine,
        catalog: PromptCatalog,
        runner: JobRunner,
    ):
        self.jobs = state_machine
        self.catalog = catalog
        self.runner = runner
        self._tasks: dict[str, asyncio.Task] = {}
        self._tokens: dict[str, CancellationToken] = {}
        self._cleanups: list[Callable[[], Awaitable[None]]] = []

    def add_cleanup(self, cleanup: Callable[[], Awaitable[None]]) -> None:
        """Awaited by shutdown() after all running jobs have stopped"""
        self._cleanups.append(cleanup)

    async def start(self) -> list[Job]:
        """Recover jobs left unfinished by a previous process"""
        return await self.jobs.recover_interrupted()

    async def submit(self, url: str, prompt_ids: list[str] | None = None) -> Job:
        url = validate_url(url)
        prompts = self.catalog.resolve(validate_prompt_ids(prompt_ids))
        if not prompts:
            raise ValidationError("prompts", "No analysis prompts available")

        job = await self.jobs.create(url, [p.id for p in prompts])
        token = CancellationToken(job.id)
        task = asyncio.create_task(
            self.runner.run(job.id, url, prompts, token), name=f"analysis-{job.id}"
        )
        self._tokens[job.id] = token
        self._tasks[job.id] = task
        task.add_done_callback(lambda t, job_id=job.id: self._on_task_done(job_id, t))
        return job

    def _on_task_done(self, job_id: str, task: asyncio.Task) -> None:
        self._tasks.pop(job_id, None)
        self._tokens.pop(job_id, None)
        if task.cancelled():
            logger.warning(f"Task for analysis {job_id} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Task for analysis {job_id} raised: {error}", exc_info=error)

    async def get_status(self, job_id: str) -> dict:
        job = await self.get_result(job_id)
        return job.status_dict()

    async def get_result(self, job_id: str) -> Job:
        return await self.jobs.get(validate_job_id(job_id))

    async def cancel(self, job_id: str) -> Job:
        job_id = validate_job_id(job_id)
        token = self._tokens.get(job_id)
        if token:
            token.cancel()
        return await self.jobs.cancel(job_id)

    async def list_jobs(self, status: str | None = None, limit: int = 20) -> list[Job]:
        if status:
            try:
                status = JobStatus(status)
            except ValueError:
                raise ValidationError("status", f"Unknown status '{status}'") from None
        return await self.jobs.list_jobs(status or None, limit)

    def is_running(self, job_id: str) -> bool:
        return job_id in self._tasks

    async def wait(self, job_id: str, timeout: float | None = None) -> Job:
        """Wait for the background task of job_id, then return the job"""
        job_id = validate_job_id(job_id)
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.wait_for(asyncio.shield(task), timeout)
        return await self.jobs.get(job_id)

    async def shutdown(self) -> None:
        """Cancel running jobs, wait for their tasks, then run cleanups"""
        running = list(self._tasks.items())
        for job_id, _ in running:
            token = self._tokens.get(job_id)
            if token:
                token.cancel()
            await self.jobs.cancel(job_id)
        if running:
            logger.info(f"Waiting for {len(running)} analyses to stop")
            await asyncio.gather(*(task for _, task in running), return_exceptions=True)
        for cleanup in self._cleanups:
            await cleanup()
