"""
Job runner - drives one job from crawl to completed/failed
"""

import logging
from collections.abc import Callable

from auditor.analyzer.models import PromptSpec
from auditor.analyzer.orchestrator import AnalysisOrchestrator
from auditor.cancellation import CancellationToken
from auditor.exceptions import JobCancelled, NavigationError, RenderError
from auditor.extractor.page_extractor import PageExtractor
from auditor.jobs.models import JobStatus
from auditor.jobs.state_machine import JobStateMachine

logger = logging.getLogger(__name__)

PROGRESS_CRAWLING = 20
PROGRESS_CRAWLED = 40
PROGRESS_ANALYZING = 50
PROGRESS_ANALYZED = 90


class JobRunner:
    """
    Runs the pipeline for one job at a time per call.

    Each run gets its own extractor from extractor_factory and closes it
    before analysis starts, whatever the crawl outcome.
    """

    def __init__(
        self,
        state_machine: JobStateMachine,
        orchestrator: AnalysisOrchestrator,
        extractor_factory: Callable[[], PageExtractor],
        extract_options: dict | None = None,
    ):
        self.jobs = state_machine
        self.orchestrator = orchestrator
        self.extractor_factory = extractor_factory
        self.extract_options = extract_options

    async def run(
        self,
        job_id: str,
        url: str,
        prompts: list[PromptSpec],
        cancel_token: CancellationToken | None = None,
    ) -> None:
        token = cancel_token or CancellationToken(job_id)
        try:
            await self._run(job_id, url, prompts, token)
        except JobCancelled:
            logger.info(f"Analysis {job_id} stopped after cancellation")
        except Exception as e:
            logger.error(f"Analysis {job_id} crashed: {e}", exc_info=True)
            await self.jobs.fail(job_id, f"{type(e).__name__}: {e}")

    async def _advance(self, job_id: str, status: JobStatus, progress: int, step: str) -> None:
        """A None from the state machine means someone else ended the job"""
        if await self.jobs.transition(job_id, status, progress, step) is None:
            raise JobCancelled(job_id)

    async def _run(
        self, job_id: str, url: str, prompts: list[PromptSpec], token: CancellationToken
    ) -> None:
        token.raise_if_cancelled()
        await self._advance(job_id, JobStatus.CRAWLING, PROGRESS_CRAWLING, "Crawling page")

        extractor = self.extractor_factory()
        try:
            snapshot = await extractor.extract(url, self.extract_options, token)
        except (NavigationError, RenderError) as e:
            logger.warning(f"Crawl failed for analysis {job_id}: {e}")
            await self.jobs.fail(job_id, f"crawl failed: {e}")
            return
        finally:
            await extractor.close()

        token.raise_if_cancelled()
        await self._advance(job_id, JobStatus.CRAWLING, PROGRESS_CRAWLED, "Page crawled")
        await self._advance(
            job_id, JobStatus.ANALYZING, PROGRESS_ANALYZING, "Running analysis prompts"
        )

        async def on_progress(done: int, total: int) -> None:
            span = PROGRESS_ANALYZED - PROGRESS_ANALYZING
            progress = PROGRESS_ANALYZING + (span * done // total if total else span)
            await self._advance(
                job_id, JobStatus.ANALYZING, progress, f"Completed {done}/{total} prompts"
            )

        result = await self.orchestrator.analyze(snapshot, prompts, token, on_progress)

        token.raise_if_cancelled()
        await self.jobs.complete(job_id, result)
