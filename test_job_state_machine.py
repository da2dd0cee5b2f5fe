"""Tests for the job lifecycle and the job stores"""

import json

import pytest

from auditor.analyzer.models import AnalysisResult, CategoryScores, LanguageInfo
from auditor.exceptions import InvalidTransition, JobNotFound, PersistenceError
from auditor.jobs.models import Job, JobStatus, can_transition
from auditor.jobs.state_machine import INTERRUPTED_ERROR, JobStateMachine
from auditor.jobs.store import InMemoryJobStore, JsonFileJobStore
from conftest import make_snapshot


def make_result() -> AnalysisResult:
    return AnalysisResult(
        snapshot=make_snapshot(),
        outcomes=[],
        scores=CategoryScores(technical=80, overall=80, measured=["technical"]),
        summary="Looks fine.",
        recommendations=[],
        language=LanguageInfo(),
        seo_validation={},
        priority_matrix=[],
        analyzed_at="2026-01-01T00:00:00",
    )


async def advance_to_analyzing(jobs: JobStateMachine, job_id: str) -> None:
    await jobs.transition(job_id, JobStatus.CRAWLING, 20, "Crawling page")
    await jobs.transition(job_id, JobStatus.ANALYZING, 50, "Running analysis prompts")


class TestTransitionGraph:
    def test_forward_moves(self):
        assert can_transition(JobStatus.PENDING, JobStatus.CRAWLING)
        assert can_transition(JobStatus.CRAWLING, JobStatus.ANALYZING)
        assert can_transition(JobStatus.ANALYZING, JobStatus.COMPLETED)

    def test_skipping_and_backwards_rejected(self):
        assert not can_transition(JobStatus.PENDING, JobStatus.COMPLETED)
        assert not can_transition(JobStatus.ANALYZING, JobStatus.CRAWLING)

    def test_failed_and_cancelled_from_any_running_status(self):
        for status in (JobStatus.PENDING, JobStatus.CRAWLING, JobStatus.ANALYZING):
            assert can_transition(status, JobStatus.FAILED)
            assert can_transition(status, JobStatus.CANCELLED)

    def test_terminal_statuses_are_final(self):
        for status in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED):
            assert status.is_terminal
            assert not can_transition(status, JobStatus.FAILED)


class TestJobStateMachine:
    @pytest.mark.asyncio
    async def test_create_persists_pending_job(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com", ["seo-technical-analysis"])

        stored = await jobs.get(job.id)
        assert stored.status == JobStatus.PENDING
        assert stored.progress == 0
        assert stored.prompt_ids == ["seo-technical-analysis"]
        assert stored.started_at is None

    @pytest.mark.asyncio
    async def test_unknown_job(self):
        jobs = JobStateMachine(InMemoryJobStore())
        with pytest.raises(JobNotFound):
            await jobs.get("8a6f2e36-6b4e-4a34-9d67-3c1d0f6f0a11")

    @pytest.mark.asyncio
    async def test_happy_path(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")

        await advance_to_analyzing(jobs, job.id)
        done = await jobs.complete(job.id, make_result())

        assert done.status == JobStatus.COMPLETED
        assert done.progress == 100
        assert done.completed_at is not None
        assert done.started_at is not None
        stored = await jobs.get(job.id)
        assert stored.result.scores.overall == 80
        assert stored.result.snapshot.title == make_snapshot().title

    @pytest.mark.asyncio
    async def test_progress_never_decreases(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")
        await advance_to_analyzing(jobs, job.id)

        updated = await jobs.transition(job.id, JobStatus.ANALYZING, 30, "late update")
        assert updated.progress == 50
        assert updated.current_step == "late update"

    @pytest.mark.asyncio
    async def test_backwards_move_rejected(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")
        await advance_to_analyzing(jobs, job.id)

        with pytest.raises(InvalidTransition):
            await jobs.transition(job.id, JobStatus.CRAWLING, 60)

    @pytest.mark.asyncio
    async def test_terminal_target_rejected_by_transition(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")
        with pytest.raises(InvalidTransition):
            await jobs.transition(job.id, JobStatus.COMPLETED, 100)

    @pytest.mark.asyncio
    async def test_complete_requires_analyzing(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")
        with pytest.raises(InvalidTransition):
            await jobs.complete(job.id, make_result())

    @pytest.mark.asyncio
    async def test_writes_to_terminal_job_are_noops(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")
        cancelled = await jobs.cancel(job.id)

        assert await jobs.transition(job.id, JobStatus.CRAWLING, 20) is None
        assert await jobs.fail(job.id, "too late") is None
        assert await jobs.complete(job.id, make_result()) is None

        stored = await jobs.get(job.id)
        assert stored.status == JobStatus.CANCELLED
        assert stored.updated_at == cancelled.updated_at
        assert stored.error is None

    @pytest.mark.asyncio
    async def test_cancel_terminal_job_returns_it_unchanged(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")
        failed = await jobs.fail(job.id, "crawl failed: boom")

        again = await jobs.cancel(job.id)
        assert again.status == JobStatus.FAILED
        assert again.error == "crawl failed: boom"
        assert again.updated_at == failed.updated_at

    @pytest.mark.asyncio
    async def test_fail_without_message(self):
        jobs = JobStateMachine(InMemoryJobStore())
        job = await jobs.create("https://example.com")
        failed = await jobs.fail(job.id, "")
        assert failed.error == "Unknown error"

    @pytest.mark.asyncio
    async def test_listeners_see_every_write(self):
        jobs = JobStateMachine(InMemoryJobStore())
        seen = []
        jobs.add_listener(lambda job: seen.append(job.status))

        def broken(job):
            raise RuntimeError("listener bug")

        jobs.add_listener(broken)
        job = await jobs.create("https://example.com")
        await advance_to_analyzing(jobs, job.id)
        await jobs.complete(job.id, make_result())

        assert seen == [
            JobStatus.PENDING,
            JobStatus.CRAWLING,
            JobStatus.ANALYZING,
            JobStatus.COMPLETED,
        ]

    @pytest.mark.asyncio
    async def test_recover_interrupted(self):
        jobs = JobStateMachine(InMemoryJobStore())
        pending = await jobs.create("https://example.com/a")
        running = await jobs.create("https://example.com/b")
        await jobs.transition(running.id, JobStatus.CRAWLING, 20)
        finished = await jobs.create("https://example.com/c")
        await jobs.cancel(finished.id)

        recovered = await jobs.recover_interrupted()

        assert {job.id for job in recovered} == {pending.id, running.id}
        for job_id in (pending.id, running.id):
            job = await jobs.get(job_id)
            assert job.status == JobStatus.FAILED
            assert job.error == INTERRUPTED_ERROR
        assert (await jobs.get(finished.id)).status == JobStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_list_jobs_by_status(self):
        jobs = JobStateMachine(InMemoryJobStore())
        pending = await jobs.create("https://example.com/a")
        cancelled = await jobs.create("https://example.com/b")
        await jobs.cancel(cancelled.id)

        assert [j.id for j in await jobs.list_jobs(JobStatus.PENDING)] == [pending.id]
        assert [j.id for j in await jobs.list_jobs(JobStatus.CANCELLED)] == [cancelled.id]
        assert {j.id for j in await jobs.list_jobs()} == {pending.id, cancelled.id}
        assert len(await jobs.list_jobs(limit=1)) == 1

    def test_return_annotations_use_builtin_list(self):
        assert JobStateMachine.recover_interrupted.__annotations__["return"] == list[Job]
        assert JobStateMachine.list_jobs.__annotations__["return"] == list[Job]


class TestInMemoryJobStore:
    @pytest.mark.asyncio
    async def test_returned_jobs_are_copies(self):
        store = InMemoryJobStore()
        jobs = JobStateMachine(store)
        job = await jobs.create("https://example.com")

        copy = await store.get(job.id)
        copy.prompt_ids.append("mutated")
        assert (await store.get(job.id)).prompt_ids == []

    @pytest.mark.asyncio
    async def test_list_filters_and_orders_newest_first(self):
        store = InMemoryJobStore()
        for i, status in enumerate(["pending", "completed", "pending"]):
            await store.upsert(Job(
                id=f"job-{i}",
                url="https://example.com",
                status=JobStatus(status),
                created_at=f"2026-01-0{i + 1}T00:00:00",
                updated_at=f"2026-01-0{i + 1}T00:00:00",
            ))

        assert [j.id for j in await store.list()] == ["job-2", "job-1", "job-0"]
        assert [j.id for j in await store.list(JobStatus.PENDING)] == ["job-2", "job-0"]
        assert [j.id for j in await store.list(limit=1)] == ["job-2"]

    @pytest.mark.asyncio
    async def test_trim_drops_oldest_terminal_jobs_only(self):
        store = InMemoryJobStore(max_jobs=2)
        statuses = ["pending", "completed", "failed"]
        for i, status in enumerate(statuses):
            await store.upsert(Job(
                id=f"job-{i}",
                url="https://example.com",
                status=JobStatus(status),
                created_at=f"2026-01-0{i + 1}T00:00:00",
                updated_at=f"2026-01-0{i + 1}T00:00:00",
            ))

        assert await store.get("job-0") is not None
        assert await store.get("job-1") is None
        assert await store.get("job-2") is not None


class TestJsonFileJobStore:
    @pytest.mark.asyncio
    async def test_survives_restart(self, tmp_path):
        path = tmp_path / "data" / "analyses.json"
        jobs = JobStateMachine(JsonFileJobStore(path))
        job = await jobs.create("https://example.com")
        await advance_to_analyzing(jobs, job.id)
        await jobs.complete(job.id, make_result())

        reopened = JobStateMachine(JsonFileJobStore(path))
        stored = await reopened.get(job.id)
        assert stored.status == JobStatus.COMPLETED
        assert stored.result.summary == "Looks fine."
        assert stored.result.snapshot.images[1].has_alt is False

        data = json.loads(path.read_text(encoding="utf-8"))
        assert list(data["jobs"]) == [job.id]
        assert not path.with_name("analyses.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileJobStore(tmp_path / "nothing.json")
        assert await store.list() == []
        assert await store.get("anything") is None

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "analyses.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileJobStore(path)

        with pytest.raises(PersistenceError):
            await store.list()

    @pytest.mark.asyncio
    async def test_unexpected_layout_raises(self, tmp_path):
        path = tmp_path / "analyses.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(PersistenceError):
            await JsonFileJobStore(path).get("anything")
